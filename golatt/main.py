"""Golatt: named HTML pages served by FastAPI and rendered with Jinja2.

Typical use::

    from jinja2 import FileSystemLoader

    from golatt.log import configure_logging

    configure_logging("INFO")
    site = Golatt(
        FileSystemLoader("templates"),
        GolattConfig(
            templates=("base.html", "components/seo.html"),
            default_seo_data=SeoData(domain="example.org", image="logo.png"),
        ),
    )
    site.page("home", "Home", url="/", description="Welcome!")
    site.handle_simple_template("about", "About")
    site.preload()
    app = site.build_app(title="Example")

``base.html`` is the initial section; it pulls in the page template with
``{% include page %}``.

Golatt never configures logging itself.  Applications call
:func:`golatt.log.configure_logging` once at startup to get one JSON object
per log line on stderr.
"""

import logging
from typing import Any, List, Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import PlainTextResponse, Response
from jinja2 import BaseLoader
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from golatt.config import GolattConfig
from golatt.models.template_data import TemplateData
from golatt.routers.pages import PageBinding, simple_page
from golatt.services.renderer import Renderer
from golatt.services.template_store import TemplateConfigError, TemplateStore

logger = logging.getLogger(__name__)


class Golatt:
    """Register pages on an :class:`~fastapi.APIRouter` and render them.

    *files* is the read-only template tree; *config* is shared by every
    render and must not change once requests are served.
    """

    def __init__(self, files: BaseLoader, config: Optional[GolattConfig] = None) -> None:
        self.files = files
        self.config = config or GolattConfig()
        self.store = TemplateStore(files, self.config)
        self.renderer = Renderer(self.store, self.config)
        self.router = APIRouter()
        self.limiter = Limiter(key_func=get_remote_address)
        self.pages: List[PageBinding] = []

    def add_page(self, binding: PageBinding) -> PageBinding:
        binding.register(
            self.router,
            self.renderer,
            limiter=self.limiter,
            limit=self.config.rate_limit,
        )
        self.pages.append(binding)
        return binding

    def page(
        self,
        name: str,
        title: str,
        data: Any = None,
        image: str = "",
        description: str = "",
        url: str = "",
    ) -> PageBinding:
        """Create a page binding and serve it at *url* (``/<name>`` by default)."""
        return self.add_page(
            PageBinding(
                name=name,
                title=title,
                data=data,
                image=image,
                description=description,
                url=url,
            )
        )

    def handle_simple_template(self, name: str, title: str) -> PageBinding:
        """Serve page *name* at ``/<name>`` with only a title."""
        return self.add_page(simple_page(name, title))

    def render(self, name: str, data: TemplateData) -> Response:
        """Render page *name*; for endpoints registered outside :meth:`page`."""
        return self.renderer.render(name, data)

    def preload(self) -> None:
        """Compile the shared templates and every registered page.

        Call it before serving so that a missing or broken template stops
        the deployment instead of failing its first request.

        Raises:
            TemplateConfigError: if any template cannot be loaded.
        """
        templates = self.store.compile()
        for binding in self.pages:
            templates.page(binding.name)
        logger.info("Page templates preloaded", extra={"pages": len(self.pages)})

    def build_app(self, **kwargs: Any) -> FastAPI:
        """Return a FastAPI application serving every registered page.

        Keyword arguments are passed to :class:`~fastapi.FastAPI`.
        """
        app = FastAPI(**kwargs)

        # Rate-limiting state
        app.state.limiter = self.limiter
        app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
        app.add_exception_handler(TemplateConfigError, template_config_error_handler)
        app.add_exception_handler(Exception, generic_exception_handler)
        if self.config.not_found_handler is not None:
            app.add_exception_handler(404, self.config.not_found_handler)

        app.include_router(self.router)
        return app


async def template_config_error_handler(request: Request, exc: TemplateConfigError) -> Response:
    logger.error("Template configuration error for %s: %s", request.url.path, exc)
    return PlainTextResponse("Internal Server Error", status_code=500)


async def generic_exception_handler(request: Request, exc: Exception) -> Response:
    logger.exception("Unhandled exception for %s", request.url)
    return PlainTextResponse("Internal Server Error", status_code=500)
