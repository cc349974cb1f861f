import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, Response
from slowapi import Limiter

from golatt.models.seo import SeoData
from golatt.models.template_data import TemplateData, static_path
from golatt.services.renderer import Renderer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageBinding:
    """A named page bound to a route.

    ``name`` selects the page template (see
    :meth:`~golatt.services.template_store.TemplateStore.resolve_path`) and
    ``url`` the route; when ``url`` is empty the page is served at
    ``"/" + name``.  ``image`` is a path under the static prefix.
    """

    name: str
    title: str
    data: Any = None
    image: str = ""
    description: str = ""
    url: str = ""

    @property
    def route(self) -> str:
        return self.url or "/" + self.name

    def handle(self, renderer: Renderer) -> Callable[[Request], Response]:
        """Return the endpoint rendering this page for every request.

        The endpoint is synchronous so Starlette runs it in its threadpool;
        template loading and rendering never block the event loop.
        """
        route = self.route

        def endpoint(request: Request) -> Response:
            seo = SeoData(url=route, description=self.description)
            if self.image:
                seo.image = static_path(self.image)
            return renderer.render(
                self.name,
                TemplateData(title=self.title, seo=seo, data=self.data),
            )

        # slowapi keys its limits by endpoint name; one page may serve several routes.
        endpoint.__name__ = f"page_{self.name}_{route}"
        return endpoint

    def register(
        self,
        router: APIRouter,
        renderer: Renderer,
        limiter: Optional[Limiter] = None,
        limit: Optional[str] = None,
    ) -> None:
        """Add a GET route serving this page to *router*.

        When both *limiter* and *limit* are given the route is rate limited
        with slowapi.
        """
        endpoint = self.handle(renderer)
        if limiter is not None and limit:
            endpoint = limiter.limit(limit)(endpoint)

        router.add_api_route(
            self.route,
            endpoint,
            methods=["GET"],
            response_class=HTMLResponse,
            name=self.name,
            include_in_schema=False,
        )
        logger.info("Page registered", extra={"page": self.name, "route": self.route})


def simple_page(name: str, title: str) -> PageBinding:
    """Build a binding carrying only a name and a title."""
    return PageBinding(name=name, title=title)
