import logging

from fastapi.responses import HTMLResponse, Response

from golatt.config import GolattConfig
from golatt.models.template_data import TemplateData
from golatt.services.template_store import TemplateStore

logger = logging.getLogger(__name__)


def merge_data(data: TemplateData, config: GolattConfig) -> None:
    """Format the title and fill *data.seo* from the site-wide defaults.

    Without defaults only the title is formatted.  With defaults the domain
    and SEO title are always overwritten, while the image and description
    are taken from the defaults only when the page left them empty.  The
    URL is never touched.
    """
    data.title = config.format_title(data.title)
    defaults = config.default_seo_data
    if defaults is None:
        return

    seo = data.seo
    seo.domain = defaults.domain
    seo.title = data.title
    if not seo.image:
        seo.image = defaults.image
    if not seo.description:
        seo.description = defaults.description


class Renderer:
    """Render pages through the shared template set."""

    def __init__(self, store: TemplateStore, config: GolattConfig) -> None:
        self.store = store
        self.config = config

    def render(self, name: str, data: TemplateData) -> Response:
        """Render page *name* with *data* into an HTML response.

        A failure while executing the templates answers 500 and is logged.
        A page template that cannot be loaded raises
        :class:`~golatt.services.template_store.TemplateConfigError`.
        """
        merge_data(data, self.config)
        templates = self.store.compile()
        page = templates.page(name)

        try:
            section = templates.section(self.config.initial_section)
            body = section.render(
                title=data.title,
                seo=data.seo,
                data=data.data,
                template_data=data,
                page=page,
            )
        except Exception as exc:
            logger.error(
                "Error while rendering page %s: %s",
                name,
                exc,
                extra={"page": name, "section": self.config.initial_section},
            )
            return Response(status_code=500)

        return HTMLResponse(body)
