"""Configuration consumed by the template pipeline and route registration.

A :class:`GolattConfig` is built once while the application is being set up
and is then shared read-only by every in-flight render.  It is frozen so
that nothing can reassign a field once requests are being served.
"""

from typing import Any, Callable, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from golatt.models.seo import SeoData


def _identity(title: str) -> str:
    return title


class GolattConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    page_directory: str = Field(
        default="page",
        min_length=1,
        description="Folder holding the page templates.",
    )
    template_extension: str = Field(
        default="html",
        min_length=1,
        description="Extension shared by every template file, without the dot.",
    )
    initial_section: str = Field(
        default="base",
        min_length=1,
        description=(
            "Shared template executed to produce the document. It must hold "
            "the basic HTML5 structure. Matched against the full path or the "
            "file stem of each shared template."
        ),
    )
    templates: Tuple[str, ...] = Field(
        default=(),
        description="Shared templates (layout, navigation) parsed for every page.",
    )
    format_title: Callable[[str], str] = Field(
        default=_identity,
        description="Transform applied to every page title before rendering.",
    )
    default_seo_data: Optional[SeoData] = Field(
        default=None,
        description="Site-wide SEO fallbacks. None disables SEO merging.",
    )
    template_funcs: Dict[str, Callable[..., Any]] = Field(
        default_factory=dict,
        description="Extra helper functions exposed to every template.",
    )
    not_found_handler: Optional[Callable[..., Any]] = Field(
        default=None,
        description="Exception handler answering 404s; Starlette's default when unset.",
    )
    rate_limit: Optional[str] = Field(
        default=None,
        description='slowapi limit applied to every page route, e.g. "60/minute".',
        examples=["60/minute", "5/second"],
    )
