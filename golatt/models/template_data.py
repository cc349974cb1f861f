from typing import Any

from pydantic import BaseModel, Field

from golatt.models.seo import SeoData

STATIC_PREFIX = "/static/"
ASSETS_PREFIX = "/assets/"


def static_path(path: str) -> str:
    """Return the public URL of a static file (image, font)."""
    return STATIC_PREFIX + path


def asset_path(path: str) -> str:
    """Return the public URL of an asset (js, css)."""
    return ASSETS_PREFIX + path


class TemplateData(BaseModel):
    """Payload handed to the template engine for a single render."""

    title: str
    seo: SeoData = Field(default_factory=SeoData)
    data: Any = None

    def get_static_path(self, path: str) -> str:
        return static_path(path)

    def get_assets_path(self, path: str) -> str:
        return asset_path(path)
