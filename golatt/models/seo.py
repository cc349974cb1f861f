from pydantic import BaseModel


class SeoData(BaseModel):
    """Social-preview metadata used by the Open Graph and Twitter tags."""

    title: str = ""
    """Title of the page. Always replaced by the rendered title when site
    defaults are configured."""
    url: str = ""
    image: str = ""
    description: str = ""
    domain: str = ""
    """Domain of the website. Always replaced by the site defaults."""
