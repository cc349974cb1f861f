"""Template resolution and compilation.

:class:`TemplateStore` maps page names to template paths and builds the
shared template set every page is rendered through.  The shared set is a
Jinja2 :class:`~jinja2.Environment` in which all configured shared templates
have been parsed; page templates are parsed into the same environment on
demand.

Configuration mistakes (no shared template, a missing file, a syntax
error) surface as :class:`TemplateConfigError`.
"""

import logging
import posixpath
import threading
from typing import Callable, Dict, List, Optional

from jinja2 import (
    BaseLoader,
    Environment,
    Template,
    TemplateError,
    TemplateNotFound,
    select_autoescape,
)

from golatt.config import GolattConfig
from golatt.models.template_data import asset_path, static_path

logger = logging.getLogger(__name__)


class TemplateConfigError(RuntimeError):
    """A shared or page template cannot be loaded."""


class SubtreeLoader(BaseLoader):
    """Expose *folder* of another loader as the root of the template tree.

    Useful when templates are shipped inside a larger tree, e.g.
    ``SubtreeLoader("templates", PackageLoader("mysite", "."))``.
    """

    def __init__(self, folder: str, loader: BaseLoader) -> None:
        self.folder = folder.strip("/")
        self.loader = loader

    def get_source(self, environment, template):
        return self.loader.get_source(environment, f"{self.folder}/{template}")

    def list_templates(self) -> List[str]:
        prefix = self.folder + "/"
        return [
            name[len(prefix):]
            for name in self.loader.list_templates()
            if name.startswith(prefix)
        ]


class TemplateSet:
    """Shared templates parsed into one environment, ready to execute."""

    def __init__(
        self,
        environment: Environment,
        shared: Dict[str, Template],
        resolve_path: Callable[[str], str],
    ) -> None:
        self.environment = environment
        self._shared = shared
        self._resolve_path = resolve_path

    def section(self, name: str) -> Template:
        """Return the shared template addressed by its path or file stem."""
        try:
            return self._shared[name]
        except KeyError:
            raise TemplateNotFound(name) from None

    def page(self, name: str) -> Template:
        """Parse the template of page *name* into the shared environment."""
        path = self._resolve_path(name)
        try:
            return self.environment.get_template(path)
        except TemplateError as exc:
            raise TemplateConfigError(
                f"Cannot load template {path!r} of page {name!r}: {exc}"
            ) from exc


class TemplateStore:
    """Resolve page templates and build the shared template set.

    The set is built once, on first use, and kept for the lifetime of the
    store.  Concurrent first uses are serialised by a lock.
    """

    def __init__(self, loader: BaseLoader, config: GolattConfig) -> None:
        self.loader = loader
        self.config = config
        self._lock = threading.Lock()
        self._compiled: Optional[TemplateSet] = None

    def resolve_path(self, name: str) -> str:
        """Return ``<page_directory>/<name>.<template_extension>``."""
        return f"{self.config.page_directory}/{name}.{self.config.template_extension}"

    def compile(self) -> TemplateSet:
        """Return the shared template set, building it on first call.

        Raises:
            TemplateConfigError: if no shared template is configured or one
                of them cannot be parsed.
        """
        compiled = self._compiled
        if compiled is None:
            with self._lock:
                if self._compiled is None:
                    self._compiled = self._build()
                compiled = self._compiled
        return compiled

    def _build(self) -> TemplateSet:
        if not self.config.templates:
            raise TemplateConfigError(
                "No shared template configured. Set GolattConfig.templates."
            )

        environment = Environment(
            loader=self.loader,
            autoescape=select_autoescape(["html", "htm", "xml", self.config.template_extension]),
        )
        environment.globals["static_path"] = static_path
        environment.globals["asset_path"] = asset_path
        environment.globals.update(self.config.template_funcs)

        shared: Dict[str, Template] = {}
        for path in self.config.templates:
            try:
                template = environment.get_template(path)
            except TemplateError as exc:
                raise TemplateConfigError(
                    f"Cannot parse shared template {path!r}: {exc}"
                ) from exc
            stem = posixpath.splitext(posixpath.basename(path))[0]
            taken = shared.get(stem)
            if taken is not None and taken is not template:
                raise TemplateConfigError(
                    f"Shared templates {taken.name!r} and {path!r} share the name {stem!r}."
                )
            shared[stem] = template
            shared[path] = template

        logger.info(
            "Shared templates compiled",
            extra={"templates": list(self.config.templates)},
        )
        return TemplateSet(environment, shared, self.resolve_path)
