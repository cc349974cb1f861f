"""Tests for golatt.services.template_store."""

from concurrent.futures import ThreadPoolExecutor

import pytest
from jinja2 import DictLoader, TemplateNotFound

from golatt.config import GolattConfig
from golatt.services.template_store import SubtreeLoader, TemplateConfigError, TemplateStore

_BASE = "<html><body>{% include page %}</body></html>"
_NAV = '<nav><a href="{{ static_path(\'logo.png\') }}">home</a></nav>'


def _store(files=None, **config) -> TemplateStore:
    files = files if files is not None else {
        "templates/base.html": _BASE,
        "templates/nav.html": _NAV,
        "page/home.html": "<h1>{{ title }}</h1>",
    }
    config.setdefault("templates", ("templates/base.html", "templates/nav.html"))
    return TemplateStore(DictLoader(files), GolattConfig(**config))


# ---------------------------------------------------------------------------
# Path resolution
# ---------------------------------------------------------------------------

class TestResolvePath:
    def test_default_directory_and_extension(self):
        assert _store().resolve_path("about") == "page/about.html"

    def test_custom_directory_and_extension(self):
        store = _store(page_directory="views/pages", template_extension="jinja")
        assert store.resolve_path("about") == "views/pages/about.jinja"

    def test_same_name_resolves_to_same_path(self):
        store = _store()
        first = store.resolve_path("contact")
        store.resolve_path("other")
        assert store.resolve_path("contact") == first

    def test_resolution_does_not_touch_the_loader(self):
        # No template exists for this page; resolving is pure string work.
        assert _store(files={}).resolve_path("ghost") == "page/ghost.html"


# ---------------------------------------------------------------------------
# Shared template compilation
# ---------------------------------------------------------------------------

class TestCompile:
    def test_empty_shared_list_is_a_configuration_error(self):
        with pytest.raises(TemplateConfigError):
            _store(templates=()).compile()

    def test_missing_shared_template(self):
        with pytest.raises(TemplateConfigError, match="templates/missing.html"):
            _store(templates=("templates/base.html", "templates/missing.html")).compile()

    def test_unparsable_shared_template(self):
        files = {"templates/base.html": "{% if %}"}
        with pytest.raises(TemplateConfigError, match="templates/base.html"):
            _store(files=files, templates=("templates/base.html",)).compile()

    def test_compiled_set_is_cached(self):
        store = _store()
        assert store.compile() is store.compile()

    def test_concurrent_first_use_builds_once(self):
        store = _store()
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: store.compile(), range(32)))
        assert all(r is results[0] for r in results)

    def test_builtin_helpers(self):
        env = _store().compile().environment
        assert env.globals["static_path"]("img/a.png") == "/static/img/a.png"
        assert env.globals["asset_path"]("app.js") == "/assets/app.js"

    def test_builtin_helper_usable_in_shared_template(self):
        html = _store().compile().section("nav").render()
        assert 'href="/static/logo.png"' in html

    def test_custom_template_funcs(self):
        store = _store(template_funcs={"shout": lambda s: s.upper()})
        template = store.compile().environment.from_string("{{ shout('hi') }}")
        assert template.render() == "HI"

    def test_custom_func_replaces_builtin_helper(self):
        store = _store(template_funcs={"static_path": lambda p: "https://cdn.example.org/" + p})
        html = store.compile().section("nav").render()
        assert 'href="https://cdn.example.org/logo.png"' in html
        assert store.compile().environment.globals["asset_path"]("app.js") == "/assets/app.js"

    def test_shared_templates_with_same_stem_rejected(self):
        files = {"a/base.html": _BASE, "b/base.html": _BASE}
        with pytest.raises(TemplateConfigError, match="'base'"):
            _store(files=files, templates=("a/base.html", "b/base.html")).compile()

    def test_same_shared_template_listed_twice(self):
        store = _store(templates=("templates/base.html", "templates/base.html"))
        assert store.compile().section("base").name == "templates/base.html"

    def test_html_is_autoescaped(self):
        files = {
            "templates/base.html": "{{ data }}",
        }
        store = _store(files=files, templates=("templates/base.html",))
        html = store.compile().section("base").render(data="<script>")
        assert html == "&lt;script&gt;"


# ---------------------------------------------------------------------------
# Section and page lookup
# ---------------------------------------------------------------------------

class TestTemplateSet:
    def test_section_by_stem_and_by_path(self):
        templates = _store().compile()
        assert templates.section("base") is templates.section("templates/base.html")

    def test_unknown_section(self):
        with pytest.raises(TemplateNotFound):
            _store().compile().section("layout")

    def test_page_is_loaded_from_resolved_path(self):
        page = _store().compile().page("home")
        assert page.name == "page/home.html"
        assert page.render(title="Home") == "<h1>Home</h1>"

    def test_missing_page_template(self):
        with pytest.raises(TemplateConfigError, match="page/nowhere.html"):
            _store().compile().page("nowhere")

    def test_unparsable_page_template(self):
        files = {
            "templates/base.html": _BASE,
            "page/broken.html": "{% for %}",
        }
        store = _store(files=files, templates=("templates/base.html",))
        with pytest.raises(TemplateConfigError, match="broken"):
            store.compile().page("broken")


# ---------------------------------------------------------------------------
# SubtreeLoader
# ---------------------------------------------------------------------------

class TestSubtreeLoader:
    def test_serves_templates_below_folder(self):
        loader = SubtreeLoader("/site/", DictLoader({
            "site/templates/base.html": _BASE,
            "site/page/home.html": "home",
            "other/page/home.html": "wrong",
        }))
        store = TemplateStore(loader, GolattConfig(templates=("templates/base.html",)))
        assert store.compile().page("home").render() == "home"

    def test_lists_only_templates_below_folder(self):
        loader = SubtreeLoader("site", DictLoader({
            "site/page/home.html": "home",
            "other/page/home.html": "wrong",
        }))
        assert loader.list_templates() == ["page/home.html"]
