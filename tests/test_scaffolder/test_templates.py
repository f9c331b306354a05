"""Tests for the Jinja2 template registry.

Covers:
- Inline registration and file-system templates
- Case helpers as filters and as callables
- Strict undefined variables and unknown helpers surfacing as TemplateError
- Per-registry helper isolation
- Template listing
- Literal escaping filters for pbxproj, Android, Groovy and Dart
"""

from __future__ import annotations

from pathlib import Path

import pytest

from appforge.errors import TemplateError
from appforge.scaffolder.templates import TemplateRegistry

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Compilation
# ---------------------------------------------------------------------------

class TestCompile:
    def test_inline_template(self, registry: TemplateRegistry) -> None:
        registry.register("greeting", "Hello {{ name }}!")
        assert registry.compile("greeting", {"name": "Acme"}) == "Hello Acme!"

    def test_filters_and_callables(self, registry: TemplateRegistry) -> None:
        registry.register("cases", "{{ t | pascal }} {{ camel(t) }} {{ t | snake }} {{ slug('My App') }}")
        assert registry.compile("cases", {"t": "order_item"}) == "OrderItem orderItem order_item my-app"

    def test_rendering_is_pure(self, registry: TemplateRegistry) -> None:
        registry.register("list", "{% for x in items %}{{ x | upper }},{% endfor %}")
        context = {"items": ["a", "b"]}
        assert registry.compile("list", context) == registry.compile("list", context) == "A,B,"

    def test_trailing_newline_kept(self, registry: TemplateRegistry) -> None:
        registry.register("line", "value\n")
        assert registry.compile("line", {}) == "value\n"

    def test_no_html_escaping(self, registry: TemplateRegistry) -> None:
        registry.register("xml", "{{ text }}")
        assert registry.compile("xml", {"text": "<a & b>"}) == "<a & b>"

    def test_packaged_template(self, registry: TemplateRegistry) -> None:
        content = registry.compile(
            "react_native/Model.ts.j2",
            {"table": {"entity": "OrderItem", "fields": [{"name": "unitPrice", "type": "number"}]}},
        )
        assert "export interface OrderItem {" in content
        assert "unitPrice?: number;" in content

    def test_compile_string(self, registry: TemplateRegistry) -> None:
        assert registry.compile_string("{{ name }}/Models", {"name": "Shop"}) == "Shop/Models"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class TestErrors:
    def test_undefined_variable(self, registry: TemplateRegistry) -> None:
        registry.register("broken", "{{ missing }}")
        with pytest.raises(TemplateError) as exc_info:
            registry.compile("broken", {})
        assert exc_info.value.template == "broken"
        assert "missing" in str(exc_info.value)

    def test_unknown_helper(self, registry: TemplateRegistry) -> None:
        registry.register("helper", "{{ 'x' | shout }}")
        with pytest.raises(TemplateError):
            registry.compile("helper", {})

    def test_unknown_template(self, registry: TemplateRegistry) -> None:
        with pytest.raises(TemplateError):
            registry.compile("nope/absent.j2", {})

    def test_syntax_error_reports_line(self, registry: TemplateRegistry) -> None:
        registry.register("syntax", "ok\n{% if %}")
        with pytest.raises(TemplateError, match="line 2"):
            registry.compile("syntax", {})


# ---------------------------------------------------------------------------
# Literal escaping
# ---------------------------------------------------------------------------

class TestLiteralFilters:
    NAME = 'Acme "Pro" \\ Ed'

    def _render(self, registry: TemplateRegistry, source: str, value: str) -> str:
        registry.register("literal", source)
        return registry.compile("literal", {"value": value})

    def test_pbx_string(self, registry: TemplateRegistry) -> None:
        rendered = self._render(registry, "path = {{ value | pbx_string }};", self.NAME)
        assert rendered == 'path = "Acme \\"Pro\\" \\\\ Ed";'

    def test_pbx_string_plain_name_unchanged(self, registry: TemplateRegistry) -> None:
        assert self._render(registry, "{{ value | pbx_string }}", "ShopApp") == '"ShopApp"'

    def test_pbx_comment(self, registry: TemplateRegistry) -> None:
        rendered = self._render(registry, "/* {{ value | pbx_comment }} */", "a */ b\nc")
        assert rendered == "/* a * / b c */"

    def test_android_string(self, registry: TemplateRegistry) -> None:
        rendered = self._render(registry, "{{ value | android_string }}", "@Tom's <A&B>")
        assert rendered == "\\@Tom\\'s &lt;A&amp;B&gt;"

    def test_groovy_string(self, registry: TemplateRegistry) -> None:
        rendered = self._render(registry, "{{ value | groovy_string }}", "It's \\ $x")
        assert rendered == "'It\\'s \\\\ $x'"

    def test_dart_string(self, registry: TemplateRegistry) -> None:
        rendered = self._render(registry, "{{ value | dart_string }}", 'Pay "$5"')
        assert rendered == '"Pay \\"\\$5\\""'

    def test_available_without_case_helpers(self) -> None:
        registry = TemplateRegistry(helpers={})
        registry.register("literal", "{{ 'a\"b' | pbx_string }}")
        assert registry.compile("literal", {}) == '"a\\"b"'


# ---------------------------------------------------------------------------
# Helpers and discovery
# ---------------------------------------------------------------------------

class TestHelpers:
    def test_custom_helper(self, registry: TemplateRegistry) -> None:
        registry.register_helper("shout", lambda s: s.upper() + "!")
        registry.register("helper", "{{ 'hi' | shout }} {{ shout('yo') }}")
        assert registry.compile("helper", {}) == "HI! YO!"

    def test_registries_are_isolated(self) -> None:
        first = TemplateRegistry()
        second = TemplateRegistry(helpers={})
        first.register_helper("shout", str.upper)
        assert "shout" not in second.helpers
        second.register("t", "{{ 'x' | pascal }}")
        with pytest.raises(TemplateError):
            second.compile("t", {})


class TestDiscovery:
    def test_list_templates(self, registry: TemplateRegistry) -> None:
        names = registry.list_templates("ios")
        assert "ios/project.pbxproj.j2" in names
        assert all(n.startswith("ios") for n in names)

    def test_has_template(self, registry: TemplateRegistry) -> None:
        registry.register("inline", "")
        assert registry.has_template("inline")
        assert registry.has_template("android/Model.kt.j2")
        assert not registry.has_template("android/Nope.kt.j2")

    def test_custom_template_dir(self, tmp_path: Path) -> None:
        (tmp_path / "demo").mkdir()
        (tmp_path / "demo" / "hello.txt.j2").write_text("hi {{ who }}\n", encoding="utf-8")
        registry = TemplateRegistry(tmp_path)
        assert registry.list_templates() == ["demo/hello.txt.j2"]
        assert registry.compile("demo/hello.txt.j2", {"who": "there"}) == "hi there\n"
