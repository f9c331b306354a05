"""Jinja2 template registry for platform generators.

``TemplateRegistry`` loads ``.j2`` fragments from the package's
``templates/`` directory (one sub-directory per platform), optionally
accepts inline templates registered at runtime, and exposes the case
helpers from :mod:`appforge.casing` both as filters (``{{ name | pascal }}``)
and as callables (``{{ pascal(name) }}``).  Free-text values such as the
project name go through a literal filter for the file they land in
(``pbx_string``, ``android_string``, ``groovy_string``, ``dart_string``,
or the built-in ``tojson``).

Each registry owns its own ``Environment``; nothing is registered
process-wide, so two registries with different helper sets can be used
side by side.  Undefined variables raise instead of rendering as empty
strings, and every Jinja2 failure is surfaced as
:class:`appforge.errors.TemplateError`.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Mapping

from jinja2 import (
    ChoiceLoader,
    DictLoader,
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError as JinjaTemplateError,
)

from appforge.casing import CASE_HELPERS
from appforge.errors import TemplateError


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


# ---------------------------------------------------------------------------
# TemplateRegistry
# ---------------------------------------------------------------------------


class TemplateRegistry:
    """Named templates plus case helpers, compiled against a data context.

    Args:
        template_dir: Root of the ``.j2`` files.  Defaults to the templates
            shipped with the package.
        helpers: Helper functions to expose to templates.  Defaults to the
            case helpers (``camel``, ``pascal``, ``snake``, ``upper``,
            ``lower``, ``slug``).
    """

    def __init__(
        self,
        template_dir: str | Path | None = None,
        helpers: Mapping[str, Callable[..., Any]] | None = None,
    ) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self._inline: dict[str, str] = {}
        self.env = Environment(
            loader=ChoiceLoader([
                DictLoader(self._inline),
                FileSystemLoader(str(self.template_dir)),
            ]),
            autoescape=False,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        self.env.filters.update(LITERAL_FILTERS)
        self.helpers: dict[str, Callable[..., Any]] = {}
        for name, func in (CASE_HELPERS if helpers is None else helpers).items():
            self.register_helper(name, func)

    # -- Registration --------------------------------------------------------

    def register(self, name: str, source: str) -> None:
        """Register (or replace) an inline template under *name*."""
        self._inline[name] = source

    def register_helper(self, name: str, func: Callable[..., Any]) -> None:
        """Expose *func* as both a filter and a global callable."""
        self.helpers[name] = func
        self.env.filters[name] = func
        self.env.globals[name] = func

    def has_template(self, name: str) -> bool:
        return name in self._inline or (self.template_dir / name).is_file()

    # -- Compilation ---------------------------------------------------------

    def compile(self, name: str, context: Mapping[str, Any]) -> str:
        """Render the named template with *context*.

        Rendering is pure: the same (template, context) pair always yields
        the same text.

        Raises:
            TemplateError: The template does not exist, does not parse, uses
                an unknown helper, or references a variable that is absent
                from *context*.
        """
        try:
            template = self.env.get_template(name)
            return template.render(**context)
        except JinjaTemplateError as exc:
            raise TemplateError(name, _describe(exc)) from exc

    def compile_string(
        self, source: str, context: Mapping[str, Any], name: str = "<string>"
    ) -> str:
        """Render an inline template string (used for templated paths)."""
        try:
            return self.env.from_string(source).render(**context)
        except JinjaTemplateError as exc:
            raise TemplateError(name, _describe(exc)) from exc

    # -- Utility -------------------------------------------------------------

    def list_templates(self, prefix: str = "") -> list[str]:
        """Return a sorted list of all ``.j2`` template paths under *prefix*."""
        search_dir = self.template_dir / prefix if prefix else self.template_dir
        found = {n for n in self._inline if n.startswith(prefix)}
        if search_dir.is_dir():
            found.update(
                p.relative_to(self.template_dir).as_posix()
                for p in search_dir.rglob("*.j2")
            )
        return sorted(found)


# ---------------------------------------------------------------------------
# Literal escaping
# ---------------------------------------------------------------------------


def pbx_string(value: Any) -> str:
    """Quote *value* as a pbxproj (OpenStep plist) string literal."""
    text = str(value).replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{text}"'


def pbx_comment(value: Any) -> str:
    """Text safe inside a pbxproj `/* ... */` annotation."""
    return str(value).replace("*/", "* /").replace("\n", " ")


def android_string(value: Any) -> str:
    """Escape *value* for the body of an Android `<string>` resource."""
    text = str(value).replace("\\", "\\\\").replace("'", "\\'").replace('"', '\\"')
    text = text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
    if text.startswith(("@", "?")):
        text = "\\" + text
    return text


def groovy_string(value: Any) -> str:
    """Quote *value* as a single-quoted (non-interpolating) Groovy string."""
    text = str(value).replace("\\", "\\\\").replace("'", "\\'")
    return f"'{text}'"


def dart_string(value: Any) -> str:
    """Quote *value* as a Dart string literal without `$` interpolation."""
    return json.dumps(str(value)).replace("$", "\\$")


LITERAL_FILTERS: dict[str, Callable[[Any], str]] = {
    "pbx_string": pbx_string,
    "pbx_comment": pbx_comment,
    "android_string": android_string,
    "groovy_string": groovy_string,
    "dart_string": dart_string,
}


def _describe(exc: JinjaTemplateError) -> str:
    lineno = getattr(exc, "lineno", None)
    message = exc.message or exc.__class__.__name__
    return f"{message} (line {lineno})" if lineno else message
