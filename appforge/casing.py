"""Case transforms used wherever a generator emits a name.

All functions are pure and total: the empty string maps to the empty string
and no input raises.  ``camel``, ``pascal`` and ``snake`` are idempotent on
their own output.
"""

from __future__ import annotations

import re

_SEPARATORS = re.compile(r"[-_\s]+")
_UPPER_BOUNDARY = re.compile(r"(?=[A-Z])")
_UPPER_NOT_AFTER_UNDERSCORE = re.compile(r"(?<!_)([A-Z])")


def _segments(value: str) -> list[str]:
    """Split on ``-``, ``_``, whitespace and before every uppercase letter."""
    parts: list[str] = []
    for chunk in _SEPARATORS.split(value):
        parts.extend(p for p in _UPPER_BOUNDARY.split(chunk) if p)
    return parts


def pascal(value: str) -> str:
    """``order_item`` / ``order-item`` / ``orderItem`` -> ``OrderItem``."""
    return "".join(seg[0].upper() + seg[1:] for seg in _segments(value))


def camel(value: str) -> str:
    """``order_item`` / ``OrderItem`` -> ``orderItem``."""
    segments = _segments(value)
    if not segments:
        return ""
    head = segments[0][0].lower() + segments[0][1:]
    return head + "".join(seg[0].upper() + seg[1:] for seg in segments[1:])


def snake(value: str) -> str:
    """``OrderItem`` -> ``order_item``.

    Inserts ``_`` before each uppercase letter not already preceded by ``_``,
    lowercases, then strips every leading ``_``.
    """
    result = _UPPER_NOT_AFTER_UNDERSCORE.sub(r"_\1", value).lower()
    return result.lstrip("_")


def upper(value: str) -> str:
    return value.upper()


def lower(value: str) -> str:
    return value.lower()


def slug(value: str) -> str:
    """Convert a display name to a filename/package-safe ``kebab-case`` slug."""
    result = re.sub(r"[^a-z0-9]+", "-", snake(pascal(value)).replace("_", "-"))
    return result.strip("-")


CASE_HELPERS = {
    "camel": camel,
    "pascal": pascal,
    "snake": snake,
    "upper": upper,
    "lower": lower,
    "slug": slug,
}
