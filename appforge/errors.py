"""Error taxonomy for AppForge generation runs.

Every failure in the generation subsystem is deterministic for a given
descriptor, so none of these errors is retried.  They are raised where the
failure is detected and propagated unchanged to the caller, which is
responsible for deleting any partially written scratch directory.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class GenerationError(Exception):
    """Base class for every error raised by AppForge."""


class UnsupportedTargetError(GenerationError):
    """Raised when the requested target is not one of the supported platforms.

    Always raised before any file-system mutation takes place.
    """

    def __init__(self, target: str, supported: list[str] | None = None) -> None:
        self.target = target
        self.supported = supported or []
        hint = f" (supported: {', '.join(self.supported)})" if self.supported else ""
        super().__init__(f"Unsupported target: {target!r}{hint}")


class ValidationError(GenerationError):
    """Raised when a descriptor is missing a structurally mandatory field.

    ``errors`` holds one human-readable message per offending field.
    """

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        self.errors = errors or []
        detail = f": {'; '.join(self.errors)}" if self.errors else ""
        super().__init__(f"{message}{detail}")


class TemplateError(GenerationError):
    """Raised when a template references an undefined variable or helper.

    This indicates a defect inside a generator, not a problem with caller input.
    """

    def __init__(self, template: str, message: str) -> None:
        self.template = template
        super().__init__(f"Template {template!r}: {message}")


class GenerationIOError(GenerationError):
    """Raised when the scratch directory cannot be created or written."""

    def __init__(self, path: str | Path, cause: OSError) -> None:
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"I/O failure at {self.path}: {cause.strerror or cause}")


class SymbolTableError(GenerationError):
    """Raised on duplicate role allocation or a lookup of an unknown role."""

    def __init__(self, message: str, roles: list[str] | None = None) -> None:
        self.roles = roles or []
        super().__init__(message)


class PackagingError(GenerationError):
    """Raised when a finished tree cannot be archived safely."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        self.context = context or {}
        super().__init__(message)
