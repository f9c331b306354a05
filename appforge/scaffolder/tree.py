"""Directory skeleton creation under a scratch root."""

from __future__ import annotations

import errno
import os
from pathlib import Path, PurePosixPath
from typing import Any, Iterable, Mapping, Optional

from appforge.errors import GenerationIOError
from appforge.scaffolder.templates import TemplateRegistry


class DirectoryTreeBuilder:
    """Ensures a list of (possibly templated) relative directories exists.

    Paths containing ``{{ ... }}`` are rendered through the registry first,
    e.g. ``"{{ name }}/Models"``.  Running ``ensure`` twice leaves the file
    system unchanged.
    """

    def __init__(self, registry: Optional[TemplateRegistry] = None) -> None:
        self.registry = registry

    def resolve(self, path: str, context: Mapping[str, Any] | None = None) -> str:
        """Render a templated relative path and normalise it to POSIX form."""
        if "{{" in path or "{%" in path:
            if self.registry is None:
                raise ValueError(f"Templated path {path!r} needs a TemplateRegistry")
            path = self.registry.compile_string(path, context or {}, name=path)
        return PurePosixPath(path.replace("\\", "/")).as_posix()

    def ensure(
        self,
        paths: Iterable[str],
        root: str | Path,
        context: Mapping[str, Any] | None = None,
    ) -> list[Path]:
        """Create each directory of *paths* under *root* if absent.

        Returns the absolute directories in input order.

        Raises:
            GenerationIOError: A path escapes *root*, or the directory could
                not be created (permissions, disk full, a file in the way).
        """
        base = Path(root)
        created: list[Path] = []
        for raw in paths:
            rel = self.resolve(raw, context)
            target = base / rel
            if PurePosixPath(rel).is_absolute() or ".." in PurePosixPath(rel).parts:
                raise GenerationIOError(
                    target, OSError(errno.EINVAL, os.strerror(errno.EINVAL), rel)
                )
            try:
                target.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise GenerationIOError(target, exc) from exc
            created.append(target)
        return created
