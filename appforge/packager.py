"""Archive a finished project tree.

The packager never inspects what it archives beyond path safety: every
member is stored relative to the scratch root, and a member whose resolved
location lies outside the root (an absolute path, ``..`` segments or a
symlink pointing elsewhere) aborts packaging with ``PackagingError``.
Directories are stored as explicit entries so that empty directories of the
generated layout survive extraction.
"""

from __future__ import annotations

import asyncio
import hashlib
import time
import zipfile
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from appforge.casing import slug
from appforge.config import PackagingConfig
from appforge.errors import PackagingError
from appforge.utils import ensure_dir


@dataclass(frozen=True)
class PackageResult:
    """Where the archive was written and what it contains."""

    archive_path: Path
    size_bytes: int
    file_count: int
    sha256: str


class Packager:
    """Builds ``<slug>-<timestamp>.zip`` archives in the configured directory."""

    def __init__(self, config: PackagingConfig | None = None) -> None:
        self.config = config or PackagingConfig()

    # -- Public API ----------------------------------------------------------

    async def package(self, root: str | Path, display_name: str) -> PackageResult:
        """Archive *root* and report the archive's path and size.

        Raises:
            PackagingError: *root* is not a directory, a member escapes it,
                or the archive cannot be written.
        """
        return await asyncio.to_thread(self.package_sync, Path(root), display_name)

    def package_sync(self, root: Path, display_name: str) -> PackageResult:
        if not root.is_dir():
            raise PackagingError(f"Not a directory: {root}", {"root": str(root)})

        members = self.collect_members(root)
        archive_path = self._archive_path(display_name)
        try:
            ensure_dir(archive_path.parent)
            with zipfile.ZipFile(
                archive_path,
                "w",
                compression=zipfile.ZIP_DEFLATED,
                compresslevel=self.config.compression_level,
            ) as archive:
                for arcname, source in members:
                    archive.write(source, arcname)
        except OSError as exc:
            if archive_path.exists():
                archive_path.unlink()
            raise PackagingError(
                f"Failed to write archive {archive_path}: {exc}",
                {"archive": str(archive_path)},
            ) from exc

        return PackageResult(
            archive_path=archive_path,
            size_bytes=archive_path.stat().st_size,
            file_count=sum(1 for arcname, _ in members if not arcname.endswith("/")),
            sha256=_sha256(archive_path),
        )

    # -- Helpers -------------------------------------------------------------

    @staticmethod
    def collect_members(root: Path) -> list[tuple[str, Path]]:
        """Return ``(arcname, source)`` pairs for every entry under *root*.

        Directory arcnames end with ``/``.  Entries are sorted by arcname.

        Raises:
            PackagingError: An entry resolves outside *root*.
        """
        resolved_root = root.resolve()
        members = []
        for source in sorted(root.rglob("*")):
            rel = PurePosixPath(source.relative_to(root).as_posix())
            target = source.resolve()
            if rel.is_absolute() or ".." in rel.parts or not target.is_relative_to(resolved_root):
                raise PackagingError(
                    f"Refusing to archive {rel}: it resolves outside {root}",
                    {"member": str(rel), "resolved": str(target)},
                )
            arcname = f"{rel}/" if source.is_dir() else str(rel)
            members.append((arcname, source))
        return members

    def _archive_path(self, display_name: str) -> Path:
        stem = slug(display_name) or "project"
        stamp = int(time.time() * 1000)
        path = self.config.archive_dir / f"{stem}-{stamp}.zip"
        while path.exists():
            stamp += 1
            path = self.config.archive_dir / f"{stem}-{stamp}.zip"
        return path


def _sha256(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as fh:
        for chunk in iter(lambda: fh.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()
