"""Unit tests for appforge.packager.

Covers:
- Archive naming, member layout and explicit directory entries
- SHA-256 and file-count reporting
- Rejection of members resolving outside the root (symlinks)
- Non-directory roots and unwritable archive locations
"""

from __future__ import annotations

import hashlib
import os
import zipfile
from pathlib import Path

import pytest

from appforge.config import PackagingConfig
from appforge.errors import PackagingError
from appforge.packager import Packager

pytestmark = pytest.mark.unit


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    root = tmp_path / "tree"
    (root / "src" / "models").mkdir(parents=True)
    (root / "empty").mkdir()
    (root / "package.json").write_text('{"name": "acme"}\n', encoding="utf-8")
    (root / "src" / "models" / "OrderItem.js").write_text("module.exports = {};\n", encoding="utf-8")
    return root


@pytest.fixture
def packager(tmp_path: Path) -> Packager:
    return Packager(PackagingConfig(archive_dir=tmp_path / "archives"))


# ---------------------------------------------------------------------------
# Archive contents
# ---------------------------------------------------------------------------

class TestPackage:
    async def test_archive_contents(self, packager: Packager, tree: Path) -> None:
        result = await packager.package(tree, "Acme")

        assert result.archive_path.parent == packager.config.archive_dir
        assert result.archive_path.name.startswith("acme-")
        assert result.archive_path.suffix == ".zip"
        assert result.file_count == 2
        assert result.size_bytes == result.archive_path.stat().st_size

        with zipfile.ZipFile(result.archive_path) as archive:
            names = archive.namelist()
            assert "package.json" in names
            assert "src/models/OrderItem.js" in names
            assert "empty/" in names
            assert archive.read("src/models/OrderItem.js") == b"module.exports = {};\n"

    def test_sha256_matches_archive(self, packager: Packager, tree: Path) -> None:
        result = packager.package_sync(tree, "Acme")
        expected = hashlib.sha256(result.archive_path.read_bytes()).hexdigest()
        assert result.sha256 == expected

    def test_unnamed_project(self, packager: Packager, tree: Path) -> None:
        result = packager.package_sync(tree, "!!!")
        assert result.archive_path.name.startswith("project-")

    def test_consecutive_archives_do_not_collide(self, packager: Packager, tree: Path) -> None:
        first = packager.package_sync(tree, "Acme")
        second = packager.package_sync(tree, "Acme")
        assert first.archive_path != second.archive_path
        assert first.archive_path.exists() and second.archive_path.exists()


# ---------------------------------------------------------------------------
# Member collection
# ---------------------------------------------------------------------------

class TestCollectMembers:
    def test_sorted_with_directory_entries(self, tree: Path) -> None:
        arcnames = [name for name, _ in Packager.collect_members(tree)]
        assert arcnames == sorted(arcnames)
        assert "src/" in arcnames
        assert "src/models/" in arcnames

    def test_symlink_outside_root_is_rejected(self, tree: Path, tmp_path: Path) -> None:
        outside = tmp_path / "secret.txt"
        outside.write_text("secret", encoding="utf-8")
        try:
            os.symlink(outside, tree / "leak.txt")
        except (OSError, NotImplementedError):
            pytest.skip("symlinks not supported on this platform")

        with pytest.raises(PackagingError) as exc_info:
            Packager.collect_members(tree)
        assert exc_info.value.context["member"] == "leak.txt"

    def test_symlink_inside_root_is_allowed(self, tree: Path) -> None:
        try:
            os.symlink(tree / "package.json", tree / "alias.json")
        except (OSError, NotImplementedError):
            pytest.skip("symlinks not supported on this platform")
        arcnames = [name for name, _ in Packager.collect_members(tree)]
        assert "alias.json" in arcnames


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------

class TestFailures:
    def test_root_must_be_directory(self, packager: Packager, tmp_path: Path) -> None:
        with pytest.raises(PackagingError, match="Not a directory"):
            packager.package_sync(tmp_path / "missing", "Acme")

    def test_unwritable_archive_dir(self, tree: Path, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        packager = Packager(PackagingConfig(archive_dir=blocker / "archives"))

        with pytest.raises(PackagingError, match="Failed to write archive"):
            packager.package_sync(tree, "Acme")
