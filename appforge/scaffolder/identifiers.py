"""Symbol table for reference-graph artifacts (the Xcode ``project.pbxproj``).

Every object in a pbxproj file is keyed by an opaque identifier and other
objects refer to it by that identifier.  ``SymbolTable`` hands out exactly
one identifier per semantic role ("main-target", "debug-config", ...) and
templates only ever *look up* identifiers by role through
``IdentifierGraph.ref``, so every reference in the rendered artifact points
at an object defined in the same run.

Identifiers carry 128 bits from an injectable random source and are rendered
as 32 upper-case hex characters.  Pass a seeded ``random.Random`` (or use
:meth:`SymbolTable.seeded`) for reproducible output.
"""

from __future__ import annotations

import random
import re
import secrets
import threading
from collections import Counter
from typing import Iterable, Iterator

from appforge.errors import SymbolTableError

IDENTIFIER_BITS = 128
IDENTIFIER_WIDTH = IDENTIFIER_BITS // 4
IDENTIFIER_PATTERN = re.compile(r"\b[0-9A-F]{%d}\b" % IDENTIFIER_WIDTH)


# ---------------------------------------------------------------------------
# Roles of the Xcode project graph
# ---------------------------------------------------------------------------

XCODE_PROJECT_ROLES: tuple[str, ...] = (
    "project",
    "app-product",
    "main-target",
    "main-group",
    "app-group",
    "frameworks-group",
    "products-group",
    "frameworks-phase",
    "sources-phase",
    "resources-phase",
    "project-config-list",
    "target-config-list",
    "debug-config",
    "release-config",
    "debug-target-config",
    "release-target-config",
)

# Source folder -> group role.  "" is the app folder itself.
XCODE_GROUP_ROLES: dict[str, str] = {
    "Models": "models-group",
    "Views": "views-group",
    "ViewModels": "view-models-group",
    "Services": "services-group",
    "Core Data": "core-data-group",
    "Utils": "utils-group",
    "Resources": "resources-group",
    "Preview Content": "preview-content-group",
}


def file_ref_role(path: str) -> str:
    """Role of the PBXFileReference for *path* (relative to the app folder)."""
    return f"file-ref:{path}"


def build_file_role(path: str) -> str:
    """Role of the PBXBuildFile that puts *path* into a build phase."""
    return f"build-file:{path}"


# ---------------------------------------------------------------------------
# SymbolTable
# ---------------------------------------------------------------------------


class SymbolTable:
    """Role -> identifier mapping for one generation run.

    Allocation and per-file registration share a lock, so steps discovering
    files on different threads never receive overlapping identifiers.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng if rng is not None else secrets.SystemRandom()
        self._by_role: dict[str, str] = {}
        self._issued: set[str] = set()
        self._lock = threading.Lock()

    @classmethod
    def seeded(cls, seed: int | None) -> "SymbolTable":
        """A table drawing from ``random.Random(seed)``, or system randomness for ``None``."""
        return cls(random.Random(seed) if seed is not None else None)

    def allocate(self, roles: Iterable[str]) -> dict[str, str]:
        """Assign a fresh identifier to every role in *roles*.

        The whole batch is checked before anything is assigned.

        Raises:
            SymbolTableError: *roles* contains a duplicate, or a role that
                already has an identifier in this table.
        """
        roles = list(roles)
        duplicates = sorted(r for r, count in Counter(roles).items() if count > 1)
        if duplicates:
            raise SymbolTableError(f"Duplicate roles in allocation: {duplicates}", duplicates)

        with self._lock:
            taken = sorted(r for r in roles if r in self._by_role)
            if taken:
                raise SymbolTableError(f"Roles already allocated: {taken}", taken)
            allocated = {}
            for role in roles:
                allocated[role] = self._assign(role)
            return allocated

    def register(self, role: str) -> str:
        """Allocate a single role (used for per-file roles)."""
        return self.allocate([role])[role]

    def lookup(self, role: str) -> str:
        """Return the identifier of *role*.

        Raises:
            SymbolTableError: The role was never allocated.
        """
        try:
            return self._by_role[role]
        except KeyError:
            raise SymbolTableError(f"Unknown role: {role!r}", [role]) from None

    def _assign(self, role: str) -> str:
        while True:
            token = f"{self._rng.getrandbits(IDENTIFIER_BITS):0{IDENTIFIER_WIDTH}X}"
            if token not in self._issued:
                break
        self._issued.add(token)
        self._by_role[role] = token
        return token

    # -- Introspection -------------------------------------------------------

    def __contains__(self, role: object) -> bool:
        return role in self._by_role

    def __len__(self) -> int:
        return len(self._by_role)

    def __iter__(self) -> Iterator[str]:
        return iter(self._by_role)

    def as_dict(self) -> dict[str, str]:
        return dict(self._by_role)

    def identifiers(self) -> set[str]:
        return set(self._by_role.values())


# ---------------------------------------------------------------------------
# IdentifierGraph
# ---------------------------------------------------------------------------


class IdentifierGraph:
    """Role lookups made while rendering one artifact.

    ``ref`` is handed to templates as a global; it records each role it
    resolves so the set of referenced roles can be checked afterwards.
    """

    def __init__(self, table: SymbolTable) -> None:
        self.table = table
        self.referenced: set[str] = set()

    def ref(self, role: str) -> str:
        identifier = self.table.lookup(role)
        self.referenced.add(role)
        return identifier

    def unreferenced_roles(self) -> list[str]:
        """Allocated roles that no template looked up (dangling objects)."""
        return sorted(set(self.table) - self.referenced)


def unresolved_references(artifact: str, table: SymbolTable) -> list[str]:
    """Return every identifier-shaped token in *artifact* missing from *table*."""
    known = table.identifiers()
    return sorted({tok for tok in IDENTIFIER_PATTERN.findall(artifact) if tok not in known})
