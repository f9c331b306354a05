"""Target dispatch and scratch-directory lifecycle.

``ProjectGenerator`` resolves the requested target to one platform generator,
validates the descriptor against that generator's mandatory fields and only
then touches the file system.  An unknown target or an invalid descriptor
therefore never leaves a directory behind.
"""

from __future__ import annotations

import asyncio
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from appforge.config import GeneratorConfig, PackagingConfig
from appforge.errors import GenerationIOError, UnsupportedTargetError, ValidationError
from appforge.models import (
    ANDROID_PACKAGE_PATTERN,
    BACKEND_TARGETS,
    IOS_BUNDLE_PATTERN,
    PROJECT_NAME_PATTERN,
    UMBRELLA_TARGETS,
    GeneratedFile,
    ProjectDescriptor,
    Target,
    ValidationReport,
    resolve_target,
)
from appforge.scaffolder.android import AndroidGenerator
from appforge.scaffolder.backend import ExpressGenerator, FastAPIGenerator
from appforge.scaffolder.base import PlatformGenerator
from appforge.scaffolder.cross_platform import FlutterGenerator, ReactNativeGenerator
from appforge.scaffolder.identifiers import SymbolTable
from appforge.scaffolder.ios import IOSGenerator
from appforge.scaffolder.templates import TemplateRegistry
from appforge.utils import ensure_dir

GENERATORS: dict[Target, type[PlatformGenerator]] = {
    Target.ANDROID: AndroidGenerator,
    Target.IOS: IOSGenerator,
    Target.REACT_NATIVE: ReactNativeGenerator,
    Target.FLUTTER: FlutterGenerator,
    Target.BACKEND_EXPRESS: ExpressGenerator,
    Target.BACKEND_FASTAPI: FastAPIGenerator,
}

# Target -> (display name, description, languages, build tools)
_CATALOGUE: dict[Target, tuple[str, str, list[str], list[str]]] = {
    Target.ANDROID: ("Android", "Native Android application", ["kotlin"], ["gradle"]),
    Target.IOS: ("iOS", "Native iOS application", ["swift"], ["xcode"]),
    Target.REACT_NATIVE: (
        "React Native", "Cross-platform mobile application", ["typescript"], ["npm", "metro"],
    ),
    Target.FLUTTER: ("Flutter", "Cross-platform mobile application", ["dart"], ["flutter"]),
    Target.BACKEND_EXPRESS: ("Express API", "REST API on Node.js", ["javascript"], ["npm", "knex"]),
    Target.BACKEND_FASTAPI: ("FastAPI", "REST API on Python", ["python"], ["pip", "uvicorn"]),
}

NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 50


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------


@dataclass
class GenerationResult:
    """Outcome of one successful generation run."""

    target: Target
    root: Path
    files: list[GeneratedFile] = field(default_factory=list)
    build_config: dict[str, Any] = field(default_factory=dict)
    symbols: Optional[SymbolTable] = None

    @property
    def paths(self) -> list[str]:
        return [f.path for f in self.files]

    @property
    def file_count(self) -> int:
        return len(self.files)

    @property
    def total_bytes(self) -> int:
        return sum(f.size for f in self.files)

    def get(self, path: str) -> Optional[GeneratedFile]:
        return next((f for f in self.files if f.path == path), None)


# ---------------------------------------------------------------------------
# ProjectGenerator
# ---------------------------------------------------------------------------


class ProjectGenerator:
    """Dispatches a descriptor to the platform generator of its target.

    Args:
        config: Generator settings; defaults to ``GeneratorConfig()``.
        registry: Template registry shared by the platform generators of
            this instance.  A fresh one is built when omitted.
    """

    def __init__(
        self,
        config: GeneratorConfig | None = None,
        registry: TemplateRegistry | None = None,
    ) -> None:
        self.config = config or GeneratorConfig()
        self.registry = registry or TemplateRegistry()

    def generator_for(self, target: Target | str, framework: str | None = None) -> PlatformGenerator:
        """Instantiate the generator for *target*.

        Raises:
            UnsupportedTargetError: *target* is not a supported platform.
        """
        generator_cls = GENERATORS[resolve_target(target, framework)]
        return generator_cls(self.registry, self.config)

    async def generate(
        self,
        descriptor: ProjectDescriptor,
        output_root: str | Path,
        target: Target | str | None = None,
    ) -> GenerationResult:
        """Generate the project tree for *descriptor* under *output_root*.

        *target* overrides ``descriptor.target``.  The target is resolved and
        the descriptor validated before *output_root* is created.

        Raises:
            UnsupportedTargetError: Unknown target; nothing is created.
            ValidationError: A mandatory field is missing; nothing is created.
            TemplateError: A template is defective.
            GenerationIOError: The tree cannot be created or written.
        """
        if target is None:
            generator = self.generator_for(descriptor.resolved_target())
        else:
            generator = self.generator_for(target, descriptor.framework)
        generator.validate(descriptor)

        root = Path(output_root)
        try:
            await asyncio.to_thread(ensure_dir, root)
        except OSError as exc:
            raise GenerationIOError(root, exc) from exc

        ctx = generator.create_context(descriptor, root)
        files = await generator.generate(ctx)
        return GenerationResult(
            target=generator.target,
            root=root,
            files=files,
            build_config=generator.build_info(),
            symbols=ctx.symbols,
        )

    async def generate_document(
        self,
        document: dict[str, Any],
        output_root: str | Path,
        target: Target | str | None = None,
    ) -> GenerationResult:
        """Validate a raw descriptor document, then :meth:`generate` it."""
        return await self.generate(ProjectDescriptor.from_document(document), output_root, target)


# ---------------------------------------------------------------------------
# Scratch directories
# ---------------------------------------------------------------------------


def create_scratch_dir(config: PackagingConfig, name: str) -> Path:
    """Create a fresh, run-exclusive scratch directory.

    Raises:
        GenerationIOError: The scratch root is not writable.
    """
    parent = config.scratch_root
    try:
        if parent is not None:
            ensure_dir(parent)
        return Path(tempfile.mkdtemp(prefix=f"appforge-{name}-", dir=parent))
    except OSError as exc:
        raise GenerationIOError(parent or tempfile.gettempdir(), exc) from exc


def remove_scratch_dir(path: Path) -> None:
    """Delete a scratch directory; a missing directory is not an error."""
    shutil.rmtree(path, ignore_errors=True)


# ---------------------------------------------------------------------------
# Catalogue and non-raising validation
# ---------------------------------------------------------------------------


def supported_targets() -> list[dict[str, Any]]:
    """Describe every target a descriptor can be generated for."""
    catalogue = []
    for target, generator_cls in GENERATORS.items():
        display, description, languages, build_tools = _CATALOGUE[target]
        catalogue.append({
            "target": target.value,
            "name": display,
            "description": description,
            "family": "backend" if target in BACKEND_TARGETS else "mobile",
            "languages": languages,
            "buildTools": build_tools,
            "requiredFields": list(generator_cls.required_fields),
        })
    for umbrella, (default, frameworks) in UMBRELLA_TARGETS.items():
        catalogue.append({
            "target": umbrella,
            "name": umbrella,
            "description": f"Alias resolved through 'framework' (default {default!r})",
            "family": "backend" if umbrella == "api" else "mobile",
            "frameworks": list(frameworks),
        })
    return catalogue


def validate_descriptor(document: dict[str, Any], target: Target | str | None = None) -> ValidationReport:
    """Check a raw descriptor document without raising.

    Combines the structural checks of ``ProjectDescriptor.from_document`` with
    the stricter naming rules applied to user-facing project names, the
    per-target identifier rules and advisory recommendations.
    """
    report = ValidationReport()

    name = str(document.get("name") or document.get("projectName") or "")
    if not PROJECT_NAME_PATTERN.match(name):
        report.errors.append(
            "Project name can only contain letters, numbers, hyphens, and underscores"
        )
    if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
        report.errors.append(
            f"Project name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters"
        )

    requested = target if target is not None else document.get("target", "")
    resolved: Optional[Target] = None
    try:
        resolved = resolve_target(requested, document.get("framework"))
    except UnsupportedTargetError as exc:
        report.errors.append(str(exc))

    descriptor: Optional[ProjectDescriptor] = None
    try:
        descriptor = ProjectDescriptor.from_document(document)
    except ValidationError as exc:
        report.errors.extend(exc.errors)

    if descriptor is not None and resolved is not None:
        report.errors.extend(_identifier_errors(descriptor, resolved))
        types = GENERATORS[resolved].types
        for table in descriptor.tables:
            for column in table.columns:
                if not types.is_known(column.type):
                    report.warnings.append(
                        f"Column {table.name}.{column.name} has unknown type {column.type!r}; "
                        f"it will be generated as {types.fallback}"
                    )

    has_schema = bool(document.get("databaseSchema") or document.get("database_schema"))
    has_endpoints = bool(document.get("apiEndpoints") or document.get("api_endpoints"))
    if has_schema and not has_endpoints:
        report.recommendations.append("Consider adding API endpoints for database operations")
    if has_endpoints and not has_schema:
        report.recommendations.append("Consider adding database schema for data persistence")

    report.is_valid = not report.errors
    return report


def _identifier_errors(descriptor: ProjectDescriptor, target: Target) -> list[str]:
    identifier = descriptor.platform_identifier
    if target == Target.ANDROID:
        if not identifier:
            return ["Package name is required for Android projects"]
        if not ANDROID_PACKAGE_PATTERN.match(identifier):
            return ["Invalid package name format"]
    elif target == Target.IOS:
        if not identifier:
            return ["Bundle identifier is required for iOS projects"]
        if not IOS_BUNDLE_PATTERN.match(identifier):
            return ["Invalid bundle identifier format"]
    return []
