"""Step-pipeline base class shared by every platform generator.

A platform generator declares its directory skeleton and an ordered list of
steps.  Each step reads the shared ``GenerationContext`` and returns its own
list of ``GeneratedFile`` entries; the base class merges those partial lists
once, in pipeline order, so running the steps on worker threads produces
the same file set as running them one after another.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, ClassVar, Optional

from appforge.config import GeneratorConfig
from appforge.errors import ValidationError
from appforge.models import GeneratedFile, ProjectDescriptor, Target
from appforge.scaffolder.context import GenerationContext, project_data
from appforge.scaffolder.templates import TemplateRegistry
from appforge.scaffolder.tree import DirectoryTreeBuilder
from appforge.scaffolder.type_maps import TypeMap

StepFunc = Callable[[GenerationContext], list[GeneratedFile]]

# Descriptor sections a step may depend on.
REQUIRES_SCHEMA = "databaseSchema"
REQUIRES_ENDPOINTS = "apiEndpoints"


@dataclass(frozen=True)
class Step:
    """One entry of a generator's step pipeline.

    ``requires`` names the optional descriptor section the step consumes;
    when that section is absent the step is skipped rather than failed.
    Steps with ``requires=None`` are mandatory and always run.
    """

    name: str
    run: StepFunc
    requires: Optional[str] = None

    def applies_to(self, descriptor: ProjectDescriptor) -> bool:
        if self.requires == REQUIRES_SCHEMA:
            return descriptor.has_schema
        if self.requires == REQUIRES_ENDPOINTS:
            return descriptor.has_endpoints
        return True


class PlatformGenerator:
    """Base class for the Android, iOS, cross-platform and backend generators.

    Subclasses set :attr:`target`, :attr:`types` and :attr:`directories`,
    implement :meth:`steps`, and may override :meth:`finalize`,
    :meth:`build_info` and :meth:`template_data`.
    """

    target: ClassVar[Target]
    types: ClassVar[TypeMap]
    template_prefix: ClassVar[str] = ""
    # Relative directories, possibly templated with the run's data context.
    directories: ClassVar[tuple[str, ...]] = ()
    # Descriptor fields that must be non-empty for this target.
    required_fields: ClassVar[tuple[str, ...]] = ()

    def __init__(
        self,
        registry: TemplateRegistry,
        config: GeneratorConfig | None = None,
    ) -> None:
        self.registry = registry
        self.config = config or GeneratorConfig()
        self.tree = DirectoryTreeBuilder(registry)

    # -- Validation ----------------------------------------------------------

    def validate(self, descriptor: ProjectDescriptor) -> None:
        """Check target-specific mandatory fields.

        Called before the scratch directory is created, so a failure here
        leaves nothing on disk.

        Raises:
            ValidationError: One message per missing or malformed field.
        """
        errors = [
            f"{field_name} is required for target {self.target.value!r}"
            for field_name in self.required_fields
            if not _field_value(descriptor, field_name)
        ]
        errors.extend(self.validate_fields(descriptor))
        if errors:
            raise ValidationError(f"Descriptor cannot be generated as {self.target.value}", errors)

    def validate_fields(self, descriptor: ProjectDescriptor) -> list[str]:
        """Hook for format checks on fields that are present."""
        return []

    # -- Pipeline ------------------------------------------------------------

    def steps(self) -> list[Step]:
        raise NotImplementedError

    def template_data(self, descriptor: ProjectDescriptor) -> dict[str, Any]:
        return project_data(descriptor, self.types, self.config)

    def create_context(self, descriptor: ProjectDescriptor, root: Path) -> GenerationContext:
        ctx = GenerationContext(
            descriptor=descriptor,
            root=root,
            registry=self.registry,
            config=self.config,
        )
        ctx.data = self.template_data(descriptor)
        return ctx

    async def generate(self, ctx: GenerationContext) -> list[GeneratedFile]:
        """Run the step pipeline and flush the merged file set under ``ctx.root``."""
        await asyncio.to_thread(self.tree.ensure, self.directories, ctx.root, ctx.data)

        runnable = [step for step in self.steps() if step.applies_to(ctx.descriptor)]
        if self.config.concurrent_steps:
            partials = await asyncio.gather(
                *(asyncio.to_thread(step.run, ctx) for step in runnable)
            )
        else:
            partials = [step.run(ctx) for step in runnable]

        for partial in partials:
            ctx.files.extend(partial)
        ctx.files.extend(self.finalize(ctx))

        await ctx.files.flush(ctx.root)
        return ctx.files.items()

    def finalize(self, ctx: GenerationContext) -> list[GeneratedFile]:
        """Runs after the merge with the complete file set; returns extra files."""
        return []

    # -- Reporting -----------------------------------------------------------

    def build_info(self) -> dict[str, Any]:
        return {}

    def render(self, ctx: GenerationContext, template: str, path: str, **extra: Any) -> GeneratedFile:
        """Render ``<template_prefix>/<template>`` into *path*."""
        name = f"{self.template_prefix}/{template}" if self.template_prefix else template
        return ctx.render(name, path, **extra)


def _field_value(descriptor: ProjectDescriptor, field_name: str) -> Any:
    attr = {"platformIdentifier": "platform_identifier"}.get(field_name, field_name)
    return getattr(descriptor, attr, None)
