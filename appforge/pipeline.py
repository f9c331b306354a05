"""AppForge generation pipeline and command-line entry point.

Drives one descriptor through the full caller flow:

1. GENERATE -- resolve the target, validate, render the tree into a fresh
   run-exclusive scratch directory.
2. PACKAGE  -- archive the finished tree.
3. CLEANUP  -- delete the scratch directory, on success and on failure.

Partial output is never packaged: a failure in step 1 skips step 2 and the
scratch directory is still removed.

Usage::

    python -m appforge.pipeline descriptor.json --target ios --output ./dist
    python -m appforge.pipeline descriptor.json --seed 42 --no-package
"""

from __future__ import annotations

import asyncio
import json
import shutil
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from appforge.casing import slug
from appforge.config import GeneratorConfig
from appforge.errors import GenerationError
from appforge.models import ProjectDescriptor, Target, resolve_target
from appforge.packager import Packager, PackageResult
from appforge.scaffolder.generator import (
    GenerationResult,
    ProjectGenerator,
    create_scratch_dir,
    remove_scratch_dir,
)
from appforge.utils import (
    console,
    format_bytes,
    format_duration,
    load_json,
    print_error,
    print_header,
    print_panel,
    print_success,
    print_summary_table,
    print_warning,
)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass
class PipelineResult:
    """Outcome of one pipeline run.

    ``generation`` is set once the tree was rendered; ``package`` once it was
    archived.  ``output_dir`` is only set when the tree was kept on disk
    (``package=False``), since the scratch directory is always deleted.
    """

    target: Target
    generation: Optional[GenerationResult] = None
    package: Optional[PackageResult] = None
    output_dir: Optional[Path] = None
    elapsed: float = 0.0

    @property
    def file_count(self) -> int:
        return self.generation.file_count if self.generation else 0

    def summary(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "Target": self.target.value,
            "Files": self.file_count,
            "Duration": format_duration(self.elapsed),
        }
        if self.generation:
            data.update({f"Build {k}": v for k, v in self.generation.build_config.items()})
        if self.package:
            data["Archive"] = str(self.package.archive_path)
            data["Archive size"] = format_bytes(self.package.size_bytes)
            data["SHA-256"] = self.package.sha256[:16] + "..."
        if self.output_dir:
            data["Output"] = str(self.output_dir)
        return data


@dataclass
class CompleteResult:
    """A mobile project plus its backend, generated from one descriptor."""

    mobile: PipelineResult
    backend: PipelineResult
    extras: dict[str, Any] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class GenerationPipeline:
    """Generate -> package -> cleanup for one descriptor at a time.

    Attributes:
        config: Generator, packaging and scratch settings.
        generator: Target dispatcher; one instance is reused for every run.
        packager: Archive writer.
        verbose: Whether to report progress on the shared console.
    """

    def __init__(self, config: GeneratorConfig | None = None, verbose: bool = True) -> None:
        self.config = config or GeneratorConfig()
        self.generator = ProjectGenerator(self.config)
        self.packager = Packager(self.config.packaging)
        self.verbose = verbose

    async def run(
        self,
        descriptor: ProjectDescriptor,
        target: Target | str | None = None,
        package: bool = True,
        output_dir: str | Path | None = None,
    ) -> PipelineResult:
        """Run the full pipeline for *descriptor*.

        Args:
            descriptor: Validated project descriptor.
            target: Overrides ``descriptor.target``.
            package: Archive the tree.  When false the tree is copied to
                *output_dir* (default: the archive directory) instead.
            output_dir: Destination of the unpackaged tree.

        Raises:
            GenerationError: Any generation or packaging failure, after the
                scratch directory has been removed.
        """
        started = time.monotonic()
        if target is None:
            resolved = descriptor.resolved_target()
        else:
            resolved = resolve_target(target, descriptor.framework)
        # Dispatch and validate before the scratch directory exists.
        self.generator.generator_for(resolved).validate(descriptor)

        if self.verbose:
            print_header(f"Generating {descriptor.name} ({resolved.value})")

        result = PipelineResult(target=resolved)
        scratch = await asyncio.to_thread(
            create_scratch_dir, self.config.packaging, slug(descriptor.name) or "project"
        )
        try:
            result.generation = await self.generator.generate(descriptor, scratch, resolved)
            if self.verbose:
                print_success(
                    f"Generated {result.generation.file_count} files "
                    f"({format_bytes(result.generation.total_bytes)})"
                )

            if package:
                result.package = await self.packager.package(scratch, descriptor.name)
                if self.verbose:
                    print_success(f"Packaged {result.package.archive_path}")
            else:
                destination = Path(output_dir or self.config.packaging.archive_dir)
                destination = destination / (slug(descriptor.name) or "project")
                await asyncio.to_thread(_copy_tree, scratch, destination)
                result.output_dir = destination
                if self.verbose:
                    print_success(f"Wrote project tree to {destination}")
        except GenerationError as exc:
            if self.verbose:
                print_error(f"Generation failed for {resolved.value}: {exc}")
            raise
        finally:
            await asyncio.to_thread(remove_scratch_dir, scratch)
            result.elapsed = time.monotonic() - started

        if self.verbose:
            print_summary_table(result.summary(), title=f"{descriptor.name} ({resolved.value})")
        return result

    async def run_complete(
        self,
        descriptor: ProjectDescriptor,
        mobile_target: Target | str = Target.REACT_NATIVE,
        api_framework: str = "express",
        package: bool = True,
    ) -> CompleteResult:
        """Generate one mobile project and one backend from the same descriptor."""
        backend_target = resolve_target("api", api_framework)
        mobile = await self.run(descriptor, mobile_target, package=package)
        backend = await self.run(descriptor, backend_target, package=package)
        extras = {
            "mobileTarget": mobile.target.value,
            "backendTarget": backend.target.value,
            "totalFiles": mobile.file_count + backend.file_count,
        }
        if self.verbose:
            print_panel(
                f"Mobile  : {mobile.target.value} ({mobile.file_count} files)\n"
                f"Backend : {backend.target.value} ({backend.file_count} files)",
                title="[bold]Complete project[/bold]",
            )
        return CompleteResult(mobile=mobile, backend=backend, extras=extras)


def _copy_tree(source: Path, destination: Path) -> None:
    if destination.exists():
        shutil.rmtree(destination)
    shutil.copytree(source, destination)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``python -m appforge.pipeline``."""
    import argparse

    parser = argparse.ArgumentParser(
        description="AppForge -- generate a project tree from a descriptor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python -m appforge.pipeline descriptor.json\n"
            "  python -m appforge.pipeline descriptor.json --target ios -o ./dist\n"
            "  python -m appforge.pipeline descriptor.json --target api --framework fastapi\n"
        ),
    )
    parser.add_argument("descriptor", help="Path to the descriptor JSON file")
    parser.add_argument(
        "--target", "-t",
        default=None,
        help="Target platform (overrides the descriptor's 'target')",
    )
    parser.add_argument(
        "--framework",
        default=None,
        help="Framework for the 'cross-platform' and 'api' targets",
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Archive (or tree) output directory (default: ./output)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for reproducible Xcode project identifiers",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a saved GeneratorConfig JSON file",
    )
    parser.add_argument(
        "--no-package",
        action="store_true",
        help="Write the project tree instead of a zip archive",
    )

    args = parser.parse_args(argv)

    descriptor_path = Path(args.descriptor)
    if not descriptor_path.exists():
        console.print(f"[bold red]Error:[/bold red] Descriptor not found: {descriptor_path}")
        sys.exit(1)

    try:
        config = GeneratorConfig.load(Path(args.config)) if args.config else GeneratorConfig.from_env()
    except (OSError, ValueError) as exc:
        console.print(f"[bold red]Error:[/bold red] Invalid configuration: {exc}")
        sys.exit(1)
    if args.seed is not None:
        config.identifier_seed = args.seed
    if args.output:
        config.packaging.archive_dir = Path(args.output)

    try:
        document = load_json(descriptor_path)
    except json.JSONDecodeError as exc:
        console.print(f"[bold red]Error:[/bold red] Descriptor is not valid JSON: {exc}")
        sys.exit(1)
    if args.framework:
        document["framework"] = args.framework

    try:
        descriptor = ProjectDescriptor.from_document(document)
        pipeline = GenerationPipeline(config)
        asyncio.run(pipeline.run(descriptor, target=args.target, package=not args.no_package))
    except GenerationError as exc:
        print_error(str(exc))
        for detail in getattr(exc, "errors", []):
            print_warning(f"  - {detail}")
        sys.exit(1)

    console.print("[bold green]Generation completed successfully![/bold green]")


if __name__ == "__main__":
    main()
