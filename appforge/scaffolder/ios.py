"""iOS target: UIKit app with an Xcode project whose pbxproj is a reference graph.

Every object in ``project.pbxproj`` is keyed by an identifier from the run's
``SymbolTable``.  The fixed roles (project, target, groups, build phases,
configurations) are allocated when the context is created; one
``file-ref:`` role per project file and one ``build-file:`` role per compiled
source or bundled resource are registered in :meth:`IOSGenerator.finalize`,
once the complete file list is known.  The pbxproj template can only obtain
identifiers through ``ref(role)``, so it never emits an identifier that is
not in the table.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any, Optional

from appforge.models import IOS_BUNDLE_PATTERN, GeneratedFile, ProjectDescriptor, Target
from appforge.scaffolder.base import REQUIRES_ENDPOINTS, REQUIRES_SCHEMA, PlatformGenerator, Step
from appforge.scaffolder.context import GenerationContext
from appforge.scaffolder.identifiers import (
    XCODE_GROUP_ROLES,
    XCODE_PROJECT_ROLES,
    IdentifierGraph,
    SymbolTable,
    build_file_role,
    file_ref_role,
)
from appforge.scaffolder.type_maps import SWIFT

# Extension -> (lastKnownFileType, build phase or None)
_FILE_TYPES: dict[str, tuple[str, Optional[str]]] = {
    ".swift": ("sourcecode.swift", "Sources"),
    ".storyboard": ("file.storyboard", "Resources"),
    ".xcassets": ("folder.assetcatalog", "Resources"),
    ".plist": ("text.plist.xml", None),
}


@dataclass(frozen=True)
class ProjectEntry:
    """A file (or asset catalog) the Xcode project references."""

    path: str
    group: str
    file_type: str
    phase: Optional[str]

    @property
    def name(self) -> str:
        return PurePosixPath(self.path).name

    @property
    def ref_role(self) -> str:
        return file_ref_role(self.path)

    @property
    def build_role(self) -> str:
        return build_file_role(self.path)


class IOSGenerator(PlatformGenerator):
    """Generates an Xcode project plus its Swift sources."""

    target = Target.IOS
    types = SWIFT
    template_prefix = "ios"
    required_fields = ("platformIdentifier",)
    directories = (
        "{{ name }}.xcodeproj",
        "{{ name }}",
        "{{ name }}/Models",
        "{{ name }}/Views",
        "{{ name }}/ViewModels",
        "{{ name }}/Services",
        "{{ name }}/Core Data",
        "{{ name }}/Utils",
        "{{ name }}/Resources",
        "{{ name }}/Preview Content",
        "{{ name }}/Assets.xcassets",
    )

    def validate_fields(self, descriptor: ProjectDescriptor) -> list[str]:
        identifier = descriptor.platform_identifier
        if identifier and not IOS_BUNDLE_PATTERN.match(identifier):
            return [f"platformIdentifier {identifier!r} is not a valid bundle identifier"]
        return []

    def create_context(self, descriptor: ProjectDescriptor, root: Path) -> GenerationContext:
        ctx = super().create_context(descriptor, root)
        ctx.symbols = SymbolTable.seeded(self.config.identifier_seed)
        ctx.symbols.allocate(XCODE_PROJECT_ROLES + tuple(XCODE_GROUP_ROLES.values()))
        return ctx

    def steps(self) -> list[Step]:
        return [
            Step("entry-point", self.entry_point),
            Step("views", self.views),
            Step("resources", self.resources),
            Step("core-data", self.core_data),
            Step("utilities", self.utilities),
            Step("data-models", self.data_models, REQUIRES_SCHEMA),
            Step("api-client", self.api_client, REQUIRES_ENDPOINTS),
        ]

    def build_info(self) -> dict[str, Any]:
        return {"platform": "ios", **self.config.ios.as_dict()}

    # -- Steps ---------------------------------------------------------------

    def entry_point(self, ctx: GenerationContext) -> list[GeneratedFile]:
        app = ctx.data["name"]
        return [
            self.render(ctx, "AppDelegate.swift.j2", f"{app}/AppDelegate.swift"),
            self.render(ctx, "SceneDelegate.swift.j2", f"{app}/SceneDelegate.swift"),
            self.render(ctx, "Info.plist.j2", f"{app}/Info.plist"),
        ]

    def views(self, ctx: GenerationContext) -> list[GeneratedFile]:
        app = ctx.data["name"]
        files = [self.render(ctx, "MainTabBarController.swift.j2", f"{app}/Views/MainTabBarController.swift")]
        for component in ctx.data["components"]:
            entity = component["entity"]
            files.append(self.render(
                ctx, "ViewController.swift.j2", f"{app}/Views/{entity}ViewController.swift",
                component=component,
            ))
            files.append(self.render(
                ctx, "ViewModel.swift.j2", f"{app}/ViewModels/{entity}ViewModel.swift",
                component=component,
            ))
        return files

    def resources(self, ctx: GenerationContext) -> list[GeneratedFile]:
        app = ctx.data["name"]
        assets = f"{app}/Assets.xcassets"
        return [
            self.render(ctx, "LaunchScreen.storyboard.j2", f"{app}/Resources/LaunchScreen.storyboard"),
            self.render(ctx, "Contents.json.j2", f"{assets}/Contents.json"),
            self.render(ctx, "AppIcon.json.j2", f"{assets}/AppIcon.appiconset/Contents.json"),
            self.render(ctx, "AccentColor.json.j2", f"{assets}/AccentColor.colorset/Contents.json"),
            self.render(
                ctx, "Contents.json.j2", f"{app}/Preview Content/Preview Assets.xcassets/Contents.json"
            ),
        ]

    def core_data(self, ctx: GenerationContext) -> list[GeneratedFile]:
        app = ctx.data["name"]
        return [self.render(ctx, "CoreDataStack.swift.j2", f"{app}/Core Data/CoreDataStack.swift")]

    def utilities(self, ctx: GenerationContext) -> list[GeneratedFile]:
        app = ctx.data["name"]
        return [self.render(ctx, "Extensions.swift.j2", f"{app}/Utils/Extensions.swift")]

    def data_models(self, ctx: GenerationContext) -> list[GeneratedFile]:
        app = ctx.data["name"]
        return [
            self.render(
                ctx, "Model.swift.j2", f"{app}/Models/{table['entity']}{self.types.extension}",
                table=table,
            )
            for table in ctx.data["tables"]
        ]

    def api_client(self, ctx: GenerationContext) -> list[GeneratedFile]:
        app = ctx.data["name"]
        return [self.render(ctx, "APIService.swift.j2", f"{app}/Services/APIService.swift")]

    # -- Reference graph -----------------------------------------------------

    def finalize(self, ctx: GenerationContext) -> list[GeneratedFile]:
        """Register per-file roles and render ``project.pbxproj``."""
        app = ctx.data["name"]
        entries = project_entries(ctx.files.paths(), app)
        for entry in entries:
            ctx.symbols.register(entry.ref_role)
            if entry.phase:
                ctx.symbols.register(entry.build_role)

        graph = IdentifierGraph(ctx.symbols)
        groups = [
            {
                "role": role,
                "path": folder,
                "children": [
                    {"role": e.ref_role, "name": e.name} for e in entries if e.group == folder
                ],
            }
            for folder, role in XCODE_GROUP_ROLES.items()
        ]
        app_children = [{"role": e.ref_role, "name": e.name} for e in entries if not e.group]
        app_children += [{"role": g["role"], "name": g["path"]} for g in groups]

        return [self.render(
            ctx, "project.pbxproj.j2", f"{app}.xcodeproj/project.pbxproj",
            ref=graph.ref,
            entries=entries,
            build_entries=[e for e in entries if e.phase],
            groups=groups,
            app_children=app_children,
        )]


def project_entries(paths: list[str], app: str) -> list[ProjectEntry]:
    """Map generated paths under ``<app>/`` to project entries, sorted by path.

    Files inside an asset catalog are represented by the catalog itself.
    """
    found: dict[str, ProjectEntry] = {}
    prefix = f"{app}/"
    for path in paths:
        if not path.startswith(prefix):
            continue
        rel = PurePosixPath(path[len(prefix):])
        catalog = next(
            (i for i, part in enumerate(rel.parts) if part.endswith(".xcassets")), None
        )
        if catalog is not None:
            rel = PurePosixPath(*rel.parts[: catalog + 1])
        file_type, phase = _FILE_TYPES.get(rel.suffix, ("file", "Resources"))
        group = rel.parts[0] if len(rel.parts) > 1 else ""
        found.setdefault(rel.as_posix(), ProjectEntry(rel.as_posix(), group, file_type, phase))
    return [found[key] for key in sorted(found)]
