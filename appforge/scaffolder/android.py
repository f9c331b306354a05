"""Android target: Kotlin app module with Gradle, Room and Retrofit."""

from __future__ import annotations

from typing import Any

from appforge.models import ANDROID_PACKAGE_PATTERN, GeneratedFile, ProjectDescriptor, Target
from appforge.scaffolder.base import REQUIRES_ENDPOINTS, REQUIRES_SCHEMA, PlatformGenerator, Step
from appforge.scaffolder.context import GenerationContext
from appforge.scaffolder.type_maps import KOTLIN

_SRC = "app/src/main/java/{{ package_path }}"
_RES = "app/src/main/res"


class AndroidGenerator(PlatformGenerator):
    """Generates a single-module Android Studio project."""

    target = Target.ANDROID
    types = KOTLIN
    template_prefix = "android"
    required_fields = ("platformIdentifier",)
    directories = (
        _SRC,
        f"{_SRC}/ui",
        f"{_SRC}/utils",
        f"{_RES}/layout",
        f"{_RES}/values",
        f"{_RES}/menu",
        f"{_RES}/navigation",
        f"{_RES}/xml",
        f"{_RES}/drawable",
        f"{_RES}/mipmap-hdpi",
        f"{_RES}/mipmap-mdpi",
        f"{_RES}/mipmap-xhdpi",
        f"{_RES}/mipmap-xxhdpi",
        f"{_RES}/mipmap-xxxhdpi",
        "app/src/test/java",
        "app/src/androidTest/java",
    )

    def validate_fields(self, descriptor: ProjectDescriptor) -> list[str]:
        identifier = descriptor.platform_identifier
        if identifier and not ANDROID_PACKAGE_PATTERN.match(identifier):
            return [f"platformIdentifier {identifier!r} is not a valid Android package name"]
        return []

    def steps(self) -> list[Step]:
        return [
            Step("build-config", self.build_config),
            Step("manifest", self.manifest),
            Step("entry-point", self.entry_point),
            Step("screens", self.screens),
            Step("resources", self.resources),
            Step("data-models", self.data_models, REQUIRES_SCHEMA),
            Step("api-client", self.api_client, REQUIRES_ENDPOINTS),
            Step("utilities", self.utilities),
        ]

    def build_info(self) -> dict[str, Any]:
        return {"platform": "android", **self.config.android.as_dict()}

    # -- Steps ---------------------------------------------------------------

    def build_config(self, ctx: GenerationContext) -> list[GeneratedFile]:
        return [
            self.render(ctx, "settings.gradle.j2", "settings.gradle"),
            self.render(ctx, "build.gradle.j2", "build.gradle"),
            self.render(ctx, "gradle.properties.j2", "gradle.properties"),
            self.render(ctx, "app_build.gradle.j2", "app/build.gradle"),
            self.render(ctx, "proguard-rules.pro.j2", "app/proguard-rules.pro"),
        ]

    def manifest(self, ctx: GenerationContext) -> list[GeneratedFile]:
        return [self.render(ctx, "AndroidManifest.xml.j2", "app/src/main/AndroidManifest.xml")]

    def entry_point(self, ctx: GenerationContext) -> list[GeneratedFile]:
        src = _source_dir(ctx)
        return [
            self.render(ctx, "MainActivity.kt.j2", f"{src}/MainActivity.kt"),
            self.render(ctx, "activity_main.xml.j2", f"{_RES}/layout/activity_main.xml"),
        ]

    def screens(self, ctx: GenerationContext) -> list[GeneratedFile]:
        src = _source_dir(ctx)
        files = []
        for component in ctx.data["components"]:
            files.append(self.render(
                ctx, "Fragment.kt.j2", f"{src}/ui/{component['entity']}Fragment.kt",
                component=component,
            ))
            files.append(self.render(
                ctx, "fragment.xml.j2", f"{_RES}/layout/fragment_{component['snake']}.xml",
                component=component,
            ))
        files.append(self.render(ctx, "nav_graph.xml.j2", f"{_RES}/navigation/nav_graph.xml"))
        files.append(self.render(ctx, "bottom_nav_menu.xml.j2", f"{_RES}/menu/bottom_nav_menu.xml"))
        return files

    def resources(self, ctx: GenerationContext) -> list[GeneratedFile]:
        return [
            self.render(ctx, "strings.xml.j2", f"{_RES}/values/strings.xml"),
            self.render(ctx, "colors.xml.j2", f"{_RES}/values/colors.xml"),
            self.render(ctx, "themes.xml.j2", f"{_RES}/values/themes.xml"),
            self.render(ctx, "backup_rules.xml.j2", f"{_RES}/xml/backup_rules.xml"),
            self.render(
                ctx, "data_extraction_rules.xml.j2", f"{_RES}/xml/data_extraction_rules.xml"
            ),
        ]

    def data_models(self, ctx: GenerationContext) -> list[GeneratedFile]:
        src = _source_dir(ctx)
        files = []
        for table in ctx.data["tables"]:
            files.append(self.render(
                ctx, "Model.kt.j2", f"{src}/models/{table['entity']}{self.types.extension}",
                table=table,
            ))
            files.append(self.render(
                ctx, "Dao.kt.j2", f"{src}/database/{table['entity']}Dao.kt", table=table,
            ))
        # Room rejects a database without entities.
        if ctx.data["tables"]:
            files.append(self.render(ctx, "AppDatabase.kt.j2", f"{src}/database/AppDatabase.kt"))
        return files

    def api_client(self, ctx: GenerationContext) -> list[GeneratedFile]:
        return [self.render(ctx, "ApiService.kt.j2", f"{_source_dir(ctx)}/api/ApiService.kt")]

    def utilities(self, ctx: GenerationContext) -> list[GeneratedFile]:
        return [self.render(ctx, "Utils.kt.j2", f"{_source_dir(ctx)}/utils/Utils.kt")]


def _source_dir(ctx: GenerationContext) -> str:
    return f"app/src/main/java/{ctx.data['package_path']}"
