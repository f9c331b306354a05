"""Cross-platform targets: React Native (TypeScript) and Flutter (Dart)."""

from __future__ import annotations

from typing import Any

from appforge.models import GeneratedFile, Target
from appforge.scaffolder.base import REQUIRES_ENDPOINTS, REQUIRES_SCHEMA, PlatformGenerator, Step
from appforge.scaffolder.context import GenerationContext
from appforge.scaffolder.type_maps import DART, TYPESCRIPT


class ReactNativeGenerator(PlatformGenerator):
    """React Native app with React Navigation, Redux Toolkit and axios."""

    target = Target.REACT_NATIVE
    types = TYPESCRIPT
    template_prefix = "react_native"
    directories = (
        "src/components",
        "src/screens",
        "src/navigation",
        "src/services",
        "src/store",
        "src/models",
        "src/utils",
        "src/assets/images",
        "src/assets/fonts",
        "__tests__",
    )

    def steps(self) -> list[Step]:
        return [
            Step("build-config", self.build_config),
            Step("entry-point", self.entry_point),
            Step("screens", self.screens),
            Step("services", self.services),
            Step("data-models", self.data_models, REQUIRES_SCHEMA),
            Step("api-client", self.api_client, REQUIRES_ENDPOINTS),
            Step("tests", self.tests),
        ]

    def build_info(self) -> dict[str, Any]:
        return {"platform": "react-native", "reactNative": "0.72.6", "node": self.config.node_version}

    def build_config(self, ctx: GenerationContext) -> list[GeneratedFile]:
        return [
            self.render(ctx, "package.json.j2", "package.json"),
            self.render(ctx, "app.json.j2", "app.json"),
            self.render(ctx, "tsconfig.json.j2", "tsconfig.json"),
            self.render(ctx, "babel.config.js.j2", "babel.config.js"),
            self.render(ctx, "metro.config.js.j2", "metro.config.js"),
        ]

    def entry_point(self, ctx: GenerationContext) -> list[GeneratedFile]:
        return [
            self.render(ctx, "index.js.j2", "index.js"),
            self.render(ctx, "App.tsx.j2", "src/App.tsx"),
            self.render(ctx, "AppNavigator.tsx.j2", "src/navigation/AppNavigator.tsx"),
        ]

    def screens(self, ctx: GenerationContext) -> list[GeneratedFile]:
        files = [
            self.render(
                ctx, "Screen.tsx.j2", f"src/screens/{component['entity']}Screen.tsx",
                component=component,
            )
            for component in ctx.data["components"]
        ]
        files.append(self.render(ctx, "Card.tsx.j2", "src/components/Card.tsx"))
        files.append(self.render(ctx, "theme.ts.j2", "src/utils/theme.ts"))
        return files

    def services(self, ctx: GenerationContext) -> list[GeneratedFile]:
        return [
            self.render(ctx, "store.ts.j2", "src/store/index.ts"),
            self.render(ctx, "StorageService.ts.j2", "src/services/StorageService.ts"),
        ]

    def data_models(self, ctx: GenerationContext) -> list[GeneratedFile]:
        files = [
            self.render(
                ctx, "Model.ts.j2", f"src/models/{table['entity']}{self.types.extension}",
                table=table,
            )
            for table in ctx.data["tables"]
        ]
        files.append(self.render(ctx, "models_index.ts.j2", "src/models/index.ts"))
        return files

    def api_client(self, ctx: GenerationContext) -> list[GeneratedFile]:
        return [self.render(ctx, "ApiService.ts.j2", "src/services/ApiService.ts")]

    def tests(self, ctx: GenerationContext) -> list[GeneratedFile]:
        return [self.render(ctx, "App.test.tsx.j2", "__tests__/App.test.tsx")]


class FlutterGenerator(PlatformGenerator):
    """Flutter app with Material 3 navigation and an ``http`` API client."""

    target = Target.FLUTTER
    types = DART
    template_prefix = "flutter"
    directories = (
        "lib/config",
        "lib/models",
        "lib/screens",
        "lib/widgets",
        "lib/services",
        "lib/utils",
        "assets/images",
        "assets/fonts",
        "test",
    )

    def steps(self) -> list[Step]:
        return [
            Step("build-config", self.build_config),
            Step("entry-point", self.entry_point),
            Step("screens", self.screens),
            Step("utilities", self.utilities),
            Step("data-models", self.data_models, REQUIRES_SCHEMA),
            Step("api-client", self.api_client, REQUIRES_ENDPOINTS),
            Step("tests", self.tests),
        ]

    def build_info(self) -> dict[str, Any]:
        return {"platform": "flutter", "dartSdk": ">=3.0.0 <4.0.0"}

    def build_config(self, ctx: GenerationContext) -> list[GeneratedFile]:
        return [
            self.render(ctx, "pubspec.yaml.j2", "pubspec.yaml"),
            self.render(ctx, "analysis_options.yaml.j2", "analysis_options.yaml"),
        ]

    def entry_point(self, ctx: GenerationContext) -> list[GeneratedFile]:
        return [
            self.render(ctx, "main.dart.j2", "lib/main.dart"),
            self.render(ctx, "routes.dart.j2", "lib/config/routes.dart"),
            self.render(ctx, "theme.dart.j2", "lib/config/theme.dart"),
        ]

    def screens(self, ctx: GenerationContext) -> list[GeneratedFile]:
        files = [
            self.render(
                ctx, "screen.dart.j2", f"lib/screens/{component['snake']}_screen.dart",
                component=component,
            )
            for component in ctx.data["components"]
        ]
        files.append(self.render(ctx, "custom_button.dart.j2", "lib/widgets/custom_button.dart"))
        return files

    def utilities(self, ctx: GenerationContext) -> list[GeneratedFile]:
        return [self.render(ctx, "constants.dart.j2", "lib/utils/constants.dart")]

    def data_models(self, ctx: GenerationContext) -> list[GeneratedFile]:
        return [
            self.render(
                ctx, "model.dart.j2", f"lib/models/{table['entity']}{self.types.extension}",
                table=table,
            )
            for table in ctx.data["tables"]
        ]

    def api_client(self, ctx: GenerationContext) -> list[GeneratedFile]:
        return [self.render(ctx, "api_service.dart.j2", "lib/services/api_service.dart")]

    def tests(self, ctx: GenerationContext) -> list[GeneratedFile]:
        return [self.render(ctx, "widget_test.dart.j2", "test/widget_test.dart")]
