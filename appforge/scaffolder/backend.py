"""Backend API targets: Express (knex + winston) and FastAPI (pydantic)."""

from __future__ import annotations

from typing import Any

from appforge.models import GeneratedFile, ProjectDescriptor, Target
from appforge.scaffolder.base import REQUIRES_ENDPOINTS, REQUIRES_SCHEMA, PlatformGenerator, Step
from appforge.scaffolder.context import GenerationContext
from appforge.scaffolder.type_maps import JAVASCRIPT, KNEX_COLUMNS, PYTHON


class ExpressGenerator(PlatformGenerator):
    """Node.js REST API: Express app, knex models and migrations, jest tests."""

    target = Target.BACKEND_EXPRESS
    types = JAVASCRIPT
    template_prefix = "express"
    directories = (
        "src/controllers",
        "src/models",
        "src/routes",
        "src/middleware",
        "src/utils",
        "src/config",
        "src/services",
        "migrations",
        "tests",
    )

    def template_data(self, descriptor: ProjectDescriptor) -> dict[str, Any]:
        data = super().template_data(descriptor)
        for table in data["tables"]:
            for field in table["fields"]:
                field["knex"] = KNEX_COLUMNS.map(field["tag"])
        return data

    def steps(self) -> list[Step]:
        return [
            Step("manifest", self.manifest),
            Step("entry-point", self.entry_point),
            Step("middleware", self.middleware),
            Step("utilities", self.utilities),
            Step("routes", self.routes),
            Step("data-models", self.data_models, REQUIRES_SCHEMA),
            Step("api-handlers", self.api_handlers, REQUIRES_ENDPOINTS),
            Step("tests", self.tests),
        ]

    def build_info(self) -> dict[str, Any]:
        return {"platform": "backend-express", "framework": "express", "node": self.config.node_version}

    def manifest(self, ctx: GenerationContext) -> list[GeneratedFile]:
        return [
            self.render(ctx, "package.json.j2", "package.json"),
            self.render(ctx, "env.example.j2", ".env.example"),
            self.render(ctx, "knexfile.js.j2", "knexfile.js"),
        ]

    def entry_point(self, ctx: GenerationContext) -> list[GeneratedFile]:
        return [
            self.render(ctx, "app.js.j2", "src/app.js"),
            self.render(ctx, "database.js.j2", "src/config/database.js"),
        ]

    def middleware(self, ctx: GenerationContext) -> list[GeneratedFile]:
        return [
            self.render(ctx, "errorHandler.js.j2", "src/middleware/errorHandler.js"),
            self.render(ctx, "requestLogger.js.j2", "src/middleware/requestLogger.js"),
            self.render(ctx, "validation.js.j2", "src/middleware/validation.js"),
        ]

    def utilities(self, ctx: GenerationContext) -> list[GeneratedFile]:
        return [
            self.render(ctx, "logger.js.j2", "src/utils/logger.js"),
            self.render(ctx, "errors.js.j2", "src/utils/errors.js"),
        ]

    def routes(self, ctx: GenerationContext) -> list[GeneratedFile]:
        return [self.render(ctx, "routes.js.j2", "src/routes/index.js")]

    def data_models(self, ctx: GenerationContext) -> list[GeneratedFile]:
        files = []
        for index, table in enumerate(ctx.data["tables"], start=1):
            files.append(self.render(
                ctx, "Model.js.j2", f"src/models/{table['entity']}{self.types.extension}",
                table=table,
            ))
            files.append(self.render(
                ctx, "controller.js.j2", f"src/controllers/{table['camel']}Controller.js",
                table=table,
            ))
            # knex applies migrations in file-name order.
            files.append(self.render(
                ctx, "migration.js.j2", f"migrations/{index:03d}_create_{table['snake']}.js",
                table=table,
            ))
        return files

    def api_handlers(self, ctx: GenerationContext) -> list[GeneratedFile]:
        return [self.render(ctx, "endpoints.js.j2", "src/controllers/endpoints.js")]

    def tests(self, ctx: GenerationContext) -> list[GeneratedFile]:
        return [self.render(ctx, "app.test.js.j2", "tests/app.test.js")]


class FastAPIGenerator(PlatformGenerator):
    """Python REST API: FastAPI app, pydantic models, in-memory CRUD routes."""

    target = Target.BACKEND_FASTAPI
    types = PYTHON
    template_prefix = "fastapi"
    directories = (
        "app/models",
        "app/routes",
        "app/services",
        "app/core",
        "tests",
    )

    def steps(self) -> list[Step]:
        return [
            Step("manifest", self.manifest),
            Step("entry-point", self.entry_point),
            Step("core", self.core),
            Step("services", self.services),
            Step("routes", self.routes),
            Step("data-models", self.data_models, REQUIRES_SCHEMA),
            Step("api-handlers", self.api_handlers, REQUIRES_ENDPOINTS),
            Step("tests", self.tests),
        ]

    def build_info(self) -> dict[str, Any]:
        return {"platform": "backend-fastapi", "framework": "fastapi", "python": self.config.python_version}

    def manifest(self, ctx: GenerationContext) -> list[GeneratedFile]:
        return [
            self.render(ctx, "requirements.txt.j2", "requirements.txt"),
            self.render(ctx, "env.example.j2", ".env.example"),
        ]

    def entry_point(self, ctx: GenerationContext) -> list[GeneratedFile]:
        return [
            self.render(ctx, "main.py.j2", "main.py"),
            ctx.verbatim("app/__init__.py", ""),
        ]

    def core(self, ctx: GenerationContext) -> list[GeneratedFile]:
        return [
            ctx.verbatim("app/core/__init__.py", ""),
            self.render(ctx, "config.py.j2", "app/core/config.py"),
            self.render(ctx, "logging.py.j2", "app/core/logging.py"),
        ]

    def services(self, ctx: GenerationContext) -> list[GeneratedFile]:
        return [
            ctx.verbatim("app/services/__init__.py", ""),
            self.render(ctx, "repository.py.j2", "app/services/repository.py"),
        ]

    def routes(self, ctx: GenerationContext) -> list[GeneratedFile]:
        files = [self.render(ctx, "routes_init.py.j2", "app/routes/__init__.py")]
        files.extend(
            self.render(ctx, "table_routes.py.j2", f"app/routes/{table['snake']}.py", table=table)
            for table in ctx.data["tables"]
        )
        return files

    def data_models(self, ctx: GenerationContext) -> list[GeneratedFile]:
        files = [
            self.render(
                ctx, "model.py.j2", f"app/models/{table['entity']}{self.types.extension}",
                table=table,
            )
            for table in ctx.data["tables"]
        ]
        files.append(self.render(ctx, "models_init.py.j2", "app/models/__init__.py"))
        return files

    def api_handlers(self, ctx: GenerationContext) -> list[GeneratedFile]:
        return [self.render(ctx, "endpoints.py.j2", "app/endpoints.py")]

    def tests(self, ctx: GenerationContext) -> list[GeneratedFile]:
        return [
            ctx.verbatim("tests/__init__.py", ""),
            self.render(ctx, "test_main.py.j2", "tests/test_main.py"),
        ]
