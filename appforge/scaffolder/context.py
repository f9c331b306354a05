"""Per-run generation state and template data builders.

A ``GenerationContext`` is created for exactly one generator run and is
never shared: it holds the validated descriptor, the scratch root, the
template registry, the optional symbol table and the ``FileSet`` that
accumulates emitted files until they are flushed to disk.
"""

from __future__ import annotations

import asyncio
import errno
import os
import re
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Iterable, Iterator, Optional

from appforge.casing import camel, pascal, slug, snake
from appforge.config import GeneratorConfig
from appforge.errors import GenerationError, GenerationIOError
from appforge.models import ApiEndpoint, GeneratedFile, ProjectDescriptor, Table
from appforge.scaffolder.identifiers import SymbolTable
from appforge.scaffolder.templates import TemplateRegistry
from appforge.scaffolder.type_maps import TypeMap
from appforge.utils import write_file

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


# ---------------------------------------------------------------------------
# FileSet
# ---------------------------------------------------------------------------


class FileSet:
    """Ordered, path-unique collection of ``GeneratedFile`` entries."""

    def __init__(self, files: Iterable[GeneratedFile] = ()) -> None:
        self._files: dict[str, GeneratedFile] = {}
        self.extend(files)

    def add(self, generated: GeneratedFile) -> None:
        if generated.path in self._files:
            raise GenerationError(f"Duplicate output path: {generated.path}")
        self._files[generated.path] = generated

    def extend(self, files: Iterable[GeneratedFile]) -> None:
        for generated in files:
            self.add(generated)

    def paths(self) -> list[str]:
        return list(self._files)

    def items(self) -> list[GeneratedFile]:
        return list(self._files.values())

    def get(self, path: str) -> Optional[GeneratedFile]:
        return self._files.get(path)

    def __contains__(self, path: object) -> bool:
        return path in self._files

    def __iter__(self) -> Iterator[GeneratedFile]:
        return iter(list(self._files.values()))

    def __len__(self) -> int:
        return len(self._files)

    async def flush(self, root: Path) -> None:
        """Write every file under *root*, creating parent directories.

        Raises:
            GenerationIOError: A path escapes *root* or a write fails.
        """
        for generated in self._files.values():
            rel = PurePosixPath(generated.path)
            target = root / rel
            if rel.is_absolute() or ".." in rel.parts:
                raise GenerationIOError(
                    target, OSError(errno.EINVAL, os.strerror(errno.EINVAL), generated.path)
                )
            try:
                await asyncio.to_thread(write_file, target, generated.content)
            except OSError as exc:
                raise GenerationIOError(target, exc) from exc


# ---------------------------------------------------------------------------
# GenerationContext
# ---------------------------------------------------------------------------


@dataclass
class GenerationContext:
    """Scratch state owned by a single generation run."""

    descriptor: ProjectDescriptor
    root: Path
    registry: TemplateRegistry
    config: GeneratorConfig = field(default_factory=GeneratorConfig)
    symbols: Optional[SymbolTable] = None
    files: FileSet = field(default_factory=FileSet)
    data: dict[str, Any] = field(default_factory=dict)

    def render(self, template: str, path: str, **extra: Any) -> GeneratedFile:
        """Compile *template* against the run's data plus *extra*."""
        content = self.registry.compile(template, {**self.data, **extra})
        return GeneratedFile(path=path, content=content, templated=True)

    def verbatim(self, path: str, content: str) -> GeneratedFile:
        return GeneratedFile(path=path, content=content, templated=False)


# ---------------------------------------------------------------------------
# Template data builders
# ---------------------------------------------------------------------------


def project_data(
    descriptor: ProjectDescriptor, types: TypeMap, config: GeneratorConfig
) -> dict[str, Any]:
    """Build the data context shared by every template of one run."""
    tables = [table_data(t, types) for t in descriptor.tables]
    entities = {t["entity"] for t in tables}
    identifier = descriptor.package_identifier
    return {
        "name": descriptor.name,
        "pascal_name": descriptor.code_name,
        "camel_name": camel(descriptor.code_name),
        "snake_name": snake(descriptor.code_name),
        "slug_name": slug(descriptor.name),
        "identifier": identifier,
        "package_path": identifier.replace(".", "/"),
        "description": descriptor.metadata.description or f"{descriptor.name} application",
        "author": descriptor.metadata.author or "AppForge",
        "tables": tables,
        "entities": sorted(entities),
        "endpoints": [endpoint_data(e, types, entities) for e in descriptor.endpoints],
        "components": component_data(descriptor),
        "has_schema": descriptor.has_schema,
        "has_endpoints": descriptor.has_endpoints,
        "config": config,
    }


def table_data(table: Table, types: TypeMap) -> dict[str, Any]:
    fields = [
        {
            "name": camel(column.name),
            "column": column.name,
            "snake": snake(camel(column.name)),
            "tag": column.type,
            "type": types.map(column.type),
        }
        for column in table.columns
    ]
    entity = table.entity_name
    return {
        "name": table.name,
        "entity": entity,
        "camel": camel(table.name),
        "snake": snake(entity),
        "slug": slug(table.name),
        "fields": fields,
        "id_field": next((f for f in fields if f["name"] == "id"), None),
    }


def endpoint_data(
    endpoint: ApiEndpoint, types: TypeMap, entities: Iterable[str] = ()
) -> dict[str, Any]:
    entities = set(entities)
    params = [
        {
            "name": camel(p.name),
            "snake": snake(camel(p.name)),
            "wire": p.name,
            "type": types.map(p.type),
            "location": endpoint.parameter_location(p),
        }
        for p in endpoint.parameters
    ]
    declared = {p["wire"] for p in params}
    # Path placeholders missing from the parameter list become string parameters.
    missing = [
        {
            "name": camel(name),
            "snake": snake(camel(name)),
            "wire": name,
            "type": types.fallback,
            "location": "path",
        }
        for name in endpoint.path_parameters
        if name not in declared
    ]
    params = missing + params
    return_type = types.map_return(endpoint.return_type, entities)
    raw_return = endpoint.return_type.strip()
    returns_list = raw_return.endswith("[]")
    item = pascal(raw_return[:-2] if returns_list else raw_return)
    return {
        "operation": endpoint.operation_name,
        "snake": snake(endpoint.operation_name),
        "method": endpoint.method.value,
        "path": endpoint.path,
        "express_path": endpoint.express_path,
        "template_path": endpoint.template_path,
        "swift_path": _interpolate(endpoint.template_path, "\\(%s)"),
        "js_path": _interpolate(endpoint.template_path, "${%s}"),
        "fastapi_path": _interpolate(endpoint.template_path, "{%s}", snake),
        "params": params,
        "path_params": [p for p in params if p["location"] == "path"],
        "query_params": [p for p in params if p["location"] == "query"],
        "body_params": [p for p in params if p["location"] == "body"],
        "has_body": endpoint.has_body,
        "return_type": return_type,
        "returns_void": return_type == types.void,
        "returns_list": returns_list,
        # Entity named by the return type (or its list element), if any.
        "return_entity": item if item in entities else None,
    }


def component_data(descriptor: ProjectDescriptor) -> list[dict[str, Any]]:
    """UI components to scaffold; a ``Home`` screen when none are given."""
    names = [c.name for c in descriptor.ui_components] or ["home"]
    components = []
    for name in names:
        entity = pascal(name)
        components.append({
            "name": name,
            "entity": entity,
            "camel": camel(name),
            "snake": snake(entity),
            "title": " ".join(w.capitalize() for w in snake(entity).split("_")),
        })
    return components


def _interpolate(path: str, pattern: str, transform=None) -> str:
    """Rewrite ``{param}`` placeholders as ``pattern % camel(param)``."""
    def replace(match: re.Match) -> str:
        name = camel(match.group(1))
        return pattern % (transform(name) if transform else name)
    return _PLACEHOLDER.sub(replace, path)
