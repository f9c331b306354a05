"""Pydantic v2 models for the AppForge project descriptor.

Defines the validated input a generation run consumes (``ProjectDescriptor``
and its nested sections), the target enumeration, and the ``GeneratedFile``
record produced by generator steps.  Validation happens once, at the
boundary, in :meth:`ProjectDescriptor.from_document`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError as PydanticValidationError,
    field_validator,
    model_validator,
)

from appforge.errors import UnsupportedTargetError, ValidationError
from appforge.casing import camel, pascal


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class Target(str, Enum):
    """Platforms a descriptor can be generated for."""
    ANDROID = "android"
    IOS = "ios"
    REACT_NATIVE = "react-native"
    FLUTTER = "flutter"
    BACKEND_EXPRESS = "backend-express"
    BACKEND_FASTAPI = "backend-fastapi"


class HTTPMethod(str, Enum):
    """Supported HTTP methods for API endpoints."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


# Umbrella target -> (default framework, framework -> concrete target)
UMBRELLA_TARGETS: dict[str, tuple[str, dict[str, Target]]] = {
    "cross-platform": (
        "react-native",
        {"react-native": Target.REACT_NATIVE, "flutter": Target.FLUTTER},
    ),
    "api": (
        "express",
        {"express": Target.BACKEND_EXPRESS, "fastapi": Target.BACKEND_FASTAPI},
    ),
}

BACKEND_TARGETS = (Target.BACKEND_EXPRESS, Target.BACKEND_FASTAPI)

ANDROID_PACKAGE_PATTERN = re.compile(r"^[a-z][a-z0-9_]*(\.[a-z0-9_]+)+$")
IOS_BUNDLE_PATTERN = re.compile(r"^[A-Za-z0-9.-]+\.[A-Za-z0-9.-]+$")
PROJECT_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

_PATH_PARAM = re.compile(r"^(?::(\w+)|\{(\w+)\})$")
_NON_IDENTIFIER = re.compile(r"\W")


def resolve_target(value: str | Target, framework: str | None = None) -> Target:
    """Resolve a target name (or umbrella name plus framework) to a ``Target``.

    Raises:
        UnsupportedTargetError: If *value* names no supported platform.
    """
    if isinstance(value, Target):
        return value
    key = (value or "").strip().lower()
    if key in UMBRELLA_TARGETS:
        default, frameworks = UMBRELLA_TARGETS[key]
        chosen = (framework or default).strip().lower()
        if chosen in frameworks:
            return frameworks[chosen]
        raise UnsupportedTargetError(f"{key}/{chosen}", [f"{key}/{f}" for f in frameworks])
    try:
        return Target(key)
    except ValueError:
        raise UnsupportedTargetError(value, [t.value for t in Target]) from None


# ---------------------------------------------------------------------------
# Descriptor sections
# ---------------------------------------------------------------------------

class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class Column(_Frozen):
    """A single typed column of a table."""
    name: str = Field(..., description="Column name as it appears in the schema")
    type: str = Field(default="string", description="Caller-supplied type tag, e.g. 'decimal'")


class Table(_Frozen):
    """A table (entity) of the database schema."""
    name: str = Field(..., description="Table name, e.g. 'order_item'")
    columns: list[Column] = Field(default_factory=list, description="Ordered columns")

    @property
    def entity_name(self) -> str:
        return pascal(self.name)


class DatabaseSchema(_Frozen):
    """Ordered list of tables."""
    tables: list[Table] = Field(default_factory=list)


class Parameter(_Frozen):
    """An endpoint parameter."""
    name: str = Field(..., description="Parameter name")
    type: str = Field(default="string", description="Type tag, mapped per platform")


class ApiEndpoint(_Frozen):
    """A REST endpoint the generated client/server should expose."""
    path: str = Field(..., description="URL path, e.g. '/users/{id}'")
    method: HTTPMethod = Field(default=HTTPMethod.GET, description="HTTP method")
    name: Optional[str] = Field(default=None, description="Explicit operation name")
    parameters: list[Parameter] = Field(default_factory=list)
    return_type: str = Field(
        default="void",
        validation_alias=AliasChoices("returnType", "return_type"),
        description="Return type name; a model name, a primitive tag or 'X[]'",
    )

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    @property
    def operation_name(self) -> str:
        """``camel(name)`` or a name derived from method and path.

        ``GET /users/{id}`` -> ``getUsersById``.
        """
        if self.name:
            return camel(self.name)
        words: list[str] = [self.method.value.lower()]
        for segment in self.path.strip("/").split("/"):
            if not segment:
                continue
            match = _PATH_PARAM.match(segment)
            if match:
                words.append("by_" + (match.group(1) or match.group(2)))
            else:
                words.append(segment)
        return camel("_".join(words))

    @property
    def path_parameters(self) -> list[str]:
        names = []
        for segment in self.path.split("/"):
            match = _PATH_PARAM.match(segment)
            if match:
                names.append(match.group(1) or match.group(2))
        return names

    def parameter_location(self, param: Parameter) -> str:
        """Return ``path``, ``query`` or ``body`` for *param*."""
        if param.name in self.path_parameters:
            return "path"
        if self.method in (HTTPMethod.GET, HTTPMethod.DELETE):
            return "query"
        return "body"

    @property
    def has_body(self) -> bool:
        return any(self.parameter_location(p) == "body" for p in self.parameters)

    @property
    def express_path(self) -> str:
        """The path with ``{param}`` segments rewritten to ``:param``."""
        return re.sub(r"\{(\w+)\}", r":\1", self.path)

    @property
    def template_path(self) -> str:
        """The path with ``:param`` segments rewritten to ``{param}``."""
        return re.sub(r":(\w+)", r"{\1}", self.path)


class UIComponent(_Frozen):
    """A UI component (screen) the mobile targets should scaffold."""
    name: str = Field(..., description="Component name, e.g. 'order_list'")
    type: str = Field(default="screen", description="Component kind")


class Metadata(_Frozen):
    """Free-form project metadata."""
    author: str = Field(default="")
    description: str = Field(default="")


# ---------------------------------------------------------------------------
# ProjectDescriptor
# ---------------------------------------------------------------------------

class ProjectDescriptor(_Frozen):
    """Immutable, validated input of a generation run."""

    name: str = Field(
        ...,
        validation_alias=AliasChoices("name", "projectName"),
        description="Project name",
    )
    platform_identifier: str = Field(
        default="",
        validation_alias=AliasChoices(
            "platformIdentifier", "platform_identifier", "packageName", "bundleIdentifier"
        ),
        description="Package name (Android) / bundle identifier (iOS)",
    )
    target: str = Field(default="", description="Requested target platform")
    framework: Optional[str] = Field(default=None, description="Sub-variant for umbrella targets")
    metadata: Metadata = Field(
        default_factory=Metadata,
        validation_alias=AliasChoices("metadata", "userRequirements"),
    )
    database_schema: Optional[DatabaseSchema] = Field(
        default=None,
        validation_alias=AliasChoices("databaseSchema", "database_schema"),
    )
    api_endpoints: Optional[list[ApiEndpoint]] = Field(
        default=None,
        validation_alias=AliasChoices("apiEndpoints", "api_endpoints"),
    )
    ui_components: list[UIComponent] = Field(
        default_factory=list,
        validation_alias=AliasChoices("uiComponents", "ui_components"),
    )

    @field_validator("name", "platform_identifier")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()

    @model_validator(mode="after")
    def _check_identifiers(self) -> "ProjectDescriptor":
        problems: list[str] = []
        if not self.name or not pascal(self.name):
            problems.append("name must be non-empty")
        elif "/" in self.name:
            problems.append(f"name {self.name!r} must not contain '/'")
        else:
            _check_identifier(problems, f"name {self.name!r}", self.code_name)

        seen_tables: dict[str, str] = {}
        for table in self.tables:
            normalized = pascal(table.name)
            _check_identifier(problems, f"table {table.name!r}", normalized)
            if normalized in seen_tables:
                problems.append(
                    f"tables {seen_tables[normalized]!r} and {table.name!r} "
                    f"collide as {normalized!r}"
                )
            seen_tables.setdefault(normalized, table.name)

            seen_columns: dict[str, str] = {}
            for column in table.columns:
                field_name = camel(column.name)
                _check_identifier(problems, f"column {table.name}.{column.name!r}", field_name)
                if field_name in seen_columns:
                    problems.append(
                        f"columns {seen_columns[field_name]!r} and {column.name!r} of "
                        f"table {table.name!r} collide as {field_name!r}"
                    )
                seen_columns.setdefault(field_name, column.name)

        seen_ops: set[str] = set()
        for endpoint in self.endpoints:
            op = endpoint.operation_name
            _check_identifier(problems, f"endpoint {endpoint.method.value} {endpoint.path}", op)
            if op in seen_ops:
                problems.append(f"endpoint operation name {op!r} is used more than once")
            seen_ops.add(op)

        seen_components: dict[str, str] = {}
        for component in self.ui_components:
            normalized = pascal(component.name)
            _check_identifier(problems, f"ui component {component.name!r}", normalized)
            if normalized in seen_components:
                problems.append(
                    f"ui components {seen_components[normalized]!r} and {component.name!r} "
                    f"collide as {normalized!r}"
                )
            seen_components.setdefault(normalized, component.name)

        if problems:
            raise ValueError("; ".join(problems))
        return self

    # -- Construction --------------------------------------------------------

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "ProjectDescriptor":
        """Validate a raw descriptor document (camelCase keys, extras ignored).

        Raises:
            ValidationError: With one message per offending field.
        """
        try:
            return cls.model_validate(document)
        except PydanticValidationError as exc:
            errors = [
                f"{'.'.join(str(p) for p in err['loc']) or 'descriptor'}: {err['msg']}"
                for err in exc.errors()
            ]
            raise ValidationError("Invalid project descriptor", errors) from exc

    # -- Convenience accessors ----------------------------------------------

    @property
    def tables(self) -> list[Table]:
        return list(self.database_schema.tables) if self.database_schema else []

    @property
    def endpoints(self) -> list[ApiEndpoint]:
        return list(self.api_endpoints or [])

    @property
    def has_schema(self) -> bool:
        return self.database_schema is not None

    @property
    def has_endpoints(self) -> bool:
        return bool(self.api_endpoints)

    @property
    def code_name(self) -> str:
        """``pascal(name)`` without the characters no identifier may hold.

        ``name`` stays free text for display strings; class, module and
        package names are derived from this instead.
        """
        return _NON_IDENTIFIER.sub("", pascal(self.name))

    @property
    def package_identifier(self) -> str:
        """The platform identifier, or ``com.example.<name>`` when absent."""
        if self.platform_identifier:
            return self.platform_identifier
        return "com.example." + self.code_name.lower()

    def resolved_target(self) -> Target:
        return resolve_target(self.target, self.framework)


def _check_identifier(problems: list[str], label: str, normalized: str) -> None:
    if not normalized or not normalized[0].isalpha() or not normalized.isidentifier():
        problems.append(f"{label} does not normalize to a valid identifier ({normalized!r})")


# ---------------------------------------------------------------------------
# Generation outputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GeneratedFile:
    """A single emitted file, relative to the scratch root."""
    path: str
    content: str
    templated: bool = True

    @property
    def size(self) -> int:
        return len(self.content.encode("utf-8"))


class ValidationReport(BaseModel):
    """Non-raising validation summary for a descriptor document."""
    is_valid: bool = True
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
