"""Column and parameter type tags mapped to each platform's types.

Descriptor type tags are caller content and are never rejected: any tag
missing from a table falls back to that platform's string type.  Size
suffixes such as ``varchar(255)`` are ignored when looking a tag up.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Collection, Mapping

from appforge.casing import pascal

VOID_TAGS = frozenset({"", "void", "none", "null", "unit"})


@dataclass(frozen=True)
class TypeMap:
    """Lookup table for one target language."""

    language: str
    types: Mapping[str, str]
    fallback: str
    list_format: str
    void: str
    extension: str = ""

    def map(self, tag: str | None) -> str:
        """Map a type tag; unknown tags map to :attr:`fallback`."""
        return self.types.get(_normalize(tag), self.fallback)

    def map_return(self, tag: str | None, entities: Collection[str] = ()) -> str:
        """Map an endpoint return type.

        ``X[]`` becomes the platform list of ``X``, names of schema entities
        are kept as entity types, and ``void`` maps to the platform's unit
        type.
        """
        raw = (tag or "").strip()
        if raw.endswith("[]"):
            return self.list_format.format(self.map_return(raw[:-2], entities))
        if raw.lower() in VOID_TAGS:
            return self.void
        if pascal(raw) in entities:
            return pascal(raw)
        return self.map(raw)

    def is_known(self, tag: str | None) -> bool:
        return _normalize(tag) in self.types


def _normalize(tag: str | None) -> str:
    key = (tag or "").strip().lower()
    return key.split("(", 1)[0].strip()


# ---------------------------------------------------------------------------
# Per-platform tables
# ---------------------------------------------------------------------------

KOTLIN = TypeMap(
    language="kotlin",
    types={
        "string": "String", "text": "String", "varchar": "String", "char": "String",
        "email": "String", "url": "String", "uuid": "String",
        "int": "Int", "integer": "Int", "smallint": "Int",
        "bigint": "Long", "long": "Long",
        "float": "Float", "double": "Double", "decimal": "Double", "number": "Double",
        "bool": "Boolean", "boolean": "Boolean",
        # Room stores dates as epoch milliseconds without a TypeConverter.
        "date": "Long", "datetime": "Long", "timestamp": "Long",
        "json": "String",
    },
    fallback="String",
    list_format="List<{}>",
    void="Unit",
    extension=".kt",
)

SWIFT = TypeMap(
    language="swift",
    types={
        "string": "String", "text": "String", "varchar": "String", "char": "String",
        "email": "String", "url": "String",
        "uuid": "UUID",
        "int": "Int", "integer": "Int", "smallint": "Int",
        "bigint": "Int64", "long": "Int64",
        "float": "Float", "double": "Double", "decimal": "Decimal", "number": "Double",
        "bool": "Bool", "boolean": "Bool",
        "date": "Date", "datetime": "Date", "timestamp": "Date",
        "json": "Data",
    },
    fallback="String",
    list_format="[{}]",
    void="Void",
    extension=".swift",
)

TYPESCRIPT = TypeMap(
    language="typescript",
    types={
        "string": "string", "text": "string", "varchar": "string", "char": "string",
        "email": "string", "url": "string", "uuid": "string",
        "int": "number", "integer": "number", "smallint": "number",
        "bigint": "number", "long": "number",
        "float": "number", "double": "number", "decimal": "number", "number": "number",
        "bool": "boolean", "boolean": "boolean",
        "date": "string", "datetime": "string", "timestamp": "string",
        "json": "Record<string, unknown>",
    },
    fallback="string",
    list_format="{}[]",
    void="void",
    extension=".ts",
)

DART = TypeMap(
    language="dart",
    types={
        "string": "String", "text": "String", "varchar": "String", "char": "String",
        "email": "String", "url": "String", "uuid": "String",
        "int": "int", "integer": "int", "smallint": "int",
        "bigint": "int", "long": "int",
        "float": "double", "double": "double", "decimal": "double", "number": "double",
        "bool": "bool", "boolean": "bool",
        "date": "DateTime", "datetime": "DateTime", "timestamp": "DateTime",
        "json": "Map<String, dynamic>",
    },
    fallback="String",
    list_format="List<{}>",
    void="void",
    extension=".dart",
)

PYTHON = TypeMap(
    language="python",
    types={
        "string": "str", "text": "str", "varchar": "str", "char": "str",
        "email": "str", "url": "str",
        "uuid": "UUID",
        "int": "int", "integer": "int", "smallint": "int",
        "bigint": "int", "long": "int",
        "float": "float", "double": "float", "decimal": "Decimal", "number": "float",
        "bool": "bool", "boolean": "bool",
        "date": "date", "datetime": "datetime", "timestamp": "datetime",
        "json": "dict",
    },
    fallback="str",
    list_format="list[{}]",
    void="None",
    extension=".py",
)

# JavaScript (Express) models document field types with JSDoc.
JAVASCRIPT = TypeMap(
    language="javascript",
    types=dict(TYPESCRIPT.types, json="Object"),
    fallback="string",
    list_format="Array<{}>",
    void="void",
    extension=".js",
)

# knex schema-builder column methods used by Express migrations.
KNEX_COLUMNS = TypeMap(
    language="knex",
    types={
        "string": "string", "varchar": "string", "char": "string", "email": "string",
        "url": "string", "text": "text",
        "int": "integer", "integer": "integer", "smallint": "integer",
        "bigint": "bigInteger", "long": "bigInteger",
        "float": "float", "double": "double", "decimal": "decimal", "number": "decimal",
        "bool": "boolean", "boolean": "boolean",
        "date": "date", "datetime": "timestamp", "timestamp": "timestamp",
        "json": "json", "uuid": "uuid",
    },
    fallback="string",
    list_format="{}",
    void="",
)

