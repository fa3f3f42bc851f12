"""
Type tables shared by the field and procedure analyzers.

- PYTHON_TYPES: semantic kind -> target type expression
- SQL_COLUMN_TYPES: semantic kind -> storage column type
- RPC_STORAGE_TYPES: procedure scalar name -> storage type

Unknown names never raise: columns and procedure types fall back to text.
"""

from __future__ import annotations

from typing import Optional

from ..schema.types import FieldKind

PYTHON_TYPES: dict[FieldKind, str] = {
    FieldKind.UUID: "UUID",
    FieldKind.STRING: "str",
    FieldKind.TEXT: "str",
    FieldKind.EMAIL: "str",
    FieldKind.URL: "str",
    FieldKind.INTEGER: "int",
    FieldKind.NUMBER: "float",
    FieldKind.BOOLEAN: "bool",
    FieldKind.DATE: "datetime",
    FieldKind.ENUM: "str",
    FieldKind.REFERENCE: "UUID",
    FieldKind.ARRAY: "list[Any]",
    FieldKind.OBJECT: "dict[str, Any]",
}

SQL_COLUMN_TYPES: dict[FieldKind, str] = {
    FieldKind.UUID: "UUID",
    FieldKind.STRING: "VARCHAR(255)",
    FieldKind.TEXT: "TEXT",
    FieldKind.EMAIL: "VARCHAR(255)",
    FieldKind.URL: "TEXT",
    FieldKind.INTEGER: "INTEGER",
    FieldKind.NUMBER: "DOUBLE PRECISION",
    FieldKind.BOOLEAN: "BOOLEAN",
    FieldKind.DATE: "TIMESTAMPTZ",
    FieldKind.ENUM: "VARCHAR(50)",
    FieldKind.REFERENCE: "UUID",
    FieldKind.ARRAY: "JSONB",
    FieldKind.OBJECT: "JSONB",
}

RPC_STORAGE_TYPES: dict[str, str] = {
    "uuid": "UUID",
    "string": "TEXT",
    "text": "TEXT",
    "email": "TEXT",
    "url": "TEXT",
    "int": "INTEGER",
    "integer": "INTEGER",
    "number": "DOUBLE PRECISION",
    "float": "DOUBLE PRECISION",
    "boolean": "BOOLEAN",
    "date": "TIMESTAMPTZ",
    "datetime": "TIMESTAMPTZ",
    "json": "JSONB",
    "jsonb": "JSONB",
    "array": "JSONB",
    "object": "JSONB",
}

RPC_PYTHON_TYPES: dict[str, str] = {
    "uuid": "UUID",
    "string": "str",
    "text": "str",
    "email": "str",
    "url": "str",
    "int": "int",
    "integer": "int",
    "number": "float",
    "float": "float",
    "boolean": "bool",
    "date": "datetime",
    "datetime": "datetime",
    "json": "dict[str, Any]",
    "jsonb": "dict[str, Any]",
    "array": "list[Any]",
    "object": "dict[str, Any]",
}

DEFAULT_STORAGE_TYPE = "TEXT"
DEFAULT_PYTHON_TYPE = "str"


def literal_type(values: tuple[str, ...]) -> str:
    """Target type for an enumeration: Literal['a', 'b']."""
    return "Literal[" + ", ".join(repr(v) for v in values) + "]"


def column_type(kind: FieldKind, max_length: Optional[float] = None, values: tuple[str, ...] | None = None) -> str:
    """Storage column type for a field kind.

    Bounded strings use their max length; enums are sized to their longest
    value plus headroom.
    """
    if kind == FieldKind.STRING and max_length:
        return f"VARCHAR({int(max_length)})"
    if kind == FieldKind.ENUM and values:
        return f"VARCHAR({max(len(v) for v in values) + 10})"
    return SQL_COLUMN_TYPES[kind]


def scalar_storage_type(name: str) -> Optional[str]:
    """Procedure scalar name -> storage type, or None if unknown."""
    return RPC_STORAGE_TYPES.get(name.strip().lower())


def scalar_python_type(name: str) -> str:
    """Procedure scalar name -> target type expression."""
    return RPC_PYTHON_TYPES.get(name.strip().lower(), DEFAULT_PYTHON_TYPE)
