"""
Field analysis.

Converts one FieldDef into an AnalyzedField: resolved kind, target type,
storage type, generator hint, flags and constraints. Array items and
object sub-fields are analyzed recursively ("item" for array elements,
the sub-key for object entries).

Invariants:
    - analyze_field never raises; unknown type tags resolve to STRING
      and keep their declared_type
    - Nested descriptors are analyzed with the same rules as top-level ones
"""

from __future__ import annotations

import logging

from ..schema.types import FieldDef, FieldKind
from .hints import generator_hint
from .ir import AnalyzedField
from .naming import to_safe_identifier
from .type_mapping import PYTHON_TYPES, column_type, literal_type

logger = logging.getLogger(__name__)


def resolve_kind(field_def: FieldDef) -> FieldKind:
    """Resolve the declared type tag, degrading unknown tags to STRING."""
    kind = field_def.kind
    if kind is None:
        logger.debug(f"Unknown type '{field_def.type}' on field '{field_def.name}', using string")
        return FieldKind.STRING
    return kind


def python_type_for(kind: FieldKind, items: AnalyzedField | None, values: tuple[str, ...] | None) -> str:
    """Target type expression for a resolved field."""
    if kind == FieldKind.ENUM and values:
        return literal_type(values)
    if kind == FieldKind.ARRAY and items is not None:
        return f"list[{items.python_type}]"
    return PYTHON_TYPES[kind]


def analyze_field(name: str, field_def: FieldDef) -> AnalyzedField:
    """Analyze a single field declaration.

    Args:
        name: Field name (for nested fields: "item" or the sub-key)
        field_def: Field declaration

    Returns:
        AnalyzedField descriptor

    Example:
        >>> f = analyze_field("tags", FieldDef("tags", "array", items=FieldDef("item", "string")))
        >>> f.python_type
        'list[str]'
    """
    kind = resolve_kind(field_def)

    items = None
    if kind == FieldKind.ARRAY and field_def.items is not None:
        items = analyze_field("item", field_def.items)

    shape = None
    if kind == FieldKind.OBJECT and field_def.shape:
        shape = tuple(analyze_field(sub.name, sub) for sub in field_def.shape)

    constraints = field_def.constraints
    low = constraints.min if constraints else None
    high = constraints.max if constraints else None
    values = field_def.values if kind == FieldKind.ENUM else None

    return AnalyzedField(
        name=name,
        safe_name=to_safe_identifier(name),
        kind=kind,
        declared_type=field_def.type,
        python_type=python_type_for(kind, items, values),
        sql_type=column_type(kind, max_length=high, values=values),
        generator_hint=generator_hint(name, field_def, kind),
        nullable=field_def.nullable,
        unique=field_def.unique,
        readonly=field_def.readonly,
        default=field_def.default,
        ref_target=field_def.target if kind == FieldKind.REFERENCE else None,
        enum_values=values,
        items=items,
        shape=shape,
        min=low,
        max=high,
        pattern=constraints.pattern if constraints else None,
        description=field_def.description,
    )


def analyze_fields(fields: tuple[FieldDef, ...]) -> tuple[AnalyzedField, ...]:
    """Analyze all fields of an entity, preserving declaration order."""
    return tuple(analyze_field(f.name, f) for f in fields)
