"""
Input model for schemac.

This module provides the authoring side of the compiler:
- Declaration types (EntityDef, FieldDef, RelationDef, RlsDef, ...)
- Builder helpers for writing entities in Python
- YAML/JSON loading of entity documents

Invariants:
    - Declarations are frozen once constructed
    - Malformed declarations raise ValueError at construction time
    - Unknown field type tags are kept as written and degrade during analysis

How to change safely:
    - Add new declaration attributes with defaults
    - Keep to_dict()/from_dict() symmetric for every type
"""

from .builders import (
    array,
    belongs_to,
    define_entity,
    enum,
    field,
    has_many,
    has_one,
    index,
    many_to_many,
    obj,
    ref,
    rls,
    rpc,
)
from .loader import dump_yaml, parse_entities, parse_entity, parse_json, parse_yaml, validate_document
from .types import (
    ComputedDef,
    EntityDef,
    FieldConstraints,
    FieldDef,
    FieldKind,
    IndexDef,
    IndexType,
    NO_DEFAULT,
    RelationDef,
    RelationKind,
    RlsBypass,
    RlsDef,
    RlsScope,
    RpcArgDef,
    RpcDef,
)

__all__ = [
    # Types
    "EntityDef",
    "FieldDef",
    "FieldKind",
    "FieldConstraints",
    "RelationDef",
    "RelationKind",
    "RlsDef",
    "RlsScope",
    "RlsBypass",
    "IndexDef",
    "IndexType",
    "RpcDef",
    "RpcArgDef",
    "ComputedDef",
    "NO_DEFAULT",
    # Builders
    "define_entity",
    "field",
    "ref",
    "enum",
    "array",
    "obj",
    "belongs_to",
    "has_many",
    "has_one",
    "many_to_many",
    "index",
    "rpc",
    "rls",
    # Loading
    "parse_entity",
    "parse_entities",
    "parse_yaml",
    "parse_json",
    "dump_yaml",
    "validate_document",
]
