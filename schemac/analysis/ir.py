"""
Intermediate representation produced by the analysis stage.

Everything here is a frozen dataclass holding tuples (or read-only
mapping views), so code emitters can share one AnalysisResult without
copying it.

Invariants:
    - The IR is never mutated after AnalysisResult is constructed
    - AnalysisResult.schemas is in creation-safe order
    - to_dict() output is JSON-serializable and deterministic for
      identical input
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from ..schema.types import NO_DEFAULT, FieldKind, IndexType, RelationKind, RlsBypass, RlsScope
from .diagnostics import Diagnostic


class FkSource(Enum):
    """How a relation's foreign key was determined."""

    EXPLICIT = "explicit"  # Declared by the author
    INFERRED = "inferred"  # Matched a ref field or naming pattern
    DEFAULT = "default"  # Nothing matched; default name plus a diagnostic


class InferredType(Enum):
    """Types the computed-field inferencer can produce."""

    NUMBER = "number"
    BOOLEAN = "boolean"
    STRING = "string"
    DATE = "date"
    ARRAY = "array"
    OBJECT = "object"
    UNKNOWN = "unknown"


def _readonly(data: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(data or {}))


@dataclass(frozen=True)
class AnalyzedField:
    """Fully resolved field descriptor.

    Attributes:
        name: Field name as authored
        safe_name: Identifier-safe form of name
        kind: Resolved semantic kind (unknown tags resolve to STRING)
        declared_type: Type tag exactly as declared
        python_type: Target type expression, e.g. "list[str]"
        sql_type: Storage column type, e.g. "VARCHAR(255)"
        generator_hint: Seed-data generator expression
        ref_target: Target entity of a ref field
        enum_values: Allowed values of an enum field
        items: Element descriptor of an array field (named "item")
        shape: Sub-field descriptors of an object field
    """

    name: str
    safe_name: str
    kind: FieldKind
    declared_type: str
    python_type: str
    sql_type: str
    generator_hint: str
    nullable: bool = False
    unique: bool = False
    readonly: bool = False
    default: Any = NO_DEFAULT
    ref_target: Optional[str] = None
    enum_values: Optional[tuple[str, ...]] = None
    items: Optional[AnalyzedField] = None
    shape: Optional[tuple[AnalyzedField, ...]] = None
    min: Optional[float] = None
    max: Optional[float] = None
    pattern: Optional[str] = None
    description: str = ""

    @property
    def is_ref(self) -> bool:
        return self.kind == FieldKind.REFERENCE

    @property
    def is_enum(self) -> bool:
        return self.kind == FieldKind.ENUM

    @property
    def is_array(self) -> bool:
        return self.kind == FieldKind.ARRAY

    @property
    def is_object(self) -> bool:
        return self.kind == FieldKind.OBJECT

    @property
    def has_default(self) -> bool:
        return self.default is not NO_DEFAULT

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        result: dict[str, Any] = {
            "name": self.name,
            "safe_name": self.safe_name,
            "kind": self.kind.value,
            "declared_type": self.declared_type,
            "python_type": self.python_type,
            "sql_type": self.sql_type,
            "generator_hint": self.generator_hint,
            "nullable": self.nullable,
            "unique": self.unique,
            "readonly": self.readonly,
        }
        if self.has_default:
            result["default"] = self.default
        if self.ref_target:
            result["ref_target"] = self.ref_target
        if self.enum_values:
            result["enum_values"] = list(self.enum_values)
        if self.items is not None:
            result["items"] = self.items.to_dict()
        if self.shape:
            result["shape"] = [f.to_dict() for f in self.shape]
        for key in ("min", "max", "pattern"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.description:
            result["description"] = self.description
        return result


@dataclass(frozen=True)
class AnalyzedComputed:
    """Computed-field descriptor.

    Attributes:
        name: Property name
        type: Declared or inferred type
        python_type: Target type expression
        inferred: True when the type came from the name heuristics
    """

    name: str
    type: InferredType
    python_type: str
    inferred: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "name": self.name,
            "type": self.type.value,
            "python_type": self.python_type,
            "inferred": self.inferred,
        }


@dataclass(frozen=True)
class AnalyzedRelation:
    """Resolved relation.

    Attributes:
        name: Relation name
        kind: Resolved kind; has-many with a join entity becomes MANY_TO_MANY
        target: Canonical target entity name (as authored when unknown)
        target_pascal: PascalCase singular form of target
        foreign_key: Foreign-key field name; on the owning entity for
            belongs-to, on the target (or join entity) otherwise
        fk_source: Whether foreign_key was explicit, inferred or defaulted
        local_field: Local field carrying the key (belongs-to only)
        target_known: Whether target resolved to a known entity
        through: Join entity (many-to-many only)
        other_key: Join-entity key pointing at target (many-to-many only)
    """

    name: str
    kind: RelationKind
    target: str
    target_pascal: str
    foreign_key: str
    fk_source: FkSource
    local_field: Optional[str] = None
    target_known: bool = True
    eager: bool = False
    order_by: Optional[tuple[tuple[str, str], ...]] = None
    limit: Optional[int] = None
    through: Optional[str] = None
    other_key: Optional[str] = None

    @property
    def inferred(self) -> bool:
        """Whether the key was not explicitly declared."""
        return self.fk_source != FkSource.EXPLICIT

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        result: dict[str, Any] = {
            "name": self.name,
            "kind": self.kind.value,
            "target": self.target,
            "target_pascal": self.target_pascal,
            "foreign_key": self.foreign_key,
            "fk_source": self.fk_source.value,
            "target_known": self.target_known,
            "eager": self.eager,
        }
        if self.local_field:
            result["local_field"] = self.local_field
        if self.order_by:
            result["order_by"] = dict(self.order_by)
        if self.limit is not None:
            result["limit"] = self.limit
        if self.through:
            result["through"] = self.through
        if self.other_key:
            result["other_key"] = self.other_key
        return result


@dataclass(frozen=True)
class AnalyzedIndex:
    """Planned index.

    Attributes:
        name: Index name
        table: Table the index belongs to
        fields: Indexed field names
        type: Access method
        auto_generated: False for explicitly declared indexes
    """

    name: str
    table: str
    fields: tuple[str, ...]
    type: IndexType = IndexType.BTREE
    unique: bool = False
    using: Optional[str] = None
    where: Optional[str] = None
    concurrently: bool = False
    auto_generated: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        result: dict[str, Any] = {
            "name": self.name,
            "table": self.table,
            "fields": list(self.fields),
            "type": self.type.value,
            "unique": self.unique,
            "auto_generated": self.auto_generated,
        }
        if self.using:
            result["using"] = self.using
        if self.where:
            result["where"] = self.where
        if self.concurrently:
            result["concurrently"] = True
        return result


@dataclass(frozen=True)
class AnalyzedRls:
    """Normalized access policy.

    Attributes:
        enabled: True when any operation is enabled
        select: Read access is policy-controlled
        insert: Insert access is policy-controlled
        update: Update access is policy-controlled
        delete: Delete access is policy-controlled
        scope: Scope rules applied to all operations
        bypass: Bypass conditions, OR-ed ahead of scope rules
        predicates: Operation -> extracted predicate source text
        sql: Operation -> raw query fragment
    """

    enabled: bool = False
    select: bool = False
    insert: bool = False
    update: bool = False
    delete: bool = False
    scope: tuple[RlsScope, ...] = ()
    bypass: tuple[RlsBypass, ...] = ()
    predicates: Mapping[str, str] = dataclass_field(default_factory=dict)
    sql: Mapping[str, str] = dataclass_field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "predicates", _readonly(self.predicates))
        object.__setattr__(self, "sql", _readonly(self.sql))

    def is_enabled(self, operation: str) -> bool:
        """Whether an operation ("select", "insert", ...) is policy-controlled."""
        return bool(getattr(self, operation))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "enabled": self.enabled,
            "select": self.select,
            "insert": self.insert,
            "update": self.update,
            "delete": self.delete,
            "scope": [s.to_dict() for s in self.scope],
            "bypass": [b.to_dict() for b in self.bypass],
            "predicates": dict(self.predicates),
            "sql": dict(self.sql),
        }


@dataclass(frozen=True)
class AnalyzedRpcArg:
    """Resolved procedure argument."""

    name: str
    type: str
    python_type: str
    storage_type: str
    default: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        result: dict[str, Any] = {
            "name": self.name,
            "type": self.type,
            "python_type": self.python_type,
            "storage_type": self.storage_type,
        }
        if self.default is not None:
            result["default"] = self.default
        return result


@dataclass(frozen=True)
class AnalyzedRpc:
    """Resolved stored-procedure descriptor.

    Attributes:
        name: Procedure name
        args: Resolved arguments
        returns: Return expression as declared
        return_type: Element type of the return expression ("post" for "post[]")
        is_array: Return expression ends with "[]"
        is_void: Procedure returns nothing
        is_entity: return_type names a known entity
        entity: Canonical entity name when is_entity
        table: Entity's storage table when is_entity
        storage_type: e.g. "SETOF posts", "posts", "TEXT[]", "VOID"
        python_type: e.g. "list[Post]", "int", "None"
    """

    name: str
    args: tuple[AnalyzedRpcArg, ...]
    returns: str
    return_type: str
    is_array: bool
    is_void: bool
    is_entity: bool
    storage_type: str
    python_type: str
    entity: Optional[str] = None
    table: Optional[str] = None
    sql: str = ""
    language: str = "sql"
    volatility: str = "volatile"
    security: str = "invoker"
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        result: dict[str, Any] = {
            "name": self.name,
            "args": [a.to_dict() for a in self.args],
            "returns": self.returns,
            "return_type": self.return_type,
            "is_array": self.is_array,
            "is_void": self.is_void,
            "is_entity": self.is_entity,
            "storage_type": self.storage_type,
            "python_type": self.python_type,
            "language": self.language,
            "volatility": self.volatility,
            "security": self.security,
        }
        if self.entity:
            result["entity"] = self.entity
            result["table"] = self.table
        if self.sql:
            result["sql"] = self.sql
        if self.description:
            result["description"] = self.description
        return result


@dataclass(frozen=True)
class AnalyzedSchema:
    """Fully analyzed entity.

    Attributes:
        name: Entity name as authored
        singular: Lowercase singular form
        plural: Lowercase plural form (pluralization overrides applied)
        pascal_name: PascalCase singular form, e.g. "BlogPost"
        camel_name: camelCase singular form
        display_name: Human-readable singular label
        table_name: Storage table name
        endpoint: Externally addressable path, e.g. "/api/posts"
        depends_on: Entities whose records must exist first
        is_junction: Entity only joins two or more other entities
    """

    name: str
    singular: str
    plural: str
    pascal_name: str
    camel_name: str
    display_name: str
    table_name: str
    endpoint: str
    fields: tuple[AnalyzedField, ...] = ()
    relations: tuple[AnalyzedRelation, ...] = ()
    computed: tuple[AnalyzedComputed, ...] = ()
    depends_on: tuple[str, ...] = ()
    is_junction: bool = False
    rls: AnalyzedRls = dataclass_field(default_factory=AnalyzedRls)
    indexes: tuple[AnalyzedIndex, ...] = ()
    rpc: tuple[AnalyzedRpc, ...] = ()
    has_timestamps: bool = True
    tags: tuple[str, ...] = ()
    module: Optional[str] = None
    group: Optional[str] = None
    metadata: Mapping[str, Any] = dataclass_field(default_factory=dict)
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", _readonly(self.metadata))

    def get_field(self, name: str) -> Optional[AnalyzedField]:
        """Get a field by name."""
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def get_relation(self, name: str) -> Optional[AnalyzedRelation]:
        """Get a relation by name."""
        for r in self.relations:
            if r.name == name:
                return r
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        result: dict[str, Any] = {
            "name": self.name,
            "singular": self.singular,
            "plural": self.plural,
            "pascal_name": self.pascal_name,
            "camel_name": self.camel_name,
            "display_name": self.display_name,
            "table_name": self.table_name,
            "endpoint": self.endpoint,
            "fields": [f.to_dict() for f in self.fields],
            "relations": [r.to_dict() for r in self.relations],
            "computed": [c.to_dict() for c in self.computed],
            "depends_on": list(self.depends_on),
            "is_junction": self.is_junction,
            "rls": self.rls.to_dict(),
            "indexes": [i.to_dict() for i in self.indexes],
            "rpc": [p.to_dict() for p in self.rpc],
            "has_timestamps": self.has_timestamps,
            "tags": list(self.tags),
        }
        if self.module:
            result["module"] = self.module
        if self.group:
            result["group"] = self.group
        if self.metadata:
            result["metadata"] = dict(self.metadata)
        if self.description:
            result["description"] = self.description
        return result


@dataclass(frozen=True)
class AnalysisResult:
    """Ordered analyzed schemas plus the diagnostics produced on the way.

    Attributes:
        schemas: Analyzed schemas in creation-safe order
        diagnostics: Advisory diagnostics, in the order they were produced
    """

    schemas: tuple[AnalyzedSchema, ...]
    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def warnings(self) -> list[str]:
        """Diagnostics rendered as free text."""
        return [str(d) for d in self.diagnostics]

    @property
    def names(self) -> list[str]:
        """Entity names in creation order."""
        return [s.name for s in self.schemas]

    def get(self, name: str) -> Optional[AnalyzedSchema]:
        """Get an analyzed schema by entity name."""
        for schema in self.schemas:
            if schema.name == name:
                return schema
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "schemas": [s.to_dict() for s in self.schemas],
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }

    def to_json(self, indent: int | None = 2) -> str:
        """Serialize to JSON."""
        return json.dumps(self.to_dict(), indent=indent, default=str)

    def fingerprint(self) -> str:
        """Compute SHA-256 fingerprint of the analyzed schemas.

        Diagnostics are excluded so that the fingerprint only changes when
        the generated output would.
        """
        canonical = json.dumps(
            [s.to_dict() for s in self.schemas],
            sort_keys=True,
            separators=(",", ":"),
            default=str,
        )
        digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
        return f"sha256:{digest}"
