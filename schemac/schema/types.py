"""
Core type definitions for entity declarations.

This module defines the authored input of a compilation run:
- FieldDef: A single field (possibly nested for arrays and objects)
- RelationDef: An association between two entities
- RlsDef: Row-level access policy declaration
- IndexDef: An explicitly declared index
- RpcDef: A stored-procedure signature
- ComputedDef: A derived property with an optional declared type
- EntityDef: One entity and everything declared on it

Invariants:
    - All definitions are frozen; collections are tuples in declaration order
    - Field, relation and procedure names are unique within an entity
    - Unknown field type tags are accepted here and degraded later by the
      field analyzer; structurally broken declarations raise ValueError

How to change safely:
    - Add new optional attributes with defaults
    - Keep to_dict/from_dict symmetric for every new attribute
    - Add new FieldKind values at the end and map them in
      analysis/type_mapping.py
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping, Union

RlsPredicate = Union[str, Callable[..., Any]]

RLS_OPERATIONS: tuple[str, ...] = ("select", "insert", "update", "delete")


class _NoDefault:
    """Marker for a field declared without a default (None is a valid default)."""

    def __repr__(self) -> str:
        return "NO_DEFAULT"


NO_DEFAULT: Any = _NoDefault()


class FieldKind(Enum):
    """Semantic field types.

    These map to target types, storage types and generator hints in
    analysis/type_mapping.py and analysis/hints.py.
    """

    UUID = "uuid"  # Primary identifiers
    STRING = "string"  # Short text
    TEXT = "text"  # Long text
    EMAIL = "email"
    URL = "url"
    INTEGER = "int"
    NUMBER = "number"  # Real number
    BOOLEAN = "boolean"
    DATE = "date"  # Point in time
    ENUM = "enum"
    REFERENCE = "ref"  # Reference to another entity
    ARRAY = "array"
    OBJECT = "object"

    @classmethod
    def from_str(cls, value: str) -> FieldKind:
        """Convert string representation (or a common alias) to FieldKind.

        Args:
            value: Type tag such as "string", "integer" or "datetime"

        Returns:
            Corresponding FieldKind enum value

        Raises:
            ValueError: If value is not a known field kind
        """
        kind = cls.lookup(value)
        if kind is None:
            valid = [k.value for k in cls]
            raise ValueError(f"Invalid field kind '{value}'. Valid kinds: {valid}")
        return kind

    @classmethod
    def lookup(cls, value: str) -> FieldKind | None:
        """Like from_str, but returns None for unknown tags."""
        normalized = value.strip().lower()
        for kind in cls:
            if kind.value == normalized:
                return kind
        return _FIELD_KIND_ALIASES.get(normalized)


_FIELD_KIND_ALIASES: dict[str, FieldKind] = {
    "id": FieldKind.UUID,
    "str": FieldKind.STRING,
    "integer": FieldKind.INTEGER,
    "float": FieldKind.NUMBER,
    "double": FieldKind.NUMBER,
    "decimal": FieldKind.NUMBER,
    "bool": FieldKind.BOOLEAN,
    "datetime": FieldKind.DATE,
    "timestamp": FieldKind.DATE,
    "reference": FieldKind.REFERENCE,
    "list": FieldKind.ARRAY,
    "json": FieldKind.OBJECT,
}


class RelationKind(Enum):
    """Kinds of entity associations."""

    BELONGS_TO = "belongsTo"
    HAS_MANY = "hasMany"
    HAS_ONE = "hasOne"
    MANY_TO_MANY = "manyToMany"

    @classmethod
    def from_str(cls, value: str) -> RelationKind:
        """Convert "belongsTo" / "belongs_to" / "belongs-to" to RelationKind.

        Raises:
            ValueError: If value is not a known relation kind
        """
        normalized = re.sub(r"[-_\s]", "", value).lower()
        for kind in cls:
            if kind.value.lower() == normalized:
                return kind
        valid = [k.value for k in cls]
        raise ValueError(f"Invalid relation kind '{value}'. Valid kinds: {valid}")


class IndexType(Enum):
    """Index access methods."""

    BTREE = "btree"
    HASH = "hash"
    GIN = "gin"
    GIST = "gist"
    BRIN = "brin"


@dataclass(frozen=True)
class FieldConstraints:
    """Value constraints attached to a field.

    Attributes:
        min: Lower bound (value for numbers, length for strings)
        max: Upper bound (value for numbers, length for strings)
        pattern: Regular expression source the value must match
        message: Custom validation message for downstream emitters
    """

    min: float | None = None
    max: float | None = None
    pattern: str | None = None
    message: str | None = None

    def __post_init__(self) -> None:
        """Validate constraints and unwrap compiled patterns."""
        if isinstance(self.pattern, re.Pattern):
            object.__setattr__(self, "pattern", self.pattern.pattern)
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError(f"min ({self.min}) must be <= max ({self.max})")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        result: dict[str, Any] = {}
        for key in ("min", "max", "pattern", "message"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FieldConstraints:
        """Create from dictionary representation."""
        return cls(
            min=data.get("min"),
            max=data.get("max"),
            pattern=data.get("pattern"),
            message=data.get("message"),
        )


@dataclass(frozen=True)
class FieldDef:
    """Definition of a single field.

    Attributes:
        name: Field name as authored
        type: Declared type tag (see FieldKind); unknown tags are kept verbatim
        nullable: Whether the field may be null
        unique: Whether values must be unique across records
        readonly: Whether the field is set by the system only
        default: Default value, or NO_DEFAULT when none was declared
        target: Target entity name (ref fields)
        values: Allowed values (enum fields)
        items: Element declaration (array fields)
        shape: Named sub-field declarations (object fields)
        constraints: Numeric/length bounds and pattern
        hint: Generator hint override (e.g. "faker.company")
        description: Human-readable description

    Invariants:
        - enum fields declare at least one value
        - ref fields declare a target
        - array fields declare items
    """

    name: str
    type: str = "string"
    nullable: bool = False
    unique: bool = False
    readonly: bool = False
    default: Any = NO_DEFAULT
    target: str | None = None
    values: tuple[str, ...] | None = None
    items: FieldDef | None = None
    shape: tuple[FieldDef, ...] | None = None
    constraints: FieldConstraints | None = None
    hint: str | None = None
    description: str = ""

    def __post_init__(self) -> None:
        """Validate field definition."""
        if not self.name:
            raise ValueError("Field name cannot be empty")
        if isinstance(self.type, FieldKind):
            object.__setattr__(self, "type", self.type.value)
        if self.values is not None and not isinstance(self.values, tuple):
            object.__setattr__(self, "values", tuple(self.values))
        if self.shape is not None and not isinstance(self.shape, tuple):
            object.__setattr__(self, "shape", tuple(self.shape))

        kind = self.kind
        if kind == FieldKind.ENUM and not self.values:
            raise ValueError(f"values required for enum field '{self.name}'")
        if kind == FieldKind.REFERENCE and not self.target:
            raise ValueError(f"target required for ref field '{self.name}'")
        if kind == FieldKind.ARRAY and self.items is None:
            raise ValueError(f"items required for array field '{self.name}'")
        if self.shape:
            names = [f.name for f in self.shape]
            if len(names) != len(set(names)):
                raise ValueError(f"Duplicate sub-field name in object field '{self.name}'")

    @property
    def kind(self) -> FieldKind | None:
        """Resolved kind, or None when the declared tag is unknown."""
        return FieldKind.lookup(self.type)

    @property
    def has_default(self) -> bool:
        """Whether a default was declared, including an explicit None."""
        return self.default is not NO_DEFAULT

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation for serialization."""
        result: dict[str, Any] = {"name": self.name, "type": self.type}
        if self.nullable:
            result["nullable"] = True
        if self.unique:
            result["unique"] = True
        if self.readonly:
            result["readonly"] = True
        if self.has_default:
            result["default"] = self.default
        if self.target:
            result["target"] = self.target
        if self.values:
            result["values"] = list(self.values)
        if self.items is not None:
            result["items"] = self.items.to_dict()
        if self.shape:
            result["shape"] = [f.to_dict() for f in self.shape]
        if self.constraints is not None:
            result["constraints"] = self.constraints.to_dict()
        if self.hint:
            result["hint"] = self.hint
        if self.description:
            result["description"] = self.description
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any], name: str | None = None) -> FieldDef:
        """Create from dictionary representation.

        Object shapes may be given as a list of named fields or as a
        mapping of sub-field name to declaration.
        """
        shape_data = data.get("shape")
        shape: tuple[FieldDef, ...] | None = None
        if isinstance(shape_data, dict):
            shape = tuple(FieldDef.from_dict(v, name=k) for k, v in shape_data.items())
        elif shape_data:
            shape = tuple(FieldDef.from_dict(f) for f in shape_data)

        constraints = data.get("constraints")
        if constraints is None and any(k in data for k in ("min", "max", "pattern")):
            constraints = {k: data.get(k) for k in ("min", "max", "pattern", "message")}

        return cls(
            name=name or data["name"],
            type=data.get("type", "string"),
            nullable=data.get("nullable", False),
            unique=data.get("unique", False),
            readonly=data.get("readonly", False),
            default=data.get("default", NO_DEFAULT),
            target=data.get("target"),
            values=tuple(data["values"]) if data.get("values") else None,
            items=FieldDef.from_dict(data["items"], name="item") if data.get("items") else None,
            shape=shape,
            constraints=FieldConstraints.from_dict(constraints) if constraints else None,
            hint=data.get("hint"),
            description=data.get("description", ""),
        )


@dataclass(frozen=True)
class RelationDef:
    """Declared association from the owning entity to a target entity.

    Attributes:
        name: Relation name (e.g. "posts", "author")
        kind: Relation kind
        target: Target entity name as authored
        foreign_key: Explicit foreign-key field name; skips inference
        eager: Whether emitters should load the relation by default
        order_by: (field, direction) pairs for has-many collections
        limit: Maximum related records for has-many collections
        through: Join entity for many-to-many relations
        other_key: Join-entity key pointing at the target
    """

    name: str
    kind: RelationKind
    target: str
    foreign_key: str | None = None
    eager: bool = False
    order_by: tuple[tuple[str, str], ...] | None = None
    limit: int | None = None
    through: str | None = None
    other_key: str | None = None

    def __post_init__(self) -> None:
        """Validate relation definition."""
        if not self.name:
            raise ValueError("Relation name cannot be empty")
        if isinstance(self.kind, str):
            object.__setattr__(self, "kind", RelationKind.from_str(self.kind))
        if not self.target:
            raise ValueError(f"target required for relation '{self.name}'")
        if isinstance(self.order_by, dict):
            object.__setattr__(self, "order_by", tuple(self.order_by.items()))
        if self.order_by:
            for column, direction in self.order_by:
                if direction.lower() not in ("asc", "desc"):
                    raise ValueError(
                        f"order_by direction for '{column}' must be 'asc' or 'desc', got '{direction}'"
                    )
        if self.limit is not None and self.limit < 0:
            raise ValueError(f"limit must be non-negative, got {self.limit}")

    @property
    def is_many_to_many(self) -> bool:
        """Whether this relation goes through a join entity."""
        return self.kind == RelationKind.MANY_TO_MANY or (
            self.kind == RelationKind.HAS_MANY and self.through is not None
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        result: dict[str, Any] = {
            "name": self.name,
            "kind": self.kind.value,
            "target": self.target,
        }
        if self.foreign_key:
            result["foreign_key"] = self.foreign_key
        if self.eager:
            result["eager"] = True
        if self.order_by:
            result["order_by"] = dict(self.order_by)
        if self.limit is not None:
            result["limit"] = self.limit
        if self.through:
            result["through"] = self.through
        if self.other_key:
            result["other_key"] = self.other_key
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any], name: str | None = None) -> RelationDef:
        """Create from dictionary representation."""
        order_by = data.get("order_by")
        return cls(
            name=name or data["name"],
            kind=RelationKind.from_str(data.get("kind") or data["type"]),
            target=data["target"],
            foreign_key=data.get("foreign_key"),
            eager=data.get("eager", False),
            order_by=tuple(order_by.items()) if order_by else None,
            limit=data.get("limit"),
            through=data.get("through"),
            other_key=data.get("other_key"),
        )


@dataclass(frozen=True)
class RlsScope:
    """Row is visible when row[field] equals the request context's context_key."""

    field: str
    context_key: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary representation."""
        return {"field": self.field, "context_key": self.context_key}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RlsScope:
        """Create from dictionary representation."""
        return cls(field=data["field"], context_key=data["context_key"])


@dataclass(frozen=True)
class RlsBypass:
    """Requests whose context_key holds one of values skip scope checks."""

    context_key: str
    values: tuple[str, ...]

    def __post_init__(self) -> None:
        """Normalize values to a tuple."""
        if not isinstance(self.values, tuple):
            object.__setattr__(self, "values", tuple(self.values))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {"context_key": self.context_key, "values": list(self.values)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RlsBypass:
        """Create from dictionary representation."""
        return cls(context_key=data["context_key"], values=tuple(data.get("values", ())))


@dataclass(frozen=True)
class RlsDef:
    """Row-level access policy declaration.

    Attributes:
        scope: Field/context-key equality rules applied to every operation
        bypass: Context conditions that skip scope rules
        select: Custom read predicate (callable or source string)
        insert: Custom insert predicate
        update: Custom update predicate
        delete: Custom delete predicate
        sql: Raw query fragments keyed by operation name

    Predicates are never executed; only their source text is used.
    """

    scope: tuple[RlsScope, ...] = ()
    bypass: tuple[RlsBypass, ...] = ()
    select: RlsPredicate | None = None
    insert: RlsPredicate | None = None
    update: RlsPredicate | None = None
    delete: RlsPredicate | None = None
    sql: Mapping[str, str] = dataclass_field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate policy declaration."""
        if not isinstance(self.scope, tuple):
            object.__setattr__(self, "scope", tuple(self.scope))
        if not isinstance(self.bypass, tuple):
            object.__setattr__(self, "bypass", tuple(self.bypass))
        unknown = set(self.sql) - set(RLS_OPERATIONS)
        if unknown:
            raise ValueError(f"Unknown RLS sql operations: {sorted(unknown)}")
        object.__setattr__(self, "sql", MappingProxyType(dict(self.sql)))

    def predicate(self, operation: str) -> RlsPredicate | None:
        """Get the custom predicate declared for an operation."""
        if operation not in RLS_OPERATIONS:
            raise ValueError(f"Unknown RLS operation '{operation}'")
        return getattr(self, operation)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation.

        Callable predicates cannot be serialized and are omitted.
        """
        result: dict[str, Any] = {}
        if self.scope:
            result["scope"] = [s.to_dict() for s in self.scope]
        if self.bypass:
            result["bypass"] = [b.to_dict() for b in self.bypass]
        for op in RLS_OPERATIONS:
            predicate = getattr(self, op)
            if isinstance(predicate, str):
                result[op] = predicate
        if self.sql:
            result["sql"] = dict(self.sql)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RlsDef:
        """Create from dictionary representation."""
        return cls(
            scope=tuple(RlsScope.from_dict(s) for s in data.get("scope", [])),
            bypass=tuple(RlsBypass.from_dict(b) for b in data.get("bypass", [])),
            select=data.get("select"),
            insert=data.get("insert"),
            update=data.get("update"),
            delete=data.get("delete"),
            sql=data.get("sql") or {},
        )


@dataclass(frozen=True)
class IndexDef:
    """Explicitly declared index.

    Attributes:
        fields: Indexed field names, in key order
        name: Index name; generated from table and fields when omitted
        type: Access method
        using: Custom USING expression overriding the access method
        unique: Whether the index enforces uniqueness
        where: Partial-index predicate
        concurrently: Whether to build without locking writes
    """

    fields: tuple[str, ...]
    name: str | None = None
    type: IndexType = IndexType.BTREE
    using: str | None = None
    unique: bool = False
    where: str | None = None
    concurrently: bool = False

    def __post_init__(self) -> None:
        """Validate index definition."""
        if isinstance(self.fields, str):
            object.__setattr__(self, "fields", (self.fields,))
        elif not isinstance(self.fields, tuple):
            object.__setattr__(self, "fields", tuple(self.fields))
        if not self.fields:
            raise ValueError("Index must cover at least one field")
        if isinstance(self.type, str):
            object.__setattr__(self, "type", IndexType(self.type.lower()))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        result: dict[str, Any] = {"fields": list(self.fields), "type": self.type.value}
        if self.name:
            result["name"] = self.name
        if self.using:
            result["using"] = self.using
        if self.unique:
            result["unique"] = True
        if self.where:
            result["where"] = self.where
        if self.concurrently:
            result["concurrently"] = True
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IndexDef:
        """Create from dictionary representation."""
        return cls(
            fields=tuple(data["fields"]),
            name=data.get("name"),
            type=IndexType(data.get("type", "btree")),
            using=data.get("using"),
            unique=data.get("unique", False),
            where=data.get("where"),
            concurrently=data.get("concurrently", False),
        )


@dataclass(frozen=True)
class RpcArgDef:
    """Stored-procedure argument."""

    name: str
    type: str
    default: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        result: dict[str, Any] = {"name": self.name, "type": self.type}
        if self.default is not None:
            result["default"] = self.default
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RpcArgDef:
        """Create from dictionary representation."""
        return cls(name=data["name"], type=data["type"], default=data.get("default"))


@dataclass(frozen=True)
class RpcDef:
    """Stored-procedure signature.

    Attributes:
        name: Procedure name
        returns: Return type expression: "T", "T[]" or "void"
        args: Ordered arguments
        sql: Procedure body
        language: Procedure language
        volatility: volatile, stable or immutable
        security: invoker or definer
        description: Human-readable description
    """

    name: str
    returns: str
    args: tuple[RpcArgDef, ...] = ()
    sql: str = ""
    language: str = "sql"
    volatility: str = "volatile"
    security: str = "invoker"
    description: str = ""

    def __post_init__(self) -> None:
        """Validate procedure definition."""
        if not self.name:
            raise ValueError("Procedure name cannot be empty")
        if not self.returns or not self.returns.strip():
            raise ValueError(f"returns required for procedure '{self.name}'")
        if not isinstance(self.args, tuple):
            object.__setattr__(self, "args", tuple(self.args))
        if self.volatility not in ("volatile", "stable", "immutable"):
            raise ValueError(
                f"volatility for '{self.name}' must be volatile, stable or immutable, got '{self.volatility}'"
            )
        if self.security not in ("invoker", "definer"):
            raise ValueError(
                f"security for '{self.name}' must be invoker or definer, got '{self.security}'"
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        result: dict[str, Any] = {
            "name": self.name,
            "returns": self.returns,
            "args": [a.to_dict() for a in self.args],
            "language": self.language,
            "volatility": self.volatility,
            "security": self.security,
        }
        if self.sql:
            result["sql"] = self.sql
        if self.description:
            result["description"] = self.description
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any], name: str | None = None) -> RpcDef:
        """Create from dictionary representation.

        Arguments may be a list of {name, type} entries or a name -> type
        mapping.
        """
        args_data = data.get("args") or []
        if isinstance(args_data, dict):
            args = tuple(
                RpcArgDef.from_dict({"name": k, **v}) if isinstance(v, dict) else RpcArgDef(k, v)
                for k, v in args_data.items()
            )
        else:
            args = tuple(RpcArgDef.from_dict(a) for a in args_data)
        return cls(
            name=name or data["name"],
            returns=data["returns"],
            args=args,
            sql=data.get("sql", ""),
            language=data.get("language", "sql"),
            volatility=data.get("volatility", "volatile"),
            security=data.get("security", "invoker"),
            description=data.get("description", ""),
        )


@dataclass(frozen=True)
class ComputedDef:
    """Derived property; type is inferred from the name when omitted."""

    name: str
    type: str | None = None
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        result: dict[str, Any] = {"name": self.name}
        if self.type:
            result["type"] = self.type
        if self.description:
            result["description"] = self.description
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any] | str) -> ComputedDef:
        """Create from dictionary representation or a bare name."""
        if isinstance(data, str):
            return cls(name=data)
        return cls(name=data["name"], type=data.get("type"), description=data.get("description", ""))


def _names_unique(kind: str, entity: str, names: list[str]) -> None:
    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise ValueError(f"Duplicate {kind} '{name}' in entity '{entity}'")
        seen.add(name)


@dataclass(frozen=True)
class EntityDef:
    """Definition of one entity.

    Attributes:
        name: Entity name (e.g. "user", "BlogPost")
        fields: Ordered field definitions
        relations: Ordered relation definitions
        computed: Derived properties
        rls: Access policy, if any
        indexes: Explicit index declarations
        rpc: Stored-procedure declarations
        timestamps: Whether emitters add created/updated timestamps
        tags: Free-form tags
        module: Owning module, for segregated schema layouts
        group: Display group
        metadata: Free-form metadata passed through to emitters
        description: Human-readable description

    Example:
        >>> Post = EntityDef(
        ...     name="post",
        ...     fields=(
        ...         FieldDef("id", "uuid"),
        ...         FieldDef("authorId", "ref", target="user"),
        ...     ),
        ...     relations=(RelationDef("author", RelationKind.BELONGS_TO, "user"),),
        ... )
    """

    name: str
    fields: tuple[FieldDef, ...] = ()
    relations: tuple[RelationDef, ...] = ()
    computed: tuple[ComputedDef, ...] = ()
    rls: RlsDef | None = None
    indexes: tuple[IndexDef, ...] = ()
    rpc: tuple[RpcDef, ...] = ()
    timestamps: bool = True
    tags: tuple[str, ...] = ()
    module: str | None = None
    group: str | None = None
    metadata: Mapping[str, Any] = dataclass_field(default_factory=dict)
    description: str = ""

    def __post_init__(self) -> None:
        """Validate entity definition."""
        if not self.name:
            raise ValueError("Entity name cannot be empty")
        for attr in ("fields", "relations", "computed", "indexes", "rpc", "tags"):
            value = getattr(self, attr)
            if not isinstance(value, tuple):
                object.__setattr__(self, attr, tuple(value))
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

        _names_unique("field", self.name, [f.name for f in self.fields])
        _names_unique("relation", self.name, [r.name for r in self.relations])
        _names_unique("procedure", self.name, [p.name for p in self.rpc])

    def get_field(self, name: str) -> FieldDef | None:
        """Get a field by name."""
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def get_relation(self, name: str) -> RelationDef | None:
        """Get a relation by name."""
        for r in self.relations:
            if r.name == name:
                return r
        return None

    def get_field_names(self) -> list[str]:
        """Get list of all field names."""
        return [f.name for f in self.fields]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        result: dict[str, Any] = {
            "name": self.name,
            "fields": [f.to_dict() for f in self.fields],
        }
        if self.relations:
            result["relations"] = [r.to_dict() for r in self.relations]
        if self.computed:
            result["computed"] = [c.to_dict() for c in self.computed]
        if self.rls is not None:
            result["rls"] = self.rls.to_dict()
        if self.indexes:
            result["indexes"] = [i.to_dict() for i in self.indexes]
        if self.rpc:
            result["rpc"] = [p.to_dict() for p in self.rpc]
        if not self.timestamps:
            result["timestamps"] = False
        if self.tags:
            result["tags"] = list(self.tags)
        if self.module:
            result["module"] = self.module
        if self.group:
            result["group"] = self.group
        if self.metadata:
            result["metadata"] = dict(self.metadata)
        if self.description:
            result["description"] = self.description
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EntityDef:
        """Create from dictionary representation.

        fields, relations and rpc accept either a list of named entries or
        a name -> declaration mapping (declaration order is preserved).
        """

        def _named(key: str, parse: Callable[..., Any], shorthand: str = "type") -> tuple[Any, ...]:
            raw = data.get(key) or []
            if isinstance(raw, dict):
                return tuple(
                    parse({shorthand: v} if isinstance(v, str) else v, name=k) for k, v in raw.items()
                )
            return tuple(parse(item) for item in raw)

        return cls(
            name=data["name"],
            fields=_named("fields", FieldDef.from_dict),
            relations=_named("relations", RelationDef.from_dict),
            computed=tuple(ComputedDef.from_dict(c) for c in data.get("computed", [])),
            rls=RlsDef.from_dict(data["rls"]) if data.get("rls") else None,
            indexes=tuple(IndexDef.from_dict(i) for i in data.get("indexes", [])),
            rpc=_named("rpc", RpcDef.from_dict, shorthand="returns"),
            timestamps=data.get("timestamps", True),
            tags=tuple(data.get("tags", ())),
            module=data.get("module"),
            group=data.get("group"),
            metadata=data.get("metadata") or {},
            description=data.get("description", ""),
        )
