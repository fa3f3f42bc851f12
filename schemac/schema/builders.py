"""
Convenience constructors for entity declarations.

These are the preferred way to declare entities in Python code:

    >>> from schemac.schema.builders import define_entity, field, ref, belongs_to
    >>> Post = define_entity(
    ...     "post",
    ...     fields=[
    ...         field("id", "uuid"),
    ...         field("title", "string", max=200),
    ...         ref("authorId", "user"),
    ...     ],
    ...     relations=[belongs_to("author", "user")],
    ... )
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

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
    RlsPredicate,
    RlsScope,
    RpcArgDef,
    RpcDef,
)


def field(
    name: str,
    type: str | FieldKind = "string",
    *,
    nullable: bool = False,
    unique: bool = False,
    readonly: bool = False,
    default: Any = NO_DEFAULT,
    min: float | None = None,
    max: float | None = None,
    pattern: Any = None,
    message: str | None = None,
    hint: str | None = None,
    description: str = "",
) -> FieldDef:
    """Create a scalar FieldDef.

    Args:
        name: Field name
        type: Type tag or FieldKind
        nullable: Whether the field may be null
        unique: Whether values must be unique
        readonly: Whether the field is system-managed
        default: Default value
        min: Lower bound (value or length)
        max: Upper bound (value or length)
        pattern: Regex source or compiled pattern
        message: Custom validation message
        hint: Generator hint override
        description: Human-readable description

    Example:
        >>> email = field("email", "email", unique=True)
        >>> age = field("age", "int", min=0, max=150, nullable=True)
    """
    constraints = None
    if min is not None or max is not None or pattern is not None or message is not None:
        constraints = FieldConstraints(min=min, max=max, pattern=pattern, message=message)
    return FieldDef(
        name=name,
        type=type.value if isinstance(type, FieldKind) else type,
        nullable=nullable,
        unique=unique,
        readonly=readonly,
        default=default,
        constraints=constraints,
        hint=hint,
        description=description,
    )


def ref(name: str, target: str, *, nullable: bool = False, unique: bool = False) -> FieldDef:
    """Create a reference field pointing at another entity."""
    return FieldDef(name=name, type=FieldKind.REFERENCE.value, target=target, nullable=nullable, unique=unique)


def enum(
    name: str,
    values: Sequence[str],
    *,
    default: Any = NO_DEFAULT,
    nullable: bool = False,
) -> FieldDef:
    """Create an enumeration field."""
    return FieldDef(
        name=name,
        type=FieldKind.ENUM.value,
        values=tuple(values),
        default=default,
        nullable=nullable,
    )


def array(
    name: str,
    items: FieldDef | str,
    *,
    min: int | None = None,
    max: int | None = None,
    nullable: bool = False,
) -> FieldDef:
    """Create an array field; items may be a FieldDef or a bare type tag."""
    if isinstance(items, str):
        items = FieldDef(name="item", type=items)
    constraints = FieldConstraints(min=min, max=max) if min is not None or max is not None else None
    return FieldDef(
        name=name,
        type=FieldKind.ARRAY.value,
        items=items,
        constraints=constraints,
        nullable=nullable,
    )


def obj(name: str, shape: Iterable[FieldDef], *, nullable: bool = False) -> FieldDef:
    """Create a structured-object field from named sub-fields."""
    return FieldDef(name=name, type=FieldKind.OBJECT.value, shape=tuple(shape), nullable=nullable)


def belongs_to(
    name: str,
    target: str,
    *,
    foreign_key: str | None = None,
    eager: bool = False,
) -> RelationDef:
    """Declare that each record of this entity points at one target record."""
    return RelationDef(
        name=name,
        kind=RelationKind.BELONGS_TO,
        target=target,
        foreign_key=foreign_key,
        eager=eager,
    )


def has_many(
    name: str,
    target: str,
    *,
    foreign_key: str | None = None,
    eager: bool = False,
    order_by: Mapping[str, str] | None = None,
    limit: int | None = None,
    through: str | None = None,
    other_key: str | None = None,
) -> RelationDef:
    """Declare a one-to-many relation (many-to-many when through is given)."""
    return RelationDef(
        name=name,
        kind=RelationKind.HAS_MANY,
        target=target,
        foreign_key=foreign_key,
        eager=eager,
        order_by=tuple(order_by.items()) if order_by else None,
        limit=limit,
        through=through,
        other_key=other_key,
    )


def has_one(
    name: str,
    target: str,
    *,
    foreign_key: str | None = None,
    eager: bool = False,
) -> RelationDef:
    """Declare a one-to-one relation owned by the target side."""
    return RelationDef(
        name=name,
        kind=RelationKind.HAS_ONE,
        target=target,
        foreign_key=foreign_key,
        eager=eager,
    )


def many_to_many(
    name: str,
    target: str,
    *,
    through: str | None = None,
    foreign_key: str | None = None,
    other_key: str | None = None,
    eager: bool = False,
) -> RelationDef:
    """Declare a many-to-many relation through a join entity."""
    return RelationDef(
        name=name,
        kind=RelationKind.MANY_TO_MANY,
        target=target,
        foreign_key=foreign_key,
        eager=eager,
        through=through,
        other_key=other_key,
    )


def index(
    *fields: str,
    name: str | None = None,
    type: str | IndexType = IndexType.BTREE,
    using: str | None = None,
    unique: bool = False,
    where: str | None = None,
    concurrently: bool = False,
) -> IndexDef:
    """Declare an index over one or more fields."""
    return IndexDef(
        fields=tuple(fields),
        name=name,
        type=IndexType(type) if isinstance(type, str) else type,
        using=using,
        unique=unique,
        where=where,
        concurrently=concurrently,
    )


def rpc(
    name: str,
    returns: str,
    *,
    args: Mapping[str, str] | Sequence[RpcArgDef] | None = None,
    sql: str = "",
    language: str = "sql",
    volatility: str = "volatile",
    security: str = "invoker",
    description: str = "",
) -> RpcDef:
    """Declare a stored procedure.

    Example:
        >>> search = rpc("search_posts", "post[]", args={"query": "string"})
    """
    if isinstance(args, Mapping):
        arg_defs = tuple(RpcArgDef(name=k, type=v) for k, v in args.items())
    else:
        arg_defs = tuple(args or ())
    return RpcDef(
        name=name,
        returns=returns,
        args=arg_defs,
        sql=sql,
        language=language,
        volatility=volatility,
        security=security,
        description=description,
    )


def rls(
    *,
    scope: Mapping[str, str] | Sequence[RlsScope] | None = None,
    bypass: Mapping[str, Sequence[str]] | Sequence[RlsBypass] | None = None,
    select: RlsPredicate | None = None,
    insert: RlsPredicate | None = None,
    update: RlsPredicate | None = None,
    delete: RlsPredicate | None = None,
    sql: Mapping[str, str] | None = None,
) -> RlsDef:
    """Declare an access policy.

    scope maps row field -> context key; bypass maps context key -> values.

    Example:
        >>> policy = rls(scope={"tenantId": "tenantId"}, bypass={"role": ["admin"]})
    """
    if isinstance(scope, Mapping):
        scopes = tuple(RlsScope(field=f, context_key=k) for f, k in scope.items())
    else:
        scopes = tuple(scope or ())
    if isinstance(bypass, Mapping):
        bypasses = tuple(RlsBypass(context_key=k, values=tuple(v)) for k, v in bypass.items())
    else:
        bypasses = tuple(bypass or ())
    return RlsDef(
        scope=scopes,
        bypass=bypasses,
        select=select,
        insert=insert,
        update=update,
        delete=delete,
        sql=dict(sql or {}),
    )


def define_entity(
    name: str,
    *,
    fields: Iterable[FieldDef] = (),
    relations: Iterable[RelationDef] = (),
    computed: Iterable[str | ComputedDef] = (),
    rls: RlsDef | None = None,
    indexes: Iterable[IndexDef] = (),
    rpc: Iterable[RpcDef] = (),
    timestamps: bool = True,
    tags: Iterable[str] = (),
    module: str | None = None,
    group: str | None = None,
    metadata: Mapping[str, Any] | None = None,
    description: str = "",
) -> EntityDef:
    """Create an EntityDef; computed entries may be bare names."""
    return EntityDef(
        name=name,
        fields=tuple(fields),
        relations=tuple(relations),
        computed=tuple(c if isinstance(c, ComputedDef) else ComputedDef(name=c) for c in computed),
        rls=rls,
        indexes=tuple(indexes),
        rpc=tuple(rpc),
        timestamps=timestamps,
        tags=tuple(tags),
        module=module,
        group=group,
        metadata=dict(metadata or {}),
        description=description,
    )
