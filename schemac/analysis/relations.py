"""
Relation resolution.

Determines, for each declared relation, which field carries the foreign
key. Authors may omit foreign keys; they are inferred with a layered
strategy and, when nothing matches, defaulted with a diagnostic.

belongs-to (key lives on the owning entity):
    1. explicit foreign_key, verbatim
    2. a ref field on the owning entity whose target is the relation target
    3. a field named {target}Id / {target}_id / {target}ID (plural forms too)
    4. default {target}Id plus an FK_FALLBACK diagnostic

has-many / has-one (key lives on the target entity):
    1. explicit foreign_key, verbatim
    2. a belongs-to on the target pointing back at the source (its explicit
       key, or steps 2-3 above applied to the target's fields)
    3. steps 2-3 above applied to the target's fields for the source
    4. default {source}Id plus an FK_FALLBACK diagnostic

many-to-many is a has-many whose key lives on the join entity, annotated
with the join entity and the join key pointing at the target.

Invariants:
    - An explicit foreign_key is always returned unchanged
    - Exactly one FK_FALLBACK diagnostic is produced per defaulted relation
    - Resolution never raises for authoring problems
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from ..schema.types import EntityDef, FieldDef, FieldKind, RelationDef, RelationKind
from .diagnostics import Diagnostic, DiagnosticKind
from .ir import AnalyzedRelation, FkSource
from .lookup import EntityIndex
from .naming import pluralize, singular_camel, singular_pascal, singularize, to_snake_case

logger = logging.getLogger(__name__)


def foreign_key_candidates(target: str) -> set[str]:
    """Lowercased field names that conventionally hold a key to target.

    Example:
        >>> sorted(foreign_key_candidates("user"))
        ['user_id', 'userid', 'users_id', 'usersid']
    """
    forms = {singularize(target), pluralize(target), to_snake_case(singular_camel(target))}
    candidates: set[str] = set()
    for form in forms:
        candidates.add(f"{form}id")
        candidates.add(f"{form}_id")
    return candidates


def find_foreign_key_field(
    fields: Iterable[FieldDef],
    target: str,
    index: EntityIndex,
) -> Optional[str]:
    """Find the field among fields that points at target.

    Tries ref fields whose target matches first, then naming patterns
    (case-insensitive).

    Returns:
        Field name, or None when nothing matches
    """
    fields = tuple(fields)
    for f in fields:
        if f.kind == FieldKind.REFERENCE and f.target and index.matches(f.target, target):
            return f.name

    candidates = foreign_key_candidates(target)
    for f in fields:
        if f.name.lower() in candidates:
            return f.name
    return None


def _fallback(
    entity: EntityDef,
    relation: RelationDef,
    kind: RelationKind,
    target: str,
    default: str,
    reason: str,
) -> Diagnostic:
    logger.debug(f"FK fallback for {entity.name}.{relation.name}: {reason}")
    return Diagnostic(
        kind=DiagnosticKind.FK_FALLBACK,
        entity=entity.name,
        subject=relation.name,
        message=(
            f"Could not infer foreign key for {kind.value} relation '{relation.name}' "
            f"on '{entity.name}' targeting '{target}': {reason}. Using '{default}'."
        ),
        suggestion=f"Add 'foreign_key' option to the '{relation.name}' relation.",
    )


def _resolve_belongs_to(
    entity: EntityDef,
    relation: RelationDef,
    target: str,
    diagnostics: list[Diagnostic],
    index: EntityIndex,
) -> tuple[str, FkSource]:
    if relation.foreign_key:
        return relation.foreign_key, FkSource.EXPLICIT

    found = find_foreign_key_field(entity.fields, target, index)
    if found:
        return found, FkSource.INFERRED

    default = f"{singular_camel(relation.target)}Id"
    diagnostics.append(
        _fallback(
            entity,
            relation,
            RelationKind.BELONGS_TO,
            target,
            default,
            f"no ref field or '{default}'-style field on '{entity.name}'",
        )
    )
    return default, FkSource.DEFAULT


def _resolve_inverse(
    entity: EntityDef,
    relation: RelationDef,
    kind: RelationKind,
    target: str,
    holder: Optional[EntityDef],
    diagnostics: list[Diagnostic],
    index: EntityIndex,
) -> tuple[str, FkSource]:
    """Resolve a key that lives on holder (the target or join entity)."""
    if relation.foreign_key:
        return relation.foreign_key, FkSource.EXPLICIT

    if holder is not None:
        for back in holder.relations:
            if back.kind != RelationKind.BELONGS_TO or not index.matches(back.target, entity.name):
                continue
            found = back.foreign_key or find_foreign_key_field(holder.fields, entity.name, index)
            if found:
                return found, FkSource.INFERRED

        found = find_foreign_key_field(holder.fields, entity.name, index)
        if found:
            return found, FkSource.INFERRED
        reason = f"'{holder.name}' has no belongs-to or ref field pointing at '{entity.name}'"
    else:
        reason = f"'{target}' is not a known entity"

    default = f"{singular_camel(entity.name)}Id"
    diagnostics.append(_fallback(entity, relation, kind, target, default, reason))
    return default, FkSource.DEFAULT


def resolve_relation(
    entity: EntityDef,
    relation: RelationDef,
    index: EntityIndex,
) -> tuple[AnalyzedRelation, list[Diagnostic]]:
    """Resolve one relation of entity.

    Args:
        entity: Owning entity
        relation: Relation declaration
        index: Cross-entity lookup for the run

    Returns:
        Tuple of (analyzed relation, diagnostics produced)
    """
    diagnostics: list[Diagnostic] = []
    canonical = index.resolve(relation.target)
    target = canonical or relation.target
    if canonical is None:
        diagnostics.append(
            Diagnostic(
                kind=DiagnosticKind.UNKNOWN_RELATION_TARGET,
                entity=entity.name,
                subject=relation.name,
                message=f"Relation '{relation.name}' targets unknown entity '{relation.target}'.",
                suggestion=f"Define an entity named '{relation.target}' or fix the target name.",
            )
        )

    through: Optional[str] = None
    other_key: Optional[str] = None
    local_field: Optional[str] = None

    if relation.kind == RelationKind.BELONGS_TO:
        kind = RelationKind.BELONGS_TO
        foreign_key, source = _resolve_belongs_to(entity, relation, target, diagnostics, index)
        local_field = foreign_key
    elif relation.is_many_to_many:
        kind = RelationKind.MANY_TO_MANY
        holder = index.get(relation.target)
        if relation.through:
            join = index.get(relation.through)
            through = join.name if join is not None else relation.through
            if join is None:
                diagnostics.append(
                    Diagnostic(
                        kind=DiagnosticKind.MISSING_JOIN_ENTITY,
                        entity=entity.name,
                        subject=relation.name,
                        message=(
                            f"Join entity '{relation.through}' of many-to-many relation "
                            f"'{relation.name}' is not defined."
                        ),
                        suggestion=f"Define an entity named '{relation.through}' with keys to both sides.",
                    )
                )
            else:
                holder = join
                other_key = relation.other_key or find_foreign_key_field(join.fields, target, index)
        other_key = other_key or relation.other_key or f"{singular_camel(relation.target)}Id"
        foreign_key, source = _resolve_inverse(
            entity, relation, kind, target, holder, diagnostics, index
        )
    else:
        kind = relation.kind
        foreign_key, source = _resolve_inverse(
            entity, relation, kind, target, index.get(relation.target), diagnostics, index
        )

    analyzed = AnalyzedRelation(
        name=relation.name,
        kind=kind,
        target=target,
        target_pascal=singular_pascal(target),
        foreign_key=foreign_key,
        fk_source=source,
        local_field=local_field,
        target_known=canonical is not None,
        eager=relation.eager,
        order_by=relation.order_by,
        limit=relation.limit,
        through=through,
        other_key=other_key,
    )
    return analyzed, diagnostics


def resolve_relations(
    entity: EntityDef,
    index: EntityIndex,
) -> tuple[tuple[AnalyzedRelation, ...], list[Diagnostic]]:
    """Resolve every relation of entity in declaration order."""
    relations: list[AnalyzedRelation] = []
    diagnostics: list[Diagnostic] = []
    for relation in entity.relations:
        analyzed, produced = resolve_relation(entity, relation, index)
        relations.append(analyzed)
        diagnostics.extend(produced)
    return tuple(relations), diagnostics
