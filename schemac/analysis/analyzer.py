"""
Schema orchestrator.

Entry point of the analysis stage. Builds the cross-entity index once,
analyzes every entity independently (fields, relations, computed fields,
dependencies, access policy, indexes, procedures), then orders the
result so that dependencies come first.

Invariants:
    - Every input entity appears exactly once in the result
    - Authoring problems become diagnostics; only DuplicateEntityError and
      InvariantViolationError escape analyze_entities
    - Identical input and options produce an identical result

How to change safely:
    - Per-entity analysis must only read the EntityIndex, never the
      results of other entities, so the entity loop stays order-free
    - New per-entity stages return (value, diagnostics) like the others
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from ..config import AnalyzerOptions
from ..errors import InvariantViolationError
from ..schema.types import EntityDef
from .computed import analyze_computed
from .diagnostics import Diagnostic
from .fields import analyze_fields
from .graph import collect_dependencies, topological_sort
from .indexes import PRIMARY_KEY_FIELD, plan_indexes
from .ir import AnalysisResult, AnalyzedField, AnalyzedRpc, AnalyzedSchema
from .lookup import EntityIndex
from .naming import pluralize, singular_camel, singular_pascal, singularize, to_display_name
from .relations import resolve_relations
from .rls import normalize_rls
from .rpc import analyze_rpc

logger = logging.getLogger(__name__)


def is_junction(fields: Sequence[AnalyzedField]) -> bool:
    """Whether an entity only joins other entities.

    True for at least two ref fields and at most one other field besides
    the primary key.
    """
    refs = sum(1 for f in fields if f.is_ref)
    others = sum(1 for f in fields if not f.is_ref and f.name != PRIMARY_KEY_FIELD)
    return refs >= 2 and others <= 1


def analyze_entity(
    entity: EntityDef,
    index: EntityIndex,
) -> tuple[AnalyzedSchema, list[Diagnostic]]:
    """Analyze one entity against the run's entity index.

    Returns:
        Tuple of (analyzed schema, diagnostics produced)
    """
    options = index.options
    diagnostics: list[Diagnostic] = []

    plural = pluralize(entity.name, options.pluralization)
    table = index.tables[entity.name]
    camel = singular_camel(entity.name)

    fields = analyze_fields(entity.fields)

    relations, produced = resolve_relations(entity, index)
    diagnostics.extend(produced)

    depends_on, produced = collect_dependencies(entity, fields, relations, index)
    diagnostics.extend(produced)

    procedures: list[AnalyzedRpc] = []
    for rpc in entity.rpc:
        analyzed_rpc, produced = analyze_rpc(rpc, index, owner=entity)
        procedures.append(analyzed_rpc)
        diagnostics.extend(produced)

    schema = AnalyzedSchema(
        name=entity.name,
        singular=singularize(entity.name),
        plural=plural,
        pascal_name=singular_pascal(entity.name),
        camel_name=camel,
        display_name=to_display_name(camel),
        table_name=table,
        endpoint=f"{options.api_prefix}/{plural}",
        fields=fields,
        relations=relations,
        computed=tuple(analyze_computed(c.name, c.type) for c in entity.computed),
        depends_on=depends_on,
        is_junction=is_junction(fields),
        rls=normalize_rls(entity.rls),
        indexes=tuple(plan_indexes(table, fields, entity.indexes)),
        rpc=tuple(procedures),
        has_timestamps=entity.timestamps,
        tags=entity.tags,
        module=entity.module,
        group=entity.group,
        metadata=entity.metadata,
        description=entity.description,
    )
    logger.debug(
        f"Analyzed {entity.name}: {len(fields)} fields, {len(relations)} relations, "
        f"depends on {list(depends_on)}"
    )
    return schema, diagnostics


def _verify(schemas: Sequence[AnalyzedSchema], index: EntityIndex) -> None:
    """Check cross-schema invariants of the finished result.

    Raises:
        InvariantViolationError: If the result is internally inconsistent
    """
    if len(schemas) != len(index):
        raise InvariantViolationError(
            f"Expected {len(index)} analyzed schemas, got {len(schemas)}",
            invariant="completeness",
        )
    for schema in schemas:
        for relation in schema.relations:
            if relation.target_known and relation.target not in index:
                raise InvariantViolationError(
                    f"Relation '{relation.name}' points at '{relation.target}', "
                    f"which is not in the entity set",
                    entity=schema.name,
                    invariant="relation_target",
                )
        for dep in schema.depends_on:
            if dep not in index:
                raise InvariantViolationError(
                    f"Dependency '{dep}' is not in the entity set",
                    entity=schema.name,
                    invariant="depends_on",
                )


def analyze_entities(
    entities: Iterable[EntityDef],
    options: Optional[AnalyzerOptions] = None,
) -> AnalysisResult:
    """Analyze a full entity set.

    Args:
        entities: Entity definitions in declaration order
        options: Pluralization, table-name and path-prefix configuration

    Returns:
        AnalysisResult with schemas in creation-safe order

    Raises:
        DuplicateEntityError: If two entities share a name
        InvariantViolationError: If the analysis produced an inconsistent result

    Example:
        >>> result = analyze_entities([user, post])
        >>> result.names
        ['user', 'post']
    """
    index = EntityIndex.build(entities, options)
    schemas: list[AnalyzedSchema] = []
    diagnostics: list[Diagnostic] = []

    for entity in index.entities.values():
        schema, produced = analyze_entity(entity, index)
        schemas.append(schema)
        diagnostics.extend(produced)

    ordered, cycles = topological_sort(schemas)
    diagnostics.extend(cycles)
    _verify(ordered, index)

    for diagnostic in diagnostics:
        logger.warning(str(diagnostic))
    logger.info(f"Analyzed {len(ordered)} entities with {len(diagnostics)} diagnostics")

    return AnalysisResult(schemas=tuple(ordered), diagnostics=tuple(diagnostics))
