"""
Dependency graph and creation ordering.

An entity depends on every entity it references through a ref field or a
belongs-to relation: records of the referenced entity must exist first.
topological_sort orders analyzed schemas so dependencies come first,
tolerating cycles.

Invariants:
    - depends_on holds canonical entity names only, without duplicates or
      self-references
    - Every schema appears exactly once in the sorted output
    - For each schema s and each d in s.depends_on, d precedes s unless
      the (s, d) edge was reported as CIRCULAR_DEPENDENCY
    - Traversal follows declaration order, so output is stable for
      identical input
"""

from __future__ import annotations

import logging
from typing import Iterator, Sequence

from ..errors import InvariantViolationError
from ..schema.types import EntityDef, RelationKind
from .diagnostics import Diagnostic, DiagnosticKind
from .ir import AnalyzedField, AnalyzedRelation, AnalyzedSchema
from .lookup import EntityIndex

logger = logging.getLogger(__name__)


def collect_dependencies(
    entity: EntityDef,
    fields: Sequence[AnalyzedField],
    relations: Sequence[AnalyzedRelation],
    index: EntityIndex,
) -> tuple[tuple[str, ...], list[Diagnostic]]:
    """Compute the depends-on list of one entity.

    Ref-field targets come first (field order), then belongs-to targets
    (relation order).

    Returns:
        Tuple of (canonical dependency names, diagnostics produced)
    """
    depends_on: list[str] = []
    diagnostics: list[Diagnostic] = []

    def add(name: str) -> None:
        if name != entity.name and name not in depends_on:
            depends_on.append(name)

    for f in fields:
        if not f.ref_target:
            continue
        canonical = index.resolve(f.ref_target)
        if canonical is None:
            diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.UNKNOWN_RELATION_TARGET,
                    entity=entity.name,
                    subject=f.name,
                    message=f"Ref field '{f.name}' targets unknown entity '{f.ref_target}'.",
                    suggestion=f"Define an entity named '{f.ref_target}' or fix the target name.",
                )
            )
            continue
        add(canonical)

    for r in relations:
        if r.kind == RelationKind.BELONGS_TO and r.target_known:
            add(r.target)

    return tuple(depends_on), diagnostics


def topological_sort(
    schemas: Sequence[AnalyzedSchema],
) -> tuple[list[AnalyzedSchema], list[Diagnostic]]:
    """Order schemas so that dependencies precede dependents.

    Depth-first traversal in declaration order. A dependency that is
    still being visited closes a cycle: the edge is dropped from ordering
    and reported as CIRCULAR_DEPENDENCY. Runs in O(N + E).

    Returns:
        Tuple of (ordered schemas, cycle diagnostics)

    Raises:
        InvariantViolationError: If a depends_on name is not in schemas
    """
    by_name = {s.name: s for s in schemas}
    visited: set[str] = set()
    visiting: set[str] = set()
    ordered: list[AnalyzedSchema] = []
    diagnostics: list[Diagnostic] = []
    # (schema, remaining dependencies) for each open node, deepest last
    stack: list[tuple[AnalyzedSchema, Iterator[str]]] = []

    def enter(schema: AnalyzedSchema) -> None:
        visiting.add(schema.name)
        stack.append((schema, iter(schema.depends_on)))

    for root in schemas:
        if root.name in visited:
            continue
        enter(root)
        while stack:
            schema, pending = stack[-1]
            for dep in pending:
                if dep not in by_name:
                    raise InvariantViolationError(
                        f"'{schema.name}' depends on '{dep}', which is not in the schema set",
                        entity=schema.name,
                        invariant="depends_on",
                    )
                if dep in visiting:
                    logger.debug(f"Back-edge {schema.name} -> {dep}")
                    diagnostics.append(
                        Diagnostic(
                            kind=DiagnosticKind.CIRCULAR_DEPENDENCY,
                            entity=schema.name,
                            subject=dep,
                            message=(
                                f"Circular dependency between '{schema.name}' and '{dep}'; "
                                f"'{schema.name}' may be created before '{dep}'."
                            ),
                            suggestion="Make one side of the cycle nullable so it can be filled in later.",
                        )
                    )
                    continue
                if dep not in visited:
                    enter(by_name[dep])
                    break
            else:
                stack.pop()
                visiting.discard(schema.name)
                visited.add(schema.name)
                ordered.append(schema)

    return ordered, diagnostics


def cycle_edges(diagnostics: Sequence[Diagnostic]) -> list[tuple[str, str]]:
    """(entity, dependency) edges that were dropped because of cycles.

    Emitters use these to defer foreign-key constraints.
    """
    return [
        (d.entity, d.subject)
        for d in diagnostics
        if d.kind == DiagnosticKind.CIRCULAR_DEPENDENCY and d.subject
    ]
