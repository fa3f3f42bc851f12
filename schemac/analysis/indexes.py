"""
Index planning.

Merges explicitly declared indexes with implied ones. Passes run in this
order, each skipping field sets already covered:

    1. explicit declarations (always kept)
    2. one index per ref field
    3. one unique index per unique field other than "id"

De-duplication is by exact field set: an explicit composite index over
(tenantId, authorId) does not cover authorId alone.
"""

from __future__ import annotations

import logging
from typing import Sequence

from ..schema.types import IndexDef
from .ir import AnalyzedField, AnalyzedIndex
from .naming import to_snake_case

logger = logging.getLogger(__name__)

PRIMARY_KEY_FIELD = "id"


def _explicit_name(table: str, fields: Sequence[str]) -> str:
    return f"idx_{table}_{'_'.join(fields)}"


def plan_indexes(
    table: str,
    fields: Sequence[AnalyzedField],
    declared: Sequence[IndexDef] = (),
) -> list[AnalyzedIndex]:
    """Plan the indexes of one table.

    Args:
        table: Storage table name
        fields: Analyzed fields of the entity
        declared: Explicit index declarations

    Returns:
        Index descriptors: explicit first, then ref-field, then unique-field
    """
    indexes: list[AnalyzedIndex] = []
    seen: set[frozenset[str]] = set()

    for decl in declared:
        indexes.append(
            AnalyzedIndex(
                name=decl.name or _explicit_name(table, decl.fields),
                table=table,
                fields=decl.fields,
                type=decl.type,
                unique=decl.unique,
                using=decl.using,
                where=decl.where,
                concurrently=decl.concurrently,
                auto_generated=False,
            )
        )
        seen.add(frozenset(decl.fields))

    for f in fields:
        key = frozenset((f.name,))
        if f.is_ref and key not in seen:
            indexes.append(
                AnalyzedIndex(
                    name=f"idx_{table}_{to_snake_case(f.name)}",
                    table=table,
                    fields=(f.name,),
                    auto_generated=True,
                )
            )
            seen.add(key)

    for f in fields:
        key = frozenset((f.name,))
        if f.unique and f.name != PRIMARY_KEY_FIELD and key not in seen:
            indexes.append(
                AnalyzedIndex(
                    name=f"idx_{table}_{to_snake_case(f.name)}_unique",
                    table=table,
                    fields=(f.name,),
                    unique=True,
                    auto_generated=True,
                )
            )
            seen.add(key)

    logger.debug(f"Planned {len(indexes)} indexes for {table}")
    return indexes
