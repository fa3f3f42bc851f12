"""
Cross-entity name index.

Relation targets, ref-field targets and join entities are written by hand
and do not always match an entity name exactly ("users" vs "user",
"BlogPost" vs "blogPost"). EntityIndex resolves such names to canonical
entity names. It is built once per compilation run and read-only after
that.

Lookup order for a name n:
    1. exact entity name
    2. singular(n) matched against entity names
    3. plural(n) matched against entity names
    4. case-insensitive match of n, singular(n), plural(n) against each
       entity's name, singular and plural forms (first declared wins)

Invariants:
    - Entity names are unique (DuplicateEntityError otherwise)
    - resolve() returns only names present in the entity set
    - Table names are computed once here and shared by all analyzers
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from ..config import AnalyzerOptions
from ..errors import DuplicateEntityError
from ..schema.types import EntityDef
from .naming import pluralize, singularize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntityIndex:
    """Read-only lookup over all entities of a run.

    Attributes:
        entities: Entity definitions by canonical name, in declaration order
        tables: Storage table name by canonical name
        options: Configuration used to derive plural and table names
    """

    entities: Mapping[str, EntityDef]
    tables: Mapping[str, str]
    options: AnalyzerOptions
    _exact: Mapping[str, str]
    _folded: Mapping[str, str]

    @classmethod
    def build(cls, entities: Iterable[EntityDef], options: Optional[AnalyzerOptions] = None) -> EntityIndex:
        """Index a list of entity definitions.

        Raises:
            DuplicateEntityError: If two entities share a name
        """
        options = options or AnalyzerOptions()
        by_name: dict[str, EntityDef] = {}
        tables: dict[str, str] = {}
        folded: dict[str, str] = {}

        for entity in entities:
            if entity.name in by_name:
                raise DuplicateEntityError(entity.name)
            by_name[entity.name] = entity
            plural = pluralize(entity.name, options.pluralization)
            tables[entity.name] = options.table_map.get(entity.name) or plural
            for variant in (entity.name.lower(), singularize(entity.name), plural):
                # first declared entity keeps an ambiguous folded key
                folded.setdefault(variant, entity.name)

        logger.debug(f"Indexed {len(by_name)} entities")
        return cls(
            entities=MappingProxyType(by_name),
            tables=MappingProxyType(tables),
            options=options,
            _exact=MappingProxyType({name: name for name in by_name}),
            _folded=MappingProxyType(folded),
        )

    def __contains__(self, name: object) -> bool:
        return name in self._exact

    def __len__(self) -> int:
        return len(self._exact)

    @property
    def names(self) -> list[str]:
        """Canonical entity names in declaration order."""
        return list(self._exact)

    def resolve(self, name: str) -> Optional[str]:
        """Resolve a hand-written entity reference to a canonical name.

        Returns:
            Canonical entity name, or None when nothing matches
        """
        if name in self._exact:
            return name
        singular = singularize(name)
        if singular in self._exact:
            return singular
        plural = pluralize(name, self.options.pluralization)
        if plural in self._exact:
            return plural
        for variant in (name.lower(), singular, plural):
            if variant in self._folded:
                return self._folded[variant]
        return None

    def get(self, name: str) -> Optional[EntityDef]:
        """Resolve a name and return the entity definition."""
        canonical = self.resolve(name)
        return self.entities[canonical] if canonical is not None else None

    def table_for(self, name: str) -> Optional[str]:
        """Storage table name of a canonical entity name."""
        return self.tables.get(name)

    def matches(self, reference: str, entity_name: str) -> bool:
        """Whether a hand-written reference resolves to entity_name.

        Falls back to comparing naming variants directly when the
        reference is not a known entity at all.
        """
        canonical = self.resolve(reference)
        if canonical is not None:
            return canonical == entity_name
        ref_forms = {reference.lower(), singularize(reference), pluralize(reference, self.options.pluralization)}
        entity_forms = {
            entity_name.lower(),
            singularize(entity_name),
            pluralize(entity_name, self.options.pluralization),
        }
        return bool(ref_forms & entity_forms)
