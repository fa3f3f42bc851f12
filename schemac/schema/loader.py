"""
YAML/JSON entity document parsing.

Document format:

    entities:
      - name: user
        fields:
          id: uuid
          email: {type: email, unique: true}
        relations:
          posts: {kind: hasMany, target: post}
      - name: post
        fields:
          - {name: id, type: uuid}
          - {name: authorId, type: ref, target: user}

Invariants:
    - Parsing never reorders entities, fields or relations
    - Structural problems are reported by validate_document() as strings;
      parse_entities() raises DefinitionError on the first bad entity
"""

from __future__ import annotations

import json
import logging
from typing import Any

import yaml

from ..errors import DefinitionError
from .types import EntityDef

logger = logging.getLogger(__name__)


def validate_document(data: Any) -> list[str]:
    """Check document structure without building definitions.

    Returns:
        List of human-readable problems (empty when the document is usable)
    """
    if not isinstance(data, dict):
        return ["Document must be a mapping"]
    errors: list[str] = []
    entities = data.get("entities")
    if entities is None:
        return ["Document has no 'entities' list"]
    if not isinstance(entities, list):
        return ["'entities' must be a list"]

    names: list[str] = []
    for i, entry in enumerate(entities):
        if not isinstance(entry, dict):
            errors.append(f"entities[{i}] must be a mapping")
            continue
        name = entry.get("name")
        if not name:
            errors.append(f"entities[{i}] has no name")
            continue
        names.append(name)
        fields = entry.get("fields")
        if fields is not None and not isinstance(fields, (list, dict)):
            errors.append(f"Entity '{name}': 'fields' must be a list or mapping")

    seen: set[str] = set()
    for name in names:
        if name in seen:
            errors.append(f"Duplicate entity name '{name}'")
        seen.add(name)
    return errors


def parse_entity(data: dict[str, Any]) -> EntityDef:
    """Parse one entity from dict.

    Raises:
        DefinitionError: If the declaration is malformed
    """
    name = data.get("name")
    try:
        return EntityDef.from_dict(data)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        detail = f"missing key {e}" if isinstance(e, KeyError) else str(e)
        raise DefinitionError(f"Invalid entity '{name}': {detail}", entity=name) from e


def parse_entities(data: Any) -> list[EntityDef]:
    """Parse all entities from a document dict.

    Raises:
        DefinitionError: If the document or any entity is malformed
    """
    errors = validate_document(data)
    if errors:
        raise DefinitionError(f"Invalid entity document: {'; '.join(errors)}")
    entities = [parse_entity(entry) for entry in data["entities"]]
    logger.debug(f"Parsed {len(entities)} entity definitions")
    return entities


def parse_yaml(yaml_str: str) -> list[EntityDef]:
    """Parse entities from YAML string.

    Raises:
        DefinitionError: If the text is not valid YAML or not a valid document
    """
    try:
        data = yaml.safe_load(yaml_str)
    except yaml.YAMLError as e:
        raise DefinitionError(f"Invalid YAML: {e}") from e
    return parse_entities(data or {})


def parse_json(json_str: str) -> list[EntityDef]:
    """Parse entities from JSON string.

    Raises:
        DefinitionError: If the text is not valid JSON or not a valid document
    """
    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise DefinitionError(f"Invalid JSON: {e}") from e
    return parse_entities(data or {})


def dump_yaml(entities: list[EntityDef]) -> str:
    """Serialize entities to YAML (callable predicates are omitted)."""
    return yaml.dump(
        {"entities": [e.to_dict() for e in entities]},
        default_flow_style=False,
        sort_keys=False,
    )
