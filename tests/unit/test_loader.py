"""
Unit tests for YAML/JSON entity document loading.

Tests cover:
- Document structure validation
- Parsing mapping and list forms
- DefinitionError for malformed entities
- YAML dump round trip
"""

import json

import pytest

from schemac.analysis.analyzer import analyze_entities
from schemac.errors import DefinitionError
from schemac.schema.loader import dump_yaml, parse_entities, parse_json, parse_yaml, validate_document
from schemac.schema.types import FieldKind, RelationKind

BLOG_YAML = """
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
      - {name: title, type: string, max: 200}
      - {name: authorId, type: ref, target: user}
    relations:
      - {name: author, kind: belongsTo, target: user}
    computed: [isPublished]
    indexes:
      - {fields: [title]}
    rpc:
      recent: post[]
"""


class TestValidateDocument:
    """Tests for validate_document."""

    def test_valid(self):
        """A well-formed document has no problems."""
        assert validate_document({"entities": [{"name": "user"}]}) == []

    def test_missing_entities(self):
        """The entities key is required."""
        assert validate_document({}) == ["Document has no 'entities' list"]

    def test_entities_not_list(self):
        """entities must be a list."""
        assert validate_document({"entities": {"user": {}}}) == ["'entities' must be a list"]

    def test_missing_name(self):
        """Every entity needs a name."""
        assert validate_document({"entities": [{"fields": {}}]}) == ["entities[0] has no name"]

    def test_duplicate_names(self):
        """Duplicate names are reported."""
        problems = validate_document({"entities": [{"name": "user"}, {"name": "user"}]})
        assert problems == ["Duplicate entity name 'user'"]

    def test_not_a_mapping(self):
        """Top-level lists and scalars are rejected."""
        assert validate_document([{"name": "user"}]) == ["Document must be a mapping"]
        assert validate_document("user") == ["Document must be a mapping"]

    def test_bad_fields(self):
        """fields must be a list or mapping."""
        problems = validate_document({"entities": [{"name": "user", "fields": "id"}]})
        assert problems == ["Entity 'user': 'fields' must be a list or mapping"]


class TestParse:
    """Tests for parse_yaml / parse_json."""

    def test_parse_yaml(self):
        """Mapping and list forms both parse."""
        user, post = parse_yaml(BLOG_YAML)
        assert user.get_field_names() == ["id", "email"]
        assert user.get_field("email").unique is True
        assert user.relations[0].kind == RelationKind.HAS_MANY
        assert post.get_field("title").constraints.max == 200
        assert post.get_field("authorId").kind == FieldKind.REFERENCE
        assert post.computed[0].name == "isPublished"
        assert post.indexes[0].fields == ("title",)
        assert post.rpc[0].returns == "post[]"

    def test_parse_json(self):
        """JSON documents parse the same way."""
        doc = {"entities": [{"name": "tag", "fields": [{"name": "label", "type": "string"}]}]}
        (tag,) = parse_json(json.dumps(doc))
        assert tag.name == "tag"

    def test_parsed_entities_analyze(self):
        """Parsed documents feed straight into analysis."""
        result = analyze_entities(parse_yaml(BLOG_YAML))
        assert result.names == ["user", "post"]
        assert result.get("user").get_relation("posts").foreign_key == "authorId"

    def test_invalid_document(self):
        """Structural problems raise DefinitionError."""
        with pytest.raises(DefinitionError, match="Invalid entity document"):
            parse_entities({"entities": [{"fields": {}}]})

    def test_invalid_entity(self):
        """Malformed declarations raise DefinitionError naming the entity."""
        doc = {"entities": [{"name": "post", "fields": {"status": {"type": "enum"}}}]}
        with pytest.raises(DefinitionError, match="Invalid entity 'post'") as exc_info:
            parse_entities(doc)
        assert exc_info.value.entity == "post"
        assert exc_info.value.code == "DEFINITION_ERROR"

    def test_missing_relation_target(self):
        """Missing keys are reported."""
        doc = {"entities": [{"name": "post", "relations": [{"name": "author", "kind": "belongsTo"}]}]}
        with pytest.raises(DefinitionError, match="missing key"):
            parse_entities(doc)

    def test_empty_yaml(self):
        """An empty document is invalid."""
        with pytest.raises(DefinitionError):
            parse_yaml("")

    def test_top_level_list(self):
        """A YAML list document raises DefinitionError."""
        with pytest.raises(DefinitionError, match="Document must be a mapping"):
            parse_yaml("- name: user\n")

    def test_malformed_yaml(self):
        """YAML syntax errors are wrapped."""
        with pytest.raises(DefinitionError, match="Invalid YAML") as exc_info:
            parse_yaml("entities: [unclosed\n")
        assert exc_info.value.code == "DEFINITION_ERROR"

    def test_malformed_json(self):
        """JSON syntax errors are wrapped."""
        with pytest.raises(DefinitionError, match="Invalid JSON"):
            parse_json("{\"entities\": [")

    def test_json_top_level_list(self):
        """A JSON array document raises DefinitionError."""
        with pytest.raises(DefinitionError, match="Document must be a mapping"):
            parse_json('[{"name": "user"}]')


class TestDumpYaml:
    """Tests for dump_yaml."""

    def test_round_trip(self):
        """Dumped documents parse back to equal entities."""
        entities = parse_yaml(BLOG_YAML)
        assert parse_yaml(dump_yaml(entities)) == entities
