"""
Unit tests for the schema orchestrator.

Tests cover:
- Naming, table and endpoint derivation per entity
- Creation-safe ordering of the full set
- Junction detection
- Diagnostics collection and logging
- Result serialization and fingerprinting
"""

import json
import logging

import pytest

from schemac.analysis.analyzer import analyze_entities, analyze_entity, is_junction
from schemac.analysis.diagnostics import DiagnosticKind
from schemac.analysis.fields import analyze_fields
from schemac.analysis.ir import FkSource, InferredType
from schemac.analysis.lookup import EntityIndex
from schemac.config import AnalyzerOptions
from schemac.errors import DuplicateEntityError
from schemac.schema.builders import (
    belongs_to,
    define_entity,
    enum,
    field,
    has_many,
    index,
    ref,
    rls,
    rpc,
)


def blog():
    user = define_entity(
        "user",
        fields=[field("id", "uuid"), field("email", "email", unique=True), field("name")],
        relations=[has_many("posts", "post")],
    )
    post = define_entity(
        "post",
        fields=[
            field("id", "uuid"),
            field("title", max=200),
            ref("authorId", "user"),
            enum("status", ["draft", "published"]),
        ],
        relations=[belongs_to("author", "user"), has_many("comments", "comment")],
        computed=["isPublished", "commentCount"],
        rls=rls(scope={"authorId": "userId"}, bypass={"role": ["admin"]}),
        indexes=[index("status")],
        rpc=[rpc("search_posts", "post[]", args={"query": "string"})],
        tags=["content"],
        module="blog",
    )
    comment = define_entity(
        "comment",
        fields=[field("id", "uuid"), field("body", "text"), ref("postId", "post"), ref("authorId", "user")],
        relations=[belongs_to("post", "post"), belongs_to("author", "user")],
    )
    return [comment, post, user]


class TestAnalyzeEntities:
    """Tests for analyze_entities."""

    def test_creation_order(self):
        """Dependencies come first."""
        result = analyze_entities(blog())
        assert result.names == ["user", "post", "comment"]

    def test_names_and_paths(self):
        """Naming forms, table and endpoint are derived."""
        post = analyze_entities(blog()).get("post")
        assert post.singular == "post"
        assert post.plural == "posts"
        assert post.pascal_name == "Post"
        assert post.camel_name == "post"
        assert post.display_name == "Post"
        assert post.table_name == "posts"
        assert post.endpoint == "/api/posts"

    def test_compound_name(self):
        """Compound entity names get all forms."""
        schema = analyze_entities([define_entity("BlogPost", fields=[field("id", "uuid")])]).get("BlogPost")
        assert schema.pascal_name == "BlogPost"
        assert schema.camel_name == "blogPost"
        assert schema.display_name == "Blog Post"
        assert schema.table_name == "blogposts"

    def test_plural_entity_name(self):
        """Entities named in the plural keep their plural as table name."""
        schema = analyze_entities([define_entity("taxis", fields=[field("id", "uuid")])]).get("taxis")
        assert schema.singular == "taxi"
        assert schema.table_name == "taxis"
        assert schema.endpoint == "/api/taxis"

    def test_components_run(self):
        """Every per-entity component contributes."""
        post = analyze_entities(blog()).get("post")
        assert [f.name for f in post.fields] == ["id", "title", "authorId", "status"]
        assert post.get_relation("author").foreign_key == "authorId"
        assert post.get_relation("comments").foreign_key == "postId"
        assert [c.type for c in post.computed] == [InferredType.BOOLEAN, InferredType.NUMBER]
        assert post.depends_on == ("user",)
        assert post.rls.enabled and post.rls.select
        assert post.indexes[0].name == "idx_posts_status"
        assert post.rpc[0].storage_type == "SETOF posts"
        assert post.tags == ("content",)
        assert post.module == "blog"
        assert post.has_timestamps is True

    def test_no_diagnostics_for_complete_schema(self):
        """A fully specified schema produces no diagnostics."""
        assert analyze_entities(blog()).diagnostics == ()

    def test_options(self):
        """Options shape names and paths."""
        options = AnalyzerOptions(
            pluralization={"person": "persons"},
            table_map={"user": "app_users"},
            api_prefix="/v1/",
        )
        result = analyze_entities(blog() + [define_entity("person")], options)
        assert result.get("user").table_name == "app_users"
        assert result.get("user").endpoint == "/v1/users"
        assert result.get("person").plural == "persons"
        assert result.get("person").endpoint == "/v1/persons"

    def test_duplicate_entity(self):
        """Duplicate names are rejected."""
        with pytest.raises(DuplicateEntityError):
            analyze_entities([define_entity("user"), define_entity("user")])

    def test_empty(self):
        """An empty set analyzes to an empty result."""
        result = analyze_entities([])
        assert result.schemas == ()
        assert result.diagnostics == ()


class TestDiagnostics:
    """Tests for fail-soft behavior."""

    def test_fk_fallback(self):
        """Unresolvable keys produce a fallback diagnostic and a full result."""
        user = define_entity("user", relations=[has_many("posts", "post")])
        post = define_entity("post", fields=[field("id", "uuid"), field("title")])
        result = analyze_entities([user, post])
        assert result.names == ["user", "post"]
        relation = result.get("user").get_relation("posts")
        assert relation.foreign_key == "userId"
        assert relation.fk_source == FkSource.DEFAULT
        assert [d.kind for d in result.diagnostics] == [DiagnosticKind.FK_FALLBACK]
        assert result.warnings[0].startswith("[WARNING] FK_FALLBACK: user.posts - ")

    def test_cycle(self):
        """Mutual references are reported and both entities are kept."""
        a = define_entity("team", fields=[ref("leadId", "member", nullable=True)])
        b = define_entity("member", fields=[ref("teamId", "team")])
        result = analyze_entities([a, b])
        assert sorted(result.names) == ["member", "team"]
        kinds = [d.kind for d in result.diagnostics]
        assert kinds == [DiagnosticKind.CIRCULAR_DEPENDENCY]

    def test_unknown_rpc_type(self):
        """Unknown procedure types are reported against the entity."""
        post = define_entity("post", rpc=[rpc("total", "money")])
        result = analyze_entities([post])
        assert result.diagnostics[0].kind == DiagnosticKind.UNKNOWN_RPC_TYPE
        assert result.diagnostics[0].entity == "post"

    def test_diagnostics_logged(self, caplog):
        """Each diagnostic is logged as a warning."""
        user = define_entity("user", relations=[has_many("posts", "post")])
        post = define_entity("post")
        with caplog.at_level(logging.WARNING, logger="schemac.analysis.analyzer"):
            analyze_entities([user, post])
        assert any("FK_FALLBACK" in r.getMessage() for r in caplog.records)


class TestJunction:
    """Tests for junction detection."""

    def test_junction(self):
        """Two refs and nothing else is a junction."""
        fields = analyze_fields((field("id", "uuid"), ref("postId", "post"), ref("tagId", "tag")))
        assert is_junction(fields)

    def test_junction_with_one_extra_field(self):
        """One extra field is allowed."""
        fields = analyze_fields((ref("postId", "post"), ref("tagId", "tag"), field("createdAt", "date")))
        assert is_junction(fields)

    def test_not_junction(self):
        """Entities with their own data are not junctions."""
        fields = analyze_fields(
            (ref("postId", "post"), ref("authorId", "user"), field("body", "text"), field("score", "int"))
        )
        assert not is_junction(fields)

    def test_single_ref(self):
        """One ref is never a junction."""
        assert not is_junction(analyze_fields((field("id", "uuid"), ref("postId", "post"))))

    def test_flag_in_result(self):
        """The flag is set on analyzed schemas."""
        post = define_entity("post")
        tag = define_entity("tag")
        post_tag = define_entity("postTag", fields=[ref("postId", "post"), ref("tagId", "tag")])
        result = analyze_entities([post, tag, post_tag])
        assert result.get("postTag").is_junction
        assert not result.get("post").is_junction


class TestAnalyzeEntity:
    """Tests for analyze_entity."""

    def test_single_entity(self):
        """One entity can be analyzed against an index."""
        entities = blog()
        index = EntityIndex.build(entities)
        schema, diagnostics = analyze_entity(entities[0], index)
        assert schema.name == "comment"
        assert schema.depends_on == ("post", "user")
        assert diagnostics == []


class TestAnalysisResult:
    """Tests for result serialization."""

    def test_to_json(self):
        """Results serialize to JSON."""
        data = json.loads(analyze_entities(blog()).to_json())
        assert [s["name"] for s in data["schemas"]] == ["user", "post", "comment"]
        assert data["diagnostics"] == []

    def test_fingerprint_stable(self):
        """Identical input gives an identical fingerprint."""
        first = analyze_entities(blog()).fingerprint()
        second = analyze_entities(blog()).fingerprint()
        assert first == second
        assert first.startswith("sha256:")

    def test_fingerprint_changes_with_options(self):
        """Options that change names change the fingerprint."""
        default = analyze_entities(blog()).fingerprint()
        mapped = analyze_entities(blog(), AnalyzerOptions(table_map={"user": "app_users"})).fingerprint()
        assert default != mapped

    def test_get_unknown(self):
        """get returns None for unknown names."""
        assert analyze_entities(blog()).get("invoice") is None
