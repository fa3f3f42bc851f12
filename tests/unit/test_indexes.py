"""
Unit tests for index planning.

Tests cover:
- Implied indexes for ref and unique fields
- Explicit declarations and naming
- De-duplication by exact field set
"""

from schemac.analysis.fields import analyze_fields
from schemac.analysis.indexes import plan_indexes
from schemac.schema.builders import field, index, ref
from schemac.schema.types import IndexType

FIELDS = analyze_fields(
    (
        field("id", "uuid", unique=True),
        field("slug", unique=True),
        ref("authorId", "user"),
        ref("tenantId", "tenant"),
        field("title"),
    )
)


class TestImpliedIndexes:
    """Tests for indexes implied by fields."""

    def test_ref_and_unique(self):
        """Ref fields get an index, unique fields a unique index."""
        indexes = plan_indexes("posts", FIELDS)
        assert [i.name for i in indexes] == [
            "idx_posts_author_id",
            "idx_posts_tenant_id",
            "idx_posts_slug_unique",
        ]
        assert all(i.auto_generated for i in indexes)
        assert indexes[2].unique is True
        assert indexes[0].unique is False

    def test_primary_key_skipped(self):
        """The id field is never indexed again."""
        indexes = plan_indexes("posts", FIELDS)
        assert all(i.fields != ("id",) for i in indexes)

    def test_table_carried(self):
        """Each index names its table."""
        assert {i.table for i in plan_indexes("posts", FIELDS)} == {"posts"}


class TestExplicitIndexes:
    """Tests for declared indexes."""

    def test_explicit_first_with_default_name(self):
        """Explicit indexes come first and get a generated name."""
        indexes = plan_indexes("posts", FIELDS, [index("title")])
        assert indexes[0].name == "idx_posts_title"
        assert indexes[0].auto_generated is False

    def test_explicit_name_and_options(self):
        """Explicit options are kept."""
        declared = index(
            "title",
            name="posts_title_search",
            type="gin",
            using="gin (to_tsvector('english', title))",
            where="deleted_at IS NULL",
            concurrently=True,
        )
        idx = plan_indexes("posts", FIELDS, [declared])[0]
        assert idx.name == "posts_title_search"
        assert idx.type == IndexType.GIN
        assert idx.using.startswith("gin")
        assert idx.where == "deleted_at IS NULL"
        assert idx.concurrently is True

    def test_explicit_suppresses_implied(self):
        """An explicit index on the same single field replaces the implied one."""
        indexes = plan_indexes("posts", FIELDS, [index("authorId")])
        author = [i for i in indexes if i.fields == ("authorId",)]
        assert len(author) == 1
        assert author[0].auto_generated is False

    def test_explicit_unique_suppresses_unique(self):
        """An explicit index on a unique field suppresses the unique index."""
        indexes = plan_indexes("posts", FIELDS, [index("slug", unique=True)])
        assert [i.name for i in indexes].count("idx_posts_slug_unique") == 0

    def test_composite_does_not_suppress(self):
        """A composite index does not cover a single field."""
        indexes = plan_indexes("posts", FIELDS, [index("tenantId", "authorId")])
        names = [i.name for i in indexes]
        assert names[0] == "idx_posts_tenantId_authorId"
        assert "idx_posts_author_id" in names
        assert "idx_posts_tenant_id" in names

    def test_to_dict(self):
        """Index descriptors serialize."""
        d = plan_indexes("posts", FIELDS)[0].to_dict()
        assert d == {
            "name": "idx_posts_author_id",
            "table": "posts",
            "fields": ["authorId"],
            "type": "btree",
            "unique": False,
            "auto_generated": True,
        }
