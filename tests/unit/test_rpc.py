"""
Unit tests for stored-procedure descriptor analysis.

Tests cover:
- Entity and entity-array returns with table names
- Scalar, scalar-array and void returns
- Unknown scalar types degrading to TEXT with a diagnostic
- Argument mapping
"""

from schemac.analysis.diagnostics import DiagnosticKind
from schemac.analysis.lookup import EntityIndex
from schemac.analysis.rpc import analyze_rpc, split_return_type
from schemac.config import AnalyzerOptions
from schemac.schema.builders import define_entity, field, rpc

POST = define_entity("post", fields=[field("id", "uuid")])
USER = define_entity("user", fields=[field("id", "uuid")])


def _index(options=None):
    return EntityIndex.build([USER, POST], options)


class TestSplitReturnType:
    """Tests for split_return_type."""

    def test_array(self):
        """Trailing [] marks an array."""
        assert split_return_type("post[]") == ("post", True)

    def test_scalar(self):
        """Plain names are not arrays."""
        assert split_return_type(" int ") == ("int", False)


class TestEntityReturns:
    """Tests for procedures returning entities."""

    def test_entity_array(self):
        """Entity arrays return a set of table rows."""
        p, diagnostics = analyze_rpc(rpc("feed", "post[]"), _index())
        assert p.is_entity
        assert p.is_array
        assert p.entity == "post"
        assert p.table == "posts"
        assert p.storage_type == "SETOF posts"
        assert p.python_type == "list[Post]"
        assert diagnostics == []

    def test_single_entity(self):
        """Single entities return one table row."""
        p, _ = analyze_rpc(rpc("latest", "post"), _index())
        assert p.is_entity
        assert not p.is_array
        assert p.storage_type == "posts"
        assert p.python_type == "Post"

    def test_table_map_override(self):
        """The resolved table name is used."""
        p, _ = analyze_rpc(rpc("feed", "post[]"), _index(AnalyzerOptions(table_map={"post": "blog_posts"})))
        assert p.storage_type == "SETOF blog_posts"
        assert p.table == "blog_posts"

    def test_entity_match_is_exact(self):
        """Entity names are matched exactly."""
        p, diagnostics = analyze_rpc(rpc("feed", "Posts[]"), _index())
        assert not p.is_entity
        assert p.storage_type == "TEXT[]"
        assert [d.kind for d in diagnostics] == [DiagnosticKind.UNKNOWN_RPC_TYPE]


class TestScalarReturns:
    """Tests for scalar and void procedures."""

    def test_scalar(self):
        """Scalars map through the storage table."""
        p, diagnostics = analyze_rpc(rpc("count_posts", "int"), _index())
        assert not p.is_entity
        assert p.storage_type == "INTEGER"
        assert p.python_type == "int"
        assert diagnostics == []

    def test_scalar_array(self):
        """Scalar arrays use the array storage form."""
        p, _ = analyze_rpc(rpc("post_titles", "string[]"), _index())
        assert p.storage_type == "TEXT[]"
        assert p.python_type == "list[str]"

    def test_void(self):
        """void procedures return nothing."""
        p, diagnostics = analyze_rpc(rpc("purge", "void"), _index())
        assert p.is_void
        assert p.storage_type == "VOID"
        assert p.python_type == "None"
        assert diagnostics == []

    def test_unknown_scalar(self):
        """Unknown scalars degrade to TEXT with a diagnostic."""
        owner = define_entity("post")
        p, diagnostics = analyze_rpc(rpc("balance", "money"), _index(), owner=owner)
        assert p.storage_type == "TEXT"
        assert p.python_type == "str"
        assert len(diagnostics) == 1
        assert diagnostics[0].kind == DiagnosticKind.UNKNOWN_RPC_TYPE
        assert diagnostics[0].entity == "post"
        assert diagnostics[0].subject == "balance"

    def test_structured(self):
        """Structured scalars map to JSONB."""
        p, _ = analyze_rpc(rpc("stats", "json"), _index())
        assert p.storage_type == "JSONB"


class TestArguments:
    """Tests for argument mapping."""

    def test_args(self):
        """Arguments map like return types."""
        p, diagnostics = analyze_rpc(
            rpc("search_posts", "post[]", args={"query": "string", "limit": "int", "since": "datetime"}),
            _index(),
        )
        assert [a.storage_type for a in p.args] == ["TEXT", "INTEGER", "TIMESTAMPTZ"]
        assert [a.python_type for a in p.args] == ["str", "int", "datetime"]
        assert diagnostics == []

    def test_unknown_arg(self):
        """Unknown argument types are reported per argument."""
        p, diagnostics = analyze_rpc(rpc("search", "void", args={"q": "tsquery"}), _index())
        assert p.args[0].storage_type == "TEXT"
        assert diagnostics[0].subject == "search.q"

    def test_options_carried(self):
        """Procedure options are carried through."""
        p, _ = analyze_rpc(
            rpc(
                "refresh",
                "void",
                sql="REFRESH MATERIALIZED VIEW stats",
                language="plpgsql",
                volatility="stable",
                security="definer",
                description="Refresh stats",
            ),
            _index(),
        )
        assert p.sql == "REFRESH MATERIALIZED VIEW stats"
        assert p.language == "plpgsql"
        assert p.volatility == "stable"
        assert p.security == "definer"
        assert p.to_dict()["description"] == "Refresh stats"

    def test_defaults(self):
        """Language, volatility and security have defaults."""
        p, _ = analyze_rpc(rpc("purge", "void"), _index())
        assert (p.language, p.volatility, p.security) == ("sql", "volatile", "invoker")
