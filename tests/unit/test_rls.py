"""
Unit tests for access-policy normalization.

Tests cover:
- Per-operation enabled flags from scope, predicates and SQL fragments
- Bypass conditions carried through
- Predicate source extraction from strings, lambdas and functions
"""

from schemac.analysis.rls import extract_predicate_source, normalize_rls
from schemac.schema.builders import rls
from schemac.schema.types import RlsDef


def owner_only(row, ctx):
    """Only the owner may change a row."""
    return row["ownerId"] == ctx["userId"]


def published_or_owner(row, ctx):
    if row["published"]:
        return True
    return row["ownerId"] == ctx["userId"]


class TestNormalizeRls:
    """Tests for normalize_rls."""

    def test_none(self):
        """No policy means every operation is disabled."""
        policy = normalize_rls(None)
        assert policy.enabled is False
        assert not any(policy.is_enabled(op) for op in ("select", "insert", "update", "delete"))

    def test_empty_policy(self):
        """An empty declaration enables nothing."""
        assert normalize_rls(RlsDef()).enabled is False

    def test_scope_enables_all(self):
        """Scope rules apply to every operation."""
        policy = normalize_rls(rls(scope={"tenantId": "tenantId"}))
        assert policy.enabled
        assert policy.select and policy.insert and policy.update and policy.delete
        assert policy.scope[0].field == "tenantId"
        assert dict(policy.predicates) == {}

    def test_single_predicate(self):
        """A predicate enables only its own operation."""
        policy = normalize_rls(rls(select="row.published"))
        assert policy.enabled
        assert policy.select
        assert not policy.insert
        assert not policy.update
        assert not policy.delete
        assert policy.predicates["select"] == "row.published"

    def test_sql_fragment(self):
        """Raw SQL fragments enable their operation."""
        policy = normalize_rls(rls(sql={"delete": "false"}))
        assert policy.delete
        assert not policy.select
        assert policy.sql["delete"] == "false"

    def test_bypass_carried(self):
        """Bypass conditions are kept unchanged."""
        policy = normalize_rls(rls(scope={"tenantId": "tenantId"}, bypass={"role": ["admin", "support"]}))
        assert policy.bypass[0].context_key == "role"
        assert policy.bypass[0].values == ("admin", "support")

    def test_unrecoverable_predicate_still_enables(self):
        """Predicates without readable source still enable the operation."""
        policy = normalize_rls(RlsDef(select=len))
        assert policy.select
        assert "select" not in policy.predicates

    def test_to_dict(self):
        """Normalized policies serialize."""
        d = normalize_rls(rls(scope={"tenantId": "tenantId"}, update=owner_only)).to_dict()
        assert d["enabled"] is True
        assert d["scope"] == [{"field": "tenantId", "context_key": "tenantId"}]
        assert d["predicates"] == {"update": 'return row["ownerId"] == ctx["userId"]'}


class TestExtractPredicateSource:
    """Tests for extract_predicate_source."""

    def test_plain_string(self):
        """Strings are opaque text."""
        assert extract_predicate_source("  row.ownerId = auth.uid()  ") == "row.ownerId = auth.uid()"

    def test_lambda_string(self):
        """Lambda strings are unwrapped to a return statement."""
        text = "lambda row, ctx: row['ownerId'] == ctx['userId']"
        assert extract_predicate_source(text) == "return row['ownerId'] == ctx['userId']"

    def test_lambda(self):
        """Lambda bodies become a return statement."""
        predicate = lambda row, ctx: row["ownerId"] == ctx["userId"]  # noqa: E731
        assert extract_predicate_source(predicate) == 'return row["ownerId"] == ctx["userId"]'

    def test_lambda_inside_call(self):
        """Lambdas passed inline are located within the call."""
        policy = rls(update=lambda row, ctx: row["ownerId"] == ctx["userId"])
        assert normalize_rls(policy).predicates["update"] == 'return row["ownerId"] == ctx["userId"]'

    def test_two_lambdas_on_one_line(self):
        """Each lambda on a shared line gets its own body."""
        policy = rls(select=lambda row, ctx: row["a"] == 1, delete=lambda row, ctx: row["b"] == 2)
        normalized = normalize_rls(policy)
        assert normalized.predicates["select"] == 'return row["a"] == 1'
        assert normalized.predicates["delete"] == 'return row["b"] == 2'

    def test_function_without_docstring(self):
        """Function bodies are dedented and the docstring dropped."""
        assert extract_predicate_source(owner_only) == 'return row["ownerId"] == ctx["userId"]'

    def test_multi_statement_function(self):
        """Multi-statement bodies keep their structure."""
        assert extract_predicate_source(published_or_owner) == (
            'if row["published"]:\n'
            "    return True\n"
            'return row["ownerId"] == ctx["userId"]'
        )

    def test_builtin_returns_none(self):
        """Builtins have no source."""
        assert extract_predicate_source(len) is None
