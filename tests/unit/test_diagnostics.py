"""
Unit tests for diagnostics and error types.

Tests cover:
- Diagnostic rendering and serialization
- Error codes and details
- AnalysisResult accessors with diagnostics present
"""

from schemac.analysis.diagnostics import Diagnostic, DiagnosticKind, Severity
from schemac.analysis.ir import AnalysisResult
from schemac.errors import (
    DefinitionError,
    DuplicateEntityError,
    InvariantViolationError,
    SchemacError,
)


def _fallback():
    return Diagnostic(
        kind=DiagnosticKind.FK_FALLBACK,
        entity="user",
        message="No foreign key found for 'posts'; assuming 'userId'",
        subject="posts",
        suggestion="Set foreign_key on the relation",
    )


class TestDiagnostic:
    """Tests for Diagnostic."""

    def test_path_with_subject(self):
        """Path joins entity and subject."""
        assert _fallback().path == "user.posts"

    def test_path_without_subject(self):
        """Path is the entity alone when there is no subject."""
        d = Diagnostic(kind=DiagnosticKind.CIRCULAR_DEPENDENCY, entity="team", message="cycle")
        assert d.path == "team"

    def test_str(self):
        """Rendering includes severity, kind, path and fix."""
        assert str(_fallback()) == (
            "[WARNING] FK_FALLBACK: user.posts - No foreign key found for 'posts'; "
            "assuming 'userId' Fix: Set foreign_key on the relation"
        )

    def test_to_dict(self):
        """Optional keys are omitted when empty."""
        d = Diagnostic(
            kind=DiagnosticKind.UNKNOWN_RPC_TYPE,
            entity="post",
            message="Unknown type 'money'",
            severity=Severity.INFO,
        ).to_dict()
        assert d == {
            "kind": "UNKNOWN_RPC_TYPE",
            "severity": "info",
            "entity": "post",
            "message": "Unknown type 'money'",
        }


class TestErrors:
    """Tests for the error hierarchy."""

    def test_base_defaults(self):
        """The base error has a default code and empty details."""
        err = SchemacError("boom")
        assert err.code == "SCHEMAC_ERROR"
        assert err.details == {}
        assert str(err) == "boom"

    def test_duplicate_entity(self):
        """Duplicate errors name the entity."""
        err = DuplicateEntityError("user")
        assert isinstance(err, SchemacError)
        assert err.code == "DUPLICATE_ENTITY"
        assert err.message == "Entity 'user' is defined more than once"
        assert err.details == {"entity": "user"}

    def test_definition_error(self):
        """Definition errors carry entity and path."""
        err = DefinitionError("bad field", entity="post", path="fields.title")
        assert err.details == {"entity": "post", "path": "fields.title"}

    def test_invariant_violation(self):
        """Invariant violations carry the invariant name."""
        err = InvariantViolationError("missing", entity="post", invariant="completeness")
        assert err.code == "INVARIANT_VIOLATION"
        assert err.invariant == "completeness"


class TestAnalysisResult:
    """Tests for AnalysisResult with diagnostics."""

    def test_warnings(self):
        """Warnings are the rendered diagnostics."""
        result = AnalysisResult(schemas=(), diagnostics=(_fallback(),))
        assert result.warnings == [str(_fallback())]
        assert result.to_dict()["diagnostics"][0]["subject"] == "posts"

    def test_fingerprint_ignores_diagnostics(self):
        """Diagnostics do not affect the fingerprint."""
        clean = AnalysisResult(schemas=())
        noisy = AnalysisResult(schemas=(), diagnostics=(_fallback(),))
        assert clean.fingerprint() == noisy.fingerprint()
