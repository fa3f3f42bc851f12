"""
Error types for schemac.

This module defines all exception types raised by the compiler:
- SchemacError: Base exception
- DefinitionError: An entity declaration is malformed
- DuplicateEntityError: Two entities share a name
- InvariantViolationError: The analysis stage produced inconsistent IR

Invariants:
    - All errors inherit from SchemacError
    - Authoring ambiguity (missing foreign keys, cycles, unknown scalar
      types) never raises; it is reported as a Diagnostic instead
    - InvariantViolationError always indicates a bug in schemac itself
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class SchemacError(Exception):
    """Base exception for all schemac errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "SCHEMAC_ERROR"
        self.details = details or {}


class DefinitionError(SchemacError):
    """An entity declaration could not be parsed.

    Raised when:
    - A document entry has no name
    - A field, relation or index declaration is invalid
    """

    def __init__(
        self,
        message: str,
        entity: Optional[str] = None,
        path: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            code="DEFINITION_ERROR",
            details={"entity": entity, "path": path},
        )
        self.entity = entity
        self.path = path


class DuplicateEntityError(SchemacError):
    """Two entity definitions share the same name."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Entity '{name}' is defined more than once",
            code="DUPLICATE_ENTITY",
            details={"entity": name},
        )
        self.entity = name


class InvariantViolationError(SchemacError):
    """The analyzed schema set violates an internal invariant.

    This is never caused by authoring mistakes; those degrade to
    diagnostics. Seeing this error means the analysis stage has a bug.
    """

    def __init__(
        self,
        message: str,
        entity: Optional[str] = None,
        invariant: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            code="INVARIANT_VIOLATION",
            details={"entity": entity, "invariant": invariant},
        )
        self.entity = entity
        self.invariant = invariant
