"""
Advisory diagnostics produced during analysis.

Authoring ambiguity never aborts a run. Each analysis step returns the
diagnostics it produced next to its value, and the orchestrator
concatenates them into the AnalysisResult. There is no process-wide
warnings list.

Invariants:
    - Diagnostics are immutable values
    - Every diagnostic names the entity it concerns
    - Fallback diagnostics carry a suggested fix

How to change safely:
    - Add new DiagnosticKind members at the end
    - Keep message wording stable; emitters and users grep for it
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Optional


class DiagnosticKind(Enum):
    """Categories of advisory diagnostics."""

    FK_FALLBACK = auto()  # No foreign-key field found; default name used
    CIRCULAR_DEPENDENCY = auto()  # Back-edge dropped from creation ordering
    UNKNOWN_RPC_TYPE = auto()  # Unrecognized scalar in a procedure signature
    UNKNOWN_RELATION_TARGET = auto()  # Relation target is not a known entity
    MISSING_JOIN_ENTITY = auto()  # Many-to-many join entity is not defined


class Severity(Enum):
    """Diagnostic severity."""

    INFO = "info"
    WARNING = "warning"


@dataclass(frozen=True)
class Diagnostic:
    """A single advisory message.

    Attributes:
        kind: Diagnostic category
        entity: Entity the diagnostic concerns
        message: Human-readable description
        subject: Relation, procedure or dependency name within the entity
        suggestion: How to silence the diagnostic
        severity: Diagnostic severity
    """

    kind: DiagnosticKind
    entity: str
    message: str
    subject: Optional[str] = None
    suggestion: Optional[str] = None
    severity: Severity = Severity.WARNING

    @property
    def path(self) -> str:
        """Dotted location, e.g. "post.author"."""
        return f"{self.entity}.{self.subject}" if self.subject else self.entity

    def __str__(self) -> str:
        text = f"[{self.severity.name}] {self.kind.name}: {self.path} - {self.message}"
        if self.suggestion:
            text += f" Fix: {self.suggestion}"
        return text

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        result: dict[str, Any] = {
            "kind": self.kind.name,
            "severity": self.severity.value,
            "entity": self.entity,
            "message": self.message,
        }
        if self.subject:
            result["subject"] = self.subject
        if self.suggestion:
            result["suggestion"] = self.suggestion
        return result
