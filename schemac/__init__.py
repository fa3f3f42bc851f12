"""
schemac - analysis stage of an entity schema compiler.

Turns declarative entity definitions (fields, relations, access policies,
computed properties, indexes, stored procedures) into a resolved,
dependency-ordered intermediate representation for code emitters:

    EntityDef[] ──▶ EntityIndex ──▶ per-entity analysis ──▶ topological sort
                                                                 │
                                                                 ▼
                                                  AnalysisResult(schemas, diagnostics)

Invariants:
    - Analysis is a pure function of (entities, options)
    - Authoring problems never abort a run; they become diagnostics
    - Only internal inconsistencies raise (InvariantViolationError)

How to change safely:
    - Keep the IR frozen; emitters share one result
    - Changes to generated names change AnalysisResult.fingerprint()
"""

from ._version import __version__
from .analysis import AnalysisResult, analyze_entities
from .config import AnalyzerOptions
from .errors import SchemacError

__all__ = [
    "__version__",
    "AnalysisResult",
    "AnalyzerOptions",
    "SchemacError",
    "analyze_entities",
]
