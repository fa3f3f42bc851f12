"""
Analysis stage for schemac.

This module resolves entity declarations into the intermediate
representation consumed by code emitters:
- Field analysis (types, storage columns, generator hints)
- Relation resolution (foreign-key inference with fallbacks)
- Dependency ordering (topological sort tolerating cycles)
- Index planning, access-policy normalization, procedure descriptors

Invariants:
    - Output schemas are in creation-safe order
    - Fallbacks and cycles are reported as Diagnostic values
    - The produced IR is immutable
"""

from .analyzer import analyze_entities, analyze_entity, is_junction
from .computed import analyze_computed, infer_computed_type
from .diagnostics import Diagnostic, DiagnosticKind, Severity
from .fields import analyze_field, analyze_fields
from .graph import collect_dependencies, cycle_edges, topological_sort
from .indexes import plan_indexes
from .ir import (
    AnalysisResult,
    AnalyzedComputed,
    AnalyzedField,
    AnalyzedIndex,
    AnalyzedRelation,
    AnalyzedRls,
    AnalyzedRpc,
    AnalyzedRpcArg,
    AnalyzedSchema,
    FkSource,
    InferredType,
)
from .lookup import EntityIndex
from .relations import resolve_relation, resolve_relations
from .rls import extract_predicate_source, normalize_rls
from .rpc import analyze_rpc

__all__ = [
    # Orchestration
    "analyze_entities",
    "analyze_entity",
    "is_junction",
    "EntityIndex",
    # Components
    "analyze_field",
    "analyze_fields",
    "analyze_computed",
    "infer_computed_type",
    "resolve_relation",
    "resolve_relations",
    "collect_dependencies",
    "topological_sort",
    "cycle_edges",
    "plan_indexes",
    "normalize_rls",
    "extract_predicate_source",
    "analyze_rpc",
    # IR
    "AnalysisResult",
    "AnalyzedSchema",
    "AnalyzedField",
    "AnalyzedRelation",
    "AnalyzedComputed",
    "AnalyzedIndex",
    "AnalyzedRls",
    "AnalyzedRpc",
    "AnalyzedRpcArg",
    "FkSource",
    "InferredType",
    # Diagnostics
    "Diagnostic",
    "DiagnosticKind",
    "Severity",
]
