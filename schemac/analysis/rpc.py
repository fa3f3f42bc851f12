"""
Stored-procedure descriptor analysis.

Return expressions take three shapes: "T", "T[]" and "void". T is either
an entity name (matched exactly against the entity set) or a scalar type
name from RPC_STORAGE_TYPES.

    post[]   -> SETOF posts       list[Post]
    post     -> posts             Post
    int[]    -> INTEGER[]         list[int]
    void     -> VOID              None
    money    -> TEXT              str   (plus UNKNOWN_RPC_TYPE)

Invariants:
    - analyze_rpc never raises; unknown scalar names degrade to TEXT
    - Entity returns always carry the entity's resolved table name
"""

from __future__ import annotations

import logging
from typing import Optional

from ..schema.types import EntityDef, RpcArgDef, RpcDef
from .diagnostics import Diagnostic, DiagnosticKind
from .ir import AnalyzedRpc, AnalyzedRpcArg
from .lookup import EntityIndex
from .naming import singular_pascal
from .type_mapping import (
    DEFAULT_STORAGE_TYPE,
    RPC_STORAGE_TYPES,
    scalar_python_type,
    scalar_storage_type,
)

logger = logging.getLogger(__name__)

ARRAY_SUFFIX = "[]"
VOID_TYPES = frozenset({"void", ""})


def split_return_type(expression: str) -> tuple[str, bool]:
    """Split "T[]" into ("T", True) and "T" into ("T", False)."""
    text = expression.strip()
    if text.endswith(ARRAY_SUFFIX):
        return text[: -len(ARRAY_SUFFIX)].strip(), True
    return text, False


def _unknown_type(owner: str, procedure: str, subject: str, type_name: str) -> Diagnostic:
    return Diagnostic(
        kind=DiagnosticKind.UNKNOWN_RPC_TYPE,
        entity=owner,
        subject=subject,
        message=f"Unknown type '{type_name}' in procedure '{procedure}'; using {DEFAULT_STORAGE_TYPE}.",
        suggestion="Use an entity name or one of: " + ", ".join(sorted(RPC_STORAGE_TYPES)) + ".",
    )


def _scalar(type_name: str, is_array: bool) -> tuple[Optional[str], str, str]:
    """Return (known storage type or None, storage type, python type)."""
    known = scalar_storage_type(type_name)
    storage = known or DEFAULT_STORAGE_TYPE
    python = scalar_python_type(type_name)
    if is_array:
        return known, f"{storage}[]", f"list[{python}]"
    return known, storage, python


def analyze_rpc_arg(
    arg: RpcArgDef,
    owner: str,
    procedure: str,
) -> tuple[AnalyzedRpcArg, list[Diagnostic]]:
    """Resolve one procedure argument's storage and target types."""
    base, is_array = split_return_type(arg.type)
    known, storage, python = _scalar(base, is_array)
    diagnostics: list[Diagnostic] = []
    if known is None:
        diagnostics.append(_unknown_type(owner, procedure, f"{procedure}.{arg.name}", arg.type))
    analyzed = AnalyzedRpcArg(
        name=arg.name,
        type=arg.type,
        python_type=python,
        storage_type=storage,
        default=arg.default,
    )
    return analyzed, diagnostics


def analyze_rpc(
    rpc: RpcDef,
    index: EntityIndex,
    owner: Optional[EntityDef] = None,
) -> tuple[AnalyzedRpc, list[Diagnostic]]:
    """Resolve a stored-procedure declaration.

    Args:
        rpc: Procedure declaration
        index: Cross-entity lookup for the run
        owner: Entity that declares the procedure (used for diagnostics)

    Returns:
        Tuple of (analyzed procedure, diagnostics produced)
    """
    owner_name = owner.name if owner is not None else rpc.name
    diagnostics: list[Diagnostic] = []

    args: list[AnalyzedRpcArg] = []
    for arg in rpc.args:
        analyzed_arg, produced = analyze_rpc_arg(arg, owner_name, rpc.name)
        args.append(analyzed_arg)
        diagnostics.extend(produced)

    return_type, is_array = split_return_type(rpc.returns)
    is_void = not is_array and return_type.lower() in VOID_TYPES
    entity: Optional[str] = None
    table: Optional[str] = None

    if is_void:
        storage, python = "VOID", "None"
    elif return_type in index:
        entity = return_type
        table = index.table_for(return_type)
        pascal = singular_pascal(return_type)
        storage = f"SETOF {table}" if is_array else f"{table}"
        python = f"list[{pascal}]" if is_array else pascal
    else:
        known, storage, python = _scalar(return_type, is_array)
        if known is None:
            diagnostics.append(_unknown_type(owner_name, rpc.name, rpc.name, rpc.returns))

    logger.debug(f"Procedure {rpc.name} returns {storage}")
    analyzed = AnalyzedRpc(
        name=rpc.name,
        args=tuple(args),
        returns=rpc.returns,
        return_type=return_type,
        is_array=is_array,
        is_void=is_void,
        is_entity=entity is not None,
        storage_type=storage,
        python_type=python,
        entity=entity,
        table=table,
        sql=rpc.sql,
        language=rpc.language,
        volatility=rpc.volatility,
        security=rpc.security,
        description=rpc.description,
    )
    return analyzed, diagnostics
