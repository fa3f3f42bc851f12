"""
Access-policy (RLS) normalization.

Converts an RlsDef into one AnalyzedRls with an independent enabled flag
per operation (select, insert, update, delete). An operation is enabled
when it has a custom predicate, a raw SQL fragment, or when any scope rule
exists (scope rules apply to all four operations). Bypass conditions are
carried through unchanged for emitters to OR ahead of scope checks.

Predicates are never executed. Callables are reduced to their source
text: a lambda becomes "return <expr>", a def becomes its dedented body
without the docstring. Strings are opaque text, with "lambda ...: expr"
strings unwrapped the same way.

Invariants:
    - normalize_rls(None) returns a fully disabled policy
    - A declared predicate enables its operation even when its source
      cannot be recovered
"""

from __future__ import annotations

import ast
import inspect
import logging
import textwrap
from types import CodeType
from typing import Any, Callable, Optional

from ..schema.types import RLS_OPERATIONS, RlsDef, RlsPredicate
from .ir import AnalyzedRls

logger = logging.getLogger(__name__)


def _lambda_candidates(source: str) -> list[tuple[str, ast.Lambda]]:
    """Every complete lambda expression found in source, in order."""
    found: list[tuple[str, ast.Lambda]] = []
    start = source.find("lambda")
    while start != -1:
        for end in range(len(source), start, -1):
            fragment = source[start:end]
            try:
                tree = ast.parse(fragment, mode="eval")
            except SyntaxError:
                continue
            if isinstance(tree.body, ast.Lambda):
                found.append((fragment, tree.body))
                break
        start = source.find("lambda", start + 1)
    return found


def _compiled_lambda(fragment: str) -> Optional[CodeType]:
    code = compile(fragment, "<predicate>", "eval")
    for const in code.co_consts:
        if isinstance(const, CodeType):
            return const
    return None


def _pick_lambda(source: str, fn: Callable[..., Any]) -> Optional[tuple[str, ast.Lambda]]:
    """Select the lambda in source that compiled to fn.

    Several lambdas may share one source line; bytecode identifies the
    right one; argument names break ties for closures.
    """
    candidates = _lambda_candidates(source)
    if not candidates:
        return None
    target = fn.__code__
    arg_names = target.co_varnames[: target.co_argcount]
    by_args: Optional[tuple[str, ast.Lambda]] = None
    for fragment, node in candidates:
        compiled = _compiled_lambda(fragment)
        if compiled is None:
            continue
        if (
            compiled.co_code == target.co_code
            and compiled.co_consts == target.co_consts
            and compiled.co_names == target.co_names
        ):
            return fragment, node
        if by_args is None and compiled.co_varnames[: compiled.co_argcount] == arg_names:
            by_args = (fragment, node)
    return by_args or candidates[0]


def _lambda_text(fragment: str, node: ast.Lambda) -> Optional[str]:
    body = ast.get_source_segment(fragment, node.body)
    return f"return {body}" if body is not None else None


def _function_body(source: str) -> Optional[str]:
    dedented = textwrap.dedent(source)
    try:
        tree = ast.parse(dedented)
    except SyntaxError:
        return None
    for node in ast.walk(tree):
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            body = node.body
            if (
                body
                and isinstance(body[0], ast.Expr)
                and isinstance(body[0].value, ast.Constant)
                and isinstance(body[0].value.value, str)
                and len(body) > 1
            ):
                body = body[1:]
            lines = dedented.splitlines()
            first = body[0].lineno - 1
            last = body[-1].end_lineno or body[-1].lineno
            return textwrap.dedent("\n".join(lines[first:last])).strip()
    return None


def extract_predicate_source(predicate: RlsPredicate) -> Optional[str]:
    """Return a predicate's body as opaque text.

    Example:
        >>> extract_predicate_source("lambda row, ctx: row['ownerId'] == ctx['userId']")
        "return row['ownerId'] == ctx['userId']"

    Returns:
        Source text, or None when it cannot be recovered
    """
    if isinstance(predicate, str):
        text = predicate.strip()
        if text.startswith("lambda"):
            candidates = _lambda_candidates(text)
            if candidates:
                return _lambda_text(*candidates[0])
        return text

    try:
        source = inspect.getsource(predicate)
    except (OSError, TypeError) as e:
        logger.debug(f"Cannot read source of predicate {predicate!r}: {e}")
        return None

    if getattr(predicate, "__name__", "") == "<lambda>":
        picked = _pick_lambda(source, predicate)
        return _lambda_text(*picked) if picked else None
    return _function_body(source)


def normalize_rls(rls: Optional[RlsDef]) -> AnalyzedRls:
    """Normalize an access-policy declaration.

    Args:
        rls: Declared policy, or None

    Returns:
        AnalyzedRls with per-operation flags and extracted predicate text
    """
    if rls is None:
        return AnalyzedRls()

    has_scope = bool(rls.scope)
    flags: dict[str, bool] = {}
    predicates: dict[str, str] = {}
    sql: dict[str, str] = {}

    for op in RLS_OPERATIONS:
        predicate = rls.predicate(op)
        fragment = rls.sql.get(op)
        if predicate is not None:
            source = extract_predicate_source(predicate)
            if source is not None:
                predicates[op] = source
        if fragment:
            sql[op] = fragment
        flags[op] = predicate is not None or bool(fragment) or has_scope

    return AnalyzedRls(
        enabled=any(flags.values()),
        select=flags["select"],
        insert=flags["insert"],
        update=flags["update"],
        delete=flags["delete"],
        scope=rls.scope,
        bypass=rls.bypass,
        predicates=predicates,
        sql=sql,
    )
