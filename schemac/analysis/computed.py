"""
Computed-field type inference.

Computed properties have no declared type, so their type is guessed from
the property name alone using an ordered table of (predicate, type)
rules. The first matching rule wins.

Invariants:
    - infer_computed_type is pure and deterministic
    - Rule order is significant: date rules run before numeric rules
      ("lastOrderDate" is a date, not a number), numeric before boolean,
      boolean before string, string before array, array before object
    - The verb-prefix fallback recurses at most once

How to change safely:
    - Insert new rules at the position matching their specificity, never
      append blindly
    - Add a test for every tie-break a new rule introduces
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .ir import AnalyzedComputed, InferredType
from .naming import split_words, to_camel_case

logger = logging.getLogger(__name__)

DATE_WORDS = frozenset({"at", "date", "time", "timestamp", "datetime", "since", "until", "deadline"})
DATE_PREFIX_WORDS = frozenset({"date", "time"})
DATE_SUFFIXES = ("timestamp", "datetime", "deadline")

NUMERIC_PREFIX_WORDS = frozenset({"total", "sum", "avg", "average", "count", "num", "number", "min", "max", "mean"})
NUMERIC_SUFFIX_WORDS = frozenset({"count", "total", "sum", "avg", "average", "min", "max", "length", "size", "index"})
MEASURE_WORDS = frozenset(
    {
        "amount",
        "price",
        "cost",
        "fee",
        "balance",
        "score",
        "rating",
        "rank",
        "level",
        "age",
        "weight",
        "height",
        "width",
        "depth",
        "quantity",
        "percent",
        "percentage",
        "ratio",
        "progress",
        "position",
        "order",
        "duration",
        "offset",
        "limit",
        "revenue",
        "income",
        "profit",
    }
)
# Matched inside concatenated lowercase names ("totalprice", "netincome")
MEASURE_SUBSTRINGS = (
    "amount",
    "price",
    "balance",
    "quantity",
    "percent",
    "revenue",
    "income",
    "profit",
    "weight",
    "height",
    "width",
    "duration",
    "progress",
)

BOOLEAN_PREFIX_WORDS = frozenset(
    {"is", "has", "can", "should", "will", "was", "did", "does", "allow", "enable", "disable"}
)
BOOLEAN_SUFFIX_WORDS = frozenset(
    {
        "enabled",
        "disabled",
        "active",
        "visible",
        "hidden",
        "valid",
        "invalid",
        "complete",
        "empty",
        "loading",
        "loaded",
        "ready",
        "available",
        "exists",
        "selected",
        "checked",
        "required",
        "optional",
    }
)

STRING_SUFFIX_WORDS = frozenset(
    {
        "name",
        "title",
        "label",
        "description",
        "text",
        "content",
        "message",
        "str",
        "string",
        "slug",
        "path",
        "url",
        "uri",
        "email",
        "phone",
        "address",
        "display",
        "format",
        "html",
        "json",
        "type",
        "status",
        "key",
        "id",
        "code",
        "token",
        "hash",
        "signature",
    }
)
# Long enough to match safely at the end of concatenated names
STRING_SUFFIXES = tuple(sorted(w for w in STRING_SUFFIX_WORDS if len(w) >= 4))
STRING_GETTER_WORDS = frozenset({"name", "title", "label", "display", "format", "string"})

ARRAY_SUFFIX_WORDS = frozenset(
    {"list", "array", "items", "collection", "all", "entries", "values", "keys", "ids", "names"}
)
ARRAY_PREFIX_WORDS = frozenset({"all", "list"})
GETTER_WORDS = frozenset({"get", "fetch", "load", "find"})

OBJECT_SUFFIX_WORDS = frozenset(
    {
        "config",
        "options",
        "settings",
        "props",
        "properties",
        "data",
        "info",
        "meta",
        "metadata",
        "attrs",
        "attributes",
        "context",
        "state",
        "result",
        "response",
        "payload",
    }
)
OBJECT_SUFFIXES = tuple(sorted(w for w in OBJECT_SUFFIX_WORDS if len(w) >= 6))

VERB_PREFIX_WORDS = frozenset({"get", "compute", "calculate", "derive"})

INFERRED_PYTHON_TYPES: dict[InferredType, str] = {
    InferredType.NUMBER: "float",
    InferredType.BOOLEAN: "bool",
    InferredType.STRING: "str",
    InferredType.DATE: "datetime",
    InferredType.ARRAY: "list[Any]",
    InferredType.OBJECT: "dict[str, Any]",
    InferredType.UNKNOWN: "Any",
}

_DECLARED_TYPES: dict[str, InferredType] = {
    "number": InferredType.NUMBER,
    "int": InferredType.NUMBER,
    "integer": InferredType.NUMBER,
    "float": InferredType.NUMBER,
    "boolean": InferredType.BOOLEAN,
    "bool": InferredType.BOOLEAN,
    "string": InferredType.STRING,
    "text": InferredType.STRING,
    "str": InferredType.STRING,
    "date": InferredType.DATE,
    "datetime": InferredType.DATE,
    "array": InferredType.ARRAY,
    "list": InferredType.ARRAY,
    "object": InferredType.OBJECT,
    "json": InferredType.OBJECT,
}


@dataclass(frozen=True)
class _Name:
    """A property name pre-split for rule matching."""

    lower: str
    words: tuple[str, ...]

    @classmethod
    def parse(cls, name: str) -> _Name:
        return cls(lower=name.lower(), words=tuple(w.lower() for w in split_words(name)))

    @property
    def first(self) -> str:
        return self.words[0] if self.words else ""

    @property
    def last(self) -> str:
        return self.words[-1] if self.words else ""

    @property
    def compound(self) -> bool:
        return len(self.words) > 1


def _is_date(n: _Name) -> bool:
    return (
        n.last in DATE_WORDS
        or (n.compound and n.first in DATE_PREFIX_WORDS)
        or n.lower.endswith(DATE_SUFFIXES)
    )


def _has_numeric_prefix(n: _Name) -> bool:
    return n.compound and n.first in NUMERIC_PREFIX_WORDS


def _has_numeric_suffix(n: _Name) -> bool:
    return n.last in NUMERIC_SUFFIX_WORDS


def _has_measure_word(n: _Name) -> bool:
    return any(w in MEASURE_WORDS for w in n.words) or any(s in n.lower for s in MEASURE_SUBSTRINGS)


def _has_boolean_prefix(n: _Name) -> bool:
    return n.compound and n.first in BOOLEAN_PREFIX_WORDS


def _has_boolean_suffix(n: _Name) -> bool:
    return n.last in BOOLEAN_SUFFIX_WORDS


def _has_string_suffix(n: _Name) -> bool:
    return n.last in STRING_SUFFIX_WORDS or n.lower.endswith(STRING_SUFFIXES)


def _is_string_getter(n: _Name) -> bool:
    return n.first == "get" and any(w in STRING_GETTER_WORDS for w in n.words[1:])


def _has_array_marker(n: _Name) -> bool:
    return n.last in ARRAY_SUFFIX_WORDS or (n.compound and n.first in ARRAY_PREFIX_WORDS)


def _is_plural_getter(n: _Name) -> bool:
    return (
        n.compound
        and n.first in GETTER_WORDS
        and n.lower.endswith("s")
        and not n.lower.endswith("ss")
    )


def _has_object_suffix(n: _Name) -> bool:
    return n.last in OBJECT_SUFFIX_WORDS or n.lower.endswith(OBJECT_SUFFIXES)


RULES: tuple[tuple[Callable[[_Name], bool], InferredType], ...] = (
    (_is_date, InferredType.DATE),
    (_has_numeric_prefix, InferredType.NUMBER),
    (_has_numeric_suffix, InferredType.NUMBER),
    (_has_measure_word, InferredType.NUMBER),
    (_has_boolean_prefix, InferredType.BOOLEAN),
    (_has_boolean_suffix, InferredType.BOOLEAN),
    (_has_string_suffix, InferredType.STRING),
    (_is_string_getter, InferredType.STRING),
    (_has_array_marker, InferredType.ARRAY),
    (_is_plural_getter, InferredType.ARRAY),
    (_has_object_suffix, InferredType.OBJECT),
)


def _match(parsed: _Name) -> Optional[InferredType]:
    for predicate, result in RULES:
        if predicate(parsed):
            return result
    return None


def infer_computed_type(name: str) -> InferredType:
    """Guess a computed property's type from its name.

    Example:
        >>> infer_computed_type("isPublished")
        <InferredType.BOOLEAN: 'boolean'>
        >>> infer_computed_type("computeTotal")
        <InferredType.NUMBER: 'number'>
    """
    parsed = _Name.parse(name)
    result = _match(parsed)
    if result is not None:
        return result

    # getFoo / computeFoo / ...: retry once on "foo"
    if parsed.compound and parsed.first in VERB_PREFIX_WORDS:
        remainder = _Name.parse(to_camel_case("_".join(parsed.words[1:])))
        result = _match(remainder)
        if result is not None:
            return result

    return InferredType.UNKNOWN


def analyze_computed(name: str, declared_type: str | None = None) -> AnalyzedComputed:
    """Build a computed-field descriptor, preferring a declared type."""
    if declared_type:
        explicit = _DECLARED_TYPES.get(declared_type.strip().lower())
        if explicit is not None:
            return AnalyzedComputed(
                name=name,
                type=explicit,
                python_type=INFERRED_PYTHON_TYPES[explicit],
                inferred=False,
            )
        logger.debug(f"Unrecognized computed type '{declared_type}' for '{name}', inferring")

    inferred = infer_computed_type(name)
    return AnalyzedComputed(
        name=name,
        type=inferred,
        python_type=INFERRED_PYTHON_TYPES[inferred],
        inferred=True,
    )
