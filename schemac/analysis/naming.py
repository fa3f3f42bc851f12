"""
Name transformation utilities.

Pure string helpers shared by every analysis component:
- singularize / pluralize: English inflection with irregular and
  uncountable tables plus configurable overrides
- to_pascal_case / to_camel_case / to_snake_case / to_display_name
- to_safe_identifier: turn an arbitrary key into a usable Python identifier
- name_variants: the (exact, singular, plural) forms used for entity lookup

Invariants:
    - singularize(singularize(w)) == singularize(w)
    - pluralize(pluralize(w)) == pluralize(w)
    - Inflection output is always lowercase
    - No function here has side effects

How to change safely:
    - Every suffix rule in _plural_of must have a matching inverse in
      singularize, otherwise pluralize stops being idempotent
    - Add irregular pairs to IRREGULAR_PLURALS rather than new suffix rules
    - Add tests for each new rule in tests/unit/test_naming.py
"""

from __future__ import annotations

import keyword
import re
from typing import Mapping

IRREGULAR_PLURALS: dict[str, str] = {
    "person": "people",
    "child": "children",
    "man": "men",
    "woman": "women",
    "tooth": "teeth",
    "foot": "feet",
    "mouse": "mice",
    "goose": "geese",
    "ox": "oxen",
    "leaf": "leaves",
    "life": "lives",
    "knife": "knives",
    "wife": "wives",
    "self": "selves",
    "elf": "elves",
    "loaf": "loaves",
    "potato": "potatoes",
    "tomato": "tomatoes",
    "hero": "heroes",
    "echo": "echoes",
    "veto": "vetoes",
    "movie": "movies",
    "cactus": "cacti",
    "focus": "foci",
    "fungus": "fungi",
    "nucleus": "nuclei",
    "syllabus": "syllabi",
    "analysis": "analyses",
    "diagnosis": "diagnoses",
    "thesis": "theses",
    "crisis": "crises",
    "phenomenon": "phenomena",
    "criterion": "criteria",
    "datum": "data",
}

IRREGULAR_SINGULARS: dict[str, str] = {v: k for k, v in IRREGULAR_PLURALS.items()}

UNCOUNTABLE: frozenset[str] = frozenset(
    {
        "sheep",
        "fish",
        "deer",
        "species",
        "series",
        "news",
        "money",
        "rice",
        "information",
        "equipment",
    }
)

# Words ending in -us / -is that are singular; other -us/-is endings
# (menus, taxis) are treated as regular plurals.
SINGULAR_S_ENDINGS: tuple[str, ...] = (
    "ss",
    "sis",
    "status",
    "bus",
    "bonus",
    "campus",
    "census",
    "circus",
    "consensus",
    "corpus",
    "genus",
    "octopus",
    "plus",
    "prospectus",
    "radius",
    "stimulus",
    "virus",
    "walrus",
    "apparatus",
)

# Whole words only; as suffixes they would swallow plurals such as taxis.
SINGULAR_S_WORDS: frozenset[str] = frozenset({"axis", "iris", "tennis"})

_VOWELS = "aeiou"
_WORD_SPLIT = re.compile(r"[-_\s]+")
_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _is_vowel(char: str) -> bool:
    return bool(char) and char in _VOWELS


def singularize(word: str) -> str:
    """Convert a plural word to its singular form.

    Words that already look singular are returned lowercased and otherwise
    unchanged.

    Example:
        >>> singularize("categories")
        'category'
        >>> singularize("people")
        'person'
        >>> singularize("status")
        'status'
    """
    lower = word.lower()
    if len(lower) <= 1:
        return lower

    if lower in IRREGULAR_SINGULARS:
        return IRREGULAR_SINGULARS[lower]
    if lower in UNCOUNTABLE or lower in IRREGULAR_PLURALS:
        return lower
    if lower in SINGULAR_S_WORDS or lower.endswith(SINGULAR_S_ENDINGS):
        return lower

    if lower.endswith("ies") and len(lower) > 3 and not _is_vowel(lower[-4]):
        return lower[:-3] + "y"

    if lower.endswith("ves") and len(lower) > 3:
        base = lower[:-3]
        if base.endswith(("l", "ar")):
            return base + "f"
        return lower[:-1]

    if lower.endswith("ses"):
        # statuses -> status, but causes -> cause
        base = lower[:-2]
        if base in SINGULAR_S_WORDS or base.endswith(SINGULAR_S_ENDINGS):
            return base
        return lower[:-1]

    if lower.endswith(("xes", "ches", "shes", "zzes")):
        return lower[:-2]

    if lower.endswith("s"):
        stem = lower[:-1]
        return IRREGULAR_SINGULARS.get(stem, stem)

    return lower


def _plural_of(singular: str) -> str:
    if singular in IRREGULAR_PLURALS:
        return IRREGULAR_PLURALS[singular]
    if singular in UNCOUNTABLE:
        return singular
    if singular.endswith("y") and len(singular) > 1 and not _is_vowel(singular[-2]):
        return singular[:-1] + "ies"
    if singular.endswith(("s", "x", "z", "ch", "sh")):
        return singular + "es"
    if singular.endswith(("lf", "arf")):
        return singular[:-1] + "ves"
    return singular + "s"


def pluralize(word: str, overrides: Mapping[str, str] | None = None) -> str:
    """Convert a word to its plural form.

    Idempotent: an already-plural word is singularized first, so
    pluralize("users") == "users".

    Args:
        word: Word to pluralize (any case)
        overrides: Custom singular -> plural mapping that takes precedence

    Example:
        >>> pluralize("category")
        'categories'
        >>> pluralize("staff", {"staff": "staff"})
        'staff'
    """
    lower = word.lower()
    if not lower:
        return lower

    if overrides:
        if lower in overrides:
            return overrides[lower]
        if lower in overrides.values():
            return lower

    singular = singularize(lower)
    if overrides and singular in overrides:
        return overrides[singular]
    return _plural_of(singular)


def split_words(value: str) -> list[str]:
    """Split camelCase, PascalCase, snake_case and kebab-case into words."""
    spaced = _ACRONYM_BOUNDARY.sub(r"\1 \2", value)
    spaced = _CAMEL_BOUNDARY.sub(r"\1 \2", spaced)
    return [w for w in _WORD_SPLIT.split(spaced) if w]


def to_pascal_case(value: str) -> str:
    """Convert to PascalCase: "blog-post" / "blog_post" / "blogPost" -> "BlogPost"."""
    return "".join(w[:1].upper() + w[1:].lower() for w in split_words(value))


def to_camel_case(value: str) -> str:
    """Convert to camelCase: "BlogPost" -> "blogPost"."""
    pascal = to_pascal_case(value)
    return pascal[:1].lower() + pascal[1:]


def to_snake_case(value: str) -> str:
    """Convert to snake_case: "authorId" -> "author_id", "userID" -> "user_id"."""
    return "_".join(w.lower() for w in split_words(value))


def singular_camel(value: str) -> str:
    """camelCase name with its last word singularized: "BlogPosts" -> "blogPost"."""
    words = split_words(value)
    if not words:
        return ""
    words[-1] = singularize(words[-1])
    return to_camel_case("_".join(words))


def singular_pascal(value: str) -> str:
    """PascalCase name with its last word singularized: "blog_posts" -> "BlogPost"."""
    camel = singular_camel(value)
    return camel[:1].upper() + camel[1:]


def to_display_name(value: str) -> str:
    """Human-readable label: "blogPost" -> "Blog Post"."""
    return " ".join(w[:1].upper() + w[1:].lower() for w in split_words(value))


def to_safe_identifier(value: str) -> str:
    """Return a valid Python identifier for an arbitrary key.

    Valid, non-keyword identifiers are returned unchanged; anything else is
    camel-cased, and a leading digit or keyword clash gets a "_" prefix.
    """
    if _IDENTIFIER.match(value) and not keyword.iskeyword(value):
        return value
    camel = re.sub(r"[^A-Za-z0-9_]", "", to_camel_case(re.sub(r"[^A-Za-z0-9]+", " ", value)))
    if not camel or camel[0].isdigit() or keyword.iskeyword(camel):
        camel = "_" + camel
    return camel


def name_variants(name: str, overrides: Mapping[str, str] | None = None) -> tuple[str, str, str]:
    """Return (exact, singular, plural) forms of a name."""
    return (name, singularize(name), pluralize(name, overrides))
