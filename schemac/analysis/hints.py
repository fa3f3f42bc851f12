"""
Seed-data generator hints.

Each field gets a Faker expression (Python Faker provider calls on an
instance named "faker") that a seed-data writer can paste into generated
code. Resolution order:

1. enum -> random_element over the values
2. array -> list comprehension over the item hint (length 1-5 by default)
3. object -> dict literal over the shape hints
4. explicit hint override (alias table, else a bare provider name)
5. field-name patterns
6. numeric/string constraints
7. type fallback
"""

from __future__ import annotations

import re

from ..schema.types import FieldDef, FieldKind

HINT_ALIASES: dict[str, str] = {
    "person.fullName": "faker.name()",
    "person.firstName": "faker.first_name()",
    "person.lastName": "faker.last_name()",
    "person.bio": "faker.paragraph()",
    "person.jobTitle": "faker.job()",
    "internet.email": "faker.email()",
    "internet.url": "faker.url()",
    "internet.avatar": "faker.image_url()",
    "internet.username": "faker.user_name()",
    "internet.password": "faker.password()",
    "lorem.word": "faker.word()",
    "lorem.sentence": "faker.sentence()",
    "lorem.paragraph": "faker.paragraph()",
    "lorem.paragraphs": "'\\n\\n'.join(faker.paragraphs(nb=3))",
    "lorem.text": "faker.text()",
    "image.avatar": "faker.image_url()",
    "image.url": "faker.image_url()",
    "location.city": "faker.city()",
    "location.country": "faker.country()",
    "location.streetAddress": "faker.street_address()",
    "location.zipCode": "faker.postcode()",
    "location.latitude": "float(faker.latitude())",
    "location.longitude": "float(faker.longitude())",
    "commerce.price": "float(faker.pricetag().lstrip('$').replace(',', ''))",
    "company.name": "faker.company()",
    "company.catchPhrase": "faker.catch_phrase()",
    "color.rgb": "faker.hex_color()",
    "color.human": "faker.color_name()",
    "date.past": "faker.past_datetime()",
    "date.future": "faker.future_datetime()",
    "date.recent": "faker.date_time_this_month()",
    "date.birthdate": "faker.date_of_birth()",
}

NAME_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = tuple(
    (re.compile(pattern, re.IGNORECASE), call)
    for pattern, call in (
        (r"^email$", "faker.email()"),
        (r"^name$", "faker.name()"),
        (r"first_?name", "faker.first_name()"),
        (r"last_?name", "faker.last_name()"),
        (r"phone", "faker.phone_number()"),
        (r"avatar", "faker.image_url()"),
        (r"image|photo|picture|thumbnail", "faker.image_url()"),
        (r"url|link|website", "faker.url()"),
        (r"address", "faker.street_address()"),
        (r"city", "faker.city()"),
        (r"country", "faker.country()"),
        (r"zip|postal", "faker.postcode()"),
        (r"price|cost|amount", "faker.pyfloat(min_value=1, max_value=1000, right_digits=2)"),
        (r"title", "faker.sentence(nb_words=5)"),
        (r"description|content|body|text", "'\\n\\n'.join(faker.paragraphs(nb=2))"),
        (r"bio|about", "faker.paragraph()"),
        (r"color", "faker.hex_color()"),
        (r"slug", "faker.slug()"),
        (r"token|key|secret", "faker.password(length=32, special_chars=False)"),
    )
)

TYPE_FALLBACKS: dict[FieldKind, str] = {
    FieldKind.UUID: "str(faker.uuid4())",
    FieldKind.STRING: "faker.word()",
    FieldKind.TEXT: "'\\n\\n'.join(faker.paragraphs(nb=2))",
    FieldKind.EMAIL: "faker.email()",
    FieldKind.URL: "faker.url()",
    FieldKind.INTEGER: "faker.pyint(min_value=1, max_value=1000)",
    FieldKind.NUMBER: "faker.pyfloat(min_value=0, max_value=1000, right_digits=2)",
    FieldKind.BOOLEAN: "faker.pybool()",
    FieldKind.DATE: "faker.date_time_this_month()",
    FieldKind.REFERENCE: "str(faker.uuid4())",
    FieldKind.OBJECT: "{}",
}

# Kinds that skip name patterns and go straight to the type fallback.
_NO_NAME_PATTERNS = frozenset(
    {FieldKind.BOOLEAN, FieldKind.DATE, FieldKind.UUID, FieldKind.REFERENCE}
)

_PROVIDER_NAME = re.compile(r"^[a-z_][a-z0-9_]*$")


def _bound(value: float | None, fallback: int) -> int | float:
    if value is None:
        return fallback
    return int(value) if float(value).is_integer() else value


def _from_hint(hint: str) -> str | None:
    if hint in HINT_ALIASES:
        return HINT_ALIASES[hint]
    if _PROVIDER_NAME.match(hint):
        return f"faker.{hint}()"
    if hint.startswith("faker."):
        return hint
    return None


def generator_hint(name: str, field_def: FieldDef, kind: FieldKind) -> str:
    """Build the generator expression for one field.

    Args:
        name: Field name (used for name-pattern matching)
        field_def: Field declaration
        kind: Resolved field kind

    Example:
        >>> generator_hint("status", FieldDef("status", "enum", values=("a", "b")), FieldKind.ENUM)
        "faker.random_element(elements=('a', 'b'))"
    """
    constraints = field_def.constraints
    low = constraints.min if constraints else None
    high = constraints.max if constraints else None

    if kind == FieldKind.ENUM and field_def.values:
        return f"faker.random_element(elements={tuple(field_def.values)!r})"

    if kind == FieldKind.ARRAY:
        item_def = field_def.items
        if item_def is None:
            item_call = "faker.word()"
        else:
            item_kind = item_def.kind or FieldKind.STRING
            item_call = generator_hint("item", item_def, item_kind)
        return (
            f"[{item_call} for _ in range(faker.pyint(min_value={_bound(low, 1)}, "
            f"max_value={_bound(high, 5)}))]"
        )

    if kind == FieldKind.OBJECT and field_def.shape:
        props = ", ".join(
            f"{sub.name!r}: {generator_hint(sub.name, sub, sub.kind or FieldKind.STRING)}"
            for sub in field_def.shape
        )
        return "{" + props + "}"

    if field_def.hint:
        call = _from_hint(field_def.hint)
        if call:
            return call

    if kind not in _NO_NAME_PATTERNS:
        for pattern, call in NAME_PATTERNS:
            if pattern.search(name):
                return call

    if kind == FieldKind.INTEGER:
        return f"faker.pyint(min_value={_bound(low, 1)}, max_value={_bound(high, 1000)})"
    if kind == FieldKind.NUMBER and (low is not None or high is not None):
        return (
            f"faker.pyfloat(min_value={_bound(low, 0)}, max_value={_bound(high, 1000)}, right_digits=2)"
        )
    if kind == FieldKind.STRING and (low or high):
        return (
            f"faker.pystr(min_chars={_bound(low, 1)}, max_chars={_bound(high, 100)})"
        )

    return TYPE_FALLBACKS.get(kind, "faker.word()")
