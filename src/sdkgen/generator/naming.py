"""Case conversion helpers shared by the IR and every backend.

All converters are deterministic and treat ``_`` as the only word
separator in snake-case input (hyphens are normalised to underscores by
:func:`to_snake_case` first where needed).
"""

from __future__ import annotations

import re

from sdkgen.generator.inflector import singularize

_NON_IDENTIFIER = re.compile(r"[^0-9A-Za-z_]")


def capitalize(word: str) -> str:
    """Upper-case the first character only (``"lineItem"`` -> ``"LineItem"``)."""
    if not word:
        return word
    return word[0].upper() + word[1:]


def to_camel_case(*parts: str) -> str:
    """Join snake-case parts into UpperCamelCase.

    Each part is split further on ``_`` and every piece has its first
    character upper-cased; the rest of each piece is left untouched.

    Example::

        >>> to_camel_case("line_items")
        'LineItems'
        >>> to_camel_case("create", "for_customer")
        'CreateForCustomer'
    """
    pieces = [piece for part in parts if part for piece in part.split("_") if piece]
    return "".join(capitalize(piece) for piece in pieces)


def to_pascal_case(*parts: str) -> str:
    """Alias of :func:`to_camel_case`, used for class names."""
    return to_camel_case(*parts)


def to_lower_camel_case(*parts: str) -> str:
    """Like :func:`to_camel_case` but with a lower-case first character."""
    name = to_camel_case(*parts)
    if not name:
        return name
    return name[0].lower() + name[1:]


def normalize_lower_camel_case(value: str) -> str:
    """Normalise hybrid names such as ``payment_vouchersForCustomer``.

    Underscores are removed and the following character upper-cased; the
    first character is lower-cased.
    """
    if not value:
        return value
    result: list[str] = []
    capitalize_next = False
    for char in value:
        if char == "_":
            capitalize_next = True
        elif capitalize_next:
            result.append(char.upper())
            capitalize_next = False
        else:
            result.append(char)
    if result:
        result[0] = result[0].lower()
    return "".join(result)


def to_snake_case(value: str) -> str:
    """Convert UpperCamel / lowerCamel / kebab names to snake_case.

    Example::

        >>> to_snake_case("CreditNote")
        'credit_note'
        >>> to_snake_case("line-items")
        'line_items'
    """
    if not value:
        return value
    value = value.replace("-", "_")
    out = [value[0].lower()]
    for char in value[1:]:
        if char.isupper():
            out.append("_")
            out.append(char.lower())
        else:
            out.append(char)
    return "".join(out)


def upper_camel_from_snake(value: str) -> str:
    """``lower_underscore`` -> ``UpperCamel`` with the remaining letters lower-cased."""
    return "".join(piece[:1].upper() + piece[1:].lower() for piece in value.split("_") if piece)


def singular_class_name(value: str) -> str:
    """Class name for one item of a list-valued attribute (``line_items`` -> ``LineItem``)."""
    return to_camel_case(singularize(value))


def enum_member_name(value: str) -> str:
    """Identifier for an enum member (``"no_card"`` -> ``"NoCard"``).

    Characters that cannot appear in an identifier are treated as word
    separators; a leading digit gets an ``N`` prefix.
    """
    cleaned = _NON_IDENTIFIER.sub("_", value)
    name = to_camel_case(cleaned.lower() if cleaned.isupper() else cleaned)
    if not name:
        return "Empty"
    if name[0].isdigit():
        name = "N" + name
    return name
