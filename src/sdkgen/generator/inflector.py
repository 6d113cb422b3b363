"""English singular/plural inflection for resource and attribute names.

Rules are ordered: the most recently registered rule is tried first and
the first rule whose pattern matches wins. Words in :data:`UNCOUNTABLE`
are returned unchanged.
"""

from __future__ import annotations

import re
from typing import NamedTuple


class _Rule(NamedTuple):
    pattern: re.Pattern[str]
    replacement: str


def _rule(pattern: str, replacement: str, ignore_case: bool = False) -> _Rule:
    flags = re.IGNORECASE if ignore_case else 0
    return _Rule(re.compile(pattern, flags), replacement)


# Registration order, oldest first. Lookup walks these lists in reverse.
_SINGULAR_RULES: tuple[_Rule, ...] = (
    _rule(r"s$", ""),
    _rule(r"ss$", "ss"),
    _rule(r"(n)ews$", r"\g<1>ews"),
    _rule(
        r"((a)naly|(b)a|(d)iagno|(p)arenthe|(p)rogno|(s)ynop|(t)he)ses$",
        r"\g<1>\g<2>sis",
    ),
    _rule(r"(^analy)ses$", r"\g<1>sis"),
    _rule(r"([^f])ves$", r"\g<1>fe"),
    _rule(r"(hive)s$", r"\g<1>"),
    _rule(r"(slave)s$", r"\g<1>", ignore_case=True),
    _rule(r"(tive)s$", r"\g<1>"),
    _rule(r"([lr])ves$", r"\g<1>f"),
    _rule(r"([^aeiouy]|qu)ies$", r"\g<1>y"),
    _rule(r"(s)eries$", r"\g<1>eries"),
    _rule(r"(m)ovies$", r"\g<1>ovie"),
    _rule(r"(x|ch|ss|sh)es$", r"\g<1>"),
    _rule(r"([m|l])ice$", r"\g<1>ouse"),
    _rule(r"(bus)es$", r"\g<1>"),
    _rule(r"(o)es$", r"\g<1>"),
    _rule(r"(shoe)s$", r"\g<1>"),
    _rule(r"(cris|ax|test)es$", r"\g<1>is"),
    _rule(r"(tax)es$", r"\g<1>", ignore_case=True),
    _rule(r"(octop|vir)i$", r"\g<1>us"),
    _rule(r"(alias|status)es$", r"\g<1>"),
    _rule(r"(ox)en$", r"\g<1>"),
    _rule(r"(virt|ind)ices$", r"\g<1>ex"),
    _rule(r"(matr)ices$", r"\g<1>ix"),
    _rule(r"(quiz)zes$", r"\g<1>"),
    _rule(r"(database)s$", r"\g<1>"),
    _rule(r"(data)$", r"\g<1>"),
)

_PLURAL_RULES: tuple[_Rule, ...] = (
    _rule(r"$", "s"),
    _rule(r"s$", "s", ignore_case=True),
    _rule(r"(ax|test)is$", r"\g<1>es", ignore_case=True),
    _rule(r"(tax)$", r"\g<1>es", ignore_case=True),
    _rule(r"(octop|vir)us$", r"\g<1>i", ignore_case=True),
    _rule(r"(alias|status)$", r"\g<1>es", ignore_case=True),
    _rule(r"(bu)s$", r"\g<1>es", ignore_case=True),
    _rule(r"(buffal|tomat)o$", r"\g<1>oes", ignore_case=True),
    _rule(r"([ti])um$", r"\g<1>a", ignore_case=True),
    _rule(r"sis$", "ses"),
    _rule(r"(?:([^f])fe|([lr])f)$", r"\g<1>\g<2>ves", ignore_case=True),
    _rule(r"(hive)$", r"\g<1>s", ignore_case=True),
    _rule(r"(slave)$", r"\g<1>s", ignore_case=True),
    _rule(r"([^aeiouy]|qu)y$", r"\g<1>ies", ignore_case=True),
    _rule(r"(x|ch|ss|sh)$", r"\g<1>es", ignore_case=True),
    _rule(r"(matr|vert|ind)(?:ix|ex)$", r"\g<1>ices", ignore_case=True),
    _rule(r"([m|l])ouse$", r"\g<1>ice", ignore_case=True),
    _rule(r"^(ox)$", r"\g<1>en", ignore_case=True),
    _rule(r"(quiz)$", r"\g<1>zes", ignore_case=True),
    _rule(r"(data)$", r"\g<1>"),
)

UNCOUNTABLE: frozenset[str] = frozenset(
    {
        "equipment",
        "information",
        "rice",
        "money",
        "species",
        "series",
        "fish",
        "sheep",
        "data",
        "item_constraint_criteria",
    }
)


def _apply(word: str, rules: tuple[_Rule, ...]) -> str:
    if word and word.lower() in UNCOUNTABLE:
        return word
    for rule in reversed(rules):
        if rule.pattern.search(word):
            return rule.pattern.sub(rule.replacement, word)
    return word


def singularize(word: str) -> str:
    """Return the singular form of *word*.

    Example::

        >>> singularize("line_items")
        'line_item'
        >>> singularize("addresses")
        'address'
    """
    return _apply(word, _SINGULAR_RULES)


def pluralize(word: str) -> str:
    """Return the plural form of *word*.

    Example::

        >>> pluralize("customer")
        'customers'
        >>> pluralize("entity")
        'entities'
    """
    return _apply(word, _PLURAL_RULES)
