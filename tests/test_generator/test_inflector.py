"""Tests for sdkgen.generator.inflector."""

from __future__ import annotations

import pytest

from sdkgen.generator.inflector import pluralize, singularize


class TestSingularize:
    @pytest.mark.parametrize(
        ("plural", "singular"),
        [
            ("customers", "customer"),
            ("line_items", "line_item"),
            ("addresses", "address"),
            ("entities", "entity"),
            ("taxes", "tax"),
            ("statuses", "status"),
            ("matrices", "matrix"),
            ("indices", "index"),
            ("analyses", "analysis"),
            ("LineItems", "LineItem"),
            ("billing_address", "billing_address"),
        ],
    )
    def test_rules(self, plural: str, singular: str) -> None:
        assert singularize(plural) == singular

    @pytest.mark.parametrize("word", ["equipment", "data", "series", "item_constraint_criteria"])
    def test_uncountable(self, word: str) -> None:
        assert singularize(word) == word

    def test_word_without_matching_rule(self) -> None:
        assert singularize("sort_by") == "sort_by"


class TestPluralize:
    @pytest.mark.parametrize(
        ("singular", "plural"),
        [
            ("customer", "customers"),
            ("entity", "entities"),
            ("tax", "taxes"),
            ("status", "statuses"),
            ("address", "addresses"),
            ("batch", "batches"),
            ("wife", "wives"),
            ("matrix", "matrices"),
            ("quiz", "quizzes"),
            ("day", "days"),
        ],
    )
    def test_rules(self, singular: str, plural: str) -> None:
        assert pluralize(singular) == plural

    def test_uncountable(self) -> None:
        assert pluralize("information") == "information"
        assert pluralize("Money") == "Money"
