"""Tests for sdkgen.ir.enum."""

from __future__ import annotations

from sdkgen.ir.enum import Enum
from sdkgen.models import Schema


def _enum(raw: dict, name: str = "status") -> Enum:
    return Enum(name, Schema.from_raw(raw))


class TestValues:
    def test_string_enum_in_declaration_order(self) -> None:
        enum = _enum({"type": "string", "enum": ["posted", "paid", "voided"]})
        assert enum.values == ["posted", "paid", "voided"]

    def test_array_of_enum_reads_items(self) -> None:
        enum = _enum({"type": "array", "items": {"type": "string", "enum": ["plan", "addon"]}})
        assert enum.values == ["plan", "addon"]

    def test_non_string_schema_has_no_values(self) -> None:
        assert _enum({"type": "integer", "enum": [1, 2]}).values == []
        assert _enum({"type": "object"}).values == []


class TestDeprecatedValues:
    """Deprecated values are kept, but reported apart from the valid ones."""

    def test_split_preserves_order(self) -> None:
        enum = _enum(
            {
                "type": "string",
                "enum": ["paid", "posted", "voided"],
                "x-cb-deprecated-enum-values": "voided",
            }
        )
        assert enum.valid_values == ["paid", "posted"]
        assert enum.deprecated_values == ["voided"]

    def test_all_values_deprecated(self) -> None:
        enum = _enum(
            {
                "type": "string",
                "enum": ["no_card", "valid"],
                "x-cb-deprecated-enum-values": ["no_card", "valid"],
            }
        )
        assert enum.valid_values == []
        assert enum.deprecated_values == ["no_card", "valid"]

    def test_valid_and_deprecated_partition_values(self) -> None:
        enum = _enum(
            {
                "type": "string",
                "enum": ["a", "b", "c", "d"],
                "x-cb-deprecated-enum-values": "d, b, unknown",
            }
        )
        assert sorted(enum.valid_values + enum.deprecated_values) == sorted(enum.values)
        assert not set(enum.valid_values) & set(enum.deprecated_values)

    def test_marks_on_array_items(self) -> None:
        enum = _enum(
            {
                "type": "array",
                "items": {
                    "type": "string",
                    "enum": ["plan", "addon", "charge"],
                    "x-cb-deprecated-enum-values": "charge",
                },
            }
        )
        assert enum.valid_values == ["plan", "addon"]


class TestReferencesAndIdentity:
    def test_global_enum_reference_name(self) -> None:
        enum = _enum(
            {
                "type": "string",
                "enum": ["on", "off"],
                "x-cb-global-enum-reference": "./enums/AutoCollection.yaml",
            }
        )
        assert enum.global_enum_reference == "AutoCollection"

    def test_no_reference(self) -> None:
        assert _enum({"type": "string", "enum": ["a"]}).global_enum_reference is None

    def test_signature_ignores_deprecated_values(self) -> None:
        plain = _enum({"type": "string", "enum": ["a", "b"]})
        marked = _enum(
            {"type": "string", "enum": ["a", "b", "c"], "x-cb-deprecated-enum-values": "c"}
        )
        assert plain.signature() == marked.signature() == ("status", ("a", "b"))

    def test_blank_option(self) -> None:
        enum = _enum(
            {"type": "string", "enum": ["a"], "x-cb-parameter-blank-option": "not_allowed"}
        )
        assert enum.is_param_blank_option is True

    def test_to_dict(self) -> None:
        data = _enum({"type": "string", "enum": ["on", "off"]}, name="auto_collection").to_dict()
        assert data == {
            "name": "auto_collection",
            "values": ["on", "off"],
            "valid_values": ["on", "off"],
            "deprecated_values": [],
            "global_enum_reference": None,
        }
