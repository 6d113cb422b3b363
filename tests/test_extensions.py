"""Tests for sdkgen.extensions -- the registry and the single decode point."""

from __future__ import annotations

import logging

import pytest

from sdkgen.exceptions import ExtensionError
from sdkgen.extensions import (
    ALL_KEYS,
    REGISTRY,
    ExtensionScope,
    InfoExtensions,
    OperationExtensions,
    SchemaExtensions,
    decode,
    default_for,
    vendor_keys,
)


class TestRegistry:
    """The flattened key catalog."""

    def test_every_record_field_is_registered(self) -> None:
        for scope, record in (
            (ExtensionScope.OPERATION, OperationExtensions),
            (ExtensionScope.SCHEMA, SchemaExtensions),
            (ExtensionScope.INFO, InfoExtensions),
        ):
            for key in record.known_keys():
                assert (scope, key) in REGISTRY

    def test_keys_share_vendor_prefix(self) -> None:
        assert all(key.startswith("x-cb-") for key in ALL_KEYS)

    def test_method_name_is_an_operation_key(self) -> None:
        entry = REGISTRY[(ExtensionScope.OPERATION, "x-cb-operation-method-name")]
        assert entry.field_name == "method_name"
        assert entry.default is None

    @pytest.mark.parametrize(
        ("key", "scope", "expected"),
        [
            ("x-cb-operation-is-list", ExtensionScope.OPERATION, False),
            ("x-cb-sort-order", ExtensionScope.OPERATION, -1),
            ("x-cb-sort-order", ExtensionScope.SCHEMA, -1),
            ("x-cb-sdk-filter-name", ExtensionScope.SCHEMA, None),
            ("x-cb-deprecated-enum-values", ExtensionScope.SCHEMA, []),
            ("x-cb-api-version", ExtensionScope.INFO, None),
        ],
    )
    def test_documented_defaults(self, key: str, scope: ExtensionScope, expected: object) -> None:
        assert default_for(key, scope) == expected

    def test_default_for_unknown_key_raises(self) -> None:
        with pytest.raises(KeyError):
            default_for("x-cb-no-such-key")


class TestVendorKeys:
    def test_keeps_only_x_prefixed_entries(self) -> None:
        raw = {"type": "string", "x-cb-sort-order": 3, "x-other-tool": True}
        assert vendor_keys(raw) == {"x-cb-sort-order": 3, "x-other-tool": True}


class TestDecode:
    """Decoding raw maps into typed records."""

    def test_absent_keys_take_defaults(self) -> None:
        ext = decode({"type": "string"}, SchemaExtensions, "#/x")
        assert ext.is_sub_resource is False
        assert ext.sort_order == -1
        assert ext.deprecated_enum_values == []
        assert ext.resource_id is None

    def test_reads_aliased_keys(self) -> None:
        raw = {
            "x-cb-operation-method-name": "create",
            "x-cb-operation-is-bulk": True,
            "x-cb-sort-order": 4,
        }
        ext = decode(raw, OperationExtensions, "#/paths/~1customers/post")
        assert ext.method_name == "create"
        assert ext.is_bulk is True
        assert ext.sort_order == 4

    def test_deprecated_values_accept_comma_string(self) -> None:
        ext = decode({"x-cb-deprecated-enum-values": "no_card, valid"}, SchemaExtensions, "#/x")
        assert ext.deprecated_enum_values == ["no_card", "valid"]

    def test_deprecated_values_accept_list(self) -> None:
        ext = decode({"x-cb-deprecated-enum-values": ["voided"]}, SchemaExtensions, "#/x")
        assert ext.deprecated_enum_values == ["voided"]

    def test_unknown_vendor_key_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="sdkgen.extensions"):
            ext = decode({"x-cb-is-sub-resorce": True}, SchemaExtensions, "#/components/schemas/A")
        assert ext.is_sub_resource is False
        assert "x-cb-is-sub-resorce" in caplog.text
        assert "#/components/schemas/A" in caplog.text

    def test_unknown_vendor_key_raises_when_strict(self) -> None:
        with pytest.raises(ExtensionError, match="Unknown extension key 'x-cb-typo'"):
            decode({"x-cb-typo": 1}, SchemaExtensions, "#/x", strict=True)

    def test_key_of_other_scope_is_not_reported(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="sdkgen.extensions"):
            decode({"x-cb-operation-is-list": True}, SchemaExtensions, "#/x", strict=True)
        assert caplog.text == ""

    def test_foreign_prefix_is_ignored(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="sdkgen.extensions"):
            decode({"x-amazon-apigateway": {}}, SchemaExtensions, "#/x", strict=True)
        assert caplog.text == ""

    def test_invalid_value_raises(self) -> None:
        with pytest.raises(ExtensionError, match="Invalid extension value at #/x"):
            decode({"x-cb-sort-order": "first"}, SchemaExtensions, "#/x")

    def test_records_are_frozen(self) -> None:
        ext = decode({}, SchemaExtensions, "#/x")
        with pytest.raises(Exception):
            ext.sort_order = 3  # type: ignore[misc]
