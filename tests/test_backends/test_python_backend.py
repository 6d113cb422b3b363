"""Tests for sdkgen.backends.python -- the reference Python SDK backend."""

from __future__ import annotations

from typing import Any

import pytest

from sdkgen.backends.base import ParameterKind, ShapingContext, TypeKind
from sdkgen.backends.python import (
    PythonBackend,
    parameter_kind,
    quote_module_reference,
    response_class_type,
)
from sdkgen.ir import Attribute, Resource, Spec, build_spec
from sdkgen.models import Schema


@pytest.fixture
def backend() -> PythonBackend:
    return PythonBackend()


@pytest.fixture
def shaped(backend: PythonBackend, catalog_spec: Spec) -> dict[str, Any]:
    return backend.shape(catalog_spec)


def _resource(spec: Spec, name: str) -> Resource:
    resource = spec.resource(name)
    assert resource is not None
    return resource


def _by_name(items: list[dict[str, Any]], name: str) -> dict[str, Any]:
    return next(item for item in items if item["name"] == name)


def _params(action: dict[str, Any]) -> list[tuple[str, str, str]]:
    return [(p["name"], p["kind"], p["type"]) for p in action["parameters"]]


# ---------------------------------------------------------------------------
# Type mapping
# ---------------------------------------------------------------------------


class TestDataType:
    """Schema-to-annotation table."""

    @pytest.mark.parametrize(
        ("raw", "name", "kind"),
        [
            ({"type": "string"}, "str", TypeKind.PRIMITIVE),
            ({"type": "string", "format": "date-time"}, "str", TypeKind.PRIMITIVE),
            ({"type": "integer", "format": "int64"}, "int", TypeKind.PRIMITIVE),
            ({"type": "integer", "x-cb-is-money-column": True}, "int", TypeKind.PRIMITIVE),
            ({"type": "number", "format": "double"}, "float", TypeKind.PRIMITIVE),
            ({"type": "number", "format": "decimal"}, "float", TypeKind.PRIMITIVE),
            ({"type": "number"}, "int", TypeKind.PRIMITIVE),
            ({"type": "boolean"}, "bool", TypeKind.PRIMITIVE),
            ({"type": "object", "additionalProperties": True}, "Dict[Any, Any]", TypeKind.MAP),
            ({"type": "array", "items": {}}, "List[Dict[Any, Any]]", TypeKind.LIST),
            ({"type": "array", "items": {"type": "string"}}, "List[str]", TypeKind.LIST),
            (
                {"type": "object", "properties": {"is": {"type": "string"}}},
                "StringFilter",
                TypeKind.FILTER,
            ),
        ],
    )
    def test_mapping(
        self, backend: PythonBackend, raw: dict, name: str, kind: TypeKind
    ) -> None:
        descriptor = backend.data_type(Schema.from_raw(raw), "field")
        assert descriptor.name == name
        assert descriptor.kind == kind

    @pytest.mark.parametrize(
        "raw",
        [
            {},
            {"type": "object"},
            {"type": "array", "items": {"type": "integer"}},
            {"type": "object", "properties": {"nested": {"type": "object"}}},
        ],
    )
    def test_unmapped_shapes_are_marked_unknown(self, backend: PythonBackend, raw: dict) -> None:
        descriptor = backend.data_type(Schema.from_raw(raw), "field")
        assert descriptor.is_unknown
        assert descriptor.name == "Any"

    def test_sort_by_is_a_sort_filter(self, backend: PythonBackend) -> None:
        schema = Schema.from_raw({"type": "object", "additionalProperties": True})
        descriptor = backend.data_type(schema, "sort_by")
        assert descriptor.kind == TypeKind.FILTER
        assert descriptor.name == "SortFilter"

    def test_sub_resources(self, backend: PythonBackend) -> None:
        single = Schema.from_raw({"type": "object", "x-cb-is-sub-resource": True})
        listed = Schema.from_raw(
            {"type": "array", "items": {"type": "object", "x-cb-is-sub-resource": True}}
        )
        assert backend.data_type(single, "billing_address").name == "BillingAddress"
        assert backend.data_type(listed, "line_items").name == "List[LineItem]"

    def test_dependent_attributes_import_model_module(
        self, backend: PythonBackend
    ) -> None:
        schema = Schema.from_raw(
            {
                "type": "object",
                "x-cb-resource-id": "estimate",
                "properties": {
                    "subscription_estimate": {
                        "type": "object",
                        "x-cb-is-sub-resource": True,
                        "x-cb-is-dependent-attribute": True,
                    }
                },
            }
        )
        context = ShapingContext(Resource("Estimate", schema))
        sub = schema.properties["subscription_estimate"]  # type: ignore[index]

        descriptor = backend.data_type(sub, "subscription_estimate", context)

        assert descriptor.name == "subscription_estimate.SubscriptionEstimate"
        assert context.snapshot()["models"] == ["subscription_estimate"]


class TestFilterType:
    @pytest.mark.parametrize(
        ("first", "expected"),
        [
            ({"type": "string", "enum": ["a"]}, "EnumFilter"),
            ({"type": "string", "enum": ["true", "false"], "format": "boolean"}, "BooleanFilter"),
            ({"type": "string", "format": "unix-time"}, "TimestampFilter"),
            ({"type": "string", "format": "date-time"}, "TimestampFilter"),
            ({"type": "string", "format": "decimal"}, "NumberFilter"),
            ({"type": "string"}, "StringFilter"),
            ({"type": "integer"}, "NumberFilter"),
            ({"type": "boolean"}, "BooleanFilter"),
            ({"type": "object"}, "Any"),
        ],
    )
    def test_first_property_decides(
        self, backend: PythonBackend, first: dict, expected: str
    ) -> None:
        schema = Schema.from_raw({"type": "object", "properties": {"is": first}})
        assert backend.filter_type(schema) == expected

    def test_explicit_filter_name_wins(self, backend: PythonBackend) -> None:
        schema = Schema.from_raw(
            {
                "type": "object",
                "x-cb-sdk-filter-name": "EnumFilter",
                "properties": {"is": {"type": "string"}},
            }
        )
        assert backend.filter_type(schema) == "EnumFilter"

    def test_no_properties(self, backend: PythonBackend) -> None:
        assert backend.filter_type(Schema(type="object")) is None


class TestHelpers:
    def test_response_class_type(self) -> None:
        assert response_class_type("Card") == "CardResponse"
        assert response_class_type("List[LineItems]") == "List[LineItemResponse]"

    def test_quote_module_reference(self) -> None:
        assert quote_module_reference("customer.CustomerResponse") == '"customer.CustomerResponse"'
        assert quote_module_reference("List[customer.Card]") == 'List["customer.Card"]'
        assert quote_module_reference("BillingAddressResponse") == "BillingAddressResponse"

    def test_operation_response_type(self, backend: PythonBackend, catalog_spec: Spec) -> None:
        context = ShapingContext(_resource(catalog_spec, "Invoice"))
        assert backend.operation_response_type(None, context) == "Any"
        assert backend.operation_response_type("unknown", context) == "str"
        assert backend.operation_response_type("int", context) == "int"
        assert backend.operation_response_type("Invoice", context) == "InvoiceResponse"
        assert backend.operation_response_type("CreditNote", context) == (
            '"credit_note.CreditNoteResponse"'
        )
        assert context.snapshot()["models"] == ["credit_note"]

    def test_naming_convention(self, backend: PythonBackend) -> None:
        assert backend.naming_convention("customer-id") == "CustomerId"


# ---------------------------------------------------------------------------
# Full shaping
# ---------------------------------------------------------------------------


class TestShape:
    def test_top_level(self, shaped: dict[str, Any]) -> None:
        assert shaped["backend"] == "python"
        assert shaped["version"] == {"api_version": 2, "product_catalog_version": 2}
        assert [r["name"] for r in shaped["resources"]] == ["Customer", "Invoice"]

    def test_global_enums(self, shaped: dict[str, Any]) -> None:
        auto_collection, card_status = shaped["global_enums"]
        assert auto_collection == {
            "name": "AutoCollection",
            "class_name": "AutoCollection",
            "members": [{"name": "On", "value": "on"}, {"name": "Off", "value": "off"}],
            "deprecated_values": [],
        }
        assert card_status["members"] == []
        assert card_status["deprecated_values"] == ["no_card", "valid"]


class TestShapeCustomer:
    """The Customer resource end to end."""

    @pytest.fixture
    def customer(self, shaped: dict[str, Any]) -> dict[str, Any]:
        return _by_name(shaped["resources"], "Customer")

    def test_resource_fields(self, customer: dict[str, Any]) -> None:
        assert customer["id"] == "customer"
        assert customer["module"] == "customer"
        assert customer["path_name"] == "customers"
        assert customer["response_class_name"] == "CustomerResponse"
        assert customer["is_custom_field_supported"] is True
        assert customer["imports"] == {"enums": ["enums"], "filters": ["filters"], "models": []}

    def test_columns(self, customer: dict[str, Any]) -> None:
        assert [(c["name"], c["type"]) for c in customer["columns"]] == [
            ("id", "str"),
            ("first_name", "str"),
            ("auto_collection", "str"),
            ("taxability", "str"),
            ("net_term_days", "int"),
            ("billing_address", "BillingAddressResponse"),
            ("meta_data", "Dict[Any, Any]"),
        ]
        assert customer["columns"][0]["is_required"] is True

    def test_enums(self, customer: dict[str, Any]) -> None:
        assert [e["class_name"] for e in customer["enums"]] == [
            "Taxability",
            "BillingAddressValidationStatus",
        ]
        assert customer["enums"][1]["members"] == [
            {"name": "NotValidated", "value": "not_validated"},
            {"name": "Valid", "value": "valid"},
        ]

    def test_sub_resource(self, customer: dict[str, Any]) -> None:
        [address] = customer["sub_resources"]
        assert address["class_name"] == "BillingAddress"
        assert address["response_class_name"] == "BillingAddressResponse"
        assert address["fields"] == [
            {"name": "line1", "type": "str", "is_required": False},
            {
                "name": "validation_status",
                "type": '"Customer.BillingAddressValidationStatus"',
                "is_required": False,
            },
        ]
        assert address["response_fields"][1]["type"] == "str"

    def test_actions_in_sort_order(self, customer: dict[str, Any]) -> None:
        assert [a["name"] for a in customer["actions"]] == ["create", "list", "delete"]

    def test_create_parameters(self, customer: dict[str, Any]) -> None:
        create = _by_name(customer["actions"], "create")
        assert create["params_class_name"] == "CreateParams"
        assert create["json_keys"] == [{"meta_data": 0}]
        assert create["is_all_params_optional"] is False
        assert _params(create) == [
            ("first_name", "value", "str"),
            ("taxability", "enum", '"Customer.Taxability"'),
            ("auto_collection", "enum", "enums.AutoCollection"),
            ("billing_address", "nested_object", '"Customer.CreateBillingAddressParams"'),
            ("meta_data", "value", "Dict[Any, Any]"),
        ]
        billing_address = create["parameters"][3]
        assert [(f["name"], f["type"]) for f in billing_address["fields"]] == [
            ("line1", "str"),
            ("validation_status", '"Customer.BillingAddressValidationStatus"'),
        ]
        assert create["parameters"][0]["is_required"] is True

    def test_list_parameters(self, customer: dict[str, Any]) -> None:
        list_action = _by_name(customer["actions"], "list")
        assert _params(list_action) == [
            ("limit", "value", "int"),
            ("offset", "value", "str"),
            ("auto_collection", "filter", "Filters.EnumFilter"),
            ("sort_by", "sort", "Filters.SortFilter"),
        ]

    def test_list_response(self, customer: dict[str, Any]) -> None:
        response = _by_name(customer["actions"], "list")["response"]
        assert response == {
            "class_name": "ListResponse",
            "fields": [
                {"name": "list", "type": "List[ListCustomerResponse]", "is_required": True},
                {"name": "next_offset", "type": "str", "is_required": False},
            ],
            "item_class_name": "ListCustomerResponse",
            "item_fields": [{"name": "customer", "type": "CustomerResponse", "is_required": True}],
        }

    def test_delete_action(self, customer: dict[str, Any]) -> None:
        delete = _by_name(customer["actions"], "delete")
        assert delete["http_method"] == "POST"
        assert delete["path_parameters"] == ["customer-id"]
        assert delete["url_prefix"] == "customers"
        assert delete["url_suffix"] == "delete"
        assert delete["parameters"] == []
        assert delete["params_class_name"] is None
        assert delete["response"]["fields"] == [
            {"name": "customer", "type": "CustomerResponse", "is_required": True}
        ]


class TestShapeInvoice:
    """The Invoice resource end to end."""

    @pytest.fixture
    def invoice(self, shaped: dict[str, Any]) -> dict[str, Any]:
        return _by_name(shaped["resources"], "Invoice")

    def test_imports(self, invoice: dict[str, Any]) -> None:
        assert invoice["imports"] == {"enums": [], "filters": ["filters"], "models": ["customer"]}

    def test_columns(self, invoice: dict[str, Any]) -> None:
        columns = {c["name"]: c["type"] for c in invoice["columns"]}
        assert columns["total"] == "int"
        assert columns["status"] == "str"
        assert columns["line_items"] == "List[LineItemResponse]"
        assert columns["tags"] == "List[str]"

    def test_enums(self, invoice: dict[str, Any]) -> None:
        assert [e["name"] for e in invoice["enums"]] == [
            "shipping_address_state_code",
            "status",
            "line_item_entity_type",
        ]
        status = invoice["enums"][1]
        assert [m["value"] for m in status["members"]] == ["paid", "posted"]
        assert status["deprecated_values"] == ["voided"]

    def test_list_sub_resource(self, invoice: dict[str, Any]) -> None:
        [line_item] = invoice["sub_resources"]
        assert line_item["class_name"] == "LineItem"
        assert line_item["id"] == "line_items"
        assert [(f["name"], f["type"]) for f in line_item["fields"]] == [
            ("id", "str"),
            ("amount", "int"),
            ("entity_type", '"Invoice.LineItemEntityType"'),
        ]

    def test_create_parameters(self, invoice: dict[str, Any]) -> None:
        create = _by_name(invoice["actions"], "create")
        assert create["is_idempotent"] is True
        assert create["json_keys"] == []
        assert _params(create) == [
            ("customer_id", "value", "str"),
            ("line_items", "indexed_list", 'List["Invoice.CreateLineItemParams"]'),
            ("shipping_address", "nested_object", '"Invoice.CreateShippingAddressParams"'),
        ]
        line_items, shipping_address = create["parameters"][1:]
        assert [(f["name"], f["type"]) for f in line_items["fields"]] == [
            ("amount", "int"),
            ("description", "str"),
        ]
        assert [(f["name"], f["type"]) for f in shipping_address["fields"]] == [
            ("city", "str"),
            ("state_code", '"Invoice.ShippingAddressStateCode"'),
        ]

    def test_create_response_references_other_module(self, invoice: dict[str, Any]) -> None:
        response = _by_name(invoice["actions"], "create")["response"]
        assert response["fields"] == [
            {"name": "invoice", "type": "InvoiceResponse", "is_required": True},
            {"name": "customer", "type": '"customer.CustomerResponse"', "is_required": False},
        ]

    def test_list_filters(self, invoice: dict[str, Any]) -> None:
        list_action = _by_name(invoice["actions"], "list")
        assert _params(list_action) == [
            ("limit", "value", "int"),
            ("status", "filter", "Filters.EnumFilter"),
            ("date", "filter", "Filters.TimestampFilter"),
        ]
        assert list_action["response"]["item_class_name"] == "ListInvoiceResponse"


# ---------------------------------------------------------------------------
# Parameter kinds
# ---------------------------------------------------------------------------


def _filter(inner: dict) -> dict:
    return {"type": "object", "x-cb-is-filter-parameter": True, "properties": {"is": inner}}


class TestParameterKind:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ({"type": "string"}, ParameterKind.VALUE),
            ({"type": "string", "enum": ["a", "b"]}, ParameterKind.ENUM),
            (
                {"type": "array", "items": {"type": "string", "enum": ["a", "b"]}},
                ParameterKind.ENUM,
            ),
            ({"type": "object", "additionalProperties": True}, ParameterKind.VALUE),
            ({"type": "object"}, ParameterKind.VALUE),
            (_filter({"type": "string"}), ParameterKind.FILTER),
            (
                {"type": "object", "properties": {"city": {"type": "string"}}},
                ParameterKind.NESTED_OBJECT,
            ),
            (
                {
                    "type": "object",
                    "x-cb-is-composite-array-request-body": True,
                    "properties": {"amount": {"type": "array", "items": {"type": "integer"}}},
                },
                ParameterKind.INDEXED_LIST,
            ),
            (
                {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "x-cb-is-sub-resource": True,
                        "properties": {"id": {"type": "string"}},
                    },
                },
                ParameterKind.INDEXED_LIST,
            ),
            (
                {
                    "type": "object",
                    "x-cb-is-filter-parameter": True,
                    "x-cb-is-multi-value-attribute": True,
                    "properties": {"first_name": _filter({"type": "string"})},
                },
                ParameterKind.NESTED_OBJECT,
            ),
        ],
    )
    def test_kind_decides(self, raw: dict, expected: ParameterKind) -> None:
        assert parameter_kind(Attribute("field", Schema.from_raw(raw))) == expected

    def test_sort_by(self) -> None:
        raw = {"type": "object", "properties": {"asc": {"type": "string", "enum": ["id"]}}}
        assert parameter_kind(Attribute("sort_by", Schema.from_raw(raw))) == ParameterKind.SORT

    def test_multi_value_without_fields_is_a_value(self) -> None:
        raw = {"type": "string", "x-cb-is-multi-value-attribute": True}
        assert parameter_kind(Attribute("field", Schema.from_raw(raw))) == ParameterKind.VALUE


class TestMultiValueParameter:
    """A multi-value filter nests its sub-filters one level."""

    @pytest.fixture
    def list_action(self, backend: PythonBackend) -> dict[str, Any]:
        document = {
            "openapi": "3.0.0",
            "paths": {
                "/customers": {
                    "get": {
                        "x-cb-operation-method-name": "list",
                        "x-cb-resource-id": "customer",
                        "parameters": [
                            {
                                "name": "customer",
                                "in": "query",
                                "schema": {
                                    "type": "object",
                                    "x-cb-is-filter-parameter": True,
                                    "x-cb-is-multi-value-attribute": True,
                                    "properties": {
                                        "first_name": _filter({"type": "string"}),
                                        "created_at": {
                                            "type": "object",
                                            "x-cb-is-filter-parameter": True,
                                            "properties": {
                                                "after": {"type": "string", "format": "unix-time"}
                                            },
                                        },
                                    },
                                },
                            }
                        ],
                    }
                }
            },
            "components": {
                "schemas": {
                    "Customer": {
                        "type": "object",
                        "x-cb-resource-id": "customer",
                        "properties": {"id": {"type": "string"}},
                    }
                }
            },
        }
        spec = build_spec(document)
        shaped = backend.shape_resource(_resource(spec, "Customer"), spec)
        return _by_name(shaped["actions"], "list")

    def test_parent_is_nested(self, list_action: dict[str, Any]) -> None:
        assert _params(list_action) == [
            ("customer", "nested_object", '"Customer.ListCustomerParams"'),
        ]

    def test_every_field_is_a_filter(self, list_action: dict[str, Any]) -> None:
        [customer] = list_action["parameters"]
        assert [(f["name"], f["kind"], f["type"]) for f in customer["fields"]] == [
            ("first_name", "filter", "Filters.StringFilter"),
            ("created_at", "filter", "Filters.TimestampFilter"),
        ]
