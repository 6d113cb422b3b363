"""Tests for sdkgen.models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from sdkgen.exceptions import ExtensionError, SchemaDepthError
from sdkgen.models import GenerationConfig, GlobalConfig, Schema, SchemaShape


def _nested(depth: int) -> dict:
    node: dict = {"type": "string"}
    for _ in range(depth):
        node = {"type": "object", "properties": {"child": node}}
    return node


# ---------------------------------------------------------------------------
# Schema.from_raw
# ---------------------------------------------------------------------------


class TestSchemaFromRaw:
    """Building typed schema nodes from raw mappings."""

    def test_builds_children_and_extensions(self) -> None:
        schema = Schema.from_raw(
            {
                "type": "object",
                "required": ["id"],
                "properties": {
                    "id": {"type": "string", "x-cb-sort-order": 1},
                    "tags": {"type": "array", "items": {"type": "string"}},
                },
                "x-cb-resource-id": "customer",
            }
        )
        assert schema.extensions.resource_id == "customer"
        assert schema.required_names == frozenset({"id"})
        assert schema.properties is not None
        assert schema.properties["id"].extensions.sort_order == 1
        assert schema.properties["tags"].items is not None
        assert schema.properties["tags"].items.type == "string"

    def test_keeps_original_ref(self) -> None:
        schema = Schema.from_raw({"type": "object", "$ref": "#/components/schemas/Customer"})
        assert schema.ref_name == "Customer"
        assert not schema.is_unresolved_ref

    def test_ref_only_node_is_unresolved(self) -> None:
        schema = Schema.from_raw({"$ref": "#/components/schemas/Node"})
        assert schema.is_unresolved_ref
        assert schema.shape == SchemaShape.UNTYPED

    def test_type_list_takes_first_non_null(self) -> None:
        assert Schema.from_raw({"type": ["null", "integer"]}).type == "integer"

    def test_additional_properties(self) -> None:
        assert Schema.from_raw({"type": "object", "additionalProperties": True}).is_open_map
        typed = Schema.from_raw({"type": "object", "additionalProperties": {"type": "string"}})
        assert not typed.is_open_map
        assert isinstance(typed.additional_properties, Schema)

    def test_depth_limit_raises(self) -> None:
        with pytest.raises(SchemaDepthError, match="exceeds 3 levels"):
            Schema.from_raw(_nested(5), "#/components/schemas/Deep", max_depth=3)

    def test_depth_within_limit(self) -> None:
        assert Schema.from_raw(_nested(3), max_depth=3).is_object

    def test_bad_extension_value_reports_location(self) -> None:
        raw = {"type": "object", "properties": {"id": {"x-cb-sort-order": "first"}}}
        with pytest.raises(ExtensionError, match="#/components/schemas/A/properties/id"):
            Schema.from_raw(raw, "#/components/schemas/A")


class TestSchemaShape:
    @pytest.mark.parametrize(
        ("raw", "shape"),
        [
            ({"type": "string"}, SchemaShape.STRING),
            ({"type": "string", "format": "date-time"}, SchemaShape.DATE_TIME),
            ({"type": "string", "format": "date"}, SchemaShape.DATE_TIME),
            ({"type": "integer"}, SchemaShape.INTEGER),
            ({"type": "number"}, SchemaShape.NUMBER),
            ({"type": "boolean"}, SchemaShape.BOOLEAN),
            ({"items": {"type": "string"}}, SchemaShape.ARRAY),
            ({"type": "object"}, SchemaShape.OBJECT),
            ({}, SchemaShape.UNTYPED),
        ],
    )
    def test_shape(self, raw: dict, shape: SchemaShape) -> None:
        assert Schema.from_raw(raw).shape == shape


# ---------------------------------------------------------------------------
# Configuration models
# ---------------------------------------------------------------------------


class TestGenerationConfig:
    def test_defaults(self) -> None:
        config = GenerationConfig()
        assert config.qa_mode is False
        assert config.backend == "python"
        assert config.hidden_overrides == []
        assert config.strict_extensions is False

    def test_depth_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            GenerationConfig(max_schema_depth=0)

    def test_global_config_nests_defaults(self) -> None:
        config = GlobalConfig.model_validate({"generation": {"qa_mode": True}})
        assert config.generation.qa_mode is True
        assert config.output.format == "auto"
