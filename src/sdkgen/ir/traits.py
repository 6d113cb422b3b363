"""Attribute Classifier -- immutable trait records for IR nodes.

Every generation-relevant question about a node ("is this an enum?", "is
this a list of sub-resources?", "is it hidden?") is answered here, once,
from the node's decoded extensions. The answers are frozen into
:class:`AttributeTraits`, :class:`ActionTraits`, and :class:`ResourceTraits`
records which the IR caches per node; backends read the records instead of
re-deriving traits from raw metadata.

The array-item fallback is load-bearing. For an attribute whose schema is an
array, enum-ness, global-enum-ness, gen-separate-ness, sub-resource-ness,
deprecation, sort order, sub-resource name, and meta-model name are read
from the item schema when the array schema itself does not carry them. A
non-array attribute never consults an item schema.

:class:`AttributeKind` collapses the traits into a single tag that
backends match on. When several traits hold, the first kind in this order
wins: ``SORT``, ``FILTER``, ``DEPENDENT_RESOURCE``, ``LIST_OF_SUB_RESOURCE``,
``SUB_RESOURCE``, ``GLOBAL_ENUM``, ``LIST_OF_ENUM``, ``ENUM``, ``OPEN_MAP``,
``LIST_OF_SIMPLE_TYPE``, ``OBJECT``, ``SCALAR``. A sub-resource field holding a
primitive value (or a list of them) is tagged by its value, so a flagged
string enum is ``ENUM``, not ``SUB_RESOURCE``.
"""

from __future__ import annotations

import enum
from typing import Iterator, Optional

from pydantic import BaseModel, ConfigDict

from sdkgen.extensions import OperationExtensions
from sdkgen.models import Schema, SchemaShape

SORT_ATTRIBUTE = "sort_by"
"""Attribute name that always shapes as a sort parameter."""

DEFAULT_DEPRECATION_MESSAGE = "Please refer API docs to use other attributes"
"""Used when a deprecated attribute carries no ``x-cb-deprecation-message``."""

BLANK_OPTION_NOT_ALLOWED = "not_allowed"


class AttributeKind(str, enum.Enum):
    """The code shape an attribute takes in a generated SDK."""

    SORT = "sort"
    FILTER = "filter"
    DEPENDENT_RESOURCE = "dependent_resource"
    LIST_OF_SUB_RESOURCE = "list_of_sub_resource"
    SUB_RESOURCE = "sub_resource"
    GLOBAL_ENUM = "global_enum"
    LIST_OF_ENUM = "list_of_enum"
    ENUM = "enum"
    OPEN_MAP = "open_map"
    LIST_OF_SIMPLE_TYPE = "list_of_simple_type"
    OBJECT = "object"
    SCALAR = "scalar"


class _Traits(BaseModel):
    model_config = ConfigDict(frozen=True)


class AttributeTraits(_Traits):
    """Classification of one attribute (schema property or request parameter)."""

    kind: AttributeKind
    # Enum
    is_enum: bool = False
    is_global_enum: bool = False
    is_external_enum: bool = False
    is_gen_separate: bool = False
    has_global_enum_reference: bool = False
    enum_api_name: Optional[str] = None
    # Sub-resources
    is_sub_resource: bool = False
    is_sub_resource_schema: bool = False
    is_list_sub_resource: bool = False
    is_global_resource_reference: bool = False
    is_dependent_attribute: bool = False
    sub_resource_name: Optional[str] = None
    sub_resource_parent_name: Optional[str] = None
    meta_model_name: Optional[str] = None
    # Lists and maps
    is_list: bool = False
    is_list_of_enum: bool = False
    is_list_of_simple_type: bool = False
    is_open_map: bool = False
    is_content_object: bool = False
    has_sub_attributes: bool = False
    # Filters and request shaping
    is_filter: bool = False
    filter_type: Optional[str] = None
    is_sort: bool = False
    is_multi_value: bool = False
    is_presence_operator_supported: bool = False
    is_pagination: bool = False
    is_composite_array_body: bool = False
    param_blank_option: Optional[str] = None
    # Columns
    is_money_column: bool = False
    is_long_money_column: bool = False
    is_api_column: bool = False
    is_foreign_column: bool = False
    is_pcv1: bool = False
    is_meta_comment_required: bool = False
    # Visibility and lifecycle
    is_deprecated: bool = False
    deprecation_message: str = DEFAULT_DEPRECATION_MESSAGE
    is_hidden: bool = False
    is_hidden_parameter: bool = False
    is_internal: bool = False
    is_eap: bool = False
    sort_order: int = -1


class ActionTraits(_Traits):
    """Classification of one operation."""

    is_list: bool = False
    is_bulk: bool = False
    is_batch: bool = False
    is_idempotent: bool = False
    is_internal: bool = False
    is_eap: bool = False
    hidden_from_sdk: bool = False
    needs_json_input: bool = False
    needs_input_object: bool = False
    is_deprecated: bool = False
    sort_order: int = -1
    # Effective visibility with QA mode applied
    is_hidden: bool = False
    is_excluded_from_sdk: bool = False


class ResourceTraits(_Traits):
    """Classification of one resource-backing schema."""

    is_hidden: bool = False
    is_third_party: bool = False
    is_dependent_resource: bool = False
    is_custom_fields_supported: bool = False
    is_additional_properties_supported: bool = False
    product_catalog_version: Optional[int] = None
    path_name: Optional[str] = None
    sort_order: int = -1


# ---------------------------------------------------------------------------
# Schema-level predicates
# ---------------------------------------------------------------------------


_LEAF_SHAPES = frozenset(
    {
        SchemaShape.STRING,
        SchemaShape.DATE_TIME,
        SchemaShape.INTEGER,
        SchemaShape.NUMBER,
        SchemaShape.BOOLEAN,
    }
)


def _is_leaf(schema: Schema) -> bool:
    target = schema.items if schema.is_array and schema.items is not None else schema
    return target.shape in _LEAF_SHAPES


def is_hidden_schema(schema: Optional[Schema], qa_mode: bool) -> bool:
    """True when *schema* is flagged hidden and QA mode is off."""
    return schema is not None and schema.extensions.hidden_from_sdk and not qa_mode


def is_visible_attribute(schema: Schema, qa_mode: bool) -> bool:
    """Visibility rule shared by every attribute list.

    An attribute is visible when its own schema is not hidden, at least one
    of its properties is visible (or it has none), and its item schema is
    not hidden.
    """
    if is_hidden_schema(schema, qa_mode):
        return False
    if schema.properties and not any(
        not is_hidden_schema(child, qa_mode) for child in schema.properties.values()
    ):
        return False
    return not is_hidden_schema(schema.items, qa_mode)


def is_sub_resource_schema(schema: Schema) -> bool:
    """Sub-resource flag of the schema, or of its items for arrays."""
    if schema.is_array:
        return schema.items is not None and is_sub_resource_schema(schema.items)
    return schema.extensions.is_sub_resource


def is_global_resource_reference(schema: Schema) -> bool:
    """Global-reference flag of the schema, or of its items for arrays."""
    if schema.is_array:
        return schema.items is not None and is_global_resource_reference(schema.items)
    return schema.extensions.is_global_resource_reference


def child_schemas(schema: Schema) -> Iterator[tuple[str, Schema, bool]]:
    """Yield ``(name, schema, is_required)`` for the nested attributes of *schema*.

    Properties of the schema itself come first; an array without its own
    properties exposes the properties of its item schema instead.
    """
    if schema.properties is not None:
        owner = schema
    elif schema.is_array and schema.items is not None and schema.items.properties is not None:
        owner = schema.items
    else:
        return
    required = owner.required_names
    for name, child in (owner.properties or {}).items():
        yield name, child, name in required


def _is_filter(schema: Schema, qa_mode: bool) -> bool:
    if schema.extensions.is_filter_parameter or schema.extensions.sdk_filter_name:
        return True
    return any(
        _is_filter(child, qa_mode)
        for _, child, _ in child_schemas(schema)
        if is_visible_attribute(child, qa_mode)
    )


# ---------------------------------------------------------------------------
# Classifiers
# ---------------------------------------------------------------------------


def classify_attribute(name: str, schema: Schema, qa_mode: bool = False) -> AttributeTraits:
    """Compute the trait record for one attribute.

    Args:
        name: Attribute name as it appears in the generated SDK.
        schema: The attribute's schema node.
        qa_mode: Whether hidden nodes are exposed for this build.

    Returns:
        A frozen :class:`AttributeTraits`.
    """
    ext = schema.extensions
    items = schema.items if schema.is_array else None
    item_ext = items.extensions if items is not None else None

    enum_source = items if items is not None else schema
    is_enum = enum_source is not None and enum_source.has_enum
    is_global_enum = enum_source is not None and enum_source.extensions.is_global_enum
    is_gen_separate = enum_source is not None and enum_source.extensions.is_gen_separate

    is_sub_resource = ext.is_sub_resource or (item_ext is not None and item_ext.is_sub_resource)
    is_list_sub_resource = (
        items is not None
        and items.properties is not None
        and items.extensions.is_sub_resource
    )
    sub_resource_schema = is_sub_resource_schema(schema)
    global_reference = is_global_resource_reference(schema)

    structured_sub_resource = is_sub_resource and not _is_leaf(schema)

    is_list = schema.type == "array" and items is not None and items.type is not None
    is_list_of_enum = (
        is_list and not structured_sub_resource and items is not None and items.enum is not None
    )
    is_list_of_simple_type = (
        is_list
        and not structured_sub_resource
        and ext.parameter_blank_option != BLANK_OPTION_NOT_ALLOWED
        and not is_list_of_enum
    )

    is_deprecated = bool(schema.deprecated) or (items is not None and bool(items.deprecated))
    sort_order = ext.sort_order
    if sort_order == -1 and item_ext is not None:
        sort_order = item_ext.sort_order

    sub_resource_name = ext.sub_resource_name
    if sub_resource_name is None and item_ext is not None:
        sub_resource_name = item_ext.sub_resource_name
    meta_model_name = ext.meta_model_name
    if meta_model_name is None and item_ext is not None:
        meta_model_name = item_ext.meta_model_name

    is_external_enum = ext.is_external_enum or (
        item_ext is not None and item_ext.is_external_enum
    )
    is_filter = _is_filter(schema, qa_mode)
    is_sort = name == SORT_ATTRIBUTE
    is_open_map = schema.is_open_map

    if is_sort:
        kind = AttributeKind.SORT
    elif is_filter:
        kind = AttributeKind.FILTER
    elif sub_resource_schema and global_reference:
        kind = AttributeKind.DEPENDENT_RESOURCE
    elif is_list_sub_resource:
        kind = AttributeKind.LIST_OF_SUB_RESOURCE
    elif structured_sub_resource:
        kind = AttributeKind.SUB_RESOURCE
    elif is_enum and is_global_enum:
        kind = AttributeKind.GLOBAL_ENUM
    elif is_list_of_enum:
        kind = AttributeKind.LIST_OF_ENUM
    elif is_enum:
        kind = AttributeKind.ENUM
    elif is_open_map:
        kind = AttributeKind.OPEN_MAP
    elif is_list_of_simple_type:
        kind = AttributeKind.LIST_OF_SIMPLE_TYPE
    elif schema.is_object or schema.properties is not None:
        kind = AttributeKind.OBJECT
    else:
        kind = AttributeKind.SCALAR

    return AttributeTraits(
        kind=kind,
        is_enum=is_enum,
        is_global_enum=is_global_enum,
        is_external_enum=is_external_enum,
        is_gen_separate=is_gen_separate,
        has_global_enum_reference=ext.global_enum_reference is not None,
        enum_api_name=ext.sdk_enum_api_name,
        is_sub_resource=is_sub_resource,
        is_sub_resource_schema=sub_resource_schema,
        is_list_sub_resource=is_list_sub_resource,
        is_global_resource_reference=global_reference,
        is_dependent_attribute=ext.is_dependent_attribute,
        sub_resource_name=sub_resource_name,
        sub_resource_parent_name=ext.sub_resource_parent_name,
        meta_model_name=meta_model_name,
        is_list=is_list,
        is_list_of_enum=is_list_of_enum,
        is_list_of_simple_type=is_list_of_simple_type,
        is_open_map=is_open_map,
        is_content_object=(
            schema.shape == SchemaShape.OBJECT and schema.properties is None and name == "content"
        ),
        has_sub_attributes=schema.properties is not None,
        is_filter=is_filter,
        filter_type=ext.sdk_filter_name,
        is_sort=is_sort,
        is_multi_value=ext.is_multi_value_attribute,
        is_presence_operator_supported=ext.is_presence_operator_supported,
        is_pagination=ext.is_pagination_parameter,
        is_composite_array_body=ext.is_composite_array_request_body,
        param_blank_option=ext.parameter_blank_option,
        is_money_column=ext.is_money_column,
        is_long_money_column=ext.is_long_money_column,
        is_api_column=ext.is_api_column,
        is_foreign_column=ext.is_foreign_column,
        is_pcv1=ext.attribute_pcv == 1,
        is_meta_comment_required=ext.attribute_meta_comment == "required",
        is_deprecated=is_deprecated,
        deprecation_message=ext.deprecation_message or DEFAULT_DEPRECATION_MESSAGE,
        is_hidden=not is_visible_attribute(schema, qa_mode),
        is_hidden_parameter=items is not None and is_hidden_schema(items, qa_mode),
        is_internal=ext.is_internal,
        is_eap=ext.is_eap,
        sort_order=sort_order,
    )


def classify_action(
    extensions: OperationExtensions, deprecated: bool = False, qa_mode: bool = False
) -> ActionTraits:
    """Compute the trait record for one operation.

    Outside QA mode an operation is excluded from generated SDKs when it is
    hidden, bulk, or internal.
    """
    hidden = extensions.hidden_from_sdk and not qa_mode
    excluded = not qa_mode and (
        extensions.hidden_from_sdk or extensions.is_bulk or extensions.is_internal
    )
    return ActionTraits(
        is_list=extensions.is_list,
        is_bulk=extensions.is_bulk,
        is_batch=extensions.is_batch,
        is_idempotent=extensions.is_idempotent,
        is_internal=extensions.is_internal,
        is_eap=extensions.is_eap,
        hidden_from_sdk=extensions.hidden_from_sdk,
        needs_json_input=extensions.needs_json_input,
        needs_input_object=extensions.needs_input_object,
        is_deprecated=deprecated,
        sort_order=extensions.sort_order,
        is_hidden=hidden,
        is_excluded_from_sdk=excluded,
    )


def classify_resource(schema: Schema, qa_mode: bool = False) -> ResourceTraits:
    """Compute the trait record for a resource-backing schema."""
    ext = schema.extensions
    return ResourceTraits(
        is_hidden=ext.hidden_from_sdk and not qa_mode,
        is_third_party=ext.is_third_party_resource and not qa_mode,
        is_dependent_resource=ext.is_dependent_resource,
        is_custom_fields_supported=ext.is_custom_fields_supported,
        is_additional_properties_supported=schema.is_open_map,
        product_catalog_version=ext.product_catalog_version,
        path_name=ext.resource_path_name,
        sort_order=ext.sort_order,
    )
