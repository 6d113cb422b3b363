"""Reference backend: typed Python SDK models.

Shapes each resource into the structure a Python SDK renderer consumes:
``TypedDict`` request parameter classes, response classes, enum classes,
and the imports the generated module needs. Types are rendered as Python
annotation strings::

    >>> backend = PythonBackend()
    >>> backend.data_type(Schema(type="integer", format="int64"), "amount").name
    'int'

References to other generated modules are quoted (``"invoice.InvoiceResponse"``)
and recorded on the :class:`~sdkgen.backends.base.ShapingContext` of the
resource being shaped, together with filter and enum imports.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from sdkgen.backends.base import (
    Backend,
    ParameterKind,
    ShapedParameter,
    ShapingContext,
    TypeDescriptor,
    TypeKind,
)
from sdkgen.generator.inflector import singularize
from sdkgen.generator.naming import enum_member_name, to_camel_case, to_snake_case
from sdkgen.generator.params import ParameterAssembler
from sdkgen.ir.action import Action
from sdkgen.ir.attribute import Attribute
from sdkgen.ir.enum import Enum
from sdkgen.ir.resource import Resource
from sdkgen.ir.response import ResponseField
from sdkgen.ir.traits import SORT_ATTRIBUTE, AttributeKind, is_sub_resource_schema
from sdkgen.models import Schema, SchemaShape

logger = logging.getLogger(__name__)

STRING = "str"
INT = "int"
FLOAT = "float"
BOOL = "bool"
ANY = "Any"
JSON_OBJECT = "Dict[Any, Any]"
JSON_ARRAY = "List[Dict[Any, Any]]"

FILTERS_MODULE = "filters"
FILTERS_PREFIX = "Filters."
ENUMS_MODULE = "enums"
ENUMS_PREFIX = "enums."

UNIX_TIME = "unix-time"
SORT_FILTER = "SortFilter"

_FLOAT_FORMATS = frozenset({"decimal", "double"})
_TIMESTAMP_FORMATS = frozenset({UNIX_TIME, "date-time", "date"})
_PYTHON_TYPES = frozenset({STRING, INT, FLOAT, BOOL, ANY, JSON_OBJECT, JSON_ARRAY})


def _list_of(type_name: str) -> str:
    return f"List[{type_name}]"


def _quote(type_name: str) -> str:
    return f'"{type_name}"'


def _primitive(name: str) -> TypeDescriptor:
    return TypeDescriptor(kind=TypeKind.PRIMITIVE, name=name)


_UNKNOWN = TypeDescriptor(kind=TypeKind.UNKNOWN, name=ANY)


def response_class_type(type_name: str) -> str:
    """``List[LineItems]`` -> ``List[LineItemResponse]``; ``Card`` -> ``CardResponse``."""
    if type_name.startswith("List[") and type_name.endswith("]"):
        return _list_of(singularize(type_name[5:-1]) + "Response")
    return singularize(type_name) + "Response"


def quote_module_reference(type_name: str) -> str:
    """Quote a type that lives in another module (``module.Class``)."""
    if "." in type_name and not type_name.startswith('"'):
        if type_name.startswith("List[") and type_name.endswith("]"):
            return _list_of(_quote(type_name[5:-1]))
        return _quote(type_name)
    return type_name


_ENUM_KINDS = frozenset({AttributeKind.ENUM, AttributeKind.GLOBAL_ENUM, AttributeKind.LIST_OF_ENUM})
_MODEL_KINDS = frozenset(
    {
        AttributeKind.SUB_RESOURCE,
        AttributeKind.LIST_OF_SUB_RESOURCE,
        AttributeKind.DEPENDENT_RESOURCE,
    }
)
_CONTAINER_PARAMETERS = frozenset({ParameterKind.NESTED_OBJECT, ParameterKind.INDEXED_LIST})


def parameter_kind(attribute: Attribute) -> ParameterKind:
    """How a request input is passed, decided by its :class:`AttributeKind`.

    Composite-array bodies and lists of sub-resources are indexed
    (``parent[child][index]``). Multi-value inputs, filters over
    sub-resource fields, and objects with fields nest one level
    (``parent[child]``).
    """
    traits = attribute.traits
    kind = traits.kind
    nested = attribute.attributes
    if kind == AttributeKind.SORT:
        return ParameterKind.SORT
    if kind == AttributeKind.FILTER:
        if nested and (traits.is_multi_value or nested[0].traits.is_sub_resource):
            return ParameterKind.NESTED_OBJECT
        return ParameterKind.FILTER
    if nested and (traits.is_composite_array_body or kind == AttributeKind.LIST_OF_SUB_RESOURCE):
        return ParameterKind.INDEXED_LIST
    if kind in _ENUM_KINDS:
        return ParameterKind.ENUM
    if nested and (traits.is_multi_value or kind in _MODEL_KINDS or kind == AttributeKind.OBJECT):
        return ParameterKind.NESTED_OBJECT
    return ParameterKind.VALUE


class PythonBackend(Backend):
    """Shape resources for the typed Python SDK."""

    name = "python"
    hidden_overrides = ("media", "business_entity_change", "non_subscription")

    def naming_convention(self, raw: str) -> str:
        return to_camel_case(raw.replace("-", "_"))

    # ------------------------------------------------------------------ #
    # Types
    # ------------------------------------------------------------------ #

    def data_type(
        self, schema: Schema, name_hint: str, context: Optional[ShapingContext] = None
    ) -> TypeDescriptor:
        """Python annotation for *schema*.

        Args:
            schema: The schema to map.
            name_hint: Name of the attribute holding the schema; names
                nested model classes and detects ``sort_by``.
            context: The active shaping context. References to other
                modules are recorded on it when given.

        Returns:
            The descriptor; ``Any`` with kind ``UNKNOWN`` for shapes
            without a mapping.
        """
        shape = schema.shape
        ext = schema.extensions
        if shape == SchemaShape.STRING:
            return _primitive(STRING)
        if ext.is_money_column or ext.is_long_money_column:
            return _primitive(INT)
        if shape == SchemaShape.INTEGER:
            return _primitive(INT)
        if shape == SchemaShape.NUMBER:
            return _primitive(FLOAT if schema.format in _FLOAT_FORMATS else INT)
        if shape == SchemaShape.BOOLEAN:
            return _primitive(BOOL)
        if shape == SchemaShape.DATE_TIME:
            return _primitive(STRING)
        if shape == SchemaShape.OBJECT and schema.is_open_map and name_hint != SORT_ATTRIBUTE:
            return TypeDescriptor(kind=TypeKind.MAP, name=JSON_OBJECT)

        items = schema.items
        if items is not None and items.type is None and items.properties is None:
            return TypeDescriptor(kind=TypeKind.LIST, name=JSON_ARRAY)
        if schema.is_array and items is not None and is_sub_resource_schema(items):
            class_name = self.naming_convention(singularize(name_hint))
            if context is not None and context.has_dependent_attributes:
                module = to_snake_case(class_name)
                context.add_model_import(module)
                class_name = f"{module}.{class_name}"
            return TypeDescriptor(kind=TypeKind.LIST, name=_list_of(class_name))
        if not schema.is_array and is_sub_resource_schema(schema):
            class_name = self.naming_convention(name_hint)
            if context is not None and context.has_dependent_attributes:
                module = to_snake_case(class_name)
                context.add_model_import(module)
                class_name = f"{module}.{class_name}"
            return TypeDescriptor(kind=TypeKind.REFERENCE, name=class_name)
        if items is not None and self.data_type(items, name_hint).name == STRING:
            return TypeDescriptor(kind=TypeKind.LIST, name=_list_of(STRING))
        if shape == SchemaShape.OBJECT or (
            shape == SchemaShape.UNTYPED and schema.properties is not None
        ):
            if name_hint == SORT_ATTRIBUTE:
                return TypeDescriptor(kind=TypeKind.FILTER, name=SORT_FILTER)
            filter_name = self.filter_type(schema)
            if filter_name is not None and filter_name != ANY:
                return TypeDescriptor(kind=TypeKind.FILTER, name=filter_name)
        return _UNKNOWN

    def value_type(self, schema: Schema, name_hint: str) -> str:
        """Annotation of a plain input value; objects are never filters here."""
        shape = schema.shape
        if schema.extensions.is_money_column or schema.extensions.is_long_money_column:
            return INT
        if shape in (SchemaShape.STRING, SchemaShape.DATE_TIME):
            return STRING
        if shape == SchemaShape.INTEGER:
            return INT
        if shape == SchemaShape.NUMBER:
            return FLOAT if schema.format in _FLOAT_FORMATS else INT
        if shape == SchemaShape.BOOLEAN:
            return BOOL
        if shape == SchemaShape.OBJECT and schema.is_open_map:
            return JSON_OBJECT
        items = schema.items
        if items is not None and items.type is None and items.properties is None:
            return JSON_ARRAY
        if schema.is_array and items is not None and is_sub_resource_schema(items):
            return _list_of(self.naming_convention(singularize(name_hint)))
        if not schema.is_array and is_sub_resource_schema(schema):
            return self.naming_convention(name_hint)
        if items is not None and self.value_type(items, name_hint) == STRING:
            return _list_of(STRING)
        return ANY

    def scalar_type(self, schema: Schema, name_hint: str = "") -> Optional[str]:
        """Annotation of a response value that does not name a resource."""
        if schema.extensions.is_money_column:
            return INT
        shape = schema.shape
        if shape in (SchemaShape.STRING, SchemaShape.DATE_TIME):
            return STRING
        if shape in (SchemaShape.INTEGER, SchemaShape.NUMBER, SchemaShape.BOOLEAN):
            return self.value_type(schema, name_hint)
        if shape == SchemaShape.OBJECT and schema.is_open_map:
            return JSON_OBJECT
        if schema.items is not None and schema.items.type is None:
            return JSON_ARRAY
        return ANY

    def filter_type(self, schema: Schema) -> Optional[str]:
        """Filter class for an object-shaped filter parameter.

        ``x-cb-sdk-filter-name`` wins; otherwise the first property decides.
        Returns ``None`` for a schema without properties.
        """
        if schema.extensions.sdk_filter_name:
            return schema.extensions.sdk_filter_name
        if not schema.properties:
            return None
        first = next(iter(schema.properties.values()))
        if first.enum is not None:
            return "BooleanFilter" if first.format == "boolean" else "EnumFilter"
        if first.format in _TIMESTAMP_FORMATS:
            return "TimestampFilter"
        if first.type == "string":
            return "NumberFilter" if first.format else "StringFilter"
        if first.type in ("integer", "number"):
            return "NumberFilter"
        if first.type == "boolean":
            return "BooleanFilter"
        return ANY

    # ------------------------------------------------------------------ #
    # Request parameters
    # ------------------------------------------------------------------ #

    def shape_request_parameters(
        self, action: Action, context: ShapingContext
    ) -> list[ShapedParameter]:
        """Flat argument list of *action*.

        Nested and indexed inputs appear once, carrying their fields;
        everything else is a value, enum, filter, or sort parameter. See
        :func:`parameter_kind`.
        """
        assembler = ParameterAssembler(
            action,
            flat_outer_entries=True,
            include_pagination=True,
            accept_only_pagination=True,
            include_filter_sub_resource=True,
        )
        whole = {
            p.attribute.name: p.attribute
            for p in action.request_body_parameters + action.query_parameters
        }
        shaped: list[ShapedParameter] = []
        seen: set[str] = set()
        for attribute in assembler.all_attributes():
            kind = parameter_kind(attribute)
            if kind in _CONTAINER_PARAMETERS:
                if attribute.name in seen:
                    continue
                seen.add(attribute.name)
                shaped.append(
                    self._nested_parameter(
                        action, whole.get(attribute.name, attribute), kind, context
                    )
                )
            else:
                shaped.append(self._parameter(attribute, kind, context))
        return shaped

    def _params_class(self, action: Action, name: str) -> str:
        return f"{self.naming_convention(action.name)}{self.naming_convention(name)}Params"

    def _nested_parameter(
        self,
        action: Action,
        attribute: Attribute,
        kind: ParameterKind,
        context: ShapingContext,
    ) -> ShapedParameter:
        reference = _quote(
            f"{context.resource.name}.{self._params_class(action, singularize(attribute.name))}"
        )
        return ShapedParameter(
            name=attribute.name,
            kind=kind,
            type=_list_of(reference) if kind == ParameterKind.INDEXED_LIST else reference,
            is_required=attribute.is_required,
            is_deprecated=attribute.traits.is_deprecated,
            sort_order=attribute.sort_order,
            fields=self.sub_parameters(attribute, context),
        )

    def _parameter(
        self, attribute: Attribute, kind: ParameterKind, context: ShapingContext
    ) -> ShapedParameter:
        if kind == ParameterKind.SORT:
            type_name = FILTERS_PREFIX + self.data_type(attribute.schema, attribute.name).name
            context.add_filter_import(FILTERS_MODULE)
        elif kind == ParameterKind.ENUM:
            type_name = self.enum_reference(attribute, context)
        elif kind == ParameterKind.FILTER:
            descriptor = self.data_type(attribute.schema, attribute.name)
            if descriptor.kind == TypeKind.FILTER:
                type_name = FILTERS_PREFIX + descriptor.name
                context.add_filter_import(FILTERS_MODULE)
            else:
                type_name = ANY
        else:
            type_name = self.value_type(attribute.schema, attribute.name)
        return ShapedParameter(
            name=attribute.name,
            kind=kind,
            type=type_name,
            is_required=attribute.is_required,
            is_deprecated=attribute.traits.is_deprecated,
            sort_order=attribute.sort_order,
        )

    def sub_parameters(
        self, attribute: Attribute, context: ShapingContext
    ) -> list[ShapedParameter]:
        """Fields of a nested or indexed parameter.

        Every field of a multi-value input is a request input. Elsewhere
        only fields flagged as sub-resource fields are; the others belong
        to the response model and are skipped.
        """
        every_field = attribute.traits.is_multi_value
        fields: list[ShapedParameter] = []
        for sub in attribute.sorted_attributes:
            traits = sub.traits
            if not (every_field or traits.is_sub_resource) or traits.is_hidden_parameter:
                continue
            if traits.kind in (AttributeKind.FILTER, AttributeKind.SORT):
                kind = ParameterKind.FILTER
                type_name = FILTERS_PREFIX + self.data_type(sub.schema, sub.name).name
                context.add_filter_import(FILTERS_MODULE)
            elif traits.kind in _ENUM_KINDS:
                kind = ParameterKind.ENUM
                type_name = self.enum_reference(
                    sub, context, local_name=f"{singularize(attribute.name)}_{sub.name}"
                )
            else:
                kind = ParameterKind.VALUE
                target = sub.schema.items if sub.schema.items is not None else sub.schema
                type_name = self.value_type(target, sub.name)
            fields.append(
                ShapedParameter(
                    name=sub.name,
                    kind=kind,
                    type=type_name,
                    is_required=sub.is_required,
                    is_deprecated=traits.is_deprecated,
                    sort_order=sub.sort_order,
                )
            )
        return fields

    def enum_reference(
        self,
        attribute: Attribute,
        context: ShapingContext,
        local_name: Optional[str] = None,
    ) -> str:
        """Annotation naming the enum class of *attribute*.

        Global and gen-separate enums live in the shared ``enums`` module;
        everything else is a class of the active resource. *local_name*,
        when it names one of the resource's enums, is preferred over the
        attribute name.
        """
        traits = attribute.traits
        if traits.is_global_enum or traits.is_gen_separate:
            context.add_enum_import(ENUMS_MODULE)
            name = (
                attribute.enum().global_enum_reference
                or traits.enum_api_name
                or attribute.name
            )
            return ENUMS_PREFIX + self.naming_convention(name)
        if local_name is not None and local_name in context.enum_names:
            return _quote(f"{context.resource.name}.{self.naming_convention(local_name)}")
        return _quote(
            f"{context.resource.name}.{self.naming_convention(traits.enum_api_name or attribute.name)}"
        )

    # ------------------------------------------------------------------ #
    # Responses
    # ------------------------------------------------------------------ #

    def operation_response_type(self, type_name: Optional[str], context: ShapingContext) -> str:
        """Annotation of a response field that may name another resource."""
        if type_name is None:
            return ANY
        if type_name == "unknown":
            return STRING
        if type_name in _PYTHON_TYPES:
            return type_name
        if type_name.lower() == context.resource.name.lower():
            return type_name + "Response"
        module = to_snake_case(type_name)
        context.add_model_import(module)
        return _quote(f"{module}.{type_name}Response")

    def shape_response(self, action: Action, context: ShapingContext) -> dict[str, Any]:
        """Response class of *action*, plus the item class of list responses."""
        response_fields = sorted(
            action.response.fields(self.scalar_type), key=lambda f: not f.is_required
        )
        action_class = self.naming_convention(action.name)
        item_class: Optional[str] = None
        item_fields: list[dict[str, Any]] = []
        fields: list[dict[str, Any]] = []
        for field in response_fields:
            if not field.is_list:
                type_name = self.operation_response_type(field.type, context)
            elif not field.fields:
                inner = self.operation_response_type(field.type, context)
                type_name = ANY if inner == ANY else _list_of(inner)
            else:
                item_class = f"{action_class}{context.resource.name}Response"
                type_name = _list_of(item_class)
                item_fields = [self._response_field(f, context) for f in field.fields]
            fields.append(
                {"name": field.name, "type": type_name, "is_required": field.is_required}
            )
        return {
            "class_name": action.response.name,
            "fields": fields,
            "item_class_name": item_class,
            "item_fields": item_fields,
        }

    def _response_field(self, field: ResponseField, context: ShapingContext) -> dict[str, Any]:
        type_name = self.operation_response_type(field.type, context)
        if field.is_list and type_name != ANY:
            type_name = _list_of(type_name)
        return {"name": field.name, "type": type_name, "is_required": field.is_required}

    def response_columns(self, resource: Resource, context: ShapingContext) -> list[dict[str, Any]]:
        """Fields of the ``<Resource>Response`` class.

        Enums are plain strings on the wire; nested models point at their
        own response classes.
        """
        columns: list[dict[str, Any]] = []
        for attribute in resource.sorted_attributes:
            traits = attribute.traits
            if traits.kind == AttributeKind.LIST_OF_ENUM:
                type_name = _list_of(STRING)
            elif traits.kind in _ENUM_KINDS:
                type_name = STRING
            elif traits.kind in _MODEL_KINDS:
                hint = attribute.name
                if not (traits.is_list_sub_resource and not traits.is_dependent_attribute):
                    hint = traits.sub_resource_name or attribute.name
                descriptor = self.data_type(attribute.schema, hint, context)
                if descriptor.is_unknown:
                    type_name = ANY
                else:
                    type_name = quote_module_reference(response_class_type(descriptor.name))
            else:
                type_name = self._column_type(attribute, context)
            columns.append(
                {"name": attribute.name, "type": type_name, "is_required": attribute.is_required}
            )
        return columns

    def _column_type(self, attribute: Attribute, context: ShapingContext) -> str:
        descriptor = self.data_type(attribute.schema, attribute.name, context)
        traits = attribute.traits
        if descriptor.kind == TypeKind.FILTER and not (traits.is_filter or traits.is_sort):
            return JSON_OBJECT
        return descriptor.name

    # ------------------------------------------------------------------ #
    # Resources
    # ------------------------------------------------------------------ #

    def shape_enum(self, enum: Enum) -> dict[str, Any]:
        return {
            "name": enum.name,
            "class_name": self.naming_convention(enum.name),
            "members": [
                {"name": enum_member_name(value), "value": value} for value in enum.valid_values
            ],
            "deprecated_values": enum.deprecated_values,
        }

    def _sub_resource_enum_type(
        self, sub_resource: Resource, attribute: Attribute, context: ShapingContext
    ) -> str:
        traits = attribute.traits
        if traits.is_global_enum or traits.is_gen_separate:
            return self.enum_reference(attribute, context)
        local_name = f"{to_snake_case(singularize(sub_resource.name))}_{attribute.name}"
        return self.enum_reference(attribute, context, local_name=local_name)

    def shape_sub_resource(
        self, sub_resource: Resource, context: ShapingContext
    ) -> dict[str, Any]:
        """Model and response classes of a nested resource of the active resource."""
        fields: list[dict[str, Any]] = []
        response_fields: list[dict[str, Any]] = []
        for attribute in sub_resource.sorted_attributes:
            if attribute.traits.is_enum:
                type_name = self._sub_resource_enum_type(sub_resource, attribute, context)
                response_type = STRING
            else:
                type_name = self._column_type(attribute, context)
                response_type = type_name
            fields.append(
                {"name": attribute.name, "type": type_name, "is_required": attribute.is_required}
            )
            response_fields.append(
                {"name": attribute.name, "type": response_type, "is_required": attribute.is_required}
            )
        class_name = singularize(sub_resource.name)
        return {
            "id": sub_resource.id,
            "class_name": class_name,
            "response_class_name": f"{class_name}Response",
            "sort_order": sub_resource.sort_order,
            "fields": fields,
            "response_fields": response_fields,
        }

    def shape_action(self, action: Action, context: ShapingContext) -> dict[str, Any]:
        parameters = self.shape_request_parameters(action, context)
        action_class = self.naming_convention(action.name)
        data: dict[str, Any] = {
            "id": action.id,
            "name": action.name,
            "class_name": action_class,
            "http_method": action.method.value,
            "url": action.url,
            "url_prefix": action.url_prefix,
            "url_suffix": action.url_suffix,
            "sort_order": action.sort_order,
            "is_list": action.is_list,
            "is_deprecated": action.is_deprecated,
            "is_idempotent": action.traits.is_idempotent,
            "is_json_request": action.traits.needs_json_input,
            "json_keys": action.json_keys,
            "path_parameters": [p.name for p in action.path_parameters],
            "params_class_name": f"{action_class}Params" if parameters else None,
            "is_all_params_optional": (
                action.is_all_request_body_params_optional and action.is_all_query_params_optional
            ),
            "parameters": [p.model_dump(mode="json") for p in parameters],
            "response": self.shape_response(action, context),
        }
        if action.sub_domain is not None:
            data["sub_domain"] = action.sub_domain
        return data

    def build_resource(self, resource: Resource, context: ShapingContext) -> dict[str, Any]:
        logger.debug("Shaping resource %s", resource.name)
        return {
            "id": resource.id,
            "name": resource.name,
            "module": to_snake_case(resource.name),
            "path_name": resource.path_name,
            "sort_order": resource.sort_order,
            "response_class_name": f"{resource.name}Response",
            "enums": [self.shape_enum(e) for e in context.enums],
            "columns": self.response_columns(resource, context),
            "sub_resources": [
                self.shape_sub_resource(s, context)
                for s in self.sort_nodes(resource.sub_resources)
            ],
            "dependent_resources": [
                {"name": d.name, "module": to_snake_case(d.name), "is_list": is_list}
                for is_list, group in (
                    (False, resource.singular_dependent_resources),
                    (True, resource.list_dependent_resources),
                )
                for d in group
            ],
            "actions": [self.shape_action(a, context) for a in resource.sorted_actions],
            "is_custom_field_supported": resource.is_custom_field_supported,
            "is_additional_properties_supported": resource.is_additional_properties_supported,
            "has_list_operations": resource.has_list_operations,
        }
