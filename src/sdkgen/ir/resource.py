"""Resource nodes: a component schema with its actions and nested resources.

A top-level resource is a component schema carrying ``x-cb-resource-id``.
Its properties split four ways on two traits -- sub-resource and
global-resource-reference -- and on array-vs-scalar shape:

* sub-resource, not a global reference: a :meth:`Resource.sub_resources`
  entry, generated as a type owned by this resource;
* sub-resource and global reference: a
  :meth:`Resource.dependent_resources` entry pointing at a type generated
  elsewhere, further split into singular and list views.

Nested resources are built from the property schema (the item schema for
arrays) and have no actions.
"""

from __future__ import annotations

import logging
from functools import cached_property
from typing import Any, Optional

from sdkgen.generator.inflector import pluralize, singularize
from sdkgen.generator.naming import to_camel_case, upper_camel_from_snake
from sdkgen.ir.action import Action
from sdkgen.ir.attribute import Attribute
from sdkgen.ir.enum import Enum
from sdkgen.ir.response import ResponseParameter
from sdkgen.ir.traits import (
    ResourceTraits,
    classify_resource,
    is_global_resource_reference,
    is_hidden_schema,
    is_sub_resource_schema,
)
from sdkgen.models import Schema
from sdkgen.version import ProductCatalogVersion

logger = logging.getLogger(__name__)


def sub_resource_name(key: str, schema: Schema) -> str:
    """Type name of the nested resource held by property *key*.

    Arrays derive the singular UpperCamel form of the key
    (``line_items`` -> ``LineItem``); other schemas use
    ``x-cb-sub-resource-name``, falling back to the UpperCamel key.
    """
    if schema.is_array:
        return singularize(upper_camel_from_snake(key))
    return schema.extensions.sub_resource_name or to_camel_case(key)


def _declared_sub_resource_name(key: str, schema: Schema) -> str:
    target = schema.items if schema.is_array and schema.items is not None else schema
    return target.extensions.sub_resource_name or to_camel_case(singularize(key))


class Resource:
    """A generated SDK type with its actions.

    Args:
        name: Type name, e.g. ``"Customer"``.
        schema: The backing schema.
        actions: Operations grouped under this resource; hidden ones are
            dropped unless *qa_mode* is set.
        id: Resource id; read from ``x-cb-resource-id`` when omitted.
        sort_order: Overrides the schema's own sort order (nested resources
            take the order of the property that holds them).
        qa_mode: Expose hidden attributes, actions, and nested resources.
    """

    def __init__(
        self,
        name: str,
        schema: Schema,
        actions: Optional[list[Action]] = None,
        *,
        id: Optional[str] = None,
        sort_order: Optional[int] = None,
        qa_mode: bool = False,
    ) -> None:
        self.name = name
        self.schema = schema
        self.id = id if id is not None else schema.extensions.resource_id
        self.qa_mode = qa_mode
        self.actions = [a for a in actions or [] if not a.is_hidden]
        self._sort_order = sort_order

    def __repr__(self) -> str:
        return f"Resource({self.name!r}, id={self.id!r})"

    @cached_property
    def traits(self) -> ResourceTraits:
        return classify_resource(self.schema, self.qa_mode)

    @property
    def sort_order(self) -> int:
        if self._sort_order is not None:
            return self._sort_order
        return self.traits.sort_order

    @property
    def is_hidden(self) -> bool:
        return self.traits.is_hidden

    @property
    def is_third_party(self) -> bool:
        return self.traits.is_third_party

    @property
    def is_dependent_resource(self) -> bool:
        return self.traits.is_dependent_resource

    @property
    def path_name(self) -> Optional[str]:
        """URL path segment: ``x-cb-resource-path-name`` or the plural id."""
        if self.traits.path_name:
            return self.traits.path_name
        return pluralize(self.id) if self.id else None

    @property
    def product_catalog_version(self) -> Optional[ProductCatalogVersion]:
        return ProductCatalogVersion.from_tag(self.traits.product_catalog_version)

    # ------------------------------------------------------------------ #
    # Attributes and enums
    # ------------------------------------------------------------------ #

    @cached_property
    def attributes(self) -> list[Attribute]:
        """Every property, hidden ones included, in declaration order."""
        if self.schema.properties is None:
            return []
        required = self.schema.required_names
        return [
            Attribute(name, value, name in required, qa_mode=self.qa_mode)
            for name, value in self.schema.properties.items()
        ]

    @property
    def visible_attributes(self) -> list[Attribute]:
        return [a for a in self.attributes if a.is_visible]

    @property
    def sorted_attributes(self) -> list[Attribute]:
        """Visible attributes, stably sorted by sort order."""
        return sorted(self.visible_attributes, key=lambda a: a.sort_order)

    def attribute(self, name: str) -> Optional[Attribute]:
        return next((a for a in self.attributes if a.name == name), None)

    def has_attribute(self, name: str) -> bool:
        return self.attribute(name) is not None

    @property
    def enums(self) -> list[Enum]:
        """Enums declared inline on visible attributes (global enums excluded)."""
        return [
            a.enum()
            for a in self.visible_attributes
            if a.traits.is_enum and not a.traits.is_global_enum
        ]

    @property
    def global_enum_attributes(self) -> list[Attribute]:
        return [
            a for a in self.visible_attributes if a.traits.is_enum and a.traits.is_global_enum
        ]

    @property
    def has_dependent_attributes(self) -> bool:
        return any(a.traits.is_dependent_attribute for a in self.attributes)

    # ------------------------------------------------------------------ #
    # Nested resources
    # ------------------------------------------------------------------ #

    @cached_property
    def sub_resources(self) -> list[Resource]:
        """Owned nested types, first occurrence per name."""
        found: dict[str, Resource] = {}
        for key, value in (self.schema.properties or {}).items():
            if not is_sub_resource_schema(value) or is_global_resource_reference(value):
                continue
            if is_hidden_schema(value, self.qa_mode):
                continue
            name = sub_resource_name(key, value)
            if name in found:
                logger.debug("Duplicate sub-resource %s on %s (ignored)", name, self.name)
                continue
            backing = value.items if value.is_array and value.items is not None else value
            found[name] = Resource(
                name,
                backing,
                id=key,
                sort_order=value.extensions.sort_order,
                qa_mode=self.qa_mode,
            )
        return list(found.values())

    @property
    def sorted_sub_resources(self) -> list[Resource]:
        return sorted(self.sub_resources, key=lambda r: r.sort_order)

    def _dependents(self, array: Optional[bool]) -> list[Resource]:
        out: list[Resource] = []
        for key, value in (self.schema.properties or {}).items():
            if not (is_sub_resource_schema(value) and is_global_resource_reference(value)):
                continue
            if array is not None and value.is_array != array:
                continue
            backing = value.items if value.is_array and value.items is not None else value
            out.append(
                Resource(
                    _declared_sub_resource_name(key, value),
                    backing,
                    id=key,
                    qa_mode=self.qa_mode,
                )
            )
        return out

    @property
    def dependent_resources(self) -> list[Resource]:
        """References to top-level resources generated elsewhere."""
        return self._dependents(None)

    @property
    def singular_dependent_resources(self) -> list[Resource]:
        return self._dependents(False)

    @property
    def list_dependent_resources(self) -> list[Resource]:
        return self._dependents(True)

    # ------------------------------------------------------------------ #
    # Actions
    # ------------------------------------------------------------------ #

    @property
    def sorted_actions(self) -> list[Action]:
        """Actions exposed in SDKs, stably sorted by sort order.

        Hidden, bulk, and internal actions are dropped outside QA mode.
        """
        visible = [a for a in self.actions if not a.is_excluded_from_sdk]
        return sorted(visible, key=lambda a: a.sort_order)

    @property
    def has_list_operations(self) -> bool:
        return any(a.is_list for a in self.actions)

    @property
    def has_any_action(self) -> bool:
        return bool(self.actions)

    @property
    def any_action_has_body_or_query_params(self) -> bool:
        return any(a.has_body_or_query_parameters for a in self.actions)

    @property
    def any_action_has_path_param(self) -> bool:
        return any(a.has_path_parameters for a in self.sorted_actions)

    @property
    def has_empty_actions_and_sub_resources(self) -> bool:
        return not self.sorted_actions and not self.sub_resources

    @property
    def response_list(self) -> list[ResponseParameter]:
        """Response parameters of every action, in action sort order."""
        ordered = sorted(self.actions, key=lambda a: a.sort_order)
        return [param for action in ordered for param in action.response.parameters]

    # ------------------------------------------------------------------ #
    # Flags
    # ------------------------------------------------------------------ #

    @property
    def is_additional_properties_supported(self) -> bool:
        return self.traits.is_additional_properties_supported

    @property
    def is_custom_field_supported(self) -> bool:
        return self.traits.is_custom_fields_supported

    @property
    def is_export(self) -> bool:
        return self.name == "Export"

    @property
    def is_time_machine(self) -> bool:
        return self.name == "TimeMachine"

    @property
    def is_event(self) -> bool:
        return self.name == "Event"

    @property
    def is_hosted_page(self) -> bool:
        return self.name == "HostedPage"

    @property
    def is_session(self) -> bool:
        return self.name == "Session"

    def to_dict(self) -> dict[str, Any]:
        pcv = self.product_catalog_version
        return {
            "id": self.id,
            "name": self.name,
            "path_name": self.path_name,
            "sort_order": self.sort_order,
            "product_catalog_version": pcv.value if pcv is not None else None,
            "attributes": [a.to_dict() for a in self.sorted_attributes],
            "enums": [e.to_dict() for e in self.enums],
            "actions": [a.to_dict() for a in self.sorted_actions],
            "sub_resources": [r.to_dict() for r in self.sorted_sub_resources],
            "dependent_resources": [r.name for r in self.dependent_resources],
            "has_list_operations": self.has_list_operations,
            "is_custom_field_supported": self.is_custom_field_supported,
            "is_additional_properties_supported": self.is_additional_properties_supported,
        }
