"""Enum Resolver -- global, local, and schema-less enums.

Enums reach generated code three ways:

1. **Global** enums are component schemas that are plain string enums.
   They are generated once and referenced by name.
2. **Local** enums are inline on a resource's attributes, or one level
   down on the fields of its object attributes. Nested ones are named
   ``<singular parent>_<field>``.
3. **Schema-less** enums exist only inside action inputs: an object-shaped
   body or query parameter whose fields declare inline enum values. Each
   one is assigned to the resource that owns the parameter's model, and
   is skipped when that resource already declares a field of the same name
   (the resource-level enum is authoritative).

Every list returned here is deduplicated by enum name; the first
definition wins and later ones are dropped with a DEBUG log line.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from sdkgen.generator.inflector import singularize
from sdkgen.generator.naming import capitalize, to_camel_case, to_snake_case, upper_camel_from_snake
from sdkgen.ir.attribute import Attribute
from sdkgen.ir.enum import Enum
from sdkgen.ir.resource import Resource
from sdkgen.ir.spec import Spec

logger = logging.getLogger(__name__)


def dedupe_enums(enums: Iterable[Enum], where: str = "") -> list[Enum]:
    """Keep the first enum per name, in encounter order."""
    seen: dict[str, Enum] = {}
    for enum in enums:
        if enum.name in seen:
            logger.debug("Duplicate enum %s%s (ignored)", enum.name, f" in {where}" if where else "")
            continue
        seen[enum.name] = enum
    return list(seen.values())


def nested_enum_name(parent: Attribute, field: Attribute) -> str:
    """Name of an enum declared on a field of object attribute *parent*.

    ``billing_addresses`` / ``validation_status`` ->
    ``billing_address_validation_status``. When the parent's
    sub-resource type name differs from its singular attribute name, the
    type name is used instead.
    """
    type_name = parent.traits.sub_resource_name
    if type_name and type_name != to_camel_case(singularize(parent.name)):
        return f"{to_snake_case(type_name)}_{field.name}"
    return f"{singularize(parent.name)}_{field.name}"


def _is_local_enum(attribute: Attribute) -> bool:
    return attribute.traits.is_enum and not attribute.traits.is_global_enum


class EnumResolver:
    """Resolve the enum sets of a built :class:`~sdkgen.ir.spec.Spec`."""

    def __init__(self, spec: Spec) -> None:
        self.spec = spec

    def global_enums(self) -> list[Enum]:
        return dedupe_enums(self.spec.global_enums(), "global enums")

    def local_enums(self, resource: Resource) -> list[Enum]:
        """Inline enums of *resource*'s attributes and of their nested fields.

        External enums on nested fields are generated elsewhere and skipped.
        """
        enums = list(resource.enums)
        for attribute in resource.visible_attributes:
            for field in attribute.attributes:
                if not _is_local_enum(field) or field.traits.is_external_enum:
                    continue
                enums.append(field.enum(nested_enum_name(attribute, field)))
        return dedupe_enums(enums, resource.name)

    def schemaless_enums(
        self, resource: Resource, resources: Optional[list[Resource]] = None
    ) -> list[Enum]:
        """Enums found only in action inputs and owned by *resource*.

        Args:
            resource: The resource being generated.
            resources: Every resource whose actions are scanned; defaults to
                :meth:`Spec.resources`.
        """
        resources = resources if resources is not None else self.spec.resources()
        by_name = {r.name: r for r in resources}
        found: list[Enum] = []
        signatures: set[tuple[str, tuple[str, ...]]] = set()

        for scanned in resources:
            for action in scanned.sorted_actions:
                for parameter in action.request_body_parameters + action.query_parameters:
                    holder = parameter.attribute
                    if not self._is_enum_holder(holder):
                        continue
                    for field in holder.attributes:
                        if not _is_local_enum(field) or field.traits.is_deprecated:
                            continue
                        if scanned.has_attribute(holder.name):
                            continue
                        owner = by_name.get(self._owner_name(holder, field))
                        if owner is None or owner.has_attribute(field.name):
                            continue
                        if owner.name != resource.name:
                            continue
                        enum = field.enum(f"{singularize(holder.name)}_{field.name}")
                        if enum.signature() in signatures:
                            continue
                        signatures.add(enum.signature())
                        found.append(enum)
        return dedupe_enums(found, resource.name)

    def resource_enums(
        self, resource: Resource, resources: Optional[list[Resource]] = None
    ) -> list[Enum]:
        """Schema-less enums, then local enums, one per name."""
        return dedupe_enums(
            self.schemaless_enums(resource, resources) + self.local_enums(resource),
            resource.name,
        )

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _is_enum_holder(attribute: Attribute) -> bool:
        schema = attribute.schema
        return (
            schema.type == "object"
            and schema.properties is not None
            and schema.items is None
            and attribute.is_visible
            and not attribute.traits.is_filter
        )

    @staticmethod
    def _owner_name(holder: Attribute, field: Attribute) -> str:
        model = field.traits.meta_model_name or holder.name
        return capitalize(upper_camel_from_snake(singularize(model)))
