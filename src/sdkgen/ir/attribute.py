"""Attribute nodes: a named property of a resource or request parameter."""

from __future__ import annotations

from functools import cached_property
from typing import Any, Callable, Optional

from sdkgen.ir.enum import Enum
from sdkgen.ir.traits import (
    AttributeTraits,
    child_schemas,
    classify_attribute,
    is_visible_attribute,
)
from sdkgen.models import Schema


def attribute_name(raw_name: str) -> str:
    """SDK-facing attribute name (``"line-items"`` -> ``"line_items"``)."""
    return raw_name.replace("-", "_")


class Attribute:
    """A named schema with its classification.

    Traits are computed on first access and cached for the lifetime of the
    node. Nested attributes are read from the schema's own properties, or
    from its item schema's properties when the schema is an array; hidden
    nested attributes are left out unless the node was built in QA mode.

    Args:
        name: Attribute name; hyphens are kept as given.
        schema: The attribute's schema.
        is_required: Whether the owning schema lists the attribute as required.
        qa_mode: Expose hidden nested attributes.
    """

    def __init__(
        self,
        name: str,
        schema: Schema,
        is_required: bool = False,
        *,
        qa_mode: bool = False,
    ) -> None:
        self.name = name
        self.schema = schema
        self.is_required = is_required
        self.qa_mode = qa_mode

    def __repr__(self) -> str:
        return f"Attribute({self.name!r}, kind={self.traits.kind.value})"

    @cached_property
    def traits(self) -> AttributeTraits:
        return classify_attribute(self.name, self.schema, self.qa_mode)

    @property
    def sort_order(self) -> int:
        return self.traits.sort_order

    @property
    def is_visible(self) -> bool:
        return not self.traits.is_hidden

    @cached_property
    def attributes(self) -> list[Attribute]:
        """Visible nested attributes, in declaration order."""
        return [
            Attribute(attribute_name(name), child, required, qa_mode=self.qa_mode)
            for name, child, required in child_schemas(self.schema)
            if is_visible_attribute(child, self.qa_mode)
        ]

    @property
    def sorted_attributes(self) -> list[Attribute]:
        """Nested attributes, stably sorted by sort order."""
        return sorted(self.attributes, key=lambda a: a.sort_order)

    def has_sub_attribute(self, predicate: Callable[[Attribute], bool]) -> bool:
        return any(predicate(sub) for sub in self.attributes)

    @property
    def has_sub_resource_attribute(self) -> bool:
        return self.has_sub_attribute(lambda sub: sub.traits.is_sub_resource)

    @property
    def has_required_sub_attributes(self) -> bool:
        return any(sub.is_required for sub in self.attributes)

    def enum(self, name: Optional[str] = None) -> Enum:
        """Enum view of this attribute, named *name* or the attribute name."""
        return Enum(name or self.name, self.schema)

    def with_single_property(self, sub: Attribute) -> Attribute:
        """Copy of this attribute whose schema exposes only *sub*.

        Used to flatten a composite parameter into one entry per nested
        field.
        """
        properties = {sub.name: sub.schema}
        update: dict[str, Any] = {"properties": properties}
        if self.schema.properties is None and self.schema.items is not None:
            update = {"items": self.schema.items.model_copy(update={"properties": properties})}
        return Attribute(
            self.name,
            self.schema.model_copy(update=update),
            self.is_required,
            qa_mode=self.qa_mode,
        )

    def to_dict(self) -> dict[str, Any]:
        traits = self.traits
        data: dict[str, Any] = {
            "name": self.name,
            "kind": traits.kind.value,
            "type": self.schema.type,
            "format": self.schema.format,
            "is_required": self.is_required,
            "sort_order": traits.sort_order,
            "is_deprecated": traits.is_deprecated,
        }
        if traits.is_enum:
            data["enum"] = self.enum().to_dict()
        if self.attributes:
            data["attributes"] = [sub.to_dict() for sub in self.attributes]
        return data
