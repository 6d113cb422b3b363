"""Response nodes: the success payload of an action.

A plain :class:`Response` exposes the properties of the ``200``
``application/json`` schema. A :class:`ListResponse` is used for list
actions, whose payload wraps item objects in a ``list`` array next to a
``next_offset`` cursor.

Field types are language-specific, so the field views take a
``type_of(schema, name)`` callable -- normally a backend's
:meth:`~sdkgen.backends.base.Backend.data_type` bound to a shaping
context -- and only fall back to it when the schema carries no
``$ref`` naming the referenced resource.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

from sdkgen.generator.naming import to_camel_case
from sdkgen.models import Schema

TypeOf = Callable[[Schema, str], Optional[str]]

LIST_PROPERTY = "list"
NEXT_OFFSET_PROPERTY = "next_offset"
_NEXT_OFFSET_SCHEMA = Schema(type="string")


class ResponseField(BaseModel):
    """One field of a response payload, with its resolved type name."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: Optional[str] = None
    is_list: bool = False
    is_required: bool = False
    fields: list[ResponseField] = Field(default_factory=list)


class ResponseParameter:
    """A property of the success schema."""

    def __init__(self, name: str, schema: Schema, is_required: bool = False) -> None:
        self.name = name
        self.schema = schema
        self.is_required = is_required

    @property
    def is_list(self) -> bool:
        return self.schema.is_array

    def referred_resource_name(self, type_of: TypeOf) -> Optional[str]:
        """Name of the resource the property points at.

        The last segment of the ``$ref`` (of the item schema for arrays),
        otherwise whatever *type_of* reports for the schema.
        """
        target = self.schema.items if self.is_list and self.schema.items else self.schema
        if target.ref_name:
            return target.ref_name
        return type_of(target, self.name)


class Response:
    """Success payload of a non-list action."""

    def __init__(self, action_name: str, schema: Optional[Schema]) -> None:
        self.action_name = action_name
        self.schema = schema

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"

    @property
    def name(self) -> str:
        return to_camel_case(self.action_name) + "Response"

    @property
    def description(self) -> str:
        if self.schema is not None and self.schema.description:
            return self.schema.description
        return ""

    @property
    def payload_schema(self) -> Optional[Schema]:
        """The schema whose properties make up the response parameters."""
        return self.schema

    @property
    def list_items_schema(self) -> Optional[Schema]:
        """Item schema of the ``list`` property when it is an array."""
        if self.schema is None or not self.schema.properties:
            return None
        listed = self.schema.properties.get(LIST_PROPERTY)
        if listed is None or not listed.is_array:
            return None
        return listed.items

    @property
    def parameters(self) -> list[ResponseParameter]:
        schema = self.payload_schema
        if schema is None or schema.properties is None:
            return []
        required = schema.required_names
        return [
            ResponseParameter(name, value, name in required)
            for name, value in schema.properties.items()
        ]

    def fields(self, type_of: TypeOf) -> list[ResponseField]:
        """Typed response fields.

        A payload whose ``list`` property is an array yields a single
        ``list`` field carrying the item fields as children.
        """
        items = self.list_items_schema
        if items is not None:
            return [
                ResponseField(
                    name=LIST_PROPERTY,
                    is_list=True,
                    is_required=True,
                    fields=Response(self.action_name, items).fields(type_of),
                )
            ]
        return [
            ResponseField(
                name=param.name,
                type=param.referred_resource_name(type_of),
                is_list=param.is_list,
                is_required=param.is_required,
            )
            for param in self.parameters
        ]

    def to_dict(self, type_of: TypeOf) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "fields": [f.model_dump() for f in self.fields(type_of)],
        }


class ListResponse(Response):
    """Success payload of a list action: ``{list: [...], next_offset}``."""

    @property
    def payload_schema(self) -> Optional[Schema]:
        items = self.list_items_schema
        return items if items is not None else self.schema

    def fields(self, type_of: TypeOf) -> list[ResponseField]:
        items = self.list_items_schema
        if items is None:
            return []
        return [
            ResponseField(
                name=LIST_PROPERTY,
                is_list=True,
                is_required=True,
                fields=Response(self.action_name, items).fields(type_of),
            ),
            ResponseField(
                name=NEXT_OFFSET_PROPERTY,
                type=type_of(_NEXT_OFFSET_SCHEMA, NEXT_OFFSET_PROPERTY),
            ),
        ]


ResponseField.model_rebuild()
