"""Error resources: component schemas describing API error payloads."""

from __future__ import annotations

from typing import Any

from sdkgen.ir.attribute import Attribute
from sdkgen.models import Schema

SUPER_ATTRIBUTES = frozenset({"message", "error_msg", "type", "error_code", "api_error_code"})
"""Fields every error type inherits from the base error class."""


def is_error_schema(schema: Schema) -> bool:
    """An error schema declares both ``api_error_code`` and ``message``."""
    names = schema.properties or {}
    return "api_error_code" in names and "message" in names


class ErrorResource:
    """An error type and the fields it adds on top of the base error."""

    def __init__(self, name: str, schema: Schema, *, qa_mode: bool = False) -> None:
        self.name = name
        self.schema = schema
        self.qa_mode = qa_mode

    def __repr__(self) -> str:
        return f"ErrorResource({self.name!r})"

    @property
    def attributes(self) -> list[Attribute]:
        """Visible fields outside :data:`SUPER_ATTRIBUTES`, stably sorted."""
        required = self.schema.required_names
        attrs = [
            Attribute(name, value, name in required, qa_mode=self.qa_mode)
            for name, value in (self.schema.properties or {}).items()
            if name not in SUPER_ATTRIBUTES
        ]
        return sorted((a for a in attrs if a.is_visible), key=lambda a: a.sort_order)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "attributes": [a.to_dict() for a in self.attributes]}
