"""Enum nodes: a named, ordered list of string values."""

from __future__ import annotations

from functools import cached_property
from typing import Any, Optional

from sdkgen.ir.traits import BLANK_OPTION_NOT_ALLOWED
from sdkgen.models import Schema, SchemaShape


class Enum:
    """A named list of string values declared by a schema.

    Values come from a string schema's ``enum`` list, or from the item
    schema of an array whose items declare one. Any other schema yields no
    values. Values listed in ``x-cb-deprecated-enum-values`` are kept but
    reported separately, so that :attr:`valid_values` plus
    :attr:`deprecated_values` always reproduces :attr:`values`.
    """

    def __init__(self, name: str, schema: Schema) -> None:
        self.name = name
        self.schema = schema

    def __repr__(self) -> str:
        return f"Enum({self.name!r}, {self.values!r})"

    @cached_property
    def values(self) -> list[str]:
        """Every declared value, in declaration order."""
        if self.schema.shape == SchemaShape.STRING and self.schema.enum is not None:
            return [str(v) for v in self.schema.enum]
        if self.schema.is_array and self.schema.items is not None:
            items = self.schema.items
            if items.enum is not None:
                return [v for v in items.enum if isinstance(v, str)]
        return []

    @cached_property
    def _deprecated(self) -> frozenset[str]:
        marked = self.schema.extensions.deprecated_enum_values
        if not marked and self.schema.items is not None:
            marked = self.schema.items.extensions.deprecated_enum_values
        return frozenset(marked)

    @property
    def deprecated_values(self) -> list[str]:
        """Declared values marked deprecated, in declaration order."""
        return [v for v in self.values if v in self._deprecated]

    @property
    def valid_values(self) -> list[str]:
        """Declared values minus the deprecated ones, in declaration order."""
        return [v for v in self.values if v not in self._deprecated]

    @property
    def global_enum_reference(self) -> Optional[str]:
        """Name of the global enum this schema points at, if any.

        ``"#/components/schemas/AutoCollection.yaml"`` -> ``"AutoCollection"``.
        """
        reference = self.schema.extensions.global_enum_reference
        if reference is None:
            return None
        return reference.rsplit("/", 1)[-1].split(".", 1)[0]

    @property
    def is_param_blank_option(self) -> bool:
        return self.schema.extensions.parameter_blank_option == BLANK_OPTION_NOT_ALLOWED

    def signature(self) -> tuple[str, tuple[str, ...]]:
        """Identity used when deduplicating enums across resources."""
        return self.name, tuple(self.valid_values)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "values": self.values,
            "valid_values": self.valid_values,
            "deprecated_values": self.deprecated_values,
            "global_enum_reference": self.global_enum_reference,
        }
