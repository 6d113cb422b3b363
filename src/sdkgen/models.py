"""Canonical Pydantic models shared across all sdkgen modules.

The models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config
directory or a project-local ``sdkgen.json``:
    :class:`GenerationConfig`, :class:`OutputConfig`, and
    :class:`GlobalConfig`.

**Document models** -- produced once at load time and read by the IR:
    :class:`SchemaShape` and :class:`Schema`.

:class:`Schema` is the typed view of one OpenAPI schema object. Its vendor
extensions are decoded into a :class:`~sdkgen.extensions.SchemaExtensions`
record when the node is built, so nothing downstream reads raw ``x-cb-*``
keys.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from sdkgen.exceptions import SchemaDepthError
from sdkgen.extensions import SchemaExtensions, decode

logger = logging.getLogger(__name__)

DEFAULT_MAX_SCHEMA_DEPTH = 32


# --- Configuration ---


class GenerationConfig(BaseModel):
    """Inputs that steer one generation run.

    Every field is an explicit input to :func:`~sdkgen.ir.spec.build_spec`;
    nothing in the IR reads configuration from global state.
    """

    qa_mode: bool = Field(
        default=False,
        description="Expose hidden, internal, bulk, and third-party nodes",
    )
    backend: str = Field(default="python", description="Backend used by 'sdkgen shape'")
    hidden_overrides: list[str] = Field(
        default_factory=list,
        description="Extra resource ids to drop, on top of the backend's own list",
    )
    max_schema_depth: int = Field(
        default=DEFAULT_MAX_SCHEMA_DEPTH,
        ge=1,
        description="Maximum nesting depth of schema objects",
    )
    strict_extensions: bool = Field(
        default=False,
        description="Raise on unknown x-cb-* keys instead of logging a warning",
    )


class OutputConfig(BaseModel):
    """Output preferences applied by the CLI when no flag overrides them."""

    format: Literal["auto", "json", "plain", "rich"] = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )
    verbose: bool = Field(default=False, description="Show debug diagnostics")


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/sdkgen/config.json``.

    Fields here have the lowest precedence and can be overridden by the
    project config, environment variables, or CLI flags. See
    :func:`~sdkgen.config.resolve_config`.
    """

    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Schema nodes ---


class SchemaShape(str, enum.Enum):
    """Structural kind of a schema node, derived from ``type`` and ``format``."""

    STRING = "string"
    DATE_TIME = "date-time"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    UNTYPED = "untyped"


_DATE_FORMATS = frozenset({"date-time", "date"})


class Schema(BaseModel):
    """One schema object from the document, with decoded extensions.

    Internal ``$ref`` pointers are inlined by
    :func:`~sdkgen.parser.resolver.resolve_refs` before a node is built;
    the original pointer stays available in :attr:`ref` so that names
    derived from it (response types, webhook payloads) survive inlining.
    A node that still carries only a ``$ref`` marks a broken reference
    cycle and has shape :attr:`SchemaShape.UNTYPED`.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: Optional[str] = None
    format: Optional[str] = None
    enum: Optional[list[Any]] = None
    items: Optional[Schema] = None
    properties: Optional[dict[str, Schema]] = None
    required: Optional[list[str]] = None
    additional_properties: Union[bool, Schema, None] = Field(
        default=None, alias="additionalProperties"
    )
    description: Optional[str] = None
    deprecated: Optional[bool] = None
    ref: Optional[str] = Field(default=None, alias="$ref")
    extensions: SchemaExtensions = Field(default_factory=SchemaExtensions)

    @classmethod
    def from_raw(
        cls,
        raw: Mapping[str, Any],
        where: str = "#",
        *,
        max_depth: int = DEFAULT_MAX_SCHEMA_DEPTH,
        strict: bool = False,
        _depth: int = 0,
    ) -> Schema:
        """Build a schema node (and its children) from a raw document mapping.

        Args:
            raw: The raw schema object, with internal references already
                inlined.
            where: Document location of *raw*, used in log and error
                messages.
            max_depth: Nesting bound; exceeding it raises instead of
                recursing further.
            strict: Passed through to :func:`~sdkgen.extensions.decode`.

        Returns:
            The frozen :class:`Schema`.

        Raises:
            SchemaDepthError: If nesting exceeds *max_depth*.
            ExtensionError: If a vendor extension value is malformed, or
                unknown while *strict* is set.
        """
        if _depth > max_depth:
            raise SchemaDepthError(
                f"Schema nesting exceeds {max_depth} levels at {where}"
            )

        def child(value: Any, suffix: str) -> Optional[Schema]:
            if not isinstance(value, Mapping):
                return None
            return cls.from_raw(
                value,
                f"{where}/{suffix}",
                max_depth=max_depth,
                strict=strict,
                _depth=_depth + 1,
            )

        properties: Optional[dict[str, Schema]] = None
        raw_properties = raw.get("properties")
        if isinstance(raw_properties, Mapping):
            properties = {}
            for name, value in raw_properties.items():
                node = child(value, f"properties/{name}")
                if node is not None:
                    properties[str(name)] = node

        additional = raw.get("additionalProperties")
        if isinstance(additional, Mapping):
            additional = child(additional, "additionalProperties")
        elif not isinstance(additional, bool):
            additional = None

        required = raw.get("required")
        return cls(
            type=_normalize_type(raw.get("type")),
            format=raw.get("format"),
            enum=list(raw["enum"]) if isinstance(raw.get("enum"), list) else None,
            items=child(raw.get("items"), "items"),
            properties=properties,
            required=list(required) if isinstance(required, list) else None,
            additional_properties=additional,
            description=raw.get("description"),
            deprecated=raw.get("deprecated"),
            ref=raw.get("$ref"),
            extensions=decode(raw, SchemaExtensions, where, strict=strict),
        )

    # ------------------------------------------------------------------ #
    # Structural views
    # ------------------------------------------------------------------ #

    @property
    def shape(self) -> SchemaShape:
        """The structural kind of this node."""
        if self.type == "array" or (self.type is None and self.items is not None):
            return SchemaShape.ARRAY
        if self.type == "string":
            if self.format in _DATE_FORMATS:
                return SchemaShape.DATE_TIME
            return SchemaShape.STRING
        if self.type == "integer":
            return SchemaShape.INTEGER
        if self.type == "number":
            return SchemaShape.NUMBER
        if self.type == "boolean":
            return SchemaShape.BOOLEAN
        if self.type == "object":
            return SchemaShape.OBJECT
        return SchemaShape.UNTYPED

    @property
    def is_array(self) -> bool:
        return self.shape == SchemaShape.ARRAY

    @property
    def is_object(self) -> bool:
        return self.shape == SchemaShape.OBJECT

    @property
    def has_enum(self) -> bool:
        """True when the node itself declares a non-empty ``enum`` list."""
        return bool(self.enum)

    @property
    def is_open_map(self) -> bool:
        """True when ``additionalProperties`` is literally ``true``."""
        return self.additional_properties is True

    @property
    def required_names(self) -> frozenset[str]:
        return frozenset(self.required or ())

    @property
    def ref_name(self) -> Optional[str]:
        """Last segment of the original ``$ref`` pointer, if any."""
        if not self.ref:
            return None
        return self.ref.rsplit("/", 1)[-1]

    @property
    def is_unresolved_ref(self) -> bool:
        """True for a node that kept only its ``$ref`` (a broken cycle)."""
        return (
            self.ref is not None
            and self.type is None
            and self.items is None
            and self.properties is None
        )


def _normalize_type(value: Any) -> Optional[str]:
    """Reduce an OpenAPI 3.1 type list to its first non-null member."""
    if isinstance(value, list):
        for member in value:
            if member != "null":
                return str(member)
        return None
    if value is None:
        return None
    return str(value)


Schema.model_rebuild()
