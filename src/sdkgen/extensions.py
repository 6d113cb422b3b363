"""Extension Registry -- the closed catalog of recognised vendor metadata keys.

Document authors steer generation by attaching ``x-cb-*`` key/value pairs
to operations, schemas, and the document ``info`` block. This module is the
single place those keys are named. Raw extension maps are decoded **once**,
at document-load time, into one of three typed Pydantic records:

* :class:`OperationExtensions` -- keys read from an operation object.
* :class:`SchemaExtensions` -- keys read from a schema or parameter schema,
  including the resource-level keys carried by component schemas.
* :class:`InfoExtensions` -- version tagging on the document ``info`` block.

Every field has a documented default, so a missing key resolves to
``False``, ``-1``, ``None``, or an empty list rather than an error. Keys with
the vendor prefix that no record declares are logged (or rejected when
decoding strictly) so that typos in a document are visible instead of
silently falling back to the default.

:data:`REGISTRY` flattens the three records into ``key -> ExtensionSpec``
for inspection (``sdkgen inspect extensions``) and for :func:`default_for`.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Mapping, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from sdkgen.exceptions import ExtensionError

logger = logging.getLogger(__name__)

VENDOR_PREFIX = "x-cb-"
"""Prefix shared by every key this registry recognises."""


class ExtensionScope(str, enum.Enum):
    """Where in the document an extension key is read from."""

    OPERATION = "operation"
    SCHEMA = "schema"
    INFO = "info"


class _ExtensionRecord(BaseModel):
    """Shared configuration for the decoded extension records."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    @classmethod
    def known_keys(cls) -> set[str]:
        """Return the wire names (aliases) this record decodes."""
        return {field.alias or name for name, field in cls.model_fields.items()}


# --- Operation keys ---


class OperationExtensions(_ExtensionRecord):
    """Generation directives attached to an operation object."""

    method_name: Optional[str] = Field(
        default=None,
        alias="x-cb-operation-method-name",
        description="SDK method name for the operation (required)",
    )
    resource_id: Optional[str] = Field(
        default=None,
        alias="x-cb-resource-id",
        description="Id of the resource the operation belongs to",
    )
    is_list: bool = Field(
        default=False,
        alias="x-cb-operation-is-list",
        description="Operation returns a paginated list",
    )
    is_bulk: bool = Field(
        default=False,
        alias="x-cb-operation-is-bulk",
        description="Bulk operation, hidden from SDKs outside QA mode",
    )
    is_batch: bool = Field(
        default=False, alias="x-cb-operation-is-batch", description="Batch-capable operation"
    )
    is_idempotent: bool = Field(
        default=False,
        alias="x-cb-operation-is-idempotent",
        description="Operation accepts an idempotency key",
    )
    sub_domain: Optional[str] = Field(
        default=None,
        alias="x-cb-operation-sub-domain-name",
        description="Sub-domain the request is routed to",
    )
    batch_path_id: Optional[str] = Field(
        default=None,
        alias="x-cb-batch-operation-path-id",
        description="Path id used when the operation runs inside a batch",
    )
    needs_json_input: bool = Field(
        default=False,
        alias="x-cb-is-operation-needs-json-input",
        description="Request body is sent as JSON instead of form-encoded",
    )
    needs_input_object: bool = Field(
        default=False,
        alias="x-cb-is-operation-needs-input-object",
        description="SDK method takes a single input object",
    )
    is_custom_fields_supported: bool = Field(
        default=False,
        alias="x-cb-is-custom-fields-supported",
        description="Operation accepts cf_* custom fields",
    )
    sort_order: int = Field(
        default=-1, alias="x-cb-sort-order", description="Position among sibling operations"
    )
    hidden_from_sdk: bool = Field(
        default=False,
        alias="x-cb-hidden-from-client-sdk",
        description="Omit from generated SDKs outside QA mode",
    )
    is_internal: bool = Field(
        default=False, alias="x-cb-internal", description="Internal-only operation"
    )
    is_eap: bool = Field(
        default=False, alias="x-cb-is-eap", description="Early-access operation"
    )
    module: Optional[str] = Field(
        default=None, alias="x-cb-module", description="Product module the operation belongs to"
    )
    model_name: Optional[str] = Field(
        default=None,
        alias="x-cb-meta-model-name",
        description="Model the operation's input maps to",
    )


# --- Schema / parameter / resource keys ---


class SchemaExtensions(_ExtensionRecord):
    """Generation directives attached to a schema, parameter schema, or component schema."""

    # Classification
    is_sub_resource: bool = Field(default=False, alias="x-cb-is-sub-resource")
    is_global_resource_reference: bool = Field(
        default=False, alias="x-cb-is-global-resource-reference"
    )
    is_dependent_attribute: bool = Field(default=False, alias="x-cb-is-dependent-attribute")
    is_filter_parameter: bool = Field(default=False, alias="x-cb-is-filter-parameter")
    is_pagination_parameter: bool = Field(default=False, alias="x-cb-is-pagination-parameter")
    is_multi_value_attribute: bool = Field(
        default=False, alias="x-cb-is-multi-value-attribute"
    )
    is_composite_array_request_body: bool = Field(
        default=False, alias="x-cb-is-composite-array-request-body"
    )
    is_presence_operator_supported: bool = Field(
        default=False, alias="x-cb-is-presence-operator-supported"
    )
    sdk_filter_name: Optional[str] = Field(
        default=None,
        alias="x-cb-sdk-filter-name",
        description="Filter kind, e.g. StringFilter or EnumFilter",
    )
    parameter_blank_option: Optional[str] = Field(
        default=None, alias="x-cb-parameter-blank-option"
    )
    # Money / columns
    is_money_column: bool = Field(default=False, alias="x-cb-is-money-column")
    is_long_money_column: bool = Field(default=False, alias="x-cb-is-long-money-column")
    is_api_column: bool = Field(default=False, alias="x-cb-is-api-column")
    is_foreign_column: bool = Field(default=False, alias="x-cb-is-foreign-column")
    # Enums
    is_global_enum: bool = Field(default=False, alias="x-cb-is-global-enum")
    global_enum_reference: Optional[str] = Field(
        default=None,
        alias="x-cb-global-enum-reference",
        description="Document path of the global enum this schema points at",
    )
    is_external_enum: bool = Field(default=False, alias="x-cb-is-external-enum")
    sdk_enum_api_name: Optional[str] = Field(default=None, alias="x-cb-sdk-enum-api-name")
    deprecated_enum_values: list[str] = Field(
        default_factory=list,
        alias="x-cb-deprecated-enum-values",
        description="Comma-separated enum values kept only for compatibility",
    )
    is_gen_separate: bool = Field(
        default=False,
        alias="x-cb-is-gen-separate",
        description="Enum is generated once in the shared enums module",
    )
    # Metadata
    meta_model_name: Optional[str] = Field(default=None, alias="x-cb-meta-model-name")
    attribute_meta_comment: Optional[str] = Field(
        default=None, alias="x-cb-attribute-meta-comment"
    )
    attribute_pcv: Optional[int] = Field(default=None, alias="x-cb-attribute-pcv")
    deprecation_message: Optional[str] = Field(default=None, alias="x-cb-deprecation-message")
    sort_order: int = Field(default=-1, alias="x-cb-sort-order")
    # Visibility
    hidden_from_sdk: bool = Field(default=False, alias="x-cb-hidden-from-client-sdk")
    is_internal: bool = Field(default=False, alias="x-cb-internal")
    is_eap: bool = Field(default=False, alias="x-cb-is-eap")
    # Resource-level
    resource_id: Optional[str] = Field(
        default=None,
        alias="x-cb-resource-id",
        description="Marks a component schema as a top-level resource",
    )
    resource_path_name: Optional[str] = Field(default=None, alias="x-cb-resource-path-name")
    is_third_party_resource: bool = Field(default=False, alias="x-cb-is-third-party-resource")
    is_dependent_resource: bool = Field(default=False, alias="x-cb-is-dependent-resource")
    sub_resource_name: Optional[str] = Field(default=None, alias="x-cb-sub-resource-name")
    sub_resource_parent_name: Optional[str] = Field(
        default=None, alias="x-cb-sub-resource-parent-name"
    )
    product_catalog_version: Optional[int] = Field(
        default=None, alias="x-cb-product-catalog-version"
    )
    is_custom_fields_supported: bool = Field(
        default=False, alias="x-cb-is-custom-fields-supported"
    )
    module: Optional[str] = Field(default=None, alias="x-cb-module")

    @field_validator("deprecated_enum_values", mode="before")
    @classmethod
    def _split_deprecated_values(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value


# --- Document info keys ---


class InfoExtensions(_ExtensionRecord):
    """Version tagging read from the document ``info`` block."""

    api_version: Optional[int] = Field(default=None, alias="x-cb-api-version")
    product_catalog_version: Optional[int] = Field(
        default=None, alias="x-cb-product-catalog-version"
    )


# --- Registry ---


class ExtensionSpec(BaseModel):
    """One registry entry: a key, where it is read from, and its default."""

    model_config = ConfigDict(frozen=True)

    key: str
    scope: ExtensionScope
    field_name: str
    default: Any = None
    description: str = ""


_RECORDS: dict[ExtensionScope, type[_ExtensionRecord]] = {
    ExtensionScope.OPERATION: OperationExtensions,
    ExtensionScope.SCHEMA: SchemaExtensions,
    ExtensionScope.INFO: InfoExtensions,
}


def _build_registry() -> dict[tuple[ExtensionScope, str], ExtensionSpec]:
    registry: dict[tuple[ExtensionScope, str], ExtensionSpec] = {}
    for scope, record in _RECORDS.items():
        for name, field in record.model_fields.items():
            key = field.alias or name
            default = field.get_default(call_default_factory=True)
            registry[(scope, key)] = ExtensionSpec(
                key=key,
                scope=scope,
                field_name=name,
                default=default,
                description=field.description or "",
            )
    return registry


REGISTRY: dict[tuple[ExtensionScope, str], ExtensionSpec] = _build_registry()
"""Every recognised key, indexed by ``(scope, key)``."""

ALL_KEYS: frozenset[str] = frozenset(key for _, key in REGISTRY)
"""Every recognised key regardless of scope."""


def default_for(key: str, scope: ExtensionScope = ExtensionScope.SCHEMA) -> Any:
    """Return the documented default for *key* in *scope*.

    Raises:
        KeyError: If the key is not registered for that scope.
    """
    return REGISTRY[(scope, key)].default


# --- Decoding ---

RecordT = TypeVar("RecordT", bound=_ExtensionRecord)


def vendor_keys(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Return the ``x-`` prefixed entries of a raw document node."""
    return {k: v for k, v in raw.items() if isinstance(k, str) and k.startswith("x-")}


def decode(
    raw: Mapping[str, Any],
    record: type[RecordT],
    where: str,
    strict: bool = False,
) -> RecordT:
    """Decode the vendor keys of a raw node into a typed extension record.

    Keys registered for a different scope are ignored here (they are
    meaningful elsewhere). Keys carrying the vendor prefix that no scope
    registers are logged as warnings, or rejected when *strict* is set.
    Keys with other ``x-`` prefixes belong to other tools and are skipped.

    Args:
        raw: The raw document node (operation, schema, or info object).
        record: The record class to decode into.
        where: Human-readable location used in log and error messages,
            e.g. ``"#/components/schemas/Customer/properties/id"``.
        strict: Raise instead of logging on unrecognised vendor keys.

    Returns:
        A frozen record with every absent key set to its default.

    Raises:
        ExtensionError: If a value has the wrong type, or if *strict* is
            set and an unrecognised vendor key is present.
    """
    extensions = vendor_keys(raw)
    known = record.known_keys()
    for key in extensions:
        if key in known or not key.startswith(VENDOR_PREFIX):
            continue
        if key in ALL_KEYS:
            logger.debug("Extension %s is not read at %s", key, where)
            continue
        if strict:
            raise ExtensionError(f"Unknown extension key '{key}' at {where}")
        logger.warning("Unknown extension key '%s' at %s (ignored)", key, where)

    try:
        return record.model_validate(
            {k: v for k, v in extensions.items() if k in known}
        )
    except ValidationError as exc:
        raise ExtensionError(f"Invalid extension value at {where}: {exc}") from exc
