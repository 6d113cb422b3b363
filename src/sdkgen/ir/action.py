"""Action nodes: one HTTP operation bound to a resource.

An :class:`Action` is built from an operation object whose ``$ref``
pointers are already inlined. Construction validates the operation
contract -- vendor extensions present, method name present -- and decodes
every schema the action reads, so malformed operations fail while the IR
is built rather than half-way through shaping.

Only two methods are modelled: ``GET`` (query parameters) and ``POST``
(form-encoded request body).
"""

from __future__ import annotations

import enum
import logging
import re
from functools import cached_property
from typing import Any, Mapping, Optional

from sdkgen.exceptions import OperationContractError
from sdkgen.extensions import OperationExtensions, SchemaExtensions, decode, vendor_keys
from sdkgen.ir.attribute import Attribute, attribute_name
from sdkgen.ir.response import ListResponse, Response
from sdkgen.ir.traits import ActionTraits, classify_action, is_hidden_schema
from sdkgen.models import DEFAULT_MAX_SCHEMA_DEPTH, Schema

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
JSON_CONTENT_TYPE = "application/json"

_URL_PATTERN = re.compile(r"^/([^/]+)(?:/\{[^}]+\})?(?:/([^/]+(?:/[^/]+)?))?$")


class HttpMethod(str, enum.Enum):
    """HTTP methods an action can use."""

    GET = "GET"
    POST = "POST"


class Parameter:
    """A path, query, or request-body parameter of an action.

    The flags read the parameter's own schema only; array item fallback
    happens when the parameter is viewed as an :class:`Attribute`.
    """

    def __init__(
        self,
        name: str,
        schema: Schema,
        is_required: bool = True,
        *,
        qa_mode: bool = False,
        extensions: Optional[SchemaExtensions] = None,
    ) -> None:
        self.name = name
        self.schema = schema
        self.is_required = is_required
        self.qa_mode = qa_mode
        self.extensions = extensions or SchemaExtensions()

    def __repr__(self) -> str:
        return f"Parameter({self.name!r}, required={self.is_required})"

    @property
    def sort_order(self) -> int:
        return self.schema.extensions.sort_order

    @property
    def is_hidden(self) -> bool:
        return is_hidden_schema(self.schema, self.qa_mode)

    @property
    def is_deprecated(self) -> bool:
        return bool(self.schema.deprecated)

    @property
    def is_pagination(self) -> bool:
        return self.schema.extensions.is_pagination_parameter

    @property
    def is_sub_resource(self) -> bool:
        return self.schema.extensions.is_sub_resource

    @property
    def is_filter(self) -> bool:
        return self.schema.extensions.is_filter_parameter

    @property
    def is_composite_array_body(self) -> bool:
        return self.schema.extensions.is_composite_array_request_body

    @property
    def has_required_sub_parameters(self) -> bool:
        """True when the parameter's object schema requires any nested field."""
        if self.schema.properties is None:
            return False
        if self.schema.required:
            return True
        return any(child.required for child in self.schema.properties.values())

    @cached_property
    def attribute(self) -> Attribute:
        """The parameter viewed as an attribute, with the same name."""
        return Attribute(self.name, self.schema, self.is_required, qa_mode=self.qa_mode)

    def to_dict(self) -> dict[str, Any]:
        data = Attribute(
            attribute_name(self.name), self.schema, self.is_required, qa_mode=self.qa_mode
        ).to_dict()
        data["is_deprecated"] = self.is_deprecated
        return data


class Action:
    """One operation of a resource.

    Args:
        method: HTTP method of the operation.
        operation: The raw operation object (references inlined).
        url: The path template the operation is declared under.
        qa_mode: Expose hidden parameters and excluded actions.
        max_depth: Nesting bound passed to schema construction.
        strict: Reject unknown vendor keys instead of logging them.

    Raises:
        OperationContractError: If the operation carries no vendor
            extensions or no ``x-cb-operation-method-name``.
    """

    def __init__(
        self,
        method: HttpMethod,
        operation: Mapping[str, Any],
        url: str,
        *,
        qa_mode: bool = False,
        max_depth: int = DEFAULT_MAX_SCHEMA_DEPTH,
        strict: bool = False,
    ) -> None:
        self.id: Optional[str] = operation.get("operationId")
        self.method = method
        self.url = url
        self.qa_mode = qa_mode
        self._where = f"#/paths/{url}/{method.value.lower()}"
        self._max_depth = max_depth
        self._strict = strict

        if not vendor_keys(operation):
            raise OperationContractError(
                "Operation extensions not found", operation_id=self.id, path=url
            )
        self.extensions = decode(operation, OperationExtensions, self._where, strict=strict)
        if not self.extensions.method_name:
            raise OperationContractError(
                "Operation method name not found", operation_id=self.id, path=url
            )
        self.name: str = self.extensions.method_name
        self.description: str = operation.get("description") or ""
        self.deprecated = bool(operation.get("deprecated"))

        self._raw_parameters = [
            p for p in operation.get("parameters") or [] if isinstance(p, Mapping)
        ]
        self.request_body_schema = self._body_schema(operation.get("requestBody"))
        self.success_schema = self._success_schema(operation.get("responses"))
        self._parameters = [self._parameter(i, p) for i, p in enumerate(self._raw_parameters)]

    def __repr__(self) -> str:
        return f"Action({self.method.value} {self.url} -> {self.name!r})"

    # ------------------------------------------------------------------ #
    # Construction helpers
    # ------------------------------------------------------------------ #

    def _schema(self, raw: Any, where: str) -> Optional[Schema]:
        if not isinstance(raw, Mapping):
            return None
        return Schema.from_raw(raw, where, max_depth=self._max_depth, strict=self._strict)

    def _parameter(self, index: int, raw: Mapping[str, Any]) -> tuple[str, Parameter]:
        where = f"{self._where}/parameters/{index}"
        schema = self._schema(raw.get("schema"), f"{where}/schema") or Schema()
        location = str(raw.get("in", "")).lower()
        parameter = Parameter(
            str(raw.get("name", "")),
            schema,
            # Path parameters are always required.
            is_required=location == "path" or bool(raw.get("required")),
            qa_mode=self.qa_mode,
            extensions=decode(raw, SchemaExtensions, where, strict=self._strict),
        )
        return location, parameter

    def _body_schema(self, body: Any) -> Optional[Schema]:
        if not isinstance(body, Mapping):
            return None
        content = body.get("content") or {}
        for content_type in (FORM_CONTENT_TYPE, JSON_CONTENT_TYPE):
            media = content.get(content_type)
            if isinstance(media, Mapping):
                return self._schema(
                    media.get("schema"), f"{self._where}/requestBody/content/{content_type}"
                )
        return None

    def _success_schema(self, responses: Any) -> Optional[Schema]:
        if not isinstance(responses, Mapping):
            return None
        ok = responses.get("200") or responses.get(200)
        if not isinstance(ok, Mapping):
            return None
        media = (ok.get("content") or {}).get(JSON_CONTENT_TYPE)
        if not isinstance(media, Mapping):
            return None
        return self._schema(media.get("schema"), f"{self._where}/responses/200")

    # ------------------------------------------------------------------ #
    # Traits
    # ------------------------------------------------------------------ #

    @cached_property
    def traits(self) -> ActionTraits:
        return classify_action(self.extensions, self.deprecated, self.qa_mode)

    @property
    def sort_order(self) -> int:
        return self.extensions.sort_order

    @property
    def resource_id(self) -> Optional[str]:
        return self.extensions.resource_id

    @property
    def is_list(self) -> bool:
        return self.extensions.is_list

    @property
    def is_hidden(self) -> bool:
        return self.traits.is_hidden

    @property
    def is_excluded_from_sdk(self) -> bool:
        return self.traits.is_excluded_from_sdk

    @property
    def is_deprecated(self) -> bool:
        return self.deprecated

    @property
    def sub_domain(self) -> Optional[str]:
        return self.extensions.sub_domain

    @property
    def batch_id(self) -> str:
        return self.extensions.batch_path_id or ""

    @property
    def model_name(self) -> str:
        return self.extensions.model_name or ""

    @property
    def options(self) -> dict[str, Any]:
        """Per-request options; ``isIdempotent`` only when the operation declares it."""
        options: dict[str, Any] = {}
        if "is_idempotent" in self.extensions.model_fields_set:
            options["isIdempotent"] = self.extensions.is_idempotent
        return options

    @property
    def is_custom_field_supported(self) -> bool:
        if self.method != HttpMethod.POST:
            return self.extensions.is_custom_fields_supported
        if self.request_body_schema is None:
            return False
        return self.request_body_schema.extensions.is_custom_fields_supported

    @property
    def is_additional_properties_supported_in_request_body(self) -> bool:
        return self.request_body_schema is not None and self.request_body_schema.is_open_map

    # ------------------------------------------------------------------ #
    # URL
    # ------------------------------------------------------------------ #

    @property
    def url_prefix(self) -> str:
        """First path segment (``/customers/{id}/update`` -> ``customers``)."""
        match = _URL_PATTERN.fullmatch(self.url)
        return match.group(1) if match and match.group(1) else ""

    @property
    def url_suffix(self) -> str:
        """Trailing segments after the optional id (``/customers/{id}/update`` -> ``update``)."""
        match = _URL_PATTERN.fullmatch(self.url)
        return match.group(2) if match and match.group(2) else ""

    # ------------------------------------------------------------------ #
    # Parameters
    # ------------------------------------------------------------------ #

    @property
    def path_parameters(self) -> list[Parameter]:
        return [p for location, p in self._parameters if location == "path"]

    @property
    def query_parameters(self) -> list[Parameter]:
        """Query parameters of a ``GET`` action, stably sorted by sort order."""
        if self.method != HttpMethod.GET:
            return []
        params = [p for location, p in self._parameters if location == "query"]
        return sorted(params, key=lambda p: p.sort_order)

    @property
    def request_body_parameters(self) -> list[Parameter]:
        """Form body fields of a ``POST`` action, stably sorted by sort order.

        A field is required when the body lists it as required or when its
        own schema declares a ``required`` list.
        """
        schema = self._object_body()
        if schema is None:
            return []
        required = schema.required_names
        params = [
            Parameter(
                name,
                value,
                name in required or value.required is not None,
                qa_mode=self.qa_mode,
            )
            for name, value in (schema.properties or {}).items()
        ]
        return sorted(params, key=lambda p: p.sort_order)

    def _object_body(self) -> Optional[Schema]:
        if self.method != HttpMethod.POST:
            return None
        schema = self.request_body_schema
        if schema is None or not schema.properties or schema.type != "object":
            return None
        return schema

    @property
    def visible_request_body_parameters(self) -> list[Parameter]:
        return [p for p in self.request_body_parameters if not p.is_hidden]

    @property
    def visible_query_parameters(self) -> list[Parameter]:
        return [p for p in self.query_parameters if not p.is_hidden]

    @property
    def has_path_parameters(self) -> bool:
        return bool(self.path_parameters)

    @property
    def has_query_parameters(self) -> bool:
        return bool(self.query_parameters)

    @property
    def has_request_body_parameters(self) -> bool:
        return bool(self.request_body_parameters)

    @property
    def has_body_or_query_parameters(self) -> bool:
        return self.has_query_parameters or self.has_request_body_parameters

    @property
    def is_all_request_body_params_optional(self) -> bool:
        return not any(
            p.is_required or p.has_required_sub_parameters for p in self.request_body_parameters
        )

    @property
    def is_all_query_params_optional(self) -> bool:
        return not any(
            p.is_required or p.has_required_sub_parameters for p in self.query_parameters
        )

    @property
    def has_post_action_containing_filter_as_body_params(self) -> bool:
        for param in self.request_body_parameters:
            if param.is_filter:
                return True
            if any(sub.traits.is_filter for sub in param.attribute.attributes):
                return True
        return False

    @property
    def has_input_params_for_client_libs(self) -> bool:
        """True when at least one declared parameter survives visibility filtering."""
        return any(
            not (p.extensions.hidden_from_sdk and not self.qa_mode)
            for _, p in self._parameters
        )

    @property
    def has_input_params_for_eap_client_libs(self) -> bool:
        return any(
            p.extensions.is_eap or not (p.extensions.hidden_from_sdk and not self.qa_mode)
            for _, p in self._parameters
        )

    @property
    def json_keys(self) -> list[dict[str, int]]:
        """Body keys whose values must be sent as JSON, with their nesting level.

        A key qualifies when its schema is an object without properties or
        an array whose items have no type. Hidden fields are skipped; each
        ``key=level`` pair appears once.
        """
        schema = self._object_body()
        if schema is None:
            return []
        found: list[tuple[str, int]] = []
        self._collect_json_keys(schema.properties or {}, found, 0)
        seen: set[tuple[str, int]] = set()
        keys: list[dict[str, int]] = []
        for key, level in found:
            if (key, level) not in seen:
                seen.add((key, level))
                keys.append({key: level})
        return keys

    def _collect_json_keys(
        self, properties: Mapping[str, Schema], found: list[tuple[str, int]], level: int
    ) -> None:
        for key, schema in properties.items():
            if is_hidden_schema(schema, self.qa_mode):
                continue
            if schema.type == "object":
                if schema.properties is None:
                    found.append((key, level))
                else:
                    self._collect_json_keys(schema.properties, found, level + 1)
            elif schema.is_array and schema.items is not None:
                if schema.items.type is None:
                    found.append((key, level))
                else:
                    self._collect_json_keys({key: schema.items}, found, level)

    # ------------------------------------------------------------------ #
    # Response
    # ------------------------------------------------------------------ #

    @cached_property
    def response(self) -> Response:
        if self.is_list:
            return ListResponse(self.name, self.success_schema)
        return Response(self.name, self.success_schema)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "method": self.method.value,
            "url": self.url,
            "url_prefix": self.url_prefix,
            "url_suffix": self.url_suffix,
            "description": self.description,
            "sort_order": self.sort_order,
            "is_list": self.is_list,
            "is_deprecated": self.is_deprecated,
            "needs_json_input": self.traits.needs_json_input,
            "path_parameters": [p.to_dict() for p in self.path_parameters],
            "query_parameters": [p.to_dict() for p in self.visible_query_parameters],
            "request_body_parameters": [
                p.to_dict() for p in self.visible_request_body_parameters
            ],
            "is_all_request_body_params_optional": self.is_all_request_body_params_optional,
            "is_all_query_params_optional": self.is_all_query_params_optional,
            "json_keys": self.json_keys,
            "options": self.options,
        }
        if self.sub_domain is not None:
            data["sub_domain"] = self.sub_domain
        return data
