"""Resource/Action graph builder.

:func:`build_spec` is the entry point of the IR: it validates and resolves
a loaded document, decodes every component schema once, builds every
operation into an :class:`~sdkgen.ir.action.Action`, and groups the
actions by the ``x-cb-resource-id`` of their operation. The resulting
:class:`Spec` is read-only; its views build resources on demand and
memoise them.

All build inputs -- QA mode, the schema depth bound, strict extension
decoding -- come from the :class:`~sdkgen.models.GenerationConfig` passed
in. Nothing here reads global state.
"""

from __future__ import annotations

import logging
import re
from functools import cached_property
from typing import Any, Mapping, Optional

from sdkgen.ir.action import Action, HttpMethod
from sdkgen.ir.enum import Enum
from sdkgen.ir.error import SUPER_ATTRIBUTES, ErrorResource, is_error_schema
from sdkgen.ir.resource import Resource
from sdkgen.models import GenerationConfig, Schema, SchemaShape
from sdkgen.parser import resolve_refs, validate_openapi_version
from sdkgen.version import Version, resolve_version

logger = logging.getLogger(__name__)

_NUMERIC_NAME = re.compile(r"\d+")


def build_spec(document: Mapping[str, Any], config: Optional[GenerationConfig] = None) -> Spec:
    """Build the IR for a loaded document.

    Args:
        document: The raw document as returned by
            :func:`~sdkgen.parser.loader.load_document`.
        config: Generation inputs; defaults to :class:`GenerationConfig`.

    Returns:
        The :class:`Spec` for the document.

    Raises:
        DocumentLoadError: If the document is not OpenAPI 3.x or holds an
            unresolvable reference.
        OperationContractError: If an operation lacks its vendor extensions
            or method name.
        ExtensionError: If an extension value is malformed (or unknown,
            when decoding strictly).
        SchemaDepthError: If schema nesting exceeds the configured bound.
    """
    config = config or GenerationConfig()
    validate_openapi_version(document)
    return Spec(resolve_refs(document), config)


class Spec:
    """The built IR of one document.

    Args:
        document: A document whose internal references are already inlined.
        config: Generation inputs.
    """

    def __init__(self, document: Mapping[str, Any], config: Optional[GenerationConfig] = None) -> None:
        self.document = document
        self.config = config or GenerationConfig()
        self.version: Version = resolve_version(
            document.get("info"), strict=self.config.strict_extensions
        )
        self.schemas: dict[str, Schema] = self._build_schemas()
        self.actions: dict[str, list[Action]] = self._build_actions()

    def __repr__(self) -> str:
        return f"Spec({len(self.schemas)} schemas, version={self.version!r})"

    @property
    def qa_mode(self) -> bool:
        return self.config.qa_mode

    # ------------------------------------------------------------------ #
    # Construction
    # ------------------------------------------------------------------ #

    def _build_schemas(self) -> dict[str, Schema]:
        components = self.document.get("components") or {}
        raw_schemas = components.get("schemas") or {}
        return {
            str(name): Schema.from_raw(
                raw,
                f"#/components/schemas/{name}",
                max_depth=self.config.max_schema_depth,
                strict=self.config.strict_extensions,
            )
            for name, raw in raw_schemas.items()
            if isinstance(raw, Mapping)
        }

    def _build_actions(self) -> dict[str, list[Action]]:
        grouped: dict[str, list[Action]] = {}
        for url, path_item in (self.document.get("paths") or {}).items():
            if not isinstance(path_item, Mapping):
                continue
            for method in (HttpMethod.GET, HttpMethod.POST):
                operation = path_item.get(method.value.lower())
                if not isinstance(operation, Mapping):
                    continue
                action = Action(
                    method,
                    operation,
                    str(url),
                    qa_mode=self.qa_mode,
                    max_depth=self.config.max_schema_depth,
                    strict=self.config.strict_extensions,
                )
                if action.resource_id is None:
                    logger.debug("Operation %s %s has no resource id (dropped)", method.value, url)
                    continue
                grouped.setdefault(action.resource_id, []).append(action)
        return grouped

    def _resource(self, name: str, schema: Schema) -> Resource:
        return Resource(
            name,
            schema,
            self.actions.get(schema.extensions.resource_id or "", []),
            qa_mode=self.qa_mode,
        )

    @cached_property
    def _all_resources(self) -> list[Resource]:
        resources: list[Resource] = []
        owners: dict[str, str] = {}
        for name, schema in self.schemas.items():
            resource_id = schema.extensions.resource_id
            if resource_id is None:
                continue
            if resource_id in owners:
                # Resource ids are unique per document; the first schema keeps the id.
                logger.warning(
                    "Schema %s reuses resource id '%s' of %s (ignored)",
                    name,
                    resource_id,
                    owners[resource_id],
                )
                continue
            owners[resource_id] = name
            resources.append(self._resource(name, schema))
        return sorted((r for r in resources if not r.is_third_party), key=lambda r: r.name)

    # ------------------------------------------------------------------ #
    # Views
    # ------------------------------------------------------------------ #

    def all_resources(self) -> list[Resource]:
        """Every top-level resource except third-party ones, sorted by name."""
        return list(self._all_resources)

    def resources(self) -> list[Resource]:
        """Top-level resources that are neither hidden nor third-party, sorted by name."""
        return [r for r in self._all_resources if not r.is_hidden]

    def pc_aware_resources(self) -> list[Resource]:
        """Resources that are untagged or tagged with the document's catalog version."""
        pcv = self.version.product_catalog_version
        return [
            r
            for r in self.resources()
            if r.product_catalog_version is None or r.product_catalog_version == pcv
        ]

    def resource(self, name_or_id: str) -> Optional[Resource]:
        """Look up a top-level resource by name or id (hidden ones included)."""
        for resource in self._all_resources:
            if name_or_id in (resource.name, resource.id):
                return resource
        return None

    def global_enums(self) -> list[Enum]:
        """Component schemas that are plain string enums."""
        return [
            Enum(name, schema)
            for name, schema in self.schemas.items()
            if schema.shape == SchemaShape.STRING and schema.enum is not None
        ]

    def error_resources(self) -> list[ErrorResource]:
        """Component schemas describing error payloads, sorted by name."""
        errors = [
            ErrorResource(name, schema, qa_mode=self.qa_mode)
            for name, schema in self.schemas.items()
            if is_error_schema(schema)
            and name not in SUPER_ATTRIBUTES
            and not _NUMERIC_NAME.fullmatch(name)
        ]
        return sorted(errors, key=lambda e: e.name)

    def event_resources(self) -> list[Resource]:
        """Component schemas whose name contains ``Event``, filtered like :meth:`resources`."""
        events = [
            self._resource(name, schema) for name, schema in self.schemas.items() if "Event" in name
        ]
        return sorted(
            (r for r in events if not r.is_hidden and not r.is_third_party),
            key=lambda r: r.name,
        )

    def webhooks(self, include_deprecated: bool = False) -> list[dict[str, Optional[str]]]:
        """One ``{type, resource_schema_name}`` entry per document webhook.

        Deprecated webhook operations and deprecated payload schemas are
        skipped unless *include_deprecated* is set.
        """
        result: list[dict[str, Optional[str]]] = []
        for event_type, path_item in (self.document.get("webhooks") or {}).items():
            post = path_item.get("post") if isinstance(path_item, Mapping) else None
            if not include_deprecated and isinstance(post, Mapping) and post.get("deprecated"):
                continue
            schema_name: Optional[str] = None
            body = post.get("requestBody") if isinstance(post, Mapping) else None
            media = ((body or {}).get("content") or {}).get("application/json")
            if isinstance(media, Mapping) and isinstance(media.get("schema"), Mapping):
                schema = media["schema"]
                if not include_deprecated and schema.get("deprecated"):
                    continue
                ref = schema.get("$ref")
                if ref:
                    schema_name = str(ref).rsplit("/", 1)[-1]
            result.append({"type": str(event_type), "resource_schema_name": schema_name})
        return result

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": {
                "api_version": self.version.api_version.value,
                "product_catalog_version": self.version.product_catalog_version.value,
            },
            "resources": [r.to_dict() for r in self.resources()],
            "global_enums": [e.to_dict() for e in self.global_enums()],
            "errors": [e.to_dict() for e in self.error_resources()],
            "webhooks": self.webhooks(),
        }
