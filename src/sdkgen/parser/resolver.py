"""Inline internal ``$ref`` pointers in an OpenAPI document.

Vendor-extended documents reference component schemas heavily, and the IR
needs to see the target of each reference together with the name it was
reached through (response types and webhook payloads are named after the
referenced component). This module performs a recursive deep-copy
traversal that replaces every ``{"$ref": "#/..."}`` node with a copy of its
target **plus** the original ``$ref`` string. Sibling keys next to the
``$ref`` (descriptions, vendor extensions) override the target's keys.

Only **internal** references (those starting with ``#/``) are supported.
External file or URL references raise
:class:`~sdkgen.exceptions.DocumentLoadError`.

A reference that is already being resolved further up the current branch
is a cycle: it is left unresolved (the node keeps only its ``$ref``) and
logged, so recursive schemas terminate instead of recursing forever.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

from sdkgen.exceptions import DocumentLoadError

logger = logging.getLogger(__name__)


def resolve_refs(document: dict[str, Any]) -> dict[str, Any]:
    """Inline all internal ``$ref`` pointers in the document.

    Args:
        document: The raw OpenAPI document, as returned by
            :func:`~sdkgen.parser.loader.load_document`.

    Returns:
        A **new** dictionary (deep copy) where every resolvable reference is
        replaced by its target merged with the reference's sibling keys, and
        the ``$ref`` string is retained.

    Raises:
        DocumentLoadError: If a ``$ref`` points to a non-existent path, or an
            external (non-``#/``) reference is encountered.

    Example::

        raw = load_document("openapi.yaml")
        resolved = resolve_refs(raw)
        schema = resolved["paths"]["/customers"]["get"]["responses"]["200"]
        # ... the inlined customer schema, with "$ref" still present.
    """
    root = copy.deepcopy(document)
    return _deep_resolve(root, root, frozenset())


def _resolve_pointer(ref: str, root: dict[str, Any]) -> Any:
    """Follow a JSON Pointer reference such as ``#/components/schemas/Pet``.

    Handles RFC 6901 escaping (``~0`` for ``~``, ``~1`` for ``/``).

    Raises:
        DocumentLoadError: If the reference is external, or a segment does
            not exist in the document.
    """
    if not ref.startswith("#/"):
        raise DocumentLoadError(
            f"External $ref not supported: {ref}. "
            "Only internal references (#/...) are handled."
        )

    current: Any = root
    for segment in ref[2:].split("/"):
        segment = segment.replace("~1", "/").replace("~0", "~")
        if isinstance(current, dict):
            if segment not in current:
                raise DocumentLoadError(
                    f"Cannot resolve $ref '{ref}': key '{segment}' not found at path"
                )
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise DocumentLoadError(
                    f"Cannot resolve $ref '{ref}': invalid array index '{segment}'"
                ) from exc
        else:
            raise DocumentLoadError(
                f"Cannot resolve $ref '{ref}': cannot navigate into {type(current).__name__}"
            )
    return current


def _deep_resolve(obj: Any, root: dict[str, Any], stack: frozenset[str]) -> Any:
    """Recursively inline references within *obj*.

    *stack* holds the references being resolved on the current branch;
    siblings each get their own copy so parallel references to the same
    target both resolve.
    """
    if isinstance(obj, dict):
        ref = obj.get("$ref")
        if isinstance(ref, str):
            if ref in stack:
                logger.warning("Reference cycle through %s left unresolved", ref)
                return dict(obj)
            target = _resolve_pointer(ref, root)
            resolved = _deep_resolve(target, root, stack | {ref})
            siblings = {
                key: _deep_resolve(value, root, stack)
                for key, value in obj.items()
                if key != "$ref"
            }
            if not isinstance(resolved, dict):
                return resolved
            return {**resolved, **siblings, "$ref": ref}

        return {key: _deep_resolve(value, root, stack) for key, value in obj.items()}

    if isinstance(obj, list):
        return [_deep_resolve(item, root, stack) for item in obj]

    return obj
