"""Read a vendor-extended OpenAPI document into a plain dict.

Documents come from a local file or from stdin (``-``), as JSON or YAML.
The file suffix picks the parser; without a known suffix JSON is tried
first and YAML second. URLs are rejected rather than fetched, since
building the IR never performs network I/O.

Loaded documents still contain ``$ref`` pointers; pass them to
:func:`~sdkgen.ir.spec.build_spec`, which inlines them through
:func:`~sdkgen.parser.resolver.resolve_refs`.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Optional

import yaml

from sdkgen.exceptions import DocumentLoadError

_SUFFIX_FORMATS = {".json": "json", ".yaml": "yaml", ".yml": "yaml"}


def load_document(source: str) -> dict[str, Any]:
    """Parse the document at *source*.

    Args:
        source: A local path, or ``-`` to read stdin.

    Raises:
        DocumentLoadError: For URLs, unreadable or empty input, and content
            that is not a JSON or YAML object.
    """
    if source.startswith(("http://", "https://")):
        raise DocumentLoadError(
            f"Remote documents are not supported: {source}. "
            "Download the document and pass the local path instead."
        )
    if source == "-":
        return _load_from_stdin()
    return _load_from_file(source)


def _load_from_stdin() -> dict[str, Any]:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise DocumentLoadError(f"Failed to read from stdin: {exc}") from exc
    if not content.strip():
        raise DocumentLoadError("No input received from stdin")
    return _parse_content(content)


def _load_from_file(path: str) -> dict[str, Any]:
    file_path = Path(path)
    if not file_path.is_file():
        raise DocumentLoadError(f"Document not found: {path}")
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DocumentLoadError(f"Failed to read document {path}: {exc}") from exc
    if not content.strip():
        raise DocumentLoadError(f"Document is empty: {path}")
    return _parse_content(content, hint=_SUFFIX_FORMATS.get(file_path.suffix.lower(), ""))


def _require_mapping(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        kind = "empty document" if result is None else type(result).__name__
        raise DocumentLoadError(f"Document must be a JSON/YAML object (got {kind})")
    return result


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse *content* according to *hint* (``"json"``, ``"yaml"``, or empty).

    An explicit ``json`` hint makes a JSON syntax error final; otherwise a
    failed JSON parse falls through to YAML.
    """
    json_error: Optional[json.JSONDecodeError] = None
    if hint != "yaml":
        try:
            return _require_mapping(json.loads(content))
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise DocumentLoadError(f"Invalid JSON: {exc}") from exc
            json_error = exc

    try:
        return _require_mapping(yaml.safe_load(content))
    except yaml.YAMLError as exc:
        details = [f"YAML error: {exc}"]
        if json_error is not None:
            details.insert(0, f"JSON error: {json_error}")
        raise DocumentLoadError(
            "Failed to parse document as JSON or YAML\n  " + "\n  ".join(details)
        ) from exc


def validate_openapi_version(document: dict[str, Any]) -> str:
    """Return the ``openapi`` version of *document*.

    Raises:
        DocumentLoadError: For Swagger 2 documents, a missing ``openapi``
            field, or a major version other than 3.
    """
    if "swagger" in document:
        raise DocumentLoadError(
            f"Swagger {document['swagger']} is not supported. "
            "Only OpenAPI 3.0.x and 3.1.x are supported."
        )
    if "openapi" not in document:
        raise DocumentLoadError("Missing 'openapi' field. Is this an OpenAPI 3.x document?")
    version = str(document["openapi"])
    if not version.startswith("3."):
        raise DocumentLoadError(
            f"Unsupported OpenAPI version: {version}. "
            "Only OpenAPI 3.0.x and 3.1.x are supported."
        )
    return version
