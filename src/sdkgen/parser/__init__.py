"""Document parser -- load an OpenAPI document and inline its ``$ref`` pointers.

Typical usage::

    from sdkgen.parser import load_document, resolve_refs, validate_openapi_version

    raw = load_document("openapi.yaml")
    validate_openapi_version(raw)
    document = resolve_refs(raw)

Sub-modules:

* :mod:`~sdkgen.parser.loader` -- I/O layer (file, stdin) plus format
  detection and OpenAPI version validation.
* :mod:`~sdkgen.parser.resolver` -- Recursive ``$ref`` inlining with
  cycle detection.
"""

from sdkgen.parser.loader import load_document, validate_openapi_version
from sdkgen.parser.resolver import resolve_refs

__all__ = ["load_document", "validate_openapi_version", "resolve_refs"]
