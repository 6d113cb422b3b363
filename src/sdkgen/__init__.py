"""sdkgen -- Build a normalized SDK model from a vendor-extended OpenAPI document.

This package reads one OpenAPI document annotated with ``x-cb-*`` generation
directives, builds an immutable intermediate representation (IR) of
resources, actions, attributes, and enums, classifies every node once, and
projects the result through a target-language *backend* into a nested
structure ready for a template renderer.

Typical workflow::

    sdkgen inspect resources openapi.json      # list the generated resources
    sdkgen shape openapi.json --backend python # dump the shaped structure

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models for schema nodes and configuration.
    extensions: The registry of recognised ``x-cb-*`` keys.
    version: API / product-catalog version resolution.
    config: XDG-aware configuration with precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
