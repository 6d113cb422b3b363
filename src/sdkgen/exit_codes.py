"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~sdkgen.exceptions.SdkgenError` subclass.
Build scripts that drive SDK generation can inspect the exit code to tell
an authoring mistake in the document apart from a bad invocation without
parsing stderr.

Example::

    $ sdkgen shape openapi.yaml --backend python
    $ echo $?
    8   # EXIT_CONTRACT_ERROR -- an operation has no method-name extension
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_DOCUMENT_ERROR = 7
"""The API document could not be read, parsed, or reference-resolved."""

EXIT_CONTRACT_ERROR = 8
"""The document violates the extension contract (e.g. missing method name)."""

EXIT_SCHEMA_DEPTH_ERROR = 9
"""A schema walk exceeded the configured recursion bound."""

EXIT_BACKEND_ERROR = 10
"""The requested target-language backend is not registered or failed to load."""
