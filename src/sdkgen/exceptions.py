"""Exception hierarchy for sdkgen.

All exceptions inherit from :class:`SdkgenError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`sdkgen.exit_codes`.
The top-level error handler in :func:`sdkgen.app.main` catches
``SdkgenError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

IR construction errors (:class:`OperationContractError`,
:class:`ExtensionError`, :class:`SchemaDepthError`) are always raised while
the graph is being built, before any backend shapes output.

Subclass hierarchy::

    SdkgenError (exit 1)
    +-- InvalidUsageError       (exit 2)
    +-- DocumentLoadError       (exit 7)
    +-- OperationContractError  (exit 8)
    +-- ExtensionError          (exit 8)
    +-- SchemaDepthError        (exit 9)
    +-- BackendNotFoundError    (exit 10)
    +-- ConfigError             (exit 1)
"""

from sdkgen.exit_codes import (
    EXIT_BACKEND_ERROR,
    EXIT_CONTRACT_ERROR,
    EXIT_DOCUMENT_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_SCHEMA_DEPTH_ERROR,
)


class SdkgenError(Exception):
    """Base exception for all sdkgen errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`sdkgen.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SdkgenError):
    """Raised for invalid CLI arguments (unknown resource id, bad option combination)."""

    exit_code = EXIT_INVALID_USAGE


class DocumentLoadError(SdkgenError):
    """Raised when the API document cannot be read, parsed, or reference-resolved."""

    exit_code = EXIT_DOCUMENT_ERROR


class OperationContractError(SdkgenError):
    """Raised when an operation lacks its extension map or its method-name extension.

    This is the minimum contract an authored document must satisfy, so the
    error is fatal: no partial resource list is ever produced.

    Args:
        message: Human-readable error description.
        operation_id: The ``operationId`` of the offending operation, if any.
        path: The URL path the operation is declared under.
    """

    exit_code = EXIT_CONTRACT_ERROR

    def __init__(
        self,
        message: str,
        operation_id: str | None = None,
        path: str | None = None,
    ):
        location = " ".join(part for part in (path, operation_id) if part)
        super().__init__(f"{message} ({location})" if location else message)
        self.operation_id = operation_id
        self.path = path


class ExtensionError(SdkgenError):
    """Raised when an extension value cannot be decoded, or an unknown key is found in strict mode."""

    exit_code = EXIT_CONTRACT_ERROR


class SchemaDepthError(SdkgenError):
    """Raised when a schema walk nests deeper than the configured bound.

    Reference cycles are broken by the resolver, so hitting this bound means
    the document nests inline schemas unusually deep and should be reviewed
    with its authors.
    """

    exit_code = EXIT_SCHEMA_DEPTH_ERROR


class BackendNotFoundError(SdkgenError):
    """Raised when a backend name does not match any registered backend."""

    exit_code = EXIT_BACKEND_ERROR


class ConfigError(SdkgenError):
    """Raised for configuration problems (invalid JSON, failed validation, bad env values)."""

    exit_code = EXIT_GENERIC_FAILURE
