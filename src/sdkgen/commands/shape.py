"""Shape command -- dump the structure a backend produces for a document."""

from __future__ import annotations

from typing import Optional

import typer

from sdkgen.backends import BackendRegistry
from sdkgen.commands import load_spec
from sdkgen.exceptions import SdkgenError
from sdkgen.output import error, format_data


def shape_command(
    document: str = typer.Argument(..., help="Path to the OpenAPI document, or '-' for stdin."),
    backend: Optional[str] = typer.Option(
        None, "--backend", "-b", help="Backend name (default from config: python)."
    ),
    resource: Optional[str] = typer.Option(
        None, "--resource", "-r", help="Only shape this resource (name or id)."
    ),
    qa: Optional[bool] = typer.Option(
        None, "--qa/--no-qa", help="Expose hidden, internal, and bulk nodes."
    ),
) -> None:
    """Shape a document with a backend and print the result.

    Example::

        sdkgen --json shape openapi.yaml --backend python --resource Customer
    """
    spec = load_spec(document, qa, backend)
    try:
        shaper = BackendRegistry().get(spec.config.backend, spec.config)
        if resource is None:
            format_data(shaper.shape(spec))
            return
        found = spec.resource(resource)
        if found is None:
            error(f"Resource '{resource}' not found")
            raise typer.Exit(code=2)
        format_data(shaper.shape_resource(found, spec))
    except SdkgenError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
