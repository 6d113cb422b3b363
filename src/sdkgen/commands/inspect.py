"""Inspect commands -- examine what the IR makes of a document.

Provides the ``sdkgen inspect`` sub-command group: read-only views of the
resources, actions, and enums built from a document, and of the vendor
extension keys sdkgen recognises. Output follows the global ``--json`` /
``--plain`` flags.
"""

from __future__ import annotations

from typing import Optional

import typer

from sdkgen.commands import load_spec
from sdkgen.extensions import REGISTRY
from sdkgen.generator.enum_resolver import EnumResolver
from sdkgen.output import error, get_output

inspect_app = typer.Typer(no_args_is_help=True)

_DOCUMENT = typer.Argument(..., help="Path to the OpenAPI document, or '-' for stdin.")
_QA = typer.Option(None, "--qa/--no-qa", help="Expose hidden, internal, and bulk nodes.")


@inspect_app.command("resources")
def inspect_resources(document: str = _DOCUMENT, qa: Optional[bool] = _QA) -> None:
    """List the resources built from a document, in sort order.

    Example::

        sdkgen inspect resources openapi.yaml
        sdkgen --json inspect resources openapi.yaml --qa
    """
    spec = load_spec(document, qa)
    rows = [
        [
            resource.name,
            resource.id or "-",
            str(resource.sort_order),
            str(len(resource.sorted_actions)),
            ", ".join(s.name for s in resource.sorted_sub_resources) or "-",
        ]
        for resource in sorted(spec.resources(), key=lambda r: r.sort_order)
    ]
    get_output().print_table(
        ["Resource", "Id", "Sort", "Actions", "Sub-resources"],
        rows,
        title=f"Resources ({len(rows)})",
    )


@inspect_app.command("actions")
def inspect_actions(
    document: str = _DOCUMENT,
    resource: Optional[str] = typer.Option(
        None, "--resource", "-r", help="Only list the actions of this resource (name or id)."
    ),
    qa: Optional[bool] = _QA,
) -> None:
    """List the actions of every resource (or of one)."""
    spec = load_spec(document, qa)
    resources = spec.resources()
    if resource is not None:
        found = spec.resource(resource)
        if found is None:
            error(f"Resource '{resource}' not found")
            raise typer.Exit(code=2)
        resources = [found]

    rows: list[list[str]] = []
    for res in resources:
        for action in res.sorted_actions:
            rows.append([
                res.name,
                action.name,
                action.method.value,
                action.url,
                "Yes" if action.is_list else "",
                "Yes" if action.is_deprecated else "",
            ])
    get_output().print_table(
        ["Resource", "Action", "Method", "Path", "List", "Deprecated"],
        rows,
        title=f"Actions ({len(rows)})",
    )


@inspect_app.command("enums")
def inspect_enums(
    document: str = _DOCUMENT,
    resource: Optional[str] = typer.Option(
        None, "--resource", "-r", help="List the enums of this resource instead of global ones."
    ),
    qa: Optional[bool] = _QA,
) -> None:
    """List global enums, or the enums generated for one resource."""
    spec = load_spec(document, qa)
    resolver = EnumResolver(spec)
    if resource is None:
        enums = resolver.global_enums()
    else:
        found = spec.resource(resource)
        if found is None:
            error(f"Resource '{resource}' not found")
            raise typer.Exit(code=2)
        enums = resolver.resource_enums(found)

    rows = [
        [enum.name, ", ".join(enum.valid_values), ", ".join(enum.deprecated_values) or "-"]
        for enum in enums
    ]
    get_output().print_table(
        ["Enum", "Values", "Deprecated"], rows, title=f"Enums ({len(rows)})"
    )


@inspect_app.command("extensions")
def inspect_extensions() -> None:
    """List every recognised ``x-cb-*`` key with its scope and default."""
    rows = [
        [entry.key, scope.value, repr(entry.default), entry.description or "-"]
        for (scope, _), entry in sorted(REGISTRY.items(), key=lambda item: (item[0][0].value, item[0][1]))
    ]
    get_output().print_table(
        ["Key", "Scope", "Default", "Description"], rows, title=f"Extensions ({len(rows)})"
    )
