"""Command-line surface of sdkgen.

``sdkgen`` is a debugging front end over the library: ``inspect`` shows
what the IR makes of a document and ``shape`` prints the structure a
backend hands to its renderer. Nothing here writes SDK files.

Global flags (``--json``, ``--plain``, ``--no-color``, ``--verbose``) are
handled by :func:`main_callback`, which installs the process-wide
:class:`~sdkgen.output.OutputManager` and a :class:`rich.logging.RichHandler`
for the ``sdkgen`` logger hierarchy.

:func:`main` is the console-script entry point. Library errors end the
process with their ``exit_code``; anything else leaves a crash log in the
data directory.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import typer
from rich.logging import RichHandler

from sdkgen import __version__
from sdkgen.commands.inspect import inspect_app
from sdkgen.commands.shape import shape_command
from sdkgen.config import get_data_dir, resolve_output
from sdkgen.exceptions import ConfigError, SdkgenError
from sdkgen.exit_codes import EXIT_GENERIC_FAILURE
from sdkgen.output import OutputFormat, OutputManager, error, set_output

EXIT_CANCELLED = 130

app = typer.Typer(
    name="sdkgen",
    help="Build and inspect SDK models from vendor-extended OpenAPI documents.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.add_typer(inspect_app, name="inspect", help="Inspect the IR built from a document.")
app.command("shape")(shape_command)


def _show_version(value: bool) -> None:
    if value:
        typer.echo(f"sdkgen {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool, handler: logging.Handler) -> None:
    """Route ``sdkgen.*`` records to *handler* only.

    The threshold is WARNING, or DEBUG with ``--verbose``. A handler left by
    an earlier invocation in the same process is removed first.
    """
    logger = logging.getLogger("sdkgen")
    for old in list(logger.handlers):
        logger.removeHandler(old)
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_show_version,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Set up output and logging before the sub-command runs.

    Flags win over the ``output`` section of the user config file.

    Args:
        ctx: Typer invocation context; ``ctx.obj["verbose"]`` is set.
        version: Print the version and exit.
        json_output: Render data as JSON (wins over ``--plain``).
        plain_output: Render data as tab-separated text.
        no_color: Disable colour on stdout and stderr.
        verbose: Show debug diagnostics and DEBUG log records.
    """
    if json_output:
        cli_format: Optional[str] = OutputFormat.JSON.value
    elif plain_output:
        cli_format = OutputFormat.PLAIN.value
    else:
        cli_format = None
    try:
        settings = resolve_output(cli_format, verbose)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    output = OutputManager(
        format=OutputFormat(settings.format), no_color=no_color, verbose=settings.verbose
    )
    set_output(output)
    configure_logging(
        settings.verbose,
        RichHandler(console=output.stderr_console, show_time=False, show_path=False),
    )
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = settings.verbose


def _cancel(signum: int, frame: Any) -> None:  # noqa: ANN401
    sys.stderr.write("\nCancelled.\n")
    sys.exit(EXIT_CANCELLED)


def _write_crash_log() -> Path:
    """Save the active traceback under ``<data dir>/logs`` and return its path."""
    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"crash-{datetime.now():%Y%m%d-%H%M%S}.log"
    header = f"sdkgen {__version__}\nargv: {' '.join(sys.argv)}\n\n"
    log_path.write_text(header + traceback.format_exc(), encoding="utf-8")
    return log_path


def main() -> None:
    """Console-script entry point.

    Raises:
        SystemExit: Always; with the error's exit code for
            :class:`~sdkgen.exceptions.SdkgenError`, 130 on Ctrl-C, and
            :data:`~sdkgen.exit_codes.EXIT_GENERIC_FAILURE` after a crash.
    """
    signal.signal(signal.SIGINT, _cancel)
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        _cancel(signal.SIGINT, None)
    except SdkgenError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception:
        error(f"Unexpected error. Debug log: {_write_crash_log()}")
        sys.exit(EXIT_GENERIC_FAILURE)
