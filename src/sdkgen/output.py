"""Terminal output for the inspection commands.

Shaped structures and inspection tables are the *data* of a run and go to
stdout; everything else (errors, warnings, debug lines, log records) goes
to stderr, so ``sdkgen --json shape doc.yaml | jq`` always sees clean JSON.

Three renderings are available:

* ``json`` -- indented JSON, non-ASCII kept as is.
* ``plain`` -- tab-separated lines, one record per line.
* ``rich`` -- highlighted JSON and styled tables.

``auto`` picks ``rich`` for an interactive, colour-capable stdout and
``plain`` otherwise. ``NO_COLOR`` (any value) and ``TERM=dumb`` disable
colour.

The root CLI callback builds one :class:`OutputManager` and installs it
with :func:`set_output`; commands use the module-level helpers.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """Rendering of stdout data."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


def _to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def _plain_cell(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


def _plain_lines(data: Any) -> list[str]:
    """Tab-separated lines for a shaped dict, a list of records, or a scalar."""
    if isinstance(data, dict):
        return [f"{key}\t{_plain_cell(value)}" for key, value in data.items()]
    if isinstance(data, list):
        return [
            "\t".join(str(v) for v in item.values()) if isinstance(item, dict) else str(item)
            for item in data
        ]
    return [str(data)]


class OutputManager:
    """Holds the active format and the stdout/stderr consoles.

    Args:
        format: Requested format; ``AUTO`` is resolved at construction.
        no_color: Disable colour and markup on both streams.
        verbose: Show :meth:`debug` lines.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._verbose = verbose
        if format != OutputFormat.AUTO:
            self._format = format
        elif _is_tty() and not self._no_color:
            self._format = OutputFormat.RICH
        else:
            self._format = OutputFormat.PLAIN

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=self._format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    def __repr__(self) -> str:
        return f"OutputManager(format={self._format.value!r}, verbose={self._verbose})"

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    @property
    def stderr_console(self) -> Console:
        """The stderr console; the CLI's logging handler writes through it."""
        return self._stderr

    # --- stdout ---

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def format_data(self, data: Any) -> None:
        """Print a shaped structure (dict, list, or scalar)."""
        if self._format == OutputFormat.JSON:
            self.print_data(_to_json(data))
        elif self._format == OutputFormat.PLAIN:
            for line in _plain_lines(data):
                self.print_data(line)
        else:
            self._stdout.print(Syntax(_to_json(data), "json", theme="monokai", word_wrap=True))

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print rows under *headers*.

        JSON output is a list of objects keyed by header; plain output is a
        header line followed by one tab-separated line per row.
        """
        if self._format == OutputFormat.JSON:
            self.print_data(_to_json([dict(zip(headers, row)) for row in rows]))
            return
        if self._format == OutputFormat.PLAIN:
            for line in ["\t".join(headers)] + ["\t".join(row) for row in rows]:
                self.print_data(line)
            return
        table = Table(title=title, show_header=True, header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*row)
        self._stdout.print(table)

    # --- stderr ---

    def _diagnostic(self, message: str, label: str = "", style: str = "") -> None:
        if self._no_color or not style:
            prefix = f"{label} " if label else ""
            print(f"{prefix}{message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[{style}]{label}[/{style}] {message}")

    def info(self, message: str) -> None:
        self._diagnostic(message)

    def warning(self, message: str) -> None:
        self._diagnostic(message, "Warning:", "yellow")

    def error(self, message: str) -> None:
        self._diagnostic(message, "Error:", "bold red")

    def debug(self, message: str) -> None:
        if not self._verbose:
            return
        if self._no_color:
            self._diagnostic(message, "[debug]")
        else:
            self._stderr.print(f"[dim]\\[debug] {message}[/dim]")


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    if os.environ.get("NO_COLOR") is not None:
        return True
    return os.environ.get("TERM") == "dumb"


# --- Process-wide instance ---

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """The installed :class:`OutputManager`; a default one is created on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager (test isolation)."""
    global _output
    _output = None


def format_data(data: Any) -> None:
    get_output().format_data(data)


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().print_table(headers, rows, title)


def error(message: str) -> None:
    get_output().error(message)


def warning(message: str) -> None:
    get_output().warning(message)


def debug(message: str) -> None:
    get_output().debug(message)
