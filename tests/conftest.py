"""Shared test fixtures for sdkgen.

Provides reusable fixtures for loading document fixtures, building the IR,
creating isolated config environments, managing output and logging state,
and running CLI commands. These fixtures are automatically discovered by
pytest and available to all test modules without explicit imports.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import pytest

from sdkgen.ir import Spec, build_spec
from sdkgen.models import GenerationConfig
from sdkgen.output import reset_output

FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output and logging state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file"). Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


@pytest.fixture(autouse=True)
def _reset_logging_between_tests() -> None:
    """Drop the handler the CLI callback installs on the ``sdkgen`` logger.

    The handler writes to a console bound to the runner's stderr, which
    is closed once the invocation returns.
    """
    yield
    logger = logging.getLogger("sdkgen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Raw document fixtures (plain dicts loaded from JSON files)
# ---------------------------------------------------------------------------


def load_fixture(name: str) -> dict[str, Any]:
    """Load a JSON document from the fixtures directory."""
    with open(FIXTURES_DIR / name, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def catalog_raw() -> dict[str, Any]:
    """Raw billing catalog document (two resources plus hidden ones)."""
    return load_fixture("catalog.json")


@pytest.fixture
def catalog_path() -> Path:
    return FIXTURES_DIR / "catalog.json"


@pytest.fixture
def broken_path() -> Path:
    """Document whose only operation has no method-name extension."""
    return FIXTURES_DIR / "missing_method_name.json"


# ---------------------------------------------------------------------------
# Built IR fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def catalog_spec(catalog_raw: dict[str, Any]) -> Spec:
    """The catalog document built with the default (non-QA) config."""
    return build_spec(catalog_raw)


@pytest.fixture
def catalog_qa_spec(catalog_raw: dict[str, Any]) -> Spec:
    """The catalog document built in QA mode."""
    return build_spec(catalog_raw, GenerationConfig(qa_mode=True))


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path
    so that tests never touch real user config. Clears all SDKGEN_*
    environment variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("sdkgen.config._is_xdg_platform", lambda: True)

    for var in ["SDKGEN_QA_MODE", "SDKGEN_BACKEND"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner.

    Returns a CliRunner instance that captures stdout/stderr and
    provides a consistent interface for invoking Typer apps in tests.
    """
    from typer.testing import CliRunner

    return CliRunner()
