"""Generation settings: where they live and how they combine.

Generation settings come from four places, highest precedence first:

1. CLI flags (``--qa/--no-qa``, ``--backend``).
2. Environment variables ``SDKGEN_QA_MODE`` and ``SDKGEN_BACKEND``.
3. The ``generation`` section of ``./sdkgen.json`` in the working directory.
4. The ``generation`` section of the user config file.

Unset values fall back to the :class:`~sdkgen.models.GenerationConfig`
defaults. The user config file is ``$XDG_CONFIG_HOME/sdkgen/config.json``
on Linux and BSD and ``~/.sdkgen/config.json`` elsewhere.
:func:`resolve_config` returns the merged result, which is then passed
explicitly to :func:`~sdkgen.ir.spec.build_spec`.

Output preferences (format and verbosity) come from the ``output`` section
of the user config file, overridden by the global CLI flags; see
:func:`resolve_output`.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from sdkgen.exceptions import ConfigError
from sdkgen.models import GenerationConfig, GlobalConfig, OutputConfig

APP_DIR_NAME = "sdkgen"
CONFIG_FILENAME = "config.json"
PROJECT_CONFIG_FILENAME = "sdkgen.json"

ENV_QA_MODE = "SDKGEN_QA_MODE"
ENV_BACKEND = "SDKGEN_BACKEND"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})

# env var, default location under $HOME, location under the non-XDG fallback
_DIRS = {
    "config": ("XDG_CONFIG_HOME", (".config",), ()),
    "data": ("XDG_DATA_HOME", (".local", "share"), ("logs",)),
}


def _is_xdg_platform() -> bool:
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(kind: str) -> Path:
    env_var, xdg_default, fallback = _DIRS[kind]
    if _is_xdg_platform():
        base = os.environ.get(env_var, "")
        root = Path(base) if base else Path.home().joinpath(*xdg_default)
        path = root / APP_DIR_NAME
    else:
        path = Path.home().joinpath(f".{APP_DIR_NAME}", *fallback)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Directory holding the user config file; created on first use."""
    return _app_dir("config")


def get_data_dir() -> Path:
    """Directory holding crash logs; created on first use."""
    return _app_dir("data")


def _atomic_write(path: Path, data: str) -> None:
    """Replace *path* with *data* so readers never see a partial file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def _read_json(path: Path, label: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except ValueError as exc:
        raise ConfigError(f"Invalid {label} at {path}: {exc}") from exc


# --- User config ---


def load_global_config() -> GlobalConfig:
    """Read the user config file, or return defaults when it does not exist.

    Raises:
        ConfigError: If the file is not valid JSON or fails validation.
    """
    path = get_config_dir() / CONFIG_FILENAME
    if not path.is_file():
        return GlobalConfig()
    data = _read_json(path, "global config")
    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    text = json.dumps(config.model_dump(mode="json"), indent=2) + "\n"
    _atomic_write(get_config_dir() / CONFIG_FILENAME, text)


# --- Project config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Read ``./sdkgen.json``; ``None`` when the working directory has none.

    Raises:
        ConfigError: If the file is not a JSON object.
    """
    path = Path.cwd() / PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    data = _read_json(path, "project config")
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Merging ---


def _env_flag(name: str) -> Optional[bool]:
    raw = os.environ.get(name)
    if raw is None:
        return None
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"Environment variable {name} must be a boolean, got {raw!r}")


def resolve_config(
    cli_qa_mode: Optional[bool] = None,
    cli_backend: Optional[str] = None,
) -> GenerationConfig:
    """Merge every settings source into one :class:`GenerationConfig`.

    Args:
        cli_qa_mode: ``--qa/--no-qa``; ``None`` when not given.
        cli_backend: ``--backend``; ``None`` when not given.

    Raises:
        ConfigError: If a file, an environment value, or the merged result
            is invalid.
    """
    values = load_global_config().generation.model_dump()

    project = load_project_config()
    if project is not None:
        section = project.get("generation", {})
        if not isinstance(section, dict):
            raise ConfigError("Project config 'generation' must be a JSON object")
        values.update(section)

    overrides = {
        "qa_mode": _env_flag(ENV_QA_MODE),
        "backend": os.environ.get(ENV_BACKEND) or None,
    }
    overrides.update(
        {k: v for k, v in (("qa_mode", cli_qa_mode), ("backend", cli_backend)) if v is not None}
    )
    values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return GenerationConfig.model_validate(values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid generation config: {exc}") from exc


def resolve_output(cli_format: Optional[str] = None, cli_verbose: bool = False) -> OutputConfig:
    """The ``output`` section of the user config with CLI flags applied.

    Args:
        cli_format: ``json`` or ``plain`` from ``--json``/``--plain``;
            ``None`` when neither flag is given.
        cli_verbose: ``--verbose``; it can only switch debug output on.

    Raises:
        ConfigError: If the user config file is invalid.
    """
    output = load_global_config().output
    updates: dict[str, Any] = {}
    if cli_format is not None:
        updates["format"] = cli_format
    if cli_verbose:
        updates["verbose"] = True
    return output.model_copy(update=updates)
