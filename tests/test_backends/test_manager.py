"""Tests for sdkgen.backends.manager -- entry-point discovery of backends."""

from __future__ import annotations

import importlib.metadata
import logging
from types import SimpleNamespace
from typing import Any, Callable

import pytest

from sdkgen.backends.base import Backend
from sdkgen.backends.manager import ENTRY_POINT_GROUP, BackendRegistry
from sdkgen.backends.python import PythonBackend
from sdkgen.exceptions import BackendNotFoundError
from sdkgen.models import GenerationConfig


class UpperBackend(PythonBackend):
    name = "upper"

    def naming_convention(self, raw: str) -> str:
        return raw.upper()


class _EntryPoints:
    def __init__(self, items: list[Any]) -> None:
        self._items = items

    def select(self, group: str) -> list[Any]:
        return [ep for ep in self._items if ep.group == group]


def _entry_point(name: str, load: Callable[[], Any], group: str = ENTRY_POINT_GROUP) -> Any:
    return SimpleNamespace(name=name, group=group, load=load)


def _raise_import_error() -> Any:
    raise ImportError("No module named 'missing_backend'")


@pytest.fixture
def fake_entry_points(monkeypatch: pytest.MonkeyPatch) -> Callable[..., None]:
    """Replace installed entry points with the given ones."""

    def install(*items: Any) -> None:
        monkeypatch.setattr(importlib.metadata, "entry_points", lambda: _EntryPoints(list(items)))

    return install


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


class TestGet:
    def test_python_backend_always_available(self, fake_entry_points: Callable[..., None]) -> None:
        fake_entry_points()
        backend = BackendRegistry().get("python")
        assert isinstance(backend, PythonBackend)

    def test_config_handed_to_backend(self, fake_entry_points: Callable[..., None]) -> None:
        fake_entry_points()
        config = GenerationConfig(qa_mode=True)
        backend = BackendRegistry().get("python", config)
        assert backend.config is config

    def test_returns_new_instance_each_time(self, fake_entry_points: Callable[..., None]) -> None:
        fake_entry_points()
        registry = BackendRegistry()
        assert registry.get("python") is not registry.get("python")

    def test_unknown_name(self, fake_entry_points: Callable[..., None]) -> None:
        fake_entry_points()
        with pytest.raises(BackendNotFoundError, match="Backend 'go' not found") as exc_info:
            BackendRegistry().get("go")
        assert "available: python" in str(exc_info.value)
        assert exc_info.value.exit_code == 10


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


class TestDiscover:
    def test_loads_backend_subclasses(self, fake_entry_points: Callable[..., None]) -> None:
        fake_entry_points(_entry_point("upper", lambda: UpperBackend))
        registry = BackendRegistry()

        assert registry.discover() == ["upper"]
        assert isinstance(registry.get("upper"), UpperBackend)

    def test_get_discovers_lazily(self, fake_entry_points: Callable[..., None]) -> None:
        fake_entry_points(_entry_point("upper", lambda: UpperBackend))
        assert isinstance(BackendRegistry().get("upper"), UpperBackend)

    def test_other_groups_ignored(self, fake_entry_points: Callable[..., None]) -> None:
        fake_entry_points(_entry_point("upper", lambda: UpperBackend, group="other.plugins"))
        assert BackendRegistry().discover() == []

    def test_failing_entry_point_logged(
        self, fake_entry_points: Callable[..., None], caplog: pytest.LogCaptureFixture
    ) -> None:
        fake_entry_points(
            _entry_point("broken", _raise_import_error),
            _entry_point("upper", lambda: UpperBackend),
        )
        with caplog.at_level(logging.WARNING, logger="sdkgen.backends.manager"):
            loaded = BackendRegistry().discover()

        assert loaded == ["upper"]
        assert "Failed to load backend 'broken'" in caplog.text

    def test_non_backend_entry_point_skipped(
        self, fake_entry_points: Callable[..., None], caplog: pytest.LogCaptureFixture
    ) -> None:
        fake_entry_points(
            _entry_point("helper", lambda: dict),
            _entry_point("instance", lambda: PythonBackend()),
        )
        with caplog.at_level(logging.WARNING, logger="sdkgen.backends.manager"):
            loaded = BackendRegistry().discover()

        assert loaded == []
        assert "Entry point 'helper' is not a Backend subclass" in caplog.text
        assert "Entry point 'instance' is not a Backend subclass" in caplog.text

    def test_existing_name_not_replaced(self, fake_entry_points: Callable[..., None]) -> None:
        calls: list[str] = []

        def load() -> type[Backend]:
            calls.append("python")
            return UpperBackend

        fake_entry_points(_entry_point("python", load))
        registry = BackendRegistry()

        assert registry.discover() == []
        assert calls == []
        assert type(registry.get("python")) is PythonBackend


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


class TestRegister:
    def test_register_and_names(self, fake_entry_points: Callable[..., None]) -> None:
        fake_entry_points()
        registry = BackendRegistry()
        registry.register("upper", UpperBackend)
        assert registry.names() == ["python", "upper"]

    def test_register_replaces(self, fake_entry_points: Callable[..., None]) -> None:
        fake_entry_points()
        registry = BackendRegistry()
        registry.register("python", UpperBackend)
        assert isinstance(registry.get("python"), UpperBackend)

    def test_names_include_discovered(self, fake_entry_points: Callable[..., None]) -> None:
        fake_entry_points(_entry_point("upper", lambda: UpperBackend))
        assert BackendRegistry().names() == ["python", "upper"]
