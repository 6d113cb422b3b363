"""Backend registry -- discovery of shaping backends.

Backends are found through Python entry points in the ``sdkgen.backends``
group. The reference Python backend is registered by this package's own
``pyproject.toml``; third-party packages add theirs the same way::

    [project.entry-points."sdkgen.backends"]
    typescript = "my_package.backend:TypeScriptBackend"
"""

from __future__ import annotations

import importlib.metadata
import logging
from typing import Optional

from sdkgen.backends.base import Backend
from sdkgen.backends.python import PythonBackend
from sdkgen.exceptions import BackendNotFoundError
from sdkgen.models import GenerationConfig

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "sdkgen.backends"
"""The entry-point group name used for backend discovery."""


class BackendRegistry:
    """Maps backend names to :class:`~sdkgen.backends.base.Backend` classes.

    The reference Python backend is always available, so an editable
    checkout without installed entry points still works. Entry points are
    read lazily on first lookup; a name that is already registered is not
    replaced by discovery.

    Example::

        registry = BackendRegistry()
        backend = registry.get("python", config)
        shaped = backend.shape(spec)
    """

    def __init__(self) -> None:
        self._backends: dict[str, type[Backend]] = {PythonBackend.name: PythonBackend}
        self._discovered = False

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def discover(self) -> list[str]:
        """Load every backend class registered under ``sdkgen.backends``.

        Returns:
            The names of the backends that loaded. Entry points that fail
            to import, or that do not point at a :class:`Backend`
            subclass, are logged as warnings and skipped.
        """
        loaded: list[str] = []
        for ep in importlib.metadata.entry_points().select(group=ENTRY_POINT_GROUP):
            if ep.name in self._backends:
                continue
            try:
                backend_cls = ep.load()
            except Exception as exc:
                logger.warning("Failed to load backend '%s': %s", ep.name, exc)
                continue
            if not (isinstance(backend_cls, type) and issubclass(backend_cls, Backend)):
                logger.warning("Entry point '%s' is not a Backend subclass, skipping", ep.name)
                continue
            self._backends[ep.name] = backend_cls
            loaded.append(ep.name)
        self._discovered = True
        return loaded

    def register(self, name: str, backend_cls: type[Backend]) -> None:
        """Register *backend_cls* under *name*, replacing any existing entry."""
        self._backends[name] = backend_cls
        logger.debug("Registered backend '%s'", name)

    # ------------------------------------------------------------------
    # Querying
    # ------------------------------------------------------------------

    def names(self) -> list[str]:
        if not self._discovered:
            self.discover()
        return sorted(self._backends)

    def get(self, name: str, config: Optional[GenerationConfig] = None) -> Backend:
        """Instantiate the backend registered as *name*.

        Args:
            name: Registered backend name, e.g. ``"python"``.
            config: Generation inputs handed to the backend.

        Returns:
            A new backend instance.

        Raises:
            BackendNotFoundError: If no backend is registered as *name*.
        """
        if name not in self._backends and not self._discovered:
            self.discover()
        try:
            backend_cls = self._backends[name]
        except KeyError:
            available = ", ".join(sorted(self._backends)) or "none"
            raise BackendNotFoundError(
                f"Backend '{name}' not found (available: {available})"
            ) from None
        return backend_cls(config)
