# Cross-platform adapter registry
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path

from aix.errors import DuplicatePlatformError, NoPlatformsAvailableError, UnknownPlatformError
from aix.paths import PLATFORM_NAMES, is_valid_platform
from aix.platforms import BasePlatform, create_platform


class _ReadWriteLock:
    """Many concurrent readers or a single writer."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            while self._writing or self._readers:
                self._cond.wait()
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


class Registry:
    """Registered platform adapters for one scope and project root.

    ABOUTME: Register() takes the write lock, every query takes the read lock
    ABOUTME: Results are always in closed-set order (claude, opencode, gemini)
    ABOUTME: Populate once at startup; later calls only read
    """

    def __init__(self, scope: str = "default", project_root: str | Path | None = None) -> None:
        self.scope = scope
        self.project_root = project_root
        self._lock = _ReadWriteLock()
        self._adapters: dict[str, BasePlatform] = {}

    def register(self, name: str) -> None:
        """Register a platform by id.

        Raises:
            UnknownPlatformError: If name is outside the closed set
            DuplicatePlatformError: If name is already registered
        """
        if not is_valid_platform(name):
            raise UnknownPlatformError(f"unknown platform '{name}'")
        with self._lock.write():
            if name in self._adapters:
                raise DuplicatePlatformError(f"platform '{name}' already registered")
            self._adapters[name] = create_platform(name, self.scope, self.project_root)

    def get(self, name: str) -> BasePlatform:
        with self._lock.read():
            adapter = self._adapters.get(name)
        if adapter is None:
            raise UnknownPlatformError(f"platform '{name}' is not registered")
        return adapter

    def all(self) -> list[BasePlatform]:
        with self._lock.read():
            return [self._adapters[n] for n in PLATFORM_NAMES if n in self._adapters]

    def available(self) -> list[BasePlatform]:
        """Registered platforms whose availability check passes."""
        return [adapter for adapter in self.all() if adapter.is_available()]

    def resolve_platforms(
        self,
        requested: str | Iterable[str] | None,
        defaults: Iterable[str] | None = None,
    ) -> list[BasePlatform]:
        """Turn the --platform flag into the adapters to operate on.

        ABOUTME: With names, returns exactly those platforms (availability not required)
        ABOUTME: Without names, returns available platforms, optionally limited to defaults

        Raises:
            UnknownPlatformError: Listing every unrecognized name
            NoPlatformsAvailableError: If nothing is installed
        """
        if isinstance(requested, str):
            requested = [requested]
        names = [n for n in (requested or []) if n]

        if names:
            invalid = [n for n in names if not is_valid_platform(n)]
            if invalid:
                valid = ", ".join(PLATFORM_NAMES)
                raise UnknownPlatformError(
                    f"unknown platform(s): {', '.join(invalid)} (valid: {valid})"
                )
            wanted = set(names)
            return [adapter for adapter in self.all() if adapter.name in wanted]

        adapters = self.available()
        if defaults is not None:
            allowed = set(defaults)
            adapters = [a for a in adapters if a.name in allowed]
        if not adapters:
            raise NoPlatformsAvailableError("no AI assistants detected on this system")
        return adapters


def new_registry(scope: str = "default", project_root: str | Path | None = None) -> Registry:
    """Build a registry with every known platform registered."""
    registry = Registry(scope, project_root)
    for name in PLATFORM_NAMES:
        registry.register(name)
    return registry
