"""Configuration store shared by the runtime services.

Properties are flat ``name=value`` strings loaded from ``*.config`` files in
the configuration directory. The store also knows which locales are
configured and can open the data files that property values point to.
"""

from __future__ import annotations

from importlib import resources as importlib_resources
from pathlib import Path
import io
import os
import platform
import threading
from typing import (
    BinaryIO,
    Callable,
    Dict,
    Generic,
    Iterable,
    Mapping,
    Optional,
    TypeVar,
)

from dotenv import dotenv_values

from .locales import locale_language, string_to_locale
from .paths import (
    VR_CACHE_ENV,
    VR_CONFIG_ENV,
    audio_cache_dir,
    config_dir,
    config_dir_override,
    default_config_dir,
)

LOCALES_PROPERTY = "locales"
PACKAGE_SCHEME = "package:"
CONFIG_SUFFIX = ".config"

_transition_lock = threading.RLock()

T = TypeVar("T")


class ConfigurationError(RuntimeError):
    """Raised when configuration or a configured component is unusable."""


def first_meaningful_message(exc: BaseException) -> str:
    """Return the first non-empty message along the exception chain."""

    current: Optional[BaseException] = exc
    innermost = exc
    seen = set()
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        message = str(current).strip()
        if message:
            return message
        innermost = current
        current = current.__cause__ or current.__context__
    return type(innermost).__name__


class OnceValue(Generic[T]):
    """A value computed on first access and immutable afterwards."""

    def __init__(self, loader: Callable[[], T]) -> None:
        self._loader = loader
        self._lock = threading.Lock()
        self._value: Optional[T] = None
        self._loaded = False

    def get(self) -> T:
        if not self._loaded:
            with self._lock:
                if not self._loaded:
                    self._value = self._loader()
                    self._loaded = True
        return self._value  # type: ignore[return-value]

    @property
    def loaded(self) -> bool:
        return self._loaded


class PropertyStore:
    """Read-only property lookup plus stream access for configured data files."""

    def __init__(
        self,
        properties: Optional[Mapping[str, Optional[str]]] = None,
        base_dir: Optional[Path] = None,
        locales: Iterable[str] = (),
    ) -> None:
        self._properties: Dict[str, str] = {
            key: value for key, value in (properties or {}).items() if value is not None
        }
        self.base_dir = Path(base_dir) if base_dir is not None else None
        declared = self._properties.get(LOCALES_PROPERTY, "").split()
        self._locales = {
            string_to_locale(tag) for tag in [*declared, *locales] if string_to_locale(tag)
        }

    @classmethod
    def from_files(
        cls, paths: Iterable[Path], base_dir: Optional[Path] = None
    ) -> "PropertyStore":
        """Merge properties from ``paths``; later files override earlier ones."""

        merged: Dict[str, Optional[str]] = {}
        for path in paths:
            path = Path(path)
            if not path.is_file():
                raise ConfigurationError(f"Config file '{path}' does not exist.")
            merged.update(dotenv_values(path, interpolate=False, encoding="utf-8"))
        return cls(merged, base_dir=base_dir)

    @classmethod
    def from_directory(cls, directory: Path) -> "PropertyStore":
        directory = Path(directory)
        if not directory.is_dir():
            raise ConfigurationError(f"Config directory '{directory}' does not exist.")
        files = sorted(directory.glob(f"*{CONFIG_SUFFIX}"))
        return cls.from_files(files, base_dir=directory)

    def get_property(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self._properties.get(name, default)

    def need_property(self, name: str) -> str:
        value = self._properties.get(name)
        if value is None:
            raise ConfigurationError(f"No such property: {name}")
        return value

    def get_integer(self, name: str, default: int) -> int:
        value = self._properties.get(name)
        if value is None:
            return default
        try:
            return int(value.strip())
        except ValueError as exc:
            raise ConfigurationError(
                f"Property '{name}' must be an integer, got '{value}'."
            ) from exc

    def get_boolean(self, name: str, default: bool) -> bool:
        value = self._properties.get(name)
        if value is None:
            return default
        return value.strip().lower() in ("1", "true", "yes", "on")

    def names(self) -> Iterable[str]:
        return sorted(self._properties)

    def open_stream(self, name: str) -> BinaryIO:
        """Open the data file referenced by property ``name`` for reading.

        Values are filesystem paths (relative ones resolve against the
        config directory) or ``package:<package>/<resource>`` references
        to data shipped inside an installed package.
        """

        value = self._properties.get(name)
        if value is None:
            raise FileNotFoundError(f"No such property: {name}")
        value = value.strip()
        if value.startswith(PACKAGE_SCHEME):
            package, _, resource = value[len(PACKAGE_SCHEME):].partition("/")
            try:
                target = importlib_resources.files(package).joinpath(resource)
            except ModuleNotFoundError as exc:
                raise FileNotFoundError(
                    f"Package '{package}' for property {name} is not installed"
                ) from exc
            if not target.is_file():
                raise FileNotFoundError(f"Packaged resource '{value}' not found")
            return io.BytesIO(target.read_bytes())
        path = Path(value).expanduser()
        if not path.is_absolute() and self.base_dir is not None:
            path = self.base_dir / path
        return open(path, "rb")

    @property
    def lock(self):
        """Lock serializing startup and other process-wide transitions.

        Every store hands out the same lock, so replacing the global store
        while a start is in progress still blocks late callers.
        """
        return _transition_lock

    @property
    def locales(self) -> Iterable[str]:
        return sorted(self._locales)

    def locale_prefix(self, locale: Optional[str]) -> Optional[str]:
        """Return the property prefix configured for ``locale``.

        The full locale wins over its language; unknown locales give None.
        """

        normalized = string_to_locale(locale)
        if normalized is None:
            return None
        if normalized in self._locales:
            return normalized
        language = locale_language(normalized)
        if language in self._locales:
            return language
        return None


def load_store(directory: Optional[Path] = None) -> PropertyStore:
    """Build a store from every ``*.config`` file in the config directory.

    Without an explicit directory, ``VR_CONFIG_DIR`` is used, then the
    per-user default. Only the default may be missing, giving an empty store.
    """

    if directory is None:
        directory = config_dir_override()
    if directory is None:
        directory = default_config_dir()
        if not directory.is_dir():
            return PropertyStore(base_dir=directory)
    return PropertyStore.from_directory(directory)


_store: Optional[PropertyStore] = None
_store_lock = threading.Lock()


def get_store() -> PropertyStore:
    """Get or create the process-wide store."""
    global _store
    if _store is None:
        with _store_lock:
            if _store is None:
                _store = load_store()
    return _store


def set_store(store: PropertyStore) -> None:
    global _store
    with _store_lock:
        _store = store


def reset_store() -> None:
    global _store
    with _store_lock:
        _store = None


def get_paths() -> Dict[str, object]:
    """Return a dictionary describing resolved paths and env overrides."""

    return {
        "platform": platform.system(),
        "platform_detail": platform.platform(),
        "config_dir": str(config_dir()),
        "cache_dir": str(audio_cache_dir()),
        "env": {
            VR_CONFIG_ENV: os.environ.get(VR_CONFIG_ENV),
            VR_CACHE_ENV: os.environ.get(VR_CACHE_ENV),
        },
    }


def describe_environment(store: Optional[PropertyStore] = None) -> str:
    """Human friendly summary used when --describe is invoked."""

    data = get_paths()
    store = store or get_store()
    fields = [
        f"platform={data['platform_detail']}",
        f"config_dir={store.base_dir or data['config_dir']}",
        f"cache_dir={data['cache_dir']}",
        f"locales={','.join(store.locales) or 'none'}",
    ]
    return ", ".join(fields)
