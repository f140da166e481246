"""Locate and cache the phone set that applies to a processing context.

Resolution order for an element in a document: the voice enclosing the
element, then the default voice for the document language, then the
``<locale prefix>.resourceset`` property. Loaded phone sets are cached by
identifier (the property value) for the lifetime of the process.
"""

from __future__ import annotations

import logging
import threading
from typing import BinaryIO, Callable, Dict, Optional

from .config import ConfigurationError, PropertyStore, first_meaningful_message, get_store
from .document import DocumentContext
from .phoneset import parse_phone_set
from .voices import VoiceRegistry, default_voices

log = logging.getLogger(__name__)

RESOURCE_SUFFIX = ".resourceset"

Parser = Callable[[BinaryIO, str], object]


class ResourceCache:
    """Identifier to resource mapping with at most one load per identifier.

    A second thread asking for an identifier that is still loading waits for
    the first load and receives its result.
    """

    def __init__(self) -> None:
        self._resources: Dict[str, object] = {}
        self._loading: Dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def get(self, identifier: str) -> Optional[object]:
        with self._lock:
            return self._resources.get(identifier)

    def __contains__(self, identifier: str) -> bool:
        with self._lock:
            return identifier in self._resources

    def __len__(self) -> int:
        with self._lock:
            return len(self._resources)

    def get_or_load(self, identifier: str, loader: Callable[[], object]) -> object:
        with self._lock:
            if identifier in self._resources:
                return self._resources[identifier]
            load_lock = self._loading.setdefault(identifier, threading.Lock())
        with load_lock:
            with self._lock:
                if identifier in self._resources:
                    return self._resources[identifier]
            try:
                resource = loader()
            except BaseException:
                with self._lock:
                    if self._loading.get(identifier) is load_lock:
                        del self._loading[identifier]
                raise
            with self._lock:
                self._resources[identifier] = resource
                self._loading.pop(identifier, None)
            log.info("Loaded resource '%s'", identifier)
            return resource

    def clear(self) -> None:
        with self._lock:
            self._resources.clear()


default_cache = ResourceCache()


class ResourceResolver:
    def __init__(
        self,
        store: Optional[PropertyStore] = None,
        cache: Optional[ResourceCache] = None,
        voices: Optional[VoiceRegistry] = None,
        parser: Parser = parse_phone_set,
    ) -> None:
        self._store = store
        self.cache = cache if cache is not None else default_cache
        self.voices = voices if voices is not None else default_voices
        self.parser = parser

    @property
    def store(self) -> PropertyStore:
        return self._store or get_store()

    def load_required(self, property_name: str) -> object:
        """Load the resource named by ``property_name``; never returns None."""

        store = self.store
        identifier = store.get_property(property_name)
        if identifier is None:
            raise ConfigurationError(f"No such property: {property_name}")
        cached = self.cache.get(identifier)
        if cached is not None:
            return cached

        def _load() -> object:
            try:
                stream = store.open_stream(property_name)
            except OSError as exc:
                raise ConfigurationError(
                    f"Cannot open resource stream for property {property_name}: "
                    f"{first_meaningful_message(exc)}"
                ) from exc
            with stream:
                try:
                    return self.parser(stream, identifier)
                except Exception as exc:
                    raise ConfigurationError(
                        f"Cannot load resource '{identifier}' from property "
                        f"{property_name}: {first_meaningful_message(exc)}"
                    ) from exc

        return self.cache.get_or_load(identifier, _load)

    def resolve_for_locale(self, locale: Optional[str]) -> Optional[object]:
        prefix = self.store.locale_prefix(locale)
        if prefix is None:
            log.debug("No resource configured for locale %s", locale)
            return None
        return self.load_required(prefix + RESOURCE_SUFFIX)

    def resolve_for_context(self, context: DocumentContext) -> Optional[object]:
        """Resource for ``context``, or None if nothing determines one."""

        language = context.language()
        voice = self.voices.voice_at(context.enclosing_voice(), language)
        if voice is None:
            voice = self.voices.default_voice_for(language)
        if voice is not None:
            return voice.own_resource()
        return self.resolve_for_locale(language)


_resolver: Optional[ResourceResolver] = None
_resolver_lock = threading.Lock()


def get_resolver() -> ResourceResolver:
    global _resolver
    if _resolver is None:
        with _resolver_lock:
            if _resolver is None:
                _resolver = ResourceResolver()
    return _resolver


def set_resolver(resolver: Optional[ResourceResolver]) -> None:
    global _resolver
    with _resolver_lock:
        _resolver = resolver


def load_required(property_name: str) -> object:
    return get_resolver().load_required(property_name)


def resolve_for_locale(locale: Optional[str]) -> Optional[object]:
    return get_resolver().resolve_for_locale(locale)


def resolve_for_context(context: DocumentContext) -> Optional[object]:
    return get_resolver().resolve_for_context(context)
