"""Low-memory detection based on the headroom psutil reports."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

import psutil

from .config import OnceValue, PropertyStore, get_store

log = logging.getLogger(__name__)

LOW_MEMORY_PROPERTY = "voiceruntime.lowmemory"
DEFAULT_LOW_MEMORY_THRESHOLD = 10_000_000


def available_memory() -> int:
    """Bytes of memory still available for processing."""
    return int(psutil.virtual_memory().available)


class MemoryPolicy:
    """Compares available memory against a threshold read once from config.

    Memory is low below the threshold and very low below half of it. The
    threshold comes from the ``voiceruntime.lowmemory`` property (bytes) and
    falls back to 10,000,000 if the property cannot be read.
    """

    def __init__(
        self,
        store: Optional[PropertyStore] = None,
        reader: Optional[Callable[[], int]] = None,
    ) -> None:
        self._store = store
        self._reader = reader
        self._threshold = OnceValue(self._read_threshold)

    def _read_threshold(self) -> int:
        try:
            store = self._store or get_store()
            return store.get_integer(LOW_MEMORY_PROPERTY, DEFAULT_LOW_MEMORY_THRESHOLD)
        except Exception as exc:
            log.debug("Using default low memory threshold: %s", exc)
            return DEFAULT_LOW_MEMORY_THRESHOLD

    @property
    def threshold(self) -> int:
        return self._threshold.get()

    def available(self) -> int:
        if self._reader is not None:
            return self._reader()
        return available_memory()

    def is_low_memory(self) -> bool:
        return self.available() < self.threshold

    def is_very_low_memory(self) -> bool:
        return self.available() < self.threshold // 2


_policy: Optional[MemoryPolicy] = None
_policy_lock = threading.Lock()


def get_memory_policy() -> MemoryPolicy:
    global _policy
    if _policy is None:
        with _policy_lock:
            if _policy is None:
                _policy = MemoryPolicy()
    return _policy


def set_memory_policy(policy: Optional[MemoryPolicy]) -> None:
    """Install ``policy`` process-wide; None restores a fresh default on next use."""
    global _policy
    with _policy_lock:
        _policy = policy


def is_low_memory() -> bool:
    return get_memory_policy().is_low_memory()


def is_very_low_memory() -> bool:
    return get_memory_policy().is_very_low_memory()
