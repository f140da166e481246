"""Process-wide runtime lifecycle and the idempotent start guard."""

from __future__ import annotations

from enum import Enum
import logging
import threading
from typing import List, Optional

from .config import PropertyStore, get_store
from .factory import ComponentRegistry, instantiate

log = logging.getLogger(__name__)

MODULES_PROPERTY = "modules.classes.list"


class SystemState(Enum):
    OFF = "off"
    STARTING = "starting"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"


class Runtime:
    """Instantiates the configured modules and starts them in order.

    Modules are listed as descriptors in the whitespace separated
    ``modules.classes.list`` property.
    """

    def __init__(
        self,
        store: Optional[PropertyStore] = None,
        registry: Optional[ComponentRegistry] = None,
    ) -> None:
        self._store = store
        self._registry = registry
        self.state = SystemState.OFF
        self.modules: List[object] = []
        self.start_count = 0

    @property
    def store(self) -> PropertyStore:
        return self._store or get_store()

    def startup(self) -> None:
        if self.state is not SystemState.OFF:
            raise RuntimeError(f"Cannot start runtime in state {self.state.value}")
        self.state = SystemState.STARTING
        self.start_count += 1
        log.info("Starting runtime")
        try:
            descriptors = (self.store.get_property(MODULES_PROPERTY) or "").split()
            for descriptor in descriptors:
                module = instantiate(descriptor, store=self.store, registry=self._registry)
                start = getattr(module, "startup", None)
                if callable(start):
                    start()
                self.modules.append(module)
        except Exception:
            log.exception("Runtime startup failed")
            self._stop_modules()
            self.state = SystemState.OFF
            raise
        self.state = SystemState.RUNNING
        log.info("Runtime started with %d module(s)", len(self.modules))

    def shutdown(self) -> None:
        if self.state is not SystemState.RUNNING:
            return
        self.state = SystemState.SHUTTING_DOWN
        self._stop_modules()
        self.state = SystemState.OFF
        log.info("Runtime shut down")

    def _stop_modules(self) -> None:
        for module in reversed(self.modules):
            stop = getattr(module, "shutdown", None)
            if not callable(stop):
                continue
            try:
                stop()
            except Exception:
                log.exception("Error shutting down %s", type(module).__name__)
        self.modules.clear()


_runtime: Optional[Runtime] = None
_runtime_lock = threading.Lock()


def get_runtime() -> Runtime:
    global _runtime
    if _runtime is None:
        with _runtime_lock:
            if _runtime is None:
                _runtime = Runtime()
    return _runtime


def set_runtime(runtime: Optional[Runtime]) -> None:
    global _runtime
    with _runtime_lock:
        _runtime = runtime


def ensure_started(
    runtime: Optional[Runtime] = None, store: Optional[PropertyStore] = None
) -> Runtime:
    """Start ``runtime`` unless it is already running; safe to call from any thread."""

    runtime = runtime or get_runtime()
    store = store or get_store()
    with store.lock:
        if runtime.state is SystemState.OFF:
            runtime.startup()
    return runtime
