"""Build components from textual descriptors.

A descriptor names a registered type and optionally lists string arguments::

    voiceruntime.modules.Tokenizer
    voiceruntime.modules.Lexicon(de, $de.lexicon)

Arguments starting with ``$`` are replaced by the value of the configuration
property named after the ``$``. Types are looked up in a
:class:`ComponentRegistry` rather than imported by name.
"""

from __future__ import annotations

from dataclasses import dataclass
import inspect
import logging
import threading
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Tuple

from .config import ConfigurationError, PropertyStore, first_meaningful_message, get_store

log = logging.getLogger(__name__)

INDIRECT_PREFIX = "$"

Factory = Callable[..., object]


@dataclass(frozen=True)
class ObjectDescriptor:
    type_name: str
    raw_args: Optional[Tuple[str, ...]] = None

    @classmethod
    def parse(cls, text: str) -> "ObjectDescriptor":
        if "(" not in text:
            return cls(type_name=text.strip())
        first_open = text.index("(")
        last_close = text.rfind(")")
        if last_close < first_open:
            raise ValueError(f"Unbalanced parentheses in '{text}'")
        inner = text[first_open + 1:last_close]
        args = tuple(inner.split(",")) if inner.strip() else ()
        return cls(type_name=text[:first_open].strip(), raw_args=args)

    def resolve_args(self, store: PropertyStore) -> Optional[List[str]]:
        if self.raw_args is None:
            return None
        resolved = []
        for arg in self.raw_args:
            if arg.startswith(INDIRECT_PREFIX):
                arg = store.need_property(arg[len(INDIRECT_PREFIX):])
            resolved.append(arg.strip())
        return resolved


def _positional_arities(factory: Factory) -> FrozenSet[int]:
    signature = inspect.signature(factory)
    required = 0
    optional = 0
    for param in signature.parameters.values():
        if param.kind == param.VAR_POSITIONAL:
            raise ValueError("Factories taking *args must declare their arities explicitly")
        if param.kind not in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            continue
        if param.default is param.empty:
            required += 1
        else:
            optional += 1
    return frozenset(range(required, required + optional + 1))


class ComponentRegistry:
    """Maps type names to factories that take positional string arguments."""

    def __init__(self) -> None:
        self._factories: Dict[str, Tuple[Factory, FrozenSet[int]]] = {}
        self._lock = threading.Lock()

    def register(
        self,
        type_name: str,
        factory: Optional[Factory] = None,
        arities: Optional[Iterable[int]] = None,
    ):
        """Register ``factory`` under ``type_name``.

        Without ``factory`` this returns a decorator, so classes can register
        themselves::

            @registry.register("voiceruntime.modules.Tokenizer")
            class Tokenizer: ...
        """

        def _register(target: Factory) -> Factory:
            accepted = frozenset(arities) if arities is not None else _positional_arities(target)
            with self._lock:
                if type_name in self._factories:
                    log.warning("Replacing factory registered for %s", type_name)
                self._factories[type_name] = (target, accepted)
            return target

        if factory is None:
            return _register
        return _register(factory)

    def unregister(self, type_name: str) -> None:
        with self._lock:
            self._factories.pop(type_name, None)

    def lookup(self, type_name: str) -> Tuple[Factory, FrozenSet[int]]:
        with self._lock:
            entry = self._factories.get(type_name)
        if entry is None:
            raise LookupError(f"No factory registered for type '{type_name}'")
        return entry

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._factories)

    def __contains__(self, type_name: str) -> bool:
        with self._lock:
            return type_name in self._factories

    def create(self, type_name: str, args: Optional[List[str]] = None) -> object:
        factory, accepted = self.lookup(type_name)
        if args is None:
            if 0 not in accepted:
                raise TypeError(f"{type_name} has no no-argument constructor")
            return factory()
        if len(args) not in accepted:
            raise TypeError(
                f"{type_name} has no constructor taking {len(args)} string argument(s)"
            )
        return factory(*args)


default_registry = ComponentRegistry()
register = default_registry.register


def instantiate(
    descriptor: str,
    store: Optional[PropertyStore] = None,
    registry: Optional[ComponentRegistry] = None,
) -> object:
    """Create the object described by ``descriptor``.

    Raises ConfigurationError naming the descriptor if anything goes wrong.
    """

    registry = registry or default_registry
    try:
        parsed = ObjectDescriptor.parse(descriptor)
        args = parsed.resolve_args(store or get_store())
        obj = registry.create(parsed.type_name, args)
    except Exception as exc:
        raise ConfigurationError(
            f"Cannot instantiate object from '{descriptor}': {first_meaningful_message(exc)}"
        ) from exc
    log.debug("Instantiated %s from '%s'", type(obj).__name__, descriptor)
    return obj
