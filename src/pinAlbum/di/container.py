from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Type

from .lifetime import Lifetime
from ..errors import CircularDependencyError, ResolutionError


@dataclass(frozen=True)
class Registration:
    interface: Type
    factory: Callable[[], Any]
    lifetime: Lifetime = Lifetime.TRANSIENT


class Container:
    """Lazily builds the application graph.

    Singletons are created on first resolve, under a lock, so pipeline
    threads that resolve a service concurrently share one instance.
    """

    def __init__(self):
        self._registrations: Dict[Type, Registration] = {}
        self._singletons: Dict[Type, Any] = {}
        self._lock = threading.RLock()
        self._local = threading.local()

    # --- Registration ---

    def register_factory(self, interface: Type, factory: Callable[[], Any], lifetime: Lifetime = Lifetime.TRANSIENT):
        with self._lock:
            self._registrations[interface] = Registration(interface, factory, lifetime)
            self._singletons.pop(interface, None)

    def register_singleton(self, interface: Type, implementation: Optional[Type] = None):
        """Build ``implementation()`` (or ``interface()``) once, on first use."""
        self.register_factory(interface, implementation or interface, Lifetime.SINGLETON)

    def register_instance(self, interface: Type, instance: Any):
        with self._lock:
            self._registrations[interface] = Registration(interface, lambda: instance, Lifetime.SINGLETON)
            self._singletons[interface] = instance

    def is_registered(self, interface: Type) -> bool:
        return interface in self._registrations

    # --- Resolution ---

    def resolve(self, interface: Type) -> Any:
        reg = self._registrations.get(interface)
        if reg is None:
            raise ResolutionError(f"No registration found for {interface.__name__}")

        chain = self._chain()
        if interface in chain:
            path = " -> ".join(t.__name__ for t in chain[chain.index(interface):] + [interface])
            raise CircularDependencyError(f"Circular dependency: {path}")

        chain.append(interface)
        try:
            if reg.lifetime is not Lifetime.SINGLETON:
                return reg.factory()
            with self._lock:
                if interface not in self._singletons:
                    self._singletons[interface] = reg.factory()
                return self._singletons[interface]
        finally:
            chain.pop()

    def resolved_instance(self, interface: Type) -> Optional[Any]:
        """Return the singleton for *interface* if it has already been built."""
        return self._singletons.get(interface)

    def _chain(self) -> List[Type]:
        chain = getattr(self._local, "chain", None)
        if chain is None:
            chain = self._local.chain = []
        return chain
