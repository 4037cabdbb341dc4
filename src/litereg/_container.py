from __future__ import annotations

import logging
import threading
import weakref
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Mapping

    Resolver = Callable[["Container"], Any]


class Kind(Enum):
    FACTORY = "factory"
    SERVICE = "service"
    COMPUTED = "computed"


@dataclass(frozen=True, eq=False)
class Definition:
    """A callable tagged with how a container resolves it.

    The tag never changes. Detaching (by `extend`, `delete` or `reset`) is
    recorded by the container that does it, so a definition shared between
    containers stays classified in the others.
    """

    fn: Resolver
    kind: Kind

    def __call__(self, container: Container) -> Any:
        return self.fn(container)


class RegistryError(Exception):
    pass


class NotFoundError(RegistryError, KeyError):
    def __str__(self) -> str:
        # KeyError would repr() the message
        return str(self.args[0]) if self.args else ""


class ContainerError(RegistryError):
    pass


class Container:
    """Keyed registry of plain values, factories, services and computed entries.

    - plain values resolve as themselves
    - factories are called on every `get`
    - services are called once per identifier and memoized
    - computed entries are called on every `get`, typically reading other entries.
    """

    def __init__(self, entries: Mapping[str, object] | None = None) -> None:
        self._entries: dict[str, object] = {}
        self._instances: dict[str, object] = {}
        # definitions this container no longer classifies
        self._detached: weakref.WeakSet[Definition] = weakref.WeakSet()
        self._lock = threading.RLock()
        self.reset()
        if entries:
            # Seeded values are stored verbatim, never classified.
            self._entries.update(entries)

    def reset(self) -> Container:
        """Drop every entry and cached instance."""
        with self._lock:
            for value in self._entries.values():
                if isinstance(value, Definition):
                    self._detached.add(value)
            self._entries = {}
            self._instances = {}
        return self

    def has(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def raw(self, key: str) -> object:
        """Return the stored definition for `key` without resolving it."""
        with self._lock:
            try:
                return self._entries[key]
            except KeyError:
                msg = f'No entry was found for "{key}" identifier.'
                raise NotFoundError(msg) from None

    def get(self, key: str) -> Any:
        """Resolve `key`.

        Cached service instances win; otherwise the raw value is resolved by
        its kind, checked in the order factory, service, computed.
        """
        with self._lock:
            if key in self._instances:
                return self._instances[key]

            value = self.raw(key)

            if self.is_factory(value):
                return value(self)

            if self.is_service(value):
                instance = value(self)
                logger.debug("Service %r instantiated", key)
                self._instances[key] = instance
                return instance

            if self.is_computed(value):
                return value(self)

            return value

    def set(self, key: str, value: object) -> Container:
        """Store `value` under `key`, dropping any instance cached for it."""
        with self._lock:
            self._entries[key] = value
            self._instances.pop(key, None)
        return self

    def delete(self, key: str) -> Container:
        with self._lock:
            if key not in self._entries:
                return self

            value = self._entries.pop(key)
            kind = self._kind_of(value)
            if kind is not None:
                logger.debug("Detaching %s definition %r", kind.value, key)
                self._detached.add(value)  # type: ignore[arg-type]
            self._instances.pop(key, None)
        return self

    def delete_instance(self, key: str) -> Container:
        with self._lock:
            self._instances.pop(key, None)
        return self

    def delete_all_instances(self) -> Container:
        with self._lock:
            self._instances.clear()
        return self

    def factory(self, fn: Resolver) -> Definition:
        """Mark `fn` as a factory: a new result on every `get`.

        Example:
          container.set("request", container.factory(lambda c: Request(c.get("config"))))

        """
        return self._tag(fn, Kind.FACTORY)

    def service(self, fn: Resolver) -> Definition:
        """Mark `fn` as a service: resolved once per identifier, then cached."""
        return self._tag(fn, Kind.SERVICE)

    def computed(self, fn: Resolver) -> Definition:
        """Mark `fn` as a computed value: recomputed on every `get`, never cached."""
        return self._tag(fn, Kind.COMPUTED)

    def is_factory(self, value: object) -> bool:
        return self._kind_of(value) is Kind.FACTORY

    def is_service(self, value: object) -> bool:
        return self._kind_of(value) is Kind.SERVICE

    def is_computed(self, value: object) -> bool:
        return self._kind_of(value) is Kind.COMPUTED

    def extend(self, key: str, transform: Callable[[Any, Container], Any]) -> Definition:
        """Wrap the definition stored under `key` with `transform`.

        The new definition resolves the original, then returns
        `transform(result, container)`. It keeps the original's kind, so an
        extended service is still memoized.

        Example:
          container.extend("db", lambda db, c: db.with_logging(c.get("logger")))

        """
        with self._lock:
            original = self.raw(key)
            kind = self._kind_of(original)
            if kind is None:
                msg = f'Identifier "{key}" does not contain an object definition.'
                raise ContainerError(msg)

            def extended(container: Container) -> Any:
                return transform(original(container), container)

            definition = Definition(fn=extended, kind=kind)
            self._detached.add(original)  # type: ignore[arg-type]
            self._entries[key] = definition
            logger.debug("Extended %s definition %r", kind.value, key)
            return definition

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def count(self) -> int:
        with self._lock:
            return len(self._entries)

    def items(self) -> Iterator[tuple[str, Any]]:
        """Yield `(key, resolved value)` pairs in insertion order.

        Keys are snapshotted when iteration starts and values resolved lazily,
        so an entry deleted mid-iteration raises `NotFoundError` when reached
        and entries added mid-iteration are not visited.
        """
        for key in self.keys():
            yield key, self.get(key)

    def _tag(self, fn: Resolver, kind: Kind) -> Definition:
        if not callable(fn):
            msg = f"Cannot register {type(fn).__name__} as a {kind.value}: not callable"
            raise TypeError(msg)
        if isinstance(fn, Definition):
            fn = fn.fn
        return Definition(fn=fn, kind=kind)

    def _kind_of(self, value: object) -> Kind | None:
        if isinstance(value, Definition) and value not in self._detached:
            return value.kind
        return None

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    def __getitem__(self, key: str) -> Any:
        return self.get(key)

    def __setitem__(self, key: str, value: object) -> None:
        self.set(key, value)

    def __delitem__(self, key: str) -> None:
        self.delete(key)

    def __iter__(self) -> Iterator[tuple[str, Any]]:
        return self.items()

    def __len__(self) -> int:
        return self.count()

    def __repr__(self) -> str:
        with self._lock:
            kinds = [self._kind_of(v) for v in self._entries.values()]
        counts = ", ".join(f"{kind.value}={kinds.count(kind)}" for kind in Kind)
        return f"<{type(self).__name__} entries={len(kinds)}, {counts}>"
