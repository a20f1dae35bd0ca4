from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import (
    TYPE_CHECKING,
    Any,
    Generic,
    TypeVar,
    overload,
)

from ._errors import CyclicResolutionError, NotFoundError


logger = logging.getLogger(__name__)

T = TypeVar("T")

if TYPE_CHECKING:
    from collections.abc import Callable


class Lifetime(Enum):
    SINGLETON = "singleton"
    TRANSIENT = "transient"

    @classmethod
    def from_shared(cls, shared: bool) -> Lifetime:  # noqa: FBT001
        return cls.SINGLETON if shared else cls.TRANSIENT


@dataclass(frozen=True)
class Factory(Generic[T]):
    """Producer that builds the instance by calling ``func(container)``."""

    func: Callable[[Container], T]

    def produce(self, container: Container) -> T:
        return self.func(container)


@dataclass(frozen=True)
class Value(Generic[T]):
    """Producer wrapping a pre-built instance."""

    obj: T

    def produce(self, container: Container) -> T:  # noqa: ARG002
        return self.obj


Producer = Factory[Any] | Value[Any]


def as_producer(obj: object) -> Producer:
    """Classify a raw registration argument.

    Already tagged producers are kept, callables become a `Factory`,
    anything else is wrapped in a `Value`.
    """
    if isinstance(obj, (Factory, Value)):
        return obj
    if callable(obj):
        return Factory(obj)
    return Value(obj)


@dataclass(frozen=True)
class ServiceDefinition:
    identifier: str
    producer: Producer
    lifetime: Lifetime

    @property
    def shared(self) -> bool:
        return self.lifetime is Lifetime.SINGLETON


@dataclass(frozen=True)
class DeferredEntry:
    identifier: str
    factory: Callable[[Container], object]
    lifetime: Lifetime = Lifetime.SINGLETON


class Container:
    """Named service container with deferred registration.

    - register definitions eagerly (shared or transient)
    - defer a factory until the first lookup of its identifier
    - cache shared instances after their first successful resolution
    - detect cyclic resolution.

    All operations take a single reentrant lock, so producers may resolve
    their own dependencies from the same container.
    """

    def __init__(self) -> None:
        self._deferred: dict[str, DeferredEntry] = {}
        self._definitions: dict[str, ServiceDefinition] = {}
        self._instances: dict[str, Any] = {}
        self._lock = threading.RLock()
        # identifiers being resolved by the lock holder, outermost first
        self._resolving: list[str] = []

    def register(self, identifier: str, producer: object, *, shared: bool = True) -> None:
        """Register a service definition, replacing anything stored under `identifier`.

        Example:
          container.register("config", {"dsn": "sqlite://"})
          container.register("clock", lambda c: Clock(), shared=False)

        """
        with self._lock:
            self._store(identifier, as_producer(producer), Lifetime.from_shared(shared))

    def register_instance(self, identifier: str, instance: object) -> None:
        """Register a pre-built instance (always shared), even when it is callable."""
        with self._lock:
            self._store(identifier, Value(instance), Lifetime.SINGLETON)

    def defer(
        self,
        identifier: str,
        factory: Callable[[Container], object],
        *,
        shared: bool = True,
    ) -> None:
        """Defer a registration until `identifier` is first resolved.

        `factory` receives the container and returns the producer (a callable
        or a concrete value) of the definition created on first lookup.
        """
        if not callable(factory):
            msg = f"Deferred factory for {identifier!r} must be callable."
            raise TypeError(msg)

        with self._lock:
            if identifier in self._definitions or identifier in self._deferred:
                logger.debug("Overwriting registration of service %r", identifier)

            self._definitions.pop(identifier, None)
            self._instances.pop(identifier, None)
            self._deferred[identifier] = DeferredEntry(identifier, factory, Lifetime.from_shared(shared))
            logger.debug("Deferred registration of service %r", identifier)

    def singleton(self, identifier: str, factory: Callable[[Container], object]) -> None:
        """Register a lazily built shared service.

        `factory(container)` runs on the first resolve; its result is cached.
        """
        with self._lock:
            self._store(identifier, Factory(factory), Lifetime.SINGLETON)

    def transient(self, identifier: str, factory: Callable[[Container], object]) -> None:
        """Register a service built by `factory(container)` on every resolve."""
        with self._lock:
            self._store(identifier, Factory(factory), Lifetime.TRANSIENT)

    @overload
    def resolve(self, identifier: str) -> Any: ...

    @overload
    def resolve(self, identifier: str, kind: type[T]) -> T: ...

    def resolve(self, identifier: str, kind: type[T] | None = None) -> Any:
        """Resolve `identifier` to an instance.

        - A deferred entry is promoted into a definition first (once).
        - A cached shared instance is returned as is.
        - Otherwise the definition's producer builds the instance.
        `kind` optionally checks the type of the resolved instance.
        """
        with self._lock:
            chain = self._resolving
            if identifier in chain:
                raise CyclicResolutionError([*chain[chain.index(identifier) :], identifier])

            chain.append(identifier)
            try:
                instance = self._resolve(identifier)
            finally:
                chain.pop()

        if kind is not None and not isinstance(instance, kind):
            msg = f"Resolved instance {type(instance).__name__} is not an instance of {kind.__name__}"
            raise TypeError(msg)

        return instance

    def _resolve(self, identifier: str) -> Any:
        entry = self._deferred.get(identifier)
        if entry is not None:
            # The entry stays deferred if its factory raises
            producer = as_producer(entry.factory(self))
            self._deferred.pop(identifier, None)
            self._store(identifier, producer, entry.lifetime)
            logger.debug("Promoted deferred service %r (%s)", identifier, entry.lifetime.value)

        if identifier in self._instances:
            return self._instances[identifier]

        definition = self._definitions.get(identifier)
        if definition is None:
            raise NotFoundError(identifier)

        instance = definition.producer.produce(self)

        # A producer may have replaced or removed its own definition meanwhile
        if definition.shared and self._definitions.get(identifier) is definition:
            self._instances[identifier] = instance

        return instance

    def has(self, identifier: str) -> bool:
        """Whether `identifier` is defined or deferred. Never instantiates anything."""
        with self._lock:
            return identifier in self._definitions or identifier in self._deferred

    def __contains__(self, identifier: object) -> bool:
        return isinstance(identifier, str) and self.has(identifier)

    def is_resolved(self, identifier: str) -> bool:
        """Whether a shared instance is cached for `identifier`."""
        with self._lock:
            return identifier in self._instances

    def identifiers(self) -> list[str]:
        with self._lock:
            return sorted(self._definitions.keys() | self._deferred.keys())

    def __len__(self) -> int:
        with self._lock:
            return len(self._definitions.keys() | self._deferred.keys())

    def remove(self, identifier: str) -> None:
        """Forget `identifier` entirely, including its cached instance. No-op when absent."""
        with self._lock:
            self._deferred.pop(identifier, None)
            self._definitions.pop(identifier, None)
            self._instances.pop(identifier, None)
            logger.debug("Removed service %r", identifier)

    def reset(self) -> None:
        """Drop every definition, deferred entry and cached instance."""
        with self._lock:
            self._deferred.clear()
            self._definitions.clear()
            self._instances.clear()
            logger.debug("Container reset")

    def _store(self, identifier: str, producer: Producer, lifetime: Lifetime) -> None:
        if identifier in self._definitions or identifier in self._deferred:
            logger.debug("Overwriting registration of service %r", identifier)

        self._deferred.pop(identifier, None)
        self._instances.pop(identifier, None)
        self._definitions[identifier] = ServiceDefinition(identifier, producer, lifetime)
