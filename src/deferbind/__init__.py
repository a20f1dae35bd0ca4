"""Named service container with deferred registration.

This package provides a small dependency resolution container: services are
registered under string identifiers, either eagerly (shared or transient) or
as deferred factories materialized on first lookup.

Exports:
- `Container`: the container; construct one and pass it to the code that needs it.
- `Lifetime`: whether a definition's instance is shared (singleton) or transient.
- `Factory` / `Value`: the two kinds of producer a definition can hold.
- `NotFoundError`, `CyclicResolutionError`: raised by `Container.resolve`.
"""

from ._container import (
    Container,
    DeferredEntry,
    Factory,
    Lifetime,
    Producer,
    ServiceDefinition,
    Value,
    as_producer,
)
from ._errors import CyclicResolutionError, NotFoundError, ResolutionError


__all__ = [
    "Container",
    "CyclicResolutionError",
    "DeferredEntry",
    "Factory",
    "Lifetime",
    "NotFoundError",
    "Producer",
    "ResolutionError",
    "ServiceDefinition",
    "Value",
    "as_producer",
]
