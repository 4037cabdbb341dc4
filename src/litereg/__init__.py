"""Minimal dependency injection registry.

This package provides a small keyed registry for Python, storing plain values
alongside lazily resolved definitions, with the ability to extend a
definition after it has been registered.

Exports:
- `Container`: The registry. Stores entries by string key and resolves them on `get`.
- `Definition`: A callable tagged with its `Kind`, as returned by
  `Container.factory()`, `Container.service()` and `Container.computed()`.
- `Kind`: Enum of definition kinds (factory, service or computed).
- `NotFoundError`: Raised when a key has no entry.
- `ContainerError`: Raised when a plain value is extended.
- `RegistryError`: Common base of the two errors above.
"""

from ._container import Container, ContainerError, Definition, Kind, NotFoundError, RegistryError


__all__ = ["Container", "ContainerError", "Definition", "Kind", "NotFoundError", "RegistryError"]
