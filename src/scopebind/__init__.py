"""Scoped dependency injection container.

This package resolves object graphs from a mapping of dependency keys to
producers. Every registration lives in a named scope, and every resolved
instance is memoized in the same (key, scope) slot until it is destroyed or
replaced.

Exports:
- `Container`: registry, instance cache and the recursive resolver.
- `Dependency`: an entry of a dependency declaration, optionally pinned to a scope.
- `InjectFrom`: `Annotated` marker pinning the scope of a constructor parameter.
- `GLOBAL_SCOPE`: the scope used when none is given (`"#global#"`).
- Module-level `inject`, `replace_with`, `destroy`, `service`, ... bound to
  `default_container`.
"""

from ._container import Container, DependencyNotFoundError, InjectFrom, ResolutionError
from ._default import (
    default_container,
    destroy,
    inject,
    register_for,
    register_instance,
    register_self,
    replace_with,
    reset,
    service,
    service_for,
)
from ._registry import GLOBAL_SCOPE, Dependency, ProducerKind, Registration


__all__ = [
    "GLOBAL_SCOPE",
    "Container",
    "Dependency",
    "DependencyNotFoundError",
    "InjectFrom",
    "ProducerKind",
    "Registration",
    "ResolutionError",
    "default_container",
    "destroy",
    "inject",
    "register_for",
    "register_instance",
    "register_self",
    "replace_with",
    "reset",
    "service",
    "service_for",
]
