from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable, Iterable

GLOBAL_SCOPE = "#global#"


class ProducerKind(Enum):
    CONSTRUCTOR = "constructor"
    FACTORY = "factory"


@dataclass(frozen=True)
class Dependency:
    """One entry of a dependency declaration.

    `scope` pins the lookup of `key` to a scope; when None or empty the scope
    of the enclosing resolution is used.
    """

    key: Hashable
    scope: str | None = None

    @classmethod
    def of(cls, entry: Any) -> Dependency:
        if isinstance(entry, Dependency):
            return entry
        return cls(entry)


@dataclass(frozen=True)
class Registration:
    producer: Callable[..., object]
    is_singleton: bool
    kind: ProducerKind
    # None: derive from the constructor signature when building
    dependencies: tuple[Dependency, ...] | None = None


def declare(entries: Iterable[Any] | None) -> tuple[Dependency, ...] | None:
    if entries is None:
        return None
    return tuple(Dependency.of(entry) for entry in entries)


def key_name(key: Any) -> str:
    return getattr(key, "__name__", None) or str(key)


class Registry:
    """Scoped mapping of dependency key to registration.

    Writing a slot that is already taken replaces the previous registration.
    """

    def __init__(self) -> None:
        self._scopes: dict[str, dict[Hashable, Registration]] = {}

    def register(self, key: Hashable, registration: Registration, scope: str = GLOBAL_SCOPE) -> None:
        registrations = self._scopes.setdefault(scope, {})
        if key in registrations:
            logger.debug("Overwriting registration for %s in scope %s", key_name(key), scope)
        registrations[key] = registration

    def lookup(self, key: Hashable, scope: str = GLOBAL_SCOPE) -> Registration | None:
        registrations = self._scopes.get(scope)
        if registrations is None:
            return None
        return registrations.get(key)

    def contains(self, key: Hashable, scope: str = GLOBAL_SCOPE) -> bool:
        return self.lookup(key, scope) is not None

    def clear(self) -> None:
        self._scopes.clear()
