from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ._registry import GLOBAL_SCOPE


if TYPE_CHECKING:
    from collections.abc import Hashable


class SingletonCache:
    """Constructed instances per (key, scope).

    Empty scope buckets are dropped as soon as their last entry is evicted.
    """

    def __init__(self) -> None:
        self._scopes: dict[str, dict[Hashable, Any]] = {}

    def get(self, key: Hashable, scope: str = GLOBAL_SCOPE) -> tuple[bool, Any]:
        instances = self._scopes.get(scope)
        if instances is None or key not in instances:
            return False, None
        return True, instances[key]

    def store(self, key: Hashable, scope: str, instance: Any) -> None:
        self._scopes.setdefault(scope, {})[key] = instance

    def evict(self, key: Hashable, scope: str = GLOBAL_SCOPE) -> bool:
        instances = self._scopes.get(scope)
        if instances is None or key not in instances:
            return False

        del instances[key]
        if not instances:
            del self._scopes[scope]
        return True

    def contains(self, key: Hashable, scope: str = GLOBAL_SCOPE) -> bool:
        return self.get(key, scope)[0]

    def scopes(self) -> list[str]:
        return list(self._scopes)

    def clear(self) -> None:
        self._scopes.clear()
