from __future__ import annotations

import inspect
import logging
import threading
from dataclasses import dataclass
from typing import (
    TYPE_CHECKING,
    Annotated,
    Any,
    TypeVar,
    cast,
    get_args,
    get_origin,
    get_type_hints,
    overload,
)

from ._cache import SingletonCache
from ._registry import (
    GLOBAL_SCOPE,
    Dependency,
    ProducerKind,
    Registration,
    Registry,
    declare,
    key_name,
)


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable, Iterable

    T = TypeVar("T")

_UNSET: Any = object()


class ResolutionError(RuntimeError):
    pass


class DependencyNotFoundError(ResolutionError, LookupError):
    """No registration exists for the requested (key, scope) slot."""

    def __init__(self, key: Hashable, scope: str) -> None:
        self.key = key
        self.scope = scope
        super().__init__(f"Dependency not found for type: {key_name(key)} in key: {scope}")


@dataclass(frozen=True)
class InjectFrom:
    """Pin the scope a constructor parameter is resolved from.

    Example:
      class HybridCar:
          def __init__(self, engine: Annotated[Engine, InjectFrom("petrol")]): ...

    """

    scope: str


class Container:
    """Scoped DI container.

    - register producers per (key, scope)
    - resolve with constructor injection, memoizing every resolved instance
      in its (key, scope) slot
    - replace producers at runtime and drop cached instances.

    Resolution is recursive and has no cycle detection: a circular
    declaration ends in RecursionError.
    """

    def __init__(self) -> None:
        self._registry = Registry()
        self._cache = SingletonCache()
        self._lock = threading.RLock()

    def register_self(
        self,
        producer: Callable[..., Any],
        scope: str = GLOBAL_SCOPE,
        *,
        depends: Iterable[Any] | None = None,
    ) -> None:
        """Register a concrete producer under its own identity.

        Example:
          container.register_self(AddService)
          container.register_self(PetrolCar, depends=[PetrolEngine])

        """
        self.register_for(producer, producer, scope, depends=depends)

    def register_for(
        self,
        abstract_key: Hashable,
        producer: Callable[..., Any],
        scope: str = GLOBAL_SCOPE,
        *,
        depends: Iterable[Any] | None = None,
        kind: ProducerKind | None = None,
    ) -> None:
        """Register `producer` for `abstract_key` in `scope`.

        `depends` lists the keys whose instances are passed positionally to the
        producer, each either a bare key or a `Dependency` pinning its scope.
        When omitted, classes derive it from their `__init__` annotations and
        factories are called without arguments.

        `kind` defaults to CONSTRUCTOR for classes and FACTORY for anything else.
        An existing registration for the same slot is replaced.
        """
        registration = Registration(
            producer=producer,
            is_singleton=scope == GLOBAL_SCOPE,
            kind=kind if kind is not None else _kind_of(producer),
            dependencies=declare(depends),
        )
        with self._lock:
            self._registry.register(abstract_key, registration, scope)
        logger.debug("Registered %s for %s in scope %s", key_name(producer), key_name(abstract_key), scope)

    def register_instance(self, key: Hashable, instance: object, scope: str = GLOBAL_SCOPE) -> None:
        """Register a pre-built instance (always singleton)."""
        with self._lock:
            self._registry.register(key, _instance_registration(instance), scope)
        logger.debug("Registered instance of %s for %s in scope %s", type(instance).__name__, key_name(key), scope)

    def service(
        self,
        scope: str = GLOBAL_SCOPE,
        *,
        depends: Iterable[Any] | None = None,
    ) -> Callable[[type[T]], type[T]]:
        """Class decorator form of `register_self`."""

        def decorator(cls: type[T]) -> type[T]:
            self.register_self(cls, scope, depends=depends)
            return cls

        return decorator

    def service_for(
        self,
        abstract_key: Hashable,
        scope: str = GLOBAL_SCOPE,
        *,
        depends: Iterable[Any] | None = None,
    ) -> Callable[[type[T]], type[T]]:
        """Class decorator form of `register_for`.

        Example:
          @container.service_for(Engine, "petrol")
          @container.service()
          class PetrolEngine(Engine): ...

        """

        def decorator(cls: type[T]) -> type[T]:
            self.register_for(abstract_key, cls, scope, depends=depends)
            return cls

        return decorator

    @overload
    def inject(self, key: type[T], scope: str = ...) -> T: ...

    @overload
    def inject(self, key: Hashable, scope: str = ...) -> Any: ...

    def inject(self, key: Hashable, scope: str = GLOBAL_SCOPE) -> Any:
        """Resolve `key` in `scope` to an instance.

        - A cached instance for the slot is returned as is.
        - Otherwise the registered producer is called with its dependencies,
          resolved depth-first in declaration order, and the result is cached.
        Raises DependencyNotFoundError when the slot has no registration.
        """
        with self._lock:
            return self._resolve(key, scope)

    def replace_with(
        self,
        abstract_key: Hashable,
        producer: Callable[..., Any] | None = None,
        scope: str = GLOBAL_SCOPE,
        *,
        instance: object = _UNSET,
        depends: Iterable[Any] | None = None,
    ) -> None:
        """Swap the registration of a slot and build its replacement right away.

        Example:
          container.replace_with(AddService, MockAddService)
          container.replace_with(Greeter, instance=FakeGreeter())

        """
        if producer is not None and instance is not _UNSET:
            msg = "Provide either `producer` or `instance`, not both."
            raise ValueError(msg)

        if producer is None and instance is _UNSET:
            msg = "Either `producer` or `instance` must be provided."
            raise ValueError(msg)

        if instance is not _UNSET:
            registration = _instance_registration(instance)
        else:
            producer = cast("Callable[..., Any]", producer)
            registration = Registration(
                producer=producer,
                is_singleton=True,
                kind=_kind_of(producer),
                dependencies=declare(depends),
            )

        with self._lock:
            self._evict(abstract_key, scope)
            self._registry.register(abstract_key, registration, scope)
            logger.debug("Replaced %s in scope %s", key_name(abstract_key), scope)
            self._resolve(abstract_key, scope)

    def destroy(self, key: Hashable, scope: str = GLOBAL_SCOPE) -> None:
        """Drop the cached instance of a slot, keeping its registration."""
        with self._lock:
            self._evict(key, scope)

    def is_registered(self, key: Hashable, scope: str = GLOBAL_SCOPE) -> bool:
        with self._lock:
            return self._registry.contains(key, scope)

    def is_cached(self, key: Hashable, scope: str = GLOBAL_SCOPE) -> bool:
        with self._lock:
            return self._cache.contains(key, scope)

    def get_registration(self, key: Hashable, scope: str = GLOBAL_SCOPE) -> Registration | None:
        with self._lock:
            return self._registry.lookup(key, scope)

    def reset(self) -> None:
        """Forget every registration and cached instance."""
        with self._lock:
            self._registry.clear()
            self._cache.clear()

    def _evict(self, key: Hashable, scope: str) -> None:
        if self._cache.evict(key, scope):
            logger.debug("Destroyed cached %s in scope %s", key_name(key), scope)
            if scope not in self._cache.scopes():
                logger.debug("Scope %s has no cached instances left", scope)

    def _resolve(self, key: Hashable, scope: str) -> Any:
        found, instance = self._cache.get(key, scope)
        if found:
            return instance

        registration = self._registry.lookup(key, scope)
        if registration is None:
            raise DependencyNotFoundError(key, scope)

        dependencies = registration.dependencies
        if dependencies is None:
            if registration.kind is ProducerKind.CONSTRUCTOR:
                dependencies = _derive_dependencies(registration.producer)
            else:
                dependencies = ()

        args = [self._resolve(dep.key, dep.scope or scope) for dep in dependencies]

        instance = self._construct(registration, args)
        self._cache.store(key, scope, instance)
        logger.debug("Resolved %s in scope %s", key_name(key), scope)
        return instance

    def _construct(self, registration: Registration, args: list[Any]) -> Any:
        producer = registration.producer
        if registration.kind is ProducerKind.FACTORY:
            return producer(*args)

        if inspect.isabstract(producer):
            msg = f"Cannot construct abstract class {key_name(producer)}; register a concrete producer for it."
            raise ResolutionError(msg)
        return producer(*args)


def _kind_of(producer: Callable[..., Any]) -> ProducerKind:
    return ProducerKind.CONSTRUCTOR if inspect.isclass(producer) else ProducerKind.FACTORY


def _instance_registration(instance: object) -> Registration:
    def factory() -> object:
        return instance

    return Registration(producer=factory, is_singleton=True, kind=ProducerKind.FACTORY, dependencies=())


def _derive_dependencies(producer: Callable[..., Any]) -> tuple[Dependency, ...]:
    """Build a dependency declaration from the producer's signature.

    Positional parameters without a default are injected in order; their
    annotation is the key, and `Annotated[Key, InjectFrom(scope)]` pins the
    scope. Parameters with defaults and variadic parameters are left alone.
    """
    if inspect.isclass(producer):
        # no Python-level __init__ anywhere in the MRO
        if not inspect.isfunction(inspect.getattr_static(producer, "__init__")):
            return ()
        hints = _get_init_type_hints(producer)
    else:
        hints = _get_type_hints(producer)

    try:
        signature = inspect.signature(producer)
    except (TypeError, ValueError) as e:
        msg = f"Cannot read the signature of {key_name(producer)}; pass `depends=` when registering it."
        raise ResolutionError(msg) from e

    dependencies: list[Dependency] = []
    for name, p in signature.parameters.items():
        if p.kind in (p.VAR_POSITIONAL, p.VAR_KEYWORD) or p.default is not p.empty:
            continue

        ann = hints.get(name, p.annotation)
        if p.kind is p.KEYWORD_ONLY or ann is p.empty or isinstance(ann, str):
            ann_repr = "no-annotation" if ann is p.empty else repr(ann)
            msg = (
                f"Cannot satisfy constructor parameter '{name}' for {key_name(producer)}. "
                f"Pass `depends=` or annotate it as a positional parameter (annotation: {ann_repr})."
            )
            raise ResolutionError(msg)

        dependencies.append(_dependency_from_annotation(ann))

    return tuple(dependencies)


def _dependency_from_annotation(ann: Any) -> Dependency:
    if get_origin(ann) is Annotated:
        key, *metadata = get_args(ann)
        for meta in metadata:
            if isinstance(meta, InjectFrom):
                return Dependency(key, meta.scope)
        return Dependency(key)
    return Dependency(ann)


def _get_init_type_hints(cls: type) -> dict[str, Any]:
    init = inspect.getattr_static(cls, "__init__")
    return _get_type_hints(init, owner=cls)


def _get_type_hints(func: Any, owner: Any = None) -> dict[str, Any]:
    try:
        hints = get_type_hints(func, include_extras=True)
    except TypeError:
        hints = {}
    except NameError as exc:
        owner = owner if owner is not None else func
        logger.warning(
            "'%s' name error retrieving %s (%s) type hints",
            exc.name,
            key_name(owner),
            getattr(owner, "__qualname__", owner),
        )
        hints = {}

    return hints
