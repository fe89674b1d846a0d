"""Explicit dependency-injection container.

Built once at process start and passed to whatever needs it; there is no
module-level registry.  Providers are lazy singletons keyed by an
arbitrary hashable, usually the class being provided::

    container = ProvidersContainer(settings)
    container.register(ProfileUseCase, lambda c: ProfileUseCase())
    container.register(
        ProfileGateway,
        lambda c: ProfileGateway(use_case=c.resolve(ProfileUseCase)),
    )
    container.register(
        ProfileInterface,
        lambda c: ProfileInterface([c.connection(ProfileGateway)]),
    )
    container.resolve(ProfileInterface)  # wires gateway and use case

    await container.dispose()
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Hashable
from typing import Any, TypeVar, overload

from clean_framework.core.config import Settings
from clean_framework.core.errors import (
    CircularProviderError,
    DuplicateProviderError,
    MissingProviderError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

Factory = Callable[["ProvidersContainer"], Any]


def _key_name(key: Hashable) -> str:
    return getattr(key, "__name__", None) or repr(key)


class ProvidersContainer:
    """Lazily builds and caches one instance per registered key."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()
        self._factories: dict[Hashable, Factory] = {}
        self._instances: dict[Hashable, Any] = {}
        self._resolving: list[Hashable] = []

    def __contains__(self, key: Hashable) -> bool:
        return key in self._factories or key in self._instances

    def register(self, key: Hashable, factory: Factory) -> None:
        if key in self:
            raise DuplicateProviderError(
                f"A provider for {_key_name(key)} is already registered"
            )
        self._factories[key] = factory

    def override(self, key: Hashable, instance: Any) -> None:
        """Pin ``key`` to ``instance``, replacing any provider."""
        self._factories.pop(key, None)
        self._instances[key] = instance

    @overload
    def resolve(self, key: type[T]) -> T: ...

    @overload
    def resolve(self, key: Hashable) -> Any: ...

    def resolve(self, key: Hashable) -> Any:
        if key in self._instances:
            return self._instances[key]

        factory = self._factories.get(key)
        if factory is None:
            raise MissingProviderError(f"No provider registered for {_key_name(key)}")

        if key in self._resolving:
            chain = [_key_name(k) for k in self._resolving[self._resolving.index(key):]]
            raise CircularProviderError([*chain, _key_name(key)])

        self._resolving.append(key)
        try:
            instance = factory(self)
        finally:
            self._resolving.pop()

        self._instances[key] = instance
        logger.debug("Created %s", _key_name(key))
        return instance

    def connection(self, key: Hashable) -> Callable[[], Any]:
        """Zero-argument callable that resolves ``key`` when invoked."""
        return lambda: self.resolve(key)

    async def dispose(self) -> None:
        """Dispose created instances, newest first.

        A failing ``dispose`` is logged; the remaining instances are still
        disposed.
        """
        for key, instance in reversed(list(self._instances.items())):
            dispose = getattr(instance, "dispose", None)
            if dispose is None:
                continue
            try:
                result = dispose()
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Failed to dispose %s", _key_name(key))
                continue
            logger.debug("Disposed %s", _key_name(key))
        self._instances.clear()
