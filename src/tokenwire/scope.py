from __future__ import annotations

import logging
import types
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from tokenwire.disposal import close_all, dispose_all
from tokenwire.exceptions import DisposedScopeError
from tokenwire.registry import Registration
from tokenwire.tokens import InjectionToken

if TYPE_CHECKING:
    from typing_extensions import Self

    from tokenwire.container import Container

logger = logging.getLogger(__name__)


class Scope:
    """An isolated instance cache for ``Lifetime.SCOPED`` registrations.

    A scope is created by ``Container.create_scope()`` and caches one
    instance per scoped registration. Resolving through the scope is the same
    as passing it to the container explicitly.

    Supports both sync and async context managers:
    - ``with container.create_scope() as scope`` closes instances with ``close()``
    - ``async with container.create_scope() as scope`` awaits ``aclose()`` as well
    """

    __slots__ = ("_container", "_disposed", "_instances")

    def __init__(self, container: Container) -> None:
        self._container = container
        self._instances: dict[Registration, Any] = {}
        self._disposed = False

    @property
    def container(self) -> Container:
        """The container that created and tracks this scope."""
        return self._container

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def ensure_active(self) -> None:
        """Raise if the scope was disposed.

        Raises:
            DisposedScopeError: If the scope was disposed.

        """
        if self._disposed:
            raise DisposedScopeError

    def get_instance(self, registration: Registration) -> tuple[bool, Any]:
        """Return ``(found, instance)`` for a registration."""
        self.ensure_active()
        if registration in self._instances:
            return True, self._instances[registration]
        return False, None

    def set_instance(self, registration: Registration, instance: Any) -> None:
        self.ensure_active()
        self._instances[registration] = instance

    def instances(self) -> list[Any]:
        return list(self._instances.values())

    def resolve(self, token: InjectionToken) -> Any:
        """Resolve a token within this scope."""
        self.ensure_active()
        return self._container.resolve(token, self)

    async def resolve_async(self, token: InjectionToken) -> Any:
        """Asynchronously resolve a token within this scope."""
        self.ensure_active()
        return await self._container.resolve_async(token, self)

    def resolve_all(self, token: InjectionToken) -> list[Any]:
        self.ensure_active()
        return self._container.resolve_all(token, self)

    async def resolve_all_async(self, token: InjectionToken) -> list[Any]:
        self.ensure_active()
        return await self._container.resolve_all_async(token, self)

    def resolve_with_args(self, token: InjectionToken, args: Iterable[Any] = ()) -> Any:
        self.ensure_active()
        return self._container.resolve_with_args(token, args, self)

    async def resolve_with_args_async(self, token: InjectionToken, args: Iterable[Any] = ()) -> Any:
        self.ensure_active()
        return await self._container.resolve_with_args_async(token, args, self)

    async def dispose(self) -> None:
        """Dispose every cached instance and detach from the container.

        Disposing an already disposed scope does nothing.
        """
        if self._disposed:
            return
        instances = self.instances()
        self._instances.clear()
        self._disposed = True
        self._container._forget_scope(self)  # noqa: SLF001
        logger.debug("Disposing scope %r (%d cached instances)", self, len(instances))
        await dispose_all(instances)

    def close(self) -> None:
        """Synchronously dispose every cached instance and detach from the container.

        Raises:
            AsyncDependencyInSyncContextError: If an instance can only be
                disposed with ``aclose()``; the other instances are closed first.

        """
        if self._disposed:
            return
        instances = self.instances()
        self._instances.clear()
        self._disposed = True
        self._container._forget_scope(self)  # noqa: SLF001
        logger.debug("Closing scope %r (%d cached instances)", self, len(instances))
        close_all(instances)

    def __enter__(self) -> Self:
        self.ensure_active()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        self.close()

    async def __aenter__(self) -> Self:
        self.ensure_active()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        await self.dispose()

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else f"{len(self._instances)} instances"
        return f"<Scope {id(self):#x} {state}>"
