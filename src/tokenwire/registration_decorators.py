from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from tokenwire.container import Container
from tokenwire.container_context import container_context
from tokenwire.exceptions import InvalidDecoratorError
from tokenwire.metadata import set_static_metadata
from tokenwire.providers import TokenProvider
from tokenwire.tokens import InjectionToken
from tokenwire.types import Lifetime

C = TypeVar("C", bound=type[Any])


def _registering_decorator(
    decorator_name: str,
    lifetime: Lifetime,
    token: InjectionToken | None,
    injections: Iterable[InjectionToken],
    container: Container | None,
) -> Callable[[C], C]:
    injections = tuple(injections)

    def decorator(cls: C) -> C:
        if not isinstance(cls, type):
            raise InvalidDecoratorError(decorator_name, cls)

        set_static_metadata(cls, lifetime=lifetime, injections=injections)
        target = container if container is not None else container_context.get_current()
        target.register(cls, cls, lifetime=lifetime, injections=injections)
        if token is not None:
            target.register(token, TokenProvider(cls))
        return cls

    return decorator


def singleton(
    token: InjectionToken | None = None,
    injections: Iterable[InjectionToken] = (),
    container: Container | None = None,
) -> Callable[[C], C]:
    """Register the decorated class as a singleton.

    Args:
        token: Optional additional token registered as an alias of the class.
        injections: Tokens resolved in order into constructor arguments.
        container: Target container. Defaults to ``container_context.get_current()``.

    Returns:
        A class decorator returning the class unchanged.

    Raises:
        InvalidDecoratorError: If the decorated object is not a class.

    Examples:
        .. code-block:: python

            @singleton("settings")
            class Settings: ...

            container_context.get_current().resolve("settings")

    """
    return _registering_decorator("singleton", Lifetime.SINGLETON, token, injections, container)


def transient(
    token: InjectionToken | None = None,
    injections: Iterable[InjectionToken] = (),
    container: Container | None = None,
) -> Callable[[C], C]:
    """Register the decorated class as transient. See ``singleton`` for arguments."""
    return _registering_decorator("transient", Lifetime.TRANSIENT, token, injections, container)


def scoped(
    token: InjectionToken | None = None,
    injections: Iterable[InjectionToken] = (),
    container: Container | None = None,
) -> Callable[[C], C]:
    """Register the decorated class as scoped. See ``singleton`` for arguments."""
    return _registering_decorator("scoped", Lifetime.SCOPED, token, injections, container)
