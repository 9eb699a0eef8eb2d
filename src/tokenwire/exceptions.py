from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from tokenwire.tokens import token_name


class TokenWireError(Exception):
    """Represent a base class for all tokenwire-specific failures.

    Catch this type when you want to handle any tokenwire error path without
    matching each concrete exception class individually.
    """


class TokenNotFoundError(TokenWireError):
    """Signal that a token has no reachable registration.

    Raised by ``resolve``/``resolve_async``/``resolve_all`` and
    ``remove_registration`` when neither the container nor any of its parents
    registered the token and the token is not a class that can be built on
    demand. Also raised by ``register_type`` when the aliased token is missing.

    Typical fixes include registering the token, registering it on a parent
    container, or enabling ``register_if_missing`` for class tokens.
    """

    def __init__(self, token: Any) -> None:
        self.token = token
        super().__init__(f'Token not found: "{token_name(token)}"')


class UndefinedScopeError(TokenWireError):
    """Signal resolution of a scoped registration without a scope.

    Raised when a registration (explicit or derived from static metadata) has
    ``Lifetime.SCOPED`` and the caller did not pass a ``Scope``.

    Typical fix is resolving through ``container.create_scope()``.
    """

    def __init__(self, token: Any) -> None:
        self.token = token
        super().__init__(f'Undefined scope when resolving: "{token_name(token)}"')


class TokenRegistrationCycleError(TokenWireError):
    """Signal an alias registration whose redirect chain loops back.

    Raised by ``register`` and ``register_type`` at registration time, before
    any resolution is attempted.
    """

    def __init__(self, path: Sequence[Any]) -> None:
        self.path = list(path)
        rendered = " -> ".join(token_name(token) for token in self.path)
        super().__init__(f'Token registration cycle detected! "{rendered}"')


class InvalidDecoratorError(TokenWireError):
    """Signal misuse of a registration decorator.

    Raised when ``singleton``/``transient``/``scoped``/``injectable`` decorate
    something that is not a class.
    """

    def __init__(
        self,
        decorator: str,
        target: Any,
        message: str = "can only be used in a class",
    ) -> None:
        self.decorator = decorator
        self.target = target
        name = getattr(target, "__qualname__", None) or repr(target)
        super().__init__(f"Decorator '{decorator}' found on '{name}' {message}.")


class DisposedScopeError(TokenWireError):
    """Signal use of a scope after it was disposed.

    Create a new scope with ``container.create_scope()`` instead of reusing a
    disposed one.
    """

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "The scope has been disposed.")


class CircularDependencyError(TokenWireError):
    """Signal that a lazy reference was used before its target existed.

    A ``LazyReference`` stands in for an instance that is still being built.
    Touching it from inside the constructor that closed the cycle would need
    the unfinished instance, so the access fails instead of recursing.

    Typical fix is deferring the access until after construction.
    """

    def __init__(self, token: Any) -> None:
        self.token = token
        super().__init__(
            f'Circular dependency: "{token_name(token)}" was accessed before it was constructed',
        )


class InvalidRegistrationError(TokenWireError):
    """Signal an invalid provider or registration shape.

    Raised by registration APIs when the provider is neither a provider object
    nor a class, and by ``resolve_with_args`` when the token is not bound to a
    class provider.
    """


class AsyncDependencyInSyncContextError(TokenWireError):
    """Signal synchronous use of something that needs an event loop.

    Raised by ``resolve`` when the selected provider is a coroutine function
    factory, and by synchronous disposal when an instance can only be closed
    with ``aclose()``.

    Typical fix is switching to ``await container.resolve_async(...)`` or to
    ``await scope.dispose()``.
    """

    def __init__(self, token: Any, message: str | None = None) -> None:
        self.token = token
        super().__init__(
            message
            or f'"{token_name(token)}" requires asynchronous resolution, use resolve_async()',
        )
