from __future__ import annotations

import operator
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, Any

from tokenwire.exceptions import CircularDependencyError
from tokenwire.tokens import InjectionToken, token_name

if TYPE_CHECKING:
    from tokenwire.container import Container
    from tokenwire.scope import Scope

# Never forwarded: answering these would make the reference look awaitable
# and force resolution while the cycle is still open.
_NEVER_FORWARDED = frozenset({"__await__", "__aiter__", "__anext__"})


def _forward(function: Callable[..., Any]) -> Callable[..., Any]:
    def method(self: LazyReference, *args: Any) -> Any:
        return function(self._tw_resolve(), *args)

    return method


def _forward_reflected(function: Callable[[Any, Any], Any]) -> Callable[[LazyReference, Any], Any]:
    def method(self: LazyReference, other: Any) -> Any:
        return function(other, self._tw_resolve())

    return method


class LazyReference:
    """Stands in for an instance whose construction is still in progress.

    The container hands one out when a token is requested again while it is
    being resolved. The target is resolved on first use through the
    container that detected the cycle and is cached; every later interaction
    goes to the same object.

    Equality and hashing are delegated to the target, identity is not:
    ``ref == target`` holds while ``ref is target`` never does. Until the
    target is materialized ``ref.__class__`` reports ``LazyReference``, so
    ``isinstance`` checks only see the target's type after first use.

    Materialization always goes through the synchronous ``resolve``, also for
    references handed out by ``resolve_async``. A target that can only be
    built by a coroutine function factory raises
    ``AsyncDependencyInSyncContextError`` when the reference is first used.
    """

    __slots__ = ("_tw_container", "_tw_materialized", "_tw_scope", "_tw_target", "_tw_token")

    def __init__(self, container: Container, token: InjectionToken, scope: Scope | None = None) -> None:
        object.__setattr__(self, "_tw_container", container)
        object.__setattr__(self, "_tw_token", token)
        object.__setattr__(self, "_tw_scope", scope)
        object.__setattr__(self, "_tw_target", None)
        object.__setattr__(self, "_tw_materialized", False)

    def _tw_resolve(self) -> Any:
        if self._tw_materialized:
            return self._tw_target

        container = self._tw_container
        if container.is_resolving(self._tw_token):
            raise CircularDependencyError(self._tw_token)

        target = container.resolve(self._tw_token, self._tw_scope)
        object.__setattr__(self, "_tw_target", target)
        object.__setattr__(self, "_tw_materialized", True)
        return target

    @property  # type: ignore[misc]
    def __class__(self) -> type[Any]:  # noqa: D105
        if object.__getattribute__(self, "_tw_materialized"):
            return type(object.__getattribute__(self, "_tw_target"))
        return LazyReference

    def __getattr__(self, name: str) -> Any:
        if name in _NEVER_FORWARDED:
            raise AttributeError(name)
        return getattr(self._tw_resolve(), name)

    def __setattr__(self, name: str, value: Any) -> None:
        setattr(self._tw_resolve(), name, value)

    def __delattr__(self, name: str) -> None:
        delattr(self._tw_resolve(), name)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self._tw_resolve()(*args, **kwargs)

    def __eq__(self, other: object) -> bool:
        return self._tw_resolve() == other

    def __ne__(self, other: object) -> bool:
        return self._tw_resolve() != other

    def __lt__(self, other: Any) -> Any:
        return self._tw_resolve() < other

    def __le__(self, other: Any) -> Any:
        return self._tw_resolve() <= other

    def __gt__(self, other: Any) -> Any:
        return self._tw_resolve() > other

    def __ge__(self, other: Any) -> Any:
        return self._tw_resolve() >= other

    def __hash__(self) -> int:
        return hash(self._tw_resolve())

    def __bool__(self) -> bool:
        return bool(self._tw_resolve())

    def __str__(self) -> str:
        return str(self._tw_resolve())

    def __repr__(self) -> str:
        if self._tw_materialized:
            return repr(self._tw_target)
        return f"<LazyReference {token_name(self._tw_token)!r} (pending)>"

    def __dir__(self) -> list[str]:
        return dir(self._tw_resolve())

    def __len__(self) -> int:
        return len(self._tw_resolve())

    def __iter__(self) -> Iterator[Any]:
        return iter(self._tw_resolve())

    def __contains__(self, item: Any) -> bool:
        return item in self._tw_resolve()

    def __getitem__(self, key: Any) -> Any:
        return self._tw_resolve()[key]

    def __setitem__(self, key: Any, value: Any) -> None:
        self._tw_resolve()[key] = value

    def __delitem__(self, key: Any) -> None:
        del self._tw_resolve()[key]

    def __enter__(self) -> Any:
        return self._tw_resolve().__enter__()

    def __exit__(self, *exc_info: Any) -> Any:
        return self._tw_resolve().__exit__(*exc_info)

    def __aenter__(self) -> Any:
        return self._tw_resolve().__aenter__()

    def __aexit__(self, *exc_info: Any) -> Any:
        return self._tw_resolve().__aexit__(*exc_info)

    # Special methods are looked up on the type, so each protocol is spelled out
    __reversed__ = _forward(reversed)
    __format__ = _forward(format)
    __bytes__ = _forward(bytes)
    __int__ = _forward(int)
    __float__ = _forward(float)
    __complex__ = _forward(complex)
    __index__ = _forward(operator.index)
    __round__ = _forward(round)

    __neg__ = _forward(operator.neg)
    __pos__ = _forward(operator.pos)
    __abs__ = _forward(operator.abs)
    __invert__ = _forward(operator.invert)

    __add__ = _forward(operator.add)
    __sub__ = _forward(operator.sub)
    __mul__ = _forward(operator.mul)
    __matmul__ = _forward(operator.matmul)
    __truediv__ = _forward(operator.truediv)
    __floordiv__ = _forward(operator.floordiv)
    __mod__ = _forward(operator.mod)
    __divmod__ = _forward(divmod)
    __pow__ = _forward(pow)
    __lshift__ = _forward(operator.lshift)
    __rshift__ = _forward(operator.rshift)
    __and__ = _forward(operator.and_)
    __xor__ = _forward(operator.xor)
    __or__ = _forward(operator.or_)

    __radd__ = _forward_reflected(operator.add)
    __rsub__ = _forward_reflected(operator.sub)
    __rmul__ = _forward_reflected(operator.mul)
    __rmatmul__ = _forward_reflected(operator.matmul)
    __rtruediv__ = _forward_reflected(operator.truediv)
    __rfloordiv__ = _forward_reflected(operator.floordiv)
    __rmod__ = _forward_reflected(operator.mod)
    __rdivmod__ = _forward_reflected(divmod)
    __rpow__ = _forward_reflected(pow)
    __rlshift__ = _forward_reflected(operator.lshift)
    __rrshift__ = _forward_reflected(operator.rshift)
    __rand__ = _forward_reflected(operator.and_)
    __rxor__ = _forward_reflected(operator.xor)
    __ror__ = _forward_reflected(operator.or_)


def is_lazy_reference(value: Any) -> bool:
    """Check whether the value is a lazy reference, without materializing it."""
    return type(value) is LazyReference


def is_materialized(reference: LazyReference) -> bool:
    """Check whether the reference already resolved its target."""
    return bool(object.__getattribute__(reference, "_tw_materialized"))
