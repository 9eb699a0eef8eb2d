"""Static injection metadata read from classes.

A class declares how the container should build it through two class
attributes: ``__tw_injections__`` (ordered tokens passed positionally to the
constructor) and ``__tw_lifetime__``. Both are optional. They can be written
by hand or set with :func:`injectable`.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import Any, TypeVar

from tokenwire.exceptions import InvalidDecoratorError
from tokenwire.tokens import InjectionToken
from tokenwire.types import Lifetime

C = TypeVar("C", bound=type[Any])

STATIC_INJECTIONS = "__tw_injections__"
STATIC_INJECTION_LIFETIME = "__tw_lifetime__"


def get_static_lifetime(cls: type[Any]) -> Lifetime | None:
    """Return the lifetime declared on the class, if any."""
    lifetime = getattr(cls, STATIC_INJECTION_LIFETIME, None)
    return Lifetime(lifetime) if lifetime is not None else None


def get_static_injections(cls: type[Any]) -> list[InjectionToken] | None:
    """Return a copy of the injection tokens declared on the class, if any."""
    injections = getattr(cls, STATIC_INJECTIONS, None)
    return list(injections) if injections is not None else None


def set_static_metadata(
    cls: type[Any],
    *,
    lifetime: Lifetime | None = None,
    injections: Iterable[InjectionToken] | None = None,
) -> None:
    """Write static metadata onto the class, leaving omitted parts untouched."""
    if lifetime is not None:
        setattr(cls, STATIC_INJECTION_LIFETIME, Lifetime(lifetime))
    if injections is not None:
        setattr(cls, STATIC_INJECTIONS, tuple(injections))


def activate(cls: type[Any], args: Sequence[Any] = ()) -> Any:
    """Build an instance of ``cls`` from positional arguments."""
    return cls(*args)


def injectable(
    lifetime: Lifetime | None = None,
    injections: Iterable[InjectionToken] = (),
) -> Callable[[C], C]:
    """Declare static metadata on a class without registering it.

    The container picks the metadata up when the class is registered or
    resolved as a bare constructor.

    Args:
        lifetime: Lifetime used when no explicit lifetime is registered.
        injections: Tokens resolved in order into constructor arguments.

    Raises:
        InvalidDecoratorError: If the decorated object is not a class.

    Examples:
        .. code-block:: python

            @injectable(Lifetime.SINGLETON, injections=["settings"])
            class Database:
                def __init__(self, settings: dict) -> None: ...

    """
    injections = tuple(injections)

    def decorator(cls: C) -> C:
        if not isinstance(cls, type):
            raise InvalidDecoratorError("injectable", cls)
        set_static_metadata(cls, lifetime=lifetime, injections=injections)
        return cls

    return decorator
