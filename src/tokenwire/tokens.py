from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, TypeAlias


class Token:
    """An opaque identity key.

    Two ``Token`` objects are never equal unless they are the same object,
    even when they share a description. Use it where a unique key is needed
    and neither a class nor a plain string fits.
    """

    __slots__ = ("description",)

    def __init__(self, description: str | None = None) -> None:
        self.description = description

    def __repr__(self) -> str:
        return f"Token({self.description!r})"

    def __str__(self) -> str:
        return self.description or ""


@dataclass(frozen=True, slots=True)
class InterfaceToken:
    """A stable key standing in for a type that should not be used directly.

    Interface tokens compare by name, so ``interface_token("Repo")`` built in
    two modules refers to the same registration.
    """

    name: str

    def __str__(self) -> str:
        return f"{self.name}_interface"


InjectionToken: TypeAlias = Any
"""Anything hashable: a class, a string, a ``Token`` or an ``InterfaceToken``."""


def interface_token(name: str) -> InterfaceToken:
    """Return the interface token for ``name``."""
    return InterfaceToken(name)


CONTAINER_TOKEN = interface_token("Container")
"""Resolves to the container performing the resolution."""


def is_constructor(token: Any) -> bool:
    """Check whether the token is a class that can be activated."""
    return inspect.isclass(token)


def token_name(token: Any) -> str:
    """Return a human readable name used in error messages and logs."""
    if inspect.isclass(token):
        return token.__qualname__
    return str(token)
