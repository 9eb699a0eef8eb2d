from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeAlias, TypeVar

from tokenwire.exceptions import InvalidRegistrationError
from tokenwire.tokens import InjectionToken

T = TypeVar("T")

FactoryFunction: TypeAlias = Callable[..., Any]
"""Called as ``factory(container, *resolved_injections)``; may return an awaitable."""


@dataclass(frozen=True, slots=True)
class ValueProvider(Generic[T]):
    """Provides a precomputed value."""

    use_value: T


@dataclass(frozen=True, slots=True)
class ClassProvider(Generic[T]):
    """Provides instances of a class built from its injections."""

    use_class: type[T]


@dataclass(frozen=True, slots=True)
class FactoryProvider(Generic[T]):
    """Provides whatever the factory returns, on every resolution."""

    use_factory: FactoryFunction


@dataclass(frozen=True, slots=True)
class TokenProvider(Generic[T]):
    """Redirects resolution to another token."""

    use_token: InjectionToken


Provider: TypeAlias = ValueProvider[Any] | ClassProvider[Any] | FactoryProvider[Any] | TokenProvider[Any]


class ProviderKind(str, Enum):
    """Discriminates how a registration produces its value."""

    VALUE = "value"
    CLASS = "class"
    FACTORY = "factory"
    TOKEN = "token"
    CONSTRUCTOR = "constructor"
    """A bare class registered directly; resolved exactly like ``CLASS``."""


_KIND_BY_PROVIDER_TYPE: dict[type[Any], ProviderKind] = {
    ValueProvider: ProviderKind.VALUE,
    ClassProvider: ProviderKind.CLASS,
    FactoryProvider: ProviderKind.FACTORY,
    TokenProvider: ProviderKind.TOKEN,
}


def is_provider(value: Any) -> bool:
    """Check whether the value is one of the provider objects."""
    return type(value) in _KIND_BY_PROVIDER_TYPE


def provider_kind(provider: Any) -> ProviderKind:
    """Return the kind of a provider object or bare class.

    Raises:
        InvalidRegistrationError: If the value is neither a provider nor a class.

    """
    kind = _KIND_BY_PROVIDER_TYPE.get(type(provider))
    if kind is not None:
        return kind
    if inspect.isclass(provider):
        return ProviderKind.CONSTRUCTOR
    msg = f"Invalid provider type: {provider!r}"
    raise InvalidRegistrationError(msg)


def as_provider(provider: Any) -> Provider:
    """Normalize a bare class into a ``ClassProvider``.

    Raises:
        InvalidRegistrationError: If the value is neither a provider nor a class.

    """
    if is_provider(provider):
        return provider
    if inspect.isclass(provider):
        return ClassProvider(provider)
    msg = f"Provider must be a provider object or a class, got {provider!r}."
    raise InvalidRegistrationError(msg)
