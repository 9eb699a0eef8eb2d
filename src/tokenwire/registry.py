from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from tokenwire.disposal import dispose_all, dispose_instance
from tokenwire.providers import Provider, ProviderKind
from tokenwire.tokens import InjectionToken
from tokenwire.types import Lifetime

_NO_INSTANCE: Any = object()


@dataclass(eq=False, kw_only=True)
class Registration:
    """Describes how to produce the value for one token.

    Registrations are compared and hashed by identity; scopes use them as
    cache keys.
    """

    provider: Provider
    """The production strategy."""
    kind: ProviderKind
    """Discriminator for ``provider``."""
    lifetime: Lifetime = Lifetime.TRANSIENT
    """Caching policy applied to class providers."""
    injections: list[InjectionToken] = field(default_factory=list)
    """Tokens resolved in order into positional arguments."""
    instance: Any = _NO_INSTANCE
    """Cached singleton instance, owned by the container."""

    def has_instance(self) -> bool:
        """Check whether a singleton instance is cached."""
        return self.instance is not _NO_INSTANCE

    def clear_instance(self) -> Any:
        """Drop the cached instance and return it (``None`` when absent)."""
        instance = self.instance
        self.instance = _NO_INSTANCE
        return None if instance is _NO_INSTANCE else instance

    def cached_instances(self) -> list[Any]:
        """Return the cached instance as a list, for batch disposal."""
        if self.kind is ProviderKind.VALUE or not self.has_instance():
            return []
        return [self.instance]


class RegistrationStore:
    """Maps tokens to the ordered list of their registrations.

    The last registration of a token is its primary one. Looking a token up
    creates its (empty) slot, so ``get_all`` never returns ``None``.
    """

    def __init__(self) -> None:
        self._registrations: defaultdict[InjectionToken, list[Registration]] = defaultdict(list)

    def set(self, token: InjectionToken, registration: Registration) -> None:
        """Append a registration for the token."""
        self._registrations[token].append(registration)

    def set_all(self, token: InjectionToken, registrations: list[Registration]) -> None:
        """Replace every registration of the token."""
        self._registrations[token] = list(registrations)

    def get(self, token: InjectionToken) -> Registration | None:
        """Return the most recent registration of the token, if any."""
        registrations = self._registrations[token]
        return registrations[-1] if registrations else None

    def get_all(self, token: InjectionToken) -> list[Registration]:
        """Return all registrations of the token in insertion order."""
        return self._registrations[token]

    def has(self, token: InjectionToken) -> bool:
        return len(self._registrations[token]) > 0

    def tokens(self) -> list[InjectionToken]:
        return [token for token, registrations in self._registrations.items() if registrations]

    def values(self) -> Iterator[list[Registration]]:
        return iter(list(self._registrations.values()))

    async def delete(self, token: InjectionToken, registration: Registration) -> None:
        """Remove one registration, disposing its cached instance first."""
        registrations = self._registrations[token]
        for instance in registration.cached_instances():
            await dispose_instance(instance)
        registration.clear_instance()
        registrations.remove(registration)

    def clear(self) -> None:
        self._registrations.clear()

    async def dispose(self) -> None:
        """Dispose every cached instance and empty the store."""
        instances = [
            instance
            for registrations in self._registrations.values()
            for registration in registrations
            for instance in registration.cached_instances()
        ]
        await dispose_all(instances)
        self._registrations.clear()

    def __len__(self) -> int:
        return len(self.tokens())
