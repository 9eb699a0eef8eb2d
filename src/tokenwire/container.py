from __future__ import annotations

import inspect
import logging
import types
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

from tokenwire.disposal import dispose_all, settle_all
from tokenwire.exceptions import (
    AsyncDependencyInSyncContextError,
    InvalidRegistrationError,
    TokenNotFoundError,
    TokenRegistrationCycleError,
    UndefinedScopeError,
)
from tokenwire.lazy import LazyReference
from tokenwire.metadata import activate, get_static_injections, get_static_lifetime
from tokenwire.providers import (
    ClassProvider,
    FactoryFunction,
    FactoryProvider,
    ProviderKind,
    TokenProvider,
    ValueProvider,
    as_provider,
    provider_kind,
)
from tokenwire.registry import Registration, RegistrationStore
from tokenwire.resolution_stack import (
    ResolutionStack,
    clear_resolution_stack,
    get_resolution_stack,
    is_token_resolving,
    release_resolution_stack,
)
from tokenwire.scope import Scope
from tokenwire.tokens import CONTAINER_TOKEN, InjectionToken, is_constructor, token_name
from tokenwire.types import Lifetime

if TYPE_CHECKING:
    from typing_extensions import Self

logger = logging.getLogger(__name__)


class Container:
    """Register providers under tokens and resolve fully wired instances.

    Tokens are usually classes, strings, ``Token`` objects or interface
    tokens. A token is bound to a value, a class, a factory or another
    token; class providers receive their ``injections`` positionally.

    Lookups check this container first and then walk up the parent chain, so
    child registrations shadow the parent's without changing it. Unregistered
    classes are built on demand from their static metadata and registered
    for later lookups, unless ``register_if_missing`` is disabled.

    Circular references are allowed: when a token is requested again while
    it is being resolved, a ``LazyReference`` to it is returned instead.
    """

    __slots__ = (
        "_children",
        "_default_lifetime",
        "_parent",
        "_register_if_missing",
        "_scopes",
        "_services",
    )

    def __init__(
        self,
        parent: Container | None = None,
        *,
        register_if_missing: bool = True,
        default_lifetime: Lifetime = Lifetime.TRANSIENT,
    ) -> None:
        """Initialize a container.

        Args:
            parent: Container consulted when a token is not registered locally.
            register_if_missing: Resolve unregistered classes from their static
                metadata. Disable for strict mode.
            default_lifetime: Lifetime used when neither the registration nor the
                class metadata declares one.

        """
        self._parent = parent
        self._register_if_missing = register_if_missing
        self._default_lifetime = Lifetime(default_lifetime)

        self._services = RegistrationStore()
        self._scopes: set[Scope] = set()
        self._children: list[Container] = []

    @property
    def parent(self) -> Container | None:
        return self._parent

    @property
    def scopes(self) -> frozenset[Scope]:
        """Live scopes created by this container."""
        return frozenset(self._scopes)

    @property
    def children(self) -> tuple[Container, ...]:
        return tuple(self._children)

    def create_child_container(self) -> Container:
        """Create a container that falls back to this one for lookups.

        The child is remembered so ``dispose()`` can dispose it as well.
        """
        child = Container(
            self,
            register_if_missing=self._register_if_missing,
            default_lifetime=self._default_lifetime,
        )
        self._children.append(child)
        logger.debug("Created child container %r of %r", child, self)
        return child

    def create_scope(self) -> Scope:
        """Create a new scope for resolving ``Lifetime.SCOPED`` registrations."""
        scope = Scope(self)
        self._scopes.add(scope)
        logger.debug("Created scope %r", scope)
        return scope

    async def dispose_scope(self, scope: Scope) -> None:
        """Dispose a scope and its cached instances."""
        await scope.dispose()

    def _forget_scope(self, scope: Scope) -> None:
        self._scopes.discard(scope)

    # region Register

    def register(
        self,
        token: InjectionToken,
        provider: Any,
        *,
        lifetime: Lifetime | None = None,
        injections: Iterable[InjectionToken] | None = None,
    ) -> Self:
        """Register a provider under a token.

        Args:
            token: The token to register the provider with.
            provider: A ``ValueProvider``, ``ClassProvider``, ``FactoryProvider``,
                ``TokenProvider`` or a class (shorthand for ``ClassProvider``).
            lifetime: Caching policy. When omitted, the class metadata of a class
                provider is used, then the container default.
            injections: Tokens resolved in order into positional arguments. When
                omitted, the class metadata of a class provider is used.

        Returns:
            The container, for chaining.

        Raises:
            InvalidRegistrationError: If ``provider`` has an invalid shape.
            TokenRegistrationCycleError: If ``provider`` is a ``TokenProvider``
                whose redirect chain leads back to a token already visited.

        """
        service = as_provider(provider)

        if isinstance(service, TokenProvider):
            self._inspect_circular_token_provider(token, service)

        resolved_lifetime = lifetime
        resolved_injections = list(injections) if injections is not None else None
        if isinstance(service, ClassProvider):
            if resolved_lifetime is None:
                resolved_lifetime = get_static_lifetime(service.use_class)
            if resolved_injections is None:
                resolved_injections = get_static_injections(service.use_class)

        return self.register_registration(
            token,
            Registration(
                provider=service,
                kind=provider_kind(service),
                lifetime=Lifetime(resolved_lifetime) if resolved_lifetime is not None else self._default_lifetime,
                injections=resolved_injections or [],
            ),
        )

    def register_registration(self, token: InjectionToken, registration: Registration) -> Self:
        """Store a prepared registration under a token."""
        self._services.set(token, registration)
        logger.debug(
            "Registered %s as %s provider (%s)",
            token_name(token),
            registration.kind.value,
            registration.lifetime.value,
        )
        return self

    def register_singleton(
        self,
        token: InjectionToken,
        target: type[Any] | ClassProvider[Any] | None = None,
        injections: Iterable[InjectionToken] | None = None,
    ) -> Self:
        """Register a class as a singleton, ``target`` defaults to ``token``."""
        return self.register(
            token,
            self._class_target(token, target),
            lifetime=Lifetime.SINGLETON,
            injections=injections,
        )

    def register_transient(
        self,
        token: InjectionToken,
        target: type[Any] | ClassProvider[Any] | None = None,
        injections: Iterable[InjectionToken] | None = None,
    ) -> Self:
        """Register a class as transient, ``target`` defaults to ``token``."""
        return self.register(
            token,
            self._class_target(token, target),
            lifetime=Lifetime.TRANSIENT,
            injections=injections,
        )

    def register_scoped(
        self,
        token: InjectionToken,
        target: type[Any] | ClassProvider[Any] | None = None,
        injections: Iterable[InjectionToken] | None = None,
    ) -> Self:
        """Register a class as scoped, ``target`` defaults to ``token``."""
        return self.register(
            token,
            self._class_target(token, target),
            lifetime=Lifetime.SCOPED,
            injections=injections,
        )

    def register_value(self, token: InjectionToken, value: Any) -> Self:
        """Register a value returned as is on every resolution."""
        return self.register(token, ValueProvider(value), lifetime=Lifetime.SINGLETON)

    def register_instance(self, token: InjectionToken, instance: Any) -> Self:
        """Register an existing instance; the container never disposes it."""
        return self.register_registration(
            token,
            Registration(
                provider=ValueProvider(instance),
                kind=ProviderKind.VALUE,
                lifetime=Lifetime.SINGLETON,
            ),
        )

    def register_factory(
        self,
        token: InjectionToken,
        factory: FactoryFunction,
        injections: Iterable[InjectionToken] | None = None,
    ) -> Self:
        """Register a factory called as ``factory(container, *injections)`` on every resolution."""
        return self.register(
            token,
            FactoryProvider(factory),
            lifetime=Lifetime.TRANSIENT,
            injections=injections or [],
        )

    def register_type(self, from_token: InjectionToken, to: Any) -> Self:
        """Register ``from_token`` as a redirect to ``to``.

        Args:
            from_token: The token to register.
            to: A ``TokenProvider`` whose target must already be registered, a
                class (registered as a ``ClassProvider``), or any other token.

        Raises:
            TokenNotFoundError: If ``to`` is a ``TokenProvider`` to an
                unregistered token.
            TokenRegistrationCycleError: If the redirect chain loops back.

        """
        if isinstance(to, TokenProvider):
            if not self.has_registration(to.use_token):
                raise TokenNotFoundError(to.use_token)
            return self.register(from_token, to)
        if is_constructor(to):
            return self.register(from_token, ClassProvider(to))
        return self.register(from_token, TokenProvider(to))

    async def remove_registration(
        self,
        token: InjectionToken,
        predicate: Callable[[Registration], bool] | None = None,
    ) -> Self:
        """Remove local registrations of a token that match ``predicate``.

        All local registrations are removed when no predicate is given. Cached
        instances are disposed before removal.

        Raises:
            TokenNotFoundError: If the token has no reachable registration.

        """
        if not self.has_registration(token):
            raise TokenNotFoundError(token)

        for registration in [r for r in self._services.get_all(token) if predicate is None or predicate(r)]:
            await self._services.delete(token, registration)
        return self

    def has_registration(self, token: InjectionToken) -> bool:
        """Check the token against this container and its parents."""
        if self._services.has(token):
            return True
        if self._parent is not None:
            return self._parent.has_registration(token)
        return False

    def get_registration(self, token: InjectionToken) -> Registration | None:
        """Return the primary registration from the first container that has one."""
        if self._services.has(token):
            return self._services.get(token)
        if self._parent is not None:
            return self._parent.get_registration(token)
        return None

    def get_all_registrations(self, token: InjectionToken) -> list[Registration]:
        """Return every registration from the first container that has any."""
        registrations = self._services.get_all(token)
        if registrations:
            return list(registrations)
        if self._parent is not None:
            return self._parent.get_all_registrations(token)
        return []

    def is_resolving(self, token: InjectionToken) -> bool:
        """Check whether the token is being resolved by this container in the current task."""
        return is_token_resolving(self, token)

    # endregion Register

    # region Resolve

    def resolve(self, token: InjectionToken, scope: Scope | None = None) -> Any:
        """Resolve a token to an instance.

        If the token is already being resolved (a circular dependency), a
        ``LazyReference`` to it is returned instead.

        Args:
            token: The token to resolve.
            scope: Scope used for ``Lifetime.SCOPED`` registrations.

        Raises:
            TokenNotFoundError: If the token has no registration and cannot be
                built as a bare class.
            UndefinedScopeError: If a scoped registration is resolved without a scope.
            DisposedScopeError: If ``scope`` was disposed.

        """
        if self._is_self_token(token):
            return self
        if scope is not None:
            scope.ensure_active()

        stack = get_resolution_stack(self)
        if token in stack:
            return self._lazy_reference(stack, token, scope)

        stack[token] = None
        try:
            registration = self.get_registration(token)
            if registration is None:
                if self._register_if_missing and is_constructor(token):
                    return self._resolve_constructor(token, scope)
                raise TokenNotFoundError(token)
            return self._resolve_registration(token, registration, scope)
        finally:
            stack.pop(token, None)
            release_resolution_stack(self)

    async def resolve_async(self, token: InjectionToken, scope: Scope | None = None) -> Any:
        """Asynchronously resolve a token to an instance.

        Follows the same steps as ``resolve`` but awaits injections in order and
        awaits factories that return awaitables.
        """
        if self._is_self_token(token):
            return self
        if scope is not None:
            scope.ensure_active()

        stack = get_resolution_stack(self)
        if token in stack:
            return self._lazy_reference(stack, token, scope)

        stack[token] = None
        try:
            registration = self.get_registration(token)
            if registration is None:
                if self._register_if_missing and is_constructor(token):
                    return await self._resolve_constructor_async(token, scope)
                raise TokenNotFoundError(token)
            return await self._resolve_registration_async(token, registration, scope)
        finally:
            stack.pop(token, None)
            release_resolution_stack(self)

    def resolve_all(self, token: InjectionToken, scope: Scope | None = None) -> list[Any]:
        """Resolve every registration of a token, in registration order.

        An unregistered class resolves to a one-element list.

        Raises:
            TokenNotFoundError: If the token is not registered and not a class.

        """
        if scope is not None:
            scope.ensure_active()
        registrations = self.get_all_registrations(token)
        if not registrations:
            if self._register_if_missing and is_constructor(token):
                return [self.resolve(token, scope)]
            raise TokenNotFoundError(token)
        return [self._resolve_registration(token, registration, scope) for registration in registrations]

    async def resolve_all_async(self, token: InjectionToken, scope: Scope | None = None) -> list[Any]:
        """Asynchronously resolve every registration of a token, one after another."""
        if scope is not None:
            scope.ensure_active()
        registrations = self.get_all_registrations(token)
        if not registrations:
            if self._register_if_missing and is_constructor(token):
                return [await self.resolve_async(token, scope)]
            raise TokenNotFoundError(token)
        return [await self._resolve_registration_async(token, registration, scope) for registration in registrations]

    def resolve_with_args(
        self,
        token: InjectionToken,
        args: Iterable[Any] = (),
        scope: Scope | None = None,
    ) -> Any:
        """Build a fresh instance, passing ``args`` ahead of the resolved injections.

        No lifetime caching is applied.

        Raises:
            TokenNotFoundError: If the token is not registered and not a class.
            InvalidRegistrationError: If the token is bound to a non-class provider.

        """
        if scope is not None:
            scope.ensure_active()
        cls, injections = self._class_for_args(token)
        resolved = [self.resolve(dependency, scope) for dependency in injections]
        return activate(cls, [*args, *resolved])

    async def resolve_with_args_async(
        self,
        token: InjectionToken,
        args: Iterable[Any] = (),
        scope: Scope | None = None,
    ) -> Any:
        """Asynchronously build a fresh instance, passing ``args`` ahead of the injections."""
        if scope is not None:
            scope.ensure_active()
        cls, injections = self._class_for_args(token)
        resolved = [await self.resolve_async(dependency, scope) for dependency in injections]
        return activate(cls, [*args, *resolved])

    # endregion Resolve

    # region Dispose

    async def clear_instances(self) -> None:
        """Dispose and drop every cached singleton, keeping the registrations."""
        instances = []
        for registrations in self._services.values():
            for registration in registrations:
                instances.extend(registration.cached_instances())
                registration.clear_instance()
        await dispose_all(instances)

    async def reset(self) -> None:
        """Dispose every scope and every registration of this container.

        The container stays usable. Child containers are not touched. A failing
        disposal is logged and does not stop the others.
        """
        logger.debug("Resetting container %r", self)
        await settle_all({scope: scope.dispose() for scope in list(self._scopes)})
        self._scopes.clear()
        await self._services.dispose()
        clear_resolution_stack(self)

    async def dispose(self) -> None:
        """Dispose child containers, scopes and registrations."""
        await settle_all({child: child.dispose() for child in self._children})
        self._children.clear()
        await self.reset()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        await self.dispose()

    # endregion Dispose

    def _is_self_token(self, token: InjectionToken) -> bool:
        return token is Container or token is type(self) or token == CONTAINER_TOKEN

    def _lazy_reference(self, stack: ResolutionStack, token: InjectionToken, scope: Scope | None) -> LazyReference:
        reference = stack[token]
        if reference is None:
            reference = LazyReference(self, token, scope)
            stack[token] = reference
            logger.debug("Circular dependency on %s, returning a lazy reference", token_name(token))
        return reference

    def _class_target(
        self,
        token: InjectionToken,
        target: type[Any] | ClassProvider[Any] | None,
    ) -> type[Any] | ClassProvider[Any]:
        if target is not None:
            return target
        if not is_constructor(token):
            msg = f"A target class is required to register {token_name(token)!r}."
            raise InvalidRegistrationError(msg)
        return token

    def _class_for_args(self, token: InjectionToken) -> tuple[type[Any], list[InjectionToken]]:
        registration = self.get_registration(token)
        if registration is None:
            if is_constructor(token):
                return token, get_static_injections(token) or []
            raise TokenNotFoundError(token)
        if not isinstance(registration.provider, ClassProvider):
            msg = f"{token_name(token)!r} is not bound to a class provider."
            raise InvalidRegistrationError(msg)
        return registration.provider.use_class, registration.injections

    def _inspect_circular_token_provider(self, token: InjectionToken, provider: TokenProvider[Any]) -> None:
        """Walk the alias chain starting at ``token`` and reject loops."""
        path = [token]
        seen = {token}
        token_provider: TokenProvider[Any] | None = provider
        while token_provider is not None:
            current = token_provider.use_token
            path.append(current)
            if current in seen:
                raise TokenRegistrationCycleError(path)
            seen.add(current)
            registration = self.get_registration(current)
            token_provider = (
                registration.provider
                if registration is not None and isinstance(registration.provider, TokenProvider)
                else None
            )

    def _constructor_metadata(self, token: type[Any], scope: Scope | None) -> tuple[Lifetime, list[InjectionToken]]:
        lifetime = get_static_lifetime(token) or self._default_lifetime
        if lifetime is Lifetime.SCOPED and scope is None:
            raise UndefinedScopeError(token)
        return lifetime, get_static_injections(token) or []

    def _materialize_constructor(
        self,
        token: type[Any],
        lifetime: Lifetime,
        injections: list[InjectionToken],
        instance: Any,
        scope: Scope | None,
    ) -> Any:
        registration = Registration(
            provider=ClassProvider(token),
            kind=ProviderKind.CONSTRUCTOR,
            lifetime=lifetime,
            injections=injections,
        )
        self.register_registration(token, registration)
        logger.debug("Auto-registered %s (%s)", token_name(token), lifetime.value)

        if lifetime is Lifetime.SINGLETON:
            registration.instance = instance
        elif lifetime is Lifetime.SCOPED and scope is not None:
            scope.set_instance(registration, instance)
        return instance

    def _resolve_constructor(self, token: type[Any], scope: Scope | None) -> Any:
        lifetime, injections = self._constructor_metadata(token, scope)
        args = [self.resolve(dependency, scope) for dependency in injections]
        instance = activate(token, args)
        return self._materialize_constructor(token, lifetime, injections, instance, scope)

    async def _resolve_constructor_async(self, token: type[Any], scope: Scope | None) -> Any:
        lifetime, injections = self._constructor_metadata(token, scope)
        args = [await self.resolve_async(dependency, scope) for dependency in injections]
        instance = activate(token, args)
        return self._materialize_constructor(token, lifetime, injections, instance, scope)

    def _resolve_registration(self, token: InjectionToken, registration: Registration, scope: Scope | None) -> Any:
        kind = registration.kind
        if kind is ProviderKind.CLASS or kind is ProviderKind.CONSTRUCTOR:
            return self._resolve_class_provider(token, registration, scope)
        if kind is ProviderKind.FACTORY:
            return self._resolve_factory_provider(token, registration, scope)
        if kind is ProviderKind.TOKEN:
            return self.resolve(registration.provider.use_token, scope)  # type: ignore[union-attr]
        if kind is ProviderKind.VALUE:
            return registration.provider.use_value  # type: ignore[union-attr]
        msg = f'Invalid registration type: "{kind}"'
        raise InvalidRegistrationError(msg)

    async def _resolve_registration_async(
        self,
        token: InjectionToken,
        registration: Registration,
        scope: Scope | None,
    ) -> Any:
        kind = registration.kind
        if kind is ProviderKind.CLASS or kind is ProviderKind.CONSTRUCTOR:
            return await self._resolve_class_provider_async(token, registration, scope)
        if kind is ProviderKind.FACTORY:
            return await self._resolve_factory_provider_async(registration, scope)
        if kind is ProviderKind.TOKEN:
            return await self.resolve_async(registration.provider.use_token, scope)  # type: ignore[union-attr]
        if kind is ProviderKind.VALUE:
            return registration.provider.use_value  # type: ignore[union-attr]
        msg = f'Invalid registration type: "{kind}"'
        raise InvalidRegistrationError(msg)

    def _cached_instance(
        self,
        token: InjectionToken,
        registration: Registration,
        scope: Scope | None,
    ) -> tuple[bool, Any]:
        """Return ``(found, instance)`` from the cache the lifetime points at."""
        if registration.lifetime is Lifetime.SCOPED:
            if scope is None:
                raise UndefinedScopeError(token)
            return scope.get_instance(registration)
        if registration.lifetime is Lifetime.SINGLETON and registration.has_instance():
            return True, registration.instance
        return False, None

    def _store_instance(self, registration: Registration, instance: Any, scope: Scope | None) -> Any:
        """Cache a freshly built instance; an instance cached meanwhile by another task wins."""
        if registration.lifetime is Lifetime.SCOPED and scope is not None:
            found, cached = scope.get_instance(registration)
            if found:
                return cached
            scope.set_instance(registration, instance)
        elif registration.lifetime is Lifetime.SINGLETON:
            if registration.has_instance():
                return registration.instance
            registration.instance = instance
        return instance

    def _resolve_class_provider(self, token: InjectionToken, registration: Registration, scope: Scope | None) -> Any:
        found, instance = self._cached_instance(token, registration, scope)
        if found:
            return instance
        args = [self.resolve(dependency, scope) for dependency in registration.injections]
        instance = activate(registration.provider.use_class, args)  # type: ignore[union-attr]
        return self._store_instance(registration, instance, scope)

    async def _resolve_class_provider_async(
        self,
        token: InjectionToken,
        registration: Registration,
        scope: Scope | None,
    ) -> Any:
        found, instance = self._cached_instance(token, registration, scope)
        if found:
            return instance
        args = [await self.resolve_async(dependency, scope) for dependency in registration.injections]
        instance = activate(registration.provider.use_class, args)  # type: ignore[union-attr]
        return self._store_instance(registration, instance, scope)

    def _resolve_factory_provider(self, token: InjectionToken, registration: Registration, scope: Scope | None) -> Any:
        factory = registration.provider.use_factory  # type: ignore[union-attr]
        if inspect.iscoroutinefunction(factory):
            raise AsyncDependencyInSyncContextError(token)
        args = [self.resolve(dependency, scope) for dependency in registration.injections]
        return factory(self, *args)

    async def _resolve_factory_provider_async(self, registration: Registration, scope: Scope | None) -> Any:
        factory = registration.provider.use_factory  # type: ignore[union-attr]
        args = [await self.resolve_async(dependency, scope) for dependency in registration.injections]
        result = factory(self, *args)
        if inspect.isawaitable(result):
            result = await result
        return result

    def __repr__(self) -> str:
        return f"<Container {id(self):#x} registrations={len(self._services)} scopes={len(self._scopes)}>"
