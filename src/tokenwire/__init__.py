from tokenwire.container import Container
from tokenwire.container_context import ContainerContext, container_context
from tokenwire.exceptions import (
    AsyncDependencyInSyncContextError,
    CircularDependencyError,
    DisposedScopeError,
    InvalidDecoratorError,
    InvalidRegistrationError,
    TokenNotFoundError,
    TokenRegistrationCycleError,
    TokenWireError,
    UndefinedScopeError,
)
from tokenwire.lazy import LazyReference, is_lazy_reference, is_materialized
from tokenwire.metadata import injectable
from tokenwire.providers import (
    ClassProvider,
    FactoryProvider,
    ProviderKind,
    TokenProvider,
    ValueProvider,
)
from tokenwire.registration_decorators import scoped, singleton, transient
from tokenwire.registry import Registration
from tokenwire.scope import Scope
from tokenwire.tokens import CONTAINER_TOKEN, InterfaceToken, Token, interface_token
from tokenwire.types import Lifetime

__all__ = [
    "CONTAINER_TOKEN",
    "AsyncDependencyInSyncContextError",
    "CircularDependencyError",
    "ClassProvider",
    "Container",
    "ContainerContext",
    "DisposedScopeError",
    "FactoryProvider",
    "InterfaceToken",
    "InvalidDecoratorError",
    "InvalidRegistrationError",
    "LazyReference",
    "Lifetime",
    "ProviderKind",
    "Registration",
    "Scope",
    "Token",
    "TokenNotFoundError",
    "TokenProvider",
    "TokenRegistrationCycleError",
    "TokenWireError",
    "UndefinedScopeError",
    "ValueProvider",
    "container_context",
    "injectable",
    "interface_token",
    "is_lazy_reference",
    "is_materialized",
    "scoped",
    "singleton",
    "transient",
]
