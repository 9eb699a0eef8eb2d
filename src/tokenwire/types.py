from enum import Enum


class Lifetime(str, Enum):
    """Defines how long a resolved instance is reused."""

    TRANSIENT = "transient"
    """A new instance is created every time the token is resolved."""

    SINGLETON = "singleton"
    """A single instance is created and cached on the registration of its container."""

    SCOPED = "scoped"
    """Instance is shared within a scope, different instances across scopes."""
