"""Lifetimes: transient, singleton and scoped caching.

Transient registrations build a new instance on every resolution.
Singletons are cached on their registration. Scoped instances are cached
per scope and need a scope to resolve.
"""

from __future__ import annotations

from dataclasses import dataclass

from tokenwire import Container, UndefinedScopeError


@dataclass
class Counter:
    count: int = 0


@dataclass
class RequestContext:
    request_id: int = 0


def main() -> None:
    container = Container()

    container.register_transient("transient_counter", Counter)
    first = container.resolve("transient_counter")
    second = container.resolve("transient_counter")
    print(f"transient_same={first is second}")  # => transient_same=False
    print(f"transient_equal={first == second}")  # => transient_equal=True

    container.register_singleton(Counter)
    shared = container.resolve(Counter)
    shared.count += 1
    print(f"singleton_count={container.resolve(Counter).count}")  # => singleton_count=1

    container.register_scoped(RequestContext)
    try:
        container.resolve(RequestContext)
    except UndefinedScopeError as error:
        print(type(error).__name__)  # => UndefinedScopeError

    scope_a = container.create_scope()
    scope_b = container.create_scope()
    same_scope = scope_a.resolve(RequestContext) is scope_a.resolve(RequestContext)
    other_scope = scope_a.resolve(RequestContext) is scope_b.resolve(RequestContext)
    print(f"same_scope={same_scope}")  # => same_scope=True
    print(f"other_scope={other_scope}")  # => other_scope=False


if __name__ == "__main__":
    main()
