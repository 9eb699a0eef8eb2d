"""Scopes and cleanup: cached instances are closed when their owner goes away.

Anything exposing ``close()`` or ``aclose()`` is disposed when its scope is
disposed, or when the container is reset or disposed. Values registered with
``register_value`` are never disposed.
"""

from __future__ import annotations

import asyncio

from tokenwire import Container


class Session:
    def __init__(self) -> None:
        self.closed = False

    async def aclose(self) -> None:
        self.closed = True


class ConnectionPool:
    def __init__(self) -> None:
        self.closed = False

    def close(self) -> None:
        self.closed = True


async def main() -> None:
    async with Container() as container:
        container.register_singleton(ConnectionPool)
        container.register_scoped(Session)
        pool = container.resolve(ConnectionPool)

        async with container.create_scope() as scope:
            session = await scope.resolve_async(Session)
            print(f"session_closed_inside={session.closed}")  # => session_closed_inside=False

        print(f"session_closed_after={session.closed}")  # => session_closed_after=True
        print(f"pool_closed_before_dispose={pool.closed}")  # => pool_closed_before_dispose=False

    print(f"pool_closed_after_dispose={pool.closed}")  # => pool_closed_after_dispose=True


if __name__ == "__main__":
    asyncio.run(main())
