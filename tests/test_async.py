"""Tests for asynchronous resolution."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

import pytest

from tokenwire.container import Container
from tokenwire.exceptions import InvalidRegistrationError, TokenNotFoundError, UndefinedScopeError
from tokenwire.lazy import is_lazy_reference
from tokenwire.metadata import injectable
from tokenwire.types import Lifetime


@dataclass
class Connection:
    dsn: str


@dataclass
class Repository:
    connection: Connection


class TestResolveAsync:
    """resolve_async follows the same rules as resolve."""

    async def test_async_factory_is_awaited(self, container: Container) -> None:
        async def connect(_: Container) -> Connection:
            await asyncio.sleep(0)
            return Connection("postgres://")

        container.register_factory(Connection, connect)

        connection = await container.resolve_async(Connection)

        assert connection == Connection("postgres://")

    async def test_async_factory_result_injected(self, container: Container) -> None:
        async def connect(_: Container) -> Connection:
            return Connection("sqlite://")

        container.register_factory(Connection, connect)
        container.register_transient(Repository, injections=[Connection])

        repository = await container.resolve_async(Repository)

        assert repository.connection.dsn == "sqlite://"

    async def test_sync_factory_works_on_async_path(self, container: Container) -> None:
        container.register_factory("answer", lambda _: 42)

        assert await container.resolve_async("answer") == 42

    async def test_injections_resolved_in_declared_order(self, container: Container) -> None:
        order: list[str] = []

        def make(name: str):  # noqa: ANN202
            async def factory(_: Container) -> str:
                order.append(name)
                await asyncio.sleep(0)
                return name

            return factory

        @dataclass
        class Pair:
            first: str
            second: str

        container.register_factory("first", make("first"))
        container.register_factory("second", make("second"))
        container.register_transient(Pair, injections=["first", "second"])

        pair = await container.resolve_async(Pair)

        assert order == ["first", "second"]
        assert pair == Pair("first", "second")

    async def test_async_singleton_cached(self, container: Container) -> None:
        container.register_value("dsn", "mysql://")
        container.register_singleton(Connection, injections=["dsn"])

        first = await container.resolve_async(Connection)
        second = await container.resolve_async(Connection)

        assert first is second
        assert container.resolve(Connection) is first

    async def test_async_scoped_requires_scope(self, container: Container) -> None:
        container.register_value("dsn", "mysql://")
        container.register_scoped(Connection, injections=["dsn"])

        with pytest.raises(UndefinedScopeError):
            await container.resolve_async(Connection)

        scope = container.create_scope()
        assert await scope.resolve_async(Connection) is await scope.resolve_async(Connection)

    async def test_async_bare_constructor(self, container: Container) -> None:
        @injectable(Lifetime.SINGLETON)
        class Clock:
            pass

        clock = await container.resolve_async(Clock)

        assert container.resolve(Clock) is clock

    async def test_async_missing_token(self, container: Container) -> None:
        with pytest.raises(TokenNotFoundError):
            await container.resolve_async("missing")
        assert not container.is_resolving("missing")

    async def test_async_container_token(self, container: Container) -> None:
        assert await container.resolve_async(Container) is container


class TestResolveAllAsync:
    async def test_resolve_all_async_awaits_each(self, container: Container) -> None:
        async def one(_: Container) -> int:
            return 1

        container.register_factory("numbers", one)
        container.register_value("numbers", 2)

        assert await container.resolve_all_async("numbers") == [1, 2]

    async def test_resolve_all_async_missing(self, container: Container) -> None:
        with pytest.raises(TokenNotFoundError):
            await container.resolve_all_async("missing")


class TestResolveWithArgsAsync:
    async def test_args_and_async_injections(self, container: Container) -> None:
        @dataclass
        class Query:
            sql: str
            connection: Connection

        async def connect(_: Container) -> Connection:
            return Connection("async://")

        container.register_factory(Connection, connect)
        container.register_transient(Query, injections=[Connection])

        query = await container.resolve_with_args_async(Query, ["select 1"])

        assert query == Query("select 1", Connection("async://"))

    async def test_non_class_provider_raises(self, container: Container) -> None:
        container.register_value("value", 1)

        with pytest.raises(InvalidRegistrationError):
            await container.resolve_with_args_async("value")


class TestConcurrentResolution:
    """Tasks resolving at the same time never see each other's in-progress tokens."""

    async def test_gathered_resolutions_are_not_cycles(self, container: Container) -> None:
        async def connect(_: Container) -> Connection:
            await asyncio.sleep(0.01)
            return Connection("postgres://")

        container.register_factory(Connection, connect)
        container.register_singleton(Repository, injections=[Connection])

        first, second = await asyncio.gather(
            container.resolve_async(Repository),
            container.resolve_async(Repository),
        )

        assert not is_lazy_reference(first)
        assert not is_lazy_reference(second)
        assert second.connection.dsn == "postgres://"

    async def test_singleton_cached_by_first_finished_task(self, container: Container) -> None:
        async def connect(_: Container) -> Connection:
            await asyncio.sleep(0.01)
            return Connection("postgres://")

        container.register_factory(Connection, connect)
        container.register_singleton(Repository, injections=[Connection])

        first, second = await asyncio.gather(
            container.resolve_async(Repository),
            container.resolve_async(Repository),
        )

        assert first is second
        assert container.resolve(Repository) is first

    async def test_in_progress_token_is_task_local(self, container: Container) -> None:
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow(resolver: Container) -> bool:
            started.set()
            await release.wait()
            return resolver.is_resolving("slow")

        container.register_factory("slow", slow)

        task = asyncio.create_task(container.resolve_async("slow"))
        await started.wait()

        assert not container.is_resolving("slow")
        release.set()
        assert await task is True
        assert not container.is_resolving("slow")
