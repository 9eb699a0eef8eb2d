"""Tests for container reset, disposal and batch disposal helpers."""

from __future__ import annotations

import logging

import pytest

from tokenwire.container import Container
from tokenwire.disposal import close_all, dispose_all, is_async_disposable, is_disposable, settle_all
from tokenwire.exceptions import AsyncDependencyInSyncContextError


class Resource:
    def __init__(self) -> None:
        self.closed = 0

    def close(self) -> None:
        self.closed += 1


class AsyncResource:
    def __init__(self) -> None:
        self.closed = 0

    async def aclose(self) -> None:
        self.closed += 1


class BothResource:
    def __init__(self) -> None:
        self.calls: list[str] = []

    def close(self) -> None:
        self.calls.append("close")

    async def aclose(self) -> None:
        self.calls.append("aclose")


class BrokenResource:
    def close(self) -> None:
        msg = "broken"
        raise RuntimeError(msg)


class TestCapabilities:
    def test_detection(self) -> None:
        assert is_disposable(Resource())
        assert not is_async_disposable(Resource())
        assert is_async_disposable(AsyncResource())
        assert not is_disposable(AsyncResource())
        assert not is_disposable(None)
        assert not is_disposable(object())

    def test_instance_attribute_is_not_a_capability(self) -> None:
        """Only methods defined on the type count."""
        class Plain:
            pass

        value = Plain()
        value.close = lambda: None  # type: ignore[attr-defined]

        assert not is_disposable(value)


class TestDisposeAll:
    """Batch disposal settles every instance."""

    async def test_prefers_aclose(self) -> None:
        resource = BothResource()

        await dispose_all([resource])

        assert resource.calls == ["aclose"]

    async def test_failure_logged_and_others_disposed(self, caplog: pytest.LogCaptureFixture) -> None:
        healthy = Resource()
        async_healthy = AsyncResource()

        with caplog.at_level(logging.WARNING, logger="tokenwire.disposal"):
            await dispose_all([BrokenResource(), healthy, async_healthy])

        assert healthy.closed == 1
        assert async_healthy.closed == 1
        assert "broken" in caplog.text

    def test_close_all_reports_async_only_after_batch(self) -> None:
        healthy = Resource()

        with pytest.raises(AsyncDependencyInSyncContextError):
            close_all([AsyncResource(), healthy])

        assert healthy.closed == 1

    async def test_settle_all_logs_failures(self, caplog: pytest.LogCaptureFixture) -> None:
        async def fail() -> None:
            msg = "nope"
            raise ValueError(msg)

        async def succeed() -> None:
            return None

        with caplog.at_level(logging.WARNING, logger="tokenwire.disposal"):
            await settle_all({"bad": fail(), "good": succeed()})

        assert "'bad'" in caplog.text
        assert "'good'" not in caplog.text


class TestContainerReset:
    """reset() empties the container but keeps it usable."""

    async def test_reset_disposes_singletons_and_scopes(self, container: Container) -> None:
        container.register_singleton(Resource)
        container.register_scoped(AsyncResource)
        singleton = container.resolve(Resource)
        scope = container.create_scope()
        scoped = scope.resolve(AsyncResource)

        await container.reset()

        assert singleton.closed == 1
        assert scoped.closed == 1
        assert scope.is_disposed
        assert container.scopes == frozenset()
        assert not container.has_registration(Resource)

    async def test_reset_empty_container_is_noop(self, container: Container) -> None:
        await container.reset()
        await container.reset()

        container.register_value("after", 1)
        assert container.resolve("after") == 1

    async def test_transient_instances_not_tracked(self, container: Container) -> None:
        container.register_transient(Resource)
        resource = container.resolve(Resource)

        await container.reset()

        assert resource.closed == 0

    async def test_values_never_disposed(self, container: Container) -> None:
        resource = Resource()
        container.register_value("resource", resource)

        await container.reset()

        assert resource.closed == 0

    async def test_broken_singleton_does_not_block_reset(self, container: Container) -> None:
        container.register_singleton(BrokenResource)
        container.register_singleton(Resource)
        container.resolve(BrokenResource)
        resource = container.resolve(Resource)

        await container.reset()

        assert resource.closed == 1
        assert not container.has_registration(BrokenResource)


class TestClearInstances:
    async def test_clear_instances_keeps_registrations(self, container: Container) -> None:
        container.register_singleton(Resource)
        first = container.resolve(Resource)

        await container.clear_instances()

        assert first.closed == 1
        second = container.resolve(Resource)
        assert second is not first
        assert second.closed == 0


class TestContainerDispose:
    async def test_async_context_manager_disposes(self) -> None:
        async with Container() as container:
            container.register_singleton(AsyncResource)
            resource = container.resolve(AsyncResource)
            scope = container.create_scope()

        assert resource.closed == 1
        assert scope.is_disposed

    async def test_container_usable_after_dispose(self, container: Container) -> None:
        await container.dispose()

        container.register_value("again", True)
        assert container.resolve("again") is True
