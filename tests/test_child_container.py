"""Tests for parent/child container hierarchies."""

from dataclasses import dataclass

import pytest

from tokenwire.container import Container
from tokenwire.exceptions import TokenNotFoundError
from tokenwire.types import Lifetime


@dataclass
class Config:
    env: str = "parent"


class TestLookupDelegation:
    """Children fall back to the parent and shadow it locally."""

    def test_child_uses_parent_registration(self, container: Container) -> None:
        container.register_value("env", "production")
        child = container.create_child_container()

        assert child.resolve("env") == "production"
        assert child.has_registration("env")

    def test_child_registration_shadows_parent(self, container: Container) -> None:
        container.register_value("env", "production")
        child = container.create_child_container()
        child.register_value("env", "testing")

        assert child.resolve("env") == "testing"
        assert container.resolve("env") == "production"

    def test_parent_does_not_see_child_registrations(self, container: Container) -> None:
        child = container.create_child_container()
        child.register_value("only-child", 1)

        with pytest.raises(TokenNotFoundError):
            container.resolve("only-child")

    def test_parent_singleton_shared_with_child(self, container: Container) -> None:
        container.register_singleton(Config)
        child = container.create_child_container()

        assert child.resolve(Config) is container.resolve(Config)

    def test_resolve_all_uses_first_container_with_registrations(self, container: Container) -> None:
        container.register_value("plugin", "parent-a")
        container.register_value("plugin", "parent-b")
        child = container.create_child_container()

        assert child.resolve_all("plugin") == ["parent-a", "parent-b"]

        child.register_value("plugin", "child")

        assert child.resolve_all("plugin") == ["child"]

    def test_child_resolves_itself(self, container: Container) -> None:
        child = container.create_child_container()

        assert child.resolve(Container) is child
        assert child.parent is container

    def test_grandchild_walks_whole_chain(self, container: Container) -> None:
        container.register_value("root", "value")
        grandchild = container.create_child_container().create_child_container()

        assert grandchild.resolve("root") == "value"
        assert grandchild.get_registration("root") is container.get_registration("root")


class TestChildConfiguration:
    """Children inherit the parent's configuration."""

    def test_child_inherits_default_lifetime(self, container_singleton: Container) -> None:
        child = container_singleton.create_child_container()

        assert child.resolve(Config) is child.resolve(Config)

    def test_child_inherits_strict_mode(self, container_no_autoregister: Container) -> None:
        child = container_no_autoregister.create_child_container()

        with pytest.raises(TokenNotFoundError):
            child.resolve(Config)

    def test_every_child_is_remembered(self, container: Container) -> None:
        first = container.create_child_container()
        second = container.create_child_container()

        assert container.children == (first, second)


class TestChildDisposal:
    """Disposing a container disposes every child it created."""

    async def test_dispose_disposes_all_children(self, container: Container) -> None:
        class Resource:
            def __init__(self) -> None:
                self.closed = False

            def close(self) -> None:
                self.closed = True

        first = container.create_child_container()
        second = container.create_child_container()
        first.register(Resource, Resource, lifetime=Lifetime.SINGLETON)
        second.register(Resource, Resource, lifetime=Lifetime.SINGLETON)
        first_resource = first.resolve(Resource)
        second_resource = second.resolve(Resource)

        await container.dispose()

        assert first_resource.closed
        assert second_resource.closed
        assert container.children == ()

    async def test_reset_leaves_children_alone(self, container: Container) -> None:
        child = container.create_child_container()
        child.register_value("kept", 1)

        await container.reset()

        assert child.resolve("kept") == 1
        assert container.children == (child,)
