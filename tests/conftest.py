"""Shared pytest fixtures for tokenwire tests."""

from collections.abc import Iterator

import pytest

from tokenwire.container import Container
from tokenwire.container_context import container_context
from tokenwire.types import Lifetime


@pytest.fixture()
def container() -> Container:
    """Default container with bare-constructor resolution enabled."""
    return Container(register_if_missing=True)


@pytest.fixture()
def container_no_autoregister() -> Container:
    """Container with register_if_missing=False."""
    return Container(register_if_missing=False)


@pytest.fixture()
def container_singleton() -> Container:
    """Container with lifetime singleton as default."""
    return Container(default_lifetime=Lifetime.SINGLETON)


@pytest.fixture()
def ambient_container() -> Iterator[Container]:
    """Fresh container bound to ``container_context`` for the duration of a test."""
    bound = Container()
    container_context.set_current(bound)
    yield bound
    container_context.reset_current()
