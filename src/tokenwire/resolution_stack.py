from __future__ import annotations

import asyncio
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

from tokenwire.tokens import InjectionToken

if TYPE_CHECKING:
    from tokenwire.container import Container
    from tokenwire.lazy import LazyReference

ResolutionStack = dict[InjectionToken, "LazyReference | None"]
"""Tokens being resolved by one container: ``None`` while pending, a reference once a cycle was seen."""

# Stores (task_id, stacks) so a task that inherited another task's stacks can clone them
_resolution_stacks: ContextVar[tuple[int | None, dict[Any, ResolutionStack]] | None] = ContextVar(
    "tokenwire_resolution_stacks",
    default=None,
)


def _get_context_id() -> int | None:
    """Return the id of the running asyncio task, or ``None`` outside of one."""
    try:
        task = asyncio.current_task()
        return id(task) if task is not None else None
    except RuntimeError:
        return None


def _current_stacks() -> dict[Any, ResolutionStack]:
    current_task_id = _get_context_id()
    stored = _resolution_stacks.get()

    if stored is None:
        stacks: dict[Any, ResolutionStack] = {}
        _resolution_stacks.set((current_task_id, stacks))
        return stacks

    owner_task_id, stacks = stored

    # A new task sees the stacks of the context it was created from; clone for isolation
    if current_task_id is not None and owner_task_id != current_task_id:
        cloned = {container: dict(stack) for container, stack in stacks.items()}
        _resolution_stacks.set((current_task_id, cloned))
        return cloned

    return stacks


def get_resolution_stack(container: Container) -> ResolutionStack:
    """Return the container's in-progress map for the current task or thread."""
    return _current_stacks().setdefault(container, {})


def is_token_resolving(container: Container, token: InjectionToken) -> bool:
    stack = _current_stacks().get(container)
    return stack is not None and token in stack


def release_resolution_stack(container: Container) -> None:
    """Drop the container's map once nothing is in progress, so the container is not kept alive."""
    stacks = _current_stacks()
    if not stacks.get(container, True):
        del stacks[container]


def clear_resolution_stack(container: Container) -> None:
    _current_stacks().pop(container, None)
