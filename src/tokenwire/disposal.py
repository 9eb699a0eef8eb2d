from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Iterable, Mapping
from typing import Any

from tokenwire.exceptions import AsyncDependencyInSyncContextError

logger = logging.getLogger(__name__)


def is_disposable(instance: Any) -> bool:
    """Check whether the instance exposes a callable ``close()``."""
    return instance is not None and callable(getattr(type(instance), "close", None))


def is_async_disposable(instance: Any) -> bool:
    """Check whether the instance exposes a callable ``aclose()``."""
    return instance is not None and callable(getattr(type(instance), "aclose", None))


async def dispose_instance(instance: Any) -> None:
    """Dispose a single instance, preferring ``aclose()`` over ``close()``."""
    if is_async_disposable(instance):
        result = instance.aclose()
        if inspect.isawaitable(result):
            await result
    elif is_disposable(instance):
        result = instance.close()
        if inspect.isawaitable(result):
            await result


async def dispose_all(instances: Iterable[Any]) -> None:
    """Dispose every instance, settling all of them even when some fail.

    Asynchronous disposals run first and are awaited together; synchronous
    ``close()`` calls follow. Failures are logged and never re-raised, so one
    broken ``aclose()`` cannot keep the remaining instances alive.
    """
    async_disposables: list[Any] = []
    sync_disposables: list[Any] = []
    for instance in instances:
        if is_async_disposable(instance):
            async_disposables.append(instance)
        elif is_disposable(instance):
            sync_disposables.append(instance)

    if async_disposables:
        results = await asyncio.gather(
            *(dispose_instance(instance) for instance in async_disposables),
            return_exceptions=True,
        )
        for instance, result in zip(async_disposables, results):
            if isinstance(result, BaseException):
                logger.warning("Disposal of %r failed: %r", instance, result)

    for instance in sync_disposables:
        try:
            await dispose_instance(instance)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Disposal of %r failed: %r", instance, exc)


def close_all(instances: Iterable[Any]) -> None:
    """Synchronously close every instance, settling all of them.

    Raises:
        AsyncDependencyInSyncContextError: After the whole batch ran, if any
            instance could only be closed with ``aclose()``.

    """
    async_only: list[Any] = []
    for instance in instances:
        if is_disposable(instance):
            try:
                instance.close()
            except Exception as exc:  # noqa: BLE001
                logger.warning("Disposal of %r failed: %r", instance, exc)
        elif is_async_disposable(instance):
            logger.warning("%r can only be disposed asynchronously", instance)
            async_only.append(instance)

    if async_only:
        raise AsyncDependencyInSyncContextError(
            type(async_only[0]),
            f"{len(async_only)} instance(s) can only be disposed with aclose(), use dispose()",
        )


async def settle_all(operations: Mapping[Any, Awaitable[Any]]) -> None:
    """Await every operation; log and drop failures keyed by their subject."""
    if not operations:
        return
    subjects = list(operations)
    results = await asyncio.gather(*operations.values(), return_exceptions=True)
    for subject, result in zip(subjects, results):
        if isinstance(result, BaseException):
            logger.warning("Disposal of %r failed: %r", subject, result)
