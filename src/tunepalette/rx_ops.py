"""Reactive glue between asyncio tasks and RxPY observables.

Catalog searches run as asyncio tasks but are composed and disposed as
observables. Everything here is cold: no task exists until something
subscribes, and disposing that subscription cancels the task.

- from_task: one task per subscription, cancelled on dispose
- with_retries: from_task over a backoff loop, so dispose stops retrying
- await_first: await an observable's first value from a coroutine
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Coroutine, TypeVar

import reactivex as rx
from reactivex import Observable
from reactivex.abc import ObserverBase
from reactivex.disposable import Disposable

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _relay(observer: ObserverBase, task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        observer.on_error(exc)
        return
    observer.on_next(task.result())
    observer.on_completed()


def from_task(coro_factory: Callable[[], Coroutine[Any, Any, T]]) -> Observable:
    """Observable that runs ``coro_factory()`` as a task per subscription.

    Emits the coroutine's value and completes, or errors with whatever it
    raised. A subscription disposed before the task finishes cancels the
    task and emits nothing.
    """

    def subscribe(observer, scheduler=None):
        task = asyncio.get_running_loop().create_task(coro_factory())
        task.add_done_callback(lambda t: _relay(observer, t))
        return Disposable(lambda: task.cancel() if not task.done() else None)

    return rx.create(subscribe)


def with_retries(
    fn: Callable[[], Awaitable[T]],
    max_retries: int = 1,
    base_delay: float = 0.25,
    should_retry: Callable[[Exception], bool] = lambda e: True,
) -> Observable:
    """Observable that calls *fn* until it succeeds or retries run out.

    Args:
        fn: Zero-argument async callable, e.g. one catalog request.
        max_retries: Extra attempts after the first failure.
        base_delay: Sleep before the first retry; doubles on each retry.
        should_retry: Errors it rejects are raised without retrying.

    Returns:
        A cold Observable. Disposing it mid-backoff cancels the sleep and
        no further attempt is made.
    """

    async def attempts() -> T:
        attempt = 0
        while True:
            try:
                return await fn()
            except Exception as exc:
                if attempt >= max_retries or not should_retry(exc):
                    raise
                delay = base_delay * 2**attempt
                attempt += 1
                logger.debug(
                    "Attempt failed (%s); retry %d/%d in %.2fs",
                    exc,
                    attempt,
                    max_retries,
                    delay,
                )
                await asyncio.sleep(delay)

    return from_task(attempts)


async def await_first(obs: Observable) -> Any:
    """Subscribe to *obs* and await its first value.

    The subscription is disposed once this coroutine finishes for any
    reason, so cancelling the awaiting task also cancels the work *obs*
    started.

    Raises:
        Exception: Whatever the observable errors with.
    """
    future: asyncio.Future = asyncio.get_running_loop().create_future()

    def settle(setter: Callable[[Any], None], value: Any) -> None:
        if not future.done():
            setter(value)

    subscription = obs.subscribe(
        on_next=lambda v: settle(future.set_result, v),
        on_error=lambda e: settle(future.set_exception, e),
        on_completed=lambda: settle(future.set_result, None),
    )
    try:
        return await future
    finally:
        subscription.dispose()
