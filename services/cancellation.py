"""
services/cancellation.py

Responsibility: Runs a single awaitable under a deadline while watching the
detector's parent stop signal, aborting it promptly when either fires.
Does NOT: retry, translate errors into the detection taxonomy, or log.
"""

from __future__ import annotations

import asyncio
import contextlib
from typing import Awaitable, Optional, TypeVar

T = TypeVar("T")


class StopRequested(Exception):
    """Raised by run_until_stopped when the stop signal fired first."""


async def _discard(task: asyncio.Future) -> None:
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError, Exception):
        await task


async def run_until_stopped(
    awaitable: Awaitable[T],
    timeout: float,
    stop_event: Optional[asyncio.Event] = None,
) -> T:
    """
    Awaits awaitable, bounded by timeout and by stop_event.

    Args:
        awaitable: The coroutine or future to run.
        timeout: Deadline in seconds.
        stop_event: Parent stop signal; when set, the awaitable is cancelled.

    Returns:
        The awaitable's result.

    Raises:
        StopRequested: If stop_event is already set or becomes set first.
        asyncio.TimeoutError: If the deadline passes first.
        Exception: Whatever the awaitable itself raises.
    """
    if stop_event is not None and stop_event.is_set():
        # Close a never-started coroutine so it does not warn on GC
        if asyncio.iscoroutine(awaitable):
            awaitable.close()
        raise StopRequested()

    task = asyncio.ensure_future(awaitable)
    if stop_event is None:
        return await asyncio.wait_for(task, timeout)

    stop_waiter = asyncio.ensure_future(stop_event.wait())
    try:
        done, _ = await asyncio.wait(
            {task, stop_waiter},
            timeout=timeout,
            return_when=asyncio.FIRST_COMPLETED,
        )
    except BaseException:
        await _discard(task)
        raise
    finally:
        stop_waiter.cancel()

    if task in done:
        return task.result()

    await _discard(task)
    if stop_waiter in done:
        raise StopRequested()
    raise asyncio.TimeoutError()
