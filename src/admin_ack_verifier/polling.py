"""Poll a predicate until it holds or a deadline passes."""

from __future__ import annotations

import asyncio
import inspect
import time
from collections.abc import Awaitable, Callable

import structlog

log = structlog.get_logger()

Predicate = Callable[[], bool | Awaitable[bool]]


class PollTimeoutError(TimeoutError):
    """Raised when a polled predicate does not hold before the deadline."""

    def __init__(self, description: str, timeout: float) -> None:
        super().__init__("timed out waiting for the condition")
        self.description = description
        self.timeout = timeout


async def poll_until(
    predicate: Predicate,
    *,
    interval: float,
    timeout: float,
    description: str = "condition",
) -> None:
    """Evaluate ``predicate`` immediately and then every ``interval`` seconds until it returns True.

    The predicate may be a plain function or a coroutine function. Exceptions it
    raises propagate to the caller unchanged. Cancelling the calling task
    interrupts the sleep, so the loop exits within one interval.

    Raises:
        PollTimeoutError: If ``timeout`` seconds pass without the predicate holding.
    """
    deadline = time.monotonic() + timeout
    attempts = 0
    while True:
        attempts += 1
        result = predicate()
        if inspect.isawaitable(result):
            result = await result
        if result:
            log.debug("poll_satisfied", description=description, attempts=attempts)
            return

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            log.warning("poll_timed_out", description=description, attempts=attempts, timeout_s=timeout)
            raise PollTimeoutError(description, timeout)
        await asyncio.sleep(min(interval, remaining))
