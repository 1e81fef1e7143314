"""Cooperative cancellation for invoke calls.

A CancellationToken is shared between the caller and one invoke. Waits and
in-flight transport calls race against it, so a cancel() takes effect
without waiting for the next loop iteration.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable
from typing import TypeVar

T = TypeVar("T")


class CancellationToken:
    """One-shot cancellation signal backed by an asyncio.Event."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def sleep(self, delay: float) -> bool:
        """Sleep for `delay` seconds or until cancelled.

        Returns:
            True if the token was cancelled before the delay elapsed
        """
        if self.cancelled:
            return True
        if delay <= 0:
            # Still yield so a concurrent cancel() gets a chance to run
            await asyncio.sleep(0)
            return self.cancelled
        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(self._event.wait(), timeout=delay)
        return self.cancelled

    async def run(self, awaitable: Awaitable[T]) -> tuple[bool, T | None]:
        """Await `awaitable` unless the token fires first.

        Returns:
            (cancelled, result). When cancelled, the pending call is cancelled
            and awaited before returning.
        """
        task = asyncio.ensure_future(awaitable)
        if self.cancelled:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
            return True, None

        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            waiter.cancel()

        if task.done():
            return False, task.result()

        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        return True, None
