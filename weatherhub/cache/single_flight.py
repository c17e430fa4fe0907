"""Per-key call coalescing: one in-flight task per key, shared by all callers."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class _Call(Generic[T]):
    task: "asyncio.Task[T]"
    waiters: int = 0
    abandoned: bool = False


class SingleFlight:
    """Coalesces concurrent calls for the same key onto one task.

    Every waiter receives the task's result or exception. Cancelling a waiter
    leaves the shared task running for the others; the task is cancelled only
    once its last waiter has gone. A caller arriving while a cancelled task is
    still unwinding waits for it to finish before starting a new one, so two
    tasks never run for the same key. Must be used from a single event loop.
    """

    def __init__(self) -> None:
        self._calls: dict[str, _Call[Any]] = {}

    def in_flight(self, key: str) -> bool:
        call = self._calls.get(key)
        return call is not None and not call.task.done() and not call.abandoned

    async def do(self, key: str, fn: Callable[[], Awaitable[T]]) -> tuple[T, bool]:
        """Run ``fn`` for ``key`` unless a call is already in flight.

        Returns ``(result, shared)`` where ``shared`` is True when this
        caller joined a call started by someone else.
        """
        call = self._calls.get(key)
        while call is not None and call.abandoned and not call.task.done():
            logger.debug("Waiting for cancelled call for %s to unwind", key)
            await asyncio.wait({call.task})
            call = self._calls.get(key)
        if call is not None and call.task.done():
            call = None
        shared = call is not None
        if call is None:
            call = _Call(task=asyncio.ensure_future(fn()))
            self._calls[key] = call
            call.task.add_done_callback(lambda _t, c=call: self._forget(key, c))
        else:
            logger.debug("Joining in-flight call for %s", key)

        call.waiters += 1
        try:
            result = await asyncio.shield(call.task)
        finally:
            call.waiters -= 1
            if call.waiters == 0 and not call.task.done():
                logger.debug("Last waiter for %s cancelled, cancelling call", key)
                call.abandoned = True
                call.task.cancel()
        return result, shared

    def _forget(self, key: str, call: _Call[Any]) -> None:
        if self._calls.get(key) is call:
            del self._calls[key]
        # mark the failure as retrieved; waiters already received it
        if not call.task.cancelled():
            call.task.exception()
