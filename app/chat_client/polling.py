"""
Cancellable fixed-interval polling with change detection.

A PollingLoop repeatedly calls an async ``fetch`` and hands the result to
``on_change`` only when it differs (by ==) from the last applied result.

States:
    IDLE     -> start()  -> POLLING
    POLLING  -> stop()   -> IDLE

Each fetch is tagged with a sequence number taken when it is issued. A
response is applied only if its number is higher than the last applied one,
so a slow response that lands after a newer one is dropped.

Background fetches (issued by the ticker) log and swallow their errors; the
next tick retries. An exception raised by on_change during a background
tick is logged the same way. Foreground fetches (refresh()) raise to the caller.
stop() cancels the ticker and every in-flight background fetch before
returning; a foreground fetch still awaiting its response when stop() runs
is returned to its caller but never applied.
"""

from __future__ import annotations

import asyncio
import enum
import itertools
import logging
from typing import Any, Awaitable, Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LoopState(enum.Enum):
    IDLE = "idle"
    POLLING = "polling"


class PollingLoop(Generic[T]):
    """
    Poll ``fetch`` every ``interval`` seconds while POLLING.

    Args:
        fetch: Coroutine function returning the current remote state
        on_change: Called with the new state whenever it changes
        interval: Seconds between ticks
        name: Label used in log messages
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[T]],
        on_change: Callable[[T], Any],
        interval: float = 1.0,
        name: str = "poll",
    ):
        self._fetch = fetch
        self._on_change = on_change
        self.interval = interval
        self.name = name

        self._state = LoopState.IDLE
        self._ticker: asyncio.Task | None = None
        self._in_flight: set[asyncio.Task] = set()
        self._sequence = itertools.count(1)
        self._applied_seq = 0
        self._generation = 0
        self._has_value = False
        self._value: T | None = None

    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def value(self) -> T | None:
        """Last applied state, or None before the first successful fetch."""
        return self._value

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    def start(self) -> None:
        """Enter POLLING; the first fetch is issued immediately. No-op if already polling."""
        if self._state is LoopState.POLLING:
            return
        self._state = LoopState.POLLING
        self._ticker = asyncio.create_task(self._run())
        logger.debug(f"{self.name}: polling every {self.interval}s")

    async def stop(self) -> None:
        """Cancel the ticker and all in-flight fetches, then return to IDLE."""
        self._state = LoopState.IDLE
        self._generation += 1
        tasks = list(self._in_flight)
        if self._ticker is not None:
            tasks.append(self._ticker)
            self._ticker = None

        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._in_flight.clear()
        logger.debug(f"{self.name}: stopped")

    async def refresh(self) -> T:
        """
        Fetch in the foreground and apply the result.

        Errors propagate to the caller. Works in either state. If stop() runs
        while the fetch is pending, the result is returned but not applied.
        """
        generation = self._generation
        seq = next(self._sequence)
        result = await self._fetch()
        if generation == self._generation:
            self._apply(seq, result)
        return result

    async def _run(self) -> None:
        try:
            while True:
                self._issue_background_fetch()
                await asyncio.sleep(self.interval)
        except asyncio.CancelledError:
            return

    def _issue_background_fetch(self) -> None:
        seq = next(self._sequence)
        task = asyncio.create_task(self._background_fetch(seq))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _background_fetch(self, seq: int) -> None:
        try:
            result = await self._fetch()
            self._apply(seq, result)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning(f"{self.name}: background fetch #{seq} failed: {exc}")

    def _apply(self, seq: int, result: T) -> bool:
        """Apply ``result`` if it is the newest response and differs from the current value."""
        if seq <= self._applied_seq:
            logger.debug(f"{self.name}: discarding stale response #{seq}")
            return False
        self._applied_seq = seq

        if self._has_value and result == self._value:
            return False

        self._value = result
        self._has_value = True
        self._on_change(result)
        return True
