"""
Injectable clocks.

Everything that reads the time or waits on a timer goes through a Clock so
tests can move virtual time forward instead of waiting on the wall clock.
"""
import asyncio
import heapq
import itertools
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple


class Clock:
    """Real time: UTC wall clock and asyncio sleeps."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class ManualClock(Clock):
    """
    Virtual clock for tests.

    `sleep()` parks the caller until `advance()` moves time past its wake-up
    instant. Sleepers wake in deadline order and each one gets a chance to run
    before time moves further.
    """

    def __init__(self, start: Optional[datetime] = None):
        self._now = start or datetime(2025, 1, 15, 9, 0, tzinfo=timezone.utc)
        self._sleepers: List[Tuple[datetime, int, asyncio.Future]] = []
        self._counter = itertools.count()

    def now(self) -> datetime:
        return self._now

    async def sleep(self, seconds: float) -> None:
        if seconds <= 0:
            await asyncio.sleep(0)
            return
        future = asyncio.get_running_loop().create_future()
        deadline = self._now + timedelta(seconds=seconds)
        heapq.heappush(self._sleepers, (deadline, next(self._counter), future))
        await future

    @property
    def pending_sleepers(self) -> int:
        return sum(1 for _, _, future in self._sleepers if not future.done())

    async def advance(self, seconds: float) -> None:
        """Move virtual time forward, waking every sleeper that falls due."""
        await _settle()
        target = self._now + timedelta(seconds=seconds)
        while self._sleepers and self._sleepers[0][0] <= target:
            deadline, _, future = heapq.heappop(self._sleepers)
            self._now = max(self._now, deadline)
            if not future.done():
                future.set_result(None)
            await _settle()
        self._now = target
        await _settle()


async def _settle(rounds: int = 5) -> None:
    # let woken tasks run until they park again
    for _ in range(rounds):
        await asyncio.sleep(0)
