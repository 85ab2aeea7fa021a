"""
Re-armable interval timer for the polling scheduler.

The default implementation runs on an in-process APScheduler AsyncScheduler
with a memory data store and a single interval schedule that is replaced on
re-arm and removed on cancel.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta

from apscheduler import AsyncScheduler, ConflictPolicy
from apscheduler.datastores.memory import MemoryDataStore
from apscheduler.triggers.interval import IntervalTrigger

from buildwatch.core.logging import get_logger

logger = get_logger(__name__)

TimerCallback = Callable[[], Awaitable[None]]


class IntervalTimer(ABC):
    """A timer that calls back every `interval_ms` until cancelled."""

    @property
    @abstractmethod
    def armed(self) -> bool:
        pass

    @abstractmethod
    async def arm(self, interval_ms: int, callback: TimerCallback) -> None:
        """Start firing `callback` every `interval_ms`, first fire one interval from now."""
        pass

    @abstractmethod
    async def cancel(self) -> None:
        """Stop the pending timer, if any. In-flight callbacks are left to finish."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Cancel and release the timer backend."""
        pass


async def fire_interval_timer(timer: "SchedulerIntervalTimer") -> None:
    """Scheduled job target; module level so APScheduler can reference it."""
    await timer.fire()


class SchedulerIntervalTimer(IntervalTimer):
    """IntervalTimer backed by an APScheduler interval schedule."""

    SCHEDULE_ID = "buildwatch_status_refresh"

    def __init__(self, scheduler: AsyncScheduler | None = None) -> None:
        """
        Initialize the timer.

        Args:
            scheduler: Scheduler to use; a memory-backed one is created lazily if omitted
        """
        self._scheduler = scheduler
        self._started = False
        self._callback: TimerCallback | None = None
        self.interval_ms: int | None = None

    @property
    def armed(self) -> bool:
        return self.interval_ms is not None

    async def _ensure_started(self) -> AsyncScheduler:
        if self._scheduler is None:
            self._scheduler = AsyncScheduler(data_store=MemoryDataStore())
        if not self._started:
            # APScheduler 4.x must be entered before any other call
            await self._scheduler.__aenter__()
            await self._scheduler.start_in_background()
            self._started = True
        return self._scheduler

    async def arm(self, interval_ms: int, callback: TimerCallback) -> None:
        scheduler = await self._ensure_started()
        self._callback = callback

        # The first fire is one full interval away; callers refresh immediately themselves
        first_fire = datetime.now(UTC) + timedelta(milliseconds=interval_ms)
        await scheduler.add_schedule(
            fire_interval_timer,
            IntervalTrigger(seconds=interval_ms / 1000, start_time=first_fire),
            id=self.SCHEDULE_ID,
            args=[self],
            conflict_policy=ConflictPolicy.replace,
        )
        self.interval_ms = interval_ms
        logger.bind(interval_ms=interval_ms).debug("interval_timer_armed")

    async def cancel(self) -> None:
        if self.interval_ms is None or self._scheduler is None:
            return
        await self._scheduler.remove_schedule(self.SCHEDULE_ID)
        self.interval_ms = None
        logger.debug("interval_timer_cancelled")

    async def close(self) -> None:
        await self.cancel()
        if self._started and self._scheduler is not None:
            await self._scheduler.__aexit__(None, None, None)
            self._started = False
            logger.debug("interval_timer_closed")

    async def fire(self) -> None:
        if self._callback is not None and self.armed:
            await self._callback()
