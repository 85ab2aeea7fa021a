"""
Polling scheduler.

States:
- IDLE: no timer armed
- ARMED: timer firing a refresh cycle every interval

Only one refresh cycle runs at a time. A timer tick that lands while a cycle
is in flight is dropped; an out-of-band request (configuration or workspace
change) made while a cycle is in flight queues exactly one follow-up cycle.
"""

import asyncio
from enum import Enum

from buildwatch.core.logging import get_logger

from .refresh import StatusRefresher
from .timer import IntervalTimer

logger = get_logger(__name__)


class SchedulerState(str, Enum):
    IDLE = "idle"
    ARMED = "armed"


class PollingScheduler:
    """Arms the interval timer and serialises refresh cycles."""

    def __init__(
        self,
        refresher: StatusRefresher,
        timer: IntervalTimer,
        interval_ms: int,
    ) -> None:
        self._refresher = refresher
        self._timer = timer
        self._lock = asyncio.Lock()
        self._follow_up = False
        self.interval_ms = interval_ms
        self.state = SchedulerState.IDLE
        self.skipped_ticks = 0

    @property
    def cycle_in_flight(self) -> bool:
        return self._lock.locked()

    async def activate(self, interval_ms: int | None = None) -> dict | None:
        """Arm the timer and run the first cycle without waiting for a tick."""
        if self.state is SchedulerState.ARMED:
            logger.debug("scheduler_already_armed")
            return None

        if interval_ms is not None:
            self.interval_ms = interval_ms
        await self._timer.arm(self.interval_ms, self._on_timer)
        self.state = SchedulerState.ARMED
        logger.bind(interval_ms=self.interval_ms).info("scheduler_armed")

        return await self.request_refresh("activation")

    async def deactivate(self) -> None:
        """Cancel the timer and release it. An in-flight cycle is left to finish."""
        if self.state is SchedulerState.ARMED:
            await self._timer.cancel()
            self.state = SchedulerState.IDLE
        await self._timer.close()
        logger.info("scheduler_stopped")

    async def on_interval_changed(self, interval_ms: int) -> None:
        """Re-arm at the new interval. Does not run a cycle."""
        self.interval_ms = interval_ms
        if self.state is not SchedulerState.ARMED:
            return

        await self._timer.cancel()
        await self._timer.arm(interval_ms, self._on_timer)
        logger.bind(interval_ms=interval_ms).info("scheduler_rearmed")

    async def request_refresh(self, reason: str) -> dict | None:
        """
        Run an out-of-band cycle without touching the timer.

        Returns:
            Stats of the last cycle run, or None if the request was queued
            behind an in-flight cycle
        """
        if self._lock.locked():
            self._follow_up = True
            logger.bind(reason=reason).debug("refresh_queued")
            return None
        return await self._run(reason)

    async def _on_timer(self) -> None:
        if self._lock.locked():
            self.skipped_ticks += 1
            logger.debug("refresh_tick_skipped")
            return
        await self._run("timer")

    async def _run(self, reason: str) -> dict | None:
        async with self._lock:
            stats = await self._run_once(reason)
            while self._follow_up:
                self._follow_up = False
                stats = await self._run_once(f"{reason}:follow_up")
        return stats

    async def _run_once(self, reason: str) -> dict | None:
        logger.bind(reason=reason).debug("refresh_cycle_started")
        try:
            return await self._refresher.run_cycle()
        except Exception as e:
            # Cycles must never break the timer; the next tick retries
            logger.bind(reason=reason, error=str(e)).error("refresh_cycle_failed")
            return None
