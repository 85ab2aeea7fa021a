from buildwatch.sync.refresh import CycleOutcome, StatusRefresher
from buildwatch.sync.scheduler import PollingScheduler, SchedulerState
from buildwatch.sync.timer import IntervalTimer, SchedulerIntervalTimer

__all__ = [
    "CycleOutcome",
    "IntervalTimer",
    "PollingScheduler",
    "SchedulerIntervalTimer",
    "SchedulerState",
    "StatusRefresher",
]
