"""
Pytest configuration and fixtures for buildwatch tests.

Provides:
- A fake interval timer that records arm/cancel calls and fires on demand
- Recording presenter and notifier
- A mocked Jenkins client
- Factory fixtures for build records and config snapshots
"""

from unittest.mock import AsyncMock

import pytest

from buildwatch.config import JobMapping, StatusConfig
from buildwatch.jenkins.client import JenkinsClient
from buildwatch.jenkins.models import BuildRecord, BuildResult
from buildwatch.status.actions import ActionId
from buildwatch.status.cache import StatusCache
from buildwatch.status.credentials import MemoryCredentialStore
from buildwatch.status.notifications import BaseNotifier
from buildwatch.status.summary import BaseSummaryPresenter, ProjectSummaryStatus
from buildwatch.sync.timer import IntervalTimer, TimerCallback

JENKINS_URL = "https://ci.example.com"
USERNAME = "alice@x.com"
TOKEN = "secret-token"


class FakeTimer(IntervalTimer):
    """Records every arm/cancel and fires only when a test asks it to."""

    def __init__(self) -> None:
        self.interval_ms: int | None = None
        self.callback: TimerCallback | None = None
        self.arm_calls: list[int] = []
        self.cancel_calls = 0
        self.closed = False

    @property
    def armed(self) -> bool:
        return self.interval_ms is not None

    async def arm(self, interval_ms: int, callback: TimerCallback) -> None:
        self.arm_calls.append(interval_ms)
        self.interval_ms = interval_ms
        self.callback = callback

    async def cancel(self) -> None:
        if self.interval_ms is not None:
            self.cancel_calls += 1
            self.interval_ms = None

    async def close(self) -> None:
        await self.cancel()
        self.closed = True

    async def fire(self) -> None:
        assert self.callback is not None, "timer was never armed"
        await self.callback()


class RecordingPresenter(BaseSummaryPresenter):
    """Keeps every update so tests can assert on them."""

    def __init__(self) -> None:
        self.updates: list[tuple[str, ProjectSummaryStatus, ActionId | None]] = []
        self.disposed = False

    def update(
        self,
        project_id: str,
        status: ProjectSummaryStatus,
        action: ActionId | None = None,
    ) -> None:
        self.updates.append((project_id, status, action))

    def dispose(self) -> None:
        self.disposed = True

    def latest(self) -> dict[str, ProjectSummaryStatus]:
        return {project_id: status for project_id, status, _ in self.updates}


class RecordingNotifier(BaseNotifier):
    def __init__(self) -> None:
        self.infos: list[str] = []
        self.warnings: list[str] = []

    def info(self, message: str) -> None:
        self.infos.append(message)

    def warning(self, message: str) -> None:
        self.warnings.append(message)


@pytest.fixture
def fake_timer() -> FakeTimer:
    return FakeTimer()


@pytest.fixture
def presenter() -> RecordingPresenter:
    return RecordingPresenter()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def cache() -> StatusCache:
    return StatusCache()


@pytest.fixture
def credentials() -> MemoryCredentialStore:
    return MemoryCredentialStore({USERNAME: TOKEN})


@pytest.fixture
def mock_client():
    """Jenkins client whose reads are AsyncMocks."""
    client = AsyncMock(spec=JenkinsClient)
    client.fetch_latest_status.return_value = BuildResult.SUCCESS
    client.fetch_history.return_value = []
    return client


@pytest.fixture
def build_factory():
    """Factory for build records."""

    def _create_build(
        number: int,
        result: BuildResult = BuildResult.SUCCESS,
        authors: tuple[str, ...] = (),
        summary: str | None = None,
        started_at_ms: int = 1_700_000_000_000,
        duration_ms: int = 60_000,
    ) -> BuildRecord:
        return BuildRecord(
            number=number,
            url=f"{JENKINS_URL}/job/JOB-A/{number}/",
            result=result,
            started_at_ms=started_at_ms,
            duration_ms=duration_ms,
            change_authors=authors,
            change_summary=summary,
        )

    return _create_build


@pytest.fixture
def config_holder():
    """
    Mutable holder for the current config snapshot.

    Tests swap `holder["config"]` to simulate configuration changes; pass
    `lambda: holder["config"]` wherever a config provider is expected.
    """
    return {
        "config": StatusConfig(
            jenkins_url=JENKINS_URL,
            username=USERNAME,
            repository_mappings=(JobMapping(project_id="proj-a", job_name="JOB-A"),),
            projects=("proj-a",),
        )
    }
