"""One refresh cycle: latest status for every project, then cache invalidation."""

import asyncio
from collections.abc import Callable
from enum import Enum

from buildwatch.config import StatusConfig
from buildwatch.core.logging import get_logger
from buildwatch.jenkins.client import JenkinsClient
from buildwatch.jenkins.models import FetchFailure
from buildwatch.status.actions import ActionId
from buildwatch.status.cache import StatusCache
from buildwatch.status.credentials import BaseCredentialStore
from buildwatch.status.notifications import BaseNotifier
from buildwatch.status.summary import (
    BaseSummaryPresenter,
    ProjectSummaryStatus,
    resolve_summary_status,
)
from buildwatch.tree.provider import BuildTreeProvider

logger = get_logger(__name__)

MISSING_TOKEN_WARNING = "Please configure Jenkins API token."


class CycleOutcome(str, Enum):
    COMPLETED = "completed"
    CONFIGURATION_MISSING = "configuration_missing"
    CREDENTIAL_MISSING = "credential_missing"


class StatusRefresher:
    """
    Runs refresh cycles against the current configuration.

    Server settings and the token are checked first; if either is missing
    every project is marked and the cycle stops without any network call.
    Otherwise each mapped project's latest status is fetched concurrently and
    presented as soon as it arrives. A completed cycle clears the status cache
    and refreshes the build tree so the next expansion refetches history.
    """

    def __init__(
        self,
        client: JenkinsClient,
        cache: StatusCache,
        presenter: BaseSummaryPresenter,
        notifier: BaseNotifier,
        credentials: BaseCredentialStore,
        config_provider: Callable[[], StatusConfig],
        tree: BuildTreeProvider | None = None,
    ) -> None:
        self._client = client
        self._cache = cache
        self._presenter = presenter
        self._notifier = notifier
        self._credentials = credentials
        self._config = config_provider
        self._tree = tree
        self._token_warning_shown = False

    def reset_credential_warning(self) -> None:
        """Allow the missing-token warning to be shown again."""
        self._token_warning_shown = False

    async def run_cycle(self) -> dict:
        """
        Run one refresh cycle.

        Returns:
            Dict with the cycle outcome and per-project counts
        """
        config = self._config()
        stats = {
            "outcome": CycleOutcome.COMPLETED.value,
            "projects": len(config.projects),
            "fetched": 0,
            "failed": 0,
            "unconfigured": 0,
        }

        if not config.is_configured():
            for project_id in config.projects:
                self._presenter.update(
                    project_id, ProjectSummaryStatus.UNCONFIGURED, ActionId.CONFIGURE
                )
            stats["unconfigured"] = len(config.projects)
            stats["outcome"] = CycleOutcome.CONFIGURATION_MISSING.value
            logger.bind(projects=len(config.projects)).info("refresh_configuration_missing")
            return stats

        token = await self._credentials.get(config.username)
        if not token:
            if not self._token_warning_shown:
                self._notifier.warning(MISSING_TOKEN_WARNING)
                self._token_warning_shown = True
            for project_id in config.projects:
                self._presenter.update(
                    project_id, ProjectSummaryStatus.UNKNOWN, ActionId.SET_API_TOKEN
                )
            stats["outcome"] = CycleOutcome.CREDENTIAL_MISSING.value
            logger.bind(username=config.username).info("refresh_credential_missing")
            return stats

        self._token_warning_shown = False

        fetches = []
        for project_id in config.projects:
            job_name = config.job_name_for(project_id)
            if job_name is None:
                self._presenter.update(
                    project_id, ProjectSummaryStatus.UNCONFIGURED, ActionId.CONFIGURE
                )
                stats["unconfigured"] += 1
                continue
            fetches.append(self._refresh_project(config, project_id, job_name, token, stats))

        results = await asyncio.gather(*fetches, return_exceptions=True)
        for result in results:
            if isinstance(result, Exception):
                stats["failed"] += 1
                logger.bind(error=str(result)).error("refresh_project_error")

        self._cache.clear()
        if self._tree is not None:
            self._tree.refresh()

        logger.bind(**stats).info("refresh_cycle_finished")
        return stats

    async def _refresh_project(
        self,
        config: StatusConfig,
        project_id: str,
        job_name: str,
        token: str,
        stats: dict,
    ) -> None:
        result = await self._client.fetch_latest_status(
            config.server_url, job_name, config.username, token
        )
        if isinstance(result, FetchFailure):
            stats["failed"] += 1
        else:
            stats["fetched"] += 1

        status = resolve_summary_status(result)
        self._presenter.update(project_id, status)
        logger.bind(project=project_id, job=job_name, status=status.value).debug(
            "project_status_updated"
        )
