"""
Composition root for the status sync engine.

Owns the status cache, Jenkins client, build tree, refresher and polling
scheduler, and exposes the host-facing commands:
- activate / deactivate
- configure, set_api_token, prompt_for_api_token
- refresh_tree, open_build_in_browser
- on_config_changed, on_workspace_changed
"""

from collections.abc import Awaitable, Callable

from buildwatch.config import (
    JENKINS_URL,
    POLLING_INTERVAL,
    PROJECTS,
    REPOSITORY_MAPPINGS,
    USERNAME,
    ConfigChangeEvent,
    StatusConfig,
)
from buildwatch.core.logging import get_logger
from buildwatch.jenkins.client import JenkinsClient
from buildwatch.status.cache import StatusCache
from buildwatch.status.credentials import BaseCredentialStore
from buildwatch.status.notifications import BaseNotifier, LoggingNotifier
from buildwatch.status.summary import BaseSummaryPresenter
from buildwatch.sync.refresh import StatusRefresher
from buildwatch.sync.scheduler import PollingScheduler
from buildwatch.sync.timer import IntervalTimer, SchedulerIntervalTimer
from buildwatch.tree.nodes import BuildNode
from buildwatch.tree.provider import BuildTreeProvider

logger = get_logger(__name__)

SETTINGS_SECTION = "jenkinsBuildStatus"


class BuildStatusService:
    """Wires the sync engine from explicit collaborators."""

    def __init__(
        self,
        config_provider: Callable[[], StatusConfig],
        credentials: BaseCredentialStore,
        presenter: BaseSummaryPresenter,
        notifier: BaseNotifier | None = None,
        client: JenkinsClient | None = None,
        timer: IntervalTimer | None = None,
        browser: Callable[[str], object] | None = None,
        settings_opener: Callable[[str], object] | None = None,
    ) -> None:
        self._config = config_provider
        self.credentials = credentials
        self.presenter = presenter
        self.notifier = notifier or LoggingNotifier()
        self.client = client or JenkinsClient()
        self.cache = StatusCache()
        self._settings_opener = settings_opener

        self.tree = BuildTreeProvider(
            self.cache,
            self.client,
            config_provider,
            credentials,
            notifier=self.notifier,
            browser=browser,
        )
        self.refresher = StatusRefresher(
            self.client,
            self.cache,
            presenter,
            self.notifier,
            credentials,
            config_provider,
            tree=self.tree,
        )
        self.scheduler = PollingScheduler(
            self.refresher,
            timer or SchedulerIntervalTimer(),
            config_provider().polling_interval_ms,
        )

    @property
    def config(self) -> StatusConfig:
        return self._config()

    async def activate(self) -> dict | None:
        """Start polling; the first cycle runs immediately."""
        logger.info("buildwatch_activated")
        return await self.scheduler.activate(self.config.polling_interval_ms)

    async def deactivate(self) -> None:
        """Stop polling and release every status indicator."""
        await self.scheduler.deactivate()
        self.presenter.dispose()
        logger.info("buildwatch_deactivated")

    def configure(self) -> None:
        """Open the host's settings page for this tool."""
        if self._settings_opener is None:
            self.notifier.info("Edit the buildwatch config file to configure Jenkins settings.")
            return
        self._settings_opener(SETTINGS_SECTION)

    async def set_api_token(self, token: str) -> bool:
        """Store the API token for the configured user and refresh."""
        username = self.config.username
        if not username:
            self.notifier.warning("Please configure Jenkins username before setting API token.")
            return False

        await self.credentials.set(username, token)
        self.notifier.info("Jenkins API Token stored securely.")
        self.refresher.reset_credential_warning()
        await self.scheduler.request_refresh("token_updated")
        return True

    async def prompt_for_api_token(self, prompt: Callable[[], Awaitable[str | None]]) -> bool:
        """Ask the user for a token via the host prompt and store it."""
        token = await prompt()
        if not token:
            self.notifier.warning("Jenkins API Token not provided.")
            return False
        return await self.set_api_token(token)

    def refresh_tree(self) -> None:
        """Manual refresh: drop cached histories and re-query visible nodes."""
        self.tree.refresh()

    def open_build_in_browser(self, node: BuildNode) -> None:
        self.tree.open_build(node)

    async def on_config_changed(self, event: ConfigChangeEvent) -> None:
        """React to configuration changes reported by the host."""
        if event.affects(POLLING_INTERVAL):
            await self.scheduler.on_interval_changed(self.config.polling_interval_ms)

        if event.affects(JENKINS_URL, USERNAME, REPOSITORY_MAPPINGS):
            self.cache.clear()
            if event.affects(USERNAME):
                self.refresher.reset_credential_warning()
            logger.bind(keys=sorted(event.changed_keys)).info("config_changed")
            await self.scheduler.request_refresh("config_changed")
        elif event.affects(PROJECTS):
            await self.on_workspace_changed()

    async def on_workspace_changed(self) -> None:
        """Project set changed: refresh without touching the timer."""
        await self.scheduler.request_refresh("workspace_changed")
