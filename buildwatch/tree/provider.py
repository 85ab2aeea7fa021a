"""Lazy build tree: projects at the root, recent builds fetched on expansion."""

from collections.abc import Callable

from buildwatch.config import StatusConfig
from buildwatch.core.logging import get_logger
from buildwatch.jenkins.client import JenkinsClient
from buildwatch.jenkins.models import FetchFailure
from buildwatch.status.cache import StatusCache
from buildwatch.status.credentials import BaseCredentialStore
from buildwatch.status.notifications import BaseNotifier, LoggingNotifier

from .filtering import FilterOutcome, filter_builds_by_author
from .nodes import (
    BuildNode,
    ProjectNode,
    TreeNode,
    UnmappedProjectNode,
    fetch_failed_placeholder,
    no_builds_placeholder,
    no_projects_placeholder,
    not_configured_placeholder,
)

logger = get_logger(__name__)


class BuildTreeProvider:
    """
    Two-level data source queried by the host one level at a time.

    Root nodes are built from configuration alone. A project's builds come
    from the shared StatusCache, and on a miss from a direct history fetch
    that populates the cache. Failed fetches are never cached, so the next
    expansion retries.
    """

    def __init__(
        self,
        cache: StatusCache,
        client: JenkinsClient,
        config_provider: Callable[[], StatusConfig],
        credentials: BaseCredentialStore,
        notifier: BaseNotifier | None = None,
        browser: Callable[[str], object] | None = None,
    ) -> None:
        self._cache = cache
        self._client = client
        self._config = config_provider
        self._credentials = credentials
        self._notifier = notifier or LoggingNotifier()
        self._browser = browser
        self._listeners: list[Callable[[], None]] = []
        # (job, username) -> build count the fallback warning was last shown for
        self._fallback_warned: dict[tuple[str, str], int] = {}

    async def get_children(self, node: TreeNode | None = None) -> list[TreeNode]:
        """Return the children of `node`, or the root nodes when `node` is None."""
        if node is None:
            return await self.get_root_nodes()
        if isinstance(node, ProjectNode):
            return await self._get_builds(node)
        return []

    async def get_root_nodes(self) -> list[TreeNode]:
        config = self._config()
        if not await self._has_credentials(config):
            return [not_configured_placeholder()]

        if not config.projects:
            return [no_projects_placeholder()]

        nodes: list[TreeNode] = []
        for project_id in config.projects:
            job_name = config.job_name_for(project_id)
            if job_name:
                nodes.append(ProjectNode(project_id=project_id, job_name=job_name))
            else:
                nodes.append(UnmappedProjectNode(project_id=project_id))
        return nodes

    async def _get_builds(self, node: ProjectNode) -> list[TreeNode]:
        config = self._config()
        token = await self._credentials.get(config.username) if config.username else None
        if not config.is_configured() or not token:
            return [not_configured_placeholder()]

        history = self._cache.get(node.job_name)
        if history is None:
            fetched = await self._client.fetch_history(
                config.server_url,
                node.job_name,
                config.username,
                token,
                count=config.history_count,
            )
            if isinstance(fetched, FetchFailure):
                logger.bind(job=node.job_name, reason=fetched.reason).warning(
                    "build_tree_fetch_failed"
                )
                return [fetch_failed_placeholder(fetched.reason)]

            self._cache.put(node.job_name, fetched)
            history = self._cache.get(node.job_name) or []

        if not history:
            return [no_builds_placeholder()]

        outcome = filter_builds_by_author(history, config.username)
        self._report_fallback(node.job_name, config.username, outcome)

        return [BuildNode(job_name=node.job_name, build=build) for build in outcome.builds]

    def _report_fallback(self, job_name: str, username: str, outcome: FilterOutcome) -> None:
        """Warn about the unfiltered fallback once per job, user and build count."""
        key = (job_name, username)
        if outcome.warning is None:
            self._fallback_warned.pop(key, None)
            return
        if self._fallback_warned.get(key) == len(outcome.builds):
            return

        self._fallback_warned[key] = len(outcome.builds)
        logger.bind(job=job_name, user=username).info("build_filter_fallback")
        self._notifier.warning(outcome.warning)

    async def _has_credentials(self, config: StatusConfig) -> bool:
        if not config.is_configured():
            return False
        return bool(await self._credentials.get(config.username))

    def clear_cache(self) -> None:
        """Drop cached histories; displayed nodes stay until the next expansion."""
        self._cache.clear()

    def refresh(self) -> None:
        """Clear the cache and ask the host to re-query visible nodes."""
        self.clear_cache()
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as e:
                logger.bind(error=str(e)).error("build_tree_listener_failed")

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register a tree-changed listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def open_build(self, node: BuildNode) -> None:
        """Hand the build's URL to the host browser."""
        if self._browser is None:
            logger.bind(url=node.url).warning("build_tree_no_browser")
            return
        self._browser(node.url)
