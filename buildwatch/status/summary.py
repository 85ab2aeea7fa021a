"""Per-project summary status and the presenter that renders it."""

from abc import ABC, abstractmethod
from enum import Enum

from buildwatch.jenkins.models import BuildResult, FetchFailure

from .actions import ActionId


class ProjectSummaryStatus(str, Enum):
    """Resolved status shown in a project's compact indicator."""

    SUCCESS = "success"
    FAILURE = "failure"
    ABORTED = "aborted"
    UNSTABLE = "unstable"
    BUILDING = "building"
    UNKNOWN = "unknown"  # Fetch failed or result not resolvable
    UNCONFIGURED = "unconfigured"  # No job mapping or no server settings


_RESULT_MAP = {
    BuildResult.SUCCESS: ProjectSummaryStatus.SUCCESS,
    BuildResult.FAILURE: ProjectSummaryStatus.FAILURE,
    BuildResult.ABORTED: ProjectSummaryStatus.ABORTED,
    BuildResult.UNSTABLE: ProjectSummaryStatus.UNSTABLE,
    BuildResult.BUILDING: ProjectSummaryStatus.BUILDING,
}


def resolve_summary_status(result: BuildResult | FetchFailure) -> ProjectSummaryStatus:
    """Map a latest-status fetch outcome to the status a presenter shows."""
    if isinstance(result, FetchFailure):
        return ProjectSummaryStatus.UNKNOWN
    return _RESULT_MAP.get(result, ProjectSummaryStatus.UNKNOWN)


class BaseSummaryPresenter(ABC):
    """Renders one compact status indicator per project."""

    @abstractmethod
    def update(
        self,
        project_id: str,
        status: ProjectSummaryStatus,
        action: ActionId | None = None,
    ) -> None:
        """
        Show `status` for a project.

        Args:
            project_id: Project whose indicator is updated (created on first use)
            status: Resolved summary status
            action: Command to run when the indicator is activated, if any
        """
        pass

    @abstractmethod
    def dispose(self) -> None:
        """Release every indicator."""
        pass
