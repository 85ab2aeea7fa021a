"""Terminal implementations of the presentation collaborators."""

from collections.abc import Callable

import typer

from buildwatch.status.actions import ActionId
from buildwatch.status.credentials import MemoryCredentialStore
from buildwatch.status.notifications import BaseNotifier
from buildwatch.status.summary import BaseSummaryPresenter, ProjectSummaryStatus

_INDICATORS = {
    ProjectSummaryStatus.SUCCESS: ("✅", "Success"),
    ProjectSummaryStatus.FAILURE: ("❌", "Failed"),
    ProjectSummaryStatus.ABORTED: ("⛔", "Aborted"),
    ProjectSummaryStatus.UNSTABLE: ("⚠️", "Unstable"),
    ProjectSummaryStatus.BUILDING: ("🔄", "Building..."),
    ProjectSummaryStatus.UNKNOWN: ("❓", "Unknown"),
    ProjectSummaryStatus.UNCONFIGURED: ("⚙️", "Not configured"),
}


def render_indicator(project_id: str, status: ProjectSummaryStatus) -> str:
    icon, text = _INDICATORS[status]
    return f"{icon} {project_id}: {text}"


class ConsoleSummaryPresenter(BaseSummaryPresenter):
    """Prints a line whenever a project's indicator changes."""

    def __init__(self, echo: Callable[[str], object] = typer.echo) -> None:
        self._echo = echo
        self.indicators: dict[str, str] = {}

    def update(
        self,
        project_id: str,
        status: ProjectSummaryStatus,
        action: ActionId | None = None,
    ) -> None:
        line = render_indicator(project_id, status)
        if action is ActionId.CONFIGURE:
            line += "  (run with a config file to set up)"
        elif action is ActionId.SET_API_TOKEN:
            line += "  (set JENKINS_API_TOKEN)"

        # Only print changes, like a status bar item that is updated in place
        if self.indicators.get(project_id) == line:
            return
        self.indicators[project_id] = line
        self._echo(line)

    def dispose(self) -> None:
        self.indicators.clear()


class ConsoleNotifier(BaseNotifier):
    """Echoes notifications to the terminal."""

    def info(self, message: str) -> None:
        typer.echo(f"  {message}")

    def warning(self, message: str) -> None:
        typer.echo(f"  ⚠️ {message}", err=True)


class EnvironmentCredentialStore(MemoryCredentialStore):
    """
    Tokens stored during the session, falling back to JENKINS_API_TOKEN.

    The fallback applies to whichever username the current config names, so
    a reloaded config with a different username keeps working.
    """

    def __init__(self, default_token: str = "") -> None:
        super().__init__()
        self._default_token = default_token or None

    async def get(self, username: str) -> str | None:
        if not username:
            return None
        return await super().get(username) or self._default_token


def launch_in_browser(url: str) -> None:
    typer.launch(url)
