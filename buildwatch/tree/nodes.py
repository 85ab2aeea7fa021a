"""Build tree node variants.

Nodes form a tagged union discriminated on `kind`; each variant carries only
the fields it needs. Only project nodes have children.
"""

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from buildwatch.core.datetime_utils import format_duration_ms, format_epoch_ms
from buildwatch.jenkins.models import BuildRecord, BuildResult
from buildwatch.status.actions import ActionId


class PlaceholderReason(str, Enum):
    """Why a placeholder stands in for real nodes."""

    NOT_CONFIGURED = "not_configured"
    NO_PROJECTS = "no_projects"
    FETCH_FAILED = "fetch_failed"
    NO_BUILDS = "no_builds"


class ProjectNode(BaseModel):
    """A project mapped to a job; expands into that job's recent builds."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["project"] = "project"
    project_id: str
    job_name: str

    @property
    def label(self) -> str:
        return self.project_id

    @property
    def description(self) -> str:
        return self.job_name


class UnmappedProjectNode(BaseModel):
    """A project with no job mapping; routes to configuration instead of expanding."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["unmapped_project"] = "unmapped_project"
    project_id: str
    action: ActionId = ActionId.CONFIGURE

    @property
    def label(self) -> str:
        return f"{self.project_id} (No Jenkins job mapping)"

    @property
    def tooltip(self) -> str:
        return "Configure Jenkins job mapping in extension settings."


class BuildNode(BaseModel):
    """One build of a job; activating it opens the build page."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["build"] = "build"
    job_name: str
    build: BuildRecord
    action: ActionId = ActionId.OPEN_BUILD_IN_BROWSER

    @property
    def label(self) -> str:
        return f"#{self.build.number}"

    @property
    def url(self) -> str:
        return self.build.url

    @property
    def description(self) -> str:
        return self.build.change_summary or ""

    @property
    def tooltip(self) -> str:
        build = self.build
        if build.result == BuildResult.BUILDING:
            status = "Building"
            duration = "in progress"
        else:
            status = build.result.value.replace("_", " ").title()
            duration = format_duration_ms(build.duration_ms)

        lines = [
            f"Status: {status}",
            f"Duration: {duration}",
            f"Started: {format_epoch_ms(build.started_at_ms)}",
        ]
        if build.change_summary:
            lines.append(f"Changes: {build.change_summary}")
        return "\n".join(lines)


class PlaceholderNode(BaseModel):
    """A message shown in place of nodes that could not be produced."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["placeholder"] = "placeholder"
    reason: PlaceholderReason
    label: str
    tooltip: str | None = None
    action: ActionId | None = None


TreeNode = Annotated[
    ProjectNode | UnmappedProjectNode | BuildNode | PlaceholderNode,
    Field(discriminator="kind"),
]


def not_configured_placeholder() -> PlaceholderNode:
    return PlaceholderNode(
        reason=PlaceholderReason.NOT_CONFIGURED,
        label="Please configure Jenkins settings",
        tooltip="Set the Jenkins URL, username and API token.",
        action=ActionId.CONFIGURE,
    )


def no_projects_placeholder() -> PlaceholderNode:
    return PlaceholderNode(
        reason=PlaceholderReason.NO_PROJECTS,
        label="No workspace folders with Jenkins job mappings found.",
        action=ActionId.CONFIGURE,
    )


def fetch_failed_placeholder(reason: str | None = None) -> PlaceholderNode:
    return PlaceholderNode(
        reason=PlaceholderReason.FETCH_FAILED,
        label="Could not fetch builds.",
        tooltip=reason,
        action=ActionId.REFRESH_TREE,
    )


def no_builds_placeholder() -> PlaceholderNode:
    return PlaceholderNode(reason=PlaceholderReason.NO_BUILDS, label="No builds found.")
