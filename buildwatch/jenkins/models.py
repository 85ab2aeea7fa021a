"""Jenkins build models."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BuildResult(str, Enum):
    """Result of a Jenkins build as reported by the JSON API."""

    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    ABORTED = "ABORTED"
    UNSTABLE = "UNSTABLE"  # Tests failed, build itself completed
    NOT_BUILT = "NOT_BUILT"
    BUILDING = "BUILDING"  # Jenkins reports null while the build runs

    @classmethod
    def from_api(cls, value: str | None) -> "BuildResult":
        """Parse the API's `result` field; JSON null means still building."""
        if value is None:
            return cls.BUILDING
        return cls(value)


class BuildRecord(BaseModel):
    """One build of a job, with the authors of its change sets."""

    model_config = ConfigDict(frozen=True)

    number: int = Field(ge=1)
    url: str
    result: BuildResult
    started_at_ms: int
    duration_ms: int = Field(ge=0)
    change_authors: tuple[str, ...] = ()
    change_summary: str | None = None

    @field_validator("result", mode="before")
    @classmethod
    def _null_is_building(cls, value: Any) -> Any:
        if value is None:
            return BuildResult.BUILDING
        return value

    @classmethod
    def from_api(cls, payload: Any) -> "BuildRecord":
        """
        Build a record from one entry of the job API's `builds` array.

        Reads both `changeSets` (pipeline jobs) and `changeSet` (freestyle
        jobs). Raises ValueError (including pydantic.ValidationError) for
        malformed entries.
        """
        if not isinstance(payload, dict):
            raise ValueError(f"Build entry must be an object, got {type(payload).__name__}")

        items = _change_items(payload)
        authors = tuple(
            item["authorEmail"] for item in items if isinstance(item.get("authorEmail"), str)
        )

        summary = None
        if items:
            summary = items[0].get("msg") or items[0].get("commitId") or None

        return cls.model_validate(
            {
                "number": payload.get("number"),
                "url": payload.get("url"),
                "result": payload.get("result"),
                "started_at_ms": payload.get("timestamp"),
                "duration_ms": payload.get("duration"),
                "change_authors": authors,
                "change_summary": summary,
            }
        )

    def authored_by(self, email: str) -> bool:
        """Case-insensitive exact match against the change-set author emails."""
        wanted = email.strip().lower()
        return any(author.strip().lower() == wanted for author in self.change_authors)


def _change_items(payload: dict[str, Any]) -> list[dict[str, Any]]:
    change_sets = list(payload.get("changeSets") or [])
    single = payload.get("changeSet")
    if isinstance(single, dict):
        change_sets.append(single)

    items: list[dict[str, Any]] = []
    for change_set in change_sets:
        if not isinstance(change_set, dict):
            raise ValueError("Change set entry must be an object")
        for item in change_set.get("items") or []:
            if isinstance(item, dict):
                items.append(item)
    return items


@dataclass(frozen=True)
class FetchFailure:
    """Returned instead of data when a Jenkins read fails for one job."""

    job_name: str
    reason: str
