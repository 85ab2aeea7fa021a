"""Author filtering and ordering of build histories."""

from dataclasses import dataclass

from buildwatch.jenkins.models import BuildRecord


@dataclass
class FilterOutcome:
    """Builds to present, newest first, and a warning when the filter fell back."""

    builds: list[BuildRecord]
    warning: str | None = None


def sort_builds(builds: list[BuildRecord]) -> list[BuildRecord]:
    """
    Order builds newest first by build number.

    Build numbers are unique within a job; if a duplicate arrives anyway,
    the first occurrence wins so the order stays strictly descending.
    """
    unique: dict[int, BuildRecord] = {}
    for build in builds:
        unique.setdefault(build.number, build)
    return sorted(unique.values(), key=lambda build: build.number, reverse=True)


def filter_builds_by_author(builds: list[BuildRecord], username: str | None) -> FilterOutcome:
    """
    Keep only builds containing changes by `username`.

    Matching is a case-insensitive exact comparison with change-set author
    emails. When nothing matches but builds exist, all builds are returned
    with a warning so the view is never empty just because the user's own
    commits are outside the fetched window.
    """
    if not username:
        return FilterOutcome(builds=sort_builds(builds))

    matching = [build for build in builds if build.authored_by(username)]
    if matching:
        return FilterOutcome(builds=sort_builds(matching))

    if not builds:
        return FilterOutcome(builds=[])

    shown = sort_builds(builds)
    return FilterOutcome(
        builds=shown,
        warning=f"no builds for {username}, showing last {len(shown)} builds",
    )
