"""Shared cache of build histories keyed by job name."""

from buildwatch.jenkins.models import BuildRecord


class StatusCache:
    """
    Last fetched build history per job.

    Entries are opaque snapshots: `put` always replaces the whole history
    for a job and there is no partial update. Consistency comes from
    clearing and refetching, never from merging.

    The cache is shared between the refresh cycle and the build tree on a
    single event loop, so it holds no lock. Readers must re-read after any
    await instead of keeping a reference across it.
    """

    def __init__(self) -> None:
        self._entries: dict[str, list[BuildRecord]] = {}

    def get(self, job_name: str) -> list[BuildRecord] | None:
        """Return a copy of the cached history, or None if absent."""
        history = self._entries.get(job_name)
        if history is None:
            return None
        return list(history)

    def put(self, job_name: str, history: list[BuildRecord]) -> None:
        self._entries[job_name] = list(history)

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()

    def __contains__(self, job_name: object) -> bool:
        return job_name in self._entries

    def __len__(self) -> int:
        return len(self._entries)
