"""Tests for the shared status cache."""

from buildwatch.status.cache import StatusCache


class TestStatusCache:
    """Tests for StatusCache."""

    def test_missing_entry_is_none(self):
        assert StatusCache().get("JOB-A") is None

    def test_put_then_get(self, build_factory):
        cache = StatusCache()
        history = [build_factory(1), build_factory(2)]

        cache.put("JOB-A", history)

        assert cache.get("JOB-A") == history
        assert "JOB-A" in cache
        assert len(cache) == 1

    def test_empty_history_is_cached(self):
        """An empty list is a real entry, distinct from absence."""
        cache = StatusCache()
        cache.put("JOB-A", [])
        assert cache.get("JOB-A") == []

    def test_put_replaces_whole_entry(self, build_factory):
        """Entries are snapshots; a put never merges with the previous one."""
        cache = StatusCache()
        cache.put("JOB-A", [build_factory(1), build_factory(2)])
        cache.put("JOB-A", [build_factory(3)])

        assert [build.number for build in cache.get("JOB-A")] == [3]

    def test_entries_are_isolated_from_callers(self, build_factory):
        cache = StatusCache()
        history = [build_factory(1)]
        cache.put("JOB-A", history)

        history.append(build_factory(2))
        cache.get("JOB-A").append(build_factory(3))

        assert [build.number for build in cache.get("JOB-A")] == [1]

    def test_clear_drops_everything(self, build_factory):
        cache = StatusCache()
        cache.put("JOB-A", [build_factory(1)])
        cache.put("JOB-B", [])

        cache.clear()

        assert len(cache) == 0
        assert cache.get("JOB-A") is None
        assert cache.get("JOB-B") is None
