"""Tests for Jenkins build models."""

import pytest
from pydantic import ValidationError

from buildwatch.jenkins.models import BuildRecord, BuildResult


def _build_payload(**overrides) -> dict:
    payload = {
        "number": 12,
        "url": "https://ci.example.com/job/JOB-A/12/",
        "result": "SUCCESS",
        "timestamp": 1_700_000_000_000,
        "duration": 42_000,
        "changeSets": [
            {
                "items": [
                    {"msg": "Fix flaky test", "authorEmail": "alice@x.com", "commitId": "abc123"},
                    {"msg": "Bump deps", "authorEmail": "bob@x.com", "commitId": "def456"},
                ]
            }
        ],
    }
    payload.update(overrides)
    return payload


class TestBuildResult:
    """Tests for parsing the API result field."""

    def test_null_means_building(self):
        """JSON null is the BUILDING sentinel."""
        assert BuildResult.from_api(None) is BuildResult.BUILDING

    def test_known_results(self):
        assert BuildResult.from_api("SUCCESS") is BuildResult.SUCCESS
        assert BuildResult.from_api("FAILURE") is BuildResult.FAILURE
        assert BuildResult.from_api("ABORTED") is BuildResult.ABORTED
        assert BuildResult.from_api("UNSTABLE") is BuildResult.UNSTABLE

    def test_unrecognised_result_raises(self):
        with pytest.raises(ValueError):
            BuildResult.from_api("EXPLODED")


class TestBuildRecordFromApi:
    """Tests for BuildRecord.from_api."""

    def test_parses_fields(self):
        """Should map timestamp/duration and collect change-set data."""
        build = BuildRecord.from_api(_build_payload())

        assert build.number == 12
        assert build.url == "https://ci.example.com/job/JOB-A/12/"
        assert build.result is BuildResult.SUCCESS
        assert build.started_at_ms == 1_700_000_000_000
        assert build.duration_ms == 42_000
        assert build.change_authors == ("alice@x.com", "bob@x.com")
        assert build.change_summary == "Fix flaky test"

    def test_null_result_is_building(self):
        build = BuildRecord.from_api(_build_payload(result=None, duration=0))
        assert build.result is BuildResult.BUILDING

    def test_freestyle_change_set(self):
        """Freestyle jobs report a single changeSet object."""
        payload = _build_payload(
            changeSets=None,
            changeSet={"items": [{"msg": "", "authorEmail": "carol@x.com", "commitId": "c0ffee"}]},
        )
        build = BuildRecord.from_api(payload)

        assert build.change_authors == ("carol@x.com",)
        # Empty message falls back to the commit id
        assert build.change_summary == "c0ffee"

    def test_no_changes(self):
        build = BuildRecord.from_api(_build_payload(changeSets=[]))
        assert build.change_authors == ()
        assert build.change_summary is None

    def test_items_without_author_are_skipped(self):
        payload = _build_payload(changeSets=[{"items": [{"msg": "Merge", "commitId": "1"}]}])
        build = BuildRecord.from_api(payload)
        assert build.change_authors == ()
        assert build.change_summary == "Merge"

    def test_missing_number_is_malformed(self):
        payload = _build_payload()
        del payload["number"]
        with pytest.raises(ValidationError):
            BuildRecord.from_api(payload)

    def test_zero_build_number_is_malformed(self):
        with pytest.raises(ValidationError):
            BuildRecord.from_api(_build_payload(number=0))

    def test_negative_duration_is_malformed(self):
        with pytest.raises(ValidationError):
            BuildRecord.from_api(_build_payload(duration=-1))

    def test_unknown_result_is_malformed(self):
        with pytest.raises(ValidationError):
            BuildRecord.from_api(_build_payload(result="EXPLODED"))

    def test_non_object_entry_is_malformed(self):
        with pytest.raises(ValueError):
            BuildRecord.from_api(["not", "a", "build"])


class TestAuthoredBy:
    """Tests for author matching."""

    def test_case_insensitive_exact_match(self):
        build = BuildRecord.from_api(_build_payload())
        assert build.authored_by("ALICE@X.COM") is True
        assert build.authored_by("alice@x.co") is False
        assert build.authored_by("lice@x.com") is False
