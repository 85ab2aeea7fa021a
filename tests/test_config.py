"""Tests for settings, the YAML config file and change detection."""

import pytest
from pydantic import ValidationError

from buildwatch.config import (
    JENKINS_URL,
    POLLING_INTERVAL,
    PROJECTS,
    ConfigReloader,
    JobMapping,
    Settings,
    StatusConfig,
    diff_configs,
    load_status_config,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("JENKINS_URL", "JENKINS_USERNAME", "JENKINS_API_TOKEN", "POLLING_INTERVAL_MS"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "buildwatch.yml"
    path.write_text(
        """
jenkins_url: https://ci.example.com/
username: alice@x.com
polling_interval_ms: 15000
repository_mappings:
  - workspaceFolderName: web
    jenkinsJobName: WEB-BUILD
  - project: api
    job: team/api
"""
    )
    return path


def _settings(path, **overrides) -> Settings:
    return Settings(_env_file=None, config_path=str(path), **overrides)


class TestLoadStatusConfig:
    """Tests for load_status_config."""

    def test_reads_yaml_file(self, config_file):
        config = load_status_config(_settings(config_file))

        assert config.server_url == "https://ci.example.com"
        assert config.username == "alice@x.com"
        assert config.polling_interval_ms == 15000
        assert config.job_name_for("web") == "WEB-BUILD"
        assert config.job_name_for("api") == "team/api"

    def test_projects_default_to_mapped_projects(self, config_file):
        config = load_status_config(_settings(config_file))
        assert config.projects == ("web", "api")

    def test_explicit_projects_can_include_unmapped(self, tmp_path):
        path = tmp_path / "buildwatch.yml"
        path.write_text("projects: [web, docs]\nrepository_mappings: []\n")

        config = load_status_config(_settings(path))

        assert config.projects == ("web", "docs")
        assert config.job_name_for("docs") is None

    def test_missing_file_uses_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("JENKINS_URL", "https://env.example.com")
        monkeypatch.setenv("JENKINS_USERNAME", "env-user")

        config = load_status_config(_settings(tmp_path / "absent.yml"))

        assert config.jenkins_url == "https://env.example.com"
        assert config.username == "env-user"
        assert config.polling_interval_ms == 30000
        assert config.history_count == 10
        assert config.projects == ()

    def test_yaml_overrides_environment(self, config_file):
        config = load_status_config(_settings(config_file, jenkins_url="https://env.example.com"))
        assert config.jenkins_url == "https://ci.example.com/"

    def test_non_mapping_file_is_rejected(self, tmp_path):
        path = tmp_path / "buildwatch.yml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ValueError):
            load_status_config(_settings(path))

    def test_empty_keys_count_as_unset(self, tmp_path):
        path = tmp_path / "buildwatch.yml"
        path.write_text(
            "jenkins_url:\nusername:\npolling_interval_ms:\nprojects:\nrepository_mappings:\n"
        )

        config = load_status_config(
            _settings(path, jenkins_url="https://env.example.com", jenkins_username="env-user")
        )

        assert config.jenkins_url == "https://env.example.com"
        assert config.username == "env-user"
        assert config.polling_interval_ms == 30000
        assert config.repository_mappings == ()
        assert config.projects == ()

    def test_empty_mappings_with_server_settings(self, tmp_path):
        path = tmp_path / "buildwatch.yml"
        path.write_text("jenkins_url: https://ci\nusername: a\nrepository_mappings:\n")

        config = load_status_config(_settings(path))

        assert config.is_configured()
        assert config.repository_mappings == ()

    def test_mappings_must_be_a_list(self, tmp_path):
        path = tmp_path / "buildwatch.yml"
        path.write_text("repository_mappings: 3\n")

        with pytest.raises(ValueError, match="repository_mappings"):
            load_status_config(_settings(path))

    def test_projects_must_be_a_list(self, tmp_path):
        path = tmp_path / "buildwatch.yml"
        path.write_text("projects: web\n")

        with pytest.raises(ValueError, match="projects"):
            load_status_config(_settings(path))

    def test_interval_must_be_positive(self, tmp_path):
        path = tmp_path / "buildwatch.yml"
        path.write_text("polling_interval_ms: 0\n")

        with pytest.raises(ValidationError):
            load_status_config(_settings(path))


class TestStatusConfig:
    """Tests for the config snapshot."""

    def test_is_configured_requires_url_and_username(self):
        assert StatusConfig(jenkins_url="https://ci", username="a").is_configured()
        assert not StatusConfig(jenkins_url="https://ci").is_configured()
        assert not StatusConfig(username="a").is_configured()

    def test_snapshot_is_immutable(self):
        config = StatusConfig()
        with pytest.raises(ValidationError):
            config.username = "changed"


class TestConfigChanges:
    """Tests for diff_configs and ConfigReloader."""

    def test_diff_reports_changed_keys(self):
        old = StatusConfig(jenkins_url="https://a", projects=("p",))
        new = old.model_copy(update={"jenkins_url": "https://b", "polling_interval_ms": 5000})

        event = diff_configs(old, new)

        assert event.changed_keys == {JENKINS_URL, POLLING_INTERVAL}
        assert event.affects(POLLING_INTERVAL)
        assert not event.affects(PROJECTS)

    def test_mapping_change_is_detected(self):
        old = StatusConfig(repository_mappings=(JobMapping(project_id="p", job_name="A"),))
        new = StatusConfig(repository_mappings=(JobMapping(project_id="p", job_name="B"),))

        assert diff_configs(old, new).affects("repository_mappings")

    def test_reloader_reports_only_real_changes(self):
        snapshots = iter(
            [
                StatusConfig(projects=("p",)),
                StatusConfig(projects=("p",)),
                StatusConfig(projects=("p", "q")),
            ]
        )
        reloader = ConfigReloader(lambda: next(snapshots))

        assert reloader.reload() is None
        event = reloader.reload()

        assert event is not None
        assert event.changed_keys == {PROJECTS}
        assert reloader.current.projects == ("p", "q")
