from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_POLLING_INTERVAL_MS = 30000
DEFAULT_HISTORY_COUNT = 10

# Keys reported by ConfigChangeEvent
JENKINS_URL = "jenkins_url"
USERNAME = "username"
REPOSITORY_MAPPINGS = "repository_mappings"
POLLING_INTERVAL = "polling_interval_ms"
PROJECTS = "projects"


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Jenkins
    jenkins_url: str = Field(default="")
    jenkins_username: str = Field(default="")
    jenkins_api_token: str = Field(default="")

    # Polling
    polling_interval_ms: int = Field(default=DEFAULT_POLLING_INTERVAL_MS, gt=0)
    history_count: int = Field(default=DEFAULT_HISTORY_COUNT, gt=0)
    request_timeout_seconds: float | None = Field(default=None)

    # Application
    config_path: str = Field(default="buildwatch.yml")
    debug: bool = Field(default=False)


class JobMapping(BaseModel):
    """Maps a local project to the Jenkins job that builds it."""

    model_config = ConfigDict(frozen=True)

    project_id: str = Field(
        validation_alias=AliasChoices("project_id", "project", "workspaceFolderName")
    )
    job_name: str = Field(validation_alias=AliasChoices("job_name", "job", "jenkinsJobName"))


class StatusConfig(BaseModel):
    """Snapshot of everything a refresh cycle reads from configuration."""

    model_config = ConfigDict(frozen=True)

    jenkins_url: str = ""
    username: str = ""
    repository_mappings: tuple[JobMapping, ...] = ()
    polling_interval_ms: int = Field(default=DEFAULT_POLLING_INTERVAL_MS, gt=0)
    projects: tuple[str, ...] = ()
    history_count: int = Field(default=DEFAULT_HISTORY_COUNT, gt=0)

    @property
    def server_url(self) -> str:
        return self.jenkins_url.rstrip("/")

    def is_configured(self) -> bool:
        """URL and username are both required before anything is fetched."""
        return bool(self.jenkins_url and self.username)

    def job_name_for(self, project_id: str) -> str | None:
        return resolve_job_name(project_id, self.repository_mappings)


def resolve_job_name(project_id: str, mappings: tuple[JobMapping, ...] | list[JobMapping]) -> str | None:
    """Return the job mapped to a project, or None if the project is unmapped."""
    for mapping in mappings:
        if mapping.project_id == project_id:
            return mapping.job_name
    return None


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping at the top level")
    return data


def load_status_config(settings: Settings | None = None) -> StatusConfig:
    """
    Build a config snapshot from the environment and the YAML config file.

    Values in the YAML file take precedence over environment settings.
    Keys left empty in the file (YAML null) count as unset. When no explicit
    project list is given, every mapped project is listed.
    """
    settings = settings or get_settings()
    raw = _read_yaml(Path(settings.config_path))
    data = {key: value for key, value in raw.items() if value is not None}

    entries = data.get("repository_mappings", [])
    if not isinstance(entries, list):
        raise ValueError("repository_mappings must be a list")
    mappings = tuple(JobMapping.model_validate(entry) for entry in entries)

    projects = data.get("projects")
    if projects is None:
        projects = [mapping.project_id for mapping in mappings]
    elif not isinstance(projects, list):
        raise ValueError("projects must be a list")

    return StatusConfig(
        jenkins_url=data.get("jenkins_url", settings.jenkins_url),
        username=data.get("username", settings.jenkins_username),
        repository_mappings=mappings,
        polling_interval_ms=data.get("polling_interval_ms", settings.polling_interval_ms),
        projects=tuple(str(project) for project in projects),
        history_count=data.get("history_count", settings.history_count),
    )


@dataclass(frozen=True)
class ConfigChangeEvent:
    """Describes which configuration keys changed between two snapshots."""

    changed_keys: frozenset[str]

    def affects(self, *keys: str) -> bool:
        return any(key in self.changed_keys for key in keys)


def diff_configs(old: StatusConfig, new: StatusConfig) -> ConfigChangeEvent:
    changed = {
        key
        for key in (JENKINS_URL, USERNAME, REPOSITORY_MAPPINGS, POLLING_INTERVAL, PROJECTS)
        if getattr(old, key) != getattr(new, key)
    }
    return ConfigChangeEvent(changed_keys=frozenset(changed))


class ConfigReloader:
    """Polls a config loader and reports changes since the last snapshot."""

    def __init__(self, loader: Callable[[], StatusConfig]) -> None:
        self._loader = loader
        self.current = loader()

    def reload(self) -> ConfigChangeEvent | None:
        """Reload the config; return a change event, or None if nothing changed."""
        new = self._loader()
        event = diff_configs(self.current, new)
        self.current = new
        if not event.changed_keys:
            return None
        return event


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
