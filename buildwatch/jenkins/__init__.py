"""Jenkins JSON API access."""

from .client import JenkinsClient, job_path
from .models import BuildRecord, BuildResult, FetchFailure

__all__ = [
    "BuildRecord",
    "BuildResult",
    "FetchFailure",
    "JenkinsClient",
    "job_path",
]
