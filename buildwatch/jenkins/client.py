"""Read-only Jenkins JSON API client."""

from typing import Any
from urllib.parse import quote

import aiohttp

from buildwatch.core.logging import get_logger

from .models import BuildRecord, BuildResult, FetchFailure

logger = get_logger(__name__)

DEFAULT_HISTORY_COUNT = 10

_CHANGE_ITEM_FIELDS = "items[msg,authorEmail,commitId]"
HISTORY_FIELDS = (
    "number,url,result,timestamp,duration,"
    f"changeSet[{_CHANGE_ITEM_FIELDS}],changeSets[{_CHANGE_ITEM_FIELDS}]"
)


def job_path(job_name: str) -> str:
    """
    Build the URL path for a job.

    Folder jobs are addressed as `folder/job`, which Jenkins serves under
    `/job/folder/job/job`.
    """
    segments = [segment for segment in job_name.strip("/").split("/") if segment]
    return "/".join(f"job/{quote(segment, safe='')}" for segment in segments)


class JenkinsClient:
    """
    Authenticated reads of a job's latest status and recent build history.

    Both reads report failures as FetchFailure values and never raise.
    No retries are performed; callers decide when to ask again.
    """

    def __init__(self, timeout_seconds: float | None = None) -> None:
        """
        Initialize the client.

        Args:
            timeout_seconds: Total request timeout. None keeps aiohttp's default.
        """
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds) if timeout_seconds else None

    async def fetch_latest_status(
        self,
        server_url: str,
        job_name: str,
        username: str,
        token: str,
    ) -> BuildResult | FetchFailure:
        """Fetch the result of the job's most recent build (BUILDING while it runs)."""
        url = f"{server_url.rstrip('/')}/{job_path(job_name)}/lastBuild/api/json"
        data = await self._get_json(url, job_name, username, token)
        if isinstance(data, FetchFailure):
            return data

        if not isinstance(data, dict) or "result" not in data:
            logger.bind(job=job_name).warning("jenkins_status_missing_result")
            return FetchFailure(job_name, "Response has no result field")

        try:
            result = BuildResult.from_api(data["result"])
        except ValueError:
            logger.bind(job=job_name, result=data["result"]).warning("jenkins_status_unrecognised")
            return FetchFailure(job_name, f"Unrecognised result: {data['result']!r}")

        logger.bind(job=job_name, result=result.value).debug("jenkins_status_fetched")
        return result

    async def fetch_history(
        self,
        server_url: str,
        job_name: str,
        username: str,
        token: str,
        count: int = DEFAULT_HISTORY_COUNT,
    ) -> list[BuildRecord] | FetchFailure:
        """
        Fetch up to `count` recent builds with their change sets in one request.

        Returns:
            The builds in server order (unsorted, unfiltered), or FetchFailure
        """
        url = f"{server_url.rstrip('/')}/{job_path(job_name)}/api/json"
        params = {"tree": f"builds[{HISTORY_FIELDS}]{{0,{count}}}"}
        data = await self._get_json(url, job_name, username, token, params=params)
        if isinstance(data, FetchFailure):
            return data

        builds = data.get("builds") if isinstance(data, dict) else None
        if not isinstance(builds, list):
            logger.bind(job=job_name).warning("jenkins_history_missing_builds")
            return FetchFailure(job_name, "Response has no builds list")

        try:
            records = [BuildRecord.from_api(build) for build in builds]
        except ValueError as e:
            logger.bind(job=job_name, error=str(e)).warning("jenkins_history_malformed")
            return FetchFailure(job_name, f"Malformed build entry: {e}")

        logger.bind(job=job_name, count=len(records)).debug("jenkins_history_fetched")
        return records

    async def _get_json(
        self,
        url: str,
        job_name: str,
        username: str,
        token: str,
        params: dict[str, str] | None = None,
    ) -> Any:
        """GET a JSON document, returning FetchFailure on any error."""
        session_kwargs: dict[str, Any] = {"auth": aiohttp.BasicAuth(username, token)}
        if self.timeout is not None:
            session_kwargs["timeout"] = self.timeout

        try:
            async with aiohttp.ClientSession(**session_kwargs) as session:
                async with session.get(
                    url,
                    params=params,
                    headers={"Accept": "application/json"},
                ) as response:
                    if not 200 <= response.status < 300:
                        logger.bind(job=job_name, status=response.status).warning(
                            "jenkins_http_error"
                        )
                        return FetchFailure(job_name, f"HTTP {response.status}")
                    return await response.json(content_type=None)

        except TimeoutError:
            logger.bind(job=job_name).warning("jenkins_timeout")
            return FetchFailure(job_name, "Request timed out")
        except aiohttp.ClientError as e:
            logger.bind(job=job_name, error=str(e)).error("jenkins_client_error")
            return FetchFailure(job_name, f"Client error: {e}")
        except ValueError as e:
            logger.bind(job=job_name, error=str(e)).warning("jenkins_invalid_json")
            return FetchFailure(job_name, "Response is not valid JSON")
        except Exception as e:
            logger.bind(job=job_name, error=str(e)).error("jenkins_unexpected_error")
            return FetchFailure(job_name, f"Unexpected error: {e}")
