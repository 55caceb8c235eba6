"""
Gitea REST API client for the probe service.

Every call is a single authenticated GET against ``{url}/api/v1``. Failures
never propagate: they are logged and the call yields an empty list, so one
unreachable organization or repository cannot abort a whole probe.
"""

from typing import List, Optional, Type, TypeVar
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter, ValidationError

from shared.logging import get_logger
from shared.errors import RemoteAPIError

from .models import Organization, PullRequest, Repository, User
from ..targets.registry import Target

API_BASE_PATH = "/api/v1"
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_USER_AGENT = "gitea-probe-exporter/1.0"

T = TypeVar("T")


def _segment(value: str) -> str:
    return quote(value, safe="")


class GiteaClient:
    """Client for one Gitea target, scoped to a single probe.

    Use as an async context manager; the underlying connection pool is closed
    on exit.
    """

    def __init__(
        self,
        target: Target,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.target = target
        self.base_url = f"{target.url}{API_BASE_PATH}"
        self.timeout = timeout
        self.user_agent = user_agent
        self.error_count = 0
        self.logger = get_logger("probe.gitea_client")
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _headers(self) -> dict:
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "application/json",
        }
        if self.target.token:
            headers["Authorization"] = f"Bearer {self.target.token}"
        return headers

    async def __aenter__(self) -> "GiteaClient":
        self._client = httpx.AsyncClient(
            headers=self._headers(),
            timeout=self.timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    async def aclose(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def list_organizations(self) -> List[Organization]:
        """List the organizations visible to the token."""
        return await self._fetch_list("/orgs", Organization)

    async def list_organization_members(self, org: str) -> List[User]:
        """List the members of an organization."""
        return await self._fetch_list(f"/orgs/{_segment(org)}/members", User)

    async def list_repositories(self, org: str) -> List[Repository]:
        """List the repositories of an organization."""
        return await self._fetch_list(f"/orgs/{_segment(org)}/repos", Repository)

    async def list_open_pull_requests(self, org: str, repo: str) -> List[PullRequest]:
        """List the open pull requests of a repository."""
        return await self._fetch_list(
            f"/repos/{_segment(org)}/{_segment(repo)}/pulls",
            PullRequest,
            params={"state": "open"},
        )

    async def _fetch_list(self, path: str, model: Type[T], params: Optional[dict] = None) -> List[T]:
        """GET ``path`` and decode a JSON array of ``model``; ``[]`` on any failure."""
        url = f"{self.base_url}{path}"
        try:
            return await self._get(url, model, params)
        except RemoteAPIError as e:
            self.error_count += 1
            self.logger.error(e.message, **e.details)
            return []

    async def _get(self, url: str, model: Type[T], params: Optional[dict]) -> List[T]:
        if self._client is None:
            raise RuntimeError("GiteaClient must be used as an async context manager")

        self.logger.info("Calling Gitea API", url=url)
        try:
            response = await self._client.get(url, params=params)
        except httpx.HTTPError as e:
            raise RemoteAPIError(url, f"Error during request: {e}")

        if response.status_code != 200:
            raise RemoteAPIError(
                url,
                f"Received: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise RemoteAPIError(url, f"Error decoding response: {e}", status_code=response.status_code)

        if not isinstance(payload, list):
            raise RemoteAPIError(
                url,
                f"Error decoding response: expected a JSON array, got {type(payload).__name__}",
                status_code=response.status_code,
            )

        try:
            return TypeAdapter(List[model]).validate_python(payload)
        except ValidationError as e:
            raise RemoteAPIError(
                url,
                f"Error decoding response: {e.error_count()} invalid field(s)",
                status_code=response.status_code,
            )
