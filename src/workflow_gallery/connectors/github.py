"""GitHub REST API and raw-content connector."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

from ..errors import ShapeError
from .base import BaseConnector

if TYPE_CHECKING:
    from ..config import Settings

_GH_ACCEPT = "application/vnd.github+json"
_GH_API_VERSION = "2022-11-28"


class GithubClient(BaseConnector):
    """Read-only GitHub client for repository contents.

    Optional settings: GITHUB_TOKEN (sent as a bearer credential when present)
    """

    service_name = "github"

    def __init__(
        self,
        owner: str,
        repo: str,
        http_client: httpx.AsyncClient,
        *,
        token: str | None = None,
        branch: str = "main",
        api_base: str = "https://api.github.com",
        raw_base: str = "https://raw.githubusercontent.com",
        user_agent: str = "n8n-workflow-gallery",
        content_timeout: float = 5.0,
        listing_timeout: float = 10.0,
        aggregate_timeout: float = 30.0,
    ) -> None:
        super().__init__(http_client)
        self.owner = owner
        self.repo = repo
        self.branch = branch
        self.api_base = api_base.rstrip("/")
        self.raw_base = raw_base.rstrip("/")
        self.content_timeout = content_timeout
        self.listing_timeout = listing_timeout
        self.aggregate_timeout = aggregate_timeout
        self._token = token
        self._user_agent = user_agent

    @classmethod
    def from_settings(cls, settings: Settings, http_client: httpx.AsyncClient) -> GithubClient:
        return cls(
            settings.github_owner,
            settings.github_repo,
            http_client,
            token=settings.github_token,
            branch=settings.github_branch,
            api_base=settings.github_api_base,
            raw_base=settings.github_raw_base,
            user_agent=settings.user_agent,
            content_timeout=settings.content_timeout,
            listing_timeout=settings.listing_timeout,
            aggregate_timeout=settings.aggregate_timeout,
        )

    @classmethod
    def is_configured(cls, settings: Settings) -> bool:
        return bool(settings.github_token)

    @property
    def has_token(self) -> bool:
        return bool(self._token)

    @property
    def repository(self) -> str:
        return f"{self.owner}/{self.repo}"

    def default_headers(self) -> dict[str, str]:
        return {"User-Agent": self._user_agent}

    def is_trusted(self, url: str) -> bool:
        """True if ``url`` points at the configured API or raw-content host."""
        host = httpx.URL(url).host
        return host in (httpx.URL(self.api_base).host, httpx.URL(self.raw_base).host)

    def headers_for(self, url: str) -> dict[str, str]:
        headers = self.default_headers()
        # download_url values come from upstream data and may name any host
        if self._token and self.is_trusted(url):
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _api_headers(self) -> dict[str, str]:
        return {"Accept": _GH_ACCEPT, "X-GitHub-Api-Version": _GH_API_VERSION}

    # ------------------------------------------------------------------
    # URLs
    # ------------------------------------------------------------------

    def repo_url(self) -> str:
        return f"{self.api_base}/repos/{self.owner}/{self.repo}"

    def contents_url(self, path: str = "") -> str:
        path = path.strip("/")
        base = f"{self.repo_url()}/contents"
        return f"{base}/{path}" if path else base

    def raw_url(self, path: str) -> str:
        return f"{self.raw_base}/{self.owner}/{self.repo}/{self.branch}/{path.lstrip('/')}"

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    async def list_directory(self, path: str = "") -> list[Any]:
        """List one directory through the contents API."""
        data = await self.get_json(
            self.contents_url(path),
            timeout=self.listing_timeout,
            headers=self._api_headers(),
        )
        if not isinstance(data, list):
            raise ShapeError(f"Contents of '{path or '/'}' is not a directory listing")
        return data

    async def fetch_document(self, url: str, *, aggregate: bool = False) -> Any:
        """Download a raw JSON document (a single workflow or an aggregate index)."""
        timeout = self.aggregate_timeout if aggregate else self.content_timeout
        return await self.get_json(url, timeout=timeout)

    async def fetch_repository(self) -> dict:
        data = await self.get_json(
            self.repo_url(),
            timeout=self.listing_timeout,
            headers=self._api_headers(),
        )
        if not isinstance(data, dict):
            raise ShapeError("Repository metadata is not a JSON object")
        return data
