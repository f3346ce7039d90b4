"""Base interface for upstream content connectors."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

import httpx

from ..errors import ShapeError, TransportError, UpstreamStatusError

if TYPE_CHECKING:
    from ..config import Settings

logger = logging.getLogger(__name__)


class BaseConnector(ABC):
    """Abstract base for read-only upstream connectors.

    Subclasses build their default headers; ``get_json`` performs the request
    and maps every failure onto the gallery error taxonomy:

        httpx.TransportError (incl. timeouts) -> TransportError
        non-2xx status                        -> UpstreamStatusError
        body that is not JSON                 -> ShapeError
    """

    service_name: str = ""

    def __init__(self, http_client: httpx.AsyncClient) -> None:
        self.http = http_client

    def default_headers(self) -> dict[str, str]:
        return {}

    def headers_for(self, url: str) -> dict[str, str]:
        """Headers for one request. Subclasses add credentials per host."""
        return self.default_headers()

    async def get_json(
        self,
        url: str,
        *,
        timeout: float,
        headers: dict[str, str] | None = None,
    ) -> Any:
        merged = {**self.headers_for(url), **(headers or {})}
        try:
            resp = await self.http.get(url, headers=merged, timeout=timeout)
        except httpx.TransportError as e:
            logger.warning("%s request to %s failed: %s", self.service_name, url, e)
            raise TransportError(f"Could not reach {url}: {e}", url=url) from e

        if not resp.is_success:
            raise UpstreamStatusError(resp.status_code, resp.text[:500], url=url)

        try:
            return resp.json()
        except ValueError as e:
            raise ShapeError(f"Response from {url} is not valid JSON") from e

    @classmethod
    @abstractmethod
    def from_settings(cls, settings: Settings, http_client: httpx.AsyncClient) -> BaseConnector:
        """Construct this connector from application Settings."""
        ...

    @classmethod
    @abstractmethod
    def is_configured(cls, settings: Settings) -> bool:
        """Return True if the connector has credentials configured."""
        ...
