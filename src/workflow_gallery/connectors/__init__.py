"""Connector package: upstream clients for repository content.

Usage:
    from workflow_gallery.connectors import create_github_client, close_connector

    client = create_github_client(settings)
    try:
        ...
    finally:
        await close_connector(client)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from .base import BaseConnector
from .github import GithubClient

if TYPE_CHECKING:
    from ..config import Settings

__all__ = ["BaseConnector", "GithubClient", "create_github_client", "close_connector"]


def create_github_client(
    settings: Settings,
    http_client: httpx.AsyncClient | None = None,
) -> GithubClient:
    """Create a GitHub client, building a shared AsyncClient when none is given."""
    if http_client is None:
        http_client = httpx.AsyncClient(timeout=settings.aggregate_timeout, follow_redirects=True)
    return GithubClient.from_settings(settings, http_client)


async def close_connector(connector: BaseConnector) -> None:
    """Close the AsyncClient attached to a connector."""
    await connector.http.aclose()
