"""Fake GitHub upstream shared by the test modules."""

import asyncio
import sys
from pathlib import Path
from typing import Any

import httpx

sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))

from workflow_gallery.catalog.explorer import RepositoryExplorer
from workflow_gallery.catalog.schema import DiscoveredEntry, Exploration
from workflow_gallery.connectors.github import GithubClient

API = "https://api.github.com/repos/acme/flows"
CONTENTS = f"{API}/contents"
RAW = "https://raw.githubusercontent.com/acme/flows/main"


def file_entry(path: str, size: int = 1024) -> dict:
    return {
        "name": path.rsplit("/", 1)[-1],
        "path": path,
        "type": "file",
        "size": size,
        "html_url": f"https://github.com/acme/flows/blob/main/{path}",
        "download_url": f"{RAW}/{path}",
    }


def dir_entry(path: str) -> dict:
    return {"name": path.rsplit("/", 1)[-1], "path": path, "type": "dir", "size": 0}


def n8n_document(node_types: list[str], name: str = "Flow") -> dict:
    nodes = [
        {"id": str(i), "name": f"Node {i}", "type": node_type, "position": [0, 0], "parameters": {}}
        for i, node_type in enumerate(node_types)
    ]
    connections = {
        nodes[i]["name"]: {"main": [[{"node": nodes[i + 1]["name"], "type": "main", "index": 0}]]}
        for i in range(len(nodes) - 1)
    }
    return {"name": name, "nodes": nodes, "connections": connections}


class FakeGithub:
    """Routes requests by full URL.

    A route value may be JSON data (served with 200), an ``httpx.Response``,
    or an exception instance to raise. Unknown URLs answer 404.
    """

    def __init__(self, routes: dict[str, Any] | None = None) -> None:
        self.routes: dict[str, Any] = dict(routes or {})
        self.calls: list[str] = []
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.calls.append(url)
        self.requests.append(request)
        route = self.routes.get(url)
        if route is None:
            return httpx.Response(404, json={"message": "Not Found"})
        if isinstance(route, Exception):
            raise route
        if isinstance(route, httpx.Response):
            return route
        return httpx.Response(200, json=route)

    def count(self, url: str) -> int:
        return self.calls.count(url)

    def client(self, **kwargs: Any) -> GithubClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
        return GithubClient("acme", "flows", http, **kwargs)


class TrackingGithub(FakeGithub):
    """FakeGithub that answers asynchronously and records peak concurrency."""

    def __init__(self, routes: dict[str, Any] | None = None, delay: float = 0.01) -> None:
        super().__init__(routes)
        self.delay = delay
        self.in_flight = 0
        self.peak = 0

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            return super().handler(request)
        finally:
            self.in_flight -= 1


class CountingExplorer(RepositoryExplorer):
    """Explorer returning fixed entries and counting invocations."""

    strategy = "directory"

    def __init__(self, client: GithubClient, entries: list[tuple[str, Any]], error: Exception | None = None):
        super().__init__(client)
        self.entries = entries
        self.error = error
        self.calls = 0

    async def explore(self) -> Exploration:
        self.calls += 1
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        exploration = Exploration(strategy=self.strategy)
        for folder, raw in self.entries:
            exploration.entries.append(DiscoveredEntry(raw=raw, folder=folder))
            exploration.structure[folder] = exploration.structure.get(folder, 0) + 1
        return exploration


class FakeClock:
    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
