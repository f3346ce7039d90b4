"""Discover candidate workflow entries in a GitHub repository."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from ..errors import GalleryError, ShapeError, UpstreamStatusError
from .policy import FailureSite, Recovery, recovery_for
from .schema import DiscoveredEntry, Exploration
from .shapes import decode_aggregate
from .vocabulary import EXCLUDED_FILENAMES, ROOT_FOLDER

if TYPE_CHECKING:
    from ..config import Settings
    from ..connectors.github import GithubClient

logger = logging.getLogger(__name__)


def chunked(items: list, size: int) -> list[list]:
    size = max(size, 1)
    return [items[i:i + size] for i in range(0, len(items), size)]


class RepositoryExplorer(ABC):
    """Walks the upstream repository and returns raw candidate entries."""

    strategy: str = ""

    def __init__(self, client: GithubClient, suffix: str = ".json") -> None:
        self.client = client
        self.suffix = suffix.lower()

    @abstractmethod
    async def explore(self) -> Exploration:
        ...

    def describe(self) -> dict[str, Any]:
        return {"strategy": self.strategy}


class DirectoryWalkExplorer(RepositoryExplorer):
    """List a base folder, then every directory inside it one level deep."""

    strategy = "directory"

    def __init__(
        self,
        client: GithubClient,
        workflows_folder: str | None = None,
        suffix: str = ".json",
        batch_size: int = 20,
    ) -> None:
        super().__init__(client, suffix)
        self.workflows_folder = (workflows_folder or "").strip("/")
        self.batch_size = batch_size

    def describe(self) -> dict[str, Any]:
        return {
            "strategy": self.strategy,
            "workflows_folder": self.workflows_folder or None,
            "contents_url": self.client.contents_url(self.workflows_folder),
        }

    def is_candidate(self, item: Any) -> bool:
        if not isinstance(item, dict) or item.get("type") != "file":
            return False
        name = item.get("name")
        if not isinstance(name, str):
            return False
        return name.lower().endswith(self.suffix) and name.lower() not in EXCLUDED_FILENAMES

    async def _list_base(self) -> list[Any]:
        if not self.workflows_folder:
            return await self.client.list_directory("")
        try:
            return await self.client.list_directory(self.workflows_folder)
        except UpstreamStatusError as e:
            if not e.is_not_found or recovery_for(FailureSite.TARGET_FOLDER_MISSING) is not Recovery.FALLBACK:
                raise
            logger.warning(
                "Folder '%s' not found in %s, listing repository root instead",
                self.workflows_folder,
                self.client.repository,
            )
        return await self.client.list_directory("")

    async def _list_subdirectory(self, directory: dict) -> tuple[str, list[Any] | GalleryError]:
        name = directory.get("name") or directory.get("path") or "?"
        path = directory.get("path") or name
        try:
            return name, await self.client.list_directory(path)
        except GalleryError as e:
            return name, e

    async def explore(self) -> Exploration:
        listing = await self._list_base()
        exploration = Exploration(strategy=self.strategy)

        directories = [item for item in listing if isinstance(item, dict) and item.get("type") == "dir"]
        for item in listing:
            if self.is_candidate(item):
                exploration.entries.append(DiscoveredEntry(raw=item, folder=ROOT_FOLDER))
        if exploration.entries:
            exploration.structure[ROOT_FOLDER] = len(exploration.entries)

        logger.info(
            "Found %d items (%d directories) in %s/%s",
            len(listing),
            len(directories),
            self.client.repository,
            self.workflows_folder,
        )

        for batch in chunked(directories, self.batch_size):
            results = await asyncio.gather(*(self._list_subdirectory(d) for d in batch))
            for folder, result in results:
                if isinstance(result, GalleryError):
                    if recovery_for(FailureSite.SUBDIRECTORY_LISTING) is not Recovery.SKIP:
                        raise result
                    logger.warning("Skipping folder '%s': %s", folder, result)
                    exploration.failures[folder] = str(result)
                    continue
                matches = [item for item in result if self.is_candidate(item)]
                exploration.entries.extend(DiscoveredEntry(raw=m, folder=folder) for m in matches)
                exploration.structure[folder] = len(matches)

        logger.info(
            "Discovered %d workflow files across %d folders (%d failed)",
            len(exploration.entries),
            len(exploration.structure),
            len(exploration.failures),
        )
        return exploration


class AggregateDocumentExplorer(RepositoryExplorer):
    """Fetch one JSON document that lists every workflow inline."""

    strategy = "aggregate"

    def __init__(self, client: GithubClient, aggregate_path: str, suffix: str = ".json") -> None:
        super().__init__(client, suffix)
        self.aggregate_path = aggregate_path

    def describe(self) -> dict[str, Any]:
        return {
            "strategy": self.strategy,
            "aggregate_path": self.aggregate_path,
            "aggregate_url": self.client.raw_url(self.aggregate_path),
        }

    @staticmethod
    def _folder_of(item: Any) -> str:
        if isinstance(item, dict):
            for key in ("folder", "category"):
                value = item.get(key)
                if isinstance(value, str) and value.strip():
                    return value.strip()
        return ROOT_FOLDER

    async def explore(self) -> Exploration:
        url = self.client.raw_url(self.aggregate_path)
        exploration = Exploration(strategy=self.strategy)
        empty = recovery_for(FailureSite.AGGREGATE_SHAPE) is Recovery.EMPTY_LIST
        try:
            document = await self.client.fetch_document(url, aggregate=True)
        except ShapeError as e:
            if not empty:
                raise
            logger.warning("Aggregate document at %s is not usable: %s", url, e)
            exploration.failures[self.aggregate_path] = str(e)
            return exploration

        decoded = decode_aggregate(document)
        if not decoded.recognized:
            if not empty:
                raise ShapeError(f"Unrecognized aggregate document shape at {url}")
            logger.warning("Unrecognized aggregate document shape at %s", url)
            exploration.failures[self.aggregate_path] = "unrecognized document shape"
            return exploration

        for item in decoded.items:
            folder = self._folder_of(item)
            exploration.entries.append(DiscoveredEntry(raw=item, folder=folder))
            exploration.structure[folder] = exploration.structure.get(folder, 0) + 1

        logger.info("Decoded %d records from %s (%s)", len(decoded.items), url, decoded.kind)
        return exploration


def create_explorer(settings: Settings, client: GithubClient) -> RepositoryExplorer:
    """Build the discovery strategy selected by settings.discovery_strategy."""
    if settings.discovery_strategy == "aggregate":
        return AggregateDocumentExplorer(client, settings.aggregate_path, settings.workflow_suffix)
    return DirectoryWalkExplorer(
        client,
        settings.workflows_folder,
        settings.workflow_suffix,
        settings.enrichment_batch_size,
    )
