"""Query facade: the operations the HTTP layer calls."""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Optional

from pydantic import BaseModel

from ..errors import GalleryError, NotFound
from .cache import CacheSnapshot, ContentCache
from .explorer import RepositoryExplorer, chunked, create_explorer
from .normalizer import apply_workflow_document, degrade, normalize
from .policy import FailureSite, Recovery, recovery_for
from .schema import Exploration, WorkflowSummary
from .vocabulary import CATEGORIES, DEFAULT_VOCABULARY, Vocabulary

if TYPE_CHECKING:
    from ..config import Settings
    from ..connectors.github import GithubClient

logger = logging.getLogger(__name__)

SAMPLE_SIZE = 10


class WorkflowListing(BaseModel):
    """Result of list_workflows."""

    workflows: list[WorkflowSummary]
    total: int
    cached: bool
    cache_age: Optional[int] = None
    structure: dict[str, int] = {}
    categories: dict[str, int] = {}
    warning: Optional[str] = None

    @property
    def count(self) -> int:
        return len(self.workflows)


class WorkflowCatalog:
    """Serves the normalized workflow listing through a TTL cache."""

    def __init__(
        self,
        client: GithubClient,
        explorer: RepositoryExplorer,
        cache: ContentCache,
        *,
        fetch_full_content: bool = False,
        batch_size: int = 20,
        vocabulary: Vocabulary = DEFAULT_VOCABULARY,
        app_env: str = "development",
    ) -> None:
        self.client = client
        self.explorer = explorer
        self.cache = cache
        self.fetch_full_content = fetch_full_content
        self.batch_size = batch_size
        self.vocabulary = vocabulary
        self.app_env = app_env

    @classmethod
    def from_settings(cls, settings: Settings, client: GithubClient) -> WorkflowCatalog:
        return cls(
            client,
            create_explorer(settings, client),
            ContentCache(settings.cache_ttl_seconds),
            fetch_full_content=settings.fetch_full_content,
            batch_size=settings.enrichment_batch_size,
            app_env=settings.app_env,
        )

    @property
    def repository(self) -> str:
        return self.client.repository

    # ------------------------------------------------------------------
    # Refresh pipeline
    # ------------------------------------------------------------------

    def _normalize_all(self, exploration: Exploration) -> list[WorkflowSummary]:
        summaries: list[WorkflowSummary] = []
        for entry in exploration.entries:
            if not isinstance(entry.raw, dict):
                logger.warning("Dropping non-object entry in %s: %r", entry.folder, entry.raw)
                continue
            summaries.append(
                normalize(entry.raw, entry.folder, exploration.strategy, self.vocabulary)
            )
        return summaries

    @staticmethod
    def _dedupe(summaries: list[WorkflowSummary]) -> list[WorkflowSummary]:
        """Keep the first summary seen for each filename."""
        seen: dict[str, WorkflowSummary] = {}
        for summary in summaries:
            first = seen.get(summary.filename)
            if first is not None:
                logger.warning(
                    "Duplicate filename %s: keeping %s, ignoring %s",
                    summary.filename,
                    first.path or first.folder,
                    summary.path or summary.folder,
                )
                continue
            seen[summary.filename] = summary
        return list(seen.values())

    async def _load_content(self, summary: WorkflowSummary) -> WorkflowSummary:
        if summary.workflow is not None or not summary.download_url:
            return summary
        try:
            document = await self.client.fetch_document(summary.download_url)
        except GalleryError as e:
            # Recovery.PLACEHOLDER
            logger.warning("Error fetching content for %s: %s", summary.filename, e)
            return degrade(summary, str(e))
        return apply_workflow_document(summary, document, self.vocabulary)

    async def enrich(self, summaries: list[WorkflowSummary]) -> list[WorkflowSummary]:
        """Fetch full documents chunk by chunk; failures leave degraded summaries."""
        batches = chunked(summaries, self.batch_size)
        for i, batch in enumerate(batches, start=1):
            logger.info("Processing batch %d of %d", i, len(batches))
            await asyncio.gather(*(self._load_content(s) for s in batch))
        return summaries

    async def refresh(self) -> CacheSnapshot:
        """Explore upstream and replace the cache with the result."""
        logger.info("Fetching fresh data from %s (%s)", self.repository, self.explorer.strategy)
        exploration = await self.explorer.explore()
        summaries = self._normalize_all(exploration)
        if self.fetch_full_content:
            await self.enrich(summaries)
        summaries = self._dedupe(summaries)
        categories = dict(Counter(s.category for s in summaries))
        snapshot = self.cache.replace(summaries, exploration.structure, categories)
        logger.info("Cached %d workflows", len(summaries))
        return snapshot

    async def _ensure_fresh(self) -> tuple[Optional[CacheSnapshot], bool, Optional[str]]:
        """Return (snapshot, served_from_fresh_cache, warning)."""
        if self.cache.is_fresh():
            logger.debug("Returning cached data")
            return self.cache.get(), True, None

        seen = self.cache.attempts
        async with self.cache.refresh_lock:
            # Another caller may have refreshed while we waited
            if self.cache.is_fresh():
                return self.cache.get(), True, None
            if self.cache.attempts != seen and self.cache.last_error is not None:
                return self._degraded(self.cache.last_error)
            try:
                return await self.refresh(), False, None
            except GalleryError as e:
                if recovery_for(FailureSite.REFRESH) is Recovery.PROPAGATE:
                    raise
                logger.error("Error fetching workflows from %s: %s", self.repository, e)
                self.cache.record_failure(str(e))
                return self._degraded(str(e))

    def _degraded(self, reason: str) -> tuple[Optional[CacheSnapshot], bool, str]:
        """Recovery.STALE_OR_EMPTY: the previous snapshot if any, else nothing."""
        stale = self.cache.get()
        if stale is not None:
            return stale, False, f"Serving stale data; upstream error: {reason}"
        return None, False, f"Upstream unavailable: {reason}"

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def list_workflows(self, query: Optional[str] = None) -> WorkflowListing:
        snapshot, cached, warning = await self._ensure_fresh()
        workflows = snapshot.workflows if snapshot is not None else []
        total = len(workflows)
        if query and query.strip():
            workflows = [w for w in workflows if w.matches(query.strip())]
        return WorkflowListing(
            workflows=workflows,
            total=total,
            cached=cached,
            cache_age=self.cache.age_ms(),
            structure=snapshot.structure if snapshot is not None else {},
            categories=snapshot.categories if snapshot is not None else {},
            warning=warning,
        )

    async def get_workflow(self, filename: str) -> WorkflowSummary:
        """Look up one workflow, downloading its document on first access."""
        snapshot, _, _ = await self._ensure_fresh()
        summary = snapshot.find(filename) if snapshot is not None else None
        if summary is None:
            raise NotFound(filename)

        if summary.workflow is None and summary.download_url:
            try:
                document = await self.client.fetch_document(summary.download_url)
            except GalleryError as e:
                # Recovery.KEEP_SUMMARY
                logger.warning("Error fetching workflow content for %s: %s", filename, e)
            else:
                apply_workflow_document(summary, document, self.vocabulary)
        return summary

    async def get_repository_info(self) -> dict[str, Any]:
        data = await self.client.fetch_repository()
        return {
            "name": data.get("name"),
            "full_name": data.get("full_name"),
            "description": data.get("description"),
            "stars": data.get("stargazers_count") or 0,
            "forks": data.get("forks_count") or 0,
            "updated_at": data.get("updated_at"),
            "html_url": data.get("html_url"),
            "private": data.get("private"),
        }

    async def get_structure_report(self) -> dict[str, Any]:
        """Explore upstream now, bypassing the cache."""
        exploration = await self.explorer.explore()
        sample = []
        for entry in exploration.entries[:SAMPLE_SIZE]:
            raw = entry.raw if isinstance(entry.raw, dict) else {}
            sample.append({
                "name": raw.get("name") or raw.get("title") or raw.get("filename"),
                "folder": entry.folder,
                "path": raw.get("path"),
                "size": raw.get("size"),
            })
        return {
            "repository": self.repository,
            "strategy": exploration.strategy,
            "structure": exploration.structure,
            "total_files": len(exploration.entries),
            "sample_files": sample,
            "failures": exploration.failures,
        }

    async def get_categories(self) -> dict[str, Any]:
        snapshot, _, _ = await self._ensure_fresh()
        return {
            "categories": snapshot.categories if snapshot is not None else {},
            "available": list(CATEGORIES),
        }

    def clear_cache(self) -> None:
        self.cache.clear()
        logger.info("Cache cleared")

    def health(self) -> dict[str, Any]:
        snapshot = self.cache.get()
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "cache_status": "populated" if snapshot is not None else "empty",
            "cache_age": self.cache.age_ms(),
            "cached_workflows": len(snapshot.workflows) if snapshot is not None else 0,
            "repository": self.repository,
            "workflows_folder": self.explorer.describe().get("workflows_folder"),
            "github_token": "configured" if self.client.has_token else "not configured",
        }

    def debug(self) -> dict[str, Any]:
        snapshot = self.cache.get()
        return {
            "repository": self.repository,
            "explorer": self.explorer.describe(),
            "github_token_configured": self.client.has_token,
            "cache_duration_minutes": self.cache.ttl_seconds / 60,
            "cache": {
                "populated": snapshot is not None,
                "fresh": self.cache.is_fresh(),
                "age": self.cache.age_ms(),
                "workflows": len(snapshot.workflows) if snapshot is not None else 0,
                "structure": snapshot.structure if snapshot is not None else {},
                "sample": [w.filename for w in snapshot.workflows[:SAMPLE_SIZE]] if snapshot else [],
            },
            "fetch_full_content": self.fetch_full_content,
            "app_env": self.app_env,
        }
