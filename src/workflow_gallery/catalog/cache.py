"""Single-slot, time-to-live cache for the normalized workflow listing."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from .schema import WorkflowSummary


@dataclass
class CacheSnapshot:
    """Everything one refresh produced. Replaced wholesale, never merged."""

    workflows: list[WorkflowSummary]
    timestamp: float
    structure: dict[str, int] = field(default_factory=dict)
    categories: dict[str, int] = field(default_factory=dict)

    def find(self, filename: str) -> Optional[WorkflowSummary]:
        for summary in self.workflows:
            if summary.filename == filename:
                return summary
        return None


class ContentCache:
    """Holds the most recent snapshot and the instant it was computed.

    ``refresh_lock`` is the single-flight barrier: callers that find the
    cache stale take the lock, re-check freshness, and only then refresh, so
    concurrent misses share one upstream exploration.

    ``attempts`` counts finished refreshes, successful or not. A caller that
    sees it change while waiting for the lock reuses that outcome
    (``last_error`` holds the failure) instead of refreshing again.
    """

    def __init__(self, ttl_seconds: float = 300.0, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._snapshot: Optional[CacheSnapshot] = None
        self.refresh_lock = asyncio.Lock()
        self.attempts = 0
        self.last_error: Optional[str] = None

    def get(self) -> Optional[CacheSnapshot]:
        """Return the current snapshot, or None if never populated (or cleared)."""
        return self._snapshot

    def is_fresh(self) -> bool:
        if self._snapshot is None:
            return False
        return self._clock() - self._snapshot.timestamp < self.ttl_seconds

    def age_ms(self) -> Optional[int]:
        if self._snapshot is None:
            return None
        return int((self._clock() - self._snapshot.timestamp) * 1000)

    def replace(
        self,
        workflows: list[WorkflowSummary],
        structure: dict[str, int] | None = None,
        categories: dict[str, int] | None = None,
    ) -> CacheSnapshot:
        snapshot = CacheSnapshot(
            workflows=list(workflows),
            timestamp=self._clock(),
            structure=dict(structure or {}),
            categories=dict(categories or {}),
        )
        self._snapshot = snapshot
        self.attempts += 1
        self.last_error = None
        return snapshot

    def record_failure(self, reason: str) -> None:
        """Note a failed refresh. The current snapshot, if any, is kept."""
        self.attempts += 1
        self.last_error = reason

    def clear(self) -> None:
        self._snapshot = None
