"""Where upstream failures are absorbed, and how."""

from __future__ import annotations

from enum import Enum


class FailureSite(str, Enum):
    SUBDIRECTORY_LISTING = "subdirectory_listing"
    TARGET_FOLDER_MISSING = "target_folder_missing"
    ROOT_FALLBACK = "root_fallback"
    AGGREGATE_SHAPE = "aggregate_shape"
    CONTENT_ENRICHMENT = "content_enrichment"
    LAZY_CONTENT_FETCH = "lazy_content_fetch"
    REFRESH = "refresh"
    REPOSITORY_INFO = "repository_info"
    STRUCTURE_REPORT = "structure_report"


class Recovery(str, Enum):
    SKIP = "skip"                      # drop the failing unit, keep the rest
    FALLBACK = "fallback"              # try the next discovery path
    EMPTY_LIST = "empty_list"          # contribute no entries
    PLACEHOLDER = "placeholder"        # keep the item with an explanatory description
    KEEP_SUMMARY = "keep_summary"      # return the summary without content
    STALE_OR_EMPTY = "stale_or_empty"  # previous snapshot if any, else nothing; never cached
    PROPAGATE = "propagate"            # surface to the caller (HTTP 500)


FAILURE_POLICY: dict[FailureSite, Recovery] = {
    FailureSite.SUBDIRECTORY_LISTING: Recovery.SKIP,
    FailureSite.TARGET_FOLDER_MISSING: Recovery.FALLBACK,
    FailureSite.ROOT_FALLBACK: Recovery.PROPAGATE,
    FailureSite.AGGREGATE_SHAPE: Recovery.EMPTY_LIST,
    FailureSite.CONTENT_ENRICHMENT: Recovery.PLACEHOLDER,
    FailureSite.LAZY_CONTENT_FETCH: Recovery.KEEP_SUMMARY,
    FailureSite.REFRESH: Recovery.STALE_OR_EMPTY,
    FailureSite.REPOSITORY_INFO: Recovery.PROPAGATE,
    FailureSite.STRUCTURE_REPORT: Recovery.PROPAGATE,
}


def recovery_for(site: FailureSite) -> Recovery:
    return FAILURE_POLICY[site]
