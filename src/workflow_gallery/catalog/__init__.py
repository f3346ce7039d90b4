"""Fetch, normalize and cache the upstream workflow listing."""

from .cache import CacheSnapshot, ContentCache
from .explorer import AggregateDocumentExplorer, DirectoryWalkExplorer, RepositoryExplorer, create_explorer
from .normalizer import derive_name, infer_complexity, normalize
from .schema import WorkflowSummary
from .service import WorkflowCatalog, WorkflowListing

__all__ = [
    "AggregateDocumentExplorer",
    "CacheSnapshot",
    "ContentCache",
    "DirectoryWalkExplorer",
    "RepositoryExplorer",
    "WorkflowCatalog",
    "WorkflowListing",
    "WorkflowSummary",
    "create_explorer",
    "derive_name",
    "infer_complexity",
    "normalize",
]
