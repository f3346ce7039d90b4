"""Pydantic models for normalized workflow listings."""

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from .vocabulary import DEFAULT_CATEGORY, DEFAULT_TRIGGER, ROOT_FOLDER

Complexity = Literal["Low", "Medium", "High"]


class WorkflowSummary(BaseModel):
    """Display-ready record for one workflow file."""

    name: str
    filename: str
    folder: str = ROOT_FOLDER
    path: str = ""
    size: int = Field(0, ge=0)
    url: Optional[str] = None
    download_url: Optional[str] = None
    workflow: Optional[dict[str, Any]] = None
    nodes_count: int = Field(0, ge=0)
    connections_count: int = Field(0, ge=0)
    description: str = ""
    tags: list[str] = []
    category: str = DEFAULT_CATEGORY
    trigger_type: str = DEFAULT_TRIGGER
    complexity: Complexity = "Low"
    complexity_supplied: bool = Field(False, exclude=True)
    integrations: list[str] = []
    active: bool = True
    source: Literal["directory", "aggregate"] = "directory"
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match over name, description and category."""
        needle = query.lower()
        return any(
            needle in field.lower()
            for field in (self.name, self.description, self.category)
        )


class DiscoveredEntry(BaseModel):
    """One candidate item found during exploration, with its provenance."""

    raw: Any
    folder: str = ROOT_FOLDER


class Exploration(BaseModel):
    """Result of one repository exploration."""

    entries: list[DiscoveredEntry] = []
    structure: dict[str, int] = {}
    failures: dict[str, str] = {}
    strategy: str = "directory"
