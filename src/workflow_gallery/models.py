"""API response models for the workflow gallery."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from .catalog.schema import WorkflowSummary


class WorkflowListResponse(BaseModel):
    """Listing returned by GET /api/workflows."""

    success: bool = True
    count: int
    total: int
    workflows: list[WorkflowSummary]
    cached: bool
    cache_age: Optional[int] = Field(None, description="Milliseconds since the cache was populated")
    repository: str
    folder: Optional[str] = None
    categories: dict[str, int] = {}
    structure: dict[str, int] = {}
    warning: Optional[str] = None


class WorkflowResponse(BaseModel):
    success: bool = True
    workflow: WorkflowSummary


class RepositoryInfo(BaseModel):
    name: Optional[str] = None
    full_name: Optional[str] = None
    description: Optional[str] = None
    stars: int = 0
    forks: int = 0
    updated_at: Optional[str] = None
    html_url: Optional[str] = None
    private: Optional[bool] = None


class RepositoryInfoResponse(BaseModel):
    success: bool = True
    repo: RepositoryInfo


class StructureResponse(BaseModel):
    success: bool = True
    repository: str
    strategy: str
    structure: dict[str, int]
    total_files: int
    sample_files: list[dict[str, Any]]
    failures: dict[str, str] = {}


class CategoriesResponse(BaseModel):
    success: bool = True
    categories: dict[str, int]
    available: list[str]


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    repository: Optional[str] = None
