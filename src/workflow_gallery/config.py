from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ------------------------------------------------------------------
    # Upstream repository
    # ------------------------------------------------------------------
    github_owner: str = "Zie619"
    github_repo: str = "n8n-workflows"
    github_branch: str = "main"
    github_token: Optional[str] = None      # ghp_... raises the API rate limit
    github_api_base: str = "https://api.github.com"
    github_raw_base: str = "https://raw.githubusercontent.com"
    user_agent: str = "n8n-workflow-gallery"

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------
    # "directory": list the workflows folder and its subfolders
    # "aggregate": fetch one JSON document holding every record inline
    discovery_strategy: Literal["directory", "aggregate"] = "directory"
    workflows_folder: Optional[str] = "workflows"
    aggregate_path: str = "workflows.json"
    workflow_suffix: str = ".json"

    # ------------------------------------------------------------------
    # Cache and upstream timeouts (seconds)
    # ------------------------------------------------------------------
    cache_ttl_seconds: float = 300.0
    content_timeout: float = 5.0
    listing_timeout: float = 10.0
    aggregate_timeout: float = 30.0

    # Download every workflow document during refresh instead of lazily
    fetch_full_content: bool = False
    enrichment_batch_size: int = 20

    # ------------------------------------------------------------------
    # Process
    # ------------------------------------------------------------------
    port: int = 3000
    app_env: str = "development"
    cors_origins: list[str] = ["*"]

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def repository(self) -> str:
        return f"{self.github_owner}/{self.github_repo}"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
