"""Application settings management using Pydantic Settings."""

from typing import Self

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://api.supermemory.ai"


class Settings(BaseSettings):
    """Application configuration settings.

    All settings can be configured via environment variables with the
    prefix `VAPI_MEMORY_`. For example, `VAPI_MEMORY_API_KEY`.
    """

    # Backend
    api_key: str | None = Field(default=None, description="Supermemory API key")
    base_url: str = Field(
        default=DEFAULT_BASE_URL, description="Supermemory API base URL"
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for a single backend request in seconds",
    )

    # Context
    max_tokens: int = Field(
        default=2000,
        ge=1,
        description="Default token budget for assembled context",
    )
    search_threshold: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Minimum relevance score for memory search results",
    )
    search_limit: int = Field(
        default=5,
        ge=1,
        description="Default number of results requested from backend search",
    )
    recent_memories_query: str = Field(
        default="recent conversation",
        min_length=1,
        description="Query used to recall recent interaction history",
    )
    recent_memories_limit: int = Field(
        default=3,
        ge=1,
        description="Number of recent memories recalled per call",
    )
    dedup_similarity_threshold: float = Field(
        default=0.85,
        ge=0.0,
        le=1.0,
        description="Word-overlap similarity above which sections are near-duplicates",
    )

    # Profile cache
    cache_enabled: bool = Field(
        default=True,
        description="Enable the in-process profile cache",
    )
    cache_ttl_ms: int = Field(
        default=60000,
        ge=1,
        description="Age in milliseconds after which cached profiles are swept",
    )
    cache_max_size: int = Field(
        default=100,
        ge=1,
        description="Maximum number of cached profiles",
    )
    cache_cleanup_interval_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Interval of the background cache sweep in seconds",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    model_config = SettingsConfigDict(
        env_prefix="VAPI_MEMORY_", env_file=".env", env_file_encoding="utf-8"
    )

    @model_validator(mode="after")
    def validate_base_url(self) -> Self:
        """Validate the backend URL scheme."""
        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError(
                f"base_url must start with http:// or https:// (got {self.base_url!r})"
            )
        return self
