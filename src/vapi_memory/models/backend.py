"""Memory backend response models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class BackendModel(BaseModel):
    """Base for backend payloads: camelCase aliases, unknown fields ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ProfileFacts(BackendModel):
    """Long-term and recently updated facts the backend keeps per user."""

    static: list[str] = Field(default_factory=list)
    dynamic: list[str] = Field(default_factory=list)


class SearchResultItem(BackendModel):
    """Single memory search hit."""

    memory: str | None = None
    score: float = 0.0
    metadata: dict[str, Any] | None = None


class SearchResults(BackendModel):
    """Memory search response."""

    results: list[SearchResultItem] = Field(default_factory=list)
    total: int | None = None
    timing: float | None = None

    def memories(self) -> list[str]:
        """Return the memory text of every hit that carries one, in order."""
        return [item.memory for item in self.results if item.memory is not None]


class ProfileResponse(BackendModel):
    """Profile response, optionally carrying query-scoped search results."""

    profile: ProfileFacts = Field(default_factory=ProfileFacts)
    search_results: SearchResults | None = Field(default=None, alias="searchResults")


class AddMemoryResponse(BackendModel):
    """Acknowledgement returned when content is added."""

    id: str | None = None
    status: str | None = None


class DocumentResult(BackendModel):
    """Document search hit."""

    document_id: str | None = Field(default=None, alias="documentId")
    title: str | None = None
    score: float = 0.0
    chunks: list[dict[str, Any]] = Field(default_factory=list)
    metadata: dict[str, Any] | None = None


class DocumentSearchResponse(BackendModel):
    """Document search response."""

    results: list[DocumentResult] = Field(default_factory=list)
    total: int | None = None
    timing: float | None = None
