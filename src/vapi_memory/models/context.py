"""Context assembly and formatting models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Generic, Literal, TypeVar

from vapi_memory.exceptions import ValidationError
from vapi_memory.utils.validators import validate_token_budget

V = TypeVar("V")


@dataclass
class ContextProfile:
    """Profile facts included in a context."""

    static: list[str] = field(default_factory=list)
    dynamic: list[str] = field(default_factory=list)


@dataclass
class ContextMetadata:
    """Provenance and timing of a context retrieval."""

    user_id: str
    retrieval_time_ms: int = 0
    sources: list[str] = field(default_factory=list)
    token_budget: int | None = None


@dataclass
class ContextRecord:
    """Context assembled for one user turn.

    Populated step by step during retrieval; callers must treat a returned
    record as read-only.
    """

    metadata: ContextMetadata
    profile: ContextProfile | None = None
    recent_memories: list[str] = field(default_factory=list)
    search_results: list[str] = field(default_factory=list)
    total_tokens: int = 0


@dataclass
class GetContextRequest:
    """Parameters of a context retrieval."""

    user_id: str
    query: str | None = None
    call_id: str | None = None
    include_profile: bool = True
    include_recent: bool = True
    include_search: bool = True
    max_tokens: int | None = None


@dataclass
class ContentSection:
    """Labeled, prioritized, token-costed piece of content."""

    id: str
    content: str
    priority: int
    tokens: int
    source: str


@dataclass
class FormatOptions:
    """Options for budgeted section formatting."""

    max_tokens: int
    include_tokens: bool = False
    include_metadata: bool = False
    separator: str = "\n\n"

    def __post_init__(self) -> None:
        if self.max_tokens is None:
            raise ValidationError("max_tokens is required")
        validate_token_budget(self.max_tokens)


@dataclass
class FormattedMetadata:
    """Selection statistics of a formatting call."""

    total_items: int
    included_items: int
    excluded_items: int
    sources: list[str]


@dataclass
class FormattedOutput:
    """Result of budgeted section formatting."""

    formatted: str
    used_tokens: int
    sections: list[ContentSection]
    metadata: FormattedMetadata | None = None


@dataclass
class BudgetedText:
    """Texts joined in order until the budget is reached."""

    formatted: str
    used_tokens: int
    included_count: int


@dataclass
class CacheEntry(Generic[V]):
    """Cache entry with access metadata."""

    value: V
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    hits: int = 0


@dataclass
class CacheEntryStats:
    """Per-entry cache statistics."""

    key: Any
    hits: int
    age_ms: int


@dataclass
class CacheStats:
    """Cache statistics.

    ``hit_rate`` counts empty capacity slots as misses, so it is an
    approximation rather than a per-request hit ratio.
    """

    size: int
    max_size: int
    hit_rate: float
    entries: list[CacheEntryStats] = field(default_factory=list)


@dataclass
class TranscriptTurn:
    """Single turn of a call transcript."""

    role: Literal["user", "assistant", "system"]
    content: str
    timestamp: str | None = None


@dataclass
class StoreConversationRequest:
    """Finished call to persist as a memory."""

    call_id: str
    user_id: str
    transcript: list[TranscriptTurn]
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class UserProfile:
    """User profile as stored by the backend."""

    user_id: str
    static: list[str]
    dynamic: list[str]


@dataclass
class MemoryInput:
    """Single fact to store for a user."""

    user_id: str
    content: str
    metadata: dict[str, Any] | None = None
