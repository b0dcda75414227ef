"""Data models for vapi-memory."""

from vapi_memory.models.backend import (
    AddMemoryResponse,
    DocumentResult,
    DocumentSearchResponse,
    ProfileFacts,
    ProfileResponse,
    SearchResultItem,
    SearchResults,
)
from vapi_memory.models.context import (
    BudgetedText,
    CacheEntry,
    CacheEntryStats,
    CacheStats,
    ContentSection,
    ContextMetadata,
    ContextProfile,
    ContextRecord,
    FormatOptions,
    FormattedMetadata,
    FormattedOutput,
    GetContextRequest,
    MemoryInput,
    StoreConversationRequest,
    TranscriptTurn,
    UserProfile,
)

__all__ = [
    "AddMemoryResponse",
    "BudgetedText",
    "CacheEntry",
    "CacheEntryStats",
    "CacheStats",
    "ContentSection",
    "ContextMetadata",
    "ContextProfile",
    "ContextRecord",
    "DocumentResult",
    "DocumentSearchResponse",
    "FormatOptions",
    "FormattedMetadata",
    "FormattedOutput",
    "GetContextRequest",
    "MemoryInput",
    "ProfileFacts",
    "ProfileResponse",
    "SearchResultItem",
    "SearchResults",
    "StoreConversationRequest",
    "TranscriptTurn",
    "UserProfile",
]
