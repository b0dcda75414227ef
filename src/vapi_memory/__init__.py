"""vapi-memory: token-bounded user context for conversational AI turns.

Assembles profile facts, recent interaction history and relevant memories
from a Supermemory backend behind an in-process profile cache, and fits
arbitrary fact collections into a token budget with deduplication and
priority ranking.
"""

import logging

from vapi_memory.config import Settings, get_settings
from vapi_memory.exceptions import (
    BackendError,
    ContextRetrievalError,
    MemoryStoreError,
    ValidationError,
    VapiMemoryError,
)
from vapi_memory.models.context import (
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
from vapi_memory.services.context_formatter import (
    ContextFormatter,
    create_section,
    create_sections,
    format_sections,
)
from vapi_memory.services.context_service import VapiMemory
from vapi_memory.services.profile_cache import RecencyCache
from vapi_memory.services.supermemory_client import SupermemoryClient
from vapi_memory.utils.similarity import calculate_similarity
from vapi_memory.utils.token_counter import (
    estimate_multiple,
    estimate_tokens,
    format_within_budget,
)

__version__ = "0.1.0"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for applications that do not do it themselves.

    Args:
        level: Logging level name (defaults to ``Settings.log_level``)
    """
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


__all__ = [
    "BackendError",
    "CacheStats",
    "ContentSection",
    "ContextFormatter",
    "ContextMetadata",
    "ContextProfile",
    "ContextRecord",
    "ContextRetrievalError",
    "FormatOptions",
    "FormattedMetadata",
    "FormattedOutput",
    "GetContextRequest",
    "MemoryInput",
    "MemoryStoreError",
    "RecencyCache",
    "Settings",
    "StoreConversationRequest",
    "SupermemoryClient",
    "TranscriptTurn",
    "UserProfile",
    "ValidationError",
    "VapiMemory",
    "VapiMemoryError",
    "__version__",
    "calculate_similarity",
    "configure_logging",
    "create_section",
    "create_sections",
    "estimate_multiple",
    "estimate_tokens",
    "format_sections",
    "format_within_budget",
]
