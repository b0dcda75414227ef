"""Context assembly service for conversational AI turns."""

import asyncio
import contextlib
import logging
import time
from datetime import datetime, timezone

from vapi_memory.config import get_settings
from vapi_memory.config.settings import Settings
from vapi_memory.exceptions import ContextRetrievalError, MemoryStoreError
from vapi_memory.models.backend import ProfileResponse
from vapi_memory.models.context import (
    CacheStats,
    ContentSection,
    ContextMetadata,
    ContextProfile,
    ContextRecord,
    FormatOptions,
    FormattedOutput,
    GetContextRequest,
    MemoryInput,
    StoreConversationRequest,
    UserProfile,
)
from vapi_memory.services.context_formatter import ContextFormatter, create_sections
from vapi_memory.services.profile_cache import RecencyCache
from vapi_memory.services.supermemory_client import SupermemoryClient
from vapi_memory.utils.token_counter import estimate_multiple
from vapi_memory.utils.validators import validate_token_budget, validate_user_id

PROFILE_CACHE_PREFIX = "profile:"

# Provenance tags recorded in ContextMetadata.sources
SOURCE_CACHE = "cache"
SOURCE_PROFILE = "profile"
SOURCE_SEARCH = "search"
SOURCE_RECENT = "recent-memories"

# Section sources and priorities used by build_sections
SECTION_PRIORITIES = {
    "profile-static": 4,
    "profile-dynamic": 3,
    SOURCE_RECENT: 2,
    SOURCE_SEARCH: 1,
}


class VapiMemory:
    """Assemble user context from a profile cache and the memory backend.

    Profile and recent-memory fetches are best-effort: their failures are
    logged and the context is returned with whatever was retrieved. The
    ``sources`` list of the returned metadata tells full and degraded
    results apart.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: SupermemoryClient | None = None,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> None:
        """Initialize context service.

        Args:
            settings: Configuration (defaults to the global settings)
            client: Backend client (built from settings when omitted)
            logger: Optional logger replacing the module logger
        """
        self.settings = settings or get_settings()
        self.logger = logger or logging.getLogger(__name__)

        self._owns_client = client is None
        if client is None:
            client = SupermemoryClient(
                api_key=self.settings.api_key or "",
                base_url=self.settings.base_url,
                timeout=self.settings.request_timeout_seconds,
                search_limit=self.settings.search_limit,
                logger=self.logger,
            )
        self.client = client

        self.profile_cache: RecencyCache[str, ProfileResponse] = RecencyCache(
            max_size=self.settings.cache_max_size
        )
        self.formatter = ContextFormatter(
            similarity_threshold=self.settings.dedup_similarity_threshold
        )

        self._cleanup_task: asyncio.Task[None] | None = None
        self._closed = False
        if self.settings.cache_enabled:
            self._start_cleanup_task()

        self.logger.info(
            "VapiMemory initialized with caching: %s", self.settings.cache_enabled
        )

    async def __aenter__(self) -> "VapiMemory":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _start_cleanup_task(self) -> None:
        """Start background task for profile cache cleanup."""
        try:
            loop = asyncio.get_running_loop()
            self._cleanup_task = loop.create_task(self._cleanup_expired())
        except RuntimeError:
            # No event loop running yet, started on first get_context
            pass

    def _ensure_cleanup_task(self) -> None:
        if not self.settings.cache_enabled or self._closed:
            return
        if self._cleanup_task is None or self._cleanup_task.done():
            self._start_cleanup_task()

    async def _cleanup_expired(self) -> None:
        """Background task sweeping profiles older than the cache TTL."""
        while True:
            await asyncio.sleep(self.settings.cache_cleanup_interval_seconds)
            try:
                removed = self.profile_cache.cleanup(self.settings.cache_ttl_ms)
            except Exception:
                self.logger.exception("Profile cache cleanup failed")
                continue
            if removed > 0:
                self.logger.debug("Cleaned up %d expired cache entries", removed)

    async def get_context(self, request: GetContextRequest) -> ContextRecord:
        """Assemble context for one user turn.

        The returned record is read-only for callers. Its lists are copies,
        so the cached profile is unaffected if a caller mutates them anyway.

        Args:
            request: User, optional query and call id, section toggles and
                optional token budget override

        Returns:
            Context with profile, recent memories, search results, token
            estimate and provenance metadata

        Raises:
            ValidationError: If the user id or token budget is invalid
            ContextRetrievalError: If assembly fails outside the
                best-effort backend fetches
        """
        validate_user_id(request.user_id)
        token_budget = validate_token_budget(request.max_tokens) or self.settings.max_tokens
        self._ensure_cleanup_task()

        started = time.perf_counter()
        sources: list[str] = []

        try:
            context = ContextRecord(
                metadata=ContextMetadata(user_id=request.user_id, token_budget=token_budget)
            )

            # Check cache first
            cache_key = f"{PROFILE_CACHE_PREFIX}{request.user_id}"
            if self.settings.cache_enabled:
                cached = self.profile_cache.get(cache_key)
                if cached is not None:
                    self.logger.debug("Cache hit for %s", request.user_id)
                    self._apply_profile(context, cached, request, sources, SOURCE_CACHE)

            # Fetch from backend if not cached
            if context.profile is None and request.include_profile:
                try:
                    profile = await self.client.get_profile(request.user_id, request.query)
                except Exception as e:
                    self.logger.warning("Failed to fetch profile: %s", e)
                else:
                    if self.settings.cache_enabled:
                        self.profile_cache.set(cache_key, profile)
                    self._apply_profile(context, profile, request, sources, SOURCE_PROFILE)

            # Recent interaction history, only within a call
            if request.include_recent and request.call_id:
                try:
                    memories = await self.client.search_memories(
                        self.settings.recent_memories_query,
                        request.user_id,
                        threshold=self.settings.search_threshold,
                        limit=self.settings.recent_memories_limit,
                    )
                except Exception as e:
                    self.logger.warning("Failed to fetch recent memories: %s", e)
                else:
                    context.recent_memories = memories.memories()
                    context.total_tokens += estimate_multiple(context.recent_memories)
                    sources.append(SOURCE_RECENT)

            context.metadata.retrieval_time_ms = int((time.perf_counter() - started) * 1000)
            context.metadata.sources = sources

            self.logger.info(
                "Context retrieved for %s in %dms (%s)",
                request.user_id,
                context.metadata.retrieval_time_ms,
                ", ".join(sources),
            )
            return context

        except Exception as e:
            self.logger.error("Error getting context: %s", e, exc_info=True)
            raise ContextRetrievalError(str(e)) from e

    def _apply_profile(
        self,
        context: ContextRecord,
        response: ProfileResponse,
        request: GetContextRequest,
        sources: list[str],
        source: str,
    ) -> None:
        """Copy profile facts and profile-scoped search results into the context."""
        context.profile = ContextProfile(
            static=list(response.profile.static),
            dynamic=list(response.profile.dynamic),
        )
        sources.append(source)
        context.total_tokens += estimate_multiple(context.profile.static)
        context.total_tokens += estimate_multiple(context.profile.dynamic)

        if response.search_results is not None and request.include_search:
            context.search_results = response.search_results.memories()
            context.total_tokens += estimate_multiple(context.search_results)
            sources.append(SOURCE_SEARCH)

    async def store_conversation(self, request: StoreConversationRequest) -> None:
        """Store a finished call transcript as a memory.

        Args:
            request: Call id, user id, transcript turns and extra metadata

        Raises:
            MemoryStoreError: If the backend rejects the transcript
        """
        validate_user_id(request.user_id)

        transcript_text = "\n".join(
            f"{turn.role}: {turn.content}" for turn in request.transcript
        )
        metadata = {
            "callId": request.call_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **request.metadata,
        }

        try:
            await self.client.add_memory(transcript_text, request.user_id, metadata)
        except Exception as e:
            self.logger.error("Error storing conversation: %s", e, exc_info=True)
            raise MemoryStoreError("store conversation", str(e)) from e

        self.logger.info(
            "Stored conversation %s for user %s", request.call_id, request.user_id
        )

    async def get_user_profile(self, user_id: str) -> UserProfile:
        """Fetch a user's profile directly from the backend, bypassing the cache.

        Raises:
            MemoryStoreError: If the backend call fails
        """
        validate_user_id(user_id)
        try:
            response = await self.client.get_profile(user_id)
        except Exception as e:
            self.logger.error("Error getting user profile: %s", e, exc_info=True)
            raise MemoryStoreError("get user profile", str(e)) from e

        return UserProfile(
            user_id=user_id,
            static=list(response.profile.static),
            dynamic=list(response.profile.dynamic),
        )

    async def add_memory(self, memory: MemoryInput) -> None:
        """Store a single fact for a user.

        Raises:
            MemoryStoreError: If the backend call fails
        """
        validate_user_id(memory.user_id)
        try:
            await self.client.add_memory(memory.content, memory.user_id, memory.metadata)
        except Exception as e:
            self.logger.error("Error adding memory: %s", e, exc_info=True)
            raise MemoryStoreError("add memory", str(e)) from e

        self.logger.info("Added memory for user %s", memory.user_id)

    async def search_memories(
        self,
        query: str,
        user_id: str,
        limit: int | None = None,
    ) -> list[str]:
        """Search a user's memories with the configured relevance threshold.

        Returns:
            Memory texts in backend order

        Raises:
            BackendError: If the backend call fails
        """
        validate_user_id(user_id)
        results = await self.client.search_memories(
            query, user_id, threshold=self.settings.search_threshold, limit=limit
        )
        return results.memories()

    def clear_cache(self) -> None:
        """Drop every cached profile."""
        self.profile_cache.clear()
        self.logger.info("Cache cleared")

    def get_cache_stats(self) -> CacheStats:
        """Get profile cache statistics."""
        return self.profile_cache.get_stats()

    @staticmethod
    def build_sections(context: ContextRecord) -> list[ContentSection]:
        """Turn a context into prioritized sections for budgeted formatting.

        Static profile facts rank highest, then dynamic facts, recent
        memories and search results.
        """
        groups: list[tuple[str, list[str]]] = []
        if context.profile is not None:
            groups.append(("profile-static", context.profile.static))
            groups.append(("profile-dynamic", context.profile.dynamic))
        groups.append((SOURCE_RECENT, context.recent_memories))
        groups.append((SOURCE_SEARCH, context.search_results))

        sections: list[ContentSection] = []
        for source, texts in groups:
            sections.extend(
                create_sections(
                    ((f"{source}-{index:03d}", text) for index, text in enumerate(texts)),
                    source=source,
                    priority=SECTION_PRIORITIES[source],
                )
            )
        return sections

    def format_context(
        self,
        context: ContextRecord,
        max_tokens: int | None = None,
        include_tokens: bool = False,
        include_metadata: bool = False,
    ) -> FormattedOutput:
        """Fit a context into a token budget as deduplicated, ranked text.

        Args:
            context: Context returned by get_context
            max_tokens: Budget override (defaults to the budget recorded at
                retrieval, then the configured default)
            include_tokens: Append per-item token counts and a total line
            include_metadata: Append source labels and return statistics

        Returns:
            Formatted output with the included sections

        Raises:
            ValidationError: If max_tokens is given and not a positive integer
        """
        budget = (
            validate_token_budget(max_tokens)
            or context.metadata.token_budget
            or self.settings.max_tokens
        )
        options = FormatOptions(
            max_tokens=budget,
            include_tokens=include_tokens,
            include_metadata=include_metadata,
        )
        return self.formatter.format(self.build_sections(context), options)

    @staticmethod
    def render_context(context: ContextRecord) -> str:
        """Render a context as a plain-text block for a system message."""
        blocks = ["User context:"]

        if context.profile is not None and context.profile.static:
            blocks.append("Static Profile:\n" + "\n".join(context.profile.static))
        if context.profile is not None and context.profile.dynamic:
            blocks.append("Dynamic Profile:\n" + "\n".join(context.profile.dynamic))
        if context.recent_memories:
            blocks.append("Recent Memories:\n" + "\n".join(context.recent_memories))
        if context.search_results:
            blocks.append("Relevant Memories:\n" + "\n".join(context.search_results))

        blocks.append(
            f"Context includes {context.total_tokens} estimated tokens.\n"
            f"Retrieved in {context.metadata.retrieval_time_ms}ms from sources: "
            f"{', '.join(context.metadata.sources)}."
        )
        return "\n\n".join(blocks)

    async def close(self) -> None:
        """Cancel the cleanup task, clear the cache and close an owned client."""
        self._closed = True
        if self._cleanup_task is not None:
            self._cleanup_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._cleanup_task
            self._cleanup_task = None

        self.profile_cache.clear()
        if self._owns_client:
            await self.client.close()

        self.logger.info("VapiMemory closed")
