"""HTTP client for the Supermemory backend."""

import logging
from typing import Any, TypeVar

import httpx
from pydantic import ValidationError as PydanticValidationError

from vapi_memory.config.settings import DEFAULT_BASE_URL
from vapi_memory.exceptions import BackendError, ValidationError
from vapi_memory.models.backend import (
    AddMemoryResponse,
    BackendModel,
    DocumentSearchResponse,
    ProfileResponse,
    SearchResults,
)
from vapi_memory.utils.validators import sanitize_container_tag

ResponseT = TypeVar("ResponseT", bound=BackendModel)

# Supermemory REST endpoints, see DESIGN.md for their provenance
PROFILE_PATH = "/v4/profile"
ADD_DOCUMENT_PATH = "/v3/documents"
SEARCH_MEMORIES_PATH = "/v4/search"
SEARCH_DOCUMENTS_PATH = "/v3/search"


class SupermemoryClient:
    """Async client for profile, add and search calls.

    Every container tag is sanitized before it is sent. Failures of any
    kind surface as ``BackendError``.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        search_limit: int = 5,
        http_client: httpx.AsyncClient | None = None,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> None:
        """Initialize Supermemory client.

        Args:
            api_key: Supermemory API key
            base_url: API base URL
            timeout: Request timeout in seconds
            search_limit: Default result limit for searches
            http_client: Optional pre-configured client (not closed by us)
            logger: Optional logger replacing the module logger

        Raises:
            ValidationError: If the API key is missing
        """
        if not api_key:
            raise ValidationError("api_key is required to call the memory backend")

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.search_limit = search_limit
        self.headers = {"Authorization": f"Bearer {api_key}"}
        self.logger = logger or logging.getLogger(__name__)
        self._http_client = http_client
        self._owns_client = http_client is None

        self.logger.info("Supermemory client initialized for %s", self.base_url)

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._http_client

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client and self._http_client and not self._http_client.is_closed:
            await self._http_client.aclose()

    async def __aenter__(self) -> "SupermemoryClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def get_profile(
        self,
        container_tag: str,
        query: str | None = None,
    ) -> ProfileResponse:
        """Fetch the profile of a container, optionally with query results.

        Args:
            container_tag: User or session identifier
            query: Optional query for profile-scoped search results

        Returns:
            Profile facts and optional search results
        """
        tag = sanitize_container_tag(container_tag)
        self.logger.debug("Fetching profile for %s", tag)
        payload = {"containerTag": tag, "q": query}
        return await self._request(
            "fetch profile", PROFILE_PATH, payload, ProfileResponse
        )

    async def add_memory(
        self,
        content: str,
        container_tag: str,
        metadata: dict[str, Any] | None = None,
    ) -> AddMemoryResponse:
        """Add content to a container.

        Args:
            content: Text to store
            container_tag: User or session identifier
            metadata: Optional metadata stored with the content

        Returns:
            Backend acknowledgement
        """
        tag = sanitize_container_tag(container_tag)
        self.logger.debug("Adding memory for %s", tag)
        payload = {"content": content, "containerTag": tag, "metadata": metadata}
        return await self._request(
            "add memory", ADD_DOCUMENT_PATH, payload, AddMemoryResponse
        )

    async def search_memories(
        self,
        query: str,
        container_tag: str,
        threshold: float | None = None,
        limit: int | None = None,
    ) -> SearchResults:
        """Search memories of a container.

        Args:
            query: Search query
            container_tag: User or session identifier
            threshold: Minimum relevance score (0.0-1.0)
            limit: Maximum number of results

        Returns:
            Matching memories
        """
        tag = sanitize_container_tag(container_tag)
        self.logger.debug("Searching memories: %s in %s", query, tag)
        payload = {
            "q": query,
            "containerTag": tag,
            "threshold": threshold,
            "limit": limit or self.search_limit,
        }
        return await self._request(
            "search memories", SEARCH_MEMORIES_PATH, payload, SearchResults
        )

    async def search_documents(
        self,
        query: str,
        container_tags: list[str],
        limit: int | None = None,
    ) -> DocumentSearchResponse:
        """Search documents across containers.

        Args:
            query: Search query
            container_tags: Identifiers of the containers to search
            limit: Maximum number of results

        Returns:
            Matching documents
        """
        tags = [sanitize_container_tag(tag) for tag in container_tags]
        self.logger.debug("Searching documents: %s in %s", query, ", ".join(tags))
        payload = {
            "q": query,
            "containerTags": tags,
            "limit": limit or self.search_limit,
        }
        return await self._request(
            "search documents", SEARCH_DOCUMENTS_PATH, payload, DocumentSearchResponse
        )

    async def _request(
        self,
        operation: str,
        path: str,
        payload: dict[str, Any],
        response_model: type[ResponseT],
    ) -> ResponseT:
        """POST a JSON payload and validate the response.

        Args:
            operation: Operation name used in error messages
            path: API path below the base URL
            payload: Request body; None values are omitted
            response_model: Model the response body is validated into

        Returns:
            Validated response model

        Raises:
            BackendError: On transport errors, non-2xx status or bad payloads
        """
        body = {key: value for key, value in payload.items() if value is not None}

        try:
            response = await self._get_client().post(
                f"{self.base_url}{path}", json=body, headers=self.headers
            )
            response.raise_for_status()
            return response_model.model_validate(response.json())
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            self.logger.error("Error during %s: HTTP %s", operation, status)
            raise BackendError(
                operation, f"HTTP {status}: {e.response.text}", status_code=status
            ) from e
        except httpx.HTTPError as e:
            self.logger.error("Error during %s: %s", operation, e)
            raise BackendError(operation, str(e) or type(e).__name__) from e
        except (PydanticValidationError, ValueError) as e:
            self.logger.error("Invalid response during %s: %s", operation, e)
            raise BackendError(operation, f"invalid response: {e}") from e
