"""Pytest configuration and fixtures for vapi-memory tests."""

from collections.abc import AsyncIterator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from vapi_memory.config.settings import Settings
from vapi_memory.models.backend import AddMemoryResponse, ProfileResponse, SearchResults
from vapi_memory.services.context_service import VapiMemory
from vapi_memory.services.supermemory_client import SupermemoryClient

PROFILE_PAYLOAD = {
    "profile": {
        "static": ["User is a premium customer", "User lives in Berlin"],
        "dynamic": ["User called about an invoice yesterday"],
    },
    "searchResults": {
        "results": [
            {"memory": "User prefers email contact", "score": 0.91},
            {"score": 0.4},
        ],
        "total": 2,
        "timing": 12,
    },
}

RECENT_PAYLOAD = {
    "results": [
        {"memory": "User asked about a refund", "score": 0.8},
        {"score": 0.7, "metadata": {"kind": "chunk"}},
    ],
}


@pytest.fixture
def test_settings() -> Settings:
    """Test configuration settings."""
    return Settings(
        api_key="test-key",
        base_url="https://api.test",
        max_tokens=2000,
        search_threshold=0.5,
        cache_enabled=True,
        cache_ttl_ms=60000,
        cache_max_size=100,
        cache_cleanup_interval_seconds=60.0,
        log_level="INFO",
    )


@pytest.fixture
def mock_client() -> AsyncMock:
    """Mock memory backend client."""
    mock = AsyncMock(spec=SupermemoryClient)
    mock.get_profile.return_value = ProfileResponse.model_validate(PROFILE_PAYLOAD)
    mock.search_memories.return_value = SearchResults.model_validate(RECENT_PAYLOAD)
    mock.add_memory.return_value = AddMemoryResponse(id="doc_1", status="queued")
    return mock


@pytest_asyncio.fixture
async def vapi_memory(
    test_settings: Settings, mock_client: AsyncMock
) -> AsyncIterator[VapiMemory]:
    """Context service backed by the mock client."""
    service = VapiMemory(settings=test_settings, client=mock_client)
    yield service
    await service.close()
