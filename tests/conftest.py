"""
Pytest fixtures for Appgram SDK tests.
"""

import os
from collections.abc import AsyncGenerator, Callable
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest

# Set test environment variables before importing the SDK
os.environ.setdefault("APPGRAM_API_URL", "https://api.test")
os.environ.setdefault("APPGRAM_PROJECT_ID", "proj_test")
os.environ.setdefault("DEBUG", "false")

from appgram.core.identity import DeviceCharacteristics, IdentityProvider  # noqa: E402
from appgram.core.storage import MemoryStorage  # noqa: E402
from appgram.services.appgram_client import AppgramClient  # noqa: E402
from appgram.services.transport import TransportClient  # noqa: E402

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def storage() -> MemoryStorage:
    """In-memory key-value storage."""
    return MemoryStorage()


@pytest.fixture
def characteristics() -> DeviceCharacteristics:
    """Fixed device characteristics."""
    return DeviceCharacteristics(
        user_agent="Mozilla/5.0 (X11; Linux x86_64)",
        language="en-US",
        color_depth=24,
        screen_width=1920,
        screen_height=1080,
        timezone_offset=-60,
        hardware_concurrency=8,
        device_memory=8,
    )


@pytest.fixture
def identity(storage: MemoryStorage, characteristics: DeviceCharacteristics) -> IdentityProvider:
    """Identity provider backed by memory storage."""
    return IdentityProvider(storage, characteristics=characteristics)


@pytest.fixture
async def make_transport() -> AsyncGenerator[Callable[[Handler], TransportClient], None]:
    """Factory for transports whose requests are answered by a handler function."""
    clients: list[httpx.AsyncClient] = []

    def factory(handler: Handler) -> TransportClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        clients.append(http_client)
        return TransportClient(base_url="https://api.test", http_client=http_client)

    yield factory

    for http_client in clients:
        await http_client.aclose()


@pytest.fixture
def make_client(make_transport: Callable[[Handler], TransportClient]) -> Callable[..., AppgramClient]:
    """Factory for resource clients on top of a mocked transport."""

    def factory(handler: Handler, **kwargs: Any) -> AppgramClient:
        kwargs.setdefault("project_id", "proj_test")
        return AppgramClient(make_transport(handler), **kwargs)

    return factory


@pytest.fixture
def mock_client() -> MagicMock:
    """Resource client mock; async methods become AsyncMocks."""
    return MagicMock(spec=AppgramClient)


@pytest.fixture
def sample_wish_data() -> dict[str, Any]:
    """Sample wish data for testing."""
    return {
        "id": "wish-1",
        "project_id": "proj_test",
        "title": "Dark mode",
        "description": "Please add a dark theme",
        "status": "planned",
        "vote_count": 5,
        "comment_count": 2,
        "has_voted": False,
    }


@pytest.fixture
def sample_page_data(sample_wish_data: dict[str, Any]) -> dict[str, Any]:
    """Wishes list response with sibling pagination fields."""
    return {
        "data": [sample_wish_data, {**sample_wish_data, "id": "wish-2", "title": "Export to CSV"}],
        "total": 37,
        "page": 2,
        "per_page": 10,
        "total_pages": 4,
    }
