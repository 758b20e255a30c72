"""Pytest configuration and fixtures for Gumroad MCP tests."""

import json
from typing import Any, Callable

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock

from gumroad_mcp.api_client import GumroadAPIClient
from gumroad_mcp.tools import ToolDispatcher


@pytest.fixture
def mock_api_client() -> MagicMock:
    """Create a mock Gumroad API client."""
    client = MagicMock(spec=GumroadAPIClient)

    # Make all methods async
    client.get_user = AsyncMock()
    client.get_products = AsyncMock()
    client.get_product = AsyncMock()
    client.disable_product = AsyncMock()
    client.enable_product = AsyncMock()
    client.get_sales = AsyncMock()
    client.get_offer_codes = AsyncMock()
    client.get_offer_code = AsyncMock()
    client.create_offer_code = AsyncMock()
    client.update_offer_code = AsyncMock()
    client.delete_offer_code = AsyncMock()
    client.close = AsyncMock()

    return client


@pytest.fixture
def dispatcher(mock_api_client: MagicMock) -> ToolDispatcher:
    """Create a ToolDispatcher with a mocked client."""
    return ToolDispatcher(api_client=mock_api_client)


class RecordingTransport(httpx.MockTransport):
    """httpx transport that records requests and answers with a fixed reply."""

    def __init__(
        self,
        body: Any = None,
        status_code: int = 200,
        handler: Callable[[httpx.Request], httpx.Response] | None = None,
    ) -> None:
        self.requests: list[httpx.Request] = []
        self.body = {"success": True} if body is None else body
        self.status_code = status_code
        self._handler = handler
        super().__init__(self._record)

    def _record(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._handler is not None:
            return self._handler(request)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last_request.content)


@pytest.fixture
def transport() -> RecordingTransport:
    """Create a recording HTTP transport."""
    return RecordingTransport()


@pytest.fixture
def api_client(transport: RecordingTransport) -> GumroadAPIClient:
    """Create a real API client wired to the recording transport."""
    return GumroadAPIClient(
        access_token="test-token",
        http_transport=transport,
    )
