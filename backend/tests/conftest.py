"""
EventSnap Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Provides reusable test infrastructure (stub upstream, API client).
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── stub_upstream: Recording DashScope stand-in answering a valid event
    ├── make_client:   Factory for an HTTPX AsyncClient bound to a fresh app
    └── sample_image_b64: Small base64 payload for request bodies

No test talks to the real DashScope API: the service is pointed at an
httpx.MockTransport wrapping a StubUpstream.
"""

import base64
import json
import os
from typing import Any, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Override settings for testing BEFORE any app imports
os.environ["ALIYUN_API_KEY"] = "test-key-not-real"
os.environ["LOG_LEVEL"] = "WARNING"

from eventsnap.config import Settings  # noqa: E402
from eventsnap.main import create_app  # noqa: E402
from eventsnap.routes.process import get_extraction_service  # noqa: E402
from eventsnap.services.dashscope_service import DashScopeService  # noqa: E402
from eventsnap.services.extraction_service import ExtractionService  # noqa: E402

TEST_API_KEY = "test-key-not-real"

EVENT_ANSWER = (
    'noise {"title":"T","content":"C","location":"L",'
    '"time":"2024-01-20 14:00","requirements":"R"} trailing'
)


def dashscope_payload(*texts: str) -> Dict[str, Any]:
    """A DashScope multimodal answer whose message content holds the given text items."""
    return {
        "output": {
            "choices": [
                {
                    "finish_reason": "stop",
                    "message": {
                        "role": "assistant",
                        "content": [{"text": t} for t in texts],
                    },
                }
            ]
        },
        "usage": {"input_tokens": 1200, "output_tokens": 60},
        "request_id": "00000000-0000-0000-0000-000000000000",
    }


class StubUpstream:
    """
    Callable httpx handler that records every request it receives.

    Usage:
        upstream = StubUpstream(json_body=dashscope_payload("..."))
        service = DashScopeService(api_key="k", transport=upstream.transport)
    """

    def __init__(
        self,
        status_code: int = 200,
        json_body: Optional[Any] = None,
        text_body: Optional[str] = None,
        raw_body: Optional[bytes] = None,
        error: Optional[Exception] = None,
    ):
        self.status_code = status_code
        self.json_body = json_body
        self.text_body = text_body
        self.raw_body = raw_body
        self.error = error
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.raw_body is not None:
            return httpx.Response(self.status_code, content=self.raw_body)
        if self.text_body is not None:
            return httpx.Response(self.status_code, text=self.text_body)
        return httpx.Response(self.status_code, json=self.json_body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def last_json(self) -> Dict[str, Any]:
        return json.loads(self.requests[-1].content)


def make_settings(api_key: str = TEST_API_KEY) -> Settings:
    return Settings(_env_file=None, aliyun_api_key=api_key, log_level="WARNING")


@pytest.fixture
def stub_upstream():
    """Upstream answering 200 with the reference event text."""
    return StubUpstream(json_body=dashscope_payload(EVENT_ANSWER))


@pytest.fixture
def sample_image_b64():
    """Minimal JPEG bytes (SOI + JFIF header + EOI), base64-encoded."""
    jpeg = (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )
    return base64.b64encode(jpeg).decode("ascii")


@pytest_asyncio.fixture
async def make_client():
    """
    Factory for an async client bound to a fresh app whose DashScope calls
    go to the given StubUpstream.

    Usage:
        async def test_x(make_client, stub_upstream):
            client = await make_client(stub_upstream)
            response = await client.post("/api/process", json={...})
    """
    clients: List[AsyncClient] = []

    async def _make(upstream: StubUpstream, api_key: str = TEST_API_KEY) -> AsyncClient:
        app = create_app(make_settings(api_key))

        def override() -> ExtractionService:
            return ExtractionService(
                DashScopeService(api_key=api_key, transport=upstream.transport)
            )

        app.dependency_overrides[get_extraction_service] = override
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.aclose()
