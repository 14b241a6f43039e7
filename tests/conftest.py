"""Shared test fixtures and configuration."""

import random
from typing import Callable, Generator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from image_relay import (
    FetchPipeline,
    RelayConfig,
    Response,
    UpstreamUnreachable,
)
from image_relay.app import create_app
from image_relay.transport import HttpxTransport


IMAGE_URL = "https://scontent.cdninstagram.com/foo.jpg"


# ============== Configuration Fixtures ==============

@pytest.fixture
def default_config() -> RelayConfig:
    """Default relay configuration."""
    return RelayConfig()


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source for deterministic identity draws."""
    return random.Random(1234)


# ============== Response Fixtures ==============

@pytest.fixture
def make_response() -> Callable[..., Response]:
    """Factory for upstream responses."""

    def _make(
        status_code: int = 200,
        content: bytes = b"\xff\xd8\xff\xe0",
        headers: dict[str, str] | None = None,
        url: str = IMAGE_URL,
    ) -> Response:
        return Response(
            status_code=status_code,
            headers={"content-type": "image/jpeg"} if headers is None else headers,
            content=content,
            url=url,
            elapsed=0.05,
        )

    return _make


@pytest.fixture
def image_response(make_response) -> Response:
    """Successful JPEG response."""
    return make_response()


@pytest.fixture
def forbidden_response(make_response) -> Response:
    """Upstream 403 response."""
    return make_response(
        status_code=403,
        content=b"Forbidden",
        headers={"content-type": "text/plain"},
    )


@pytest.fixture
def refused_error() -> UpstreamUnreachable:
    """Connection refused error as raised by transports."""
    return UpstreamUnreachable("Request failed: ConnectError: [Errno 111] Connection refused")


# ============== Mock Fixtures ==============

@pytest.fixture
def mock_transport(image_response: Response) -> MagicMock:
    """Mock transport for testing without network."""
    transport = MagicMock(spec=HttpxTransport)
    transport.is_closed = False

    # Default successful response
    transport.request_sync.return_value = image_response

    # Async version
    async def async_request(*args, **kwargs):
        return transport.request_sync.return_value

    transport.request_async = AsyncMock(side_effect=async_request)
    transport.close_async = AsyncMock()

    return transport


# ============== Pipeline / App Fixtures ==============

@pytest.fixture
def pipeline(
    default_config: RelayConfig,
    mock_transport: MagicMock,
    rng: random.Random,
) -> Generator[FetchPipeline, None, None]:
    """FetchPipeline with mocked transport."""
    pipeline = FetchPipeline(default_config, transport=mock_transport, rng=rng)
    yield pipeline
    pipeline.close()


@pytest.fixture
def app_client(default_config: RelayConfig, pipeline: FetchPipeline) -> TestClient:
    """TestClient for the relay app backed by the mocked pipeline."""
    return TestClient(create_app(default_config, pipeline=pipeline))
