"""httpx-based transport."""

from __future__ import annotations

import asyncio
import time
from typing import Any

import httpx

from ..models import (
    Request,
    Response,
    TransportError,
    UpstreamTimeout,
    UpstreamUnreachable,
)
from .base import BaseTransport, is_unreachable_error

_DEADLINE_EXTENSION = "image_relay.deadline"


def _apply_deadline(request: httpx.Request) -> None:
    """Request hook: shrink each redirect hop's timeout to the time left."""
    deadline = request.extensions.get(_DEADLINE_EXTENSION)
    if deadline is None:
        return
    remaining = deadline - time.monotonic()
    if remaining <= 0:
        raise httpx.TimeoutException("Deadline passed before request was sent", request=request)
    request.extensions["timeout"] = httpx.Timeout(remaining).as_dict()


class HttpxTransport(BaseTransport):
    """Simple httpx wrapper with lazily created sync and async clients."""

    backend_name = "httpx"

    def __init__(
        self,
        default_timeout: float = 25.0,
        max_redirects: int = 5,
        verify_ssl: bool = True,
        http2: bool = False,
        transport: Any = None,
    ):
        """Initialize httpx transport.

        Args:
            default_timeout: Default request timeout in seconds.
            max_redirects: Maximum number of redirects to follow.
            verify_ssl: Whether to verify SSL certificates.
            http2: Whether to use HTTP/2.
            transport: Optional httpx transport handed to both clients
                       (e.g. ``httpx.MockTransport``).
        """
        super().__init__(default_timeout, max_redirects, verify_ssl)
        self._http2 = http2
        self._transport = transport
        self._sync_client: httpx.Client | None = None
        self._async_client: httpx.AsyncClient | None = None

    def _client_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "timeout": self._default_timeout,
            "verify": self._verify_ssl,
            "http2": self._http2,
            "follow_redirects": True,
            "max_redirects": self._max_redirects,
        }
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return kwargs

    def _get_sync_client(self) -> httpx.Client:
        """Get or create sync client (lazy initialization)."""
        if self._sync_client is None:
            client = httpx.Client(
                event_hooks={"request": [_apply_deadline]},
                **self._client_kwargs(),
            )
            # Strategies send exactly their own headers, in their own order
            client.headers.clear()
            self._sync_client = client
        return self._sync_client

    def _get_async_client(self) -> httpx.AsyncClient:
        """Get or create async client (lazy initialization)."""
        if self._async_client is None:
            client = httpx.AsyncClient(**self._client_kwargs())
            client.headers.clear()
            self._async_client = client
        return self._async_client

    def request_sync(self, request: Request) -> Response:
        """Execute a synchronous HTTP request.

        The whole exchange, redirects and body included, is bounded by the
        timeout: each redirect hop only gets the time left, and the body is
        read in chunks until the deadline passes.

        Args:
            request: The request to execute.

        Returns:
            Response object.

        Raises:
            TransportError: On connection or transport errors.
        """
        if self._closed:
            raise TransportError("Transport is closed")

        client = self._get_sync_client()
        timeout = self._effective_timeout(request)
        start_time = time.monotonic()
        deadline = start_time + timeout

        try:
            with client.stream(
                method=request.method,
                url=request.url,
                headers=request.headers,
                timeout=timeout,
                extensions={_DEADLINE_EXTENSION: deadline},
            ) as resp:
                chunks = []
                for chunk in resp.iter_bytes():
                    chunks.append(chunk)
                    if time.monotonic() > deadline:
                        raise httpx.ReadTimeout(
                            f"Body not received within {timeout:.1f}s",
                            request=resp.request,
                        )
        except httpx.HTTPError as e:
            raise self._translate_error(e) from e

        return self._convert_response(
            resp, request, time.monotonic() - start_time, content=b"".join(chunks)
        )

    async def request_async(self, request: Request) -> Response:
        """Execute an asynchronous HTTP request.

        The whole exchange, redirects included, is bounded by the timeout.

        Args:
            request: The request to execute.

        Returns:
            Response object.

        Raises:
            TransportError: On connection or transport errors.
        """
        if self._closed:
            raise TransportError("Transport is closed")

        client = self._get_async_client()
        timeout = self._effective_timeout(request)
        start_time = time.monotonic()

        try:
            resp = await asyncio.wait_for(
                client.request(
                    method=request.method,
                    url=request.url,
                    headers=request.headers,
                    timeout=timeout,
                ),
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            raise UpstreamTimeout(
                f"Request timed out after {timeout:.1f}s", original_error=e
            ) from e
        except httpx.HTTPError as e:
            raise self._translate_error(e) from e

        return self._convert_response(resp, request, time.monotonic() - start_time)

    def _translate_error(self, error: httpx.HTTPError) -> TransportError:
        """Map an httpx exception onto the relay's transport errors."""
        message = f"Request failed: {type(error).__name__}: {error}"
        if isinstance(error, httpx.TimeoutException):
            return UpstreamTimeout(message, original_error=error)
        if isinstance(error, httpx.ConnectError) and is_unreachable_error(error):
            return UpstreamUnreachable(message, original_error=error)
        return TransportError(message, original_error=error)

    def _convert_response(
        self,
        httpx_resp: httpx.Response,
        request: Request,
        elapsed: float,
        content: bytes | None = None,
    ) -> Response:
        """Convert httpx.Response to our Response model."""
        return Response(
            status_code=httpx_resp.status_code,
            headers=dict(httpx_resp.headers),
            content=httpx_resp.content if content is None else content,
            url=str(httpx_resp.url),
            elapsed=elapsed,
            request=request,
        )

    def close_sync(self) -> None:
        """Close sync client."""
        if self._sync_client is not None:
            self._sync_client.close()
            self._sync_client = None
        super().close_sync()

    async def close_async(self) -> None:
        """Close async client (and the sync client, if one was created)."""
        if self._async_client is not None:
            await self._async_client.aclose()
            self._async_client = None
        if self._sync_client is not None:
            self._sync_client.close()
            self._sync_client = None
        await super().close_async()
