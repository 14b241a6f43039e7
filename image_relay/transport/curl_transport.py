"""curl_cffi transport with TLS fingerprint impersonation."""

from __future__ import annotations

import time
from typing import Any

from curl_cffi.const import CurlECode
from curl_cffi.requests import AsyncSession, Session

from ..models import (
    Request,
    Response,
    TransportError,
    UpstreamTimeout,
    UpstreamUnreachable,
)
from .base import BaseTransport, is_unreachable_error

_UNREACHABLE_CODES = (CurlECode.COULDNT_RESOLVE_HOST, CurlECode.COULDNT_CONNECT)


class CurlTransport(BaseTransport):
    """Transport using curl_cffi for TLS fingerprinting.

    The TLS/HTTP2 fingerprint follows ``Request.impersonate`` so it matches
    the User-Agent of the identity; curl_cffi's own default headers are
    disabled so each strategy sends exactly its header set.
    """

    backend_name = "curl_cffi"

    def __init__(
        self,
        default_timeout: float = 25.0,
        max_redirects: int = 5,
        verify_ssl: bool = True,
    ):
        """Initialize curl transport.

        Args:
            default_timeout: Default request timeout.
            max_redirects: Maximum number of redirects to follow.
            verify_ssl: Whether to verify SSL certificates.
        """
        super().__init__(default_timeout, max_redirects, verify_ssl)
        self._sync_session: Session | None = None
        self._async_session: AsyncSession | None = None

    def _get_sync_session(self) -> Session:
        """Get or create sync session."""
        if self._sync_session is None:
            self._sync_session = Session()
        return self._sync_session

    def _get_async_session(self) -> AsyncSession:
        """Get or create async session."""
        if self._async_session is None:
            self._async_session = AsyncSession()
        return self._async_session

    def _build_request_kwargs(self, request: Request) -> dict[str, Any]:
        """Build kwargs for curl_cffi."""
        kwargs: dict[str, Any] = {
            "method": request.method,
            "url": request.url,
            "headers": request.headers or {},
            "timeout": self._effective_timeout(request),
            "verify": self._verify_ssl,
            "allow_redirects": True,
            "max_redirects": self._max_redirects,
            "default_headers": False,
        }

        if request.impersonate:
            kwargs["impersonate"] = request.impersonate

        return kwargs

    def _translate_error(self, error: Exception) -> TransportError:
        """Map a curl_cffi exception onto the relay's transport errors."""
        message = f"Request failed: {type(error).__name__}: {error}"
        code = getattr(error, "code", None)
        if code == CurlECode.OPERATION_TIMEDOUT:
            return UpstreamTimeout(message, original_error=error)
        if code in _UNREACHABLE_CODES or is_unreachable_error(error):
            return UpstreamUnreachable(message, original_error=error)
        return TransportError(message, original_error=error)

    def _convert_response(
        self,
        raw_response: Any,
        request: Request,
        elapsed: float,
    ) -> Response:
        """Convert curl_cffi response to our Response model."""
        return Response(
            status_code=raw_response.status_code,
            headers=dict(raw_response.headers),
            content=raw_response.content,
            url=str(raw_response.url),
            elapsed=elapsed,
            request=request,
        )

    def request_sync(self, request: Request) -> Response:
        """Execute a synchronous HTTP request.

        Args:
            request: The request to execute.

        Returns:
            Response object.

        Raises:
            TransportError: On connection or transport errors.
        """
        if self._closed:
            raise TransportError("Transport is closed")

        session = self._get_sync_session()
        kwargs = self._build_request_kwargs(request)
        start_time = time.monotonic()

        try:
            raw_response = session.request(**kwargs)
        except Exception as e:
            raise self._translate_error(e) from e

        return self._convert_response(raw_response, request, time.monotonic() - start_time)

    async def request_async(self, request: Request) -> Response:
        """Execute an asynchronous HTTP request.

        Args:
            request: The request to execute.

        Returns:
            Response object.

        Raises:
            TransportError: On connection or transport errors.
        """
        if self._closed:
            raise TransportError("Transport is closed")

        session = self._get_async_session()
        kwargs = self._build_request_kwargs(request)
        start_time = time.monotonic()

        try:
            raw_response = await session.request(**kwargs)
        except Exception as e:
            raise self._translate_error(e) from e

        return self._convert_response(raw_response, request, time.monotonic() - start_time)

    def close_sync(self) -> None:
        """Close synchronous resources."""
        if self._sync_session is not None:
            self._sync_session.close()
            self._sync_session = None
        super().close_sync()

    async def close_async(self) -> None:
        """Close asynchronous resources."""
        if self._async_session is not None:
            await self._async_session.close()
            self._async_session = None
        if self._sync_session is not None:
            self._sync_session.close()
            self._sync_session = None
        await super().close_async()
