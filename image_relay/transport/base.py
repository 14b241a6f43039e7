"""Abstract transport protocol for upstream requests."""

from __future__ import annotations

import socket
from abc import ABC, abstractmethod
from typing import Any, Protocol, runtime_checkable

from ..models import Request, Response

# Substrings of resolver / connect errors across platforms and libraries
_UNREACHABLE_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "temporary failure in name resolution",
    "getaddrinfo failed",
    "no address associated with hostname",
    "could not resolve host",
    "connection refused",
    "errno 111",
    "errno 61",
    "winerror 10061",
)


def is_unreachable_error(exc: BaseException) -> bool:
    """Check whether an exception means DNS failure or connection refused.

    Walks the ``__cause__`` / ``__context__`` chain looking for the socket
    level error, then falls back to matching known error messages.
    """
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, (socket.gaierror, ConnectionRefusedError)):
            return True
        message = str(current).lower()
        if any(marker in message for marker in _UNREACHABLE_MARKERS):
            return True
        current = current.__cause__ or current.__context__
    return False


@runtime_checkable
class Transport(Protocol):
    """Protocol defining the transport interface.

    Transports perform a single HTTP exchange and must implement both
    synchronous and asynchronous request methods. Every library error is
    raised as a ``TransportError`` subclass; non-2xx responses are returned,
    not raised.
    """

    def request_sync(self, request: Request) -> Response:
        """Execute a synchronous HTTP request.

        Args:
            request: The request to execute.

        Returns:
            Response object.

        Raises:
            TransportError: On connection or transport errors.
        """
        ...

    async def request_async(self, request: Request) -> Response:
        """Execute an asynchronous HTTP request.

        Args:
            request: The request to execute.

        Returns:
            Response object.

        Raises:
            TransportError: On connection or transport errors.
        """
        ...

    def close_sync(self) -> None:
        """Close synchronous resources."""
        ...

    async def close_async(self) -> None:
        """Close asynchronous resources."""
        ...


class BaseTransport(ABC):
    """Abstract base class for transport implementations.

    Provides common functionality and enforces the transport interface.
    """

    backend_name = "base"

    def __init__(
        self,
        default_timeout: float = 25.0,
        max_redirects: int = 5,
        verify_ssl: bool = True,
    ):
        """Initialize transport.

        Args:
            default_timeout: Request timeout used when the request sets none.
            max_redirects: Maximum number of redirects to follow.
            verify_ssl: Whether to verify SSL certificates.
        """
        self._default_timeout = default_timeout
        self._max_redirects = max_redirects
        self._verify_ssl = verify_ssl
        self._closed = False

    @property
    def is_closed(self) -> bool:
        """Check if transport has been closed."""
        return self._closed

    def _effective_timeout(self, request: Request) -> float:
        return request.timeout or self._default_timeout

    @abstractmethod
    def request_sync(self, request: Request) -> Response:
        """Execute a synchronous HTTP request."""
        raise NotImplementedError

    @abstractmethod
    async def request_async(self, request: Request) -> Response:
        """Execute an asynchronous HTTP request."""
        raise NotImplementedError

    def close_sync(self) -> None:
        """Close synchronous resources."""
        self._closed = True

    async def close_async(self) -> None:
        """Close asynchronous resources."""
        self._closed = True

    def __enter__(self) -> "BaseTransport":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close_sync()

    async def __aenter__(self) -> "BaseTransport":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close_async()
