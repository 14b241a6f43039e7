"""Transport layer for upstream HTTP requests."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import BaseTransport, Transport, is_unreachable_error
from .curl_transport import CurlTransport
from .httpx_transport import HttpxTransport

if TYPE_CHECKING:
    from ..config import RelayConfig

__all__ = [
    "Transport",
    "BaseTransport",
    "HttpxTransport",
    "CurlTransport",
    "create_transport",
    "is_unreachable_error",
]


def create_transport(config: "RelayConfig") -> BaseTransport:
    """Create the transport selected by ``config.backend``."""
    if config.backend == "curl":
        return CurlTransport(
            default_timeout=config.timeout,
            max_redirects=config.max_redirects,
            verify_ssl=config.verify_ssl,
        )
    return HttpxTransport(
        default_timeout=config.timeout,
        max_redirects=config.max_redirects,
        verify_ssl=config.verify_ssl,
        http2=config.http2,
    )
