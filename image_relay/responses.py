"""Translate fetch outcomes into outbound HTTP responses."""

from __future__ import annotations

import base64
import hashlib
import json
from dataclasses import dataclass, field

from .models import ErrorKind, FetchFailure, FetchOutcome, FetchSuccess

# Status code and client-facing message per failure category
ERROR_RESPONSES: dict[ErrorKind, tuple[int, str]] = {
    ErrorKind.INVALID_URL: (400, "Invalid image URL"),
    ErrorKind.NOT_FOUND: (404, "Image not found"),
    ErrorKind.FORBIDDEN: (403, "Access forbidden"),
    ErrorKind.TIMEOUT: (408, "Request timeout"),
    ErrorKind.UNKNOWN: (500, "Failed to fetch image"),
}


@dataclass
class OutboundResponse:
    """Status, headers and body handed to the web framework unmodified."""

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""


def make_etag(body: bytes) -> str:
    """Weak entity tag: body length plus a truncated SHA-1 digest."""
    digest = base64.b64encode(hashlib.sha1(body).digest()).decode("ascii")[:27]
    return f'W/"{len(body):x}-{digest}"'


def cache_control(max_age: int) -> str:
    return f"public, max-age={max_age}"


def error_response(status_code: int, message: str) -> OutboundResponse:
    """Build a JSON error response ``{"error": message}``."""
    return OutboundResponse(
        status_code=status_code,
        headers={"Content-Type": "application/json"},
        body=json.dumps({"error": message}).encode("utf-8"),
    )


def translate(outcome: FetchOutcome, cache_max_age: int = 86400) -> OutboundResponse:
    """Map a fetch outcome onto an outbound response.

    Success keeps the upstream bytes and content type and allows public
    caching; failures become a small JSON body naming the category. Upstream
    error details are never included.

    Args:
        outcome: Result of the fetch pipeline.
        cache_max_age: Seconds clients and shared caches may keep the image.

    Returns:
        OutboundResponse.
    """
    if isinstance(outcome, FetchSuccess):
        return OutboundResponse(
            status_code=200,
            headers={
                "Content-Type": outcome.content_type,
                "Cache-Control": cache_control(cache_max_age),
                "ETag": make_etag(outcome.body),
            },
            body=outcome.body,
        )

    kind = outcome.kind if isinstance(outcome, FetchFailure) else ErrorKind.UNKNOWN
    status_code, message = ERROR_RESPONSES.get(kind, ERROR_RESPONSES[ErrorKind.UNKNOWN])
    return error_response(status_code, message)
