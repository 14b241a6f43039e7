"""Data model, transport records and exceptions for the relay."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Union


class ErrorKind(str, Enum):
    """Client-facing failure categories."""

    INVALID_URL = "InvalidURL"
    NOT_FOUND = "NotFound"
    FORBIDDEN = "Forbidden"
    TIMEOUT = "Timeout"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class FetchRequest:
    """A single relay call for one target URL."""

    target_url: str


@dataclass(frozen=True)
class IdentityProfile:
    """Client identity used for every attempt of one FetchRequest.

    Attributes:
        user_agent: User-Agent header value, constant across attempts.
        extra_headers: Browser-specific headers (client hints) added by
                       strategies that send a full fingerprint.
        name: Browser profile the identity was drawn from.
        impersonate: curl_cffi impersonate target for the profile.
        header_order: Header transmission order of the browser.
    """

    user_agent: str
    extra_headers: Mapping[str, str] = field(default_factory=dict)
    name: str = ""
    impersonate: str | None = None
    header_order: tuple[str, ...] = ()


@dataclass(frozen=True)
class StrategyDescriptor:
    """One header profile of the fallback chain.

    Attributes:
        order: Position in the chain (ascending).
        name: Strategy identifier used in logs.
        header_set: Static headers sent with the attempt (besides User-Agent).
        include_identity_headers: Whether the identity's extra headers are sent.
        include_synthetic_ip: Whether a fresh X-Forwarded-For IP is sent.
    """

    order: int
    name: str
    header_set: Mapping[str, str]
    include_identity_headers: bool = False
    include_synthetic_ip: bool = False


@dataclass(frozen=True)
class FetchSuccess:
    """Upstream image fetched successfully."""

    content_type: str
    body: bytes

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class FetchFailure:
    """Fetch failed; ``detail`` is for logs only and never sent to clients."""

    kind: ErrorKind
    detail: str = ""

    @property
    def ok(self) -> bool:
        return False


FetchOutcome = Union[FetchSuccess, FetchFailure]


@dataclass
class Request:
    """Outbound HTTP request.

    Attributes:
        method: HTTP method.
        url: The request URL.
        headers: Request headers, in transmission order.
        timeout: Request-specific timeout override.
        impersonate: Browser TLS fingerprint to impersonate (curl backend only).
    """

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    timeout: float | None = None
    impersonate: str | None = None

    def __post_init__(self) -> None:
        """Normalize method to uppercase."""
        self.method = self.method.upper()


@dataclass
class Response:
    """Upstream HTTP response.

    Attributes:
        status_code: HTTP status code.
        headers: Response headers.
        content: Raw response content as bytes.
        url: Final URL after redirects.
        elapsed: Request duration in seconds.
        request: The original request object.
    """

    status_code: int
    headers: dict[str, str]
    content: bytes
    url: str
    elapsed: float = 0.0
    request: Request | None = None

    @property
    def ok(self) -> bool:
        """Check if status code indicates success (2xx)."""
        return 200 <= self.status_code < 300

    def get_header(self, name: str, default: str | None = None) -> str | None:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return default

    def raise_for_status(self) -> None:
        """Raise HTTPError if status code is not 2xx."""
        if not self.ok:
            raise HTTPError(
                f"HTTP {self.status_code} for {self.url}",
                response=self,
            )


class RelayError(Exception):
    """Base exception for relay errors."""
    pass


class TransportError(RelayError):
    """Error during HTTP transport (connection, timeout, etc.)."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error


class UpstreamUnreachable(TransportError):
    """Upstream host could not be resolved or refused the connection."""
    pass


class UpstreamTimeout(TransportError):
    """Upstream did not answer within the timeout."""
    pass


class HTTPError(RelayError):
    """Upstream answered with a non-2xx status code."""

    def __init__(self, message: str, response: Response | None = None):
        super().__init__(message)
        self.response = response

    @property
    def status_code(self) -> int | None:
        return self.response.status_code if self.response is not None else None


class StrategiesExhausted(RelayError):
    """Every fetch strategy failed for a URL."""

    def __init__(self, url: str, errors: list[Exception]):
        message = f"All {len(errors)} fetch strategies failed for {url}"
        if errors:
            message += f": {errors[-1]}"
        super().__init__(message)
        self.url = url
        self.errors = errors

    @property
    def last_error(self) -> Exception | None:
        """Error of the final strategy attempted."""
        return self.errors[-1] if self.errors else None
