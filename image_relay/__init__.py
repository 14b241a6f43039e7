"""Image relay for Instagram and Threads CDN images.

Fetches remote images on behalf of a client and returns the bytes with
caching headers. Origins that block on Referer, User-Agent or IP heuristics
are handled by an ordered chain of request strategies:

1. full browser fingerprint with a Threads Referer/Origin
2. minimal headers with the same Referer
3. alternate Referer plus a synthetic X-Forwarded-For address

Basic usage:

    from image_relay import FetchPipeline, translate

    with FetchPipeline() as pipeline:
        outcome = pipeline.fetch("https://scontent.cdninstagram.com/v/t51/123.jpg")
        response = translate(outcome)
        print(response.status_code, response.headers["Content-Type"])

    # HTTP service
    from image_relay.app import create_app
    app = create_app()
"""

__version__ = "0.1.0"

from .config import RelayConfig
from .models import (
    ErrorKind,
    FetchRequest,
    IdentityProfile,
    StrategyDescriptor,
    FetchSuccess,
    FetchFailure,
    FetchOutcome,
    Request,
    Response,
    RelayError,
    TransportError,
    UpstreamUnreachable,
    UpstreamTimeout,
    HTTPError,
    StrategiesExhausted,
)
from .validator import ALLOWED_DOMAINS, validate
from .fingerprint import (
    BrowserProfile,
    PROFILES,
    HeaderGenerator,
    draw_identity,
    pick_user_agent,
    synthetic_ipv4,
)
from .strategies import STRATEGIES, StrategyChain
from .pipeline import FetchPipeline, classify_error
from .responses import OutboundResponse, translate

__all__ = [
    # Configuration
    "RelayConfig",
    # Data model
    "ErrorKind",
    "FetchRequest",
    "IdentityProfile",
    "StrategyDescriptor",
    "FetchSuccess",
    "FetchFailure",
    "FetchOutcome",
    "Request",
    "Response",
    # Exceptions
    "RelayError",
    "TransportError",
    "UpstreamUnreachable",
    "UpstreamTimeout",
    "HTTPError",
    "StrategiesExhausted",
    # Validation
    "ALLOWED_DOMAINS",
    "validate",
    # Identity pool
    "BrowserProfile",
    "PROFILES",
    "HeaderGenerator",
    "draw_identity",
    "pick_user_agent",
    "synthetic_ipv4",
    # Fetching
    "STRATEGIES",
    "StrategyChain",
    "FetchPipeline",
    "classify_error",
    "OutboundResponse",
    "translate",
    # Version
    "__version__",
]
