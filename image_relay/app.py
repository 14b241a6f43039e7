"""FastAPI application exposing the image relay over HTTP.

Routes:
- ``GET /`` usage message
- ``GET /proxy/image?url=<image_url>`` relayed image or JSON error
- ``GET /health`` liveness check
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from . import __version__
from .config import RelayConfig
from .pipeline import FetchPipeline
from .responses import translate

logger = logging.getLogger(__name__)

USAGE_MESSAGE = (
    "Image Proxy API is Online and Running! "
    "Use /proxy/image?url=<image_url> to fetch images."
)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "X-DNS-Prefetch-Control": "off",
    # Relayed images are meant to be embedded by other origins
    "Cross-Origin-Resource-Policy": "cross-origin",
}


def _etag_matches(if_none_match: str | None, etag: str) -> bool:
    """Weak comparison of an If-None-Match header against an ETag."""
    if not if_none_match:
        return False
    wanted = etag.removeprefix("W/")
    for candidate in if_none_match.split(","):
        candidate = candidate.strip()
        if candidate == "*" or candidate.removeprefix("W/") == wanted:
            return True
    return False


def create_app(
    config: RelayConfig | None = None,
    pipeline: FetchPipeline | None = None,
) -> FastAPI:
    """Create the relay application.

    Args:
        config: Relay configuration. Defaults to ``RelayConfig.from_env()``.
        pipeline: Fetch pipeline override, mainly for tests.

    Returns:
        Configured FastAPI app. The pipeline's transport is closed on shutdown.
    """
    config = config or RelayConfig.from_env()
    pipeline = pipeline or FetchPipeline(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Image proxy server running on port %d", config.port)
        yield
        await pipeline.aclose()
        logger.info("Image proxy server stopped")

    app = FastAPI(
        title="Image Relay",
        description="Relays Instagram and Threads CDN images past origin blocking heuristics.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.pipeline = pipeline

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    @app.get("/")
    async def index():
        return {"success": True, "message": USAGE_MESSAGE}

    @app.get("/proxy/image")
    async def proxy_image(
        request: Request,
        url: str | None = Query(None, description="Image URL to relay"),
    ):
        """Fetch ``url`` through the strategy chain and relay the bytes."""
        if not url:
            return JSONResponse(status_code=400, content={"error": "URL parameter is required"})

        outcome = await pipeline.fetch_async(url)
        outbound = translate(outcome, cache_max_age=config.cache_max_age)

        etag = outbound.headers.get("ETag")
        if etag and _etag_matches(request.headers.get("if-none-match"), etag):
            return Response(
                status_code=304,
                headers={"ETag": etag, "Cache-Control": outbound.headers["Cache-Control"]},
            )

        return Response(
            content=outbound.body,
            status_code=outbound.status_code,
            headers=outbound.headers,
        )

    @app.get("/health")
    async def health():
        timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
        return {"status": "OK", "timestamp": timestamp.replace("+00:00", "Z")}

    return app
