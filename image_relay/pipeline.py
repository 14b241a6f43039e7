"""Fetch pipeline: validation, strategy chain and error classification.

Basic usage:

    from image_relay import FetchPipeline

    with FetchPipeline() as pipeline:
        outcome = pipeline.fetch("https://scontent.cdninstagram.com/v/t51/123.jpg")
        if outcome.ok:
            save(outcome.body)

    async with FetchPipeline() as pipeline:
        outcome = await pipeline.fetch_async(url)
"""

from __future__ import annotations

import logging
import random
from typing import Any

from .config import RelayConfig
from .fingerprint import draw_identity
from .models import (
    ErrorKind,
    FetchFailure,
    FetchOutcome,
    FetchRequest,
    FetchSuccess,
    HTTPError,
    Response,
    StrategiesExhausted,
    UpstreamTimeout,
    UpstreamUnreachable,
)
from .strategies import STRATEGIES, StrategyChain
from .transport import Transport, create_transport
from .validator import validate

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "image/jpeg"


def _classify(error: BaseException | None) -> ErrorKind:
    if isinstance(error, StrategiesExhausted):
        error = error.last_error
    if isinstance(error, UpstreamUnreachable):
        return ErrorKind.NOT_FOUND
    if isinstance(error, UpstreamTimeout):
        return ErrorKind.TIMEOUT
    if isinstance(error, HTTPError) and error.status_code == 403:
        return ErrorKind.FORBIDDEN
    return ErrorKind.UNKNOWN


def classify_error(error: BaseException | None) -> ErrorKind:
    """Map the terminal fetch error onto a client-facing category.

    DNS failure or refused connection is NotFound, an upstream 403 is
    Forbidden, an elapsed timeout is Timeout and anything else, including a
    failure while classifying, is Unknown.

    Args:
        error: The final strategy's error, or the StrategiesExhausted wrapping it.

    Returns:
        ErrorKind for the outward response.
    """
    try:
        return _classify(error)
    except Exception:
        logger.exception("Failed to classify fetch error")
        return ErrorKind.UNKNOWN


class FetchPipeline:
    """Validate a URL, fetch it through the strategy chain, normalize the result.

    The pipeline never raises from ``fetch`` / ``fetch_async``: every failure
    becomes a ``FetchFailure``.

    Args:
        config: Relay configuration. Defaults to ``RelayConfig()``.
        transport: Transport override. Defaults to the one ``config.backend`` selects.
        rng: Random source for identity and synthetic IP draws.
    """

    def __init__(
        self,
        config: RelayConfig | None = None,
        transport: Transport | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._config = config or RelayConfig()
        self._transport = transport or create_transport(self._config)
        self._rng = rng
        self._chain = StrategyChain(
            self._transport,
            strategies=STRATEGIES,
            timeout=self._config.timeout,
            rng=rng,
        )

    @property
    def config(self) -> RelayConfig:
        """Get the relay configuration."""
        return self._config

    @property
    def transport(self) -> Transport:
        """Get the underlying transport."""
        return self._transport

    # -------------------------------------------------------------------------
    # Fetching
    # -------------------------------------------------------------------------

    def fetch(self, url: str) -> FetchOutcome:
        """Fetch an image synchronously.

        Args:
            url: Target image URL, already known to be non-empty.

        Returns:
            FetchSuccess or FetchFailure.
        """
        rejected = self._reject_invalid(url)
        if rejected is not None:
            return rejected

        fetch_request = FetchRequest(target_url=url)
        identity = draw_identity(self._rng)

        try:
            response = self._chain.run(fetch_request, identity)
        except Exception as e:
            return self._failure(fetch_request, e)

        return self._success(response)

    async def fetch_async(self, url: str) -> FetchOutcome:
        """Fetch an image asynchronously.

        Args:
            url: Target image URL, already known to be non-empty.

        Returns:
            FetchSuccess or FetchFailure.
        """
        rejected = self._reject_invalid(url)
        if rejected is not None:
            return rejected

        fetch_request = FetchRequest(target_url=url)
        identity = draw_identity(self._rng)

        try:
            response = await self._chain.run_async(fetch_request, identity)
        except Exception as e:
            return self._failure(fetch_request, e)

        return self._success(response)

    # -------------------------------------------------------------------------
    # Internal Methods
    # -------------------------------------------------------------------------

    def _reject_invalid(self, url: str) -> FetchFailure | None:
        if validate(url, self._config.allowed_domains):
            return None
        logger.info("Rejected URL outside the allow-list: %s", url)
        return FetchFailure(ErrorKind.INVALID_URL, f"URL not allowed: {url}")

    def _success(self, response: Response) -> FetchSuccess:
        content_type = response.get_header("Content-Type") or DEFAULT_CONTENT_TYPE
        return FetchSuccess(content_type=content_type, body=response.content)

    def _failure(self, fetch_request: FetchRequest, error: Exception) -> FetchFailure:
        if isinstance(error, StrategiesExhausted):
            logger.error("Proxy error: %s", error.last_error)
        else:
            logger.exception("Unexpected error fetching %s", fetch_request.target_url)
        return FetchFailure(classify_error(error), str(error))

    # -------------------------------------------------------------------------
    # Cleanup
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Close the transport."""
        self._transport.close_sync()

    async def aclose(self) -> None:
        """Close the transport (async)."""
        await self._transport.close_async()

    def __enter__(self) -> "FetchPipeline":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    async def __aenter__(self) -> "FetchPipeline":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
