"""Ordered fallback chain of fetch strategies.

Origins reject image requests on different header heuristics: missing or
foreign Referer, header-count fingerprints that look "too browser-like", and
IP reputation. Each strategy targets one of these, and the chain tries them
in a fixed order until one succeeds.
"""

from __future__ import annotations

import logging
import random
from operator import attrgetter
from types import MappingProxyType
from typing import Sequence

from .fingerprint import HeaderGenerator
from .fingerprint.profiles import CHROME_120_WINDOWS
from .models import (
    FetchRequest,
    IdentityProfile,
    RelayError,
    Request,
    Response,
    StrategiesExhausted,
    StrategyDescriptor,
)
from .transport import Transport

logger = logging.getLogger(__name__)

THREADS_REFERER = "https://www.threads.net/"
THREADS_ORIGIN = "https://www.threads.net"
INSTAGRAM_REFERER = "https://instagram.com/"

MINIMAL_ACCEPT = "image/*,*/*;q=0.8"

FULL_FINGERPRINT = StrategyDescriptor(
    order=1,
    name="full_fingerprint",
    header_set=MappingProxyType({
        "Accept": "image/avif,image/webp,image/apng,image/svg+xml,image/*,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
        "Accept-Encoding": "gzip, deflate, br",
        "Cache-Control": "no-cache",
        "Pragma": "no-cache",
        "Sec-Fetch-Dest": "image",
        "Sec-Fetch-Mode": "no-cors",
        "Sec-Fetch-Site": "cross-site",
        "Referer": THREADS_REFERER,
        "Origin": THREADS_ORIGIN,
        # Sent for every identity; Chromium identities override with their own
        **CHROME_120_WINDOWS.get_client_hints(),
    }),
    include_identity_headers=True,
)

MINIMAL = StrategyDescriptor(
    order=2,
    name="minimal",
    header_set=MappingProxyType({
        "Accept": MINIMAL_ACCEPT,
        "Referer": THREADS_REFERER,
    }),
)

ALTERNATE_REFERER = StrategyDescriptor(
    order=3,
    name="alternate_referer",
    header_set=MappingProxyType({
        "Accept": MINIMAL_ACCEPT,
        "Referer": INSTAGRAM_REFERER,
    }),
    include_synthetic_ip=True,
)

STRATEGIES: tuple[StrategyDescriptor, ...] = (FULL_FINGERPRINT, MINIMAL, ALTERNATE_REFERER)


class StrategyChain:
    """Try each strategy in ascending order until one fetch succeeds.

    Strategies run strictly one after another and none is retried. A
    transport error or non-2xx response moves on to the next strategy; when
    every strategy has failed, ``StrategiesExhausted`` is raised and its
    ``last_error`` is the error of the final strategy.

    Example:
        chain = StrategyChain(HttpxTransport())
        response = chain.run(FetchRequest(url), draw_identity())
    """

    def __init__(
        self,
        transport: Transport,
        strategies: Sequence[StrategyDescriptor] = STRATEGIES,
        timeout: float = 25.0,
        rng: random.Random | None = None,
    ):
        """Initialize the chain.

        Args:
            transport: Transport executing each attempt.
            strategies: Strategy descriptors, sorted by ``order`` here.
            timeout: Timeout of each attempt in seconds.
            rng: Random source for synthetic forwarded-for IPs.

        Raises:
            ValueError: If no strategies are given.
        """
        if not strategies:
            raise ValueError("at least one strategy is required")

        self._transport = transport
        self._strategies = tuple(sorted(strategies, key=attrgetter("order")))
        self._timeout = timeout
        self._rng = rng

    @property
    def strategies(self) -> tuple[StrategyDescriptor, ...]:
        """Strategies in the order they are attempted."""
        return self._strategies

    def _build_request(
        self,
        fetch_request: FetchRequest,
        generator: HeaderGenerator,
        strategy: StrategyDescriptor,
    ) -> Request:
        return Request(
            method="GET",
            url=fetch_request.target_url,
            headers=generator.generate(strategy, self._rng),
            timeout=self._timeout,
            impersonate=generator.identity.impersonate,
        )

    def _log_failure(
        self,
        fetch_request: FetchRequest,
        strategy: StrategyDescriptor,
        error: RelayError,
        is_last: bool,
    ) -> None:
        logger.warning(
            "Strategy %d (%s) failed for %s: %s%s",
            strategy.order,
            strategy.name,
            fetch_request.target_url,
            error,
            "" if is_last else ", trying next strategy",
        )

    def run(self, fetch_request: FetchRequest, identity: IdentityProfile) -> Response:
        """Fetch the target URL synchronously.

        Args:
            fetch_request: The request being relayed.
            identity: Identity reused for every attempt.

        Returns:
            The first successful (2xx) response.

        Raises:
            StrategiesExhausted: If every strategy failed.
        """
        generator = HeaderGenerator(identity)
        errors: list[Exception] = []

        for index, strategy in enumerate(self._strategies, start=1):
            request = self._build_request(fetch_request, generator, strategy)
            try:
                response = self._transport.request_sync(request)
                response.raise_for_status()
            except RelayError as e:
                errors.append(e)
                self._log_failure(
                    fetch_request, strategy, e, is_last=index == len(self._strategies)
                )
                continue

            logger.debug("Strategy %d (%s) succeeded", strategy.order, strategy.name)
            return response

        raise StrategiesExhausted(fetch_request.target_url, errors)

    async def run_async(
        self,
        fetch_request: FetchRequest,
        identity: IdentityProfile,
    ) -> Response:
        """Fetch the target URL asynchronously.

        Args:
            fetch_request: The request being relayed.
            identity: Identity reused for every attempt.

        Returns:
            The first successful (2xx) response.

        Raises:
            StrategiesExhausted: If every strategy failed.
        """
        generator = HeaderGenerator(identity)
        errors: list[Exception] = []

        for index, strategy in enumerate(self._strategies, start=1):
            request = self._build_request(fetch_request, generator, strategy)
            try:
                response = await self._transport.request_async(request)
                response.raise_for_status()
            except RelayError as e:
                errors.append(e)
                self._log_failure(
                    fetch_request, strategy, e, is_last=index == len(self._strategies)
                )
                continue

            logger.debug("Strategy %d (%s) succeeded", strategy.order, strategy.name)
            return response

        raise StrategiesExhausted(fetch_request.target_url, errors)
