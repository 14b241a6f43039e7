"""Header generation and ordering for fetch strategies."""

from __future__ import annotations

import random

from ..models import IdentityProfile, StrategyDescriptor
from .identity import synthetic_ipv4


class HeaderGenerator:
    """Build ordered request headers for one identity.

    Handles:
    - User-Agent from the identity, identical for every strategy
    - Strategy header sets and the identity's client hints
    - Synthetic X-Forwarded-For generation
    - Header ordering to match the identity's browser
    """

    def __init__(self, identity: IdentityProfile):
        """Initialize header generator.

        Args:
            identity: Identity drawn for the current fetch request.
        """
        self._identity = identity

    @property
    def identity(self) -> IdentityProfile:
        """Get the identity headers are generated for."""
        return self._identity

    def generate(
        self,
        strategy: StrategyDescriptor,
        rng: random.Random | None = None,
    ) -> dict[str, str]:
        """Generate ordered headers for a strategy attempt.

        Args:
            strategy: Strategy being attempted.
            rng: Random source for the synthetic IP.

        Returns:
            Ordered dict of headers.
        """
        headers = {"User-Agent": self._identity.user_agent}
        headers.update(strategy.header_set)

        if strategy.include_identity_headers:
            headers.update(self._identity.extra_headers)

        if strategy.include_synthetic_ip:
            headers["X-Forwarded-For"] = synthetic_ipv4(rng)

        return self._order_headers(headers)

    def _order_headers(self, headers: dict[str, str]) -> dict[str, str]:
        """Order headers according to the identity's browser.

        Args:
            headers: Unordered headers.

        Returns:
            Dict with headers in browser order, unknown headers last.
        """
        ordered: dict[str, str] = {}
        remaining = dict(headers)

        for header_name in self._identity.header_order:
            # Case-insensitive lookup
            for key, value in list(remaining.items()):
                if key.lower() == header_name.lower():
                    ordered[key] = value
                    del remaining[key]
                    break

        ordered.update(remaining)

        return ordered
