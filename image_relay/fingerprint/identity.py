"""Randomized client identity: user agents and synthetic forwarded-for IPs.

Plain functions over the process-wide ``random`` module. Each accepts an
optional ``random.Random`` so tests can make draws deterministic.
"""

from __future__ import annotations

import random
from types import MappingProxyType

from ..models import IdentityProfile
from .profiles import PROFILE_POOL, USER_AGENTS, BrowserProfile


def pick_user_agent(rng: random.Random | None = None) -> str:
    """Pick a user agent uniformly at random from the fixed pool."""
    return (rng or random).choice(USER_AGENTS)


def synthetic_ipv4(rng: random.Random | None = None) -> str:
    """Generate a random dotted-quad for the X-Forwarded-For header.

    Each octet is independently uniform over [0, 255]. The address is only
    ever placed in a header, never used for routing.
    """
    source = rng or random
    return ".".join(str(source.randint(0, 255)) for _ in range(4))


def identity_from_profile(profile: BrowserProfile) -> IdentityProfile:
    """Build the identity carried by one fetch from a browser profile."""
    return IdentityProfile(
        user_agent=profile.user_agent,
        extra_headers=MappingProxyType(profile.get_client_hints()),
        name=profile.name,
        impersonate=profile.impersonate,
        header_order=profile.header_order,
    )


def draw_identity(rng: random.Random | None = None) -> IdentityProfile:
    """Draw the identity for a new fetch request."""
    return identity_from_profile((rng or random).choice(PROFILE_POOL))
