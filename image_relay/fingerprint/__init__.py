"""Browser profiles, identity pool and header generation."""

from .profiles import BrowserProfile, PROFILES, USER_AGENTS, get_profile, list_profiles
from .identity import draw_identity, identity_from_profile, pick_user_agent, synthetic_ipv4
from .headers import HeaderGenerator

__all__ = [
    "BrowserProfile",
    "PROFILES",
    "USER_AGENTS",
    "get_profile",
    "list_profiles",
    # Identity pool
    "draw_identity",
    "identity_from_profile",
    "pick_user_agent",
    "synthetic_ipv4",
    "HeaderGenerator",
]
