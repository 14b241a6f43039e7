"""Browser profiles backing the identity pool."""

from __future__ import annotations

from dataclasses import dataclass

_CHROMIUM_HEADER_ORDER = (
    "Host",
    "Connection",
    "Pragma",
    "Cache-Control",
    "sec-ch-ua",
    "sec-ch-ua-mobile",
    "User-Agent",
    "sec-ch-ua-platform",
    "Accept",
    "Origin",
    "Sec-Fetch-Site",
    "Sec-Fetch-Mode",
    "Sec-Fetch-Dest",
    "Referer",
    "Accept-Encoding",
    "Accept-Language",
    "X-Forwarded-For",
)

_SAFARI_HEADER_ORDER = (
    "Host",
    "Accept",
    "Sec-Fetch-Site",
    "Origin",
    "Cache-Control",
    "Pragma",
    "Sec-Fetch-Dest",
    "Accept-Language",
    "Sec-Fetch-Mode",
    "User-Agent",
    "Referer",
    "Accept-Encoding",
    "Connection",
    "X-Forwarded-For",
)

_CHROME_120_SEC_CH_UA = '"Not_A Brand";v="8", "Chromium";v="120", "Google Chrome";v="120"'


@dataclass(frozen=True)
class BrowserProfile:
    """Browser fingerprint profile.

    Attributes:
        name: Profile identifier (e.g., "chrome_120_windows").
        impersonate: curl_cffi impersonate string.
        user_agent: User-Agent header value.
        header_order: Header transmission order of the browser.
        sec_ch_ua: Sec-CH-UA header value, empty for non-Chromium browsers.
        sec_ch_ua_mobile: Sec-CH-UA-Mobile header value.
        sec_ch_ua_platform: Sec-CH-UA-Platform header value.
    """

    name: str
    impersonate: str
    user_agent: str
    header_order: tuple[str, ...]
    sec_ch_ua: str = ""
    sec_ch_ua_mobile: str = "?0"
    sec_ch_ua_platform: str = ""

    def get_client_hints(self) -> dict[str, str]:
        """Get the Sec-CH-UA client hint headers (Chromium only)."""
        if not self.sec_ch_ua:
            return {}
        return {
            "Sec-CH-UA": self.sec_ch_ua,
            "Sec-CH-UA-Mobile": self.sec_ch_ua_mobile,
            "Sec-CH-UA-Platform": self.sec_ch_ua_platform,
        }


CHROME_120_WINDOWS = BrowserProfile(
    name="chrome_120_windows",
    impersonate="chrome120",
    user_agent="Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    header_order=_CHROMIUM_HEADER_ORDER,
    sec_ch_ua=_CHROME_120_SEC_CH_UA,
    sec_ch_ua_platform='"Windows"',
)

CHROME_120_MACOS = BrowserProfile(
    name="chrome_120_macos",
    impersonate="chrome120",
    user_agent="Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    header_order=_CHROMIUM_HEADER_ORDER,
    sec_ch_ua=_CHROME_120_SEC_CH_UA,
    sec_ch_ua_platform='"macOS"',
)

CHROME_120_LINUX = BrowserProfile(
    name="chrome_120_linux",
    impersonate="chrome120",
    user_agent="Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    header_order=_CHROMIUM_HEADER_ORDER,
    sec_ch_ua=_CHROME_120_SEC_CH_UA,
    sec_ch_ua_platform='"Linux"',
)

SAFARI_17_IOS = BrowserProfile(
    name="safari_17_ios",
    impersonate="safari17_2_ios",
    user_agent="Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1",
    header_order=_SAFARI_HEADER_ORDER,
)


# Profile registry
PROFILES: dict[str, BrowserProfile] = {
    "chrome_120_windows": CHROME_120_WINDOWS,
    "chrome_120_macos": CHROME_120_MACOS,
    "chrome_120_linux": CHROME_120_LINUX,
    "safari_17_ios": SAFARI_17_IOS,
}

# Fixed at import time; the identity pool draws from this
PROFILE_POOL: tuple[BrowserProfile, ...] = tuple(PROFILES.values())

USER_AGENTS: tuple[str, ...] = tuple(p.user_agent for p in PROFILE_POOL)


def get_profile(name: str) -> BrowserProfile:
    """Get a browser profile by name.

    Args:
        name: Profile name (case-insensitive).

    Returns:
        BrowserProfile instance.

    Raises:
        ValueError: If profile name not found.
    """
    name = name.lower()
    if name not in PROFILES:
        available = ", ".join(sorted(PROFILES.keys()))
        raise ValueError(f"Unknown profile '{name}'. Available: {available}")

    return PROFILES[name]


def list_profiles() -> list[str]:
    """Get list of available profile names."""
    return sorted(PROFILES.keys())
