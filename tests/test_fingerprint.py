"""Tests for browser profiles, the identity pool and header generation."""

import random
import re

import pytest

from image_relay.fingerprint import (
    PROFILES,
    USER_AGENTS,
    BrowserProfile,
    HeaderGenerator,
    draw_identity,
    get_profile,
    identity_from_profile,
    list_profiles,
    pick_user_agent,
    synthetic_ipv4,
)
from image_relay.fingerprint.profiles import (
    CHROME_120_LINUX,
    CHROME_120_MACOS,
    CHROME_120_WINDOWS,
    SAFARI_17_IOS,
)
from image_relay.strategies import ALTERNATE_REFERER, FULL_FINGERPRINT, MINIMAL

IPV4_PATTERN = re.compile(r"^(\d{1,3})\.(\d{1,3})\.(\d{1,3})\.(\d{1,3})$")


class TestBrowserProfile:
    """Tests for BrowserProfile."""

    def test_chrome_windows_profile(self):
        """Test Chrome on Windows profile."""
        profile = CHROME_120_WINDOWS

        assert profile.impersonate == "chrome120"
        assert "Chrome/120" in profile.user_agent
        assert "Windows" in profile.user_agent
        assert profile.sec_ch_ua_platform == '"Windows"'

    def test_chrome_client_hints(self):
        """Test Chromium profiles send Sec-CH-UA headers."""
        hints = CHROME_120_MACOS.get_client_hints()

        assert hints["Sec-CH-UA"].startswith('"Not_A Brand"')
        assert hints["Sec-CH-UA-Mobile"] == "?0"
        assert hints["Sec-CH-UA-Platform"] == '"macOS"'

    def test_safari_has_no_client_hints(self):
        """Test Safari doesn't include Sec-CH-UA headers."""
        assert SAFARI_17_IOS.get_client_hints() == {}
        assert "iPhone" in SAFARI_17_IOS.user_agent

    def test_profiles_are_frozen(self):
        """Test profiles cannot be mutated."""
        with pytest.raises(AttributeError):
            CHROME_120_LINUX.user_agent = "curl/8.0"  # type: ignore[misc]

    def test_header_order(self):
        """Test every profile defines a header order."""
        for profile in PROFILES.values():
            assert "User-Agent" in profile.header_order
            assert "Referer" in profile.header_order


class TestGetProfile:
    """Tests for profile lookup."""

    def test_get_profile(self):
        """Test getting a profile by name."""
        assert get_profile("chrome_120_linux") == CHROME_120_LINUX

    def test_case_insensitive(self):
        """Test profile lookup is case insensitive."""
        assert get_profile("SAFARI_17_IOS") == SAFARI_17_IOS

    def test_unknown_profile_raises(self):
        """Test unknown profile raises ValueError."""
        with pytest.raises(ValueError, match="Unknown profile"):
            get_profile("netscape_4")

    def test_list_profiles(self):
        """Test listing profiles is sorted and complete."""
        profiles = list_profiles()
        assert profiles == sorted(profiles)
        assert set(profiles) == set(PROFILES)


class TestIdentityPool:
    """Tests for user agent and synthetic IP generation."""

    def test_pool_has_desktop_and_mobile_agents(self):
        """Test the pool holds at least four agents, desktop and mobile."""
        assert len(USER_AGENTS) >= 4
        assert len(set(USER_AGENTS)) == len(USER_AGENTS)
        assert any("Mobile" in ua for ua in USER_AGENTS)
        assert any("Windows NT" in ua for ua in USER_AGENTS)

    def test_pick_user_agent_from_pool(self):
        """Test picked agents always come from the pool."""
        for _ in range(50):
            assert pick_user_agent() in USER_AGENTS

    def test_pick_user_agent_covers_pool(self):
        """Test every agent is eventually picked."""
        rng = random.Random(7)
        picked = {pick_user_agent(rng) for _ in range(200)}
        assert picked == set(USER_AGENTS)

    def test_synthetic_ipv4_format(self):
        """Test synthetic IPs are dotted quads with octets in range."""
        for _ in range(100):
            match = IPV4_PATTERN.match(synthetic_ipv4())
            assert match is not None
            assert all(0 <= int(octet) <= 255 for octet in match.groups())

    def test_synthetic_ipv4_deterministic_with_seed(self):
        """Test a seeded random source gives reproducible addresses."""
        assert synthetic_ipv4(random.Random(99)) == synthetic_ipv4(random.Random(99))

    def test_synthetic_ipv4_varies(self):
        """Test consecutive draws differ."""
        rng = random.Random(3)
        assert len({synthetic_ipv4(rng) for _ in range(20)}) > 1

    def test_draw_identity(self):
        """Test drawn identity comes from a profile."""
        identity = draw_identity(random.Random(5))

        assert identity.user_agent in USER_AGENTS
        assert identity.name in PROFILES
        profile = PROFILES[identity.name]
        assert identity.impersonate == profile.impersonate
        assert dict(identity.extra_headers) == profile.get_client_hints()

    def test_identity_extra_headers_read_only(self):
        """Test identity headers cannot be mutated."""
        identity = identity_from_profile(CHROME_120_WINDOWS)
        with pytest.raises(TypeError):
            identity.extra_headers["X-Test"] = "1"  # type: ignore[index]


class TestHeaderGenerator:
    """Tests for HeaderGenerator."""

    @pytest.fixture
    def chrome_generator(self) -> HeaderGenerator:
        return HeaderGenerator(identity_from_profile(CHROME_120_WINDOWS))

    @pytest.fixture
    def safari_generator(self) -> HeaderGenerator:
        return HeaderGenerator(identity_from_profile(SAFARI_17_IOS))

    def test_full_fingerprint_headers(self, chrome_generator):
        """Test full fingerprint sends browser headers, hints and Threads referer."""
        headers = chrome_generator.generate(FULL_FINGERPRINT)

        assert headers["User-Agent"] == CHROME_120_WINDOWS.user_agent
        assert headers["Accept-Language"] == "en-US,en;q=0.9"
        assert headers["Accept-Encoding"] == "gzip, deflate, br"
        assert headers["Cache-Control"] == "no-cache"
        assert headers["Sec-Fetch-Dest"] == "image"
        assert headers["Sec-Fetch-Mode"] == "no-cors"
        assert headers["Sec-Fetch-Site"] == "cross-site"
        assert headers["Sec-CH-UA"] == CHROME_120_WINDOWS.sec_ch_ua
        assert headers["Sec-CH-UA-Platform"] == '"Windows"'
        assert headers["Referer"] == "https://www.threads.net/"
        assert headers["Origin"] == "https://www.threads.net"
        assert "X-Forwarded-For" not in headers

    @pytest.mark.parametrize("profile", list(PROFILES.values()), ids=list(PROFILES))
    def test_full_fingerprint_client_hints_for_every_profile(self, profile):
        """Test full fingerprint sends all three Sec-CH-UA headers whatever the identity."""
        headers = HeaderGenerator(identity_from_profile(profile)).generate(FULL_FINGERPRINT)
        names = {name.lower() for name in headers}

        assert {"sec-ch-ua", "sec-ch-ua-mobile", "sec-ch-ua-platform"} <= names
        assert len([n for n in headers if n.lower() == "sec-ch-ua"]) == 1

    def test_full_fingerprint_safari_uses_default_hints(self, safari_generator):
        """Test Safari identity falls back to the Chrome on Windows hints."""
        headers = safari_generator.generate(FULL_FINGERPRINT)

        assert headers["Sec-CH-UA"] == CHROME_120_WINDOWS.sec_ch_ua
        assert headers["Sec-CH-UA-Mobile"] == "?0"
        assert headers["Sec-CH-UA-Platform"] == '"Windows"'
        assert headers["Sec-Fetch-Dest"] == "image"

    def test_full_fingerprint_identity_hints_override(self):
        """Test a Chromium identity's own hints replace the defaults."""
        headers = HeaderGenerator(identity_from_profile(CHROME_120_LINUX)).generate(FULL_FINGERPRINT)
        assert headers["Sec-CH-UA-Platform"] == '"Linux"'

    def test_minimal_headers(self, chrome_generator):
        """Test minimal strategy sends only UA, Accept and Referer."""
        headers = chrome_generator.generate(MINIMAL)

        assert headers == {
            "User-Agent": CHROME_120_WINDOWS.user_agent,
            "Accept": "image/*,*/*;q=0.8",
            "Referer": "https://www.threads.net/",
        }

    def test_alternate_referer_headers(self, chrome_generator):
        """Test alternate strategy swaps referer and adds a forwarded-for IP."""
        headers = chrome_generator.generate(ALTERNATE_REFERER)

        assert set(headers) == {"User-Agent", "Accept", "Referer", "X-Forwarded-For"}
        assert headers["Referer"] == "https://instagram.com/"
        assert headers["Accept"] == "image/*,*/*;q=0.8"
        assert IPV4_PATTERN.match(headers["X-Forwarded-For"])

    def test_forwarded_for_uses_rng(self, chrome_generator):
        """Test the forwarded-for IP comes from the given random source."""
        headers = chrome_generator.generate(ALTERNATE_REFERER, random.Random(11))
        assert headers["X-Forwarded-For"] == synthetic_ipv4(random.Random(11))

    def test_user_agent_constant_across_strategies(self, chrome_generator):
        """Test the same user agent is sent by every strategy."""
        agents = {
            chrome_generator.generate(strategy)["User-Agent"]
            for strategy in (FULL_FINGERPRINT, MINIMAL, ALTERNATE_REFERER)
        }
        assert agents == {CHROME_120_WINDOWS.user_agent}

    def test_headers_follow_browser_order(self, chrome_generator):
        """Test headers are ordered per the browser profile."""
        names = list(chrome_generator.generate(FULL_FINGERPRINT))
        order = [h.lower() for h in CHROME_120_WINDOWS.header_order]
        positions = [order.index(name.lower()) for name in names if name.lower() in order]

        assert positions == sorted(positions)
        assert names.index("User-Agent") < names.index("Referer")

    def test_unknown_headers_kept_last(self):
        """Test headers missing from the profile order are appended."""
        identity = identity_from_profile(BrowserProfile(
            name="bare",
            impersonate="chrome120",
            user_agent="UA",
            header_order=("Referer", "User-Agent"),
        ))
        headers = HeaderGenerator(identity).generate(MINIMAL)

        assert list(headers) == ["Referer", "User-Agent", "Accept"]
