"""Configuration dataclass for the image relay."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Literal, Mapping

from .validator import ALLOWED_DOMAINS


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class RelayConfig:
    """Configuration for the relay service.

    Attributes:
        host: Interface the HTTP server binds to.
        port: Port the HTTP server listens on.
        backend: HTTP library used for upstream fetches - "httpx" or "curl"
                 (curl_cffi with TLS impersonation of the drawn profile).
        timeout: Per-attempt upstream timeout in seconds.
        max_redirects: Maximum number of redirects followed per attempt.
        cache_max_age: max-age (seconds) sent with successful image responses.
        verify_ssl: Whether to verify upstream SSL certificates.
        http2: Whether the httpx backend negotiates HTTP/2.
        log_level: Root logging level name.
        allowed_domains: Hostname allow-list for target URLs.
    """

    # Server
    host: str = "0.0.0.0"
    port: int = 3000

    # Upstream fetching
    backend: Literal["httpx", "curl"] = "httpx"
    timeout: float = 25.0
    max_redirects: int = 5
    verify_ssl: bool = True
    http2: bool = False

    # Response caching
    cache_max_age: int = 86400  # 24 hours

    # Logging
    log_level: str = "INFO"

    allowed_domains: tuple[str, ...] = field(default=ALLOWED_DOMAINS)

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.backend not in ("httpx", "curl"):
            raise ValueError("backend must be 'httpx' or 'curl'")
        if not 0 < self.port < 65536:
            raise ValueError("port must be between 1 and 65535")
        if self.timeout <= 0:
            raise ValueError("timeout must be > 0")
        if self.max_redirects < 0:
            raise ValueError("max_redirects must be >= 0")
        if self.cache_max_age < 0:
            raise ValueError("cache_max_age must be >= 0")
        if not self.allowed_domains:
            raise ValueError("allowed_domains must not be empty")
        self.log_level = self.log_level.upper()

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "RelayConfig":
        """Build a config from environment variables.

        Unset variables fall back to the dataclass defaults.

        Args:
            environ: Mapping to read from. Defaults to os.environ.

        Returns:
            RelayConfig instance.

        Raises:
            ValueError: If a variable holds an invalid value.
        """
        env = os.environ if environ is None else environ
        kwargs: dict[str, object] = {}

        if "HOST" in env:
            kwargs["host"] = env["HOST"]
        if "PORT" in env:
            kwargs["port"] = int(env["PORT"])
        if "RELAY_BACKEND" in env:
            kwargs["backend"] = env["RELAY_BACKEND"].strip().lower()
        if "RELAY_TIMEOUT" in env:
            kwargs["timeout"] = float(env["RELAY_TIMEOUT"])
        if "RELAY_MAX_REDIRECTS" in env:
            kwargs["max_redirects"] = int(env["RELAY_MAX_REDIRECTS"])
        if "RELAY_CACHE_MAX_AGE" in env:
            kwargs["cache_max_age"] = int(env["RELAY_CACHE_MAX_AGE"])
        if "RELAY_VERIFY_SSL" in env:
            kwargs["verify_ssl"] = _env_bool(env["RELAY_VERIFY_SSL"])
        if "RELAY_HTTP2" in env:
            kwargs["http2"] = _env_bool(env["RELAY_HTTP2"])
        if "LOG_LEVEL" in env:
            kwargs["log_level"] = env["LOG_LEVEL"]

        return cls(**kwargs)
