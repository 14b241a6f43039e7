"""Tests for configuration."""

import pytest

from image_relay import ALLOWED_DOMAINS, RelayConfig


class TestRelayConfig:
    """Tests for RelayConfig dataclass."""

    def test_default_values(self):
        """Test default configuration values."""
        config = RelayConfig()

        assert config.host == "0.0.0.0"
        assert config.port == 3000
        assert config.backend == "httpx"
        assert config.timeout == 25.0
        assert config.max_redirects == 5
        assert config.cache_max_age == 86400
        assert config.verify_ssl is True
        assert config.http2 is False
        assert config.log_level == "INFO"
        assert config.allowed_domains == ALLOWED_DOMAINS

    def test_custom_values(self):
        """Test custom configuration values."""
        config = RelayConfig(
            port=8080,
            backend="curl",
            timeout=10.0,
            max_redirects=2,
            cache_max_age=60,
            log_level="debug",
        )

        assert config.port == 8080
        assert config.backend == "curl"
        assert config.timeout == 10.0
        assert config.max_redirects == 2
        assert config.cache_max_age == 60
        assert config.log_level == "DEBUG"

    def test_invalid_backend(self):
        """Test unknown backend raises error."""
        with pytest.raises(ValueError, match="backend"):
            RelayConfig(backend="requests")

    def test_invalid_port(self):
        """Test out-of-range port raises error."""
        with pytest.raises(ValueError, match="port"):
            RelayConfig(port=0)
        with pytest.raises(ValueError, match="port"):
            RelayConfig(port=70000)

    def test_invalid_timeout(self):
        """Test non-positive timeout raises error."""
        with pytest.raises(ValueError, match="timeout"):
            RelayConfig(timeout=0)

    def test_invalid_max_redirects(self):
        """Test negative max_redirects raises error."""
        with pytest.raises(ValueError, match="max_redirects"):
            RelayConfig(max_redirects=-1)

    def test_invalid_cache_max_age(self):
        """Test negative cache_max_age raises error."""
        with pytest.raises(ValueError, match="cache_max_age"):
            RelayConfig(cache_max_age=-1)

    def test_empty_allowed_domains(self):
        """Test empty allow-list raises error."""
        with pytest.raises(ValueError, match="allowed_domains"):
            RelayConfig(allowed_domains=())


class TestRelayConfigFromEnv:
    """Tests for RelayConfig.from_env."""

    def test_empty_environment_uses_defaults(self):
        """Test unset variables fall back to defaults."""
        assert RelayConfig.from_env({}) == RelayConfig()

    def test_port_from_env(self):
        """Test PORT variable."""
        config = RelayConfig.from_env({"PORT": "8081"})
        assert config.port == 8081

    def test_all_variables(self):
        """Test every supported variable is read."""
        config = RelayConfig.from_env({
            "HOST": "127.0.0.1",
            "PORT": "9000",
            "RELAY_BACKEND": "CURL",
            "RELAY_TIMEOUT": "12.5",
            "RELAY_MAX_REDIRECTS": "3",
            "RELAY_CACHE_MAX_AGE": "600",
            "RELAY_VERIFY_SSL": "false",
            "RELAY_HTTP2": "yes",
            "LOG_LEVEL": "warning",
        })

        assert config.host == "127.0.0.1"
        assert config.port == 9000
        assert config.backend == "curl"
        assert config.timeout == 12.5
        assert config.max_redirects == 3
        assert config.cache_max_age == 600
        assert config.verify_ssl is False
        assert config.http2 is True
        assert config.log_level == "WARNING"

    def test_invalid_port_from_env(self):
        """Test non-numeric PORT raises error."""
        with pytest.raises(ValueError):
            RelayConfig.from_env({"PORT": "not-a-port"})

    def test_reads_os_environ_by_default(self, monkeypatch):
        """Test os.environ is used when no mapping is given."""
        monkeypatch.setenv("PORT", "4000")
        monkeypatch.delenv("RELAY_BACKEND", raising=False)

        assert RelayConfig.from_env().port == 4000
