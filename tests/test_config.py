"""Tests for ServerConfig loading and validation."""

from __future__ import annotations

import pytest

from aionr.config import DEFAULT_TIMEOUT, ServerConfig
from aionr.errors import ConfigError


class TestServerConfig:
    def test_minimal(self) -> None:
        config = ServerConfig.load(api_url="http://localhost:8001")
        assert config.api_url == "http://localhost:8001"
        assert config.api_key is None
        assert config.bearer_token is None
        assert config.timeout == DEFAULT_TIMEOUT
        assert config.log_level == "WARNING"
        assert config.discover_resources is True

    def test_trailing_slash_stripped(self) -> None:
        assert ServerConfig.load(api_url="https://api.example.com/").api_url == "https://api.example.com"

    def test_missing_url(self) -> None:
        with pytest.raises(ConfigError, match="AION_R_API_URL"):
            ServerConfig.load(api_url=None)

    def test_empty_url(self) -> None:
        with pytest.raises(ConfigError):
            ServerConfig.load(api_url="")

    def test_bad_scheme(self) -> None:
        with pytest.raises(ConfigError, match="http"):
            ServerConfig.load(api_url="ftp://example.com")

    def test_non_positive_timeout(self) -> None:
        with pytest.raises(ConfigError, match="timeout"):
            ServerConfig.load(api_url="http://x", timeout=0)

    def test_log_level_normalized(self) -> None:
        assert ServerConfig.load(api_url="http://x", log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level(self) -> None:
        with pytest.raises(ConfigError, match="log level"):
            ServerConfig.load(api_url="http://x", log_level="chatty")

    def test_api_key_is_secret(self) -> None:
        config = ServerConfig.load(api_url="http://x", api_key="s3cret")
        assert config.bearer_token == "s3cret"
        assert "s3cret" not in repr(config)

    def test_none_values_use_defaults(self) -> None:
        config = ServerConfig.load(api_url="http://x", api_key=None, otlp_endpoint=None)
        assert config.otlp_endpoint is None
