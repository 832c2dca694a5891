"""Tests for environment-driven settings."""

import os
from unittest.mock import patch

import pytest

from screener.config import Settings


class TestSettings:
    """Tests for Settings.from_env."""

    def test_defaults(self):
        """Test that an empty environment gives the default settings."""
        settings = Settings.from_env({})
        assert settings == Settings()
        assert settings.snapshot_interval == 1.0
        assert settings.reference_refresh_interval == 300.0
        assert settings.quote_asset == "USDT"
        assert settings.port == 8881

    def test_reads_os_environ(self):
        """Test that os.environ is used when no mapping is given."""
        with patch.dict(os.environ, {"PORT": "9000"}, clear=True):
            settings = Settings.from_env()
        assert settings.port == 9000

    def test_overrides(self):
        settings = Settings.from_env(
            {
                "SNAPSHOT_INTERVAL": "0.5",
                "REFERENCE_REFRESH_INTERVAL": "60",
                "HTTP_TIMEOUT": "5",
                "SUBSCRIBER_QUEUE_SIZE": "16",
                "FUTURES_API_URL": "http://localhost:9000",
                "LOG_LEVEL": "debug",
            }
        )
        assert settings.snapshot_interval == 0.5
        assert settings.reference_refresh_interval == 60.0
        assert settings.http_timeout == 5.0
        assert settings.subscriber_queue_size == 16
        assert settings.futures_api_url == "http://localhost:9000"
        assert settings.log_level == "DEBUG"

    def test_blank_values_use_defaults(self):
        settings = Settings.from_env({"SNAPSHOT_INTERVAL": "  ", "QUOTE_ASSET": ""})
        assert settings.snapshot_interval == 1.0
        assert settings.quote_asset == "USDT"

    def test_quote_asset_uppercased(self):
        assert Settings.from_env({"QUOTE_ASSET": "usdc"}).quote_asset == "USDC"

    def test_invalid_number_names_variable(self):
        with pytest.raises(ValueError, match="SNAPSHOT_INTERVAL"):
            Settings.from_env({"SNAPSHOT_INTERVAL": "fast"})

    def test_invalid_integer(self):
        with pytest.raises(ValueError, match="PORT"):
            Settings.from_env({"PORT": "80.5"})

    @pytest.mark.parametrize("name", ["SNAPSHOT_INTERVAL", "REFERENCE_REFRESH_INTERVAL", "SUBSCRIBER_QUEUE_SIZE"])
    def test_non_positive_rejected(self, name):
        with pytest.raises(ValueError, match=name):
            Settings.from_env({name: "0"})

    def test_retry_delay_may_be_zero(self):
        assert Settings.from_env({"STARTUP_RETRY_DELAY": "0"}).startup_retry_delay == 0.0
