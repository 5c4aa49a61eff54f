"""
Unit tests for shared configuration.
"""

import pytest
from pydantic import ValidationError

from shared.config import DEFAULT_NEWRELIC_API_URL, get_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Start every test without adapter settings in the environment."""
    for name in ("NEWRELIC_API_KEY", "MIN_RPM", "NEWRELIC_API_URL", "NEWRELIC_TIMEOUT_SECONDS", "ADAPTER_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


class TestServiceConfig:
    """Test cases for ServiceConfig."""

    def test_reads_environment(self, monkeypatch):
        """Test that settings come from the documented variables."""
        monkeypatch.setenv("NEWRELIC_API_KEY", "abc123")
        monkeypatch.setenv("MIN_RPM", "25")
        monkeypatch.setenv("NEWRELIC_TIMEOUT_SECONDS", "2.5")

        config = get_config("external-metrics", 8080, _env_file=None)

        assert config.newrelic_api_key == "abc123"
        assert config.min_rpm == 25
        assert config.newrelic_timeout_seconds == 2.5
        assert config.newrelic_api_url == DEFAULT_NEWRELIC_API_URL
        assert config.service_name == "external-metrics"
        assert config.port == 8080

    def test_missing_api_key_fails(self):
        """Test that construction fails without an API key."""
        with pytest.raises(ValidationError):
            get_config("external-metrics", 8080, _env_file=None)

    def test_blank_api_key_fails(self, monkeypatch):
        """Test that an empty API key is rejected."""
        monkeypatch.setenv("NEWRELIC_API_KEY", "  ")

        with pytest.raises(ValidationError):
            get_config("external-metrics", 8080, _env_file=None)

    def test_min_rpm_defaults_to_zero(self, monkeypatch):
        """Test the default threshold."""
        monkeypatch.setenv("NEWRELIC_API_KEY", "abc123")

        assert get_config("external-metrics", 8080, _env_file=None).min_rpm == 0

    @pytest.mark.parametrize("raw", ["abc", "1.5", ""])
    def test_unparsable_min_rpm_defaults_to_zero(self, monkeypatch, raw):
        """Test that an unparsable MIN_RPM falls back to 0 instead of failing."""
        monkeypatch.setenv("NEWRELIC_API_KEY", "abc123")
        monkeypatch.setenv("MIN_RPM", raw)

        assert get_config("external-metrics", 8080, _env_file=None).min_rpm == 0

    def test_keyword_overrides(self):
        """Test that explicit values take precedence over the environment."""
        config = get_config(
            "external-metrics",
            8080,
            newrelic_api_key="from-kwargs",
            min_rpm=7,
            newrelic_api_url="http://localhost:8090/v2/",
            _env_file=None
        )

        assert config.newrelic_api_key == "from-kwargs"
        assert config.min_rpm == 7
        assert config.newrelic_api_url == "http://localhost:8090/v2/"
