"""
Unit tests for shared logging processors.
"""

from shared.logging import (
    add_correlation_context,
    add_service_context,
    clear_context,
    set_app_context,
    set_request_id,
)


class TestLoggingProcessors:
    """Test cases for the structlog processors."""

    def teardown_method(self):
        clear_context()

    def test_service_context_from_logger_name(self):
        event = add_service_context(None, "info", {"logger": "external-metrics.newrelic"})

        assert event["service"] == "external-metrics"

    def test_service_context_without_component(self):
        event = add_service_context(None, "info", {"logger": "standalone"})

        assert "service" not in event

    def test_correlation_context(self):
        request_id = set_request_id()
        set_app_context("checkout")

        event = add_correlation_context(None, "info", {})

        assert event["request_id"] == request_id
        assert event["app_name"] == "checkout"

    def test_explicit_request_id(self):
        assert set_request_id("req-7") == "req-7"

    def test_cleared_context(self):
        set_request_id("req-7")
        clear_context()

        assert add_correlation_context(None, "info", {}) == {}
