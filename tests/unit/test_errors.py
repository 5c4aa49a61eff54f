"""
Unit tests for shared error types.
"""

import pytest

from shared.errors import (
    AdapterException,
    ApplicationNotFoundError,
    InvalidSelectorError,
    MalformedResponseError,
    SelectorMissingAppNameError,
    UnsupportedMetricError,
    UpstreamError,
)


class TestErrors:
    """Test cases for the adapter error taxonomy."""

    @pytest.mark.parametrize("error,code,status_code", [
        (ApplicationNotFoundError("shop"), "APPLICATION_NOT_FOUND", 404),
        (UpstreamError("boom"), "UPSTREAM_ERROR", 502),
        (MalformedResponseError(), "MALFORMED_RESPONSE", 502),
        (SelectorMissingAppNameError(), "SELECTOR_MISSING_APP_NAME", 400),
        (InvalidSelectorError("a in ("), "INVALID_SELECTOR", 400),
        (UnsupportedMetricError("cpu"), "UNSUPPORTED_METRIC", 404),
    ])
    def test_codes_and_status(self, error, code, status_code):
        assert isinstance(error, AdapterException)
        assert error.code == code
        assert error.status_code == status_code

    def test_message_passes_through(self):
        """Test that upstream messages are kept verbatim."""
        error = UpstreamError("could not list applications")

        assert str(error) == "could not list applications"
        assert error.message == "could not list applications"

    def test_to_response(self):
        response = ApplicationNotFoundError("shop").to_response(request_id="req-1")

        assert response.request_id == "req-1"
        assert response.code == "APPLICATION_NOT_FOUND"
        assert response.message == "could not find matching app"
        assert response.details == {"app_name": "shop"}
