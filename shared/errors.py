"""
Shared error handling for the New Relic external metrics adapter.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class AdapterException(Exception):
    """Base exception for adapter errors."""

    status_code: int = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self, request_id: Optional[str] = None) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class ApplicationNotFoundError(AdapterException):
    """No application in the upstream listing matches the requested name."""

    status_code = 404

    def __init__(self, app_name: str, message: str = "could not find matching app"):
        self.app_name = app_name
        super().__init__("APPLICATION_NOT_FOUND", message, {"app_name": app_name})


class UpstreamError(AdapterException):
    """The upstream API call failed (transport error or non-success status)."""

    status_code = 502

    def __init__(self, message: str = "Upstream request failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("UPSTREAM_ERROR", message, details)


class MalformedResponseError(AdapterException):
    """Upstream payload could not be decoded or coerced."""

    status_code = 502

    def __init__(self, message: str = "Malformed upstream response", details: Optional[Dict[str, Any]] = None):
        super().__init__("MALFORMED_RESPONSE", message, details)


class SelectorMissingAppNameError(AdapterException):
    """Label selector carries no appName equality requirement."""

    def __init__(self, message: str = "could not find appName selector", details: Optional[Dict[str, Any]] = None):
        super().__init__("SELECTOR_MISSING_APP_NAME", message, details)


class InvalidSelectorError(AdapterException):
    """Label selector string could not be parsed."""

    def __init__(self, selector: str, message: str = "Invalid label selector"):
        super().__init__("INVALID_SELECTOR", f"{message}: {selector!r}", {"selector": selector})


class UnsupportedMetricError(AdapterException):
    """Requested external metric is not served by this adapter."""

    status_code = 404

    def __init__(self, metric: str):
        super().__init__("UNSUPPORTED_METRIC", f"metric {metric!r} is not supported", {"metric": metric})
