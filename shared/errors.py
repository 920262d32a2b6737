"""
Shared error handling for the Academy for Excellence backend.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel


UPSTREAM_ERROR_MESSAGE = "Failed to fetch from Business Central"


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: str
    details: Any = None


class ProxyException(Exception):
    """Base exception for backend services."""

    status_code: int = 500

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Any] = None,
        status_code: Optional[int] = None,
    ):
        self.code = code
        self.message = message
        self.details = details if details is not None else {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(error=self.message, details=self.details)


class ConfigurationError(ProxyException):
    """Missing or malformed configuration."""

    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)


class AuthAcquisitionError(ProxyException):
    """The identity provider did not issue a token."""

    def __init__(self, message: str = "Failed to acquire access token", details: Optional[Any] = None):
        super().__init__("AUTH_ACQUISITION_ERROR", message, details, status_code=500)


class CacheUnavailableError(ProxyException):
    """The external token cache could not be read or written."""

    def __init__(self, message: str = "Token cache unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__("CACHE_UNAVAILABLE", message, details, status_code=503)


class UpstreamError(ProxyException):
    """The relayed call failed or returned a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[Any] = None):
        self.upstream_status = status_code
        self.body = body
        super().__init__(
            "UPSTREAM_ERROR",
            message,
            {"status_code": status_code, "body": body},
            status_code=status_code or 500,
        )

    def to_response(self) -> ErrorResponse:
        """Envelope carrying the upstream body, or the error message when there is none."""
        details = self.body if self.body is not None else self.message
        return ErrorResponse(error=UPSTREAM_ERROR_MESSAGE, details=details)
