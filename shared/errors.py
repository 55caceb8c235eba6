"""
Shared error handling for the Gitea probe exporter.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class ExporterException(Exception):
    """Base exception for exporter services."""

    status_code = 400

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


class ConfigurationError(ExporterException):
    """Startup configuration errors. Fatal: the process does not start."""

    status_code = 500

    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)


class TargetError(ExporterException):
    """Missing or unknown probe target supplied by the caller."""

    def __init__(self, message: str = "Invalid target", details: Optional[Dict[str, Any]] = None):
        super().__init__("TARGET_ERROR", message, details)


class RemoteAPIError(ExporterException):
    """A single remote API call failed.

    Raised inside the Gitea client and always converted there into an empty
    result, so it never reaches a request handler.
    """

    status_code = 502

    def __init__(self, url: str, message: str = "Remote API error", status_code: Optional[int] = None):
        details: Dict[str, Any] = {"url": url}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__("REMOTE_API_ERROR", message, details)
        self.url = url
        self.remote_status_code = status_code
