"""
Base exceptions for blobdrive.

Every error raised by the library derives from BlobDriveException so callers
can catch one type and still get a stable error code and structured details.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class BlobDriveException(Exception):
    """Base exception class for library errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        original: Optional[BaseException] = None
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.original = original
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error into a standardized error payload."""
        return create_error_response(
            message=self.message,
            error_code=self.error_code,
            details=self.details
        )


class ConfigurationError(BlobDriveException):
    """Exception for missing or invalid configuration."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code="CONFIGURATION_ERROR",
            details=details
        )


def create_error_response(
    message: str,
    error_code: str,
    details: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Create a standardized error response."""
    error_response = {
        "error": {
            "message": message,
            "code": error_code,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    }

    if details:
        error_response["error"]["details"] = details

    return error_response
