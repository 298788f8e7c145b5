"""
Shared error handling for the Disaster Response API.

Every error raised on purpose by the services derives from
``ServiceException`` and carries its own HTTP status, so the exception
handlers installed by ``BaseService`` can render a uniform envelope.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel

from shared.logging import get_request_id


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class ServiceException(Exception):
    """Base exception for Disaster Response services."""

    status_code: int = 500

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=get_request_id(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class ValidationError(ServiceException):
    """Caller omitted or malformed required input."""

    status_code = 400

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class NotFoundError(ServiceException):
    """Requested record does not exist."""

    status_code = 404

    def __init__(self, message: str = "Not found", details: Optional[Dict[str, Any]] = None):
        super().__init__("NOT_FOUND", message, details)


class ExternalServiceError(ServiceException):
    """An upstream lookup failed or returned an unusable payload."""

    def __init__(self, service: str, message: str = "External service error", details: Optional[Dict[str, Any]] = None):
        self.service = service
        super().__init__("EXTERNAL_SERVICE_ERROR", f"{service}: {message}", details)


class RecordStoreError(ServiceException):
    """Disaster or resource persistence failed."""

    def __init__(self, message: str = "Record store error", details: Optional[Dict[str, Any]] = None):
        super().__init__("RECORD_STORE_ERROR", message, details)


class StoreReadError(ServiceException):
    """Cache lookup failed."""

    def __init__(self, message: str = "Cache read failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("CACHE_READ_ERROR", message, details)


class StoreWriteError(ServiceException):
    """Cache upsert failed."""

    def __init__(self, message: str = "Cache write failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("CACHE_WRITE_ERROR", message, details)
