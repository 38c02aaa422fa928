"""
Shared error handling for the Employee Directory services.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field

from opentelemetry import trace


class ErrorResponse(BaseModel):
    """Standard error response format."""

    trace_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class DirectoryException(Exception):
    """Base exception for Employee Directory services."""

    status_code = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        # Get trace ID from current span
        trace_id = None
        current_span = trace.get_current_span()
        if current_span and current_span.is_recording():
            span_context = current_span.get_span_context()
            if span_context.trace_id != 0:
                trace_id = f"{span_context.trace_id:032x}"

        return ErrorResponse(
            trace_id=trace_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class ValidationError(DirectoryException):
    """Validation-related errors."""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class StoreError(DirectoryException):
    """The backing data store could not answer a query.

    Raised for connectivity failures and for responses that do not have the
    expected shape. Never retried by the directory itself.
    """

    status_code = 502

    def __init__(self, category: str, message: str = "Store query failed", details: Optional[Dict[str, Any]] = None):
        self.category = category
        super().__init__("STORE_ERROR", f"{category}: {message}", details)


class UnimplementedError(DirectoryException):
    """Operation exists on the public surface but has no implementation."""

    status_code = 501

    def __init__(self, operation: str, details: Optional[Dict[str, Any]] = None):
        self.operation = operation
        super().__init__("NOT_IMPLEMENTED", f"{operation} is not implemented", details)
