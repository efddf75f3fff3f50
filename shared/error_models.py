"""
Standard error models for API consistency.
Every error the engine raises maps to one ErrorCode and one HTTP status.
"""
from datetime import datetime, timezone
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field
from enum import Enum


class ErrorCode(str, Enum):
    """Standard error codes for API responses."""
    # Request
    INVALID_INPUT = "INVALID_INPUT"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    NOT_FOUND = "NOT_FOUND"

    # Analytics
    EMPTY_PORTFOLIO = "EMPTY_PORTFOLIO"
    TOO_MANY_TOKENS = "TOO_MANY_TOKENS"

    # Data collection
    ALREADY_RUNNING = "ALREADY_RUNNING"

    # Server
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    TIMEOUT = "TIMEOUT"


class ErrorResponse(BaseModel):
    """
    Standard error response model.
    All API error responses follow this structure.
    """
    error: bool = Field(default=True, description="Always true for error responses")
    error_code: ErrorCode = Field(..., description="Standard error code")
    message: str = Field(..., description="Human-readable error message")
    detail: Optional[str] = Field(None, description="Additional error details")
    field: Optional[str] = Field(None, description="Field name if validation error")
    timestamp: Optional[str] = Field(None, description="Error timestamp (RFC 3339)")
    metadata: Optional[Dict[str, Any]] = Field(None, description="Additional error metadata")

    model_config = {
        "json_schema_extra": {
            "example": {
                "error": True,
                "error_code": "VALIDATION_ERROR",
                "message": "Validation error",
                "detail": "weight must be between 0 and 1",
                "field": "positions[0].weight",
                "timestamp": "2024-01-01T00:00:00Z",
                "metadata": {}
            }
        }
    }


class AIEngineError(Exception):
    """Base class for errors surfaced by the analytics kernel and HTTP layer."""
    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR
    status_code: int = 500

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class InvalidRequestError(AIEngineError):
    """Malformed JSON or oversized request body."""
    error_code = ErrorCode.INVALID_INPUT
    status_code = 400


class ValidationError(AIEngineError):
    """A request field violates a portfolio or analysis invariant."""
    error_code = ErrorCode.VALIDATION_ERROR
    status_code = 400

    def __init__(self, field: str, message: str):
        super().__init__(message, field=field)

    def __str__(self) -> str:
        return f"validation error on field {self.field}: {self.message}"


class EmptyPortfolioError(AIEngineError):
    """Risk calculation requested for a portfolio without positions."""
    error_code = ErrorCode.EMPTY_PORTFOLIO
    status_code = 400


class TooManyTokensError(AIEngineError):
    """Market analysis requested for more tokens than allowed."""
    error_code = ErrorCode.TOO_MANY_TOKENS
    status_code = 400


class UpstreamUnavailableError(AIEngineError):
    """External price API failed. Recovered locally with fallback data."""
    error_code = ErrorCode.SERVICE_UNAVAILABLE
    status_code = 503


class AlreadyRunningError(AIEngineError):
    """Data collector started twice."""
    error_code = ErrorCode.ALREADY_RUNNING
    status_code = 500


class InternalError(AIEngineError):
    """Unexpected kernel or encoding failure."""
    error_code = ErrorCode.INTERNAL_ERROR
    status_code = 500


def create_error_response(
    error_code: ErrorCode,
    message: str,
    detail: Optional[str] = None,
    field: Optional[str] = None,
    status_code: int = 400,
    metadata: Optional[Dict[str, Any]] = None
) -> tuple[ErrorResponse, int]:
    """
    Helper function to create standardized error responses.

    Args:
        error_code: Standard error code
        message: Human-readable error message
        detail: Additional error details
        field: Field name if validation error
        status_code: HTTP status code
        metadata: Additional error metadata

    Returns:
        Tuple of (ErrorResponse, status_code)
    """
    error_response = ErrorResponse(
        error=True,
        error_code=error_code,
        message=message,
        detail=detail,
        field=field,
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        metadata=metadata or {}
    )

    return error_response, status_code


def error_response_from_exception(exc: AIEngineError) -> tuple[ErrorResponse, int]:
    """Build the standard error body for an engine exception."""
    if isinstance(exc, ValidationError):
        return create_error_response(
            exc.error_code,
            "Validation error",
            detail=exc.message,
            field=exc.field,
            status_code=exc.status_code,
        )
    return create_error_response(
        exc.error_code,
        exc.message,
        field=exc.field,
        status_code=exc.status_code,
    )
