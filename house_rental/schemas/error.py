"""
Error response schemas for API documentation and consistent error formatting.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Any, Dict, Union


class ErrorDetail(BaseModel):
    """Schema for individual error detail."""

    field: Optional[str] = Field(
        None,
        description="Field name that caused the error",
        examples=["price"]
    )

    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Field required"]
    )

    type: Optional[str] = Field(
        None,
        description="Error type identifier",
        examples=["missing"]
    )

    input: Optional[Any] = Field(
        None,
        description="Input value that caused the error"
    )


class ErrorResponse(BaseModel):
    """Schema for standardized error responses."""

    code: str = Field(..., description="Error code identifier", examples=["VALIDATION_ERROR"])
    message: str = Field(..., description="Human-readable error message", examples=["Request validation failed"])
    timestamp: str = Field(..., description="Error timestamp in ISO format", examples=["2026-01-01T00:00:00Z"])
    request_id: Optional[str] = Field(None, description="Request identifier for tracing", examples=["abc12345"])
    details: Optional[Union[List[ErrorDetail], Dict[str, Any]]] = Field(
        None,
        description="Per-field validation errors, or a traceback in development"
    )


class APIErrorResponse(BaseModel):
    """Schema for API error response wrapper."""

    error: ErrorResponse = Field(..., description="Error information")


_DESCRIPTIONS = {
    400: "Bad Request - Invalid request parameters",
    401: "Unauthorized - Authentication required",
    403: "Forbidden - Access denied",
    404: "Not Found - Resource does not exist",
    409: "Conflict - Resource already exists",
    413: "Payload Too Large",
    500: "Internal Server Error",
    502: "Bad Gateway - Geolocation provider failed",
}


def get_error_responses(*status_codes: int) -> Dict[int, Dict[str, Any]]:
    """
    Get error response schemas for specific status codes.

    Args:
        status_codes: HTTP status codes to include

    Returns:
        Dictionary of error response schemas for the ``responses`` route argument
    """
    return {
        code: {"description": _DESCRIPTIONS[code], "model": APIErrorResponse}
        for code in status_codes
        if code in _DESCRIPTIONS
    }


def get_auth_error_responses() -> Dict[int, Dict[str, Any]]:
    """Get authentication and authorization error response schemas."""
    return get_error_responses(401, 403)


def get_crud_error_responses() -> Dict[int, Dict[str, Any]]:
    """Get error response schemas for CRUD operations."""
    return get_error_responses(400, 401, 403, 404, 500)
