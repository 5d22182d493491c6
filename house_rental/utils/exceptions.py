"""
Exceptions raised by services and dependencies.

Each class fixes an HTTP status and a machine-readable error code; the
handlers in ``services.error_handler`` turn them into the error envelope.
"""

from typing import Any, Dict, Optional, List
from fastapi import HTTPException, status


class APIException(HTTPException):
    """Root of the API error hierarchy; ``error_code`` ends up in the response body."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code


class _FixedStatusError(APIException):
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code: str = "API_ERROR"
    default_detail: str = "Request failed"

    def __init__(self, detail: Optional[str] = None, error_code: Optional[str] = None, headers: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=self.http_status,
            detail=detail or self.default_detail,
            error_code=error_code or self.default_code,
            headers=headers
        )


class BadRequestError(_FixedStatusError):
    http_status = status.HTTP_400_BAD_REQUEST
    default_code = "BAD_REQUEST"
    default_detail = "Bad request"


class ValidationError(BadRequestError):
    """Input rejected by a service; ``field_errors`` become the envelope details."""

    def __init__(self, detail: str, field_errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(detail, error_code="VALIDATION_ERROR")
        self.field_errors = field_errors or []


class NotFoundError(_FixedStatusError):
    http_status = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: Optional[str] = None, detail: Optional[str] = None):
        if detail is None:
            detail = f"{resource} {resource_id} not found" if resource_id else f"{resource} not found"
        super().__init__(detail)
        self.resource = resource


class UnauthorizedError(_FixedStatusError):
    http_status = status.HTTP_401_UNAUTHORIZED
    default_code = "UNAUTHORIZED"
    default_detail = "Authentication required"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(_FixedStatusError):
    http_status = status.HTTP_403_FORBIDDEN
    default_code = "FORBIDDEN"
    default_detail = "Access forbidden"


class ConflictError(_FixedStatusError):
    http_status = status.HTTP_409_CONFLICT
    default_code = "CONFLICT"
    default_detail = "Resource already exists"


class InternalServerError(_FixedStatusError):
    default_code = "INTERNAL_SERVER_ERROR"
    default_detail = "Internal server error"


# Authentication

class InvalidCredentialsError(UnauthorizedError):
    default_detail = "Invalid email or password"


class TokenExpiredError(UnauthorizedError):
    default_detail = "Token has expired"


class InvalidTokenError(UnauthorizedError):
    default_detail = "Invalid token"


class InactiveUserError(ForbiddenError):
    default_detail = "User account is inactive"


class InsufficientPermissionsError(ForbiddenError):
    def __init__(self, action: str):
        super().__init__(f"Insufficient permissions to {action}")


# Listings and property requests

class ListingNotFoundError(NotFoundError):
    def __init__(self, detail: str = "Listing not found"):
        super().__init__("Listing", detail=detail)


class ListingOwnershipError(ForbiddenError):
    default_detail = "You don't own this listing"


class DuplicatePendingRequestError(BadRequestError):
    """The tenant already has a pending request on this listing."""
    default_code = "DUPLICATE_PENDING_REQUEST"
    default_detail = "You already have a pending request for this property"


class InvalidStatusTransitionError(BadRequestError):
    """Approved and rejected requests are final."""
    default_code = "INVALID_STATUS_TRANSITION"

    def __init__(self, current: str):
        super().__init__(f"Request has already been {current}")


# Uploads

class UnsupportedFileTypeError(BadRequestError):
    default_code = "UNSUPPORTED_FILE_TYPE"

    def __init__(self, file_type: str, supported_types: List[str]):
        super().__init__(f"Unsupported file type '{file_type}'. Supported types: {', '.join(supported_types)}")


class FileSizeExceededError(BadRequestError):
    default_code = "FILE_TOO_LARGE"

    def __init__(self, size: int, max_size: int):
        super().__init__(f"File of {size} bytes is over the {max_size} byte limit")


class PayloadTooLargeError(_FixedStatusError):
    http_status = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    default_code = "PAYLOAD_TOO_LARGE"

    def __init__(self, size: int, max_size: int):
        super().__init__(f"Request body of {size} bytes is over the {max_size} byte limit")


# Upstream providers

class GeolocationProviderError(_FixedStatusError):
    """A geocoding, places or directions call failed or came back empty."""
    http_status = status.HTTP_502_BAD_GATEWAY
    default_code = "GEOLOCATION_PROVIDER_ERROR"

    def __init__(self, detail: str, provider: Optional[str] = None, provider_status: Optional[str] = None):
        super().__init__(detail)
        self.provider = provider
        self.provider_status = provider_status
