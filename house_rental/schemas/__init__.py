"""
Pydantic schemas for request/response validation.
"""

from .auth import LoginRequest, AuthResponse
from .user import UserCreate, UserResponse, UserSummary, UserListResponse
from .listing import (
    GeoPoint,
    ListingCreate,
    ListingUpdate,
    ListingResponse,
    NearbyListingResponse,
    ListingSearchResponse,
    ListingSummary,
    MessageResponse
)
from .property_request import (
    PropertyRequestCreate,
    PropertyRequestStatusUpdate,
    PropertyRequestResponse
)
from .image import (
    ListingImageCreate,
    ListingImageUpdate,
    ListingImageResponse,
    ImageReorderRequest,
    ImageUploadResponse
)
from .error import ErrorDetail, ErrorResponse, APIErrorResponse

__all__ = [
    # Authentication
    "LoginRequest",
    "AuthResponse",

    # User
    "UserCreate",
    "UserResponse",
    "UserSummary",
    "UserListResponse",

    # Listing
    "GeoPoint",
    "ListingCreate",
    "ListingUpdate",
    "ListingResponse",
    "NearbyListingResponse",
    "ListingSearchResponse",
    "ListingSummary",
    "MessageResponse",

    # Property request
    "PropertyRequestCreate",
    "PropertyRequestStatusUpdate",
    "PropertyRequestResponse",

    # Image
    "ListingImageCreate",
    "ListingImageUpdate",
    "ListingImageResponse",
    "ImageReorderRequest",
    "ImageUploadResponse",

    # Errors
    "ErrorDetail",
    "ErrorResponse",
    "APIErrorResponse",
]
