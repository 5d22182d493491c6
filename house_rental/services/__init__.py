"""
Service layer for business logic implementation.
"""

from .auth import AuthService
from .listing import ListingService
from .property_request import PropertyRequestService
from .geolocation import GeolocationService
from .image import ImageService
from .error_handler import ErrorHandlerService

__all__ = [
    "AuthService",
    "ListingService",
    "PropertyRequestService",
    "GeolocationService",
    "ImageService",
    "ErrorHandlerService"
]
