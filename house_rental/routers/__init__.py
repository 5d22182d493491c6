"""
API route handlers for the House Rental API.
"""

from .auth import router as auth_router
from .listings import router as listings_router
from .property_requests import router as property_requests_router
from .geolocation import router as geolocation_router
from .images import router as images_router
from .admin import router as admin_router

__all__ = [
    "auth_router",
    "listings_router",
    "property_requests_router",
    "geolocation_router",
    "images_router",
    "admin_router",
]
