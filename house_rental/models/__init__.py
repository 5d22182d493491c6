"""
Database models for the House Rental API.
Includes User, Listing, PropertyRequest and ListingImage models.
"""

from house_rental.models.user import User, UserRole
from house_rental.models.listing import Listing, ListingStatus
from house_rental.models.property_request import PropertyRequest, RequestStatus
from house_rental.models.image import ListingImage

__all__ = [
    "User",
    "UserRole",
    "Listing",
    "ListingStatus",
    "PropertyRequest",
    "RequestStatus",
    "ListingImage",
]
