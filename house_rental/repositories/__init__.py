"""
Repository layer for data access operations.
"""

from house_rental.repositories.base import BaseRepository
from house_rental.repositories.user import UserRepository
from house_rental.repositories.listing import ListingRepository, ListingSearchFilters
from house_rental.repositories.property_request import PropertyRequestRepository
from house_rental.repositories.image import ImageRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "ListingRepository",
    "ListingSearchFilters",
    "PropertyRequestRepository",
    "ImageRepository",
]
