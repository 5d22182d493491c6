"""
Listing service for managing rental listings with business logic validation.
Handles creation, ownership checks, geospatial queries, search and verification.
"""

from typing import Optional, List, Dict, Any, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from house_rental.config import Settings, get_settings
from house_rental.repositories.listing import ListingRepository, ListingSearchFilters
from house_rental.repositories.property_request import PropertyRequestRepository
from house_rental.repositories.image import ImageRepository
from house_rental.repositories.user import UserRepository
from house_rental.models.listing import Listing
from house_rental.models.user import User
from house_rental.schemas.listing import ListingCreate, ListingUpdate
from house_rental.utils.exceptions import (
    APIException,
    BadRequestError,
    InternalServerError,
    InsufficientPermissionsError,
    ListingNotFoundError,
    ListingOwnershipError
)
import math
import uuid
import logging

logger = logging.getLogger(__name__)


class ListingService:
    """
    Listing service for the listing store.
    Owners manage their own listings; administrators may manage and verify any listing.
    """

    def __init__(self, db_session: AsyncSession, settings: Optional[Settings] = None):
        self.db = db_session
        self.settings = settings or get_settings()
        self.listing_repo = ListingRepository(db_session)
        self.image_repo = ImageRepository(db_session)
        self.request_repo = PropertyRequestRepository(db_session)
        self.user_repo = UserRepository(db_session)

    async def create_listing(self, listing_data: ListingCreate, current_user: Optional[User] = None) -> Listing:
        """
        Create a listing.

        The owner is the signed-in user; anonymous callers must supply
        ``owner_email``. New listings are never verified.

        Raises:
            BadRequestError: If no owner identity is available
        """
        try:
            if current_user is not None:
                owner_id = current_user.id
                owner_email = current_user.email
            elif listing_data.owner_email:
                owner_id = None
                owner_email = listing_data.owner_email
            else:
                raise BadRequestError("ownerEmail required")

            latitude, longitude = listing_data.resolve_coordinates()

            create_data = listing_data.model_dump(exclude={"lat", "lng", "location", "owner_email"})
            create_data.update({
                "latitude": latitude,
                "longitude": longitude,
                "owner_id": owner_id,
                "owner_email": owner_email,
                "verified": False,
            })

            listing = await self.listing_repo.create(create_data)
            logger.info(f"Listing created for {owner_email}: {listing.title} (ID: {listing.id})")
            return listing

        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to create listing: {e}", exc_info=True)
            raise InternalServerError("Failed to create listing")

    async def get_listing(self, listing_id: uuid.UUID) -> Listing:
        """
        Get a listing with its owner summary.

        Raises:
            ListingNotFoundError: If the listing doesn't exist
        """
        listing = await self.listing_repo.get_by_id(listing_id)
        if not listing:
            raise ListingNotFoundError()
        return listing

    async def query_listings(
        self,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        radius_m: Optional[float] = None
    ) -> List[Listing]:
        """
        Nearest-first listings around a point, or the most recent ones.

        Args:
            latitude: Centre latitude; both coordinates are needed for a radius query
            longitude: Centre longitude
            radius_m: Radius in metres, defaults to the configured radius

        Returns:
            At most ``listing_query_limit`` listings
        """
        limit = self.settings.listing_query_limit

        if latitude is None or longitude is None:
            return await self.listing_repo.get_recent(limit)

        if radius_m is None:
            radius_m = self.settings.listing_default_radius_m
        if radius_m < 0:
            raise BadRequestError("radius must be non-negative")

        matches = await self.listing_repo.find_within_radius(latitude, longitude, radius_m / 1000.0, limit)
        return [listing for listing, _ in matches]

    async def find_nearby_with_distance(
        self,
        latitude: float,
        longitude: float,
        radius_km: float,
        limit: int
    ) -> List[Tuple[Listing, float]]:
        """Listings within ``radius_km`` with their distance in kilometres, nearest first."""
        if radius_km < 0:
            raise BadRequestError("radius must be non-negative")
        if limit < 1:
            raise BadRequestError("limit must be at least 1")
        return await self.listing_repo.find_within_radius(latitude, longitude, radius_km, limit)

    async def search_listings(
        self,
        filters: ListingSearchFilters,
        page: int = 1,
        page_size: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Filtered, paginated search.

        Returns:
            Dictionary with total, items, page, page_size and total_pages
        """
        page_size = page_size or self.settings.default_page_size
        if page < 1:
            raise BadRequestError("page must be at least 1")
        if page_size < 1 or page_size > self.settings.max_page_size:
            raise BadRequestError(f"pageSize must be between 1 and {self.settings.max_page_size}")
        if (
            filters.min_price is not None
            and filters.max_price is not None
            and filters.min_price > filters.max_price
        ):
            raise BadRequestError("minPrice cannot be greater than maxPrice")

        skip = (page - 1) * page_size
        listings, total = await self.listing_repo.search_listings(filters, skip=skip, limit=page_size)

        return {
            "total": total,
            "items": listings,
            "page": page,
            "page_size": page_size,
            "total_pages": math.ceil(total / page_size) if total else 0,
        }

    async def update_listing(
        self,
        listing_id: uuid.UUID,
        listing_data: ListingUpdate,
        current_user: User
    ) -> Listing:
        """
        Partially update a listing.

        Raises:
            ListingNotFoundError: If the listing doesn't exist
            ListingOwnershipError: If the user is neither owner nor admin
            InsufficientPermissionsError: If a non-admin changes ``verified``
        """
        try:
            listing = await self.get_listing(listing_id)

            if not self._can_manage_listing(listing, current_user):
                logger.warning(f"User {current_user.email} denied update on listing {listing_id}")
                raise ListingOwnershipError()

            update_data = listing_data.model_dump(exclude_unset=True)

            if "verified" in update_data and not current_user.is_admin:
                raise InsufficientPermissionsError("change verification status")

            # Position changes only as a pair
            latitude = update_data.pop("latitude", None)
            longitude = update_data.pop("longitude", None)
            if latitude is not None and longitude is not None:
                update_data["latitude"] = latitude
                update_data["longitude"] = longitude

            if not update_data:
                return listing

            updated = await self.listing_repo.update(listing_id, update_data)
            if not updated:
                raise ListingNotFoundError()

            logger.info(f"Listing {listing_id} updated by {current_user.email}")
            return updated

        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to update listing {listing_id}: {e}", exc_info=True)
            raise InternalServerError("Failed to update listing")

    async def delete_listing(self, listing_id: uuid.UUID, current_user: User) -> bool:
        """
        Hard-delete a listing and its image records.
        Property requests that reference it are left in place.
        """
        try:
            listing = await self.get_listing(listing_id)

            if not self._can_manage_listing(listing, current_user):
                logger.warning(f"User {current_user.email} denied delete on listing {listing_id}")
                raise ListingOwnershipError()

            await self.image_repo.delete_by_listing_id(listing_id)
            deleted = await self.listing_repo.delete(listing_id)
            if not deleted:
                raise ListingNotFoundError()

            logger.info(f"Listing {listing_id} deleted by {current_user.email}")
            return True

        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to delete listing {listing_id}: {e}", exc_info=True)
            raise InternalServerError("Failed to delete listing")

    async def verify_listing(self, listing_id: uuid.UUID, current_user: User) -> Listing:
        """Mark a listing as verified. Administrators only."""
        if not current_user.is_admin:
            raise InsufficientPermissionsError("verify listings")

        await self.get_listing(listing_id)
        listing = await self.listing_repo.update(listing_id, {"verified": True})
        logger.info(f"Listing {listing_id} verified by {current_user.email}")
        return listing

    async def list_for_owner(self, current_user: User) -> List[Listing]:
        """Listings owned by the user, by reference or by owner email."""
        return await self.listing_repo.get_listings_for_owner(current_user)

    async def list_all(self, page: int = 1, page_size: Optional[int] = None) -> Dict[str, Any]:
        """Every listing, newest first, for the admin surface."""
        return await self.search_listings(ListingSearchFilters(), page=page, page_size=page_size)

    async def get_statistics(self) -> Dict[str, Any]:
        """Counts used by the admin dashboard."""
        try:
            listing_total = await self.listing_repo.count()
            return {
                "listings": {
                    "total": listing_total,
                    "by_status": await self.listing_repo.count_by("status"),
                    "verified": await self.listing_repo.count({"verified": True}),
                    "unverified": await self.listing_repo.count({"verified": False}),
                },
                "requests": {
                    "total": await self.request_repo.count(),
                    "by_status": await self.request_repo.count_by("status"),
                },
                "users": {
                    "total": await self.user_repo.count(),
                    "by_role": await self.user_repo.count_by("role"),
                },
            }
        except Exception as e:
            logger.error(f"Failed to collect statistics: {e}")
            raise InternalServerError("Failed to collect statistics")

    def _can_manage_listing(self, listing: Listing, user: User) -> bool:
        if user.is_admin:
            return True
        return listing.is_owned_by(user)
