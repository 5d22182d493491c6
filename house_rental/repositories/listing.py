"""
Listing repository with geospatial radius queries and filtered search.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, or_, func, desc
from house_rental.repositories.base import BaseRepository
from house_rental.models.listing import Listing
from house_rental.models.user import User
from house_rental.utils.geo import haversine_distance, bounding_box
from typing import Optional, List, Tuple
from decimal import Decimal
import logging

logger = logging.getLogger(__name__)


class ListingSearchFilters:
    """Data class for listing search filters."""

    def __init__(
        self,
        q: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        category: Optional[str] = None,
        furnished: Optional[str] = None,
        verified: Optional[bool] = None,
        min_beds: Optional[int] = None,
        min_baths: Optional[int] = None
    ):
        self.q = q
        self.min_price = min_price
        self.max_price = max_price
        self.category = category
        self.furnished = furnished
        self.verified = verified
        self.min_beds = min_beds
        self.min_baths = min_baths


class ListingRepository(BaseRepository[Listing]):
    """
    Repository for listings.
    Radius queries narrow candidates on the indexed coordinate columns and rank
    them by Haversine distance.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Listing, db)

    async def find_within_radius(
        self,
        latitude: float,
        longitude: float,
        radius_km: float,
        limit: int
    ) -> List[Tuple[Listing, float]]:
        """
        Listings within ``radius_km`` of a point, nearest first.

        Args:
            latitude: Centre latitude in degrees
            longitude: Centre longitude in degrees
            radius_km: Search radius in kilometres
            limit: Maximum number of results

        Returns:
            List of (listing, distance_km) pairs in ascending distance
        """
        try:
            min_lat, max_lat, min_lng, max_lng = bounding_box(latitude, longitude, radius_km)
            query = select(Listing).where(
                and_(
                    Listing.latitude >= min_lat,
                    Listing.latitude <= max_lat,
                    Listing.longitude >= min_lng,
                    Listing.longitude <= max_lng,
                )
            )

            result = await self.db.execute(query)
            candidates = result.scalars().all()

            matches = []
            for listing in candidates:
                distance = haversine_distance(latitude, longitude, listing.latitude, listing.longitude)
                if distance <= radius_km:
                    matches.append((listing, distance))

            matches.sort(key=lambda pair: pair[1])
            logger.debug(
                f"Radius query at ({latitude}, {longitude}) r={radius_km}km: "
                f"{len(candidates)} candidates, {len(matches)} matches"
            )
            return matches[:limit]
        except Exception as e:
            logger.error(f"Failed radius query at ({latitude}, {longitude}): {e}")
            raise

    async def get_recent(self, limit: int) -> List[Listing]:
        """Most recently created listings."""
        return await self.get_multi(skip=0, limit=limit, order_by="-created_at")

    async def search_listings(
        self,
        filters: ListingSearchFilters,
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[Listing], int]:
        """
        Search listings with filtering and pagination, newest first.

        Returns:
            Tuple of (listings list, total count)
        """
        try:
            query = select(Listing)
            count_query = select(func.count(Listing.id))

            conditions = self._build_filter_conditions(filters)
            if conditions:
                query = query.where(and_(*conditions))
                count_query = count_query.where(and_(*conditions))

            count_result = await self.db.execute(count_query)
            total_count = count_result.scalar()

            query = query.order_by(desc(Listing.created_at)).offset(skip).limit(limit)
            result = await self.db.execute(query)
            listings = result.scalars().all()

            logger.debug(f"Listing search returned {len(listings)} of {total_count} total results")
            return list(listings), total_count
        except Exception as e:
            logger.error(f"Failed to search listings: {e}")
            raise

    def _build_filter_conditions(self, filters: ListingSearchFilters) -> List:
        conditions = []

        # Free text over title, address and description
        if filters.q:
            search_term = f"%{filters.q}%"
            conditions.append(
                or_(
                    Listing.title.ilike(search_term),
                    Listing.location_text.ilike(search_term),
                    Listing.description.ilike(search_term)
                )
            )

        if filters.min_price is not None:
            conditions.append(Listing.price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(Listing.price <= filters.max_price)

        if filters.category:
            conditions.append(Listing.property_type == filters.category)
        if filters.furnished:
            conditions.append(Listing.furnishing == filters.furnished)

        # Only a true flag narrows; verified=false means "any"
        if filters.verified:
            conditions.append(Listing.verified.is_(True))

        if filters.min_beds is not None:
            conditions.append(Listing.bedrooms >= filters.min_beds)
        if filters.min_baths is not None:
            conditions.append(Listing.bathrooms >= filters.min_baths)

        return conditions

    async def get_listings_for_owner(self, user: User) -> List[Listing]:
        """
        Listings owned by a user, matched by owner reference or owner email.
        """
        try:
            query = (
                select(Listing)
                .where(
                    or_(
                        Listing.owner_id == user.id,
                        func.lower(Listing.owner_email) == user.email.lower()
                    )
                )
                .order_by(desc(Listing.created_at))
            )
            result = await self.db.execute(query)
            listings = result.scalars().all()
            logger.debug(f"Retrieved {len(listings)} listings for owner {user.email}")
            return list(listings)
        except Exception as e:
            logger.error(f"Failed to get listings for owner {user.email}: {e}")
            raise
