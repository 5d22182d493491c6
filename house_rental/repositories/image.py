"""
Repository for ListingImage model operations.
Handles gallery ordering and the primary image flag.
"""

import uuid
import logging
from typing import List
from sqlalchemy import select, update, delete, func, and_
from sqlalchemy.ext.asyncio import AsyncSession

from house_rental.models.image import ListingImage
from house_rental.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ImageRepository(BaseRepository[ListingImage]):
    """Repository for ListingImage database operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(ListingImage, db)

    async def get_by_listing_id(self, listing_id: uuid.UUID) -> List[ListingImage]:
        """
        Get all images for a listing ordered by sort order.

        Args:
            listing_id: ID of the listing

        Returns:
            List of listing images
        """
        query = (
            select(ListingImage)
            .where(ListingImage.listing_id == listing_id)
            .order_by(ListingImage.sort_order.asc(), ListingImage.created_at.asc())
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def count_by_listing_id(self, listing_id: uuid.UUID) -> int:
        query = select(func.count(ListingImage.id)).where(ListingImage.listing_id == listing_id)
        result = await self.db.execute(query)
        return result.scalar() or 0

    async def set_primary(self, listing_id: uuid.UUID, image_id: uuid.UUID) -> bool:
        """
        Make one image the primary image of its listing.
        Clearing the old flag and setting the new one commit together.

        Returns:
            True if the image was found and updated
        """
        try:
            await self.db.execute(
                update(ListingImage)
                .where(ListingImage.listing_id == listing_id)
                .values(is_primary=False)
            )
            result = await self.db.execute(
                update(ListingImage)
                .where(and_(ListingImage.id == image_id, ListingImage.listing_id == listing_id))
                .values(is_primary=True)
            )
            if result.rowcount == 0:
                await self.db.rollback()
                return False

            await self.db.commit()
            logger.debug(f"Set primary image {image_id} for listing {listing_id}")
            return True
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to set primary image {image_id} for listing {listing_id}: {e}")
            raise

    async def update_sort_orders(self, listing_id: uuid.UUID, image_ids: List[uuid.UUID]) -> int:
        """
        Assign sort orders following the position of each id in ``image_ids``.

        Returns:
            Number of images updated
        """
        try:
            updated = 0
            for position, image_id in enumerate(image_ids):
                result = await self.db.execute(
                    update(ListingImage)
                    .where(and_(ListingImage.id == image_id, ListingImage.listing_id == listing_id))
                    .values(sort_order=position)
                )
                updated += result.rowcount
            await self.db.commit()
            return updated
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to reorder images for listing {listing_id}: {e}")
            raise

    async def delete_by_listing_id(self, listing_id: uuid.UUID) -> int:
        """
        Delete all images for a listing.
        The caller commits.
        """
        result = await self.db.execute(delete(ListingImage).where(ListingImage.listing_id == listing_id))
        return result.rowcount or 0
