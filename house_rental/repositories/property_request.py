"""
Property request repository for the request review workflow.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, or_, func, desc
from house_rental.repositories.base import BaseRepository
from house_rental.models.property_request import PropertyRequest, RequestStatus
from house_rental.models.listing import Listing
from house_rental.models.user import User
from typing import Optional, List
import uuid
import logging

logger = logging.getLogger(__name__)


class PropertyRequestRepository(BaseRepository[PropertyRequest]):
    """Repository for property requests; requester and listing load eagerly."""

    def __init__(self, db: AsyncSession):
        super().__init__(PropertyRequest, db)

    async def get_pending(self, user_id: uuid.UUID, listing_id: uuid.UUID) -> Optional[PropertyRequest]:
        """
        Pending request by a user for a listing, if one exists.
        """
        try:
            query = (
                select(PropertyRequest)
                .where(
                    and_(
                        PropertyRequest.user_id == user_id,
                        PropertyRequest.listing_id == listing_id,
                        PropertyRequest.status == RequestStatus.PENDING
                    )
                )
                .limit(1)
            )
            result = await self.db.execute(query)
            return result.scalars().first()
        except Exception as e:
            logger.error(f"Failed to look up pending request for user {user_id} on listing {listing_id}: {e}")
            raise

    async def list_for_user(self, user_id: uuid.UUID) -> List[PropertyRequest]:
        """Requests made by a user, newest first."""
        return await self.get_multi(
            skip=0,
            limit=1000,
            filters={"user_id": user_id},
            order_by="-created_at"
        )

    async def list_for_owner(self, owner: User) -> List[PropertyRequest]:
        """
        Requests on listings owned by ``owner`` by reference or by email, newest first.
        """
        try:
            query = (
                select(PropertyRequest)
                .join(Listing, PropertyRequest.listing_id == Listing.id)
                .where(
                    or_(
                        Listing.owner_id == owner.id,
                        func.lower(Listing.owner_email) == owner.email.lower()
                    )
                )
                .order_by(desc(PropertyRequest.created_at))
            )
            result = await self.db.execute(query)
            requests = result.scalars().all()
            logger.debug(f"Retrieved {len(requests)} requests for owner {owner.email}")
            return list(requests)
        except Exception as e:
            logger.error(f"Failed to get requests for owner {owner.email}: {e}")
            raise

    async def list_all(self) -> List[PropertyRequest]:
        """Every request, newest first."""
        result = await self.db.execute(select(PropertyRequest).order_by(desc(PropertyRequest.created_at)))
        return list(result.scalars().all())
