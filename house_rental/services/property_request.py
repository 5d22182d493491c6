"""
Property request service implementing the owner review workflow.
Requests start pending and are approved or rejected once by the listing owner.
"""

from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from house_rental.config import Settings, get_settings
from house_rental.repositories.property_request import PropertyRequestRepository
from house_rental.repositories.listing import ListingRepository
from house_rental.models.property_request import PropertyRequest, RequestStatus
from house_rental.models.user import User
from house_rental.schemas.property_request import PropertyRequestCreate, PropertyRequestStatusUpdate
from house_rental.utils.policies import evaluate_request_review_access, is_review_superuser
from house_rental.utils.exceptions import (
    APIException,
    BadRequestError,
    ForbiddenError,
    NotFoundError,
    InternalServerError,
    ListingNotFoundError,
    DuplicatePendingRequestError,
    InvalidStatusTransitionError
)
import uuid
import logging

logger = logging.getLogger(__name__)


class PropertyRequestService:
    """
    Service for property requests.

    The duplicate pending check is a read followed by a write without a lock
    or unique index; two concurrent submissions can both pass it.
    """

    def __init__(self, db_session: AsyncSession, settings: Optional[Settings] = None):
        self.db = db_session
        self.settings = settings or get_settings()
        self.request_repo = PropertyRequestRepository(db_session)
        self.listing_repo = ListingRepository(db_session)

    async def create_request(self, request_data: PropertyRequestCreate, current_user: User) -> PropertyRequest:
        """
        Send a request on a listing.

        Raises:
            BadRequestError: If the listing id is missing or a pending request exists
            ListingNotFoundError: If the listing doesn't exist
        """
        try:
            if request_data.listing_id is None:
                raise BadRequestError("Listing ID is required")

            listing = await self.listing_repo.get_by_id(request_data.listing_id)
            if not listing:
                raise ListingNotFoundError()

            existing = await self.request_repo.get_pending(current_user.id, listing.id)
            if existing:
                raise DuplicatePendingRequestError()

            property_request = await self.request_repo.create({
                "user_id": current_user.id,
                "listing_id": listing.id,
                "message": request_data.message or "",
                "status": RequestStatus.PENDING,
                "response": "",
            })

            logger.info(f"Request {property_request.id} sent by {current_user.email} on listing {listing.id}")
            return property_request

        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to create property request for {current_user.email}: {e}", exc_info=True)
            raise InternalServerError("Failed to create property request")

    async def list_for_user(self, current_user: User) -> List[PropertyRequest]:
        """Requests the user has sent, newest first."""
        return await self.request_repo.list_for_user(current_user.id)

    async def list_for_owner(self, current_user: User) -> List[PropertyRequest]:
        """
        Requests on the user's listings, newest first.
        The review superuser sees every request.
        """
        if is_review_superuser(current_user, self.settings):
            return await self.request_repo.list_all()
        return await self.request_repo.list_for_owner(current_user)

    async def update_status(
        self,
        request_id: uuid.UUID,
        status_data: PropertyRequestStatusUpdate,
        current_user: User
    ) -> PropertyRequest:
        """
        Approve or reject a pending request.

        Raises:
            NotFoundError: If the request or its listing is missing
            ForbiddenError: If the review policy denies the user
            InvalidStatusTransitionError: If the request was already decided
        """
        try:
            property_request = await self.request_repo.get_by_id(request_id)
            if not property_request:
                raise NotFoundError("Property request", detail="Request not found")

            listing = None
            if property_request.listing_id is not None:
                listing = await self.listing_repo.get_by_id(property_request.listing_id)
            if not listing:
                raise ListingNotFoundError("Listing not found for this request")

            decision = evaluate_request_review_access(listing, current_user, self.settings)
            if not decision:
                logger.warning(
                    f"User {current_user.email} denied review of request {request_id}: {decision.reason}"
                )
                raise ForbiddenError("Not authorized to update this request")

            if property_request.status.is_terminal:
                raise InvalidStatusTransitionError(property_request.status.value)

            new_status = RequestStatus(status_data.status)
            updated = await self.request_repo.update(request_id, {
                "status": new_status,
                "response": status_data.response or "",
            })

            logger.info(
                f"Request {request_id} {new_status.value} by {current_user.email} ({decision.reason})"
            )
            return updated

        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to update property request {request_id}: {e}", exc_info=True)
            raise InternalServerError("Failed to update property request")

    async def delete_request(self, request_id: uuid.UUID, current_user: User) -> bool:
        """
        Withdraw a request. Only the requester may delete it.
        """
        property_request = await self.request_repo.get_by_id(request_id)
        if not property_request:
            raise NotFoundError("Property request", detail="Request not found")

        if property_request.user_id != current_user.id:
            logger.warning(f"User {current_user.email} denied delete of request {request_id}")
            raise ForbiddenError("Not authorized to delete this request")

        await self.request_repo.delete(request_id)
        logger.info(f"Request {request_id} deleted by {current_user.email}")
        return True
