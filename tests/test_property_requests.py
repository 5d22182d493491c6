"""
Tests for the property request workflow.
"""

import asyncio
import uuid

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from house_rental.config import Settings
from house_rental.models.property_request import PropertyRequest, RequestStatus
from house_rental.models.user import User
from house_rental.repositories.property_request import PropertyRequestRepository
from house_rental.schemas.property_request import PropertyRequestCreate, PropertyRequestStatusUpdate
from house_rental.services.property_request import PropertyRequestService
from house_rental.utils.exceptions import (
    BadRequestError,
    DuplicatePendingRequestError,
    ForbiddenError,
    InvalidStatusTransitionError,
    ListingNotFoundError,
    NotFoundError
)
from tests.conftest import ListingFactory, UserFactory


async def send_request(service: PropertyRequestService, user: User, listing, message: str = "Is it available?"):
    return await service.create_request(PropertyRequestCreate(listing_id=listing.id, message=message), user)


class TestCreateRequest:
    """Test sending requests."""

    @pytest.mark.asyncio
    async def test_creates_pending_request(self, request_service: PropertyRequestService, test_user, test_listing):
        property_request = await send_request(request_service, test_user, test_listing)

        assert property_request.status == RequestStatus.PENDING
        assert property_request.response == ""
        data = property_request.to_dict()
        assert data["user"]["email"] == test_user.email
        assert data["listing"]["title"] == test_listing.title

    @pytest.mark.asyncio
    async def test_listing_id_required(self, request_service: PropertyRequestService, test_user):
        with pytest.raises(BadRequestError, match="Listing ID is required"):
            await request_service.create_request(PropertyRequestCreate(), test_user)

    @pytest.mark.asyncio
    async def test_unknown_listing(self, request_service: PropertyRequestService, test_user):
        with pytest.raises(ListingNotFoundError):
            await request_service.create_request(PropertyRequestCreate(listing_id=uuid.uuid4()), test_user)

    @pytest.mark.asyncio
    async def test_duplicate_pending_rejected(
        self,
        request_service: PropertyRequestService,
        request_repository: PropertyRequestRepository,
        test_user,
        test_listing
    ):
        await send_request(request_service, test_user, test_listing)

        with pytest.raises(DuplicatePendingRequestError, match="already have a pending request"):
            await send_request(request_service, test_user, test_listing)

        assert await request_repository.count({"user_id": test_user.id, "status": RequestStatus.PENDING}) == 1

    @pytest.mark.asyncio
    async def test_new_request_allowed_after_decision(self, request_service, test_user, test_owner, test_listing):
        first = await send_request(request_service, test_user, test_listing)
        await request_service.update_status(first.id, PropertyRequestStatusUpdate(status="rejected"), test_owner)

        second = await send_request(request_service, test_user, test_listing)
        assert second.status == RequestStatus.PENDING

    @pytest.mark.asyncio
    async def test_other_users_are_independent(self, request_service, test_user, other_user, test_listing):
        await send_request(request_service, test_user, test_listing)
        other = await send_request(request_service, other_user, test_listing)
        assert other.status == RequestStatus.PENDING

    @pytest.mark.asyncio
    async def test_racing_submissions_both_persist(
        self,
        db_engine,
        test_settings: Settings,
        request_repository: PropertyRequestRepository,
        test_user,
        test_listing,
        monkeypatch
    ):
        """
        The duplicate check is a read before the write. When two submissions
        on separate sessions both read before either writes, both are stored.
        """
        real_get_pending = PropertyRequestRepository.get_pending
        seen = []
        both_checked = asyncio.Event()

        async def get_pending_then_wait(self, user_id, listing_id):
            existing = await real_get_pending(self, user_id, listing_id)
            seen.append(existing)
            if len(seen) == 2:
                both_checked.set()
            await asyncio.wait_for(both_checked.wait(), timeout=5)
            return existing

        # Both sessions share one SQLite connection, so the inserts take turns
        write_lock = asyncio.Lock()
        real_create = PropertyRequestRepository.create

        async def create_in_turn(self, obj_in):
            async with write_lock:
                return await real_create(self, obj_in)

        monkeypatch.setattr(PropertyRequestRepository, "get_pending", get_pending_then_wait)
        monkeypatch.setattr(PropertyRequestRepository, "create", create_in_turn)

        session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
        async with session_factory() as first_session, session_factory() as second_session:
            first = PropertyRequestService(first_session, test_settings)
            second = PropertyRequestService(second_session, test_settings)

            created = await asyncio.gather(
                send_request(first, test_user, test_listing),
                send_request(second, test_user, test_listing)
            )

        assert seen == [None, None]
        assert created[0].id != created[1].id
        assert await request_repository.count({"user_id": test_user.id, "status": RequestStatus.PENDING}) == 2


class TestListRequests:
    """Test requester and owner views."""

    @pytest.mark.asyncio
    async def test_list_for_user_newest_first(self, request_service, listing_repository, test_user, test_owner, test_listing):
        second_listing = await ListingFactory.create_listing(listing_repository, owner=test_owner, title="Second")
        first = await send_request(request_service, test_user, test_listing)
        second = await send_request(request_service, test_user, second_listing)

        requests = await request_service.list_for_user(test_user)

        assert [r.id for r in requests] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_list_for_owner_by_id_and_email(
        self, request_service, listing_repository, test_user, test_owner, test_listing
    ):
        by_email = await ListingFactory.create_listing(listing_repository, owner_email="Owner@Example.com")
        foreign = await ListingFactory.create_listing(listing_repository, owner_email="someone@example.com")

        owned_by_id = await send_request(request_service, test_user, test_listing)
        owned_by_email = await send_request(request_service, test_user, by_email)
        await send_request(request_service, test_user, foreign)

        requests = await request_service.list_for_owner(test_owner)

        assert [r.id for r in requests] == [owned_by_email.id, owned_by_id.id]

    @pytest.mark.asyncio
    async def test_review_superuser_sees_all(self, db_session, request_service, user_repository, test_user, test_listing):
        reviewer = await UserFactory.create_user(user_repository, email="reviewer@example.com")
        await send_request(request_service, test_user, test_listing)

        settings = Settings(request_review_bypass_enabled=True, request_review_bypass_email="reviewer@example.com")
        service = PropertyRequestService(db_session, settings)

        assert len(await service.list_for_owner(reviewer)) == 1
        assert len(await request_service.list_for_owner(reviewer)) == 0


class TestUpdateStatus:
    """Test approving and rejecting requests."""

    @pytest.mark.asyncio
    async def test_owner_approves_with_response(self, request_service, test_user, test_owner, test_listing):
        property_request = await send_request(request_service, test_user, test_listing)

        updated = await request_service.update_status(
            property_request.id,
            PropertyRequestStatusUpdate(status="approved", response="Come by on Sunday"),
            test_owner
        )

        assert updated.status == RequestStatus.APPROVED
        assert updated.response == "Come by on Sunday"

    @pytest.mark.asyncio
    async def test_response_defaults_to_empty(self, request_service, test_user, test_owner, test_listing):
        property_request = await send_request(request_service, test_user, test_listing)
        updated = await request_service.update_status(
            property_request.id, PropertyRequestStatusUpdate(status="rejected"), test_owner
        )
        assert updated.status == RequestStatus.REJECTED
        assert updated.response == ""

    @pytest.mark.asyncio
    async def test_owner_by_email(self, request_service, listing_repository, test_user, test_owner):
        listing = await ListingFactory.create_listing(listing_repository, owner_email=test_owner.email)
        property_request = await send_request(request_service, test_user, listing)

        updated = await request_service.update_status(
            property_request.id, PropertyRequestStatusUpdate(status="approved"), test_owner
        )
        assert updated.status == RequestStatus.APPROVED

    @pytest.mark.asyncio
    async def test_non_owner_denied_without_mutation(
        self, request_service, request_repository, test_user, other_user, test_admin, test_listing
    ):
        property_request = await send_request(request_service, test_user, test_listing)

        for intruder in (other_user, test_user, test_admin):
            with pytest.raises(ForbiddenError, match="Not authorized"):
                await request_service.update_status(
                    property_request.id, PropertyRequestStatusUpdate(status="approved"), intruder
                )

        stored = await request_repository.get_by_id(property_request.id)
        assert stored.status == RequestStatus.PENDING
        assert stored.response == ""

    @pytest.mark.asyncio
    async def test_review_superuser_when_enabled(self, db_session, request_service, user_repository, test_user, test_listing):
        reviewer = await UserFactory.create_user(user_repository, email="reviewer@example.com")
        property_request = await send_request(request_service, test_user, test_listing)

        with pytest.raises(ForbiddenError):
            await request_service.update_status(
                property_request.id, PropertyRequestStatusUpdate(status="approved"), reviewer
            )

        settings = Settings(request_review_bypass_enabled=True, request_review_bypass_email="reviewer@example.com")
        updated = await PropertyRequestService(db_session, settings).update_status(
            property_request.id, PropertyRequestStatusUpdate(status="approved"), reviewer
        )
        assert updated.status == RequestStatus.APPROVED

    @pytest.mark.asyncio
    async def test_decided_request_is_terminal(self, request_service, test_user, test_owner, test_listing):
        property_request = await send_request(request_service, test_user, test_listing)
        await request_service.update_status(property_request.id, PropertyRequestStatusUpdate(status="approved"), test_owner)

        with pytest.raises(InvalidStatusTransitionError):
            await request_service.update_status(
                property_request.id, PropertyRequestStatusUpdate(status="rejected"), test_owner
            )

    @pytest.mark.asyncio
    async def test_unknown_request(self, request_service, test_owner):
        with pytest.raises(NotFoundError, match="Request not found"):
            await request_service.update_status(uuid.uuid4(), PropertyRequestStatusUpdate(status="approved"), test_owner)

    @pytest.mark.asyncio
    async def test_listing_deleted(self, request_service, listing_service, request_repository, test_user, test_owner, test_listing):
        property_request = await send_request(request_service, test_user, test_listing)
        await listing_service.delete_listing(test_listing.id, test_owner)

        result = await request_repository.db.execute(
            select(PropertyRequest)
            .where(PropertyRequest.id == property_request.id)
            .execution_options(populate_existing=True)
        )
        kept = result.scalar_one()
        assert kept.listing_id == test_listing.id
        assert kept.listing is None
        assert kept.to_dict()["listing"] is None

        with pytest.raises(ListingNotFoundError, match="Listing not found for this request"):
            await request_service.update_status(
                property_request.id, PropertyRequestStatusUpdate(status="approved"), test_owner
            )


class TestDeleteRequest:
    """Test withdrawing requests."""

    @pytest.mark.asyncio
    async def test_requester_deletes(self, request_service, request_repository, test_user, test_listing):
        property_request = await send_request(request_service, test_user, test_listing)

        assert await request_service.delete_request(property_request.id, test_user) is True
        assert await request_repository.exists(property_request.id) is False

    @pytest.mark.asyncio
    async def test_others_cannot_delete(self, request_service, test_user, test_owner, test_listing):
        property_request = await send_request(request_service, test_user, test_listing)

        with pytest.raises(ForbiddenError):
            await request_service.delete_request(property_request.id, test_owner)

    @pytest.mark.asyncio
    async def test_unknown_request(self, request_service, test_user):
        with pytest.raises(NotFoundError):
            await request_service.delete_request(uuid.uuid4(), test_user)
