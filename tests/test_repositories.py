"""
Tests for repository behaviour not covered through the services.
"""

import uuid
from decimal import Decimal

import pytest

from house_rental.models.listing import ListingStatus
from house_rental.models.user import UserRole
from house_rental.repositories.listing import ListingSearchFilters
from tests.conftest import ListingFactory, UserFactory


class TestBaseRepository:
    """Generic CRUD helpers, exercised through ListingRepository."""

    @pytest.mark.asyncio
    async def test_update_ignores_none(self, listing_repository):
        listing = await ListingFactory.create_listing(listing_repository, title="Before")

        updated = await listing_repository.update(listing.id, {"title": "After", "description": None})

        assert updated.title == "After"
        assert updated.description == "A test listing"

    @pytest.mark.asyncio
    async def test_update_missing(self, listing_repository):
        assert await listing_repository.update(uuid.uuid4(), {"title": "x"}) is None

    @pytest.mark.asyncio
    async def test_delete_missing(self, listing_repository):
        assert await listing_repository.delete(uuid.uuid4()) is False

    @pytest.mark.asyncio
    async def test_exists(self, listing_repository):
        listing = await ListingFactory.create_listing(listing_repository)

        assert await listing_repository.exists(listing.id)
        assert not await listing_repository.exists(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_count_by_enum_column(self, listing_repository):
        await ListingFactory.create_listing(listing_repository)
        await ListingFactory.create_listing(listing_repository)
        await ListingFactory.create_listing(listing_repository, status=ListingStatus.SOLD)

        assert await listing_repository.count_by("status") == {"available": 2, "sold": 1}

    @pytest.mark.asyncio
    async def test_bulk_create(self, listing_repository):
        created = await listing_repository.bulk_create([
            ListingFactory.create_listing_data(title="One"),
            ListingFactory.create_listing_data(title="Two"),
        ])

        assert [listing.title for listing in created] == ["One", "Two"]
        assert await listing_repository.count() == 2


class TestUserRepository:
    """Test UserRepository lookups."""

    @pytest.mark.asyncio
    async def test_email_lookup_is_case_insensitive(self, user_repository):
        user = await UserFactory.create_user(user_repository, email="Meera@Example.com")

        assert user.email == "meera@example.com"
        assert (await user_repository.get_by_email("MEERA@example.com")).id == user.id

    @pytest.mark.asyncio
    async def test_duplicate_email(self, user_repository):
        await UserFactory.create_user(user_repository, email="meera@example.com")

        with pytest.raises(ValueError, match="already exists"):
            await UserFactory.create_user(user_repository, email="meera@example.com")

    @pytest.mark.asyncio
    async def test_users_by_role(self, user_repository, test_user, test_owner, test_admin):
        owners = await user_repository.get_users_by_role(UserRole.OWNER)
        everyone = await user_repository.get_users_by_role()

        assert [user.id for user in owners] == [test_owner.id]
        assert len(everyone) == 3


class TestListingRepository:
    """Test search conditions directly."""

    @pytest.mark.asyncio
    async def test_text_search_is_case_insensitive(self, listing_repository):
        await ListingFactory.create_listing(listing_repository, title="Sea Facing Flat", location_text="Besant Nagar")
        await ListingFactory.create_listing(listing_repository, title="Garden House", description="Quiet street near the sea")
        await ListingFactory.create_listing(listing_repository, title="City studio")

        listings, total = await listing_repository.search_listings(ListingSearchFilters(q="SEA"))

        assert total == 2
        assert {listing.title for listing in listings} == {"Sea Facing Flat", "Garden House"}

    @pytest.mark.asyncio
    async def test_verified_false_means_any(self, listing_repository):
        await ListingFactory.create_listing(listing_repository, verified=True)
        await ListingFactory.create_listing(listing_repository)

        _, any_total = await listing_repository.search_listings(ListingSearchFilters(verified=False))
        _, verified_total = await listing_repository.search_listings(ListingSearchFilters(verified=True))

        assert (any_total, verified_total) == (2, 1)

    @pytest.mark.asyncio
    async def test_price_bounds_inclusive(self, listing_repository):
        await ListingFactory.create_listing(listing_repository, price=Decimal("10000"))
        await ListingFactory.create_listing(listing_repository, price=Decimal("20000"))

        _, total = await listing_repository.search_listings(
            ListingSearchFilters(min_price=Decimal("10000"), max_price=Decimal("20000"))
        )

        assert total == 2

    @pytest.mark.asyncio
    async def test_pagination(self, listing_repository):
        for i in range(5):
            await ListingFactory.create_listing(listing_repository, title=f"Listing {i}")

        page, total = await listing_repository.search_listings(ListingSearchFilters(), skip=2, limit=2)

        assert total == 5
        assert len(page) == 2
