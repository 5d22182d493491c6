"""
Tests for the property request review policy.
"""

import uuid

from house_rental.config import Settings
from house_rental.models.listing import Listing
from house_rental.models.user import User, UserRole
from house_rental.utils.policies import evaluate_request_review_access, is_review_superuser


def make_user(email: str, role: UserRole = UserRole.USER) -> User:
    return User(id=uuid.uuid4(), name="Someone", email=email, role=role, hashed_password="x", is_active=True)


def make_listing(owner: User = None, owner_email: str = "owner@example.com") -> Listing:
    return Listing(
        id=uuid.uuid4(),
        title="Listing",
        price=1000,
        owner_id=owner.id if owner else None,
        owner_email=owner.email if owner else owner_email,
    )


BYPASS_EMAIL = "reviewer@example.com"


class TestEvaluateRequestReviewAccess:
    """Test evaluate_request_review_access."""

    def test_owner_by_id(self):
        owner = make_user("owner@example.com")
        decision = evaluate_request_review_access(make_listing(owner), owner, Settings())
        assert decision.allowed
        assert decision.reason == "owner_id_match"

    def test_owner_by_email_case_insensitive(self):
        listing = make_listing(owner_email="Owner@Example.com")
        decision = evaluate_request_review_access(listing, make_user("owner@example.com"), Settings())
        assert decision
        assert decision.reason == "owner_email_match"

    def test_stranger_denied(self):
        listing = make_listing(owner_email="owner@example.com")
        decision = evaluate_request_review_access(listing, make_user("stranger@example.com"), Settings())
        assert not decision
        assert decision.reason == "not_listing_owner"

    def test_admin_is_not_a_reviewer(self):
        listing = make_listing(owner_email="owner@example.com")
        admin = make_user("admin@example.com", UserRole.ADMIN)
        assert not evaluate_request_review_access(listing, admin, Settings())

    def test_superuser_when_enabled(self):
        settings = Settings(request_review_bypass_enabled=True, request_review_bypass_email=BYPASS_EMAIL)
        decision = evaluate_request_review_access(make_listing(), make_user(BYPASS_EMAIL), settings)
        assert decision.allowed
        assert decision.reason == "review_superuser"

    def test_superuser_email_ignored_when_disabled(self):
        settings = Settings(request_review_bypass_enabled=False, request_review_bypass_email=BYPASS_EMAIL)
        assert not evaluate_request_review_access(make_listing(), make_user(BYPASS_EMAIL), settings)


class TestIsReviewSuperuser:
    """Test is_review_superuser."""

    def test_requires_email(self):
        settings = Settings(request_review_bypass_enabled=True, request_review_bypass_email=None)
        assert not is_review_superuser(make_user(BYPASS_EMAIL), settings)

    def test_configured_email_is_normalized(self):
        settings = Settings(request_review_bypass_enabled=True, request_review_bypass_email=" Reviewer@Example.com ")
        assert is_review_superuser(make_user(BYPASS_EMAIL), settings)

    def test_other_user(self):
        settings = Settings(request_review_bypass_enabled=True, request_review_bypass_email=BYPASS_EMAIL)
        assert not is_review_superuser(make_user("someone@example.com"), settings)
