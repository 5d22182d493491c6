"""
Access policies for the property request review workflow.
"""

from dataclasses import dataclass
from typing import Optional
from house_rental.config import Settings
from house_rental.models.listing import Listing
from house_rental.models.user import User


@dataclass(frozen=True)
class RequestAccessDecision:
    """Outcome of a review access check."""

    allowed: bool
    reason: str

    def __bool__(self) -> bool:
        return self.allowed


def is_review_superuser(user: User, settings: Settings) -> bool:
    """Whether ``user`` is the configured request review superuser."""
    bypass_email: Optional[str] = settings.request_review_bypass_email
    if not settings.request_review_bypass_enabled or not bypass_email:
        return False
    return user.email.lower() == bypass_email


def evaluate_request_review_access(listing: Listing, user: User, settings: Settings) -> RequestAccessDecision:
    """
    Decide whether ``user`` may approve or reject requests on ``listing``.

    Allowed for the listing owner (by user reference or owner email) and for
    the review superuser when that is enabled in settings.
    """
    if listing.owner_id is not None and listing.owner_id == user.id:
        return RequestAccessDecision(True, "owner_id_match")

    if listing.owner_email and listing.owner_email.lower() == user.email.lower():
        return RequestAccessDecision(True, "owner_email_match")

    if is_review_superuser(user, settings):
        return RequestAccessDecision(True, "review_superuser")

    return RequestAccessDecision(False, "not_listing_owner")
