"""
PropertyRequest model for tenant inquiries on listings.
Tracks the pending → approved | rejected review workflow.
"""

from sqlalchemy import String, Text, ForeignKey, Index, Uuid, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from house_rental.database import Base
import enum
import uuid
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from house_rental.models.user import User
    from house_rental.models.listing import Listing


class RequestStatus(str, enum.Enum):
    """Review status of a property request."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not RequestStatus.PENDING


class PropertyRequest(Base):
    """
    Request sent by a user to a listing owner.

    ``listing_id`` carries no foreign key: deleting a listing leaves the id
    in place on every backend, the ``listing`` relationship then loads None
    and the request stays visible to its requester.
    """

    __tablename__ = "property_requests"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Requesting user"
    )

    listing_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        nullable=True,
        index=True,
        comment="Requested listing; may outlive the listing"
    )

    message: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        comment="Message from the requester"
    )

    status: Mapped[RequestStatus] = mapped_column(
        SQLEnum(RequestStatus, values_callable=lambda statuses: [s.value for s in statuses]),
        nullable=False,
        default=RequestStatus.PENDING,
        index=True
    )

    response: Mapped[str] = mapped_column(
        String(2000),
        nullable=False,
        default="",
        comment="Owner response text"
    )

    user: Mapped["User"] = relationship("User", lazy="selectin")
    listing: Mapped[Optional["Listing"]] = relationship(
        "Listing",
        primaryjoin="foreign(PropertyRequest.listing_id) == Listing.id",
        viewonly=True,
        lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<PropertyRequest(id={self.id}, user_id={self.user_id}, listing_id={self.listing_id}, status={self.status})>"

    def to_dict(self) -> dict:
        """
        Convert property request to dictionary with requester and listing summaries.

        Returns:
            Dictionary representation of the request
        """
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "listing_id": str(self.listing_id) if self.listing_id else None,
            "message": self.message,
            "status": self.status.value,
            "response": self.response or "",
            "user": self.user.to_summary() if self.user else None,
            "listing": self.listing.to_summary() if self.listing else None,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


# Duplicate pending lookups (no uniqueness constraint)
pending_lookup_index = Index(
    "idx_property_requests_user_listing_status",
    PropertyRequest.user_id,
    PropertyRequest.listing_id,
    PropertyRequest.status
)
