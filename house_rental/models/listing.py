"""
Listing model for rental properties.
Handles listing data with geographic position, pricing, and owner references.
"""

from sqlalchemy import String, Text, Integer, Float, Numeric, Boolean, JSON, Enum as SQLEnum, Index, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from house_rental.database import Base
from decimal import Decimal
import enum
import uuid
from typing import Any, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from house_rental.models.user import User


class ListingStatus(str, enum.Enum):
    """Occupancy status of a listing."""
    AVAILABLE = "available"
    RENTED = "rented"
    SOLD = "sold"


class Listing(Base):
    """
    Rental listing published by an owner.

    The position is stored as two indexed float columns and exposed as a
    GeoJSON Point whose coordinates are always ``[longitude, latitude]``.
    """

    __tablename__ = "listings"

    # Basic listing information
    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Listing title"
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        comment="Free-text description"
    )

    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
        index=True,
        comment="Monthly rent"
    )

    deposit_amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
        default=Decimal("0"),
        comment="Security deposit"
    )

    # Location information
    location_text: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        default="",
        comment="Human-readable address"
    )

    latitude: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=0.0,
        comment="Latitude in degrees"
    )

    longitude: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=0.0,
        comment="Longitude in degrees"
    )

    # Property attributes
    property_type: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        index=True,
        comment="Category such as Apartment, House, Villa"
    )

    bedrooms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)
    bathrooms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    area: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, comment="Area in square feet")

    furnishing: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="Unfurnished",
        comment="Furnished, Semi-furnished or Unfurnished"
    )

    amenities: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    images: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list, comment="Ordered image URLs")

    available_for: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="Any",
        comment="Tenant preference such as Family, Bachelors, Any"
    )

    available_units: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Status and ownership
    status: Mapped[ListingStatus] = mapped_column(
        SQLEnum(ListingStatus, values_callable=lambda statuses: [s.value for s in statuses]),
        nullable=False,
        default=ListingStatus.AVAILABLE,
        index=True
    )

    verified: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        index=True,
        comment="Set by an administrator after review"
    )

    owner_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        comment="Owning user, if the listing was created while signed in"
    )

    owner_email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Denormalized owner email"
    )

    owner: Mapped[Optional["User"]] = relationship(
        "User",
        back_populates="listings",
        lazy="selectin"
    )

    def __repr__(self) -> str:
        """String representation of the listing."""
        return f"<Listing(id={self.id}, title={self.title[:30]}..., price={self.price})>"

    @property
    def location(self) -> Dict[str, Any]:
        """GeoJSON Point for the listing position."""
        return {"type": "Point", "coordinates": [self.longitude, self.latitude]}

    def is_owned_by(self, user: "User") -> bool:
        """Ownership by user reference or by denormalized email."""
        if self.owner_id is not None and self.owner_id == user.id:
            return True
        return bool(self.owner_email) and self.owner_email.lower() == user.email.lower()

    def to_dict(self, include_owner: bool = True) -> dict:
        """
        Convert listing to dictionary.

        Args:
            include_owner: Whether to embed the owner summary

        Returns:
            Dictionary representation of listing
        """
        result = {
            "id": str(self.id),
            "title": self.title,
            "description": self.description,
            "price": float(self.price),
            "deposit_amount": float(self.deposit_amount),
            "location_text": self.location_text,
            "location": self.location,
            "property_type": self.property_type,
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "area": self.area,
            "furnishing": self.furnishing,
            "amenities": list(self.amenities or []),
            "images": list(self.images or []),
            "available_for": self.available_for,
            "available_units": self.available_units,
            "status": self.status.value,
            "verified": self.verified,
            "owner_id": str(self.owner_id) if self.owner_id else None,
            "owner_email": self.owner_email,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

        if include_owner:
            result["owner"] = self.owner.to_summary() if self.owner else None

        return result

    def to_summary(self) -> dict:
        """Compact form embedded in property requests."""
        return {
            "id": str(self.id),
            "title": self.title,
            "location_text": self.location_text,
            "location": self.location,
            "price": float(self.price),
            "images": list(self.images or []),
            "owner_id": str(self.owner_id) if self.owner_id else None,
            "owner_email": self.owner_email,
        }


# Bounding-box prefilter for radius queries
coordinates_index = Index(
    "idx_listings_coordinates",
    Listing.latitude,
    Listing.longitude
)

# Owner dashboard lookups
owner_index = Index(
    "idx_listings_owner",
    Listing.owner_id,
    Listing.owner_email
)

# Search filters
search_index = Index(
    "idx_listings_search",
    Listing.price,
    Listing.bedrooms,
    Listing.property_type,
    Listing.verified
)
