"""
ListingImage model for listing photo metadata.
Handles image ordering and the primary image flag per listing.
"""

from sqlalchemy import String, Integer, Boolean, ForeignKey, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from house_rental.database import Base
import uuid
from typing import Optional


class ListingImage(Base):
    """
    Image attached to a listing.
    At most one image per listing carries ``is_primary``.
    """

    __tablename__ = "listing_images"

    listing_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("listings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the listing this image belongs to"
    )

    url: Mapped[str] = mapped_column(
        String(1000),
        nullable=False,
        comment="Public URL of the image"
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="",
        comment="Display name or original filename"
    )

    size: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="File size in bytes"
    )

    width: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, comment="Image width in pixels")
    height: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, comment="Image height in pixels")

    is_primary: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        index=True,
        comment="Whether this is the primary image for the listing"
    )

    sort_order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Display order for image gallery"
    )

    def __repr__(self) -> str:
        """String representation of the listing image."""
        return f"<ListingImage(id={self.id}, listing_id={self.listing_id}, name={self.name})>"

    @property
    def aspect_ratio(self) -> Optional[float]:
        """Calculate aspect ratio if dimensions are available."""
        if self.width and self.height:
            return round(self.width / self.height, 2)
        return None

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "listing_id": str(self.listing_id),
            "url": self.url,
            "name": self.name,
            "size": self.size,
            "width": self.width,
            "height": self.height,
            "aspect_ratio": self.aspect_ratio,
            "is_primary": self.is_primary,
            "sort_order": self.sort_order,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


# Gallery ordering per listing
listing_images_index = Index(
    "idx_listing_images_listing_order",
    ListingImage.listing_id,
    ListingImage.sort_order.asc()
)
