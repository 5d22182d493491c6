"""
Pydantic schemas for listing image requests and responses.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
import uuid


class ListingImageCreate(BaseModel):
    """Image metadata attached to a listing."""

    url: str = Field(
        ...,
        min_length=1,
        max_length=1000,
        description="Public URL of the image",
        examples=["/uploads/3f2b9c1e.jpg"]
    )
    name: str = Field("", max_length=255, description="Display name or original filename")
    size: Optional[int] = Field(None, ge=0, description="File size in bytes")
    width: Optional[int] = Field(None, gt=0, description="Image width in pixels")
    height: Optional[int] = Field(None, gt=0, description="Image height in pixels")
    is_primary: bool = Field(False, description="Whether this is the primary image")
    sort_order: Optional[int] = Field(None, ge=0, description="Gallery position; appended when omitted")


class ListingImageUpdate(BaseModel):
    """Schema for updating image metadata."""

    name: Optional[str] = Field(None, max_length=255)
    sort_order: Optional[int] = Field(None, ge=0)
    is_primary: Optional[bool] = None


class ListingImageResponse(BaseModel):
    id: str
    listing_id: str
    url: str
    name: str
    size: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    aspect_ratio: Optional[float] = None
    is_primary: bool
    sort_order: int
    created_at: datetime
    updated_at: datetime


class ImageReorderRequest(BaseModel):
    image_ids: List[uuid.UUID] = Field(..., min_length=1, description="Image ids in the new display order")


class ImageUploadResponse(BaseModel):
    """URLs of stored uploads, in the order the files were sent."""

    urls: List[str]
