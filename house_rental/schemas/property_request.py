"""
Pydantic schemas for property requests.
"""

from pydantic import BaseModel, ConfigDict, Field, AliasChoices
from typing import Optional, Literal
from datetime import datetime
import uuid
from house_rental.models.property_request import RequestStatus
from house_rental.schemas.user import UserSummary
from house_rental.schemas.listing import ListingSummary


class PropertyRequestCreate(BaseModel):
    """Schema for sending a request on a listing."""

    model_config = ConfigDict(populate_by_name=True)

    listing_id: Optional[uuid.UUID] = Field(
        None,
        validation_alias=AliasChoices("listing_id", "listingId"),
        description="Listing the request is about"
    )
    message: str = Field("", max_length=2000, description="Message to the owner")


class PropertyRequestStatusUpdate(BaseModel):
    """Owner decision on a pending request."""

    status: Literal["approved", "rejected"] = Field(..., description="New status")
    response: Optional[str] = Field(None, max_length=2000, description="Optional reply to the requester")


class PropertyRequestResponse(BaseModel):
    """Property request as returned by the API."""

    id: str
    user_id: str
    listing_id: Optional[str] = None
    message: str
    status: RequestStatus
    response: str
    user: Optional[UserSummary] = None
    listing: Optional[ListingSummary] = None
    created_at: datetime
    updated_at: datetime
