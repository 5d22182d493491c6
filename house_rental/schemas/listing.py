"""
Pydantic schemas for listing requests and responses.
Handles coordinate input normalization, partial updates and search results.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, AliasChoices, field_validator, model_validator
from typing import Optional, List, Literal, Tuple
from datetime import datetime
from decimal import Decimal
from house_rental.models.listing import ListingStatus
from house_rental.schemas.user import UserSummary


class GeoPoint(BaseModel):
    """GeoJSON Point; coordinates are ``[longitude, latitude]``."""

    type: Literal["Point"] = "Point"
    coordinates: List[float] = Field(
        ...,
        min_length=2,
        max_length=2,
        description="[longitude, latitude]",
        examples=[[80.2707, 13.0827]]
    )

    @field_validator("coordinates")
    @classmethod
    def validate_coordinates(cls, v):
        lng, lat = v
        if not -180 <= lng <= 180:
            raise ValueError("Longitude must be between -180 and 180")
        if not -90 <= lat <= 90:
            raise ValueError("Latitude must be between -90 and 90")
        return v

    @property
    def latitude(self) -> float:
        return self.coordinates[1]

    @property
    def longitude(self) -> float:
        return self.coordinates[0]


class ListingBase(BaseModel):
    """Common optional listing attributes."""

    model_config = ConfigDict(populate_by_name=True)

    description: str = Field("", max_length=5000, description="Free-text description")

    location_text: str = Field(
        "",
        max_length=500,
        validation_alias=AliasChoices("location_text", "address"),
        description="Human-readable address",
        examples=["Anna Nagar, Chennai"]
    )

    property_type: Optional[str] = Field(
        None,
        max_length=50,
        validation_alias=AliasChoices("property_type", "category"),
        description="Category such as Apartment, House, Villa",
        examples=["Apartment"]
    )

    bedrooms: Optional[int] = Field(None, ge=0, le=50, description="Number of bedrooms")
    bathrooms: Optional[int] = Field(None, ge=0, le=50, description="Number of bathrooms")
    area: Optional[int] = Field(None, ge=0, le=1000000, description="Area in square feet")

    amenities: List[str] = Field(default_factory=list, description="Amenity names")
    images: List[str] = Field(default_factory=list, description="Ordered image URLs")


class ListingCreate(ListingBase):
    """
    Schema for creating a listing.

    Position comes from ``location`` (GeoJSON) or from a ``lat``/``lng`` pair;
    without either the listing is placed at ``[0, 0]``.
    """

    title: str = Field(..., min_length=1, max_length=255, description="Listing title", examples=["2BHK near Metro"])
    price: Decimal = Field(..., ge=0, description="Monthly rent", examples=[25000])

    lat: Optional[float] = Field(None, ge=-90, le=90, validation_alias=AliasChoices("lat", "latitude"))
    lng: Optional[float] = Field(None, ge=-180, le=180, validation_alias=AliasChoices("lng", "longitude"))
    location: Optional[GeoPoint] = Field(None, description="GeoJSON Point")

    furnishing: str = Field("Unfurnished", max_length=50, examples=["Semi-furnished"])
    deposit_amount: Decimal = Field(Decimal("0"), ge=0, validation_alias=AliasChoices("deposit_amount", "deposit"))
    available_for: str = Field("Any", max_length=50, examples=["Family"])
    available_units: int = Field(1, ge=1)
    status: ListingStatus = ListingStatus.AVAILABLE

    owner_email: Optional[EmailStr] = Field(
        None,
        validation_alias=AliasChoices("owner_email", "ownerEmail"),
        description="Required when creating a listing without signing in"
    )

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if not v.strip():
            raise ValueError("Title cannot be empty")
        return v.strip()

    @field_validator("owner_email")
    @classmethod
    def normalize_owner_email(cls, v):
        return v.lower().strip() if v else v

    def resolve_coordinates(self) -> Tuple[float, float]:
        """(latitude, longitude) from GeoJSON, the lat/lng pair, or the origin."""
        if self.location is not None:
            return self.location.latitude, self.location.longitude
        if self.lat is not None and self.lng is not None:
            return self.lat, self.lng
        return 0.0, 0.0


class ListingUpdate(BaseModel):
    """
    Schema for partially updating a listing.
    Coordinates change only when both latitude and longitude are given.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    price: Optional[Decimal] = Field(None, ge=0)
    location_text: Optional[str] = Field(None, max_length=500, validation_alias=AliasChoices("location_text", "address"))
    latitude: Optional[float] = Field(None, ge=-90, le=90, validation_alias=AliasChoices("latitude", "lat"))
    longitude: Optional[float] = Field(None, ge=-180, le=180, validation_alias=AliasChoices("longitude", "lng"))
    property_type: Optional[str] = Field(None, max_length=50, validation_alias=AliasChoices("property_type", "category"))
    bedrooms: Optional[int] = Field(None, ge=0, le=50)
    bathrooms: Optional[int] = Field(None, ge=0, le=50)
    area: Optional[int] = Field(None, ge=0, le=1000000)
    furnishing: Optional[str] = Field(None, max_length=50)
    amenities: Optional[List[str]] = None
    images: Optional[List[str]] = None
    deposit_amount: Optional[Decimal] = Field(None, ge=0, validation_alias=AliasChoices("deposit_amount", "deposit"))
    available_for: Optional[str] = Field(None, max_length=50)
    available_units: Optional[int] = Field(None, ge=1)
    status: Optional[ListingStatus] = None
    verified: Optional[bool] = Field(None, description="Administrators only")

    @model_validator(mode="after")
    def drop_partial_coordinates(self):
        """A lone latitude or longitude is ignored."""
        if (self.latitude is None) != (self.longitude is None):
            self.latitude = None
            self.longitude = None
        return self


class ListingResponse(BaseModel):
    """Listing as returned by the API."""

    id: str
    title: str
    description: str
    price: float
    deposit_amount: float
    location_text: str
    location: GeoPoint
    property_type: Optional[str] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    area: Optional[int] = None
    furnishing: str
    amenities: List[str]
    images: List[str]
    available_for: str
    available_units: int
    status: ListingStatus
    verified: bool
    owner_id: Optional[str] = None
    owner_email: str
    owner: Optional[UserSummary] = None
    created_at: datetime
    updated_at: datetime


class NearbyListingResponse(ListingResponse):
    """Listing annotated with its distance from a query point."""

    distance: float = Field(..., description="Distance in kilometres")
    distance_km: float = Field(..., description="Distance in kilometres, rounded to two decimals")


class ListingSearchResponse(BaseModel):
    """Paginated search result."""

    total: int
    items: List[ListingResponse]
    page: int
    page_size: int
    total_pages: int


class ListingSummary(BaseModel):
    """Compact listing representation embedded in property requests."""

    id: str
    title: str
    location_text: str
    location: GeoPoint
    price: float
    images: List[str]
    owner_id: Optional[str] = None
    owner_email: str


class MessageResponse(BaseModel):
    message: str
