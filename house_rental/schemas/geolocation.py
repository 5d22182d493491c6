"""
Pydantic schemas for the geolocation endpoints.
"""

from pydantic import BaseModel, Field
from typing import Any, List, Literal, Optional
from house_rental.schemas.listing import NearbyListingResponse

GeocodeProvider = Literal["google", "mapbox", "nominatim", "smart"]


class GeocodeRequest(BaseModel):
    address: str = Field(..., min_length=1, examples=["Marina Beach, Chennai"])
    provider: GeocodeProvider = "smart"


class ReverseGeocodeRequest(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    provider: Literal["google", "nominatim"] = "nominatim"


class DirectionsRequest(BaseModel):
    origin: str = Field(..., min_length=1, description="Address or 'lat,lng'")
    destination: str = Field(..., min_length=1, description="Address or 'lat,lng'")
    mode: Literal["driving", "walking", "bicycling", "transit"] = "driving"


class DistanceRequest(BaseModel):
    lat1: float = Field(..., ge=-90, le=90)
    lon1: float = Field(..., ge=-180, le=180)
    lat2: float = Field(..., ge=-90, le=90)
    lon2: float = Field(..., ge=-180, le=180)


class GeocodeResult(BaseModel):
    latitude: float
    longitude: float
    formatted_address: Optional[str] = None
    place_id: Optional[str] = None
    provider: str


class ReverseGeocodeResult(BaseModel):
    address: Optional[str] = None
    place_id: Optional[str] = None
    provider: str


class Amenity(BaseModel):
    name: Optional[str] = None
    latitude: float
    longitude: float
    rating: Optional[float] = None
    vicinity: Optional[str] = None
    place_id: Optional[str] = None
    types: List[str] = Field(default_factory=list)


class DirectionStep(BaseModel):
    instruction: str
    distance: str
    duration: str


class DirectionsResult(BaseModel):
    distance: str
    duration: str
    distance_value: int = Field(..., description="Metres")
    duration_value: int = Field(..., description="Seconds")
    steps: List[DirectionStep]


class DistanceResult(BaseModel):
    distance: float = Field(..., description="Kilometres")
    distance_km: float
    distance_miles: float


class AddressSuggestion(BaseModel):
    address: str
    latitude: float
    longitude: float
    place_id: Optional[str] = None


class Center(BaseModel):
    latitude: float
    longitude: float


class NearbyPropertiesResult(BaseModel):
    properties: List[NearbyListingResponse]
    count: int
    center: Center
    radius: float = Field(..., description="Kilometres")


class GeolocationEnvelope(BaseModel):
    """Success wrapper used by every geolocation endpoint."""

    success: bool = True
    data: Any
