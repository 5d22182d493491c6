"""
Geolocation API endpoints: geocoding, places, directions, distances and
nearby listings. Every success is wrapped as ``{"success": true, "data": ...}``.
"""

from fastapi import APIRouter, Depends, Query

from house_rental.services.geolocation import GeolocationService
from house_rental.services.listing import ListingService
from house_rental.schemas.geolocation import (
    GeocodeRequest,
    ReverseGeocodeRequest,
    DirectionsRequest,
    DistanceRequest,
    GeocodeResult,
    ReverseGeocodeResult,
    Amenity,
    DirectionsResult,
    DistanceResult,
    AddressSuggestion,
    NearbyPropertiesResult,
    Center,
    GeolocationEnvelope
)
from house_rental.schemas.listing import NearbyListingResponse
from house_rental.schemas.error import get_error_responses
from house_rental.utils.dependencies import get_geolocation_service, get_listing_service
from house_rental.utils.geo import km_to_miles


router = APIRouter(prefix="/geolocation", tags=["Geolocation"])


@router.post(
    "/geocode",
    response_model=GeolocationEnvelope,
    summary="Geocode address",
    description="Resolve an address with google, mapbox, nominatim or smart (first provider that succeeds)",
    responses=get_error_responses(400, 502)
)
async def geocode_address(
    request_data: GeocodeRequest,
    geo_service: GeolocationService = Depends(get_geolocation_service)
) -> GeolocationEnvelope:
    result = await geo_service.geocode(request_data.address, request_data.provider)
    return GeolocationEnvelope(data=GeocodeResult(**result))


@router.post(
    "/reverse-geocode",
    response_model=GeolocationEnvelope,
    summary="Reverse geocode",
    responses=get_error_responses(400, 502)
)
async def reverse_geocode(
    request_data: ReverseGeocodeRequest,
    geo_service: GeolocationService = Depends(get_geolocation_service)
) -> GeolocationEnvelope:
    result = await geo_service.reverse_geocode(
        request_data.latitude,
        request_data.longitude,
        request_data.provider
    )
    return GeolocationEnvelope(data=ReverseGeocodeResult(**result))


@router.get(
    "/nearby-amenities",
    response_model=GeolocationEnvelope,
    summary="Nearby amenities",
    description="Places around a point. Empty when the places provider is unavailable.",
    responses=get_error_responses(400)
)
async def nearby_amenities(
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    radius: int = Query(1000, ge=1, le=50000, description="Radius in metres"),
    type: str = Query("lodging", description="Place type"),
    geo_service: GeolocationService = Depends(get_geolocation_service)
) -> GeolocationEnvelope:
    amenities = await geo_service.find_nearby_amenities(latitude, longitude, radius, type)
    return GeolocationEnvelope(data=[Amenity(**amenity) for amenity in amenities])


@router.post(
    "/directions",
    response_model=GeolocationEnvelope,
    summary="Directions",
    responses=get_error_responses(400, 502)
)
async def get_directions(
    request_data: DirectionsRequest,
    geo_service: GeolocationService = Depends(get_geolocation_service)
) -> GeolocationEnvelope:
    result = await geo_service.get_directions(
        request_data.origin,
        request_data.destination,
        request_data.mode
    )
    return GeolocationEnvelope(data=DirectionsResult(**result))


@router.post(
    "/calculate-distance",
    response_model=GeolocationEnvelope,
    summary="Distance between two points",
    description="Great-circle distance in kilometres and miles",
    responses=get_error_responses(400)
)
async def calculate_distance(request_data: DistanceRequest) -> GeolocationEnvelope:
    distance = GeolocationService.distance(
        request_data.lat1,
        request_data.lon1,
        request_data.lat2,
        request_data.lon2
    )
    return GeolocationEnvelope(data=DistanceResult(
        distance=distance,
        distance_km=round(distance, 2),
        distance_miles=round(km_to_miles(distance), 2)
    ))


@router.get(
    "/nearby-properties",
    response_model=GeolocationEnvelope,
    summary="Listings near a point",
    description="Listings within radius kilometres, nearest first, with their distance",
    responses=get_error_responses(400, 500)
)
async def nearby_properties(
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    radius: float = Query(5, ge=0, description="Radius in kilometres"),
    limit: int = Query(20, ge=1, le=200),
    geo_service: GeolocationService = Depends(get_geolocation_service),
    listing_service: ListingService = Depends(get_listing_service)
) -> GeolocationEnvelope:
    properties = await geo_service.properties_nearby(listing_service, latitude, longitude, radius, limit)
    return GeolocationEnvelope(data=NearbyPropertiesResult(
        properties=[NearbyListingResponse.model_validate(item) for item in properties],
        count=len(properties),
        center=Center(latitude=latitude, longitude=longitude),
        radius=radius
    ))


@router.get(
    "/autocomplete-address",
    response_model=GeolocationEnvelope,
    summary="Address suggestions",
    responses=get_error_responses(400, 502)
)
async def autocomplete_address(
    query: str = Query(..., description="Partial address, at least 3 characters"),
    provider: str = Query("nominatim"),
    geo_service: GeolocationService = Depends(get_geolocation_service)
) -> GeolocationEnvelope:
    suggestions = await geo_service.autocomplete_address(query, provider)
    return GeolocationEnvelope(data=[AddressSuggestion(**item) for item in suggestions])
