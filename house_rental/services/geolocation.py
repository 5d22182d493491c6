"""
Geolocation service wrapping the Google Maps, Mapbox and Nominatim HTTP APIs.

One instance is created per application with a shared ``httpx.AsyncClient``
and closed on shutdown. Calls are made once; there is no retry.
"""

from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import quote
from house_rental.config import Settings
from house_rental.services.listing import ListingService
from house_rental.utils.exceptions import BadRequestError, GeolocationProviderError
from house_rental.utils.geo import haversine_distance
import httpx
import logging

logger = logging.getLogger(__name__)

GOOGLE_GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
GOOGLE_PLACES_NEARBY_URL = "https://maps.googleapis.com/maps/api/place/nearbysearch/json"
GOOGLE_DIRECTIONS_URL = "https://maps.googleapis.com/maps/api/directions/json"
MAPBOX_GEOCODE_URL = "https://api.mapbox.com/geocoding/v5/mapbox.places/{query}.json"

SMART_PROVIDER_ORDER = ("google", "mapbox", "nominatim")
AUTOCOMPLETE_MIN_LENGTH = 3
AUTOCOMPLETE_LIMIT = 5


class GeolocationService:
    """
    Adapter over external geocoding, places and directions providers.

    Args:
        settings: Application settings with API keys and provider options
        client: Optional pre-built client; one is created when omitted
    """

    def __init__(self, settings: Settings, client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self.google_maps_api_key = settings.google_maps_api_key
        self.mapbox_api_key = settings.mapbox_api_key
        self.nominatim_base_url = settings.nominatim_base_url.rstrip("/")
        self.country_code = settings.geocoding_country_code
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.http_timeout_seconds),
            headers={"User-Agent": settings.geocoding_user_agent},
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get_json(
        self,
        provider: str,
        url: str,
        params: Mapping[str, Any],
        headers: Optional[Mapping[str, str]] = None
    ) -> Any:
        """GET a provider endpoint and decode JSON, mapping failures to GeolocationProviderError."""
        try:
            response = await self._client.get(url, params=dict(params), headers=dict(headers or {}))
            response.raise_for_status()
            return response.json()
        except httpx.TimeoutException as e:
            logger.error(f"{provider} request timed out: {e}")
            raise GeolocationProviderError(f"{provider} request timed out", provider=provider)
        except httpx.HTTPStatusError as e:
            logger.error(f"{provider} returned HTTP {e.response.status_code}")
            raise GeolocationProviderError(
                f"{provider} returned HTTP {e.response.status_code}",
                provider=provider,
                provider_status=str(e.response.status_code)
            )
        except httpx.RequestError as e:
            logger.error(f"{provider} request failed: {e}")
            raise GeolocationProviderError(f"{provider} request failed", provider=provider)
        except ValueError as e:
            logger.error(f"{provider} returned invalid JSON: {e}")
            raise GeolocationProviderError(f"{provider} returned an invalid response", provider=provider)

    def _nominatim_headers(self) -> Dict[str, str]:
        return {"User-Agent": self.settings.geocoding_user_agent}

    # Forward geocoding

    async def geocode(self, address: str, provider: str = "smart") -> Dict[str, Any]:
        """
        Resolve an address to coordinates.

        Args:
            address: Free-text address
            provider: google, mapbox, nominatim or smart

        Returns:
            Dictionary with latitude, longitude, formatted_address, place_id and provider
        """
        if not address or not address.strip():
            raise BadRequestError("Address is required")

        if provider == "google":
            return await self.geocode_with_google(address)
        if provider == "mapbox":
            return await self.geocode_with_mapbox(address)
        if provider == "nominatim":
            return await self.geocode_with_nominatim(address)
        return await self.smart_geocode(address)

    async def geocode_with_google(self, address: str) -> Dict[str, Any]:
        if not self.google_maps_api_key:
            raise GeolocationProviderError("Google Maps API key not configured", provider="google")

        data = await self._get_json("google", GOOGLE_GEOCODE_URL, {
            "address": address,
            "key": self.google_maps_api_key,
        })

        status = data.get("status")
        results = data.get("results") or []
        if status != "OK" or not results:
            raise GeolocationProviderError(
                f"Google Geocoding failed: {status}",
                provider="google",
                provider_status=status
            )

        result = results[0]
        return {
            "latitude": result["geometry"]["location"]["lat"],
            "longitude": result["geometry"]["location"]["lng"],
            "formatted_address": result.get("formatted_address"),
            "place_id": result.get("place_id"),
            "provider": "google",
        }

    async def geocode_with_mapbox(self, address: str) -> Dict[str, Any]:
        if not self.mapbox_api_key:
            raise GeolocationProviderError("Mapbox API key not configured", provider="mapbox")

        data = await self._get_json("mapbox", MAPBOX_GEOCODE_URL.format(query=quote(address, safe="")), {
            "access_token": self.mapbox_api_key,
            "country": self.country_code.upper(),
            "limit": 1,
        })

        features = data.get("features") or []
        if not features:
            raise GeolocationProviderError("No results found", provider="mapbox")

        feature = features[0]
        longitude, latitude = feature["center"][0], feature["center"][1]
        return {
            "latitude": latitude,
            "longitude": longitude,
            "formatted_address": feature.get("place_name"),
            "place_id": feature.get("id"),
            "provider": "mapbox",
        }

    async def geocode_with_nominatim(self, address: str) -> Dict[str, Any]:
        data = await self._get_json(
            "nominatim",
            f"{self.nominatim_base_url}/search",
            {
                "q": address,
                "format": "json",
                "limit": 1,
                "countrycodes": self.country_code,
                "addressdetails": 1,
            },
            headers=self._nominatim_headers()
        )

        if not data:
            raise GeolocationProviderError("No results found", provider="nominatim")

        result = data[0]
        return {
            "latitude": float(result["lat"]),
            "longitude": float(result["lon"]),
            "formatted_address": result.get("display_name"),
            "place_id": str(result["place_id"]) if result.get("place_id") is not None else None,
            "provider": "nominatim",
        }

    async def smart_geocode(self, address: str) -> Dict[str, Any]:
        """Try Google, then Mapbox, then Nominatim; the first success wins."""
        providers = {
            "google": self.geocode_with_google,
            "mapbox": self.geocode_with_mapbox,
            "nominatim": self.geocode_with_nominatim,
        }
        for name in SMART_PROVIDER_ORDER:
            try:
                return await providers[name](address)
            except GeolocationProviderError as e:
                logger.info(f"Geocoding failed with {name}, trying next provider: {e.detail}")

        raise GeolocationProviderError("All geocoding providers failed", provider="smart")

    # Reverse geocoding

    async def reverse_geocode(self, latitude: float, longitude: float, provider: str = "nominatim") -> Dict[str, Any]:
        """
        Resolve coordinates to an address.
        Google is used only when requested and configured.
        """
        if provider == "google" and self.google_maps_api_key:
            return await self._reverse_geocode_with_google(latitude, longitude)
        return await self._reverse_geocode_with_nominatim(latitude, longitude)

    async def _reverse_geocode_with_google(self, latitude: float, longitude: float) -> Dict[str, Any]:
        data = await self._get_json("google", GOOGLE_GEOCODE_URL, {
            "latlng": f"{latitude},{longitude}",
            "key": self.google_maps_api_key,
        })

        results = data.get("results") or []
        if data.get("status") != "OK" or not results:
            raise GeolocationProviderError(
                "Reverse geocoding failed",
                provider="google",
                provider_status=data.get("status")
            )

        return {
            "address": results[0].get("formatted_address"),
            "place_id": results[0].get("place_id"),
            "provider": "google",
        }

    async def _reverse_geocode_with_nominatim(self, latitude: float, longitude: float) -> Dict[str, Any]:
        data = await self._get_json(
            "nominatim",
            f"{self.nominatim_base_url}/reverse",
            {
                "lat": latitude,
                "lon": longitude,
                "format": "json",
                "addressdetails": 1,
            },
            headers=self._nominatim_headers()
        )

        if not data or "error" in data:
            raise GeolocationProviderError("Reverse geocoding failed", provider="nominatim")

        return {
            "address": data.get("display_name"),
            "place_id": str(data["place_id"]) if data.get("place_id") is not None else None,
            "provider": "nominatim",
        }

    # Places and directions

    async def find_nearby_amenities(
        self,
        latitude: float,
        longitude: float,
        radius: int = 1000,
        type: str = "lodging"
    ) -> List[Dict[str, Any]]:
        """
        Nearby places from Google Places.
        Returns an empty list when the key is missing or the provider fails.
        """
        if not self.google_maps_api_key:
            logger.warning("Google Maps API key not configured. Nearby amenities disabled.")
            return []

        try:
            data = await self._get_json("google", GOOGLE_PLACES_NEARBY_URL, {
                "location": f"{latitude},{longitude}",
                "radius": radius,
                "type": type,
                "key": self.google_maps_api_key,
            })
        except GeolocationProviderError as e:
            logger.warning(f"Places API error: {e.detail}")
            return []

        status = data.get("status")
        if status != "OK":
            logger.warning(f"Places API failed: {status}")
            return []

        return [
            {
                "name": place.get("name"),
                "latitude": place["geometry"]["location"]["lat"],
                "longitude": place["geometry"]["location"]["lng"],
                "rating": place.get("rating"),
                "vicinity": place.get("vicinity"),
                "place_id": place.get("place_id"),
                "types": place.get("types", []),
            }
            for place in data.get("results", [])
        ]

    async def get_directions(self, origin: str, destination: str, mode: str = "driving") -> Dict[str, Any]:
        """
        Route between two places from Google Directions.

        Raises:
            GeolocationProviderError: If no key is configured or the status is not OK
        """
        if not self.google_maps_api_key:
            raise GeolocationProviderError("Google Maps API key not configured", provider="google")

        data = await self._get_json("google", GOOGLE_DIRECTIONS_URL, {
            "origin": origin,
            "destination": destination,
            "mode": mode,
            "key": self.google_maps_api_key,
        })

        status = data.get("status")
        routes = data.get("routes") or []
        if status != "OK" or not routes:
            raise GeolocationProviderError(
                f"Directions API failed: {status}",
                provider="google",
                provider_status=status
            )

        leg = routes[0]["legs"][0]
        return {
            "distance": leg["distance"]["text"],
            "duration": leg["duration"]["text"],
            "distance_value": leg["distance"]["value"],
            "duration_value": leg["duration"]["value"],
            "steps": [
                {
                    "instruction": step.get("html_instructions", ""),
                    "distance": step["distance"]["text"],
                    "duration": step["duration"]["text"],
                }
                for step in leg.get("steps", [])
            ],
        }

    async def autocomplete_address(self, query: str, provider: str = "nominatim") -> List[Dict[str, Any]]:
        """Up to five address suggestions from Nominatim."""
        if not query or len(query) < AUTOCOMPLETE_MIN_LENGTH:
            raise BadRequestError(f"Query must be at least {AUTOCOMPLETE_MIN_LENGTH} characters")

        if provider != "nominatim":
            return []

        data = await self._get_json(
            "nominatim",
            f"{self.nominatim_base_url}/search",
            {
                "q": query,
                "format": "json",
                "limit": AUTOCOMPLETE_LIMIT,
                "countrycodes": self.country_code,
                "addressdetails": 1,
            },
            headers=self._nominatim_headers()
        )

        return [
            {
                "address": item.get("display_name", ""),
                "latitude": float(item["lat"]),
                "longitude": float(item["lon"]),
                "place_id": str(item["place_id"]) if item.get("place_id") is not None else None,
            }
            for item in (data or [])[:AUTOCOMPLETE_LIMIT]
        ]

    # Distance

    @staticmethod
    def distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        """Haversine distance in kilometres."""
        return haversine_distance(lat1, lon1, lat2, lon2)

    async def properties_nearby(
        self,
        listing_service: ListingService,
        latitude: float,
        longitude: float,
        radius_km: float = 5,
        limit: int = 20
    ) -> List[Dict[str, Any]]:
        """
        Listings within ``radius_km``, nearest first, each with ``distance`` and ``distance_km``.
        """
        matches = await listing_service.find_nearby_with_distance(latitude, longitude, radius_km, limit)
        results = []
        for listing, distance in matches:
            item = listing.to_dict()
            item["distance"] = distance
            item["distance_km"] = round(distance, 2)
            results.append(item)
        return results
