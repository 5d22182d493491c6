"""
Tests for GeolocationService against stubbed provider responses.
"""

import httpx
import pytest

from house_rental.services.geolocation import GeolocationService
from house_rental.services.listing import ListingService
from house_rental.utils.exceptions import BadRequestError, GeolocationProviderError
from house_rental.utils.geo import haversine_distance
from tests.conftest import ADYAR, CHENNAI, EGMORE, ListingFactory, ProviderStub

GOOGLE = "maps.googleapis.com"
MAPBOX = "api.mapbox.com"
NOMINATIM = "nominatim.openstreetmap.org"

GOOGLE_GEOCODE_OK = {
    "status": "OK",
    "results": [{
        "geometry": {"location": {"lat": 13.0827, "lng": 80.2707}},
        "formatted_address": "Chennai, Tamil Nadu, India",
        "place_id": "g-123",
    }],
}
MAPBOX_OK = {"features": [{"center": [80.27, 13.08], "place_name": "Chennai, India", "id": "place.1"}]}
NOMINATIM_OK = [{"lat": "13.08", "lon": "80.27", "display_name": "Chennai", "place_id": 42}]


class TestGeocode:
    """Test forward geocoding and provider fallback."""

    @pytest.mark.asyncio
    async def test_google(self, geolocation_service: GeolocationService, provider_stub: ProviderStub):
        provider_stub.add(GOOGLE, "/maps/api/geocode/json", GOOGLE_GEOCODE_OK)

        result = await geolocation_service.geocode("Chennai", provider="google")

        assert result == {
            "latitude": 13.0827,
            "longitude": 80.2707,
            "formatted_address": "Chennai, Tamil Nadu, India",
            "place_id": "g-123",
            "provider": "google",
        }
        assert provider_stub.requests[0].url.params["key"] == "test-google-key"

    @pytest.mark.asyncio
    async def test_mapbox(self, geolocation_service: GeolocationService, provider_stub: ProviderStub):
        provider_stub.add(MAPBOX, "/geocoding/v5/mapbox.places/Chennai.json", MAPBOX_OK)

        result = await geolocation_service.geocode("Chennai", provider="mapbox")

        assert (result["latitude"], result["longitude"]) == (13.08, 80.27)
        assert result["provider"] == "mapbox"
        params = provider_stub.requests[0].url.params
        assert params["country"] == "IN"
        assert params["limit"] == "1"

    @pytest.mark.asyncio
    async def test_nominatim_sends_user_agent(self, geolocation_service: GeolocationService, provider_stub: ProviderStub):
        provider_stub.add(NOMINATIM, "/search", NOMINATIM_OK)

        result = await geolocation_service.geocode("Chennai", provider="nominatim")

        assert result["place_id"] == "42"
        assert result["latitude"] == 13.08
        assert provider_stub.requests[0].headers["User-Agent"] == "HomeRentalApp/1.0"

    @pytest.mark.asyncio
    async def test_smart_falls_back_in_order(self, geolocation_service: GeolocationService, provider_stub: ProviderStub):
        provider_stub.add(GOOGLE, "/maps/api/geocode/json", {"status": "ZERO_RESULTS", "results": []})
        provider_stub.add(MAPBOX, "/geocoding/v5/mapbox.places/Chennai.json", {"features": []})
        provider_stub.add(NOMINATIM, "/search", NOMINATIM_OK)

        result = await geolocation_service.geocode("Chennai")

        assert result["provider"] == "nominatim"
        assert provider_stub.hosts_called() == [GOOGLE, MAPBOX, NOMINATIM]

    @pytest.mark.asyncio
    async def test_smart_stops_at_first_success(self, geolocation_service: GeolocationService, provider_stub: ProviderStub):
        provider_stub.add(GOOGLE, "/maps/api/geocode/json", GOOGLE_GEOCODE_OK)

        result = await geolocation_service.smart_geocode("Chennai")

        assert result["provider"] == "google"
        assert provider_stub.hosts_called() == [GOOGLE]

    @pytest.mark.asyncio
    async def test_smart_fails_when_all_fail(self, geolocation_service: GeolocationService, provider_stub: ProviderStub):
        provider_stub.add_error(GOOGLE, "/maps/api/geocode/json", httpx.ConnectError("down"))
        provider_stub.add(NOMINATIM, "/search", [])

        with pytest.raises(GeolocationProviderError, match="All geocoding providers failed"):
            await geolocation_service.geocode("Chennai")

    @pytest.mark.asyncio
    async def test_missing_key_skips_provider(self, test_settings, provider_stub: ProviderStub):
        test_settings.google_maps_api_key = None
        test_settings.mapbox_api_key = None
        provider_stub.add(NOMINATIM, "/search", NOMINATIM_OK)
        client = httpx.AsyncClient(transport=httpx.MockTransport(provider_stub.handler))
        service = GeolocationService(test_settings, client=client)

        result = await service.geocode("Chennai")

        assert result["provider"] == "nominatim"
        assert provider_stub.hosts_called() == [NOMINATIM]
        await client.aclose()

    @pytest.mark.asyncio
    async def test_empty_address(self, geolocation_service: GeolocationService):
        with pytest.raises(BadRequestError):
            await geolocation_service.geocode("   ")

    @pytest.mark.asyncio
    async def test_http_error_maps_to_provider_error(self, geolocation_service: GeolocationService, provider_stub: ProviderStub):
        provider_stub.add(NOMINATIM, "/search", {"error": "busy"}, status_code=503)

        with pytest.raises(GeolocationProviderError) as exc_info:
            await geolocation_service.geocode("Chennai", provider="nominatim")

        assert exc_info.value.status_code == 502
        assert exc_info.value.provider_status == "503"


class TestReverseGeocode:
    """Test reverse geocoding."""

    @pytest.mark.asyncio
    async def test_nominatim_default(self, geolocation_service: GeolocationService, provider_stub: ProviderStub):
        provider_stub.add(NOMINATIM, "/reverse", {"display_name": "Park Town, Chennai", "place_id": 7})

        result = await geolocation_service.reverse_geocode(*CHENNAI)

        assert result == {"address": "Park Town, Chennai", "place_id": "7", "provider": "nominatim"}

    @pytest.mark.asyncio
    async def test_google_when_requested(self, geolocation_service: GeolocationService, provider_stub: ProviderStub):
        provider_stub.add(GOOGLE, "/maps/api/geocode/json", GOOGLE_GEOCODE_OK)

        result = await geolocation_service.reverse_geocode(*CHENNAI, provider="google")

        assert result["provider"] == "google"
        assert provider_stub.requests[0].url.params["latlng"] == "13.0827,80.2707"

    @pytest.mark.asyncio
    async def test_nominatim_error_payload(self, geolocation_service: GeolocationService, provider_stub: ProviderStub):
        provider_stub.add(NOMINATIM, "/reverse", {"error": "Unable to geocode"})

        with pytest.raises(GeolocationProviderError):
            await geolocation_service.reverse_geocode(0, 0)


class TestNearbyAmenities:
    """Places lookups degrade to an empty list."""

    @pytest.mark.asyncio
    async def test_results(self, geolocation_service: GeolocationService, provider_stub: ProviderStub):
        provider_stub.add(GOOGLE, "/maps/api/place/nearbysearch/json", {
            "status": "OK",
            "results": [{
                "name": "Hotel Marina",
                "geometry": {"location": {"lat": 13.05, "lng": 80.28}},
                "rating": 4.2,
                "vicinity": "Beach Road",
                "place_id": "p-1",
                "types": ["lodging"],
            }],
        })

        amenities = await geolocation_service.find_nearby_amenities(*CHENNAI)

        assert amenities[0]["name"] == "Hotel Marina"
        assert amenities[0]["latitude"] == 13.05
        params = provider_stub.requests[0].url.params
        assert params["radius"] == "1000"
        assert params["type"] == "lodging"

    @pytest.mark.asyncio
    async def test_non_ok_status(self, geolocation_service: GeolocationService, provider_stub: ProviderStub):
        provider_stub.add(GOOGLE, "/maps/api/place/nearbysearch/json", {"status": "REQUEST_DENIED"})
        assert await geolocation_service.find_nearby_amenities(*CHENNAI) == []

    @pytest.mark.asyncio
    async def test_transport_error(self, geolocation_service: GeolocationService, provider_stub: ProviderStub):
        provider_stub.add_error(GOOGLE, "/maps/api/place/nearbysearch/json", httpx.ReadTimeout("slow"))
        assert await geolocation_service.find_nearby_amenities(*CHENNAI) == []

    @pytest.mark.asyncio
    async def test_missing_key(self, test_settings, provider_stub: ProviderStub):
        test_settings.google_maps_api_key = None
        service = GeolocationService(test_settings, client=httpx.AsyncClient(transport=httpx.MockTransport(provider_stub.handler)))

        assert await service.find_nearby_amenities(*CHENNAI) == []
        assert provider_stub.requests == []
        await service._client.aclose()


class TestDirections:
    """Test Google Directions."""

    @pytest.mark.asyncio
    async def test_route(self, geolocation_service: GeolocationService, provider_stub: ProviderStub):
        provider_stub.add(GOOGLE, "/maps/api/directions/json", {
            "status": "OK",
            "routes": [{"legs": [{
                "distance": {"text": "9.1 km", "value": 9100},
                "duration": {"text": "25 mins", "value": 1500},
                "steps": [{
                    "html_instructions": "Head south",
                    "distance": {"text": "1 km"},
                    "duration": {"text": "3 mins"},
                }],
            }]}],
        })

        result = await geolocation_service.get_directions("Chennai Central", "Adyar", mode="walking")

        assert result["distance_value"] == 9100
        assert result["duration"] == "25 mins"
        assert result["steps"] == [{"instruction": "Head south", "distance": "1 km", "duration": "3 mins"}]
        assert provider_stub.requests[0].url.params["mode"] == "walking"

    @pytest.mark.asyncio
    async def test_non_ok_status_carries_status(self, geolocation_service: GeolocationService, provider_stub: ProviderStub):
        provider_stub.add(GOOGLE, "/maps/api/directions/json", {"status": "NOT_FOUND", "routes": []})

        with pytest.raises(GeolocationProviderError, match="NOT_FOUND") as exc_info:
            await geolocation_service.get_directions("Nowhere", "Elsewhere")

        assert exc_info.value.provider_status == "NOT_FOUND"


class TestAutocomplete:
    """Test address suggestions."""

    @pytest.mark.asyncio
    async def test_short_query(self, geolocation_service: GeolocationService, provider_stub: ProviderStub):
        with pytest.raises(BadRequestError):
            await geolocation_service.autocomplete_address("ch")
        assert provider_stub.requests == []

    @pytest.mark.asyncio
    async def test_suggestions_capped_at_five(self, geolocation_service: GeolocationService, provider_stub: ProviderStub):
        provider_stub.add(NOMINATIM, "/search", [
            {"lat": "13.0", "lon": "80.2", "display_name": f"Place {i}", "place_id": i} for i in range(8)
        ])

        suggestions = await geolocation_service.autocomplete_address("Anna")

        assert len(suggestions) == 5
        assert suggestions[0] == {"address": "Place 0", "latitude": 13.0, "longitude": 80.2, "place_id": "0"}

    @pytest.mark.asyncio
    async def test_other_provider_returns_nothing(self, geolocation_service: GeolocationService):
        assert await geolocation_service.autocomplete_address("Anna", provider="google") == []


class TestDistanceAndNearbyProperties:
    """Test distance helpers and nearby listings."""

    def test_distance(self):
        assert GeolocationService.distance(*CHENNAI, *CHENNAI) == 0
        assert GeolocationService.distance(*CHENNAI, *ADYAR) == pytest.approx(GeolocationService.distance(*ADYAR, *CHENNAI))

    @pytest.mark.asyncio
    async def test_properties_nearby(
        self,
        geolocation_service: GeolocationService,
        listing_service: ListingService,
        listing_repository
    ):
        await ListingFactory.create_listing(listing_repository, title="Adyar", latitude=ADYAR[0], longitude=ADYAR[1])
        await ListingFactory.create_listing(listing_repository, title="Egmore", latitude=EGMORE[0], longitude=EGMORE[1])
        await ListingFactory.create_listing(listing_repository, title="Central")

        results = await geolocation_service.properties_nearby(listing_service, CHENNAI[0], CHENNAI[1], radius_km=5)

        assert [item["title"] for item in results] == ["Central", "Egmore"]
        for item in results:
            lng, lat = item["location"]["coordinates"]
            assert item["distance"] == pytest.approx(haversine_distance(CHENNAI[0], CHENNAI[1], lat, lng))
            assert item["distance"] <= 5
            assert item["distance_km"] == round(item["distance"], 2)

    @pytest.mark.asyncio
    async def test_properties_nearby_limit(self, geolocation_service, listing_service, listing_repository):
        for _ in range(3):
            await ListingFactory.create_listing(listing_repository)

        results = await geolocation_service.properties_nearby(listing_service, *CHENNAI, radius_km=1, limit=2)

        assert len(results) == 2


class TestLifecycle:
    """Client ownership."""

    @pytest.mark.asyncio
    async def test_owned_client_is_closed(self, test_settings):
        service = GeolocationService(test_settings)
        await service.aclose()
        assert service._client.is_closed

    @pytest.mark.asyncio
    async def test_injected_client_is_left_open(self, test_settings):
        client = httpx.AsyncClient()
        service = GeolocationService(test_settings, client=client)
        await service.aclose()
        assert not client.is_closed
        await client.aclose()
