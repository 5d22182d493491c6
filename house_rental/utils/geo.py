"""
Great-circle distance helpers shared by listing queries and the geolocation service.
"""

from typing import Tuple
import math

EARTH_RADIUS_KM = 6371.0
KM_TO_MILES = 0.621371

# Length of one degree of latitude
_KM_PER_DEGREE = math.pi * EARTH_RADIUS_KM / 180.0


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Haversine distance between two points.

    Args:
        lat1, lon1: First point in degrees
        lat2, lon2: Second point in degrees

    Returns:
        Distance in kilometres
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def bounding_box(lat: float, lng: float, radius_km: float) -> Tuple[float, float, float, float]:
    """
    Latitude/longitude rectangle that encloses every point within ``radius_km``.

    Returns:
        (min_lat, max_lat, min_lng, max_lng); the longitude span covers the
        full range near the poles or when the box crosses the antimeridian.
    """
    lat_delta = radius_km / _KM_PER_DEGREE
    min_lat = max(lat - lat_delta, -90.0)
    max_lat = min(lat + lat_delta, 90.0)

    cos_lat = math.cos(math.radians(max(abs(min_lat), abs(max_lat))))
    if cos_lat <= 1e-9:
        return min_lat, max_lat, -180.0, 180.0

    lng_delta = radius_km / (_KM_PER_DEGREE * cos_lat)
    min_lng = lng - lng_delta
    max_lng = lng + lng_delta
    if lng_delta >= 180.0 or min_lng < -180.0 or max_lng > 180.0:
        return min_lat, max_lat, -180.0, 180.0

    return min_lat, max_lat, min_lng, max_lng


def km_to_miles(km: float) -> float:
    return km * KM_TO_MILES
