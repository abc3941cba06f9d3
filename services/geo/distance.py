from __future__ import annotations

import math


EARTH_RADIUS_KM = 6371.0


def haversine_distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometers between two points given in degrees."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def within_radius_km(
    center_lat: float,
    center_lon: float,
    lat: float | None,
    lon: float | None,
    radius_km: float,
) -> bool:
    if lat is None or lon is None:
        return False
    return haversine_distance_km(center_lat, center_lon, lat, lon) <= radius_km
