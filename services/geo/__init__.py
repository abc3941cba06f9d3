from services.geo.distance import EARTH_RADIUS_KM, haversine_distance_km, within_radius_km
from services.geo.text import (
    collapse_whitespace,
    levenshtein_similarity,
    normalize_address,
    normalize_email,
    normalize_phone,
    normalize_text,
)

__all__ = [
    "EARTH_RADIUS_KM",
    "collapse_whitespace",
    "haversine_distance_km",
    "levenshtein_similarity",
    "normalize_address",
    "normalize_email",
    "normalize_phone",
    "normalize_text",
    "within_radius_km",
]
