from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from services.common.enums import PriceRange, ResultSource, SortField, SortOrder
from services.listings.models import Listing, Location


@dataclass(frozen=True)
class GeoFilter:
    latitude: float
    longitude: float
    radius_km: float


@dataclass(frozen=True)
class LocationFilter:
    city: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    radius_km: Optional[float] = None

    @property
    def center(self) -> Optional[GeoFilter]:
        if self.latitude is None or self.longitude is None or not self.radius_km:
            return None
        return GeoFilter(latitude=self.latitude, longitude=self.longitude, radius_km=self.radius_km)


@dataclass(frozen=True)
class SemanticSearchQuery:
    query: str
    limit: int = 20
    page: int = 1
    category: Optional[str] = None
    location: Optional[LocationFilter] = None
    tags: List[str] = field(default_factory=list)
    min_score: Optional[float] = None

    def analytics_filters(self) -> Dict[str, Any]:
        location = None
        if self.location is not None:
            location = {
                "city": self.location.city,
                "latitude": self.location.latitude,
                "longitude": self.location.longitude,
                "radius_km": self.location.radius_km,
            }
        return {
            "category": self.category,
            "min_score": self.min_score,
            "location": location,
            "tags": list(self.tags),
        }


@dataclass(frozen=True)
class KeywordFilters:
    categories: List[str] = field(default_factory=list)
    is_organic: Optional[bool] = None
    is_certified: Optional[bool] = None
    price_ranges: List[PriceRange] = field(default_factory=list)
    city: Optional[str] = None
    country: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    center: Optional[GeoFilter] = None


@dataclass(frozen=True)
class KeywordSearchQuery:
    query: Optional[str] = None
    filters: KeywordFilters = field(default_factory=KeywordFilters)
    sort_by: SortField = SortField.relevance
    sort_order: SortOrder = SortOrder.desc
    page: int = 1
    limit: int = 20


@dataclass(frozen=True)
class KeywordSearchResult:
    listings: List[Listing]
    total: int
    page: int
    limit: int
    total_pages: int
    filters: KeywordFilters


@dataclass(frozen=True)
class SemanticSearchResult:
    id: str
    title: str
    description: str
    category: str
    location: Location
    tags: List[str]
    images: List[str]
    user_id: str
    created_at: datetime
    updated_at: Optional[datetime]
    score: float
    relevance_score: float
    source: ResultSource = ResultSource.semantic


@dataclass(frozen=True)
class HybridSearchResult:
    semantic_results: List[SemanticSearchResult]
    keyword_results: List[Listing]
    combined_results: List[SemanticSearchResult]
    total_results: int
    search_time_ms: float
    page: int = 1
    limit: int = 20
