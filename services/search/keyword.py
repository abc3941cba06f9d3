from __future__ import annotations

import math
from typing import Callable, Dict, List

from services.common.clock import ensure_timezone
from services.common.enums import SortField, SortOrder
from services.common.errors import InvalidQuery
from services.geo.distance import within_radius_km
from services.listings.models import Listing
from services.listings.repository import ListingStore
from services.search.models import KeywordFilters, KeywordSearchQuery, KeywordSearchResult


SORT_KEYS: Dict[SortField, Callable[[Listing], object]] = {
    SortField.relevance: lambda listing: listing.views + listing.favorites * 2,
    SortField.created_at: lambda listing: ensure_timezone(listing.created_at),
    SortField.views: lambda listing: listing.views,
    SortField.favorites: lambda listing: listing.favorites,
}


def _contains(haystack: str | None, needle: str) -> bool:
    return needle in (haystack or "").lower()


def matches_filters(listing: Listing, filters: KeywordFilters) -> bool:
    if filters.categories and listing.category not in filters.categories:
        return False
    if filters.is_organic is not None and listing.is_organic != filters.is_organic:
        return False
    if filters.is_certified is not None and listing.is_certified != filters.is_certified:
        return False
    if filters.price_ranges and listing.price_range not in filters.price_ranges:
        return False
    if filters.city and not _contains(listing.location.city, filters.city.lower()):
        return False
    if filters.country and not _contains(listing.location.country, filters.country.lower()):
        return False
    if filters.tags:
        wanted = [tag.lower() for tag in filters.tags]
        if not any(tag in listing_tag.lower() for tag in wanted for listing_tag in listing.tags):
            return False
    if filters.center is not None:
        center = filters.center
        if not within_radius_km(
            center.latitude,
            center.longitude,
            listing.location.latitude,
            listing.location.longitude,
            center.radius_km,
        ):
            return False
    return True


def matches_query(listing: Listing, query: str | None) -> bool:
    text = (query or "").strip().lower()
    if not text:
        return True
    return (
        _contains(listing.title, text)
        or _contains(listing.description, text)
        or _contains(listing.location.address, text)
    )


class KeywordSearchService:
    """Filter-and-sort over active listings; guarantees recall for exact terms."""

    def __init__(self, listings: ListingStore) -> None:
        self._listings = listings

    def matching(self, query: KeywordSearchQuery) -> List[Listing]:
        candidates = [
            listing
            for listing in self._listings.get_active_listings()
            if matches_filters(listing, query.filters) and matches_query(listing, query.query)
        ]
        candidates.sort(key=lambda item: item.id)
        candidates.sort(key=SORT_KEYS[query.sort_by], reverse=query.sort_order == SortOrder.desc)
        return candidates

    def search(self, query: KeywordSearchQuery) -> KeywordSearchResult:
        if query.page < 1 or query.limit < 1:
            raise InvalidQuery("page and limit must be positive", details={"page": query.page, "limit": query.limit})
        ordered = self.matching(query)
        start = (query.page - 1) * query.limit
        return KeywordSearchResult(
            listings=ordered[start : start + query.limit],
            total=len(ordered),
            page=query.page,
            limit=query.limit,
            total_pages=math.ceil(len(ordered) / query.limit),
            filters=query.filters,
        )
