from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Protocol

from services.common.clock import ensure_timezone
from services.listings.models import Listing


class ListingStore(Protocol):
    def get_active_listings(
        self,
        *,
        country: Optional[str] = None,
        exclude_user_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Listing]: ...

    def get_listing_by_id(self, listing_id: str) -> Optional[Listing]: ...

    def get_listings_by_ids(self, listing_ids: Iterable[str]) -> List[Listing]: ...


class ListingRepository:
    def __init__(self, listings: Optional[Iterable[Listing]] = None) -> None:
        self._listings: Dict[str, Listing] = {}
        for listing in listings or []:
            self.add(listing)

    def add(self, listing: Listing) -> None:
        self._listings[listing.id] = listing

    def remove(self, listing_id: str) -> None:
        self._listings.pop(listing_id, None)

    def list(self) -> List[Listing]:
        return list(self._listings.values())

    def get_active_listings(
        self,
        *,
        country: Optional[str] = None,
        exclude_user_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Listing]:
        active = [
            listing
            for listing in self._listings.values()
            if listing.is_active and (exclude_user_id is None or listing.user_id != exclude_user_id)
        ]
        if country:
            wanted = country.strip().lower()
            active = [listing for listing in active if listing.location.country.strip().lower() == wanted]
        active.sort(key=lambda item: (ensure_timezone(item.created_at), item.id), reverse=True)
        if limit is not None:
            active = active[:limit]
        return active

    def get_listing_by_id(self, listing_id: str) -> Optional[Listing]:
        listing = self._listings.get(listing_id)
        if listing is None or not listing.is_active:
            return None
        return listing

    def get_listings_by_ids(self, listing_ids: Iterable[str]) -> List[Listing]:
        found: List[Listing] = []
        for listing_id in listing_ids:
            listing = self.get_listing_by_id(listing_id)
            if listing is not None:
                found.append(listing)
        return found
