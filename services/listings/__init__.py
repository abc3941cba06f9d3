from services.listings.models import ContactInfo, Listing, ListingDraft, Location
from services.listings.repository import ListingRepository, ListingStore

__all__ = [
    "ContactInfo",
    "Listing",
    "ListingDraft",
    "ListingRepository",
    "ListingStore",
    "Location",
]
