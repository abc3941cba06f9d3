from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from services.common.enums import ListingStatus, PriceRange


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float
    address: str
    city: str
    country: str = ""
    region: Optional[str] = None
    postal_code: Optional[str] = None


@dataclass(frozen=True)
class ContactInfo:
    email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None


@dataclass(frozen=True)
class Listing:
    id: str
    user_id: str
    title: str
    description: str
    category: str
    location: Location
    created_at: datetime
    updated_at: Optional[datetime] = None
    status: ListingStatus = ListingStatus.active
    contact_info: ContactInfo = field(default_factory=ContactInfo)
    tags: List[str] = field(default_factory=list)
    images: List[str] = field(default_factory=list)
    is_organic: bool = False
    is_certified: bool = False
    price_range: Optional[PriceRange] = None
    views: int = 0
    favorites: int = 0

    @property
    def is_active(self) -> bool:
        return self.status == ListingStatus.active


@dataclass(frozen=True)
class ListingDraft:
    title: str
    description: str
    category: str
    location: Location
    contact_info: ContactInfo = field(default_factory=ContactInfo)
    tags: List[str] = field(default_factory=list)
    is_organic: bool = False
    is_certified: bool = False
    price_range: Optional[PriceRange] = None
