from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from services.common.enums import PriceRange


class LocationModel(BaseModel):
    latitude: float
    longitude: float
    address: str
    city: str
    country: str = ""
    region: Optional[str] = None
    postal_code: Optional[str] = None


class ContactInfoModel(BaseModel):
    email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None


class DuplicateCheckRequestModel(BaseModel):
    schema_version: str
    owner_user_id: str
    title: str
    description: str = ""
    category: str = ""
    location: LocationModel
    contact_info: ContactInfoModel = Field(default_factory=ContactInfoModel)
    tags: List[str] = Field(default_factory=list)
    is_organic: bool = False
    is_certified: bool = False
    price_range: Optional[PriceRange] = None
