from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from services.common.enums import InteractionType


class LocationFilterModel(BaseModel):
    city: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    radius_km: Optional[float] = Field(default=None, gt=0)


class SearchRequestModel(BaseModel):
    schema_version: str
    query: str
    user_id: Optional[str] = None
    limit: Optional[int] = Field(default=None, ge=1, le=100)
    page: int = Field(default=1, ge=1)
    category: Optional[str] = None
    location: Optional[LocationFilterModel] = None
    tags: List[str] = Field(default_factory=list)
    min_score: Optional[float] = Field(default=None, ge=0, le=1)


class InteractionRequestModel(BaseModel):
    schema_version: str
    user_id: str
    interaction_type: InteractionType
    duration_seconds: Optional[float] = Field(default=None, ge=0)

