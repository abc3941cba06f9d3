from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from services.common.enums import InteractionType, SearchType


@dataclass(frozen=True)
class SearchRecord:
    record_id: str
    user_id: Optional[str]
    query: str
    search_type: SearchType
    result_count: int
    filters: Dict[str, Any]
    recorded_at: datetime


@dataclass(frozen=True)
class InteractionRecord:
    record_id: str
    user_id: str
    listing_id: str
    interaction_type: InteractionType
    duration_seconds: Optional[float]
    recorded_at: datetime


@dataclass(frozen=True)
class UserPreferences:
    user_id: str
    search_terms: List[str] = field(default_factory=list)
    favorite_categories: List[str] = field(default_factory=list)
    preferred_locations: List[str] = field(default_factory=list)
    interaction_score: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not self.search_terms and not self.favorite_categories
