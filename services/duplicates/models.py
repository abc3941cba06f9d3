from __future__ import annotations

from dataclasses import dataclass

from services.common.enums import MatchType


@dataclass(frozen=True)
class DuplicateMatch:
    listing_id: str
    title: str
    address: str
    user_id: str
    match_type: MatchType
    confidence: int
    reason: str
