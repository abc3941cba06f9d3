from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Sequence

from services.common.clock import Clock, ensure_timezone
from services.listings.models import Listing
from services.search.models import SemanticSearchQuery


@dataclass(frozen=True)
class RelevanceWeights:
    category_boost: float = 0.10
    tag_boost: float = 0.10
    recency_boost: float = 0.05
    recency_days: int = 30


def clamp_score(value: float) -> float:
    return min(max(value, 0.0), 1.0)


def matched_tag_ratio(listing_tags: Sequence[str], query_tags: Sequence[str]) -> float:
    """Share of query tags found (case-insensitive substring) in any listing tag."""
    if not query_tags:
        return 0.0
    lowered = [tag.lower() for tag in listing_tags]
    matched = sum(1 for wanted in query_tags if any(wanted.lower() in tag for tag in lowered))
    return matched / len(query_tags)


class RelevanceScorer:
    def __init__(self, *, weights: Optional[RelevanceWeights] = None, clock: Optional[Clock] = None) -> None:
        self._weights = weights or RelevanceWeights()
        self._clock = clock or Clock()

    def score(self, similarity: float, listing: Listing, query: SemanticSearchQuery) -> float:
        relevance = clamp_score(similarity)
        if query.category and listing.category == query.category:
            relevance += self._weights.category_boost
        if query.tags:
            relevance += self._weights.tag_boost * matched_tag_ratio(listing.tags, query.tags)
        if self.is_recent(listing):
            relevance += self._weights.recency_boost
        return min(relevance, 1.0)

    def is_recent(self, listing: Listing) -> bool:
        age = self._clock.now() - ensure_timezone(listing.created_at)
        return age < timedelta(days=self._weights.recency_days)
