from __future__ import annotations

from collections import Counter
from datetime import timedelta
from typing import Any, Dict, List, Optional, Protocol
from uuid import uuid4

from services.analytics.models import InteractionRecord, SearchRecord, UserPreferences
from services.common.clock import Clock
from services.common.enums import InteractionType, SearchType
from services.listings.repository import ListingStore


ENGAGED_INTERACTIONS = {InteractionType.view, InteractionType.favorite, InteractionType.contact}


class AnalyticsSink(Protocol):
    def record_search(
        self,
        *,
        user_id: Optional[str],
        query: str,
        search_type: SearchType,
        result_count: int,
        filters: Dict[str, Any],
    ) -> None: ...

    def record_interaction(
        self,
        *,
        user_id: str,
        listing_id: str,
        interaction_type: InteractionType,
        duration_seconds: Optional[float] = None,
    ) -> None: ...


class BehaviorRepository:
    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock = clock or Clock()
        self._searches: List[SearchRecord] = []
        self._interactions: List[InteractionRecord] = []

    def record_search(
        self,
        *,
        user_id: Optional[str],
        query: str,
        search_type: SearchType,
        result_count: int,
        filters: Dict[str, Any],
    ) -> None:
        self._searches.append(
            SearchRecord(
                record_id=f"search_{uuid4().hex}",
                user_id=user_id,
                query=query,
                search_type=search_type,
                result_count=result_count,
                filters=dict(filters),
                recorded_at=self._clock.now(),
            )
        )

    def record_interaction(
        self,
        *,
        user_id: str,
        listing_id: str,
        interaction_type: InteractionType,
        duration_seconds: Optional[float] = None,
    ) -> None:
        self._interactions.append(
            InteractionRecord(
                record_id=f"interaction_{uuid4().hex}",
                user_id=user_id,
                listing_id=listing_id,
                interaction_type=interaction_type,
                duration_seconds=duration_seconds,
                recorded_at=self._clock.now(),
            )
        )

    def searches(self) -> List[SearchRecord]:
        return list(self._searches)

    def interactions(self) -> List[InteractionRecord]:
        return list(self._interactions)

    def user_preferences(self, user_id: str, listings: ListingStore) -> UserPreferences:
        now = self._clock.now()
        search_cutoff = now - timedelta(days=30)
        interaction_cutoff = now - timedelta(days=60)

        recent_searches = sorted(
            (s for s in self._searches if s.user_id == user_id and s.recorded_at > search_cutoff),
            key=lambda item: item.recorded_at,
            reverse=True,
        )[:50]
        search_terms = [s.query for s in recent_searches if s.query and len(s.query) > 2][:20]

        categories: Counter = Counter()
        cities: Counter = Counter()
        for interaction in self._interactions:
            if interaction.user_id != user_id or interaction.interaction_type not in ENGAGED_INTERACTIONS:
                continue
            if interaction.recorded_at <= interaction_cutoff:
                continue
            listing = listings.get_listing_by_id(interaction.listing_id)
            if listing is None:
                continue
            if listing.category:
                categories[listing.category] += 1
            if listing.location.city:
                cities[listing.location.city] += 1

        recent_count = sum(
            1 for i in self._interactions if i.user_id == user_id and i.recorded_at > search_cutoff
        )
        return UserPreferences(
            user_id=user_id,
            search_terms=search_terms,
            favorite_categories=[name for name, _ in _most_common(categories, 10)],
            preferred_locations=[name for name, _ in _most_common(cities, 5)],
            interaction_score=min(recent_count / 10, 1.0),
        )

    def popular_listing_ids(self, limit: int = 10) -> List[str]:
        cutoff = self._clock.now() - timedelta(days=7)
        counts: Counter = Counter(
            i.listing_id
            for i in self._interactions
            if i.recorded_at > cutoff and i.interaction_type in ENGAGED_INTERACTIONS
        )
        return [listing_id for listing_id, _ in _most_common(counts, limit)]

    def trending_search_terms(self, limit: int = 10) -> List[str]:
        cutoff = self._clock.now() - timedelta(days=7)
        counts: Counter = Counter(
            s.query.strip().lower() for s in self._searches if s.recorded_at > cutoff and s.query.strip()
        )
        return [term for term, _ in _most_common(counts, limit)]


def _most_common(counter: Counter, limit: int) -> List[tuple]:
    return sorted(counter.items(), key=lambda item: (-item[1], item[0]))[:limit]
