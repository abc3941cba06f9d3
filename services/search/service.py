from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, TypeVar

from services.analytics.repository import BehaviorRepository
from services.analytics.service import AnalyticsRecorder
from services.common.clock import ensure_timezone
from services.common.enums import InteractionType, ResultSource, SearchType, SortField
from services.common.errors import InvalidQuery, NotFound, SearchCancelled, UpstreamTimeout
from services.common.observability import Observability
from services.embedding.models import listing_id_from_vector
from services.embedding.service import EmbeddingGateway, create_searchable_text
from services.geo.distance import within_radius_km
from services.listings.models import Listing
from services.listings.repository import ListingStore
from services.search.keyword import KeywordSearchService
from services.search.models import (
    HybridSearchResult,
    KeywordFilters,
    KeywordSearchQuery,
    SemanticSearchQuery,
    SemanticSearchResult,
)
from services.search.scoring import RelevanceScorer, clamp_score, matched_tag_ratio
from services.vector_index.repository import VectorIndex


logger = logging.getLogger(__name__)

T = TypeVar("T")

POPULAR_LISTING_SCORE = 0.9
RECENT_LISTING_SCORE = 0.8


@dataclass(frozen=True)
class SearchSettings:
    upstream_timeout_s: float = 10.0
    keyword_base_score: float = 0.5
    recommendation_min_score: float = 0.7


class SemanticSearchService:
    def __init__(
        self,
        *,
        listings: ListingStore,
        embeddings: EmbeddingGateway,
        vector_index: VectorIndex,
        keyword: Optional[KeywordSearchService] = None,
        scorer: Optional[RelevanceScorer] = None,
        analytics: Optional[AnalyticsRecorder] = None,
        behavior: Optional[BehaviorRepository] = None,
        settings: Optional[SearchSettings] = None,
        executor: Optional[Executor] = None,
        observability: Optional[Observability] = None,
    ) -> None:
        self._listings = listings
        self._embeddings = embeddings
        self._vector_index = vector_index
        self._keyword = keyword or KeywordSearchService(listings)
        self._scorer = scorer or RelevanceScorer()
        self._analytics = analytics or AnalyticsRecorder(behavior)
        self._behavior = behavior
        self._settings = settings or SearchSettings()
        self._executor = executor or ThreadPoolExecutor(max_workers=4, thread_name_prefix="search")
        self._observability = observability or Observability()

    @property
    def observability(self) -> Observability:
        return self._observability

    def semantic_search(
        self,
        query: SemanticSearchQuery,
        *,
        user_id: Optional[str] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[SemanticSearchResult]:
        started = time.perf_counter()
        self._validate(query)
        ranked = self._rank_semantic(query, cancel_event)
        page = _paginate(ranked, query.page, query.limit)
        self._observability.record(
            "semantic_search",
            result_count=len(page),
            search_time_ms=_elapsed_ms(started),
        )
        self._analytics.record_search(
            user_id=user_id,
            query=query.query,
            search_type=SearchType.semantic,
            result_count=len(page),
            filters=query.analytics_filters(),
        )
        return page

    def hybrid_search(
        self,
        query: SemanticSearchQuery,
        *,
        user_id: Optional[str] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> HybridSearchResult:
        started = time.perf_counter()
        self._validate(query)
        keyword_future = self._executor.submit(self._keyword.matching, self._keyword_query(query))
        try:
            semantic = self._rank_semantic(query, cancel_event)
            keyword_listings = self._await(keyword_future, "keyword_search")
        except BaseException:
            keyword_future.cancel()
            raise
        self._check_cancelled(cancel_event, "merge")

        combined = self._merge(semantic, keyword_listings)
        search_time_ms = _elapsed_ms(started)
        result = HybridSearchResult(
            semantic_results=_paginate(semantic, query.page, query.limit),
            keyword_results=_paginate(keyword_listings, query.page, query.limit),
            combined_results=_paginate(combined, query.page, query.limit),
            total_results=len(combined),
            search_time_ms=search_time_ms,
            page=query.page,
            limit=query.limit,
        )
        self._observability.record(
            "hybrid_search",
            semantic_count=len(semantic),
            keyword_count=len(keyword_listings),
            combined_count=len(combined),
            search_time_ms=search_time_ms,
        )
        self._analytics.record_search(
            user_id=user_id,
            query=query.query,
            search_type=SearchType.hybrid,
            result_count=len(combined),
            filters=query.analytics_filters(),
        )
        return result

    def find_similar_listings(self, listing_id: str, limit: int = 5) -> List[SemanticSearchResult]:
        listing = self._listings.get_listing_by_id(listing_id)
        if listing is None:
            raise NotFound("Listing not found", details={"listing_id": listing_id})
        query = SemanticSearchQuery(
            query=create_searchable_text(listing),
            limit=limit + 1,
            category=listing.category or None,
        )
        self._validate(query)
        ranked = self._rank_semantic(query, None)[: limit + 1]
        return [result for result in ranked if result.id != listing_id][:limit]

    def personalized_recommendations(self, user_id: str, limit: int = 10) -> List[SemanticSearchResult]:
        if self._behavior is None:
            return self._popular_listings(limit)
        preferences = self._behavior.user_preferences(user_id, self._listings)
        if preferences.is_empty:
            return self._popular_listings(limit)
        text = " ".join(preferences.search_terms + preferences.favorite_categories)
        query = SemanticSearchQuery(
            query=text,
            limit=limit,
            min_score=self._settings.recommendation_min_score,
        )
        return _paginate(self._rank_semantic(query, None), 1, limit)

    def record_interaction(
        self,
        *,
        user_id: str,
        listing_id: str,
        interaction_type: InteractionType,
        duration_seconds: Optional[float] = None,
    ) -> None:
        self._analytics.record_interaction(
            user_id=user_id,
            listing_id=listing_id,
            interaction_type=interaction_type,
            duration_seconds=duration_seconds,
        )

    def _validate(self, query: SemanticSearchQuery) -> None:
        if not (query.query or "").strip():
            raise InvalidQuery("Search query must contain at least one non-whitespace character")
        if query.limit < 1 or query.page < 1:
            raise InvalidQuery("page and limit must be positive", details={"page": query.page, "limit": query.limit})
        if query.min_score is not None and not 0.0 <= query.min_score <= 1.0:
            raise InvalidQuery("min_score must be within [0, 1]", details={"min_score": query.min_score})

    def _check_cancelled(self, cancel_event: Optional[threading.Event], stage: str) -> None:
        if cancel_event is not None and cancel_event.is_set():
            self._observability.record("cancelled", stage=stage)
            raise SearchCancelled(details={"stage": stage})

    def _call_with_timeout(self, stage: str, func: Callable[..., T], *args: Any) -> T:
        return self._await(self._executor.submit(func, *args), stage)

    def _await(self, future: "Future[T]", stage: str) -> T:
        timeout_s = self._settings.upstream_timeout_s
        try:
            return future.result(timeout=timeout_s)
        except FutureTimeoutError as exc:
            future.cancel()
            logger.warning("%s exceeded %.1fs upstream timeout", stage, timeout_s)
            self._observability.record("timeout", stage=stage, timeout_s=timeout_s)
            raise UpstreamTimeout(f"{stage} timed out", details={"stage": stage, "timeout_s": timeout_s}) from exc

    def _rank_semantic(
        self,
        query: SemanticSearchQuery,
        cancel_event: Optional[threading.Event],
    ) -> List[SemanticSearchResult]:
        self._check_cancelled(cancel_event, "embed")
        vector = self._call_with_timeout("embedding", self._embeddings.embed, query.query.strip())

        self._check_cancelled(cancel_event, "vector_query")
        metadata_filter: Optional[Dict[str, Any]] = {"category": query.category} if query.category else None
        matches = self._call_with_timeout(
            "vector_index",
            self._vector_index.query,
            vector,
            query.page * query.limit,
            metadata_filter,
        )
        candidate_count = len(matches)
        if query.min_score is not None:
            matches = [match for match in matches if match.score >= query.min_score]

        listing_ids = [listing_id_from_vector(match.id, match.metadata) for match in matches]
        hydrated = {listing.id: listing for listing in self._listings.get_listings_by_ids(listing_ids)}

        results: Dict[str, SemanticSearchResult] = {}
        stale = 0
        for match, listing_id in zip(matches, listing_ids):
            listing = hydrated.get(listing_id)
            if listing is None:
                stale += 1
                continue
            if listing_id in results or not _passes_post_filters(listing, query):
                continue
            similarity = clamp_score(match.score)
            relevance = self._scorer.score(similarity, listing, query)
            results[listing_id] = _to_result(listing, similarity, relevance, ResultSource.semantic)

        self._check_cancelled(cancel_event, "score")
        ranked = _sort_results(list(results.values()))
        self._observability.record(
            "semantic_candidates",
            candidate_count=candidate_count,
            above_min_score=len(matches),
            stale_ids=stale,
            kept=len(ranked),
        )
        return ranked

    def _keyword_query(self, query: SemanticSearchQuery) -> KeywordSearchQuery:
        location = query.location
        return KeywordSearchQuery(
            query=query.query.strip(),
            filters=KeywordFilters(
                categories=[query.category] if query.category else [],
                city=location.city if location else None,
                tags=list(query.tags),
                center=location.center if location else None,
            ),
            sort_by=SortField.relevance,
        )

    def _merge(self, semantic: List[SemanticSearchResult], keyword: List[Listing]) -> List[SemanticSearchResult]:
        combined: Dict[str, SemanticSearchResult] = {result.id: result for result in semantic}
        base = self._settings.keyword_base_score
        for listing in keyword:
            if listing.id in combined:
                continue
            combined[listing.id] = _to_result(listing, base, base, ResultSource.keyword)
        return _sort_results(list(combined.values()))

    def _popular_listings(self, limit: int) -> List[SemanticSearchResult]:
        popular_ids = self._behavior.popular_listing_ids(limit) if self._behavior else []
        if popular_ids:
            listings = self._listings.get_listings_by_ids(popular_ids)
            score = POPULAR_LISTING_SCORE
        else:
            listings = self._listings.get_active_listings(limit=limit)
            score = RECENT_LISTING_SCORE
        return [_to_result(listing, score, score, ResultSource.semantic) for listing in listings[:limit]]


def _passes_post_filters(listing: Listing, query: SemanticSearchQuery) -> bool:
    center = query.location.center if query.location else None
    if center is not None and not within_radius_km(
        center.latitude,
        center.longitude,
        listing.location.latitude,
        listing.location.longitude,
        center.radius_km,
    ):
        return False
    if query.tags and matched_tag_ratio(listing.tags, query.tags) == 0.0:
        return False
    return True


def _to_result(listing: Listing, score: float, relevance: float, source: ResultSource) -> SemanticSearchResult:
    return SemanticSearchResult(
        id=listing.id,
        title=listing.title,
        description=listing.description,
        category=listing.category,
        location=listing.location,
        tags=list(listing.tags),
        images=list(listing.images),
        user_id=listing.user_id,
        created_at=listing.created_at,
        updated_at=listing.updated_at,
        score=score,
        relevance_score=relevance,
        source=source,
    )


def _sort_results(results: List[SemanticSearchResult]) -> List[SemanticSearchResult]:
    return sorted(
        results,
        key=lambda item: (-item.relevance_score, -ensure_timezone(item.created_at).timestamp(), item.id),
    )


def _paginate(items: List[T], page: int, limit: int) -> List[T]:
    start = (page - 1) * limit
    return items[start : start + limit]


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 3)
