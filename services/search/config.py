from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

from services.analytics.repository import BehaviorRepository
from services.analytics.service import AnalyticsRecorder
from services.common.observability import Observability
from services.embedding.config import EmbeddingConfig, build_embedding_gateway
from services.embedding.service import EmbeddingGateway
from services.listings.repository import ListingRepository
from services.search.keyword import KeywordSearchService
from services.search.scoring import RelevanceScorer, RelevanceWeights
from services.search.service import SearchSettings, SemanticSearchService
from services.vector_index.repository import VectorIndex


@dataclass(frozen=True)
class SearchConfig:
    default_limit: int = 20
    upstream_timeout_s: float = 10.0
    keyword_base_score: float = 0.5
    recency_days: int = 30
    recommendation_min_score: float = 0.7
    max_workers: int = 4


@dataclass(frozen=True)
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 8010


def load_search_config() -> SearchConfig:
    return SearchConfig(
        default_limit=int(os.getenv("SEARCH_DEFAULT_LIMIT", "20")),
        upstream_timeout_s=float(os.getenv("SEARCH_UPSTREAM_TIMEOUT_S", "10")),
        keyword_base_score=float(os.getenv("SEARCH_KEYWORD_BASE_SCORE", "0.5")),
        recency_days=int(os.getenv("SEARCH_RECENCY_DAYS", "30")),
        recommendation_min_score=float(os.getenv("SEARCH_RECOMMENDATION_MIN_SCORE", "0.7")),
        max_workers=int(os.getenv("SEARCH_MAX_WORKERS", "4")),
    )


def load_server_config() -> ServerConfig:
    return ServerConfig(
        host=os.getenv("SEARCH_HOST", ServerConfig.host),
        port=int(os.getenv("SEARCH_PORT", str(ServerConfig.port))),
    )


def build_search_service(
    *,
    config: Optional[SearchConfig] = None,
    embedding_config: Optional[EmbeddingConfig] = None,
    listings: Optional[ListingRepository] = None,
    behavior: Optional[BehaviorRepository] = None,
    embeddings: Optional[EmbeddingGateway] = None,
    vector_index: Optional[VectorIndex] = None,
) -> tuple[SemanticSearchService, ListingRepository, BehaviorRepository]:
    cfg = config or load_search_config()
    observability = Observability()
    if embeddings is not None and vector_index is not None:
        gateway, index = embeddings, vector_index
    else:
        gateway, index = build_embedding_gateway(
            config=embedding_config,
            vector_index=vector_index,
            observability=observability,
        )
    listing_repo = listings or ListingRepository()
    behavior_repo = behavior or BehaviorRepository()
    executor = ThreadPoolExecutor(max_workers=cfg.max_workers, thread_name_prefix="search")
    # Own pool: upstream timeouts include time spent queued behind other work.
    analytics_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="search-analytics")
    service = SemanticSearchService(
        listings=listing_repo,
        embeddings=gateway,
        vector_index=index,
        keyword=KeywordSearchService(listing_repo),
        scorer=RelevanceScorer(weights=RelevanceWeights(recency_days=cfg.recency_days)),
        analytics=AnalyticsRecorder(behavior_repo, executor=analytics_executor),
        behavior=behavior_repo,
        settings=SearchSettings(
            upstream_timeout_s=cfg.upstream_timeout_s,
            keyword_base_score=cfg.keyword_base_score,
            recommendation_min_score=cfg.recommendation_min_score,
        ),
        executor=executor,
        observability=observability,
    )
    return service, listing_repo, behavior_repo
