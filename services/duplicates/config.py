from __future__ import annotations

import os
from typing import Optional

from services.common.observability import Observability
from services.duplicates.service import DuplicateDetectionConfig, DuplicateDetectionService
from services.listings.repository import ListingRepository


def load_duplicate_config() -> DuplicateDetectionConfig:
    max_candidates = os.getenv("DUPLICATE_MAX_CANDIDATES")
    return DuplicateDetectionConfig(
        same_country_only=os.getenv("DUPLICATE_SAME_COUNTRY_ONLY", "false").lower() == "true",
        max_candidates=int(max_candidates) if max_candidates else None,
        block_threshold=int(os.getenv("DUPLICATE_BLOCK_THRESHOLD", "80")),
    )


def build_duplicate_service(
    *,
    config: Optional[DuplicateDetectionConfig] = None,
    listings: Optional[ListingRepository] = None,
) -> tuple[DuplicateDetectionService, ListingRepository]:
    cfg = config or load_duplicate_config()
    repo = listings or ListingRepository()
    service = DuplicateDetectionService(repo, config=cfg, observability=Observability())
    return service, repo
