from services.duplicates.models import DuplicateMatch
from services.duplicates.service import (
    DuplicateDetectionConfig,
    DuplicateDetectionService,
    blocking_matches,
    should_block,
)

__all__ = [
    "DuplicateDetectionConfig",
    "DuplicateDetectionService",
    "DuplicateMatch",
    "blocking_matches",
    "should_block",
]
