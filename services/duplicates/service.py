"""Duplicate-listing detection for new listing drafts.

Every active listing not owned by the submitting user is compared against the
draft with four independent strategies. An exact address hit short-circuits the
rest for that pair; otherwise every strategy that fires contributes its own
match, so a single existing listing can appear more than once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from services.common.enums import MatchType
from services.common.observability import Observability
from services.duplicates.models import DuplicateMatch
from services.geo.distance import haversine_distance_km
from services.geo.text import (
    levenshtein_similarity,
    normalize_address,
    normalize_email,
    normalize_phone,
    normalize_text,
)
from services.listings.models import Listing, ListingDraft, Location
from services.listings.repository import ListingStore


logger = logging.getLogger(__name__)

EXACT_ADDRESS_CONFIDENCE = 95
EMAIL_CONFIDENCE = 85
PHONE_CONFIDENCE = 80

PROXIMITY_RADIUS_KM = 0.1
PROXIMITY_MIN_SIMILARITY = 0.7
PROXIMITY_MAX_CONFIDENCE = 90

FUZZY_RADIUS_KM = 0.05
FUZZY_MIN_SIMILARITY = 0.5
FUZZY_MAX_CONFIDENCE = 75


@dataclass(frozen=True)
class DuplicateDetectionConfig:
    same_country_only: bool = False
    max_candidates: Optional[int] = None
    block_threshold: int = 80


def should_block(matches: Iterable[DuplicateMatch], threshold: int = 80) -> bool:
    return any(match.confidence >= threshold for match in matches)


def blocking_matches(matches: Iterable[DuplicateMatch], threshold: int = 80) -> List[DuplicateMatch]:
    return [match for match in matches if match.confidence >= threshold]


def _distance_km(left: Location, right: Location) -> Optional[float]:
    if None in (left.latitude, left.longitude, right.latitude, right.longitude):
        return None
    return haversine_distance_km(left.latitude, left.longitude, right.latitude, right.longitude)


def _match(existing: Listing, match_type: MatchType, confidence: int, reason: str) -> DuplicateMatch:
    return DuplicateMatch(
        listing_id=existing.id,
        title=existing.title,
        address=existing.location.address,
        user_id=existing.user_id,
        match_type=match_type,
        confidence=confidence,
        reason=reason,
    )


def exact_address_match(draft: ListingDraft, existing: Listing) -> Optional[DuplicateMatch]:
    same_address = normalize_address(draft.location.address) == normalize_address(existing.location.address)
    same_city = normalize_text(draft.location.city) == normalize_text(existing.location.city)
    if not (same_address and same_city):
        return None
    return _match(
        existing,
        MatchType.exact_address,
        EXACT_ADDRESS_CONFIDENCE,
        f"Same address: {existing.location.address}, {existing.location.city}",
    )


def proximity_title_match(draft: ListingDraft, existing: Listing) -> Optional[DuplicateMatch]:
    distance = _distance_km(draft.location, existing.location)
    if distance is None or distance > PROXIMITY_RADIUS_KM:
        return None
    similarity = levenshtein_similarity(normalize_text(draft.title), normalize_text(existing.title))
    if similarity < PROXIMITY_MIN_SIMILARITY:
        return None
    return _match(
        existing,
        MatchType.proximity_title,
        min(PROXIMITY_MAX_CONFIDENCE, round(similarity * 100)),
        f'Similar title "{existing.title}" within {round(distance * 1000)}m',
    )


def contact_info_match(draft: ListingDraft, existing: Listing) -> Optional[DuplicateMatch]:
    email = normalize_email(draft.contact_info.email)
    if email and email == normalize_email(existing.contact_info.email):
        return _match(existing, MatchType.contact_info, EMAIL_CONFIDENCE, f"Same email address: {email}")
    phone = normalize_phone(draft.contact_info.phone)
    if phone and phone == normalize_phone(existing.contact_info.phone):
        return _match(existing, MatchType.contact_info, PHONE_CONFIDENCE, f"Same phone number: {phone}")
    return None


def fuzzy_location_match(draft: ListingDraft, existing: Listing) -> Optional[DuplicateMatch]:
    distance = _distance_km(draft.location, existing.location)
    if distance is None or distance > FUZZY_RADIUS_KM:
        return None
    similarity = levenshtein_similarity(normalize_text(draft.title), normalize_text(existing.title))
    if similarity < FUZZY_MIN_SIMILARITY:
        return None
    return _match(
        existing,
        MatchType.fuzzy_location,
        min(FUZZY_MAX_CONFIDENCE, round(similarity * 80)),
        f'Similar listing "{existing.title}" within {round(distance * 1000)}m',
    )


SECONDARY_STRATEGIES = (proximity_title_match, contact_info_match, fuzzy_location_match)


class DuplicateDetectionService:
    def __init__(
        self,
        listings: ListingStore,
        *,
        config: Optional[DuplicateDetectionConfig] = None,
        observability: Optional[Observability] = None,
    ) -> None:
        self._listings = listings
        self._config = config or DuplicateDetectionConfig()
        self._observability = observability or Observability()

    @property
    def config(self) -> DuplicateDetectionConfig:
        return self._config

    @property
    def observability(self) -> Observability:
        return self._observability

    def check_for_duplicates(
        self,
        draft: ListingDraft,
        owner_user_id: str,
        *,
        exclude_listing_id: Optional[str] = None,
    ) -> List[DuplicateMatch]:
        matches: List[DuplicateMatch] = []
        candidates = self._candidates(draft, owner_user_id, exclude_listing_id)
        compared = 0
        for existing in candidates:
            if existing.user_id == owner_user_id:
                continue
            compared += 1
            exact = exact_address_match(draft, existing)
            if exact is not None:
                matches.append(exact)
                continue
            for strategy in SECONDARY_STRATEGIES:
                match = strategy(draft, existing)
                if match is not None:
                    matches.append(match)

        matches.sort(key=lambda match: match.confidence, reverse=True)
        self._observability.record(
            "duplicate_check",
            candidate_count=len(candidates),
            compared=compared,
            match_count=len(matches),
        )
        if should_block(matches, self._config.block_threshold):
            logger.info(
                "Draft %r has %d high-confidence duplicate(s)",
                draft.title,
                len(blocking_matches(matches, self._config.block_threshold)),
            )
        return matches

    def _candidates(
        self,
        draft: ListingDraft,
        owner_user_id: str,
        exclude_listing_id: Optional[str],
    ) -> List[Listing]:
        country = draft.location.country if self._config.same_country_only and draft.location.country else None
        limit = self._config.max_candidates
        # Over-fetch by one; the excluded listing may sit among the most recent.
        fetch = limit + 1 if limit is not None and exclude_listing_id else limit
        listings = self._listings.get_active_listings(
            country=country,
            exclude_user_id=owner_user_id,
            limit=fetch,
        )
        candidates = [listing for listing in listings if listing.id != exclude_listing_id]
        return candidates if limit is None else candidates[:limit]
