from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone

from services.analytics.repository import BehaviorRepository
from services.analytics.service import AnalyticsRecorder
from services.common.clock import FrozenClock
from services.common.enums import InteractionType, SearchType
from services.listings.models import Listing, Location
from services.listings.repository import ListingRepository


NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
DAY = 24 * 60 * 60


def _listing(listing_id: str, category: str, city: str) -> Listing:
    return Listing(
        id=listing_id,
        user_id="owner",
        title=listing_id,
        description="",
        category=category,
        location=Location(latitude=0.0, longitude=0.0, address="x", city=city),
        created_at=NOW,
    )


def _search(repo: BehaviorRepository, user_id: str, query: str) -> None:
    repo.record_search(user_id=user_id, query=query, search_type=SearchType.semantic, result_count=1, filters={})


def _interact(repo: BehaviorRepository, user_id: str, listing_id: str, kind=InteractionType.view) -> None:
    repo.record_interaction(user_id=user_id, listing_id=listing_id, interaction_type=kind)


def test_user_preferences_windows_and_ranking():
    clock = FrozenClock(NOW - timedelta(days=45))
    behavior = BehaviorRepository(clock=clock)
    listings = ListingRepository(
        [_listing("l1", "farm", "Berlin"), _listing("l2", "market", "Hamburg"), _listing("l3", "farm", "Berlin")]
    )

    _search(behavior, "u1", "stale honey")
    _interact(behavior, "u1", "l2")
    clock.advance(40 * DAY)
    _search(behavior, "u1", "eggs")
    _search(behavior, "u1", "ok")
    _interact(behavior, "u1", "l1")
    _interact(behavior, "u1", "l3", InteractionType.favorite)
    _interact(behavior, "u1", "l2", InteractionType.share)
    _interact(behavior, "u2", "l2")
    clock.advance(5 * DAY)

    prefs = behavior.user_preferences("u1", listings)
    assert prefs.search_terms == ["eggs"]
    assert prefs.favorite_categories == ["farm", "market"]
    assert prefs.preferred_locations == ["Berlin", "Hamburg"]
    assert prefs.interaction_score == 0.3
    assert not prefs.is_empty
    assert behavior.user_preferences("nobody", listings).is_empty


def test_popular_listings_and_trending_terms_use_last_week():
    clock = FrozenClock(NOW - timedelta(days=10))
    behavior = BehaviorRepository(clock=clock)
    _interact(behavior, "u1", "old")
    _search(behavior, "u1", "old term")
    clock.advance(8 * DAY)
    for user in ("u1", "u2"):
        _interact(behavior, user, "b")
        _search(behavior, user, " Honey ")
    _interact(behavior, "u3", "a", InteractionType.contact)
    _interact(behavior, "u3", "c", InteractionType.unfavorite)
    _search(behavior, "u3", "eggs")

    assert behavior.popular_listing_ids(limit=5) == ["b", "a"]
    assert behavior.trending_search_terms(limit=5) == ["honey", "eggs"]


def test_recorder_runs_on_executor_and_ignores_missing_sink():
    behavior = BehaviorRepository()
    with ThreadPoolExecutor(max_workers=1) as executor:
        recorder = AnalyticsRecorder(behavior, executor=executor)
        recorder.record_interaction(user_id="u1", listing_id="l1", interaction_type=InteractionType.view)
    assert len(behavior.interactions()) == 1

    AnalyticsRecorder(None).record_search(
        user_id=None, query="q", search_type=SearchType.keyword, result_count=0, filters={}
    )


def test_recorder_drops_events_when_executor_is_shut_down(caplog):
    behavior = BehaviorRepository()
    executor = ThreadPoolExecutor(max_workers=1)
    executor.shutdown()
    recorder = AnalyticsRecorder(behavior, executor=executor)
    recorder.record_search(user_id="u1", query="q", search_type=SearchType.hybrid, result_count=0, filters={})
    assert behavior.searches() == []
    assert "dropped record_search" in caplog.text
