from __future__ import annotations

import pytest

from services.geo.distance import haversine_distance_km, within_radius_km
from services.geo.text import (
    collapse_whitespace,
    levenshtein_similarity,
    normalize_address,
    normalize_email,
    normalize_phone,
    normalize_text,
)


BERLIN = (52.5200, 13.4050)
MUNICH = (48.1351, 11.5820)


def test_haversine_is_zero_for_identical_points():
    assert haversine_distance_km(*BERLIN, *BERLIN) == 0


def test_haversine_known_distance_and_symmetry():
    distance = haversine_distance_km(*BERLIN, *MUNICH)
    assert distance == pytest.approx(504, abs=3)
    assert haversine_distance_km(*MUNICH, *BERLIN) == pytest.approx(distance)


def test_within_radius_rejects_missing_coordinates():
    assert within_radius_km(BERLIN[0], BERLIN[1], 52.5201, 13.4051, 1.0)
    assert not within_radius_km(BERLIN[0], BERLIN[1], *MUNICH, 100.0)
    assert not within_radius_km(BERLIN[0], BERLIN[1], None, 13.4, 1.0)


def test_levenshtein_similarity_bounds():
    assert levenshtein_similarity("", "") == 1.0
    assert levenshtein_similarity("farm", "farm") == 1.0
    assert levenshtein_similarity("abc", "xyz") == 0.0
    assert levenshtein_similarity("kitten", "sitting") == pytest.approx(1 - 3 / 7)
    assert levenshtein_similarity("Farm", "farm") < 1.0


def test_similar_titles_score_above_proximity_threshold():
    similarity = levenshtein_similarity(
        normalize_text("Green Valley Farm"),
        normalize_text("Green Valley Farm Shop"),
    )
    assert similarity == pytest.approx(1 - 5 / 22)
    assert similarity >= 0.7


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Hauptstraße 123", "hauptstr 123"),
        ("Hauptstr. 123", "hauptstr 123"),
        ("Hauptstrasse 123a", "hauptstr 123"),
        ("  Main   Street 5, ", "main str 5"),
        ("Streetfood Ecke 5", "streetfood ecke 5"),
        ("", ""),
    ],
)
def test_normalize_address_variants(raw, expected):
    assert normalize_address(raw) == expected


@pytest.mark.parametrize(
    "raw",
    ["Hauptstraße 123", "Musterstr. 4b", "10 Main Street.", "Am Markt 7a, Hinterhaus", "Str.straße 1a2b"],
)
def test_normalize_address_is_idempotent(raw):
    once = normalize_address(raw)
    assert normalize_address(once) == once


def test_normalize_text_strips_punctuation_and_case():
    assert normalize_text("  Green-Valley  FARM! ") == "greenvalley farm"
    assert normalize_text(None) == ""
    assert collapse_whitespace(" a \t b\n") == "a b"


def test_normalize_phone_drops_country_and_trunk_prefix():
    assert normalize_phone("+49 30 1234567") == "301234567"
    assert normalize_phone("030 / 123 45 67") == "301234567"
    assert normalize_phone("  ") is None
    assert normalize_phone(None) is None


def test_normalize_email_trims_and_lowercases():
    assert normalize_email("  Farm@Example.COM ") == "farm@example.com"
    assert normalize_email("") is None
