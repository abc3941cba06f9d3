"""String normalization and similarity helpers shared by search and duplicate detection.

Callers are expected to normalize before comparing: ``levenshtein_similarity`` is
case- and whitespace-sensitive on purpose.
"""

from __future__ import annotations

import re
from typing import Optional

from rapidfuzz.distance import Levenshtein


WHITESPACE_RE = re.compile(r"\s+")
PUNCTUATION_RE = re.compile(r"[.,]")
NON_WORD_RE = re.compile(r"[^\w\s]")
STREET_SUFFIX_RE = re.compile(r"(?:straße|strasse|street)\b")
HOUSE_NUMBER_SUFFIX_RE = re.compile(r"(\d+)[a-z]\b")
NON_DIGIT_RE = re.compile(r"\D")


def collapse_whitespace(value: str) -> str:
    return WHITESPACE_RE.sub(" ", value).strip()


def levenshtein_similarity(left: str, right: str) -> float:
    longest = max(len(left), len(right))
    if longest == 0:
        return 1.0
    return 1.0 - Levenshtein.distance(left, right) / longest


def _address_pass(value: str) -> str:
    value = collapse_whitespace(value.lower())
    value = PUNCTUATION_RE.sub("", value)
    value = STREET_SUFFIX_RE.sub("str", value)
    value = HOUSE_NUMBER_SUFFIX_RE.sub(r"\1", value)
    return collapse_whitespace(value)


def normalize_address(value: Optional[str]) -> str:
    current = value or ""
    # Repeat passes until stable so normalizing twice never changes the result.
    while True:
        normalized = _address_pass(current)
        if normalized == current:
            return normalized
        current = normalized


def normalize_text(value: Optional[str]) -> str:
    lowered = (value or "").lower().strip()
    return collapse_whitespace(NON_WORD_RE.sub("", lowered))


def normalize_phone(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    digits = NON_DIGIT_RE.sub("", value)
    if digits.startswith("49"):
        digits = digits[2:]
    if digits.startswith("0"):
        digits = digits[1:]
    return digits or None


def normalize_email(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return value.strip().lower() or None
