"""Keyword opportunity scoring for researched keywords."""

from __future__ import annotations

import re

MIN_PRIORITY = 1
MAX_PRIORITY = 10
BASE_PRIORITY = 5

COMMERCIAL_PATTERN = re.compile(r"buy|best|cheap|price|under \$|review")


def score_priority(
    keyword: str,
    *,
    search_volume: int | None,
    keyword_difficulty: float | None,
    avg_competitor_authority: float | None = None,
) -> int:
    """Score a researched keyword on the 1-10 priority scale.

    Volume and low difficulty add points, hard keywords lose one, weak SERP
    competition, wine relevance and commercial modifiers add one each.
    """
    priority = BASE_PRIORITY
    volume = search_volume or 0
    difficulty = keyword_difficulty if keyword_difficulty is not None else 50.0
    lowered = keyword.lower()

    if volume > 1000:
        priority += 2
    elif volume > 500:
        priority += 1

    if difficulty < 25:
        priority += 2
    elif difficulty > 50:
        priority -= 1

    if avg_competitor_authority is not None and avg_competitor_authority < 60:
        priority += 1

    if "pairing" in lowered or "wine" in lowered:
        priority += 1

    if COMMERCIAL_PATTERN.search(lowered):
        priority += 1

    return min(MAX_PRIORITY, max(MIN_PRIORITY, priority))


def competition_bucket(search_volume: int | None) -> str:
    """Coarse competition label used when the provider gives none."""
    volume = search_volume or 0
    if volume > 10000:
        return "high"
    if volume > 3000:
        return "medium"
    return "low"
