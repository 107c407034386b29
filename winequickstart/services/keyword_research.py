"""Keyword research: expand seeds through DataForSEO, score, store new phrasings."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from winequickstart.core.result import Result, capture_async
from winequickstart.keywords.dedup import STATUS_ACTIVE, canonicalize
from winequickstart.keywords.scoring import competition_bucket, score_priority
from winequickstart.models.keyword import KeywordOpportunity
from winequickstart.services.seo import determine_intent, determine_seasonality

logger = logging.getLogger(__name__)

COMPETITION_LEVELS = {"low", "medium", "high"}


class KeywordIdeaSource(Protocol):
    async def get_keyword_suggestions(self, seeds: list[str], limit: int = 700) -> list[dict[str, Any]]: ...


class ResearchStore(Protocol):
    async def list_all(self) -> list[KeywordOpportunity]: ...

    async def upsert_many(self, rows: Sequence[Mapping[str, Any]]) -> int: ...


@dataclass(slots=True)
class ResearchReport:
    fetched: int = 0
    skipped_known: list[str] = field(default_factory=list)
    skipped_filtered: list[str] = field(default_factory=list)
    rows: list[dict[str, Any]] = field(default_factory=list)
    batch_results: list[Result[int]] = field(default_factory=list)

    @property
    def stored(self) -> int:
        return sum(result.unwrap() for result in self.batch_results if result.ok)

    @property
    def failed_batches(self) -> int:
        return sum(1 for result in self.batch_results if not result.ok)


def build_keyword_row(idea: Mapping[str, Any]) -> dict[str, Any]:
    """Turn a provider keyword idea into a `keyword_opportunities` row."""
    keyword = str(idea["keyword"]).strip().lower()
    volume = idea.get("search_volume")
    difficulty = idea.get("keyword_difficulty")
    level = str(idea.get("competition_level") or "").lower()

    return {
        "keyword": keyword,
        "search_volume": int(volume) if volume is not None else None,
        "keyword_difficulty": float(difficulty) if difficulty is not None else None,
        "cpc": idea.get("cpc"),
        "competition": level if level in COMPETITION_LEVELS else competition_bucket(volume),
        "intent": determine_intent(keyword),
        "seasonality": determine_seasonality(keyword),
        "priority": score_priority(
            keyword,
            search_volume=volume,
            keyword_difficulty=difficulty,
        ),
        "status": STATUS_ACTIVE,
    }


def select_new_rows(
    ideas: Sequence[Mapping[str, Any]],
    known_keys: set[str],
    *,
    min_volume: int = 0,
    must_contain: Sequence[str] = (),
    report: ResearchReport | None = None,
) -> list[dict[str, Any]]:
    """Keep the highest-volume phrasing of each canonical key not already stored."""
    report = report if report is not None else ResearchReport()
    ranked = sorted(ideas, key=lambda idea: -(idea.get("search_volume") or 0))
    terms = [term.lower() for term in must_contain]

    rows: list[dict[str, Any]] = []
    seen = set(known_keys)
    for idea in ranked:
        text = str(idea.get("keyword") or "").strip()
        if not text:
            continue
        if (idea.get("search_volume") or 0) < min_volume or (
            terms and not any(term in text.lower() for term in terms)
        ):
            report.skipped_filtered.append(text)
            continue
        key = canonicalize(text)
        if key in seen:
            report.skipped_known.append(text)
            continue
        seen.add(key)
        rows.append(build_keyword_row(idea))
    return rows


async def run_keyword_research(
    source: KeywordIdeaSource,
    store: ResearchStore,
    seeds: Sequence[str],
    *,
    limit: int = 700,
    min_volume: int = 0,
    must_contain: Sequence[str] = (),
    batch_size: int = 50,
    dry_run: bool = False,
) -> ResearchReport:
    """Fetch ideas for `seeds` and store phrasings whose canonical key is new.

    Each batch write is recorded as its own `Success`/`Failure` so one failing
    batch does not hide the ones that landed.
    """
    report = ResearchReport()
    ideas = await source.get_keyword_suggestions(list(seeds), limit=limit)
    report.fetched = len(ideas)

    known_keys = {record.canonical_key for record in await store.list_all()}
    report.rows = select_new_rows(
        ideas,
        known_keys,
        min_volume=min_volume,
        must_contain=must_contain,
        report=report,
    )
    report.rows.sort(key=lambda row: (-row["priority"], -(row["search_volume"] or 0)))

    logger.info(
        "Keyword research candidates ready",
        extra={
            "seeds": len(seeds),
            "fetched": report.fetched,
            "new": len(report.rows),
            "known": len(report.skipped_known),
            "filtered": len(report.skipped_filtered),
        },
    )

    if dry_run:
        return report

    for start in range(0, len(report.rows), batch_size):
        batch = report.rows[start : start + batch_size]
        report.batch_results.append(
            await capture_async(
                lambda batch=batch: store.upsert_many(batch),
                context="upsert keyword batch",
                log_context={"batch_start": start, "batch_size": len(batch)},
            )
        )
    return report


class KeywordMetricsSource(Protocol):
    async def get_keyword_metrics(self, keywords: list[str]) -> list[dict[str, Any]]: ...


async def refresh_keyword_metrics(
    source: KeywordMetricsSource,
    store: ResearchStore,
    keywords: Sequence[str],
    *,
    batch_size: int = 50,
) -> list[Result[int]]:
    """Re-fetch metrics for stored keywords and rescore them.

    Only keywords that were asked for are written back, so the provider's
    normalized spellings never create new rows. Statuses are untouched.
    """
    wanted = set(keywords)
    metrics = await source.get_keyword_metrics(list(keywords))
    rows = [
        build_keyword_row(metric)
        for metric in metrics
        if metric.get("keyword") and str(metric["keyword"]).strip().lower() in wanted
    ]
    logger.info(
        "Keyword metrics fetched",
        extra={"requested": len(wanted), "returned": len(metrics), "matched": len(rows)},
    )

    results: list[Result[int]] = []
    for start in range(0, len(rows), batch_size):
        batch = rows[start : start + batch_size]
        results.append(
            await capture_async(
                lambda batch=batch: store.upsert_many(batch),
                context="refresh keyword metrics batch",
                log_context={"batch_start": start, "batch_size": len(batch)},
            )
        )
    return results
