"""Unit tests for keyword research candidate selection and batch storage."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import pytest
from sqlalchemy.exc import OperationalError

from winequickstart.models import KeywordOpportunity
from winequickstart.services.keyword_research import (
    build_keyword_row,
    refresh_keyword_metrics,
    run_keyword_research,
)

IDEAS: list[dict[str, Any]] = [
    {"keyword": "Steak with Wine", "search_volume": 900},
    {
        "keyword": "wine with salmon",
        "search_volume": 1500,
        "keyword_difficulty": 20,
        "competition_level": "LOW",
        "cpc": 1.2,
    },
    {"keyword": "salmon wine with", "search_volume": 100},
    {"keyword": "beer with pizza", "search_volume": 5000},
    {"keyword": "wine with tacos", "search_volume": 20},
    {"keyword": "best wine for pizza", "search_volume": 800, "keyword_difficulty": 60},
]


class _FakeSource:
    def __init__(self) -> None:
        self.calls: list[tuple[list[str], int]] = []

    async def get_keyword_suggestions(self, seeds: list[str], limit: int = 700) -> list[dict[str, Any]]:
        self.calls.append((seeds, limit))
        return [dict(idea) for idea in IDEAS]


class _FakeStore:
    def __init__(self, *, fail_on_batch: int | None = None) -> None:
        self.batches: list[list[str]] = []
        self.fail_on_batch = fail_on_batch

    async def list_all(self) -> list[KeywordOpportunity]:
        return [KeywordOpportunity(id=1, keyword="wine with steak", priority=5, status="used")]

    async def upsert_many(self, rows: Sequence[Mapping[str, Any]]) -> int:
        if self.fail_on_batch == len(self.batches):
            self.batches.append([])
            raise OperationalError("INSERT", {}, Exception("deadlock"))
        self.batches.append([str(row["keyword"]) for row in rows])
        return len(rows)


def test_build_keyword_row_normalizes_provider_idea() -> None:
    row = build_keyword_row(IDEAS[1])

    assert row == {
        "keyword": "wine with salmon",
        "search_volume": 1500,
        "keyword_difficulty": 20.0,
        "cpc": 1.2,
        "competition": "low",
        "intent": "informational",
        "seasonality": "stable",
        "priority": 10,
        "status": "active",
    }


def test_build_keyword_row_buckets_missing_competition() -> None:
    row = build_keyword_row({"keyword": "Best Wine For Pizza", "search_volume": 12000})

    assert row["keyword"] == "best wine for pizza"
    assert row["competition"] == "high"
    assert row["intent"] == "commercial"


@pytest.mark.asyncio
async def test_run_keyword_research_filters_and_orders_new_phrasings() -> None:
    source = _FakeSource()
    store = _FakeStore()

    report = await run_keyword_research(
        source,
        store,
        ["wine with"],
        limit=100,
        min_volume=50,
        must_contain=["wine"],
    )

    assert source.calls == [(["wine with"], 100)]
    assert report.fetched == 6
    assert [row["keyword"] for row in report.rows] == ["wine with salmon", "best wine for pizza"]
    assert [row["priority"] for row in report.rows] == [10, 7]
    assert report.skipped_known == ["Steak with Wine", "salmon wine with"]
    assert report.skipped_filtered == ["beer with pizza", "wine with tacos"]
    assert store.batches == [["wine with salmon", "best wine for pizza"]]
    assert report.stored == 2
    assert report.failed_batches == 0


@pytest.mark.asyncio
async def test_run_keyword_research_records_failed_batches_separately() -> None:
    store = _FakeStore(fail_on_batch=1)

    report = await run_keyword_research(
        _FakeSource(),
        store,
        ["wine with"],
        min_volume=50,
        must_contain=["wine"],
        batch_size=1,
    )

    assert len(report.batch_results) == 2
    assert report.batch_results[0].ok
    assert not report.batch_results[1].ok
    assert report.stored == 1
    assert report.failed_batches == 1


@pytest.mark.asyncio
async def test_run_keyword_research_dry_run_does_not_store() -> None:
    store = _FakeStore()

    report = await run_keyword_research(_FakeSource(), store, ["wine"], dry_run=True)

    assert len(report.rows) == 4
    assert store.batches == []
    assert report.batch_results == []


class _FakeMetricsSource:
    def __init__(self) -> None:
        self.requested: list[str] = []

    async def get_keyword_metrics(self, keywords: list[str]) -> list[dict[str, Any]]:
        self.requested = keywords
        return [
            {"keyword": "wine with steak", "search_volume": 4000, "keyword_difficulty": 25},
            {"keyword": "Wine With Salmon", "search_volume": 700, "competition_level": "MEDIUM"},
            {"keyword": "wine with steak dinner", "search_volume": 90},
            {"keyword": None, "search_volume": 10},
        ]


@pytest.mark.asyncio
async def test_refresh_keyword_metrics_only_writes_requested_keywords() -> None:
    source = _FakeMetricsSource()
    store = _FakeStore()

    results = await refresh_keyword_metrics(
        source, store, ["wine with steak", "wine with salmon"], batch_size=1
    )

    assert source.requested == ["wine with steak", "wine with salmon"]
    assert store.batches == [["wine with steak"], ["wine with salmon"]]
    assert [result.unwrap() for result in results] == [1, 1]


@pytest.mark.asyncio
async def test_refresh_keyword_metrics_reports_failed_batch() -> None:
    store = _FakeStore(fail_on_batch=0)

    results = await refresh_keyword_metrics(
        _FakeMetricsSource(), store, ["wine with steak", "wine with salmon"]
    )

    assert len(results) == 1
    assert not results[0].ok
