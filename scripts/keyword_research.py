"""Expand seed keywords through DataForSEO and store new phrasings."""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Mapping, Sequence
from typing import Any

from winequickstart.config import Settings, get_settings
from winequickstart.core.database import Database
from winequickstart.core.exceptions import ExternalAPIError
from winequickstart.core.logging import setup_logging
from winequickstart.integrations.dataforseo import DataForSEOClient
from winequickstart.models.keyword import KeywordOpportunity
from winequickstart.repositories.keyword_repository import KeywordRepository
from winequickstart.keywords.dedup import is_selectable
from winequickstart.services.keyword_research import (
    ResearchReport,
    refresh_keyword_metrics,
    run_keyword_research,
)

DEFAULT_SEEDS = [
    "wine pairing",
    "wine with",
    "best wine for",
    "red wine",
    "white wine",
]


class SessionPerBatchStore:
    """Keyword store that commits each upsert batch in its own session."""

    def __init__(self, database: Database) -> None:
        self.database = database

    async def list_all(self) -> list[KeywordOpportunity]:
        async with self.database.session(commit_on_exit=False) as session:
            return await KeywordRepository(session).list_all()

    async def upsert_many(self, rows: Sequence[Mapping[str, Any]]) -> int:
        async with self.database.session() as session:
            return await KeywordRepository(session).upsert_many(rows)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--seed", action="append", dest="seeds", help="Seed keyword (repeatable)")
    parser.add_argument("--limit", type=int, default=700, help="Max suggestions to request")
    parser.add_argument("--min-volume", type=int, default=50, help="Skip ideas below this monthly volume")
    parser.add_argument(
        "--must-contain",
        action="append",
        default=None,
        help="Keep only ideas containing this term (repeatable; default: wine)",
    )
    parser.add_argument("--dry-run", action="store_true", help="Show candidates without storing them")
    parser.add_argument("--check-account", action="store_true", help="Only verify DataForSEO credentials")
    parser.add_argument(
        "--refresh-metrics",
        action="store_true",
        help="Re-fetch volume and difficulty for active keywords instead of researching",
    )
    return parser.parse_args(argv)


def print_report(report: ResearchReport, *, dry_run: bool, show: int = 25) -> None:
    print(f"Fetched ideas: {report.fetched}")
    print(f"Already known: {len(report.skipped_known)}")
    print(f"Filtered out: {len(report.skipped_filtered)}")
    print(f"New keywords: {len(report.rows)}\n")

    for row in report.rows[:show]:
        volume = row["search_volume"] or 0
        print(f"  [{row['priority']:>2}] {row['keyword']} ({volume:,}/mo, {row['intent']})")
    if len(report.rows) > show:
        print(f"  ... and {len(report.rows) - show} more")

    if dry_run:
        print("\nDry run: nothing stored")
        return
    print(f"\nStored: {report.stored}")
    for result in report.batch_results:
        if not result.ok:
            print(f"Batch failed: {result.reason}", file=sys.stderr)


async def check_account(settings: Settings) -> int:
    try:
        async with DataForSEOClient(settings) as client:
            info = await client.get_account_info()
    except ExternalAPIError as exc:
        print(f"DataForSEO check failed: {exc}", file=sys.stderr)
        return 1
    money = info.get("money") or {}
    print(f"DataForSEO login: {info.get('login', settings.dataforseo_login)}")
    print(f"Balance: {money.get('balance', 'unknown')}")
    return 0


async def refresh_metrics(settings: Settings, database: Database) -> int:
    store = SessionPerBatchStore(database)
    keywords = [record.keyword for record in await store.list_all() if is_selectable(record)]
    if not keywords:
        print("No active keywords to refresh")
        return 0

    try:
        async with DataForSEOClient(settings) as client:
            results = await refresh_keyword_metrics(
                client, store, keywords, batch_size=settings.upsert_batch_size
            )
    except ExternalAPIError as exc:
        print(f"Metrics refresh failed: {exc}", file=sys.stderr)
        return 1

    refreshed = sum(result.unwrap() for result in results if result.ok)
    print(f"Refreshed metrics for {refreshed} of {len(keywords)} active keywords")
    failed = [result for result in results if not result.ok]
    for result in failed:
        print(f"Batch failed: {result.reason}", file=sys.stderr)
    return 1 if failed else 0


async def async_main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    if args.check_account:
        return await check_account(settings)

    database = Database(settings)
    if args.refresh_metrics:
        try:
            return await refresh_metrics(settings, database)
        finally:
            await database.close()

    seeds = args.seeds or DEFAULT_SEEDS
    try:
        async with DataForSEOClient(settings) as client:
            report = await run_keyword_research(
                client,
                SessionPerBatchStore(database),
                seeds,
                limit=args.limit,
                min_volume=args.min_volume,
                must_contain=args.must_contain or ["wine"],
                batch_size=settings.upsert_batch_size,
                dry_run=args.dry_run,
            )
    except ExternalAPIError as exc:
        print(f"Keyword research failed: {exc}", file=sys.stderr)
        return 1
    finally:
        await database.close()

    print_report(report, dry_run=args.dry_run)
    return 1 if report.failed_batches else 0


def main() -> int:
    setup_logging()
    return asyncio.run(async_main())


if __name__ == "__main__":
    raise SystemExit(main())
