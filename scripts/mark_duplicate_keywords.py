"""Mark redundant keyword phrasings as `duplicate`, keeping one per group.

Used keywords are always kept. Among the rest, the highest search volume wins.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Mapping

from winequickstart.config import Settings, get_settings
from winequickstart.core.database import Database
from winequickstart.core.exceptions import ExternalAPIError
from winequickstart.core.logging import setup_logging
from winequickstart.integrations.telegram import TelegramClient
from winequickstart.keywords.dedup import STATUS_ACTIVE, STATUS_DUPLICATE, STATUS_USED
from winequickstart.repositories.keyword_repository import KeywordRepository
from winequickstart.services.keyword_maintenance import DuplicateMarkingReport, mark_duplicate_keywords
from winequickstart.services.notifications import format_duplicate_report


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--dry-run", action="store_true", help="Plan only, write nothing")
    parser.add_argument("--notify", action="store_true", help="Send a summary to Telegram")
    return parser.parse_args(argv)


def print_report(report: DuplicateMarkingReport, counts: Mapping[str, int] | None = None) -> None:
    for plan in report.resolutions:
        keep = plan.keep
        print(f'Group: "{plan.canonical_key}"')
        print(f'  keep: "{keep.keyword}" (vol: {keep.search_volume}, status: {keep.effective_status})')
        for record in plan.duplicates:
            print(f'  duplicate: "{record.keyword}" (vol: {record.search_volume})')
        for record in plan.preserved_used:
            print(f'  already used, kept: "{record.keyword}"')
        print("")

    verb = "Would mark" if report.dry_run else "Marked"
    print(f"{verb} {report.marked_count} keywords as duplicates across {report.group_count} groups")
    if report.revived_ids:
        print(f"Restored {len(report.revived_ids)} kept keywords to active")
    if counts is not None:
        suffix = " (before changes)" if report.dry_run else ""
        print(f"Total active unique keywords{suffix}: {counts.get(STATUS_ACTIVE, 0)}")
        print(f"Total used: {counts.get(STATUS_USED, 0)}, duplicate: {counts.get(STATUS_DUPLICATE, 0)}")


async def notify(settings: Settings, report: DuplicateMarkingReport) -> bool:
    try:
        async with TelegramClient(settings) as client:
            await client.send_message(format_duplicate_report(report))
    except ExternalAPIError as exc:
        print(f"Telegram notification failed: {exc}", file=sys.stderr)
        return False
    return True


async def async_main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    database = Database(settings)
    try:
        async with database.session(commit_on_exit=not args.dry_run) as session:
            repository = KeywordRepository(session)
            report = await mark_duplicate_keywords(repository, dry_run=args.dry_run)
            counts = await repository.count_by_status()
    finally:
        await database.close()

    print_report(report, counts)
    if args.notify and not await notify(settings, report):
        return 1
    return 0


def main() -> int:
    setup_logging()
    return asyncio.run(async_main())


if __name__ == "__main__":
    raise SystemExit(main())
