"""List keyword groups that differ only in word order or punctuation."""

from __future__ import annotations

import argparse
import asyncio

from winequickstart.config import get_settings
from winequickstart.core.database import Database
from winequickstart.core.logging import setup_logging
from winequickstart.repositories.keyword_repository import KeywordRepository
from winequickstart.services.keyword_maintenance import DuplicateCheckReport, build_duplicate_report


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--show-unique",
        type=int,
        default=20,
        help="How many unique unused keywords to list (default: 20)",
    )
    return parser.parse_args(argv)


def print_report(report: DuplicateCheckReport, *, show_unique: int) -> None:
    print("DUPLICATE GROUPS (same words, different order)")
    print("=" * 48)
    for key, group in report.groups.items():
        print(f'\nGroup: "{key}"')
        for record in group:
            print(f'  - "{record.keyword}" (vol: {record.search_volume}, status: {record.effective_status})')
    print(f"\nTotal duplicate groups found: {len(report.groups)}")

    print("\nUnique unused keywords (ready to use)")
    for index, record in enumerate(report.unique_unused[:show_unique], start=1):
        print(f'{index}. "{record.keyword}" (vol: {record.search_volume})')
    print(f"\nTotal unique unused keywords: {len(report.unique_unused)}")


async def async_main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    database = Database(get_settings())
    try:
        async with database.session(commit_on_exit=False) as session:
            report = await build_duplicate_report(KeywordRepository(session))
    finally:
        await database.close()

    print_report(report, show_unique=args.show_unique)
    return 0


def main() -> int:
    setup_logging()
    return asyncio.run(async_main())


if __name__ == "__main__":
    raise SystemExit(main())
