"""Delete `wine_pages` rows whose slugs were published twice."""

from __future__ import annotations

import argparse
import asyncio

from winequickstart.config import get_settings
from winequickstart.core.database import Database
from winequickstart.core.logging import setup_logging
from winequickstart.repositories.page_repository import PageRepository


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("slugs", nargs="+", help="Page slugs to delete")
    parser.add_argument("--dry-run", action="store_true", help="Show which slugs exist without deleting")
    return parser.parse_args(argv)


async def async_main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    database = Database(get_settings())
    try:
        async with database.session(commit_on_exit=not args.dry_run) as session:
            pages = PageRepository(session)
            existing = await pages.list_slugs()
            targets = [slug for slug in dict.fromkeys(args.slugs) if slug in existing]
            for slug in args.slugs:
                if slug not in existing:
                    print(f"Not found: {slug}")
            deleted = 0 if args.dry_run else await pages.delete_slugs(targets)
    finally:
        await database.close()

    if args.dry_run:
        print(f"Would delete {len(targets)} pages: {', '.join(targets)}")
    else:
        print(f"Deleted {deleted} pages")
    return 0


def main() -> int:
    setup_logging()
    return asyncio.run(async_main())


if __name__ == "__main__":
    raise SystemExit(main())
