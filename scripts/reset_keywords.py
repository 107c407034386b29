"""Return keywords to `active` and clear their `used_at` timestamp."""

from __future__ import annotations

import argparse
import asyncio

from winequickstart.config import get_settings
from winequickstart.core.database import Database
from winequickstart.core.logging import setup_logging
from winequickstart.repositories.keyword_repository import KeywordRepository


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("keywords", nargs="+", help="Exact keyword text to reset")
    return parser.parse_args(argv)


async def async_main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    database = Database(get_settings())
    try:
        async with database.session() as session:
            matched = await KeywordRepository(session).reset(args.keywords)
    finally:
        await database.close()

    for keyword in matched:
        print(f"Reset: {keyword}")
    missing = sorted(set(args.keywords) - set(matched))
    for keyword in missing:
        print(f"Not found: {keyword}")
    return 0 if not missing else 1


def main() -> int:
    setup_logging()
    return asyncio.run(async_main())


if __name__ == "__main__":
    raise SystemExit(main())
