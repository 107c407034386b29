"""Mark a keyword as used once its article has been generated."""

from __future__ import annotations

import argparse
import asyncio
import sys

from winequickstart.config import get_settings
from winequickstart.core.database import Database
from winequickstart.core.exceptions import KeywordNotFoundError
from winequickstart.core.logging import setup_logging
from winequickstart.repositories.keyword_repository import KeywordRepository


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("keyword", help="Exact keyword text")
    return parser.parse_args(argv)


async def async_main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    database = Database(get_settings())
    try:
        async with database.session() as session:
            record = await KeywordRepository(session).mark_used(args.keyword)
    except KeywordNotFoundError as exc:
        print(exc.message, file=sys.stderr)
        return 1
    finally:
        await database.close()

    print(f"Marked used: {record.keyword}")
    return 0


def main() -> int:
    setup_logging()
    return asyncio.run(async_main())


if __name__ == "__main__":
    raise SystemExit(main())
