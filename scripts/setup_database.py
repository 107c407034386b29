"""Create the keyword and page tables if they do not exist yet."""

from __future__ import annotations

import asyncio

from winequickstart.config import get_settings
from winequickstart.core.database import Database
from winequickstart.core.logging import setup_logging


async def _setup() -> None:
    database = Database(get_settings())
    try:
        await database.init_db()
    finally:
        await database.close()


def main() -> int:
    setup_logging()
    asyncio.run(_setup())
    print("Database tables ready")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
