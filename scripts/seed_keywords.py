"""Load the curated seed keyword file into the keyword table."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from winequickstart.config import get_settings
from winequickstart.core.database import Database
from winequickstart.core.logging import setup_logging
from winequickstart.keywords.seeds import load_seed_file
from winequickstart.repositories.keyword_repository import KeywordRepository

ROOT = Path(__file__).resolve().parents[1]
DEFAULT_SEED_PATH = ROOT / "data" / "seed_keywords.yaml"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--seed-file", default=str(DEFAULT_SEED_PATH), help="Path to seed YAML")
    return parser.parse_args(argv)


async def async_main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()

    try:
        rows = load_seed_file(Path(args.seed_file))
    except (OSError, ValueError) as exc:
        print(f"Failed to load seed file: {exc}", file=sys.stderr)
        return 1

    database = Database(settings)
    inserted = 0
    try:
        batch_size = settings.upsert_batch_size
        for start in range(0, len(rows), batch_size):
            batch = rows[start : start + batch_size]
            async with database.session() as session:
                inserted += await KeywordRepository(session).upsert_many(batch)
            print(f"Stored batch {start // batch_size + 1} ({len(batch)} keywords)")
    finally:
        await database.close()

    print(f"Seeded {inserted} keywords")
    return 0


def main() -> int:
    setup_logging()
    return asyncio.run(async_main())


if __name__ == "__main__":
    raise SystemExit(main())
