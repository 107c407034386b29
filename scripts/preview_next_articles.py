"""Preview the next articles to generate without changing anything."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from winequickstart.config import Settings, get_settings
from winequickstart.core.database import Database
from winequickstart.core.exceptions import ExternalAPIError
from winequickstart.core.logging import setup_logging
from winequickstart.integrations.telegram import TelegramClient
from winequickstart.repositories.keyword_repository import KeywordRepository
from winequickstart.repositories.page_repository import PageRepository
from winequickstart.services.keyword_maintenance import NextArticlePlan, preview_next_articles
from winequickstart.services.notifications import format_next_articles
from winequickstart.services.slug_sources import load_existing_slugs


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--count", type=int, default=None, help="Articles to preview (default: NEXT_ARTICLE_COUNT)")
    parser.add_argument(
        "--slug-source",
        choices=["db", "files", "both"],
        default="both",
        help="Where existing article slugs are read from (default: both)",
    )
    parser.add_argument("--pages-dir", default=None, help="Override PAGES_DIR for the files source")
    parser.add_argument("--notify", action="store_true", help="Send the preview to Telegram")
    return parser.parse_args(argv)


def print_plan(plan: NextArticlePlan) -> None:
    print(f"Existing pages: {plan.existing_slug_count}")
    print(f"Used keyword patterns: {plan.used_key_count}\n")
    print(f"Next {len(plan.articles)} unique articles to generate:\n")
    for index, article in enumerate(plan.articles, start=1):
        print(f'{index}. "{article.keyword}"')
        print(f"   Volume: {article.search_volume:,}/month")
        print(f"   Title: {article.title}")
        print(f"   Page: {article.category}/{article.slug}")
        print(f"   Meta: {article.meta_description}\n")
    if plan.is_partial:
        print(f"Only {len(plan.articles)} of {plan.requested} requested keywords were eligible")
    print(f"Total search volume: {plan.total_volume:,}/month")


async def notify(settings: Settings, plan: NextArticlePlan) -> bool:
    try:
        async with TelegramClient(settings) as client:
            await client.send_message(format_next_articles(plan))
    except ExternalAPIError as exc:
        print(f"Telegram notification failed: {exc}", file=sys.stderr)
        return False
    return True


async def async_main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    count = args.count if args.count is not None else settings.next_article_count
    pages_dir = Path(args.pages_dir or settings.pages_dir)

    database = Database(settings)
    try:
        async with database.session(commit_on_exit=False) as session:
            slugs = await load_existing_slugs(
                args.slug_source,
                pages=PageRepository(session),
                pages_dir=pages_dir,
                categories=settings.page_categories,
            )
            if not slugs.ok:
                print(f"Could not load existing slugs: {slugs.reason}", file=sys.stderr)
                return 1
            plan = await preview_next_articles(
                KeywordRepository(session),
                slugs.unwrap(),
                count=count,
                pool_limit=settings.selection_pool_limit,
            )
    finally:
        await database.close()

    print_plan(plan)
    if args.notify and not await notify(settings, plan):
        return 1
    return 0


def main() -> int:
    setup_logging()
    return asyncio.run(async_main())


if __name__ == "__main__":
    raise SystemExit(main())
