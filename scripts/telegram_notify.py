"""Send an ad-hoc message or an article announcement to the operator chat."""

from __future__ import annotations

import argparse
import asyncio
import sys

from winequickstart.config import get_settings
from winequickstart.core.exceptions import ExternalAPIError
from winequickstart.core.logging import setup_logging
from winequickstart.integrations.telegram import InlineKeyboard, TelegramClient
from winequickstart.services.notifications import format_article_announcement


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("--message", help="Plain HTML message to send")
    mode.add_argument("--slug", help="Announce a generated article with approve/reject buttons")
    parser.add_argument("--category", default="learn", help="Article category (with --slug)")
    parser.add_argument("--title", default=None, help="Article title (with --slug)")
    parser.add_argument("--keyword", default=None, help="Target keyword (with --slug)")
    parser.add_argument("--words", type=int, default=None, help="Article word count (with --slug)")
    parser.add_argument("--preview", action="store_true", help="Print the message instead of sending it")
    return parser.parse_args(argv)


def build_message(args: argparse.Namespace, site_url: str) -> tuple[str, InlineKeyboard | None]:
    if args.message is not None:
        return args.message, None
    keyword = args.keyword or args.slug.replace("-", " ")
    return format_article_announcement(
        site_url=site_url,
        category=args.category,
        slug=args.slug,
        title=args.title or keyword.title(),
        keyword=keyword,
        word_count=args.words,
    )


async def async_main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    text, keyboard = build_message(args, settings.site_url)

    if args.preview:
        print(text)
        for row in keyboard or []:
            print("  ".join(f"[{button['text']}]" for button in row))
        return 0

    try:
        async with TelegramClient(settings) as client:
            await client.send_message(text, inline_keyboard=keyboard)
    except ExternalAPIError as exc:
        print(f"Telegram send failed: {exc}", file=sys.stderr)
        return 1
    print("Sent")
    return 0


def main() -> int:
    setup_logging()
    return asyncio.run(async_main())


if __name__ == "__main__":
    raise SystemExit(main())
