"""List chat ids that recently messaged the bot, for TELEGRAM_CHAT_ID."""

from __future__ import annotations

import argparse
import asyncio
import sys

from winequickstart.config import get_settings
from winequickstart.core.exceptions import ExternalAPIError
from winequickstart.core.logging import setup_logging
from winequickstart.integrations.telegram import TelegramClient, extract_chat_ids


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--limit", type=int, default=20, help="Updates to fetch")
    parser.add_argument("--set-webhook", default=None, metavar="URL", help="Also register this webhook URL")
    return parser.parse_args(argv)


async def async_main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    try:
        async with TelegramClient(settings) as client:
            chats = extract_chat_ids(await client.get_updates(limit=args.limit))
            if args.set_webhook:
                await client.set_webhook(args.set_webhook, secret_token=settings.telegram_webhook_secret)
                print(f"Webhook set: {args.set_webhook}")
    except ExternalAPIError as exc:
        print(f"Telegram request failed: {exc}", file=sys.stderr)
        return 1

    if not chats:
        print("No chats found. Send the bot a message first, then rerun.")
        return 1
    for chat_id, name in chats.items():
        print(f"{chat_id}\t{name}")
    return 0


def main() -> int:
    setup_logging()
    return asyncio.run(async_main())


if __name__ == "__main__":
    raise SystemExit(main())
