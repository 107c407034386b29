"""Telegram message formatting for operator notifications."""

from __future__ import annotations

import html
from collections.abc import Mapping, Sequence

from winequickstart.integrations.telegram import InlineKeyboard
from winequickstart.keywords.dedup import STATUS_ACTIVE, STATUS_ARCHIVED, STATUS_DUPLICATE, STATUS_USED
from winequickstart.models.page import WinePage
from winequickstart.services.keyword_maintenance import DuplicateMarkingReport, NextArticlePlan
from winequickstart.services.seo import canonical_url

APPROVE_PREFIX = "approve:"
REJECT_PREFIX = "reject:"
VIEW_ALL_ACTION = "view_all"
KEYWORD_STATUSES = (STATUS_ACTIVE, STATUS_USED, STATUS_DUPLICATE, STATUS_ARCHIVED)

HELP_TEXT = (
    "<b>Wine Quickstart bot</b>\n\n"
    "I post new articles for review and preview the next batch.\n\n"
    "<b>Commands:</b>\n"
    "/next - Next articles to generate\n"
    "/status - Keyword pool by status\n"
    "/recent - Latest articles\n"
    "/help - Show this help"
)


def format_next_articles(plan: NextArticlePlan) -> str:
    lines = [f"<b>Next {len(plan.articles)} articles</b>"]
    if not plan.articles:
        lines.append("No eligible keywords left in the pool.")
    for index, article in enumerate(plan.articles, start=1):
        lines.append(
            f"{index}. <b>{html.escape(article.keyword)}</b> "
            f"({article.search_volume:,}/mo) <code>{html.escape(article.slug)}</code>"
        )
    if plan.is_partial and plan.articles:
        lines.append(f"<i>Only {len(plan.articles)} of {plan.requested} requested were eligible.</i>")
    lines.append(f"Total volume: {plan.total_volume:,}/mo")
    return "\n".join(lines)


def format_duplicate_report(report: DuplicateMarkingReport) -> str:
    verb = "Would mark" if report.dry_run else "Marked"
    lines = [
        "<b>Duplicate keyword sweep</b>",
        f"Groups: {report.group_count}",
        f"{verb} duplicate: {report.marked_count}",
    ]
    if report.revived_ids:
        lines.append(f"Restored to active: {len(report.revived_ids)}")
    if report.preserved_used:
        lines.append(f"Used keywords preserved: {len(report.preserved_used)}")
    return "\n".join(lines)


def format_keyword_status(counts: Mapping[str, int]) -> str:
    lines = ["<b>Keyword pool</b>"]
    for name in KEYWORD_STATUSES:
        lines.append(f"{name.capitalize()}: {counts.get(name, 0):,}")
    for name, count in sorted(counts.items()):
        if name not in KEYWORD_STATUSES:
            lines.append(f"{html.escape(name)}: {count:,}")
    lines.append(f"Total: {sum(counts.values()):,}")
    return "\n".join(lines)


def format_recent_pages(pages: Sequence[WinePage], site_url: str) -> str:
    if not pages:
        return "No articles yet."
    lines = [f"<b>Latest {len(pages)} articles</b>"]
    for page in pages:
        url = canonical_url(site_url, page.category or "learn", page.slug)
        title = html.escape(page.title or page.slug)
        lines.append(
            f'- <a href="{html.escape(url, quote=True)}">{title}</a> ({html.escape(page.content_status)})'
        )
    return "\n".join(lines)


def format_article_announcement(
    *,
    site_url: str,
    category: str,
    slug: str,
    title: str,
    keyword: str,
    word_count: int | None = None,
) -> tuple[str, InlineKeyboard]:
    """Message plus approve/reject buttons for a freshly generated article."""
    url = canonical_url(site_url, category, slug)
    lines = [
        f"<b>New article:</b> {html.escape(title)}",
        f"Keyword: {html.escape(keyword)}",
        f"Category: {html.escape(category)}",
    ]
    if word_count is not None:
        lines.append(f"Words: {word_count:,}")
    lines.append(f'<a href="{html.escape(url, quote=True)}">Preview</a>')

    keyboard: InlineKeyboard = [
        [
            {"text": "Approve", "callback_data": f"{APPROVE_PREFIX}{slug}"},
            {"text": "Reject", "callback_data": f"{REJECT_PREFIX}{slug}"},
        ],
        [
            {"text": "Open", "url": url},
            {"text": "View all", "callback_data": VIEW_ALL_ACTION},
        ],
    ]
    return "\n".join(lines), keyboard
