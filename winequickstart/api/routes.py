"""Telegram webhook and keyword preview routes."""

from __future__ import annotations

import html
import logging
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from winequickstart.api.dependencies import (
    AppSettings,
    DbSession,
    Telegram,
    require_cron_secret,
    require_telegram_secret,
)
from winequickstart.api.schemas import (
    NextArticlePlanResponse,
    NextArticleResponse,
    TelegramCallbackQuery,
    TelegramUpdate,
    WebhookAck,
)
from winequickstart.config import Settings
from winequickstart.core.exceptions import ExternalAPIError, PageNotFoundError
from winequickstart.integrations.telegram import TelegramClient
from winequickstart.repositories.keyword_repository import KeywordRepository
from winequickstart.repositories.page_repository import PageRepository
from winequickstart.services.keyword_maintenance import NextArticlePlan, preview_next_articles
from winequickstart.services.notifications import (
    APPROVE_PREFIX,
    HELP_TEXT,
    REJECT_PREFIX,
    VIEW_ALL_ACTION,
    format_keyword_status,
    format_next_articles,
    format_recent_pages,
)
from winequickstart.services.slug_sources import load_existing_slugs

logger = logging.getLogger(__name__)

router = APIRouter()

CALLBACK_STATUSES = {
    APPROVE_PREFIX: ("approved", "Approved"),
    REJECT_PREFIX: ("rejected", "Rejected"),
}


async def _build_plan(session: AsyncSession, settings: Settings, count: int) -> NextArticlePlan:
    slugs = await load_existing_slugs(
        "both",
        pages=PageRepository(session),
        pages_dir=Path(settings.pages_dir),
        categories=settings.page_categories,
    )
    if not slugs.ok:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Existing article slugs could not be loaded",
        )
    return await preview_next_articles(
        KeywordRepository(session),
        slugs.unwrap(),
        count=count,
        pool_limit=settings.selection_pool_limit,
    )


async def _acknowledge(
    telegram: TelegramClient,
    callback: TelegramCallbackQuery,
    text: str,
    edited_suffix: str | None = None,
) -> None:
    """Answer the button press and optionally stamp the original message.

    Failures are logged, not raised: the status write has already been
    committed and Telegram would otherwise redeliver the update.
    """
    try:
        await telegram.answer_callback_query(callback.id, text)
        if edited_suffix and callback.message is not None:
            original = html.escape(callback.message.text or "")
            await telegram.edit_message_text(
                callback.message.chat.id,
                callback.message.message_id,
                f"{original}\n\n{edited_suffix}",
            )
    except ExternalAPIError as exc:
        logger.warning(
            "Telegram callback acknowledgement failed",
            extra={"callback_id": callback.id, "error": str(exc)},
        )


async def _handle_callback(
    callback: TelegramCallbackQuery,
    session: AsyncSession,
    settings: Settings,
    telegram: TelegramClient,
) -> str:
    data = callback.data or ""
    if data == VIEW_ALL_ACTION:
        await _acknowledge(telegram, callback, "Opening site...")
        if callback.message is not None:
            url = html.escape(f"{settings.site_url.rstrip('/')}/learn", quote=True)
            await telegram.send_message(
                f'<a href="{url}">View all articles</a>',
                chat_id=callback.message.chat.id,
            )
        return "view_all"

    for prefix, (content_status, label) in CALLBACK_STATUSES.items():
        if not data.startswith(prefix):
            continue
        slug = data[len(prefix) :]
        try:
            await PageRepository(session).set_content_status(slug, content_status)
        except PageNotFoundError:
            await _acknowledge(telegram, callback, "Article not found")
            return "not_found"
        await session.commit()

        await _acknowledge(telegram, callback, f"{label}: {slug}", f"<b>{label}</b>")
        return content_status

    await _acknowledge(telegram, callback, "Unknown action")
    return "unknown_action"


def _command(text: str | None) -> str:
    """`/Next@wine_bot 3` -> `/next`."""
    first = (text or "").strip().split(" ", 1)[0]
    return first.split("@", 1)[0].lower()


async def _handle_command(
    command: str,
    chat_id: int,
    session: AsyncSession,
    settings: Settings,
    telegram: TelegramClient,
) -> str | None:
    if command in ("/start", "/help"):
        await telegram.send_message(HELP_TEXT, chat_id=chat_id)
        return "help"
    if command == "/next":
        plan = await _build_plan(session, settings, settings.next_article_count)
        await telegram.send_message(format_next_articles(plan), chat_id=chat_id)
        return "next"
    if command == "/status":
        counts = await KeywordRepository(session).count_by_status()
        await telegram.send_message(format_keyword_status(counts), chat_id=chat_id)
        return "status"
    if command == "/recent":
        pages = await PageRepository(session).list_recent(settings.recent_pages_count)
        await telegram.send_message(format_recent_pages(pages, settings.site_url), chat_id=chat_id)
        return "recent"
    return None


@router.post(
    "/telegram-webhook",
    response_model=WebhookAck,
    dependencies=[Depends(require_telegram_secret)],
    summary="Telegram bot webhook",
    description="Handle approve/reject buttons and the `/next`, `/status`, `/recent` and `/help` commands.",
)
async def telegram_webhook(
    update: TelegramUpdate,
    session: DbSession,
    settings: AppSettings,
    telegram: Telegram,
) -> WebhookAck:
    if update.callback_query is not None:
        action = await _handle_callback(update.callback_query, session, settings, telegram)
        return WebhookAck(action=action)

    message = update.message
    if message is not None:
        action = await _handle_command(_command(message.text), message.chat.id, session, settings, telegram)
        if action is not None:
            return WebhookAck(action=action)

    logger.debug("Ignoring Telegram update", extra={"update_id": update.update_id})
    return WebhookAck()


@router.get(
    "/keywords/next",
    response_model=NextArticlePlanResponse,
    dependencies=[Depends(require_cron_secret)],
    summary="Preview next articles",
    description="Return the next keywords that would be turned into articles, without changing anything.",
)
async def next_keywords(
    session: DbSession,
    settings: AppSettings,
    count: int | None = Query(None, ge=1, le=50),
) -> NextArticlePlanResponse:
    plan = await _build_plan(session, settings, count or settings.next_article_count)
    return NextArticlePlanResponse(
        articles=[
            NextArticleResponse(
                keyword=article.keyword,
                search_volume=article.search_volume,
                priority=article.priority,
                slug=article.slug,
                canonical_key=article.canonical_key,
                category=article.category,
                title=article.title,
                meta_description=article.meta_description,
            )
            for article in plan.articles
        ],
        requested=plan.requested,
        total_volume=plan.total_volume,
        existing_slug_count=plan.existing_slug_count,
        used_key_count=plan.used_key_count,
        partial=plan.is_partial,
    )
