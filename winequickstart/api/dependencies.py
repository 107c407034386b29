"""FastAPI dependencies: settings, sessions, bot client and auth checks."""

from __future__ import annotations

import hmac
import logging
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from winequickstart.config import Settings
from winequickstart.core.database import Database
from winequickstart.integrations.telegram import TelegramClient

logger = logging.getLogger(__name__)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


async def get_session(
    database: Annotated[Database, Depends(get_database)],
) -> AsyncGenerator[AsyncSession, None]:
    async with database.session() as session:
        yield session


async def get_telegram_client(
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> AsyncGenerator[TelegramClient, None]:
    async with TelegramClient(settings) as client:
        yield client


def _secrets_match(candidate: str | None, expected: str) -> bool:
    return hmac.compare_digest((candidate or "").encode("utf-8"), expected.encode("utf-8"))


async def require_telegram_secret(
    settings: Annotated[Settings, Depends(get_app_settings)],
    secret_token: Annotated[str | None, Header(alias="X-Telegram-Bot-Api-Secret-Token")] = None,
) -> None:
    """Reject webhook calls without the secret registered through `setWebhook`."""
    if not settings.telegram_webhook_secret:
        return
    if _secrets_match(secret_token, settings.telegram_webhook_secret):
        return
    logger.warning("Telegram webhook secret check failed")
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid webhook secret",
    )


async def require_cron_secret(
    settings: Annotated[Settings, Depends(get_app_settings)],
    authorization: Annotated[str | None, Header()] = None,
) -> None:
    """Validate `Authorization: Bearer <CRON_SECRET>` for automation endpoints."""
    if not settings.cron_secret:
        logger.error("Cron secret check failed: no secret configured")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Cron secret is not configured",
        )

    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() == "bearer" and _secrets_match(token.strip(), settings.cron_secret):
        return

    logger.warning("Cron secret check failed: invalid token")
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or missing bearer token",
    )


AppSettings = Annotated[Settings, Depends(get_app_settings)]
DbSession = Annotated[AsyncSession, Depends(get_session)]
Telegram = Annotated[TelegramClient, Depends(get_telegram_client)]
