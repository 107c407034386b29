"""Telegram Bot API client for operator notifications."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from winequickstart.config import Settings
from winequickstart.core.exceptions import APIKeyMissingError, ExternalAPIError

logger = logging.getLogger(__name__)

InlineKeyboard = list[list[dict[str, str]]]


class TelegramClient:
    """Minimal async Telegram Bot API client."""

    def __init__(self, settings: Settings, *, timeout_seconds: float = 20.0) -> None:
        self.bot_token = settings.telegram_bot_token
        self.default_chat_id = settings.telegram_chat_id
        self.timeout_seconds = timeout_seconds
        self._client: httpx.AsyncClient | None = None

        if not self.bot_token:
            raise APIKeyMissingError("Telegram")

    async def __aenter__(self) -> "TelegramClient":
        self._client = httpx.AsyncClient(
            timeout=self.timeout_seconds,
            base_url=f"https://api.telegram.org/bot{self.bot_token}",
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("TelegramClient must be used as async context manager")
        return self._client

    async def _call(self, method: str, payload: dict[str, Any]) -> Any:
        try:
            response = await self.client.post(f"/{method}", json=payload)
        except httpx.HTTPError as exc:
            raise ExternalAPIError("Telegram", str(exc)) from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise ExternalAPIError(
                "Telegram",
                f"Invalid JSON response with status {response.status_code}",
            ) from exc

        if not isinstance(body, dict) or not body.get("ok"):
            description = body.get("description") if isinstance(body, dict) else None
            logger.warning(
                "Telegram API call rejected",
                extra={"method": method, "status_code": response.status_code, "description": description},
            )
            raise ExternalAPIError("Telegram", description or "request_failed")
        return body.get("result")

    def _resolve_chat(self, chat_id: int | str | None) -> int | str:
        resolved = chat_id if chat_id is not None else self.default_chat_id
        if resolved is None:
            raise APIKeyMissingError("Telegram chat id")
        return resolved

    async def send_message(
        self,
        text: str,
        *,
        chat_id: int | str | None = None,
        inline_keyboard: InlineKeyboard | None = None,
        disable_preview: bool = True,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "chat_id": self._resolve_chat(chat_id),
            "text": text,
            "parse_mode": "HTML",
            "disable_web_page_preview": disable_preview,
        }
        if inline_keyboard:
            payload["reply_markup"] = {"inline_keyboard": inline_keyboard}
        return await self._call("sendMessage", payload)

    async def answer_callback_query(self, callback_query_id: str, text: str) -> bool:
        return bool(
            await self._call(
                "answerCallbackQuery",
                {"callback_query_id": callback_query_id, "text": text, "show_alert": False},
            )
        )

    async def edit_message_text(self, chat_id: int | str, message_id: int, text: str) -> Any:
        return await self._call(
            "editMessageText",
            {"chat_id": chat_id, "message_id": message_id, "text": text, "parse_mode": "HTML"},
        )

    async def get_updates(self, *, limit: int = 20) -> list[dict[str, Any]]:
        result = await self._call("getUpdates", {"limit": limit})
        return list(result or [])

    async def set_webhook(self, url: str, *, secret_token: str | None = None) -> bool:
        payload: dict[str, Any] = {"url": url, "allowed_updates": ["message", "callback_query"]}
        if secret_token:
            payload["secret_token"] = secret_token
        return bool(await self._call("setWebhook", payload))


def extract_chat_ids(updates: list[dict[str, Any]]) -> dict[int, str]:
    """Map chat id to a display name from a `getUpdates` payload."""
    chats: dict[int, str] = {}
    for update in updates:
        message = update.get("message") or update.get("channel_post") or {}
        if not message:
            callback = update.get("callback_query") or {}
            message = callback.get("message") or {}
        chat = message.get("chat") or {}
        chat_id = chat.get("id")
        if chat_id is None:
            continue
        name = chat.get("title") or chat.get("username") or chat.get("first_name") or ""
        chats[int(chat_id)] = str(name)
    return chats
