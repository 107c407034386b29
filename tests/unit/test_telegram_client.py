"""Unit tests for the Telegram Bot API client and chat id extraction."""

from __future__ import annotations

from typing import Any

import pytest

from winequickstart.config import Settings
from winequickstart.core.exceptions import APIKeyMissingError, ExternalAPIError
from winequickstart.integrations.telegram import TelegramClient, extract_chat_ids


def _settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {"telegram_bot_token": "123:abc", "telegram_chat_id": "42"}
    values.update(overrides)
    return Settings(**values)


def _install_fake_client(monkeypatch: pytest.MonkeyPatch, body: Any, status_code: int = 200) -> dict[str, Any]:
    captured: dict[str, Any] = {"calls": []}

    class FakeResponse:
        def __init__(self) -> None:
            self.status_code = status_code

        def json(self) -> Any:
            return body

    class FakeAsyncClient:
        def __init__(self, *args: Any, **kwargs: Any) -> None:
            captured["init"] = kwargs

        async def post(self, url: str, json: dict[str, Any]) -> FakeResponse:
            captured["calls"].append({"url": url, "json": json})
            return FakeResponse()

        async def aclose(self) -> None:
            return None

    monkeypatch.setattr("winequickstart.integrations.telegram.httpx.AsyncClient", FakeAsyncClient)
    return captured


def test_client_requires_bot_token() -> None:
    with pytest.raises(APIKeyMissingError):
        TelegramClient(_settings(telegram_bot_token=None))


@pytest.mark.asyncio
async def test_send_message_uses_default_chat_and_keyboard(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = _install_fake_client(monkeypatch, {"ok": True, "result": {"message_id": 7}})
    keyboard = [[{"text": "Approve", "callback_data": "approve:wine-with-steak"}]]

    async with TelegramClient(_settings()) as client:
        result = await client.send_message("<b>hi</b>", inline_keyboard=keyboard)

    assert result == {"message_id": 7}
    assert captured["init"]["base_url"] == "https://api.telegram.org/bot123:abc"
    call = captured["calls"][0]
    assert call["url"] == "/sendMessage"
    assert call["json"]["chat_id"] == "42"
    assert call["json"]["parse_mode"] == "HTML"
    assert call["json"]["reply_markup"] == {"inline_keyboard": keyboard}


@pytest.mark.asyncio
async def test_rejected_call_raises_with_description(monkeypatch: pytest.MonkeyPatch) -> None:
    _install_fake_client(monkeypatch, {"ok": False, "description": "Bad Request: chat not found"}, 400)

    async with TelegramClient(_settings()) as client:
        with pytest.raises(ExternalAPIError, match="chat not found"):
            await client.send_message("hello", chat_id=-100)


@pytest.mark.asyncio
async def test_send_message_without_any_chat_id(monkeypatch: pytest.MonkeyPatch) -> None:
    _install_fake_client(monkeypatch, {"ok": True, "result": {}})

    async with TelegramClient(_settings(telegram_chat_id=None)) as client:
        with pytest.raises(APIKeyMissingError):
            await client.send_message("hello")


@pytest.mark.asyncio
async def test_set_webhook_passes_secret(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = _install_fake_client(monkeypatch, {"ok": True, "result": True})

    async with TelegramClient(_settings()) as client:
        assert await client.set_webhook("https://ops.winequickstart.com/api/telegram-webhook", secret_token="s3")

    assert captured["calls"][0]["json"]["secret_token"] == "s3"


def test_extract_chat_ids_reads_messages_posts_and_callbacks() -> None:
    updates = [
        {"update_id": 1, "message": {"chat": {"id": 42, "first_name": "Sam"}}},
        {"update_id": 2, "channel_post": {"chat": {"id": -1001, "title": "Wine Ops"}}},
        {"update_id": 3, "callback_query": {"message": {"chat": {"id": 42, "username": "sam"}}}},
        {"update_id": 4, "edited_message": {"chat": {"id": 9}}},
    ]

    assert extract_chat_ids(updates) == {42: "sam", -1001: "Wine Ops"}
