"""Pydantic schemas for webhook payloads and API responses."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class TelegramChat(BaseModel):
    id: int


class TelegramUser(BaseModel):
    id: int
    first_name: str = ""


class TelegramMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message_id: int
    chat: TelegramChat
    text: str | None = None
    from_user: TelegramUser | None = Field(default=None, alias="from")


class TelegramCallbackQuery(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    from_user: TelegramUser | None = Field(default=None, alias="from")
    message: TelegramMessage | None = None
    data: str | None = None


class TelegramUpdate(BaseModel):
    """Subset of a Bot API `Update` the webhook acts on."""

    update_id: int
    message: TelegramMessage | None = None
    callback_query: TelegramCallbackQuery | None = None


class WebhookAck(BaseModel):
    ok: bool = True
    action: str | None = None


class NextArticleResponse(BaseModel):
    keyword: str
    search_volume: int
    priority: int
    slug: str
    canonical_key: str
    category: str
    title: str
    meta_description: str


class NextArticlePlanResponse(BaseModel):
    articles: list[NextArticleResponse]
    requested: int
    total_volume: int
    existing_slug_count: int
    used_key_count: int
    partial: bool
