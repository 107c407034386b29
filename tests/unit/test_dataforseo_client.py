"""Unit tests for the DataForSEO client."""

from __future__ import annotations

from typing import Any

import pytest

from winequickstart.config import Settings
from winequickstart.core.exceptions import APIKeyMissingError, ExternalAPIError, RateLimitExceededError
from winequickstart.integrations.dataforseo import DataForSEOClient


def _settings() -> Settings:
    return Settings(dataforseo_login="ops@winequickstart.com", dataforseo_password="secret")


class FakeResponse:
    def __init__(self, payload: Any, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        return None

    def json(self) -> Any:
        return self._payload


def _install_fake_client(monkeypatch: pytest.MonkeyPatch, response: FakeResponse) -> dict[str, Any]:
    captured: dict[str, Any] = {"posts": [], "gets": []}

    class FakeAsyncClient:
        def __init__(self, *args: Any, **kwargs: Any) -> None:
            captured["init"] = kwargs

        async def post(self, url: str, json: Any) -> FakeResponse:
            captured["posts"].append({"url": url, "json": json})
            return response

        async def get(self, url: str) -> FakeResponse:
            captured["gets"].append(url)
            return response

        async def aclose(self) -> None:
            captured["closed"] = True

    monkeypatch.setattr("winequickstart.integrations.dataforseo.httpx.AsyncClient", FakeAsyncClient)
    return captured


def test_client_requires_credentials() -> None:
    with pytest.raises(APIKeyMissingError):
        DataForSEOClient(Settings(dataforseo_login=None, dataforseo_password=None))


@pytest.mark.asyncio
async def test_keyword_suggestions_flatten_and_dedupe(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = _install_fake_client(
        monkeypatch,
        FakeResponse(
            {
                "status_code": 20000,
                "tasks": [
                    {
                        "status_code": 20000,
                        "result": [
                            {
                                "items": [
                                    {
                                        "keyword": "wine with salmon",
                                        "keyword_info": {
                                            "search_volume": 1500,
                                            "cpc": 0.8,
                                            "competition_level": "LOW",
                                        },
                                        "keyword_properties": {"keyword_difficulty": 18},
                                    },
                                    {"keyword": "Wine With Salmon", "keyword_info": {"search_volume": 10}},
                                    {"keyword": "  ", "keyword_info": {}},
                                ]
                            }
                        ],
                    },
                    {"status_code": 40501, "result": [{"items": [{"keyword": "ignored"}]}]},
                ],
            }
        ),
    )

    async with DataForSEOClient(_settings()) as client:
        ideas = await client.get_keyword_suggestions(["wine with"], limit=25)

    assert ideas == [
        {
            "keyword": "wine with salmon",
            "search_volume": 1500,
            "cpc": 0.8,
            "competition_level": "LOW",
            "keyword_difficulty": 18,
        }
    ]
    post = captured["posts"][0]
    assert post["url"].endswith("/dataforseo_labs/google/keyword_ideas/live")
    assert post["json"][0]["limit"] == 25
    assert post["json"][0]["location_code"] == 2840
    assert captured["init"]["headers"]["Authorization"].startswith("Basic ")
    assert captured["closed"] is True


@pytest.mark.asyncio
async def test_envelope_error_raises_external_api_error(monkeypatch: pytest.MonkeyPatch) -> None:
    _install_fake_client(monkeypatch, FakeResponse({"status_code": 40100, "status_message": "Not authorized"}))

    async with DataForSEOClient(_settings()) as client:
        with pytest.raises(ExternalAPIError, match="Not authorized"):
            await client.get_keyword_metrics(["merlot"])


@pytest.mark.asyncio
async def test_rate_limit_raises_dedicated_error(monkeypatch: pytest.MonkeyPatch) -> None:
    _install_fake_client(monkeypatch, FakeResponse({}, status_code=429))

    async with DataForSEOClient(_settings()) as client:
        with pytest.raises(RateLimitExceededError):
            await client.get_keyword_suggestions(["best merlot"])


@pytest.mark.asyncio
async def test_account_info_uses_get(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = _install_fake_client(
        monkeypatch,
        FakeResponse(
            {
                "status_code": 20000,
                "tasks": [{"result": [{"login": "ops@winequickstart.com", "money": {"balance": 12.5}}]}],
            }
        ),
    )

    async with DataForSEOClient(_settings()) as client:
        info = await client.get_account_info()

    assert info["money"]["balance"] == 12.5
    assert captured["gets"][0].endswith("/appendix/user_data")


@pytest.mark.asyncio
async def test_empty_inputs_skip_requests(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = _install_fake_client(monkeypatch, FakeResponse({}))

    async with DataForSEOClient(_settings()) as client:
        assert await client.get_keyword_suggestions([]) == []
        assert await client.get_keyword_metrics([]) == []

    assert captured["posts"] == []
