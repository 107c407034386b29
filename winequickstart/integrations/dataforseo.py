"""DataForSEO API integration for keyword ideas, metrics and account checks."""

import base64
import logging
from typing import Any

import httpx

from winequickstart.config import Settings
from winequickstart.core.exceptions import (
    APIKeyMissingError,
    ExternalAPIError,
    RateLimitExceededError,
)

logger = logging.getLogger(__name__)

OK_STATUS = 20000


class DataForSEOClient:
    """Client for the DataForSEO v3 API.

    Use as an async context manager:

        async with DataForSEOClient(settings) as client:
            ideas = await client.get_keyword_suggestions(["wine with steak"])
    """

    BASE_URL = "https://api.dataforseo.com/v3"

    def __init__(self, settings: Settings, *, timeout: float = 60.0) -> None:
        self.login = settings.dataforseo_login
        self.password = settings.dataforseo_password
        self.location_code = settings.dataforseo_location_code
        self.language_code = settings.dataforseo_language_code
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

        if not self.login or not self.password:
            raise APIKeyMissingError("DataForSEO")

    @property
    def _auth_header(self) -> str:
        credentials = f"{self.login}:{self.password}"
        return f"Basic {base64.b64encode(credentials.encode()).decode()}"

    async def __aenter__(self) -> "DataForSEOClient":
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            headers={
                "Authorization": self._auth_header,
                "Content-Type": "application/json",
            },
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("Client must be used as async context manager")
        return self._client

    def _check_envelope(self, endpoint: str, result: Any) -> dict[str, Any]:
        if not isinstance(result, dict):
            raise ExternalAPIError("DataForSEO", "Unexpected non-object response")
        if result.get("status_code") != OK_STATUS:
            logger.warning(
                "DataForSEO API error",
                extra={"endpoint": endpoint, "status": result.get("status_message")},
            )
            raise ExternalAPIError("DataForSEO", result.get("status_message", "Unknown error"))
        return result

    async def _send(self, method: str, endpoint: str, data: list[dict[str, Any]] | None = None) -> dict[str, Any]:
        logger.info("DataForSEO API request", extra={"endpoint": endpoint})
        url = f"{self.BASE_URL}/{endpoint}"
        try:
            if method == "GET":
                response = await self.client.get(url)
            else:
                response = await self.client.post(url, json=data)

            if response.status_code == 429:
                logger.warning("DataForSEO rate limit hit", extra={"endpoint": endpoint})
                raise RateLimitExceededError("DataForSEO")

            response.raise_for_status()
            return self._check_envelope(endpoint, response.json())
        except httpx.HTTPError as e:
            logger.warning("DataForSEO HTTP error", extra={"endpoint": endpoint, "error": str(e)})
            raise ExternalAPIError("DataForSEO", str(e)) from e

    async def _make_request(self, endpoint: str, data: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """POST a task batch and flatten the results of successful tasks."""
        envelope = await self._send("POST", endpoint, data)
        results: list[dict[str, Any]] = []
        for task in envelope.get("tasks") or []:
            if task.get("status_code") == OK_STATUS and task.get("result"):
                results.extend(task["result"])
        return results

    async def get_keyword_suggestions(self, seeds: list[str], limit: int = 700) -> list[dict[str, Any]]:
        """Keyword ideas for seed terms, deduplicated case-insensitively."""
        if not seeds:
            return []

        logger.info("Fetching keyword suggestions", extra={"seeds": len(seeds), "limit": limit})
        results = await self._make_request(
            "dataforseo_labs/google/keyword_ideas/live",
            [
                {
                    "keywords": seeds,
                    "location_code": self.location_code,
                    "language_code": self.language_code,
                    "limit": limit,
                }
            ],
        )

        keywords = []
        seen = set()
        for result in results:
            for item in result.get("items") or []:
                kw_text = (item.get("keyword") or "").strip()
                if kw_text and kw_text.lower() not in seen:
                    seen.add(kw_text.lower())
                    info = item.get("keyword_info") or {}
                    props = item.get("keyword_properties") or {}
                    keywords.append({
                        "keyword": kw_text,
                        "search_volume": info.get("search_volume"),
                        "cpc": info.get("cpc"),
                        "competition_level": info.get("competition_level"),
                        "keyword_difficulty": props.get("keyword_difficulty"),
                    })
        return keywords

    async def get_keyword_metrics(self, keywords: list[str]) -> list[dict[str, Any]]:
        """Volume, CPC, competition and difficulty, batched 700 keywords per call."""
        if not keywords:
            return []

        batch_size = 700
        all_metrics = []
        for i in range(0, len(keywords), batch_size):
            batch = keywords[i : i + batch_size]
            results = await self._make_request(
                "dataforseo_labs/google/keyword_overview/live",
                [
                    {
                        "keywords": batch,
                        "location_code": self.location_code,
                        "language_code": self.language_code,
                    }
                ],
            )
            for result in results:
                for item in result.get("items") or []:
                    info = item.get("keyword_info") or {}
                    props = item.get("keyword_properties") or {}
                    all_metrics.append({
                        "keyword": item.get("keyword"),
                        "search_volume": info.get("search_volume"),
                        "cpc": info.get("cpc"),
                        "competition_level": info.get("competition_level"),
                        "keyword_difficulty": props.get("keyword_difficulty"),
                    })

        logger.info("Fetched keyword metrics", extra={"requested": len(keywords), "returned": len(all_metrics)})
        return all_metrics

    async def get_account_info(self) -> dict[str, Any]:
        """Account balance and limits (used by the connectivity check)."""
        envelope = await self._send("GET", "appendix/user_data")
        for task in envelope.get("tasks") or []:
            if task.get("result"):
                return task["result"][0]
        return {}
