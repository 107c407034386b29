"""Custom exception classes for the application."""

from typing import Any


class WineQuickstartError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# External API Errors
class ExternalAPIError(WineQuickstartError):
    """Error calling external API."""

    def __init__(self, api_name: str, message: str) -> None:
        self.api_name = api_name
        super().__init__(f"{api_name} API error: {message}")


class RateLimitExceededError(ExternalAPIError):
    """Rate limit exceeded for external API."""

    def __init__(self, api_name: str) -> None:
        super().__init__(api_name, "Rate limit exceeded")


class APIKeyMissingError(ExternalAPIError):
    """API key not configured."""

    def __init__(self, api_name: str) -> None:
        super().__init__(api_name, "API key not configured")


# Data Errors
class KeywordNotFoundError(WineQuickstartError):
    """Keyword not found."""

    def __init__(self, keyword: str) -> None:
        super().__init__(f"Keyword not found: {keyword}")


class PageNotFoundError(WineQuickstartError):
    """Page not found."""

    def __init__(self, slug: str) -> None:
        super().__init__(f"Page not found: {slug}")
