"""Explicit success/failure results for calls whose failure must stay visible.

Reads and writes against the database or third-party APIs used to collapse
errors into empty defaults, which made "no data" and "call failed" look the
same. Callers that need to tell them apart receive a `Success` or `Failure`.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import httpx
from sqlalchemy.exc import SQLAlchemyError

from winequickstart.core.exceptions import WineQuickstartError

logger = logging.getLogger(__name__)

T = TypeVar("T")

CAPTURED_ERRORS: tuple[type[BaseException], ...] = (
    WineQuickstartError,
    SQLAlchemyError,
    httpx.HTTPError,
    OSError,
)


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    """Call completed and produced `value` (which may legitimately be empty)."""

    value: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value


@dataclass(frozen=True, slots=True)
class Failure:
    """Call failed; `reason` is a human-readable summary."""

    reason: str
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        if self.error is not None:
            raise self.error
        raise RuntimeError(self.reason)

    def unwrap_or(self, default: T) -> T:
        return default


Result = Success[T] | Failure


async def capture_async(
    operation: Callable[[], Awaitable[T]],
    *,
    context: str,
    log_context: Mapping[str, Any] | None = None,
) -> Result[T]:
    """Await `operation` and turn expected I/O errors into a `Failure`.

    Programming errors (anything outside `CAPTURED_ERRORS`) still propagate.
    """
    try:
        return Success(await operation())
    except CAPTURED_ERRORS as exc:
        logger.warning(
            "Operation failed",
            extra={**dict(log_context or {}), "operation": context, "error": str(exc)},
        )
        return Failure(reason=f"{context}: {exc}", error=exc)


def capture(
    operation: Callable[[], T],
    *,
    context: str,
    log_context: Mapping[str, Any] | None = None,
) -> Result[T]:
    """Synchronous counterpart of `capture_async` for filesystem reads."""
    try:
        return Success(operation())
    except CAPTURED_ERRORS as exc:
        logger.warning(
            "Operation failed",
            extra={**dict(log_context or {}), "operation": context, "error": str(exc)},
        )
        return Failure(reason=f"{context}: {exc}", error=exc)
