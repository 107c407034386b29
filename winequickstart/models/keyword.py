"""Keyword opportunity model."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from winequickstart.keywords.dedup import canonicalize
from winequickstart.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from winequickstart.models.page import WinePage


class KeywordOpportunity(Base, TimestampMixin):
    """Search query worth an article, with volume/priority/status metadata."""

    __tablename__ = "keyword_opportunities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    keyword: Mapped[str] = mapped_column(Text, nullable=False, unique=True)

    # Metrics
    search_volume: Mapped[int | None] = mapped_column(Integer, nullable=True)
    keyword_difficulty: Mapped[float | None] = mapped_column(Float, nullable=True)
    cpc: Mapped[float | None] = mapped_column(Float, nullable=True)
    competition: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Classification
    intent: Mapped[str | None] = mapped_column(String(30), nullable=True)
    seasonality: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Selection
    priority: Mapped[int] = mapped_column(Integer, default=5, nullable=False)
    status: Mapped[str | None] = mapped_column(String(20), nullable=True, index=True)
    used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    pages: Mapped[list[WinePage]] = relationship("WinePage", back_populates="keyword")

    @property
    def canonical_key(self) -> str:
        """Order- and punctuation-insensitive comparison key, derived on demand."""
        return canonicalize(self.keyword)

    @property
    def effective_status(self) -> str:
        return self.status or "active"

    def __repr__(self) -> str:
        return f"<KeywordOpportunity {self.keyword!r} status={self.effective_status}>"
