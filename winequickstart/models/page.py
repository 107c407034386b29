"""Materialized article page model."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from winequickstart.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from winequickstart.models.keyword import KeywordOpportunity


class WinePage(Base, TimestampMixin):
    """An article that already exists on the site, keyed by slug."""

    __tablename__ = "wine_pages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    category: Mapped[str | None] = mapped_column(String(50), nullable=True)
    keyword_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("keyword_opportunities.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    meta_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    content_status: Mapped[str] = mapped_column(String(30), default="draft", nullable=False)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    keyword: Mapped[KeywordOpportunity | None] = relationship(
        "KeywordOpportunity",
        back_populates="pages",
    )

    def __repr__(self) -> str:
        return f"<WinePage {self.slug}>"
