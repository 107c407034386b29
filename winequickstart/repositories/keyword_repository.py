"""Database access for keyword opportunities."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from winequickstart.core.exceptions import KeywordNotFoundError
from winequickstart.keywords.dedup import STATUS_ACTIVE, STATUS_USED
from winequickstart.models.keyword import KeywordOpportunity

logger = logging.getLogger(__name__)

UPSERT_FIELDS = (
    "search_volume",
    "keyword_difficulty",
    "cpc",
    "competition",
    "intent",
    "seasonality",
    "priority",
)


class KeywordRepository:
    """Reads and status writes against `keyword_opportunities`."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_all(self) -> list[KeywordOpportunity]:
        """Full snapshot, highest volume first."""
        result = await self.session.execute(
            select(KeywordOpportunity).order_by(
                KeywordOpportunity.search_volume.desc().nulls_last(),
                KeywordOpportunity.id.asc(),
            )
        )
        return list(result.scalars().all())

    async def list_selectable(self, limit: int | None = None) -> list[KeywordOpportunity]:
        """Active (or unset) keywords by priority desc, then volume desc."""
        query = (
            select(KeywordOpportunity)
            .where(
                or_(
                    KeywordOpportunity.status.is_(None),
                    KeywordOpportunity.status == STATUS_ACTIVE,
                )
            )
            .order_by(
                KeywordOpportunity.priority.desc(),
                KeywordOpportunity.search_volume.desc().nulls_last(),
                KeywordOpportunity.id.asc(),
            )
        )
        if limit is not None:
            query = query.limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def list_used_keywords(self) -> list[str]:
        result = await self.session.execute(
            select(KeywordOpportunity.keyword).where(KeywordOpportunity.status == STATUS_USED)
        )
        return list(result.scalars().all())

    async def get_by_keyword(self, keyword: str) -> KeywordOpportunity:
        result = await self.session.execute(
            select(KeywordOpportunity).where(KeywordOpportunity.keyword == keyword)
        )
        record = result.scalar_one_or_none()
        if record is None:
            raise KeywordNotFoundError(keyword)
        return record

    async def set_status(self, ids: Sequence[int], status: str) -> int:
        """Bulk status write; returns the number of rows touched."""
        if not ids:
            return 0
        result = await self.session.execute(
            update(KeywordOpportunity)
            .where(KeywordOpportunity.id.in_(list(ids)))
            .values(status=status)
            .execution_options(synchronize_session="fetch")
        )
        logger.info("Keyword status updated", extra={"status": status, "rows": result.rowcount})
        return result.rowcount or 0

    async def mark_used(self, keyword: str) -> KeywordOpportunity:
        record = await self.get_by_keyword(keyword)
        record.status = STATUS_USED
        record.used_at = datetime.now(timezone.utc)
        await self.session.flush()
        return record

    async def reset(self, keywords: Iterable[str]) -> list[str]:
        """Return keywords to `active` and clear `used_at`; returns the matches."""
        wanted = list(dict.fromkeys(keywords))
        if not wanted:
            return []
        result = await self.session.execute(
            select(KeywordOpportunity).where(KeywordOpportunity.keyword.in_(wanted))
        )
        matched = list(result.scalars().all())
        for record in matched:
            record.status = STATUS_ACTIVE
            record.used_at = None
        await self.session.flush()
        return [record.keyword for record in matched]

    async def upsert_many(self, rows: Sequence[Mapping[str, Any]]) -> int:
        """Insert new keywords and refresh metrics of existing ones.

        Matching is on the exact `keyword` text. An existing row's status is
        left alone so `used`/`duplicate` markers survive re-imports.
        """
        if not rows:
            return 0

        texts = [str(row["keyword"]) for row in rows]
        result = await self.session.execute(
            select(KeywordOpportunity).where(KeywordOpportunity.keyword.in_(texts))
        )
        existing = {record.keyword: record for record in result.scalars().all()}

        for row in rows:
            record = existing.get(str(row["keyword"]))
            if record is None:
                record = KeywordOpportunity(keyword=str(row["keyword"]))
                self.session.add(record)
                existing[record.keyword] = record
                record.status = row.get("status") or STATUS_ACTIVE
            for field_name in UPSERT_FIELDS:
                if field_name not in row:
                    continue
                value = row[field_name]
                if value is not None:
                    setattr(record, field_name, value)

        await self.session.flush()
        return len(rows)

    async def count_by_status(self) -> dict[str, int]:
        status_expr = func.coalesce(KeywordOpportunity.status, STATUS_ACTIVE)
        result = await self.session.execute(
            select(status_expr, func.count()).group_by(status_expr)
        )
        return {str(status): int(count) for status, count in result.all()}
