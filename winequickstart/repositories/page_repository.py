"""Database access for materialized wine pages."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from winequickstart.core.exceptions import PageNotFoundError
from winequickstart.models.page import WinePage

logger = logging.getLogger(__name__)


class PageRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_slugs(self) -> set[str]:
        result = await self.session.execute(select(WinePage.slug))
        return set(result.scalars().all())

    async def get_by_slug(self, slug: str) -> WinePage:
        result = await self.session.execute(select(WinePage).where(WinePage.slug == slug))
        page = result.scalar_one_or_none()
        if page is None:
            raise PageNotFoundError(slug)
        return page

    async def set_content_status(self, slug: str, content_status: str) -> WinePage:
        page = await self.get_by_slug(slug)
        page.content_status = content_status
        await self.session.flush()
        logger.info("Page status updated", extra={"slug": slug, "content_status": content_status})
        return page

    async def delete_slugs(self, slugs: Iterable[str]) -> int:
        wanted = list(dict.fromkeys(slugs))
        if not wanted:
            return 0
        result = await self.session.execute(delete(WinePage).where(WinePage.slug.in_(wanted)))
        return result.rowcount or 0

    async def list_recent(self, limit: int = 5) -> list[WinePage]:
        """Newest pages first: published date, then creation time."""
        result = await self.session.execute(
            select(WinePage)
            .order_by(
                WinePage.published_at.desc().nulls_last(),
                WinePage.created_at.desc(),
                WinePage.id.desc(),
            )
            .limit(limit)
        )
        return list(result.scalars().all())
