"""Repository tests against an in-memory SQLite database."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from winequickstart.config import Settings
from winequickstart.core.database import Database
from winequickstart.core.exceptions import KeywordNotFoundError, PageNotFoundError
from winequickstart.models import KeywordOpportunity, WinePage
from winequickstart.repositories.keyword_repository import KeywordRepository
from winequickstart.repositories.page_repository import PageRepository
from winequickstart.services.keyword_maintenance import mark_duplicate_keywords


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[Database, None]:
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    db = Database(Settings(database_url="sqlite+aiosqlite://"), engine=engine)
    await db.init_db()
    try:
        yield db
    finally:
        await db.close()


async def _seed(database: Database) -> None:
    async with database.session() as session:
        await KeywordRepository(session).upsert_many(
            [
                {"keyword": "wine with chicken", "search_volume": 400, "priority": 8},
                {"keyword": "chicken with wine", "search_volume": 90, "priority": 8},
                {"keyword": "best merlot", "search_volume": None, "priority": 9},
                {"keyword": "malbec guide", "search_volume": 500, "priority": 5, "status": "used"},
            ]
        )
        session.add(KeywordOpportunity(keyword="port wine", search_volume=70, priority=5, status=None))
        session.add(WinePage(slug="wine-with-steak", title="Wine with Steak", category="wine-pairings"))


@pytest.mark.asyncio
async def test_upsert_inserts_then_refreshes_metrics_without_touching_status(database: Database) -> None:
    await _seed(database)

    async with database.session() as session:
        repo = KeywordRepository(session)
        stored = await repo.upsert_many(
            [{"keyword": "malbec guide", "search_volume": 650, "status": "active", "cpc": None}]
        )
        assert stored == 1

    async with database.session(commit_on_exit=False) as session:
        record = await KeywordRepository(session).get_by_keyword("malbec guide")

    assert record.search_volume == 650
    assert record.status == "used"


@pytest.mark.asyncio
async def test_list_all_and_selectable_ordering(database: Database) -> None:
    await _seed(database)

    async with database.session(commit_on_exit=False) as session:
        repo = KeywordRepository(session)
        everything = [record.keyword for record in await repo.list_all()]
        selectable = [record.keyword for record in await repo.list_selectable()]
        limited = await repo.list_selectable(limit=2)
        used = await repo.list_used_keywords()

    assert everything == [
        "malbec guide",
        "wine with chicken",
        "chicken with wine",
        "port wine",
        "best merlot",
    ]
    assert selectable == ["best merlot", "wine with chicken", "chicken with wine", "port wine"]
    assert len(limited) == 2
    assert used == ["malbec guide"]


@pytest.mark.asyncio
async def test_mark_used_and_reset(database: Database) -> None:
    await _seed(database)

    async with database.session() as session:
        record = await KeywordRepository(session).mark_used("port wine")
        assert record.status == "used"
        assert record.used_at is not None

    async with database.session() as session:
        matched = await KeywordRepository(session).reset(["port wine", "missing keyword"])

    async with database.session(commit_on_exit=False) as session:
        record = await KeywordRepository(session).get_by_keyword("port wine")
        with pytest.raises(KeywordNotFoundError):
            await KeywordRepository(session).get_by_keyword("missing keyword")

    assert matched == ["port wine"]
    assert record.status == "active"
    assert record.used_at is None


@pytest.mark.asyncio
async def test_duplicate_marking_persists_status_counts(database: Database) -> None:
    await _seed(database)

    async with database.session() as session:
        report = await mark_duplicate_keywords(KeywordRepository(session))

    async with database.session(commit_on_exit=False) as session:
        repo = KeywordRepository(session)
        counts = await repo.count_by_status()
        duplicate = await repo.get_by_keyword("chicken with wine")
        assert await repo.set_status([], "archived") == 0

    assert report.marked_count == 1
    assert duplicate.status == "duplicate"
    assert counts == {"active": 3, "used": 1, "duplicate": 1}


@pytest.mark.asyncio
async def test_page_repository_status_and_cleanup(database: Database) -> None:
    await _seed(database)

    async with database.session() as session:
        pages = PageRepository(session)
        assert await pages.list_slugs() == {"wine-with-steak"}
        page = await pages.set_content_status("wine-with-steak", "approved")
        assert page.content_status == "approved"
        with pytest.raises(PageNotFoundError):
            await pages.set_content_status("missing", "approved")

    async with database.session() as session:
        deleted = await PageRepository(session).delete_slugs(["wine-with-steak", "missing"])

    async with database.session(commit_on_exit=False) as session:
        remaining = await PageRepository(session).list_slugs()

    assert deleted == 1
    assert remaining == set()


@pytest.mark.asyncio
async def test_non_committing_session_rejects_pending_changes(database: Database) -> None:
    with pytest.raises(RuntimeError, match="pending ORM changes"):
        async with database.session(commit_on_exit=False) as session:
            session.add(KeywordOpportunity(keyword="orphan", priority=5))

    async with database.session(commit_on_exit=False) as session:
        assert await KeywordRepository(session).list_all() == []


@pytest.mark.asyncio
async def test_page_repository_list_recent(database: Database) -> None:
    await _seed(database)
    async with database.session() as session:
        session.add_all(
            [
                WinePage(slug="merlot-guide", published_at=datetime(2026, 9, 1, tzinfo=timezone.utc)),
                WinePage(slug="rose-for-summer", published_at=datetime(2026, 10, 1, tzinfo=timezone.utc)),
            ]
        )

    async with database.session(commit_on_exit=False) as session:
        recent = await PageRepository(session).list_recent(2)

    assert [page.slug for page in recent] == ["rose-for-summer", "merlot-guide"]
