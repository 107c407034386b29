"""Duplicate marking, duplicate reporting and next-batch preview over the store."""

from __future__ import annotations

import logging
from collections.abc import Sequence, Set
from dataclasses import dataclass, field
from datetime import date
from typing import Protocol

from winequickstart.keywords.dedup import (
    STATUS_ACTIVE,
    STATUS_DUPLICATE,
    DuplicateResolution,
    canonicalize,
    group_by_canonical_key,
    is_selectable,
    keyword_to_slug,
    order_selection_pool,
    plan_duplicate_marking,
    select_next,
)
from winequickstart.models.keyword import KeywordOpportunity
from winequickstart.services.seo import article_category, generate_seo_title, keyword_meta_description

logger = logging.getLogger(__name__)


class KeywordStore(Protocol):
    async def list_all(self) -> list[KeywordOpportunity]: ...

    async def list_selectable(self, limit: int | None = None) -> list[KeywordOpportunity]: ...

    async def list_used_keywords(self) -> list[str]: ...

    async def set_status(self, ids: Sequence[int], status: str) -> int: ...


@dataclass(slots=True)
class DuplicateMarkingReport:
    resolutions: list[DuplicateResolution[KeywordOpportunity]]
    marked_ids: list[int]
    revived_ids: list[int]
    dry_run: bool

    @property
    def group_count(self) -> int:
        return len(self.resolutions)

    @property
    def marked_count(self) -> int:
        return len(self.marked_ids)

    @property
    def preserved_used(self) -> list[KeywordOpportunity]:
        return [record for plan in self.resolutions for record in plan.preserved_used]


async def mark_duplicate_keywords(
    store: KeywordStore,
    *,
    dry_run: bool = False,
) -> DuplicateMarkingReport:
    """Mark every redundant phrasing of a keyword as `duplicate`.

    Assumes a single writer: two concurrent runs may disagree on which record
    of a group is kept.
    """
    records = await store.list_all()
    resolutions = plan_duplicate_marking(records)

    marked_ids = [
        record.id
        for plan in resolutions
        for record in plan.duplicates
        if record.status != STATUS_DUPLICATE
    ]
    # A kept record left over from an earlier run as `duplicate` would leave its
    # group with nothing selectable.
    revived_ids = [plan.keep.id for plan in resolutions if plan.keep.status == STATUS_DUPLICATE]

    logger.info(
        "Duplicate keyword plan built",
        extra={
            "keywords": len(records),
            "groups": len(resolutions),
            "to_mark": len(marked_ids),
            "to_revive": len(revived_ids),
            "dry_run": dry_run,
        },
    )

    if not dry_run:
        await store.set_status(marked_ids, STATUS_DUPLICATE)
        await store.set_status(revived_ids, STATUS_ACTIVE)

    return DuplicateMarkingReport(
        resolutions=resolutions,
        marked_ids=marked_ids,
        revived_ids=revived_ids,
        dry_run=dry_run,
    )


@dataclass(slots=True)
class DuplicateCheckReport:
    groups: dict[str, list[KeywordOpportunity]]
    unique_unused: list[KeywordOpportunity]


async def build_duplicate_report(store: KeywordStore) -> DuplicateCheckReport:
    """Read-only view: duplicate groups plus keywords that are unique and unused."""
    grouped = group_by_canonical_key(await store.list_all())
    return DuplicateCheckReport(
        groups={key: group for key, group in grouped.items() if len(group) > 1},
        unique_unused=[
            group[0]
            for group in grouped.values()
            if len(group) == 1 and is_selectable(group[0])
        ],
    )


@dataclass(frozen=True, slots=True)
class NextArticle:
    keyword: str
    search_volume: int
    priority: int
    slug: str
    canonical_key: str
    category: str = "learn"
    title: str = ""
    meta_description: str = ""


@dataclass(slots=True)
class NextArticlePlan:
    articles: list[NextArticle] = field(default_factory=list)
    existing_slug_count: int = 0
    used_key_count: int = 0
    requested: int = 0

    @property
    def total_volume(self) -> int:
        return sum(article.search_volume for article in self.articles)

    @property
    def is_partial(self) -> bool:
        return len(self.articles) < self.requested


def _plan_article(record: KeywordOpportunity, today: date | None) -> NextArticle:
    category = article_category(record.keyword)
    return NextArticle(
        keyword=record.keyword,
        search_volume=record.search_volume or 0,
        priority=record.priority or 0,
        slug=keyword_to_slug(record.keyword),
        canonical_key=canonicalize(record.keyword),
        category=category,
        title=generate_seo_title(record.keyword, category),
        meta_description=keyword_meta_description(record.keyword, today=today),
    )


async def preview_next_articles(
    store: KeywordStore,
    existing_slugs: Set[str],
    *,
    count: int,
    pool_limit: int | None = None,
    today: date | None = None,
) -> NextArticlePlan:
    """Pick the next `count` keywords to write articles for, without changing anything.

    Each pick comes with the section, title and meta description its article
    would be generated with.
    """
    used_keys = {canonicalize(text) for text in await store.list_used_keywords()}
    pool = order_selection_pool(await store.list_selectable(pool_limit))
    selected = select_next(pool, existing_slugs, used_keys, count)

    if len(selected) < count:
        logger.warning(
            "Fewer eligible keywords than requested",
            extra={"requested": count, "selected": len(selected), "pool": len(pool)},
        )

    return NextArticlePlan(
        articles=[_plan_article(record, today) for record in selected],
        existing_slug_count=len(existing_slugs),
        used_key_count=len(used_keys),
        requested=count,
    )
