"""Keyword canonicalization, duplicate resolution and next-batch selection.

Everything here is pure and synchronous: callers fetch a snapshot of keyword
records, run these functions, then write the resulting status changes back.
Records only need `keyword`, `search_volume`, `priority` and `status`
attributes, so ORM rows and plain dataclasses both work.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence, Set
from dataclasses import dataclass, field
from typing import Generic, Protocol, TypeVar

STATUS_ACTIVE = "active"
STATUS_USED = "used"
STATUS_DUPLICATE = "duplicate"
STATUS_ARCHIVED = "archived"

SELECTABLE_STATUSES = frozenset({None, STATUS_ACTIVE})

_NON_KEY_CHARS = re.compile(r"[^a-z0-9 ]")
_WHITESPACE = re.compile(r"\s+")


class KeywordLike(Protocol):
    keyword: str
    search_volume: int | None
    priority: int | None
    status: str | None


RecordT = TypeVar("RecordT", bound=KeywordLike)


def canonicalize(text: str) -> str:
    """Map a keyword phrase to its order- and punctuation-insensitive key.

    Only the space character separates tokens; tabs and newlines are
    stripped like any other non-key character. Not synonym-aware: no
    stemming and no plural folding.

    >>> canonicalize("Wine with Chicken!")
    'chicken wine with'
    """
    tokens = [token for token in _NON_KEY_CHARS.sub("", (text or "").lower()).split(" ") if token]
    return " ".join(sorted(tokens))


def keyword_to_slug(text: str) -> str:
    """Derive the URL slug an article for `text` would be published under.

    >>> keyword_to_slug("Best Wine with Steak!")
    'best-wine-with-steak'
    """
    return _WHITESPACE.sub("-", _NON_KEY_CHARS.sub("", (text or "").lower()))


def is_selectable(record: KeywordLike) -> bool:
    """Whether a record is still available for content generation."""
    return record.status in SELECTABLE_STATUSES


def _volume(record: KeywordLike) -> int:
    return record.search_volume or 0


def group_by_canonical_key(records: Iterable[RecordT]) -> dict[str, list[RecordT]]:
    """Bucket records by canonical key, preserving input order inside buckets."""
    groups: dict[str, list[RecordT]] = {}
    for record in records:
        groups.setdefault(canonicalize(record.keyword), []).append(record)
    return groups


def find_duplicate_groups(records: Iterable[RecordT]) -> dict[str, list[RecordT]]:
    """Only the buckets holding more than one record."""
    return {
        key: group
        for key, group in group_by_canonical_key(records).items()
        if len(group) > 1
    }


@dataclass(slots=True)
class DuplicateResolution(Generic[RecordT]):
    """Outcome of resolving one canonical-key group."""

    canonical_key: str
    keep: RecordT
    duplicates: list[RecordT] = field(default_factory=list)
    preserved_used: list[RecordT] = field(default_factory=list)


def resolve_duplicates(group: Sequence[RecordT]) -> DuplicateResolution[RecordT] | None:
    """Pick the record to keep and list the ones to mark as duplicate.

    Ranking: `used` records first, then higher search volume (unknown = 0),
    then input order. A `used` record is never returned as a duplicate, even
    when it is not the top-ranked one; it lands in `preserved_used` instead.
    An empty group has nothing to keep and resolves to None.
    """
    if not group:
        return None

    ranked = sorted(
        enumerate(group),
        key=lambda item: (
            0 if item[1].status == STATUS_USED else 1,
            -_volume(item[1]),
            item[0],
        ),
    )
    keep = ranked[0][1]

    resolution = DuplicateResolution(canonical_key=canonicalize(keep.keyword), keep=keep)
    for record in group:
        if record is keep:
            continue
        if record.status == STATUS_USED:
            resolution.preserved_used.append(record)
        else:
            resolution.duplicates.append(record)
    return resolution


def plan_duplicate_marking(records: Iterable[RecordT]) -> list[DuplicateResolution[RecordT]]:
    """Resolve every multi-record group in a snapshot."""
    resolutions = (resolve_duplicates(group) for group in find_duplicate_groups(records).values())
    return [resolution for resolution in resolutions if resolution is not None]


def order_selection_pool(records: Iterable[RecordT]) -> list[RecordT]:
    """Selectable records by priority desc, then volume desc, then input order."""
    selectable = [record for record in records if is_selectable(record)]
    return sorted(
        selectable,
        key=lambda record: (-(record.priority or 0), -_volume(record)),
    )


def select_next(
    pool: Sequence[RecordT],
    existing_slugs: Set[str],
    used_canonical_keys: Set[str],
    count: int,
) -> list[RecordT]:
    """Choose up to `count` records to write next, in pool order.

    Skips a candidate whose slug already exists, whose canonical key belongs to
    a used keyword, or whose key was already accepted earlier in this pass.
    Returns fewer than `count` records when the pool runs out.
    """
    selected: list[RecordT] = []
    if count <= 0:
        return selected

    accepted_keys: set[str] = set()
    for record in pool:
        if len(selected) >= count:
            break

        key = canonicalize(record.keyword)
        if keyword_to_slug(record.keyword) in existing_slugs:
            continue
        if key in used_canonical_keys or key in accepted_keys:
            continue

        accepted_keys.add(key)
        selected.append(record)

    return selected
