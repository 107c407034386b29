"""Rewrite out-of-range meta descriptions in the site's page templates."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from winequickstart.services.seo import (
    generate_meta_description,
    is_meta_description_in_range,
    topic_from_title,
)
from winequickstart.services.slug_sources import iter_page_files

logger = logging.getLogger(__name__)

_QUOTED_VALUE = r"""(?P<q>["'])(?P<value>(?:\\.|(?!(?P=q)).)+)(?P=q)"""
TITLE_PATTERN = re.compile(r"title:\s*" + _QUOTED_VALUE)
DESCRIPTION_PATTERN = re.compile(r"description:\s*" + _QUOTED_VALUE)
SCHEMA_DESCRIPTION_PATTERN = re.compile(r'"description":\s*' + _QUOTED_VALUE)


@dataclass(frozen=True, slots=True)
class MetaRepairOutcome:
    path: Path
    category: str
    title: str
    old_length: int
    new_length: int
    updated: bool
    new_description: str | None = None


def repair_template(content: str, category: str) -> tuple[str, str | None, str, int]:
    """Return (content, new description or None, title, old length) for one page.

    The first JSON-LD description belongs to the Organization node, so the
    article description is the second one.
    """
    title_match = TITLE_PATTERN.search(content)
    description_match = DESCRIPTION_PATTERN.search(content)
    if not title_match or not description_match:
        return content, None, "", 0

    title = title_match.group("value")
    current = description_match.group("value")
    if is_meta_description_in_range(current):
        return content, None, title, len(current)

    new_description = generate_meta_description(topic_from_title(title), category=category)
    escaped = json.dumps(new_description)

    updated = (
        content[: description_match.start()]
        + f"description: {escaped}"
        + content[description_match.end() :]
    )

    schema_matches = list(SCHEMA_DESCRIPTION_PATTERN.finditer(updated))
    if len(schema_matches) >= 2:
        target = schema_matches[1]
        updated = updated[: target.start()] + f'"description": {escaped}' + updated[target.end() :]

    return updated, new_description, title, len(current)


def repair_meta_descriptions(
    pages_dir: Path,
    categories: Sequence[str],
    *,
    dry_run: bool = False,
) -> list[MetaRepairOutcome]:
    """Fix every page whose description falls outside 145-165 characters."""
    outcomes: list[MetaRepairOutcome] = []
    for category, path in iter_page_files(pages_dir, categories):
        content = path.read_text(encoding="utf-8")
        new_content, new_description, title, old_length = repair_template(content, category)

        if new_description is None:
            outcomes.append(
                MetaRepairOutcome(
                    path=path,
                    category=category,
                    title=title,
                    old_length=old_length,
                    new_length=old_length,
                    updated=False,
                )
            )
            continue

        if not dry_run:
            path.write_text(new_content, encoding="utf-8")
        logger.info(
            "Meta description rewritten",
            extra={
                "page": f"{category}/{path.name}",
                "old_length": old_length,
                "new_length": len(new_description),
                "dry_run": dry_run,
            },
        )
        outcomes.append(
            MetaRepairOutcome(
                path=path,
                category=category,
                title=title,
                old_length=old_length,
                new_length=len(new_description),
                updated=True,
                new_description=new_description,
            )
        )
    return outcomes
