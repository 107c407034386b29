"""Where existing article slugs come from: the pages table or the page files."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Literal, Protocol

from winequickstart.core.result import Failure, Result, Success, capture, capture_async

logger = logging.getLogger(__name__)

SlugSourceName = Literal["db", "files", "both"]

PAGE_SUFFIX = ".astro"


class SlugLister(Protocol):
    async def list_slugs(self) -> set[str]: ...


def iter_page_files(pages_dir: Path, categories: Sequence[str]) -> list[tuple[str, Path]]:
    """(category, path) for every static article template under `pages_dir`.

    Index pages and dynamic `[param]` routes are not articles.
    """
    files: list[tuple[str, Path]] = []
    for category in categories:
        category_dir = pages_dir / category
        if not category_dir.is_dir():
            continue
        for path in sorted(category_dir.glob(f"*{PAGE_SUFFIX}")):
            if path.name == f"index{PAGE_SUFFIX}" or path.name.startswith("["):
                continue
            files.append((category, path))
    return files


def list_file_slugs(pages_dir: Path, categories: Sequence[str]) -> set[str]:
    return {path.stem for _, path in iter_page_files(pages_dir, categories)}


async def load_existing_slugs(
    source: SlugSourceName,
    *,
    pages: SlugLister | None,
    pages_dir: Path,
    categories: Sequence[str],
) -> Result[set[str]]:
    """Union of slugs from the requested sources.

    A failed source makes the whole load a `Failure`: selecting against a
    partial slug set could schedule an article that already exists.
    """
    slugs: set[str] = set()

    if source in ("db", "both"):
        if pages is None:
            return Failure(reason="database slug source requested without a page repository")
        db_result = await capture_async(pages.list_slugs, context="list page slugs")
        if not db_result.ok:
            return db_result
        slugs |= db_result.unwrap()

    if source in ("files", "both"):
        file_result = capture(
            lambda: list_file_slugs(pages_dir, categories),
            context="list page files",
            log_context={"pages_dir": str(pages_dir)},
        )
        if not file_result.ok:
            return file_result
        slugs |= file_result.unwrap()

    logger.info("Existing slugs loaded", extra={"source": source, "count": len(slugs)})
    return Success(slugs)
