"""Word counts and thin-content detection for page templates."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from winequickstart.services.slug_sources import iter_page_files

FRONTMATTER_PATTERN = re.compile(r"---[\s\S]*?---")
TAG_PATTERN = re.compile(r"<[^>]+>")
WINE_HEADING_PATTERN = re.compile(r"<h3[^>]*>\d+\.")

DEPTH_BANDS = (
    ("thin", 600),
    ("moderate", 1200),
    ("good", 2000),
)


@dataclass(frozen=True, slots=True)
class ArticleStats:
    slug: str
    category: str
    word_count: int
    has_image: bool
    wine_count: int

    @property
    def depth(self) -> str:
        for label, upper in DEPTH_BANDS:
            if self.word_count < upper:
                return label
        return "excellent"


def analyze_template(slug: str, category: str, content: str) -> ArticleStats:
    text = TAG_PATTERN.sub(" ", FRONTMATTER_PATTERN.sub("", content, count=1))
    return ArticleStats(
        slug=slug,
        category=category,
        word_count=len(text.split()),
        has_image="featuredImage" in content,
        wine_count=len(WINE_HEADING_PATTERN.findall(content)),
    )


def collect_article_stats(pages_dir: Path, categories: Sequence[str]) -> list[ArticleStats]:
    """Stats for every article, thinnest first."""
    stats = [
        analyze_template(path.stem, category, path.read_text(encoding="utf-8"))
        for category, path in iter_page_files(pages_dir, categories)
    ]
    return sorted(stats, key=lambda item: item.word_count)


def thin_articles(stats: Sequence[ArticleStats], threshold: int) -> list[ArticleStats]:
    return [item for item in stats if item.word_count < threshold]
