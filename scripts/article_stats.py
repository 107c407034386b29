"""Word counts per article, thinnest first, with a thin-content summary."""

from __future__ import annotations

import argparse
from collections import Counter
from pathlib import Path

from winequickstart.config import get_settings
from winequickstart.core.logging import setup_logging
from winequickstart.services.article_stats import ArticleStats, collect_article_stats, thin_articles


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--pages-dir", default=None, help="Override PAGES_DIR")
    parser.add_argument(
        "--threshold",
        type=int,
        default=None,
        help="Word count below which an article is thin (default: THIN_CONTENT_WORD_THRESHOLD)",
    )
    return parser.parse_args(argv)


def print_stats(stats: list[ArticleStats], threshold: int) -> None:
    print(f"{'Words':>6}  {'Depth':<9} {'Img':<3} {'Wines':>5}  Page")
    for item in stats:
        image = "yes" if item.has_image else "-"
        print(f"{item.word_count:>6}  {item.depth:<9} {image:<3} {item.wine_count:>5}  {item.category}/{item.slug}")

    if not stats:
        print("No articles found")
        return

    bands = Counter(item.depth for item in stats)
    average = sum(item.word_count for item in stats) // len(stats)
    thin = thin_articles(stats, threshold)
    print(f"\nArticles: {len(stats)}  Average words: {average:,}")
    print("Depth: " + ", ".join(f"{label} {bands.get(label, 0)}" for label in ("thin", "moderate", "good", "excellent")))
    print(f"Below {threshold:,} words: {len(thin)}")


def main(argv: list[str] | None = None) -> int:
    setup_logging()
    args = parse_args(argv)
    settings = get_settings()
    pages_dir = Path(args.pages_dir or settings.pages_dir)
    if not pages_dir.is_dir():
        print(f"Pages directory not found: {pages_dir}")
        return 1

    threshold = args.threshold if args.threshold is not None else settings.thin_content_word_threshold
    print_stats(collect_article_stats(pages_dir, settings.page_categories), threshold)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
