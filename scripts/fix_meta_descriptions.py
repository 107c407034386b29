"""Rewrite page meta descriptions that fall outside 145-165 characters."""

from __future__ import annotations

import argparse
from pathlib import Path

from winequickstart.config import get_settings
from winequickstart.core.logging import setup_logging
from winequickstart.services.meta_repair import MetaRepairOutcome, repair_meta_descriptions


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--pages-dir", default=None, help="Override PAGES_DIR")
    parser.add_argument("--dry-run", action="store_true", help="Report changes without writing files")
    return parser.parse_args(argv)


def print_outcomes(outcomes: list[MetaRepairOutcome], *, dry_run: bool) -> None:
    updated = [outcome for outcome in outcomes if outcome.updated]
    for outcome in updated:
        print(f"{outcome.category}/{outcome.path.name}: {outcome.old_length} -> {outcome.new_length}")
        print(f"  {outcome.new_description}")
    verb = "Would update" if dry_run else "Updated"
    print(f"\n{verb} {len(updated)} of {len(outcomes)} pages")


def main(argv: list[str] | None = None) -> int:
    setup_logging()
    args = parse_args(argv)
    settings = get_settings()
    pages_dir = Path(args.pages_dir or settings.pages_dir)
    if not pages_dir.is_dir():
        print(f"Pages directory not found: {pages_dir}")
        return 1

    outcomes = repair_meta_descriptions(pages_dir, settings.page_categories, dry_run=args.dry_run)
    print_outcomes(outcomes, dry_run=args.dry_run)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
