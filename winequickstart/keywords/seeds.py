"""Curated seed keyword files (YAML) for bootstrapping the keyword table."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from winequickstart.keywords.dedup import STATUS_ACTIVE
from winequickstart.keywords.scoring import BASE_PRIORITY, MAX_PRIORITY, MIN_PRIORITY
from winequickstart.services.seo import determine_intent, determine_seasonality


def load_seed_file(path: Path) -> list[dict[str, Any]]:
    """Parse a seed file into `keyword_opportunities` rows.

    Expected shape::

        groups:
          food_pairings:
            priority: 9
            keywords: [wine with chicken, ...]
    """
    payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError("seed file must be a mapping")

    groups = payload.get("groups")
    if not isinstance(groups, dict):
        raise ValueError("seed file must include a 'groups' mapping")

    rows: list[dict[str, Any]] = []
    seen: set[str] = set()
    for group_name, config in groups.items():
        if not isinstance(config, dict):
            raise ValueError(f"group {group_name} must be a mapping")

        priority = int(config.get("priority", BASE_PRIORITY))
        if not MIN_PRIORITY <= priority <= MAX_PRIORITY:
            raise ValueError(f"{group_name}.priority must be between {MIN_PRIORITY} and {MAX_PRIORITY}")

        keywords = config.get("keywords")
        if not isinstance(keywords, list) or not keywords:
            raise ValueError(f"{group_name}.keywords must be a non-empty list")

        for raw in keywords:
            keyword = str(raw).strip().lower()
            if not keyword or keyword in seen:
                continue
            seen.add(keyword)
            rows.append({
                "keyword": keyword,
                "priority": priority,
                "intent": determine_intent(keyword),
                "seasonality": determine_seasonality(keyword),
                "status": STATUS_ACTIVE,
            })
    return rows
