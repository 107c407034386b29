"""SEO metadata helpers: intent, seasonality, titles and meta descriptions."""

from __future__ import annotations

import re
from datetime import date

META_DESCRIPTION_MIN = 145
META_DESCRIPTION_MAX = 160
META_DESCRIPTION_TOLERANCE_MAX = 165
META_DESCRIPTION_TRIM_AT = 157
META_DESCRIPTION_PADDING = " for any occasion."

TRANSACTIONAL_PATTERN = re.compile(r"buy|shop|order|price|deal|under \$|cheap|affordable")
COMMERCIAL_PATTERN = re.compile(r"best|top|review|\bvs\b|compare|rating|recommend")
SEASONAL_PATTERN = re.compile(r"summer|winter|holiday|christmas|thanksgiving|valentine|bbq")
TRENDING_PATTERN = re.compile(r"trending|\b20\d\d\b|\bnew\b")
PAIRING_PATTERN = re.compile(r"with |pairing")
BUDGET_PATTERN = re.compile(r"under\s+\$?(\d+)|cheap|affordable|budget")
COMPARISON_SPLIT = re.compile(r"\s+(?:vs|versus)\s+")
COMPARISON_PATTERN = re.compile(r"\bvs\b|versus|difference between")
REGION_PATTERN = re.compile(
    r"napa|sonoma|bordeaux|burgundy|champagne|oregon|willamette|california|barolo|tuscany|rioja"
)
VARIETAL_PATTERN = re.compile(
    r"cabernet sauvignon|cabernet|merlot|pinot noir|pinot grigio|pinot|chardonnay|"
    r"sauvignon blanc|zinfandel|syrah|shiraz|riesling|prosecco|malbec|rose"
)


def determine_intent(keyword: str) -> str:
    """Classify search intent from keyword modifiers."""
    lowered = keyword.lower()
    if TRANSACTIONAL_PATTERN.search(lowered):
        return "transactional"
    if COMMERCIAL_PATTERN.search(lowered):
        return "commercial"
    return "informational"


def determine_seasonality(keyword: str) -> str:
    lowered = keyword.lower()
    if SEASONAL_PATTERN.search(lowered):
        return "seasonal"
    if TRENDING_PATTERN.search(lowered):
        return "trending"
    return "stable"


def title_case(text: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in text.split(" ") if word)


def _pairing_food(keyword: str) -> str:
    food = re.sub(r"^.*?with\s+", "", keyword)
    return re.sub(r"\s+(?:food\s+)?pairing.*$", "", food).strip()


def article_category(keyword: str) -> str:
    """Site section an article for `keyword` is published under."""
    lowered = keyword.lower()
    if "pairing" in lowered or "with " in lowered or "food" in lowered:
        return "wine-pairings"
    if re.search(r"buy|price|under \$|budget", lowered):
        return "buy"
    return "learn"


def generate_seo_title(keyword: str, category: str) -> str:
    """Build an article title: primary keyword plus a category-specific hook."""
    lowered = keyword.lower().strip()

    if PAIRING_PATTERN.search(lowered) and "with " in lowered:
        return f"Best Wine with {title_case(_pairing_food(lowered))}: Sommelier Picks & Pairing Tips"

    budget = re.search(r"under\s+\$?(\d+)", lowered)
    if budget:
        return f"Best Wines Under ${budget.group(1)}: Top Picks That Taste Expensive"

    if COMPARISON_PATTERN.search(lowered):
        parts = COMPARISON_SPLIT.split(lowered, maxsplit=1)
        if len(parts) == 2:
            return f"{title_case(parts[0])} vs {title_case(parts[1])}: Key Differences & When to Choose Each"

    capitalized = title_case(keyword.strip())
    if category == "buy":
        return f"{capitalized}: Expert Buying Guide & Top Picks"
    if category == "wine-pairings":
        return f"{capitalized}: Perfect Pairing Guide"
    return f"{capitalized}: Complete Guide from Sommeliers"


def fit_meta_description(text: str) -> str:
    """Bring a description into the 145-160 character window.

    Long text is cut at the last full word before 157 characters and gets an
    ellipsis; short text gets a generic suffix.
    """
    description = " ".join(text.split())
    if len(description) > META_DESCRIPTION_MAX:
        trimmed = re.sub(r"\s+\S*$", "", description[:META_DESCRIPTION_TRIM_AT])
        return f"{trimmed.rstrip(',;:')}..."
    if len(description) < META_DESCRIPTION_MIN:
        return f"{description.rstrip('.')}{META_DESCRIPTION_PADDING}"
    return description


def is_meta_description_in_range(text: str) -> bool:
    return META_DESCRIPTION_MIN <= len(text) <= META_DESCRIPTION_TOLERANCE_MAX


def generate_meta_description(topic: str, *, category: str | None = None) -> str:
    """Template a sommelier-voice description for an article topic.

    `topic` is the article title with any "- Expert Guide" or ": subtitle"
    suffix removed (see `topic_from_title`).
    """
    lowered = topic.lower().strip()
    is_pairing = category == "wine-pairings" or "pairing" in lowered or "food" in lowered
    is_best_list = lowered.startswith("best ") or " best " in lowered
    is_region = bool(REGION_PATTERN.search(lowered))
    is_varietal = bool(VARIETAL_PATTERN.search(lowered))

    if COMPARISON_PATTERN.search(lowered):
        parts = COMPARISON_SPLIT.split(lowered, maxsplit=1)
        if len(parts) == 2:
            description = (
                f"Compare {parts[0].strip()} and {parts[1].strip()}: key differences in taste, "
                "food pairings, and when to choose each. Expert sommelier insights to help you "
                "pick the perfect wine."
            )
            return fit_meta_description(description)

    if is_pairing and "with " in lowered:
        food = re.sub(r"^(?:best )?wine with ", "", lowered).strip()
        description = (
            f"Find the perfect wine to pair with {food}. Our certified sommeliers share top picks, "
            "flavor matching tips, and serving suggestions for an unforgettable meal."
        )
    elif is_pairing and "food pairing" in lowered:
        wine = lowered.replace(" food pairing", "").strip()
        description = (
            f"Master {wine} food pairing with our expert guide. Discover ideal dishes, flavor "
            "combinations, and pro tips from certified sommeliers for perfect pairings every time."
        )
    elif is_pairing and re.search(r"dinner|thanksgiving|christmas", lowered):
        occasion = lowered.replace(" wine pairing", "").strip()
        description = (
            f"Choose the perfect wines for {occasion} with our sommelier-curated guide. Get top "
            "recommendations, serving tips, and pairing suggestions for a memorable celebration."
        )
    elif is_best_list and is_region:
        region = re.sub(r"\s+", " ", re.sub(r"best |wines?", "", lowered)).strip()
        description = (
            f"Explore the best {region} wines with our expert guide. Curated recommendations, "
            "tasting notes, and insider tips from certified sommeliers to elevate your collection."
        )
    elif is_best_list and is_varietal:
        varietal = lowered.replace("best ", "", 1).strip()
        description = (
            f"Discover outstanding {varietal} wines with our expert picks. Detailed tasting notes, "
            "food pairings, and value recommendations from certified sommeliers."
        )
    elif is_region:
        description = (
            f"Your complete guide to {lowered}. Explore top producers, signature styles, and expert "
            "recommendations from certified sommeliers to find your perfect bottle."
        )
    elif is_varietal:
        description = (
            f"Your essential guide to {lowered} wine. Learn about flavor profiles, top regions, food "
            "pairings, and expert bottle picks from certified sommeliers."
        )
    elif category == "buy":
        description = (
            f"Find the best {lowered} with our expert buying guide. Price comparisons, quality "
            "picks, and insider recommendations from certified sommeliers."
        )
    else:
        base_topic = re.sub(r"[^a-z ]", "", lowered).strip()
        description = (
            f"Explore {base_topic} with our comprehensive sommelier guide. Expert recommendations, "
            "detailed tasting notes, food pairings, and tips for finding the perfect wine."
        )

    return fit_meta_description(description)


def topic_from_title(title: str) -> str:
    """Strip the "- Expert Guide" suffix and any ": subtitle" from a title."""
    topic = re.sub(r"\s*-\s*Expert Guide$", "", title.strip(), flags=re.IGNORECASE)
    return re.sub(r":.*$", "", topic).strip()


def keyword_meta_description(keyword: str, *, today: date | None = None) -> str:
    """Description for a freshly generated article, stamped with the month."""
    lowered = keyword.lower().strip()
    stamp = (today or date.today()).strftime("%b %Y")
    intent = determine_intent(lowered)

    if PAIRING_PATTERN.search(lowered):
        food = _pairing_food(lowered)
        description = (
            f"Find the perfect wine for {food}. Expert sommelier picks with flavor matching tips "
            f"and serving suggestions. Updated {stamp}."
        )
    elif BUDGET_PATTERN.search(lowered):
        budget = re.search(r"under\s+\$?(\d+)", lowered)
        price = f"under ${budget.group(1)}" if budget else "for any budget"
        description = (
            f"Best wines {price}. Quality picks that won't break the bank. "
            f"Sommelier-approved values. Updated {stamp}."
        )
    elif intent == "commercial":
        description = (
            f"Compare the best {lowered} picks. Expert ratings, prices & where to buy. "
            f"Sommelier recommendations updated {stamp}."
        )
    elif intent == "transactional":
        description = (
            f"Shop the best {lowered}. Curated picks from $15-$100+. Free shipping options & "
            "expert tasting notes included."
        )
    else:
        description = (
            f"Learn about {lowered}: expert tasting notes, food pairings & buying tips from "
            "certified sommeliers. Complete guide."
        )
    return fit_meta_description(description)


def canonical_url(site_url: str, category: str, slug: str) -> str:
    return f"{site_url.rstrip('/')}/{category}/{slug}"
