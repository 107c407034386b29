"""Tests for keyword canonicalization, duplicate resolution and selection."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from winequickstart.keywords.dedup import (
    canonicalize,
    find_duplicate_groups,
    group_by_canonical_key,
    is_selectable,
    keyword_to_slug,
    order_selection_pool,
    plan_duplicate_marking,
    resolve_duplicates,
    select_next,
)


@dataclass
class _Record:
    keyword: str
    search_volume: int | None = None
    priority: int | None = 5
    status: str | None = "active"


@pytest.mark.parametrize(
    "text",
    ["Wine With Chicken", "chicken with wine", "WINE CHICKEN WITH!!", "Wine with Chicken!"],
)
def test_canonicalize_ignores_order_case_and_punctuation(text: str) -> None:
    assert canonicalize(text) == "chicken wine with"


def test_canonicalize_is_stable_on_canonical_input() -> None:
    key = canonicalize("Best  Pinot-Noir under $20?")

    assert key == "20 best pinotnoir under"
    assert canonicalize(key) == key


def test_canonicalize_empty_and_symbol_only_inputs() -> None:
    assert canonicalize("") == ""
    assert canonicalize("!!! ???") == ""


def test_canonicalize_is_not_synonym_aware() -> None:
    assert canonicalize("wine with steak") != canonicalize("wines with steaks")


def test_canonicalize_splits_on_spaces_only() -> None:
    assert canonicalize("wine\twith steak") == "steak winewith"
    assert canonicalize("wine\nsteak") == "winesteak"


def test_keyword_to_slug() -> None:
    assert keyword_to_slug("Best Wine with Steak!") == "best-wine-with-steak"
    assert keyword_to_slug("rosé   for  summer") == "ros-for-summer"
    assert keyword_to_slug("Wine Under $20") == "wine-under-20"


def test_keyword_to_slug_keeps_edge_whitespace_as_hyphens() -> None:
    assert keyword_to_slug(" best merlot") == "-best-merlot"
    assert keyword_to_slug("port wine\t") == "port-wine-"


def test_group_by_canonical_key_preserves_input_order() -> None:
    first = _Record("merlot best")
    second = _Record("malbec guide")
    third = _Record("Best Merlot")

    groups = group_by_canonical_key([first, second, third])

    assert groups == {"best merlot": [first, third], "guide malbec": [second]}
    assert find_duplicate_groups([first, second, third]) == {"best merlot": [first, third]}


def test_resolve_duplicates_keeps_used_record() -> None:
    low = _Record("wine pairing guide", search_volume=100)
    reordered = _Record("guide wine pairing", search_volume=50)
    used = _Record("wine pairing guide", search_volume=200, status="used")

    resolution = resolve_duplicates([low, reordered, used])

    assert resolution is not None
    assert resolution.keep is used
    assert resolution.duplicates == [low, reordered]
    assert resolution.preserved_used == []
    assert resolution.canonical_key == "guide pairing wine"


def test_resolve_duplicates_used_outranks_higher_volume() -> None:
    popular = _Record("wine with pasta", search_volume=5000)
    used = _Record("pasta with wine", search_volume=10, status="used")

    resolution = resolve_duplicates([popular, used])

    assert resolution is not None
    assert resolution.keep is used
    assert resolution.duplicates == [popular]


def test_resolve_duplicates_never_demotes_any_used_record() -> None:
    first_used = _Record("steak wine", search_volume=100, status="used")
    second_used = _Record("wine steak", search_volume=900, status="used")
    active = _Record("Steak, Wine", search_volume=50)

    resolution = resolve_duplicates([first_used, second_used, active])

    assert resolution is not None
    assert resolution.keep is second_used
    assert resolution.preserved_used == [first_used]
    assert resolution.duplicates == [active]
    assert all(record.status != "used" for record in resolution.duplicates)


def test_resolve_duplicates_without_used_keeps_max_volume_first_occurrence() -> None:
    unknown = _Record("red wine fish", search_volume=None)
    first_max = _Record("fish red wine", search_volume=300)
    second_max = _Record("wine fish red", search_volume=300)

    resolution = resolve_duplicates([unknown, first_max, second_max])

    assert resolution is not None
    assert resolution.keep is first_max
    assert resolution.duplicates == [unknown, second_max]


def test_resolve_duplicates_degenerate_groups() -> None:
    single = _Record("rose wine")

    assert resolve_duplicates([]) is None
    resolution = resolve_duplicates([single])
    assert resolution is not None
    assert resolution.keep is single
    assert resolution.duplicates == []


def test_plan_duplicate_marking_leaves_exactly_one_non_duplicate_per_group() -> None:
    records = [
        _Record("wine with chicken", search_volume=400),
        _Record("chicken with wine", search_volume=90),
        _Record("Chicken Wine With", search_volume=10),
        _Record("malbec guide", search_volume=500),
        _Record("cheap champagne", search_volume=800),
        _Record("champagne cheap", search_volume=800, status="duplicate"),
    ]

    plans = plan_duplicate_marking(records)

    assert len(plans) == 2
    for plan in plans:
        marked = {id(record) for record in plan.duplicates}
        group = [record for record in records if canonicalize(record.keyword) == plan.canonical_key]
        survivors = [record for record in group if id(record) not in marked]
        assert survivors == [plan.keep]


def test_is_selectable_and_pool_ordering() -> None:
    unset = _Record("wine with salmon", search_volume=10, priority=7, status=None)
    top = _Record("best merlot", search_volume=300, priority=9)
    tie_first = _Record("malbec guide", search_volume=500, priority=5)
    tie_second = _Record("riesling guide", search_volume=500, priority=5)
    used = _Record("used one", search_volume=9000, priority=10, status="used")
    archived = _Record("archived one", search_volume=9000, priority=10, status="archived")

    assert is_selectable(unset)
    assert not is_selectable(used)

    pool = order_selection_pool([tie_first, used, unset, archived, top, tie_second])

    assert pool == [top, unset, tie_first, tie_second]


def test_select_next_skips_canonical_collision_within_pass() -> None:
    pool = [
        _Record("best merlot", priority=9, search_volume=300),
        _Record("merlot best", priority=9, search_volume=100),
        _Record("malbec guide", priority=5, search_volume=500),
    ]

    selected = select_next(pool, set(), set(), 2)

    assert [record.keyword for record in selected] == ["best merlot", "malbec guide"]


def test_select_next_skips_existing_slugs_and_used_keys() -> None:
    pool = [
        _Record("Wine with Steak"),
        _Record("pinot noir guide"),
        _Record("cabernet vs merlot"),
        _Record("wine for thanksgiving"),
    ]

    selected = select_next(
        pool,
        existing_slugs={"wine-with-steak"},
        used_canonical_keys={canonicalize("guide noir pinot")},
        count=5,
    )

    assert [record.keyword for record in selected] == ["cabernet vs merlot", "wine for thanksgiving"]


def test_select_next_partial_and_empty_requests() -> None:
    pool = [_Record("rose wine"), _Record("wine rose"), _Record("port wine")]

    assert [record.keyword for record in select_next(pool, set(), set(), 10)] == ["rose wine", "port wine"]
    assert select_next(pool, set(), set(), 0) == []
    assert select_next([], set(), set(), 3) == []


def test_select_next_output_has_unique_keys_and_no_existing_slugs() -> None:
    words = ["wine", "red", "steak", "with", "best"]
    pool = [
        _Record(" ".join(words[index:] + words[:index]), search_volume=index)
        for index in range(len(words))
    ] + [_Record("port tawny"), _Record("tawny port"), _Record("sherry dry")]
    existing = {"sherry-dry"}

    selected = select_next(pool, existing, set(), 10)

    keys = [canonicalize(record.keyword) for record in selected]
    assert len(keys) == len(set(keys))
    assert all(keyword_to_slug(record.keyword) not in existing for record in selected)
    assert len(selected) == 2
