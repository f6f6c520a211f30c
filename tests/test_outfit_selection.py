"""Outfit selection logic: random draws, prompt building, decoding and reconciliation."""
from __future__ import annotations

import random
import sys
from pathlib import Path
from typing import List

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from logic.outfit_selection import (
    build_outfit_prompt,
    decode_selection_payload,
    format_catalog,
    format_catalog_line,
    partition_by_section,
    pick_random_outfit,
    reconcile_selection,
)
from models.clothing_item import ClothingItem
from models.outfit import OutfitSelection


def _item(item_id: str, section: str, user_id: str = "demo", **kwargs: str) -> ClothingItem:
    return ClothingItem(
        item_id=item_id,
        user_id=user_id,
        section=section,
        name=kwargs.get("name", f"{section} {item_id}"),
        image_url=f"http://example.com/{item_id}.png",
        type=kwargs.get("type", ""),
        color=kwargs.get("color", ""),
        style=kwargs.get("style", ""),
    )


@pytest.fixture()
def small_catalog() -> List[ClothingItem]:
    return [_item("a", "top"), _item("b", "bottom"), _item("c", "shoes")]


@pytest.fixture()
def large_catalog() -> List[ClothingItem]:
    return [
        _item("t1", "top"),
        _item("t2", "top"),
        _item("t3", "top"),
        _item("b1", "bottom"),
        _item("b2", "bottom"),
        _item("s1", "shoes"),
    ]


def test_partition_by_section_is_disjoint_and_complete(large_catalog: List[ClothingItem]) -> None:
    groups = partition_by_section(large_catalog)
    assert set(groups) == {"top", "bottom", "shoes"}
    assert [item.item_id for item in groups["top"]] == ["t1", "t2", "t3"]
    assert sum(len(group) for group in groups.values()) == len(large_catalog)


def test_partition_includes_empty_sections() -> None:
    groups = partition_by_section([_item("t1", "top")])
    assert groups["bottom"] == [] and groups["shoes"] == []


def test_random_pick_matches_sections(large_catalog: List[ClothingItem]) -> None:
    rng = random.Random(7)
    for _ in range(50):
        selection = pick_random_outfit(large_catalog, rng=rng)
        assert selection.is_complete
        assert selection.top.section == "top"
        assert selection.bottom.section == "bottom"
        assert selection.shoes.section == "shoes"


def test_random_pick_reaches_every_item(large_catalog: List[ClothingItem]) -> None:
    rng = random.Random(11)
    seen = {pick_random_outfit(large_catalog, rng=rng).top.item_id for _ in range(200)}
    assert seen == {"t1", "t2", "t3"}


def test_random_pick_leaves_empty_sections_unselected() -> None:
    selection = pick_random_outfit([_item("t1", "top")], rng=random.Random(1))
    assert selection.top is not None
    assert selection.bottom is None and selection.shoes is None
    assert selection.unresolved_slots() == ["bottom", "shoes"]


def test_random_pick_on_empty_catalog() -> None:
    selection = pick_random_outfit([])
    assert selection.is_empty
    assert selection.ids() == {"top": None, "bottom": None, "shoes": None}


def test_catalog_line_format() -> None:
    item = _item("42", "top", name="Linen shirt", color="white", style="casual", type="shirt")
    assert format_catalog_line(item) == "42: Linen shirt (top): white, casual, shirt"


def test_prompt_embeds_request_catalog_and_contract(small_catalog: List[ClothingItem]) -> None:
    prompt = build_outfit_prompt("  something for a beach day ", small_catalog)
    assert 'USER PROMPT: "something for a beach day"' in prompt
    assert format_catalog(small_catalog) in prompt
    assert '"top"' in prompt and '"bottom"' in prompt and '"shoes"' in prompt
    assert "null" in prompt
    assert "Only respond with the JSON" in prompt


def test_decode_well_formed_payload() -> None:
    result = decode_selection_payload('{"top":"a","bottom":"b","shoes":"c"}')
    assert result.ok
    assert result.ids == {"top": "a", "bottom": "b", "shoes": "c"}
    assert result.missing_slots == []


def test_decode_missing_and_null_slots_are_unselected() -> None:
    result = decode_selection_payload('{"top": "a", "shoes": null}')
    assert result.ok
    assert result.ids == {"top": "a", "bottom": None, "shoes": None}
    assert result.missing_slots == ["bottom", "shoes"]


def test_decode_coerces_integer_ids_and_ignores_extra_keys() -> None:
    result = decode_selection_payload('{"top": 12, "bottom": "7", "shoes": "9", "reason": "sunny"}')
    assert result.ok
    assert result.ids == {"top": "12", "bottom": "7", "shoes": "9"}


def test_decode_strips_code_fences() -> None:
    result = decode_selection_payload('```json\n{"top": "a", "bottom": "b", "shoes": "c"}\n```')
    assert result.ok
    assert result.ids["shoes"] == "c"


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        "",
        None,
        '["a", "b", "c"]',
        '"a"',
        '{"top": ["a"], "bottom": "b", "shoes": "c"}',
        '{"top": {"id": "a"}}',
        '{"top": true}',
        '{"top": 1.5}',
    ],
)
def test_decode_failures(text) -> None:
    result = decode_selection_payload(text)
    assert result.status == "failed"
    assert not result.ok
    assert result.error


@pytest.mark.parametrize(
    "text",
    [
        '{"top": ' + "[" * 100000 + "]" * 100000 + "}",
        '{"top": ' + "9" * 5000 + "}",
    ],
    ids=["deeply-nested", "oversized-integer"],
)
def test_decode_hostile_json_is_a_failed_result(text: str) -> None:
    result = decode_selection_payload(text)
    assert result.status == "failed"
    assert result.ids == {"top": None, "bottom": None, "shoes": None}


def test_reconcile_example_valid_ids(small_catalog: List[ClothingItem]) -> None:
    decoded = decode_selection_payload('{"top":"a","bottom":"b","shoes":"c"}')
    selection = reconcile_selection(decoded.ids, small_catalog)
    assert selection.ids() == {"top": "a", "bottom": "b", "shoes": "c"}


def test_reconcile_example_unknown_id(small_catalog: List[ClothingItem]) -> None:
    decoded = decode_selection_payload('{"top":"z","bottom":"b","shoes":"c"}')
    selection = reconcile_selection(decoded.ids, small_catalog)
    assert selection.ids() == {"top": None, "bottom": "b", "shoes": "c"}


def test_reconcile_rejects_cross_section_ids(small_catalog: List[ClothingItem]) -> None:
    selection = reconcile_selection({"top": "c", "bottom": "a", "shoes": "c"}, small_catalog)
    assert selection.top is None
    assert selection.bottom is None
    assert selection.shoes is not None and selection.shoes.item_id == "c"


def test_reconcile_returns_catalog_items(small_catalog: List[ClothingItem]) -> None:
    selection = reconcile_selection({"top": "a", "bottom": None}, small_catalog)
    assert selection.top is small_catalog[0]
    assert selection.bottom is None
    assert selection.shoes is None


def test_selection_helpers() -> None:
    top = _item("t", "top")
    selection = OutfitSelection(top=top)
    assert not selection.is_complete
    assert not selection.is_empty
    payload = selection.to_dict()
    assert payload["top"]["item_id"] == "t"
    assert payload["bottom"] is None
