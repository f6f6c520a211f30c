"""Saved outfit store and toggle protocol tests."""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from agents.saved_outfits import OutfitValidationError, SavedOutfitService
from memory.user_profile import UserContext, UserProfile
from models.clothing_item import ClothingItem
from tools.outfit_store import SQLiteOutfitStore
from tools.wardrobe_store import SQLiteWardrobeStore
from tools.wardrobe_tools import WardrobeTools


def _context(user_id: str = "demo") -> UserContext:
    return UserContext(user_id=user_id, profile=UserProfile(user_id=user_id))


@pytest.fixture()
def service(tmp_path: Path) -> SavedOutfitService:
    db_path = tmp_path / "closet.db"
    wardrobe = SQLiteWardrobeStore(db_path)
    for item_id, section in (("a", "top"), ("b", "bottom"), ("c", "shoes"), ("d", "top")):
        wardrobe.create_item(
            ClothingItem(
                item_id=item_id,
                user_id="demo",
                section=section,
                name=f"{section}-{item_id}",
                image_url=f"http://example.com/{item_id}.png",
            )
        )
    return SavedOutfitService(SQLiteOutfitStore(db_path), WardrobeTools(wardrobe))


def test_outfit_store_find_and_delete(tmp_path: Path) -> None:
    store = SQLiteOutfitStore(tmp_path / "outfits.db")
    saved = store.insert_outfit("demo", "a", "b", "c")

    assert store.find_outfit("demo", "a", "b", "c") == saved
    assert store.find_outfit("demo", "a", "b", "x") is None
    assert store.find_outfit("other", "a", "b", "c") is None
    assert store.get_outfit("demo", saved.outfit_id) == saved
    assert store.delete_outfit("other", saved.outfit_id) is False
    assert store.delete_outfit("demo", saved.outfit_id) is True
    assert store.list_outfits("demo") == []


def test_outfit_store_collapses_duplicate_inserts(tmp_path: Path) -> None:
    store = SQLiteOutfitStore(tmp_path / "outfits.db")
    first = store.insert_outfit("demo", "a", "b", "c")
    second = store.insert_outfit("demo", "a", "b", "c")

    assert second.outfit_id == first.outfit_id
    assert len(store.list_outfits("demo")) == 1


def test_toggle_saves_then_unsaves(service: SavedOutfitService) -> None:
    context = _context()

    saved = service.toggle(context, "a", "b", "c")
    assert saved["saved"] is True
    assert service.is_saved(context, "a", "b", "c").outfit_id == saved["outfit_id"]

    unsaved = service.toggle(context, "a", "b", "c")
    assert unsaved == {"status": "ok", "saved": False, "outfit_id": None}
    assert service.is_saved(context, "a", "b", "c") is None
    assert service.list_saved(context) == []


def test_toggle_alternation_leaves_no_residue(service: SavedOutfitService) -> None:
    context = _context()
    for _ in range(3):
        service.toggle(context, "a", "b", "c")
        service.toggle(context, "a", "b", "c")
    assert service.outfit_store.list_outfits("demo") == []


def test_toggle_distinguishes_triples(service: SavedOutfitService) -> None:
    context = _context()
    service.toggle(context, "a", "b", "c")
    service.toggle(context, "d", "b", "c")

    assert len(service.list_saved(context)) == 2
    assert service.is_saved(context, "d", "b", "c") is not None


@pytest.mark.parametrize(
    "top, bottom, shoes",
    [
        (None, "b", "c"),
        ("a", "", "c"),
        ("a", "b", "missing"),
        ("b", "a", "c"),
    ],
)
def test_toggle_requires_complete_owned_triple(service: SavedOutfitService, top, bottom, shoes) -> None:
    with pytest.raises(OutfitValidationError):
        service.toggle(_context(), top, bottom, shoes)
    assert service.outfit_store.list_outfits("demo") == []


def test_toggle_rejects_other_users_items(service: SavedOutfitService) -> None:
    with pytest.raises(OutfitValidationError):
        service.toggle(_context("intruder"), "a", "b", "c")


def test_list_saved_resolves_items(service: SavedOutfitService) -> None:
    context = _context()
    service.toggle(context, "a", "b", "c")
    service.wardrobe_tools.delete_clothing_item("demo", "c")

    saved = service.list_saved(context)
    assert len(saved) == 1
    assert saved[0]["items"]["top"]["item_id"] == "a"
    assert saved[0]["items"]["shoes"] is None


def test_delete_saved_scoped_to_user(service: SavedOutfitService) -> None:
    result = service.toggle(_context(), "a", "b", "c")

    assert service.delete_saved(_context("other"), result["outfit_id"]) is False
    assert service.delete_saved(_context(), result["outfit_id"]) is True
    assert service.is_saved(_context(), "a", "b", "c") is None
