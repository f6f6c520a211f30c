"""Instrumented catalog operations over a WardrobeStore."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Optional

from models.clothing_item import ClothingItem, from_raw_metadata
from tools.observability import instrument_tool
from tools.wardrobe_store import EDITABLE_FIELDS, SQLiteWardrobeStore, WardrobeStore


def _default_store() -> SQLiteWardrobeStore:
    return SQLiteWardrobeStore()


class WardrobeTools:
    """Thin wrapper exposing WardrobeStore operations scoped by user id."""

    def __init__(self, store: Optional[WardrobeStore] = None) -> None:
        self.store = store or _default_store()

    @instrument_tool("add_clothing_item")
    def add_clothing_item(self, user_id: str, item_data: Dict[str, Any]) -> Dict[str, Any]:
        item = from_raw_metadata({**item_data, "user_id": user_id})
        stored = self.store.create_item(item)
        return asdict(stored)

    @instrument_tool("get_clothing_item")
    def get_clothing_item(self, user_id: str, item_id: str) -> Optional[Dict[str, Any]]:
        item = self.store.get_item(user_id, item_id)
        return asdict(item) if item else None

    @instrument_tool("list_clothing_items")
    def list_clothing_items(self, user_id: str, section: Optional[str] = None) -> List[Dict[str, Any]]:
        return [asdict(item) for item in self.store.list_items_for_user(user_id, section=section)]

    def catalog(self, user_id: str) -> List[ClothingItem]:
        """Return the user's full catalog as model objects for selection logic."""

        return self.store.list_items_for_user(user_id)

    @instrument_tool("update_clothing_item")
    def update_clothing_item(self, user_id: str, item_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        unknown = set(updates) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be edited: {sorted(unknown)}")
        item = self.store.update_item(user_id, item_id, updates)
        return asdict(item) if item else None

    @instrument_tool("delete_clothing_item")
    def delete_clothing_item(self, user_id: str, item_id: str) -> bool:
        return self.store.delete_item(user_id, item_id)


__all__ = ["WardrobeTools"]
