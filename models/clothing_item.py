"""Clothing item data model and helpers."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any, Dict

from models.taxonomy import normalize_tag, validate_section


@dataclass
class ClothingItem:
    """A single photographed garment owned by one user."""

    item_id: str
    user_id: str
    section: str
    name: str
    image_url: str
    type: str = ""
    color: str = ""
    style: str = ""

    def __post_init__(self) -> None:
        self.item_id = str(self.item_id)
        self.user_id = str(self.user_id)
        self.section = validate_section(self.section)
        self.name = normalize_tag(self.name)
        if not self.name:
            raise ValueError("Clothing name cannot be blank")
        if not str(self.image_url or "").strip():
            raise ValueError("Clothing image_url cannot be empty")
        self.type = normalize_tag(self.type)
        self.color = normalize_tag(self.color)
        self.style = normalize_tag(self.style)


def new_item_id() -> str:
    return uuid.uuid4().hex


def from_raw_metadata(metadata: Dict[str, Any]) -> ClothingItem:
    """Factory to build a :class:`ClothingItem` from loose form metadata."""

    required_fields = ["user_id", "section", "name", "image_url"]
    missing = [field for field in required_fields if not metadata.get(field)]
    if missing:
        raise ValueError(f"Missing required fields for ClothingItem: {missing}")

    return ClothingItem(
        item_id=str(metadata.get("item_id") or new_item_id()),
        user_id=str(metadata["user_id"]),
        section=str(metadata["section"]),
        name=str(metadata["name"]),
        image_url=str(metadata["image_url"]),
        type=metadata.get("type") or "",
        color=metadata.get("color") or "",
        style=metadata.get("style") or "",
    )


__all__ = ["ClothingItem", "from_raw_metadata", "new_item_id"]
