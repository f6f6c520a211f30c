"""Outfit selection and saved outfit schemas."""

from dataclasses import asdict, dataclass, field
import time
from typing import Dict, List, Optional

from models.clothing_item import ClothingItem
from models.taxonomy import SECTIONS


@dataclass
class OutfitSelection:
    """Transient top/bottom/shoes triple. ``None`` means no item chosen."""

    top: Optional[ClothingItem] = None
    bottom: Optional[ClothingItem] = None
    shoes: Optional[ClothingItem] = None

    def slot(self, section: str) -> Optional[ClothingItem]:
        return getattr(self, section)

    @property
    def is_complete(self) -> bool:
        return all(self.slot(section) is not None for section in SECTIONS)

    @property
    def is_empty(self) -> bool:
        return all(self.slot(section) is None for section in SECTIONS)

    def ids(self) -> Dict[str, Optional[str]]:
        ids: Dict[str, Optional[str]] = {}
        for section in SECTIONS:
            item = self.slot(section)
            ids[section] = item.item_id if item is not None else None
        return ids

    def unresolved_slots(self) -> List[str]:
        return [section for section in SECTIONS if self.slot(section) is None]

    def to_dict(self) -> Dict[str, Optional[dict]]:
        payload: Dict[str, Optional[dict]] = {}
        for section in SECTIONS:
            item = self.slot(section)
            payload[section] = asdict(item) if item is not None else None
        return payload


@dataclass
class SavedOutfit:
    outfit_id: str
    user_id: str
    top_id: str
    bottom_id: str
    shoes_id: str
    created_at: float = field(default_factory=lambda: time.time())


__all__ = ["OutfitSelection", "SavedOutfit"]
