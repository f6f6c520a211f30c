"""Saved outfit toggling and listing."""
from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from closet_app.logging_config import get_logger, log_event, operation_context
from logic.outfit_selection import reconcile_selection
from memory.user_profile import UserContext
from models.outfit import SavedOutfit
from tools.outfit_store import OutfitStore
from tools.wardrobe_tools import WardrobeTools

logger = get_logger(__name__)


class OutfitValidationError(ValueError):
    """Raised when a save request does not reference a complete, owned outfit."""


class SavedOutfitService:
    """Toggle, inspect and list a user's saved outfits.

    Saving checks for an exact (user, top, bottom, shoes) match first and
    deletes it when found, otherwise inserts a new record.
    """

    def __init__(self, outfit_store: OutfitStore, wardrobe_tools: WardrobeTools) -> None:
        self.outfit_store = outfit_store
        self.wardrobe_tools = wardrobe_tools

    def _validate_triple(self, context: UserContext, top_id: Optional[str], bottom_id: Optional[str], shoes_id: Optional[str]) -> None:
        ids = {"top": top_id, "bottom": bottom_id, "shoes": shoes_id}
        missing = [section for section, value in ids.items() if not value]
        if missing:
            raise OutfitValidationError(f"Incomplete outfit cannot be saved; missing {missing}")

        selection = reconcile_selection(ids, self.wardrobe_tools.catalog(context.user_id))
        unresolved = selection.unresolved_slots()
        if unresolved:
            raise OutfitValidationError(f"Outfit references unknown items for {unresolved}")

    def is_saved(self, context: UserContext, top_id: str, bottom_id: str, shoes_id: str) -> Optional[SavedOutfit]:
        if not (top_id and bottom_id and shoes_id):
            return None
        return self.outfit_store.find_outfit(context.user_id, top_id, bottom_id, shoes_id)

    def toggle(self, context: UserContext, top_id: Optional[str], bottom_id: Optional[str], shoes_id: Optional[str]) -> Dict[str, Any]:
        """Unsave the outfit when it already exists, otherwise save it.

        Raises:
            OutfitValidationError: When a slot is empty or does not resolve to
                one of the user's items in the matching section.
        """

        with operation_context("agent:saved_outfits.toggle") as correlation_id:
            self._validate_triple(context, top_id, bottom_id, shoes_id)
            existing = self.outfit_store.find_outfit(context.user_id, top_id, bottom_id, shoes_id)
            if existing is not None:
                self.outfit_store.delete_outfit(context.user_id, existing.outfit_id)
                log_event(
                    logger,
                    logging.INFO,
                    "outfit_unsaved",
                    agent="saved_outfits",
                    correlation_id=correlation_id,
                    outfit_id=existing.outfit_id,
                )
                return {"status": "ok", "saved": False, "outfit_id": None}

            created = self.outfit_store.insert_outfit(context.user_id, top_id, bottom_id, shoes_id)
            log_event(
                logger,
                logging.INFO,
                "outfit_saved",
                agent="saved_outfits",
                correlation_id=correlation_id,
                outfit_id=created.outfit_id,
            )
            return {"status": "ok", "saved": True, "outfit_id": created.outfit_id}

    def list_saved(self, context: UserContext) -> List[Dict[str, Any]]:
        """Return saved outfits with their items resolved from the catalog."""

        catalog = self.wardrobe_tools.catalog(context.user_id)
        results: List[Dict[str, Any]] = []
        for outfit in self.outfit_store.list_outfits(context.user_id):
            selection = reconcile_selection(
                {"top": outfit.top_id, "bottom": outfit.bottom_id, "shoes": outfit.shoes_id},
                catalog,
            )
            results.append({**asdict(outfit), "items": selection.to_dict()})
        return results

    def delete_saved(self, context: UserContext, outfit_id: str) -> bool:
        deleted = self.outfit_store.delete_outfit(context.user_id, outfit_id)
        log_event(
            logger,
            logging.INFO,
            "saved_outfit_deleted",
            agent="saved_outfits",
            outfit_id=outfit_id,
            deleted=deleted,
        )
        return deleted


__all__ = ["OutfitValidationError", "SavedOutfitService"]
