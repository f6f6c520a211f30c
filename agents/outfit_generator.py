"""Outfit generator agent: random draws and LLM-assisted picks."""
from __future__ import annotations

import logging
import random
from typing import Any, Dict, List, Mapping, Optional

from closet_app.logging_config import get_logger, log_event, operation_context
from logic.outfit_selection import (
    build_outfit_prompt,
    decode_selection_payload,
    pick_random_outfit,
    reconcile_selection,
)
from memory.user_profile import UserContext
from models.clothing_item import ClothingItem
from models.outfit import OutfitSelection
from models.taxonomy import SECTIONS
from tools.llm_client import CompletionClient, CompletionError
from tools.wardrobe_tools import WardrobeTools

logger = get_logger(__name__)

EMPTY_CATALOG_MESSAGE = "You have no clothes yet. Add some items to generate an outfit."
CATALOG_ERROR_MESSAGE = "Could not load your clothes. Please try again."
TRANSPORT_ERROR_MESSAGE = "The outfit assistant is unavailable right now. Please try again."
MALFORMED_RESPONSE_MESSAGE = "The outfit assistant returned an unexpected answer. Please try again."


def _missing_sections_message(slots: List[str]) -> Optional[str]:
    if not slots:
        return None
    return f"No matching item for: {', '.join(slots)}."


class OutfitGeneratorAgent:
    """Builds (top, bottom, shoes) selections from a user's catalog."""

    def __init__(
        self,
        wardrobe_tools: WardrobeTools,
        completion_client: Optional[CompletionClient] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.wardrobe_tools = wardrobe_tools
        self.completion_client = completion_client
        self.rng = rng or random.Random()

    @staticmethod
    def _selection_response(mode: str, selection: OutfitSelection, message: Optional[str]) -> Dict[str, Any]:
        return {
            "status": "ok",
            "mode": mode,
            "ids": selection.ids(),
            "selection": selection.to_dict(),
            "unresolved_slots": selection.unresolved_slots(),
            "message": message,
        }

    @staticmethod
    def _error_response(
        mode: str,
        reason: str,
        message: str,
        previous: Optional[Mapping[str, Optional[str]]],
    ) -> Dict[str, Any]:
        previous_ids = {section: (previous or {}).get(section) for section in SECTIONS}
        return {
            "status": "error",
            "mode": mode,
            "reason": reason,
            "message": message,
            "ids": previous_ids,
        }

    def _load_catalog(self, context: UserContext) -> List[ClothingItem]:
        return self.wardrobe_tools.catalog(context.user_id)

    def generate_random(self, context: UserContext) -> Dict[str, Any]:
        """Pick one random item per section from the user's catalog."""

        with operation_context("agent:outfit_generator.generate_random") as correlation_id:
            try:
                items = self._load_catalog(context)
            except Exception as exc:  # pragma: no cover - storage failure at agent boundary
                log_event(
                    logger,
                    logging.ERROR,
                    "outfit_catalog_failed",
                    agent="outfit_generator",
                    method="generate_random",
                    correlation_id=correlation_id,
                    error=str(exc),
                )
                return self._error_response("random", "storage", CATALOG_ERROR_MESSAGE, None)

            selection = pick_random_outfit(items, rng=self.rng)
            message = EMPTY_CATALOG_MESSAGE if not items else _missing_sections_message(selection.unresolved_slots())
            log_event(
                logger,
                logging.INFO,
                "outfit_generated",
                agent="outfit_generator",
                method="generate_random",
                correlation_id=correlation_id,
                catalog_size=len(items),
                unresolved=selection.unresolved_slots(),
            )
            return self._selection_response("random", selection, message)

    def generate_with_ai(
        self,
        context: UserContext,
        prompt: str,
        previous: Optional[Mapping[str, Optional[str]]] = None,
    ) -> Dict[str, Any]:
        """Ask the completion endpoint to pick ids, then reconcile them locally.

        On any failure the returned ``ids`` echo ``previous`` so the caller's
        current selection stays as it was.
        """

        with operation_context("agent:outfit_generator.generate_with_ai") as correlation_id:
            log_event(
                logger,
                logging.INFO,
                "agent_call_started",
                agent="outfit_generator",
                method="generate_with_ai",
                correlation_id=correlation_id,
                prompt=prompt,
            )
            if not prompt or not prompt.strip():
                return self._error_response("ai", "validation", "Please describe the outfit you want.", previous)
            if self.completion_client is None:
                return self._error_response("ai", "transport", TRANSPORT_ERROR_MESSAGE, previous)

            try:
                items = self._load_catalog(context)
            except Exception as exc:  # pragma: no cover - storage failure at agent boundary
                log_event(
                    logger,
                    logging.ERROR,
                    "outfit_catalog_failed",
                    agent="outfit_generator",
                    method="generate_with_ai",
                    correlation_id=correlation_id,
                    error=str(exc),
                )
                return self._error_response("ai", "storage", CATALOG_ERROR_MESSAGE, previous)

            if not items:
                return self._selection_response("ai", OutfitSelection(), EMPTY_CATALOG_MESSAGE)

            try:
                raw_response = self.completion_client.complete(build_outfit_prompt(prompt, items))
            except CompletionError as exc:
                log_event(
                    logger,
                    logging.WARNING,
                    "outfit_completion_failed",
                    agent="outfit_generator",
                    correlation_id=correlation_id,
                    error=str(exc),
                )
                return self._error_response("ai", "transport", TRANSPORT_ERROR_MESSAGE, previous)

            decoded = decode_selection_payload(raw_response)
            if not decoded.ok:
                log_event(
                    logger,
                    logging.WARNING,
                    "outfit_response_malformed",
                    agent="outfit_generator",
                    correlation_id=correlation_id,
                    error=decoded.error,
                    raw_response=raw_response,
                )
                return self._error_response("ai", "malformed_response", MALFORMED_RESPONSE_MESSAGE, previous)

            selection = reconcile_selection(decoded.ids, items)
            rejected = [
                section
                for section in SECTIONS
                if decoded.ids[section] is not None and selection.slot(section) is None
            ]
            log_event(
                logger,
                logging.INFO,
                "outfit_generated",
                agent="outfit_generator",
                method="generate_with_ai",
                correlation_id=correlation_id,
                catalog_size=len(items),
                missing_slots=decoded.missing_slots,
                rejected_slots=rejected,
            )
            return self._selection_response(
                "ai", selection, _missing_sections_message(selection.unresolved_slots())
            )


__all__ = ["OutfitGeneratorAgent"]
