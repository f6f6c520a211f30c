"""Outfit selection: random draws, prompt building and LLM reconciliation.

All functions here are pure. They operate on an in-memory catalog that the
caller has already scoped to one user, so reconciliation never looks beyond
that user's items.
"""

from __future__ import annotations

import json
import random
import re
from typing import Dict, Iterable, List, Mapping, Optional

from pydantic import ValidationError

from logic.validation import LLMSelectionPayload, SelectionDecodeResult
from models.clothing_item import ClothingItem
from models.outfit import OutfitSelection
from models.taxonomy import SECTIONS

_FENCE_PATTERN = re.compile(r"^\s*```(?:json)?\s*(.*?)\s*```\s*$", re.DOTALL | re.IGNORECASE)


def partition_by_section(items: Iterable[ClothingItem]) -> Dict[str, List[ClothingItem]]:
    """Split a catalog into disjoint per-section lists, keeping catalog order."""

    groups: Dict[str, List[ClothingItem]] = {section: [] for section in SECTIONS}
    for item in items:
        groups[item.section].append(item)
    return groups


def pick_random_outfit(items: Iterable[ClothingItem], rng: Optional[random.Random] = None) -> OutfitSelection:
    """Draw one item uniformly per section. Empty sections stay unselected."""

    chooser = rng or random.Random()
    groups = partition_by_section(items)
    picks = {section: (chooser.choice(group) if group else None) for section, group in groups.items()}
    return OutfitSelection(**picks)


def format_catalog_line(item: ClothingItem) -> str:
    return f"{item.item_id}: {item.name} ({item.section}): {item.color}, {item.style}, {item.type}"


def format_catalog(items: Iterable[ClothingItem]) -> str:
    return "\n".join(format_catalog_line(item) for item in items)


def build_outfit_prompt(user_prompt: str, items: Iterable[ClothingItem]) -> str:
    """Compose the single prompt sent to the completion endpoint."""

    return (
        f'USER PROMPT: "{user_prompt.strip()}"\n'
        "USER'S CLOTHING ITEMS:\n"
        f"{format_catalog(items)}\n"
        "\n"
        "INSTRUCTIONS:\n"
        "1. Generate an outfit using only the user's clothing items listed above.\n"
        '2. Return the outfit as a JSON object with exactly the keys "top", "bottom" and "shoes": '
        '{ "top": "id", "bottom": "id", "shoes": "id" }\n'
        "3. Each value must be the identifier of an item from the matching section, "
        "or null if no suitable item exists.\n"
        "4. Only respond with the JSON, no extra text."
    )


def _strip_code_fence(text: str) -> str:
    match = _FENCE_PATTERN.match(text)
    return match.group(1) if match else text


def decode_selection_payload(text: Optional[str]) -> SelectionDecodeResult:
    """Strictly decode LLM output into a tagged result.

    Non-JSON text, a non-object document or a slot holding anything other than
    a string, integer or null fails the whole decode. A missing or null slot
    decodes as unselected.
    """

    if text is None or not text.strip():
        return SelectionDecodeResult(status="failed", error="empty response")

    try:
        document = json.loads(_strip_code_fence(text))
    except (ValueError, RecursionError) as exc:
        # JSONDecodeError is a ValueError, as are oversized integer literals.
        return SelectionDecodeResult(status="failed", error=f"invalid JSON: {type(exc).__name__}")

    if not isinstance(document, dict):
        return SelectionDecodeResult(status="failed", error="response is not a JSON object")

    try:
        payload = LLMSelectionPayload.model_validate(document)
    except ValidationError as exc:
        fields = sorted({str(error["loc"][0]) for error in exc.errors() if error.get("loc")})
        return SelectionDecodeResult(status="failed", error=f"malformed slots: {fields}")

    ids = {section: getattr(payload, section) for section in SECTIONS}
    missing = [section for section in SECTIONS if ids[section] is None]
    return SelectionDecodeResult(status="ok", ids=ids, missing_slots=missing)


def reconcile_selection(ids: Mapping[str, Optional[str]], items: Iterable[ClothingItem]) -> OutfitSelection:
    """Resolve returned ids against the catalog, restricted to each slot's section.

    An id that is unknown, or that names an item from another section, leaves
    its slot unselected.
    """

    groups = partition_by_section(items)
    resolved: Dict[str, Optional[ClothingItem]] = {}
    for section in SECTIONS:
        wanted = ids.get(section)
        resolved[section] = None
        if wanted is None:
            continue
        for item in groups[section]:
            if item.item_id == str(wanted):
                resolved[section] = item
                break
    return OutfitSelection(**resolved)


__all__ = [
    "partition_by_section",
    "pick_random_outfit",
    "format_catalog_line",
    "format_catalog",
    "build_outfit_prompt",
    "decode_selection_payload",
    "reconcile_selection",
]
