"""Canonical clothing sections and tag helpers.

Sections form a closed set. Every catalog read, random draw and LLM
reconciliation partitions on these labels, so inputs are normalised here once
instead of being compared loosely across the code base.
"""

from typing import Dict, Tuple

SECTIONS: Tuple[str, ...] = ("top", "bottom", "shoes")

SECTION_ALIASES: Dict[str, str] = {
    "top": "top",
    "tops": "top",
    "bottom": "bottom",
    "bottoms": "bottom",
    "shoes": "shoes",
    "shoe": "shoes",
}


def _normalize_key(value: str) -> str:
    """Normalise a free-form string into a taxonomy key."""

    return value.strip().lower().replace(" ", "_")


def validate_section(section: str) -> str:
    """Return the canonical section label or raise ``ValueError``."""

    key = _normalize_key(str(section))
    if key not in SECTION_ALIASES:
        raise ValueError(f"Unknown section '{section}'. Expected one of {list(SECTIONS)}")
    return SECTION_ALIASES[key]


def normalize_tag(value: object) -> str:
    """Collapse whitespace in a free-form type/color/style tag."""

    if value is None:
        return ""
    return " ".join(str(value).split())


__all__ = ["SECTIONS", "SECTION_ALIASES", "validate_section", "normalize_tag"]
