"""System prompt and guardrails for the outfit-picking LLM call."""

from __future__ import annotations

from typing import List

GUARDRAIL_BULLETS: List[str] = [
    "Only choose items from the clothing list you are given; never invent identifiers.",
    "Pick at most one item per section and only from the matching section.",
    "Use null for a section when no listed item suits the request.",
    "Respond with a single JSON object with the keys \"top\", \"bottom\" and \"shoes\".",
    "Do not add explanations, markdown or any text outside the JSON object.",
]


def system_instruction(role_hint: str) -> str:
    """Compose a consistent system prompt with boundary reminders."""

    boundary_text = "\n".join(f"- {bullet}" for bullet in GUARDRAIL_BULLETS)
    return (
        f"You are the Smart Closet {role_hint}.\n"
        "Follow these rules before responding:\n"
        f"{boundary_text}"
    )


OUTFIT_PICKER_INSTRUCTION = system_instruction(
    "fashion assistant. Analyze the user's clothing items and request to build an outfit"
)


__all__ = ["system_instruction", "GUARDRAIL_BULLETS", "OUTFIT_PICKER_INSTRUCTION"]
