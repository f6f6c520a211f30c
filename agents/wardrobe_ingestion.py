"""Catalog ingestion: photo in, background removed, stored, recorded."""

from __future__ import annotations

import logging
import time
from pathlib import PurePath
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from closet_app.logging_config import get_logger, log_event, operation_context
from logic.validation import ClothingMetadata, validation_failure
from memory.user_profile import UserContext
from tools.background_removal import Segmenter
from tools.image_storage import ImageStorage
from tools.wardrobe_tools import WardrobeTools

logger = get_logger(__name__)

MISSING_IMAGE_MESSAGE = "Please upload an image before submitting."
PROCESSING_FAILED_MESSAGE = "Failed to process image. Please try again."


def _storage_path(user_id: str, filename: Optional[str], now_ms: int) -> str:
    base_name = PurePath(filename or "upload").name.replace(" ", "_") or "upload"
    stem = base_name.rsplit(".", 1)[0] if "." in base_name else base_name
    return f"{user_id}/{now_ms}_{stem}.png"


class WardrobeIngestionAgent:
    """Turns an uploaded photo plus form fields into a catalog entry."""

    def __init__(self, wardrobe_tools: WardrobeTools, segmenter: Segmenter, image_storage: ImageStorage) -> None:
        self.wardrobe_tools = wardrobe_tools
        self.segmenter = segmenter
        self.image_storage = image_storage

    def ingest(
        self,
        context: UserContext,
        image_bytes: Optional[bytes],
        filename: Optional[str],
        metadata: Mapping[str, Any],
    ) -> Dict[str, Any]:
        """Remove the background, upload the result and store the clothing record.

        Uploaded files are not cleaned up if the final insert fails.
        """

        with operation_context("agent:wardrobe_ingestion.ingest") as correlation_id:
            if not image_bytes:
                return {"status": "error", "reason": "validation", "message": MISSING_IMAGE_MESSAGE}

            try:
                fields = ClothingMetadata.model_validate(dict(metadata))
            except ValidationError as exc:
                return {
                    "status": "error",
                    "reason": "validation",
                    "message": "Please fill in the clothing details.",
                    "review": validation_failure("Invalid clothing metadata", exc),
                }

            try:
                processed = self.segmenter.remove_background(image_bytes)
                path = _storage_path(context.user_id, filename, int(time.time() * 1000))
                public_url = self.image_storage.upload(path, processed, content_type="image/png")
                stored = self.wardrobe_tools.add_clothing_item(
                    user_id=context.user_id,
                    item_data={**fields.model_dump(), "image_url": public_url},
                )
            except Exception as exc:
                logger.error(
                    "Failed to ingest clothing photo",
                    extra={"error": str(exc), "correlation_id": correlation_id},
                )
                return {"status": "error", "reason": "processing", "message": PROCESSING_FAILED_MESSAGE}

            log_event(
                logger,
                level=logging.INFO,
                event="agent_call_completed",
                agent="wardrobe_ingestion",
                method="ingest",
                correlation_id=correlation_id,
                item_id=stored["item_id"],
                section=stored["section"],
            )
            return {
                "status": "ok",
                "item": stored,
                "message": f"Added {stored['name']} to your {stored['section']} collection!",
            }


__all__ = ["WardrobeIngestionAgent", "MISSING_IMAGE_MESSAGE", "PROCESSING_FAILED_MESSAGE"]
