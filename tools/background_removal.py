"""Background removal for uploaded clothing photos."""

from __future__ import annotations

import io
import logging

from PIL import Image, UnidentifiedImageError

from tools.observability import instrument_tool

logger = logging.getLogger(__name__)


class BackgroundRemovalError(RuntimeError):
    """Raised when an image cannot be decoded or segmented."""


class Segmenter:
    """Interface for the image segmentation step of catalog ingestion."""

    def remove_background(self, data: bytes) -> bytes:
        raise NotImplementedError


class RembgSegmenter(Segmenter):
    """Segment garments with ``rembg`` and return a transparent PNG."""

    def __init__(self, session_name: str = "u2net") -> None:
        self.session_name = session_name
        self._session = None

    def _get_session(self):
        # rembg loads onnxruntime and downloads model weights on first use.
        from rembg import new_session

        if self._session is None:
            self._session = new_session(self.session_name)
        return self._session

    @instrument_tool("remove_background")
    def remove_background(self, data: bytes) -> bytes:
        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except (UnidentifiedImageError, OSError) as exc:
            raise BackgroundRemovalError(f"Unreadable image: {exc}") from exc

        from rembg import remove

        try:
            segmented = remove(image.convert("RGBA"), session=self._get_session())
        except Exception as exc:
            logger.error("Background removal failed", extra={"error": str(exc)})
            raise BackgroundRemovalError(f"Background removal failed: {exc}") from exc

        if not isinstance(segmented, Image.Image):
            segmented = Image.open(io.BytesIO(segmented))
        buffer = io.BytesIO()
        segmented.save(buffer, format="PNG")
        return buffer.getvalue()


__all__ = ["BackgroundRemovalError", "Segmenter", "RembgSegmenter"]
