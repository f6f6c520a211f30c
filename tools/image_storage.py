"""Object storage for processed clothing photos."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from urllib.parse import quote

from tools.observability import instrument_tool

logger = logging.getLogger(__name__)


class ImageUploadError(RuntimeError):
    """Raised when an image cannot be written to object storage."""


class ImageStorage:
    """Interface for uploading a blob and issuing its public URL."""

    def upload(self, path: str, data: bytes, content_type: str = "image/png") -> str:
        raise NotImplementedError


def _safe_relative_path(path: str) -> PurePosixPath:
    relative = PurePosixPath(path)
    if relative.is_absolute() or ".." in relative.parts or not relative.parts:
        raise ImageUploadError(f"Refusing to store image at unsafe path: {path}")
    return relative


class LocalImageStorage(ImageStorage):
    """Filesystem bucket whose files are served under ``public_base_url``."""

    def __init__(self, base_dir: str | Path = "data/images", public_base_url: str = "http://localhost:8080/images") -> None:
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.public_base_url = public_base_url.rstrip("/")

    def public_url(self, path: str) -> str:
        return f"{self.public_base_url}/{quote(str(_safe_relative_path(path)))}"

    def local_path(self, path: str) -> Path:
        relative = _safe_relative_path(path)
        return self.base_dir.joinpath(*relative.parts)

    @instrument_tool("upload_image")
    def upload(self, path: str, data: bytes, content_type: str = "image/png") -> str:
        """Write ``data`` under ``path`` and return its public URL.

        Existing objects are never overwritten, mirroring bucket uploads without
        upsert.
        """

        if not data:
            raise ImageUploadError("Cannot upload an empty image")
        target = self.local_path(path)
        if target.exists():
            raise ImageUploadError(f"An object already exists at {path}")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            raise ImageUploadError(f"Failed to store image at {path}: {exc}") from exc
        logger.debug("Stored image", extra={"path": path, "content_type": content_type, "size": len(data)})
        return self.public_url(path)


__all__ = ["ImageStorage", "ImageUploadError", "LocalImageStorage"]
