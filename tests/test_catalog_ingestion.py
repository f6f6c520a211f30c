"""Catalog ingestion tests with a fake segmenter and a temporary bucket."""
from __future__ import annotations

import sys
from pathlib import Path
from typing import List

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from agents.wardrobe_ingestion import (
    MISSING_IMAGE_MESSAGE,
    PROCESSING_FAILED_MESSAGE,
    WardrobeIngestionAgent,
)
from memory.user_profile import UserContext, UserProfile
from tools.background_removal import BackgroundRemovalError, Segmenter
from tools.image_storage import ImageUploadError, LocalImageStorage
from tools.wardrobe_store import SQLiteWardrobeStore
from tools.wardrobe_tools import WardrobeTools


class FakeSegmenter(Segmenter):
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: List[bytes] = []

    def remove_background(self, data: bytes) -> bytes:
        self.calls.append(data)
        if self.fail:
            raise BackgroundRemovalError("model unavailable")
        return b"PNG:" + data


CONTEXT = UserContext(user_id="demo", profile=UserProfile(user_id="demo"))
METADATA = {"section": "tops", "name": "Denim jacket", "type": "jacket", "color": "blue", "style": "casual"}


@pytest.fixture()
def storage(tmp_path: Path) -> LocalImageStorage:
    return LocalImageStorage(tmp_path / "images", public_base_url="http://testserver/images/")


@pytest.fixture()
def tools(tmp_path: Path) -> WardrobeTools:
    return WardrobeTools(SQLiteWardrobeStore(tmp_path / "wardrobe.db"))


def test_ingest_stores_processed_image_and_record(storage: LocalImageStorage, tools: WardrobeTools) -> None:
    segmenter = FakeSegmenter()
    agent = WardrobeIngestionAgent(tools, segmenter, storage)

    response = agent.ingest(CONTEXT, b"raw-photo", "my jacket.jpg", METADATA)

    assert response["status"] == "ok"
    item = response["item"]
    assert item["section"] == "top"
    assert item["user_id"] == "demo"
    assert response["message"] == "Added Denim jacket to your top collection!"
    assert segmenter.calls == [b"raw-photo"]

    assert item["image_url"].startswith("http://testserver/images/demo/")
    assert item["image_url"].endswith("_my_jacket.png")
    relative = item["image_url"][len("http://testserver/images/"):]
    assert storage.local_path(relative).read_bytes() == b"PNG:raw-photo"
    assert tools.list_clothing_items("demo") == [item]


def test_ingest_without_image_touches_nothing(storage: LocalImageStorage, tools: WardrobeTools) -> None:
    segmenter = FakeSegmenter()
    agent = WardrobeIngestionAgent(tools, segmenter, storage)

    response = agent.ingest(CONTEXT, None, None, METADATA)

    assert response == {"status": "error", "reason": "validation", "message": MISSING_IMAGE_MESSAGE}
    assert segmenter.calls == []
    assert tools.list_clothing_items("demo") == []


@pytest.mark.parametrize(
    "metadata",
    [
        {**METADATA, "section": "hats"},
        {**METADATA, "name": "  "},
        {"name": "No section"},
    ],
)
def test_ingest_rejects_bad_metadata(storage: LocalImageStorage, tools: WardrobeTools, metadata) -> None:
    segmenter = FakeSegmenter()
    agent = WardrobeIngestionAgent(tools, segmenter, storage)

    response = agent.ingest(CONTEXT, b"raw-photo", "photo.jpg", metadata)

    assert response["status"] == "error"
    assert response["reason"] == "validation"
    assert response["review"]["status"] == "needs_review"
    assert segmenter.calls == []


def test_ingest_segmenter_failure_stores_nothing(
    tmp_path: Path, storage: LocalImageStorage, tools: WardrobeTools
) -> None:
    agent = WardrobeIngestionAgent(tools, FakeSegmenter(fail=True), storage)

    response = agent.ingest(CONTEXT, b"raw-photo", "photo.jpg", METADATA)

    assert response["status"] == "error"
    assert response["reason"] == "processing"
    assert response["message"] == PROCESSING_FAILED_MESSAGE
    assert tools.list_clothing_items("demo") == []
    assert list((tmp_path / "images").rglob("*.png")) == []


def test_local_storage_refuses_unsafe_and_duplicate_paths(storage: LocalImageStorage) -> None:
    url = storage.upload("demo/1_shirt.png", b"data")
    assert url == "http://testserver/images/demo/1_shirt.png"

    with pytest.raises(ImageUploadError):
        storage.upload("demo/1_shirt.png", b"other")
    with pytest.raises(ImageUploadError):
        storage.upload("../escape.png", b"data")
    with pytest.raises(ImageUploadError):
        storage.upload("demo/empty.png", b"")
