"""Clothing catalog storage abstractions and SQLite implementation."""
from __future__ import annotations

import sqlite3
from dataclasses import asdict
from pathlib import Path
from typing import Dict, List, Optional

from models.clothing_item import ClothingItem
from models.taxonomy import validate_section

EDITABLE_FIELDS = {"name", "type", "color", "style"}


class WardrobeStore:
    """Persistence interface for clothing items."""

    def create_item(self, item: ClothingItem) -> ClothingItem:
        raise NotImplementedError

    def get_item(self, user_id: str, item_id: str) -> Optional[ClothingItem]:
        raise NotImplementedError

    def list_items_for_user(self, user_id: str, section: Optional[str] = None) -> List[ClothingItem]:
        raise NotImplementedError

    def update_item(self, user_id: str, item_id: str, updated_fields: Dict[str, object]) -> Optional[ClothingItem]:
        raise NotImplementedError

    def delete_item(self, user_id: str, item_id: str) -> bool:
        raise NotImplementedError


class SQLiteWardrobeStore(WardrobeStore):
    """Local SQLite-backed store for clothing items."""

    def __init__(self, database_path: str | Path = "data/wardrobe.db") -> None:
        self.database_path = Path(database_path)
        if self.database_path.parent and not self.database_path.parent.exists():
            self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_tables()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.database_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_tables(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS clothes (
                    user_id TEXT NOT NULL,
                    item_id TEXT NOT NULL,
                    section TEXT NOT NULL,
                    name TEXT NOT NULL,
                    type TEXT,
                    color TEXT,
                    style TEXT,
                    image_url TEXT NOT NULL,
                    PRIMARY KEY (user_id, item_id)
                );
                """
            )

    def create_item(self, item: ClothingItem) -> ClothingItem:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO clothes (
                    user_id, item_id, section, name, type, color, style, image_url
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    item.user_id,
                    item.item_id,
                    item.section,
                    item.name,
                    item.type,
                    item.color,
                    item.style,
                    item.image_url,
                ),
            )
        return item

    @staticmethod
    def _row_to_item(row: sqlite3.Row) -> ClothingItem:
        return ClothingItem(
            item_id=row["item_id"],
            user_id=row["user_id"],
            section=row["section"],
            name=row["name"],
            type=row["type"] or "",
            color=row["color"] or "",
            style=row["style"] or "",
            image_url=row["image_url"],
        )

    def get_item(self, user_id: str, item_id: str) -> Optional[ClothingItem]:
        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT * FROM clothes WHERE user_id = ? AND item_id = ?",
                (user_id, item_id),
            )
            row = cursor.fetchone()
            return self._row_to_item(row) if row else None

    def list_items_for_user(self, user_id: str, section: Optional[str] = None) -> List[ClothingItem]:
        query = "SELECT * FROM clothes WHERE user_id = ?"
        params: tuple = (user_id,)
        if section:
            query += " AND section = ?"
            params = (user_id, validate_section(section))
        with self._connect() as conn:
            cursor = conn.execute(query + " ORDER BY rowid", params)
            return [self._row_to_item(row) for row in cursor.fetchall()]

    def update_item(self, user_id: str, item_id: str, updated_fields: Dict[str, object]) -> Optional[ClothingItem]:
        current = self.get_item(user_id, item_id)
        if not current:
            return None

        for key, value in updated_fields.items():
            if key in EDITABLE_FIELDS and value is not None:
                setattr(current, key, value)

        validated = ClothingItem(**asdict(current))
        with self._connect() as conn:
            conn.execute(
                "UPDATE clothes SET name = ?, type = ?, color = ?, style = ? WHERE user_id = ? AND item_id = ?",
                (validated.name, validated.type, validated.color, validated.style, user_id, item_id),
            )
        return validated

    def delete_item(self, user_id: str, item_id: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM clothes WHERE user_id = ? AND item_id = ?",
                (user_id, item_id),
            )
            return cursor.rowcount > 0


__all__ = ["EDITABLE_FIELDS", "WardrobeStore", "SQLiteWardrobeStore"]
