"""Saved outfit storage abstractions and SQLite implementation."""
from __future__ import annotations

import sqlite3
import time
import uuid
from pathlib import Path
from typing import List, Optional

from models.outfit import SavedOutfit


class OutfitStore:
    """Persistence interface for saved (top, bottom, shoes) triples."""

    def insert_outfit(self, user_id: str, top_id: str, bottom_id: str, shoes_id: str) -> SavedOutfit:
        raise NotImplementedError

    def find_outfit(self, user_id: str, top_id: str, bottom_id: str, shoes_id: str) -> Optional[SavedOutfit]:
        raise NotImplementedError

    def get_outfit(self, user_id: str, outfit_id: str) -> Optional[SavedOutfit]:
        raise NotImplementedError

    def delete_outfit(self, user_id: str, outfit_id: str) -> bool:
        raise NotImplementedError

    def list_outfits(self, user_id: str) -> List[SavedOutfit]:
        raise NotImplementedError


class SQLiteOutfitStore(OutfitStore):
    """SQLite store for saved outfits.

    The table carries a unique index on the full (user, top, bottom, shoes)
    tuple. Callers still perform an existence check before inserting; the index
    only guarantees that two racing inserts land on the same row.
    """

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
                CREATE TABLE IF NOT EXISTS saved_outfits (
                    outfit_id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    top_id TEXT NOT NULL,
                    bottom_id TEXT NOT NULL,
                    shoes_id TEXT NOT NULL,
                    created_at REAL NOT NULL
                );
                """
            )
            conn.execute(
                """
                CREATE UNIQUE INDEX IF NOT EXISTS saved_outfits_triple
                ON saved_outfits (user_id, top_id, bottom_id, shoes_id);
                """
            )

    @staticmethod
    def _row_to_outfit(row: sqlite3.Row) -> SavedOutfit:
        return SavedOutfit(
            outfit_id=row["outfit_id"],
            user_id=row["user_id"],
            top_id=row["top_id"],
            bottom_id=row["bottom_id"],
            shoes_id=row["shoes_id"],
            created_at=row["created_at"],
        )

    def insert_outfit(self, user_id: str, top_id: str, bottom_id: str, shoes_id: str) -> SavedOutfit:
        outfit = SavedOutfit(
            outfit_id=uuid.uuid4().hex,
            user_id=user_id,
            top_id=top_id,
            bottom_id=bottom_id,
            shoes_id=shoes_id,
            created_at=time.time(),
        )
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO saved_outfits (outfit_id, user_id, top_id, bottom_id, shoes_id, created_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        outfit.outfit_id,
                        outfit.user_id,
                        outfit.top_id,
                        outfit.bottom_id,
                        outfit.shoes_id,
                        outfit.created_at,
                    ),
                )
        except sqlite3.IntegrityError:
            existing = self.find_outfit(user_id, top_id, bottom_id, shoes_id)
            if existing is None:
                raise
            return existing
        return outfit

    def find_outfit(self, user_id: str, top_id: str, bottom_id: str, shoes_id: str) -> Optional[SavedOutfit]:
        with self._connect() as conn:
            cursor = conn.execute(
                """
                SELECT * FROM saved_outfits
                WHERE user_id = ? AND top_id = ? AND bottom_id = ? AND shoes_id = ?
                """,
                (user_id, top_id, bottom_id, shoes_id),
            )
            row = cursor.fetchone()
            return self._row_to_outfit(row) if row else None

    def get_outfit(self, user_id: str, outfit_id: str) -> Optional[SavedOutfit]:
        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT * FROM saved_outfits WHERE user_id = ? AND outfit_id = ?",
                (user_id, outfit_id),
            )
            row = cursor.fetchone()
            return self._row_to_outfit(row) if row else None

    def delete_outfit(self, user_id: str, outfit_id: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM saved_outfits WHERE user_id = ? AND outfit_id = ?",
                (user_id, outfit_id),
            )
            return cursor.rowcount > 0

    def list_outfits(self, user_id: str) -> List[SavedOutfit]:
        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT * FROM saved_outfits WHERE user_id = ? ORDER BY created_at, rowid",
                (user_id,),
            )
            return [self._row_to_outfit(row) for row in cursor.fetchall()]


__all__ = ["OutfitStore", "SQLiteOutfitStore"]
