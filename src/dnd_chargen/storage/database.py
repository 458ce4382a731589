"""SQLite persistence for character snapshots.

Each character is stored as its pydantic JSON dump alongside indexed
columns for owner, status and version. Updates use a compare-and-set on
the version column so a stale snapshot is rejected.

Storage location: ``storage.database_path`` (default data/dnd_chargen.db)
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Generator

from dnd_chargen.core.config import get_settings
from dnd_chargen.core.exceptions import (
    AlreadyExistsError,
    ConcurrencyConflictError,
    NotFoundError,
)
from dnd_chargen.core.logging import get_logger
from dnd_chargen.models.character import Character
from dnd_chargen.storage.repository import CharacterRepository, _require_id


logger = get_logger(__name__)


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class CharacterRecord:
    """Raw row of the characters table.

    Attributes:
        id: Character id.
        owner_id: Owning player id.
        status: Lifecycle status.
        version: Optimistic concurrency stamp.
        data_json: Serialized Character.
        updated_at: Last write time.
    """

    id: str
    owner_id: str
    status: str
    version: int
    data_json: str
    updated_at: datetime

    @classmethod
    def from_row(cls, row: tuple[Any, ...]) -> CharacterRecord:
        """Create from database row."""
        return cls(
            id=row[0],
            owner_id=row[1],
            status=row[2],
            version=row[3],
            data_json=row[4],
            updated_at=datetime.fromisoformat(row[5]),
        )

    def to_character(self) -> Character:
        """Deserialize, migrating legacy feature records on the way."""
        character = Character.model_validate_json(self.data_json)
        character.version = self.version
        return character


# =============================================================================
# Repository
# =============================================================================


class SqliteCharacterRepository(CharacterRepository):
    """SQLite-backed character repository."""

    SCHEMA_VERSION = 1

    def __init__(self, db_path: str | Path | None = None) -> None:
        """Initialize database.

        Args:
            db_path: Path to database file. If None, uses the configured path.
        """
        if db_path is None:
            self.db_path = get_settings().storage.database_path
        else:
            self.db_path = Path(db_path)

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

        logger.info("Database initialized", path=str(self.db_path))

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a database connection with proper cleanup."""
        conn = sqlite3.connect(str(self.db_path))
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        """Initialize database schema."""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS characters (
                    id TEXT PRIMARY KEY,
                    owner_id TEXT NOT NULL,
                    status TEXT NOT NULL,
                    version INTEGER NOT NULL,
                    data_json TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_characters_owner
                ON characters(owner_id)
            """)

            cursor.execute(
                "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
                (self.SCHEMA_VERSION,),
            )

    def _fetch(self, conn: sqlite3.Connection, character_id: str) -> CharacterRecord | None:
        cursor = conn.execute(
            """
            SELECT id, owner_id, status, version, data_json, updated_at
            FROM characters WHERE id = ?
            """,
            (character_id,),
        )
        row = cursor.fetchone()
        return CharacterRecord.from_row(tuple(row)) if row else None

    def get(self, character_id: str) -> Character:
        _require_id(character_id)
        with self._get_connection() as conn:
            record = self._fetch(conn, character_id)
        if record is None:
            raise NotFoundError("Character not found", entity_id=character_id)
        return record.to_character()

    def create(self, character: Character) -> Character:
        _require_id(character.id)
        stored = character.model_copy(deep=True)
        stored.version = 1
        try:
            with self._get_connection() as conn:
                conn.execute(
                    """
                    INSERT INTO characters (id, owner_id, status, version, data_json, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        stored.id,
                        stored.owner_id,
                        stored.status.value,
                        stored.version,
                        stored.model_dump_json(),
                        stored.updated_at.isoformat(),
                    ),
                )
        except sqlite3.IntegrityError as exc:
            raise AlreadyExistsError("Character already exists", entity_id=character.id) from exc

        logger.info("Character created", character_id=stored.id, owner_id=stored.owner_id)
        character.version = stored.version
        return stored

    def update(self, character: Character) -> Character:
        _require_id(character.id)
        updated = character.model_copy(deep=True)
        updated.version = character.version + 1
        updated.touch()

        with self._get_connection() as conn:
            cursor = conn.execute(
                """
                UPDATE characters
                SET owner_id = ?, status = ?, version = ?, data_json = ?, updated_at = ?
                WHERE id = ? AND version = ?
                """,
                (
                    updated.owner_id,
                    updated.status.value,
                    updated.version,
                    updated.model_dump_json(),
                    updated.updated_at.isoformat(),
                    character.id,
                    character.version,
                ),
            )
            if cursor.rowcount == 0:
                existing = self._fetch(conn, character.id)
                if existing is None:
                    raise NotFoundError("Character not found", entity_id=character.id)
                raise ConcurrencyConflictError(
                    "Character was modified concurrently",
                    entity_id=character.id,
                    expected_version=character.version,
                    actual_version=existing.version,
                )

        character.version = updated.version
        character.updated_at = updated.updated_at
        return updated

    def get_by_owner(self, owner_id: str) -> list[Character]:
        with self._get_connection() as conn:
            cursor = conn.execute(
                """
                SELECT id, owner_id, status, version, data_json, updated_at
                FROM characters WHERE owner_id = ? ORDER BY updated_at DESC
                """,
                (owner_id,),
            )
            records = [CharacterRecord.from_row(tuple(row)) for row in cursor.fetchall()]
        return [record.to_character() for record in records]

    def delete(self, character_id: str) -> bool:
        _require_id(character_id)
        with self._get_connection() as conn:
            cursor = conn.execute("DELETE FROM characters WHERE id = ?", (character_id,))
            deleted = cursor.rowcount > 0

        if deleted:
            logger.info("Character deleted", character_id=character_id)
        return deleted

    def count(self) -> int:
        """Get total number of stored characters."""
        with self._get_connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM characters").fetchone()[0]


__all__ = [
    "CharacterRecord",
    "SqliteCharacterRepository",
]
