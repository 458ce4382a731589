"""Tests for the SQLite character repository."""

from __future__ import annotations

from pathlib import Path

import pytest

from dnd_chargen.core.exceptions import (
    AlreadyExistsError,
    ConcurrencyConflictError,
    InvalidArgumentError,
    NotFoundError,
)
from dnd_chargen.models.character import Character, CharacterFeature
from dnd_chargen.models.enums import FeatureKind
from dnd_chargen.storage import SqliteCharacterRepository, get_repository


@pytest.fixture
def db(tmp_path: Path) -> SqliteCharacterRepository:
    """Create a repository over a temporary database file."""
    return SqliteCharacterRepository(tmp_path / "characters.db")


class TestSqliteCharacterRepository:
    """Tests for SqliteCharacterRepository."""

    def test_create_and_get(self, db: SqliteCharacterRepository) -> None:
        """Test a created character round-trips through JSON."""
        character = Character(owner_id="owner-1", name="Mira")
        character.set_feature(
            CharacterFeature(key="fighting_style", name="Fighting Style: Defense", kind=FeatureKind.FIGHTING_STYLE, style="defense")
        )

        db.create(character)
        loaded = db.get(character.id)

        assert loaded.name == "Mira"
        assert loaded.version == 1
        assert loaded.get_feature(FeatureKind.FIGHTING_STYLE).style == "defense"

    def test_create_duplicate(self, db: SqliteCharacterRepository) -> None:
        """Test the primary key rejects a second create."""
        character = Character(owner_id="owner-1")
        db.create(character)

        with pytest.raises(AlreadyExistsError):
            db.create(character)

    def test_get_missing(self, db: SqliteCharacterRepository) -> None:
        """Test unknown ids raise NotFoundError."""
        with pytest.raises(NotFoundError):
            db.get("missing")
        with pytest.raises(InvalidArgumentError):
            db.get("")

    def test_update_and_conflict(self, db: SqliteCharacterRepository) -> None:
        """Test compare-and-set on the version column."""
        db.create(Character(id="c-1", owner_id="owner-1"))
        first = db.get("c-1")
        second = db.get("c-1")

        first.name = "First"
        db.update(first)
        assert first.version == 2

        with pytest.raises(ConcurrencyConflictError) as exc_info:
            db.update(second)

        assert exc_info.value.details["actual_version"] == 2
        assert db.get("c-1").name == "First"

    def test_update_missing(self, db: SqliteCharacterRepository) -> None:
        """Test updating an unknown character."""
        with pytest.raises(NotFoundError):
            db.update(Character(id="ghost", version=1))

    def test_get_by_owner_delete_and_count(self, db: SqliteCharacterRepository) -> None:
        """Test listing, deletion and counting."""
        db.create(Character(id="c-1", owner_id="owner-1"))
        db.create(Character(id="c-2", owner_id="owner-1"))
        db.create(Character(id="c-3", owner_id="owner-2"))

        assert {c.id for c in db.get_by_owner("owner-1")} == {"c-1", "c-2"}
        assert db.count() == 3
        assert db.delete("c-3") is True
        assert db.delete("c-3") is False
        assert db.count() == 2

    def test_persists_across_instances(self, tmp_path: Path) -> None:
        """Test a second repository over the same file sees the data."""
        path = tmp_path / "nested" / "characters.db"
        SqliteCharacterRepository(path).create(Character(id="c-1", name="Kept"))

        assert SqliteCharacterRepository(path).get("c-1").name == "Kept"


class TestSqliteBackendSelection:
    """Tests for selecting SQLite through settings."""

    def test_backend_from_env(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Test the storage backend setting picks the SQLite adapter."""
        monkeypatch.setenv("DND_CHARGEN_STORAGE_BACKEND", "sqlite")
        monkeypatch.setenv("DND_CHARGEN_STORAGE_DATABASE_PATH", str(tmp_path / "env.db"))

        repository = get_repository()

        assert isinstance(repository, SqliteCharacterRepository)
        assert repository.db_path == tmp_path / "env.db"
