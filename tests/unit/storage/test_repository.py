"""Tests for the in-memory character repository."""

from __future__ import annotations

import pytest

from dnd_chargen.core.exceptions import (
    AlreadyExistsError,
    ConcurrencyConflictError,
    InvalidArgumentError,
    NotFoundError,
)
from dnd_chargen.models.character import Character
from dnd_chargen.storage import InMemoryCharacterRepository, get_repository, reset_repository


class TestInMemoryCharacterRepository:
    """Tests for InMemoryCharacterRepository."""

    def test_create_and_get(self, repository: InMemoryCharacterRepository) -> None:
        """Test a created character can be loaded back."""
        character = Character(owner_id="owner-1", name="Thorin")

        created = repository.create(character)
        loaded = repository.get(character.id)

        assert created.version == 1
        assert character.version == 1
        assert loaded.name == "Thorin"

    def test_create_duplicate(self, repository: InMemoryCharacterRepository) -> None:
        """Test creating the same id twice fails."""
        character = Character(owner_id="owner-1")
        repository.create(character)

        with pytest.raises(AlreadyExistsError):
            repository.create(character)

    def test_get_missing(self, repository: InMemoryCharacterRepository) -> None:
        """Test unknown ids raise NotFoundError."""
        with pytest.raises(NotFoundError):
            repository.get("missing")

    def test_empty_id(self, repository: InMemoryCharacterRepository) -> None:
        """Test an empty id is an invalid argument."""
        with pytest.raises(InvalidArgumentError):
            repository.get("")

    def test_snapshots_are_isolated(self, repository: InMemoryCharacterRepository) -> None:
        """Test mutating a loaded snapshot does not change the store."""
        character = Character(owner_id="owner-1")
        repository.create(character)

        loaded = repository.get(character.id)
        loaded.name = "Changed"

        assert repository.get(character.id).name == ""

    def test_update_bumps_version(self, repository: InMemoryCharacterRepository) -> None:
        """Test each update increments the version."""
        character = Character(owner_id="owner-1")
        repository.create(character)

        character.name = "Aria"
        updated = repository.update(character)

        assert updated.version == 2
        assert character.version == 2
        assert repository.get(character.id).name == "Aria"

    def test_stale_update_is_rejected(self, repository: InMemoryCharacterRepository) -> None:
        """Test the loser of a concurrent update gets a conflict."""
        repository.create(Character(id="c-1", owner_id="owner-1"))
        first = repository.get("c-1")
        second = repository.get("c-1")

        first.name = "First"
        repository.update(first)
        second.name = "Second"

        with pytest.raises(ConcurrencyConflictError) as exc_info:
            repository.update(second)

        assert exc_info.value.details["expected_version"] == 1
        assert exc_info.value.details["actual_version"] == 2
        assert repository.get("c-1").name == "First"

    def test_update_missing(self, repository: InMemoryCharacterRepository) -> None:
        """Test updating an unknown character."""
        with pytest.raises(NotFoundError):
            repository.update(Character(id="ghost", version=1))

    def test_get_by_owner(self, repository: InMemoryCharacterRepository) -> None:
        """Test characters are listed per owner."""
        repository.create(Character(owner_id="owner-1"))
        repository.create(Character(owner_id="owner-1"))
        repository.create(Character(owner_id="owner-2"))

        assert len(repository.get_by_owner("owner-1")) == 2
        assert repository.get_by_owner("nobody") == []

    def test_delete(self, repository: InMemoryCharacterRepository) -> None:
        """Test deletion reports whether anything was removed."""
        repository.create(Character(id="c-1"))

        assert repository.delete("c-1") is True
        assert repository.delete("c-1") is False


class TestGetRepository:
    """Tests for the global repository factory."""

    def test_default_backend_is_memory(self) -> None:
        """Test the memory backend is the default singleton."""
        repository = get_repository()

        assert isinstance(repository, InMemoryCharacterRepository)
        assert get_repository() is repository

    def test_reset(self) -> None:
        """Test reset builds a fresh repository."""
        first = get_repository()
        reset_repository()

        assert get_repository() is not first
