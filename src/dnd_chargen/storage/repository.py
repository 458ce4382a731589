"""Character repository port and in-memory adapter.

Every update carries the version the caller loaded. A repository only
accepts the update if that version still matches the stored record, then
bumps the version; otherwise ``ConcurrencyConflictError`` is raised so a
concurrent step result cannot silently overwrite another.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod

from dnd_chargen.core.exceptions import (
    AlreadyExistsError,
    ConcurrencyConflictError,
    InvalidArgumentError,
    NotFoundError,
)
from dnd_chargen.core.logging import get_logger
from dnd_chargen.models.character import Character


logger = get_logger(__name__)


class CharacterRepository(ABC):
    """Persistence port for character snapshots."""

    @abstractmethod
    def get(self, character_id: str) -> Character:
        """Load a character.

        Raises:
            InvalidArgumentError: If ``character_id`` is empty.
            NotFoundError: If no character has that id.
        """

    @abstractmethod
    def create(self, character: Character) -> Character:
        """Store a new character at version 1.

        Raises:
            AlreadyExistsError: If the id is taken.
        """

    @abstractmethod
    def update(self, character: Character) -> Character:
        """Persist a modified character.

        The passed character's ``version`` must equal the stored one. On
        success the stored and returned copies carry ``version + 1``.

        Raises:
            NotFoundError: If the character does not exist.
            ConcurrencyConflictError: If the stored version differs.
        """

    @abstractmethod
    def get_by_owner(self, owner_id: str) -> list[Character]:
        """List every character belonging to an owner."""

    @abstractmethod
    def delete(self, character_id: str) -> bool:
        """Delete a character.

        Returns:
            True if deleted, False if not found.
        """


def _require_id(character_id: str) -> None:
    if not character_id:
        raise InvalidArgumentError("character id is required", argument="character_id")


class InMemoryCharacterRepository(CharacterRepository):
    """Thread-safe dictionary-backed repository.

    Stored snapshots are deep copies so callers cannot mutate them
    without going through :meth:`update`.
    """

    def __init__(self) -> None:
        self._characters: dict[str, Character] = {}
        self._lock = threading.Lock()

    def get(self, character_id: str) -> Character:
        _require_id(character_id)
        with self._lock:
            stored = self._characters.get(character_id)
            if stored is None:
                raise NotFoundError("Character not found", entity_id=character_id)
            return stored.model_copy(deep=True)

    def create(self, character: Character) -> Character:
        _require_id(character.id)
        with self._lock:
            if character.id in self._characters:
                raise AlreadyExistsError("Character already exists", entity_id=character.id)
            stored = character.model_copy(deep=True)
            stored.version = 1
            self._characters[stored.id] = stored
        logger.debug("Character created", character_id=character.id)
        character.version = 1
        return stored.model_copy(deep=True)

    def update(self, character: Character) -> Character:
        _require_id(character.id)
        with self._lock:
            stored = self._characters.get(character.id)
            if stored is None:
                raise NotFoundError("Character not found", entity_id=character.id)
            if stored.version != character.version:
                raise ConcurrencyConflictError(
                    "Character was modified concurrently",
                    entity_id=character.id,
                    expected_version=character.version,
                    actual_version=stored.version,
                )
            updated = character.model_copy(deep=True)
            updated.version = stored.version + 1
            updated.touch()
            self._characters[updated.id] = updated
        character.version = updated.version
        character.updated_at = updated.updated_at
        return updated.model_copy(deep=True)

    def get_by_owner(self, owner_id: str) -> list[Character]:
        with self._lock:
            return [
                character.model_copy(deep=True)
                for character in self._characters.values()
                if character.owner_id == owner_id
            ]

    def delete(self, character_id: str) -> bool:
        _require_id(character_id)
        with self._lock:
            return self._characters.pop(character_id, None) is not None


__all__ = [
    "CharacterRepository",
    "InMemoryCharacterRepository",
]
