"""Storage module for character persistence.

Provides the repository port plus in-memory and SQLite adapters.
"""

from dnd_chargen.core.config import get_settings
from dnd_chargen.storage.database import CharacterRecord, SqliteCharacterRepository
from dnd_chargen.storage.repository import CharacterRepository, InMemoryCharacterRepository


_repository_instance: CharacterRepository | None = None


def get_repository() -> CharacterRepository:
    """Get the global repository selected by ``storage.backend``.

    Returns:
        Repository singleton instance.
    """
    global _repository_instance

    if _repository_instance is None:
        if get_settings().storage.backend == "sqlite":
            _repository_instance = SqliteCharacterRepository()
        else:
            _repository_instance = InMemoryCharacterRepository()

    return _repository_instance


def reset_repository() -> None:
    """Drop the global repository so the next call rebuilds it."""
    global _repository_instance
    _repository_instance = None


__all__ = [
    "CharacterRecord",
    "CharacterRepository",
    "InMemoryCharacterRepository",
    "SqliteCharacterRepository",
    "get_repository",
    "reset_repository",
]
