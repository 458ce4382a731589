"""Rules-data provider port.

The creation flow reads races, classes, spells, class features and
proficiencies through this interface. Implementations raise
``NotFoundError`` for unknown keys and ``RulesDataError`` when the
backing source fails.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from dnd_chargen.models.rules import (
    CharacterClass,
    ClassFeature,
    Proficiency,
    Race,
    Reference,
    Spell,
)


class RulesProvider(ABC):
    """Read-only source of D&D 5E rules data."""

    @abstractmethod
    def list_races(self) -> list[Reference]:
        """List every playable race."""

    @abstractmethod
    def get_race(self, key: str) -> Race:
        """Fetch full details of one race.

        Raises:
            NotFoundError: If the race does not exist.
            RulesDataError: If the source fails.
        """

    @abstractmethod
    def list_classes(self) -> list[Reference]:
        """List every playable class."""

    @abstractmethod
    def get_class(self, key: str) -> CharacterClass:
        """Fetch full details of one class.

        Raises:
            NotFoundError: If the class does not exist.
            RulesDataError: If the source fails.
        """

    @abstractmethod
    def list_spells_by_class_and_level(self, class_key: str, level: int) -> list[Spell]:
        """List spells of exactly ``level`` on a class's spell list (0 for cantrips)."""

    @abstractmethod
    def get_class_features(self, class_key: str, level: int) -> list[ClassFeature]:
        """List the features a class gains at ``level``."""

    @abstractmethod
    def get_proficiency(self, key: str) -> Proficiency:
        """Fetch one proficiency.

        Raises:
            NotFoundError: If the proficiency does not exist.
        """


__all__ = ["RulesProvider"]
