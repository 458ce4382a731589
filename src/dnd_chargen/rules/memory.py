"""In-process rules provider backed by model instances."""

from __future__ import annotations

from collections.abc import Iterable

from dnd_chargen.core.exceptions import NotFoundError
from dnd_chargen.core.logging import get_logger
from dnd_chargen.models.rules import (
    CharacterClass,
    ClassFeature,
    Proficiency,
    Race,
    Reference,
    Spell,
)
from dnd_chargen.rules import srd_data
from dnd_chargen.rules.provider import RulesProvider


logger = get_logger(__name__)


class InMemoryRulesProvider(RulesProvider):
    """Rules provider serving a fixed set of entities.

    Example:
        >>> provider = InMemoryRulesProvider.from_srd()
        >>> provider.get_class("wizard").hit_die
        6
    """

    def __init__(
        self,
        *,
        races: Iterable[Race] = (),
        classes: Iterable[CharacterClass] = (),
        spells: Iterable[Spell] = (),
        class_features: Iterable[ClassFeature] = (),
        proficiencies: Iterable[Proficiency] = (),
    ) -> None:
        """Index the given rules data by key; anything omitted is empty."""
        self._races = {race.key: race for race in races}
        self._classes = {cls.key: cls for cls in classes}
        self._spells = list(spells)
        self._class_features = list(class_features)
        self._proficiencies = {prof.key: prof for prof in proficiencies}

    @classmethod
    def from_srd(cls) -> InMemoryRulesProvider:
        """Build a provider over the bundled SRD subset."""
        provider = cls(
            races=srd_data.load_races().values(),
            classes=srd_data.load_classes().values(),
            spells=srd_data.load_spells(),
            class_features=srd_data.load_class_features(),
            proficiencies=srd_data.load_proficiencies().values(),
        )
        logger.debug(
            "SRD rules loaded",
            races=len(provider._races),
            classes=len(provider._classes),
            spells=len(provider._spells),
        )
        return provider

    def list_races(self) -> list[Reference]:
        return [Reference(key=race.key, name=race.name) for race in self._races.values()]

    def get_race(self, key: str) -> Race:
        try:
            return self._races[key]
        except KeyError:
            raise NotFoundError("Race not found", entity_id=key) from None

    def list_classes(self) -> list[Reference]:
        return [Reference(key=cls.key, name=cls.name) for cls in self._classes.values()]

    def get_class(self, key: str) -> CharacterClass:
        try:
            return self._classes[key]
        except KeyError:
            raise NotFoundError("Class not found", entity_id=key) from None

    def list_spells_by_class_and_level(self, class_key: str, level: int) -> list[Spell]:
        return [
            spell
            for spell in self._spells
            if spell.level == level and class_key in spell.classes
        ]

    def get_class_features(self, class_key: str, level: int) -> list[ClassFeature]:
        return [
            feature
            for feature in self._class_features
            if feature.class_key == class_key and feature.level == level
        ]

    def get_proficiency(self, key: str) -> Proficiency:
        try:
            return self._proficiencies[key]
        except KeyError:
            raise NotFoundError("Proficiency not found", entity_id=key) from None


__all__ = ["InMemoryRulesProvider"]
