"""Enumeration types for the character creation engine.

These enums are the shared vocabulary between the rules data, the
character snapshot and the creation flow. Every value is a string so
records serialize as plain JSON.
"""

from __future__ import annotations

from enum import StrEnum


_ABILITY_NAMES = {
    "STR": "strength",
    "DEX": "dexterity",
    "CON": "constitution",
    "INT": "intelligence",
    "WIS": "wisdom",
    "CHA": "charisma",
}


class Ability(StrEnum):
    """The six canonical D&D 5E abilities, addressed by code."""

    STR = "STR"
    DEX = "DEX"
    CON = "CON"
    INT = "INT"
    WIS = "WIS"
    CHA = "CHA"

    @property
    def full_name(self) -> str:
        """Get the full name of the ability.

        Returns:
            Full ability name (e.g., 'Strength' for STR).
        """
        return _ABILITY_NAMES[self.value].capitalize()

    @property
    def abbreviation(self) -> str:
        """Get the three-letter abbreviation.

        Returns:
            Three-letter abbreviation (e.g., 'STR').
        """
        return self.value

    @classmethod
    def parse(cls, value: str) -> Ability | None:
        """Resolve a code or full name to an Ability.

        Accepts 'STR', 'str', 'strength' and the SRD index 'str'.

        Args:
            value: Raw ability identifier.

        Returns:
            The matching Ability, or None for an unrecognized value.
        """
        if not value:
            return None
        normalized = value.strip().upper()
        if normalized in cls.__members__:
            return cls(normalized)
        lowered = value.strip().lower()
        for code, name in _ABILITY_NAMES.items():
            if name == lowered:
                return cls(code)
        return None


class CharacterStatus(StrEnum):
    """Lifecycle status of a character record."""

    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"


class ProficiencyCategory(StrEnum):
    """Categories that proficiencies are grouped under."""

    ARMOR = "armor"
    WEAPON = "weapon"
    TOOL = "tool"
    SKILL = "skill"
    SAVING_THROW = "saving_throw"
    INSTRUMENT = "instrument"
    OTHER = "other"


class EquipmentCategory(StrEnum):
    """Inventory buckets."""

    WEAPON = "weapon"
    ARMOR = "armor"
    GEAR = "gear"
    OTHER = "other"


class ChoiceType(StrEnum):
    """What a rules-data choice grants."""

    UNSET = ""
    PROFICIENCY = "proficiency"
    LANGUAGE = "language"
    EQUIPMENT = "equipment"
    TOOL = "tool"


class OptionType(StrEnum):
    """Discriminator for the nodes of a rules-data choice tree."""

    REFERENCE = "reference"
    COUNTED_REFERENCE = "counted_reference"
    MULTIPLE = "multiple"
    CHOICE = "choice"


class StepType(StrEnum):
    """Every decision point the creation flow can emit."""

    RACE_SELECTION = "race_selection"
    CLASS_SELECTION = "class_selection"
    ABILITY_SCORES = "ability_scores"
    ABILITY_ASSIGNMENT = "ability_assignment"
    SKILL_SELECTION = "skill_selection"
    LANGUAGE_SELECTION = "language_selection"
    FIGHTING_STYLE_SELECTION = "fighting_style_selection"
    DIVINE_DOMAIN_SELECTION = "divine_domain_selection"
    FAVORED_ENEMY_SELECTION = "favored_enemy_selection"
    NATURAL_EXPLORER_SELECTION = "natural_explorer_selection"
    PROFICIENCY_SELECTION = "proficiency_selection"
    EQUIPMENT_SELECTION = "equipment_selection"
    CHARACTER_DETAILS = "character_details"
    COMPLETE = "complete"
    CANTRIPS_SELECTION = "cantrips_selection"
    SPELL_SELECTION = "spell_selection"
    SPELLBOOK_SELECTION = "spellbook_selection"
    SPELLS_KNOWN_SELECTION = "spells_known_selection"
    EXPERTISE_SELECTION = "expertise_selection"
    SUBCLASS_SELECTION = "subclass_selection"
    PATRON_SELECTION = "patron_selection"
    SORCEROUS_ORIGIN_SELECTION = "sorcerous_origin_selection"

    @property
    def is_spell_step(self) -> bool:
        """Whether the step fills a slot of the character's spell list."""
        return self in _SPELL_STEPS

    @property
    def is_subclass_step(self) -> bool:
        """Whether the step picks the character's subclass."""
        return self in _SUBCLASS_STEPS


_SPELL_STEPS = frozenset(
    {
        StepType.CANTRIPS_SELECTION,
        StepType.SPELL_SELECTION,
        StepType.SPELLBOOK_SELECTION,
        StepType.SPELLS_KNOWN_SELECTION,
    }
)

_SUBCLASS_STEPS = frozenset(
    {
        StepType.SUBCLASS_SELECTION,
        StepType.PATRON_SELECTION,
        StepType.SORCEROUS_ORIGIN_SELECTION,
    }
)


class FeatureKind(StrEnum):
    """Discriminant of a typed character feature record."""

    GENERIC = "generic"
    FIGHTING_STYLE = "fighting_style"
    DIVINE_DOMAIN = "divine_domain"
    FAVORED_ENEMY = "favored_enemy"
    NATURAL_EXPLORER = "natural_explorer"
    SUBCLASS = "subclass"
    EXPERTISE = "expertise"


class FeatureSource(StrEnum):
    """Where a feature came from."""

    CLASS = "class"
    RACE = "race"
    SUBCLASS = "subclass"
    FEAT = "feat"


__all__ = [
    "Ability",
    "CharacterStatus",
    "ProficiencyCategory",
    "EquipmentCategory",
    "ChoiceType",
    "OptionType",
    "StepType",
    "FeatureKind",
    "FeatureSource",
]
