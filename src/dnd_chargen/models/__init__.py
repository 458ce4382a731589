"""Pydantic V2 schemas for rules data, characters and creation steps."""

from __future__ import annotations

from dnd_chargen.models.character import (
    AbilityRoll,
    AbilityScore,
    Character,
    CharacterFeature,
    CharacterProficiency,
    InventoryItem,
    SpellList,
    StepCompletion,
    calculate_modifier,
)
from dnd_chargen.models.creation import (
    ChoiceOption,
    CreationOption,
    CreationStep,
    CreationStepResult,
    ProgressStep,
    SimplifiedChoice,
    UIHints,
)
from dnd_chargen.models.enums import (
    Ability,
    CharacterStatus,
    ChoiceType,
    EquipmentCategory,
    FeatureKind,
    FeatureSource,
    OptionType,
    ProficiencyCategory,
    StepType,
)
from dnd_chargen.models.rules import (
    AbilityBonus,
    CharacterClass,
    Choice,
    ClassFeature,
    CountedReferenceOption,
    MultipleOption,
    Option,
    Proficiency,
    Race,
    Reference,
    ReferenceOption,
    Spell,
    StartingEquipment,
)


__all__ = [
    # Enums
    "Ability",
    "CharacterStatus",
    "ChoiceType",
    "EquipmentCategory",
    "FeatureKind",
    "FeatureSource",
    "OptionType",
    "ProficiencyCategory",
    "StepType",
    # Rules data
    "AbilityBonus",
    "CharacterClass",
    "Choice",
    "ClassFeature",
    "CountedReferenceOption",
    "MultipleOption",
    "Option",
    "Proficiency",
    "Race",
    "Reference",
    "ReferenceOption",
    "Spell",
    "StartingEquipment",
    # Character
    "AbilityRoll",
    "AbilityScore",
    "Character",
    "CharacterFeature",
    "CharacterProficiency",
    "InventoryItem",
    "SpellList",
    "StepCompletion",
    "calculate_modifier",
    # Creation
    "ChoiceOption",
    "CreationOption",
    "CreationStep",
    "CreationStepResult",
    "ProgressStep",
    "SimplifiedChoice",
    "UIHints",
]
