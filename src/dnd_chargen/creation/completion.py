"""Step completion predicates.

Each predicate is a pure function of the character snapshot. There is
no persisted cursor: the current step of a flow is the first step whose
predicate returns False.
"""

from __future__ import annotations

from collections.abc import Callable

from dnd_chargen.core.constants import (
    ABILITY_ROLL_COUNT,
    KNOWLEDGE_DOMAIN,
    KNOWLEDGE_DOMAIN_PICKS,
)
from dnd_chargen.models.character import Character
from dnd_chargen.models.enums import Ability, FeatureKind, StepType


Predicate = Callable[[Character], bool]


def has_race(character: Character) -> bool:
    return character.race is not None


def has_class(character: Character) -> bool:
    return character.character_class is not None


def has_rolled_abilities(character: Character) -> bool:
    return len(character.ability_rolls) >= ABILITY_ROLL_COUNT


def has_assigned_abilities(character: Character) -> bool:
    """All six ability codes have a roll assigned."""
    return all(ability.value in character.ability_assignments for ability in Ability)


def _knowledge_domain_picks(character: Character, field: str) -> bool:
    if character.class_key != "cleric":
        return True
    domain = character.get_feature(FeatureKind.DIVINE_DOMAIN)
    if domain is None or domain.domain != KNOWLEDGE_DOMAIN:
        return True
    return len(getattr(domain, field)) >= KNOWLEDGE_DOMAIN_PICKS


def has_domain_skills(character: Character) -> bool:
    """Knowledge clerics have picked their bonus skills; others never need to."""
    return _knowledge_domain_picks(character, "bonus_skills")


def has_domain_languages(character: Character) -> bool:
    """Knowledge clerics have picked their bonus languages; others never need to."""
    return _knowledge_domain_picks(character, "bonus_languages")


def has_fighting_style(character: Character) -> bool:
    feature = character.get_feature(FeatureKind.FIGHTING_STYLE)
    return feature is not None and bool(feature.style)


def has_divine_domain(character: Character) -> bool:
    feature = character.get_feature(FeatureKind.DIVINE_DOMAIN)
    return feature is not None and bool(feature.domain)


def has_favored_enemy(character: Character) -> bool:
    feature = character.get_feature(FeatureKind.FAVORED_ENEMY)
    return feature is not None and bool(feature.enemy_type)


def has_natural_explorer(character: Character) -> bool:
    feature = character.get_feature(FeatureKind.NATURAL_EXPLORER)
    return feature is not None and bool(feature.terrain_type)


def has_subclass(character: Character) -> bool:
    feature = character.get_feature(FeatureKind.SUBCLASS)
    return feature is not None and bool(feature.subclass)


def has_expertise(character: Character) -> bool:
    feature = character.get_feature(FeatureKind.EXPERTISE)
    return feature is not None and bool(feature.expertise_skills)


def has_confirmed_cantrips(character: Character) -> bool:
    """Cantrips count only once the selection was explicitly confirmed."""
    return character.has_completed(StepType.CANTRIPS_SELECTION)


def _has_confirmed_spells(step_type: StepType) -> Predicate:
    def predicate(character: Character) -> bool:
        return character.has_completed(step_type, StepType.SPELL_SELECTION)

    return predicate


def has_selected_proficiencies(character: Character) -> bool:
    """Confirmed, or the character already has proficiencies.

    The fallback treats any existing proficiency as a finished step.
    """
    if character.has_completed(StepType.PROFICIENCY_SELECTION):
        return True
    return has_race(character) and has_class(character) and character.has_any_proficiencies


def has_selected_equipment(character: Character) -> bool:
    """Confirmed, or the character already carries equipment."""
    if character.has_completed(StepType.EQUIPMENT_SELECTION):
        return True
    return has_class(character) and character.has_any_inventory


def has_details(character: Character) -> bool:
    """Named and finalized."""
    return bool(character.name) and not character.is_draft


COMPLETION_PREDICATES: dict[StepType, Predicate] = {
    StepType.RACE_SELECTION: has_race,
    StepType.CLASS_SELECTION: has_class,
    StepType.ABILITY_SCORES: has_rolled_abilities,
    StepType.ABILITY_ASSIGNMENT: has_assigned_abilities,
    StepType.SKILL_SELECTION: has_domain_skills,
    StepType.LANGUAGE_SELECTION: has_domain_languages,
    StepType.FIGHTING_STYLE_SELECTION: has_fighting_style,
    StepType.DIVINE_DOMAIN_SELECTION: has_divine_domain,
    StepType.FAVORED_ENEMY_SELECTION: has_favored_enemy,
    StepType.NATURAL_EXPLORER_SELECTION: has_natural_explorer,
    StepType.PROFICIENCY_SELECTION: has_selected_proficiencies,
    StepType.EQUIPMENT_SELECTION: has_selected_equipment,
    StepType.CHARACTER_DETAILS: has_details,
    StepType.CANTRIPS_SELECTION: has_confirmed_cantrips,
    StepType.SPELL_SELECTION: _has_confirmed_spells(StepType.SPELL_SELECTION),
    StepType.SPELLBOOK_SELECTION: _has_confirmed_spells(StepType.SPELLBOOK_SELECTION),
    StepType.SPELLS_KNOWN_SELECTION: _has_confirmed_spells(StepType.SPELLS_KNOWN_SELECTION),
    StepType.EXPERTISE_SELECTION: has_expertise,
    StepType.SUBCLASS_SELECTION: has_subclass,
    StepType.PATRON_SELECTION: has_subclass,
    StepType.SORCEROUS_ORIGIN_SELECTION: has_subclass,
}


def is_step_complete(character: Character, step_type: StepType) -> bool:
    """Check a step against the snapshot.

    Unknown step types (including ``COMPLETE``) are never complete.
    """
    predicate = COMPLETION_PREDICATES.get(step_type)
    return predicate(character) if predicate else False


__all__ = [
    "COMPLETION_PREDICATES",
    "is_step_complete",
    "has_race",
    "has_class",
    "has_rolled_abilities",
    "has_assigned_abilities",
    "has_domain_skills",
    "has_domain_languages",
    "has_fighting_style",
    "has_divine_domain",
    "has_favored_enemy",
    "has_natural_explorer",
    "has_subclass",
    "has_expertise",
    "has_confirmed_cantrips",
    "has_selected_proficiencies",
    "has_selected_equipment",
    "has_details",
]
