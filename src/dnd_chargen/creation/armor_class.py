"""Feature-aware armor class and speed calculation."""

from __future__ import annotations

from dnd_chargen.core.constants import (
    BASE_ARMOR_CLASS,
    DEFAULT_SPEED,
    DEFENSE_STYLE_AC_BONUS,
    SHIELD_AC_BONUS,
)
from dnd_chargen.models.character import Character
from dnd_chargen.models.enums import Ability, EquipmentCategory, FeatureKind
from dnd_chargen.rules.static_data import ARMOR_STATS, RACE_SPEED_OVERRIDES, ArmorStats


BODY_SLOT = "body"
OFF_HAND_SLOT = "off_hand"
SHIELD_KEY = "shield"


def _body_armor(character: Character) -> ArmorStats | None:
    equipped = character.equipped.get(BODY_SLOT)
    if equipped:
        return ARMOR_STATS.get(equipped)
    for item in character.inventory.get(EquipmentCategory.ARMOR, []):
        if item.key in ARMOR_STATS:
            return ARMOR_STATS[item.key]
    return None


def _has_shield(character: Character) -> bool:
    if character.equipped.get(OFF_HAND_SLOT) == SHIELD_KEY:
        return True
    return any(
        item.key == SHIELD_KEY
        for bucket in character.inventory.values()
        for item in bucket
    )


def calculate_armor_class(character: Character) -> int:
    """Armor class from armor, shield and class features.

    Unarmored monks add Wisdom and unarmored barbarians add Constitution
    to 10 + Dexterity. Light armor adds full Dexterity, medium armor at
    most +2, heavy armor none. A shield adds 2, the Defense fighting
    style adds 1 while armored.
    """
    dex = character.ability_modifier(Ability.DEX)
    armor = _body_armor(character)

    if armor is None:
        armor_class = BASE_ARMOR_CLASS + dex
        if character.class_key == "monk":
            armor_class += character.ability_modifier(Ability.WIS)
        elif character.class_key == "barbarian":
            armor_class += character.ability_modifier(Ability.CON)
    else:
        if not armor.adds_dex:
            dex = 0
        elif armor.max_dex_bonus is not None:
            dex = min(dex, armor.max_dex_bonus)
        armor_class = armor.base + dex
        style = character.get_feature(FeatureKind.FIGHTING_STYLE)
        if style is not None and style.style == "defense":
            armor_class += DEFENSE_STYLE_AC_BONUS

    if _has_shield(character):
        armor_class += SHIELD_AC_BONUS
    return armor_class


def calculate_speed(character: Character) -> int:
    """Walking speed from the race, with PHB overrides for slow races."""
    if character.race is None:
        return DEFAULT_SPEED
    return RACE_SPEED_OVERRIDES.get(character.race.key, character.race.speed or DEFAULT_SPEED)


__all__ = [
    "BODY_SLOT",
    "OFF_HAND_SLOT",
    "calculate_armor_class",
    "calculate_speed",
]
