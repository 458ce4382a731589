"""Derive ability scores and hit points from rolls and assignments."""

from __future__ import annotations

from dnd_chargen.core.config import get_settings
from dnd_chargen.core.logging import get_logger
from dnd_chargen.models.character import (
    AbilityRoll,
    AbilityScore,
    Character,
    ModifierRounding,
    calculate_modifier,
)
from dnd_chargen.models.enums import Ability
from dnd_chargen.models.rules import AbilityBonus


logger = get_logger(__name__)


def finalize_attributes(
    rolls: list[AbilityRoll],
    assignments: dict[str, str],
    bonuses: list[AbilityBonus] | None = None,
    *,
    rounding: ModifierRounding | None = None,
) -> dict[Ability, AbilityScore]:
    """Compute final ability scores.

    For every canonical ability code in ``assignments`` the assigned
    roll's value is looked up, every matching racial bonus is added and
    the modifier derived. Unknown roll ids and unknown codes are logged
    and skipped.

    Args:
        rolls: Rolled values with ids.
        assignments: Ability code to roll id.
        bonuses: Racial ability bonuses.
        rounding: Modifier rounding; defaults to ``creation.modifier_rounding``.

    Returns:
        Ability to score and modifier.

    Example:
        >>> rolls = [AbilityRoll(id="roll_1", value=15)]
        >>> finalize_attributes(rolls, {"INT": "roll_1"})[Ability.INT].modifier
        2
    """
    if rounding is None:
        rounding = get_settings().creation.modifier_rounding

    values = {roll.id: roll.value for roll in rolls}
    attributes: dict[Ability, AbilityScore] = {}

    for code, roll_id in assignments.items():
        if code not in Ability.__members__:
            logger.warning("Skipping unknown ability code", ability=code)
            continue
        ability = Ability(code)
        if roll_id not in values:
            logger.warning("Skipping unknown roll id", ability=code, roll_id=roll_id)
            continue

        score = values[roll_id]
        for bonus in bonuses or []:
            if bonus.attribute == ability:
                score += bonus.bonus

        attributes[ability] = AbilityScore(
            score=score,
            modifier=calculate_modifier(score, rounding),
        )

    return attributes


def calculate_hit_points(character: Character) -> int:
    """Level 1 maximum hit points: hit die plus Constitution modifier.

    Returns:
        At least 1, or 0 when no class is selected.
    """
    hit_die = character.hit_die or (
        character.character_class.hit_die if character.character_class else 0
    )
    if not hit_die:
        return 0
    return max(1, hit_die + character.ability_modifier(Ability.CON))


__all__ = [
    "finalize_attributes",
    "calculate_hit_points",
]
