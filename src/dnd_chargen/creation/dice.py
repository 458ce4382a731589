"""Ability score rolling using the d20 library.

Each ability roll is ``4d6kh3`` (four six-sided dice, the lowest
dropped). A full set is six rolls with ids ``roll_1`` .. ``roll_6``
which the player later assigns to abilities.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

import d20

from dnd_chargen.core.constants import (
    ABILITY_ROLL_COUNT,
    ABILITY_ROLL_EXPRESSION,
    ROLL_ID_PREFIX,
)
from dnd_chargen.core.exceptions import DiceRollError, InvalidArgumentError
from dnd_chargen.core.logging import get_logger
from dnd_chargen.models.character import AbilityRoll


logger = get_logger(__name__)


@dataclass(frozen=True)
class RollOutcome:
    """A single rolled expression.

    Attributes:
        expression: The rolled dice expression.
        total: Result after dropped dice are removed.
        kept: Values of the dice that counted.
        dropped: Values of the dice that were discarded.
    """

    expression: str
    total: int
    kept: list[int]
    dropped: list[int]


def roll_id(index: int) -> str:
    """Id of the ``index``-th roll (1-based)."""
    return f"{ROLL_ID_PREFIX}{index}"


class AbilityRoller:
    """Rolls ability score sets.

    Example:
        >>> roller = AbilityRoller(seed=7)
        >>> rolls = roller.roll_set()
        >>> [roll.id for roll in rolls][:2]
        ['roll_1', 'roll_2']
    """

    def __init__(self, *, seed: int | None = None, expression: str = ABILITY_ROLL_EXPRESSION) -> None:
        """Initialize the roller.

        Args:
            seed: Optional random seed for reproducible rolls.
            expression: Dice expression used per ability.
        """
        self._expression = expression
        if seed is not None:
            random.seed(seed)
        logger.debug("AbilityRoller initialized", seed=seed, expression=expression)

    def roll(self, expression: str | None = None) -> RollOutcome:
        """Roll one expression.

        Raises:
            DiceRollError: If the expression is empty or cannot be parsed.
        """
        expression = expression or self._expression
        if not expression.strip():
            raise DiceRollError("Empty dice expression", expression=expression)

        try:
            result = d20.roll(expression)
        except d20.RollError as exc:
            raise DiceRollError(f"Invalid dice expression: {exc}", expression=expression) from exc

        kept: list[int] = []
        dropped: list[int] = []

        def traverse(node: object) -> None:
            if isinstance(node, d20.Dice):
                for die in node.values:
                    (kept if die.kept else dropped).append(die.number)
            for child in getattr(node, "children", []):
                traverse(child)

        traverse(result.expr)
        return RollOutcome(expression=expression, total=result.total, kept=kept, dropped=dropped)

    def roll_set(self, count: int = ABILITY_ROLL_COUNT) -> list[AbilityRoll]:
        """Roll a full set of ability values.

        Returns:
            ``count`` rolls with ids ``roll_1`` .. ``roll_{count}``.
        """
        rolls = [
            AbilityRoll(id=roll_id(index), value=self.roll().total)
            for index in range(1, count + 1)
        ]
        logger.info("Ability scores rolled", values=[roll.value for roll in rolls])
        return rolls


def rolls_from_values(values: list[int] | list[str]) -> list[AbilityRoll]:
    """Build rolls from explicit values, keeping their order.

    Args:
        values: Integers or numeric strings, one per roll.

    Returns:
        Rolls with sequential ``roll_{n}`` ids.

    Raises:
        InvalidArgumentError: If a value is not an integer in 1..30.
    """
    rolls: list[AbilityRoll] = []
    for index, raw in enumerate(values, start=1):
        try:
            value = int(raw)
        except (TypeError, ValueError) as exc:
            raise InvalidArgumentError(
                f"Ability roll must be an integer, got {raw!r}", argument="selections"
            ) from exc
        if not 1 <= value <= 30:
            raise InvalidArgumentError(
                f"Ability roll out of range: {value}", argument="selections"
            )
        rolls.append(AbilityRoll(id=roll_id(index), value=value))
    return rolls


__all__ = [
    "AbilityRoller",
    "RollOutcome",
    "roll_id",
    "rolls_from_values",
]
