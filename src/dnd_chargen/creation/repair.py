"""Self-healing for characters saved without derived attributes.

Older records could end up with rolls and assignments persisted but an
empty attribute map, which leaves hit points and armor class at zero.
Repair recomputes what is missing and is a no-op for healthy records.
"""

from __future__ import annotations

from dnd_chargen.core.config import CreationSettings, get_settings
from dnd_chargen.core.exceptions import ChargenError, InvalidArgumentError, wrap_error
from dnd_chargen.core.logging import get_logger
from dnd_chargen.creation.armor_class import calculate_armor_class
from dnd_chargen.creation.finalizer import calculate_hit_points, finalize_attributes
from dnd_chargen.models.character import Character
from dnd_chargen.storage.repository import CharacterRepository


logger = get_logger(__name__)


def needs_repair(character: Character) -> bool:
    """Attributes are empty but the inputs to derive them are present."""
    return (
        not character.attributes
        and bool(character.ability_assignments)
        and bool(character.ability_rolls)
    )


def repair_snapshot(character: Character, settings: CreationSettings | None = None) -> bool:
    """Recompute attributes, and hit points and armor class where zero.

    Returns:
        True if the snapshot was changed.
    """
    if not needs_repair(character):
        return False

    settings = settings or get_settings().creation
    character.attributes = finalize_attributes(
        character.ability_rolls,
        character.ability_assignments,
        character.race.ability_bonuses if character.race else [],
        rounding=settings.modifier_rounding,
    )
    if character.max_hit_points == 0:
        character.max_hit_points = calculate_hit_points(character)
        if character.current_hit_points == 0:
            character.current_hit_points = character.max_hit_points
    if character.armor_class == 0:
        character.armor_class = calculate_armor_class(character)
    return True


class CharacterRepairService:
    """Repairs persisted characters through the repository."""

    def __init__(
        self,
        repository: CharacterRepository,
        settings: CreationSettings | None = None,
    ) -> None:
        self._repository = repository
        self._settings = settings or get_settings().creation

    def repair_character_attributes(self, character_id: str) -> bool:
        """Repair one character and persist it if anything changed.

        Returns:
            True if the character was repaired, False if it was healthy.

        Raises:
            InvalidArgumentError: If ``character_id`` is empty.
            NotFoundError: If the character does not exist.
            ConcurrencyConflictError: If it changed while being repaired.
        """
        if not character_id:
            raise InvalidArgumentError("character id is required", argument="character_id")
        try:
            character = self._repository.get(character_id)
        except ChargenError as exc:
            raise wrap_error(
                exc,
                "failed to get character",
                character_id=character_id,
                operation="repair_character_attributes",
            ) from exc

        if not repair_snapshot(character, self._settings):
            return False

        self._repository.update(character)
        logger.info(
            "Character attributes repaired",
            character_id=character_id,
            attributes=len(character.attributes),
            max_hit_points=character.max_hit_points,
            armor_class=character.armor_class,
        )
        return True

    def repair_all_characters(self, owner_id: str) -> int:
        """Repair every character of an owner.

        Individual failures are logged and skipped.

        Returns:
            Number of characters repaired.
        """
        repaired = 0
        for character in self._repository.get_by_owner(owner_id):
            try:
                if self.repair_character_attributes(character.id):
                    repaired += 1
            except ChargenError as exc:
                logger.error(
                    "Character repair failed",
                    character_id=character.id,
                    error=exc.message,
                    code=exc.code,
                )
        logger.info("Bulk repair finished", owner_id=owner_id, repaired=repaired)
        return repaired


__all__ = [
    "CharacterRepairService",
    "needs_repair",
    "repair_snapshot",
]
