"""Draft character updates and finalization.

A draft is mutable through the creation flow. Finalizing it derives the
remaining state (attributes, fixed proficiencies and starting equipment,
hit points, armor class, speed) and flips the status to active; after
that the draft setters refuse further changes.
"""

from __future__ import annotations

from dnd_chargen.core.config import CreationSettings, get_settings
from dnd_chargen.core.constants import SPELLCASTING_CLASSES
from dnd_chargen.core.exceptions import ChargenError, InvalidArgumentError, wrap_error
from dnd_chargen.core.logging import get_logger
from dnd_chargen.creation.armor_class import calculate_armor_class, calculate_speed
from dnd_chargen.creation.finalizer import calculate_hit_points, finalize_attributes
from dnd_chargen.models.character import AbilityRoll, Character, SpellList
from dnd_chargen.models.enums import (
    Ability,
    CharacterStatus,
    EquipmentCategory,
    ProficiencyCategory,
)
from dnd_chargen.rules.provider import RulesProvider
from dnd_chargen.rules.static_data import ARMOR_STATS, WEAPON_DESCRIPTIONS
from dnd_chargen.storage.repository import CharacterRepository


logger = get_logger(__name__)


def _equipment_category(key: str) -> EquipmentCategory:
    if key in ARMOR_STATS or key == "shield":
        return EquipmentCategory.ARMOR
    if key in WEAPON_DESCRIPTIONS:
        return EquipmentCategory.WEAPON
    return EquipmentCategory.GEAR


class DraftService:
    """Applies draft updates and finalizes characters.

    The ``apply_*`` and ``set_*`` methods mutate a snapshot in memory;
    callers persist it. :meth:`create_draft`, :meth:`update_draft` and
    :meth:`finalize_draft` load and persist through the repository.
    """

    def __init__(
        self,
        repository: CharacterRepository,
        rules: RulesProvider,
        settings: CreationSettings | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            repository: Character persistence.
            rules: Source of race and class data.
            settings: Creation settings; defaults to the application settings.
        """
        self._repository = repository
        self._rules = rules
        self._settings = settings or get_settings().creation

    # -------------------------------------------------------------------------
    # Persisted operations
    # -------------------------------------------------------------------------

    def create_draft(self, owner_id: str, realm_id: str = "", *, level: int = 1) -> Character:
        """Create and store an empty draft.

        Raises:
            InvalidArgumentError: If ``owner_id`` is empty.
        """
        if not owner_id:
            raise InvalidArgumentError("owner id is required", argument="owner_id")
        character = Character(owner_id=owner_id, realm_id=realm_id, level=level)
        created = self._repository.create(character)
        logger.info("Draft created", character_id=created.id, owner_id=owner_id)
        return created

    def update_draft(
        self,
        character_id: str,
        *,
        race_key: str | None = None,
        class_key: str | None = None,
        ability_assignments: dict[str, str] | None = None,
        name: str | None = None,
    ) -> Character:
        """Load a draft, apply the given updates and persist it.

        Raises:
            NotFoundError: If the character does not exist.
            InvalidArgumentError: If the character is not a draft.
            ConcurrencyConflictError: If it changed while being updated.
        """
        try:
            character = self._repository.get(character_id)
        except ChargenError as exc:
            raise wrap_error(
                exc, "failed to load draft", character_id=character_id, operation="update_draft"
            ) from exc

        if race_key is not None:
            self.apply_race(character, race_key)
        if class_key is not None:
            self.apply_class(character, class_key)
        if ability_assignments is not None:
            self.set_ability_assignments(character, ability_assignments)
        if name is not None:
            self.set_name(character, name)
        return self._repository.update(character)

    def finalize_draft(self, character_id: str) -> Character:
        """Load, finalize and persist a draft."""
        try:
            character = self._repository.get(character_id)
        except ChargenError as exc:
            raise wrap_error(
                exc, "failed to load draft", character_id=character_id, operation="finalize_draft"
            ) from exc
        self.finalize(character)
        return self._repository.update(character)

    # -------------------------------------------------------------------------
    # In-memory updates
    # -------------------------------------------------------------------------

    @staticmethod
    def _require_draft(character: Character) -> None:
        if not character.is_draft:
            raise InvalidArgumentError(
                f"Character {character.id} is not a draft",
                argument="character_id",
            )

    def apply_race(self, character: Character, race_key: str) -> None:
        """Select a race.

        Raises:
            InvalidArgumentError: If the key is empty or the character is final.
            NotFoundError: If the race does not exist.
        """
        self._require_draft(character)
        if not race_key:
            raise InvalidArgumentError("race selection is required", argument="race_key")
        character.race = self._rules.get_race(race_key)
        character.speed = calculate_speed(character)
        logger.info("Race selected", character_id=character.id, race=race_key)

    def apply_class(self, character: Character, class_key: str) -> None:
        """Select a class; spellcasters get an empty spell list."""
        self._require_draft(character)
        if not class_key:
            raise InvalidArgumentError("class selection is required", argument="class_key")
        character_class = self._rules.get_class(class_key)
        character.character_class = character_class
        character.hit_die = character_class.hit_die
        if class_key in SPELLCASTING_CLASSES and character.spells is None:
            character.spells = SpellList()
        logger.info("Class selected", character_id=character.id, character_class=class_key)

    def set_ability_rolls(self, character: Character, rolls: list[AbilityRoll]) -> None:
        """Replace the rolled values.

        Earlier assignments and derived attributes are dropped, since their
        roll ids would point at the old values.
        """
        self._require_draft(character)
        character.ability_rolls = list(rolls)
        character.ability_assignments = {}
        character.attributes = {}

    def set_ability_assignments(self, character: Character, assignments: dict[str, str]) -> None:
        """Record assignments and derive the attributes.

        Raises:
            InvalidArgumentError: If an ability is missing, a roll id is
                unknown or a roll is used twice.
        """
        self._require_draft(character)
        missing = [ability.value for ability in Ability if ability.value not in assignments]
        if missing:
            raise InvalidArgumentError(
                f"Missing ability assignments: {', '.join(missing)}",
                argument="ability_assignments",
            )

        roll_ids = {roll.id for roll in character.ability_rolls}
        chosen = [assignments[ability.value] for ability in Ability]
        unknown = [roll_id for roll_id in chosen if roll_id not in roll_ids]
        if unknown:
            raise InvalidArgumentError(
                f"Unknown roll ids: {', '.join(unknown)}",
                argument="ability_assignments",
            )
        if len(set(chosen)) != len(chosen):
            raise InvalidArgumentError(
                "Each roll can only be assigned once",
                argument="ability_assignments",
            )

        character.ability_assignments = {ability.value: assignments[ability.value] for ability in Ability}
        character.attributes = finalize_attributes(
            character.ability_rolls,
            character.ability_assignments,
            character.race.ability_bonuses if character.race else [],
            rounding=self._settings.modifier_rounding,
        )

    def set_name(self, character: Character, name: str) -> None:
        """Set the trimmed character name; blank names are rejected."""
        self._require_draft(character)
        name = name.strip()
        if not name:
            raise InvalidArgumentError("character name is required", argument="name")
        character.name = name

    # -------------------------------------------------------------------------
    # Finalization
    # -------------------------------------------------------------------------

    def _grant_proficiency(self, character: Character, key: str, name: str) -> None:
        category = ProficiencyCategory.OTHER
        try:
            category = self._rules.get_proficiency(key).category
        except ChargenError as exc:
            logger.debug("Proficiency lookup failed", proficiency=key, error=str(exc))
        character.add_proficiency(category, key, name)

    def finalize(self, character: Character) -> None:
        """Turn a complete draft into an active character.

        Raises:
            InvalidArgumentError: If the name, race or class is missing.
        """
        self._require_draft(character)
        if not character.name:
            raise InvalidArgumentError("character name is required", argument="name")
        if character.race is None or character.character_class is None:
            raise InvalidArgumentError(
                "race and class must be selected before finalizing",
                argument="character_id",
            )

        if not character.attributes and character.ability_assignments:
            character.attributes = finalize_attributes(
                character.ability_rolls,
                character.ability_assignments,
                character.race.ability_bonuses,
                rounding=self._settings.modifier_rounding,
            )

        for reference in character.race.starting_proficiencies:
            self._grant_proficiency(character, reference.key, reference.name)
        for reference in character.character_class.proficiencies:
            self._grant_proficiency(character, reference.key, reference.name)
        for ability in character.character_class.saving_throws:
            character.add_proficiency(
                ProficiencyCategory.SAVING_THROW,
                f"saving-throw-{ability.value.lower()}",
                f"Saving Throw: {ability.value}",
            )

        for item in character.character_class.starting_equipment:
            character.add_item(
                _equipment_category(item.equipment.key),
                item.equipment.key,
                item.equipment.name,
                item.quantity,
            )

        character.hit_die = character.hit_die or character.character_class.hit_die
        character.max_hit_points = calculate_hit_points(character)
        character.current_hit_points = character.max_hit_points
        character.armor_class = calculate_armor_class(character)
        character.speed = calculate_speed(character)
        character.status = CharacterStatus.ACTIVE

        logger.info(
            "Character finalized",
            character_id=character.id,
            name=character.name,
            max_hit_points=character.max_hit_points,
            armor_class=character.armor_class,
        )


__all__ = [
    "DraftService",
]
