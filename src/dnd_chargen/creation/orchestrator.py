"""Stepwise character creation API.

The orchestrator keeps no cursor of its own. Every call reloads the
character, rebuilds the flow and takes the first step whose completion
predicate is false. Applying a result mutates the loaded snapshot and
persists it with a single versioned update, so two concurrent results
for the same character cannot silently overwrite each other.

Example:
    >>> service = CreationFlowService.from_settings()
    >>> draft = service.drafts.create_draft("player-1")
    >>> service.get_next_step(draft.id).type
    <StepType.RACE_SELECTION: 'race_selection'>
"""

from __future__ import annotations

from collections.abc import Callable

from dnd_chargen.core.constants import (
    ABILITY_ROLL_COUNT,
    EXPERTISE_PICKS,
    KNOWLEDGE_DOMAIN_PICKS,
)
from dnd_chargen.core.exceptions import (
    ChargenError,
    InvalidArgumentError,
    StepApplicationError,
    ValidationError,
    wrap_error,
)
from dnd_chargen.core.logging import get_logger, step_context
from dnd_chargen.creation.choice_resolver import validate_proficiency_selections
from dnd_chargen.creation.completion import is_step_complete
from dnd_chargen.creation.dice import AbilityRoller, rolls_from_values
from dnd_chargen.creation.draft_service import DraftService
from dnd_chargen.creation.flow_builder import FlowBuilder
from dnd_chargen.models.character import Character, CharacterFeature, SpellList
from dnd_chargen.models.creation import CreationStep, CreationStepResult, ProgressStep
from dnd_chargen.models.enums import (
    FeatureKind,
    FeatureSource,
    ProficiencyCategory,
    StepType,
)
from dnd_chargen.rules.provider import RulesProvider
from dnd_chargen.rules.static_data import (
    DIVINE_DOMAINS,
    FAVORED_ENEMIES,
    FAVORED_TERRAINS,
    KNOWLEDGE_DOMAIN_LANGUAGES,
    KNOWLEDGE_DOMAIN_SKILLS,
    SUBCLASSES,
    CatalogEntry,
    fighting_styles_for_class,
    find_entry,
)
from dnd_chargen.storage.repository import CharacterRepository


logger = get_logger(__name__)

StepHandler = Callable[["CreationFlowService", Character, CreationStepResult], None]

COMPLETE_STEP = CreationStep(
    type=StepType.COMPLETE,
    title="Character Creation Complete",
    description="Your character is ready to adventure!",
    required=False,
)


def _first_selection(result: CreationStepResult, what: str) -> str:
    selection = next((value for value in result.selections if value), "")
    if not selection:
        raise InvalidArgumentError(f"no {what} selected", argument="selections")
    return selection


def _exact_selections(result: CreationStepResult, count: int, what: str) -> list[str]:
    selections = [value for value in result.selections if value]
    if not selections:
        raise InvalidArgumentError(f"no {what} selected", argument="selections")
    if len(selections) != count:
        raise ValidationError(
            f"Expected {count} {what}, got {len(selections)}",
            field_name="selections",
            invalid_value=selections,
        )
    return selections


def _step_selections(result: CreationStepResult, step: CreationStep, what: str) -> list[str]:
    """Selections checked against the step's choice count and option keys."""
    selections = [value for value in result.selections if value]
    if not selections:
        raise InvalidArgumentError(f"no {what} selected", argument="selections")
    if len(set(selections)) != len(selections):
        raise ValidationError(
            f"Duplicate {what} selected", field_name="selections", invalid_value=selections
        )
    if not step.min_choices <= len(selections) <= step.max_choices:
        expected = (
            str(step.min_choices)
            if step.min_choices == step.max_choices
            else f"{step.min_choices}-{step.max_choices}"
        )
        raise ValidationError(
            f"Expected {expected} {what}, got {len(selections)}",
            field_name="selections",
            invalid_value=selections,
        )
    if step.options:
        known = {option.key for option in step.options}
        unknown = [value for value in selections if value not in known]
        if unknown:
            raise ValidationError(
                f"Unknown {what}: {', '.join(unknown)}",
                field_name="selections",
                invalid_value=unknown,
            )
    return selections


def _catalog_entry(entries: tuple[CatalogEntry, ...], key: str, what: str) -> CatalogEntry:
    entry = find_entry(entries, key)
    if entry is None:
        raise ValidationError(f"Unknown {what}: {key}", field_name="selections", invalid_value=key)
    return entry


def _parse_assignments(result: CreationStepResult) -> dict[str, str]:
    """Read ``{"STR": "roll_1", ...}`` from metadata or ``"STR:roll_1"`` selections."""
    raw = result.metadata.get("assignments")
    if isinstance(raw, dict) and raw:
        return {str(code).strip().upper(): str(roll_id) for code, roll_id in raw.items()}

    assignments: dict[str, str] = {}
    for selection in result.selections:
        code, separator, roll_id = selection.partition(":")
        if not separator or not roll_id:
            raise InvalidArgumentError(
                f"Malformed ability assignment: {selection!r}", argument="selections"
            )
        assignments[code.strip().upper()] = roll_id.strip()
    return assignments


class CreationFlowService:
    """Drives character creation one step at a time."""

    def __init__(
        self,
        repository: CharacterRepository,
        flow_builder: FlowBuilder,
        drafts: DraftService,
        *,
        roller: AbilityRoller | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            repository: Where characters are loaded from and persisted to.
            flow_builder: Builds the step list for a snapshot.
            drafts: Applies race, class, ability and name updates.
            roller: Dice roller for ability scores submitted without
                values; defaults to an unseeded 4d6kh3 roller.
        """
        self._repository = repository
        self._flow_builder = flow_builder
        self._drafts = drafts
        self._roller = roller or AbilityRoller()

    @classmethod
    def create(
        cls,
        repository: CharacterRepository,
        rules: RulesProvider,
        *,
        roller: AbilityRoller | None = None,
    ) -> CreationFlowService:
        """Wire a service from a repository and a rules provider."""
        return cls(
            repository,
            FlowBuilder(rules),
            DraftService(repository, rules),
            roller=roller,
        )

    @classmethod
    def from_settings(cls) -> CreationFlowService:
        """Wire a service from the configured storage and rules sources."""
        from dnd_chargen.rules import build_rules_provider
        from dnd_chargen.storage import get_repository

        return cls.create(get_repository(), build_rules_provider())

    @property
    def drafts(self) -> DraftService:
        """The draft service used to create and finalize characters."""
        return self._drafts

    @property
    def flow_builder(self) -> FlowBuilder:
        """The builder that computes each step list."""
        return self._flow_builder

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def _load(self, character_id: str, operation: str) -> Character:
        if not character_id:
            raise InvalidArgumentError("character id is required", argument="character_id")
        try:
            return self._repository.get(character_id)
        except ChargenError as exc:
            raise wrap_error(
                exc,
                "failed to get character",
                character_id=character_id,
                operation=operation,
            ) from exc

    def _next_step(self, character: Character) -> CreationStep:
        for step in self._flow_builder.build_flow(character):
            if not is_step_complete(character, step.type):
                return step
        return COMPLETE_STEP.model_copy(deep=True)

    def get_next_step(self, character_id: str) -> CreationStep:
        """Return the first incomplete step, or the ``COMPLETE`` step.

        Raises:
            InvalidArgumentError: If ``character_id`` is empty.
            NotFoundError: If the character does not exist.
        """
        character = self._load(character_id, "get_next_step")
        return self._next_step(character)

    def get_current_step(self, character_id: str) -> CreationStep:
        """Same as :meth:`get_next_step`; there is no separate cursor."""
        return self.get_next_step(character_id)

    def is_creation_complete(self, character_id: str) -> bool:
        """Check whether every step of the flow is complete.

        Args:
            character_id: Id of the character being created.

        Returns:
            True once :meth:`get_next_step` would return the ``COMPLETE`` step.

        Raises:
            InvalidArgumentError: If ``character_id`` is empty.
            NotFoundError: If the character does not exist.
        """
        return self.get_next_step(character_id).type == StepType.COMPLETE

    def get_progress_steps(self, character_id: str) -> list[ProgressStep]:
        """Every step of the flow with its completed and current flags."""
        character = self._load(character_id, "get_progress_steps")
        steps = self._flow_builder.build_flow(character)

        progress: list[ProgressStep] = []
        current_found = False
        for step in steps:
            completed = is_step_complete(character, step.type)
            current = not completed and not current_found
            current_found = current_found or current
            progress.append(ProgressStep(step=step, completed=completed, current=current))
        return progress

    def preview_step_result(self, character_id: str, result: CreationStepResult) -> Character:
        """Show the character as it would look with a race or class applied.

        The returned copy is never persisted. Other step types return an
        unchanged copy.
        """
        character = self._load(character_id, "preview_step_result")
        preview = character.model_copy(deep=True)
        if result.step_type == StepType.RACE_SELECTION:
            self._drafts.apply_race(preview, _first_selection(result, "race"))
        elif result.step_type == StepType.CLASS_SELECTION:
            self._drafts.apply_class(preview, _first_selection(result, "class"))
        return preview

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def process_step_result(self, character_id: str, result: CreationStepResult) -> CreationStep:
        """Apply a step result, persist the character and return the next step.

        Raises:
            InvalidArgumentError: If a required selection is missing.
            ValidationError: If a selection is not a valid option.
            NotFoundError: If the character or a selected entity is unknown.
            ConcurrencyConflictError: If the character changed concurrently.
        """
        with step_context(character_id, result.step_type):
            character = self._load(character_id, "process_step_result")
            try:
                self.apply_step_result(character, result)
                self._repository.update(character)
            except ChargenError as exc:
                logger.warning("Step result rejected", error=exc.message, code=exc.code)
                raise wrap_error(
                    exc,
                    "failed to apply step result",
                    character_id=character_id,
                    step_type=result.step_type.value,
                ) from exc

            logger.info("Step result applied", selections=len(result.selections))
            return self._next_step(character)

    def apply_step_result(self, character: Character, result: CreationStepResult) -> None:
        """Apply a result to an in-memory snapshot without persisting it.

        Application is not transactional: on error the snapshot may be
        partially updated.

        Raises:
            StepApplicationError: If the step type cannot be applied.
        """
        handler = STEP_HANDLERS.get(result.step_type)
        if handler is None:
            raise StepApplicationError(
                f"Step type cannot be applied: {result.step_type.value}",
                step_type=result.step_type.value,
            )
        handler(self, character, result)

    # -------------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------------

    def _apply_race(self, character: Character, result: CreationStepResult) -> None:
        self._drafts.apply_race(character, _first_selection(result, "race"))

    def _apply_class(self, character: Character, result: CreationStepResult) -> None:
        self._drafts.apply_class(character, _first_selection(result, "class"))

    def _apply_ability_scores(self, character: Character, result: CreationStepResult) -> None:
        if result.selections:
            rolls = rolls_from_values(result.selections)
            if len(rolls) != ABILITY_ROLL_COUNT:
                raise ValidationError(
                    f"Expected {ABILITY_ROLL_COUNT} ability rolls, got {len(rolls)}",
                    field_name="selections",
                    invalid_value=result.selections,
                )
        else:
            rolls = self._roller.roll_set()
        self._drafts.set_ability_rolls(character, rolls)

    def _apply_ability_assignment(self, character: Character, result: CreationStepResult) -> None:
        assignments = _parse_assignments(result)
        if not assignments:
            raise InvalidArgumentError("no ability assignments given", argument="selections")
        self._drafts.set_ability_assignments(character, assignments)

    def _apply_fighting_style(self, character: Character, result: CreationStepResult) -> None:
        key = _first_selection(result, "fighting style")
        entry = _catalog_entry(
            tuple(fighting_styles_for_class(character.class_key)), key, "fighting style"
        )
        character.set_feature(
            CharacterFeature(
                key="fighting_style",
                name=f"Fighting Style: {entry.name}",
                description=entry.description,
                kind=FeatureKind.FIGHTING_STYLE,
                level=character.level,
                style=entry.key,
            )
        )

    def _apply_divine_domain(self, character: Character, result: CreationStepResult) -> None:
        entry = _catalog_entry(DIVINE_DOMAINS, _first_selection(result, "domain"), "divine domain")
        character.set_feature(
            CharacterFeature(
                key="divine_domain",
                name=entry.name,
                description=entry.description,
                kind=FeatureKind.DIVINE_DOMAIN,
                level=character.level,
                domain=entry.key,
            )
        )

    def _apply_favored_enemy(self, character: Character, result: CreationStepResult) -> None:
        entry = _catalog_entry(FAVORED_ENEMIES, _first_selection(result, "favored enemy"), "favored enemy")
        character.set_feature(
            CharacterFeature(
                key="favored_enemy",
                name=f"Favored Enemy: {entry.name}",
                description=entry.description,
                kind=FeatureKind.FAVORED_ENEMY,
                level=character.level,
                enemy_type=entry.key,
            )
        )

    def _apply_natural_explorer(self, character: Character, result: CreationStepResult) -> None:
        entry = _catalog_entry(FAVORED_TERRAINS, _first_selection(result, "terrain"), "terrain")
        character.set_feature(
            CharacterFeature(
                key="natural_explorer",
                name=f"Natural Explorer: {entry.name}",
                description=entry.description,
                kind=FeatureKind.NATURAL_EXPLORER,
                level=character.level,
                terrain_type=entry.key,
            )
        )

    def _apply_subclass(self, character: Character, result: CreationStepResult) -> None:
        entry = _catalog_entry(
            SUBCLASSES.get(character.class_key, ()), _first_selection(result, "subclass"), "subclass"
        )
        character.set_feature(
            CharacterFeature(
                key="subclass",
                name=entry.name,
                description=entry.description,
                kind=FeatureKind.SUBCLASS,
                source=FeatureSource.SUBCLASS,
                level=character.level,
                subclass=entry.key,
            )
        )

    def _apply_expertise(self, character: Character, result: CreationStepResult) -> None:
        skills = _exact_selections(result, EXPERTISE_PICKS, "expertise skills")
        character.set_feature(
            CharacterFeature(
                key="expertise",
                name="Expertise",
                description="Proficiency bonus is doubled for ability checks with these skills.",
                kind=FeatureKind.EXPERTISE,
                level=character.level,
                expertise_skills=skills,
            )
        )

    def _domain_feature(self, character: Character, step_type: StepType) -> CharacterFeature:
        domain = character.get_feature(FeatureKind.DIVINE_DOMAIN)
        if domain is None:
            raise StepApplicationError(
                "A divine domain must be chosen first", step_type=step_type.value
            )
        return domain

    def _apply_domain_skills(self, character: Character, result: CreationStepResult) -> None:
        skills = _exact_selections(result, KNOWLEDGE_DOMAIN_PICKS, "skills")
        entries = [_catalog_entry(KNOWLEDGE_DOMAIN_SKILLS, key, "skill") for key in skills]
        domain = self._domain_feature(character, StepType.SKILL_SELECTION)
        domain.bonus_skills = [entry.key for entry in entries]
        for entry in entries:
            character.add_proficiency(
                ProficiencyCategory.SKILL, f"skill-{entry.key}", f"Skill: {entry.name}"
            )

    def _apply_domain_languages(self, character: Character, result: CreationStepResult) -> None:
        languages = _exact_selections(result, KNOWLEDGE_DOMAIN_PICKS, "languages")
        entries = [_catalog_entry(KNOWLEDGE_DOMAIN_LANGUAGES, key, "language") for key in languages]
        domain = self._domain_feature(character, StepType.LANGUAGE_SELECTION)
        domain.bonus_languages = [entry.key for entry in entries]

    def _apply_cantrips(self, character: Character, result: CreationStepResult) -> None:
        step = self._flow_builder.cantrip_step(character)
        cantrips = _step_selections(result, step, "cantrips")
        if character.spells is None:
            character.spells = SpellList()
        character.spells.cantrips = cantrips
        character.record_completion(StepType.CANTRIPS_SELECTION, cantrips)

    def _apply_spells(self, character: Character, result: CreationStepResult) -> None:
        if result.step_type == StepType.SPELLBOOK_SELECTION:
            step = self._flow_builder.spellbook_step(character)
        else:
            step = self._flow_builder.spells_known_step(character)
        spells = _step_selections(result, step, "spells")
        if character.spells is None:
            character.spells = SpellList()
        character.spells.known_spells = spells
        character.record_completion(result.step_type, spells)

    def _apply_proficiencies(self, character: Character, result: CreationStepResult) -> None:
        validate_proficiency_selections(character.race, character.character_class, result.selections)
        character.record_completion(StepType.PROFICIENCY_SELECTION, result.selections)

    def _apply_equipment(self, character: Character, result: CreationStepResult) -> None:
        character.record_completion(StepType.EQUIPMENT_SELECTION, result.selections)

    def _apply_details(self, character: Character, result: CreationStepResult) -> None:
        name = result.metadata.get("name") or next(
            (value for value in result.selections if value), ""
        )
        self._drafts.set_name(character, str(name))
        self._drafts.finalize(character)


STEP_HANDLERS: dict[StepType, StepHandler] = {
    StepType.RACE_SELECTION: CreationFlowService._apply_race,
    StepType.CLASS_SELECTION: CreationFlowService._apply_class,
    StepType.ABILITY_SCORES: CreationFlowService._apply_ability_scores,
    StepType.ABILITY_ASSIGNMENT: CreationFlowService._apply_ability_assignment,
    StepType.FIGHTING_STYLE_SELECTION: CreationFlowService._apply_fighting_style,
    StepType.DIVINE_DOMAIN_SELECTION: CreationFlowService._apply_divine_domain,
    StepType.FAVORED_ENEMY_SELECTION: CreationFlowService._apply_favored_enemy,
    StepType.NATURAL_EXPLORER_SELECTION: CreationFlowService._apply_natural_explorer,
    StepType.SUBCLASS_SELECTION: CreationFlowService._apply_subclass,
    StepType.PATRON_SELECTION: CreationFlowService._apply_subclass,
    StepType.SORCEROUS_ORIGIN_SELECTION: CreationFlowService._apply_subclass,
    StepType.EXPERTISE_SELECTION: CreationFlowService._apply_expertise,
    StepType.SKILL_SELECTION: CreationFlowService._apply_domain_skills,
    StepType.LANGUAGE_SELECTION: CreationFlowService._apply_domain_languages,
    StepType.CANTRIPS_SELECTION: CreationFlowService._apply_cantrips,
    StepType.SPELL_SELECTION: CreationFlowService._apply_spells,
    StepType.SPELLBOOK_SELECTION: CreationFlowService._apply_spells,
    StepType.SPELLS_KNOWN_SELECTION: CreationFlowService._apply_spells,
    StepType.PROFICIENCY_SELECTION: CreationFlowService._apply_proficiencies,
    StepType.EQUIPMENT_SELECTION: CreationFlowService._apply_equipment,
    StepType.CHARACTER_DETAILS: CreationFlowService._apply_details,
}
"""Step type to result handler. ``COMPLETE`` has no handler."""


__all__ = [
    "COMPLETE_STEP",
    "CreationFlowService",
    "STEP_HANDLERS",
]
