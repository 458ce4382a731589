"""Tests for the stepwise creation flow service."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from dnd_chargen.core.exceptions import (
    InvalidArgumentError,
    NotFoundError,
    StepApplicationError,
    ValidationError,
)
from dnd_chargen.creation.orchestrator import COMPLETE_STEP, CreationFlowService
from dnd_chargen.models.character import Character
from dnd_chargen.models.creation import CreationStepResult
from dnd_chargen.models.enums import (
    Ability,
    CharacterStatus,
    FeatureKind,
    FeatureSource,
    ProficiencyCategory,
    StepType,
)
from dnd_chargen.storage.repository import InMemoryCharacterRepository


def _result(step_type: StepType, *selections: str, **metadata: Any) -> CreationStepResult:
    return CreationStepResult(step_type=step_type, selections=list(selections), metadata=metadata)


ROLLS = ("15", "14", "13", "12", "10", "8")
ASSIGNMENTS = {"STR": "roll_1", "DEX": "roll_2", "CON": "roll_3", "INT": "roll_4", "WIS": "roll_5", "CHA": "roll_6"}
SPELLBOOK = ("magic-missile", "shield", "sleep", "mage-armor", "detect-magic", "identify")


@pytest.fixture
def draft_id(service: CreationFlowService) -> str:
    """Id of a freshly created draft."""
    return service.drafts.create_draft("owner-1").id


def _advance_to_class_steps(service: CreationFlowService, draft_id: str, race: str, class_key: str) -> None:
    service.process_step_result(draft_id, _result(StepType.RACE_SELECTION, race))
    service.process_step_result(draft_id, _result(StepType.CLASS_SELECTION, class_key))
    service.process_step_result(draft_id, _result(StepType.ABILITY_SCORES, *ROLLS))
    service.process_step_result(draft_id, _result(StepType.ABILITY_ASSIGNMENT, assignments=ASSIGNMENTS))


class TestQueries:
    """Tests for step queries."""

    def test_first_step_is_race(self, service: CreationFlowService, draft_id: str) -> None:
        """Test a new draft starts with race selection."""
        assert service.get_next_step(draft_id).type == StepType.RACE_SELECTION
        assert service.get_current_step(draft_id).type == StepType.RACE_SELECTION
        assert not service.is_creation_complete(draft_id)

    def test_empty_id(self, service: CreationFlowService) -> None:
        """Test an empty id is rejected before loading."""
        with pytest.raises(InvalidArgumentError):
            service.get_next_step("")

    def test_unknown_id(self, service: CreationFlowService) -> None:
        """Test unknown ids keep their not-found classification."""
        with pytest.raises(NotFoundError) as exc_info:
            service.get_next_step("missing")

        assert exc_info.value.details["operation"] == "get_next_step"

    def test_progress_flags(self, service: CreationFlowService, draft_id: str) -> None:
        """Test only the first incomplete step is current."""
        service.process_step_result(draft_id, _result(StepType.RACE_SELECTION, "elf"))

        progress = service.get_progress_steps(draft_id)

        assert [entry.step.type for entry in progress] == [StepType.CLASS_SELECTION]
        assert progress[0].current and not progress[0].completed

    def test_progress_after_assignment(self, service: CreationFlowService, draft_id: str) -> None:
        """Test completed steps stay in the list with their flag."""
        _advance_to_class_steps(service, draft_id, "human", "fighter")

        progress = service.get_progress_steps(draft_id)
        flags = {entry.step.type: (entry.completed, entry.current) for entry in progress}

        assert flags[StepType.ABILITY_SCORES] == (True, False)
        assert flags[StepType.FIGHTING_STYLE_SELECTION] == (False, True)
        assert flags[StepType.PROFICIENCY_SELECTION] == (False, False)
        assert sum(entry.current for entry in progress) == 1


class TestPreview:
    """Tests for preview_step_result."""

    def test_preview_is_not_persisted(
        self, service: CreationFlowService, repository: InMemoryCharacterRepository, draft_id: str
    ) -> None:
        """Test the preview shows the race without storing it."""
        preview = service.preview_step_result(draft_id, _result(StepType.RACE_SELECTION, "dwarf"))

        assert preview.race_key == "dwarf"
        assert preview.speed == 25
        assert repository.get(draft_id).race is None

    def test_preview_other_step(self, service: CreationFlowService, draft_id: str) -> None:
        """Test non race/class results return an unchanged copy."""
        preview = service.preview_step_result(draft_id, _result(StepType.CHARACTER_DETAILS, "Aria"))

        assert preview.name == ""

    def test_preview_errors_propagate(self, service: CreationFlowService, draft_id: str) -> None:
        """Test an unknown class in a preview is reported."""
        with pytest.raises(NotFoundError):
            service.preview_step_result(draft_id, _result(StepType.CLASS_SELECTION, "artificer"))


class TestProcessStepResult:
    """Tests for applying and persisting step results."""

    def test_race_and_class(
        self, service: CreationFlowService, repository: InMemoryCharacterRepository, draft_id: str
    ) -> None:
        """Test selections are stored and the version advances."""
        next_step = service.process_step_result(draft_id, _result(StepType.RACE_SELECTION, "human"))
        assert next_step.type == StepType.CLASS_SELECTION

        next_step = service.process_step_result(draft_id, _result(StepType.CLASS_SELECTION, "wizard"))
        assert next_step.type == StepType.ABILITY_SCORES

        stored = repository.get(draft_id)
        assert stored.class_key == "wizard"
        assert stored.hit_die == 6
        assert stored.spells is not None
        assert stored.version == 3

    def test_missing_selection(self, service: CreationFlowService, draft_id: str) -> None:
        """Test an empty race selection is an invalid argument."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            service.process_step_result(draft_id, _result(StepType.RACE_SELECTION))

        assert exc_info.value.details["step_type"] == StepType.RACE_SELECTION.value

    def test_rolled_scores(
        self, service: CreationFlowService, repository: InMemoryCharacterRepository, draft_id: str
    ) -> None:
        """Test an empty ability score result rolls a fresh set."""
        service.process_step_result(draft_id, _result(StepType.RACE_SELECTION, "human"))
        service.process_step_result(draft_id, _result(StepType.CLASS_SELECTION, "fighter"))

        next_step = service.process_step_result(draft_id, _result(StepType.ABILITY_SCORES))

        rolls = repository.get(draft_id).ability_rolls
        assert [roll.id for roll in rolls] == [f"roll_{i}" for i in range(1, 7)]
        assert all(3 <= roll.value <= 18 for roll in rolls)
        assert next_step.type == StepType.ABILITY_ASSIGNMENT
        assert [option.key for option in next_step.options] == [roll.id for roll in rolls]

    def test_wrong_roll_count(self, service: CreationFlowService, draft_id: str) -> None:
        """Test explicit values must cover all six abilities."""
        with pytest.raises(ValidationError):
            service.process_step_result(draft_id, _result(StepType.ABILITY_SCORES, "15", "14"))

    def test_assignment_from_selections(
        self, service: CreationFlowService, repository: InMemoryCharacterRepository, draft_id: str
    ) -> None:
        """Test 'CODE:roll_id' selections with racial bonuses applied."""
        service.process_step_result(draft_id, _result(StepType.RACE_SELECTION, "dwarf"))
        service.process_step_result(draft_id, _result(StepType.CLASS_SELECTION, "cleric"))
        service.process_step_result(draft_id, _result(StepType.ABILITY_SCORES, *ROLLS))

        selections = [f"{code}:{roll_id}" for code, roll_id in ASSIGNMENTS.items()]
        next_step = service.process_step_result(draft_id, _result(StepType.ABILITY_ASSIGNMENT, *selections))

        stored = repository.get(draft_id)
        assert stored.attributes[Ability.STR].score == 15
        assert stored.attributes[Ability.CON].score == 15
        assert stored.ability_modifier(Ability.CON) == 2
        assert next_step.type == StepType.DIVINE_DOMAIN_SELECTION

    def test_malformed_assignment(self, service: CreationFlowService, draft_id: str) -> None:
        """Test a selection without a roll id."""
        with pytest.raises(InvalidArgumentError):
            service.process_step_result(draft_id, _result(StepType.ABILITY_ASSIGNMENT, "STR"))

    def test_duplicate_roll_assignment(self, service: CreationFlowService, draft_id: str) -> None:
        """Test one roll cannot be used for two abilities."""
        service.process_step_result(draft_id, _result(StepType.ABILITY_SCORES, *ROLLS))
        assignments = dict(ASSIGNMENTS, DEX="roll_1")

        with pytest.raises(InvalidArgumentError):
            service.process_step_result(draft_id, _result(StepType.ABILITY_ASSIGNMENT, assignments=assignments))

    def test_fighter_to_completion(
        self, service: CreationFlowService, repository: InMemoryCharacterRepository, draft_id: str
    ) -> None:
        """Test the fighter flow from style to the complete step."""
        _advance_to_class_steps(service, draft_id, "human", "fighter")

        next_step = service.process_step_result(draft_id, _result(StepType.FIGHTING_STYLE_SELECTION, "defense"))
        assert next_step.type == StepType.PROFICIENCY_SELECTION

        next_step = service.process_step_result(
            draft_id, _result(StepType.PROFICIENCY_SELECTION, "skill-athletics", "skill-history")
        )
        assert next_step.type == StepType.EQUIPMENT_SELECTION

        next_step = service.process_step_result(draft_id, _result(StepType.EQUIPMENT_SELECTION, "chain-mail"))
        assert next_step.type == StepType.CHARACTER_DETAILS

        next_step = service.process_step_result(draft_id, _result(StepType.CHARACTER_DETAILS, name="Aria"))
        assert next_step.type == StepType.COMPLETE
        assert next_step.title == COMPLETE_STEP.title
        assert service.is_creation_complete(draft_id)

        stored = repository.get(draft_id)
        style = stored.get_feature(FeatureKind.FIGHTING_STYLE)
        assert style is not None
        assert style.name == "Fighting Style: Defense"
        assert stored.name == "Aria"
        assert stored.status == CharacterStatus.ACTIVE
        assert stored.max_hit_points == 12
        assert stored.current_hit_points == 12
        assert stored.has_proficiency("shields")
        assert stored.has_proficiency("saving-throw-str")
        assert ProficiencyCategory.SAVING_THROW in stored.proficiencies

    def test_invalid_proficiency(self, service: CreationFlowService, draft_id: str) -> None:
        """Test a proficiency outside the offered choices is rejected."""
        _advance_to_class_steps(service, draft_id, "human", "fighter")

        with pytest.raises(ValidationError):
            service.process_step_result(draft_id, _result(StepType.PROFICIENCY_SELECTION, "skill-arcana"))

    def test_style_must_suit_class(self, service: CreationFlowService, draft_id: str) -> None:
        """Test paladins cannot take archery."""
        _advance_to_class_steps(service, draft_id, "human", "paladin")

        with pytest.raises(ValidationError):
            service.process_step_result(draft_id, _result(StepType.FIGHTING_STYLE_SELECTION, "archery"))

    def test_rejected_result_is_not_persisted(
        self, service: CreationFlowService, repository: InMemoryCharacterRepository, draft_id: str
    ) -> None:
        """Test a failed application leaves the stored record alone."""
        _advance_to_class_steps(service, draft_id, "human", "fighter")
        version = repository.get(draft_id).version

        with pytest.raises(ValidationError):
            service.process_step_result(draft_id, _result(StepType.FIGHTING_STYLE_SELECTION, "unarmed"))

        assert repository.get(draft_id).version == version


class TestSpellAndFeatureSteps:
    """Tests for spell confirmation and class feature handlers."""

    def test_wizard_cantrips_need_confirmation(
        self, service: CreationFlowService, repository: InMemoryCharacterRepository, draft_id: str
    ) -> None:
        """Test the cantrip step stays current until cantrips are submitted."""
        _advance_to_class_steps(service, draft_id, "human", "wizard")
        assert service.get_next_step(draft_id).type == StepType.CANTRIPS_SELECTION

        next_step = service.process_step_result(
            draft_id, _result(StepType.CANTRIPS_SELECTION, "fire-bolt", "light", "mage-hand")
        )

        assert next_step.type == StepType.SPELLBOOK_SELECTION
        stored = repository.get(draft_id)
        assert stored.spells is not None
        assert stored.spells.cantrips == ["fire-bolt", "light", "mage-hand"]

    def test_spellbook_records_its_step(
        self, service: CreationFlowService, repository: InMemoryCharacterRepository, draft_id: str
    ) -> None:
        """Test the spellbook event is recorded under its own step type."""
        _advance_to_class_steps(service, draft_id, "human", "wizard")
        service.process_step_result(
            draft_id, _result(StepType.CANTRIPS_SELECTION, "fire-bolt", "light", "mage-hand")
        )

        next_step = service.process_step_result(draft_id, _result(StepType.SPELLBOOK_SELECTION, *SPELLBOOK))

        stored = repository.get(draft_id)
        assert stored.has_completed(StepType.SPELLBOOK_SELECTION)
        assert stored.spells is not None
        assert stored.spells.known_spells == list(SPELLBOOK)
        assert next_step.type == StepType.PROFICIENCY_SELECTION

    @pytest.mark.parametrize(
        "cantrips",
        [
            ("not-a-real-cantrip",),
            ("fire-bolt", "light"),
            ("fire-bolt", "light", "mage-hand", "ray-of-frost"),
            ("fire-bolt", "light", "sacred-flame"),
            ("fire-bolt", "fire-bolt", "light"),
        ],
    )
    def test_cantrips_must_match_step(
        self,
        service: CreationFlowService,
        repository: InMemoryCharacterRepository,
        draft_id: str,
        cantrips: tuple[str, ...],
    ) -> None:
        """Test wrong counts, unknown keys and repeats leave the cantrip step open."""
        _advance_to_class_steps(service, draft_id, "human", "wizard")

        with pytest.raises(ValidationError) as exc_info:
            service.process_step_result(draft_id, _result(StepType.CANTRIPS_SELECTION, *cantrips))

        assert exc_info.value.details["step_type"] == StepType.CANTRIPS_SELECTION.value
        assert not repository.get(draft_id).has_completed(StepType.CANTRIPS_SELECTION)
        assert service.get_next_step(draft_id).type == StepType.CANTRIPS_SELECTION

    @pytest.mark.parametrize(
        "spells",
        [
            ("magic-missile", "shield", "sleep"),
            (*SPELLBOOK[:5], "cure-wounds"),
            (*SPELLBOOK[:5], "misty-step"),
        ],
    )
    def test_spellbook_must_match_step(
        self,
        service: CreationFlowService,
        repository: InMemoryCharacterRepository,
        draft_id: str,
        spells: tuple[str, ...],
    ) -> None:
        """Test a short spellbook, off-list spells and spells above 1st level."""
        _advance_to_class_steps(service, draft_id, "human", "wizard")
        service.process_step_result(
            draft_id, _result(StepType.CANTRIPS_SELECTION, "fire-bolt", "light", "mage-hand")
        )

        with pytest.raises(ValidationError):
            service.process_step_result(draft_id, _result(StepType.SPELLBOOK_SELECTION, *spells))

        assert not repository.get(draft_id).has_completed(StepType.SPELLBOOK_SELECTION)

    def test_warlock_spells_known_count(self, service: CreationFlowService, draft_id: str) -> None:
        """Test a warlock submits exactly two 1st-level spells."""
        _advance_to_class_steps(service, draft_id, "human", "warlock")
        service.process_step_result(draft_id, _result(StepType.PATRON_SELECTION, "fiend"))
        service.process_step_result(
            draft_id, _result(StepType.CANTRIPS_SELECTION, "eldritch-blast", "mage-hand")
        )

        with pytest.raises(ValidationError):
            service.process_step_result(draft_id, _result(StepType.SPELLS_KNOWN_SELECTION, "charm-person"))

        next_step = service.process_step_result(
            draft_id, _result(StepType.SPELLS_KNOWN_SELECTION, "charm-person", "comprehend-languages")
        )
        assert next_step.type == StepType.PROFICIENCY_SELECTION

    def test_warlock_patron(
        self, service: CreationFlowService, repository: InMemoryCharacterRepository, draft_id: str
    ) -> None:
        """Test patron choices are stored as a subclass feature."""
        _advance_to_class_steps(service, draft_id, "human", "warlock")

        service.process_step_result(draft_id, _result(StepType.PATRON_SELECTION, "fiend"))

        subclass = repository.get(draft_id).get_feature(FeatureKind.SUBCLASS)
        assert subclass is not None
        assert subclass.subclass == "fiend"
        assert subclass.source == FeatureSource.SUBCLASS

    def test_unknown_subclass(self, service: CreationFlowService, draft_id: str) -> None:
        """Test a subclass outside the class catalogue."""
        _advance_to_class_steps(service, draft_id, "human", "sorcerer")

        with pytest.raises(ValidationError):
            service.process_step_result(draft_id, _result(StepType.SORCEROUS_ORIGIN_SELECTION, "fiend"))

    def test_rogue_expertise_count(self, service: CreationFlowService, draft_id: str) -> None:
        """Test exactly two expertise picks are required."""
        _advance_to_class_steps(service, draft_id, "human", "rogue")

        with pytest.raises(ValidationError):
            service.process_step_result(draft_id, _result(StepType.EXPERTISE_SELECTION, "skill-stealth"))

        next_step = service.process_step_result(
            draft_id, _result(StepType.EXPERTISE_SELECTION, "skill-stealth", "thieves-tools")
        )
        assert next_step.type == StepType.PROFICIENCY_SELECTION

    def test_ranger_features(
        self, service: CreationFlowService, repository: InMemoryCharacterRepository, draft_id: str
    ) -> None:
        """Test favored enemy and terrain handlers."""
        _advance_to_class_steps(service, draft_id, "human", "ranger")

        service.process_step_result(draft_id, _result(StepType.FAVORED_ENEMY_SELECTION, "undead"))
        next_step = service.process_step_result(draft_id, _result(StepType.NATURAL_EXPLORER_SELECTION, "forest"))

        stored = repository.get(draft_id)
        enemy = stored.get_feature(FeatureKind.FAVORED_ENEMY)
        terrain = stored.get_feature(FeatureKind.NATURAL_EXPLORER)
        assert enemy is not None and enemy.enemy_type == "undead"
        assert terrain is not None and terrain.terrain_type == "forest"
        assert next_step.type == StepType.PROFICIENCY_SELECTION


class TestApplyStepResult:
    """Tests for in-memory application."""

    def test_complete_has_no_handler(
        self, service: CreationFlowService, make_character: Callable[..., Character]
    ) -> None:
        """Test the terminal step cannot be applied."""
        with pytest.raises(StepApplicationError):
            service.apply_step_result(make_character(), _result(StepType.COMPLETE))

    def test_domain_skills_need_domain(
        self, service: CreationFlowService, make_character: Callable[..., Character]
    ) -> None:
        """Test knowledge skills require the domain feature."""
        character = make_character("human", "cleric", assigned=True)

        with pytest.raises(StepApplicationError):
            service.apply_step_result(character, _result(StepType.SKILL_SELECTION, "arcana", "history"))

    def test_domain_skills_grant_proficiencies(
        self, service: CreationFlowService, make_character: Callable[..., Character]
    ) -> None:
        """Test knowledge skills become skill proficiencies."""
        character = make_character("human", "cleric", assigned=True)
        service.apply_step_result(character, _result(StepType.DIVINE_DOMAIN_SELECTION, "knowledge"))

        service.apply_step_result(character, _result(StepType.SKILL_SELECTION, "arcana", "history"))

        domain = character.get_feature(FeatureKind.DIVINE_DOMAIN)
        assert domain is not None
        assert domain.bonus_skills == ["arcana", "history"]
        assert character.has_proficiency("skill-arcana")

    def test_domain_languages_are_validated(
        self, service: CreationFlowService, make_character: Callable[..., Character]
    ) -> None:
        """Test languages outside the knowledge list are rejected."""
        character = make_character("human", "cleric", assigned=True)
        service.apply_step_result(character, _result(StepType.DIVINE_DOMAIN_SELECTION, "knowledge"))

        with pytest.raises(ValidationError):
            service.apply_step_result(character, _result(StepType.LANGUAGE_SELECTION, "elvish", "gnomish"))

    def test_details_need_a_name(
        self, service: CreationFlowService, make_character: Callable[..., Character]
    ) -> None:
        """Test a blank name is rejected."""
        with pytest.raises(InvalidArgumentError):
            service.apply_step_result(make_character(assigned=True), _result(StepType.CHARACTER_DETAILS, "   "))
