"""Tests for step completion predicates."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from dnd_chargen.creation.completion import COMPLETION_PREDICATES, is_step_complete
from dnd_chargen.models.character import Character, CharacterFeature
from dnd_chargen.models.enums import (
    CharacterStatus,
    EquipmentCategory,
    FeatureKind,
    ProficiencyCategory,
    StepType,
)


def _domain(domain: str, **fields: list[str]) -> CharacterFeature:
    return CharacterFeature(key="divine_domain", kind=FeatureKind.DIVINE_DOMAIN, domain=domain, **fields)


class TestBasicPredicates:
    """Tests for race, class and ability predicates."""

    def test_fresh_draft(self) -> None:
        """Test nothing is complete on an empty draft."""
        character = Character()

        assert not is_step_complete(character, StepType.RACE_SELECTION)
        assert not is_step_complete(character, StepType.CLASS_SELECTION)
        assert not is_step_complete(character, StepType.ABILITY_SCORES)
        assert not is_step_complete(character, StepType.CHARACTER_DETAILS)

    def test_race_class_and_abilities(self, make_character: Callable[..., Character]) -> None:
        """Test selections and rolls complete their steps."""
        rolled = make_character(rolled=True)
        assigned = make_character(assigned=True)

        assert is_step_complete(rolled, StepType.RACE_SELECTION)
        assert is_step_complete(rolled, StepType.CLASS_SELECTION)
        assert is_step_complete(rolled, StepType.ABILITY_SCORES)
        assert not is_step_complete(rolled, StepType.ABILITY_ASSIGNMENT)
        assert is_step_complete(assigned, StepType.ABILITY_ASSIGNMENT)

    def test_partial_assignment(self, make_character: Callable[..., Character]) -> None:
        """Test all six abilities must be assigned."""
        character = make_character(rolled=True)
        character.ability_assignments = {"STR": "roll_1", "DEX": "roll_2"}

        assert not is_step_complete(character, StepType.ABILITY_ASSIGNMENT)

    def test_complete_is_never_complete(self) -> None:
        """Test the terminal step has no predicate."""
        assert StepType.COMPLETE not in COMPLETION_PREDICATES
        assert not is_step_complete(Character(), StepType.COMPLETE)


class TestFeaturePredicates:
    """Tests for class feature predicates."""

    def test_fighting_style(self) -> None:
        """Test a style value is required."""
        character = Character()
        character.set_feature(CharacterFeature(key="fighting_style", kind=FeatureKind.FIGHTING_STYLE))
        assert not is_step_complete(character, StepType.FIGHTING_STYLE_SELECTION)

        character.set_feature(
            CharacterFeature(key="fighting_style", kind=FeatureKind.FIGHTING_STYLE, style="archery")
        )
        assert is_step_complete(character, StepType.FIGHTING_STYLE_SELECTION)

    @pytest.mark.parametrize(
        "step_type",
        [StepType.SUBCLASS_SELECTION, StepType.PATRON_SELECTION, StepType.SORCEROUS_ORIGIN_SELECTION],
    )
    def test_subclass_steps_share_a_predicate(self, step_type: StepType) -> None:
        """Test every subclass-style step reads the subclass feature."""
        character = Character()
        character.set_feature(CharacterFeature(key="subclass", kind=FeatureKind.SUBCLASS, subclass="fiend"))

        assert is_step_complete(character, step_type)

    def test_legacy_domain_record(self) -> None:
        """Test a migrated legacy domain feature counts as chosen."""
        character = Character.model_validate(
            {"features": [{"key": "divine_domain", "metadata": {"domain": "life"}}]}
        )

        assert is_step_complete(character, StepType.DIVINE_DOMAIN_SELECTION)


class TestKnowledgeDomainPredicates:
    """Tests for the knowledge domain skill and language picks."""

    def test_non_clerics_never_need_picks(self, make_character: Callable[..., Character]) -> None:
        """Test other classes skip the domain picks."""
        character = make_character(class_key="fighter")

        assert is_step_complete(character, StepType.SKILL_SELECTION)
        assert is_step_complete(character, StepType.LANGUAGE_SELECTION)

    def test_other_domains_need_no_picks(self, make_character: Callable[..., Character]) -> None:
        """Test only the knowledge domain adds picks."""
        character = make_character(class_key="cleric")
        character.set_feature(_domain("life"))

        assert is_step_complete(character, StepType.SKILL_SELECTION)

    def test_knowledge_domain_picks(self, make_character: Callable[..., Character]) -> None:
        """Test two skills and two languages are required."""
        character = make_character(class_key="cleric")
        character.set_feature(_domain("knowledge", bonus_skills=["arcana"]))

        assert not is_step_complete(character, StepType.SKILL_SELECTION)
        assert not is_step_complete(character, StepType.LANGUAGE_SELECTION)

        character.set_feature(
            _domain("knowledge", bonus_skills=["arcana", "history"], bonus_languages=["elvish", "draconic"])
        )
        assert is_step_complete(character, StepType.SKILL_SELECTION)
        assert is_step_complete(character, StepType.LANGUAGE_SELECTION)


class TestConfirmationPredicates:
    """Tests for steps that need an explicit completion event."""

    def test_cantrips_need_confirmation(self) -> None:
        """Test existing cantrips alone do not complete the step."""
        character = Character.model_validate({"spells": {"cantrips": ["light", "mending", "fire-bolt"]}})
        assert not is_step_complete(character, StepType.CANTRIPS_SELECTION)

        character.record_completion(StepType.CANTRIPS_SELECTION, ["light"])
        assert is_step_complete(character, StepType.CANTRIPS_SELECTION)

    def test_legacy_cantrip_marker(self) -> None:
        """Test the legacy marker feature is honored after migration."""
        character = Character.model_validate({"features": [{"key": "cantrips_selection_confirmed"}]})

        assert is_step_complete(character, StepType.CANTRIPS_SELECTION)

    def test_spell_steps_accept_generic_event(self) -> None:
        """Test a generic spell event completes the class-specific spell steps."""
        character = Character()
        character.record_completion(StepType.SPELL_SELECTION)

        assert is_step_complete(character, StepType.SPELLBOOK_SELECTION)
        assert is_step_complete(character, StepType.SPELLS_KNOWN_SELECTION)

    def test_proficiencies_by_event_or_heuristic(self, make_character: Callable[..., Character]) -> None:
        """Test proficiency confirmation or an existing proficiency."""
        confirmed = make_character()
        confirmed.record_completion(StepType.PROFICIENCY_SELECTION)
        existing = make_character()
        existing.add_proficiency(ProficiencyCategory.SKILL, "skill-arcana", "Skill: Arcana")
        classless = make_character(class_key=None)
        classless.add_proficiency(ProficiencyCategory.SKILL, "skill-arcana", "Skill: Arcana")

        assert is_step_complete(confirmed, StepType.PROFICIENCY_SELECTION)
        assert is_step_complete(existing, StepType.PROFICIENCY_SELECTION)
        assert not is_step_complete(classless, StepType.PROFICIENCY_SELECTION)
        assert not is_step_complete(make_character(), StepType.PROFICIENCY_SELECTION)

    def test_equipment_by_event_or_inventory(self, make_character: Callable[..., Character]) -> None:
        """Test equipment confirmation or an existing inventory."""
        character = make_character()
        assert not is_step_complete(character, StepType.EQUIPMENT_SELECTION)

        character.add_item(EquipmentCategory.GEAR, "explorers-pack", "Explorer's Pack")
        assert is_step_complete(character, StepType.EQUIPMENT_SELECTION)

    def test_details_need_name_and_final_status(self) -> None:
        """Test a named draft is not yet complete."""
        character = Character(name="Aria")
        assert not is_step_complete(character, StepType.CHARACTER_DETAILS)

        character.status = CharacterStatus.ACTIVE
        assert is_step_complete(character, StepType.CHARACTER_DETAILS)
