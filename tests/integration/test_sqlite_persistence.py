"""Creation flow over the SQLite repository."""

from __future__ import annotations

from pathlib import Path

import pytest

from dnd_chargen.core.exceptions import ConcurrencyConflictError
from dnd_chargen.creation.dice import AbilityRoller
from dnd_chargen.creation.orchestrator import CreationFlowService
from dnd_chargen.creation.repair import CharacterRepairService
from dnd_chargen.models.character import Character
from dnd_chargen.models.creation import CreationStepResult
from dnd_chargen.models.enums import CharacterStatus, FeatureKind, StepType
from dnd_chargen.rules.memory import InMemoryRulesProvider
from dnd_chargen.storage import SqliteCharacterRepository


ASSIGNMENTS = {"STR": "roll_1", "DEX": "roll_2", "CON": "roll_3", "INT": "roll_4", "WIS": "roll_5", "CHA": "roll_6"}


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "chargen.db"


@pytest.fixture
def sqlite_service(db_path: Path, rules: InMemoryRulesProvider) -> CreationFlowService:
    """Creation service persisting to a temporary SQLite file."""
    return CreationFlowService.create(SqliteCharacterRepository(db_path), rules, roller=AbilityRoller(seed=11))


def _submit(
    service: CreationFlowService,
    character_id: str,
    step_type: StepType,
    *selections: str,
    **metadata: object,
) -> None:
    service.process_step_result(
        character_id,
        CreationStepResult(step_type=step_type, selections=list(selections), metadata=dict(metadata)),
    )


@pytest.mark.integration
class TestSqlitePersistence:
    """Tests for the flow against a real database file."""

    def test_flow_survives_reopen(self, sqlite_service: CreationFlowService, db_path: Path) -> None:
        """Test progress is visible through a fresh repository."""
        draft = sqlite_service.drafts.create_draft("owner-1")
        _submit(sqlite_service, draft.id, StepType.RACE_SELECTION, "half-elf")
        _submit(sqlite_service, draft.id, StepType.CLASS_SELECTION, "paladin")
        _submit(sqlite_service, draft.id, StepType.ABILITY_SCORES)

        reopened = SqliteCharacterRepository(db_path).get(draft.id)

        assert reopened.race_key == "half-elf"
        assert reopened.class_key == "paladin"
        assert len(reopened.ability_rolls) == 6
        assert reopened.version == 4
        assert sqlite_service.get_next_step(draft.id).type == StepType.ABILITY_ASSIGNMENT

    def test_complete_run(self, sqlite_service: CreationFlowService, db_path: Path) -> None:
        """Test a barbarian from draft to active character on disk."""
        draft = sqlite_service.drafts.create_draft("owner-1")
        _submit(sqlite_service, draft.id, StepType.RACE_SELECTION, "half-orc")
        _submit(sqlite_service, draft.id, StepType.CLASS_SELECTION, "barbarian")
        _submit(sqlite_service, draft.id, StepType.ABILITY_SCORES, "15", "14", "13", "12", "10", "8")
        assignments = [f"{code}:{roll_id}" for code, roll_id in ASSIGNMENTS.items()]
        _submit(sqlite_service, draft.id, StepType.ABILITY_ASSIGNMENT, *assignments)
        _submit(sqlite_service, draft.id, StepType.PROFICIENCY_SELECTION, "skill-athletics", "skill-survival")
        _submit(sqlite_service, draft.id, StepType.EQUIPMENT_SELECTION, "greataxe")
        _submit(sqlite_service, draft.id, StepType.CHARACTER_DETAILS, "Grok")

        assert sqlite_service.is_creation_complete(draft.id)
        character = SqliteCharacterRepository(db_path).get(draft.id)
        assert character.status == CharacterStatus.ACTIVE
        assert character.max_hit_points == 14
        assert character.armor_class == 14
        assert character.has_proficiency("skill-intimidation")

    def test_stale_snapshot_conflicts(self, sqlite_service: CreationFlowService, db_path: Path) -> None:
        """Test a snapshot loaded before a step result cannot be written back."""
        repository = SqliteCharacterRepository(db_path)
        draft = sqlite_service.drafts.create_draft("owner-1")
        stale = repository.get(draft.id)

        _submit(sqlite_service, draft.id, StepType.RACE_SELECTION, "gnome")
        stale.name = "Overwrite"

        with pytest.raises(ConcurrencyConflictError):
            repository.update(stale)
        assert repository.get(draft.id).race_key == "gnome"

    def test_legacy_record_is_migrated_and_repaired(self, db_path: Path) -> None:
        """Test a stored legacy record loads with typed features and can be repaired."""
        repository = SqliteCharacterRepository(db_path)
        legacy = {
            "id": "legacy-1",
            "owner_id": "owner-1",
            "character_class": {"key": "fighter", "name": "Fighter", "hit_die": 10},
            "hit_die": 10,
            "ability_rolls": [{"id": f"roll_{i}", "value": v} for i, v in enumerate([16, 14, 12, 10, 10, 8], start=1)],
            "ability_assignments": ASSIGNMENTS,
            "features": [
                {"key": "fighting_style", "name": "Fighting Style: Archery", "metadata": {"fighting_style": "archery"}},
                {"key": "proficiency_selection_complete"},
            ],
        }
        repository.create(Character.model_validate(legacy))

        loaded = repository.get("legacy-1")
        style = loaded.get_feature(FeatureKind.FIGHTING_STYLE)
        assert style is not None and style.style == "archery"
        assert loaded.has_completed(StepType.PROFICIENCY_SELECTION)

        assert CharacterRepairService(repository).repair_character_attributes("legacy-1") is True
        repaired = repository.get("legacy-1")
        assert repaired.max_hit_points == 11
        assert repaired.armor_class == 12
