"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the character creation engine test suite.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest


if TYPE_CHECKING:
    from collections.abc import Callable, Generator

    from dnd_chargen.creation.orchestrator import CreationFlowService
    from dnd_chargen.models.character import AbilityRoll, Character
    from dnd_chargen.rules.memory import InMemoryRulesProvider
    from dnd_chargen.storage.repository import InMemoryCharacterRepository


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache and global repository around each test."""
    from dnd_chargen.core.config import clear_settings_cache
    from dnd_chargen.storage import reset_repository

    clear_settings_cache()
    reset_repository()
    yield
    clear_settings_cache()
    reset_repository()


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set up mock environment variables for testing.

    Returns:
        Dictionary of environment variables that were set.
    """
    env_vars = {
        "DND_CHARGEN_DEBUG": "true",
        "DND_CHARGEN_LOG_LEVEL": "DEBUG",
        "DND_CHARGEN_CREATION_MODIFIER_ROUNDING": "truncate",
        "DND_CHARGEN_STORAGE_BACKEND": "memory",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


# =============================================================================
# Rules and Storage Fixtures
# =============================================================================


@pytest.fixture
def rules() -> InMemoryRulesProvider:
    """Rules provider over the bundled SRD subset."""
    from dnd_chargen.rules.memory import InMemoryRulesProvider

    return InMemoryRulesProvider.from_srd()


@pytest.fixture
def repository() -> InMemoryCharacterRepository:
    """Empty in-memory character repository."""
    from dnd_chargen.storage.repository import InMemoryCharacterRepository

    return InMemoryCharacterRepository()


@pytest.fixture
def service(repository: InMemoryCharacterRepository, rules: InMemoryRulesProvider) -> CreationFlowService:
    """Creation flow service wired to the in-memory adapters."""
    from dnd_chargen.creation.dice import AbilityRoller
    from dnd_chargen.creation.orchestrator import CreationFlowService

    return CreationFlowService.create(repository, rules, roller=AbilityRoller(seed=42))


# =============================================================================
# Character Fixtures
# =============================================================================


@pytest.fixture
def sample_roll_values() -> list[int]:
    """Six ability roll values, one per ability in STR..CHA order."""
    return [15, 14, 13, 12, 10, 8]


@pytest.fixture
def sample_rolls(sample_roll_values: list[int]) -> list[AbilityRoll]:
    """Rolls with ids roll_1 .. roll_6."""
    from dnd_chargen.creation.dice import rolls_from_values

    return rolls_from_values(sample_roll_values)


@pytest.fixture
def sample_assignments() -> dict[str, str]:
    """Assign roll_1 to STR, roll_2 to DEX and so on."""
    return {
        "STR": "roll_1",
        "DEX": "roll_2",
        "CON": "roll_3",
        "INT": "roll_4",
        "WIS": "roll_5",
        "CHA": "roll_6",
    }


@pytest.fixture
def make_character(
    rules: InMemoryRulesProvider,
    sample_rolls: list[AbilityRoll],
    sample_assignments: dict[str, str],
) -> Callable[..., Character]:
    """Factory for character snapshots at various stages of creation.

    Returns:
        A callable taking ``race``, ``class_key``, ``level`` and flags for
        rolled and assigned abilities.
    """
    from dnd_chargen.creation.finalizer import finalize_attributes
    from dnd_chargen.models.character import Character

    def _make(
        race: str | None = "human",
        class_key: str | None = "fighter",
        *,
        level: int = 1,
        rolled: bool = False,
        assigned: bool = False,
        **overrides: Any,
    ) -> Character:
        overrides.setdefault("owner_id", "owner-1")
        character = Character(level=level, **overrides)
        if race:
            character.race = rules.get_race(race)
        if class_key:
            character.character_class = rules.get_class(class_key)
            character.hit_die = character.character_class.hit_die
        if rolled or assigned:
            character.ability_rolls = list(sample_rolls)
        if assigned:
            character.ability_assignments = dict(sample_assignments)
            character.attributes = finalize_attributes(
                character.ability_rolls,
                character.ability_assignments,
                character.race.ability_bonuses if character.race else [],
                rounding="floor",
            )
        return character

    return _make
