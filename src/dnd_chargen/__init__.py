"""dnd-chargen - D&D 5E character creation flow and choice resolution.

The engine walks a draft character through the decisions character
creation needs (race, class, ability scores, class features, spells,
proficiencies, equipment, name). The step list is recomputed from the
character snapshot on every call, so there is no cursor to go stale.

Example:
    >>> from dnd_chargen import CreationFlowService, CreationStepResult, StepType
    >>>
    >>> service = CreationFlowService.from_settings()
    >>> draft = service.drafts.create_draft("player-1")
    >>> step = service.get_next_step(draft.id)
    >>> step.type
    <StepType.RACE_SELECTION: 'race_selection'>
    >>> result = CreationStepResult(step_type=step.type, selections=["elf"])
    >>> service.process_step_result(draft.id, result).type
    <StepType.CLASS_SELECTION: 'class_selection'>

Modules:
    core: Configuration, logging, and base exceptions.
    models: Pydantic V2 schemas for rules data, characters and steps.
    rules: Rules-data providers and static catalogues.
    storage: Character repositories (in-memory, SQLite).
    creation: Flow builder, orchestrator, choice resolver, finalizer.
"""

from __future__ import annotations

# Core
from dnd_chargen.core.config import Settings, get_settings
from dnd_chargen.core.exceptions import ChargenError
from dnd_chargen.core.logging import configure_logging, get_logger

# Models
from dnd_chargen.models import (
    Ability,
    Character,
    CharacterStatus,
    CreationStep,
    CreationStepResult,
    ProgressStep,
    SimplifiedChoice,
    StepType,
)

# Creation
from dnd_chargen.creation import (
    CharacterRepairService,
    CreationFlowService,
    DraftService,
    FlowBuilder,
    finalize_attributes,
    resolve_equipment_choices,
    resolve_proficiency_choices,
)

# Adapters
from dnd_chargen.rules import InMemoryRulesProvider, RulesProvider, build_rules_provider
from dnd_chargen.storage import (
    CharacterRepository,
    InMemoryCharacterRepository,
    SqliteCharacterRepository,
    get_repository,
)


__version__ = "0.1.0"
__all__ = [
    # Version info
    "__version__",
    # Core
    "ChargenError",
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    # Models
    "Ability",
    "Character",
    "CharacterStatus",
    "CreationStep",
    "CreationStepResult",
    "ProgressStep",
    "SimplifiedChoice",
    "StepType",
    # Creation
    "CharacterRepairService",
    "CreationFlowService",
    "DraftService",
    "FlowBuilder",
    "finalize_attributes",
    "resolve_equipment_choices",
    "resolve_proficiency_choices",
    # Adapters
    "RulesProvider",
    "InMemoryRulesProvider",
    "build_rules_provider",
    "CharacterRepository",
    "InMemoryCharacterRepository",
    "SqliteCharacterRepository",
    "get_repository",
]
