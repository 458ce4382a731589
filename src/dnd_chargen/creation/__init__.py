"""Character creation engine.

Exports:
    Flow:
        FlowBuilder: Computes the ordered step list for a snapshot.
        CreationFlowService: Stepwise API for the presentation layer.
        DraftService: Draft updates and finalization.

    Pure transforms:
        resolve_proficiency_choices, resolve_equipment_choices:
            Flatten rules-data choice trees.
        finalize_attributes: Rolls, assignments and bonuses to scores.
        calculate_armor_class, calculate_hit_points: Derived stats.
        is_step_complete: Step completion predicates.

    Maintenance:
        CharacterRepairService: Rebuild missing derived attributes.
"""

from __future__ import annotations

from dnd_chargen.creation.armor_class import calculate_armor_class, calculate_speed
from dnd_chargen.creation.choice_resolver import (
    flatten_options,
    resolve_equipment_choices,
    resolve_proficiency_choices,
    validate_proficiency_selections,
)
from dnd_chargen.creation.completion import COMPLETION_PREDICATES, is_step_complete
from dnd_chargen.creation.dice import AbilityRoller, RollOutcome, rolls_from_values
from dnd_chargen.creation.draft_service import DraftService
from dnd_chargen.creation.finalizer import calculate_hit_points, finalize_attributes
from dnd_chargen.creation.flow_builder import FlowBuilder, build_flow
from dnd_chargen.creation.orchestrator import COMPLETE_STEP, CreationFlowService
from dnd_chargen.creation.repair import CharacterRepairService, needs_repair, repair_snapshot


__all__ = [
    # Flow
    "FlowBuilder",
    "build_flow",
    "CreationFlowService",
    "COMPLETE_STEP",
    "DraftService",
    # Choice resolution
    "flatten_options",
    "resolve_proficiency_choices",
    "resolve_equipment_choices",
    "validate_proficiency_selections",
    # Derivation
    "finalize_attributes",
    "calculate_hit_points",
    "calculate_armor_class",
    "calculate_speed",
    # Completion
    "COMPLETION_PREDICATES",
    "is_step_complete",
    # Dice
    "AbilityRoller",
    "RollOutcome",
    "rolls_from_values",
    # Repair
    "CharacterRepairService",
    "needs_repair",
    "repair_snapshot",
]
