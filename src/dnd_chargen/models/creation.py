"""Shapes exchanged between the creation flow and the presentation layer.

Steps are ephemeral: they are rebuilt from the character snapshot on
every call and never persisted.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from dnd_chargen.core.constants import NESTED_OPTION_PREFIX
from dnd_chargen.models.enums import StepType


class CreationOption(BaseModel):
    """One selectable entry of a creation step."""

    model_config = ConfigDict(extra="ignore")

    key: str
    name: str
    description: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)


class UIHints(BaseModel):
    """Rendering hints for the presentation layer."""

    model_config = ConfigDict(extra="ignore")

    layout: str = "list"
    color: int | None = None
    show_descriptions: bool = True
    show_images: bool = False


class CreationStep(BaseModel):
    """A decision the player has to make.

    Attributes:
        type: Step type.
        title: Short heading.
        description: Prompt text.
        options: Selectable options (may be empty in degraded mode).
        min_choices: Minimum number of selections.
        max_choices: Maximum number of selections.
        required: Whether the step must be completed.
        context: Free-form data for the presentation layer.
        ui_hints: Optional rendering hints.
    """

    model_config = ConfigDict(extra="ignore")

    type: StepType
    title: str
    description: str = ""
    options: list[CreationOption] = Field(default_factory=list)
    min_choices: int = Field(default=0, ge=0)
    max_choices: int = Field(default=0, ge=0)
    required: bool = True
    context: dict[str, Any] = Field(default_factory=dict)
    ui_hints: UIHints | None = None

    @model_validator(mode="after")
    def validate_choice_bounds(self) -> CreationStep:
        """Ensure ``max_choices`` is not below ``min_choices``."""
        if self.max_choices and self.max_choices < self.min_choices:
            raise ValueError(
                f"max_choices ({self.max_choices}) must be >= min_choices ({self.min_choices})"
            )
        return self

    def option_keys(self) -> list[str]:
        return [option.key for option in self.options]


class CreationStepResult(BaseModel):
    """The player's answer to a step."""

    model_config = ConfigDict(extra="ignore")

    step_type: StepType
    selections: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)


class ProgressStep(BaseModel):
    """A step annotated with its progress state."""

    model_config = ConfigDict(extra="ignore")

    step: CreationStep
    completed: bool = False
    current: bool = False


class ChoiceOption(BaseModel):
    """A flattened, UI-safe option of a rules-data choice.

    Attributes:
        key: Option key; ``nested-{index}`` for unexpanded sub-choices.
        name: Display name.
        description: Stat summary or sub-choice prompt.
        bundle_item_keys: Concrete item keys granted with this option.
    """

    model_config = ConfigDict(extra="ignore")

    key: str
    name: str
    description: str = ""
    bundle_item_keys: list[str] = Field(default_factory=list)

    @property
    def is_nested(self) -> bool:
        return self.key.startswith(NESTED_OPTION_PREFIX)


class SimplifiedChoice(BaseModel):
    """A flattened rules-data choice ready for display."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    description: str = ""
    type: str = ""
    choose_count: int = Field(default=1, ge=0)
    options: list[ChoiceOption] = Field(default_factory=list)

    def option_keys(self) -> list[str]:
        return [option.key for option in self.options]


__all__ = [
    "CreationOption",
    "UIHints",
    "CreationStep",
    "CreationStepResult",
    "ProgressStep",
    "ChoiceOption",
    "SimplifiedChoice",
]
