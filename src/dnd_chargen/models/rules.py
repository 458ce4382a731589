"""Pydantic V2 schemas for read-only rules data.

Races, classes, spells and the choice trees attached to them. A choice
tree is a closed, tagged union of four node kinds discriminated by
``option_type``:

* ``ReferenceOption`` – a single item or proficiency.
* ``CountedReferenceOption`` – ``count`` copies of one item.
* ``MultipleOption`` – a bundle of items granted together (AND).
* ``Choice`` – a nested decision with its own ``count`` (OR).

Option lists tolerate ``None`` entries so partially broken upstream
data still loads; consumers drop them.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from dnd_chargen.core.constants import DEFAULT_HIT_DIE
from dnd_chargen.models.enums import Ability, ChoiceType, ProficiencyCategory


# =============================================================================
# Choice Tree
# =============================================================================


class Reference(BaseModel):
    """Pointer to a rules entity by key."""

    model_config = ConfigDict(extra="ignore")

    key: str = ""
    name: str = ""
    url: str = ""


class ReferenceOption(BaseModel):
    """A single selectable entity."""

    model_config = ConfigDict(extra="ignore")

    option_type: Literal["reference"] = "reference"
    reference: Reference | None = None


class CountedReferenceOption(BaseModel):
    """A number of copies of one entity (e.g. 20 arrows)."""

    model_config = ConfigDict(extra="ignore")

    option_type: Literal["counted_reference"] = "counted_reference"
    count: int = Field(default=1, ge=0)
    reference: Reference | None = None


class MultipleOption(BaseModel):
    """A bundle of items that are granted together."""

    model_config = ConfigDict(extra="ignore")

    option_type: Literal["multiple"] = "multiple"
    key: str = ""
    name: str = ""
    items: list[Option | None] = Field(default_factory=list)


class Choice(BaseModel):
    """A decision between options, picking ``count`` of them.

    Attributes:
        key: Optional identifier of the choice.
        name: Human-readable prompt.
        type: What the choice grants.
        count: How many options must be picked.
        options: Candidate options, possibly nested.
    """

    model_config = ConfigDict(extra="ignore")

    option_type: Literal["choice"] = "choice"
    key: str = ""
    name: str = ""
    type: ChoiceType = ChoiceType.UNSET
    count: int = Field(default=1, ge=0)
    options: list[Option | None] = Field(default_factory=list)


Option = Annotated[
    Union[ReferenceOption, CountedReferenceOption, MultipleOption, Choice],
    Field(discriminator="option_type"),
]

MultipleOption.model_rebuild()
Choice.model_rebuild()


# =============================================================================
# Rules Entities
# =============================================================================


class AbilityBonus(BaseModel):
    """Fixed racial adjustment to one ability score."""

    model_config = ConfigDict(extra="ignore")

    attribute: Ability
    bonus: int


class Race(BaseModel):
    """A playable race.

    Attributes:
        key: Rules index (e.g. 'high-elf').
        name: Display name.
        speed: Walking speed in feet.
        ability_bonuses: Racial ability score adjustments.
        starting_proficiencies: Proficiencies every member gets.
        starting_proficiency_options: Optional racial proficiency choice.
        languages: Languages every member speaks.
    """

    model_config = ConfigDict(extra="ignore")

    key: str
    name: str
    speed: int = Field(default=30, ge=0)
    ability_bonuses: list[AbilityBonus] = Field(default_factory=list)
    starting_proficiencies: list[Reference] = Field(default_factory=list)
    starting_proficiency_options: Choice | None = None
    languages: list[Reference] = Field(default_factory=list)


class StartingEquipment(BaseModel):
    """Equipment granted without a choice."""

    model_config = ConfigDict(extra="ignore")

    quantity: int = Field(default=1, ge=1)
    equipment: Reference


class CharacterClass(BaseModel):
    """A playable class.

    Attributes:
        key: Rules index (e.g. 'wizard').
        name: Display name.
        hit_die: Hit die size.
        primary_abilities: Abilities the class leans on.
        saving_throws: Saving throw proficiencies.
        proficiencies: Fixed proficiencies.
        proficiency_choices: Proficiency decisions offered at level 1.
        starting_equipment: Fixed equipment.
        starting_equipment_choices: Equipment decisions offered at level 1.
        spellcasting_ability: Casting ability, None for non-casters.
    """

    model_config = ConfigDict(extra="ignore")

    key: str
    name: str
    hit_die: int = Field(default=DEFAULT_HIT_DIE, ge=4, le=12)
    primary_abilities: list[Ability] = Field(default_factory=list)
    saving_throws: list[Ability] = Field(default_factory=list)
    proficiencies: list[Reference] = Field(default_factory=list)
    proficiency_choices: list[Choice | None] = Field(default_factory=list)
    starting_equipment: list[StartingEquipment] = Field(default_factory=list)
    starting_equipment_choices: list[Choice | None] = Field(default_factory=list)
    spellcasting_ability: Ability | None = None


class Spell(BaseModel):
    """Spell summary used to populate spell selection steps."""

    model_config = ConfigDict(extra="ignore")

    key: str
    name: str
    level: int = Field(default=0, ge=0, le=9)
    school: str = ""
    classes: list[str] = Field(default_factory=list)
    description: str = ""


class ClassFeature(BaseModel):
    """A feature a class gains at a given level."""

    model_config = ConfigDict(extra="ignore")

    key: str
    name: str
    level: int = Field(default=1, ge=1, le=20)
    class_key: str = ""
    description: str = ""


class Proficiency(BaseModel):
    """A proficiency entry."""

    model_config = ConfigDict(extra="ignore")

    key: str
    name: str
    category: ProficiencyCategory = ProficiencyCategory.OTHER


__all__ = [
    "Reference",
    "ReferenceOption",
    "CountedReferenceOption",
    "MultipleOption",
    "Choice",
    "Option",
    "AbilityBonus",
    "Race",
    "StartingEquipment",
    "CharacterClass",
    "Spell",
    "ClassFeature",
    "Proficiency",
]
