"""Pydantic V2 schema for the character snapshot.

The Character model is the single mutable record the creation flow
reads and writes. Two constructs keep domain facts and workflow state
apart:

* ``features`` holds typed :class:`CharacterFeature` records, each
  discriminated by :class:`FeatureKind` with explicit optional fields.
* ``completed_steps`` is an append-only log of :class:`StepCompletion`
  events keyed by step type.

Records written by older versions stored both concerns in an untyped
``metadata`` dictionary on features, with bare marker features for
workflow confirmation. Those are migrated when the record is loaded.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator

from dnd_chargen.models.enums import (
    Ability,
    CharacterStatus,
    EquipmentCategory,
    FeatureKind,
    FeatureSource,
    ProficiencyCategory,
    StepType,
)
from dnd_chargen.models.rules import CharacterClass, Race


ModifierRounding = Literal["floor", "truncate"]


def calculate_modifier(score: int, rounding: ModifierRounding = "floor") -> int:
    """Calculate the ability modifier from an ability score.

    With ``floor`` the result matches the Player's Handbook table; with
    ``truncate`` odd negative offsets round toward zero.

    Args:
        score: The ability score.
        rounding: Rounding mode for negative odd offsets.

    Returns:
        The ability modifier.

    Example:
        >>> calculate_modifier(9)
        -1
        >>> calculate_modifier(9, "truncate")
        0
    """
    offset = score - 10
    if rounding == "truncate":
        return int(offset / 2)
    return offset // 2


# =============================================================================
# Ability Scores
# =============================================================================


class AbilityRoll(BaseModel):
    """One rolled ability value with a stable id."""

    model_config = ConfigDict(extra="ignore")

    id: str
    value: int = Field(ge=1, le=30)


class AbilityScore(BaseModel):
    """Final score and derived modifier for one ability."""

    model_config = ConfigDict(extra="ignore")

    score: int
    modifier: int


# =============================================================================
# Features and Workflow Events
# =============================================================================


_LEGACY_FEATURE_KINDS = {
    "divine_domain": FeatureKind.DIVINE_DOMAIN,
    "fighting_style": FeatureKind.FIGHTING_STYLE,
    "favored_enemy": FeatureKind.FAVORED_ENEMY,
    "natural_explorer": FeatureKind.NATURAL_EXPLORER,
    "expertise": FeatureKind.EXPERTISE,
}

LEGACY_COMPLETION_MARKERS: dict[str, StepType] = {
    "cantrips_selection_confirmed": StepType.CANTRIPS_SELECTION,
    "spells_selection_confirmed": StepType.SPELL_SELECTION,
    "proficiency_selection_complete": StepType.PROFICIENCY_SELECTION,
    "equipment_selection_complete": StepType.EQUIPMENT_SELECTION,
}
"""Marker feature keys older records used for workflow confirmation."""


def _as_string_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if item is not None and str(item)]
    return []


class CharacterFeature(BaseModel):
    """A typed domain fact about the character.

    Only the fields relevant to ``kind`` are populated.

    Attributes:
        key: Feature key (e.g. 'divine_domain').
        name: Display name.
        description: Rules text.
        kind: Discriminant selecting which optional fields apply.
        source: Where the feature came from.
        level: Level the feature was gained at.
        domain: Chosen divine domain.
        style: Chosen fighting style.
        enemy_type: Chosen favored enemy.
        terrain_type: Chosen favored terrain.
        subclass: Chosen subclass key.
        bonus_skills: Skills granted by the chosen domain.
        bonus_languages: Languages granted by the chosen domain.
        expertise_skills: Skills with doubled proficiency.
    """

    model_config = ConfigDict(extra="ignore")

    key: str
    name: str = ""
    description: str = ""
    kind: FeatureKind = FeatureKind.GENERIC
    source: FeatureSource = FeatureSource.CLASS
    level: int = Field(default=1, ge=1, le=20)

    domain: str | None = None
    style: str | None = None
    enemy_type: str | None = None
    terrain_type: str | None = None
    subclass: str | None = None
    bonus_skills: list[str] = Field(default_factory=list)
    bonus_languages: list[str] = Field(default_factory=list)
    expertise_skills: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def migrate_metadata(cls, data: Any) -> Any:
        """Lift values out of a legacy ``metadata`` dictionary.

        The metadata lists may have been stored either typed or untyped;
        both are normalized to ``list[str]``.
        """
        if not isinstance(data, dict) or "metadata" not in data:
            return data

        data = dict(data)
        metadata = data.pop("metadata") or {}
        if not isinstance(metadata, dict):
            return data

        if "kind" not in data:
            data["kind"] = _LEGACY_FEATURE_KINDS.get(data.get("key", ""), FeatureKind.GENERIC)

        for field_name, legacy_key in (
            ("domain", "domain"),
            ("style", "style"),
            ("style", "fighting_style"),
            ("enemy_type", "enemy_type"),
            ("terrain_type", "terrain_type"),
            ("subclass", "subclass"),
        ):
            value = metadata.get(legacy_key)
            if value and not data.get(field_name):
                data[field_name] = str(value)

        for field_name in ("bonus_skills", "bonus_languages", "expertise_skills"):
            if field_name in metadata and not data.get(field_name):
                data[field_name] = _as_string_list(metadata[field_name])
        return data


class StepCompletion(BaseModel):
    """Append-only record that a creation step was committed."""

    model_config = ConfigDict(extra="ignore")

    step_type: StepType
    selections: list[str] = Field(default_factory=list)
    completed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


# =============================================================================
# Proficiencies, Spells, Inventory
# =============================================================================


class CharacterProficiency(BaseModel):
    """A proficiency the character has."""

    model_config = ConfigDict(extra="ignore")

    key: str
    name: str = ""
    category: ProficiencyCategory = ProficiencyCategory.OTHER


class SpellList(BaseModel):
    """Spells the character can cast."""

    model_config = ConfigDict(extra="ignore")

    cantrips: list[str] = Field(default_factory=list)
    known_spells: list[str] = Field(default_factory=list)
    prepared_spells: list[str] = Field(default_factory=list)


class InventoryItem(BaseModel):
    """An item carried by the character."""

    model_config = ConfigDict(extra="ignore")

    key: str
    name: str = ""
    quantity: int = Field(default=1, ge=1)


# =============================================================================
# Character
# =============================================================================


class Character(BaseModel):
    """Character snapshot mutated by the creation flow.

    Attributes:
        id: Unique character identifier.
        owner_id: Id of the owning player.
        realm_id: Id of the server/campaign the character lives in.
        name: Character name, empty until the details step.
        level: Character level.
        status: Lifecycle status.
        race: Selected race, None until chosen.
        character_class: Selected class, None until chosen.
        hit_die: Hit die size of the selected class.
        attributes: Final ability scores, empty until assignments are applied.
        ability_rolls: Rolled values awaiting assignment.
        ability_assignments: Ability code to roll id.
        proficiencies: Proficiencies by category.
        features: Typed domain-fact records.
        completed_steps: Append-only workflow completion events.
        spells: Spell list, None for non-casters.
        inventory: Carried items by category.
        equipped: Equipment slot ('body', 'off_hand', ...) to item key.
        max_hit_points: Maximum hit points.
        current_hit_points: Current hit points.
        armor_class: Armor class.
        speed: Walking speed in feet.
        version: Optimistic concurrency stamp, bumped on every persist.
    """

    model_config = ConfigDict(extra="ignore")

    id: str = Field(default_factory=lambda: str(uuid4()))
    owner_id: str = ""
    realm_id: str = ""
    name: str = ""
    level: int = Field(default=1, ge=1, le=20)
    status: CharacterStatus = CharacterStatus.DRAFT

    race: Race | None = None
    character_class: CharacterClass | None = None
    hit_die: int = 0

    attributes: dict[Ability, AbilityScore] = Field(default_factory=dict)
    ability_rolls: list[AbilityRoll] = Field(default_factory=list)
    ability_assignments: dict[str, str] = Field(default_factory=dict)

    proficiencies: dict[ProficiencyCategory, list[CharacterProficiency]] = Field(
        default_factory=dict
    )
    features: list[CharacterFeature] = Field(default_factory=list)
    completed_steps: list[StepCompletion] = Field(default_factory=list)
    spells: SpellList | None = None
    inventory: dict[EquipmentCategory, list[InventoryItem]] = Field(default_factory=dict)
    equipped: dict[str, str] = Field(default_factory=dict)

    max_hit_points: int = 0
    current_hit_points: int = 0
    armor_class: int = 0
    speed: int = 0

    version: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @model_validator(mode="before")
    @classmethod
    def migrate_marker_features(cls, data: Any) -> Any:
        """Move legacy marker features into ``completed_steps``."""
        if not isinstance(data, dict):
            return data
        features = data.get("features")
        if not features:
            return data

        kept: list[Any] = []
        events = list(data.get("completed_steps") or [])
        for feature in features:
            key = feature.get("key") if isinstance(feature, dict) else None
            step_type = LEGACY_COMPLETION_MARKERS.get(key or "")
            if step_type is None:
                kept.append(feature)
                continue
            events.append({"step_type": step_type})

        if len(kept) == len(features):
            return data
        data = dict(data)
        data["features"] = kept
        data["completed_steps"] = events
        return data

    # -------------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------------

    @property
    def is_draft(self) -> bool:
        return self.status == CharacterStatus.DRAFT

    @property
    def class_key(self) -> str:
        """Key of the selected class, or '' when unset."""
        return self.character_class.key if self.character_class else ""

    @property
    def race_key(self) -> str:
        """Key of the selected race, or '' when unset."""
        return self.race.key if self.race else ""

    # -------------------------------------------------------------------------
    # Workflow events
    # -------------------------------------------------------------------------

    def has_completed(self, *step_types: StepType) -> bool:
        """Check whether any of the given steps has a completion event."""
        wanted = set(step_types)
        return any(event.step_type in wanted for event in self.completed_steps)

    def record_completion(
        self, step_type: StepType, selections: list[str] | None = None
    ) -> StepCompletion:
        """Append a completion event for a step.

        Args:
            step_type: The committed step.
            selections: Option keys the player committed.

        Returns:
            The appended event.
        """
        event = StepCompletion(step_type=step_type, selections=list(selections or []))
        self.completed_steps.append(event)
        return event

    # -------------------------------------------------------------------------
    # Features
    # -------------------------------------------------------------------------

    def get_feature(self, kind: FeatureKind) -> CharacterFeature | None:
        """Return the first feature of the given kind, if any."""
        for feature in self.features:
            if feature.kind == kind:
                return feature
        return None

    def set_feature(self, feature: CharacterFeature) -> None:
        """Add a typed feature, replacing an existing one of the same kind.

        Generic features are keyed by ``key`` instead of kind.
        """
        for index, existing in enumerate(self.features):
            same = (
                existing.key == feature.key
                if feature.kind == FeatureKind.GENERIC
                else existing.kind == feature.kind
            )
            if same:
                self.features[index] = feature
                return
        self.features.append(feature)

    # -------------------------------------------------------------------------
    # Proficiencies and inventory
    # -------------------------------------------------------------------------

    def add_proficiency(
        self, category: ProficiencyCategory, key: str, name: str = ""
    ) -> bool:
        """Register a proficiency unless already present.

        Returns:
            True if the proficiency was added.
        """
        bucket = self.proficiencies.setdefault(category, [])
        if any(existing.key == key for existing in bucket):
            return False
        bucket.append(CharacterProficiency(key=key, name=name or key, category=category))
        return True

    def has_proficiency(self, key: str) -> bool:
        return any(
            proficiency.key == key
            for bucket in self.proficiencies.values()
            for proficiency in bucket
        )

    @property
    def has_any_proficiencies(self) -> bool:
        return any(bucket for bucket in self.proficiencies.values())

    @property
    def has_any_inventory(self) -> bool:
        return any(bucket for bucket in self.inventory.values())

    def add_item(self, category: EquipmentCategory, key: str, name: str = "", quantity: int = 1) -> None:
        """Add an item to the inventory, stacking by key."""
        bucket = self.inventory.setdefault(category, [])
        for item in bucket:
            if item.key == key:
                item.quantity += quantity
                return
        bucket.append(InventoryItem(key=key, name=name or key, quantity=quantity))

    # -------------------------------------------------------------------------
    # Abilities
    # -------------------------------------------------------------------------

    def ability_modifier(self, ability: Ability) -> int:
        """Modifier of a finalized ability, 0 when not yet set."""
        score = self.attributes.get(ability)
        return score.modifier if score else 0

    def touch(self) -> None:
        """Refresh the update timestamp."""
        self.updated_at = datetime.now(UTC)


__all__ = [
    "ModifierRounding",
    "calculate_modifier",
    "AbilityRoll",
    "AbilityScore",
    "CharacterFeature",
    "StepCompletion",
    "LEGACY_COMPLETION_MARKERS",
    "CharacterProficiency",
    "SpellList",
    "InventoryItem",
    "Character",
]
