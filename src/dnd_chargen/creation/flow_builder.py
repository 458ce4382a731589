"""Build the ordered list of creation steps for a character snapshot.

The flow is recomputed from scratch on every call and depends only on
the snapshot and the rules data:

1. race and class selection while unset;
2. ability rolling and assignment once both are chosen;
3. class-specific steps (domain, fighting style, spells, ...);
4. proficiencies, equipment and details once attributes exist.

A builder without a rules provider still produces the same steps, with
empty option lists.
"""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed

from dnd_chargen.core.config import CreationSettings, get_settings
from dnd_chargen.core.constants import (
    ABILITY_ROLL_COUNT,
    ABILITY_ROLL_EXPRESSION,
    DESCRIPTION_ELLIPSIS,
    DIVINE_DOMAIN_COLOR,
    EXPERTISE_PICKS,
    KNOWLEDGE_DOMAIN,
    KNOWLEDGE_DOMAIN_PICKS,
    NO_TRAITS_DESCRIPTION,
)
from dnd_chargen.core.exceptions import ChargenError, RulesDataError, wrap_error
from dnd_chargen.core.logging import get_logger
from dnd_chargen.creation.choice_resolver import (
    resolve_equipment_choices,
    resolve_proficiency_choices,
)
from dnd_chargen.models.character import Character
from dnd_chargen.models.creation import CreationOption, CreationStep, UIHints
from dnd_chargen.models.enums import FeatureKind, ProficiencyCategory, StepType
from dnd_chargen.models.rules import CharacterClass, Race, ReferenceOption
from dnd_chargen.rules.provider import RulesProvider
from dnd_chargen.rules.static_data import (
    CLASS_COLORS,
    CLASS_FEATURE_PREVIEWS,
    DIVINE_DOMAINS,
    FAVORED_ENEMIES,
    FAVORED_TERRAINS,
    KNOWLEDGE_DOMAIN_LANGUAGES,
    KNOWLEDGE_DOMAIN_SKILLS,
    SUBCLASSES,
    CatalogEntry,
    cantrips_known,
    fighting_styles_for_class,
    max_spell_level,
    spells_known,
    wizard_spellbook_size,
)


logger = get_logger(__name__)

ClassStepBuilder = Callable[["FlowBuilder", Character], list[CreationStep]]

_ORDINALS = {1: "1st", 2: "2nd", 3: "3rd"}


def _ordinal(level: int) -> str:
    return _ORDINALS.get(level, f"{level}th")


def _catalog_options(entries: tuple[CatalogEntry, ...] | list[CatalogEntry]) -> list[CreationOption]:
    return [
        CreationOption(
            key=entry.key,
            name=entry.name,
            description=entry.description,
            metadata=dict(entry.metadata),
        )
        for entry in entries
    ]


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - len(DESCRIPTION_ELLIPSIS)] + DESCRIPTION_ELLIPSIS


def summarize_race(race: Race, limit: int = 100) -> str:
    """One-line race summary such as ``'DEX +2, INT +1 • 30ft • 2 prof'``.

    Args:
        race: The race to describe.
        limit: Maximum length; longer summaries end in '...'.
    """
    details: list[str] = []
    bonuses = [
        f"{bonus.attribute.value} +{bonus.bonus}" for bonus in race.ability_bonuses if bonus.bonus > 0
    ]
    if bonuses:
        details.append(", ".join(bonuses))
    if race.speed > 0:
        details.append(f"{race.speed}ft")
    if race.starting_proficiencies:
        details.append(f"{len(race.starting_proficiencies)} prof")
    if not details:
        return NO_TRAITS_DESCRIPTION
    return _truncate(" • ".join(details), limit)


def summarize_class(character_class: CharacterClass) -> str:
    """One-line class summary: primary abilities, hit die and feature preview."""
    parts: list[str] = []
    if character_class.primary_abilities:
        primary = " & ".join(ability.value for ability in character_class.primary_abilities)
        parts.append(f"{primary} primary")
    parts.append(f"Hit Die: d{character_class.hit_die}")
    preview = CLASS_FEATURE_PREVIEWS.get(character_class.key, "")
    if preview:
        parts.append(preview)
    return " • ".join(parts)


class FlowBuilder:
    """Computes the creation steps a character still has ahead.

    Example:
        >>> builder = FlowBuilder(InMemoryRulesProvider.from_srd())
        >>> [step.type for step in builder.build_flow(Character())][:2]
        [<StepType.RACE_SELECTION: 'race_selection'>, <StepType.CLASS_SELECTION: 'class_selection'>]
    """

    def __init__(
        self,
        rules: RulesProvider | None = None,
        settings: CreationSettings | None = None,
    ) -> None:
        """Initialize the builder.

        Args:
            rules: Rules provider; None builds steps without options.
            settings: Creation settings; defaults to the application settings.
        """
        self._rules = rules
        self._settings = settings or get_settings().creation

    @property
    def rules(self) -> RulesProvider | None:
        """The rules provider, or None in degraded mode."""
        return self._rules

    def build_flow(self, character: Character) -> list[CreationStep]:
        """Build the ordered step list for a snapshot.

        Args:
            character: Current character state, not modified.

        Returns:
            Steps in the order they should be completed.

        Raises:
            RulesDataError: If races or classes cannot be listed.
        """
        steps: list[CreationStep] = []

        if character.race is None:
            steps.append(self._race_step())
        if character.character_class is None:
            steps.append(self._class_step())

        if character.race is None or character.character_class is None:
            return steps

        steps.append(
            CreationStep(
                type=StepType.ABILITY_SCORES,
                title="Roll Ability Scores",
                description="Generate your character's six ability scores.",
                min_choices=0,
                max_choices=ABILITY_ROLL_COUNT,
                context={"expression": ABILITY_ROLL_EXPRESSION, "count": ABILITY_ROLL_COUNT},
            )
        )
        if not character.attributes:
            steps.append(self._ability_assignment_step(character))

        builder = CLASS_STEP_BUILDERS.get(character.class_key)
        if builder is not None:
            steps.extend(builder(self, character))

        if character.attributes:
            steps.extend(self._tail_steps(character))

        return steps

    # -------------------------------------------------------------------------
    # Race and class
    # -------------------------------------------------------------------------

    def _race_step(self) -> CreationStep:
        step = CreationStep(
            type=StepType.RACE_SELECTION,
            title="Choose Your Race",
            description="Select your character's race, which determines starting abilities and traits.",
            min_choices=1,
            max_choices=1,
        )
        if self._rules is None:
            return step

        try:
            refs = self._rules.list_races()
        except ChargenError as exc:
            raise wrap_error(exc, "Failed to fetch races", operation="build_flow") from exc
        except Exception as exc:
            raise RulesDataError(f"Failed to fetch races: {exc}", resource="races") from exc

        races = self._fetch_races([ref.key for ref in refs])
        options = [
            CreationOption(
                key=race.key,
                name=race.name,
                description=summarize_race(race, self._settings.description_max_length),
                metadata={
                    "bonuses": [
                        f"{bonus.attribute.value} +{bonus.bonus}"
                        for bonus in race.ability_bonuses
                        if bonus.bonus > 0
                    ],
                    "speed": race.speed,
                },
            )
            for race in races
        ]
        step.options = sorted(options, key=lambda option: option.name)
        return step

    def _fetch_races(self, keys: list[str]) -> list[Race]:
        """Fetch race details concurrently, skipping failures."""
        if not keys or self._rules is None:
            return []

        rules = self._rules
        workers = self._settings.race_fetch_workers or len(keys)
        races: list[Race] = []
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="race-fetch") as pool:
            futures = {pool.submit(rules.get_race, key): key for key in keys}
            for future in as_completed(futures):
                try:
                    races.append(future.result())
                except Exception as exc:
                    logger.warning("Failed to fetch race details", race=futures[future], error=str(exc))
        return races

    def _class_step(self) -> CreationStep:
        step = CreationStep(
            type=StepType.CLASS_SELECTION,
            title="Choose Your Class",
            description="Select your character's class, which determines abilities, proficiencies, and features.",
            min_choices=1,
            max_choices=1,
        )
        if self._rules is None:
            return step

        try:
            refs = self._rules.list_classes()
        except ChargenError as exc:
            raise wrap_error(exc, "Failed to fetch classes", operation="build_flow") from exc
        except Exception as exc:
            raise RulesDataError(f"Failed to fetch classes: {exc}", resource="classes") from exc

        for ref in refs:
            try:
                character_class = self._rules.get_class(ref.key)
            except ChargenError as exc:
                logger.warning("Failed to fetch class details", character_class=ref.key, error=str(exc))
                continue
            step.options.append(
                CreationOption(
                    key=character_class.key,
                    name=character_class.name,
                    description=summarize_class(character_class),
                )
            )
        return step

    # -------------------------------------------------------------------------
    # Abilities
    # -------------------------------------------------------------------------

    def _ability_assignment_step(self, character: Character) -> CreationStep:
        return CreationStep(
            type=StepType.ABILITY_ASSIGNMENT,
            title="Assign Ability Scores",
            description="Assign your rolled scores to the six abilities.",
            options=[
                CreationOption(key=roll.id, name=str(roll.value))
                for roll in character.ability_rolls
            ],
            min_choices=ABILITY_ROLL_COUNT,
            max_choices=ABILITY_ROLL_COUNT,
            context={
                "abilities": ["STR", "DEX", "CON", "INT", "WIS", "CHA"],
                "racial_bonuses": {
                    bonus.attribute.value: bonus.bonus
                    for bonus in (character.race.ability_bonuses if character.race else [])
                },
            },
        )

    # -------------------------------------------------------------------------
    # Spells
    # -------------------------------------------------------------------------

    def _spell_options(self, class_key: str, levels: range) -> list[CreationOption]:
        """Spell options for a class, empty when the provider fails."""
        if self._rules is None:
            return []
        options: list[CreationOption] = []
        for level in levels:
            try:
                spells = self._rules.list_spells_by_class_and_level(class_key, level)
            except Exception as exc:
                logger.warning(
                    "Failed to fetch spells",
                    character_class=class_key,
                    spell_level=level,
                    error=str(exc),
                )
                continue
            description = "Cantrip" if level == 0 else f"{_ordinal(level)} level spell"
            options.extend(
                CreationOption(
                    key=spell.key,
                    name=spell.name,
                    description=spell.description or description,
                    metadata={"level": spell.level, "school": spell.school},
                )
                for spell in spells
            )
        return options

    def cantrip_step(self, character: Character) -> CreationStep:
        """Cantrip selection sized from the class cantrip table.

        Args:
            character: Snapshot with a class selected.

        Returns:
            A step requiring exactly the number of cantrips the class knows
            at its level, with options from the class spell list (empty when
            the rules provider cannot list spells).
        """
        class_key = character.class_key
        count = cantrips_known(class_key, character.level)
        class_name = character.character_class.name.lower() if character.character_class else class_key
        return CreationStep(
            type=StepType.CANTRIPS_SELECTION,
            title="Choose Your Cantrips",
            description=(
                "Cantrips are simple spells you can cast at will. "
                f"Choose {count} cantrips from the {class_name} spell list."
            ),
            options=self._spell_options(class_key, range(0, 1)),
            min_choices=count,
            max_choices=count,
            ui_hints=UIHints(layout="grid", color=CLASS_COLORS.get(class_key)),
        )

    def spells_known_step(self, character: Character) -> CreationStep:
        """Spells-known selection for bards, sorcerers, warlocks and rangers.

        Args:
            character: Snapshot with a class selected.

        Returns:
            A step requiring exactly the class spells-known count, offering
            spells from 1st level up to the highest slot level available.
        """
        class_key = character.class_key
        count = spells_known(class_key, character.level)
        top = max(1, max_spell_level(class_key, character.level))
        class_name = character.character_class.name if character.character_class else class_key
        return CreationStep(
            type=StepType.SPELLS_KNOWN_SELECTION,
            title="Choose Your Spells",
            description=(
                f"{class_name}s know a limited number of spells. "
                f"Choose {count} spells of up to {_ordinal(top)} level from the "
                f"{class_name.lower()} spell list."
            ),
            options=self._spell_options(class_key, range(1, top + 1)),
            min_choices=count,
            max_choices=count,
            context={"max_spell_level": top},
            ui_hints=UIHints(color=CLASS_COLORS.get(class_key)),
        )

    def spellbook_step(self, character: Character) -> CreationStep:
        """Initial wizard spellbook: six spells plus two per level past 1st."""
        count = wizard_spellbook_size(character.level)
        top = max(1, max_spell_level("wizard", character.level))
        return CreationStep(
            type=StepType.SPELLBOOK_SELECTION,
            title="Fill Your Spellbook",
            description=(
                "Your spellbook contains all the spells you know. "
                f"Choose {count} spells of up to {_ordinal(top)} level to start with."
            ),
            options=self._spell_options("wizard", range(1, top + 1)),
            min_choices=count,
            max_choices=count,
            context={"max_spell_level": top},
            ui_hints=UIHints(color=CLASS_COLORS.get("wizard")),
        )

    # -------------------------------------------------------------------------
    # Class features
    # -------------------------------------------------------------------------

    def fighting_style_step(self, character: Character) -> CreationStep:
        """One fighting style from the list the class may take."""
        return CreationStep(
            type=StepType.FIGHTING_STYLE_SELECTION,
            title="Choose Your Fighting Style",
            description="Choose a fighting style that defines your combat technique.",
            options=_catalog_options(fighting_styles_for_class(character.class_key)),
            min_choices=1,
            max_choices=1,
            context={"color": 0xE74C3C, "placeholder": "Make your selection..."},
        )

    def divine_domain_steps(self, character: Character) -> list[CreationStep]:
        """Divine domain step, plus skill and language picks for Knowledge.

        The extra steps only appear once the stored domain feature says
        ``knowledge``.
        """
        steps = [
            CreationStep(
                type=StepType.DIVINE_DOMAIN_SELECTION,
                title="Choose Your Divine Domain",
                description=(
                    "Choose one domain related to your deity. "
                    "Your choice grants you domain spells and other features."
                ),
                options=_catalog_options(DIVINE_DOMAINS),
                min_choices=1,
                max_choices=1,
                context={"color": DIVINE_DOMAIN_COLOR, "placeholder": "Make your selection..."},
            )
        ]

        domain = character.get_feature(FeatureKind.DIVINE_DOMAIN)
        if domain is None or domain.domain != KNOWLEDGE_DOMAIN:
            return steps

        steps.append(
            CreationStep(
                type=StepType.SKILL_SELECTION,
                title="Choose Knowledge Domain Skills",
                description=(
                    f"As a Knowledge domain cleric, choose {KNOWLEDGE_DOMAIN_PICKS} "
                    "additional skill proficiencies."
                ),
                options=_catalog_options(KNOWLEDGE_DOMAIN_SKILLS),
                min_choices=KNOWLEDGE_DOMAIN_PICKS,
                max_choices=KNOWLEDGE_DOMAIN_PICKS,
                context={"source": "knowledge_domain", "color": 0x9B59B6},
            )
        )
        steps.append(
            CreationStep(
                type=StepType.LANGUAGE_SELECTION,
                title="Choose Knowledge Domain Languages",
                description=(
                    f"As a Knowledge domain cleric, choose {KNOWLEDGE_DOMAIN_PICKS} "
                    "additional languages."
                ),
                options=_catalog_options(KNOWLEDGE_DOMAIN_LANGUAGES),
                min_choices=KNOWLEDGE_DOMAIN_PICKS,
                max_choices=KNOWLEDGE_DOMAIN_PICKS,
                context={"source": "knowledge_domain", "color": 0xE67E22},
            )
        )
        return steps

    def ranger_feature_steps(self) -> list[CreationStep]:
        """Favored enemy and favored terrain steps."""
        return [
            CreationStep(
                type=StepType.FAVORED_ENEMY_SELECTION,
                title="Choose Your Favored Enemy",
                description="Choose the type of creature you have dedicated yourself to hunting.",
                options=_catalog_options(FAVORED_ENEMIES),
                min_choices=1,
                max_choices=1,
            ),
            CreationStep(
                type=StepType.NATURAL_EXPLORER_SELECTION,
                title="Choose Your Favored Terrain",
                description="Choose the terrain where you feel most at home.",
                options=_catalog_options(FAVORED_TERRAINS),
                min_choices=1,
                max_choices=1,
            ),
        ]

    def expertise_step(self, character: Character) -> CreationStep:
        """Expertise over skills the class can be proficient in."""
        options: dict[str, CreationOption] = {}
        for proficiency in character.proficiencies.get(ProficiencyCategory.SKILL, []):
            options[proficiency.key] = CreationOption(key=proficiency.key, name=proficiency.name)
        if character.character_class is not None:
            for choice in character.character_class.proficiency_choices:
                if choice is None:
                    continue
                for option in choice.options:
                    if isinstance(option, ReferenceOption) and option.reference and option.reference.key:
                        reference = option.reference
                        options.setdefault(
                            reference.key,
                            CreationOption(key=reference.key, name=reference.name or reference.key),
                        )
        if character.class_key == "rogue":
            options.setdefault(
                "thieves-tools", CreationOption(key="thieves-tools", name="Thieves' Tools")
            )

        return CreationStep(
            type=StepType.EXPERTISE_SELECTION,
            title="Choose Your Expertise",
            description=(
                "Your proficiency bonus is doubled for ability checks using these skills. "
                f"Choose {EXPERTISE_PICKS} skills you are proficient with."
            ),
            options=list(options.values()),
            min_choices=EXPERTISE_PICKS,
            max_choices=EXPERTISE_PICKS,
            ui_hints=UIHints(color=CLASS_COLORS.get(character.class_key)),
        )

    def subclass_step(self, character: Character, step_type: StepType) -> CreationStep:
        """Subclass selection under the name the class gives it.

        Args:
            character: Snapshot with a class selected.
            step_type: ``SORCEROUS_ORIGIN_SELECTION``, ``PATRON_SELECTION``
                or ``SUBCLASS_SELECTION`` (wizard arcane tradition).

        Returns:
            A single-choice step over the class subclass catalogue.

        Raises:
            KeyError: If ``step_type`` is not a subclass step type.
        """
        titles = {
            StepType.SORCEROUS_ORIGIN_SELECTION: (
                "Choose Your Sorcerous Origin",
                "Choose the source of your innate magical power.",
            ),
            StepType.PATRON_SELECTION: (
                "Choose Your Otherworldly Patron",
                "Choose the otherworldly being that has granted you power.",
            ),
            StepType.SUBCLASS_SELECTION: (
                "Choose Your Arcane Tradition",
                "At 2nd level, you choose an arcane tradition, shaping your practice of magic.",
            ),
        }
        title, description = titles[step_type]
        return CreationStep(
            type=step_type,
            title=title,
            description=description,
            options=_catalog_options(SUBCLASSES.get(character.class_key, ())),
            min_choices=1,
            max_choices=1,
            ui_hints=UIHints(layout="grid", color=CLASS_COLORS.get(character.class_key)),
        )

    # -------------------------------------------------------------------------
    # Tail
    # -------------------------------------------------------------------------

    def _tail_steps(self, character: Character) -> list[CreationStep]:
        proficiency_choices = resolve_proficiency_choices(character.race, character.character_class)
        equipment_choices = resolve_equipment_choices(character.character_class)
        return [
            CreationStep(
                type=StepType.PROFICIENCY_SELECTION,
                title="Choose Proficiencies",
                description="Select your character's skill and tool proficiencies.",
                context={"choices": [choice.model_dump() for choice in proficiency_choices]},
            ),
            CreationStep(
                type=StepType.EQUIPMENT_SELECTION,
                title="Choose Equipment",
                description="Select your starting equipment and gear.",
                context={"choices": [choice.model_dump() for choice in equipment_choices]},
            ),
            CreationStep(
                type=StepType.CHARACTER_DETAILS,
                title="Character Details",
                description="Choose your character's name and other details.",
                min_choices=1,
                max_choices=1,
            ),
        ]


# =============================================================================
# Class Step Builders
# =============================================================================


def _cleric_steps(builder: FlowBuilder, character: Character) -> list[CreationStep]:
    return builder.divine_domain_steps(character)


def _fighter_steps(builder: FlowBuilder, character: Character) -> list[CreationStep]:
    return [builder.fighting_style_step(character)]


def _paladin_steps(builder: FlowBuilder, character: Character) -> list[CreationStep]:
    if character.level < 2:
        return []
    return [builder.fighting_style_step(character)]


def _ranger_steps(builder: FlowBuilder, character: Character) -> list[CreationStep]:
    steps = builder.ranger_feature_steps()
    if character.level >= 2:
        steps.append(builder.fighting_style_step(character))
        steps.append(builder.spells_known_step(character))
    return steps


def _bard_steps(builder: FlowBuilder, character: Character) -> list[CreationStep]:
    steps = [builder.cantrip_step(character), builder.spells_known_step(character)]
    if character.level >= 3:
        steps.append(builder.expertise_step(character))
    return steps


def _druid_steps(builder: FlowBuilder, character: Character) -> list[CreationStep]:
    return [builder.cantrip_step(character)]


def _rogue_steps(builder: FlowBuilder, character: Character) -> list[CreationStep]:
    return [builder.expertise_step(character)]


def _sorcerer_steps(builder: FlowBuilder, character: Character) -> list[CreationStep]:
    return [
        builder.subclass_step(character, StepType.SORCEROUS_ORIGIN_SELECTION),
        builder.cantrip_step(character),
        builder.spells_known_step(character),
    ]


def _warlock_steps(builder: FlowBuilder, character: Character) -> list[CreationStep]:
    return [
        builder.subclass_step(character, StepType.PATRON_SELECTION),
        builder.cantrip_step(character),
        builder.spells_known_step(character),
    ]


def _wizard_steps(builder: FlowBuilder, character: Character) -> list[CreationStep]:
    steps = [builder.cantrip_step(character), builder.spellbook_step(character)]
    if character.level >= 2:
        steps.append(builder.subclass_step(character, StepType.SUBCLASS_SELECTION))
    return steps


CLASS_STEP_BUILDERS: dict[str, ClassStepBuilder] = {
    "cleric": _cleric_steps,
    "fighter": _fighter_steps,
    "paladin": _paladin_steps,
    "ranger": _ranger_steps,
    "bard": _bard_steps,
    "druid": _druid_steps,
    "rogue": _rogue_steps,
    "sorcerer": _sorcerer_steps,
    "warlock": _warlock_steps,
    "wizard": _wizard_steps,
}
"""Class key to class-specific step builder. Classes without an entry get no class steps."""


def build_flow(character: Character, rules: RulesProvider | None = None) -> list[CreationStep]:
    """Build the flow for a snapshot with a throwaway builder."""
    return FlowBuilder(rules).build_flow(character)


__all__ = [
    "FlowBuilder",
    "CLASS_STEP_BUILDERS",
    "build_flow",
    "summarize_race",
    "summarize_class",
]
