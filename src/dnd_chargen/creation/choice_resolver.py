"""Flatten rules-data choice trees into flat, UI-safe option lists.

A class or race choice is a tree of references, counted references,
bundles (items granted together) and nested choices (a further
decision). The presentation layer can only show one flat list per
choice, so:

* references become one option each, described from the weapon and
  armor tables;
* counted references are named ``"{count}x {name}"``;
* bundles become one option whose name joins the item names, keyed
  ``bundle-{index}`` when the rules data gives no key;
* nested choices become a ``nested-{index}`` placeholder the player
  resolves later, with any concrete bundle siblings kept in
  ``bundle_item_keys``.

Everything here is pure: no provider calls, no mutation of the input.
"""

from __future__ import annotations

from typing import assert_never

from dnd_chargen.core.constants import BUNDLE_OPTION_PREFIX, NESTED_OPTION_PREFIX
from dnd_chargen.core.exceptions import ValidationError
from dnd_chargen.core.logging import get_logger
from dnd_chargen.models.creation import ChoiceOption, SimplifiedChoice
from dnd_chargen.models.enums import ChoiceType
from dnd_chargen.models.rules import (
    CharacterClass,
    Choice,
    CountedReferenceOption,
    MultipleOption,
    Option,
    Race,
    ReferenceOption,
)
from dnd_chargen.rules.static_data import MONK_TOOL_OPTIONS, equipment_description


logger = get_logger(__name__)


def join_names(names: list[str]) -> str:
    """Join display names the way a sentence lists them.

    Example:
        >>> join_names(["A", "B"])
        'A and B'
        >>> join_names(["A", "B", "C"])
        'A, B, and C'
    """
    if not names:
        return ""
    if len(names) == 1:
        return names[0]
    if len(names) == 2:
        return f"{names[0]} and {names[1]}"
    return f"{', '.join(names[:-1])}, and {names[-1]}"


# =============================================================================
# Option Flattening
# =============================================================================


def _reference_option(option: ReferenceOption | CountedReferenceOption) -> ChoiceOption | None:
    reference = option.reference
    if reference is None or not reference.key or not reference.name:
        return None
    name = reference.name
    if isinstance(option, CountedReferenceOption):
        name = f"{option.count}x {reference.name}"
    return ChoiceOption(
        key=reference.key,
        name=name,
        description=equipment_description(reference.key, reference.name),
    )


def _nested_placeholder(choice: Choice, index: int) -> ChoiceOption | None:
    if not choice.name:
        return None
    return ChoiceOption(
        key=f"{NESTED_OPTION_PREFIX}{index}",
        name=choice.name,
        description=f"Choose {choice.count} from {choice.name}",
    )


def _first_nested_choice(bundle: MultipleOption) -> Choice | None:
    """The first named sub-choice in a bundle, searching inner bundles too."""
    for item in bundle.items:
        match item:
            case Choice() if item.name:
                return item
            case MultipleOption():
                found = _first_nested_choice(item)
                if found is not None:
                    return found
            case _:
                continue
    return None


def _bundle_option(bundle: MultipleOption, index: int) -> ChoiceOption | None:
    """Flatten a bundle, or turn it into a placeholder if it hides a choice.

    Inner bundles are merged into the outer one: their item keys join the
    outer item keys, and a sub-choice anywhere inside makes the whole
    bundle a placeholder.
    """
    item_keys: list[str] = []
    names: list[str] = []
    descriptions: list[str] = []

    for item in bundle.items:
        match item:
            case None:
                continue
            case ReferenceOption() | CountedReferenceOption():
                flattened = _reference_option(item)
                if flattened is not None:
                    item_keys.append(flattened.key)
                    names.append(flattened.name)
                    if flattened.description:
                        descriptions.append(f"{flattened.name}: {flattened.description}")
            case Choice():
                if item.name:
                    names.append(item.name)
            case MultipleOption():
                inner = _bundle_option(item, index)
                if inner is not None:
                    item_keys.extend(inner.bundle_item_keys)
                    names.append(inner.name)
                    if inner.description and not inner.is_nested:
                        descriptions.append(inner.description)
            case _:
                assert_never(item)

    if not names:
        return None

    nested = _first_nested_choice(bundle)
    if nested is not None:
        return ChoiceOption(
            key=f"{NESTED_OPTION_PREFIX}{index}",
            name=bundle.name or join_names(names),
            description=f"Choose {nested.count} {nested.name}",
            bundle_item_keys=item_keys,
        )

    return ChoiceOption(
        key=bundle.key or f"{BUNDLE_OPTION_PREFIX}{index}",
        name=join_names(names),
        description="; ".join(descriptions),
        bundle_item_keys=item_keys,
    )


def flatten_options(options: list[Option | None]) -> list[ChoiceOption]:
    """Flatten one level of a choice tree.

    Invalid entries (None, missing references, empty keys or names) and
    empty bundles are dropped.

    Args:
        options: The option list of a Choice.

    Returns:
        Flat options in source order.
    """
    result: list[ChoiceOption] = []
    for index, option in enumerate(options):
        flattened: ChoiceOption | None
        match option:
            case None:
                continue
            case ReferenceOption() | CountedReferenceOption():
                flattened = _reference_option(option)
            case MultipleOption():
                flattened = _bundle_option(option, index)
            case Choice():
                flattened = _nested_placeholder(option, index)
            case _:
                assert_never(option)
        if flattened is not None:
            result.append(flattened)
    return result


def _simplify(
    choice: Choice | None,
    choice_id: str,
    *,
    description: str,
    choice_type: str,
) -> SimplifiedChoice | None:
    if choice is None or not choice.options:
        return None
    options = flatten_options(choice.options)
    if not options:
        logger.debug("Dropping choice without valid options", choice_id=choice_id)
        return None
    return SimplifiedChoice(
        id=choice_id,
        name=choice.name,
        description=description,
        type=choice_type,
        choose_count=choice.count,
        options=options,
    )


def _monk_tool_choice(choice_id: str) -> SimplifiedChoice:
    return SimplifiedChoice(
        id=choice_id,
        name="Tools or Instrument",
        description="Choose 1 artisan's tool or musical instrument",
        type=ChoiceType.TOOL.value,
        choose_count=1,
        options=[ChoiceOption(key=entry.key, name=entry.name) for entry in MONK_TOOL_OPTIONS],
    )


def _is_monk_tool_choice(class_key: str, index: int, choice: Choice) -> bool:
    return (
        class_key == "monk"
        and index == 1
        and any(isinstance(option, Choice) for option in choice.options)
    )


# =============================================================================
# Public API
# =============================================================================


def resolve_proficiency_choices(
    race: Race | None, character_class: CharacterClass | None
) -> list[SimplifiedChoice]:
    """Resolve class and racial proficiency choices.

    Class choices come first, ids ``{class}-prof-{index}``; the racial
    choice, if any, follows with id ``{race}-prof``.

    Args:
        race: Selected race, may be None.
        character_class: Selected class, may be None.

    Returns:
        Choices with at least one option each.
    """
    choices: list[SimplifiedChoice] = []

    if character_class is not None:
        for index, choice in enumerate(character_class.proficiency_choices):
            if choice is None or not choice.options:
                continue
            choice_id = f"{character_class.key}-prof-{index}"
            if _is_monk_tool_choice(character_class.key, index, choice):
                choices.append(_monk_tool_choice(choice_id))
                continue
            simplified = _simplify(
                choice,
                choice_id,
                description=f"Choose {choice.count}",
                choice_type=choice.type.value,
            )
            if simplified is not None:
                choices.append(simplified)

    if race is not None and race.starting_proficiency_options is not None:
        racial = race.starting_proficiency_options
        simplified = _simplify(
            racial,
            f"{race.key}-prof",
            description=f"Choose {racial.count} racial proficiency",
            choice_type=racial.type.value,
        )
        if simplified is not None:
            choices.append(simplified)

    return choices


def resolve_equipment_choices(character_class: CharacterClass | None) -> list[SimplifiedChoice]:
    """Resolve a class's starting equipment choices.

    Returns:
        Choices with ids ``{class}-equip-{index}``, never with empty options.
    """
    if character_class is None:
        return []

    choices: list[SimplifiedChoice] = []
    for index, choice in enumerate(character_class.starting_equipment_choices):
        simplified = _simplify(
            choice,
            f"{character_class.key}-equip-{index}",
            description=f"Choose {choice.count}" if choice else "",
            choice_type=ChoiceType.EQUIPMENT.value,
        )
        if simplified is not None:
            choices.append(simplified)
    return choices


def validate_proficiency_selections(
    race: Race | None,
    character_class: CharacterClass | None,
    selections: list[str],
) -> None:
    """Check that every selection is an option of some proficiency choice.

    Raises:
        ValidationError: On the first unknown selection.
    """
    valid = {
        key
        for choice in resolve_proficiency_choices(race, character_class)
        for key in choice.option_keys()
    }
    for selection in selections:
        if selection not in valid:
            raise ValidationError(
                f"Invalid proficiency selection: {selection}",
                field_name="selections",
                invalid_value=selection,
            )


__all__ = [
    "join_names",
    "flatten_options",
    "resolve_proficiency_choices",
    "resolve_equipment_choices",
    "validate_proficiency_selections",
]
