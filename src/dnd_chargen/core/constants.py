"""Application-wide constants for the character creation engine.

D&D 5E rules constants and display values shared by the creation flow,
the finalizer and the rules catalogues.
"""

from __future__ import annotations

# =============================================================================
# Ability Scores
# =============================================================================

ABILITY_ROLL_COUNT = 6
"""Number of ability rolls a character needs before assignment."""

ABILITY_ROLL_EXPRESSION = "4d6kh3"
"""Standard ability roll: four six-sided dice, keep the highest three (PHB p.13)."""

ROLL_ID_PREFIX = "roll_"
"""Prefix of generated roll ids (roll_1 .. roll_6)."""

# =============================================================================
# Derived Statistics
# =============================================================================

BASE_ARMOR_CLASS = 10
"""Armor class of an unarmored creature before modifiers."""

SHIELD_AC_BONUS = 2
"""Armor class granted by a shield."""

DEFENSE_STYLE_AC_BONUS = 1
"""Armor class granted by the Defense fighting style while wearing armor."""

DEFAULT_SPEED = 30
"""Walking speed for races that do not override it."""

DEFAULT_HIT_DIE = 8
"""Hit die used when a class does not declare one."""

# =============================================================================
# Creation Flow
# =============================================================================

KNOWLEDGE_DOMAIN = "knowledge"
"""Divine domain that grants bonus skills and languages."""

KNOWLEDGE_DOMAIN_PICKS = 2
"""Bonus skills and languages chosen by a Knowledge domain cleric."""

EXPERTISE_PICKS = 2
"""Skills chosen for Expertise at the level it is gained."""

DIVINE_DOMAIN_COLOR = 0xF1C40F
"""Accent color hint for the divine domain step."""

DESCRIPTION_ELLIPSIS = "..."
"""Suffix appended to truncated option summaries."""

NO_TRAITS_DESCRIPTION = "No special traits"
"""Summary shown for a race with no bonuses, speed or proficiencies."""

SPELLCASTING_CLASSES = frozenset(
    {
        "wizard",
        "cleric",
        "sorcerer",
        "warlock",
        "bard",
        "druid",
        "paladin",
        "ranger",
        "artificer",
    }
)
"""Classes that get a spell list container when selected."""

NESTED_OPTION_PREFIX = "nested-"
"""Key prefix of placeholder options standing in for unexpanded sub-choices."""

BUNDLE_OPTION_PREFIX = "bundle-"
"""Key prefix of positional keys given to bundles the rules data leaves unkeyed."""
