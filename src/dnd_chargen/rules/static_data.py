"""Static Player's Handbook catalogues used by the creation flow.

These tables cover choices the SRD API does not model (fighting styles,
divine domains, favored enemies and terrains, subclasses) plus the
class-and-level spell tables and display descriptions for common weapons
and armor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CatalogEntry:
    """A selectable entry of a static catalogue.

    Attributes:
        key: Stable identifier stored on the character.
        name: Display name.
        description: One-line rules summary.
        classes: Classes the entry is available to (empty for all).
        metadata: Extra data surfaced on the step option.
    """

    key: str
    name: str
    description: str
    classes: tuple[str, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ArmorStats:
    """Armor class contribution of a suit of armor."""

    base: int
    category: str
    max_dex_bonus: int | None = None
    adds_dex: bool = True


# =============================================================================
# Class Feature Choices
# =============================================================================

FIGHTING_STYLES: tuple[CatalogEntry, ...] = (
    CatalogEntry(
        "archery",
        "Archery",
        "You gain a +2 bonus to attack rolls you make with ranged weapons.",
        ("fighter", "ranger"),
    ),
    CatalogEntry(
        "defense",
        "Defense",
        "While you are wearing armor, you gain a +1 bonus to AC.",
        ("fighter", "ranger", "paladin"),
    ),
    CatalogEntry(
        "dueling",
        "Dueling",
        "+2 damage when wielding a melee weapon in one hand with no other weapons.",
        ("fighter", "ranger", "paladin"),
    ),
    CatalogEntry(
        "great_weapon_fighting",
        "Great Weapon Fighting",
        "Reroll 1-2 on damage dice with two-handed or versatile weapons.",
        ("fighter", "paladin"),
    ),
    CatalogEntry(
        "protection",
        "Protection",
        "Use reaction with shield to impose disadvantage on an attack near you.",
        ("fighter", "paladin"),
    ),
    CatalogEntry(
        "two_weapon_fighting",
        "Two-Weapon Fighting",
        "Add ability modifier to off-hand weapon damage.",
        ("fighter", "ranger"),
    ),
)

DIVINE_DOMAINS: tuple[CatalogEntry, ...] = (
    CatalogEntry(
        "knowledge",
        "Knowledge Domain",
        "The gods of knowledge value learning and understanding above all. "
        "You gain proficiency in two skills and languages.",
        metadata={
            "domain_spells": {
                1: ["command", "identify"],
                3: ["augury", "suggestion"],
                5: ["nondetection", "speak-with-dead"],
                7: ["arcane-eye", "confusion"],
                9: ["legend-lore", "scrying"],
            }
        },
    ),
    CatalogEntry(
        "life",
        "Life Domain",
        "The Life domain focuses on the vibrant positive energy that sustains all life. "
        "You gain heavy armor proficiency and improved healing.",
        metadata={
            "domain_spells": {
                1: ["bless", "cure-wounds"],
                3: ["lesser-restoration", "spiritual-weapon"],
                5: ["beacon-of-hope", "revivify"],
                7: ["death-ward", "guardian-of-faith"],
                9: ["mass-cure-wounds", "raise-dead"],
            }
        },
    ),
    CatalogEntry(
        "light",
        "Light Domain",
        "Gods of light promote the ideals of rebirth, renewal, truth, vigilance, and beauty. "
        "You gain the light cantrip and defensive abilities.",
        metadata={
            "domain_spells": {
                1: ["burning-hands", "faerie-fire"],
                3: ["flaming-sphere", "scorching-ray"],
                5: ["daylight", "fireball"],
                7: ["guardian-of-faith", "wall-of-fire"],
                9: ["flame-strike", "scrying"],
            }
        },
    ),
    CatalogEntry(
        "nature",
        "Nature Domain",
        "Gods of nature are as varied as the natural world itself. "
        "You gain a druid cantrip and proficiency with heavy armor.",
        metadata={
            "domain_spells": {
                1: ["animal-friendship", "speak-with-animals"],
                3: ["barkskin", "spike-growth"],
                5: ["plant-growth", "wind-wall"],
                7: ["dominate-beast", "grasping-vine"],
                9: ["insect-plague", "tree-stride"],
            }
        },
    ),
    CatalogEntry(
        "tempest",
        "Tempest Domain",
        "Gods of the tempest govern storms, sea, and sky. "
        "You gain proficiency with martial weapons and heavy armor.",
        metadata={
            "domain_spells": {
                1: ["fog-cloud", "thunderwave"],
                3: ["gust-of-wind", "shatter"],
                5: ["call-lightning", "sleet-storm"],
                7: ["control-water", "ice-storm"],
                9: ["destructive-wave", "insect-plague"],
            }
        },
    ),
    CatalogEntry(
        "trickery",
        "Trickery Domain",
        "Gods of trickery are mischief-makers and instigators. "
        "You can use your Channel Divinity to create an illusory duplicate.",
        metadata={
            "domain_spells": {
                1: ["charm-person", "disguise-self"],
                3: ["mirror-image", "pass-without-trace"],
                5: ["blink", "dispel-magic"],
                7: ["dimension-door", "polymorph"],
                9: ["dominate-person", "modify-memory"],
            }
        },
    ),
    CatalogEntry(
        "war",
        "War Domain",
        "Gods of war watch over warriors and reward acts of violence. "
        "You gain proficiency with martial weapons and heavy armor.",
        metadata={
            "domain_spells": {
                1: ["divine-favor", "shield-of-faith"],
                3: ["magic-weapon", "spiritual-weapon"],
                5: ["crusaders-mantle", "spirit-guardians"],
                7: ["freedom-of-movement", "stoneskin"],
                9: ["flame-strike", "hold-monster"],
            }
        },
    ),
)

KNOWLEDGE_DOMAIN_SKILLS: tuple[CatalogEntry, ...] = (
    CatalogEntry("arcana", "Arcana", "Your knowledge of magic and magical theory"),
    CatalogEntry("history", "History", "Your knowledge of historical events and lore"),
    CatalogEntry("nature", "Nature", "Your knowledge of the natural world"),
    CatalogEntry("religion", "Religion", "Your knowledge of deities and religious practices"),
)

KNOWLEDGE_DOMAIN_LANGUAGES: tuple[CatalogEntry, ...] = (
    CatalogEntry("draconic", "Draconic", "The language of dragons and dragonborn"),
    CatalogEntry("elvish", "Elvish", "The language of elves"),
    CatalogEntry("dwarvish", "Dwarvish", "The language of dwarves"),
    CatalogEntry("celestial", "Celestial", "The language of celestials"),
    CatalogEntry("abyssal", "Abyssal", "The language of demons"),
    CatalogEntry("infernal", "Infernal", "The language of devils"),
)

FAVORED_ENEMIES: tuple[CatalogEntry, ...] = (
    CatalogEntry("aberrations", "Aberrations", "Beholders, mind flayers, etc."),
    CatalogEntry("beasts", "Beasts", "Bears, wolves, dire animals"),
    CatalogEntry("celestials", "Celestials", "Angels, pegasi, unicorns"),
    CatalogEntry("constructs", "Constructs", "Golems, animated objects"),
    CatalogEntry("dragons", "Dragons", "True dragons and dragonkin"),
    CatalogEntry("elementals", "Elementals", "Creatures from elemental planes"),
    CatalogEntry("fey", "Fey", "Sprites, dryads, pixies"),
    CatalogEntry("fiends", "Fiends", "Devils, demons, yugoloths"),
    CatalogEntry("giants", "Giants", "Hill giants, storm giants, ogres"),
    CatalogEntry("monstrosities", "Monstrosities", "Griffons, hydras, owlbears"),
    CatalogEntry("oozes", "Oozes", "Black puddings, gelatinous cubes"),
    CatalogEntry("plants", "Plants", "Shambling mounds, treants"),
    CatalogEntry("undead", "Undead", "Zombies, skeletons, vampires"),
    CatalogEntry("humanoids", "Two Humanoid Races", "Orcs & goblins, elves & dwarves, etc."),
)

FAVORED_TERRAINS: tuple[CatalogEntry, ...] = (
    CatalogEntry("arctic", "Arctic", "Frozen tundra and icy wastes"),
    CatalogEntry("coast", "Coast", "Beaches, cliffs, and shores"),
    CatalogEntry("desert", "Desert", "Sandy and rocky badlands"),
    CatalogEntry("forest", "Forest", "Woodlands and jungles"),
    CatalogEntry("grassland", "Grassland", "Plains, savannas, and meadows"),
    CatalogEntry("mountain", "Mountain", "Hills and peaks"),
    CatalogEntry("swamp", "Swamp", "Marshes, bogs, and fens"),
    CatalogEntry("underdark", "Underdark", "Caves and underground"),
)

SUBCLASSES: dict[str, tuple[CatalogEntry, ...]] = {
    "sorcerer": (
        CatalogEntry(
            "draconic-bloodline",
            "Draconic Bloodline",
            "Your innate magic comes from draconic magic that was mingled with your blood.",
        ),
        CatalogEntry(
            "wild-magic",
            "Wild Magic",
            "Your innate magic comes from the wild forces of chaos that underlie creation.",
        ),
    ),
    "warlock": (
        CatalogEntry(
            "archfey",
            "The Archfey",
            "Your patron is a lord or lady of the fey, a creature of legend.",
        ),
        CatalogEntry(
            "fiend",
            "The Fiend",
            "You have made a pact with a fiend from the lower planes of existence.",
        ),
        CatalogEntry(
            "great-old-one",
            "The Great Old One",
            "Your patron is a mysterious entity whose nature is utterly foreign to reality.",
        ),
    ),
    "wizard": (
        CatalogEntry("abjuration", "School of Abjuration", "Magic that blocks, banishes, or protects."),
        CatalogEntry("conjuration", "School of Conjuration", "Magic that produces objects and creatures."),
        CatalogEntry("divination", "School of Divination", "Magic that reveals information."),
        CatalogEntry("enchantment", "School of Enchantment", "Magic that affects the minds of others."),
        CatalogEntry("evocation", "School of Evocation", "Magic that creates powerful elemental effects."),
        CatalogEntry("illusion", "School of Illusion", "Magic that dazzles the senses and befuddles the mind."),
        CatalogEntry("necromancy", "School of Necromancy", "Magic that manipulates the forces of life and death."),
        CatalogEntry("transmutation", "School of Transmutation", "Magic that modifies energy and matter."),
    ),
}

# =============================================================================
# Class Summaries
# =============================================================================

CLASS_FEATURE_PREVIEWS: dict[str, str] = {
    "barbarian": "Rage, Unarmored Defense",
    "bard": "Bardic Inspiration, Spellcasting, 3 skills",
    "cleric": "Choose Domain, Spellcasting, 2 skills",
    "druid": "Druidic, Spellcasting, 2 skills",
    "fighter": "Choose Fighting Style, Second Wind, 2 skills",
    "monk": "Martial Arts, Unarmored Defense, 2 skills",
    "paladin": "Divine Sense, Lay on Hands, 2 skills",
    "ranger": "Choose Favored Enemy & Terrain, 3 skills",
    "rogue": "Sneak Attack, Expertise, 4 skills",
    "sorcerer": "Sorcerous Origin, Spellcasting, 2 skills",
    "warlock": "Otherworldly Patron, Pact Magic, 2 skills",
    "wizard": "Arcane Recovery, Spellcasting, 2 skills",
}

CLASS_COLORS: dict[str, int] = {
    "bard": 0xA855F7,
    "druid": 0x10B981,
    "rogue": 0x64748B,
    "sorcerer": 0xDC2626,
    "warlock": 0x7C3AED,
    "wizard": 0x6B46C1,
}

PRIMARY_ABILITIES: dict[str, tuple[str, ...]] = {
    "barbarian": ("STR",),
    "bard": ("CHA",),
    "cleric": ("WIS",),
    "druid": ("WIS",),
    "fighter": ("STR", "DEX"),
    "monk": ("DEX", "WIS"),
    "paladin": ("STR", "CHA"),
    "ranger": ("DEX", "WIS"),
    "rogue": ("DEX",),
    "sorcerer": ("CHA",),
    "warlock": ("CHA",),
    "wizard": ("INT",),
}
"""Primary ability codes per class (PHB class table)."""

RACE_SPEED_OVERRIDES: dict[str, int] = {
    "dwarf": 25,
    "hill-dwarf": 25,
    "mountain-dwarf": 25,
    "halfling": 25,
    "lightfoot-halfling": 25,
    "stout-halfling": 25,
    "gnome": 25,
    "rock-gnome": 25,
    "wood-elf": 35,
}

# =============================================================================
# Spell Tables (PHB class tables, index = level - 1)
# =============================================================================

CANTRIPS_KNOWN: dict[str, tuple[int, ...]] = {
    "bard": (2, 2, 2, 3, 3, 3, 3, 3, 3, 4, 4, 4, 4, 4, 4, 4, 4, 4, 4, 4),
    "druid": (2, 2, 2, 3, 3, 3, 3, 3, 3, 4, 4, 4, 4, 4, 4, 4, 4, 4, 4, 4),
    "sorcerer": (4, 4, 4, 5, 5, 5, 5, 5, 5, 6, 6, 6, 6, 6, 6, 6, 6, 6, 6, 6),
    "warlock": (2, 2, 2, 3, 3, 3, 3, 3, 3, 4, 4, 4, 4, 4, 4, 4, 4, 4, 4, 4),
    "wizard": (3, 3, 3, 4, 4, 4, 4, 4, 4, 5, 5, 5, 5, 5, 5, 5, 5, 5, 5, 5),
}

SPELLS_KNOWN: dict[str, tuple[int, ...]] = {
    "bard": (4, 5, 6, 7, 8, 9, 10, 11, 12, 14, 15, 15, 16, 18, 19, 19, 20, 22, 22, 22),
    "ranger": (0, 2, 3, 3, 4, 4, 5, 5, 6, 6, 7, 7, 8, 8, 9, 9, 10, 10, 11, 11),
    "sorcerer": (2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12, 12, 13, 13, 14, 14, 15, 15, 15, 15),
    "warlock": (2, 3, 4, 5, 6, 7, 8, 9, 10, 10, 11, 11, 12, 12, 13, 13, 14, 14, 15, 15),
}

HALF_CASTERS = frozenset({"paladin", "ranger"})

WIZARD_SPELLBOOK_BASE = 6
"""Spells in a 1st-level wizard's spellbook."""

WIZARD_SPELLS_PER_LEVEL = 2
"""Spells a wizard adds to the spellbook on each level up."""


def _table_value(table: dict[str, tuple[int, ...]], class_key: str, level: int) -> int:
    values = table.get(class_key)
    if not values:
        return 0
    index = min(max(level, 1), len(values)) - 1
    return values[index]


def cantrips_known(class_key: str, level: int) -> int:
    """Number of cantrips a class knows at a level (0 if it chooses none)."""
    return _table_value(CANTRIPS_KNOWN, class_key, level)


def spells_known(class_key: str, level: int) -> int:
    """Number of spells a known-spells caster knows at a level."""
    return _table_value(SPELLS_KNOWN, class_key, level)


def wizard_spellbook_size(level: int) -> int:
    """Number of spells in a wizard's spellbook, ignoring found scrolls."""
    return WIZARD_SPELLBOOK_BASE + WIZARD_SPELLS_PER_LEVEL * (max(level, 1) - 1)


def max_spell_level(class_key: str, level: int) -> int:
    """Highest spell slot level a class has access to at a character level.

    Returns:
        0 for classes (or levels) without leveled spells.
    """
    if class_key in HALF_CASTERS:
        if level < 2:
            return 0
        return min(5, (level - 1) // 4 + 1)
    if class_key == "warlock":
        return min(5, (level + 1) // 2)
    if class_key in CANTRIPS_KNOWN or class_key == "cleric":
        return min(9, (level + 1) // 2)
    return 0


# =============================================================================
# Equipment
# =============================================================================

WEAPON_DESCRIPTIONS: dict[str, str] = {
    "longsword": "1d8 slashing, versatile (1d10)",
    "shortsword": "1d6 piercing, finesse, light",
    "battleaxe": "1d8 slashing, versatile (1d10)",
    "handaxe": "1d6 slashing, light, thrown (20/60)",
    "warhammer": "1d8 bludgeoning, versatile (1d10)",
    "mace": "1d6 bludgeoning",
    "greataxe": "1d12 slashing, heavy, two-handed",
    "greatsword": "2d6 slashing, heavy, two-handed",
    "rapier": "1d8 piercing, finesse",
    "scimitar": "1d6 slashing, finesse, light",
    "shortbow": "1d6 piercing, range 80/320",
    "longbow": "1d8 piercing, range 150/600",
    "light-crossbow": "1d8 piercing, range 80/320",
    "dagger": "1d4 piercing, finesse, light, thrown (20/60)",
    "dart": "1d4 piercing, finesse, thrown (20/60)",
    "javelin": "1d6 piercing, thrown (30/120)",
    "quarterstaff": "1d6 bludgeoning, versatile (1d8)",
    "shield": "+2 AC",
}

ARMOR_DESCRIPTIONS: dict[str, str] = {
    "leather-armor": "11 + Dex modifier",
    "scale-mail": "14 + Dex (max 2)",
    "chain-mail": "16 AC",
    "chain-shirt": "13 + Dex (max 2)",
    "padded-armor": "11 + Dex modifier",
    "studded-leather": "12 + Dex modifier",
    "hide-armor": "12 + Dex (max 2)",
    "ring-mail": "14 AC",
    "splint-armor": "17 AC",
    "plate-armor": "18 AC",
}

ARMOR_STATS: dict[str, ArmorStats] = {
    "padded-armor": ArmorStats(11, "light"),
    "leather-armor": ArmorStats(11, "light"),
    "studded-leather": ArmorStats(12, "light"),
    "studded-leather-armor": ArmorStats(12, "light"),
    "hide-armor": ArmorStats(12, "medium", max_dex_bonus=2),
    "chain-shirt": ArmorStats(13, "medium", max_dex_bonus=2),
    "scale-mail": ArmorStats(14, "medium", max_dex_bonus=2),
    "breastplate": ArmorStats(14, "medium", max_dex_bonus=2),
    "half-plate": ArmorStats(15, "medium", max_dex_bonus=2),
    "half-plate-armor": ArmorStats(15, "medium", max_dex_bonus=2),
    "ring-mail": ArmorStats(14, "heavy", adds_dex=False),
    "chain-mail": ArmorStats(16, "heavy", adds_dex=False),
    "splint-armor": ArmorStats(17, "heavy", adds_dex=False),
    "plate-armor": ArmorStats(18, "heavy", adds_dex=False),
}

MONK_TOOL_OPTIONS: tuple[CatalogEntry, ...] = (
    CatalogEntry("alchemists-supplies", "Alchemist's Supplies", ""),
    CatalogEntry("brewers-supplies", "Brewer's Supplies", ""),
    CatalogEntry("calligraphers-supplies", "Calligrapher's Supplies", ""),
    CatalogEntry("carpenters-tools", "Carpenter's Tools", ""),
    CatalogEntry("cooks-utensils", "Cook's Utensils", ""),
    CatalogEntry("flute", "Flute", ""),
    CatalogEntry("lute", "Lute", ""),
    CatalogEntry("horn", "Horn", ""),
)
"""Curated expansion of the monk's artisan's-tool-or-instrument choice."""


def fighting_styles_for_class(class_key: str) -> list[CatalogEntry]:
    """Return the fighting styles a class may choose from."""
    return [style for style in FIGHTING_STYLES if class_key in style.classes]


def find_entry(entries: tuple[CatalogEntry, ...], key: str) -> CatalogEntry | None:
    """Look up a catalogue entry by key."""
    for entry in entries:
        if entry.key == key:
            return entry
    return None


def equipment_description(key: str, name: str = "") -> str:
    """Describe a weapon or armor for display.

    Looks up the key first, then falls back to the first table key
    contained in the lower-cased name.

    Returns:
        The description, or '' when nothing matches.
    """
    for table in (WEAPON_DESCRIPTIONS, ARMOR_DESCRIPTIONS):
        if key in table:
            return table[key]

    lowered = name.lower()
    if not lowered:
        return ""
    for table in (WEAPON_DESCRIPTIONS, ARMOR_DESCRIPTIONS):
        for table_key, description in table.items():
            if table_key.replace("-", " ") in lowered:
                return description
    return ""


__all__ = [
    "CatalogEntry",
    "ArmorStats",
    "FIGHTING_STYLES",
    "DIVINE_DOMAINS",
    "KNOWLEDGE_DOMAIN_SKILLS",
    "KNOWLEDGE_DOMAIN_LANGUAGES",
    "FAVORED_ENEMIES",
    "FAVORED_TERRAINS",
    "SUBCLASSES",
    "CLASS_FEATURE_PREVIEWS",
    "CLASS_COLORS",
    "PRIMARY_ABILITIES",
    "RACE_SPEED_OVERRIDES",
    "CANTRIPS_KNOWN",
    "SPELLS_KNOWN",
    "WEAPON_DESCRIPTIONS",
    "ARMOR_DESCRIPTIONS",
    "ARMOR_STATS",
    "MONK_TOOL_OPTIONS",
    "cantrips_known",
    "spells_known",
    "wizard_spellbook_size",
    "max_spell_level",
    "fighting_styles_for_class",
    "find_entry",
    "equipment_description",
]
