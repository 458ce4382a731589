"""Bundled subset of the D&D 5E System Reference Document.

Enough races, classes and spells to run the full creation flow without
network access. Data is declared in the model shape and validated once
on first use.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from dnd_chargen.models.rules import CharacterClass, ClassFeature, Proficiency, Race, Spell
from dnd_chargen.models.enums import ProficiencyCategory


# =============================================================================
# Builders
# =============================================================================


_SKILL_NAMES = {
    "acrobatics": "Acrobatics",
    "animal-handling": "Animal Handling",
    "arcana": "Arcana",
    "athletics": "Athletics",
    "deception": "Deception",
    "history": "History",
    "insight": "Insight",
    "intimidation": "Intimidation",
    "investigation": "Investigation",
    "medicine": "Medicine",
    "nature": "Nature",
    "perception": "Perception",
    "performance": "Performance",
    "persuasion": "Persuasion",
    "religion": "Religion",
    "sleight-of-hand": "Sleight of Hand",
    "stealth": "Stealth",
    "survival": "Survival",
}


def _ref(key: str, name: str) -> dict[str, Any]:
    return {"option_type": "reference", "reference": {"key": key, "name": name}}


def _counted(count: int, key: str, name: str) -> dict[str, Any]:
    return {
        "option_type": "counted_reference",
        "count": count,
        "reference": {"key": key, "name": name},
    }


def _bundle(key: str, name: str, *items: dict[str, Any]) -> dict[str, Any]:
    return {"option_type": "multiple", "key": key, "name": name, "items": list(items)}


def _choice(name: str, count: int, options: list[dict[str, Any]], choice_type: str = "equipment") -> dict[str, Any]:
    return {"option_type": "choice", "name": name, "type": choice_type, "count": count, "options": options}


def _skill_choice(count: int, skills: list[str]) -> dict[str, Any]:
    names = ", ".join(_SKILL_NAMES[skill] for skill in skills)
    return _choice(
        f"Choose {count} from {names}",
        count,
        [_ref(f"skill-{skill}", f"Skill: {_SKILL_NAMES[skill]}") for skill in skills],
        "proficiency",
    )


def _profs(*pairs: tuple[str, str]) -> list[dict[str, str]]:
    return [{"key": key, "name": name} for key, name in pairs]


_SIMPLE_WEAPON = _choice("any simple weapon", 1, [], "equipment")
_MARTIAL_WEAPON = _choice("martial weapon", 1, [], "equipment")

# =============================================================================
# Races
# =============================================================================

_RACES: list[dict[str, Any]] = [
    {
        "key": "dragonborn",
        "name": "Dragonborn",
        "speed": 30,
        "ability_bonuses": [{"attribute": "STR", "bonus": 2}, {"attribute": "CHA", "bonus": 1}],
        "languages": _profs(("common", "Common"), ("draconic", "Draconic")),
    },
    {
        "key": "dwarf",
        "name": "Dwarf",
        "speed": 25,
        "ability_bonuses": [{"attribute": "CON", "bonus": 2}],
        "starting_proficiencies": _profs(
            ("battleaxes", "Battleaxes"),
            ("handaxes", "Handaxes"),
            ("light-hammers", "Light Hammers"),
            ("warhammers", "Warhammers"),
        ),
        "starting_proficiency_options": _choice(
            "Choose one tool proficiency",
            1,
            [
                _ref("smiths-tools", "Smith's Tools"),
                _ref("brewers-supplies", "Brewer's Supplies"),
                _ref("masons-tools", "Mason's Tools"),
            ],
            "proficiency",
        ),
        "languages": _profs(("common", "Common"), ("dwarvish", "Dwarvish")),
    },
    {
        "key": "elf",
        "name": "Elf",
        "speed": 30,
        "ability_bonuses": [{"attribute": "DEX", "bonus": 2}],
        "starting_proficiencies": _profs(("skill-perception", "Skill: Perception")),
        "languages": _profs(("common", "Common"), ("elvish", "Elvish")),
    },
    {
        "key": "gnome",
        "name": "Gnome",
        "speed": 25,
        "ability_bonuses": [{"attribute": "INT", "bonus": 2}],
        "languages": _profs(("common", "Common"), ("gnomish", "Gnomish")),
    },
    {
        "key": "half-elf",
        "name": "Half-Elf",
        "speed": 30,
        "ability_bonuses": [{"attribute": "CHA", "bonus": 2}],
        "starting_proficiency_options": _choice(
            "Choose two skills",
            2,
            [_ref(f"skill-{skill}", f"Skill: {name}") for skill, name in _SKILL_NAMES.items()],
            "proficiency",
        ),
        "languages": _profs(("common", "Common"), ("elvish", "Elvish")),
    },
    {
        "key": "half-orc",
        "name": "Half-Orc",
        "speed": 30,
        "ability_bonuses": [{"attribute": "STR", "bonus": 2}, {"attribute": "CON", "bonus": 1}],
        "starting_proficiencies": _profs(("skill-intimidation", "Skill: Intimidation")),
        "languages": _profs(("common", "Common"), ("orc", "Orc")),
    },
    {
        "key": "halfling",
        "name": "Halfling",
        "speed": 25,
        "ability_bonuses": [{"attribute": "DEX", "bonus": 2}],
        "languages": _profs(("common", "Common"), ("halfling", "Halfling")),
    },
    {
        "key": "human",
        "name": "Human",
        "speed": 30,
        "ability_bonuses": [
            {"attribute": code, "bonus": 1} for code in ("STR", "DEX", "CON", "INT", "WIS", "CHA")
        ],
        "languages": _profs(("common", "Common")),
    },
    {
        "key": "tiefling",
        "name": "Tiefling",
        "speed": 30,
        "ability_bonuses": [{"attribute": "INT", "bonus": 1}, {"attribute": "CHA", "bonus": 2}],
        "languages": _profs(("common", "Common"), ("infernal", "Infernal")),
    },
]

# =============================================================================
# Classes
# =============================================================================

_PACK_CHOICE = _choice(
    "(a) a dungeoneer's pack or (b) an explorer's pack",
    1,
    [_ref("dungeoneers-pack", "Dungeoneer's Pack"), _ref("explorers-pack", "Explorer's Pack")],
)

_CLASSES: list[dict[str, Any]] = [
    {
        "key": "barbarian",
        "name": "Barbarian",
        "hit_die": 12,
        "primary_abilities": ["STR"],
        "saving_throws": ["STR", "CON"],
        "proficiencies": _profs(
            ("light-armor", "Light Armor"),
            ("medium-armor", "Medium Armor"),
            ("shields", "Shields"),
            ("simple-weapons", "Simple Weapons"),
            ("martial-weapons", "Martial Weapons"),
        ),
        "proficiency_choices": [
            _skill_choice(2, ["animal-handling", "athletics", "intimidation", "nature", "perception", "survival"])
        ],
        "starting_equipment": [{"quantity": 4, "equipment": {"key": "javelin", "name": "Javelin"}}],
        "starting_equipment_choices": [
            _choice("(a) a greataxe or (b) any martial melee weapon", 1, [_ref("greataxe", "Greataxe"), _MARTIAL_WEAPON]),
            _choice("(a) two handaxes or (b) any simple weapon", 1, [_counted(2, "handaxe", "Handaxe"), _SIMPLE_WEAPON]),
        ],
    },
    {
        "key": "bard",
        "name": "Bard",
        "hit_die": 8,
        "primary_abilities": ["CHA"],
        "saving_throws": ["DEX", "CHA"],
        "proficiencies": _profs(
            ("light-armor", "Light Armor"),
            ("simple-weapons", "Simple Weapons"),
            ("longswords", "Longswords"),
            ("rapiers", "Rapiers"),
        ),
        "proficiency_choices": [_skill_choice(3, list(_SKILL_NAMES))],
        "starting_equipment": [{"equipment": {"key": "leather-armor", "name": "Leather Armor"}}],
        "starting_equipment_choices": [
            _choice(
                "(a) a rapier, (b) a longsword, or (c) any simple weapon",
                1,
                [_ref("rapier", "Rapier"), _ref("longsword", "Longsword"), _SIMPLE_WEAPON],
            ),
            _choice(
                "(a) a diplomat's pack or (b) an entertainer's pack",
                1,
                [_ref("diplomats-pack", "Diplomat's Pack"), _ref("entertainers-pack", "Entertainer's Pack")],
            ),
        ],
        "spellcasting_ability": "CHA",
    },
    {
        "key": "cleric",
        "name": "Cleric",
        "hit_die": 8,
        "primary_abilities": ["WIS"],
        "saving_throws": ["WIS", "CHA"],
        "proficiencies": _profs(
            ("light-armor", "Light Armor"),
            ("medium-armor", "Medium Armor"),
            ("shields", "Shields"),
            ("simple-weapons", "Simple Weapons"),
        ),
        "proficiency_choices": [_skill_choice(2, ["history", "insight", "medicine", "persuasion", "religion"])],
        "starting_equipment": [{"equipment": {"key": "shield", "name": "Shield"}}],
        "starting_equipment_choices": [
            _choice("(a) a mace or (b) a warhammer", 1, [_ref("mace", "Mace"), _ref("warhammer", "Warhammer")]),
            _choice(
                "(a) scale mail, (b) leather armor, or (c) chain mail",
                1,
                [
                    _ref("scale-mail", "Scale Mail"),
                    _ref("leather-armor", "Leather Armor"),
                    _ref("chain-mail", "Chain Mail"),
                ],
            ),
        ],
        "spellcasting_ability": "WIS",
    },
    {
        "key": "druid",
        "name": "Druid",
        "hit_die": 8,
        "primary_abilities": ["WIS"],
        "saving_throws": ["INT", "WIS"],
        "proficiencies": _profs(
            ("light-armor", "Light Armor"),
            ("medium-armor", "Medium Armor"),
            ("shields", "Shields"),
            ("herbalism-kit", "Herbalism Kit"),
        ),
        "proficiency_choices": [
            _skill_choice(
                2,
                ["arcana", "animal-handling", "insight", "medicine", "nature", "perception", "religion", "survival"],
            )
        ],
        "starting_equipment_choices": [
            _choice("(a) a wooden shield or (b) any simple weapon", 1, [_ref("shield", "Shield"), _SIMPLE_WEAPON]),
            _choice("(a) a scimitar or (b) any simple melee weapon", 1, [_ref("scimitar", "Scimitar"), _SIMPLE_WEAPON]),
        ],
        "spellcasting_ability": "WIS",
    },
    {
        "key": "fighter",
        "name": "Fighter",
        "hit_die": 10,
        "primary_abilities": ["STR", "DEX"],
        "saving_throws": ["STR", "CON"],
        "proficiencies": _profs(
            ("all-armor", "All armor"),
            ("shields", "Shields"),
            ("simple-weapons", "Simple Weapons"),
            ("martial-weapons", "Martial Weapons"),
        ),
        "proficiency_choices": [
            _skill_choice(
                2,
                ["acrobatics", "animal-handling", "athletics", "history", "insight", "intimidation", "perception", "survival"],
            )
        ],
        "starting_equipment_choices": [
            _choice(
                "(a) chain mail or (b) leather armor, longbow, and 20 arrows",
                1,
                [
                    _ref("chain-mail", "Chain Mail"),
                    _bundle(
                        "armor-bow-bundle",
                        "leather armor, longbow, and 20 arrows",
                        _ref("leather-armor", "Leather Armor"),
                        _ref("longbow", "Longbow"),
                        _counted(20, "arrow", "Arrow"),
                    ),
                ],
            ),
            _choice(
                "(a) a martial weapon and a shield or (b) two martial weapons",
                1,
                [
                    _bundle("weapon-shield", "a martial weapon and a shield", _MARTIAL_WEAPON, _ref("shield", "Shield")),
                    _choice("two martial weapons", 2, []),
                ],
            ),
            _choice(
                "(a) a light crossbow and 20 bolts or (b) two handaxes",
                1,
                [
                    _bundle(
                        "crossbow-bundle",
                        "a light crossbow and 20 bolts",
                        _ref("light-crossbow", "Light Crossbow"),
                        _counted(20, "crossbow-bolt", "Crossbow Bolt"),
                    ),
                    _counted(2, "handaxe", "Handaxe"),
                ],
            ),
            _PACK_CHOICE,
        ],
    },
    {
        "key": "monk",
        "name": "Monk",
        "hit_die": 8,
        "primary_abilities": ["DEX", "WIS"],
        "saving_throws": ["STR", "DEX"],
        "proficiencies": _profs(("simple-weapons", "Simple Weapons"), ("shortswords", "Shortswords")),
        "proficiency_choices": [
            _skill_choice(2, ["acrobatics", "athletics", "history", "insight", "religion", "stealth"]),
            _choice(
                "Choose one type of artisan's tools or one musical instrument",
                1,
                [
                    _choice("artisan's tools", 1, [], "proficiency"),
                    _choice("musical instrument", 1, [], "proficiency"),
                ],
                "proficiency",
            ),
        ],
        "starting_equipment": [{"quantity": 10, "equipment": {"key": "dart", "name": "Dart"}}],
        "starting_equipment_choices": [
            _choice("(a) a shortsword or (b) any simple weapon", 1, [_ref("shortsword", "Shortsword"), _SIMPLE_WEAPON]),
            _PACK_CHOICE,
        ],
    },
    {
        "key": "paladin",
        "name": "Paladin",
        "hit_die": 10,
        "primary_abilities": ["STR", "CHA"],
        "saving_throws": ["WIS", "CHA"],
        "proficiencies": _profs(
            ("all-armor", "All armor"),
            ("shields", "Shields"),
            ("simple-weapons", "Simple Weapons"),
            ("martial-weapons", "Martial Weapons"),
        ),
        "proficiency_choices": [
            _skill_choice(2, ["athletics", "insight", "intimidation", "medicine", "persuasion", "religion"])
        ],
        "starting_equipment": [{"equipment": {"key": "chain-mail", "name": "Chain Mail"}}],
        "starting_equipment_choices": [
            _choice(
                "(a) a martial weapon and a shield or (b) two martial weapons",
                1,
                [
                    _bundle("weapon-shield", "a martial weapon and a shield", _MARTIAL_WEAPON, _ref("shield", "Shield")),
                    _choice("two martial weapons", 2, []),
                ],
            ),
        ],
        "spellcasting_ability": "CHA",
    },
    {
        "key": "ranger",
        "name": "Ranger",
        "hit_die": 10,
        "primary_abilities": ["DEX", "WIS"],
        "saving_throws": ["STR", "DEX"],
        "proficiencies": _profs(
            ("light-armor", "Light Armor"),
            ("medium-armor", "Medium Armor"),
            ("shields", "Shields"),
            ("simple-weapons", "Simple Weapons"),
            ("martial-weapons", "Martial Weapons"),
        ),
        "proficiency_choices": [
            _skill_choice(
                3,
                ["animal-handling", "athletics", "insight", "investigation", "nature", "perception", "stealth", "survival"],
            )
        ],
        "starting_equipment": [{"equipment": {"key": "longbow", "name": "Longbow"}}],
        "starting_equipment_choices": [
            _choice(
                "(a) scale mail or (b) leather armor",
                1,
                [_ref("scale-mail", "Scale Mail"), _ref("leather-armor", "Leather Armor")],
            ),
            _choice(
                "(a) two shortswords or (b) two simple melee weapons",
                1,
                [_counted(2, "shortsword", "Shortsword"), _choice("two simple melee weapons", 2, [])],
            ),
            _PACK_CHOICE,
        ],
        "spellcasting_ability": "WIS",
    },
    {
        "key": "rogue",
        "name": "Rogue",
        "hit_die": 8,
        "primary_abilities": ["DEX"],
        "saving_throws": ["DEX", "INT"],
        "proficiencies": _profs(
            ("light-armor", "Light Armor"),
            ("simple-weapons", "Simple Weapons"),
            ("hand-crossbows", "Hand Crossbows"),
            ("longswords", "Longswords"),
            ("rapiers", "Rapiers"),
            ("shortswords", "Shortswords"),
            ("thieves-tools", "Thieves' Tools"),
        ),
        "proficiency_choices": [
            _skill_choice(
                4,
                [
                    "acrobatics",
                    "athletics",
                    "deception",
                    "insight",
                    "intimidation",
                    "investigation",
                    "perception",
                    "performance",
                    "persuasion",
                    "sleight-of-hand",
                    "stealth",
                ],
            )
        ],
        "starting_equipment": [{"equipment": {"key": "leather-armor", "name": "Leather Armor"}}],
        "starting_equipment_choices": [
            _choice("(a) a rapier or (b) a shortsword", 1, [_ref("rapier", "Rapier"), _ref("shortsword", "Shortsword")]),
            _choice(
                "(a) a shortbow and quiver of 20 arrows or (b) a shortsword",
                1,
                [
                    _bundle(
                        "shortbow-bundle",
                        "a shortbow and quiver of 20 arrows",
                        _ref("shortbow", "Shortbow"),
                        _counted(20, "arrow", "Arrow"),
                    ),
                    _ref("shortsword", "Shortsword"),
                ],
            ),
        ],
    },
    {
        "key": "sorcerer",
        "name": "Sorcerer",
        "hit_die": 6,
        "primary_abilities": ["CHA"],
        "saving_throws": ["CON", "CHA"],
        "proficiencies": _profs(
            ("daggers", "Daggers"),
            ("darts", "Darts"),
            ("slings", "Slings"),
            ("quarterstaffs", "Quarterstaffs"),
            ("crossbows-light", "Crossbows, light"),
        ),
        "proficiency_choices": [
            _skill_choice(2, ["arcana", "deception", "insight", "intimidation", "persuasion", "religion"])
        ],
        "starting_equipment": [{"quantity": 2, "equipment": {"key": "dagger", "name": "Dagger"}}],
        "starting_equipment_choices": [
            _choice(
                "(a) a light crossbow and 20 bolts or (b) any simple weapon",
                1,
                [
                    _bundle(
                        "crossbow-bundle",
                        "a light crossbow and 20 bolts",
                        _ref("light-crossbow", "Light Crossbow"),
                        _counted(20, "crossbow-bolt", "Crossbow Bolt"),
                    ),
                    _SIMPLE_WEAPON,
                ],
            ),
            _PACK_CHOICE,
        ],
        "spellcasting_ability": "CHA",
    },
    {
        "key": "warlock",
        "name": "Warlock",
        "hit_die": 8,
        "primary_abilities": ["CHA"],
        "saving_throws": ["WIS", "CHA"],
        "proficiencies": _profs(("light-armor", "Light Armor"), ("simple-weapons", "Simple Weapons")),
        "proficiency_choices": [
            _skill_choice(2, ["arcana", "deception", "history", "intimidation", "investigation", "nature", "religion"])
        ],
        "starting_equipment": [{"equipment": {"key": "leather-armor", "name": "Leather Armor"}}],
        "starting_equipment_choices": [
            _choice(
                "(a) a light crossbow and 20 bolts or (b) any simple weapon",
                1,
                [
                    _bundle(
                        "crossbow-bundle",
                        "a light crossbow and 20 bolts",
                        _ref("light-crossbow", "Light Crossbow"),
                        _counted(20, "crossbow-bolt", "Crossbow Bolt"),
                    ),
                    _SIMPLE_WEAPON,
                ],
            ),
            _PACK_CHOICE,
        ],
        "spellcasting_ability": "CHA",
    },
    {
        "key": "wizard",
        "name": "Wizard",
        "hit_die": 6,
        "primary_abilities": ["INT"],
        "saving_throws": ["INT", "WIS"],
        "proficiencies": _profs(
            ("daggers", "Daggers"),
            ("darts", "Darts"),
            ("slings", "Slings"),
            ("quarterstaffs", "Quarterstaffs"),
            ("crossbows-light", "Crossbows, light"),
        ),
        "proficiency_choices": [
            _skill_choice(2, ["arcana", "history", "insight", "investigation", "medicine", "religion"])
        ],
        "starting_equipment": [{"equipment": {"key": "spellbook", "name": "Spellbook"}}],
        "starting_equipment_choices": [
            _choice(
                "(a) a quarterstaff or (b) a dagger",
                1,
                [_ref("quarterstaff", "Quarterstaff"), _ref("dagger", "Dagger")],
            ),
            _choice(
                "(a) a scholar's pack or (b) an explorer's pack",
                1,
                [_ref("scholars-pack", "Scholar's Pack"), _ref("explorers-pack", "Explorer's Pack")],
            ),
        ],
        "spellcasting_ability": "INT",
    },
]

# =============================================================================
# Spells
# =============================================================================

# key, name, level, school, classes
_SPELLS: list[tuple[str, str, int, str, tuple[str, ...]]] = [
    ("acid-splash", "Acid Splash", 0, "conjuration", ("sorcerer", "wizard")),
    ("chill-touch", "Chill Touch", 0, "necromancy", ("sorcerer", "warlock", "wizard")),
    ("dancing-lights", "Dancing Lights", 0, "evocation", ("bard", "sorcerer", "wizard")),
    ("druidcraft", "Druidcraft", 0, "transmutation", ("druid",)),
    ("eldritch-blast", "Eldritch Blast", 0, "evocation", ("warlock",)),
    ("fire-bolt", "Fire Bolt", 0, "evocation", ("sorcerer", "wizard")),
    ("guidance", "Guidance", 0, "divination", ("cleric", "druid")),
    ("light", "Light", 0, "evocation", ("bard", "cleric", "sorcerer", "wizard")),
    ("mage-hand", "Mage Hand", 0, "conjuration", ("bard", "sorcerer", "warlock", "wizard")),
    ("mending", "Mending", 0, "transmutation", ("bard", "cleric", "druid", "sorcerer", "wizard")),
    ("minor-illusion", "Minor Illusion", 0, "illusion", ("bard", "sorcerer", "warlock", "wizard")),
    ("poison-spray", "Poison Spray", 0, "conjuration", ("druid", "sorcerer", "warlock", "wizard")),
    ("prestidigitation", "Prestidigitation", 0, "transmutation", ("bard", "sorcerer", "warlock", "wizard")),
    ("produce-flame", "Produce Flame", 0, "conjuration", ("druid",)),
    ("ray-of-frost", "Ray of Frost", 0, "evocation", ("sorcerer", "wizard")),
    ("resistance", "Resistance", 0, "abjuration", ("cleric", "druid")),
    ("sacred-flame", "Sacred Flame", 0, "evocation", ("cleric",)),
    ("shillelagh", "Shillelagh", 0, "transmutation", ("druid",)),
    ("shocking-grasp", "Shocking Grasp", 0, "evocation", ("sorcerer", "wizard")),
    ("thaumaturgy", "Thaumaturgy", 0, "transmutation", ("cleric",)),
    ("vicious-mockery", "Vicious Mockery", 0, "enchantment", ("bard",)),
    ("bless", "Bless", 1, "enchantment", ("cleric", "paladin")),
    ("burning-hands", "Burning Hands", 1, "evocation", ("sorcerer", "wizard")),
    ("charm-person", "Charm Person", 1, "enchantment", ("bard", "druid", "sorcerer", "warlock", "wizard")),
    ("comprehend-languages", "Comprehend Languages", 1, "divination", ("bard", "sorcerer", "warlock", "wizard")),
    ("cure-wounds", "Cure Wounds", 1, "evocation", ("bard", "cleric", "druid", "paladin", "ranger")),
    ("detect-magic", "Detect Magic", 1, "divination", ("bard", "cleric", "druid", "paladin", "ranger", "sorcerer", "wizard")),
    ("disguise-self", "Disguise Self", 1, "illusion", ("bard", "sorcerer", "wizard")),
    ("faerie-fire", "Faerie Fire", 1, "evocation", ("bard", "druid")),
    ("feather-fall", "Feather Fall", 1, "transmutation", ("bard", "sorcerer", "wizard")),
    ("healing-word", "Healing Word", 1, "evocation", ("bard", "cleric", "druid")),
    ("hellish-rebuke", "Hellish Rebuke", 1, "evocation", ("warlock",)),
    ("hex", "Hex", 1, "enchantment", ("warlock",)),
    ("hunters-mark", "Hunter's Mark", 1, "divination", ("ranger",)),
    ("identify", "Identify", 1, "divination", ("bard", "wizard")),
    ("mage-armor", "Mage Armor", 1, "abjuration", ("sorcerer", "wizard")),
    ("magic-missile", "Magic Missile", 1, "evocation", ("sorcerer", "wizard")),
    ("shield", "Shield", 1, "abjuration", ("sorcerer", "wizard")),
    ("sleep", "Sleep", 1, "enchantment", ("bard", "sorcerer", "wizard")),
    ("thunderwave", "Thunderwave", 1, "evocation", ("bard", "druid", "sorcerer", "wizard")),
    ("hold-person", "Hold Person", 2, "enchantment", ("bard", "cleric", "druid", "sorcerer", "warlock", "wizard")),
    ("misty-step", "Misty Step", 2, "conjuration", ("sorcerer", "warlock", "wizard")),
]

# =============================================================================
# Class Features (level 1 and 2 only)
# =============================================================================

_CLASS_FEATURES: list[tuple[str, str, str, int]] = [
    ("barbarian", "rage", "Rage", 1),
    ("barbarian", "barbarian-unarmored-defense", "Unarmored Defense", 1),
    ("barbarian", "reckless-attack", "Reckless Attack", 2),
    ("bard", "bardic-inspiration-d6", "Bardic Inspiration (d6)", 1),
    ("bard", "spellcasting-bard", "Spellcasting", 1),
    ("bard", "jack-of-all-trades", "Jack of All Trades", 2),
    ("cleric", "spellcasting-cleric", "Spellcasting", 1),
    ("cleric", "divine-domain", "Divine Domain", 1),
    ("cleric", "channel-divinity-1-rest", "Channel Divinity (1/rest)", 2),
    ("druid", "druidic", "Druidic", 1),
    ("druid", "spellcasting-druid", "Spellcasting", 1),
    ("druid", "wild-shape-cr-1-4-or-below-no-flying-or-swim-speed", "Wild Shape", 2),
    ("fighter", "fighter-fighting-style", "Fighting Style", 1),
    ("fighter", "second-wind", "Second Wind", 1),
    ("fighter", "action-surge-1-use", "Action Surge (1 use)", 2),
    ("monk", "monk-unarmored-defense", "Unarmored Defense", 1),
    ("monk", "martial-arts", "Martial Arts", 1),
    ("monk", "ki", "Ki", 2),
    ("paladin", "divine-sense", "Divine Sense", 1),
    ("paladin", "lay-on-hands", "Lay on Hands", 1),
    ("paladin", "paladin-fighting-style", "Fighting Style", 2),
    ("ranger", "favored-enemy-1-type", "Favored Enemy (1 type)", 1),
    ("ranger", "natural-explorer-1-terrain-type", "Natural Explorer (1 terrain type)", 1),
    ("ranger", "ranger-fighting-style", "Fighting Style", 2),
    ("rogue", "rogue-expertise-1", "Expertise", 1),
    ("rogue", "sneak-attack", "Sneak Attack", 1),
    ("rogue", "thieves-cant", "Thieves' Cant", 1),
    ("rogue", "cunning-action", "Cunning Action", 2),
    ("sorcerer", "spellcasting-sorcerer", "Spellcasting", 1),
    ("sorcerer", "sorcerous-origin", "Sorcerous Origin", 1),
    ("sorcerer", "font-of-magic", "Font of Magic", 2),
    ("warlock", "otherworldly-patron", "Otherworldly Patron", 1),
    ("warlock", "pact-magic", "Pact Magic", 1),
    ("warlock", "eldritch-invocations", "Eldritch Invocations", 2),
    ("wizard", "spellcasting-wizard", "Spellcasting", 1),
    ("wizard", "arcane-recovery", "Arcane Recovery", 1),
    ("wizard", "arcane-tradition", "Arcane Tradition", 2),
]


def _proficiency_category(key: str) -> ProficiencyCategory:
    if key.startswith("skill-"):
        return ProficiencyCategory.SKILL
    if key.startswith("saving-throw-"):
        return ProficiencyCategory.SAVING_THROW
    if key.endswith("-armor") or key in {"all-armor", "shields"}:
        return ProficiencyCategory.ARMOR
    if key.endswith(("-tools", "-supplies", "-utensils", "-kit")):
        return ProficiencyCategory.TOOL
    if key in {"flute", "lute", "horn", "drum", "lyre"}:
        return ProficiencyCategory.INSTRUMENT
    return ProficiencyCategory.WEAPON


# =============================================================================
# Loaders
# =============================================================================


@lru_cache(maxsize=1)
def load_races() -> dict[str, Race]:
    """Validate and index the bundled races."""
    return {race["key"]: Race.model_validate(race) for race in _RACES}


@lru_cache(maxsize=1)
def load_classes() -> dict[str, CharacterClass]:
    """Validate and index the bundled classes."""
    return {cls["key"]: CharacterClass.model_validate(cls) for cls in _CLASSES}


@lru_cache(maxsize=1)
def load_spells() -> list[Spell]:
    """Validate the bundled spells."""
    return [
        Spell(key=key, name=name, level=level, school=school, classes=list(classes))
        for key, name, level, school, classes in _SPELLS
    ]


@lru_cache(maxsize=1)
def load_class_features() -> list[ClassFeature]:
    """Validate the bundled class features."""
    return [
        ClassFeature(key=key, name=name, level=level, class_key=class_key)
        for class_key, key, name, level in _CLASS_FEATURES
    ]


@lru_cache(maxsize=1)
def load_proficiencies() -> dict[str, Proficiency]:
    """Index every proficiency referenced by the bundled classes and races."""
    proficiencies: dict[str, Proficiency] = {}

    def _add(key: str, name: str) -> None:
        if key and key not in proficiencies:
            proficiencies[key] = Proficiency(key=key, name=name, category=_proficiency_category(key))

    for skill, name in _SKILL_NAMES.items():
        _add(f"skill-{skill}", f"Skill: {name}")
    for race in load_races().values():
        for ref in race.starting_proficiencies:
            _add(ref.key, ref.name)
    for character_class in load_classes().values():
        for ref in character_class.proficiencies:
            _add(ref.key, ref.name)
        for ability in character_class.saving_throws:
            _add(f"saving-throw-{ability.value.lower()}", f"Saving Throw: {ability.value}")
    return proficiencies


__all__ = [
    "load_races",
    "load_classes",
    "load_spells",
    "load_class_features",
    "load_proficiencies",
]
