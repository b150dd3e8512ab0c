"""Effect schema for Anyventure characters.

Every quantity a data code can address is named here, together with the
fixed letter tables the grammar uses to reach it. The tables are part of the
authored-content contract and must not be renumbered.
"""

from enum import StrEnum


class Attribute(StrEnum):
    """Core character attributes (SS1-SS5)."""

    PHYSIQUE = "physique"
    FINESSE = "finesse"
    MIND = "mind"
    KNOWLEDGE = "knowledge"
    SOCIAL = "social"


class BasicSkill(StrEnum):
    """Basic skills (SSA-SST), four per governing attribute."""

    FITNESS = "fitness"
    DEFLECTION = "deflection"
    MIGHT = "might"
    ENDURANCE = "endurance"
    EVASION = "evasion"
    STEALTH = "stealth"
    COORDINATION = "coordination"
    THIEVERY = "thievery"
    RESILIENCE = "resilience"
    CONCENTRATION = "concentration"
    SENSES = "senses"
    LOGIC = "logic"
    WILDCRAFT = "wildcraft"
    ACADEMICS = "academics"
    MAGIC = "magic"
    MEDICINE = "medicine"
    EXPRESSION = "expression"
    PRESENCE = "presence"
    INSIGHT = "insight"
    PERSUASION = "persuasion"


class WeaponSkill(StrEnum):
    """Weapon skills (WS1-WS6 / WT1-WT6)."""

    BRAWLING = "brawling"
    THROWING = "throwing"
    SIMPLE_MELEE = "simple_melee_weapons"
    SIMPLE_RANGED = "simple_ranged_weapons"
    COMPLEX_MELEE = "complex_melee_weapons"
    COMPLEX_RANGED = "complex_ranged_weapons"


class MagicSkill(StrEnum):
    """Magic skills (YS1-YS5 / YT1-YT5)."""

    BLACK = "black"
    PRIMAL = "primal"
    METAMAGIC = "metamagic"
    DIVINE = "divine"
    MYSTICISM = "mysticism"


class CraftingSkill(StrEnum):
    """Crafting skills (CS1-CS6 / CT1-CT6)."""

    ENGINEERING = "engineering"
    FABRICATION = "fabrication"
    ALCHEMY = "alchemy"
    COOKING = "cooking"
    GLYPHCRAFT = "glyphcraft"
    BIOSHAPING = "bioshaping"


class Mitigation(StrEnum):
    """Damage types that can be mitigated (M1-M9, MA)."""

    PHYSICAL = "physical"
    HEAT = "heat"
    COLD = "cold"
    ELECTRIC = "electric"
    DARK = "dark"
    DIVINE = "divine"
    AETHERIC = "aetheric"
    PSYCHIC = "psychic"
    TOXIC = "toxic"
    TRUE = "true"


class ResourceField(StrEnum):
    """Resource and auto fields (A1-A3, A5-A9, AM)."""

    HEALTH = "health"
    RESOLVE = "resolve"
    ENERGY = "energy"
    HEALTH_REGEN = "health_regen"
    RESOLVE_REGEN = "resolve_regen"
    ENERGY_REGEN = "energy_regen"
    MAX_MORALE = "max_morale"
    SPELL_CAPACITY = "spell_capacity"
    MANA_POINTS = "mana_points"


class WeaponModification(StrEnum):
    """Ranged weapon range modifiers (AA-AF)."""

    SIMPLE_RANGED_MIN = "simple_ranged_min_range"
    SIMPLE_RANGED_MAX = "simple_ranged_max_range"
    COMPLEX_RANGED_MIN = "complex_ranged_min_range"
    COMPLEX_RANGED_MAX = "complex_ranged_max_range"
    THROWING_MIN = "throwing_min_range"
    THROWING_MAX = "throwing_max_range"


class CombatFeature(StrEnum):
    """Special combat features (AZ)."""

    DUAL_WIELD_TIER = "dual_wield_tier"


class MovementMode(StrEnum):
    """Movement modes (K1-K4)."""

    WALK = "walk"
    SWIM = "swim"
    CLIMB = "climb"
    FLY = "fly"


class Gate(StrEnum):
    """Conditional gates (CA-CG) evaluated against equipped gear."""

    NO_ARMOR = "no_armor"
    LIGHT_ARMOR = "light_armor"
    HEAVY_ARMOR = "heavy_armor"
    ANY_ARMOR = "any_armor"
    ANY_SHIELD = "any_shield"
    LIGHT_SHIELD = "light_shield"
    HEAVY_SHIELD = "heavy_shield"


class Flag(StrEnum):
    """Boolean toggles (FA-FH)."""

    NO_COMFORTS = "NO_COMFORTS"
    EMBRACE_SUFFERING = "EMBRACE_SUFFERING"
    URBAN_COMFORT = "URBAN_COMFORT"
    BADGE_OF_HONOR = "BADGE_OF_HONOR"
    WEAPON_COLLECTOR = "WEAPON_COLLECTOR"
    TWIN_FURY = "TWIN_FURY"
    PASSIVE_SHELL = "PASSIVE_SHELL"
    EFFICIENT_WEAPONRY = "EFFICIENT_WEAPONRY"


class TraitType(StrEnum):
    """Trait marker families (TA, TG, TC, TX)."""

    ANCESTRY = "ancestry"
    GENERAL = "general"
    CRAFTING = "crafting"


class ConditionalType(StrEnum):
    """Kinds of effect a gate can carry."""

    SKILL = "skill"
    MITIGATION = "mitigation"


class AbilityType(StrEnum):
    """Granted ability kinds (X = action, Z = reaction)."""

    ACTION = "action"
    REACTION = "reaction"


# Letter tables. Keys are the literal characters used in data codes.

ATTRIBUTE_CODES: dict[str, Attribute] = {
    "1": Attribute.PHYSIQUE,
    "2": Attribute.FINESSE,
    "3": Attribute.MIND,
    "4": Attribute.KNOWLEDGE,
    "5": Attribute.SOCIAL,
}

BASIC_SKILL_CODES: dict[str, BasicSkill] = dict(zip("ABCDEFGHIJKLMNOPQRST", BasicSkill))

WEAPON_SKILL_CODES: dict[str, WeaponSkill] = dict(zip("123456", WeaponSkill))

MAGIC_SKILL_CODES: dict[str, MagicSkill] = dict(zip("12345", MagicSkill))

CRAFTING_SKILL_CODES: dict[str, CraftingSkill] = dict(zip("123456", CraftingSkill))

MITIGATION_CODES: dict[str, Mitigation] = dict(zip("123456789A", Mitigation))

RESOURCE_CODES: dict[str, ResourceField] = {
    "1": ResourceField.HEALTH,
    "2": ResourceField.RESOLVE,
    "3": ResourceField.ENERGY,
    "5": ResourceField.HEALTH_REGEN,
    "6": ResourceField.RESOLVE_REGEN,
    "7": ResourceField.ENERGY_REGEN,
    "8": ResourceField.MAX_MORALE,
    "9": ResourceField.SPELL_CAPACITY,
    "M": ResourceField.MANA_POINTS,
}

WEAPON_MODIFICATION_CODES: dict[str, WeaponModification] = dict(
    zip("ABCDEF", WeaponModification)
)

MOVEMENT_CODES: dict[str, MovementMode] = dict(zip("1234", MovementMode))

GATE_CODES: dict[str, Gate] = dict(zip("ABCDEFG", Gate))

FLAG_CODES: dict[str, Flag] = dict(zip("ABCDEFGH", Flag))

TRAIT_CODES: dict[str, TraitType] = {
    "A": TraitType.ANCESTRY,
    "G": TraitType.GENERAL,
    "C": TraitType.CRAFTING,
    "X": TraitType.GENERAL,
}

IMMUNITY_CODES: dict[str, str] = {
    "A": "afraid",
    "B": "bleeding",
    "C": "blinded",
    "D": "charmed",
    "E": "confused",
    "F": "dazed",
    "G": "deafened",
    "H": "diseased",
    "I": "winded",
    "J": "prone",
    "K": "poisoned",
    "L": "muted",
    "M": "stunned",
    "N": "impaired",
    "O": "numbed",
    "P": "broken",
    "Q": "incapacitated",
    "R": "ignited",
    "S": "hidden",
    "T": "maddened",
}

# Attribute that feeds each basic skill's talent
SKILL_ATTRIBUTES: dict[BasicSkill, Attribute] = {
    skill: list(Attribute)[index // 4] for index, skill in enumerate(BasicSkill)
}

# Combat features that combine by maximum instead of addition
TIERED_COMBAT_FEATURES: frozenset[CombatFeature] = frozenset({CombatFeature.DUAL_WIELD_TIER})

# Allowed values for the dual wield tier token (AZ=1 / AZ=2)
DUAL_WIELD_TIERS: frozenset[int] = frozenset({1, 2})
