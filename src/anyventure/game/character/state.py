"""Working character state.

CharacterState is the mutable numeric projection every recomputation pass
rebuilds. Collaborators read it; only the pipeline writes it.
"""

from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any

from anyventure.config import get_settings
from anyventure.game.character.schema import (
    SKILL_ATTRIBUTES,
    Attribute,
    BasicSkill,
    CombatFeature,
    CraftingSkill,
    Gate,
    MagicSkill,
    Mitigation,
    MovementMode,
    WeaponModification,
    WeaponSkill,
)

if TYPE_CHECKING:
    from anyventure.game.effects.delta import AbilityGrant, ConditionalEffect, TraitMarker

# Alternate names older content uses for a skill's tier modifier
LEGACY_TIER_FIELDS = ("diceTierModifier", "dice_tier_modifier", "tierModifier")

# Pools every character has
DEFAULT_RESOURCES = ("health", "resolve", "energy", "morale")


@dataclass
class SkillValue:
    """
    A skill entry on the working state.

    Attributes:
        value: Trained skill value
        talent: Talent (dice count)
        tier: Dice tier modifier; None until normalized
        attribute: Governing attribute for basic skills
        legacy: Tier values stored under older field names
    """

    value: int = 0
    talent: int = 0
    tier: int | None = 0
    attribute: str | None = None
    legacy: dict[str, int] = field(default_factory=dict)


@dataclass
class ResourcePool:
    """A resource with a maximum, a recovery rate and a persistent current value."""

    max: int = 0
    current: int | None = None
    recovery: int = 0


@dataclass
class GateTotals:
    """Bonuses one gate contributes while satisfied."""

    mitigation: dict[str, int] = field(
        default_factory=lambda: {str(m): 0 for m in Mitigation}
    )
    skills: dict[str, int] = field(default_factory=lambda: {str(s): 0 for s in BasicSkill})


@dataclass
class ConditionalTable:
    """Gated effects, their per-gate totals, and flags."""

    effects: dict[str, list["ConditionalEffect"]] = field(
        default_factory=lambda: {str(gate): [] for gate in Gate}
    )
    when: dict[str, GateTotals] = field(
        default_factory=lambda: {str(gate): GateTotals() for gate in Gate}
    )
    flags: dict[str, bool] = field(default_factory=dict)


@dataclass
class InjuryTrack:
    """Pain or stress track.

    ``modifier`` is set by hand and survives recomputation. The other fields
    are derived every pass.
    """

    source_total: int = 0
    threshold_bonus: int = 0
    modifier: int = 0
    calculated: int = 0
    penalty_dice: int = 0


def _basic_skills() -> dict[str, SkillValue]:
    return {
        str(skill): SkillValue(attribute=str(SKILL_ATTRIBUTES[skill])) for skill in BasicSkill
    }


def _skill_values(names: Any) -> dict[str, SkillValue]:
    return {str(name): SkillValue() for name in names}


def _zeros(names: Any) -> dict[str, int]:
    return {str(name): 0 for name in names}


def _default_resources() -> dict[str, ResourcePool]:
    return {name: ResourcePool() for name in DEFAULT_RESOURCES}


def _default_movement() -> dict[str, int]:
    movement = _zeros(MovementMode)
    movement[str(MovementMode.WALK)] = get_settings().default_walk_speed
    return movement


@dataclass
class CharacterState:
    """Derived numeric state of one character."""

    attributes: dict[str, int] = field(default_factory=lambda: _zeros(Attribute))
    basic: dict[str, SkillValue] = field(default_factory=_basic_skills)
    weapon: dict[str, SkillValue] = field(default_factory=lambda: _skill_values(WeaponSkill))
    magic: dict[str, SkillValue] = field(default_factory=lambda: _skill_values(MagicSkill))
    crafting: dict[str, SkillValue] = field(default_factory=lambda: _skill_values(CraftingSkill))
    mitigation: dict[str, int] = field(default_factory=lambda: _zeros(Mitigation))
    resources: dict[str, ResourcePool] = field(default_factory=_default_resources)
    spell_slots: int = field(default_factory=lambda: get_settings().base_spell_slots)
    movement: dict[str, int] = field(default_factory=_default_movement)
    movement_bonuses: dict[str, int] = field(default_factory=lambda: _zeros(MovementMode))
    weapon_modifications: dict[str, int] = field(
        default_factory=lambda: _zeros(WeaponModification)
    )
    combat_features: dict[str, int] = field(default_factory=lambda: _zeros(CombatFeature))
    immunities: list[str] = field(default_factory=list)
    detections: dict[str, int] = field(default_factory=dict)
    granted_effects: list[str] = field(default_factory=list)
    abilities: list["AbilityGrant"] = field(default_factory=list)
    traits: list["TraitMarker"] = field(default_factory=list)
    conditionals: ConditionalTable = field(default_factory=ConditionalTable)
    encumbrance_penalty: int = 0
    satisfied_gates: list[str] = field(default_factory=list)
    effective_conditions: list[str] = field(default_factory=list)
    pain: InjuryTrack = field(default_factory=InjuryTrack)
    stress: InjuryTrack = field(default_factory=InjuryTrack)

    def skill(self, name: str) -> SkillValue | None:
        """Look up a skill of any category by name."""
        for table in (self.basic, self.weapon, self.magic, self.crafting):
            if name in table:
                return table[name]
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert the state to plain data for comparison and output."""
        return asdict(self)
