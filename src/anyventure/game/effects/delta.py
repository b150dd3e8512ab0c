"""Typed effect deltas and the algebra used to combine them.

A Delta is everything one or more data codes contribute to a character. A
fresh Delta is the identity element: all numbers zero, all collections empty.

merge() is associative and commutative for every field, with two documented
exceptions:

- traits sharing a marker code keep the payload of the *later* operand
- tiered combat features (dual wield tier) combine by maximum, not addition
"""

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from enum import StrEnum
from functools import reduce
from typing import Any

from anyventure.game.character.schema import (
    TIERED_COMBAT_FEATURES,
    AbilityType,
    Attribute,
    BasicSkill,
    CombatFeature,
    ConditionalType,
    CraftingSkill,
    Gate,
    MagicSkill,
    Mitigation,
    MovementMode,
    ResourceField,
    TraitType,
    WeaponModification,
    WeaponSkill,
)


@dataclass
class SkillDelta:
    """Contribution to a weapon, magic or crafting skill."""

    skill: int = 0
    talent: int = 0
    tier: int = 0


@dataclass(frozen=True)
class AbilityGrant:
    """A granted action or reaction (XIME=2, ZDNE=0, ...)."""

    type: AbilityType
    daily: bool
    magical: bool
    energy: int
    name: str | None = None


@dataclass
class TraitMarker:
    """Trait marker (TA, TG, TC, TX) with optional payload."""

    type: TraitType
    code: str
    payload: str | None = None


@dataclass(frozen=True)
class ConditionalEffect:
    """One gated adjustment filed under a gate name."""

    type: ConditionalType
    subtype: str
    value: int


def add_trait(traits: list[TraitMarker], marker: TraitMarker) -> None:
    """Add a marker to a trait list, deduplicating by code (later payload wins)."""
    for existing in traits:
        if existing.code == marker.code:
            if marker.payload is not None:
                existing.payload = marker.payload
            return
    traits.append(replace(marker))


def _zeros(names: type[StrEnum]) -> dict[Any, int]:
    return {name: 0 for name in names}


def _skill_deltas(names: type[StrEnum]) -> dict[Any, SkillDelta]:
    return {name: SkillDelta() for name in names}


@dataclass
class Delta:
    """Structured result of parsing one or more data codes."""

    attributes: dict[Attribute, int] = field(default_factory=lambda: _zeros(Attribute))
    skills: dict[BasicSkill, int] = field(default_factory=lambda: _zeros(BasicSkill))
    skill_tier_modifiers: dict[BasicSkill, int] = field(
        default_factory=lambda: _zeros(BasicSkill)
    )
    weapon_skills: dict[WeaponSkill, SkillDelta] = field(
        default_factory=lambda: _skill_deltas(WeaponSkill)
    )
    magic_skills: dict[MagicSkill, SkillDelta] = field(
        default_factory=lambda: _skill_deltas(MagicSkill)
    )
    crafting_skills: dict[CraftingSkill, SkillDelta] = field(
        default_factory=lambda: _skill_deltas(CraftingSkill)
    )
    mitigation: dict[Mitigation, int] = field(default_factory=lambda: _zeros(Mitigation))
    resources: dict[ResourceField, int] = field(default_factory=lambda: _zeros(ResourceField))
    movement: dict[MovementMode, int] = field(default_factory=lambda: _zeros(MovementMode))
    weapon_modifications: dict[WeaponModification, int] = field(
        default_factory=lambda: _zeros(WeaponModification)
    )
    combat_features: dict[CombatFeature, int] = field(
        default_factory=lambda: _zeros(CombatFeature)
    )
    immunities: set[str] = field(default_factory=set)
    abilities: list[AbilityGrant] = field(default_factory=list)
    traits: list[TraitMarker] = field(default_factory=list)
    conditionals: dict[Gate, list[ConditionalEffect]] = field(
        default_factory=lambda: {gate: [] for gate in Gate}
    )
    flags: dict[str, bool] = field(default_factory=dict)

    def is_empty(self) -> bool:
        """Check whether this delta is the identity element."""
        return self == Delta()

    def add_trait(self, marker: TraitMarker) -> None:
        """
        Add a trait marker, deduplicating by marker code.

        A marker whose code is already present only replaces the stored
        payload, and only when it carries one.
        """
        add_trait(self.traits, marker)

    def canonical(self) -> dict[str, Any]:
        """
        Get an order-insensitive view of this delta for comparisons.

        List fields are sorted, so two deltas that differ only in the order
        their sources were merged compare equal.
        """

        def skill_view(skills: dict[Any, SkillDelta]) -> dict[str, tuple[int, int, int]]:
            return {str(k): (v.skill, v.talent, v.tier) for k, v in skills.items()}

        return {
            "attributes": dict(self.attributes),
            "skills": dict(self.skills),
            "skill_tier_modifiers": dict(self.skill_tier_modifiers),
            "weapon_skills": skill_view(self.weapon_skills),
            "magic_skills": skill_view(self.magic_skills),
            "crafting_skills": skill_view(self.crafting_skills),
            "mitigation": dict(self.mitigation),
            "resources": dict(self.resources),
            "movement": dict(self.movement),
            "weapon_modifications": dict(self.weapon_modifications),
            "combat_features": dict(self.combat_features),
            "immunities": sorted(self.immunities),
            "abilities": sorted(self.abilities, key=repr),
            "traits": sorted((t.code, t.type.value, t.payload or "") for t in self.traits),
            "conditionals": {
                str(gate): sorted(effects, key=repr)
                for gate, effects in self.conditionals.items()
            },
            "flags": {name: True for name, on in self.flags.items() if on},
        }


def empty() -> Delta:
    """Create the identity delta."""
    return Delta()


def _accumulate(target: Delta, other: Delta) -> None:
    """Fold other into target in place."""
    for name, value in other.attributes.items():
        target.attributes[name] = target.attributes.get(name, 0) + value

    for name, value in other.skills.items():
        target.skills[name] = target.skills.get(name, 0) + value

    for name, value in other.skill_tier_modifiers.items():
        target.skill_tier_modifiers[name] = target.skill_tier_modifiers.get(name, 0) + value

    for target_skills, other_skills in (
        (target.weapon_skills, other.weapon_skills),
        (target.magic_skills, other.magic_skills),
        (target.crafting_skills, other.crafting_skills),
    ):
        for name, data in other_skills.items():
            combined = target_skills.setdefault(name, SkillDelta())
            combined.skill += data.skill
            combined.talent += data.talent
            combined.tier += data.tier

    for target_map, other_map in (
        (target.mitigation, other.mitigation),
        (target.resources, other.resources),
        (target.movement, other.movement),
        (target.weapon_modifications, other.weapon_modifications),
    ):
        for name, value in other_map.items():
            target_map[name] = target_map.get(name, 0) + value

    for feature, value in other.combat_features.items():
        if feature in TIERED_COMBAT_FEATURES:
            target.combat_features[feature] = max(target.combat_features.get(feature, 0), value)
        else:
            target.combat_features[feature] = target.combat_features.get(feature, 0) + value

    target.immunities |= other.immunities
    target.abilities.extend(other.abilities)

    for marker in other.traits:
        target.add_trait(marker)

    for gate, effects in other.conditionals.items():
        target.conditionals.setdefault(gate, []).extend(effects)

    for name, on in other.flags.items():
        if on:
            target.flags[name] = True


def merge(a: Delta, b: Delta) -> Delta:
    """
    Combine two deltas into a new one.

    Neither operand is modified.

    Args:
        a: First delta
        b: Second delta (wins trait payload ties)

    Returns:
        New combined Delta
    """
    combined = empty()
    _accumulate(combined, a)
    _accumulate(combined, b)
    return combined


def merge_all(deltas: Iterable[Delta]) -> Delta:
    """Fold merge() over the identity delta."""
    return reduce(merge, deltas, empty())
