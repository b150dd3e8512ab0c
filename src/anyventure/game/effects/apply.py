"""Projection of deltas onto a working character state."""

from anyventure.game.character.schema import (
    TIERED_COMBAT_FEATURES,
    ConditionalType,
    ResourceField,
)
from anyventure.game.character.state import CharacterState, GateTotals, SkillValue
from anyventure.game.effects.delta import Delta, SkillDelta, add_trait
from anyventure.game.effects.diagnostics import DiagnosticKind, Diagnostics

# Resource field -> (pool, pool attribute)
RESOURCE_TARGETS: dict[ResourceField, tuple[str, str]] = {
    ResourceField.HEALTH: ("health", "max"),
    ResourceField.RESOLVE: ("resolve", "max"),
    ResourceField.ENERGY: ("energy", "max"),
    ResourceField.HEALTH_REGEN: ("health", "recovery"),
    ResourceField.RESOLVE_REGEN: ("resolve", "recovery"),
    ResourceField.ENERGY_REGEN: ("energy", "recovery"),
    ResourceField.MAX_MORALE: ("morale", "max"),
    ResourceField.MANA_POINTS: ("mana", "max"),
}


def _dangling(
    diagnostics: Diagnostics, category: str, target: str, source: str | None
) -> None:
    diagnostics.report(
        DiagnosticKind.DANGLING_REFERENCE,
        f"character has no {category} '{target}'",
        token=str(target),
        source=source,
    )


def _add_values(
    table: dict[str, int],
    values: dict,
    category: str,
    diagnostics: Diagnostics,
    source: str | None,
) -> None:
    for name, value in values.items():
        if not value:
            continue
        key = str(name)
        if key not in table:
            _dangling(diagnostics, category, key, source)
            continue
        table[key] += value


def _add_skill_objects(
    table: dict[str, SkillValue],
    values: dict[str, SkillDelta],
    category: str,
    diagnostics: Diagnostics,
    source: str | None,
) -> None:
    for name, data in values.items():
        if not (data.skill or data.talent or data.tier):
            continue
        key = str(name)
        entry = table.get(key)
        if entry is None:
            _dangling(diagnostics, category, key, source)
            continue
        entry.value += data.skill
        entry.talent += data.talent
        entry.tier = (entry.tier or 0) + data.tier


def aggregate_conditionals(state: CharacterState) -> None:
    """
    Rebuild the per-gate ``when`` totals from the filed gate effects.

    Every gate gets a full table covering all mitigation types and all basic
    skills, so checking a gate never needs to walk its effect list.
    """
    when: dict[str, GateTotals] = {}
    for gate, effects in state.conditionals.effects.items():
        totals = GateTotals()
        for effect in effects:
            if effect.type is ConditionalType.MITIGATION:
                target = totals.mitigation
            else:
                target = totals.skills
            if effect.subtype in target:
                target[effect.subtype] += effect.value
        when[gate] = totals
    state.conditionals.when = when


def apply_to_character(
    state: CharacterState,
    delta: Delta,
    *,
    source: str | None = None,
    diagnostics: Diagnostics | None = None,
) -> None:
    """
    Apply a delta to a working character state in place.

    Resource contributions adjust maxima, recovery or spell slots and never
    touch current values. Gated effects are filed under their gate rather
    than applied, and the gate totals are refreshed afterwards.

    Args:
        state: Working state to update
        delta: Delta to apply
        source: Source identity for diagnostics
        diagnostics: Collector for dangling references (a private one is used if omitted)
    """
    if diagnostics is None:
        diagnostics = Diagnostics()

    _add_values(state.attributes, delta.attributes, "attribute", diagnostics, source)

    for skill, value in delta.skills.items():
        if not value:
            continue
        entry = state.basic.get(str(skill))
        if entry is None:
            _dangling(diagnostics, "skill", str(skill), source)
            continue
        entry.value += value

    for skill, steps in delta.skill_tier_modifiers.items():
        if not steps:
            continue
        entry = state.basic.get(str(skill))
        if entry is None:
            _dangling(diagnostics, "skill", str(skill), source)
            continue
        entry.tier = (entry.tier or 0) + steps

    _add_skill_objects(state.weapon, delta.weapon_skills, "weapon skill", diagnostics, source)
    _add_skill_objects(state.magic, delta.magic_skills, "magic skill", diagnostics, source)
    _add_skill_objects(
        state.crafting, delta.crafting_skills, "crafting skill", diagnostics, source
    )

    _add_values(state.mitigation, delta.mitigation, "mitigation", diagnostics, source)

    for field_name, value in delta.resources.items():
        if not value:
            continue
        if field_name is ResourceField.SPELL_CAPACITY:
            state.spell_slots += value
            continue
        pool_name, attr = RESOURCE_TARGETS[field_name]
        pool = state.resources.get(pool_name)
        if pool is None:
            _dangling(diagnostics, "resource", pool_name, source)
            continue
        setattr(pool, attr, getattr(pool, attr) + value)

    _add_values(state.movement_bonuses, delta.movement, "movement mode", diagnostics, source)
    _add_values(
        state.weapon_modifications,
        delta.weapon_modifications,
        "weapon modification",
        diagnostics,
        source,
    )

    for feature, value in delta.combat_features.items():
        if not value:
            continue
        key = str(feature)
        current = state.combat_features.get(key, 0)
        if feature in TIERED_COMBAT_FEATURES:
            state.combat_features[key] = max(current, value)
        else:
            state.combat_features[key] = current + value

    if delta.immunities:
        state.immunities = sorted(set(state.immunities) | delta.immunities)

    state.abilities.extend(delta.abilities)

    for marker in delta.traits:
        add_trait(state.traits, marker)

    for name, on in delta.flags.items():
        if on:
            state.conditionals.flags[name] = True

    filed = False
    for gate, effects in delta.conditionals.items():
        if effects:
            state.conditionals.effects.setdefault(str(gate), []).extend(effects)
            filed = True
    if filed:
        aggregate_conditionals(state)
