"""
Overlay pipeline for Anyventure characters.

Every recomputation pass restores the character's working state from its
Baseline and then runs a fixed list of stages, each layering one kind of
source on top of the previous stage's output:

1. tier normalization
2. attribute-derived talents
3. training deltas
4. equipment deltas
5. conditional-gear bonuses
6. injury effects
7. condition effects
8. movement finalization
9. resource clamping

Content errors inside a single training or equipment source are reported to
the character's diagnostics and that source contributes nothing. Misuse of
the pipeline itself raises.
"""

from collections.abc import Callable

import structlog

from anyventure.config import Settings, get_settings
from anyventure.game.character.character import (
    EQUIPMENT_SLOTS,
    Character,
    RecomputeStatus,
)
from anyventure.game.character.schema import Gate, MovementMode
from anyventure.game.character.state import LEGACY_TIER_FIELDS, CharacterState
from anyventure.game.effects.apply import apply_to_character
from anyventure.game.effects.delta import Delta, empty
from anyventure.game.effects.diagnostics import DiagnosticKind, Diagnostics
from anyventure.game.effects.parser import parse
from anyventure.game.systems.baseline import restore
from anyventure.game.systems.injuries import update_track
from anyventure.game.world.templates import ItemTemplate, ItemType, WeightClass

logger = structlog.get_logger(__name__)


class EngineError(Exception):
    """Base class for engine programming errors."""

    pass


class PipelineInvariantError(EngineError):
    """Raised when a pass restores twice or runs a stage before restoring."""

    pass


class RecomputeInProgressError(EngineError):
    """Raised when recompute is called while a pass is already running."""

    pass


class RecomputePass:
    """
    One run of the overlay pipeline over one character.

    Attributes:
        character: Character being recomputed
        state: The character's working state
        diagnostics: Collector for this pass
        settings: Engine settings
    """

    def __init__(self, character: Character, settings: Settings | None = None) -> None:
        self.character = character
        self.state: CharacterState = character.state
        self.diagnostics: Diagnostics = character.diagnostics
        self.settings = settings or get_settings()
        self._restored = False

    @property
    def restored(self) -> bool:
        return self._restored

    def restore(self) -> None:
        """
        Restore pipeline-owned fields from the character's baseline.

        Raises:
            PipelineInvariantError: If called twice, or if there is no baseline
        """
        if self._restored:
            raise PipelineInvariantError("restore called twice in one pass")
        if self.character.baseline is None:
            raise PipelineInvariantError(f"character {self.character.name!r} has no baseline")

        restore(self.state, self.character.baseline)
        self._restored = True

    def run_stage(self, stage: "Stage") -> None:
        """
        Run one stage on this pass.

        Raises:
            PipelineInvariantError: If the pass has not been restored yet
        """
        if not self._restored:
            raise PipelineInvariantError(f"stage {stage.__name__} ran before restore")
        stage(self)

    def report_failure(self, source: str, error: Exception) -> None:
        """Report a source that could not be processed; it contributes nothing."""
        self.diagnostics.report(
            DiagnosticKind.SOURCE_FAILURE,
            f"could not process source: {error}",
            source=source,
            exc_info=True,
        )

    def source_delta(self, item: ItemTemplate) -> Delta:
        """
        Parse an item's data code, isolating failures to that item.

        Returns:
            The parsed Delta, or the identity delta if the item could not be processed
        """
        try:
            return parse(item.data_code, source=item.id, diagnostics=self.diagnostics)
        except Exception as e:
            self.report_failure(item.id, e)
            return empty()


Stage = Callable[[RecomputePass], None]


def normalize_tiers(pass_: RecomputePass) -> None:
    """Fold legacy tier fields into ``tier`` and default missing tiers to 0."""
    state = pass_.state
    for table in (state.basic, state.weapon, state.magic, state.crafting):
        for skill in table.values():
            tier = skill.tier or 0
            for name in LEGACY_TIER_FIELDS:
                tier += skill.legacy.pop(name, 0) or 0
            skill.tier = tier
            skill.legacy.clear()


def derive_talents(pass_: RecomputePass) -> None:
    """Set each basic skill's talent to its governing attribute."""
    state = pass_.state
    for skill in state.basic.values():
        if skill.attribute is not None:
            skill.talent = state.attributes.get(skill.attribute, 0)


def apply_training(pass_: RecomputePass) -> None:
    """Apply every training item's data code."""
    for item in pass_.character.trainings:
        delta = pass_.source_delta(item)
        apply_to_character(pass_.state, delta, source=item.id, diagnostics=pass_.diagnostics)


def apply_equipment(pass_: RecomputePass) -> None:
    """Apply every equipped item, slot by slot, plus its structured extras."""
    state = pass_.state
    equipped = 0

    for slot in EQUIPMENT_SLOTS:
        item = pass_.character.equipment.get(slot)
        if item is None:
            continue

        try:
            delta = parse(item.data_code, source=item.id, diagnostics=pass_.diagnostics)
            delta.immunities |= set(item.immunities)
            penalty = int(item.encumbrance_penalty)
            detections = {name: int(value) for name, value in item.detections.items() if value}
            effects = [effect for effect in item.effects if effect]
        except Exception as e:
            pass_.report_failure(item.id, e)
            continue

        apply_to_character(state, delta, source=item.id, diagnostics=pass_.diagnostics)
        state.encumbrance_penalty += penalty
        for detection, value in detections.items():
            state.detections[detection] = state.detections.get(detection, 0) + value
        state.granted_effects.extend(effects)
        equipped += 1

    logger.debug(
        "equipment_applied",
        character=pass_.character.name,
        items=equipped,
        encumbrance_penalty=state.encumbrance_penalty,
    )


def satisfied_gates(equipment: dict[str, ItemTemplate | None]) -> list[Gate]:
    """
    Work out which gear gates hold for a set of equipped items.

    Armor is whatever armor item sits in the body slot; shields are
    checked in both hands.

    Args:
        equipment: Slot name to equipped item

    Returns:
        Satisfied gates in declaration order
    """
    armor = equipment.get("body")
    if armor is not None and armor.type is not ItemType.ARMOR:
        armor = None

    shields = [
        item
        for item in (equipment.get("mainhand"), equipment.get("offhand"))
        if item is not None and item.type is ItemType.SHIELD
    ]
    shield_classes = {shield.weight_class for shield in shields}

    holds = {
        Gate.NO_ARMOR: armor is None,
        Gate.LIGHT_ARMOR: armor is not None and armor.weight_class is WeightClass.LIGHT,
        Gate.HEAVY_ARMOR: armor is not None and armor.weight_class is WeightClass.HEAVY,
        Gate.ANY_ARMOR: armor is not None,
        Gate.ANY_SHIELD: bool(shields),
        Gate.LIGHT_SHIELD: WeightClass.LIGHT in shield_classes,
        Gate.HEAVY_SHIELD: WeightClass.HEAVY in shield_classes,
    }
    return [gate for gate in Gate if holds[gate]]


def apply_gate_bonuses(pass_: RecomputePass) -> None:
    """Add each satisfied gate's totals on top of the current values."""
    state = pass_.state
    gates = satisfied_gates(pass_.character.equipment)

    for gate in gates:
        totals = state.conditionals.when.get(str(gate))
        if totals is None:
            continue
        for mitigation, value in totals.mitigation.items():
            if value and mitigation in state.mitigation:
                state.mitigation[mitigation] += value
        for skill, value in totals.skills.items():
            if value and skill in state.basic:
                state.basic[skill].value += value

    state.satisfied_gates = [str(gate) for gate in gates]


def apply_injuries(pass_: RecomputePass) -> None:
    """Recalculate pain and stress from injuries and low resources."""
    state = pass_.state
    injuries = pass_.character.injuries
    update_track(
        state.pain, sum(injury.pain for injury in injuries), state.resources.get("health")
    )
    update_track(
        state.stress, sum(injury.stress for injury in injuries), state.resources.get("resolve")
    )


def apply_conditions(pass_: RecomputePass) -> None:
    """
    Work out which active conditions take effect.

    Condition-driven numeric modifiers belong here. Today the stage only
    filters out conditions the character is immune to.
    """
    state = pass_.state
    immune = set(state.immunities)
    state.effective_conditions = sorted(
        condition for condition in pass_.character.conditions if condition not in immune
    )


def finalize_movement(pass_: RecomputePass) -> None:
    """Normalize movement, add bonuses, then apply condition overrides."""
    state = pass_.state
    settings = pass_.settings
    movement = state.movement

    if "standard" in movement:
        movement[str(MovementMode.WALK)] = movement.pop("standard")
    movement.setdefault(str(MovementMode.WALK), settings.default_walk_speed)
    for mode in MovementMode:
        movement.setdefault(str(mode), 0)

    for mode, bonus in state.movement_bonuses.items():
        movement[mode] = movement.get(mode, 0) + bonus

    walk = str(MovementMode.WALK)
    conditions = set(state.effective_conditions)
    if conditions & set(settings.immobilizing_conditions):
        movement[walk] = 0
    elif "prone" in conditions:
        movement[walk] = settings.prone_walk_speed


def clamp_resources(pass_: RecomputePass) -> None:
    """Seed unset current values to max and cap the rest at max."""
    for name, pool in pass_.state.resources.items():
        if pool.current is None:
            pool.current = pool.max
        elif pool.current > pool.max:
            logger.debug(
                "resource_clamped",
                character=pass_.character.name,
                resource=name,
                current=pool.current,
                max=pool.max,
            )
            pool.current = pool.max


PIPELINE_STAGES: list[Stage] = [
    normalize_tiers,
    derive_talents,
    apply_training,
    apply_equipment,
    apply_gate_bonuses,
    apply_injuries,
    apply_conditions,
    finalize_movement,
    clamp_resources,
]


def run_pass(character: Character, settings: Settings | None = None) -> None:
    """Run one restore plus the full stage list."""
    pass_ = RecomputePass(character, settings)
    pass_.diagnostics.clear()
    pass_.restore()
    for stage in PIPELINE_STAGES:
        pass_.run_stage(stage)


def recompute(character: Character) -> None:
    """
    Recompute a character's derived state from its baseline and sources.

    Idempotent: with unchanged inputs every call leaves the same state.
    A character that has never been built is built first. Input changes
    made while the pass runs are queued and trigger one more pass.

    Args:
        character: Character to recompute

    Raises:
        RecomputeInProgressError: If a pass is already running for this character
    """
    if character.is_recomputing:
        raise RecomputeInProgressError(f"recompute already running for {character.name!r}")

    if character.baseline is None:
        from anyventure.game.systems.build import rebuild

        rebuild(character)
        return

    settings = get_settings()
    passes = 0
    character.status = RecomputeStatus.RECOMPUTING
    try:
        while True:
            run_pass(character, settings)
            passes += 1
            if not character.take_pending():
                break
    finally:
        character.status = RecomputeStatus.IDLE

    logger.debug(
        "character_recomputed",
        character=character.name,
        passes=passes,
        diagnostics=len(character.diagnostics),
    )
