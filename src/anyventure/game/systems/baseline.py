"""Baseline snapshots of a character's as-built state.

A Baseline is captured once per build and never mutated afterwards. Every
recomputation pass starts by restoring the pipeline-owned fields from it.
"""

import copy
from dataclasses import dataclass, field
from datetime import UTC, datetime

import structlog

from anyventure.game.character.state import CharacterState, ResourcePool

logger = structlog.get_logger(__name__)

# Fields the overlay pipeline rebuilds on every pass. Resources are handled
# separately so current values survive.
OWNED_FIELDS = (
    "attributes",
    "basic",
    "weapon",
    "magic",
    "crafting",
    "mitigation",
    "spell_slots",
    "movement",
    "movement_bonuses",
    "weapon_modifications",
    "combat_features",
    "immunities",
    "detections",
    "granted_effects",
    "abilities",
    "traits",
    "conditionals",
    "encumbrance_penalty",
    "satisfied_gates",
    "effective_conditions",
)


@dataclass(frozen=True)
class Baseline:
    """
    Frozen as-built character state.

    Attributes:
        state: Deep, independently owned copy of the built state
        captured_at: When the snapshot was taken
    """

    state: CharacterState
    captured_at: datetime = field(default_factory=lambda: datetime.now(UTC))


def capture(state: CharacterState) -> Baseline:
    """
    Take a deep snapshot of a character state.

    Args:
        state: Built working state

    Returns:
        Baseline sharing no mutable data with state
    """
    baseline = Baseline(state=copy.deepcopy(state))
    logger.debug("baseline_captured", captured_at=baseline.captured_at.isoformat())
    return baseline


def restore(state: CharacterState, baseline: Baseline) -> None:
    """
    Overwrite the pipeline-owned fields of state from a baseline.

    Resource maxima and recovery come from the baseline while current values
    are kept. A pool the baseline does not have is dropped. Pain and stress
    tracks are left alone.

    Args:
        state: Working state to reset
        baseline: Snapshot to restore from
    """
    source = baseline.state
    for name in OWNED_FIELDS:
        setattr(state, name, copy.deepcopy(getattr(source, name)))

    resources: dict[str, ResourcePool] = {}
    for name, pool in source.resources.items():
        previous = state.resources.get(name)
        current = previous.current if previous is not None else pool.current
        resources[name] = ResourcePool(max=pool.max, current=current, recovery=pool.recovery)
    state.resources = resources
