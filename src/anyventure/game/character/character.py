"""Characters: raw inputs, derived state and the recompute trigger."""

from dataclasses import dataclass, field
from enum import Enum

import structlog

from anyventure.game.character.state import CharacterState
from anyventure.game.effects.diagnostics import Diagnostics
from anyventure.game.systems.baseline import Baseline
from anyventure.game.world.templates import InjuryTemplate, ItemTemplate, ModuleTemplate

logger = structlog.get_logger(__name__)

# Equipment slots, in the order the pipeline applies them
EQUIPMENT_SLOTS = (
    "head",
    "body",
    "back",
    "hand",
    "boots",
    "accessory1",
    "accessory2",
    "mainhand",
    "offhand",
    "extra1",
    "extra2",
    "extra3",
)


class RecomputeStatus(Enum):
    """Re-entrancy state of a character's recomputation."""

    IDLE = "idle"
    RECOMPUTING = "recomputing"


@dataclass
class Character:
    """
    A character and everything its derived state is computed from.

    Raw inputs (base values, build modules, trainings, equipment, injuries,
    conditions) are owned here. ``state`` is rebuilt from ``baseline`` by
    every recomputation pass. Mutating an input through one of the methods
    below triggers a recomputation; while a pass is running the trigger is
    queued and one more pass runs once the current one finishes.

    Attributes:
        name: Character name
        base: Creation values (attributes, skills, resource maxima) before any build source
        build_sources: Traits, ancestry and modules applied at build time
        trainings: Training items, applied every pass
        equipment: Slot name to equipped item (None for an empty slot)
        injuries: Active injuries
        conditions: Active condition names
        state: Working state
        baseline: Snapshot of the as-built state
        diagnostics: Content problems reported by the latest recomputation pass
        build_diagnostics: Content problems reported by the latest build
        status: Recomputation state
    """

    name: str
    base: CharacterState = field(default_factory=CharacterState)
    build_sources: list[ModuleTemplate] = field(default_factory=list)
    trainings: list[ItemTemplate] = field(default_factory=list)
    equipment: dict[str, ItemTemplate | None] = field(
        default_factory=lambda: {slot: None for slot in EQUIPMENT_SLOTS}
    )
    injuries: list[InjuryTemplate] = field(default_factory=list)
    conditions: set[str] = field(default_factory=set)
    state: CharacterState = field(default_factory=CharacterState)
    baseline: Baseline | None = None
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    build_diagnostics: Diagnostics = field(default_factory=Diagnostics)
    status: RecomputeStatus = RecomputeStatus.IDLE
    _pending: bool = field(default=False, repr=False)

    @property
    def is_recomputing(self) -> bool:
        """Check whether a pass is running."""
        return self.status is RecomputeStatus.RECOMPUTING

    def take_pending(self) -> bool:
        """Consume the queued-recompute marker."""
        pending = self._pending
        self._pending = False
        return pending

    def equip(self, slot: str, item: ItemTemplate) -> None:
        """
        Equip an item in a slot, replacing whatever is there.

        Raises:
            ValueError: If slot is not an equipment slot
        """
        if slot not in EQUIPMENT_SLOTS:
            raise ValueError(f"Unknown equipment slot: {slot}")
        self.equipment[slot] = item
        self._notify_changed("equip", slot=slot, item=item.id)

    def unequip(self, slot: str) -> ItemTemplate | None:
        """Empty a slot and return what was in it."""
        if slot not in EQUIPMENT_SLOTS:
            raise ValueError(f"Unknown equipment slot: {slot}")
        item = self.equipment.get(slot)
        self.equipment[slot] = None
        self._notify_changed("unequip", slot=slot)
        return item

    def add_training(self, item: ItemTemplate) -> None:
        self.trainings.append(item)
        self._notify_changed("add_training", item=item.id)

    def remove_training(self, item_id: str) -> None:
        self.trainings = [item for item in self.trainings if item.id != item_id]
        self._notify_changed("remove_training", item=item_id)

    def add_injury(self, injury: InjuryTemplate) -> None:
        self.injuries.append(injury)
        self._notify_changed("add_injury", injury=injury.id)

    def remove_injury(self, injury_id: str) -> None:
        self.injuries = [injury for injury in self.injuries if injury.id != injury_id]
        self._notify_changed("remove_injury", injury=injury_id)

    def add_condition(self, condition: str) -> None:
        self.conditions.add(condition)
        self._notify_changed("add_condition", condition=condition)

    def remove_condition(self, condition: str) -> None:
        self.conditions.discard(condition)
        self._notify_changed("remove_condition", condition=condition)

    def _notify_changed(self, change: str, **context: object) -> None:
        """Recompute after an input change, or queue it if a pass is running."""
        if self.is_recomputing:
            self._pending = True
            logger.debug("recompute_queued", character=self.name, change=change, **context)
            return

        from anyventure.game.systems.pipeline import recompute

        recompute(self)

