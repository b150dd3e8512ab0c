"""Character build: the as-built state and its Baseline.

A build starts from the character's creation values and applies the
selected options of every build source once, traits first, then ancestry,
then modules. The result is captured as the new Baseline.
"""

import copy

import structlog

from anyventure.game.character.character import Character
from anyventure.game.character.state import CharacterState
from anyventure.game.effects.apply import apply_to_character
from anyventure.game.effects.delta import merge_all
from anyventure.game.effects.diagnostics import DiagnosticKind, Diagnostics
from anyventure.game.effects.parser import parse
from anyventure.game.systems.baseline import capture
from anyventure.game.systems.pipeline import RecomputeInProgressError, recompute
from anyventure.game.world.templates import BUILD_ORDER, ModuleTemplate

logger = structlog.get_logger(__name__)


def ordered_sources(sources: list[ModuleTemplate]) -> list[ModuleTemplate]:
    """Sort build sources into application order, keeping authoring order within a kind."""
    return sorted(sources, key=lambda module: BUILD_ORDER[module.kind])


def build_state(character: Character, diagnostics: Diagnostics | None = None) -> CharacterState:
    """
    Compute a character's as-built state.

    Options selected within one module are merged before being applied, so
    their order does not matter. A module that fails to parse is reported
    and skipped.

    Args:
        character: Character to build
        diagnostics: Collector for content problems

    Returns:
        New CharacterState; current resource values are carried over from
        the character's working state
    """
    if diagnostics is None:
        diagnostics = Diagnostics()

    state = copy.deepcopy(character.base)
    for name, pool in state.resources.items():
        working = character.state.resources.get(name)
        if working is not None and working.current is not None:
            pool.current = working.current
    state.pain.modifier = character.state.pain.modifier
    state.stress.modifier = character.state.stress.modifier

    for module in ordered_sources(character.build_sources):
        try:
            delta = merge_all(
                parse(option.data, source=module.id, diagnostics=diagnostics)
                for option in module.selected_options()
            )
        except Exception as e:
            diagnostics.report(
                DiagnosticKind.SOURCE_FAILURE,
                f"could not process module: {e}",
                source=module.id,
                exc_info=True,
            )
            continue
        apply_to_character(state, delta, source=module.id, diagnostics=diagnostics)

    return state


def rebuild(character: Character) -> None:
    """
    Rebuild a character from scratch, capture a new Baseline and recompute.

    Args:
        character: Character to rebuild

    Raises:
        RecomputeInProgressError: If a pass is running for this character
    """
    if character.is_recomputing:
        raise RecomputeInProgressError(f"cannot rebuild {character.name!r} during a recompute")

    character.build_diagnostics.clear()
    state = build_state(character, character.build_diagnostics)
    character.baseline = capture(state)
    character.state = state

    logger.info(
        "character_rebuilt",
        character=character.name,
        sources=len(character.build_sources),
        diagnostics=len(character.build_diagnostics),
    )
    recompute(character)
