"""Tests for baseline capture and restore."""

from anyventure.game.character.state import CharacterState, ResourcePool
from anyventure.game.effects.apply import apply_to_character
from anyventure.game.effects.parser import parse
from anyventure.game.systems.baseline import OWNED_FIELDS, capture, restore


class TestCapture:
    """Tests for capture()."""

    def test_capture_is_independent(self, base_state):
        baseline = capture(base_state)
        base_state.attributes["physique"] = 99
        base_state.basic["deflection"].value = 99
        assert baseline.state.attributes["physique"] == 2
        assert baseline.state.basic["deflection"].value == 2

    def test_capture_records_time(self, base_state):
        assert capture(base_state).captured_at is not None


class TestRestore:
    """Tests for restore()."""

    def test_restore_discards_overlays(self, base_state):
        baseline = capture(base_state)
        apply_to_character(base_state, parse("SSB=3:M1=2:IA=1:XINE=1:CF[SSB=1]:K1=2"))

        restore(base_state, baseline)

        assert base_state.basic["deflection"].value == 2
        assert base_state.mitigation["physical"] == 0
        assert base_state.immunities == []
        assert base_state.abilities == []
        assert base_state.conditionals.effects["light_shield"] == []
        assert base_state.movement_bonuses["walk"] == 0

    def test_restore_preserves_current_values(self, base_state):
        baseline = capture(base_state)
        base_state.resources["health"].current = 4
        base_state.resources["health"].max = 50

        restore(base_state, baseline)

        assert base_state.resources["health"].max == 10
        assert base_state.resources["health"].current == 4

    def test_restore_keeps_unseeded_current(self, base_state):
        baseline = capture(base_state)
        restore(base_state, baseline)
        assert base_state.resources["health"].current is None

    def test_restore_drops_pools_missing_from_baseline(self, base_state):
        baseline = capture(base_state)
        base_state.resources["mana"] = ResourcePool(max=5, current=5)
        restore(base_state, baseline)
        assert "mana" not in base_state.resources

    def test_restore_leaves_pain_and_stress(self, base_state):
        baseline = capture(base_state)
        base_state.pain.modifier = 3
        base_state.stress.calculated = 7
        restore(base_state, baseline)
        assert base_state.pain.modifier == 3
        assert base_state.stress.calculated == 7

    def test_restore_does_not_share_with_baseline(self, base_state):
        baseline = capture(base_state)
        restore(base_state, baseline)
        base_state.basic["deflection"].value = 40
        base_state.immunities.append("afraid")
        assert baseline.state.basic["deflection"].value == 2
        assert baseline.state.immunities == []

    def test_owned_fields_exist_on_state(self):
        state = CharacterState()
        for name in OWNED_FIELDS:
            assert hasattr(state, name)
        assert "pain" not in OWNED_FIELDS
        assert "resources" not in OWNED_FIELDS
