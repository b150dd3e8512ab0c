"""Tests for pain and stress calculation."""

import pytest

from anyventure.game.character.state import InjuryTrack, ResourcePool
from anyventure.game.systems.injuries import penalty_dice, threshold_bonus, update_track


class TestPenaltyDice:
    """Penalty dice bands."""

    @pytest.mark.parametrize(
        "calculated, dice",
        [(0, 0), (5, 0), (6, 1), (10, 1), (11, 2), (15, 2), (16, 2), (40, 2)],
    )
    def test_bands(self, calculated, dice):
        assert penalty_dice(calculated) == dice


class TestThresholdBonus:
    """Bonus from a pool running low."""

    @pytest.mark.parametrize(
        "current, bonus",
        [(10, 0), (6, 0), (5, 3), (3, 3), (2, 6), (0, 6)],
    )
    def test_fractions_of_max(self, current, bonus):
        assert threshold_bonus(ResourcePool(max=10, current=current)) == bonus

    def test_unseeded_pool(self):
        assert threshold_bonus(ResourcePool(max=10, current=None)) == 0

    def test_zero_max(self):
        assert threshold_bonus(ResourcePool(max=0, current=0)) == 0

    def test_missing_pool(self):
        assert threshold_bonus(None) == 0

    def test_current_above_max_counts_as_full(self):
        assert threshold_bonus(ResourcePool(max=10, current=14)) == 0


class TestUpdateTrack:
    """Tests for update_track()."""

    def test_total(self):
        track = InjuryTrack(modifier=1)
        update_track(track, 4, ResourcePool(max=10, current=5))
        assert track.source_total == 4
        assert track.threshold_bonus == 3
        assert track.calculated == 8
        assert track.penalty_dice == 1
        assert track.modifier == 1

    def test_floor_at_zero(self):
        track = InjuryTrack(modifier=-10)
        update_track(track, 2, None)
        assert track.calculated == 0
        assert track.penalty_dice == 0

    def test_recalculation_replaces_previous_values(self):
        track = InjuryTrack()
        update_track(track, 12, None)
        update_track(track, 0, None)
        assert track.calculated == 0
