"""Pain and stress derived from injuries and resource thresholds."""

from anyventure.game.character.state import InjuryTrack, ResourcePool

# (fraction of max, bonus); first band the pool is at or below wins
THRESHOLD_BANDS: tuple[tuple[float, int], ...] = ((0.25, 6), (0.5, 3))

# (minimum calculated value, penalty dice); the top two bands are equal
PAIN_PENALTY_BANDS: tuple[tuple[int, int], ...] = ((16, 2), (11, 2), (6, 1))


def threshold_bonus(pool: ResourcePool | None) -> int:
    """
    Get the bonus from a resource pool running low.

    Args:
        pool: Health (for pain) or resolve (for stress)

    Returns:
        6 at or below a quarter of max, 3 at or below half, else 0
    """
    if pool is None or pool.current is None or pool.max <= 0:
        return 0

    ratio = min(pool.current, pool.max) / pool.max
    for fraction, bonus in THRESHOLD_BANDS:
        if ratio <= fraction:
            return bonus
    return 0


def penalty_dice(calculated: int) -> int:
    """
    Get the penalty dice for a calculated pain or stress value.

    Examples:
        >>> penalty_dice(5)
        0
        >>> penalty_dice(6)
        1
        >>> penalty_dice(16)
        2
    """
    for minimum, dice in PAIN_PENALTY_BANDS:
        if calculated >= minimum:
            return dice
    return 0


def update_track(track: InjuryTrack, source_total: int, pool: ResourcePool | None) -> None:
    """Recalculate a pain or stress track in place, keeping its manual modifier."""
    track.source_total = source_total
    track.threshold_bonus = threshold_bonus(pool)
    track.calculated = max(0, source_total + track.threshold_bonus + track.modifier)
    track.penalty_dice = penalty_dice(track.calculated)
