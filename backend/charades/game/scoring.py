"""Point awards for a single turn."""

PLACE_POINTS = (10, 7, 5)
DEFAULT_POINTS = 3
ACTOR_BONUS = 5


def guesser_points(rank: int) -> int:
    """Points for the guesser who finished at ``rank`` (0 = first correct)."""
    if rank < 0 or rank >= len(PLACE_POINTS):
        return DEFAULT_POINTS
    return PLACE_POINTS[rank]


def actor_points(correct_count: int) -> int:
    return ACTOR_BONUS if correct_count > 0 else 0
