from __future__ import annotations

from typing import Sequence

from ..utils.randomness import shuffled


def build_turn_order(player_ids: Sequence[str], rounds: int) -> list[str]:
    """Concatenate ``rounds`` independent shuffles of the roster.

    Every player acts exactly once per round; the caller guarantees at least
    two players.
    """
    order: list[str] = []
    for _ in range(max(0, rounds)):
        order.extend(shuffled(player_ids))
    return order
