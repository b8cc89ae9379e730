"""Progressive letter reveal for the secret phrase.

Letters start appearing once 35% of the turn has elapsed and grow linearly
until 90%, where half of the revealable characters are visible. The reveal
order is shuffled once per turn so the same letters stay visible as time
passes.
"""
from __future__ import annotations

import math
from typing import Sequence

from ..utils.randomness import shuffled

REVEAL_START_FRACTION = 0.35
REVEAL_END_FRACTION = 0.90
MAX_REVEAL_FRACTION = 0.50

HIDDEN_GLYPH = "_"


def is_revealable(ch: str) -> bool:
    return ch.isalnum()


def revealable_positions(secret: str) -> list[int]:
    return [i for i, ch in enumerate(secret) if is_revealable(ch)]


def reveal_order(secret: str) -> list[int]:
    return shuffled(revealable_positions(secret))


def revealed_count(revealable: int, duration: float, elapsed: float) -> int:
    ceiling = math.floor(revealable * MAX_REVEAL_FRACTION)
    start_at = duration * REVEAL_START_FRACTION
    end_at = duration * REVEAL_END_FRACTION
    if ceiling <= 0 or elapsed <= start_at:
        return 0
    if elapsed >= end_at:
        return ceiling
    progress = (elapsed - start_at) / (end_at - start_at)
    return min(ceiling, math.floor(ceiling * progress))


def render_hint(secret: str, order: Sequence[int], duration: float, elapsed: float) -> str:
    count = revealed_count(len(order), duration, elapsed)
    shown = set(order[:count])
    glyphs = []
    for i, ch in enumerate(secret):
        if not is_revealable(ch):
            glyphs.append(ch)
        elif i in shown:
            glyphs.append(ch.upper())
        else:
            glyphs.append(HIDDEN_GLYPH)
    return " ".join(glyphs)
