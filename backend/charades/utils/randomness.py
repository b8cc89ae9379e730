from __future__ import annotations

import secrets
from typing import Sequence, TypeVar

T = TypeVar("T")

# Unambiguous characters only (no 0/O, 1/I).
ROOM_CODE_CHARS = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"

_rng = secrets.SystemRandom()


def rand_below(n: int) -> int:
    return _rng.randrange(n)


def shuffled(items: Sequence[T]) -> list[T]:
    """Return a Fisher-Yates shuffled copy of ``items``."""
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = rand_below(i + 1)
        result[i], result[j] = result[j], result[i]
    return result


def choice(items: Sequence[T]) -> T:
    return items[rand_below(len(items))]


def generate_room_code(length: int = 5) -> str:
    return "".join(choice(ROOM_CODE_CHARS) for _ in range(length))
