from __future__ import annotations

import time
from threading import Lock
from typing import Any

from ..config import Config

MAX_NAME_LENGTH = 20


def validate_player_name(name: Any) -> str | None:
    if not isinstance(name, str):
        return None
    n = name.strip()
    if not n or len(n) > MAX_NAME_LENGTH:
        return None
    # Avoid obvious HTML/script injection.
    if "<" in n or ">" in n:
        return None
    # No control characters.
    for ch in n:
        if ord(ch) < 32:
            return None
    return n


def validate_room_code(code: Any) -> str | None:
    if not isinstance(code, str):
        return None
    c = code.strip().upper()
    if len(c) < 4 or len(c) > 6 or not c.isalnum():
        return None
    return c


def validate_guess(text: Any) -> str | None:
    if not isinstance(text, str):
        return None
    t = text.strip()
    if not t or len(t) > Config.MAX_GUESS_LENGTH:
        return None
    return t


def parse_int(raw: Any) -> int | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        s = raw.strip()
        if s.isascii() and s.isdigit():
            return int(s)
    return None


class RateLimiter:
    """Fixed-window counter per connection."""

    def __init__(self, max_events: int | None = None, window_ms: int | None = None) -> None:
        self.max_events = max_events if max_events is not None else Config.RATE_LIMIT_MAX
        self.window_ms = window_ms if window_ms is not None else Config.RATE_LIMIT_WINDOW_MS
        self._lock = Lock()
        self._windows: dict[str, tuple[int, float]] = {}

    def allow(self, key: str, now_ms: float | None = None) -> bool:
        now = now_ms if now_ms is not None else time.monotonic() * 1000
        with self._lock:
            entry = self._windows.get(key)
            if entry is None or now > entry[1]:
                self._windows[key] = (1, now + self.window_ms)
                return True
            count, reset_at = entry
            count += 1
            self._windows[key] = (count, reset_at)
            return count <= self.max_events

    def forget(self, key: str) -> None:
        with self._lock:
            self._windows.pop(key, None)
