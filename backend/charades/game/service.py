from __future__ import annotations

import logging
from threading import RLock
from typing import Callable

from ..config import Config
from ..utils.randomness import generate_room_code
from .phrases import load_phrases
from .room import GameRoom
from .timers import Scheduler

logger = logging.getLogger(__name__)


_lock = RLock()
_rooms: dict[str, GameRoom] = {}
_player_rooms: dict[str, str] = {}
_online: set[str] = set()
_phrases: list[str] | None = None


def get_phrases() -> list[str]:
    global _phrases
    with _lock:
        if _phrases is None:
            _phrases = load_phrases(Config.PHRASES_FILE or None)
        return _phrases


def set_phrases(phrases: list[str] | None) -> None:
    """Override the phrase set used for new rooms (``None`` reloads from config)."""
    global _phrases
    with _lock:
        _phrases = list(phrases) if phrases is not None else None


def create_room(
    host_id: str,
    host_name: str,
    scheduler: Scheduler,
    on_state_change: Callable[[GameRoom], None],
) -> tuple[GameRoom | None, str | None]:
    """Create a room with ``host_id`` as its first player.

    Returns ``(room, None)`` or ``(None, reason)``.
    """
    with _lock:
        if len(_rooms) >= Config.MAX_ROOMS:
            return None, "Server is full, try again later"

        code = generate_room_code(Config.ROOM_CODE_LENGTH)
        while code in _rooms:
            code = generate_room_code(Config.ROOM_CODE_LENGTH)

        room = GameRoom(code, get_phrases(), scheduler, on_state_change)
        _rooms[code] = room
        _player_rooms[host_id] = code

    room.add_player(host_id, host_name)
    logger.info("[room-created] %s host=%s rooms=%d", code, host_id, len(_rooms))
    return room, None


def join_room(code: str, player_id: str, name: str) -> tuple[GameRoom | None, str | None]:
    room = get_room(code)
    if room is None:
        return None, "Room not found"

    reason = room.join_error(player_id, name)
    if reason is not None:
        return None, reason
    if not room.add_player(player_id, name):
        # Lost a race with another join; re-derive the reason.
        return None, room.join_error(player_id, name) or "Room is full"

    with _lock:
        _player_rooms[player_id] = room.code
    return room, None


def get_room(code: str) -> GameRoom | None:
    with _lock:
        return _rooms.get(code)


def room_for_player(player_id: str) -> GameRoom | None:
    with _lock:
        code = _player_rooms.get(player_id)
        if not code:
            return None
        return _rooms.get(code)


def delete_room(code: str) -> bool:
    with _lock:
        room = _rooms.pop(code, None)
        if room is None:
            return False
        for pid in [pid for pid, c in _player_rooms.items() if c == code]:
            del _player_rooms[pid]

    room.destroy()
    logger.info("[room-deleted] %s (no connected players)", code)
    return True


def list_rooms() -> list[GameRoom]:
    with _lock:
        return list(_rooms.values())


def _detach(player_id: str) -> GameRoom | None:
    with _lock:
        code = _player_rooms.pop(player_id, None)
        return _rooms.get(code) if code else None


def _cleanup_if_abandoned(room: GameRoom) -> None:
    if not room.has_connected_players():
        delete_room(room.code)


def remove_from_room(room: GameRoom, player_id: str) -> None:
    """Take the player out of ``room`` and drop the room if nobody connected is left."""
    room.remove_player(player_id)
    _cleanup_if_abandoned(room)


def leave_room(player_id: str) -> GameRoom | None:
    """Explicit leave or kick: remove the player and drop the room if it emptied."""
    room = _detach(player_id)
    if room is None:
        return None
    remove_from_room(room, player_id)
    return room


def disconnect(player_id: str) -> GameRoom | None:
    with _lock:
        _online.discard(player_id)
    room = _detach(player_id)
    if room is None:
        return None
    room.disconnect_player(player_id)
    _cleanup_if_abandoned(room)
    return room


def mark_online(player_id: str) -> int:
    with _lock:
        _online.add(player_id)
        return len(_online)


def online_count() -> int:
    with _lock:
        return len(_online)


def reset() -> None:
    """Drop every room and connection record."""
    with _lock:
        rooms = list(_rooms.values())
        _rooms.clear()
        _player_rooms.clear()
        _online.clear()
    for room in rooms:
        room.destroy()
