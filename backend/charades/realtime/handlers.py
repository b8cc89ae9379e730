from __future__ import annotations

import logging
from typing import Any

from flask import request
from flask_socketio import SocketIO, emit, join_room, leave_room

from ..game import service
from ..game.room import GameRoom
from ..game.timers import Scheduler, SocketIOScheduler
from .guards import (
    RateLimiter,
    parse_int,
    validate_guess,
    validate_player_name,
    validate_room_code,
)

logger = logging.getLogger(__name__)


def register_socketio_handlers(socketio: SocketIO, scheduler: Scheduler | None = None) -> None:
    timers = scheduler or SocketIOScheduler(socketio)
    limiter = RateLimiter()

    def _broadcast_room_state(room: GameRoom) -> None:
        # Each player gets their own view: the actor sees the phrase, guessers don't.
        for p in list(room.players):
            socketio.emit("room-state", room.get_snapshot(p.id), to=p.id)

    def _broadcast_online_count() -> None:
        socketio.emit("online-count", {"count": service.online_count()})

    def _deny(message: str) -> None:
        logger.debug("denied sid=%s: %s", request.sid, message)
        emit("error-msg", {"message": message})

    def _fail(error: str) -> dict:
        return {"success": False, "error": error}

    def _switch_rooms(previous, room):
        # Only called once the new room has accepted the player.
        if previous is not None and previous is not room:
            service.remove_from_room(previous, request.sid)
            leave_room(previous.code)
        join_room(room.code)

    @socketio.on("connect")
    def on_connect(auth=None):
        service.mark_online(request.sid)
        logger.info("[connect] %s", request.sid)
        _broadcast_online_count()

    @socketio.on("create-room")
    def on_create_room(data):
        payload = data or {}
        name = validate_player_name(payload.get("playerName"))
        if not name:
            return _fail("Invalid player name")

        previous = service.room_for_player(request.sid)
        room, error = service.create_room(request.sid, name, timers, _broadcast_room_state)
        if room is None:
            return _fail(error or "Could not create room")

        _switch_rooms(previous, room)
        return {"success": True, "code": room.code}

    @socketio.on("join-room")
    def on_join_room(data):
        payload = data or {}
        name = validate_player_name(payload.get("playerName"))
        if not name:
            return _fail("Invalid player name")

        code = validate_room_code(payload.get("code"))
        if not code:
            return _fail("Invalid room code")

        previous = service.room_for_player(request.sid)
        room, error = service.join_room(code, request.sid, name)
        if room is None:
            return _fail(error or "Could not join room")

        _switch_rooms(previous, room)
        logger.info("[join] %s -> %s", request.sid, room.code)
        return {"success": True, "code": room.code}

    @socketio.on("update-settings")
    def on_update_settings(data):
        payload = data or {}
        room = service.room_for_player(request.sid)
        if room is None:
            return {"ok": False}

        if request.sid != room.host_id:
            _deny("Only the host can change settings")
            return {"ok": False}

        ok = room.update_settings(
            request.sid,
            rounds_per_player=parse_int(payload.get("roundsPerPlayer")),
            turn_duration=parse_int(payload.get("turnDuration")),
        )
        return {"ok": ok}

    @socketio.on("start-game")
    def on_start_game(data=None):
        room = service.room_for_player(request.sid)
        if room is None:
            return

        if request.sid != room.host_id:
            _deny("Only the host can start the game")
            return

        if not room.start_game():
            _deny("Need at least 2 players to start")

    @socketio.on("update-clue")
    def on_update_clue(data):
        if not limiter.allow(request.sid):
            return
        payload = data or {}
        room = service.room_for_player(request.sid)
        if room is None:
            return

        clues: Any = payload.get("clues")
        if not isinstance(clues, list):
            return
        room.update_clue(request.sid, clues)

    @socketio.on("guess")
    def on_guess(data):
        if not limiter.allow(request.sid):
            return
        payload = data or {}
        room = service.room_for_player(request.sid)
        if room is None:
            return

        text = validate_guess(payload.get("text"))
        if not text:
            return
        room.submit_guess(request.sid, text)

    @socketio.on("return-to-lobby")
    def on_return_to_lobby(data=None):
        room = service.room_for_player(request.sid)
        if room is None:
            return

        if request.sid != room.host_id:
            _deny("Only the host can return to the lobby")
            return

        room.return_to_lobby()

    @socketio.on("leave-room")
    def on_leave_room(data=None):
        room = service.leave_room(request.sid)
        if room is None:
            return
        leave_room(room.code)
        logger.info("[leave] %s <- %s", request.sid, room.code)

    @socketio.on("kick-player")
    def on_kick_player(data):
        payload = data or {}
        target_id = payload.get("playerId")
        room = service.room_for_player(request.sid)
        if room is None:
            return {"ok": False}

        if request.sid != room.host_id:
            _deny("Only the host can kick players")
            return {"ok": False}

        if not isinstance(target_id, str) or target_id == request.sid:
            _deny("Invalid kick target")
            return {"ok": False}

        if room.get_player(target_id) is None:
            _deny("Player is not in this room")
            return {"ok": False}

        socketio.emit("kicked", {"code": room.code}, to=target_id)
        leave_room(room.code, sid=target_id)
        service.leave_room(target_id)
        logger.info("[kick] %s kicked from %s by %s", target_id, room.code, request.sid)
        return {"ok": True}

    @socketio.on("disconnect")
    def on_disconnect(reason=None):
        logger.info("[disconnect] %s", request.sid)
        limiter.forget(request.sid)
        service.disconnect(request.sid)
        _broadcast_online_count()
