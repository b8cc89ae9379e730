from __future__ import annotations

from flask import Blueprint, jsonify

from ..game import service
from ..realtime.guards import validate_room_code

bp = Blueprint("rooms", __name__)


@bp.get("/rooms/<code>")
def get_room(code: str):
    normalized = validate_room_code(code)
    room = service.get_room(normalized) if normalized else None
    if not room:
        return jsonify({"error": "room_not_found"}), 404
    # Viewer-less projection: no phrase, and no guess log while a turn is active.
    return jsonify(room.get_snapshot())


@bp.get("/stats")
def stats():
    return jsonify({"rooms": len(service.list_rooms()), "online": service.online_count()})
