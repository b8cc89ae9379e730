from charades.game import service

from conftest import PHRASE


def _states(client):
    return [e["args"][0] for e in client.get_received() if e["name"] == "room-state"]


def _events(client, name):
    return [e["args"][0] for e in client.get_received() if e["name"] == name]


def _setup_room(sio_factory, *names):
    clients = [sio_factory() for _ in names]
    ack = clients[0].emit("create-room", {"playerName": names[0]}, callback=True)
    assert ack["success"]
    code = ack["code"]
    for c, name in zip(clients[1:], names[1:]):
        joined = c.emit("join-room", {"code": code.lower(), "playerName": name}, callback=True)
        assert joined == {"success": True, "code": code}
    return code, clients


def test_create_and_join_push_state(sio_factory):
    code, (host, guest) = _setup_room(sio_factory, "Ann", "Bob")

    host_state = _states(host)[-1]
    assert host_state["code"] == code
    assert [p["name"] for p in host_state["players"]] == ["Ann", "Bob"]
    assert host_state["hostId"] == host_state["players"][0]["id"]
    assert _states(guest)[-1]["phase"] == "LOBBY"


def test_join_validation(sio_factory):
    client = sio_factory()
    assert client.emit("join-room", {"code": "ABCDE", "playerName": ""}, callback=True) == {
        "success": False,
        "error": "Invalid player name",
    }
    assert client.emit("join-room", {"code": "A", "playerName": "Ann"}, callback=True)["error"] == "Invalid room code"
    assert client.emit("join-room", {"code": "ABCDE", "playerName": "Ann"}, callback=True)["error"] == "Room not found"


def test_name_taken(sio_factory):
    code, (host,) = _setup_room(sio_factory, "Ann")
    other = sio_factory()
    ack = other.emit("join-room", {"code": code, "playerName": "ANN"}, callback=True)
    assert ack == {"success": False, "error": "Name already taken"}


def test_only_host_starts(sio_factory):
    code, (host, guest) = _setup_room(sio_factory, "Ann", "Bob")
    guest.get_received()

    guest.emit("start-game")
    assert _events(guest, "error-msg") == [{"message": "Only the host can start the game"}]
    assert service.get_room(code).phase == "LOBBY"


def test_start_needs_two(sio_factory):
    code, (host,) = _setup_room(sio_factory, "Ann")
    host.get_received()
    host.emit("start-game")
    assert _events(host, "error-msg") == [{"message": "Need at least 2 players to start"}]


def test_settings_update(sio_factory):
    code, (host, guest) = _setup_room(sio_factory, "Ann", "Bob")
    ack = host.emit("update-settings", {"roundsPerPlayer": 2, "turnDuration": "120"}, callback=True)
    assert ack == {"ok": True}
    assert _states(guest)[-1]["settings"] == {"roundsPerPlayer": 2, "turnDuration": 120}

    assert guest.emit("update-settings", {"roundsPerPlayer": 3}, callback=True) == {"ok": False}

    assert host.emit("update-settings", {"turnDuration": 90.7}, callback=True) == {"ok": False}
    assert service.get_room(code).settings.turn_duration == 120


def test_round_trip_through_a_turn(sio_factory, scheduler):
    code, clients = _setup_room(sio_factory, "Ann", "Bob", "Cat")
    host = clients[0]
    for c in clients:
        c.get_received()

    host.emit("start-game")
    latest = {}
    for c in clients:
        latest[c] = _states(c)[-1]

    actor_id = latest[host]["currentActorId"]
    actor = next(c for c in clients if latest[c].get("currentPhrase"))
    guessers = [c for c in clients if c is not actor]
    assert latest[actor]["currentPhrase"] == PHRASE
    assert all("currentPhrase" not in latest[g] for g in guessers)

    actor.emit("update-clue", {"clues": ["🦁", "👑"]})
    assert _states(guessers[0])[-1]["clues"] == ["🦁", "👑"]

    guessers[0].emit("guess", {"text": "jaws"})
    guessers[0].emit("guess", {"text": "the lion king"})
    guessers[1].emit("guess", {"text": "The Lion King!"})

    final = _states(guessers[1])[-1]
    assert final["phase"] == "TURN_END"
    scores = {p["name"]: p["score"] for p in final["players"]}
    assert sorted(scores.values()) == [5, 7, 10]
    assert final["turnResult"]["actorPoints"] == 5
    assert _states(actor)[-1]["guesses"]

    scheduler.advance(5)
    nxt = _states(host)[-1]
    assert nxt["phase"] == "TURN_ACTIVE"
    assert nxt["currentActorId"] != actor_id


def test_kick_player(sio_factory):
    code, (host, guest) = _setup_room(sio_factory, "Ann", "Bob")
    guest_id = _states(host)[-1]["players"][1]["id"]
    host_id = _states(guest)[-1]["hostId"]

    assert guest.emit("kick-player", {"playerId": host_id}, callback=True) == {"ok": False}
    assert host.emit("kick-player", {"playerId": host_id}, callback=True) == {"ok": False}
    assert host.emit("kick-player", {"playerId": guest_id}, callback=True) == {"ok": True}

    assert _events(guest, "kicked") == [{"code": code}]
    assert [p.name for p in service.get_room(code).players] == ["Ann"]
    assert service.room_for_player(guest_id) is None


def test_return_to_lobby_host_only(sio_factory):
    code, (host, guest) = _setup_room(sio_factory, "Ann", "Bob")
    host.emit("start-game")
    room = service.get_room(code)
    assert room.phase == "TURN_ACTIVE"

    guest.emit("return-to-lobby")
    assert room.phase == "TURN_ACTIVE"
    host.emit("return-to-lobby")
    assert room.phase == "LOBBY"


def test_disconnects_tear_down_room(sio_factory, scheduler):
    code, (host, guest) = _setup_room(sio_factory, "Ann", "Bob")
    host.emit("start-game")

    guest.disconnect()
    room = service.get_room(code)
    assert room.phase == "GAME_END"
    assert "finalStandings" in _states(host)[-1]

    host.disconnect()
    assert service.get_room(code) is None
    assert scheduler.pending() == 0


def test_leave_room(sio_factory):
    code, (host, guest) = _setup_room(sio_factory, "Ann", "Bob")
    host.emit("leave-room")
    state = _states(guest)[-1]
    assert [p["name"] for p in state["players"]] == ["Bob"]
    assert state["hostId"] == state["players"][0]["id"]


def test_http_routes(client, sio_factory):
    assert client.get("/api/health").get_json() == {"ok": True}
    assert client.get("/api/rooms/ZZZZZ").status_code == 404

    code, _ = _setup_room(sio_factory, "Ann")
    res = client.get(f"/api/rooms/{code}")
    assert res.status_code == 200
    assert res.get_json()["code"] == code

    stats = client.get("/api/stats").get_json()
    assert stats["rooms"] == 1
    assert stats["online"] >= 1


def test_room_lookup_hides_guesses_during_turn(client, sio_factory):
    code, clients = _setup_room(sio_factory, "Ann", "Bob")
    clients[0].emit("start-game")
    guesser = next(c for c in clients if "currentPhrase" not in _states(c)[-1])
    guesser.emit("guess", {"text": "lion queen"})

    body = client.get(f"/api/rooms/{code}").get_json()
    assert body["phase"] == "TURN_ACTIVE"
    assert body["guesses"] == []
    assert "currentPhrase" not in body


def test_failed_join_keeps_current_room(sio_factory):
    code, (host, guest) = _setup_room(sio_factory, "Ann", "Bob")
    guest_id = _states(host)[-1]["players"][1]["id"]

    ack = guest.emit("join-room", {"code": "ZZZZZ", "playerName": "Bob"}, callback=True)
    assert ack == {"success": False, "error": "Room not found"}
    assert service.room_for_player(guest_id).code == code
    assert [p.name for p in service.get_room(code).players] == ["Ann", "Bob"]

    other_code, (other_host,) = _setup_room(sio_factory, "Cat")
    ack = guest.emit("join-room", {"code": other_code, "playerName": "Bob"}, callback=True)
    assert ack == {"success": True, "code": other_code}
    assert service.room_for_player(guest_id).code == other_code
    assert [p.name for p in service.get_room(code).players] == ["Ann"]
