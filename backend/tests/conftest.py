from __future__ import annotations

import os
import sys

import pytest

# Ensure the backend root (containing the `charades` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, ".."))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from charades.config import Config  # noqa: E402
from charades.game import service  # noqa: E402
from charades.game.room import GameRoom  # noqa: E402
from charades.game.timers import TimerHandle  # noqa: E402

PHRASE = "The Lion King"


class _Timer:
    def __init__(self, due, interval, handle, callback, seq):
        self.due = due
        self.interval = interval
        self.handle = handle
        self.callback = callback
        self.seq = seq


class ManualScheduler:
    """Virtual clock: timers only fire from ``advance``."""

    def __init__(self):
        self.now = 0.0
        self._timers: list[_Timer] = []
        self._seq = 0

    def _add(self, delay, interval, callback):
        handle = TimerHandle()
        self._seq += 1
        self._timers.append(_Timer(self.now + delay, interval, handle, callback, self._seq))
        return handle

    def call_later(self, delay, callback):
        return self._add(delay, None, callback)

    def call_every(self, interval, callback):
        return self._add(interval, interval, callback)

    def pending(self) -> int:
        return sum(1 for t in self._timers if not t.handle.cancelled)

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            self._timers = [t for t in self._timers if not t.handle.cancelled]
            due = [t for t in self._timers if t.due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: (t.due, t.seq))
            self.now = timer.due
            if timer.interval is None:
                self._timers.remove(timer)
            else:
                timer.due += timer.interval
            timer.callback()
        self.now = target


class Recorder:
    def __init__(self):
        self.calls = 0

    def __call__(self, room):
        self.calls += 1


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def recorder():
    return Recorder()


@pytest.fixture()
def make_room(scheduler, recorder):
    def _make(*names, phrases=None, rounds=1, duration=60):
        room = GameRoom("ABCDE", phrases or [PHRASE], scheduler, recorder)
        room.settings.rounds_per_player = rounds
        room.settings.turn_duration = duration
        for name in names:
            assert room.add_player(name.lower(), name)
        return room

    return _make


@pytest.fixture(autouse=True)
def clean_registry():
    service.reset()
    service.set_phrases([PHRASE])
    yield
    service.reset()
    service.set_phrases(None)


class TestConfig(Config):
    TESTING = True
    LOG_LEVEL = "WARNING"


@pytest.fixture()
def app_and_socketio(scheduler):
    from charades.server import create_app

    return create_app(TestConfig, scheduler=scheduler)


@pytest.fixture()
def flask_app(app_and_socketio):
    return app_and_socketio[0]


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(app_and_socketio):
    app, socketio = app_and_socketio
    clients = []

    def _connect():
        c = socketio.test_client(app, flask_test_client=app.test_client())
        clients.append(c)
        return c

    yield _connect

    for c in clients:
        try:
            if c.is_connected():
                c.disconnect()
        except Exception:
            pass
