"""Cancellable timers for room countdowns and turn-end delays.

Rooms never sleep themselves; they ask a scheduler for a handle and keep it
so the next transition can cancel it. A cancelled handle never invokes its
callback again, and rooms additionally check under their lock that the
firing handle is still the one they hold.
"""
from __future__ import annotations

import logging
from typing import Callable, Protocol

from flask_socketio import SocketIO

logger = logging.getLogger(__name__)


class TimerHandle:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...

    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle: ...


def _run_callback(callback: Callable[[], None]) -> None:
    try:
        callback()
    except Exception:
        logger.exception("timer callback failed")


class SocketIOScheduler:
    """Runs each timer as a Socket.IO background task.

    Works under every async mode Flask-SocketIO supports (threading, eventlet),
    since sleeping and spawning both go through the server object.
    """

    def __init__(self, socketio: SocketIO) -> None:
        self._socketio = socketio

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle()

        def _runner() -> None:
            self._socketio.sleep(delay)
            if not handle.cancelled:
                _run_callback(callback)

        self._socketio.start_background_task(_runner)
        return handle

    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle()

        def _runner() -> None:
            while not handle.cancelled:
                self._socketio.sleep(interval)
                if handle.cancelled:
                    break
                _run_callback(callback)

        self._socketio.start_background_task(_runner)
        return handle
