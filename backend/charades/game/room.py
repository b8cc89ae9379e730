from __future__ import annotations

import logging
from threading import RLock
from typing import Any, Callable, Sequence

from ..config import Config
from ..utils.randomness import choice
from .answers import answers_match
from .hints import render_hint, reveal_order
from .models import GuessMessage, Phase, Player, RoomSettings, TurnResult, TurnState, Winner
from .scoring import actor_points, guesser_points
from .timers import Scheduler, TimerHandle
from .turn_order import build_turn_order

logger = logging.getLogger(__name__)


def _allowed_int(value: Any, allowed: Sequence[int]) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value in allowed


class GameRoom:
    """One room's game state machine.

    Every public method and every timer callback runs under the room's lock,
    so guesses, departures and ticks never interleave. Any transition that
    supersedes a pending countdown or turn-end delay cancels it before the
    phase changes. Rejected operations return ``False``/``None`` and leave the
    state untouched.
    """

    def __init__(
        self,
        code: str,
        phrases: Sequence[str],
        scheduler: Scheduler,
        on_state_change: Callable[["GameRoom"], None],
    ) -> None:
        if not phrases:
            raise ValueError("phrase list must not be empty")

        self.code = code
        self.phase: Phase = "LOBBY"
        self.players: list[Player] = []
        self.host_id = ""
        self.settings = RoomSettings(
            rounds_per_player=Config.DEFAULT_ROUNDS_PER_PLAYER,
            turn_duration=Config.DEFAULT_TURN_DURATION_SEC,
        )
        self.turn_order: list[str] = []
        self.turn_index = 0
        self.turn = TurnState()
        self.turn_result: TurnResult | None = None

        self._phrases = list(phrases)
        self._used_phrases: set[str] = set()
        self._scheduler = scheduler
        self._on_state_change = on_state_change
        self._lock = RLock()
        self._countdown: TimerHandle | None = None
        self._turn_end_timer: TimerHandle | None = None

    # -- derived state -----------------------------------------------------

    @property
    def current_actor_id(self) -> str | None:
        if self.phase not in ("TURN_ACTIVE", "TURN_END"):
            return None
        if 0 <= self.turn_index < len(self.turn_order):
            return self.turn_order[self.turn_index]
        return None

    @property
    def current_round(self) -> int:
        if not self.turn_order:
            return 1
        per_round = max(1, len(self.turn_order) // max(1, self.settings.rounds_per_player))
        return min(self.turn_index // per_round + 1, self.total_rounds)

    @property
    def total_rounds(self) -> int:
        return self.settings.rounds_per_player

    def get_player(self, player_id: str) -> Player | None:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def connected_players(self) -> list[Player]:
        return [p for p in self.players if p.connected]

    def has_connected_players(self) -> bool:
        with self._lock:
            return any(p.connected for p in self.players)

    # -- roster ------------------------------------------------------------

    def join_error(self, player_id: str, name: str) -> str | None:
        """Why ``name`` cannot join right now, or ``None`` if it can."""
        with self._lock:
            if self.phase != "LOBBY":
                return "Game already in progress"
            if self.get_player(player_id) is not None:
                return "Already in room"
            folded = name.casefold()
            if any(p.name.casefold() == folded for p in self.players):
                return "Name already taken"
            if len(self.players) >= Config.MAX_PLAYERS:
                return "Room is full"
            return None

    def add_player(self, player_id: str, name: str) -> bool:
        with self._lock:
            if self.join_error(player_id, name) is not None:
                return False

            self.players.append(Player(id=player_id, name=name))
            if len(self.players) == 1:
                self.host_id = player_id

            self._notify()
            return True

    def remove_player(self, player_id: str) -> None:
        with self._lock:
            if self.get_player(player_id) is None:
                return

            was_actor = self.current_actor_id == player_id
            self.players = [p for p in self.players if p.id != player_id]

            if not self.players:
                return

            if self.host_id == player_id:
                self._reassign_host()

            if self.phase == "LOBBY":
                self._notify()
                return

            self._strip_from_turn_order(player_id)

            if len(self.connected_players()) < 2:
                self._end_game()
                return

            if was_actor:
                # The next entry already sits at the current index.
                logger.info("[room %s] actor left, skipping to next turn", self.code)
                self._start_turn(self.turn_index)
                return

            if not self._check_turn_complete():
                self._notify()

    def disconnect_player(self, player_id: str) -> None:
        with self._lock:
            player = self.get_player(player_id)
            if player is None:
                return
            player.connected = False
            self.remove_player(player_id)

    def _reassign_host(self) -> None:
        connected = self.connected_players()
        if connected:
            self.host_id = connected[0].id
        elif self.players:
            self.host_id = self.players[0].id

    def _strip_from_turn_order(self, player_id: str) -> None:
        before = sum(1 for pid in self.turn_order[: self.turn_index] if pid == player_id)
        self.turn_order = [pid for pid in self.turn_order if pid != player_id]
        self.turn_index -= before

    # -- lobby -------------------------------------------------------------

    def update_settings(
        self,
        player_id: str,
        rounds_per_player: int | None = None,
        turn_duration: int | None = None,
    ) -> bool:
        with self._lock:
            if self.phase != "LOBBY" or player_id != self.host_id:
                return False

            changed = False
            if _allowed_int(rounds_per_player, Config.ALLOWED_ROUNDS_PER_PLAYER):
                self.settings.rounds_per_player = rounds_per_player
                changed = True
            if _allowed_int(turn_duration, Config.ALLOWED_TURN_DURATIONS):
                self.settings.turn_duration = turn_duration
                changed = True

            if changed:
                self._notify()
            return changed

    def start_game(self) -> bool:
        with self._lock:
            if self.phase != "LOBBY":
                return False
            if len(self.players) < 2:
                return False

            self.turn_order = build_turn_order([p.id for p in self.players], self.settings.rounds_per_player)
            logger.info(
                "[room %s] game started players=%d rounds=%d duration=%ds",
                self.code,
                len(self.players),
                self.settings.rounds_per_player,
                self.settings.turn_duration,
            )
            self._start_turn(0)
            return True

    def return_to_lobby(self) -> None:
        with self._lock:
            self._cancel_timers()
            self.phase = "LOBBY"
            for p in self.players:
                p.score = 0
            self.turn_order = []
            self.turn_index = 0
            self._used_phrases.clear()
            self.turn = TurnState()
            self.turn_result = None
            logger.info("[room %s] returned to lobby", self.code)
            self._notify()

    # -- turns -------------------------------------------------------------

    def advance_turn(self) -> None:
        with self._lock:
            if self.phase in ("LOBBY", "GAME_END"):
                return
            self._cancel_timers()
            self._start_turn(self.turn_index + 1)

    def _start_turn(self, index: int) -> None:
        self._cancel_timers()

        while index < len(self.turn_order) and not self._is_connected(self.turn_order[index]):
            index += 1
        self.turn_index = index

        if index >= len(self.turn_order):
            self._end_game()
            return

        phrase = self._pick_phrase()
        self.turn = TurnState(
            phrase=phrase,
            reveal_order=reveal_order(phrase),
            time_remaining=self.settings.turn_duration,
        )
        self.turn_result = None
        self.phase = "TURN_ACTIVE"
        logger.info(
            "[room %s] turn %d/%d started actor=%s",
            self.code,
            index + 1,
            len(self.turn_order),
            self.turn_order[index],
        )

        self._start_countdown()
        self._notify()

    def _is_connected(self, player_id: str) -> bool:
        p = self.get_player(player_id)
        return p is not None and p.connected

    def _pick_phrase(self) -> str:
        available = [w for w in self._phrases if w not in self._used_phrases]
        if not available:
            self._used_phrases.clear()
            available = list(self._phrases)
        phrase = choice(available)
        self._used_phrases.add(phrase)
        return phrase

    def update_clue(self, player_id: str, clues: Any) -> bool:
        with self._lock:
            if self.phase != "TURN_ACTIVE":
                return False
            if player_id != self.current_actor_id:
                return False
            if not isinstance(clues, list) or not all(isinstance(c, str) for c in clues):
                return False

            self.turn.clues = clues[: Config.MAX_CLUES]
            self._notify()
            return True

    def submit_guess(self, player_id: str, text: str) -> GuessMessage | None:
        with self._lock:
            if self.phase != "TURN_ACTIVE":
                return None
            if player_id == self.current_actor_id:
                return None
            if player_id in self.turn.correct_guessers:
                return None

            player = self.get_player(player_id)
            if player is None:
                return None

            if answers_match(text, self.turn.phrase):
                rank = len(self.turn.correct_guessers)
                points = guesser_points(rank)
                player.score += points
                self.turn.correct_guessers.append(player_id)

                msg = GuessMessage(
                    player_name=player.name,
                    text=f"{player.name} guessed correctly! (+{points})",
                    correct=True,
                    system=True,
                )
                self.turn.guesses.append(msg)
                if not self._check_turn_complete():
                    self._notify()
                return msg

            msg = GuessMessage(player_name=player.name, text=text)
            self.turn.guesses.append(msg)
            self._notify()
            return msg

    def _check_turn_complete(self) -> bool:
        """End the active turn if nobody is left to guess or the cap is hit."""
        if self.phase != "TURN_ACTIVE":
            return False

        actor_id = self.current_actor_id
        correct = self.turn.correct_guessers
        guessers = [p for p in self.players if p.connected and p.id != actor_id]
        all_guessed = all(p.id in correct for p in guessers)
        cap_reached = len(correct) >= Config.MAX_CORRECT_BEFORE_END

        if all_guessed or cap_reached:
            self._end_turn()
            return True
        return False

    def _end_turn(self) -> None:
        self._cancel_timers()

        actor = self.get_player(self.current_actor_id or "")
        correct = self.turn.correct_guessers
        bonus = actor_points(len(correct))
        if actor is not None:
            actor.score += bonus

        winners = []
        for rank, pid in enumerate(correct):
            p = self.get_player(pid)
            if p is None:
                continue
            winners.append(Winner(name=p.name, points=guesser_points(rank)))

        self.turn_result = TurnResult(
            phrase=self.turn.phrase,
            actor_name=actor.name if actor is not None else "Unknown",
            winners=tuple(winners),
            actor_points=bonus,
        )
        self.phase = "TURN_END"
        logger.info("[room %s] turn ended correct=%d", self.code, len(correct))

        self._notify()
        self._schedule_turn_end_advance()

    def _end_game(self) -> None:
        self._cancel_timers()
        self.phase = "GAME_END"
        logger.info("[room %s] game over", self.code)
        self._notify()

    # -- timers ------------------------------------------------------------

    def _start_countdown(self) -> None:
        handle: TimerHandle | None = None

        def _tick() -> None:
            self._on_tick(handle)

        handle = self._scheduler.call_every(1.0, _tick)
        self._countdown = handle

    def _on_tick(self, handle: TimerHandle | None) -> None:
        with self._lock:
            if handle is None or handle.cancelled or handle is not self._countdown:
                return
            if self.phase != "TURN_ACTIVE":
                return

            self.turn.time_remaining -= 1
            if self.turn.time_remaining <= 0:
                self.turn.time_remaining = 0
                self._end_turn()
                return

            self._notify()

    def _schedule_turn_end_advance(self) -> None:
        handle: TimerHandle | None = None

        def _fire() -> None:
            self._on_turn_end_delay(handle)

        handle = self._scheduler.call_later(Config.TURN_END_DELAY_SEC, _fire)
        self._turn_end_timer = handle

    def _on_turn_end_delay(self, handle: TimerHandle | None) -> None:
        with self._lock:
            if handle is None or handle.cancelled or handle is not self._turn_end_timer:
                return
            self._turn_end_timer = None
            if self.phase == "TURN_END":
                self.advance_turn()

    def _cancel_timers(self) -> None:
        if self._countdown is not None:
            self._countdown.cancel()
            self._countdown = None
        if self._turn_end_timer is not None:
            self._turn_end_timer.cancel()
            self._turn_end_timer = None

    def destroy(self) -> None:
        with self._lock:
            self._cancel_timers()

    # -- views -------------------------------------------------------------

    def _notify(self) -> None:
        try:
            self._on_state_change(self)
        except Exception:
            logger.exception("[room %s] state push failed", self.code)

    def hint(self) -> str | None:
        if self.phase != "TURN_ACTIVE" or not self.turn.phrase:
            return None
        elapsed = self.settings.turn_duration - self.turn.time_remaining
        return render_hint(self.turn.phrase, self.turn.reveal_order, self.settings.turn_duration, elapsed)

    def get_snapshot(self, viewer_id: str | None = None) -> dict:
        with self._lock:
            actor_id = self.current_actor_id
            is_actor = viewer_id is not None and viewer_id == actor_id
            # Anonymous viewers get the actor's view of the log.
            hide_log = self.phase == "TURN_ACTIVE" and (viewer_id is None or is_actor)

            payload = {
                "code": self.code,
                "phase": self.phase,
                "players": [p.to_dict() for p in self.players],
                "hostId": self.host_id,
                "settings": self.settings.to_dict(),
                "currentRound": self.current_round,
                "totalRounds": self.total_rounds,
                "currentActorId": actor_id,
                "clues": list(self.turn.clues),
                "timeRemaining": self.turn.time_remaining,
                "guesses": [] if hide_log else [g.to_dict() for g in self.turn.guesses],
                "correctGuessers": list(self.turn.correct_guessers),
                "hint": self.hint(),
                "turnResult": self.turn_result.to_dict() if self.turn_result else None,
            }

            if is_actor and self.turn.phrase:
                payload["currentPhrase"] = self.turn.phrase

            if self.phase == "GAME_END":
                standings = sorted(self.players, key=lambda p: p.score, reverse=True)
                payload["finalStandings"] = [p.to_dict() for p in standings]

            return payload
