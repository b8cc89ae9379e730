from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal


Phase = Literal["LOBBY", "TURN_ACTIVE", "TURN_END", "GAME_END"]


@dataclass
class Player:
    id: str
    name: str
    score: int = 0
    connected: bool = True

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "score": self.score, "connected": self.connected}


@dataclass
class GuessMessage:
    player_name: str
    text: str
    correct: bool = False
    system: bool = False

    def to_dict(self) -> dict:
        return {
            "playerName": self.player_name,
            "text": self.text,
            "correct": self.correct,
            "system": self.system,
        }


@dataclass(frozen=True)
class Winner:
    name: str
    points: int


@dataclass(frozen=True)
class TurnResult:
    phrase: str
    actor_name: str
    winners: tuple[Winner, ...]
    actor_points: int

    def to_dict(self) -> dict:
        return {
            "phrase": self.phrase,
            "actorName": self.actor_name,
            "winners": [{"name": w.name, "points": w.points} for w in self.winners],
            "actorPoints": self.actor_points,
        }


@dataclass
class RoomSettings:
    rounds_per_player: int = 1
    turn_duration: int = 90

    def to_dict(self) -> dict:
        return {"roundsPerPlayer": self.rounds_per_player, "turnDuration": self.turn_duration}


@dataclass
class TurnState:
    """Per-turn transient state, replaced wholesale at every turn start."""

    phrase: str = ""
    clues: list[str] = field(default_factory=list)
    guesses: list[GuessMessage] = field(default_factory=list)
    correct_guessers: list[str] = field(default_factory=list)
    reveal_order: list[int] = field(default_factory=list)
    time_remaining: int = 0
