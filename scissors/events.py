"""Wire format shared by the game server and its clients."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any


class Move(str, Enum):
    """A player's move in rock paper scissors."""

    ROCK = "rock"
    PAPER = "paper"
    SCISSORS = "scissors"


class ClientState(str, Enum):
    """Where a client is in its menu and game flow."""

    IDLE = "idle"
    FINDING_PARTNER = "finding_partner"
    IN_GAME = "in_game"
    MAKING_MOVE = "making_move"
    WAITING_FOR_RESULT = "waiting_for_result"
    VIEWING_RESULTS = "viewing_results"


class ServerState(str, Enum):
    """The state of a game session on the server."""

    MATCHMAKING_POOL = "matchmaking_pool"
    GAME_SESSION = "game_session"
    COLLECTING_MOVES = "collecting_moves"
    EVALUATING_ROUND = "evaluating_round"


class EventType(str, Enum):
    """The kind of message exchanged between client and server."""

    FIND_PARTNER = "find_partner"
    MOVE_SUBMITTED = "move_submitted"
    PLAY_AGAIN = "play_again"
    LEAVE_GAME = "leave_game"
    PARTNER_FOUND = "partner_found"
    START_GAME = "start_game"
    BOTH_MOVES_RECEIVED = "both_moves_received"
    GAME_RESULTS = "game_results"


def _text(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _string(data: Any, key: str) -> str:
    value = data.get(key) if isinstance(data, dict) else None
    return value if isinstance(value, str) else ""


def _move(data: Any, key: str) -> Move | str:
    value = _string(data, key)
    try:
        return Move(value)
    except ValueError:
        return value


@dataclass
class Event:
    """A message sent between client and server."""

    type: EventType | str
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": _text(self.type)}
        if self.data is not None:
            out["data"] = self.data.to_dict() if hasattr(self.data, "to_dict") else self.data
        return out


@dataclass
class MoveData:
    """Payload of a move submission."""

    move: Move | str

    def to_dict(self) -> dict[str, Any]:
        return {"move": _text(self.move)}

    @classmethod
    def from_dict(cls, data: Any) -> MoveData:
        return cls(move=_move(data, "move"))


@dataclass
class GameResultsData:
    """The outcome of one round, as seen by one player."""

    your_move: Move | str = ""
    opponent_move: Move | str = ""
    result: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "your_move": _text(self.your_move),
            "opponent_move": _text(self.opponent_move),
            "result": self.result,
        }

    @classmethod
    def from_dict(cls, data: Any) -> GameResultsData:
        return cls(_move(data, "your_move"), _move(data, "opponent_move"), _string(data, "result"))


@dataclass
class PartnerFoundData:
    """Payload sent to both players once they are matched."""

    game_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"game_id": self.game_id}

    @classmethod
    def from_dict(cls, data: Any) -> PartnerFoundData:
        return cls(game_id=_string(data, "game_id"))


def encode_event(event: Event) -> str:
    """Serialise an event to its JSON text."""
    return json.dumps(event.to_dict(), separators=(",", ":"), ensure_ascii=False)


def decode_event(text: str | bytes) -> Event:
    """Parse JSON text into an Event; raise ValueError if it is not one."""
    payload = json.loads(text)
    if not isinstance(payload, dict):
        raise ValueError("event must be a JSON object")
    raw_type = payload.get("type") or ""
    if not isinstance(raw_type, str):
        raise ValueError("event type must be a string")
    try:
        event_type: EventType | str = EventType(raw_type)
    except ValueError:
        event_type = raw_type
    return Event(type=event_type, data=payload.get("data"))