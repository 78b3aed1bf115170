"""
Outbound events and the sink interface the transport implements.

Every event has a wire ``name`` and a JSON-ready ``payload()``. Events with a
``recipient`` are private to that seat; ``recipient is None`` means broadcast.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Mapping, Protocol


class Event:
    name: ClassVar[str] = ""

    @property
    def recipient(self) -> str | None:
        return None

    def payload(self) -> Any:
        raise NotImplementedError

    def to_dict(self) -> dict[str, Any]:
        return {"event": self.name, "to": self.recipient, "payload": self.payload()}


@dataclass(frozen=True)
class PlayerInfo:
    seat_id: str
    handle: str
    is_bot: bool

    def to_dict(self) -> dict[str, Any]:
        return {"seatId": self.seat_id, "handle": self.handle, "isBot": self.is_bot}


@dataclass(frozen=True)
class PlayerList(Event):
    name: ClassVar[str] = "player_list"
    players: tuple[PlayerInfo, ...]

    def payload(self) -> list[dict[str, Any]]:
        return [p.to_dict() for p in self.players]


@dataclass(frozen=True)
class GameStarted(Event):
    name: ClassVar[str] = "game_started"
    round_number: int
    continued: bool = False

    def payload(self) -> dict[str, Any]:
        return {"roundNumber": self.round_number, "continued": self.continued}


@dataclass(frozen=True)
class DealHand(Event):
    name: ClassVar[str] = "deal_hand"
    seat_id: str
    cards: tuple[str, ...]

    @property
    def recipient(self) -> str | None:
        return self.seat_id

    def payload(self) -> list[str]:
        return list(self.cards)


@dataclass(frozen=True)
class GameStateSnapshot(Event):
    """Public snapshot: no hand contents."""

    name: ClassVar[str] = "game_state"
    trick: tuple[tuple[str, str], ...]
    turn: int
    seats: tuple[PlayerInfo, ...]
    scores: Mapping[str, int]
    teams: Mapping[str, list[str]] | None
    cumulative_team_scores: Mapping[str, int]
    round_number: int = 1
    hand_sizes: Mapping[str, int] = field(default_factory=dict)

    def payload(self) -> dict[str, Any]:
        return {
            "trick": [{"seatId": s, "card": c} for s, c in self.trick],
            "turn": self.turn,
            "seats": [p.to_dict() for p in self.seats],
            "scores": dict(self.scores),
            "teams": dict(self.teams) if self.teams is not None else None,
            "cumulativeTeamScores": dict(self.cumulative_team_scores),
            "roundNumber": self.round_number,
            "handSizes": dict(self.hand_sizes),
        }


@dataclass(frozen=True)
class InvalidPlayNotice(Event):
    name: ClassVar[str] = "invalid_play"
    seat_id: str
    card: str
    reason: str

    @property
    def recipient(self) -> str | None:
        return self.seat_id

    def payload(self) -> dict[str, Any]:
        return {"card": self.card, "reason": self.reason}


@dataclass(frozen=True)
class CommandRejected(Event):
    name: ClassVar[str] = "command_rejected"
    requester_id: str
    command: str
    reason: str

    @property
    def recipient(self) -> str | None:
        return self.requester_id

    def payload(self) -> dict[str, Any]:
        return {"command": self.command, "reason": self.reason}


@dataclass(frozen=True)
class TrickWon(Event):
    name: ClassVar[str] = "trick_won"
    winner: str
    handle: str
    cards: tuple[str, ...]
    trick_number: int

    def payload(self) -> dict[str, Any]:
        return {
            "winner": self.winner,
            "handle": self.handle,
            "cards": list(self.cards),
            "trickNumber": self.trick_number,
        }


@dataclass(frozen=True)
class CollectedUpdate(Event):
    name: ClassVar[str] = "collected"
    collected: Mapping[str, tuple[str, ...]]

    def payload(self) -> dict[str, list[str]]:
        return {seat: list(cards) for seat, cards in self.collected.items()}


@dataclass(frozen=True)
class TeamInfo:
    players: tuple[str, ...]
    round_score: int
    cumulative_score: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "players": list(self.players),
            "roundScore": self.round_score,
            "cumulativeScore": self.cumulative_score,
        }


@dataclass(frozen=True)
class GameOver(Event):
    """End of a round; ``game_ended`` tells whether the whole game is decided."""

    name: ClassVar[str] = "game_over"
    individual_scores: Mapping[str, int]
    collected_by_handle: Mapping[str, tuple[str, ...]]
    team_info: Mapping[str, TeamInfo]
    game_ended: bool
    winning_team: str | None

    def payload(self) -> dict[str, Any]:
        return {
            "individualScores": dict(self.individual_scores),
            "collectedByHandle": {h: list(c) for h, c in self.collected_by_handle.items()},
            "teamInfo": {k: v.to_dict() for k, v in self.team_info.items()},
            "gameEnded": self.game_ended,
            "winningTeam": self.winning_team,
        }


class EventSink(Protocol):
    """Transport boundary: delivers events to one seat or to everyone."""

    async def deliver(self, event: Event) -> None:
        ...


class RecordingSink:
    """Keeps every delivered event in order. Handy for tests and the CLI."""

    def __init__(self) -> None:
        self.events: list[Event] = []

    async def deliver(self, event: Event) -> None:
        self.events.append(event)

    def named(self, name: str) -> list[Event]:
        return [e for e in self.events if e.name == name]

    def for_seat(self, seat_id: str) -> list[Event]:
        """Events visible to ``seat_id``: broadcasts plus its private ones."""
        return [e for e in self.events if e.recipient in (None, seat_id)]

    def clear(self) -> None:
        self.events.clear()
