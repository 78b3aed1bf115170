"""
Seats and the per-game session record owned by a table.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from .events import PlayerInfo
from .game import RoundState
from .scoring import GameOutcome, RoundResult
from .teams import TEAM_1, TEAM_2, Teams

HUMAN = "human"
RULE_BOT = "rule_bot"
LLM_BOT = "llm_bot"


@dataclass
class Seat:
    """A registered occupant. Humans have no decision provider."""

    seat_id: str
    handle: str
    kind: str = HUMAN
    difficulty: str | None = None

    @property
    def is_bot(self) -> bool:
        return self.kind != HUMAN

    def info(self) -> PlayerInfo:
        return PlayerInfo(seat_id=self.seat_id, handle=self.handle, is_bot=self.is_bot)


@dataclass
class GameSession:
    """
    One game: fixed teams and seating, cumulative team scores and the round
    currently being played. ``epoch`` identifies the session; a fresh ``start``
    gets a new one.
    """

    teams: Teams
    seating_order: tuple[str, ...]
    epoch: int
    # Seat records as of the start; a disconnected seat stays referenced here.
    seats: dict[str, Seat] = field(default_factory=dict)
    cumulative: dict[str, int] = field(default_factory=lambda: {TEAM_1: 0, TEAM_2: 0})
    round_number: int = 0
    round: RoundState | None = None
    last_result: RoundResult | None = None
    outcome: GameOutcome = GameOutcome(ended=False)

    def round_in_progress(self) -> bool:
        return self.round is not None and not self.round.is_complete()

    def handle_of(self, seat_id: str) -> str:
        seat = self.seats.get(seat_id)
        return seat.handle if seat is not None else seat_id

    def handles(self) -> dict[str, str]:
        return {seat_id: self.handle_of(seat_id) for seat_id in self.seating_order}
