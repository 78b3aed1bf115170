"""
Read-only decision context handed to automated seats.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Sequence

from .deck import Card
from .memory import CardMemory
from .play import Play
from .teams import Teams


@dataclass(frozen=True)
class DecisionContext:
    """
    Read-only view of the session for one seat's decision.
    Built by the table from copies; holding it never pins live state.
    """

    seat_id: str
    seating_order: tuple[str, ...] = ()
    handles: Mapping[str, str] = field(default_factory=dict)
    teams: Teams | None = None
    collected: Mapping[str, tuple[Card, ...]] = field(default_factory=dict)
    cumulative_scores: Mapping[str, int] = field(default_factory=dict)
    round_number: int = 1

    def handle_of(self, seat_id: str) -> str:
        return self.handles.get(seat_id, seat_id)

    def teammate(self) -> str | None:
        if self.teams is None or not self.seat_id:
            return None
        return self.teams.teammate_of(self.seat_id)

    def memory(self, trick: Sequence[Play] = ()) -> CardMemory:
        """Cards seen this round: every collected card plus the current trick."""
        mem = CardMemory()
        for cards in self.collected.values():
            mem.observe(cards)
        mem.observe(p.card for p in trick)
        return mem
