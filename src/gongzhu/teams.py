"""
Team formation: two random pairs, seated so teammates never play back to back.
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Sequence

TEAM_1 = "team1"
TEAM_2 = "team2"


@dataclass(frozen=True)
class Teams:
    """Two disjoint pairs of seat ids."""

    team1: tuple[str, str]
    team2: tuple[str, str]

    def __post_init__(self) -> None:
        seats = set(self.team1) | set(self.team2)
        if len(seats) != 4:
            raise ValueError(f"Teams must partition 4 distinct seats: {self.team1} / {self.team2}")

    def team_of(self, seat_id: str) -> str:
        if seat_id in self.team1:
            return TEAM_1
        if seat_id in self.team2:
            return TEAM_2
        raise KeyError(seat_id)

    def members(self, team_id: str) -> tuple[str, str]:
        if team_id == TEAM_1:
            return self.team1
        if team_id == TEAM_2:
            return self.team2
        raise KeyError(team_id)

    def teammate_of(self, seat_id: str) -> str:
        a, b = self.members(self.team_of(seat_id))
        return b if seat_id == a else a

    def opponents_of(self, seat_id: str) -> tuple[str, str]:
        other = TEAM_2 if self.team_of(seat_id) == TEAM_1 else TEAM_1
        return self.members(other)

    def to_dict(self) -> dict[str, list[str]]:
        return {TEAM_1: list(self.team1), TEAM_2: list(self.team2)}


def assign_teams(seat_ids: Sequence[str], rng: random.Random | None = None) -> Teams:
    """Shuffle the 4 seat ids; positions (0, 1) form team1 and (2, 3) team2."""
    if len(seat_ids) != 4 or len(set(seat_ids)) != 4:
        raise ValueError(f"Need exactly 4 distinct seats, got {list(seat_ids)}")
    rng = rng or random.Random()
    ids = list(seat_ids)
    rng.shuffle(ids)
    return Teams(team1=(ids[0], ids[1]), team2=(ids[2], ids[3]))


def arrange_seating_order(teams: Teams) -> tuple[str, str, str, str]:
    """Interleave as [A0, B0, A1, B1]: teammates sit across from each other."""
    a0, a1 = teams.team1
    b0, b1 = teams.team2
    return (a0, b0, a1, b1)
