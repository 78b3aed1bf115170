"""
Score calculation: hearts, Q♠ / J♦, shooting the moon, 10♣ doubling,
team totals and the game-end threshold.

Per-seat base score from collected cards:
  Hearts A=-50, K=-40, Q=-30, J=-20, 10..5=-10 each, 4..2=0.
  Q♠ = -100, J♦ = +100.
Shooting the moon (all 13 hearts): base = 200, +100 with Q♠, +100 with J♦.
10♣: alone (no heart, no Q♠, no J♦) scores exactly +50; otherwise doubles.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping

from .deck import Card, RANK_ACE, RANK_JACK, RANK_KING, RANK_QUEEN
from .teams import TEAM_1, TEAM_2, Teams

PENALTY_SPADE_POINTS = -100
BONUS_DIAMOND_POINTS = 100
MOON_BASE = 200
MOON_PENALTY_SPADE_BONUS = 100
MOON_BONUS_DIAMOND_BONUS = 100
DOUBLER_ALONE_POINTS = 50
DOUBLER_MULTIPLIER = 2

WIN_THRESHOLD = 1000
LOSS_THRESHOLD = -1000

_HEART_VALUES = {RANK_ACE: -50, RANK_KING: -40, RANK_QUEEN: -30, RANK_JACK: -20}


def card_value(card: Card) -> int:
    """Face value of a single collected card (the 10♣ counts 0 here)."""
    if card.is_heart():
        if card.rank in _HEART_VALUES:
            return _HEART_VALUES[card.rank]
        return -10 if card.rank >= 5 else 0
    if card.is_penalty_spade():
        return PENALTY_SPADE_POINTS
    if card.is_bonus_diamond():
        return BONUS_DIAMOND_POINTS
    return 0


@dataclass
class SeatScore:
    """Breakdown of one seat's round score."""

    base: int
    final: int
    has_penalty_spade: bool = False
    has_bonus_diamond: bool = False
    has_doubler: bool = False
    heart_count: int = 0
    heart_ranks: frozenset[int] = frozenset()
    shot_moon: bool = False
    multiplier: int = 1

    @property
    def doubler_alone(self) -> bool:
        return self.has_doubler and self.multiplier == 1

    def to_dict(self) -> dict:
        return {
            "base": self.base,
            "final": self.final,
            "hasPenaltySpade": self.has_penalty_spade,
            "hasBonusDiamond": self.has_bonus_diamond,
            "hasDoubler": self.has_doubler,
            "heartCount": self.heart_count,
            "shotMoon": self.shot_moon,
            "multiplier": self.multiplier,
        }


def score_collection(cards: Iterable[Card]) -> SeatScore:
    """Score the cards one seat collected during a round."""
    cards = list(cards)
    has_q = any(c.is_penalty_spade() for c in cards)
    has_j = any(c.is_bonus_diamond() for c in cards)
    has_10 = any(c.is_doubler() for c in cards)
    heart_ranks = frozenset(c.rank for c in cards if c.is_heart())

    base = sum(card_value(c) for c in cards)
    shot_moon = len(heart_ranks) == 13
    if shot_moon:
        base = MOON_BASE
        if has_q:
            base += MOON_PENALTY_SPADE_BONUS
        if has_j:
            base += MOON_BONUS_DIAMOND_BONUS

    multiplier = 1
    if has_10:
        if shot_moon:
            # The moon total is doubled like any other score.
            multiplier = DOUBLER_MULTIPLIER
        elif not heart_ranks and not has_q and not has_j:
            base = DOUBLER_ALONE_POINTS
        else:
            multiplier = DOUBLER_MULTIPLIER

    return SeatScore(
        base=base,
        final=base * multiplier,
        has_penalty_spade=has_q,
        has_bonus_diamond=has_j,
        has_doubler=has_10,
        heart_count=len(heart_ranks),
        heart_ranks=heart_ranks,
        shot_moon=shot_moon,
        multiplier=multiplier,
    )


@dataclass
class RoundResult:
    """Per-seat and per-team scores for one completed round."""

    seat_scores: dict[str, SeatScore]
    team_scores: dict[str, int] = field(default_factory=dict)

    def individual_scores(self) -> dict[str, int]:
        return {seat: s.final for seat, s in self.seat_scores.items()}


def score_round(collected: Mapping[str, Iterable[Card]], teams: Teams) -> RoundResult:
    """
    Score every seat's collection and sum team round scores.
    Team round score = sum of both members' final scores.
    """
    seat_scores = {seat: score_collection(cards) for seat, cards in collected.items()}
    team_scores = {
        team_id: sum(seat_scores[s].final for s in teams.members(team_id) if s in seat_scores)
        for team_id in (TEAM_1, TEAM_2)
    }
    return RoundResult(seat_scores=seat_scores, team_scores=team_scores)


def add_round_to_cumulative(
    cumulative: Mapping[str, int],
    result: RoundResult,
) -> dict[str, int]:
    """New cumulative totals; the input mapping is left untouched."""
    return {
        team_id: cumulative.get(team_id, 0) + result.team_scores.get(team_id, 0)
        for team_id in (TEAM_1, TEAM_2)
    }


@dataclass(frozen=True)
class GameOutcome:
    ended: bool
    winning_team: str | None = None


def check_game_end(
    cumulative: Mapping[str, int],
    win_threshold: int = WIN_THRESHOLD,
    loss_threshold: int = LOSS_THRESHOLD,
) -> GameOutcome:
    """
    Game ends once either team is >= win_threshold or <= loss_threshold.

    A team wins if it reaches win_threshold itself or its opponent collapses to
    loss_threshold. If both teams qualify, the higher cumulative wins; a tie
    ends the game without a winner.
    """
    t1 = cumulative.get(TEAM_1, 0)
    t2 = cumulative.get(TEAM_2, 0)
    candidates = []
    if t1 >= win_threshold or t2 <= loss_threshold:
        candidates.append(TEAM_1)
    if t2 >= win_threshold or t1 <= loss_threshold:
        candidates.append(TEAM_2)
    if not candidates:
        return GameOutcome(ended=False)
    if len(candidates) == 1:
        return GameOutcome(ended=True, winning_team=candidates[0])
    if t1 == t2:
        return GameOutcome(ended=True, winning_team=None)
    return GameOutcome(ended=True, winning_team=TEAM_1 if t1 > t2 else TEAM_2)
