"""
Round state machine and offline round/game runners.

AwaitingPlay(turn) --legal play--> AwaitingPlay(next)        (trick < 4)
                               --> trick resolved, AwaitingPlay(winner)
                               --> RoundComplete              (all hands empty)
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Mapping, Sequence

from .deal import deal_4p
from .deck import Card
from .errors import InvalidPlay
from .play import Play, illegal_reason, legal_plays, trick_winner
from .scoring import (
    LOSS_THRESHOLD,
    WIN_THRESHOLD,
    GameOutcome,
    RoundResult,
    add_round_to_cumulative,
    check_game_end,
    score_round,
)
from .teams import Teams

logger = logging.getLogger(__name__)

TRICK_SIZE = 4


class RoundPhase(str, Enum):
    AWAITING_PLAY = "awaiting_play"
    ROUND_COMPLETE = "round_complete"


@dataclass(frozen=True)
class CompletedTrick:
    """A resolved trick: the four plays in order and who took them."""
    plays: tuple[Play, ...]
    winner: str

    @property
    def cards(self) -> list[Card]:
        return [p.card for p in self.plays]


class RoundState:
    """Mutable state for one round: hands, current trick, turn, collections."""

    def __init__(
        self,
        hands: Mapping[str, Sequence[Card]],
        seating_order: Sequence[str],
        leader: str | None = None,
    ):
        if len(seating_order) != TRICK_SIZE:
            raise ValueError(f"Need {TRICK_SIZE} seats, got {len(seating_order)}")
        self.seating_order: tuple[str, ...] = tuple(seating_order)
        self.hands: dict[str, list[Card]] = {s: list(hands[s]) for s in self.seating_order}
        self.trick: list[Play] = []
        self.collected: dict[str, list[Card]] = {s: [] for s in self.seating_order}
        self.trick_history: list[CompletedTrick] = []
        self.turn: int = self.seating_order.index(leader) if leader is not None else 0
        self.phase = RoundPhase.AWAITING_PLAY

    def current_seat(self) -> str:
        return self.seating_order[self.turn]

    def is_complete(self) -> bool:
        return self.phase == RoundPhase.ROUND_COMPLETE

    @property
    def plays_made(self) -> int:
        return len(self.trick_history) * TRICK_SIZE + len(self.trick)

    def legal_cards(self, seat: str) -> list[Card]:
        return legal_plays(self.hands[seat], self.trick)

    def check_play(self, seat: str, card: Card) -> None:
        """Raise InvalidPlay unless ``seat`` may play ``card`` right now."""
        if self.is_complete():
            raise InvalidPlay(seat, str(card), "round is over")
        if seat not in self.hands:
            raise InvalidPlay(seat, str(card), "not seated in this round")
        if seat != self.current_seat():
            raise InvalidPlay(seat, str(card), "not your turn")
        reason = illegal_reason(self.hands[seat], self.trick, card)
        if reason is not None:
            raise InvalidPlay(seat, str(card), reason)

    def play_card(self, seat: str, card: Card) -> CompletedTrick | None:
        """
        Apply a legal play. Returns the resolved trick when this was its 4th card.
        Validation happens before any mutation.
        """
        self.check_play(seat, card)
        self.hands[seat].remove(card)
        self.trick.append(Play(seat, card))

        if len(self.trick) < TRICK_SIZE:
            self.turn = (self.turn + 1) % TRICK_SIZE
            return None

        winner = trick_winner(self.trick)
        done = CompletedTrick(plays=tuple(self.trick), winner=winner)
        self.collected[winner].extend(done.cards)
        self.trick_history.append(done)
        self.trick = []
        self.turn = self.seating_order.index(winner)
        logger.debug("Trick %d won by %s: %s", len(self.trick_history), winner, done.cards)

        if all(not h for h in self.hands.values()):
            self.phase = RoundPhase.ROUND_COMPLETE
        return done

    def all_collected(self) -> list[Card]:
        out: list[Card] = []
        for cards in self.collected.values():
            out.extend(cards)
        return out


def run_round(
    hands: Mapping[str, Sequence[Card]],
    seating_order: Sequence[str],
    choose: Callable[[RoundState, str], Card],
    leader: str | None = None,
) -> RoundState:
    """
    Play a full round synchronously. ``choose(state, seat)`` must return a legal card.
    """
    state = RoundState(hands, seating_order, leader=leader)
    while not state.is_complete():
        seat = state.current_seat()
        _apply_choice(state, seat, choose(state, seat))
    return state


async def run_round_async(
    hands: Mapping[str, Sequence[Card]],
    seating_order: Sequence[str],
    choose: Callable[[RoundState, str], Awaitable[Card]],
    leader: str | None = None,
) -> RoundState:
    """``run_round`` for coroutine callbacks such as decision providers."""
    state = RoundState(hands, seating_order, leader=leader)
    while not state.is_complete():
        seat = state.current_seat()
        _apply_choice(state, seat, await choose(state, seat))
    return state


def _apply_choice(state: RoundState, seat: str, card: Card) -> None:
    legal = state.legal_cards(seat)
    if card not in legal:
        raise ValueError(f"Illegal play {card} by {seat}; legal {legal}")
    state.play_card(seat, card)


@dataclass
class GameRecord:
    """Result of ``run_game``: per-round results and the final totals."""
    rounds: list[RoundResult] = field(default_factory=list)
    cumulative: dict[str, int] = field(default_factory=dict)
    outcome: GameOutcome = GameOutcome(ended=False)

    @property
    def round_number(self) -> int:
        """Number of the round being played (1-based)."""
        return len(self.rounds) + 1

    def add(self, result: RoundResult, win_threshold: int, loss_threshold: int) -> None:
        self.rounds.append(result)
        self.cumulative = add_round_to_cumulative(self.cumulative, result)
        self.outcome = check_game_end(self.cumulative, win_threshold, loss_threshold)


def run_game(
    teams: Teams,
    seating_order: Sequence[str],
    choose: Callable[[RoundState, str], Card],
    rng: random.Random | None = None,
    max_rounds: int = 50,
    win_threshold: int = WIN_THRESHOLD,
    loss_threshold: int = LOSS_THRESHOLD,
    record: GameRecord | None = None,
    on_round: Callable[[GameRecord], None] | None = None,
) -> GameRecord:
    """
    Deal and play rounds with fixed teams and seating until the game ends
    or ``max_rounds`` is reached. Cumulative scores start at zero.

    ``record`` may be passed in so ``choose`` can read the running totals;
    ``on_round`` is called after each scored round.
    """
    rng = rng or random.Random()
    record = record if record is not None else GameRecord(cumulative={k: 0 for k in teams.to_dict()})
    for _ in range(max_rounds):
        d = deal_4p(seating_order, rng=rng)
        state = run_round(d.hands, seating_order, choose)
        record.add(score_round(state.collected, teams), win_threshold, loss_threshold)
        if on_round is not None:
            on_round(record)
        if record.outcome.ended:
            break
    return record


async def run_game_async(
    teams: Teams,
    seating_order: Sequence[str],
    choose: Callable[[RoundState, str], Awaitable[Card]],
    rng: random.Random | None = None,
    max_rounds: int = 50,
    win_threshold: int = WIN_THRESHOLD,
    loss_threshold: int = LOSS_THRESHOLD,
    record: GameRecord | None = None,
    on_round: Callable[[GameRecord], None] | None = None,
) -> GameRecord:
    """``run_game`` for coroutine callbacks; same arguments and result."""
    rng = rng or random.Random()
    record = record if record is not None else GameRecord(cumulative={k: 0 for k in teams.to_dict()})
    for _ in range(max_rounds):
        d = deal_4p(seating_order, rng=rng)
        state = await run_round_async(d.hands, seating_order, choose)
        record.add(score_round(state.collected, teams), win_threshold, loss_threshold)
        if on_round is not None:
            on_round(record)
        if record.outcome.ended:
            break
    return record
