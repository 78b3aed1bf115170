"""
Decision providers for automated seats and the shared decision interface.

Every automated seat exposes one ``decide(hand, trick, ctx) -> Card`` coroutine
and must only return a card from ``legal_plays(hand, trick)``. The table never
trusts that promise: the returned card goes through the same legality check
as a human play.

Rule-based tiers:
- easy:   uniform random legal card.
- medium: prefer legal cards that are neither hearts nor Q♠, unless none exist
          or we are the last to play in the trick.
- hard:   medium, plus play J♦ as the 4th card of a trick whenever it is legal.
- expert: situation-aware strategy dispatcher (see ``strategy``).
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Protocol, Sequence

from .context import DecisionContext
from .deck import BONUS_DIAMOND, Card
from .errors import ConfigError
from .play import Play, legal_plays
from .strategy import choose_strategic, is_penalty_card

EASY = "easy"
MEDIUM = "medium"
HARD = "hard"
EXPERT = "expert"
DIFFICULTIES = (EASY, MEDIUM, HARD, EXPERT)

# Trick length at which the acting seat is the last to play.
NEAR_FULL = 3


class DecisionProvider(Protocol):
    """Anything that can pick a card for an automated seat."""

    async def decide(
        self,
        hand: Sequence[Card],
        trick: Sequence[Play],
        ctx: DecisionContext,
    ) -> Card:
        """Return a card from ``legal_plays(hand, trick)``."""


@dataclass
class RuleBot:
    """
    Deterministic-heuristic seat.

    Usage:
        bot = RuleBot(difficulty="hard", seed=7)
        card = bot.choose(hand, trick, ctx)
    """

    difficulty: str = MEDIUM
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.difficulty not in DIFFICULTIES:
            raise ConfigError(f"Unknown difficulty {self.difficulty!r}; expected one of {DIFFICULTIES}")
        self._rng = random.Random(self.seed)

    def choose(
        self,
        hand: Sequence[Card],
        trick: Sequence[Play],
        ctx: DecisionContext | None = None,
    ) -> Card:
        legal = legal_plays(hand, trick)
        if not legal:
            raise ValueError("No legal cards available for RuleBot")
        if len(legal) == 1:
            return legal[0]
        if self.difficulty == EASY:
            return self._rng.choice(legal)
        if self.difficulty == HARD and len(trick) == NEAR_FULL and BONUS_DIAMOND in legal:
            return BONUS_DIAMOND
        if self.difficulty == EXPERT:
            return choose_strategic(hand, trick, ctx or DecisionContext(seat_id=""))
        safe = [c for c in legal if not is_penalty_card(c)]
        if safe and len(trick) < NEAR_FULL:
            return self._rng.choice(safe)
        return self._rng.choice(legal)

    async def decide(
        self,
        hand: Sequence[Card],
        trick: Sequence[Play],
        ctx: DecisionContext,
    ) -> Card:
        return self.choose(hand, trick, ctx)


__all__ = [
    "DecisionContext",
    "DecisionProvider",
    "RuleBot",
    "DIFFICULTIES",
    "EASY",
    "MEDIUM",
    "HARD",
    "EXPERT",
    "is_penalty_card",
]
