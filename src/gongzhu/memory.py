"""
Card memory: which of the 52 cards have already been seen this round.

Backed by a 4×13 boolean matrix (suit-major, rank ascending) so per-suit
questions ("how many spades are still out?") are single reductions.
"""
from __future__ import annotations

from typing import Iterable

import numpy as np

from .deck import (
    BONUS_DIAMOND,
    DOUBLING_CLUB,
    PENALTY_SPADE,
    RANK_ACE,
    RANK_JACK,
    RANK_KING,
    RANK_QUEEN,
    Card,
    Suit,
)

NUM_CARDS = 52

KEY_CARDS: tuple[Card, ...] = (
    Card(Suit.SPADES, RANK_ACE),
    Card(Suit.SPADES, RANK_KING),
    PENALTY_SPADE,
    Card(Suit.HEARTS, RANK_ACE),
    Card(Suit.HEARTS, RANK_KING),
    Card(Suit.HEARTS, RANK_QUEEN),
    Card(Suit.HEARTS, RANK_JACK),
    BONUS_DIAMOND,
    DOUBLING_CLUB,
)


def card_index(card: Card) -> int:
    """Stable index 0..51 matching make_deck_52(): suit-major, then rank 2..A."""
    return int(card.suit) * 13 + (card.rank - 2)


def encode_card_set(cards: Iterable[Card]) -> np.ndarray:
    """Binary 52-dim vector: 1 where the card is present."""
    vec = np.zeros(NUM_CARDS, dtype=np.int8)
    for c in cards:
        vec[card_index(c)] = 1
    return vec


class CardMemory:
    """Cards seen so far in the current round (collected tricks + table)."""

    def __init__(self) -> None:
        self._seen = np.zeros((4, 13), dtype=bool)

    @classmethod
    def from_cards(cls, cards: Iterable[Card]) -> "CardMemory":
        mem = cls()
        mem.observe(cards)
        return mem

    def observe(self, cards: Iterable[Card]) -> None:
        for c in cards:
            self._seen[int(c.suit), c.rank - 2] = True

    def reset(self) -> None:
        self._seen[:] = False

    def seen(self, card: Card) -> bool:
        return bool(self._seen[int(card.suit), card.rank - 2])

    @property
    def played_count(self) -> int:
        return int(self._seen.sum())

    @property
    def remaining_count(self) -> int:
        return NUM_CARDS - self.played_count

    def outstanding_in_suit(self, suit: Suit, excluding: Iterable[Card] = ()) -> int:
        """Unseen cards of ``suit`` not in ``excluding`` (usually the caller's hand)."""
        mask = ~self._seen[int(suit)]
        for c in excluding:
            if c.suit == suit:
                mask[c.rank - 2] = False
        return int(mask.sum())

    def key_cards_remaining(self) -> list[Card]:
        return [c for c in KEY_CARDS if not self.seen(c)]

    def describe(self) -> str:
        remaining = ", ".join(str(c) for c in self.key_cards_remaining()) or "none"
        return (
            "GAME MEMORY:\n"
            f"- Cards played so far: {self.played_count}/{NUM_CARDS}\n"
            f"- Remaining cards: {self.remaining_count}\n"
            f"- Key cards still in play: {remaining}"
        )
