"""
Gongzhu deck: 52 cards (4 suits × 13 ranks).

The textual form ``<RANK><SUIT>`` (e.g. ``10♥``, ``Q♠``) is both the wire and
the display representation. Three cards carry special scoring rules:
Q♠ (penalty), J♦ (bonus) and 10♣ (doubling).
"""
from __future__ import annotations

import random
import re
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable

from .errors import CardParseError


class Suit(IntEnum):
    """Deck order: spades, hearts, clubs, diamonds."""
    SPADES = 0
    HEARTS = 1
    CLUBS = 2
    DIAMONDS = 3

    @property
    def symbol(self) -> str:
        return SUIT_SYMBOLS[self]


SUIT_SYMBOLS = ("♠", "♥", "♣", "♦")
SUIT_LETTERS = {"S": Suit.SPADES, "H": Suit.HEARTS, "C": Suit.CLUBS, "D": Suit.DIAMONDS}

# Rank tokens from lowest to highest. Rank values are 2..14.
RANK_TOKENS = ("2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K", "A")
RANK_JACK = 11
RANK_QUEEN = 12
RANK_KING = 13
RANK_ACE = 14


@dataclass(frozen=True)
class Card:
    """A single card: suit + rank (2..14, 14 = Ace)."""

    suit: Suit
    rank: int

    def __post_init__(self) -> None:
        if not 2 <= self.rank <= 14:
            raise ValueError(f"Rank out of range: {self.rank}")

    @property
    def rank_token(self) -> str:
        return RANK_TOKENS[self.rank - 2]

    def is_heart(self) -> bool:
        return self.suit == Suit.HEARTS

    def is_penalty_spade(self) -> bool:
        return self == PENALTY_SPADE

    def is_bonus_diamond(self) -> bool:
        return self == BONUS_DIAMOND

    def is_doubler(self) -> bool:
        return self == DOUBLING_CLUB

    def __str__(self) -> str:
        return f"{self.rank_token}{self.suit.symbol}"

    def __repr__(self) -> str:
        return str(self)


PENALTY_SPADE = Card(Suit.SPADES, RANK_QUEEN)
BONUS_DIAMOND = Card(Suit.DIAMONDS, RANK_JACK)
DOUBLING_CLUB = Card(Suit.CLUBS, 10)


def make_deck_52() -> list[Card]:
    """Build the full deck in deterministic suit-major, rank-ascending order."""
    return [Card(s, r) for s in Suit for r in range(2, 15)]


def shuffle(deck: Iterable[Card], rng: random.Random | None = None) -> list[Card]:
    """Return a uniformly shuffled copy of ``deck``."""
    rng = rng or random.Random()
    cards = list(deck)
    rng.shuffle(cards)
    return cards


_CARD_RE = re.compile(r"^(10|[2-9JQKA])([♠♥♣♦SHCD])$")


def parse_card(text: str) -> Card:
    """
    Parse ``<RANK><SUIT>`` into a Card.

    Accepts the canonical symbols and, for lenient decoding, ASCII suit letters,
    lowercase, surrounding whitespace, quotes and brackets. ``1`` is not a rank:
    Ten is always written ``10``.
    """
    if not isinstance(text, str):
        raise CardParseError(repr(text))
    token = text.strip().strip("\"'`[]()<>").strip().upper()
    m = _CARD_RE.match(token)
    if m is None:
        raise CardParseError(text)
    rank_tok, suit_tok = m.groups()
    suit = SUIT_LETTERS.get(suit_tok)
    if suit is None:
        suit = Suit(SUIT_SYMBOLS.index(suit_tok))
    return Card(suit, RANK_TOKENS.index(rank_tok) + 2)


def format_cards(cards: Iterable[Card]) -> list[str]:
    return [str(c) for c in cards]


def sort_hand(cards: Iterable[Card]) -> list[Card]:
    """Sort by suit (deck order) then rank, for display."""
    return sorted(cards, key=lambda c: (int(c.suit), c.rank))
