"""
Trick-taking: legal moves and trick winner.

Must follow the led suit when possible; otherwise any card. Only cards of the
led suit can win a trick; highest rank wins. There are no trumps.
"""
from __future__ import annotations

from typing import NamedTuple, Sequence

from .deck import Card, Suit


class Play(NamedTuple):
    """One card put on the table by one seat."""
    seat: str
    card: Card


def led_suit(trick: Sequence[Play]) -> Suit | None:
    """Suit of the first card in the trick, or None if the trick is empty."""
    if not trick:
        return None
    return trick[0].card.suit


def has_suit(hand: Sequence[Card], suit: Suit) -> bool:
    return any(c.suit == suit for c in hand)


def legal_plays(hand: Sequence[Card], trick: Sequence[Play]) -> list[Card]:
    """
    Cards from ``hand`` that may be played on ``trick``.

    Leading: any card. Following: cards of the led suit if the hand holds any,
    else the whole hand.
    """
    suit = led_suit(trick)
    if suit is None:
        return list(hand)
    following = [c for c in hand if c.suit == suit]
    return following if following else list(hand)


def illegal_reason(
    hand: Sequence[Card],
    trick: Sequence[Play],
    card: Card,
) -> str | None:
    """Why ``card`` cannot be played from ``hand`` on ``trick``, or None if it can."""
    if card not in hand:
        return "card not in hand"
    suit = led_suit(trick)
    if suit is not None and card.suit != suit and has_suit(hand, suit):
        return f"must follow suit {suit.symbol}"
    return None


def current_winner(trick: Sequence[Play]) -> Play | None:
    """The play currently winning the (possibly incomplete) trick."""
    suit = led_suit(trick)
    if suit is None:
        return None
    best = trick[0]
    for p in trick[1:]:
        if p.card.suit == suit and p.card.rank > best.card.rank:
            best = p
    return best


def trick_winner(trick: Sequence[Play]) -> str:
    """Seat id of the trick winner: highest card of the led suit."""
    best = current_winner(trick)
    if best is None:
        raise ValueError("Cannot resolve an empty trick")
    return best.seat


def beating_cards(cards: Sequence[Card], trick: Sequence[Play]) -> list[Card]:
    """Cards from ``cards`` that would take the lead of ``trick`` if played now."""
    best = current_winner(trick)
    if best is None:
        return list(cards)
    return [c for c in cards if c.suit == best.card.suit and c.rank > best.card.rank]
