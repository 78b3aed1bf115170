"""
Distribution for the 4-seat table: 13 contiguous cards per seat, in seating order.
"""
from __future__ import annotations

import random
from typing import NamedTuple, Sequence

from .deck import Card, make_deck_52, shuffle

HAND_SIZE = 13
NUM_SEATS = 4


class Deal(NamedTuple):
    """Result of one deal. Hands are fresh lists (mutated during play)."""
    hands: dict[str, list[Card]]
    seating_order: tuple[str, ...]


def deal(seating_order: Sequence[str], deck: Sequence[Card]) -> dict[str, list[Card]]:
    """
    Slice an already shuffled deck into 4 groups of 13, one per seat.

    Seat ``seating_order[i]`` receives ``deck[13*i : 13*(i+1)]``.
    """
    if len(seating_order) != NUM_SEATS:
        raise ValueError(f"Need exactly {NUM_SEATS} seats, got {len(seating_order)}")
    if len(set(seating_order)) != NUM_SEATS:
        raise ValueError("Seat ids must be distinct")
    if len(deck) != HAND_SIZE * NUM_SEATS:
        raise ValueError(f"Deck must hold {HAND_SIZE * NUM_SEATS} cards, got {len(deck)}")
    return {
        seat: list(deck[i * HAND_SIZE:(i + 1) * HAND_SIZE])
        for i, seat in enumerate(seating_order)
    }


def deal_4p(seating_order: Sequence[str], rng: random.Random | None = None) -> Deal:
    """Build, shuffle and deal a fresh deck for the given seating order."""
    cards = shuffle(make_deck_52(), rng)
    return Deal(hands=deal(seating_order, cards), seating_order=tuple(seating_order))
