"""
Situation-aware card selection: classify the trick into a strategy tag, then
route to the matching heuristic. Every heuristic picks from the legal cards.
"""
from __future__ import annotations

from enum import Enum
from typing import Sequence

from .context import DecisionContext
from .deck import BONUS_DIAMOND, PENALTY_SPADE, RANK_KING, Card, Suit
from .memory import CardMemory
from .play import Play, beating_cards, current_winner, has_suit, led_suit, legal_plays


class Strategy(str, Enum):
    LEAD_SAFE = "lead_safe"
    AVOID_PENALTY = "avoid_penalty"
    CAPTURE_BONUS = "capture_bonus"
    SUPPORT_TEAMMATE = "support_teammate"
    DUMP_PENALTY = "dump_penalty"


def is_penalty_card(card: Card) -> bool:
    return card.is_heart() or card.is_penalty_spade()


def _lowest(cards: Sequence[Card]) -> Card:
    return min(cards, key=lambda c: (c.rank, int(c.suit)))


def _highest(cards: Sequence[Card]) -> Card:
    return max(cards, key=lambda c: (c.rank, -int(c.suit)))


def _teammate_winning(trick: Sequence[Play], ctx: DecisionContext) -> bool:
    best = current_winner(trick)
    mate = ctx.teammate()
    return best is not None and mate is not None and best.seat == mate


def classify(hand: Sequence[Card], trick: Sequence[Play], ctx: DecisionContext) -> Strategy:
    if not trick:
        return Strategy.LEAD_SAFE
    if len(trick) == 3 and any(p.card.is_bonus_diamond() for p in trick):
        return Strategy.CAPTURE_BONUS
    if _teammate_winning(trick, ctx):
        return Strategy.SUPPORT_TEAMMATE
    suit = led_suit(trick)
    if suit is not None and not has_suit(hand, suit) and ctx.teams is not None:
        return Strategy.DUMP_PENALTY
    return Strategy.AVOID_PENALTY


def select_lead_safe(legal: Sequence[Card], hand: Sequence[Card], memory: CardMemory) -> Card:
    """
    Lead low from a harmless suit. High spades are avoided while Q♠ is still
    out in someone else's hand; prefer the suit with the most outstanding cards.
    """
    queen_out = not memory.seen(PENALTY_SPADE) and PENALTY_SPADE not in hand

    def risky(c: Card) -> bool:
        if is_penalty_card(c) or c.is_bonus_diamond() or c.is_doubler():
            return True
        return queen_out and c.suit == Suit.SPADES and c.rank >= RANK_KING

    safe = [c for c in legal if not risky(c)]
    if not safe:
        return _lowest(legal)
    return min(
        safe,
        key=lambda c: (c.rank, -memory.outstanding_in_suit(c.suit, excluding=hand), int(c.suit)),
    )


def select_avoid_penalty(legal: Sequence[Card], trick: Sequence[Play]) -> Card:
    """
    Duck: play the highest card that still loses the trick. If every card wins,
    win with the highest (it would have to win later anyway). When void, shed
    the highest non-penalty card.
    """
    suit = led_suit(trick)
    following = [c for c in legal if c.suit == suit]
    if following:
        winners = set(beating_cards(following, trick))
        losers = [c for c in following if c not in winners]
        if losers:
            return _highest(losers)
        return _highest(following)
    safe = [c for c in legal if not is_penalty_card(c)]
    return _highest(safe) if safe else _lowest(legal)


def select_capture_bonus(legal: Sequence[Card], trick: Sequence[Play], ctx: DecisionContext) -> Card:
    """Win J♦ with the cheapest winning card; fall back to ducking."""
    if _teammate_winning(trick, ctx):
        return select_support_teammate(legal, trick)
    winners = [c for c in beating_cards(legal, trick) if not is_penalty_card(c)]
    if winners:
        return _lowest(winners)
    return select_avoid_penalty(legal, trick)


def select_support_teammate(legal: Sequence[Card], trick: Sequence[Play]) -> Card:
    """
    Teammate is winning: never overtake. Hand over J♦ when we are last to play,
    otherwise shed the highest harmless card under the teammate's.
    """
    winners = set(beating_cards(legal, trick))
    under = [c for c in legal if c not in winners]
    if not under:
        return _lowest(legal)
    if len(trick) == 3 and BONUS_DIAMOND in under:
        return BONUS_DIAMOND
    harmless = [c for c in under if not is_penalty_card(c) and not c.is_bonus_diamond()]
    if harmless:
        return _highest(harmless)
    return _lowest(under)


def select_dump_penalty(legal: Sequence[Card], trick: Sequence[Play]) -> Card:
    """Void in the led suit with an opponent winning: unload Q♠, then the biggest heart."""
    if PENALTY_SPADE in legal:
        return PENALTY_SPADE
    hearts = [c for c in legal if c.is_heart()]
    if hearts:
        return _highest(hearts)
    keep = [c for c in legal if not c.is_bonus_diamond()]
    return _highest(keep) if keep else _lowest(legal)


def choose_strategic(hand: Sequence[Card], trick: Sequence[Play], ctx: DecisionContext) -> Card:
    """Classify the situation and return the matching heuristic's (legal) card."""
    legal = legal_plays(hand, trick)
    if not legal:
        raise ValueError("No legal cards available")
    if len(legal) == 1:
        return legal[0]
    strategy = classify(hand, trick, ctx)
    if strategy == Strategy.LEAD_SAFE:
        card = select_lead_safe(legal, hand, ctx.memory(trick))
    elif strategy == Strategy.CAPTURE_BONUS:
        card = select_capture_bonus(legal, trick, ctx)
    elif strategy == Strategy.SUPPORT_TEAMMATE:
        card = select_support_teammate(legal, trick)
    elif strategy == Strategy.DUMP_PENALTY:
        card = select_dump_penalty(legal, trick)
    else:
        card = select_avoid_penalty(legal, trick)
    # Heuristics only ever pick from ``legal``; keep the post-condition explicit.
    return card if card in legal else legal[0]
