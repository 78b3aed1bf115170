"""
Prompt rendering and reply decoding for LLM-backed seats.

The reply format asks for a ``<reasoning>`` block (logged only) and a
``<played_card>`` block. Decoding never trusts the reply: the result is either
a card from the legal set or None.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Sequence

from .context import DecisionContext
from .deck import Card, parse_card, sort_hand
from .errors import CardParseError
from .play import Play
from .teams import TEAM_1, TEAM_2

RULES = """You are playing Gongzhu (Chinese Hearts), a trick-taking card game.

GAME RULES:
- Follow suit if possible, otherwise play any card
- Highest card of the led suit wins the trick
- Scoring: Hearts are negative (-10 to -50), Q♠ is -100, J♦ is +100, 10♣ doubles your score or gives +50 if no other scoring cards
- "Shooting the moon" (getting all hearts) gives +200 points
- Teams: scores of teammates are added; a team wins at +1000 or when the other team falls to -1000"""

REPLY_FORMAT = """Please provide your response in the following format:
<reasoning>
Brief strategic reasoning (1-2 sentences max)
</reasoning>

<played_card>
[Card name, e.g., "A♠", "5♥", "J♦"]
</played_card>"""


def _is_point_card(card: Card) -> bool:
    return card.is_heart() or card.is_penalty_spade() or card.is_bonus_diamond() or card.is_doubler()


def _cards(cards: Sequence[Card]) -> str:
    return ", ".join(str(c) for c in cards)


def render_prompt(
    hand: Sequence[Card],
    trick: Sequence[Play],
    ctx: DecisionContext,
    legal: Sequence[Card],
) -> str:
    """Describe the table from ``ctx.seat_id``'s point of view."""
    me = ctx.handle_of(ctx.seat_id)
    trick_info = ", ".join(f"{ctx.handle_of(p.seat)}: {p.card}" for p in trick) or "Empty (you lead)"
    position = ctx.seating_order.index(ctx.seat_id) + 1 if ctx.seat_id in ctx.seating_order else "?"

    lines = [
        RULES,
        "",
        "CURRENT SITUATION:",
        f"Your hand: {_cards(sort_hand(hand))}",
        f"Current trick: {trick_info}",
        f"Your position: {me} (Player {position}, card {len(trick) + 1} of 4 in this trick)",
    ]

    if ctx.teams is not None and ctx.seat_id:
        mine = ctx.teams.team_of(ctx.seat_id)
        theirs = TEAM_2 if mine == TEAM_1 else TEAM_1
        lines += [
            "",
            "TEAM INFORMATION:",
            f"Your teammate: {ctx.handle_of(ctx.teams.teammate_of(ctx.seat_id))}",
            f"Your team: {', '.join(ctx.handle_of(s) for s in ctx.teams.members(mine))}",
            f"Opposing team: {', '.join(ctx.handle_of(s) for s in ctx.teams.members(theirs))}",
            "",
            "CUMULATIVE TEAM SCORES:",
            f"Your team: {ctx.cumulative_scores.get(mine, 0)}, "
            f"Opposing team: {ctx.cumulative_scores.get(theirs, 0)} (round {ctx.round_number})",
        ]

    lines += ["", "COLLECTED POINT CARDS SO FAR:"]
    for seat in ctx.seating_order or ctx.collected.keys():
        points = [c for c in ctx.collected.get(seat, ()) if _is_point_card(c)]
        lines.append(f"{ctx.handle_of(seat)}: {_cards(points) or 'none'}")

    lines += [
        "",
        ctx.memory(trick).describe(),
        "",
        f"Valid cards you can play: {_cards(legal)}",
        "",
        "Please choose one card from your hand to play. Consider:",
        "1. Must follow suit if you have cards of the led suit",
        "2. Try to avoid taking penalty cards (hearts, Q♠) unless strategic",
        "3. Try to win J♦ for bonus points when safe",
        "4. Consider your teammate's position and needs",
        "5. Be aware of 10♣ doubling effects",
        "6. Consider what other players might be attempting, e.g. shooting the moon",
        "",
        REPLY_FORMAT,
    ]
    return "\n".join(lines)


@dataclass(frozen=True)
class DecodedReply:
    reasoning: str | None
    played_card: str | None
    card: Card | None


_TOKEN_RE = re.compile(r"(?<![0-9A-Za-z])(10|[2-9JQKA])(?:\s?([♠♥♣♦])|([SHCD])(?![A-Za-z0-9]))")


def extract_tag(text: str, tag: str) -> str | None:
    m = re.search(rf"<{tag}[^>]*>([\s\S]*?)</{tag}>", text, flags=re.IGNORECASE)
    return m.group(1).strip() if m else None


def find_cards(text: str) -> list[Card]:
    """Every card token in ``text``, in order of appearance."""
    out: list[Card] = []
    for rank, symbol, letter in _TOKEN_RE.findall(text):
        try:
            out.append(parse_card(rank + (symbol or letter)))
        except CardParseError:
            continue
    return out


def _block_cards(block: str) -> list[Card]:
    try:
        return [parse_card(block)]
    except CardParseError:
        return find_cards(block)


def decode_reply(text: str, legal: Sequence[Card]) -> DecodedReply:
    """
    Pull reasoning and the played card out of a model reply.

    If the played-card block names a card, that card is the answer and it must
    be legal. Without a usable block the whole reply is scanned and the first
    legal card mentioned wins.
    """
    if not isinstance(text, str):
        return DecodedReply(None, None, None)
    reasoning = extract_tag(text, "reasoning")
    played = extract_tag(text, "played_card")
    legal_set = set(legal)
    named = _block_cards(played) if played else []
    if named:
        card = named[0]
        return DecodedReply(reasoning, played, card if card in legal_set else None)
    for card in find_cards(text):
        if card in legal_set:
            return DecodedReply(reasoning, played, card)
    return DecodedReply(reasoning, played, None)
