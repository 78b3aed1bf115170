"""Tests for rule-based decision providers."""
import asyncio
import random

import pytest

from gongzhu.agents import DIFFICULTIES, RuleBot
from gongzhu.context import DecisionContext
from gongzhu.deal import deal_4p
from gongzhu.deck import BONUS_DIAMOND, PENALTY_SPADE, parse_card
from gongzhu.errors import ConfigError
from gongzhu.game import run_round
from gongzhu.play import Play, legal_plays
from gongzhu.teams import Teams, arrange_seating_order

TEAMS = Teams(team1=("a", "c"), team2=("b", "d"))
SEATING = arrange_seating_order(TEAMS)


def cards(*texts):
    return [parse_card(t) for t in texts]


def ctx_for(state, seat):
    return DecisionContext(
        seat_id=seat,
        seating_order=SEATING,
        teams=TEAMS,
        collected={k: tuple(v) for k, v in state.collected.items()},
    )


@pytest.mark.parametrize("difficulty", DIFFICULTIES)
def test_rule_bot_always_legal(difficulty):
    bots = {s: RuleBot(difficulty, seed=i) for i, s in enumerate(SEATING)}

    def choose(state, seat):
        card = bots[seat].choose(state.hands[seat], state.trick, ctx_for(state, seat))
        assert card in legal_plays(state.hands[seat], state.trick)
        return card

    for seed in range(10):
        d = deal_4p(SEATING, rng=random.Random(seed))
        state = run_round(d.hands, SEATING, choose)
        assert state.is_complete()


def test_unknown_difficulty():
    with pytest.raises(ConfigError):
        RuleBot("impossible")


def test_single_legal_card_is_returned():
    hand = cards("2♠", "A♥", "J♦")
    trick = [Play("b", parse_card("9♠"))]
    for difficulty in DIFFICULTIES:
        assert RuleBot(difficulty, seed=1).choose(hand, trick) == parse_card("2♠")


def test_medium_prefers_safe_cards():
    bot = RuleBot("medium", seed=0)
    hand = cards("A♥", "K♥", "Q♠", "3♣")
    for _ in range(30):
        assert bot.choose(hand, []) == parse_card("3♣")


def test_medium_may_play_penalty_when_last():
    hand = cards("A♥", "K♥", "3♣")
    trick = [Play("a", parse_card("2♦")), Play("b", parse_card("3♦")), Play("c", parse_card("4♦"))]
    picks = {RuleBot("medium", seed=s).choose(hand, trick) for s in range(40)}
    assert picks == set(hand)


def test_hard_captures_bonus_diamond_last():
    hand = cards("J♦", "2♦", "A♣")
    trick = [Play("a", parse_card("5♦")), Play("b", parse_card("9♦")), Play("c", parse_card("3♦"))]
    for seed in range(20):
        assert RuleBot("hard", seed=seed).choose(hand, trick) == BONUS_DIAMOND


def test_easy_is_uniformish():
    hand = cards("2♠", "3♠", "4♠", "5♠")
    bot = RuleBot("easy", seed=3)
    picks = {bot.choose(hand, []) for _ in range(100)}
    assert picks == set(hand)


def test_expert_dumps_queen_when_void():
    hand = cards("Q♠", "A♥", "4♦")
    trick = [Play("b", parse_card("K♣"))]
    ctx = DecisionContext(seat_id="a", seating_order=SEATING, teams=TEAMS)
    assert RuleBot("expert").choose(hand, trick, ctx) == PENALTY_SPADE


def test_decide_coroutine_matches_choose():
    hand = cards("2♠", "3♥")
    ctx = DecisionContext(seat_id="a")
    card = asyncio.run(RuleBot("easy", seed=5).decide(hand, [], ctx))
    assert card == RuleBot("easy", seed=5).choose(hand, [], ctx)


def test_no_legal_cards():
    with pytest.raises(ValueError):
        RuleBot().choose([], [])
