"""Situation classification and the per-situation heuristics."""
from gongzhu.context import DecisionContext
from gongzhu.deck import BONUS_DIAMOND, PENALTY_SPADE, parse_card
from gongzhu.memory import CardMemory
from gongzhu.play import Play
from gongzhu.strategy import (
    Strategy,
    choose_strategic,
    classify,
    select_avoid_penalty,
    select_dump_penalty,
    select_lead_safe,
    select_support_teammate,
)
from gongzhu.teams import Teams, arrange_seating_order

TEAMS = Teams(team1=("a", "c"), team2=("b", "d"))
SEATING = arrange_seating_order(TEAMS)  # a, b, c, d


def cards(*texts):
    return [parse_card(t) for t in texts]


def trick(*pairs):
    return [Play(seat, parse_card(t)) for seat, t in pairs]


def ctx(seat, collected=None):
    return DecisionContext(seat_id=seat, seating_order=SEATING, teams=TEAMS, collected=collected or {})


def test_classify_order():
    hand = cards("2♠", "5♥")
    assert classify(hand, [], ctx("a")) == Strategy.LEAD_SAFE
    # last to play with J♦ on the table
    assert classify(cards("2♦"), trick(("a", "J♦"), ("b", "Q♦"), ("c", "3♦")), ctx("d")) == Strategy.CAPTURE_BONUS
    # teammate a winning for c
    assert classify(cards("2♠"), trick(("a", "A♠"), ("b", "3♠")), ctx("c")) == Strategy.SUPPORT_TEAMMATE
    # void with opponent winning
    assert classify(cards("5♥"), trick(("a", "9♣")), ctx("b")) == Strategy.DUMP_PENALTY
    assert classify(cards("2♣", "5♥"), trick(("a", "9♣")), ctx("b")) == Strategy.AVOID_PENALTY


def test_lead_safe_avoids_point_cards():
    hand = cards("2♥", "Q♠", "J♦", "10♣", "7♦")
    assert select_lead_safe(hand, hand, CardMemory()) == parse_card("7♦")


def test_lead_safe_avoids_high_spades_while_queen_out():
    hand = cards("K♠", "A♠", "9♣")
    assert select_lead_safe(hand, hand, CardMemory()) == parse_card("9♣")
    seen = CardMemory.from_cards([PENALTY_SPADE])
    assert select_lead_safe(cards("K♠", "A♠"), cards("K♠", "A♠"), seen) == parse_card("K♠")


def test_lead_safe_only_risky_cards_plays_lowest():
    hand = cards("A♥", "3♥")
    assert select_lead_safe(hand, hand, CardMemory()) == parse_card("3♥")


def test_avoid_penalty_ducks_with_highest_loser():
    t = trick(("a", "10♥"))
    legal = cards("2♥", "9♥", "J♥")
    assert select_avoid_penalty(legal, t) == parse_card("9♥")


def test_avoid_penalty_forced_to_win_plays_highest():
    t = trick(("a", "2♣"))
    legal = cards("5♣", "K♣")
    assert select_avoid_penalty(legal, t) == parse_card("K♣")


def test_avoid_penalty_void_sheds_safe_high():
    t = trick(("a", "2♣"))
    legal = cards("A♥", "9♦", "K♠")
    assert select_avoid_penalty(legal, t) == parse_card("K♠")


def test_support_teammate_gives_bonus_last():
    t = trick(("b", "3♦"), ("c", "A♦"), ("d", "5♦"))
    legal = cards("J♦", "2♦")
    assert select_support_teammate(legal, t) == BONUS_DIAMOND


def test_support_teammate_never_overtakes():
    t = trick(("a", "Q♣"), ("b", "3♣"))
    legal = cards("K♣", "5♣")
    assert select_support_teammate(legal, t) == parse_card("5♣")


def test_dump_penalty_order():
    assert select_dump_penalty(cards("Q♠", "A♥", "2♣"), []) == PENALTY_SPADE
    assert select_dump_penalty(cards("3♥", "A♥", "2♣"), []) == parse_card("A♥")
    assert select_dump_penalty(cards("J♦", "9♣", "2♣"), []) == parse_card("9♣")


def test_capture_bonus_wins_cheaply():
    t = trick(("a", "J♦"), ("b", "5♦"), ("c", "9♦"))
    hand = cards("Q♦", "A♦", "2♣")
    # a (opponent of d) is winning with J♦ itself
    assert choose_strategic(hand, t, ctx("d")) == parse_card("Q♦")


def test_choose_strategic_always_legal():
    hand = cards("2♠", "A♥", "J♦")
    t = trick(("b", "K♠"))
    assert choose_strategic(hand, t, ctx("c")) == parse_card("2♠")


def test_choose_strategic_without_teams():
    hand = cards("Q♠", "A♥", "4♦")
    t = trick(("b", "K♣"))
    card = choose_strategic(hand, t, DecisionContext(seat_id=""))
    assert card in hand
