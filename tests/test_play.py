"""Legal plays, trick resolution and team formation."""
import random

import pytest

from gongzhu.deck import make_deck_52, parse_card
from gongzhu.play import Play, beating_cards, current_winner, illegal_reason, legal_plays, trick_winner
from gongzhu.teams import TEAM_1, TEAM_2, Teams, arrange_seating_order, assign_teams


def cards(*texts):
    return [parse_card(t) for t in texts]


def trick(*pairs):
    return [Play(seat, parse_card(t)) for seat, t in pairs]


def test_leading_any_card():
    hand = cards("2♠", "A♥", "J♦")
    assert legal_plays(hand, []) == hand


def test_must_follow_suit():
    hand = cards("2♠", "K♠", "A♥", "J♦")
    t = trick(("a", "5♠"))
    assert legal_plays(hand, t) == cards("2♠", "K♠")
    assert illegal_reason(hand, t, parse_card("A♥")) == "must follow suit ♠"
    assert illegal_reason(hand, t, parse_card("K♠")) is None


def test_void_may_play_anything():
    hand = cards("A♥", "J♦", "10♣")
    t = trick(("a", "5♠"))
    assert legal_plays(hand, t) == hand
    assert all(illegal_reason(hand, t, c) is None for c in hand)


def test_card_not_in_hand():
    assert illegal_reason(cards("2♠"), [], parse_card("3♠")) == "card not in hand"


def test_trick_winner_highest_of_led_suit():
    t = trick(("a", "5♠"), ("b", "A♥"), ("c", "9♠"), ("d", "K♦"))
    assert trick_winner(t) == "c"
    assert current_winner(t).card == parse_card("9♠")


def test_off_suit_never_wins():
    t = trick(("a", "2♣"), ("b", "A♠"), ("c", "A♥"), ("d", "A♦"))
    assert trick_winner(t) == "a"


def test_trick_winner_random_tricks():
    rng = random.Random(5)
    for _ in range(200):
        four = rng.sample(make_deck_52(), 4)
        t = [Play(s, c) for s, c in zip("abcd", four)]
        win = next(p for p in t if p.seat == trick_winner(t))
        assert win.card.suit == t[0].card.suit
        same = [p.card.rank for p in t if p.card.suit == t[0].card.suit]
        assert win.card.rank == max(same)


def test_trick_winner_empty():
    with pytest.raises(ValueError):
        trick_winner([])


def test_beating_cards():
    t = trick(("a", "9♠"), ("b", "J♠"))
    assert beating_cards(cards("10♠", "Q♠", "A♥"), t) == cards("Q♠")
    assert beating_cards(cards("2♠"), []) == cards("2♠")


def test_assign_teams_partitions_seats():
    seats = ["s1", "s2", "s3", "s4"]
    for seed in range(10):
        teams = assign_teams(seats, rng=random.Random(seed))
        assert sorted(teams.team1 + teams.team2) == sorted(seats)
        for s in seats:
            mate = teams.teammate_of(s)
            assert mate != s
            assert teams.team_of(mate) == teams.team_of(s)
            assert s not in teams.opponents_of(s)


def test_assign_teams_is_random():
    seats = ["s1", "s2", "s3", "s4"]
    pairings = {assign_teams(seats, rng=random.Random(seed)).team1 for seed in range(30)}
    assert len(pairings) > 1


def test_assign_teams_requires_four():
    with pytest.raises(ValueError):
        assign_teams(["a", "b", "c"])
    with pytest.raises(ValueError):
        assign_teams(["a", "b", "c", "c"])


def test_seating_alternates_teams():
    teams = Teams(team1=("a", "c"), team2=("b", "d"))
    order = arrange_seating_order(teams)
    assert order == ("a", "b", "c", "d")
    for i, seat in enumerate(order):
        nxt = order[(i + 1) % 4]
        assert teams.team_of(seat) != teams.team_of(nxt)


def test_teams_to_dict_and_validation():
    teams = Teams(team1=("a", "b"), team2=("c", "d"))
    assert teams.to_dict() == {TEAM_1: ["a", "b"], TEAM_2: ["c", "d"]}
    with pytest.raises(ValueError):
        Teams(team1=("a", "b"), team2=("b", "c"))
    with pytest.raises(KeyError):
        teams.team_of("z")
