"""Deck construction, shuffling, dealing and the card codec."""
import random

import pytest

from gongzhu.deal import deal, deal_4p
from gongzhu.deck import (
    BONUS_DIAMOND,
    DOUBLING_CLUB,
    PENALTY_SPADE,
    Card,
    Suit,
    make_deck_52,
    parse_card,
    shuffle,
    sort_hand,
)
from gongzhu.errors import CardParseError

SEATS = ("a", "b", "c", "d")


def test_deck_52_distinct():
    deck = make_deck_52()
    assert len(deck) == 52
    assert len(set(deck)) == 52
    assert deck[0] == Card(Suit.SPADES, 2)
    assert deck[-1] == Card(Suit.DIAMONDS, 14)


def test_card_text_form():
    assert str(Card(Suit.HEARTS, 10)) == "10♥"
    assert str(PENALTY_SPADE) == "Q♠"
    assert str(BONUS_DIAMOND) == "J♦"
    assert str(DOUBLING_CLUB) == "10♣"
    assert all(parse_card(str(c)) == c for c in make_deck_52())


def test_parse_card_lenient():
    assert parse_card(" q♠ ") == PENALTY_SPADE
    assert parse_card('"JD"') == BONUS_DIAMOND
    assert parse_card("[10c]") == DOUBLING_CLUB
    assert parse_card("ah") == Card(Suit.HEARTS, 14)


@pytest.mark.parametrize("text", ["", "1♠", "11♥", "Z♦", "10", "♠", "10X", "QQ♠"])
def test_parse_card_rejects(text):
    with pytest.raises(CardParseError):
        parse_card(text)


def test_parse_error_is_value_error():
    with pytest.raises(ValueError):
        parse_card("nope")


def test_rank_out_of_range():
    with pytest.raises(ValueError):
        Card(Suit.CLUBS, 15)


def test_shuffle_is_permutation_and_copy():
    deck = make_deck_52()
    shuffled = shuffle(deck, random.Random(3))
    assert sorted(shuffled, key=lambda c: (c.suit, c.rank)) == deck
    assert deck == make_deck_52()
    assert shuffled != deck


def test_shuffle_deterministic_with_seed():
    a = shuffle(make_deck_52(), random.Random(11))
    b = shuffle(make_deck_52(), random.Random(11))
    assert a == b


def test_shuffle_uses_the_rng_shuffle():
    expected = make_deck_52()
    random.Random(5).shuffle(expected)
    assert shuffle(make_deck_52(), random.Random(5)) == expected


def test_deal_hands_disjoint_and_complete():
    for seed in range(20):
        d = deal_4p(SEATS, rng=random.Random(seed))
        assert set(d.hands) == set(SEATS)
        all_cards = [c for h in d.hands.values() for c in h]
        assert all(len(h) == 13 for h in d.hands.values())
        assert len(set(all_cards)) == 52
        assert set(all_cards) == set(make_deck_52())


def test_deal_contiguous_slices():
    deck = make_deck_52()
    hands = deal(SEATS, deck)
    assert hands["a"] == deck[:13]
    assert hands["d"] == deck[39:]


def test_deal_validates_input():
    with pytest.raises(ValueError):
        deal(("a", "b", "c"), make_deck_52())
    with pytest.raises(ValueError):
        deal(("a", "a", "c", "d"), make_deck_52())
    with pytest.raises(ValueError):
        deal(SEATS, make_deck_52()[:51])


def test_sort_hand_suit_then_rank():
    hand = [parse_card(t) for t in ["2♦", "A♠", "3♥", "2♠", "K♣"]]
    assert [str(c) for c in sort_hand(hand)] == ["2♠", "A♠", "3♥", "K♣", "2♦"]
