"""LLM-backed seat: model replies, timeouts and rule fallback."""
import asyncio
import logging
import random

from gongzhu.context import DecisionContext
from gongzhu.deal import deal_4p
from gongzhu.deck import parse_card
from gongzhu.errors import ProviderError
from gongzhu.llm_bot import SOURCE_FALLBACK, SOURCE_LLM, LLMBot
from gongzhu.llm_providers import GenerationOptions
from gongzhu.play import Play, legal_plays
from gongzhu.teams import Teams

TEAMS = Teams(team1=("a", "c"), team2=("b", "d"))
CTX = DecisionContext(seat_id="a", seating_order=("a", "b", "c", "d"), teams=TEAMS)


def cards(*texts):
    return [parse_card(t) for t in texts]


class FakeProvider:
    name = "fake"

    def __init__(self, reply="", exc=None, delay=0.0):
        self.reply = reply
        self.exc = exc
        self.delay = delay
        self.prompts = []

    async def generate(self, prompt, options):
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.exc is not None:
            raise self.exc
        return self.reply


def decide(bot, hand, trick=()):
    return asyncio.run(bot.decide(hand, list(trick), CTX))


def test_uses_model_card_when_legal(caplog):
    provider = FakeProvider("<reasoning>Lead low.</reasoning><played_card>2♣</played_card>")
    bot = LLMBot(provider=provider, handle="AI 1")
    with caplog.at_level(logging.INFO, logger="gongzhu.llm_bot"):
        card = decide(bot, cards("2♣", "A♥", "Q♠"))
    assert card == parse_card("2♣")
    assert bot.last_source == SOURCE_LLM
    assert bot.fallback_count == 0
    assert "Lead low." in caplog.text
    assert "Valid cards you can play" in provider.prompts[0]


def test_illegal_card_falls_back():
    provider = FakeProvider("<played_card>A♥</played_card>")
    bot = LLMBot(provider=provider, seed=1)
    hand = cards("2♠", "9♠", "A♥")
    trick = [Play("d", parse_card("5♠"))]
    card = decide(bot, hand, trick)
    assert card in legal_plays(hand, trick)
    assert bot.last_source == SOURCE_FALLBACK
    assert bot.fallback_count == 1


def test_garbage_reply_falls_back():
    bot = LLMBot(provider=FakeProvider("I cannot decide."), seed=2)
    hand = cards("2♠", "9♠", "A♥")
    assert decide(bot, hand) in hand
    assert bot.last_source == SOURCE_FALLBACK


def test_provider_error_falls_back(caplog):
    bot = LLMBot(provider=FakeProvider(exc=ProviderError("fake", "boom")), seed=3)
    with caplog.at_level(logging.WARNING, logger="gongzhu.llm_bot"):
        assert decide(bot, cards("3♦", "4♦")) in cards("3♦", "4♦")
    assert bot.last_source == SOURCE_FALLBACK
    assert "boom" in caplog.text


def test_unexpected_exception_falls_back():
    bot = LLMBot(provider=FakeProvider(exc=RuntimeError("kaput")), seed=4)
    assert decide(bot, cards("3♦", "4♦")) in cards("3♦", "4♦")
    assert bot.last_source == SOURCE_FALLBACK


def test_timeout_falls_back_quickly():
    provider = FakeProvider("<played_card>3♦</played_card>", delay=5.0)
    bot = LLMBot(provider=provider, options=GenerationOptions(timeout=0.05), seed=5)

    async def run():
        loop = asyncio.get_running_loop()
        started = loop.time()
        card = await bot.decide(cards("3♦", "4♦"), [], CTX)
        return card, loop.time() - started

    card, elapsed = asyncio.run(run())
    assert card in cards("3♦", "4♦")
    assert elapsed < 2.0
    assert bot.last_source == SOURCE_FALLBACK


def test_no_provider_uses_rules():
    bot = LLMBot(provider=None, fallback_difficulty="expert")
    hand = cards("Q♠", "A♥", "4♦")
    trick = [Play("b", parse_card("K♣"))]
    assert decide(bot, hand, trick) == parse_card("Q♠")
    assert bot.last_source == SOURCE_FALLBACK


def test_always_legal_over_random_situations():
    rng = random.Random(8)
    bot = LLMBot(provider=FakeProvider("<played_card>A♠</played_card>"), seed=8)
    for _ in range(30):
        d = deal_4p(("a", "b", "c", "d"), rng=rng)
        hand = d.hands["a"]
        lead = d.hands["b"][0]
        trick = [Play("b", lead)]
        assert decide(bot, hand, trick) in legal_plays(hand, trick)
