"""
LLM-backed seat with mandatory rule-based fallback.

Flow per decision: render prompt -> provider.generate under a hard timeout ->
decode reply -> check the card against the legal set. Any failure on that path
(provider error, timeout, unparseable reply, illegal card, no provider at all)
falls back to ``RuleBot(fallback_difficulty)``. Nothing is surfaced to players.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Sequence

from .agents import HARD, RuleBot
from .context import DecisionContext
from .deck import Card
from .errors import ProviderError
from .llm_providers import GenerationOptions, TextCompletionProvider
from .play import Play, legal_plays
from .prompting import decode_reply, render_prompt

logger = logging.getLogger(__name__)

SOURCE_LLM = "llm"
SOURCE_FALLBACK = "fallback"


@dataclass
class LLMBot:
    """
    Usage:
        bot = LLMBot(provider=create_provider("anthropic"), handle="AI a1b2")
        card = await bot.decide(hand, trick, ctx)
    """

    provider: TextCompletionProvider | None = None
    options: GenerationOptions = field(default_factory=GenerationOptions)
    fallback_difficulty: str = HARD
    handle: str = "AI"
    seed: int | None = None
    last_source: str | None = field(default=None, init=False)
    fallback_count: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        self._fallback = RuleBot(difficulty=self.fallback_difficulty, seed=self.seed)

    async def _ask_model(
        self,
        hand: Sequence[Card],
        trick: Sequence[Play],
        ctx: DecisionContext,
        legal: list[Card],
    ) -> Card | None:
        assert self.provider is not None
        prompt = render_prompt(hand, trick, ctx, legal)
        try:
            reply = await asyncio.wait_for(
                self.provider.generate(prompt, self.options),
                timeout=self.options.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("%s: %s timed out after %.1fs", self.handle, self.provider.name, self.options.timeout)
            return None
        except ProviderError as exc:
            logger.warning("%s: provider failure: %s", self.handle, exc)
            return None
        except Exception:
            logger.warning("%s: unexpected provider exception", self.handle, exc_info=True)
            return None

        logger.debug("%s raw reply: %r", self.handle, reply)
        decoded = decode_reply(reply, legal)
        if decoded.reasoning:
            logger.info("%s reasoning: %s", self.handle, decoded.reasoning)
        if decoded.card is None:
            logger.warning(
                "%s: no legal card in reply (played_card=%r), falling back to rules",
                self.handle, decoded.played_card,
            )
        return decoded.card

    async def decide(
        self,
        hand: Sequence[Card],
        trick: Sequence[Play],
        ctx: DecisionContext,
    ) -> Card:
        legal = legal_plays(hand, trick)
        if not legal:
            raise ValueError("No legal cards available for LLMBot")

        card: Card | None = None
        if self.provider is not None:
            card = await self._ask_model(hand, trick, ctx, legal)
        else:
            logger.info("%s: no LLM provider configured, using rules", self.handle)

        if card is not None and card in legal:
            self.last_source = SOURCE_LLM
            logger.info("%s chose %s (via %s)", self.handle, card, self.provider.name)
            return card

        self.last_source = SOURCE_FALLBACK
        self.fallback_count += 1
        card = self._fallback.choose(hand, trick, ctx)
        logger.info("%s chose %s (fallback %s rules)", self.handle, card, self.fallback_difficulty)
        return card
