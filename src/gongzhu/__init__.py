"""Gongzhu (Chinese Hearts) team session engine."""

__version__ = "0.1.0"

from .deck import Card, Suit, make_deck_52, parse_card, PENALTY_SPADE, BONUS_DIAMOND, DOUBLING_CLUB
from .deal import deal, deal_4p, Deal
from .teams import Teams, assign_teams, arrange_seating_order, TEAM_1, TEAM_2
from .play import Play, legal_plays, trick_winner
from .scoring import (
    score_collection,
    score_round,
    add_round_to_cumulative,
    check_game_end,
    GameOutcome,
    RoundResult,
    SeatScore,
)
from .game import RoundState, run_round, run_game, run_round_async, run_game_async, GameRecord
from .context import DecisionContext
from .agents import DecisionProvider, RuleBot
from .llm_bot import LLMBot
from .llm_providers import create_provider, GenerationOptions
from .commands import Register, Start, Continue, PlayCard, Disconnect
from .table import GameTable
from .coordinator import SessionCoordinator, TableRegistry
from .config import AppConfig, GameConfig, LLMConfig, load_config
from .errors import GongzhuError, InvalidCommand, InvalidPlay, ProviderError, CardParseError, ConfigError
