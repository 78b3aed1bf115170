"""
Command-line interface for offline Gongzhu tables.

Usage examples:

    gongzhu simulate --rounds 10 --seed 7 --difficulty expert
    gongzhu simulate --rounds 3 --llm-seats 1
    gongzhu score A♥ K♥ 10♣
"""
from __future__ import annotations

import argparse
import asyncio
import random
from typing import Optional

from .agents import DIFFICULTIES, DecisionProvider, RuleBot
from .config import AppConfig, load_config
from .context import DecisionContext
from .deck import parse_card
from .errors import CardParseError, ConfigError
from .game import GameRecord, RoundState, run_game_async
from .llm_bot import LLMBot
from .llm_providers import create_provider
from .logging_config import setup_logging
from .scoring import score_collection
from .teams import TEAM_1, TEAM_2, arrange_seating_order, assign_teams

SIM_SEATS = ("north", "east", "south", "west")


def _add_simulate_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser(
        "simulate",
        help="Play a bot-only game and print per-round team scores.",
    )
    parser.add_argument(
        "--rounds",
        type=int,
        default=10,
        help="Maximum number of rounds to play (the game may end earlier).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for teams, deals and bots.",
    )
    parser.add_argument(
        "--difficulty",
        choices=DIFFICULTIES,
        default="medium",
        help="Difficulty of the rule-based seats.",
    )
    parser.add_argument(
        "--llm-seats",
        type=int,
        default=0,
        help="How many of the 4 seats are LLM-backed (0-4).",
    )
    parser.set_defaults(func=_cmd_simulate)


def _make_providers(
    seating: tuple[str, ...],
    difficulty: str,
    llm_seats: int,
    cfg: AppConfig,
    rng: random.Random,
) -> dict[str, DecisionProvider]:
    providers: dict[str, DecisionProvider] = {}
    for i, seat in enumerate(seating):
        seed = rng.randrange(2**31)
        if i < llm_seats:
            providers[seat] = LLMBot(
                provider=create_provider(cfg.llm.provider, api_key=cfg.llm.api_key, model=cfg.llm.model),
                options=cfg.llm.generation_options(),
                fallback_difficulty=cfg.llm.fallback_difficulty,
                handle=seat,
                seed=seed,
            )
        else:
            providers[seat] = RuleBot(difficulty=difficulty, seed=seed)
    return providers


async def simulate(
    rounds: int,
    seed: int | None = None,
    difficulty: str = "medium",
    llm_seats: int = 0,
    cfg: AppConfig | None = None,
    verbose: bool = False,
) -> GameRecord:
    """Play up to ``rounds`` rounds between automated seats only."""
    cfg = cfg or AppConfig()
    rng = random.Random(seed)
    teams = assign_teams(SIM_SEATS, rng=rng)
    seating = arrange_seating_order(teams)
    providers = _make_providers(seating, difficulty, llm_seats, cfg, rng)
    record = GameRecord(cumulative={TEAM_1: 0, TEAM_2: 0})

    async def choose(state: RoundState, seat: str):
        ctx = DecisionContext(
            seat_id=seat,
            seating_order=seating,
            teams=teams,
            collected={k: tuple(v) for k, v in state.collected.items()},
            cumulative_scores=dict(record.cumulative),
            round_number=record.round_number,
        )
        return await providers[seat].decide(tuple(state.hands[seat]), tuple(state.trick), ctx)

    def report(rec: GameRecord) -> None:
        result = rec.rounds[-1]
        print(
            f"[round {len(rec.rounds)}] "
            f"team1={result.team_scores[TEAM_1]:+d} team2={result.team_scores[TEAM_2]:+d} | "
            f"cumulative team1={rec.cumulative[TEAM_1]:+d} team2={rec.cumulative[TEAM_2]:+d}"
        )

    return await run_game_async(
        teams,
        seating,
        choose,
        rng=rng,
        max_rounds=rounds,
        win_threshold=cfg.game.win_threshold,
        loss_threshold=cfg.game.loss_threshold,
        record=record,
        on_round=report if verbose else None,
    )


def _cmd_simulate(args: argparse.Namespace, cfg: AppConfig) -> None:
    if not 0 <= args.llm_seats <= 4:
        raise SystemExit("--llm-seats must be between 0 and 4")
    record = asyncio.run(
        simulate(
            rounds=args.rounds,
            seed=args.seed,
            difficulty=args.difficulty,
            llm_seats=args.llm_seats,
            cfg=cfg,
            verbose=True,
        )
    )
    if record.outcome.ended:
        winner = record.outcome.winning_team or "nobody (tie)"
        print(f"Game over after {len(record.rounds)} rounds: won by {winner}")
    else:
        print(f"No winner after {len(record.rounds)} rounds")


def _add_score_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser(
        "score",
        help="Score a collection of cards, e.g. `gongzhu score A♥ Q♠ 10♣`.",
    )
    parser.add_argument("cards", nargs="+", help="Cards as <RANK><SUIT>; S/H/C/D letters are accepted.")
    parser.set_defaults(func=_cmd_score)


def _cmd_score(args: argparse.Namespace, cfg: AppConfig) -> None:
    try:
        cards = [parse_card(text) for text in args.cards]
    except CardParseError as exc:
        raise SystemExit(str(exc)) from None
    if len(set(cards)) != len(cards):
        raise SystemExit("Duplicate cards in collection")
    s = score_collection(cards)
    print(f"Cards: {' '.join(str(c) for c in cards)}")
    print(f"Base: {s.base:+d}  multiplier: x{s.multiplier}  final: {s.final:+d}")
    if s.shot_moon:
        print("Shot the moon!")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gongzhu", description="Gongzhu (Chinese Hearts) table tools.")
    parser.add_argument("--env-file", default=None, help="Optional .env file with GONGZHU_* settings.")
    parser.add_argument("--log-level", default=None, help="Override GONGZHU_LOG_LEVEL (e.g. DEBUG).")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_simulate_parser(subparsers)
    _add_score_parser(subparsers)
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        cfg = load_config(args.env_file)
    except ConfigError as exc:
        parser.error(str(exc))
    setup_logging(args.log_level or cfg.log_level, cfg.log_file)
    if hasattr(args, "func"):
        args.func(args, cfg)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
