"""CLI entry points, offline simulation and logging setup."""
import asyncio
import json
import logging

import pytest

from gongzhu.cli import build_parser, main, simulate
from gongzhu.config import AppConfig, GameConfig
from gongzhu.logging_config import setup_logging
from gongzhu.teams import TEAM_1, TEAM_2


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in ("GONGZHU_LOG_FILE", "GONGZHU_LOG_LEVEL", "ANTHROPIC_API_KEY"):
        monkeypatch.delenv(key, raising=False)


def test_score_command(capsys):
    main(["score", "A♥", "10♣"])
    out = capsys.readouterr().out
    assert "final: -100" in out


def test_score_command_ascii_letters(capsys):
    main(["score", "10C"])
    assert "final: +50" in capsys.readouterr().out


def test_score_command_rejects_bad_card():
    with pytest.raises(SystemExit):
        main(["score", "1♠"])


def test_score_command_rejects_duplicates():
    with pytest.raises(SystemExit):
        main(["score", "Q♠", "Q♠"])


def test_simulate_command(capsys):
    main(["simulate", "--rounds", "3", "--seed", "5", "--difficulty", "expert"])
    out = capsys.readouterr().out
    assert "[round 1]" in out
    assert "rounds" in out.splitlines()[-1]


def test_simulate_record_is_consistent():
    record = asyncio.run(simulate(rounds=5, seed=11, difficulty="hard"))
    assert 1 <= len(record.rounds) <= 5
    for team in (TEAM_1, TEAM_2):
        assert record.cumulative[team] == sum(r.team_scores[team] for r in record.rounds)


def test_simulate_stops_at_game_end():
    cfg = AppConfig(game=GameConfig(win_threshold=100, loss_threshold=-100))
    record = asyncio.run(simulate(rounds=50, seed=2, difficulty="easy", cfg=cfg))
    assert record.outcome.ended
    assert len(record.rounds) < 50


def test_simulate_llm_seat_without_key_falls_back():
    record = asyncio.run(simulate(rounds=1, seed=3, llm_seats=1))
    assert len(record.rounds) == 1


def test_parser_requires_subcommand():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_setup_logging_json_file(tmp_path):
    log_file = tmp_path / "logs" / "gongzhu.jsonl"
    setup_logging("DEBUG", log_file)
    setup_logging("DEBUG", log_file)
    pkg = logging.getLogger("gongzhu")
    assert len(pkg.handlers) == 2
    logging.getLogger("gongzhu.table").info("hello %s", "table")
    for h in pkg.handlers:
        h.flush()
    line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
    data = json.loads(line)
    assert data["message"] == "hello table"
    assert data["logger"] == "gongzhu.table"
    assert data["level"] == "INFO"


def test_setup_logging_bad_level():
    with pytest.raises(ValueError):
        setup_logging("LOUD")
