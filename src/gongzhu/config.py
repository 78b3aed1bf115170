"""
Configuration dataclasses and environment loading.

Values come from (lowest to highest precedence) the dataclass defaults, an
optional ``.env`` file and the process environment (``GONGZHU_*``).
"""
from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Mapping

from dotenv import dotenv_values

from .agents import DIFFICULTIES, HARD, MEDIUM
from .errors import ConfigError
from .llm_providers import ANTHROPIC, PROVIDERS, GenerationOptions
from .scoring import LOSS_THRESHOLD, WIN_THRESHOLD

ENV_PREFIX = "GONGZHU_"
MAX_BOT_SEATS = 3


@dataclass
class GameConfig:
    """Table rules and automated-seat behaviour."""

    win_threshold: int = WIN_THRESHOLD
    loss_threshold: int = LOSS_THRESHOLD
    think_time: float = 1.0  # seconds before an automated seat acts
    autofill_difficulty: str = MEDIUM
    llm_bot_seats: int = 0  # how many auto-filled seats become LLM bots
    seed: int | None = None

    def validate(self) -> None:
        if self.win_threshold <= 0:
            raise ConfigError(f"win_threshold must be positive, got {self.win_threshold}")
        if self.loss_threshold >= 0:
            raise ConfigError(f"loss_threshold must be negative, got {self.loss_threshold}")
        if self.think_time < 0:
            raise ConfigError(f"think_time must be >= 0, got {self.think_time}")
        if self.autofill_difficulty not in DIFFICULTIES:
            raise ConfigError(f"Unknown difficulty {self.autofill_difficulty!r}; expected one of {DIFFICULTIES}")
        if not 0 <= self.llm_bot_seats <= MAX_BOT_SEATS:
            raise ConfigError(f"llm_bot_seats must be in 0..{MAX_BOT_SEATS}, got {self.llm_bot_seats}")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "GameConfig":
        cfg = cls(**{k: v for k, v in d.items() if k in cls.__dataclass_fields__})
        cfg.validate()
        return cfg


@dataclass
class LLMConfig:
    """Text-completion provider settings for LLM-backed seats."""

    provider: str = ANTHROPIC
    model: str | None = None
    api_key: str | None = None  # None: the provider reads its own env var
    timeout: float = 8.0
    max_tokens: int = 300
    temperature: float = 0.3
    fallback_difficulty: str = HARD

    def validate(self) -> None:
        if self.provider not in PROVIDERS:
            raise ConfigError(f"Unknown LLM provider type: {self.provider!r}; expected one of {PROVIDERS}")
        if self.fallback_difficulty not in DIFFICULTIES:
            raise ConfigError(f"Unknown difficulty {self.fallback_difficulty!r}; expected one of {DIFFICULTIES}")
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")
        if self.max_tokens <= 0:
            raise ConfigError(f"max_tokens must be positive, got {self.max_tokens}")

    def generation_options(self) -> GenerationOptions:
        return GenerationOptions(
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            timeout=self.timeout,
        )

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d.pop("api_key")
        return d

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "LLMConfig":
        cfg = cls(**{k: v for k, v in d.items() if k in cls.__dataclass_fields__})
        cfg.validate()
        return cfg


@dataclass
class AppConfig:
    game: GameConfig = field(default_factory=GameConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    log_level: str = "INFO"
    log_file: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "game": self.game.to_dict(),
            "llm": self.llm.to_dict(),
            "log_level": self.log_level,
            "log_file": self.log_file,
        }


def _convert(name: str, raw: str, conv: Callable[[str], Any]) -> Any:
    try:
        return conv(raw)
    except ValueError as exc:
        raise ConfigError(f"{ENV_PREFIX}{name}: invalid value {raw!r}") from exc


# env suffix -> (section, field, converter)
_ENV_FIELDS: dict[str, tuple[str, str, Callable[[str], Any]]] = {
    "WIN_THRESHOLD": ("game", "win_threshold", int),
    "LOSS_THRESHOLD": ("game", "loss_threshold", int),
    "THINK_TIME": ("game", "think_time", float),
    "AUTOFILL_DIFFICULTY": ("game", "autofill_difficulty", str.lower),
    "LLM_BOT_SEATS": ("game", "llm_bot_seats", int),
    "SEED": ("game", "seed", int),
    "LLM_PROVIDER": ("llm", "provider", str.lower),
    "LLM_MODEL": ("llm", "model", str),
    "LLM_API_KEY": ("llm", "api_key", str),
    "LLM_TIMEOUT": ("llm", "timeout", float),
    "LLM_MAX_TOKENS": ("llm", "max_tokens", int),
    "LLM_TEMPERATURE": ("llm", "temperature", float),
    "FALLBACK_DIFFICULTY": ("llm", "fallback_difficulty", str.lower),
}


def load_config(
    env_file: str | os.PathLike[str] | None = None,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """
    Build an AppConfig from ``env_file`` (if given) and ``environ``
    (defaults to ``os.environ``). Environment variables win over the file.
    """
    values: dict[str, str] = {}
    if env_file is not None:
        values.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})
    values.update(os.environ if environ is None else environ)

    sections: dict[str, dict[str, Any]] = {"game": {}, "llm": {}}
    for suffix, (section, name, conv) in _ENV_FIELDS.items():
        raw = values.get(ENV_PREFIX + suffix)
        if raw is None or raw.strip() == "":
            continue
        sections[section][name] = _convert(suffix, raw.strip(), conv)

    cfg = AppConfig(
        game=GameConfig.from_dict(sections["game"]),
        llm=LLMConfig.from_dict(sections["llm"]),
        log_level=values.get(ENV_PREFIX + "LOG_LEVEL", "INFO").upper(),
        log_file=values.get(ENV_PREFIX + "LOG_FILE") or None,
    )
    return cfg


__all__ = ["GameConfig", "LLMConfig", "AppConfig", "load_config"]
