"""
Exception hierarchy for the Gongzhu engine.

Command and play validators raise before touching any state, so catching one
of these at the table boundary always means "nothing changed".
"""
from __future__ import annotations


class GongzhuError(Exception):
    """Base exception for all Gongzhu errors."""


class InvalidCommand(GongzhuError):
    """A lobby/session command that cannot be applied to the current state."""

    def __init__(self, command: str, reason: str):
        self.command = command
        self.reason = reason
        super().__init__(f"{command}: {reason}")


class InvalidPlay(GongzhuError):
    """A card play rejected by the legality check."""

    def __init__(self, seat_id: str, card: str, reason: str):
        self.seat_id = seat_id
        self.card = card
        self.reason = reason
        super().__init__(f"Invalid play {card} by {seat_id}: {reason}")


class ProviderError(GongzhuError):
    """Raised by text-completion providers on any transport or payload failure."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        self.message = message
        super().__init__(f"[{provider}] {message}")


class CardParseError(GongzhuError, ValueError):
    """Text that is not a ``<RANK><SUIT>`` card token."""

    def __init__(self, text: str):
        self.text = text
        super().__init__(f"Not a card: {text!r}")


class ConfigError(GongzhuError):
    """Invalid configuration value."""


__all__ = [
    "GongzhuError",
    "InvalidCommand",
    "InvalidPlay",
    "ProviderError",
    "CardParseError",
    "ConfigError",
]
