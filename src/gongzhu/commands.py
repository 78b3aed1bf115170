"""
Inbound commands. Transport adapters translate their messages into these and
hand them to a table (directly, or through ``SessionCoordinator.submit``).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Register:
    seat_id: str
    handle: str
    name = "register"


@dataclass(frozen=True)
class Start:
    requester_id: str
    name = "start"


@dataclass(frozen=True)
class Continue:
    requester_id: str
    name = "continue"


@dataclass(frozen=True)
class PlayCard:
    """
    ``card`` is the textual ``<RANK><SUIT>`` form. ``epoch`` is set only for
    automated plays: a play computed for an earlier session is stale.
    """

    seat_id: str
    card: str
    epoch: int | None = None
    name = "play"


@dataclass(frozen=True)
class Disconnect:
    seat_id: str
    name = "disconnect"


Command = Union[Register, Start, Continue, PlayCard, Disconnect]


def requester_of(command: Command) -> str:
    """Seat id that receives a rejection for ``command``."""
    if isinstance(command, (Start, Continue)):
        return command.requester_id
    return command.seat_id
