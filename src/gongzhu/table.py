"""
GameTable: the synchronous owner of one table's roster and session.

Each command handler validates first and only then mutates, so a rejected
command leaves the table untouched. Handlers return the outbound events; the
caller (usually ``SessionCoordinator``) delivers them.
"""
from __future__ import annotations

import logging
import random
from typing import Callable, NamedTuple

from .agents import DecisionProvider, RuleBot
from .commands import Command, Continue, Disconnect, PlayCard, Register, Start, requester_of
from .config import GameConfig, LLMConfig
from .context import DecisionContext
from .deal import NUM_SEATS, deal_4p
from .deck import Card, format_cards, parse_card, sort_hand
from .errors import CardParseError, GongzhuError, InvalidCommand, InvalidPlay
from .events import (
    CollectedUpdate,
    CommandRejected,
    DealHand,
    Event,
    GameOver,
    GameStarted,
    GameStateSnapshot,
    InvalidPlayNotice,
    PlayerList,
    TeamInfo,
    TrickWon,
)
from .game import CompletedTrick, RoundState
from .llm_bot import LLMBot
from .llm_providers import create_provider
from .play import Play
from .scoring import add_round_to_cumulative, check_game_end, score_collection, score_round
from .session import HUMAN, LLM_BOT, RULE_BOT, GameSession, Seat
from .teams import TEAM_1, TEAM_2, arrange_seating_order, assign_teams

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[Seat], DecisionProvider]


class BotTurn(NamedTuple):
    """Everything an automated seat needs to decide, as copies."""

    seat_id: str
    epoch: int
    key: tuple[int, int, int]
    provider: DecisionProvider
    hand: tuple[Card, ...]
    trick: tuple[Play, ...]
    ctx: DecisionContext


class GameTable:
    """
    Usage:
        table = GameTable(GameConfig(seed=1))
        events = table.handle(Register("s1", "Alice"))
        events = table.handle(Start("s1"))
    """

    def __init__(
        self,
        config: GameConfig | None = None,
        llm_config: LLMConfig | None = None,
        rng: random.Random | None = None,
        provider_factory: ProviderFactory | None = None,
        table_id: str = "default",
    ):
        self.config = config or GameConfig()
        self.llm_config = llm_config or LLMConfig()
        self.config.validate()
        self.llm_config.validate()
        self.rng = rng or random.Random(self.config.seed)
        self.table_id = table_id
        self.roster: dict[str, Seat] = {}
        self.session: GameSession | None = None
        self._providers: dict[str, DecisionProvider] = {}
        self._provider_factory = provider_factory or self.default_provider
        self._epoch = 0
        self._bot_serial = 0

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def handle(self, command: Command) -> list[Event]:
        """Apply one command. Rejections become recipient-scoped events."""
        logger.info("[%s] %s from %s", self.table_id, command.name, requester_of(command))
        try:
            if isinstance(command, Register):
                return self.register(command.seat_id, command.handle)
            if isinstance(command, Start):
                return self.start(command.requester_id)
            if isinstance(command, Continue):
                return self.continue_game(command.requester_id)
            if isinstance(command, PlayCard):
                return self.play(command.seat_id, command.card, epoch=command.epoch)
            if isinstance(command, Disconnect):
                return self.disconnect(command.seat_id)
            raise InvalidCommand(type(command).__name__, "unknown command")
        except InvalidPlay as exc:
            logger.info("[%s] invalid play: %s", self.table_id, exc)
            return [InvalidPlayNotice(seat_id=exc.seat_id, card=exc.card, reason=exc.reason)]
        except InvalidCommand as exc:
            logger.info("[%s] rejected %s", self.table_id, exc)
            return [CommandRejected(requester_id=requester_of(command), command=exc.command, reason=exc.reason)]

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def register(self, seat_id: str, handle: str) -> list[Event]:
        handle = (handle or "").strip()
        if not seat_id:
            raise InvalidCommand("register", "seat id is required")
        if not handle:
            raise InvalidCommand("register", "handle must not be empty")
        seat = self.roster.get(seat_id)
        if seat is None and len(self.roster) >= NUM_SEATS:
            raise InvalidCommand("register", "table is full")
        if any(s.handle == handle for k, s in self.roster.items() if k != seat_id):
            raise InvalidCommand("register", "handle already taken")

        if seat is None:
            self.roster[seat_id] = Seat(seat_id=seat_id, handle=handle)
            logger.info("[%s] registered %s as %r", self.table_id, seat_id, handle)
        else:
            seat.handle = handle
            logger.info("[%s] %s is now %r", self.table_id, seat_id, handle)
        if self.session is not None and seat_id in self.session.seats:
            self.session.seats[seat_id].handle = handle
        return [self.roster_event()]

    def start(self, requester_id: str) -> list[Event]:
        """Fresh game: autofill bots, new teams and seating, scores reset."""
        if not any(s.kind == HUMAN for s in self.roster.values()):
            raise InvalidCommand("start", "at least one human player is required")

        events: list[Event] = []
        if len(self.roster) < NUM_SEATS:
            self._autofill()
            events.append(self.roster_event())

        teams = assign_teams(list(self.roster), rng=self.rng)
        self._epoch += 1
        self.session = GameSession(
            teams=teams,
            seating_order=arrange_seating_order(teams),
            epoch=self._epoch,
            seats={k: Seat(v.seat_id, v.handle, v.kind, v.difficulty) for k, v in self.roster.items()},
        )
        logger.info(
            "[%s] new game (epoch %d) requested by %s: %s",
            self.table_id, self._epoch, requester_id, teams.to_dict(),
        )
        events.extend(self._deal_round(continued=False))
        return events

    def continue_game(self, requester_id: str) -> list[Event]:
        """Next round with the same teams, seating and cumulative scores."""
        s = self.session
        if s is None:
            raise InvalidCommand("continue", "no game to continue; start a new game")
        if s.round_in_progress():
            raise InvalidCommand("continue", "round still in progress")
        if s.outcome.ended:
            raise InvalidCommand("continue", "game is over; start a new game")
        missing = [seat for seat in s.seating_order if seat not in self.roster]
        if missing:
            raise InvalidCommand("continue", f"need {NUM_SEATS} seated players")
        logger.info("[%s] %s continues the game", self.table_id, requester_id)
        return self._deal_round(continued=True)

    def play(self, seat_id: str, text: str, epoch: int | None = None) -> list[Event]:
        s = self.session
        if s is None or s.round is None:
            raise InvalidPlay(seat_id, str(text), "no round in progress")
        if epoch is not None and epoch != s.epoch:
            raise InvalidPlay(seat_id, str(text), "stale play from a previous game")
        try:
            card = parse_card(text)
        except CardParseError:
            raise InvalidPlay(seat_id, str(text), "not a card") from None

        done = s.round.play_card(seat_id, card)
        logger.info("[%s] %s played %s", self.table_id, s.handle_of(seat_id), card)

        events: list[Event] = [DealHand(seat_id=seat_id, cards=tuple(format_cards(sort_hand(s.round.hands[seat_id]))))]
        if done is not None:
            events.extend(self._trick_events(done))
        events.append(self.snapshot())
        if s.round.is_complete():
            events.append(self._finish_round())
        return events

    def disconnect(self, seat_id: str) -> list[Event]:
        """Vacate the seat. The running session keeps referencing it."""
        seat = self.roster.pop(seat_id, None)
        if seat is None:
            logger.debug("[%s] disconnect from unknown seat %s", self.table_id, seat_id)
            return []
        self._providers.pop(seat_id, None)
        logger.info("[%s] %s (%s) left the table", self.table_id, seat.handle, seat_id)
        return [self.roster_event()]

    # ------------------------------------------------------------------
    # Automated seats
    # ------------------------------------------------------------------

    def default_provider(self, seat: Seat) -> DecisionProvider:
        """Build a decision provider for a bot seat from the table config."""
        seed = self.rng.randrange(2**31) if self.config.seed is not None else None
        if seat.kind == LLM_BOT:
            llm = self.llm_config
            return LLMBot(
                provider=create_provider(llm.provider, api_key=llm.api_key, model=llm.model),
                options=llm.generation_options(),
                fallback_difficulty=llm.fallback_difficulty,
                handle=seat.handle,
                seed=seed,
            )
        return RuleBot(difficulty=seat.difficulty or self.config.autofill_difficulty, seed=seed)

    def _autofill(self) -> None:
        """Seat bots in every free chair; nothing is seated unless all providers build."""
        needed = NUM_SEATS - len(self.roster)
        llm_seats = min(self.config.llm_bot_seats, needed)
        taken = {s.handle for s in self.roster.values()} | set(self.roster)
        serial = self._bot_serial
        added: list[tuple[Seat, DecisionProvider]] = []
        for i in range(needed):
            while True:
                serial += 1
                if i < llm_seats:
                    seat = Seat(f"llm-bot-{serial}", f"AI {serial}", LLM_BOT, self.llm_config.fallback_difficulty)
                else:
                    difficulty = self.config.autofill_difficulty
                    seat = Seat(f"bot-{serial}", f"Bot {serial} ({difficulty})", RULE_BOT, difficulty)
                if seat.seat_id not in taken and seat.handle not in taken:
                    break
            try:
                provider = self._provider_factory(seat)
            except GongzhuError as exc:
                raise InvalidCommand("start", f"cannot seat {seat.seat_id}: {exc}") from exc
            taken.update((seat.seat_id, seat.handle))
            added.append((seat, provider))

        self._bot_serial = serial
        for seat, provider in added:
            self.roster[seat.seat_id] = seat
            self._providers[seat.seat_id] = provider
            logger.info("[%s] added %s seat %s", self.table_id, seat.kind, seat.seat_id)

    def provider_for(self, seat_id: str) -> DecisionProvider | None:
        return self._providers.get(seat_id)

    def pending_bot_turn(self) -> BotTurn | None:
        """The automated seat whose turn it is, with copied decision inputs."""
        s = self.session
        if s is None or not s.round_in_progress():
            return None
        seat_id = s.round.current_seat()
        provider = self._providers.get(seat_id)
        if provider is None:
            return None
        return BotTurn(
            seat_id=seat_id,
            epoch=s.epoch,
            key=(s.epoch, s.round_number, s.round.plays_made),
            provider=provider,
            hand=tuple(s.round.hands[seat_id]),
            trick=tuple(s.round.trick),
            ctx=self.decision_context(seat_id),
        )

    def decision_context(self, seat_id: str) -> DecisionContext:
        s = self.session
        if s is None or s.round is None:
            raise InvalidCommand("decide", "no round in progress")
        return DecisionContext(
            seat_id=seat_id,
            seating_order=s.seating_order,
            handles=s.handles(),
            teams=s.teams,
            collected={k: tuple(v) for k, v in s.round.collected.items()},
            cumulative_scores=dict(s.cumulative),
            round_number=s.round_number,
        )

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def roster_event(self) -> PlayerList:
        return PlayerList(players=tuple(seat.info() for seat in self.roster.values()))

    def snapshot(self) -> GameStateSnapshot:
        s = self.session
        if s is None or s.round is None:
            return GameStateSnapshot(
                trick=(), turn=0, seats=tuple(seat.info() for seat in self.roster.values()),
                scores={}, teams=None, cumulative_team_scores={},
            )
        r = s.round
        return GameStateSnapshot(
            trick=tuple((p.seat, str(p.card)) for p in r.trick),
            turn=r.turn,
            seats=tuple(s.seats[seat_id].info() for seat_id in s.seating_order),
            scores={seat: score_collection(cards).final for seat, cards in r.collected.items()},
            teams=s.teams.to_dict(),
            cumulative_team_scores=dict(s.cumulative),
            round_number=s.round_number,
            hand_sizes={seat: len(h) for seat, h in r.hands.items()},
        )

    def _deal_round(self, continued: bool) -> list[Event]:
        s = self.session
        assert s is not None
        d = deal_4p(s.seating_order, rng=self.rng)
        s.round_number += 1
        s.round = RoundState(d.hands, s.seating_order)
        s.last_result = None
        logger.info("[%s] round %d dealt", self.table_id, s.round_number)

        events: list[Event] = [GameStarted(round_number=s.round_number, continued=continued)]
        for seat_id in s.seating_order:
            hand = sort_hand(s.round.hands[seat_id])
            logger.debug("[%s] hand for %s: %s", self.table_id, seat_id, hand)
            events.append(DealHand(seat_id=seat_id, cards=tuple(format_cards(hand))))
        events.append(self.snapshot())
        return events

    def _trick_events(self, done: CompletedTrick) -> list[Event]:
        s = self.session
        assert s is not None and s.round is not None
        logger.debug("[%s] trick won by %s", self.table_id, s.handle_of(done.winner))
        return [
            TrickWon(
                winner=done.winner,
                handle=s.handle_of(done.winner),
                cards=tuple(format_cards(done.cards)),
                trick_number=len(s.round.trick_history),
            ),
            CollectedUpdate(collected={k: tuple(format_cards(v)) for k, v in s.round.collected.items()}),
        ]

    def _finish_round(self) -> GameOver:
        """Score the completed round, update cumulative totals, check game end."""
        s = self.session
        assert s is not None and s.round is not None
        result = score_round(s.round.collected, s.teams)
        s.last_result = result
        s.cumulative = add_round_to_cumulative(s.cumulative, result)
        s.outcome = check_game_end(s.cumulative, self.config.win_threshold, self.config.loss_threshold)
        logger.info(
            "[%s] round %d scored: %s, cumulative %s%s",
            self.table_id, s.round_number, result.team_scores, s.cumulative,
            f", game won by {s.outcome.winning_team}" if s.outcome.ended else "",
        )
        return GameOver(
            individual_scores={s.handle_of(k): v for k, v in result.individual_scores().items()},
            collected_by_handle={s.handle_of(k): tuple(format_cards(v)) for k, v in s.round.collected.items()},
            team_info={
                team_id: TeamInfo(
                    players=tuple(s.handle_of(p) for p in s.teams.members(team_id)),
                    round_score=result.team_scores[team_id],
                    cumulative_score=s.cumulative[team_id],
                )
                for team_id in (TEAM_1, TEAM_2)
            },
            game_ended=s.outcome.ended,
            winning_team=s.outcome.winning_team,
        )


__all__ = ["GameTable", "BotTurn", "ProviderFactory"]
