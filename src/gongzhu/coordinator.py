"""
Asyncio coordination around a GameTable.

One queue and one worker per table: commands are applied strictly one at a
time, each to completion (trick resolution and scoring included), and the
resulting events are delivered before the next command is taken.

Automated turns run as separate tasks: sleep ``think_time``, ask the seat's
decision provider on copied inputs, then submit an ordinary ``PlayCard``
tagged with the session epoch. The decision itself never holds the queue, so
a slow LLM call only delays that seat's own play.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Callable

from .commands import Command, PlayCard
from .config import GameConfig, LLMConfig
from .events import Event, EventSink
from .play import legal_plays
from .table import BotTurn, GameTable, ProviderFactory

logger = logging.getLogger(__name__)


class SessionCoordinator:
    """
    Usage:
        async with SessionCoordinator(GameTable(), sink) as coord:
            await coord.submit(Register("s1", "Alice"))
            await coord.submit(Start("s1"))
    """

    def __init__(self, table: GameTable, sink: EventSink, think_time: float | None = None):
        self.table = table
        self.sink = sink
        self.think_time = table.config.think_time if think_time is None else think_time
        self._queue: asyncio.Queue[tuple[Command, asyncio.Future[list[Event]]]] | None = None
        self._worker: asyncio.Task[None] | None = None
        self._bot_tasks: set[asyncio.Task[None]] = set()
        self._scheduled: tuple[int, int, int] | None = None

    async def __aenter__(self) -> "SessionCoordinator":
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def start(self) -> None:
        if self.running:
            return
        self._queue = asyncio.Queue()
        self._worker = asyncio.create_task(self._run(), name=f"gongzhu-table-{self.table.table_id}")

    async def stop(self) -> None:
        tasks = list(self._bot_tasks)
        if self._worker is not None:
            tasks.append(self._worker)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._bot_tasks.clear()
        self._worker = None
        self._queue = None
        self._scheduled = None

    async def submit(self, command: Command) -> list[Event]:
        """Queue ``command`` and wait until it has been applied and delivered."""
        if not self.running:
            self.start()
        assert self._queue is not None
        fut: asyncio.Future[list[Event]] = asyncio.get_running_loop().create_future()
        await self._queue.put((command, fut))
        return await fut

    async def wait_idle(self) -> None:
        """Wait until no command is queued and no automated turn is pending."""
        while True:
            if self._queue is not None:
                await self._queue.join()
            if not self._bot_tasks:
                if self._queue is None or self._queue.empty():
                    return
                continue
            await asyncio.gather(*list(self._bot_tasks), return_exceptions=True)

    async def _run(self) -> None:
        assert self._queue is not None
        while True:
            command, fut = await self._queue.get()
            try:
                events = self.table.handle(command)
                for event in events:
                    await self.sink.deliver(event)
                self._schedule_bot_turn()
            except Exception as exc:
                logger.exception("[%s] command %s failed", self.table.table_id, command.name)
                if not fut.done():
                    fut.set_exception(exc)
            else:
                if not fut.done():
                    fut.set_result(events)
            finally:
                self._queue.task_done()

    def _schedule_bot_turn(self) -> None:
        turn = self.table.pending_bot_turn()
        if turn is None or turn.key == self._scheduled:
            return
        self._scheduled = turn.key
        task = asyncio.create_task(self._bot_move(turn))
        self._bot_tasks.add(task)
        task.add_done_callback(self._bot_tasks.discard)

    async def _bot_move(self, turn: BotTurn) -> None:
        if self.think_time > 0:
            await asyncio.sleep(self.think_time)
        try:
            card = await turn.provider.decide(turn.hand, turn.trick, turn.ctx)
        except Exception:
            logger.exception("[%s] decision failed for %s", self.table.table_id, turn.seat_id)
            card = legal_plays(turn.hand, turn.trick)[0]
        events = await self.submit(PlayCard(turn.seat_id, str(card), epoch=turn.epoch))
        rejected = [e for e in events if e.name == "invalid_play"]
        if rejected:
            logger.warning("[%s] automated play by %s rejected: %s", self.table.table_id, turn.seat_id, rejected[0].payload())


class TableRegistry:
    """Independent coordinators keyed by table id; tables never share a queue."""

    def __init__(
        self,
        sink_factory: Callable[[str], EventSink],
        config: GameConfig | None = None,
        llm_config: LLMConfig | None = None,
        provider_factory: ProviderFactory | None = None,
    ):
        self._sink_factory = sink_factory
        self._config = config
        self._llm_config = llm_config
        self._provider_factory = provider_factory
        self._tables: dict[str, SessionCoordinator] = {}

    def get(self, table_id: str) -> SessionCoordinator:
        coord = self._tables.get(table_id)
        if coord is None:
            table = GameTable(
                config=self._config,
                llm_config=self._llm_config,
                provider_factory=self._provider_factory,
                table_id=table_id,
            )
            coord = SessionCoordinator(table, self._sink_factory(table_id))
            self._tables[table_id] = coord
            logger.info("opened table %s", table_id)
        return coord

    async def submit(self, table_id: str, command: Command) -> list[Event]:
        return await self.get(table_id).submit(command)

    async def close(self, table_id: str | None = None) -> None:
        ids = [table_id] if table_id is not None else list(self._tables)
        for tid in ids:
            coord = self._tables.pop(tid, None)
            if coord is not None:
                await coord.stop()

    def __contains__(self, table_id: str) -> bool:
        return table_id in self._tables

    def __len__(self) -> int:
        return len(self._tables)

    def table_ids(self) -> list[str]:
        return list(self._tables)


__all__ = ["SessionCoordinator", "TableRegistry"]
