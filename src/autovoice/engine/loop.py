"""Promotion engine — the single task that owns membership state.

Two sources feed the loop: the transport's event stream and a trigger
queue. The trigger queue is fed by the interval ticker (``request_check``)
and by short jitter timers started after each promotion, so a backlog of
eligible members drains quickly without voicing everyone in one burst.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import random
import time
from typing import AsyncIterator, Callable

from autovoice.engine.events import apply_event
from autovoice.engine.selector import select
from autovoice.engine.store import MembershipStore
from autovoice.irc.base import Event, MalformedEventError, Transport, TransportError

log = logging.getLogger(__name__)

_EOF = object()


class State(str, enum.Enum):
    """PROMOTING lasts from sending +v until the jitter re-check fires."""

    IDLE = "idle"
    CHECKING = "checking"
    PROMOTING = "promoting"


async def _next_event(stream: AsyncIterator[Event]) -> object:
    return await anext(stream, _EOF)


class PromotionEngine:
    def __init__(
        self,
        transport: Transport,
        *,
        channel: str,
        nickname: str,
        cooldown: float,
        jitter: tuple[float, float] = (0.100, 0.250),
        clock: Callable[[], float] = time.monotonic,
        rng: random.Random | None = None,
    ) -> None:
        self.transport = transport
        self.channel = channel
        self.nickname = nickname
        self.cooldown = cooldown
        self.jitter = jitter
        self.clock = clock
        self.rng = rng or random.Random()

        self.store = MembershipStore()
        self.state = State.IDLE
        # One pending check covers any number of requests made before it runs
        self._triggers: asyncio.Queue[None] = asyncio.Queue(maxsize=1)
        self._jitter_tasks: set[asyncio.Task] = set()

    async def request_check(self) -> None:
        """Ask the loop to look for a promotee. Safe to call from any task on the loop."""
        try:
            self._triggers.put_nowait(None)
        except asyncio.QueueFull:
            log.debug("Promotion check already pending")

    async def run(self) -> None:
        """Process events and triggers until the event stream fails.

        Always exits by raising TransportError.
        """
        stream = aiter(self.transport.events())
        next_event = asyncio.create_task(_next_event(stream))
        next_trigger = asyncio.create_task(self._triggers.get())
        try:
            while True:
                done, _ = await asyncio.wait(
                    {next_event, next_trigger}, return_when=asyncio.FIRST_COMPLETED
                )
                if next_event in done:
                    self._handle_event(next_event)
                    next_event = asyncio.create_task(_next_event(stream))
                if next_trigger in done:
                    await self.check()
                    next_trigger = asyncio.create_task(self._triggers.get())
        finally:
            next_event.cancel()
            next_trigger.cancel()
            for task in list(self._jitter_tasks):
                task.cancel()

    def _handle_event(self, task: asyncio.Task) -> None:
        try:
            event = task.result()
        except TransportError:
            raise
        except OSError as e:
            raise TransportError(f"Failed to read from irc stream: {e}") from e

        if event is _EOF:
            raise TransportError("irc client has been shutdown")

        try:
            apply_event(self.store, event, self.clock())
        except MalformedEventError as e:
            log.error("Error processing irc message: %s (%r)", e, e.context)

    async def check(self) -> None:
        """Run one promotion decision."""
        self.state = State.CHECKING
        log.debug("Checking if any users qualify for promotion")
        nickname = select(self.store, self.cooldown, self.clock())
        if nickname is None:
            self.state = State.IDLE
            return

        # Removed before sending so a slow or failed command can't select it twice
        self.store.remove(nickname)
        if nickname == self.nickname:
            log.debug("Not promoting ourselves (user=%r)", nickname)
            self.state = State.IDLE
            return

        self.state = State.PROMOTING
        await self._promote(nickname)
        self._schedule_recheck()

    async def _promote(self, nickname: str) -> None:
        log.info("Promoting user (user=%r, channel=%r)", nickname, self.channel)
        try:
            await self.transport.set_voice(self.channel, nickname)
        except TransportError as e:
            log.error(
                "Failed to set mode for user (user=%r, channel=%r): %s", nickname, self.channel, e
            )

    def _schedule_recheck(self) -> None:
        delay = self.rng.uniform(*self.jitter)
        task = asyncio.create_task(self._recheck_after(delay))
        self._jitter_tasks.add(task)
        task.add_done_callback(self._jitter_tasks.discard)

    async def _recheck_after(self, delay: float) -> None:
        await asyncio.sleep(delay)
        self.state = State.IDLE
        await self.request_check()
