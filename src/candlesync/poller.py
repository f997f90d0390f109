"""Polling loop that pulls remote changes into the local cache."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Protocol

from candlesync._constants import DEFAULT_POLL_INTERVAL
from candlesync.exceptions import CandleSyncError
from candlesync.models.document import RemoteDocument
from candlesync.models.item import Item
from candlesync.state.gate import MutationGate
from candlesync.state.observers import ObserverRegistry

_logger = logging.getLogger(__name__)

PollSubscriber = Callable[[tuple[Item, ...], str | None], Any]
"""Called with ``(items, revision)`` after a remote change was applied."""


class PollState(StrEnum):
    IDLE = "idle"
    POLLING = "polling"
    APPLYING = "applying"


class PollTarget(Protocol):
    """What the poller needs from its owner."""

    @property
    def gate(self) -> MutationGate:
        ...

    async def fetch_document(self) -> RemoteDocument:
        ...

    def has_changed(self, document: RemoteDocument) -> bool:
        ...

    def apply_remote(self, document: RemoteDocument) -> None:
        ...


@dataclass(slots=True)
class _PollRun:
    """One start..stop lifetime of the loop."""

    interval: float
    wake: asyncio.Event = field(default_factory=asyncio.Event)
    active: bool = True


class Poller:
    """Fixed-interval poll loop shared by any number of subscribers.

    The loop starts with the first subscriber and stops when the last one
    leaves. Each tick fetches the document and, unless a local mutation is in
    flight or the revision is unchanged, hands it to the target to apply.
    Failures are logged and the next tick is the retry.
    """

    def __init__(self, target: PollTarget, *, default_interval: float = DEFAULT_POLL_INTERVAL) -> None:
        self._target = target
        self._default_interval = default_interval
        self._subscribers = ObserverRegistry("poll")
        self._run: _PollRun | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._state = PollState.IDLE

    @property
    def state(self) -> PollState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._run is not None

    @property
    def interval(self) -> float | None:
        return self._run.interval if self._run is not None else None

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, subscriber: PollSubscriber, interval: float | None = None) -> int:
        """Register *subscriber* and start the loop if it is not running yet.

        Must be called from within a running event loop. Returns a handle for
        :meth:`stop`.
        """
        effective = interval if interval is not None else self._default_interval
        if effective <= 0:
            raise ValueError(f"interval must be positive, got {effective}")

        handle = self._subscribers.add(subscriber)
        if self._run is not None:
            if interval is not None and interval != self._run.interval:
                _logger.debug(
                    "Poll loop already running every %.3fs; ignoring interval %.3fs",
                    self._run.interval,
                    interval,
                )
            return handle

        run = _PollRun(interval=effective)
        self._run = run
        task = asyncio.get_running_loop().create_task(self._loop(run), name="candlesync-poller")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        _logger.debug("Poll loop started interval=%.3fs", effective)
        return handle

    def stop(self, handle: int | None = None) -> None:
        """Remove one subscriber (or all with no *handle*); stop when none remain."""
        if handle is None:
            self._subscribers.clear()
        elif not self._subscribers.remove(handle):
            _logger.debug("Unknown poll subscription %s", handle)

        if len(self._subscribers) > 0 or self._run is None:
            return
        run = self._run
        self._run = None
        run.active = False
        run.wake.set()
        _logger.debug("Poll loop stopped")

    async def aclose(self) -> None:
        """Stop the loop and wait for the current tick, if any, to finish."""
        self.stop()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    async def _loop(self, run: _PollRun) -> None:
        while run.active:
            try:
                await self._tick(run)
            except Exception:
                self._state = PollState.IDLE
                _logger.warning("Poll tick failed unexpectedly", exc_info=True)
            if not run.active:
                break
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(run.wake.wait(), timeout=run.interval)

    async def tick(self) -> bool:
        """Run one poll outside the loop. Returns ``True`` if a change was applied."""
        return await self._tick(None)

    async def _tick(self, run: _PollRun | None) -> bool:
        gate = self._target.gate
        generation = gate.generation
        self._state = PollState.POLLING
        try:
            document = await self._target.fetch_document()
        except CandleSyncError as exc:
            self._state = PollState.IDLE
            _logger.warning("Poll failed: %s", exc)
            return False

        if run is not None and not run.active:
            self._state = PollState.IDLE
            _logger.debug("Discarding poll result: loop stopped during fetch")
            return False
        if gate.is_mutating() or gate.generation != generation:
            self._state = PollState.IDLE
            _logger.debug("Discarding poll result: local mutation in flight")
            return False
        if not self._target.has_changed(document):
            self._state = PollState.IDLE
            return False

        self._state = PollState.APPLYING
        try:
            self._target.apply_remote(document)
            self._subscribers.notify(document.items, document.revision)
        finally:
            self._state = PollState.IDLE
        _logger.debug("Applied remote revision=%s items=%d", document.revision, len(document.items))
        return True
