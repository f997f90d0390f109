"""Sync engine: optimistic local edits persisted by read-modify-write."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from candlesync.exceptions import CandleSyncError, RemoteError
from candlesync.models.document import RemoteDocument
from candlesync.models.item import Item
from candlesync.models.result import MutationKind, MutationResult
from candlesync.poller import Poller, PollState, PollSubscriber
from candlesync.remote import RemoteStoreClient
from candlesync.state.gate import MutationGate
from candlesync.state.mutations import AddItem, Mutation, RemoveItem, UpdateItem
from candlesync.state.observers import ObserverRegistry
from candlesync.state.store import LocalStateCache

_logger = logging.getLogger(__name__)

ChangeCallback = Callable[[tuple[Item, ...]], Any]
WarningCallback = Callable[[str], Any]


class SyncEngine:
    """Keeps a local item collection in step with the shared remote document.

    Usage::

        async with RemoteStoreClient(config) as remote:
            async with SyncEngine(remote, on_warning=print) as engine:
                handle = engine.subscribe(render)
                await engine.add(120, 80, name="Ada")

    Every mutation shows its effect locally first, then re-reads the remote
    document, re-applies the same change to it and writes the result back.
    On a failed write the local state is reset to a fresh copy of the remote
    document. Mutations report failures through the returned
    :class:`MutationResult` and the *on_warning* callback; they raise only
    for invalid arguments.
    """

    def __init__(
        self,
        remote: RemoteStoreClient,
        *,
        cache: LocalStateCache | None = None,
        gate: MutationGate | None = None,
        on_warning: WarningCallback | None = None,
        poll_interval: float | None = None,
    ) -> None:
        self._remote = remote
        self._cache = cache if cache is not None else LocalStateCache()
        self._gate = gate if gate is not None else MutationGate()
        self._on_warning = on_warning
        self._subscribers = ObserverRegistry("change")
        self._write_lock = asyncio.Lock()
        self._last_revision: str | None = None
        self._poller = Poller(
            self,
            default_interval=poll_interval if poll_interval is not None else remote.config.poll_interval,
        )

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> SyncEngine:
        await self.load()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Stop polling and wait for an in-flight poll to finish."""
        await self._poller.aclose()

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def gate(self) -> MutationGate:
        return self._gate

    @property
    def last_revision(self) -> str | None:
        """Revision marker of the last state applied locally."""
        return self._last_revision

    @property
    def next_id(self) -> int:
        return self._cache.next_id

    @property
    def is_configured(self) -> bool:
        """Whether mutations can be persisted (a credential is configured)."""
        return self._remote.is_configured

    def get_snapshot(self) -> tuple[Item, ...]:
        return self._cache.snapshot()

    def subscribe(self, callback: ChangeCallback) -> int:
        """Call *callback* with the new snapshot after every local state change."""
        return self._subscribers.add(callback)

    def unsubscribe(self, handle: int) -> bool:
        return self._subscribers.remove(handle)

    async def load(self) -> tuple[Item, ...]:
        """Initial fetch. Read failures degrade to an empty collection."""
        try:
            document = await self._remote.fetch_document()
        except RemoteError as exc:
            _logger.warning("Initial load failed: %s", exc)
            self._warn(f"Could not load saved candles: {exc}")
            return self.get_snapshot()
        if document.malformed:
            self._warn("Saved candle data is unreadable; starting from an empty list")
        self._replace(document.items, revision=document.revision)
        return self.get_snapshot()

    # ------------------------------------------------------------------
    # Mutation API
    # ------------------------------------------------------------------

    async def add(self, x: float, y: float, name: str = "") -> MutationResult:
        """Create an item with the next free id."""
        item = Item(id=self._cache.next_id, x=x, y=y, name=name)
        return await self._mutate(AddItem(item=item))

    async def rename(self, item_id: int, name: str) -> MutationResult:
        if name is None:
            raise ValueError("rename() needs a name")
        return await self._mutate(UpdateItem(kind=MutationKind.RENAME, target_id=item_id, name=name))

    async def move(self, item_id: int, x: float, y: float) -> MutationResult:
        if x is None or y is None:
            raise ValueError("move() needs both x and y")
        return await self._mutate(UpdateItem(kind=MutationKind.MOVE, target_id=item_id, x=x, y=y))

    async def update(
        self,
        item_id: int,
        *,
        name: str | None = None,
        x: float | None = None,
        y: float | None = None,
    ) -> MutationResult:
        """Change any subset of ``name``, ``x`` and ``y`` in one write."""
        if name is None and x is None and y is None:
            raise ValueError("update() needs at least one of name, x, y")
        return await self._mutate(UpdateItem(target_id=item_id, name=name, x=x, y=y))

    async def remove(self, item_id: int) -> MutationResult:
        """Remove an item. Removing an id that is already gone is a successful no-op."""
        return await self._mutate(RemoveItem(target_id=item_id))

    async def _mutate(self, mutation: Mutation) -> MutationResult:
        with self._gate.hold():
            token = self._cache.apply_optimistic(mutation)
            optimistic_item = mutation.pick(self._cache.snapshot())
            self._notify()
            settled = False
            try:
                # Serialize read-modify-write within this process so overlapping
                # mutations cannot overwrite each other.
                async with self._write_lock:
                    latest = await self._remote.fetch_document()
                    merged_mutation = mutation.rebase(latest.items)
                    merged = merged_mutation.apply(latest.items)
                    if merged == latest.items:
                        _logger.debug("%s left the document unchanged; skipping write", mutation.kind)
                        revision = latest.revision
                    else:
                        revision = await self._remote.write_document(merged)
                    self._replace(merged, revision=revision, settle=token)
                    settled = True
                return MutationResult(
                    success=True,
                    kind=mutation.kind,
                    item=merged_mutation.pick(merged),
                    revision=revision,
                )
            except CandleSyncError as exc:
                result = await self._recover(mutation, token, exc, optimistic_item)
                settled = True
                return result
            finally:
                # Cancelled or failed unexpectedly: drop the overlay so it cannot linger.
                if not settled:
                    self._cache.settle(token)
                    self._notify()

    async def _recover(
        self,
        mutation: Mutation,
        token: int,
        error: CandleSyncError,
        optimistic_item: Item | None,
    ) -> MutationResult:
        _logger.warning("%s of item %d failed: %s", mutation.kind, mutation.item_id, error)
        self._warn(f"Could not save change ({mutation.kind}): {error}")
        try:
            document = await self._remote.fetch_document()
        except RemoteError as refetch_error:
            _logger.warning("Rollback refetch failed: %s", refetch_error)
            self._cache.settle(token, keep=True)
            # The kept change is not in the store; compare items on the next poll.
            self._last_revision = None
            self._notify()
            self._warn("The change was not saved and the shared list could not be reloaded; it may be out of date")
            return MutationResult(
                success=False,
                kind=mutation.kind,
                item=optimistic_item,
                error=str(error),
                stale=True,
            )

        self._replace(document.items, revision=document.revision, settle=token)
        return MutationResult(
            success=False,
            kind=mutation.kind,
            item=optimistic_item,
            error=str(error),
            rolled_back=True,
            revision=document.revision,
        )

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    @property
    def is_polling(self) -> bool:
        return self._poller.is_running

    @property
    def poll_state(self) -> PollState:
        return self._poller.state

    def start_polling(self, subscriber: PollSubscriber, interval: float | None = None) -> int:
        """Join the shared poll loop, starting it for the first subscriber."""
        return self._poller.start(subscriber, interval)

    def stop_polling(self, handle: int | None = None) -> None:
        """Leave the poll loop; it stops once no subscriber is left."""
        self._poller.stop(handle)

    async def poll_once(self) -> bool:
        """Run a single poll tick. Returns ``True`` if a remote change was applied."""
        return await self._poller.tick()

    # PollTarget implementation

    async def fetch_document(self) -> RemoteDocument:
        return await self._remote.fetch_document()

    def has_changed(self, document: RemoteDocument) -> bool:
        if document.revision is not None and self._last_revision is not None:
            return document.revision != self._last_revision
        return document.items != self._cache.base

    def apply_remote(self, document: RemoteDocument) -> None:
        self._replace(document.items, revision=document.revision)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _replace(self, items: tuple[Item, ...], *, revision: str | None, settle: int | None = None) -> None:
        self._cache.replace(items, settle=settle)
        self._last_revision = revision
        self._notify()

    def _notify(self) -> None:
        self._subscribers.notify(self._cache.snapshot())

    def _warn(self, message: str) -> None:
        if self._on_warning is None:
            return
        try:
            self._on_warning(message)
        except Exception:
            _logger.warning("on_warning callback failed", exc_info=True)
