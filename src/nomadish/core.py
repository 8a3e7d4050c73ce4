"""Sync coordinator — owns the memory list shown to the user.

Responsibilities:
1. Load the local cache at startup so data is usable offline
2. Serialize remote operations (one at a time per coordinator)
3. Refresh — replace the list with the server's collection
4. Add — keep the server's canonical record, or the local candidate on failure
5. Remove — drop a record only once the server confirmed the delete
6. Persist the full list to the cache after every change
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from nomadish.errors import (
    DecodeError,
    InvalidValueError,
    NomadishError,
    PersistenceError,
    RemoteError,
)
from nomadish.memory.codec import decode, decode_many, encode
from nomadish.memory.models import FoodMemory, SyncState

if TYPE_CHECKING:
    from nomadish.memory.store import MemoryCache
    from nomadish.remote.base import RemoteClient

logger = logging.getLogger(__name__)

# Called with (operation name, error); the presentation layer renders it, e.g. as a toast
Notifier = Callable[[str, NomadishError], None]
Listener = Callable[["SyncCoordinator"], None]

# Anything a remote call can fail with collapses into "remote operation failed".
_REMOTE_FAILURES = (RemoteError, DecodeError)


def _check_unique(records: list[FoodMemory]) -> None:
    seen: set[str] = set()
    for r in records:
        if r.id in seen:
            raise InvalidValueError("id", f"duplicate id {r.id!r} in server collection")
        seen.add(r.id)


class SyncCoordinator:
    """Reconciles the local cache with the memory server."""

    def __init__(
        self,
        store: MemoryCache,
        remote: RemoteClient,
        *,
        notifier: Notifier | None = None,
    ) -> None:
        self._store = store
        self._remote = remote
        self._notifier = notifier
        self._records: list[FoodMemory] = []
        self._is_busy = False
        self._lock = asyncio.Lock()
        self._listeners: list[Listener] = []
        self.last_error: NomadishError | None = None

    @property
    def store(self) -> MemoryCache:
        return self._store

    # ── Observable state ─────────────────────────────────────

    @property
    def records(self) -> tuple[FoodMemory, ...]:
        return tuple(self._records)

    @property
    def is_busy(self) -> bool:
        return self._is_busy

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _changed(self) -> None:
        for listener in self._listeners:
            try:
                listener(self)
            except Exception:
                logger.exception("Listener %r failed", listener)

    def _set_busy(self, busy: bool) -> None:
        if self._is_busy != busy:
            self._is_busy = busy
            self._changed()

    def _set_records(self, records: list[FoodMemory]) -> None:
        self._records = records
        self._changed()

    def _upsert(self, saved: FoodMemory, replacing: str | None = None) -> None:
        """Put ``saved`` in the list, keeping ids unique.

        The entry with id ``replacing`` (or, failing that, with ``saved.id``)
        is replaced in place; any other entry already holding ``saved.id``
        is dropped. Otherwise ``saved`` is appended.
        """
        target = replacing if replacing is not None else saved.id
        records: list[FoodMemory] = []
        placed = False
        for r in self._records:
            if r.id == target and not placed:
                records.append(saved)
                placed = True
            elif r.id != saved.id:
                records.append(r)
        if not placed:
            records.append(saved)
        self._set_records(records)

    # ── Failure reporting ────────────────────────────────────

    def _report(self, operation: str, error: NomadishError) -> None:
        self.last_error = error
        logger.warning("%s failed: %s", operation, error)
        if self._notifier is not None:
            self._notifier(operation, error)

    async def _persist(self) -> None:
        snapshot = list(self._records)
        try:
            await asyncio.to_thread(self._store.save, snapshot)
        except PersistenceError as e:
            self._report("save", e)

    # ── Operations ───────────────────────────────────────────

    def initialize(self) -> None:
        """Populate the list from the local cache. No network access.

        Call once at startup, before any remote operation.
        """
        if self._lock.locked():
            raise RuntimeError("initialize() called while a remote operation is in flight")
        self._set_records(self._store.load())
        logger.info("Initialized with %d cached memories", len(self._records))

    async def refresh(self) -> bool:
        """Replace the list with the server's collection.

        On failure the list and the cache are left exactly as they were.
        """
        async with self._lock:
            try:
                self._set_busy(True)
                try:
                    payload = await self._remote.fetch_all()
                    # No partial collection: one bad record fails the fetch.
                    fetched = decode_many(payload)
                    _check_unique(fetched)
                except _REMOTE_FAILURES as e:
                    self._report("refresh", e)
                    return False

                dropped = sum(1 for r in self._records if r.is_pending)
                if dropped:
                    logger.info("Refresh dropped %d unsynced local memories", dropped)
                self._set_records(fetched)
                await self._persist()
                logger.info("Refreshed %d memories from server", len(fetched))
                return True
            finally:
                self._set_busy(False)

    async def add(self, candidate: FoodMemory, photo: bytes | None = None) -> FoodMemory:
        """Submit a new memory; keep it locally if the server is unreachable.

        Returns the record that was stored: the server's copy on success,
        otherwise the candidate tagged as pending. A record whose id is
        already in the list replaces that entry instead of being appended.
        """
        async with self._lock:
            try:
                self._set_busy(True)
                try:
                    saved = decode(await self._remote.add(encode(candidate), photo))
                except _REMOTE_FAILURES as e:
                    self._report("add", e)
                    saved = candidate.with_sync_state(SyncState.PENDING_ADD)
                    if photo is not None:
                        saved.photo = photo
                else:
                    logger.info("Added memory %s (%s)", saved.id, saved.name)

                self._upsert(saved)
                await self._persist()
                return saved
            finally:
                self._set_busy(False)

    async def remove(self, record: FoodMemory) -> bool:
        """Delete a memory on the server, then locally.

        If the server delete fails the record stays in the list.
        """
        async with self._lock:
            try:
                self._set_busy(True)
                try:
                    await self._remote.delete(record.id)
                except _REMOTE_FAILURES as e:
                    self._report("remove", e)
                    return False

                self._set_records([r for r in self._records if r.id != record.id])
                await self._persist()
                logger.info("Removed memory %s", record.id)
                return True
            finally:
                self._set_busy(False)

    async def retry_pending(self) -> int:
        """Re-submit memories whose add never reached the server.

        Each one the server accepts is replaced in place by the server's
        copy. Returns how many were pushed.
        """
        async with self._lock:
            pending = [r for r in self._records if r.is_pending]
            if not pending:
                return 0

            try:
                self._set_busy(True)
                pushed = 0
                for record in pending:
                    try:
                        saved = decode(await self._remote.add(encode(record), record.photo))
                    except _REMOTE_FAILURES as e:
                        self._report("retry", e)
                        continue
                    self._upsert(saved, replacing=record.id)
                    pushed += 1

                if pushed:
                    await self._persist()
                logger.info("Pushed %d/%d pending memories", pushed, len(pending))
                return pushed
            finally:
                self._set_busy(False)

    # ── Lifecycle ────────────────────────────────────────────

    async def close(self) -> None:
        """Close the remote client if it holds resources."""
        close = getattr(self._remote, "close", None)
        if close and callable(close):
            await close()
