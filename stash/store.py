"""
Snapshot Store

The single authoritative owner of the snapshot collection.

GUARANTEES:
- The in-memory collection is the source of truth; disk is a mirror
- Snapshot ids are unique after every mutation (add raises on collision)
- Every mutation re-serializes the WHOLE collection, never a diff
- Writes run on one background worker, in submission order, so the
  state of the last mutation is what ends up on disk
- Subscribers receive the complete post-mutation state

Failures never propagate to the caller of a mutation: persistence is
asynchronous, so load and save errors land in `last_error` instead.
The UI shows that message once and then calls dismiss_error().
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Iterable, Optional
from uuid import UUID

import structlog

from stash.models.events import StoreEvent, StoreEventType
from stash.models.snapshot import Snapshot, sort_by_date
from stash.services.storage import (
    DuplicateError,
    SnapshotStorageInterface,
    StorageError,
)


logger = structlog.get_logger(__name__)

Listener = Callable[[StoreEvent], None]


class SnapshotStore:
    """
    Observable in-memory snapshot collection mirrored to storage.

    Mutations are synchronous and cheap; persistence is handed to a
    single-thread executor. Call flush() to wait for pending writes
    and close() when shutting down.
    """

    def __init__(self, storage: SnapshotStorageInterface):
        self._storage = storage
        self._snapshots: list[Snapshot] = []
        self._last_error: Optional[str] = None
        self._version = 0
        self._listeners: list[Listener] = []
        self._lock = threading.RLock()
        self._executor = ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="stash-persist",
        )
        self._pending: list[Future] = []
        self._closed = False
        self._deferred_write: Optional[tuple[Snapshot, ...]] = None

    # -------------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------------

    @property
    def snapshots(self) -> tuple[Snapshot, ...]:
        """Current collection in storage (insertion) order."""
        with self._lock:
            return tuple(self._snapshots)

    def sorted_snapshots(self) -> list[Snapshot]:
        """Current collection in display order (date ascending)."""
        return sort_by_date(self.snapshots)

    def get(self, snapshot_id: UUID) -> Optional[Snapshot]:
        with self._lock:
            for snapshot in self._snapshots:
                if snapshot.id == snapshot_id:
                    return snapshot
        return None

    def __len__(self) -> int:
        with self._lock:
            return len(self._snapshots)

    @property
    def last_error(self) -> Optional[str]:
        with self._lock:
            return self._last_error

    @property
    def version(self) -> int:
        """Bumped on every change, usable as a cache key."""
        with self._lock:
            return self._version

    @property
    def storage(self) -> SnapshotStorageInterface:
        return self._storage

    # -------------------------------------------------------------------------
    # Observers
    # -------------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener for store events.

        Returns a function that unsubscribes the listener.
        Listeners may be called from the persistence worker thread.
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, event: StoreEvent) -> None:
        with self._lock:
            listeners = list(self._listeners)
        logger.debug("store_event_published", listeners=len(listeners), **event.to_log_dict())
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("store_listener_failed", event_type=event.event_type.value)

    def _event(
        self,
        event_type: StoreEventType,
        affected_ids: Iterable[UUID] = (),
    ) -> StoreEvent:
        """Build an event from the current state. Caller holds the lock."""
        return StoreEvent(
            event_type=event_type,
            version=self._version,
            snapshots=tuple(self._snapshots),
            error_message=self._last_error,
            affected_ids=tuple(affected_ids),
        )

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add(self, snapshot: Snapshot) -> None:
        """
        Append a snapshot. The caller supplies its id.

        Raises:
            DuplicateError: If a snapshot with the same id already exists.
                            The collection is left unchanged.
        """
        self._append([snapshot], StoreEventType.SNAPSHOT_ADDED)

    def add_many(self, snapshots: Iterable[Snapshot]) -> int:
        """
        Append a batch of snapshots with a single persistence cycle.

        All-or-nothing: if any id collides with the collection or with
        another snapshot in the batch, nothing is added.

        Returns:
            Number of snapshots added
        """
        return self._append(list(snapshots), StoreEventType.SNAPSHOTS_IMPORTED)

    def _append(self, batch: list[Snapshot], event_type: StoreEventType) -> int:
        if not batch:
            return 0

        with self._lock:
            self._ensure_open()
            existing = {snapshot.id for snapshot in self._snapshots}
            seen: set[UUID] = set()
            duplicates = []
            for snapshot in batch:
                if snapshot.id in existing or snapshot.id in seen:
                    duplicates.append(snapshot.id)
                seen.add(snapshot.id)
            if duplicates:
                logger.warning("snapshot_id_collision", ids=[str(i) for i in duplicates])
                raise DuplicateError(duplicates)

            self._snapshots.extend(batch)
            event = self._commit(event_type, [snapshot.id for snapshot in batch])

        logger.info(
            event_type.value,
            count=len(batch),
            ids=[str(snapshot.id) for snapshot in batch],
        )
        self._publish(event)
        return len(batch)

    def update(self, snapshot: Snapshot) -> bool:
        """
        Replace the snapshot with the same id, keeping its position.

        An unknown id is a silent no-op: nothing changes, nothing is
        persisted, the error state is untouched.

        Returns:
            True if a snapshot was replaced
        """
        with self._lock:
            self._ensure_open()
            for index, current in enumerate(self._snapshots):
                if current.id == snapshot.id:
                    self._snapshots[index] = snapshot
                    event = self._commit(StoreEventType.SNAPSHOT_UPDATED, [snapshot.id])
                    break
            else:
                logger.debug("snapshot_update_target_missing", snapshot_id=str(snapshot.id))
                return False

        logger.info("snapshot_updated", snapshot_id=str(snapshot.id))
        self._publish(event)
        return True

    def delete(self, snapshot_ids: Iterable[UUID]) -> int:
        """
        Delete snapshots by id.

        Unknown ids are ignored. Nothing is persisted if nothing matched.

        Returns:
            Number of snapshots removed
        """
        targets = set(snapshot_ids)
        with self._lock:
            self._ensure_open()
            removed = [s.id for s in self._snapshots if s.id in targets]
            if not removed:
                return 0
            self._snapshots = [s for s in self._snapshots if s.id not in targets]
            event = self._commit(StoreEventType.SNAPSHOTS_DELETED, removed)

        logger.info("snapshots_deleted", count=len(removed), ids=[str(i) for i in removed])
        self._publish(event)
        return len(removed)

    def delete_at(self, positions: Iterable[int]) -> int:
        """
        Delete snapshots at positions in the current in-memory order.

        NOTE: positions refer to `snapshots`, NOT to `sorted_snapshots()`.
        Views that show the sorted list should call delete() with ids.
        Out-of-range positions are ignored.

        Returns:
            Number of snapshots removed
        """
        with self._lock:
            valid = {p for p in positions if 0 <= p < len(self._snapshots)}
            ids = [self._snapshots[p].id for p in sorted(valid)]
        return self.delete(ids)

    def _commit(self, event_type: StoreEventType, affected_ids: list[UUID]) -> StoreEvent:
        """Bump version, schedule a full write, build the event. Caller holds the lock."""
        self._version += 1
        self._schedule_write(tuple(self._snapshots))
        return self._event(event_type, affected_ids)

    # -------------------------------------------------------------------------
    # Errors
    # -------------------------------------------------------------------------

    def dismiss_error(self) -> None:
        """Clear the error message after the UI has shown it."""
        with self._lock:
            if self._last_error is None:
                return
            self._last_error = None
            self._version += 1
            event = self._event(StoreEventType.ERROR_DISMISSED)
        self._publish(event)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def load(self) -> Future:
        """
        Load the collection from storage on the background worker.

        A missing document means an empty collection. Any other failure
        sets last_error and leaves the in-memory collection unchanged.

        Snapshots added while the load was pending are kept after the
        loaded ones, and the merged collection is written back.

        Returns:
            Future that completes when loading is done
        """
        with self._lock:
            requested_at = self._version
        return self._submit(lambda: self._do_load(requested_at))

    def _do_load(self, requested_at: int) -> None:
        try:
            loaded = self._storage.read_all()
        except StorageError as e:
            self._record_failure(f"Failed to load data: {e}", "load_failed", e)
            return

        with self._lock:
            merged = self._version != requested_at
            if merged:
                known = {s.id for s in loaded}
                pending = [s for s in self._snapshots if s.id not in known]
                self._snapshots = list(loaded) + pending
                if self._closed:
                    # Executor is shutting down; close() writes this after draining
                    self._deferred_write = tuple(self._snapshots)
                else:
                    self._schedule_write(tuple(self._snapshots))
            else:
                self._snapshots = list(loaded)
            self._last_error = None
            self._version += 1
            event = self._event(StoreEventType.LOADED, [s.id for s in loaded])

        logger.info(
            "snapshots_loaded",
            count=len(loaded),
            merged=merged,
            location=self._storage.location,
        )
        self._publish(event)

    def _schedule_write(self, state: tuple[Snapshot, ...]) -> None:
        self._submit(lambda: self._do_write(state))

    def _do_write(self, state: tuple[Snapshot, ...]) -> None:
        try:
            self._storage.write_all(state)
        except StorageError as e:
            self._record_failure(f"Failed to save data: {e}", "persist_failed", e)
            return

        with self._lock:
            self._last_error = None
            event = self._event(StoreEventType.PERSISTED)

        logger.debug("snapshots_persisted", count=len(state), location=self._storage.location)
        self._publish(event)

    def _record_failure(self, message: str, log_event: str, error: Exception) -> None:
        with self._lock:
            self._last_error = message
            self._version += 1
            event = self._event(StoreEventType.ERROR)

        logger.error(log_event, error=str(error), location=self._storage.location)
        self._publish(event)

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("SnapshotStore is closed")

    def _submit(self, fn: Callable[[], None]) -> Future:
        with self._lock:
            self._ensure_open()
            future = self._executor.submit(fn)
            self._pending = [f for f in self._pending if not f.done()]
            self._pending.append(future)
        return future

    def flush(self, timeout: Optional[float] = None) -> None:
        """
        Block until the worker is idle.

        Work scheduled by the worker itself (the write after a merged
        load) is waited for too.
        """
        while True:
            with self._lock:
                pending = [f for f in self._pending if not f.done()]
            if not pending:
                return
            for future in pending:
                future.result(timeout=timeout)

    def close(self) -> None:
        """Drain pending writes and stop the worker."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._executor.shutdown(wait=True)

        with self._lock:
            deferred, self._deferred_write = self._deferred_write, None
        if deferred is not None:
            self._do_write(deferred)

    def __enter__(self) -> "SnapshotStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
