"""
Change feed adapter: connects the backing store's snapshot stream to the
local view store.

The store pushes complete snapshots (not diffs). This module applies each one
to the view, in delivery order, then derives the discrete changes
(added / updated / removed / reordered) and emits them to subscribers.
"""
import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, List, Mapping, Optional, Sequence, Tuple

from .errors import TransportError
from .schema import Task
from .store import BackingStore, Subscription
from .view import LocalViewStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedChange:
    """What one applied snapshot changed in the view."""
    added: Tuple[Task, ...] = ()
    updated: Tuple[Tuple[Task, Task], ...] = ()  # (before, after)
    removed: Tuple[Task, ...] = ()
    reordered: bool = False

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.updated or self.removed or self.reordered)


def diff_views(before: Mapping[str, Task], after: Mapping[str, Task]) -> FeedChange:
    """Compare two view mappings."""
    added = tuple(task for task_id, task in after.items() if task_id not in before)
    removed = tuple(task for task_id, task in before.items() if task_id not in after)
    updated = tuple(
        (before[task_id], task)
        for task_id, task in after.items()
        if task_id in before and before[task_id] != task
    )
    kept_before = [task_id for task_id in before if task_id in after]
    kept_after = [task_id for task_id in after if task_id in before]
    return FeedChange(
        added=added,
        updated=updated,
        removed=removed,
        reordered=kept_before != kept_after,
    )


class ChangeFeed:
    """Single subscription from the backing store into one LocalViewStore."""

    def __init__(self, store: BackingStore, view: LocalViewStore):
        self.store = store
        self.view = view
        self.subscribers: List[Callable[[FeedChange], None]] = []
        self.snapshots_received = 0
        self._subscription: Optional[Subscription] = None
        self._closed = False
        self._delivering = False
        self._pending: Deque[List[Task]] = deque()

    @property
    def is_open(self) -> bool:
        return self._subscription is not None and not self._closed

    def subscribe(self, callback: Callable[[FeedChange], None]) -> None:
        """Register a callback for view changes."""
        self.subscribers.append(callback)

    def _emit(self, change: FeedChange) -> None:
        for callback in self.subscribers:
            try:
                callback(change)
            except Exception as e:
                logger.error(f"Error in feed change callback: {e}")

    def open(self) -> "ChangeFeed":
        """Subscribe to the store, ordered by creation time, newest first."""
        if self._closed:
            raise RuntimeError("Feed is closed")
        if self._subscription is not None:
            return self
        try:
            self._subscription = self.store.subscribe(
                self._on_snapshot, order_by="created_at", descending=True
            )
        except TransportError as e:
            logger.error(f"Feed subscription failed: {e}")
            raise
        if self._closed:
            # Closed from inside the initial delivery
            self._subscription.unsubscribe()
        return self

    def close(self) -> None:
        """Tear down the subscription. Later calls are no-ops."""
        if self._closed:
            return
        self._closed = True
        self._pending.clear()
        if self._subscription is not None:
            self._subscription.unsubscribe()
            logger.info("Feed closed")

    def __enter__(self) -> "ChangeFeed":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _on_snapshot(self, snapshot: Sequence[Task]) -> None:
        """Store callback. Re-entrant deliveries queue behind the current one."""
        if self._closed:
            return
        self.snapshots_received += 1
        self._pending.append(list(snapshot))
        if self._delivering:
            return
        self._delivering = True
        try:
            while self._pending and not self._closed:
                self._apply(self._pending.popleft())
        finally:
            self._delivering = False

    def _apply(self, items: List[Task]) -> None:
        before = self.view.get()
        try:
            changed = self.view.apply_snapshot(items)
        except (TypeError, ValueError) as e:
            logger.error(f"Rejected malformed snapshot ({len(items)} items): {e}")
            return
        if not changed:
            logger.debug("Duplicate snapshot ignored")
            return
        change = diff_views(before, self.view.get())
        logger.debug(
            f"Snapshot applied: +{len(change.added)} ~{len(change.updated)} "
            f"-{len(change.removed)} reordered={change.reordered}"
        )
        self._emit(change)
