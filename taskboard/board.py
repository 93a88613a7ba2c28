"""
TaskBoard: composition root for one client's board.

Owns the local view store, the change feed that writes it, and the mutation
gateway that reads it. UI events enter only through the methods below:

  drag_start, drop_on                      - drag and drop
  move_to_in_process, move_to_complete     - card action buttons
  edit_confirm, delete_click, add_submit   - edit / delete / add form
"""
import asyncio
import logging
from typing import Any, Callable, List, Optional, Union

from .errors import NotFoundError
from .feed import ChangeFeed
from .gateway import MutationGateway
from .intents import Create, Delete, Intent, Move, Rename
from .projector import Columns, project
from .resolver import can_drop, resolve
from .schema import DragPayload, TaskStatus
from .store import BackingStore
from .view import LocalViewStore

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[Any, Exception], None]


class TaskBoard:
    """Wires store → feed → view → projector, and UI events → gateway → store."""

    def __init__(self, store: BackingStore):
        self.store = store
        self.view = LocalViewStore()
        self.feed = ChangeFeed(store, self.view)
        self.gateway = MutationGateway(store, self.view)
        self.error_subscribers: List[ErrorCallback] = []

    # ── Lifecycle ────────────────────────────────────────────────────────────

    def open(self) -> "TaskBoard":
        self.feed.open()
        return self

    def close(self) -> None:
        self.feed.close()

    def __enter__(self) -> "TaskBoard":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ── Error channel ────────────────────────────────────────────────────────

    def on_error(self, callback: ErrorCallback) -> None:
        """Register a callback for command failures."""
        self.error_subscribers.append(callback)

    def _report(self, origin: Any, error: Exception) -> None:
        for callback in self.error_subscribers:
            try:
                callback(origin, error)
            except Exception as e:
                logger.error(f"Error in error callback: {e}")

    # ── Commands ─────────────────────────────────────────────────────────────

    def dispatch(self, intent: Intent) -> Any:
        """Run an intent now. Failures are reported, then raised."""
        try:
            return self.gateway.handle(intent)
        except Exception as e:
            self._report(intent, e)
            raise

    def submit(self, intent: Intent) -> "asyncio.Task":
        """
        Run an intent as a task on the running event loop.

        The store call runs in a worker thread so the loop stays responsive.
        The caller may await the task or drop it; failures still reach the
        error channel either way.
        """
        task = asyncio.get_running_loop().create_task(self._run(intent))
        task.add_done_callback(_retrieve_exception)
        return task

    async def _run(self, intent: Intent) -> Any:
        return await asyncio.to_thread(self.dispatch, intent)

    # ── UI events ────────────────────────────────────────────────────────────

    def drag_start(self, task_id: str) -> DragPayload:
        """Capture the dragged card as the view knows it right now."""
        task = self.view.find(task_id)
        if task is None:
            raise NotFoundError(task_id, f"Task {task_id} is not on the board")
        return DragPayload.from_task(task)

    def drop_on(
        self,
        target_column: Union[TaskStatus, str],
        payload: DragPayload,
        target_task_id: Optional[str] = None,
    ) -> Optional[TaskStatus]:
        """
        Handle a drop. Returns the status moved to, or None if nothing was sent.

        The source status is the freshest one the view holds for the task, so a
        remote move that landed mid-drag is not undone by a stale payload.
        """
        target = TaskStatus.parse(target_column)
        if not can_drop(payload, target, target_task_id):
            return None
        current = self.view.find(payload.task_id)
        source = current.status if current is not None else payload.status
        new_status = resolve(source, target)
        if new_status is None:
            logger.debug(f"Drop of {payload.task_id} on {target.value} ignored ({source.value})")
            return None
        self.dispatch(Move(payload.task_id, new_status))
        return new_status

    def move_to_in_process(self, task_id: str) -> TaskStatus:
        return self.dispatch(Move(task_id, TaskStatus.INPROCESS))

    def move_to_complete(self, task_id: str) -> TaskStatus:
        return self.dispatch(Move(task_id, TaskStatus.COMPLETE))

    def edit_confirm(self, task_id: str, text: str) -> bool:
        return self.dispatch(Rename(task_id, text))

    def delete_click(self, task_id: str) -> None:
        self.dispatch(Delete(task_id))

    def add_submit(self, text: str) -> str:
        return self.dispatch(Create(text))

    # ── Rendering ────────────────────────────────────────────────────────────

    def columns(self) -> Columns:
        return project(self.view.get())


def _retrieve_exception(task: "asyncio.Task") -> None:
    # Already reported on the error channel
    if not task.cancelled():
        task.exception()
