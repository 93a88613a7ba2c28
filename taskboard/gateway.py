"""
Mutation gateway: turns user intents into backing-store commands.

Each intent issues at most one command and never retries. The gateway does
not touch the local view store; the result of a command becomes visible only
when the feed delivers the next snapshot.
"""
import logging
from typing import Any, Optional, Union

from .errors import NotFoundError, TransportError
from .intents import Create, Delete, Intent, Move, Rename
from .schema import TaskStatus, normalize_title
from .store import BackingStore
from .view import LocalViewStore

logger = logging.getLogger(__name__)


class MutationGateway:
    """Validates intents and issues the matching store command."""

    def __init__(self, store: BackingStore, view: LocalViewStore):
        self.store = store
        self.view = view  # Read-only here: used for the rename no-op check
        self.commands_issued = 0

    def handle(self, intent: Intent) -> Any:
        """Single entry point for all intents."""
        if isinstance(intent, Create):
            return self.create(intent.title)
        if isinstance(intent, Rename):
            return self.rename(intent.task_id, intent.new_title)
        if isinstance(intent, Move):
            return self.move(intent.task_id, intent.new_status)
        if isinstance(intent, Delete):
            return self.delete(intent.task_id)
        raise TypeError(f"Unknown intent: {intent!r}")

    def create(self, title: str) -> str:
        """Create a task in `todo`. Returns the store-assigned identifier."""
        clean = normalize_title(title)
        task_id = self._issue(
            "create", None, self.store.insert,
            {"title": clean, "status": TaskStatus.TODO.value},
        )
        logger.info(f"Created task {task_id}: {clean!r}")
        return task_id

    def rename(self, task_id: str, new_title: str) -> bool:
        """
        Update the title only.

        Returns False without issuing a command when the trimmed title equals
        the title the local view currently holds.
        """
        current = self.view.find(task_id)
        if current is not None and isinstance(new_title, str) and new_title.strip() == current.title:
            logger.debug(f"Rename of {task_id} skipped: title unchanged")
            return False
        clean = normalize_title(new_title)
        self._issue("rename", task_id, self.store.update_fields, task_id, {"title": clean})
        return True

    def move(self, task_id: str, new_status: Union[TaskStatus, str]) -> TaskStatus:
        """
        Update the status only.

        Whether the move is allowed is the caller's decision (resolver or an
        explicit action button); only enum membership is checked here.
        """
        status = TaskStatus.parse(new_status)
        self._issue("move", task_id, self.store.update_fields, task_id, {"status": status.value})
        logger.info(f"Moved task {task_id} to {status.value}")
        return status

    def delete(self, task_id: str) -> None:
        """Delete a task. The store, not the local view, decides existence."""
        self._issue("delete", task_id, self.store.delete, task_id)
        logger.info(f"Deleted task {task_id}")

    def _issue(self, name: str, task_id: Optional[str], command, *args) -> Any:
        """Run one store command, logging failures before they propagate."""
        self.commands_issued += 1
        try:
            return command(*args)
        except NotFoundError:
            logger.warning(f"{name} failed: task {task_id} no longer exists")
            raise
        except TransportError as e:
            logger.error(f"{name} failed for task {task_id}: {e}")
            raise
