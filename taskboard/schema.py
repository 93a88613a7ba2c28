"""
Task schema and status enumeration.

Task lifecycle:
  todo → inprocess → complete

A Task value is immutable: the local view replaces it wholesale whenever the
feed delivers a newer snapshot.
"""
from enum import Enum
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Tuple, Union

from .errors import ValidationError


class TaskStatus(Enum):
    """Valid task states on the board."""
    TODO = "todo"              # Created, not started
    INPROCESS = "inprocess"    # Being worked on
    COMPLETE = "complete"      # Finished (terminal)

    @classmethod
    def parse(cls, value: Union[str, "TaskStatus"]) -> "TaskStatus":
        """Coerce a status or its string value. Unknown values are rejected."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise ValidationError(f"Invalid status: {value!r}")

    @classmethod
    def is_member(cls, value: Any) -> bool:
        try:
            cls.parse(value)
        except ValidationError:
            return False
        return True


# Board order, left to right
TASK_STATUSES: Tuple[TaskStatus, ...] = (
    TaskStatus.TODO,
    TaskStatus.INPROCESS,
    TaskStatus.COMPLETE,
)


def utc_now() -> str:
    """ISO-8601 UTC timestamp with microseconds (sortable as text)."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def is_valid_title(title: Any) -> bool:
    """A title is valid when it has visible characters."""
    return isinstance(title, str) and len(title.strip()) > 0


def normalize_title(title: Any) -> str:
    """Return the trimmed title or raise ValidationError."""
    if not is_valid_title(title):
        raise ValidationError("Title must not be empty")
    return title.strip()


@dataclass(frozen=True)
class Task:
    """One task as last confirmed by the backing store."""

    task_id: str          # Assigned by the store, stable for the task's lifetime
    title: str
    status: TaskStatus = TaskStatus.TODO
    created_at: str = ""  # Store-assigned; orders the view (newest first)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.task_id,
            "title": self.title,
            "status": self.status.value,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        """Deserialize from a store row or API dict."""
        return cls(
            task_id=str(data.get("task_id") or data.get("id") or ""),
            title=data.get("title", ""),
            status=TaskStatus.parse(data.get("status", "todo")),
            created_at=data.get("created_at") or "",
        )


@dataclass(frozen=True)
class DragPayload:
    """
    Task state captured at drag start.

    Reflects the local view at that moment; a remote update may land while
    the drag is in flight, so the payload can be stale by the time it drops.
    """
    task_id: str
    title: str
    status: TaskStatus

    @classmethod
    def from_task(cls, task: Task) -> "DragPayload":
        return cls(task_id=task.task_id, title=task.title, status=task.status)
