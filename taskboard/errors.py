"""
Error taxonomy for the task board.

  ValidationError  - rejected before any command reaches the store
  NotFoundError    - the store no longer has the targeted task
  TransportError   - the store (or its subscription) failed
"""
from typing import Optional


class TaskBoardError(Exception):
    """Base class for all task board errors."""
    pass


class ValidationError(TaskBoardError):
    """Raised when a title or status fails validation."""
    pass


class NotFoundError(TaskBoardError):
    """Raised when the backing store reports a missing task."""

    def __init__(self, task_id: str, message: Optional[str] = None):
        self.task_id = task_id
        super().__init__(message or f"Task {task_id} not found")


class TransportError(TaskBoardError):
    """Raised when a command or subscription fails at the store boundary."""
    pass
