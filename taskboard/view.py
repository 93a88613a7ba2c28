"""
Local view store: the in-memory task collection the board renders from.

The change feed is its only writer. Each snapshot is built in full before it
replaces the previous one, so readers never observe a half-applied snapshot.
"""
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional

from .schema import Task


class LocalViewStore:
    """Identifier → Task mapping, in feed delivery order."""

    def __init__(self):
        self._tasks: Mapping[str, Task] = MappingProxyType({})
        self.version = 0  # Bumped once per snapshot that changed the content

    def apply_snapshot(self, items: Iterable[Task]) -> bool:
        """
        Replace the content with the given snapshot.

        Returns True if the content changed, False for an identical snapshot.
        On error the previous content is kept and the error propagates.
        """
        staged: Dict[str, Task] = {}
        for item in items:
            if not isinstance(item, Task):
                raise TypeError(f"Snapshot item is not a Task: {item!r}")
            if item.task_id in staged:
                raise ValueError(f"Duplicate task id in snapshot: {item.task_id}")
            staged[item.task_id] = item

        if self._same_as(staged):
            return False

        self._tasks = MappingProxyType(staged)
        self.version += 1
        return True

    def _same_as(self, staged: Dict[str, Task]) -> bool:
        # Order matters: a reorder is a change
        return list(staged.items()) == list(self._tasks.items())

    def get(self) -> Mapping[str, Task]:
        """Current mapping (read-only)."""
        return self._tasks

    def find(self, task_id: str) -> Optional[Task]:
        return self._tasks.get(task_id)

    def tasks(self) -> List[Task]:
        return list(self._tasks.values())

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks
