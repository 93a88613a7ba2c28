"""Column projection: partition the view by status, keeping view order."""
from dataclasses import dataclass, field
from typing import Dict, List, Mapping

from .schema import Task, TaskStatus


@dataclass
class Columns:
    todo: List[Task] = field(default_factory=list)
    inprocess: List[Task] = field(default_factory=list)
    complete: List[Task] = field(default_factory=list)

    def column(self, status: TaskStatus) -> List[Task]:
        return getattr(self, status.value)

    def counts(self) -> Dict[str, int]:
        return {status.value: len(self.column(status)) for status in TaskStatus}

    def to_dict(self) -> Dict[str, List[Dict]]:
        return {
            status.value: [task.to_dict() for task in self.column(status)]
            for status in TaskStatus
        }


def project(view: Mapping[str, Task]) -> Columns:
    """Build the three columns from the current view mapping."""
    columns = Columns()
    for task in view.values():
        columns.column(task.status).append(task)
    return columns
