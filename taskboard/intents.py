"""
User intents accepted by the mutation gateway.

The set is closed: Create | Rename | Delete | Move.
"""
from dataclasses import dataclass
from typing import Union

from .schema import TaskStatus


@dataclass(frozen=True)
class Create:
    title: str


@dataclass(frozen=True)
class Rename:
    task_id: str
    new_title: str


@dataclass(frozen=True)
class Delete:
    task_id: str


@dataclass(frozen=True)
class Move:
    task_id: str
    new_status: Union[TaskStatus, str]


Intent = Union[Create, Rename, Delete, Move]

INTENT_TYPES = (Create, Rename, Delete, Move)
