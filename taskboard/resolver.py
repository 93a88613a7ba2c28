"""
Board transition rules.

Drag-drop policy (forward only, `complete` is terminal):

  todo       → dropped on inprocess / complete  → that column
  inprocess  → dropped on complete              → complete
  inprocess  → dropped on todo                  → inprocess (snaps back)
  complete   → anywhere                         → no move

Explicit action buttons follow the same forward-only direction.
"""
from enum import Enum
from typing import Dict, Optional, Tuple, Union

from .schema import DragPayload, TaskStatus

TODO = TaskStatus.TODO
INPROCESS = TaskStatus.INPROCESS
COMPLETE = TaskStatus.COMPLETE

# (source status, drop target column) → resulting status, None = no move
DROP_TRANSITIONS: Dict[Tuple[TaskStatus, TaskStatus], Optional[TaskStatus]] = {
    (TODO, TODO): None,
    (TODO, INPROCESS): INPROCESS,
    (TODO, COMPLETE): COMPLETE,
    (INPROCESS, TODO): INPROCESS,  # No regression past start
    (INPROCESS, INPROCESS): None,
    (INPROCESS, COMPLETE): COMPLETE,
    (COMPLETE, TODO): None,
    (COMPLETE, INPROCESS): None,
    (COMPLETE, COMPLETE): None,
}


def resolve(
    source_status: Union[TaskStatus, str],
    drop_target_column: Union[TaskStatus, str],
) -> Optional[TaskStatus]:
    """Resulting status for a drop, or None when no command should be issued."""
    source = TaskStatus.parse(source_status)
    target = TaskStatus.parse(drop_target_column)
    return DROP_TRANSITIONS[(source, target)]


def can_drop(
    payload: DragPayload,
    target_column: Union[TaskStatus, str],
    target_task_id: Optional[str] = None,
) -> bool:
    """Drop-target acceptance: reject the payload's own column and its own card."""
    if target_task_id is not None and target_task_id == payload.task_id:
        return False
    return TaskStatus.parse(target_column) != payload.status


class CardAction(Enum):
    """Buttons a card offers besides edit and delete."""
    MOVE_TO_INPROCESS = "move_to_inprocess"
    MOVE_TO_COMPLETE = "move_to_complete"

    @property
    def target(self) -> TaskStatus:
        return INPROCESS if self is CardAction.MOVE_TO_INPROCESS else COMPLETE


CARD_ACTIONS: Dict[TaskStatus, Tuple[CardAction, ...]] = {
    TODO: (CardAction.MOVE_TO_INPROCESS, CardAction.MOVE_TO_COMPLETE),
    INPROCESS: (CardAction.MOVE_TO_COMPLETE,),
    COMPLETE: (),
}


def available_actions(status: Union[TaskStatus, str]) -> Tuple[CardAction, ...]:
    return CARD_ACTIONS[TaskStatus.parse(status)]
