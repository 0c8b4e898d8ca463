# gamification/state_machine.py
"""
Goal lifecycle shared by milestones and community challenges:

active → completed
       └→ failed

completed and failed are terminal; nothing ever leaves them.
"""
from typing import Tuple
import logging

logger = logging.getLogger("ecoact.gamification")

STATUS_ACTIVE = "active"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"

VALID_TRANSITIONS = {
    STATUS_ACTIVE: [STATUS_COMPLETED, STATUS_FAILED],
    STATUS_COMPLETED: [],
    STATUS_FAILED: [],
}


def can_transition(current_status: str, new_status: str) -> Tuple[bool, str]:
    """
    Returns (can_transition: bool, reason: str)
    """
    if new_status not in VALID_TRANSITIONS:
        return False, f"Invalid status: {new_status}"

    allowed = VALID_TRANSITIONS.get(current_status, [])
    if new_status not in allowed:
        return False, f"Cannot transition from '{current_status}' to '{new_status}'"

    return True, ""


def transition(queryset, obj, new_status: str, guard=None, **fields) -> bool:
    """
    Compare-and-set obj from its loaded status to new_status.

    Returns False (and leaves obj untouched) when the transition is invalid or
    another writer got there first.
    """
    can, reason = can_transition(obj.status, new_status)
    if not can:
        logger.warning(f"Invalid state transition attempted: {obj._meta.model_name}={obj.pk}. Reason: {reason}")
        return False

    old_status = obj.status
    if not queryset.cas_transition(obj.pk, old_status, new_status, guard=guard, **fields):
        return False

    obj.status = new_status
    for name, value in fields.items():
        setattr(obj, name, value)

    logger.info(
        f"Goal state transition: {obj._meta.model_name}={obj.pk}, from={old_status}, to={new_status}"
    )
    return True


def is_terminal_status(status: str) -> bool:
    return status not in VALID_TRANSITIONS or len(VALID_TRANSITIONS[status]) == 0
