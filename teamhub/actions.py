"""
Confirmed user actions: deletes and leave approvals.

Prompts are passed in as callables so the Qt dialogs and the tests can
supply their own:

    confirm(message) -> bool
    ask_reason(message) -> Optional[str]   # None = cancelled
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .calendar_model import can_transition
from .core.errors import ValidationError
from .core.models import LeaveRequest, LeaveStatus
from .repositories import LeaveRepository, Repository

logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]
AskReason = Callable[[str], Optional[str]]


def delete_prompt(noun: str, permanent: bool = False) -> str:
    message = f"Are you sure you want to delete this {noun}?"
    if permanent:
        message += " This action cannot be undone."
    return message


async def confirm_delete(
    repo: Repository, record_id: int | str, confirm: Confirm, noun: str, permanent: bool = False
) -> bool:
    """Delete ``record_id`` after a yes; returns whether the delete ran."""
    if not confirm(delete_prompt(noun, permanent)):
        return False
    await repo.delete(record_id)
    logger.info("Deleted %s %s", noun, record_id)
    return True


async def transition_leave(
    repo: LeaveRepository,
    leave: LeaveRequest,
    target: str,
    confirm: Confirm,
    ask_reason: Optional[AskReason] = None,
    *,
    approver: str,
) -> Optional[LeaveRequest]:
    """
    Approve or reject a pending request.

    ``approver`` is the signed-in user of the running app. Returns the
    updated record, or None when the user backs out.
    """
    target = getattr(target, "value", target)
    if not can_transition(leave.status, target):
        raise ValidationError({"status": f"Cannot change a {leave.status} request to {target}"})

    verb = "approve" if target == LeaveStatus.APPROVED.value else "reject"
    if not confirm(f"Are you sure you want to {verb} this leave request?"):
        return None

    reason = None
    if target == LeaveStatus.REJECTED.value and ask_reason is not None:
        reason = ask_reason("Reason for rejection (optional):")
        if reason is None:
            return None
        reason = reason.strip() or None

    record = await repo.update_status(leave.id, target, approver, reason)
    logger.info("Leave request %s %s by %s", leave.id, target.lower(), approver)
    return record
