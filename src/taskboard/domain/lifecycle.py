"""Status enums and the board-invitation state machine.

Invitations move ``pending -> {accepted, rejected, expired}``; all three
outcomes are terminal. Task status is the Kanban column of a task and has
no enforced transitions; completion is tracked separately on the task.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING

from taskboard.domain.errors import ConflictError

if TYPE_CHECKING:
    from taskboard.domain.models import BoardInvitation

# --- Closed enums ---


class InvitationStatus(StrEnum):
    """Lifecycle state of a board invitation."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"


class TaskStatus(StrEnum):
    """Kanban state of a task."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    IN_REVIEW = "in_review"
    DONE = "done"
    BLOCKED = "blocked"


class TaskPriority(StrEnum):
    """Task priority levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class NotificationType(StrEnum):
    """Kinds of in-app notification."""

    TASK_ASSIGNED = "task_assigned"
    TASK_COMPLETED = "task_completed"
    TASK_DUE_DATE = "task_due_date"
    BOARD_INVITATION = "board_invitation"
    SYSTEM_MESSAGE = "system_message"
    INVITATION_ACCEPTED = "invitation_accepted"
    INVITATION_REJECTED = "invitation_rejected"


# --- Transition map ---

INVITATION_TRANSITIONS: dict[str, list[str]] = {
    "pending": ["accepted", "rejected", "expired"],
    "accepted": [],
    "rejected": [],
    "expired": [],
}

DEFAULT_INVITATION_TTL_DAYS = 7


def is_valid_transition(
    current: str,
    target: str,
    transitions: dict[str, list[str]] = INVITATION_TRANSITIONS,
) -> bool:
    """Check if transitioning from *current* to *target* is allowed."""
    allowed = transitions.get(current, [])
    return target in allowed


def is_terminal(status: str) -> bool:
    """True when no further transition is possible from *status*."""
    return not INVITATION_TRANSITIONS.get(status, [])


def is_expired(invitation: BoardInvitation, now: datetime) -> bool:
    """An invitation is expired once ``expires_at`` lies strictly in the past."""
    return invitation.expires_at is not None and invitation.expires_at < now


def transition(
    invitation: BoardInvitation,
    target: InvitationStatus,
    *,
    now: datetime,
) -> BoardInvitation:
    """Return a new invitation snapshot moved to *target*.

    ``responded_at`` is only stamped for an actual answer (accept/reject),
    not for the expiry transition.

    Raises:
        ConflictError: If the invitation already left ``pending``.
    """
    if not is_valid_transition(str(invitation.status), str(target)):
        msg = f"Invitation {invitation.id} was already {invitation.status}"
        raise ConflictError(msg, invitation_id=invitation.id, status=str(invitation.status))

    update: dict[str, object] = {"status": target}
    if target in (InvitationStatus.ACCEPTED, InvitationStatus.REJECTED):
        update["responded_at"] = now
    return invitation.model_copy(update=update)
