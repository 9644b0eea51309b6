"""Entity models for boards, invitations, tasks, checklists, and notifications.

Every entity is a frozen pydantic model. Handlers never mutate a loaded
snapshot in place: they build the next state with ``model_copy(update=...)``
and hand it to the store, which keeps stores free of aliasing between
callers.

Notification payloads are a tagged union keyed by ``type`` so producer and
consumer share one schema per notification kind.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Annotated, Literal

from pydantic import BaseModel, Field, field_serializer, model_validator

from taskboard.domain.ids import new_id
from taskboard.domain.lifecycle import (
    DEFAULT_INVITATION_TTL_DAYS,
    InvitationStatus,
    NotificationType,
    TaskPriority,
    TaskStatus,
)

DEFAULT_COLUMNS: tuple[str, ...] = ("Todo", "In Progress", "Done")
DEFAULT_ROLE = "Member"


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(UTC)


class _Entity(BaseModel):
    model_config = {"frozen": True}


class User(_Entity):
    """A registered principal. Credentials live outside this system."""

    id: str = Field(default_factory=lambda: new_id("user"))
    username: str
    email: str
    full_name: str | None = None
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def display_name(self) -> str:
        return self.full_name or self.username


class Board(_Entity):
    """Shared workspace owned by one user and open to invited members.

    The owner is privileged even when absent from ``members``.
    """

    id: str = Field(default_factory=lambda: new_id("board"))
    title: str
    description: str = ""
    owner_id: str
    members: frozenset[str] = Field(default_factory=frozenset)
    is_public: bool = False
    is_archived: bool = False
    color: str | None = None
    columns: list[str] = Field(default_factory=lambda: list(DEFAULT_COLUMNS))
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_serializer("members")
    def _serialize_members(self, members: frozenset[str]) -> list[str]:
        return sorted(members)

    def is_owner_or_member(self, user_id: str | None) -> bool:
        return user_id is not None and (user_id == self.owner_id or user_id in self.members)


class BoardInvitation(_Entity):
    """Offer of board membership from an inviter to an invitee.

    Never deleted; terminal invitations stay as an audit trail.
    """

    id: str = Field(default_factory=lambda: new_id("invitation"))
    board_id: str
    inviter_id: str
    invitee_id: str
    role: str = DEFAULT_ROLE
    status: InvitationStatus = InvitationStatus.PENDING
    message: str = ""
    created_at: datetime = Field(default_factory=utcnow)
    expires_at: datetime | None = None
    responded_at: datetime | None = None

    @model_validator(mode="after")
    def _default_expiry(self) -> BoardInvitation:
        if self.expires_at is None:
            expires = self.created_at + timedelta(days=DEFAULT_INVITATION_TTL_DAYS)
            object.__setattr__(self, "expires_at", expires)
        return self


class TaskItem(_Entity):
    """Unit of work on a board, optionally linked to a checklist and an assignee."""

    id: str = Field(default_factory=lambda: new_id("task"))
    board_id: str
    title: str
    description: str = ""
    list_id: str | None = None
    assigned_to_id: str | None = None
    created_by_id: str
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    tags: list[str] = Field(default_factory=list)
    due_date: datetime | None = None
    position: int = 0
    is_completed: bool = False
    completed_at: datetime | None = None
    completed_by: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class ChecklistItem(_Entity):
    id: str = Field(default_factory=lambda: new_id("checklist_item"))
    text: str
    completed: bool = False
    notes: str | None = None


class Checklist(_Entity):
    """User-created to-do list on a board. Independent of tasks."""

    id: str = Field(default_factory=lambda: new_id("checklist"))
    board_id: str
    title: str
    order: int = 0
    items: list[ChecklistItem] = Field(default_factory=list)
    notes: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


# ---------------------------------------------------------------------------
# Notification payloads (one variant per notification type)
# ---------------------------------------------------------------------------


class TaskAssignedData(_Entity):
    type: Literal["task_assigned"] = "task_assigned"
    task_id: str
    board_id: str
    task_title: str
    assigned_by_id: str
    assigned_by_name: str


class InvitationAcceptedData(_Entity):
    type: Literal["invitation_accepted"] = "invitation_accepted"
    invitation_id: str
    board_id: str
    board_title: str
    accepter_id: str
    accepter_username: str


class InvitationRejectedData(_Entity):
    type: Literal["invitation_rejected"] = "invitation_rejected"
    invitation_id: str
    board_id: str
    board_title: str
    rejecter_id: str
    rejecter_username: str


NotificationData = Annotated[
    TaskAssignedData | InvitationAcceptedData | InvitationRejectedData,
    Field(discriminator="type"),
]


class Notification(_Entity):
    """Durable per-recipient record of a domain event.

    Created only by the notification dispatcher; only ``is_read``/``read_at``
    change afterwards.
    """

    id: str = Field(default_factory=lambda: new_id("notification"))
    recipient_id: str
    type: NotificationType
    title: str
    message: str
    data: NotificationData
    is_read: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    read_at: datetime | None = None

    @model_validator(mode="after")
    def _payload_matches_type(self) -> Notification:
        if self.data.type != self.type:
            msg = f"Payload {self.data.type!r} does not match notification type {self.type!r}"
            raise ValueError(msg)
        return self
