"""Domain events that produce notifications.

Each event carries the snapshots the dispatcher needs to address exactly
one recipient and build the typed payload, so dispatching never has to go
back to the store for reads.
"""

from __future__ import annotations

from dataclasses import dataclass

from taskboard.domain.models import Board, BoardInvitation, TaskItem, User


@dataclass(frozen=True)
class TaskAssigned:
    """A task's assignee changed to a non-empty value. Recipient: the assignee."""

    task: TaskItem
    assignee: User
    actor: User

    @property
    def recipient_id(self) -> str:
        return self.assignee.id


@dataclass(frozen=True)
class InvitationAccepted:
    """The invitee accepted. Recipient: the inviter."""

    invitation: BoardInvitation
    board: Board
    responder: User
    inviter: User

    @property
    def recipient_id(self) -> str:
        return self.inviter.id


@dataclass(frozen=True)
class InvitationRejected:
    """The invitee rejected. Recipient: the inviter."""

    invitation: BoardInvitation
    board: Board
    responder: User
    inviter: User

    @property
    def recipient_id(self) -> str:
        return self.inviter.id


NotificationEvent = TaskAssigned | InvitationAccepted | InvitationRejected
