"""MembershipStore — the persistence port every service talks to.

Two implementations ship with taskboard:

- :class:`~taskboard.infrastructure.memory.InMemoryMembershipStore` for tests
  and throwaway sessions.
- :class:`~taskboard.infrastructure.sql_store.SqlMembershipStore` on SQLite
  via SQLAlchemy Core.

Contract shared by both:

- Each call is atomic at the single-document level. There are no
  cross-document transactions.
- ``update`` replaces the stored document (last writer wins), except that
  ``update(board)`` never touches ``members``. Membership only changes
  through :meth:`add_board_member` / :meth:`remove_board_member`, which are
  atomic per board so concurrent accept/remove calls cannot lose each other.
- At most one ``pending`` invitation exists per ``(board_id, invitee_id)``;
  ``create`` raises :class:`ConflictError` for a second one.
- Usernames and emails are unique; ``create`` raises :class:`ConflictError`.

Cross-board task lookups ignore access rules; services filter by board.
``tasks_assigned_to`` returns soonest due first (undated last),
``tasks_created_by`` newest first, and ``search_tasks`` most recently
updated first. A search hit is a task the user created or is assigned whose
title or description contains *term* (ignoring case) or that carries *term*
as a tag.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from taskboard.domain.models import (
    Board,
    BoardInvitation,
    Checklist,
    Notification,
    TaskItem,
    User,
)

if TYPE_CHECKING:
    from datetime import datetime

    from pydantic import BaseModel


class EntityKind(StrEnum):
    """Kinds of document held by the store."""

    USER = "user"
    BOARD = "board"
    INVITATION = "invitation"
    TASK = "task"
    CHECKLIST = "checklist"
    NOTIFICATION = "notification"


ENTITY_MODELS: dict[EntityKind, type[BaseModel]] = {
    EntityKind.USER: User,
    EntityKind.BOARD: Board,
    EntityKind.INVITATION: BoardInvitation,
    EntityKind.TASK: TaskItem,
    EntityKind.CHECKLIST: Checklist,
    EntityKind.NOTIFICATION: Notification,
}


def kind_of(entity: BaseModel) -> EntityKind:
    """Resolve the :class:`EntityKind` for an entity instance."""
    for kind, model_cls in ENTITY_MODELS.items():
        if isinstance(entity, model_cls):
            return kind
    msg = f"Not a storable entity: {type(entity).__name__}"
    raise TypeError(msg)


@runtime_checkable
class MembershipStore(Protocol):
    """Durable board/user/invitation/task/checklist/notification records."""

    # --- Generic document access ---

    def get(self, kind: EntityKind, entity_id: str) -> BaseModel | None: ...

    def create(self, entity: BaseModel) -> BaseModel: ...

    def update(self, entity: BaseModel) -> BaseModel: ...

    def delete(self, kind: EntityKind, entity_id: str) -> bool: ...

    # --- Atomic membership operations ---

    def add_board_member(self, board_id: str, user_id: str) -> Board | None: ...

    def remove_board_member(self, board_id: str, user_id: str) -> Board | None: ...

    # --- Indexed lookups ---

    def find_user_by_email(self, email: str) -> User | None: ...

    def find_user_by_username(self, username: str) -> User | None: ...

    def pending_invitations_for_invitee(self, invitee_id: str) -> list[BoardInvitation]: ...

    def invitations_for_board(self, board_id: str) -> list[BoardInvitation]: ...

    def overdue_pending_invitations(self, cutoff: datetime) -> list[BoardInvitation]: ...

    def boards_for_user(self, user_id: str) -> list[Board]: ...

    def tasks_for_board(self, board_id: str) -> list[TaskItem]: ...

    def tasks_assigned_to(self, user_id: str) -> list[TaskItem]: ...

    def tasks_created_by(self, user_id: str) -> list[TaskItem]: ...

    def search_tasks(self, term: str, user_id: str) -> list[TaskItem]: ...

    def checklists_for_board(self, board_id: str) -> list[Checklist]: ...

    def notifications_for_user(
        self,
        user_id: str,
        *,
        unread_only: bool = False,
        limit: int = 50,
    ) -> list[Notification]: ...

    def count_unread_notifications(self, user_id: str) -> int: ...

    def close(self) -> None: ...
