"""In-memory MembershipStore.

One instance per workspace, never module-level state. A single lock
serializes every call, which gives the same per-document atomicity the
SQLite store gets from its transactions.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from taskboard.domain.errors import ConflictError, NotFoundError
from taskboard.domain.lifecycle import InvitationStatus, is_expired
from taskboard.domain.models import (
    Board,
    BoardInvitation,
    Checklist,
    Notification,
    TaskItem,
    User,
    utcnow,
)
from taskboard.infrastructure.store import EntityKind, kind_of

if TYPE_CHECKING:
    from datetime import datetime

    from pydantic import BaseModel


class InMemoryMembershipStore:
    """Dict-backed store keyed by :class:`EntityKind` then entity id."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._docs: dict[EntityKind, dict[str, BaseModel]] = {kind: {} for kind in EntityKind}

    # ------------------------------------------------------------------
    # Generic document access
    # ------------------------------------------------------------------

    def get(self, kind: EntityKind, entity_id: str) -> BaseModel | None:
        with self._lock:
            return self._docs[kind].get(entity_id)

    def create(self, entity: BaseModel) -> BaseModel:
        kind = kind_of(entity)
        with self._lock:
            docs = self._docs[kind]
            entity_id = entity.id  # type: ignore[attr-defined]
            if entity_id in docs:
                msg = f"{kind} {entity_id} already exists"
                raise ConflictError(msg, id=entity_id)
            if isinstance(entity, User):
                self._check_user_unique(entity)
            elif isinstance(entity, BoardInvitation):
                self._check_single_pending(entity)
            docs[entity_id] = entity
            return entity

    def update(self, entity: BaseModel) -> BaseModel:
        kind = kind_of(entity)
        with self._lock:
            docs = self._docs[kind]
            entity_id = entity.id  # type: ignore[attr-defined]
            current = docs.get(entity_id)
            if current is None:
                msg = f"{kind} {entity_id} does not exist"
                raise NotFoundError(msg, id=entity_id)
            if isinstance(entity, Board):
                assert isinstance(current, Board)
                entity = entity.model_copy(update={"members": current.members})
            elif isinstance(entity, User):
                self._check_user_unique(entity)
            elif isinstance(entity, BoardInvitation):
                self._check_single_pending(entity)
            docs[entity_id] = entity
            return entity

    def delete(self, kind: EntityKind, entity_id: str) -> bool:
        with self._lock:
            return self._docs[kind].pop(entity_id, None) is not None

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def add_board_member(self, board_id: str, user_id: str) -> Board | None:
        return self._change_members(board_id, user_id, add=True)

    def remove_board_member(self, board_id: str, user_id: str) -> Board | None:
        return self._change_members(board_id, user_id, add=False)

    def _change_members(self, board_id: str, user_id: str, *, add: bool) -> Board | None:
        with self._lock:
            board = self._docs[EntityKind.BOARD].get(board_id)
            if board is None:
                return None
            assert isinstance(board, Board)
            members = board.members | {user_id} if add else board.members - {user_id}
            if members != board.members:
                board = board.model_copy(update={"members": members, "updated_at": utcnow()})
                self._docs[EntityKind.BOARD][board_id] = board
            return board

    # ------------------------------------------------------------------
    # Indexed lookups
    # ------------------------------------------------------------------

    def find_user_by_email(self, email: str) -> User | None:
        needle = email.strip().lower()
        return next((u for u in self._users() if u.email.lower() == needle), None)

    def find_user_by_username(self, username: str) -> User | None:
        return next((u for u in self._users() if u.username == username), None)

    def pending_invitations_for_invitee(self, invitee_id: str) -> list[BoardInvitation]:
        return [
            inv
            for inv in self._invitations()
            if inv.invitee_id == invitee_id and inv.status == InvitationStatus.PENDING
        ]

    def invitations_for_board(self, board_id: str) -> list[BoardInvitation]:
        return [inv for inv in self._invitations() if inv.board_id == board_id]

    def overdue_pending_invitations(self, cutoff: datetime) -> list[BoardInvitation]:
        return [
            inv
            for inv in self._invitations()
            if inv.status == InvitationStatus.PENDING and is_expired(inv, cutoff)
        ]

    def boards_for_user(self, user_id: str) -> list[Board]:
        with self._lock:
            boards = [b for b in self._docs[EntityKind.BOARD].values() if isinstance(b, Board)]
        return sorted(
            (b for b in boards if b.is_owner_or_member(user_id)),
            key=lambda b: b.created_at,
        )

    def tasks_for_board(self, board_id: str) -> list[TaskItem]:
        with self._lock:
            tasks = [t for t in self._docs[EntityKind.TASK].values() if isinstance(t, TaskItem)]
        return sorted(
            (t for t in tasks if t.board_id == board_id),
            key=lambda t: (t.position, t.created_at),
        )

    def tasks_assigned_to(self, user_id: str) -> list[TaskItem]:
        return sorted(
            (t for t in self._tasks() if t.assigned_to_id == user_id),
            key=lambda t: (t.due_date is None, t.due_date or t.created_at, t.created_at),
        )

    def tasks_created_by(self, user_id: str) -> list[TaskItem]:
        return sorted(
            (t for t in self._tasks() if t.created_by_id == user_id),
            key=lambda t: t.created_at,
            reverse=True,
        )

    def search_tasks(self, term: str, user_id: str) -> list[TaskItem]:
        needle = term.lower()
        hits = [
            t
            for t in self._tasks()
            if user_id in (t.created_by_id, t.assigned_to_id)
            and (
                needle in t.title.lower()
                or needle in t.description.lower()
                or needle in (tag.lower() for tag in t.tags)
            )
        ]
        return sorted(hits, key=lambda t: t.updated_at, reverse=True)

    def checklists_for_board(self, board_id: str) -> list[Checklist]:
        with self._lock:
            rows = self._docs[EntityKind.CHECKLIST].values()
            lists = [c for c in rows if isinstance(c, Checklist)]
        return sorted((c for c in lists if c.board_id == board_id), key=lambda c: c.order)

    def notifications_for_user(
        self,
        user_id: str,
        *,
        unread_only: bool = False,
        limit: int = 50,
    ) -> list[Notification]:
        with self._lock:
            docs = self._docs[EntityKind.NOTIFICATION].values()
            rows = [n for n in docs if isinstance(n, Notification)]
        matching = [
            n for n in rows if n.recipient_id == user_id and not (unread_only and n.is_read)
        ]
        matching.sort(key=lambda n: n.created_at, reverse=True)
        return matching[:limit]

    def count_unread_notifications(self, user_id: str) -> int:
        with self._lock:
            docs = self._docs[EntityKind.NOTIFICATION].values()
            return sum(
                1
                for n in docs
                if isinstance(n, Notification) and n.recipient_id == user_id and not n.is_read
            )

    def close(self) -> None:
        """Nothing to release."""

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _users(self) -> list[User]:
        with self._lock:
            return [u for u in self._docs[EntityKind.USER].values() if isinstance(u, User)]

    def _tasks(self) -> list[TaskItem]:
        with self._lock:
            return [t for t in self._docs[EntityKind.TASK].values() if isinstance(t, TaskItem)]

    def _invitations(self) -> list[BoardInvitation]:
        with self._lock:
            rows = self._docs[EntityKind.INVITATION].values()
            return sorted(
                (i for i in rows if isinstance(i, BoardInvitation)),
                key=lambda i: i.created_at,
            )

    def _check_user_unique(self, user: User) -> None:
        """Caller holds the lock."""
        for other in self._docs[EntityKind.USER].values():
            assert isinstance(other, User)
            if other.id == user.id:
                continue
            if other.username == user.username:
                msg = f"Username {user.username!r} is taken"
                raise ConflictError(msg, username=user.username)
            if other.email.lower() == user.email.lower():
                msg = f"Email {user.email!r} is already registered"
                raise ConflictError(msg, email=user.email)

    def _check_single_pending(self, invitation: BoardInvitation) -> None:
        """Caller holds the lock."""
        if invitation.status != InvitationStatus.PENDING:
            return
        for other in self._docs[EntityKind.INVITATION].values():
            assert isinstance(other, BoardInvitation)
            if (
                other.id != invitation.id
                and other.board_id == invitation.board_id
                and other.invitee_id == invitation.invitee_id
                and other.status == InvitationStatus.PENDING
            ):
                msg = "A pending invitation already exists for this user and board"
                raise ConflictError(msg, board_id=invitation.board_id)
