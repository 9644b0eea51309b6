"""SQLite-backed MembershipStore on SQLAlchemy Core.

Every public method opens its own ``engine.begin()`` block, so each call
commits or rolls back on its own. Unique-constraint violations surface as
:class:`ConflictError`; everything else from SQLAlchemy propagates as-is.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, func, insert, or_, select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError

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
from taskboard.infrastructure.database.engine import init_database
from taskboard.infrastructure.database.schema import (
    JSON_COLUMNS,
    board_members,
    boards,
    checklists,
    invitations,
    notifications,
    tasks,
    users,
)
from taskboard.infrastructure.store import ENTITY_MODELS, EntityKind, kind_of

if TYPE_CHECKING:
    from datetime import datetime
    from pathlib import Path

    from pydantic import BaseModel
    from sqlalchemy import Connection, Row, Table
    from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

_TABLES: dict[EntityKind, Table] = {
    EntityKind.USER: users,
    EntityKind.BOARD: boards,
    EntityKind.INVITATION: invitations,
    EntityKind.TASK: tasks,
    EntityKind.CHECKLIST: checklists,
    EntityKind.NOTIFICATION: notifications,
}


class SqlMembershipStore:
    """MembershipStore over a SQLite database file."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @classmethod
    def open(cls, db_path: Path) -> SqlMembershipStore:
        """Create tables if needed and return a store bound to *db_path*."""
        return cls(init_database(db_path))

    @property
    def engine(self) -> Engine:
        return self._engine

    # ------------------------------------------------------------------
    # Generic document access
    # ------------------------------------------------------------------

    def get(self, kind: EntityKind, entity_id: str) -> BaseModel | None:
        table = _TABLES[kind]
        with self._engine.connect() as conn:
            row = conn.execute(select(table).where(table.c.id == entity_id)).first()
            if row is None:
                return None
            return self._load(conn, kind, row)

    def create(self, entity: BaseModel) -> BaseModel:
        kind = kind_of(entity)
        table = _TABLES[kind]
        values = _to_row(kind, entity)
        try:
            with self._engine.begin() as conn:
                conn.execute(insert(table).values(**values))
                if isinstance(entity, Board):
                    now = utcnow().isoformat()
                    for user_id in sorted(entity.members):
                        conn.execute(
                            insert(board_members).values(
                                board_id=entity.id, user_id=user_id, added_at=now
                            )
                        )
        except IntegrityError as exc:
            msg = f"{kind} {values['id']} conflicts with an existing record"
            raise ConflictError(msg, id=values["id"], reason=str(exc.orig)) from exc
        return entity

    def update(self, entity: BaseModel) -> BaseModel:
        kind = kind_of(entity)
        table = _TABLES[kind]
        values = _to_row(kind, entity)
        entity_id = values.pop("id")
        try:
            with self._engine.begin() as conn:
                result = conn.execute(update(table).where(table.c.id == entity_id).values(**values))
                if result.rowcount == 0:
                    msg = f"{kind} {entity_id} does not exist"
                    raise NotFoundError(msg, id=entity_id)
                if isinstance(entity, Board):
                    return self._load_board(conn, entity_id)
        except IntegrityError as exc:
            msg = f"{kind} {entity_id} conflicts with an existing record"
            raise ConflictError(msg, id=entity_id, reason=str(exc.orig)) from exc
        return entity

    def delete(self, kind: EntityKind, entity_id: str) -> bool:
        table = _TABLES[kind]
        with self._engine.begin() as conn:
            if kind is EntityKind.BOARD:
                conn.execute(delete(board_members).where(board_members.c.board_id == entity_id))
            result = conn.execute(delete(table).where(table.c.id == entity_id))
            return result.rowcount > 0

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def add_board_member(self, board_id: str, user_id: str) -> Board | None:
        with self._engine.begin() as conn:
            if not _board_exists(conn, board_id):
                return None
            now = utcnow().isoformat()
            stmt = (
                sqlite_insert(board_members)
                .values(board_id=board_id, user_id=user_id, added_at=now)
                .on_conflict_do_nothing(index_elements=["board_id", "user_id"])
            )
            if conn.execute(stmt).rowcount > 0:
                conn.execute(update(boards).where(boards.c.id == board_id).values(updated_at=now))
            return self._load_board(conn, board_id)

    def remove_board_member(self, board_id: str, user_id: str) -> Board | None:
        with self._engine.begin() as conn:
            if not _board_exists(conn, board_id):
                return None
            result = conn.execute(
                delete(board_members).where(
                    (board_members.c.board_id == board_id) & (board_members.c.user_id == user_id)
                )
            )
            if result.rowcount > 0:
                conn.execute(
                    update(boards)
                    .where(boards.c.id == board_id)
                    .values(updated_at=utcnow().isoformat())
                )
            return self._load_board(conn, board_id)

    # ------------------------------------------------------------------
    # Indexed lookups
    # ------------------------------------------------------------------

    def find_user_by_email(self, email: str) -> User | None:
        stmt = select(users).where(func.lower(users.c.email) == email.strip().lower())
        return self._first(EntityKind.USER, stmt)  # type: ignore[return-value]

    def find_user_by_username(self, username: str) -> User | None:
        stmt = select(users).where(users.c.username == username)
        return self._first(EntityKind.USER, stmt)  # type: ignore[return-value]

    def pending_invitations_for_invitee(self, invitee_id: str) -> list[BoardInvitation]:
        stmt = (
            select(invitations)
            .where(invitations.c.invitee_id == invitee_id)
            .where(invitations.c.status == str(InvitationStatus.PENDING))
            .order_by(invitations.c.created_at)
        )
        return self._all(EntityKind.INVITATION, stmt)  # type: ignore[return-value]

    def invitations_for_board(self, board_id: str) -> list[BoardInvitation]:
        stmt = (
            select(invitations)
            .where(invitations.c.board_id == board_id)
            .order_by(invitations.c.created_at)
        )
        return self._all(EntityKind.INVITATION, stmt)  # type: ignore[return-value]

    def overdue_pending_invitations(self, cutoff: datetime) -> list[BoardInvitation]:
        stmt = (
            select(invitations)
            .where(invitations.c.status == str(InvitationStatus.PENDING))
            .order_by(invitations.c.created_at)
        )
        pending = self._all(EntityKind.INVITATION, stmt)
        return [inv for inv in pending if is_expired(inv, cutoff)]  # type: ignore[arg-type]

    def boards_for_user(self, user_id: str) -> list[Board]:
        member_of = select(board_members.c.board_id).where(board_members.c.user_id == user_id)
        stmt = (
            select(boards)
            .where(or_(boards.c.owner_id == user_id, boards.c.id.in_(member_of)))
            .order_by(boards.c.created_at)
        )
        return self._all(EntityKind.BOARD, stmt)  # type: ignore[return-value]

    def tasks_for_board(self, board_id: str) -> list[TaskItem]:
        stmt = (
            select(tasks)
            .where(tasks.c.board_id == board_id)
            .order_by(tasks.c.position, tasks.c.created_at)
        )
        return self._all(EntityKind.TASK, stmt)  # type: ignore[return-value]

    def tasks_assigned_to(self, user_id: str) -> list[TaskItem]:
        stmt = (
            select(tasks)
            .where(tasks.c.assigned_to_id == user_id)
            .order_by(tasks.c.due_date.is_(None), tasks.c.due_date, tasks.c.created_at)
        )
        return self._all(EntityKind.TASK, stmt)  # type: ignore[return-value]

    def tasks_created_by(self, user_id: str) -> list[TaskItem]:
        stmt = (
            select(tasks)
            .where(tasks.c.created_by_id == user_id)
            .order_by(tasks.c.created_at.desc())
        )
        return self._all(EntityKind.TASK, stmt)  # type: ignore[return-value]

    def search_tasks(self, term: str, user_id: str) -> list[TaskItem]:
        needle = term.lower()
        stmt = (
            select(tasks)
            .where(or_(tasks.c.created_by_id == user_id, tasks.c.assigned_to_id == user_id))
            .where(
                or_(
                    tasks.c.title.icontains(needle, autoescape=True),
                    tasks.c.description.icontains(needle, autoescape=True),
                    # tags is a JSON array; match one whole quoted element
                    tasks.c.tags.icontains(json.dumps(needle), autoescape=True),
                )
            )
            .order_by(tasks.c.updated_at.desc())
        )
        return self._all(EntityKind.TASK, stmt)  # type: ignore[return-value]

    def checklists_for_board(self, board_id: str) -> list[Checklist]:
        stmt = (
            select(checklists)
            .where(checklists.c.board_id == board_id)
            .order_by(checklists.c.order)
        )
        return self._all(EntityKind.CHECKLIST, stmt)  # type: ignore[return-value]

    def notifications_for_user(
        self,
        user_id: str,
        *,
        unread_only: bool = False,
        limit: int = 50,
    ) -> list[Notification]:
        stmt = select(notifications).where(notifications.c.recipient_id == user_id)
        if unread_only:
            stmt = stmt.where(notifications.c.is_read == 0)
        stmt = stmt.order_by(notifications.c.created_at.desc()).limit(limit)
        return self._all(EntityKind.NOTIFICATION, stmt)  # type: ignore[return-value]

    def count_unread_notifications(self, user_id: str) -> int:
        stmt = (
            select(func.count())
            .select_from(notifications)
            .where(notifications.c.recipient_id == user_id)
            .where(notifications.c.is_read == 0)
        )
        with self._engine.connect() as conn:
            return int(conn.execute(stmt).scalar_one())

    def close(self) -> None:
        """Dispose the engine's connection pool."""
        self._engine.dispose()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _first(self, kind: EntityKind, stmt: Any) -> BaseModel | None:
        with self._engine.connect() as conn:
            row = conn.execute(stmt).first()
            return None if row is None else self._load(conn, kind, row)

    def _all(self, kind: EntityKind, stmt: Any) -> list[BaseModel]:
        with self._engine.connect() as conn:
            return [self._load(conn, kind, row) for row in conn.execute(stmt).fetchall()]

    def _load(self, conn: Connection, kind: EntityKind, row: Row[Any]) -> BaseModel:
        data = _from_row(kind, row)
        if kind is EntityKind.BOARD:
            data["members"] = _member_ids(conn, data["id"])
        return ENTITY_MODELS[kind].model_validate(data)

    def _load_board(self, conn: Connection, board_id: str) -> Board:
        row = conn.execute(select(boards).where(boards.c.id == board_id)).one()
        board = self._load(conn, EntityKind.BOARD, row)
        assert isinstance(board, Board)
        return board


# ---------------------------------------------------------------------------
# Row conversion
# ---------------------------------------------------------------------------


def _to_row(kind: EntityKind, entity: BaseModel) -> dict[str, Any]:
    """Serialize *entity* into column values for its table."""
    table = _TABLES[kind]
    data = entity.model_dump(mode="json")
    data.pop("members", None)
    json_cols = JSON_COLUMNS.get(table.name, frozenset())
    row: dict[str, Any] = {}
    for key, value in data.items():
        if key in json_cols:
            row[key] = json.dumps(value)
        elif isinstance(value, bool):
            row[key] = int(value)
        else:
            row[key] = value
    return row


def _from_row(kind: EntityKind, row: Row[Any]) -> dict[str, Any]:
    """Deserialize a table row into model input data."""
    table = _TABLES[kind]
    json_cols = JSON_COLUMNS.get(table.name, frozenset())
    data = dict(row._mapping)
    for key in json_cols:
        if data.get(key) is not None:
            data[key] = json.loads(data[key])
    return data


def _member_ids(conn: Connection, board_id: str) -> list[str]:
    rows = conn.execute(
        select(board_members.c.user_id).where(board_members.c.board_id == board_id)
    ).fetchall()
    return [r.user_id for r in rows]


def _board_exists(conn: Connection, board_id: str) -> bool:
    return conn.execute(select(boards.c.id).where(boards.c.id == board_id)).first() is not None
