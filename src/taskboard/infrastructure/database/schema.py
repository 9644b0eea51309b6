"""SQLAlchemy Core table definitions for the taskboard database.

Board membership lives in its own ``board_members`` table rather than a
JSON column on ``boards``, so adding or removing one member is a single
row insert/delete instead of a read-modify-write of the board.

JSON columns (``columns``, ``tags``, ``items``, ``data``) hold serialized
lists/objects as TEXT. Timestamps are ISO 8601 TEXT in UTC.
"""

from __future__ import annotations

from sqlalchemy import (
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    UniqueConstraint,
    text,
)

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Text, primary_key=True),
    Column("username", Text, nullable=False, unique=True),
    Column("email", Text, nullable=False, unique=True),
    Column("full_name", Text),
    Column("created_at", Text, nullable=False),
)

boards = Table(
    "boards",
    metadata,
    Column("id", Text, primary_key=True),
    Column("title", Text, nullable=False),
    Column("description", Text, nullable=False, default="", server_default=""),
    Column("owner_id", Text, nullable=False),
    Column("is_public", Integer, nullable=False, default=0, server_default="0"),
    Column("is_archived", Integer, nullable=False, default=0, server_default="0"),
    Column("color", Text),
    Column("columns", Text, nullable=False),  # JSON array
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
)

board_members = Table(
    "board_members",
    metadata,
    Column("board_id", Text, ForeignKey("boards.id", ondelete="CASCADE"), nullable=False),
    Column("user_id", Text, nullable=False),
    Column("added_at", Text, nullable=False),
    UniqueConstraint("board_id", "user_id"),
)

invitations = Table(
    "invitations",
    metadata,
    Column("id", Text, primary_key=True),
    Column("board_id", Text, nullable=False),
    Column("inviter_id", Text, nullable=False),
    Column("invitee_id", Text, nullable=False),
    Column("role", Text, nullable=False),
    Column("status", Text, nullable=False),
    Column("message", Text, nullable=False, default="", server_default=""),
    Column("created_at", Text, nullable=False),
    Column("expires_at", Text),
    Column("responded_at", Text),
)

tasks = Table(
    "tasks",
    metadata,
    Column("id", Text, primary_key=True),
    Column("board_id", Text, nullable=False),
    Column("title", Text, nullable=False),
    Column("description", Text, nullable=False, default="", server_default=""),
    Column("list_id", Text),
    Column("assigned_to_id", Text),
    Column("created_by_id", Text, nullable=False),
    Column("status", Text, nullable=False),
    Column("priority", Text, nullable=False),
    Column("tags", Text, nullable=False),  # JSON array
    Column("due_date", Text),
    Column("position", Integer, nullable=False, default=0, server_default="0"),
    Column("is_completed", Integer, nullable=False, default=0, server_default="0"),
    Column("completed_at", Text),
    Column("completed_by", Text),
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
)

checklists = Table(
    "checklists",
    metadata,
    Column("id", Text, primary_key=True),
    Column("board_id", Text, nullable=False),
    Column("title", Text, nullable=False),
    Column("order", Integer, nullable=False, default=0, server_default="0"),
    Column("items", Text, nullable=False),  # JSON array of checklist items
    Column("notes", Text),
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
)

notifications = Table(
    "notifications",
    metadata,
    Column("id", Text, primary_key=True),
    Column("recipient_id", Text, nullable=False),
    Column("type", Text, nullable=False),
    Column("title", Text, nullable=False),
    Column("message", Text, nullable=False),
    Column("data", Text, nullable=False),  # JSON object, tagged by "type"
    Column("is_read", Integer, nullable=False, default=0, server_default="0"),
    Column("created_at", Text, nullable=False),
    Column("read_at", Text),
)

# ---------------------------------------------------------------------------
# Indexes for indexed lookups
# ---------------------------------------------------------------------------

Index("ix_board_members_user", board_members.c.user_id)
Index("ix_invitations_board", invitations.c.board_id)
Index("ix_invitations_invitee_status", invitations.c.invitee_id, invitations.c.status)
Index("ix_tasks_board", tasks.c.board_id)
Index("ix_tasks_assignee", tasks.c.assigned_to_id)
Index("ix_tasks_creator", tasks.c.created_by_id)
Index("ix_checklists_board", checklists.c.board_id)
Index("ix_notifications_recipient", notifications.c.recipient_id, notifications.c.is_read)

# At most one pending invitation per (board, invitee).
Index(
    "ux_invitations_single_pending",
    invitations.c.board_id,
    invitations.c.invitee_id,
    unique=True,
    sqlite_where=text("status = 'pending'"),
)

JSON_COLUMNS: dict[str, frozenset[str]] = {
    "boards": frozenset({"columns"}),
    "tasks": frozenset({"tags"}),
    "checklists": frozenset({"items"}),
    "notifications": frozenset({"data"}),
}
