"""SQLite database engine and schema via SQLAlchemy Core."""

from taskboard.infrastructure.database.engine import create_db_engine, init_database
from taskboard.infrastructure.database.schema import (
    board_members,
    boards,
    checklists,
    invitations,
    metadata,
    notifications,
    tasks,
    users,
)

__all__ = [
    "board_members",
    "boards",
    "checklists",
    "create_db_engine",
    "init_database",
    "invitations",
    "metadata",
    "notifications",
    "tasks",
    "users",
]
