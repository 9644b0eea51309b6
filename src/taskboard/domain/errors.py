"""Typed failures raised by domain rules and stores.

The service layer converts these into ``ServiceResult`` errors at its
boundary, so every caller sees one distinguishable code per failure kind.
Email delivery failures are not represented here: they never leave the
notification dispatcher.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ErrorKind(StrEnum):
    """Closed set of failure codes exposed through ``ServiceError.code``."""

    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    CONFLICT = "CONFLICT"
    INVALID_INPUT = "INVALID_INPUT"
    CANCELLED = "CANCELLED"


class TaskboardError(Exception):
    """Base class for all typed taskboard failures."""

    kind: ErrorKind = ErrorKind.CONFLICT

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class NotFoundError(TaskboardError):
    """A board, task, checklist, invitation, notification, or user is absent."""

    kind = ErrorKind.NOT_FOUND


class UnauthorizedError(TaskboardError):
    """The principal is not allowed to perform the requested action."""

    kind = ErrorKind.UNAUTHORIZED


class ConflictError(TaskboardError):
    """A business rule rejects the operation in the current state."""

    kind = ErrorKind.CONFLICT


class InvalidInputError(TaskboardError):
    """The command arguments are malformed (e.g. both email and username given)."""

    kind = ErrorKind.INVALID_INPUT


class CancelledError(TaskboardError):
    """The caller cancelled the command before it finished issuing store calls."""

    kind = ErrorKind.CANCELLED
