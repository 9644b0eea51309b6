"""BaseService — shared plumbing for every taskboard service.

Provides store access with cancellation checkpoints, board/user lookup
that raises :class:`NotFoundError`, the single authorization entry point,
and the :func:`service_op` decorator that turns typed failures into
``ServiceResult(ok=False)``.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar, cast

import structlog

from taskboard.domain.access import Action, Decision, evaluate
from taskboard.domain.errors import (
    CancelledError,
    NotFoundError,
    TaskboardError,
    UnauthorizedError,
)
from taskboard.domain.models import Board, User
from taskboard.infrastructure.store import EntityKind
from taskboard.services.result import ServiceResult

if TYPE_CHECKING:
    import threading
    from datetime import datetime

    from pydantic import BaseModel

    from taskboard.domain.events import NotificationEvent
    from taskboard.infrastructure.store import MembershipStore
    from taskboard.infrastructure.workspace import Workspace

logger = logging.getLogger(__name__)
log = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., ServiceResult])


def service_op(op: str) -> Callable[[F], F]:
    """Convert :class:`TaskboardError` raised by the wrapped method into a failed result."""

    def decorator(fn: F) -> F:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> ServiceResult:
            try:
                return fn(*args, **kwargs)
            except TaskboardError as exc:
                logger.debug("%s failed: %s (%s)", op, exc.message, exc.kind)
                return ServiceResult.from_error(op, exc)

        return cast(F, wrapper)

    return decorator


class BaseService:
    """Base for all service-layer classes.

    Usage::

        class TaskService(BaseService):
            @service_op("create_task")
            def create_task(self, board_id: str, principal_id: str, ...) -> ServiceResult:
                board = self._get_board(board_id)
                self._authorize(board, principal_id, Action.WRITE)
                ...

    A service instance is one unit of work. When *cancel* is set, the next
    store call stops the command with a ``CANCELLED`` result; a store call
    already issued always completes.
    """

    def __init__(self, workspace: Workspace, *, cancel: threading.Event | None = None) -> None:
        self._workspace = workspace
        self._cancel = cancel

    # ------------------------------------------------------------------
    # Store access
    # ------------------------------------------------------------------

    @property
    def _store(self) -> MembershipStore:
        self._checkpoint()
        return self._workspace.store

    def _checkpoint(self) -> None:
        if self._cancel is not None and self._cancel.is_set():
            msg = "Command cancelled"
            raise CancelledError(msg)

    def _now(self) -> datetime:
        return self._workspace.now()

    def _get(self, kind: EntityKind, entity_id: str) -> BaseModel:
        entity = self._store.get(kind, entity_id)
        if entity is None:
            msg = f"No {kind} found with ID: {entity_id}"
            raise NotFoundError(msg, kind=str(kind), id=entity_id)
        return entity

    def _get_board(self, board_id: str) -> Board:
        board = self._get(EntityKind.BOARD, board_id)
        assert isinstance(board, Board)
        return board

    def _get_user(self, user_id: str) -> User:
        user = self._get(EntityKind.USER, user_id)
        assert isinstance(user, User)
        return user

    # ------------------------------------------------------------------
    # Authorization
    # ------------------------------------------------------------------

    def _authorize(
        self,
        board: Board,
        principal_id: str,
        action: Action,
        *,
        target_id: str | None = None,
    ) -> None:
        """Raise :class:`UnauthorizedError` unless the evaluator allows *action*."""
        decision = evaluate(
            board,
            principal_id,
            action,
            target_id=target_id,
            public_write=self._workspace.settings.access.public_write,
        )
        if decision is Decision.DENY:
            log.info(
                "access_denied",
                board_id=board.id,
                principal_id=principal_id,
                action=str(action),
                target_id=target_id,
            )
            msg = f"User {principal_id} may not {action} on board {board.id}"
            raise UnauthorizedError(msg, board_id=board.id, action=str(action))

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def _notify(self, event: NotificationEvent, warnings: list[str]) -> dict[str, Any]:
        """Record the notification for *event*. Returns the stored notification."""
        from taskboard.services.notifications import NotificationDispatcher

        notification = NotificationDispatcher(self._workspace, cancel=self._cancel).dispatch(
            event, warnings
        )
        return notification.model_dump(mode="json")
