"""Board access control — one evaluator for every read and mutation path.

``evaluate`` is a pure function of a board snapshot, a principal, and an
action. Handlers never re-derive the owner/member/public expression; they
call :func:`require` (or ``BaseService._authorize``) instead.

Rules:

- READ: public board, owner, or member.
- WRITE: same as READ while ``public_write`` is on (the default). With it
  off, public boards are read-only to outsiders.
- INVITE: owner or member.
- REMOVE_MEMBER(target): owner or the target themself, and the target is
  never the owner.
- DELETE_BOARD, MANAGE_BOARD: owner only.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from taskboard.domain.errors import UnauthorizedError

if TYPE_CHECKING:
    from taskboard.domain.models import Board


class Action(StrEnum):
    """Closed set of actions a principal can request on a board."""

    READ = "read"
    WRITE = "write"
    INVITE = "invite"
    REMOVE_MEMBER = "remove_member"
    DELETE_BOARD = "delete_board"
    MANAGE_BOARD = "manage_board"


class Decision(StrEnum):
    ALLOW = "allow"
    DENY = "deny"


def evaluate(
    board: Board,
    principal_id: str,
    action: Action,
    *,
    target_id: str | None = None,
    public_write: bool = True,
) -> Decision:
    """Decide whether *principal_id* may perform *action* on *board*.

    Args:
        board: Board snapshot the decision is made against.
        principal_id: Authenticated user making the request.
        action: Requested action.
        target_id: Member being removed; required for ``REMOVE_MEMBER``.
        public_write: Whether ``is_public`` also grants WRITE.
    """
    is_owner = principal_id == board.owner_id
    is_member = principal_id in board.members

    if action is Action.READ:
        allowed = board.is_public or is_owner or is_member
    elif action is Action.WRITE:
        allowed = (board.is_public and public_write) or is_owner or is_member
    elif action is Action.INVITE:
        allowed = is_owner or is_member
    elif action is Action.REMOVE_MEMBER:
        if target_id is None:
            msg = "REMOVE_MEMBER requires a target_id"
            raise ValueError(msg)
        allowed = (is_owner or principal_id == target_id) and target_id != board.owner_id
    elif action in (Action.DELETE_BOARD, Action.MANAGE_BOARD):
        allowed = is_owner
    else:  # pragma: no cover - Action is closed
        msg = f"Unknown action: {action!r}"
        raise ValueError(msg)

    return Decision.ALLOW if allowed else Decision.DENY


def can_read(board: Board, principal_id: str) -> bool:
    return evaluate(board, principal_id, Action.READ) is Decision.ALLOW


def can_write(board: Board, principal_id: str, *, public_write: bool = True) -> bool:
    decision = evaluate(board, principal_id, Action.WRITE, public_write=public_write)
    return decision is Decision.ALLOW


def require(
    board: Board,
    principal_id: str,
    action: Action,
    *,
    target_id: str | None = None,
    public_write: bool = True,
) -> None:
    """Raise :class:`UnauthorizedError` unless *action* is allowed."""
    decision = evaluate(
        board,
        principal_id,
        action,
        target_id=target_id,
        public_write=public_write,
    )
    if decision is Decision.DENY:
        msg = f"User {principal_id} may not {action} on board {board.id}"
        raise UnauthorizedError(msg, board_id=board.id, action=str(action))
