"""BoardService — board CRUD and membership removal.

Membership is only ever added by accepting an invitation (see
:mod:`taskboard.services.invitations`) and only ever removed here, both
through the store's atomic per-board member operations.
"""

from __future__ import annotations

import logging
from typing import Any

import structlog

from taskboard.domain.access import Action
from taskboard.domain.errors import ConflictError, InvalidInputError, NotFoundError
from taskboard.domain.models import Board, User
from taskboard.infrastructure.store import EntityKind
from taskboard.services._helpers import dump, dump_all, merge_patch
from taskboard.services.base import BaseService, service_op
from taskboard.services.result import ServiceResult

logger = logging.getLogger(__name__)
log = structlog.get_logger(__name__)

OWNER_ROLE = "Owner"
MEMBER_ROLE = "Member"


class BoardService(BaseService):
    """Create, read, update, delete boards and manage their member list."""

    # ------------------------------------------------------------------
    # Board CRUD
    # ------------------------------------------------------------------

    @service_op("create_board")
    def create_board(
        self,
        owner_id: str,
        title: str,
        *,
        description: str = "",
        is_public: bool = False,
        color: str | None = None,
        columns: list[str] | None = None,
    ) -> ServiceResult:
        """Create a board owned by *owner_id*, who also becomes its first member."""
        op = "create_board"
        title = title.strip()
        if not title:
            msg = "Board title must not be empty"
            raise InvalidInputError(msg)
        self._get_user(owner_id)

        now = self._now()
        fields: dict[str, Any] = {
            "title": title,
            "description": description,
            "owner_id": owner_id,
            "members": frozenset({owner_id}),
            "is_public": is_public,
            "color": color,
            "created_at": now,
            "updated_at": now,
        }
        if columns:
            fields["columns"] = columns
        board = Board(**fields)
        self._store.create(board)
        logger.debug("Created board %s for %s", board.id, owner_id)
        return ServiceResult(ok=True, op=op, data=dump(board))

    @service_op("get_board")
    def get_board(self, board_id: str, principal_id: str) -> ServiceResult:
        board = self._get_board(board_id)
        self._authorize(board, principal_id, Action.READ)
        return ServiceResult(ok=True, op="get_board", data=dump(board))

    @service_op("list_boards")
    def list_boards(self, user_id: str, *, include_archived: bool = False) -> ServiceResult:
        """Boards *user_id* owns or belongs to, oldest first."""
        boards = self._store.boards_for_user(user_id)
        if not include_archived:
            boards = [b for b in boards if not b.is_archived]
        return ServiceResult(
            ok=True,
            op="list_boards",
            data={"items": dump_all(boards), "count": len(boards)},
        )

    @service_op("update_board")
    def update_board(
        self,
        board_id: str,
        principal_id: str,
        *,
        title: str | None = None,
        description: str | None = None,
        is_public: bool | None = None,
        is_archived: bool | None = None,
        color: str | None = None,
        columns: list[str] | None = None,
    ) -> ServiceResult:
        """Merge-patch board settings. Owner only; never touches ``members``."""
        op = "update_board"
        board = self._get_board(board_id)
        self._authorize(board, principal_id, Action.MANAGE_BOARD)

        changes = merge_patch(
            {
                "title": title.strip() if title is not None else None,
                "description": description,
                "is_public": is_public,
                "is_archived": is_archived,
                "color": color,
                "columns": columns or None,
            }
        )
        if not changes:
            return ServiceResult(
                ok=True,
                op=op,
                data=dump(board),
                warnings=["No changes supplied"],
            )

        changes["updated_at"] = self._now()
        updated = self._store.update(board.model_copy(update=changes))
        return ServiceResult(
            ok=True,
            op=op,
            data={
                **dump(updated),
                "fields_changed": sorted(k for k in changes if k != "updated_at"),
            },
        )

    @service_op("delete_board")
    def delete_board(self, board_id: str, principal_id: str) -> ServiceResult:
        """Delete a board with its tasks and checklists.

        Refused with CONFLICT while any task on the board is completed.
        Invitations are kept as audit records.
        """
        op = "delete_board"
        board = self._get_board(board_id)
        self._authorize(board, principal_id, Action.DELETE_BOARD)

        tasks = self._store.tasks_for_board(board_id)
        completed = [t.id for t in tasks if t.is_completed]
        if completed:
            msg = f"Board has {len(completed)} completed task(s) that cannot be deleted"
            raise ConflictError(msg, board_id=board_id, completed_task_ids=completed)
        for task in tasks:
            self._store.delete(EntityKind.TASK, task.id)
        checklists = self._store.checklists_for_board(board_id)
        for checklist in checklists:
            self._store.delete(EntityKind.CHECKLIST, checklist.id)
        self._store.delete(EntityKind.BOARD, board_id)

        log.info("board_deleted", board_id=board_id, principal_id=principal_id)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "id": board_id,
                "title": board.title,
                "tasks_deleted": len(tasks),
                "checklists_deleted": len(checklists),
            },
        )

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    @service_op("list_members")
    def list_members(self, board_id: str, principal_id: str) -> ServiceResult:
        """Owner first (role ``Owner``), then members by username."""
        board = self._get_board(board_id)
        self._authorize(board, principal_id, Action.READ)

        items: list[dict[str, Any]] = []
        owner = self._store.get(EntityKind.USER, board.owner_id)
        items.append(_member_row(board.owner_id, owner, OWNER_ROLE))

        rows = []
        for member_id in board.members - {board.owner_id}:
            user = self._store.get(EntityKind.USER, member_id)
            rows.append(_member_row(member_id, user, MEMBER_ROLE))
        rows.sort(key=lambda r: (r["username"] or "", r["id"]))
        items.extend(rows)
        return ServiceResult(
            ok=True,
            op="list_members",
            data={"board_id": board_id, "items": items, "count": len(items)},
        )

    @service_op("remove_member")
    def remove_member(self, board_id: str, member_id: str, requestor_id: str) -> ServiceResult:
        """Remove *member_id* from the board.

        The owner may remove anyone but themself; a member may remove
        themself (leave the board).
        """
        op = "remove_member"
        board = self._get_board(board_id)
        if member_id == board.owner_id and requestor_id == board.owner_id:
            msg = "The board owner cannot be removed"
            raise ConflictError(msg, board_id=board_id, member_id=member_id)
        self._authorize(board, requestor_id, Action.REMOVE_MEMBER, target_id=member_id)
        if member_id not in board.members:
            msg = f"User {member_id} is not a member of board {board_id}"
            raise NotFoundError(msg, board_id=board_id, member_id=member_id)

        updated = self._store.remove_board_member(board_id, member_id)
        if updated is None:
            msg = f"No board found with ID: {board_id}"
            raise NotFoundError(msg, id=board_id)

        log.info(
            "member_removed",
            board_id=board_id,
            member_id=member_id,
            requestor_id=requestor_id,
        )
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "board_id": board_id,
                "member_id": member_id,
                "members": sorted(updated.members),
            },
        )


def _member_row(user_id: str, user: object | None, role: str) -> dict[str, Any]:
    if isinstance(user, User):
        return {
            "id": user_id,
            "username": user.username,
            "email": user.email,
            "full_name": user.full_name,
            "role": role,
        }
    return {"id": user_id, "username": None, "email": None, "full_name": None, "role": role}
