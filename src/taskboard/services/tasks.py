"""TaskService — guarded task mutations.

Every handler resolves the task and its board, asks the access evaluator
once (through ``_authorize``), then writes. A missing task, board, or
checklist yields a ``NOT_FOUND`` result; denied access and broken business
rules yield ``UNAUTHORIZED`` / ``CONFLICT``.

Assignee rule: a non-empty assignee must be the board owner or a member,
checked on create, update, and assign. A change of assignee to a new,
non-empty value notifies the new assignee after the task is stored.

Cross-board queries (assigned, created, search) only return tasks on boards
the principal can read.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import structlog

from taskboard.domain.access import Action, can_read
from taskboard.domain.errors import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    UnauthorizedError,
)
from taskboard.domain.events import TaskAssigned
from taskboard.domain.lifecycle import TaskPriority, TaskStatus
from taskboard.domain.models import Board, Checklist, TaskItem
from taskboard.infrastructure.store import EntityKind
from taskboard.services._helpers import dump, dump_all, merge_patch, normalize_tags
from taskboard.services.base import BaseService, service_op
from taskboard.services.result import ServiceResult

logger = logging.getLogger(__name__)
log = structlog.get_logger(__name__)


class TaskService(BaseService):
    """Create, update, assign, move, complete, and delete tasks."""

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    @service_op("create_task")
    def create_task(
        self,
        board_id: str,
        principal_id: str,
        title: str,
        *,
        description: str = "",
        status: TaskStatus | None = None,
        priority: TaskPriority | None = None,
        list_id: str | None = None,
        assigned_to_id: str | None = None,
        tags: list[str] | None = None,
        due_date: datetime | None = None,
    ) -> ServiceResult:
        """Create a task. Unset status/priority/tags default to todo/medium/[]."""
        op = "create_task"
        board = self._get_board(board_id)
        self._authorize(board, principal_id, Action.WRITE)

        title = title.strip()
        if not title:
            msg = "Task title must not be empty"
            raise InvalidInputError(msg)
        if assigned_to_id:
            _require_assignable(board, assigned_to_id)
        if list_id:
            self._get_checklist_on(board, list_id)

        now = self._now()
        task = TaskItem(
            board_id=board_id,
            title=title,
            description=description,
            list_id=list_id or None,
            assigned_to_id=assigned_to_id or None,
            created_by_id=principal_id,
            status=status or TaskStatus.TODO,
            priority=priority or TaskPriority.MEDIUM,
            tags=normalize_tags(tags),
            due_date=due_date,
            position=len(self._store.tasks_for_board(board_id)),
            created_at=now,
            updated_at=now,
        )
        self._store.create(task)
        logger.debug("Created task %s on board %s", task.id, board_id)
        return ServiceResult(ok=True, op=op, data=dump(task))

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    @service_op("update_task")
    def update_task(
        self,
        task_id: str,
        principal_id: str,
        *,
        title: str | None = None,
        description: str | None = None,
        status: TaskStatus | None = None,
        priority: TaskPriority | None = None,
        due_date: datetime | None = None,
        assigned_to_id: str | None = None,
        tags: list[str] | None = None,
        list_id: str | None = None,
    ) -> ServiceResult:
        """Merge-patch a task: only supplied, non-empty fields change.

        ``tags`` replaces the whole list when given (an empty list clears it).
        """
        op = "update_task"
        warnings: list[str] = []
        task, board = self._load(task_id)
        self._authorize(board, principal_id, Action.WRITE)

        changes = merge_patch(
            {
                "title": title.strip() if title is not None else None,
                "description": description,
                "status": status,
                "priority": priority,
                "due_date": due_date,
                "assigned_to_id": assigned_to_id,
                "list_id": list_id,
            }
        )
        if tags is not None:
            changes["tags"] = normalize_tags(tags)
        if "assigned_to_id" in changes:
            _require_assignable(board, changes["assigned_to_id"])
        if "list_id" in changes:
            self._get_checklist_on(board, changes["list_id"])

        if not changes:
            return ServiceResult(
                ok=True,
                op=op,
                data=dump(task),
                warnings=["No changes supplied"],
            )

        updated = self._save(task, changes)
        notification = self._notify_if_reassigned(task, updated, principal_id, warnings)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                **dump(updated),
                "fields_changed": sorted(changes),
                "notification_id": notification,
            },
            warnings=warnings,
        )

    @service_op("assign_task")
    def assign_task(
        self,
        task_id: str,
        principal_id: str,
        assignee_id: str | None,
    ) -> ServiceResult:
        """Assign a task to an owner or member, or unassign it with ``None``."""
        op = "assign_task"
        warnings: list[str] = []
        task, board = self._load(task_id)
        self._authorize(board, principal_id, Action.WRITE)

        assignee_id = assignee_id or None
        if assignee_id is not None:
            _require_assignable(board, assignee_id)

        updated = self._save(task, {"assigned_to_id": assignee_id})
        notification = self._notify_if_reassigned(task, updated, principal_id, warnings)
        return ServiceResult(
            ok=True,
            op=op,
            data={**dump(updated), "notification_id": notification},
            warnings=warnings,
        )

    @service_op("change_task_list")
    def change_task_list(
        self,
        task_id: str,
        principal_id: str,
        list_id: str | None,
    ) -> ServiceResult:
        """Link the task to a checklist on the same board, or unlink it with ``None``."""
        task, board = self._load(task_id)
        self._authorize(board, principal_id, Action.WRITE)
        if list_id:
            self._get_checklist_on(board, list_id)
        updated = self._save(task, {"list_id": list_id or None})
        return ServiceResult(ok=True, op="change_task_list", data=dump(updated))

    @service_op("complete_task")
    def complete_task(self, task_id: str, principal_id: str) -> ServiceResult:
        """Mark a task completed. Completion is final: it cannot be repeated."""
        task, board = self._load(task_id)
        self._authorize(board, principal_id, Action.WRITE)
        if task.is_completed:
            msg = f"Task {task_id} is already completed"
            raise ConflictError(msg, task_id=task_id)

        now = self._now()
        updated = self._save(
            task,
            {
                "is_completed": True,
                "completed_at": now,
                "completed_by": principal_id,
                "status": TaskStatus.DONE,
            },
        )
        log.info("task_completed", task_id=task_id, board_id=board.id, principal_id=principal_id)
        return ServiceResult(ok=True, op="complete_task", data=dump(updated))

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    @service_op("delete_task")
    def delete_task(self, task_id: str, principal_id: str) -> ServiceResult:
        """Delete a task. Only its creator or the board owner may, and never once completed."""
        op = "delete_task"
        task, board = self._load(task_id)
        if task.is_completed:
            msg = f"Task {task_id} is completed and kept for audit"
            raise ConflictError(msg, task_id=task_id)
        if principal_id not in (task.created_by_id, board.owner_id):
            self._deny_delete(board, principal_id, task_id)

        self._store.delete(EntityKind.TASK, task_id)
        log.info("task_deleted", task_id=task_id, board_id=board.id, principal_id=principal_id)
        return ServiceResult(ok=True, op=op, data={"id": task_id, "title": task.title})

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @service_op("get_task")
    def get_task(self, task_id: str, principal_id: str) -> ServiceResult:
        task, board = self._load(task_id)
        self._authorize(board, principal_id, Action.READ)
        return ServiceResult(ok=True, op="get_task", data=dump(task))

    @service_op("list_tasks")
    def list_tasks(
        self,
        board_id: str,
        principal_id: str,
        *,
        status: TaskStatus | None = None,
        assigned_to_id: str | None = None,
    ) -> ServiceResult:
        """Board tasks in position order, optionally filtered."""
        board = self._get_board(board_id)
        self._authorize(board, principal_id, Action.READ)
        tasks = self._store.tasks_for_board(board_id)
        if status is not None:
            tasks = [t for t in tasks if t.status == status]
        if assigned_to_id is not None:
            tasks = [t for t in tasks if t.assigned_to_id == assigned_to_id]
        return ServiceResult(
            ok=True,
            op="list_tasks",
            data={"board_id": board_id, "items": dump_all(tasks), "count": len(tasks)},
        )

    @service_op("list_assigned_tasks")
    def list_assigned_to(self, principal_id: str, *, list_id: str | None = None) -> ServiceResult:
        """Tasks assigned to *principal_id* across boards, soonest due first."""
        tasks = self._readable(self._store.tasks_assigned_to(principal_id), principal_id)
        if list_id is not None:
            tasks = [t for t in tasks if t.list_id == list_id]
        return ServiceResult(
            ok=True,
            op="list_assigned_tasks",
            data={"items": dump_all(tasks), "count": len(tasks)},
        )

    @service_op("list_created_tasks")
    def list_created_by(self, principal_id: str) -> ServiceResult:
        """Tasks *principal_id* created, newest first."""
        tasks = self._readable(self._store.tasks_created_by(principal_id), principal_id)
        return ServiceResult(
            ok=True,
            op="list_created_tasks",
            data={"items": dump_all(tasks), "count": len(tasks)},
        )

    @service_op("search_tasks")
    def search_tasks(self, query: str, principal_id: str) -> ServiceResult:
        """Search the tasks *principal_id* created or is assigned.

        *query* matches title and description as a case-insensitive substring
        and tags exactly. Hits come most recently updated first.
        """
        op = "search_tasks"
        term = query.strip()
        if not term:
            msg = "Search query must not be empty"
            raise InvalidInputError(msg)
        tasks = self._readable(self._store.search_tasks(term, principal_id), principal_id)
        return ServiceResult(
            ok=True,
            op=op,
            data={"query": term, "items": dump_all(tasks), "count": len(tasks)},
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _readable(self, tasks: list[TaskItem], principal_id: str) -> list[TaskItem]:
        """Drop tasks whose board is gone or hidden from *principal_id*."""
        visible: dict[str, bool] = {}
        kept = []
        for task in tasks:
            if task.board_id not in visible:
                board = self._store.get(EntityKind.BOARD, task.board_id)
                visible[task.board_id] = isinstance(board, Board) and can_read(
                    board, principal_id
                )
            if visible[task.board_id]:
                kept.append(task)
        return kept

    def _load(self, task_id: str) -> tuple[TaskItem, Board]:
        task = self._get(EntityKind.TASK, task_id)
        assert isinstance(task, TaskItem)
        return task, self._get_board(task.board_id)

    def _save(self, task: TaskItem, changes: dict[str, Any]) -> TaskItem:
        updated = task.model_copy(update={**changes, "updated_at": self._now()})
        self._store.update(updated)
        return updated

    def _get_checklist_on(self, board: Board, list_id: str) -> Checklist:
        checklist = self._store.get(EntityKind.CHECKLIST, list_id)
        if not isinstance(checklist, Checklist) or checklist.board_id != board.id:
            msg = f"No checklist {list_id} on board {board.id}"
            raise NotFoundError(msg, board_id=board.id, list_id=list_id)
        return checklist

    def _deny_delete(self, board: Board, principal_id: str, task_id: str) -> None:
        """Deletion is restricted to the task creator and the board owner."""
        log.info(
            "access_denied",
            board_id=board.id,
            principal_id=principal_id,
            action="delete_task",
            task_id=task_id,
        )
        msg = f"Only the task creator or the board owner can delete task {task_id}"
        raise UnauthorizedError(msg, board_id=board.id, task_id=task_id)

    def _notify_if_reassigned(
        self,
        before: TaskItem,
        after: TaskItem,
        actor_id: str,
        warnings: list[str],
    ) -> str | None:
        """Notify the new assignee when the stored assignee changed to a non-empty value."""
        new_assignee = after.assigned_to_id
        if not new_assignee or new_assignee == before.assigned_to_id:
            return None
        assignee = self._get_user(new_assignee)
        actor = self._get_user(actor_id)
        event = TaskAssigned(task=after, assignee=assignee, actor=actor)
        return str(self._notify(event, warnings)["id"])


def _require_assignable(board: Board, assignee_id: str) -> None:
    if not board.is_owner_or_member(assignee_id):
        msg = f"User {assignee_id} is not the owner or a member of board {board.id}"
        raise ConflictError(msg, board_id=board.id, assignee_id=assignee_id)
