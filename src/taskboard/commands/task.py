"""Command group: tasks on a board."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import click

from taskboard.commands._base import TaskboardGroup
from taskboard.domain.lifecycle import TaskPriority, TaskStatus

if TYPE_CHECKING:
    from taskboard.commands._context import AppContext

_TASK_EXAMPLES = """\
  taskboard -u alice task create brd_3f9a1c2e7b "Write release notes" --priority high
  taskboard -u alice task assign tsk_8d2e4b6a10 bob
  taskboard -u bob task update tsk_8d2e4b6a10 --status in_progress
  taskboard -u bob task complete tsk_8d2e4b6a10
  taskboard -u alice task list brd_3f9a1c2e7b --status todo
  taskboard -u bob task mine"""

_STATUS = click.Choice([s.value for s in TaskStatus])
_PRIORITY = click.Choice([p.value for p in TaskPriority])


def _utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


@click.group(cls=TaskboardGroup, examples=_TASK_EXAMPLES)
def task() -> None:
    """Create, assign, and complete tasks."""


@task.command(
    examples="""\
  taskboard -u alice task create brd_3f9a1c2e7b "Write release notes"
  taskboard -u alice task create brd_3f9a1c2e7b "Fix login" --assignee bob --due 2026-11-01"""
)
@click.argument("board_id")
@click.argument("title")
@click.option("--description", default="", help="Task description.")
@click.option("--status", type=_STATUS, default=None, help="Initial status.")
@click.option("--priority", type=_PRIORITY, default=None, help="Priority.")
@click.option("--list", "list_id", default=None, help="Checklist ID to link.")
@click.option("--assignee", default=None, help="Assignee (id, username, or email).")
@click.option("--tag", "tags", multiple=True, help="Tag (repeatable).")
@click.option("--due", type=click.DateTime(), default=None, help="Due date.")
@click.pass_obj
def create(
    app: AppContext,
    board_id: str,
    title: str,
    description: str,
    status: str | None,
    priority: str | None,
    list_id: str | None,
    assignee: str | None,
    tags: tuple[str, ...],
    due: datetime | None,
) -> None:
    """Create a task on a board."""
    from taskboard.services.tasks import TaskService

    principal_id = app.principal_id
    result = TaskService(app.workspace).create_task(
        board_id,
        principal_id,
        title,
        description=description,
        status=TaskStatus(status) if status else None,
        priority=TaskPriority(priority) if priority else None,
        list_id=list_id,
        assigned_to_id=app.resolve_user(assignee) if assignee else None,
        tags=list(tags),
        due_date=_utc(due),
    )
    app.emit(result)


@task.command(
    examples="""\
  taskboard -u bob task update tsk_8d2e4b6a10 --status in_review
  taskboard -u bob task update tsk_8d2e4b6a10 --tag docs --tag release"""
)
@click.argument("task_id")
@click.option("--title", default=None, help="New title.")
@click.option("--description", default=None, help="New description.")
@click.option("--status", type=_STATUS, default=None, help="New status.")
@click.option("--priority", type=_PRIORITY, default=None, help="New priority.")
@click.option("--due", type=click.DateTime(), default=None, help="New due date.")
@click.option("--assignee", default=None, help="New assignee (id, username, or email).")
@click.option("--tag", "tags", multiple=True, help="Replace tags (repeatable).")
@click.option("--list", "list_id", default=None, help="Checklist ID to link.")
@click.pass_obj
def update(
    app: AppContext,
    task_id: str,
    title: str | None,
    description: str | None,
    status: str | None,
    priority: str | None,
    due: datetime | None,
    assignee: str | None,
    tags: tuple[str, ...],
    list_id: str | None,
) -> None:
    """Update the supplied fields of a task."""
    from taskboard.services.tasks import TaskService

    principal_id = app.principal_id
    result = TaskService(app.workspace).update_task(
        task_id,
        principal_id,
        title=title,
        description=description,
        status=TaskStatus(status) if status else None,
        priority=TaskPriority(priority) if priority else None,
        due_date=_utc(due),
        assigned_to_id=app.resolve_user(assignee) if assignee else None,
        tags=list(tags) if tags else None,
        list_id=list_id,
    )
    app.emit(result)


@task.command(
    examples="""\
  taskboard -u alice task assign tsk_8d2e4b6a10 bob
  taskboard -u alice task assign tsk_8d2e4b6a10 --none"""
)
@click.argument("task_id")
@click.argument("assignee", required=False)
@click.option("--none", "unassign", is_flag=True, help="Clear the assignee.")
@click.pass_obj
def assign(app: AppContext, task_id: str, assignee: str | None, unassign: bool) -> None:
    """Assign a task to a board member (or clear it with --none)."""
    from taskboard.services.tasks import TaskService

    if not assignee and not unassign:
        msg = "Give an ASSIGNEE or --none."
        raise click.UsageError(msg)
    principal_id = app.principal_id
    assignee_id = None if unassign else app.resolve_user(str(assignee))
    app.emit(TaskService(app.workspace).assign_task(task_id, principal_id, assignee_id))


@task.command(
    examples="""\
  taskboard -u alice task move tsk_8d2e4b6a10 lst_5c7e9a0b12
  taskboard -u alice task move tsk_8d2e4b6a10 --none"""
)
@click.argument("task_id")
@click.argument("list_id", required=False)
@click.option("--none", "unlink", is_flag=True, help="Unlink from any checklist.")
@click.pass_obj
def move(app: AppContext, task_id: str, list_id: str | None, unlink: bool) -> None:
    """Link a task to a checklist on its board."""
    from taskboard.services.tasks import TaskService

    if not list_id and not unlink:
        msg = "Give a LIST_ID or --none."
        raise click.UsageError(msg)
    target = None if unlink else list_id
    app.emit(TaskService(app.workspace).change_task_list(task_id, app.principal_id, target))


@task.command(examples="  taskboard -u bob task complete tsk_8d2e4b6a10")
@click.argument("task_id")
@click.pass_obj
def complete(app: AppContext, task_id: str) -> None:
    """Mark a task completed."""
    from taskboard.services.tasks import TaskService

    app.emit(TaskService(app.workspace).complete_task(task_id, app.principal_id))


@task.command(examples="  taskboard -u alice task delete tsk_8d2e4b6a10")
@click.argument("task_id")
@click.pass_obj
def delete(app: AppContext, task_id: str) -> None:
    """Delete a task (creator or board owner, not once completed)."""
    from taskboard.services.tasks import TaskService

    app.emit(TaskService(app.workspace).delete_task(task_id, app.principal_id))


@task.command(examples="  taskboard -u alice task show tsk_8d2e4b6a10")
@click.argument("task_id")
@click.pass_obj
def show(app: AppContext, task_id: str) -> None:
    """Show one task."""
    from taskboard.services.tasks import TaskService

    app.emit(TaskService(app.workspace).get_task(task_id, app.principal_id))


@task.command(
    "list",
    examples="""\
  taskboard -u alice task list brd_3f9a1c2e7b
  taskboard -u alice task list brd_3f9a1c2e7b --status todo --assignee bob""",
)
@click.argument("board_id")
@click.option("--status", type=_STATUS, default=None, help="Filter by status.")
@click.option("--assignee", default=None, help="Filter by assignee.")
@click.pass_obj
def list_cmd(app: AppContext, board_id: str, status: str | None, assignee: str | None) -> None:
    """List the tasks of a board."""
    from taskboard.services.tasks import TaskService

    principal_id = app.principal_id
    result = TaskService(app.workspace).list_tasks(
        board_id,
        principal_id,
        status=TaskStatus(status) if status else None,
        assigned_to_id=app.resolve_user(assignee) if assignee else None,
    )
    app.emit(result)


@task.command(
    examples="""\
  taskboard -u bob task mine
  taskboard -u bob task mine --list lst_5c7a9e1f3b""",
)
@click.option("--list", "list_id", default=None, help="Only tasks linked to this checklist.")
@click.pass_obj
def mine(app: AppContext, list_id: str | None) -> None:
    """Tasks assigned to the acting user on every board, soonest due first."""
    from taskboard.services.tasks import TaskService

    app.emit(TaskService(app.workspace).list_assigned_to(app.principal_id, list_id=list_id))


@task.command(examples="  taskboard -u alice task created")
@click.pass_obj
def created(app: AppContext) -> None:
    """Tasks the acting user created, newest first."""
    from taskboard.services.tasks import TaskService

    app.emit(TaskService(app.workspace).list_created_by(app.principal_id))


@task.command(
    examples="""\
  taskboard -u alice task search release
  taskboard -u alice task search ui""",
)
@click.argument("query")
@click.pass_obj
def search(app: AppContext, query: str) -> None:
    """Search titles, descriptions, and tags of your own or assigned tasks."""
    from taskboard.services.tasks import TaskService

    app.emit(TaskService(app.workspace).search_tasks(query, app.principal_id))
