"""Command group: the acting user's notifications."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from taskboard.commands._base import TaskboardGroup

if TYPE_CHECKING:
    from taskboard.commands._context import AppContext


@click.group(
    cls=TaskboardGroup,
    examples="""\
  taskboard -u alice notification list --unread
  taskboard -u alice notification read ntf_7e1d2c3b4a""",
)
def notification() -> None:
    """Read and acknowledge notifications."""


@notification.command(
    "list",
    examples="""\
  taskboard -u alice notification list
  taskboard -u alice notification list --unread --limit 10""",
)
@click.option("--unread", "unread_only", is_flag=True, help="Only unread notifications.")
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Max results.")
@click.pass_obj
def list_cmd(app: AppContext, unread_only: bool, limit: int | None) -> None:
    """Newest-first notifications for the acting user."""
    from taskboard.services.notifications import NotificationService

    result = NotificationService(app.workspace).list_for_user(
        app.principal_id, unread_only=unread_only, limit=limit
    )
    app.emit(result)


@notification.command("unread-count", examples="  taskboard -u alice notification unread-count")
@click.pass_obj
def unread_count(app: AppContext) -> None:
    """Number of unread notifications for the acting user."""
    from taskboard.services.notifications import NotificationService

    app.emit(NotificationService(app.workspace).unread_count(app.principal_id))


@notification.command(examples="  taskboard -u alice notification read ntf_7e1d2c3b4a")
@click.argument("notification_id")
@click.pass_obj
def read(app: AppContext, notification_id: str) -> None:
    """Mark a notification as read."""
    from taskboard.services.notifications import NotificationService

    app.emit(NotificationService(app.workspace).mark_as_read(notification_id, app.principal_id))
