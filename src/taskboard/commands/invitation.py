"""Command group: answer and inspect board invitations."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from taskboard.commands._base import TaskboardGroup

if TYPE_CHECKING:
    from taskboard.commands._context import AppContext

_INVITATION_EXAMPLES = """\
  taskboard -u bob invitation list
  taskboard -u bob invitation accept inv_9b0c1d2e3f
  taskboard -u bob invitation reject inv_9b0c1d2e3f
  taskboard -u alice invitation board brd_3f9a1c2e7b
  taskboard invitation expire"""


@click.group(cls=TaskboardGroup, examples=_INVITATION_EXAMPLES)
def invitation() -> None:
    """Answer and inspect board invitations."""


@invitation.command("list", examples="  taskboard -u bob invitation list")
@click.pass_obj
def list_cmd(app: AppContext) -> None:
    """Pending invitations addressed to the acting user."""
    from taskboard.services.invitations import InvitationService

    app.emit(InvitationService(app.workspace).list_pending(app.principal_id))


@invitation.command("board", examples="  taskboard -u alice invitation board brd_3f9a1c2e7b")
@click.argument("board_id")
@click.pass_obj
def board_cmd(app: AppContext, board_id: str) -> None:
    """Every invitation sent for a board."""
    from taskboard.services.invitations import InvitationService

    app.emit(InvitationService(app.workspace).list_for_board(board_id, app.principal_id))


@invitation.command(examples="  taskboard -u bob invitation accept inv_9b0c1d2e3f")
@click.argument("invitation_id")
@click.pass_obj
def accept(app: AppContext, invitation_id: str) -> None:
    """Accept an invitation and join its board."""
    from taskboard.services.invitations import InvitationService

    app.emit(InvitationService(app.workspace).respond(invitation_id, app.principal_id, True))


@invitation.command(examples="  taskboard -u bob invitation reject inv_9b0c1d2e3f")
@click.argument("invitation_id")
@click.pass_obj
def reject(app: AppContext, invitation_id: str) -> None:
    """Decline an invitation."""
    from taskboard.services.invitations import InvitationService

    app.emit(InvitationService(app.workspace).respond(invitation_id, app.principal_id, False))


@invitation.command(examples="  taskboard invitation expire")
@click.pass_obj
def expire(app: AppContext) -> None:
    """Expire every overdue pending invitation."""
    from taskboard.services.invitations import InvitationService

    app.emit(InvitationService(app.workspace).expire_stale())
