"""Command group: boards, their members, and invitations to them."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from taskboard.commands._base import TaskboardGroup

if TYPE_CHECKING:
    from taskboard.commands._context import AppContext

_BOARD_EXAMPLES = """\
  taskboard -u alice board create "Launch plan" --public
  taskboard -u alice board list
  taskboard -u alice board invite brd_3f9a1c2e7b --username bob
  taskboard -u alice board members brd_3f9a1c2e7b
  taskboard -u alice board remove-member brd_3f9a1c2e7b bob"""


@click.group(cls=TaskboardGroup, examples=_BOARD_EXAMPLES)
def board() -> None:
    """Create, share, and manage boards."""


@board.command(
    examples="""\
  taskboard -u alice board create "Launch plan"
  taskboard -u alice board create "Roadmap" --public --column todo --column done"""
)
@click.argument("title")
@click.option("--description", default="", help="Board description.")
@click.option("--public", "is_public", is_flag=True, help="Let any user see the board.")
@click.option("--color", default=None, help="Display color.")
@click.option("--column", "columns", multiple=True, help="Column name (repeatable).")
@click.pass_obj
def create(
    app: AppContext,
    title: str,
    description: str,
    is_public: bool,
    color: str | None,
    columns: tuple[str, ...],
) -> None:
    """Create a board owned by the acting user."""
    from taskboard.services.boards import BoardService

    result = BoardService(app.workspace).create_board(
        app.principal_id,
        title,
        description=description,
        is_public=is_public,
        color=color,
        columns=list(columns) or None,
    )
    app.emit(result)


@board.command(
    examples="""\
  taskboard -u alice board update brd_3f9a1c2e7b --title "Launch plan v2"
  taskboard -u alice board update brd_3f9a1c2e7b --private --archive"""
)
@click.argument("board_id")
@click.option("--title", default=None, help="New title.")
@click.option("--description", default=None, help="New description.")
@click.option("--public/--private", "is_public", default=None, help="Change visibility.")
@click.option("--archive/--unarchive", "is_archived", default=None, help="Archive state.")
@click.option("--color", default=None, help="New display color.")
@click.option("--column", "columns", multiple=True, help="Replace columns (repeatable).")
@click.pass_obj
def update(
    app: AppContext,
    board_id: str,
    title: str | None,
    description: str | None,
    is_public: bool | None,
    is_archived: bool | None,
    color: str | None,
    columns: tuple[str, ...],
) -> None:
    """Update board settings (owner only)."""
    from taskboard.services.boards import BoardService

    result = BoardService(app.workspace).update_board(
        board_id,
        app.principal_id,
        title=title,
        description=description,
        is_public=is_public,
        is_archived=is_archived,
        color=color,
        columns=list(columns) or None,
    )
    app.emit(result)


@board.command(examples="  taskboard -u alice board delete brd_3f9a1c2e7b --yes")
@click.argument("board_id")
@click.confirmation_option(prompt="Delete this board with all its tasks and checklists?")
@click.pass_obj
def delete(app: AppContext, board_id: str) -> None:
    """Delete a board with its tasks and checklists (owner only).

    Boards holding a completed task cannot be deleted.
    """
    from taskboard.services.boards import BoardService

    app.emit(BoardService(app.workspace).delete_board(board_id, app.principal_id))


@board.command(examples="  taskboard -u alice board show brd_3f9a1c2e7b")
@click.argument("board_id")
@click.pass_obj
def show(app: AppContext, board_id: str) -> None:
    """Show one board."""
    from taskboard.services.boards import BoardService

    app.emit(BoardService(app.workspace).get_board(board_id, app.principal_id))


@board.command(
    "list",
    examples="""\
  taskboard -u alice board list
  taskboard -u alice board list --all""",
)
@click.option("--all", "include_archived", is_flag=True, help="Include archived boards.")
@click.pass_obj
def list_cmd(app: AppContext, include_archived: bool) -> None:
    """List boards the acting user owns or belongs to."""
    from taskboard.services.boards import BoardService

    result = BoardService(app.workspace).list_boards(
        app.principal_id, include_archived=include_archived
    )
    app.emit(result)


@board.command(examples="  taskboard -u alice board members brd_3f9a1c2e7b")
@click.argument("board_id")
@click.pass_obj
def members(app: AppContext, board_id: str) -> None:
    """List the owner and members of a board."""
    from taskboard.services.boards import BoardService

    app.emit(BoardService(app.workspace).list_members(board_id, app.principal_id))


@board.command(
    "remove-member",
    examples="""\
  taskboard -u alice board remove-member brd_3f9a1c2e7b bob
  taskboard -u bob board remove-member brd_3f9a1c2e7b bob   # leave""",
)
@click.argument("board_id")
@click.argument("member")
@click.pass_obj
def remove_member(app: AppContext, board_id: str, member: str) -> None:
    """Remove MEMBER (id, username, or email) from a board."""
    from taskboard.services.boards import BoardService

    principal_id = app.principal_id
    member_id = app.resolve_user(member)
    app.emit(BoardService(app.workspace).remove_member(board_id, member_id, principal_id))


@board.command(
    examples="""\
  taskboard -u alice board invite brd_3f9a1c2e7b --username bob
  taskboard -u alice board invite brd_3f9a1c2e7b --email carol@example.com --role Editor"""
)
@click.argument("board_id")
@click.option("--email", default=None, help="Invitee email.")
@click.option("--username", default=None, help="Invitee username.")
@click.option("--role", default=None, help="Role label stored on the invitation.")
@click.option("--message", default="", help="Personal message.")
@click.pass_obj
def invite(
    app: AppContext,
    board_id: str,
    email: str | None,
    username: str | None,
    role: str | None,
    message: str,
) -> None:
    """Invite a user to a board by email or username."""
    from taskboard.services.invitations import InvitationService

    result = InvitationService(app.workspace).invite(
        board_id,
        app.principal_id,
        email=email,
        username=username,
        role=role,
        message=message,
    )
    app.emit(result)
