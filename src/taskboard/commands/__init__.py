"""Subcommand modules for taskboard.

register_commands() uses deferred imports to keep ``taskboard --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register every command group on the root CLI group."""
    from taskboard.commands.board import board
    from taskboard.commands.checklist import checklist
    from taskboard.commands.invitation import invitation
    from taskboard.commands.notification import notification
    from taskboard.commands.task import task
    from taskboard.commands.user import user

    cli.add_command(user)
    cli.add_command(board)
    cli.add_command(invitation)
    cli.add_command(task)
    cli.add_command(checklist)
    cli.add_command(notification)
