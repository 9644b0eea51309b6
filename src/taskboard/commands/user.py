"""Command group: register and look up users."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from taskboard.commands._base import TaskboardGroup

if TYPE_CHECKING:
    from taskboard.commands._context import AppContext


@click.group(
    cls=TaskboardGroup,
    examples="""\
  taskboard user add alice alice@example.com --full-name "Alice Liddell"
  taskboard user show alice""",
)
def user() -> None:
    """Register and look up users."""


@user.command(
    examples="""\
  taskboard user add alice alice@example.com
  taskboard --json user add bob bob@example.com --full-name "Bob" """
)
@click.argument("username")
@click.argument("email")
@click.option("--full-name", default=None, help="Display name.")
@click.pass_obj
def add(app: AppContext, username: str, email: str, full_name: str | None) -> None:
    """Register a new user."""
    from taskboard.services.users import UserService

    app.emit(UserService(app.workspace).register(username, email, full_name=full_name))


@user.command(
    examples="""\
  taskboard user show alice
  taskboard user show alice@example.com"""
)
@click.argument("user_ref")
@click.pass_obj
def show(app: AppContext, user_ref: str) -> None:
    """Show a user by id, username, or email."""
    from taskboard.services.users import UserService

    app.emit(UserService(app.workspace).get_user(user_ref))
