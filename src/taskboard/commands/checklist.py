"""Command group: checklists (to-do lists) on a board."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from taskboard.commands._base import TaskboardGroup

if TYPE_CHECKING:
    from taskboard.commands._context import AppContext

_CHECKLIST_EXAMPLES = """\
  taskboard -u alice checklist create brd_3f9a1c2e7b "Release" --item "Tag" --item "Publish"
  taskboard -u alice checklist add-item lst_5c7e9a0b12 "Announce"
  taskboard -u alice checklist toggle lst_5c7e9a0b12 itm_0a1b2c3d4e
  taskboard -u alice checklist list brd_3f9a1c2e7b"""


@click.group(cls=TaskboardGroup, examples=_CHECKLIST_EXAMPLES)
def checklist() -> None:
    """Manage checklists on a board."""


@checklist.command(
    examples="""\
  taskboard -u alice checklist create brd_3f9a1c2e7b "Release"
  taskboard -u alice checklist create brd_3f9a1c2e7b "QA" --order 0 --item "Smoke test" """
)
@click.argument("board_id")
@click.argument("title")
@click.option("--order", type=int, default=None, help="Sort position.")
@click.option("--item", "items", multiple=True, help="Item text (repeatable).")
@click.option("--notes", default=None, help="Free-form notes.")
@click.pass_obj
def create(
    app: AppContext,
    board_id: str,
    title: str,
    order: int | None,
    items: tuple[str, ...],
    notes: str | None,
) -> None:
    """Create a checklist."""
    from taskboard.services.checklists import ChecklistService

    result = ChecklistService(app.workspace).create_checklist(
        board_id,
        app.principal_id,
        title,
        order=order,
        items=[{"text": text} for text in items],
        notes=notes,
    )
    app.emit(result)


@checklist.command(
    examples="""\
  taskboard -u alice checklist update lst_5c7e9a0b12 --title "Release 1.2" --order 2"""
)
@click.argument("list_id")
@click.option("--title", default=None, help="New title.")
@click.option("--order", type=int, default=None, help="New sort position.")
@click.option("--notes", default=None, help="New notes.")
@click.pass_obj
def update(
    app: AppContext,
    list_id: str,
    title: str | None,
    order: int | None,
    notes: str | None,
) -> None:
    """Update a checklist's title, order, or notes."""
    from taskboard.services.checklists import ChecklistService

    result = ChecklistService(app.workspace).update_checklist(
        list_id, app.principal_id, title=title, order=order, notes=notes
    )
    app.emit(result)


@checklist.command(
    "add-item",
    examples='  taskboard -u alice checklist add-item lst_5c7e9a0b12 "Announce"',
)
@click.argument("list_id")
@click.argument("text")
@click.option("--notes", default=None, help="Item notes.")
@click.pass_obj
def add_item(app: AppContext, list_id: str, text: str, notes: str | None) -> None:
    """Append an item to a checklist."""
    from taskboard.services.checklists import ChecklistService

    result = ChecklistService(app.workspace).add_item(
        list_id, app.principal_id, text, notes=notes
    )
    app.emit(result)


@checklist.command(examples="  taskboard -u alice checklist toggle lst_5c7e9a0b12 itm_0a1b2c3d4e")
@click.argument("list_id")
@click.argument("item_id")
@click.pass_obj
def toggle(app: AppContext, list_id: str, item_id: str) -> None:
    """Flip an item between done and not done."""
    from taskboard.services.checklists import ChecklistService

    app.emit(ChecklistService(app.workspace).toggle_item(list_id, item_id, app.principal_id))


@checklist.command(examples="  taskboard -u alice checklist delete lst_5c7e9a0b12")
@click.argument("list_id")
@click.pass_obj
def delete(app: AppContext, list_id: str) -> None:
    """Delete a checklist. Linked tasks are kept."""
    from taskboard.services.checklists import ChecklistService

    app.emit(ChecklistService(app.workspace).delete_checklist(list_id, app.principal_id))


@checklist.command("list", examples="  taskboard -u alice checklist list brd_3f9a1c2e7b")
@click.argument("board_id")
@click.pass_obj
def list_cmd(app: AppContext, board_id: str) -> None:
    """List a board's checklists in order."""
    from taskboard.services.checklists import ChecklistService

    app.emit(ChecklistService(app.workspace).list_checklists(board_id, app.principal_id))
