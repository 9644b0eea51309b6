"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from taskboard.output.console import (
    create_console,
    get_output,
    style_for_priority,
    style_for_status,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from rich.console import Console

    from taskboard.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal, which is
    the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode: ids only."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    if result.op == "unread_count":
        return str(result.data["count"])

    items = result.data.get("items")
    if isinstance(items, list):
        return "\n".join(str(item.get("id", "")) for item in items if isinstance(item, dict))
    if "id" in result.data:
        return str(result.data["id"])
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK status line."""
    console.print(Text("OK", style="tb.ok"), Text(f"  {result.op}", style="tb.op"), sep="")


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="tb.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="tb.id")
    elif key == "title":
        v = Text(str(value), style="tb.title")
    elif key == "priority":
        v = Text(str(value), style=style_for_priority(str(value)))
    elif key == "status":
        v = Text(str(value), style=style_for_status(str(value)))
    elif isinstance(value, (dict, list)):
        v = Text(_json.dumps(value, separators=(",", ":")))
    else:
        v = Text(str(value))
    console.print(k, v, sep="")


def _table(
    items: list[dict[str, Any]],
    columns: list[tuple[str, str]],
    *,
    verbose: bool = False,
) -> Table:
    """Build a Rich Table from dict items. *columns* is ``(key, header)`` pairs."""
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    for key, header in columns:
        style = "tb.id" if key == "id" else ("tb.title" if key == "title" else None)
        table.add_column(header, style=style, no_wrap=key == "id")
    if verbose:
        table.add_column("Created", style="dim")

    for item in items:
        row = [_cell(item.get(key)) for key, _header in columns]
        if verbose:
            row.append(str(item.get("created_at", "")))
        table.add_row(*row)
    return table


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "yes" if value else ""
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value)


def _render_warnings(console: Console, result: ServiceResult) -> None:
    for warning in result.warnings:
        console.print(Text(f"  warning: {warning}", style="tb.warning"))


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    code = f" [{err.code}]" if err else ""
    console.print(
        Text("ERROR", style="tb.error"),
        Text(f"  {result.op}{code}", style="tb.op"),
        Text(" — "),
        Text(msg),
        sep="",
    )
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Mutation renderers ────────────────────────────────────────────────


_MUTATION_KEYS = (
    "id",
    "title",
    "board_id",
    "status",
    "priority",
    "assigned_to_id",
    "list_id",
    "invitee_id",
    "expires_at",
    "is_completed",
    "accepted",
    "member_id",
    "members",
    "fields_changed",
    "notification_id",
)


def _render_mutation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render create/update/delete results: status line plus the key fields."""
    _status_line(console, result)
    for key in _MUTATION_KEYS:
        if result.data.get(key) not in (None, [], ""):
            _field(console, key, result.data[key])
    _render_warnings(console, result)
    if verbose:
        for key, value in result.data.items():
            if key not in _MUTATION_KEYS:
                _field(console, key, value)


def _render_delete(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


# ── List renderers ────────────────────────────────────────────────────


def _list_renderer(
    columns: list[tuple[str, str]],
    noun: str,
) -> Callable[..., None]:
    def render(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
        items = result.data.get("items", [])
        if not items:
            console.print(f"No {noun}.")
            return
        console.print(_table(items, columns, verbose=verbose))
        console.print(f"\n{result.data.get('count', len(items))} {noun}")

    return render


def _render_notifications(
    result: ServiceResult,
    console: Console,
    *,
    verbose: bool = False,
) -> None:
    items = result.data.get("items", [])
    if not items:
        console.print("No notifications.")
        return
    for item in items:
        marker = Text("● ", style="tb.unread") if not item.get("is_read") else Text("  ")
        console.print(
            marker,
            Text(str(item.get("id", "")), style="tb.id"),
            Text(f"  {item.get('title', '')}", style="tb.title"),
            sep="",
        )
        console.print(f"    {item.get('message', '')}")
        if verbose:
            console.print(Text(f"    {item.get('created_at', '')}", style="dim"))
    count = result.data.get("count", len(items))
    console.print(f"\n{count} notifications, {result.data.get('unread', 0)} unread")


def _render_board(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    console.print(
        Text(str(d.get("title", "")), style="tb.title"),
        Text(f"  ({d.get('id')})", style="tb.id"),
        sep="",
    )
    if d.get("description"):
        console.print(f"  {d['description']}")
    _field(console, "owner_id", d.get("owner_id"))
    _field(console, "members", len(d.get("members", [])))
    _field(console, "public", "yes" if d.get("is_public") else "no")
    if d.get("is_archived"):
        _field(console, "archived", "yes")
    _field(console, "columns", ", ".join(d.get("columns", [])))
    if verbose:
        _field(console, "created_at", d.get("created_at"))
        _field(console, "updated_at", d.get("updated_at"))


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    _render_warnings(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_TASK_COLUMNS = [
    ("id", "ID"),
    ("title", "Title"),
    ("status", "Status"),
    ("priority", "Priority"),
    ("assigned_to_id", "Assignee"),
    ("is_completed", "Done"),
]

_OP_RENDERERS: dict[str, Callable[..., None]] = {
    # Users
    "register_user": _render_mutation,
    "get_user": _render_generic,
    # Boards
    "create_board": _render_mutation,
    "update_board": _render_mutation,
    "delete_board": _render_delete,
    "get_board": _render_board,
    "list_boards": _list_renderer(
        [("id", "ID"), ("title", "Title"), ("owner_id", "Owner"), ("is_public", "Public")],
        "boards",
    ),
    "list_members": _list_renderer(
        [("id", "ID"), ("username", "Username"), ("email", "Email"), ("role", "Role")],
        "members",
    ),
    "remove_member": _render_mutation,
    # Invitations
    "invite": _render_mutation,
    "respond": _render_mutation,
    "list_pending": _list_renderer(
        [
            ("id", "ID"),
            ("board_title", "Board"),
            ("inviter_username", "From"),
            ("role", "Role"),
            ("expires_at", "Expires"),
            ("expired", "Expired"),
        ],
        "invitations",
    ),
    "list_board_invitations": _list_renderer(
        [("id", "ID"), ("invitee_id", "Invitee"), ("status", "Status"), ("created_at", "Sent")],
        "invitations",
    ),
    "expire_invitations": _render_generic,
    # Tasks
    "create_task": _render_mutation,
    "update_task": _render_mutation,
    "assign_task": _render_mutation,
    "change_task_list": _render_mutation,
    "complete_task": _render_mutation,
    "delete_task": _render_delete,
    "get_task": _render_generic,
    "list_tasks": _list_renderer(_TASK_COLUMNS, "tasks"),
    "list_assigned_tasks": _list_renderer(_TASK_COLUMNS, "tasks"),
    "list_created_tasks": _list_renderer(_TASK_COLUMNS, "tasks"),
    "search_tasks": _list_renderer(_TASK_COLUMNS, "tasks"),
    # Checklists
    "create_checklist": _render_mutation,
    "update_checklist": _render_mutation,
    "add_checklist_item": _render_mutation,
    "toggle_checklist_item": _render_mutation,
    "delete_checklist": _render_delete,
    "list_checklists": _list_renderer(
        [("id", "ID"), ("title", "Title"), ("order", "Order"), ("items", "Items")],
        "checklists",
    ),
    # Notifications
    "list_notifications": _render_notifications,
    "mark_notification_read": _render_mutation,
    "unread_count": _render_generic,
}
