"""ChecklistService — board to-do lists, independent of tasks.

Deleting a checklist never touches tasks: a task's ``list_id`` is a loose
link, not ownership.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from taskboard.domain.access import Action
from taskboard.domain.errors import InvalidInputError, NotFoundError
from taskboard.domain.models import Board, Checklist, ChecklistItem
from taskboard.infrastructure.store import EntityKind
from taskboard.services._helpers import dump, dump_all, merge_patch
from taskboard.services.base import BaseService, service_op
from taskboard.services.result import ServiceResult


class ChecklistService(BaseService):
    """Create, update, delete, and list checklists on a board."""

    @service_op("create_checklist")
    def create_checklist(
        self,
        board_id: str,
        principal_id: str,
        title: str,
        *,
        order: int | None = None,
        items: Iterable[Mapping[str, Any]] | None = None,
        notes: str | None = None,
    ) -> ServiceResult:
        """Create a checklist. Without *order* it goes after the existing ones."""
        board = self._get_board(board_id)
        self._authorize(board, principal_id, Action.WRITE)
        title = title.strip()
        if not title:
            msg = "Checklist title must not be empty"
            raise InvalidInputError(msg)

        if order is None:
            order = len(self._store.checklists_for_board(board_id))
        now = self._now()
        checklist = Checklist(
            board_id=board_id,
            title=title,
            order=order,
            items=_build_items(items),
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        self._store.create(checklist)
        return ServiceResult(ok=True, op="create_checklist", data=dump(checklist))

    @service_op("update_checklist")
    def update_checklist(
        self,
        list_id: str,
        principal_id: str,
        *,
        title: str | None = None,
        order: int | None = None,
        items: Iterable[Mapping[str, Any]] | None = None,
        notes: str | None = None,
    ) -> ServiceResult:
        """Merge-patch title/order/notes; *items*, when given, replaces the whole list."""
        op = "update_checklist"
        checklist, board = self._load(list_id)
        self._authorize(board, principal_id, Action.WRITE)

        changes = merge_patch(
            {
                "title": title.strip() if title is not None else None,
                "order": order,
                "notes": notes,
            }
        )
        if items is not None:
            changes["items"] = _build_items(items)
        if not changes:
            return ServiceResult(
                ok=True,
                op=op,
                data=dump(checklist),
                warnings=["No changes supplied"],
            )
        updated = self._save(checklist, changes)
        return ServiceResult(ok=True, op=op, data=dump(updated))

    @service_op("add_checklist_item")
    def add_item(
        self,
        list_id: str,
        principal_id: str,
        text: str,
        *,
        notes: str | None = None,
    ) -> ServiceResult:
        """Append one item to a checklist."""
        checklist, board = self._load(list_id)
        self._authorize(board, principal_id, Action.WRITE)
        if not text.strip():
            msg = "Checklist item text must not be empty"
            raise InvalidInputError(msg)
        item = ChecklistItem(text=text.strip(), notes=notes)
        updated = self._save(checklist, {"items": [*checklist.items, item]})
        return ServiceResult(
            ok=True,
            op="add_checklist_item",
            data={**dump(updated), "item_id": item.id},
        )

    @service_op("toggle_checklist_item")
    def toggle_item(self, list_id: str, item_id: str, principal_id: str) -> ServiceResult:
        """Flip the ``completed`` flag of one item."""
        checklist, board = self._load(list_id)
        self._authorize(board, principal_id, Action.WRITE)
        if not any(i.id == item_id for i in checklist.items):
            msg = f"No item {item_id} on checklist {list_id}"
            raise NotFoundError(msg, list_id=list_id, item_id=item_id)
        items = [
            i.model_copy(update={"completed": not i.completed}) if i.id == item_id else i
            for i in checklist.items
        ]
        updated = self._save(checklist, {"items": items})
        return ServiceResult(ok=True, op="toggle_checklist_item", data=dump(updated))

    @service_op("delete_checklist")
    def delete_checklist(self, list_id: str, principal_id: str) -> ServiceResult:
        checklist, board = self._load(list_id)
        self._authorize(board, principal_id, Action.WRITE)
        self._store.delete(EntityKind.CHECKLIST, list_id)
        return ServiceResult(
            ok=True,
            op="delete_checklist",
            data={"id": list_id, "title": checklist.title},
        )

    @service_op("list_checklists")
    def list_checklists(self, board_id: str, principal_id: str) -> ServiceResult:
        """Board checklists sorted by ``order``."""
        board = self._get_board(board_id)
        self._authorize(board, principal_id, Action.READ)
        checklists = self._store.checklists_for_board(board_id)
        return ServiceResult(
            ok=True,
            op="list_checklists",
            data={
                "board_id": board_id,
                "items": dump_all(checklists),
                "count": len(checklists),
            },
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _load(self, list_id: str) -> tuple[Checklist, Board]:
        checklist = self._get(EntityKind.CHECKLIST, list_id)
        assert isinstance(checklist, Checklist)
        return checklist, self._get_board(checklist.board_id)

    def _save(self, checklist: Checklist, changes: dict[str, Any]) -> Checklist:
        updated = checklist.model_copy(update={**changes, "updated_at": self._now()})
        self._store.update(updated)
        return updated


def _build_items(items: Iterable[Mapping[str, Any]] | None) -> list[ChecklistItem]:
    """Validate raw item dicts; items without an ``id`` get a fresh one."""
    built: list[ChecklistItem] = []
    for raw in items or []:
        data = {k: v for k, v in raw.items() if v is not None}
        try:
            built.append(ChecklistItem.model_validate(data))
        except ValidationError as exc:
            msg = f"Invalid checklist item: {exc.errors()[0]['msg']}"
            raise InvalidInputError(msg, item=dict(raw)) from exc
    return built
