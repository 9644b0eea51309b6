"""Tests for TaskService — guarded task mutations."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import pytest

from taskboard.domain.errors import ErrorKind
from taskboard.domain.lifecycle import TaskPriority, TaskStatus
from taskboard.domain.models import TaskItem
from taskboard.infrastructure.store import EntityKind
from taskboard.infrastructure.workspace import Workspace
from taskboard.services.boards import BoardService
from taskboard.services.checklists import ChecklistService
from taskboard.services.notifications import NotificationService
from taskboard.services.tasks import TaskService
from tests.conftest import add_member, create_board, create_task, register_user


@pytest.fixture
def users(workspace: Workspace) -> dict[str, str]:
    return {name: register_user(workspace, name)["id"] for name in ("alice", "bob", "carol")}


@pytest.fixture
def board(workspace: Workspace, users: dict[str, str]) -> dict[str, Any]:
    """Private board owned by alice with bob as a member."""
    data = create_board(workspace, users["alice"], "Roadmap")
    add_member(workspace, data["id"], users["alice"], "bob")
    return data


def _inbox(ws: Workspace, user_id: str) -> list[dict[str, Any]]:
    return NotificationService(ws).list_for_user(user_id).data["items"]


def _stored(ws: Workspace, task_id: str) -> TaskItem:
    task = ws.store.get(EntityKind.TASK, task_id)
    assert isinstance(task, TaskItem)
    return task


class TestCreate:
    def test_defaults(
        self, workspace: Workspace, users: dict[str, str], board: dict[str, Any]
    ) -> None:
        task = create_task(workspace, board["id"], users["alice"], "Write docs")
        assert task["status"] == "todo"
        assert task["priority"] == "medium"
        assert task["tags"] == []
        assert task["created_by_id"] == users["alice"]
        assert task["is_completed"] is False

    def test_positions_increase(
        self, workspace: Workspace, users: dict[str, str], board: dict[str, Any]
    ) -> None:
        first = create_task(workspace, board["id"], users["alice"], "One")
        second = create_task(workspace, board["id"], users["bob"], "Two")
        assert (first["position"], second["position"]) == (0, 1)

    def test_full_fields(
        self, workspace: Workspace, users: dict[str, str], board: dict[str, Any]
    ) -> None:
        due = datetime(2026, 4, 1, tzinfo=UTC)
        task = create_task(
            workspace,
            board["id"],
            users["alice"],
            "Fix login",
            status=TaskStatus.IN_PROGRESS,
            priority=TaskPriority.HIGH,
            assigned_to_id=users["bob"],
            tags=["bug", " bug ", "auth"],
            due_date=due,
        )
        assert task["status"] == "in_progress"
        assert task["priority"] == "high"
        assert task["assigned_to_id"] == users["bob"]
        assert task["tags"] == ["bug", "auth"]
        assert _stored(workspace, task["id"]).due_date == due

    def test_create_with_assignee_sends_no_notification(
        self, workspace: Workspace, users: dict[str, str], board: dict[str, Any]
    ) -> None:
        create_task(workspace, board["id"], users["alice"], "Quiet", assigned_to_id=users["bob"])
        assert _inbox(workspace, users["bob"]) == []

    def test_assignee_must_belong(
        self, workspace: Workspace, users: dict[str, str], board: dict[str, Any]
    ) -> None:
        result = TaskService(workspace).create_task(
            board["id"], users["alice"], "Nope", assigned_to_id=users["carol"]
        )
        assert result.code is ErrorKind.CONFLICT

    def test_outsider_denied(
        self, workspace: Workspace, users: dict[str, str], board: dict[str, Any]
    ) -> None:
        result = TaskService(workspace).create_task(board["id"], users["carol"], "Sneaky")
        assert result.code is ErrorKind.UNAUTHORIZED

    def test_public_board_open_to_anyone(self, workspace: Workspace, users: dict[str, str]) -> None:
        board = create_board(workspace, users["alice"], "Open", is_public=True)
        result = TaskService(workspace).create_task(board["id"], users["carol"], "Drive-by")
        assert result.ok, result.error

    def test_missing_board(self, workspace: Workspace, users: dict[str, str]) -> None:
        result = TaskService(workspace).create_task("brd_0000000000", users["alice"], "Lost")
        assert result.code is ErrorKind.NOT_FOUND

    def test_checklist_must_be_on_board(
        self, workspace: Workspace, users: dict[str, str], board: dict[str, Any]
    ) -> None:
        other = create_board(workspace, users["alice"], "Other")
        foreign = ChecklistService(workspace).create_checklist(other["id"], users["alice"], "L")
        result = TaskService(workspace).create_task(
            board["id"], users["alice"], "Linked", list_id=foreign.data["id"]
        )
        assert result.code is ErrorKind.NOT_FOUND

    def test_empty_title(
        self, workspace: Workspace, users: dict[str, str], board: dict[str, Any]
    ) -> None:
        result = TaskService(workspace).create_task(board["id"], users["alice"], "  ")
        assert result.code is ErrorKind.INVALID_INPUT


class TestUpdate:
    def test_merge_patch(
        self, workspace: Workspace, users: dict[str, str], board: dict[str, Any]
    ) -> None:
        task = create_task(
            workspace, board["id"], users["alice"], "Docs", description="v1", tags=["a"]
        )
        result = TaskService(workspace).update_task(
            task["id"], users["bob"], status=TaskStatus.IN_REVIEW, description=""
        )
        assert result.ok, result.error
        assert result.data["status"] == "in_review"
        assert result.data["description"] == "v1"
        assert result.data["tags"] == ["a"]
        assert result.data["fields_changed"] == ["status"]

    def test_tags_replaced_and_cleared(
        self, workspace: Workspace, users: dict[str, str], board: dict[str, Any]
    ) -> None:
        task = create_task(workspace, board["id"], users["alice"], "Docs", tags=["a", "b"])
        svc = TaskService(workspace)
        assert svc.update_task(task["id"], users["alice"], tags=["c"]).data["tags"] == ["c"]
        assert svc.update_task(task["id"], users["alice"], tags=[]).data["tags"] == []

    def test_no_changes_warns(
        self, workspace: Workspace, users: dict[str, str], board: dict[str, Any]
    ) -> None:
        task = create_task(workspace, board["id"], users["alice"], "Docs")
        result = TaskService(workspace).update_task(task["id"], users["alice"], title="")
        assert result.ok
        assert result.warnings == ["No changes supplied"]

    def test_missing_task(self, workspace: Workspace, users: dict[str, str]) -> None:
        result = TaskService(workspace).update_task("tsk_0000000000", users["alice"], title="x")
        assert result.code is ErrorKind.NOT_FOUND

    def test_reassign_via_update_notifies(
        self, workspace: Workspace, users: dict[str, str], board: dict[str, Any]
    ) -> None:
        task = create_task(workspace, board["id"], users["alice"], "Docs")
        result = TaskService(workspace).update_task(
            task["id"], users["alice"], assigned_to_id=users["bob"]
        )
        assert result.ok, result.error
        inbox = _inbox(workspace, users["bob"])
        assert [n["id"] for n in inbox] == [result.data["notification_id"]]
        assert inbox[0]["data"]["assigned_by_name"] == "alice"

    def test_update_to_non_member_conflicts(
        self, workspace: Workspace, users: dict[str, str], board: dict[str, Any]
    ) -> None:
        task = create_task(workspace, board["id"], users["alice"], "Docs")
        result = TaskService(workspace).update_task(
            task["id"], users["alice"], assigned_to_id=users["carol"]
        )
        assert result.code is ErrorKind.CONFLICT
        assert _stored(workspace, task["id"]).assigned_to_id is None


class TestAssign:
    def test_unassign_sends_nothing(
        self, workspace: Workspace, users: dict[str, str], board: dict[str, Any]
    ) -> None:
        task = create_task(workspace, board["id"], users["alice"], "Docs")
        svc = TaskService(workspace)
        svc.assign_task(task["id"], users["alice"], users["bob"])
        result = svc.assign_task(task["id"], users["alice"], None)
        assert result.ok, result.error
        assert result.data["assigned_to_id"] is None
        assert result.data["notification_id"] is None
        assert len(_inbox(workspace, users["bob"])) == 1

    def test_owner_is_assignable(
        self, workspace: Workspace, users: dict[str, str], board: dict[str, Any]
    ) -> None:
        task = create_task(workspace, board["id"], users["bob"], "Review")
        result = TaskService(workspace).assign_task(task["id"], users["bob"], users["alice"])
        assert result.ok, result.error
        assert _inbox(workspace, users["alice"])[0]["type"] == "task_assigned"


class TestChangeList:
    def test_link_and_unlink(
        self, workspace: Workspace, users: dict[str, str], board: dict[str, Any]
    ) -> None:
        task = create_task(workspace, board["id"], users["alice"], "Docs")
        checklist = ChecklistService(workspace).create_checklist(
            board["id"], users["alice"], "Release"
        )
        svc = TaskService(workspace)
        linked = svc.change_task_list(task["id"], users["bob"], checklist.data["id"])
        assert linked.data["list_id"] == checklist.data["id"]
        unlinked = svc.change_task_list(task["id"], users["bob"], None)
        assert unlinked.data["list_id"] is None

    def test_unknown_list(
        self, workspace: Workspace, users: dict[str, str], board: dict[str, Any]
    ) -> None:
        task = create_task(workspace, board["id"], users["alice"], "Docs")
        result = TaskService(workspace).change_task_list(
            task["id"], users["alice"], "lst_0000000000"
        )
        assert result.code is ErrorKind.NOT_FOUND


class TestComplete:
    def test_complete(
        self, workspace: Workspace, users: dict[str, str], board: dict[str, Any]
    ) -> None:
        task = create_task(workspace, board["id"], users["alice"], "Docs")
        result = TaskService(workspace).complete_task(task["id"], users["bob"])
        assert result.ok, result.error
        assert result.data["is_completed"] is True
        assert result.data["completed_by"] == users["bob"]
        assert result.data["status"] == "done"
        assert result.data["completed_at"] is not None

    def test_complete_twice_conflicts(
        self, workspace: Workspace, users: dict[str, str], board: dict[str, Any]
    ) -> None:
        task = create_task(workspace, board["id"], users["alice"], "Docs")
        svc = TaskService(workspace)
        svc.complete_task(task["id"], users["bob"])
        assert svc.complete_task(task["id"], users["bob"]).code is ErrorKind.CONFLICT


class TestDelete:
    def test_creator_deletes(
        self, workspace: Workspace, users: dict[str, str], board: dict[str, Any]
    ) -> None:
        task = create_task(workspace, board["id"], users["bob"], "Mine")
        assert TaskService(workspace).delete_task(task["id"], users["bob"]).ok
        assert workspace.store.get(EntityKind.TASK, task["id"]) is None

    def test_owner_deletes_anyones_task(
        self, workspace: Workspace, users: dict[str, str], board: dict[str, Any]
    ) -> None:
        task = create_task(workspace, board["id"], users["bob"], "Bob's")
        assert TaskService(workspace).delete_task(task["id"], users["alice"]).ok

    def test_other_member_denied(
        self, workspace: Workspace, users: dict[str, str], board: dict[str, Any]
    ) -> None:
        task = create_task(workspace, board["id"], users["alice"], "Alice's")
        result = TaskService(workspace).delete_task(task["id"], users["bob"])
        assert result.code is ErrorKind.UNAUTHORIZED
        assert workspace.store.get(EntityKind.TASK, task["id"]) is not None

    def test_completed_conflicts_before_identity(
        self, workspace: Workspace, users: dict[str, str], board: dict[str, Any]
    ) -> None:
        task = create_task(workspace, board["id"], users["alice"], "Done")
        TaskService(workspace).complete_task(task["id"], users["alice"])
        result = TaskService(workspace).delete_task(task["id"], users["carol"])
        assert result.code is ErrorKind.CONFLICT


class TestQueries:
    def test_get_task_requires_read(
        self, workspace: Workspace, users: dict[str, str], board: dict[str, Any]
    ) -> None:
        task = create_task(workspace, board["id"], users["alice"], "Docs")
        svc = TaskService(workspace)
        assert svc.get_task(task["id"], users["bob"]).ok
        assert svc.get_task(task["id"], users["carol"]).code is ErrorKind.UNAUTHORIZED

    def test_list_filters(
        self, workspace: Workspace, users: dict[str, str], board: dict[str, Any]
    ) -> None:
        create_task(workspace, board["id"], users["alice"], "A", assigned_to_id=users["bob"])
        create_task(workspace, board["id"], users["alice"], "B", status=TaskStatus.BLOCKED)
        create_task(workspace, board["id"], users["alice"], "C")
        svc = TaskService(workspace)

        everything = svc.list_tasks(board["id"], users["bob"])
        assert [t["title"] for t in everything.data["items"]] == ["A", "B", "C"]
        blocked = svc.list_tasks(board["id"], users["bob"], status=TaskStatus.BLOCKED)
        assert [t["title"] for t in blocked.data["items"]] == ["B"]
        mine = svc.list_tasks(board["id"], users["bob"], assigned_to_id=users["bob"])
        assert [t["title"] for t in mine.data["items"]] == ["A"]


class TestCrossBoardQueries:
    def test_assigned_across_boards(
        self, workspace: Workspace, users: dict[str, str], board: dict[str, Any]
    ) -> None:
        ops = create_board(workspace, users["carol"], "Ops")
        add_member(workspace, ops["id"], users["carol"], "bob")
        bob = users["bob"]
        create_task(
            workspace,
            board["id"],
            users["alice"],
            "Late",
            assigned_to_id=bob,
            due_date=datetime(2026, 5, 1, tzinfo=UTC),
        )
        create_task(
            workspace,
            ops["id"],
            users["carol"],
            "Soon",
            assigned_to_id=bob,
            due_date=datetime(2026, 4, 1, tzinfo=UTC),
        )
        create_task(workspace, board["id"], users["alice"], "Someday", assigned_to_id=bob)
        create_task(workspace, board["id"], users["alice"], "Not bob's")

        result = TaskService(workspace).list_assigned_to(bob)
        assert result.ok, result.error
        assert [t["title"] for t in result.data["items"]] == ["Soon", "Late", "Someday"]

    def test_assigned_filtered_by_list(
        self, workspace: Workspace, users: dict[str, str], board: dict[str, Any]
    ) -> None:
        checklist = ChecklistService(workspace).create_checklist(
            board["id"], users["alice"], "Release"
        )
        list_id = checklist.data["id"]
        bob = users["bob"]
        create_task(
            workspace, board["id"], users["alice"], "Linked", assigned_to_id=bob, list_id=list_id
        )
        create_task(workspace, board["id"], users["alice"], "Loose", assigned_to_id=bob)

        result = TaskService(workspace).list_assigned_to(bob, list_id=list_id)
        assert [t["title"] for t in result.data["items"]] == ["Linked"]

    def test_unreadable_boards_are_hidden(
        self, workspace: Workspace, users: dict[str, str], board: dict[str, Any]
    ) -> None:
        bob = users["bob"]
        create_task(workspace, board["id"], bob, "Review", assigned_to_id=bob)
        left = BoardService(workspace).remove_member(board["id"], bob, bob)
        assert left.ok, left.error

        svc = TaskService(workspace)
        assert svc.list_assigned_to(bob).data["count"] == 0
        assert svc.list_created_by(bob).data["count"] == 0
        assert svc.search_tasks("review", bob).data["count"] == 0

        BoardService(workspace).update_board(board["id"], users["alice"], is_public=True)
        assert svc.list_assigned_to(bob).data["count"] == 1

    def test_created_newest_first(
        self, workspace: Workspace, users: dict[str, str], board: dict[str, Any]
    ) -> None:
        create_task(workspace, board["id"], users["alice"], "First")
        create_task(workspace, board["id"], users["bob"], "Bob's")
        create_task(workspace, board["id"], users["alice"], "Second")
        result = TaskService(workspace).list_created_by(users["alice"])
        assert [t["title"] for t in result.data["items"]] == ["Second", "First"]

    def test_search(
        self, workspace: Workspace, users: dict[str, str], board: dict[str, Any]
    ) -> None:
        alice = users["alice"]
        create_task(workspace, board["id"], alice, "Release notes")
        create_task(
            workspace,
            board["id"],
            users["bob"],
            "Fix login",
            description="Blocks the RELEASE",
            assigned_to_id=alice,
        )
        create_task(workspace, board["id"], alice, "Polish", tags=["release"])
        create_task(workspace, board["id"], users["bob"], "Release party")

        result = TaskService(workspace).search_tasks("  release ", alice)
        assert result.ok, result.error
        assert result.data["query"] == "release"
        assert [t["title"] for t in result.data["items"]] == [
            "Polish",
            "Fix login",
            "Release notes",
        ]

    def test_blank_search_is_invalid(self, workspace: Workspace, users: dict[str, str]) -> None:
        result = TaskService(workspace).search_tasks("   ", users["alice"])
        assert result.code is ErrorKind.INVALID_INPUT


class TestSqlQueries:
    def test_assigned_and_search(self, sql_workspace: Workspace) -> None:
        alice = register_user(sql_workspace, "alice")["id"]
        bob = register_user(sql_workspace, "bob")["id"]
        board = create_board(sql_workspace, alice, "Roadmap")
        add_member(sql_workspace, board["id"], alice, "bob")
        create_task(sql_workspace, board["id"], alice, "Ship 50% rollout", assigned_to_id=bob)
        create_task(sql_workspace, board["id"], alice, "Write docs", tags=["docs"])

        svc = TaskService(sql_workspace)
        assigned = svc.list_assigned_to(bob)
        assert [t["title"] for t in assigned.data["items"]] == ["Ship 50% rollout"]
        assert [t["title"] for t in svc.search_tasks("50%", bob).data["items"]] == [
            "Ship 50% rollout"
        ]
        assert [t["title"] for t in svc.search_tasks("DOCS", alice).data["items"]] == [
            "Write docs"
        ]
