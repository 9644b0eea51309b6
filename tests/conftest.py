"""Shared pytest fixtures and test helpers for taskboard tests."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pluggy
import pytest
from click.testing import CliRunner

from taskboard.config.settings import TaskboardSettings
from taskboard.infrastructure.memory import InMemoryMembershipStore
from taskboard.infrastructure.workspace import Workspace

hookimpl = pluggy.HookimplMarker("taskboard")

START = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)


# ---------------------------------------------------------------------------
# Clock and mailers
# ---------------------------------------------------------------------------


class FakeClock:
    """Deterministic clock; every reading advances one second."""

    def __init__(self, start: datetime = START) -> None:
        self.current = start

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current

    def advance(self, **delta: float) -> None:
        self.current += timedelta(**delta)


class RecordingMailer:
    """Mailer plugin that records every email it is asked to send."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, dict[str, Any]]] = []

    @hookimpl
    def send_invitation_accepted(
        self,
        to_email: str,
        accepter_name: str,
        board_title: str,
    ) -> None:
        self.sent.append(
            (
                "send_invitation_accepted",
                {"to_email": to_email, "accepter_name": accepter_name, "board_title": board_title},
            )
        )

    @hookimpl
    def send_invitation_rejected(
        self,
        to_email: str,
        rejecter_name: str,
        board_title: str,
    ) -> None:
        self.sent.append(
            (
                "send_invitation_rejected",
                {"to_email": to_email, "rejecter_name": rejecter_name, "board_title": board_title},
            )
        )


class FailingMailer:
    """Mailer plugin whose transport is always down."""

    @hookimpl
    def send_invitation_accepted(
        self,
        to_email: str,
        accepter_name: str,
        board_title: str,
    ) -> None:
        msg = "SMTP connection refused"
        raise ConnectionError(msg)

    @hookimpl
    def send_invitation_rejected(
        self,
        to_email: str,
        rejecter_name: str,
        board_title: str,
    ) -> None:
        msg = "SMTP connection refused"
        raise ConnectionError(msg)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer TASKBOARD_* variables out of the tests."""
    import os

    for key in list(os.environ):
        if key.startswith("TASKBOARD_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def settings(tmp_path: Path) -> TaskboardSettings:
    """Settings for an in-memory workspace rooted at a temp directory."""
    return TaskboardSettings(root=tmp_path, store={"backend": "memory"})


@pytest.fixture
def workspace(
    settings: TaskboardSettings,
    clock: FakeClock,
    mailer: RecordingMailer,
) -> Iterator[Workspace]:
    """In-memory workspace with a fake clock and a synchronous recording mailer."""
    ws = Workspace(settings, store=InMemoryMembershipStore(), clock=clock)
    ws.init_mail_bus(sync=True, plugins=[mailer], discover=False)
    try:
        yield ws
    finally:
        ws.close()


@pytest.fixture
def sql_workspace(
    tmp_path: Path,
    clock: FakeClock,
    mailer: RecordingMailer,
) -> Iterator[Workspace]:
    """SQLite-backed workspace on a temp directory."""
    ws = Workspace(TaskboardSettings(root=tmp_path), clock=clock)
    ws.init_mail_bus(sync=True, plugins=[mailer], discover=False)
    try:
        yield ws
    finally:
        ws.close()


@pytest.fixture
def _isolated_workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp directory so the CLI creates an isolated database.

    Use via ``@pytest.mark.usefixtures("_isolated_workspace")`` on command
    test classes.
    """
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# Shared test helpers (used across service test modules)
# ---------------------------------------------------------------------------


def register_user(ws: Workspace, username: str, **kwargs: Any) -> dict[str, Any]:
    """Register a user via UserService, asserting success."""
    from taskboard.services.users import UserService

    email = kwargs.pop("email", f"{username}@example.com")
    result = UserService(ws).register(username, email, **kwargs)
    assert result.ok, result.error
    return result.data


def create_board(ws: Workspace, owner_id: str, title: str, **kwargs: Any) -> dict[str, Any]:
    """Create a board via BoardService, asserting success."""
    from taskboard.services.boards import BoardService

    result = BoardService(ws).create_board(owner_id, title, **kwargs)
    assert result.ok, result.error
    return result.data


def add_member(ws: Workspace, board_id: str, owner_id: str, username: str) -> dict[str, Any]:
    """Invite *username* and accept on their behalf; returns the accept data."""
    from taskboard.services.invitations import InvitationService
    from taskboard.services.users import UserService

    svc = InvitationService(ws)
    invited = svc.invite(board_id, owner_id, username=username)
    assert invited.ok, invited.error
    invitee_id = UserService(ws).resolve(username).id
    accepted = svc.respond(invited.data["id"], invitee_id, True)
    assert accepted.ok, accepted.error
    return accepted.data


def create_task(
    ws: Workspace,
    board_id: str,
    principal_id: str,
    title: str,
    **kwargs: Any,
) -> dict[str, Any]:
    """Create a task via TaskService, asserting success."""
    from taskboard.services.tasks import TaskService

    result = TaskService(ws).create_task(board_id, principal_id, title, **kwargs)
    assert result.ok, result.error
    return result.data


def invoke_json(runner: CliRunner, *args: str) -> dict[str, Any]:
    """Run the CLI with ``--json`` and return the parsed successful result."""
    import json

    from taskboard.cli import cli

    result = runner.invoke(cli, ["--json", *args])
    assert result.exit_code == 0, result.output
    return json.loads(result.output)
