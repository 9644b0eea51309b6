"""Tests for the notification command group."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from taskboard.cli import cli
from tests.conftest import invoke_json


@pytest.fixture
def notification_id(cli_runner: CliRunner) -> str:
    invoke_json(cli_runner, "user", "add", "alice", "alice@example.com")
    invoke_json(cli_runner, "user", "add", "bob", "bob@example.com")
    board_id = invoke_json(cli_runner, "-u", "alice", "board", "create", "Team")["data"]["id"]
    invitation = invoke_json(
        cli_runner, "-u", "alice", "board", "invite", board_id, "--username", "bob"
    )
    accepted = invoke_json(
        cli_runner, "-u", "bob", "invitation", "accept", invitation["data"]["id"]
    )
    return accepted["data"]["notification_id"]


@pytest.mark.usefixtures("_isolated_workspace")
class TestNotificationCommands:
    def test_list_rich(self, cli_runner: CliRunner, notification_id: str) -> None:
        result = cli_runner.invoke(cli, ["-u", "alice", "notification", "list"])
        assert result.exit_code == 0
        assert 'bob accepted your invitation to "Team"' in result.output
        assert "1 notifications, 1 unread" in result.output

    def test_read(self, cli_runner: CliRunner, notification_id: str) -> None:
        read = invoke_json(cli_runner, "-u", "alice", "notification", "read", notification_id)
        assert read["data"]["is_read"] is True
        unread = invoke_json(cli_runner, "-u", "alice", "notification", "list", "--unread")
        assert unread["data"]["count"] == 0

    def test_read_someone_elses(self, cli_runner: CliRunner, notification_id: str) -> None:
        result = cli_runner.invoke(
            cli, ["--json", "-u", "bob", "notification", "read", notification_id]
        )
        assert result.exit_code == 1
        assert json.loads(result.output)["error"]["code"] == "UNAUTHORIZED"

    def test_empty_inbox(self, cli_runner: CliRunner, notification_id: str) -> None:
        result = cli_runner.invoke(cli, ["-u", "bob", "notification", "list"])
        assert result.exit_code == 0
        assert "No notifications." in result.output

    def test_unread_count(self, cli_runner: CliRunner, notification_id: str) -> None:
        counted = invoke_json(cli_runner, "-u", "alice", "notification", "unread-count")
        assert counted["data"]["count"] == 1
        quiet = cli_runner.invoke(cli, ["-q", "-u", "alice", "notification", "unread-count"])
        assert quiet.exit_code == 0
        assert quiet.output.strip() == "1"

    def test_zero_limit_is_usage_error(self, cli_runner: CliRunner, notification_id: str) -> None:
        result = cli_runner.invoke(cli, ["-u", "alice", "notification", "list", "--limit", "0"])
        assert result.exit_code == 2
