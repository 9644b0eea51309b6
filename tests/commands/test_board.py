"""Tests for the board command group."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from taskboard.cli import cli
from tests.conftest import invoke_json


@pytest.fixture
def owner(cli_runner: CliRunner) -> str:
    invoke_json(cli_runner, "user", "add", "alice", "alice@example.com")
    invoke_json(cli_runner, "user", "add", "bob", "bob@example.com")
    return "alice"


@pytest.mark.usefixtures("_isolated_workspace")
class TestBoardCommands:
    def test_create_requires_user(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["board", "create", "Roadmap"])
        assert result.exit_code == 2
        assert "No acting user" in result.output

    def test_unknown_user(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "-u", "ghost", "board", "create", "Roadmap"])
        assert result.exit_code == 1
        assert json.loads(result.output)["op"] == "resolve_user"

    def test_create_and_show(self, cli_runner: CliRunner, owner: str) -> None:
        created = invoke_json(
            cli_runner, "-u", owner, "board", "create", "Roadmap", "--column", "A", "--column", "B"
        )
        board_id = created["data"]["id"]
        assert created["data"]["columns"] == ["A", "B"]
        result = cli_runner.invoke(cli, ["-u", owner, "board", "show", board_id])
        assert result.exit_code == 0
        assert "Roadmap" in result.output
        assert "columns: A, B" in result.output

    def test_user_from_env(
        self, cli_runner: CliRunner, owner: str, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("TASKBOARD_USER", owner)
        data = invoke_json(cli_runner, "board", "create", "From env")
        assert data["ok"] is True

    def test_list_and_archive(self, cli_runner: CliRunner, owner: str) -> None:
        board_id = invoke_json(cli_runner, "-u", owner, "board", "create", "Old")["data"]["id"]
        invoke_json(cli_runner, "-u", owner, "board", "update", board_id, "--archive")
        assert invoke_json(cli_runner, "-u", owner, "board", "list")["data"]["count"] == 0
        listed = invoke_json(cli_runner, "-u", owner, "board", "list", "--all")
        assert listed["data"]["items"][0]["is_archived"] is True

    def test_non_owner_update_fails(self, cli_runner: CliRunner, owner: str) -> None:
        board_id = invoke_json(cli_runner, "-u", owner, "board", "create", "Mine")["data"]["id"]
        result = cli_runner.invoke(
            cli, ["--json", "-u", "bob", "board", "update", board_id, "--title", "Ours"]
        )
        assert result.exit_code == 1
        assert json.loads(result.output)["error"]["code"] == "UNAUTHORIZED"

    def test_invite_members_and_remove(self, cli_runner: CliRunner, owner: str) -> None:
        board_id = invoke_json(cli_runner, "-u", owner, "board", "create", "Team")["data"]["id"]
        invited = invoke_json(
            cli_runner, "-u", owner, "board", "invite", board_id, "--username", "bob"
        )
        invoke_json(cli_runner, "-u", "bob", "invitation", "accept", invited["data"]["id"])

        members = invoke_json(cli_runner, "-u", owner, "board", "members", board_id)
        assert {m["username"] for m in members["data"]["items"]} == {"alice", "bob"}

        invoke_json(cli_runner, "-u", "bob", "board", "remove-member", board_id, "bob")
        members = invoke_json(cli_runner, "-u", owner, "board", "members", board_id)
        assert [m["username"] for m in members["data"]["items"]] == ["alice"]

    def test_invite_needs_exactly_one_target(self, cli_runner: CliRunner, owner: str) -> None:
        board_id = invoke_json(cli_runner, "-u", owner, "board", "create", "Team")["data"]["id"]
        result = cli_runner.invoke(cli, ["--json", "-u", owner, "board", "invite", board_id])
        assert result.exit_code == 1
        assert json.loads(result.output)["error"]["code"] == "INVALID_INPUT"

    def test_delete(self, cli_runner: CliRunner, owner: str) -> None:
        board_id = invoke_json(cli_runner, "-u", owner, "board", "create", "Temp")["data"]["id"]
        invoke_json(cli_runner, "-u", owner, "board", "delete", board_id, "--yes")
        result = cli_runner.invoke(cli, ["--json", "-u", owner, "board", "show", board_id])
        assert result.exit_code == 1
        assert json.loads(result.output)["error"]["code"] == "NOT_FOUND"
