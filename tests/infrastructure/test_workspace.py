"""Tests for Workspace wiring: store selection, clock, and the mail bus."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from taskboard.config.settings import TaskboardSettings
from taskboard.infrastructure.memory import InMemoryMembershipStore
from taskboard.infrastructure.sql_store import SqlMembershipStore
from taskboard.infrastructure.workspace import Workspace, open_store
from taskboard.plugins.builtins.log_mailer import LogMailerPlugin
from tests.conftest import RecordingMailer


class TestOpenStore:
    def test_memory_backend(self, tmp_path: Path) -> None:
        settings = TaskboardSettings(root=tmp_path, store={"backend": "memory"})
        assert isinstance(open_store(settings), InMemoryMembershipStore)

    def test_sqlite_backend_creates_db_under_root(self, tmp_path: Path) -> None:
        store = open_store(TaskboardSettings(root=tmp_path))
        try:
            assert isinstance(store, SqlMembershipStore)
            assert (tmp_path / ".taskboard" / "taskboard.db").is_file()
        finally:
            store.close()


class TestWorkspace:
    def test_injected_clock(self, tmp_path: Path) -> None:
        fixed = datetime(2030, 1, 1, tzinfo=UTC)
        settings = TaskboardSettings(root=tmp_path, store={"backend": "memory"})
        ws = Workspace(settings, clock=lambda: fixed)
        assert ws.now() == fixed

    def test_mail_bus_off_until_initialized(self, tmp_path: Path) -> None:
        settings = TaskboardSettings(root=tmp_path, store={"backend": "memory"})
        ws = Workspace(settings)
        assert ws.mail_bus is None
        assert ws.plugin_manager is None

    def test_builtin_mailer_when_nothing_else_registered(self, tmp_path: Path) -> None:
        settings = TaskboardSettings(root=tmp_path, store={"backend": "memory"})
        ws = Workspace(settings)
        ws.init_mail_bus(sync=True, discover=False)
        try:
            assert ws.plugin_manager is not None
            assert "log-mailer-builtin" in ws.plugin_manager.names()
            assert any(isinstance(p, LogMailerPlugin) for p in ws.plugin_manager.plugins())
        finally:
            ws.close()

    def test_registered_mailer_replaces_builtin(self, tmp_path: Path) -> None:
        settings = TaskboardSettings(root=tmp_path, store={"backend": "memory"})
        ws = Workspace(settings)
        ws.init_mail_bus(sync=True, plugins=[RecordingMailer()], discover=False)
        try:
            assert ws.plugin_manager is not None
            assert "log-mailer-builtin" not in ws.plugin_manager.names()
        finally:
            ws.close()

    def test_email_disabled_skips_bus(self, tmp_path: Path) -> None:
        settings = TaskboardSettings(
            root=tmp_path,
            store={"backend": "memory"},
            notifications={"email_enabled": False},
        )
        ws = Workspace(settings)
        ws.init_mail_bus(sync=True, discover=False)
        assert ws.mail_bus is None

    def test_close_shuts_down_bus(self, tmp_path: Path) -> None:
        settings = TaskboardSettings(root=tmp_path, store={"backend": "memory"})
        ws = Workspace(settings)
        ws.init_mail_bus(discover=False)
        ws.close()
        assert ws.mail_bus is None
