"""Tests for the built-in log mailer."""

from __future__ import annotations

from structlog.testing import capture_logs

from taskboard.plugins.builtins.log_mailer import LogMailerPlugin
from taskboard.plugins.manager import PluginManager


class TestLogMailer:
    def test_accepted_mail_logged(self) -> None:
        pm = PluginManager()
        pm.register(LogMailerPlugin())
        with capture_logs() as logs:
            pm.hook.send_invitation_accepted(
                to_email="alice@example.com", accepter_name="bob", board_title="Roadmap"
            )
        assert len(logs) == 1
        assert logs[0]["event"] == "mail_sent"
        assert logs[0]["to"] == "alice@example.com"
        assert logs[0]["subject"] == "bob accepted your invitation to Roadmap"
        assert logs[0]["kind"] == "invitation_accepted"

    def test_rejected_mail_subject(self) -> None:
        with capture_logs() as logs:
            LogMailerPlugin().send_invitation_rejected(
                to_email="alice@example.com", rejecter_name="bob", board_title="Roadmap"
            )
        assert logs[0]["subject"] == "bob declined your invitation to Roadmap"
        assert logs[0]["kind"] == "invitation_rejected"

    def test_keeps_no_record_of_sent_mail(self) -> None:
        mailer = LogMailerPlugin()
        with capture_logs():
            for _ in range(3):
                mailer.send_invitation_accepted(
                    to_email="alice@example.com", accepter_name="bob", board_title="Roadmap"
                )
        assert vars(mailer) == {}
