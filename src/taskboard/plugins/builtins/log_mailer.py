"""Built-in mailer that writes outbound email to the log.

Registered by the workspace when ``[notifications] email_enabled`` is on
and no installed plugin claims the hooks. A real SMTP or API mailer is an
entry-point plugin implementing the same hooks.
"""

from __future__ import annotations

import pluggy
import structlog

hookimpl = pluggy.HookimplMarker("taskboard")

log = structlog.get_logger(__name__)


class LogMailerPlugin:
    """Logs each outbound email as a structured ``mail_sent`` event."""

    @hookimpl
    def send_invitation_accepted(
        self,
        to_email: str,
        accepter_name: str,
        board_title: str,
    ) -> None:
        subject = f"{accepter_name} accepted your invitation to {board_title}"
        self._send(to_email, subject, kind="invitation_accepted")

    @hookimpl
    def send_invitation_rejected(
        self,
        to_email: str,
        rejecter_name: str,
        board_title: str,
    ) -> None:
        subject = f"{rejecter_name} declined your invitation to {board_title}"
        self._send(to_email, subject, kind="invitation_rejected")

    def _send(self, to_email: str, subject: str, *, kind: str) -> None:
        log.info("mail_sent", to=to_email, subject=subject, kind=kind)
