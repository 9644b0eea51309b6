"""Pluggy hook specifications for outbound email.

The email transport lives outside taskboard. A mailer plugin implements
these hooks; the :class:`~taskboard.plugins.mail_bus.MailBus` calls them
off the request path after the matching notification is stored.
"""

from __future__ import annotations

import pluggy

hookspec = pluggy.HookspecMarker("taskboard")


class TaskboardHookSpec:
    """Hook specifications for the taskboard plugin system."""

    @hookspec
    def send_invitation_accepted(
        self,
        to_email: str,
        accepter_name: str,
        board_title: str,
    ) -> None:
        """Tell the inviter that their invitation was accepted."""

    @hookspec
    def send_invitation_rejected(
        self,
        to_email: str,
        rejecter_name: str,
        board_title: str,
    ) -> None:
        """Tell the inviter that their invitation was rejected."""
