"""InvitationService — the board-invitation lifecycle.

Pipeline for a response: LOOKUP -> GUARD -> EXPIRE? -> TRANSITION -> JOIN -> NOTIFY

Writes on accept happen in that order and are not wrapped in one
transaction: the invitation is persisted first, then the invitee is added
to the board (idempotent), then the inviter's notification is written. An
interruption in between leaves an accepted invitation whose join can be
replayed safely.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any

import structlog

from taskboard.domain.access import Action
from taskboard.domain.errors import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    UnauthorizedError,
)
from taskboard.domain.events import InvitationAccepted, InvitationRejected
from taskboard.domain.lifecycle import InvitationStatus, is_expired, transition
from taskboard.domain.models import BoardInvitation, User
from taskboard.infrastructure.store import EntityKind
from taskboard.services._helpers import dump
from taskboard.services.base import BaseService, service_op
from taskboard.services.result import ServiceResult

logger = logging.getLogger(__name__)
log = structlog.get_logger(__name__)


class InvitationService(BaseService):
    """Invite users to boards and record their answers."""

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    @service_op("invite")
    def invite(
        self,
        board_id: str,
        inviter_id: str,
        *,
        email: str | None = None,
        username: str | None = None,
        role: str | None = None,
        message: str = "",
    ) -> ServiceResult:
        """Create a pending invitation for the user named by *email* or *username*.

        Exactly one of *email* / *username* must be given.
        """
        op = "invite"
        board = self._get_board(board_id)
        self._authorize(board, inviter_id, Action.INVITE)

        email = (email or "").strip() or None
        username = (username or "").strip() or None
        if (email is None) == (username is None):
            msg = "Give exactly one of email or username"
            raise InvalidInputError(msg, email=email, username=username)

        if email is not None:
            invitee = self._store.find_user_by_email(email)
        else:
            assert username is not None
            invitee = self._store.find_user_by_username(username)
        if invitee is None:
            ref = email or username
            msg = f"No user found for: {ref}"
            raise NotFoundError(msg, ref=ref)

        if invitee.id == inviter_id:
            msg = "You cannot invite yourself"
            raise ConflictError(msg, board_id=board_id)
        if invitee.id in board.members or invitee.id == board.owner_id:
            msg = f"{invitee.username} is already a member of this board"
            raise ConflictError(msg, board_id=board_id, invitee_id=invitee.id)
        pending = self._store.pending_invitations_for_invitee(invitee.id)
        if any(inv.board_id == board_id for inv in pending):
            msg = f"{invitee.username} already has a pending invitation to this board"
            raise ConflictError(msg, board_id=board_id, invitee_id=invitee.id)

        now = self._now()
        settings = self._workspace.settings.invitations
        invitation = BoardInvitation(
            board_id=board_id,
            inviter_id=inviter_id,
            invitee_id=invitee.id,
            role=role or settings.default_role,
            message=message,
            created_at=now,
            expires_at=now + timedelta(days=settings.ttl_days),
        )
        self._store.create(invitation)
        log.info(
            "invitation_created",
            invitation_id=invitation.id,
            board_id=board_id,
            inviter_id=inviter_id,
            invitee_id=invitee.id,
        )
        return ServiceResult(
            ok=True,
            op=op,
            data={
                **dump(invitation),
                "board_title": board.title,
                "invitee_username": invitee.username,
                "invitee_email": invitee.email,
            },
        )

    # ------------------------------------------------------------------
    # Respond
    # ------------------------------------------------------------------

    @service_op("respond")
    def respond(self, invitation_id: str, user_id: str, accept: bool) -> ServiceResult:
        """Accept or reject an invitation on behalf of its invitee."""
        op = "respond"
        warnings: list[str] = []

        # ── LOOKUP / GUARD ───────────────────────────────────
        invitation = self._get_invitation(invitation_id)
        if invitation.invitee_id != user_id:
            msg = "Only the invited user can respond to this invitation"
            raise UnauthorizedError(msg, invitation_id=invitation_id)
        if invitation.status != InvitationStatus.PENDING:
            msg = f"Invitation {invitation_id} was already {invitation.status}"
            raise ConflictError(msg, invitation_id=invitation_id, status=str(invitation.status))

        now = self._now()
        if is_expired(invitation, now):
            self._store.update(transition(invitation, InvitationStatus.EXPIRED, now=now))
            log.info("invitation_expired", invitation_id=invitation_id, on="respond")
            msg = f"Invitation {invitation_id} has expired"
            raise ConflictError(msg, invitation_id=invitation_id, status="expired")

        board = self._get_board(invitation.board_id)
        responder = self._get_user(user_id)

        # ── TRANSITION ───────────────────────────────────────
        target = InvitationStatus.ACCEPTED if accept else InvitationStatus.REJECTED
        answered = transition(invitation, target, now=now)
        self._store.update(answered)

        # ── JOIN ─────────────────────────────────────────────
        if accept:
            joined = self._store.add_board_member(board.id, user_id)
            if joined is None:
                msg = f"No board found with ID: {board.id}"
                raise NotFoundError(msg, id=board.id)
            board = joined
        log.info(
            "invitation_answered",
            invitation_id=invitation_id,
            board_id=board.id,
            status=str(target),
        )

        # ── NOTIFY ───────────────────────────────────────────
        notification_id: str | None = None
        inviter = self._store.get(EntityKind.USER, invitation.inviter_id)
        if isinstance(inviter, User):
            event_cls = InvitationAccepted if accept else InvitationRejected
            event = event_cls(
                invitation=answered, board=board, responder=responder, inviter=inviter
            )
            notification_id = self._notify(event, warnings)["id"]
        else:
            warnings.append(f"Inviter {invitation.inviter_id} no longer exists; nobody notified")

        return ServiceResult(
            ok=True,
            op=op,
            data={
                **dump(answered),
                "accepted": accept,
                "members": sorted(board.members),
                "notification_id": notification_id,
            },
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Queries and maintenance
    # ------------------------------------------------------------------

    @service_op("list_pending")
    def list_pending(self, user_id: str) -> ServiceResult:
        """Pending invitations addressed to *user_id*, with board and inviter names.

        Pending rows already past ``expires_at`` are flagged ``expired`` but
        left untouched; they expire on the next response or sweep.
        """
        now = self._now()
        items: list[dict[str, Any]] = []
        for inv in self._store.pending_invitations_for_invitee(user_id):
            board = self._store.get(EntityKind.BOARD, inv.board_id)
            inviter = self._store.get(EntityKind.USER, inv.inviter_id)
            items.append(
                {
                    **dump(inv),
                    "board_title": getattr(board, "title", None),
                    "inviter_username": getattr(inviter, "username", None),
                    "expired": is_expired(inv, now),
                }
            )
        return ServiceResult(
            ok=True,
            op="list_pending",
            data={"items": items, "count": len(items)},
        )

    @service_op("list_board_invitations")
    def list_for_board(self, board_id: str, principal_id: str) -> ServiceResult:
        """Every invitation ever sent for a board (the audit trail)."""
        board = self._get_board(board_id)
        self._authorize(board, principal_id, Action.READ)
        items = [dump(inv) for inv in self._store.invitations_for_board(board_id)]
        return ServiceResult(
            ok=True,
            op="list_board_invitations",
            data={"board_id": board_id, "items": items, "count": len(items)},
        )

    @service_op("expire_invitations")
    def expire_stale(self, now: datetime | None = None) -> ServiceResult:
        """Move every overdue pending invitation to ``expired``."""
        cutoff = now or self._now()
        expired: list[str] = []
        for inv in self._store.overdue_pending_invitations(cutoff):
            self._store.update(transition(inv, InvitationStatus.EXPIRED, now=cutoff))
            expired.append(inv.id)
        if expired:
            log.info("invitations_expired", count=len(expired), on="sweep")
        return ServiceResult(
            ok=True,
            op="expire_invitations",
            data={"expired": expired, "count": len(expired)},
        )

    def _get_invitation(self, invitation_id: str) -> BoardInvitation:
        invitation = self._get(EntityKind.INVITATION, invitation_id)
        assert isinstance(invitation, BoardInvitation)
        return invitation
