"""Notifications — the dispatcher that creates them and the inbox that reads them.

:class:`NotificationDispatcher` is the only code that creates
:class:`Notification` records. Each domain event yields exactly one record
for one recipient, written before the command returns. Invitation events
then hand an email to the :class:`~taskboard.plugins.mail_bus.MailBus`;
anything that goes wrong on the email path is logged and dropped.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import structlog

from taskboard.domain.errors import InvalidInputError, NotFoundError, UnauthorizedError
from taskboard.domain.events import InvitationAccepted, InvitationRejected, TaskAssigned
from taskboard.domain.lifecycle import NotificationType
from taskboard.domain.models import (
    InvitationAcceptedData,
    InvitationRejectedData,
    Notification,
    TaskAssignedData,
)
from taskboard.infrastructure.store import EntityKind
from taskboard.services._helpers import dump, dump_all
from taskboard.services.base import BaseService, service_op
from taskboard.services.result import ServiceResult

if TYPE_CHECKING:
    from taskboard.domain.events import NotificationEvent

logger = logging.getLogger(__name__)
log = structlog.get_logger(__name__)


class NotificationDispatcher(BaseService):
    """Turns domain events into stored notifications plus best-effort email."""

    def dispatch(
        self,
        event: NotificationEvent,
        warnings: list[str] | None = None,
    ) -> Notification:
        """Persist one notification for *event*, then queue its email (if any).

        Store failures propagate. Email failures never do: they are logged
        and, when *warnings* is given, reported there.
        """
        notification = self._build(event)
        self._store.create(notification)
        log.debug(
            "notification_created",
            notification_id=notification.id,
            type=str(notification.type),
            recipient_id=notification.recipient_id,
        )
        self._send_email(event, warnings if warnings is not None else [])
        return notification

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _build(self, event: NotificationEvent) -> Notification:
        now = self._now()
        if isinstance(event, TaskAssigned):
            actor_name = event.actor.display_name
            return Notification(
                recipient_id=event.recipient_id,
                type=NotificationType.TASK_ASSIGNED,
                title="Task assigned",
                message=f'{actor_name} assigned you "{event.task.title}"',
                data=TaskAssignedData(
                    task_id=event.task.id,
                    board_id=event.task.board_id,
                    task_title=event.task.title,
                    assigned_by_id=event.actor.id,
                    assigned_by_name=actor_name,
                ),
                created_at=now,
            )
        if isinstance(event, InvitationAccepted):
            return Notification(
                recipient_id=event.recipient_id,
                type=NotificationType.INVITATION_ACCEPTED,
                title="Invitation accepted",
                message=(
                    f"{event.responder.username} accepted your invitation "
                    f'to "{event.board.title}"'
                ),
                data=InvitationAcceptedData(
                    invitation_id=event.invitation.id,
                    board_id=event.board.id,
                    board_title=event.board.title,
                    accepter_id=event.responder.id,
                    accepter_username=event.responder.username,
                ),
                created_at=now,
            )
        if isinstance(event, InvitationRejected):
            return Notification(
                recipient_id=event.recipient_id,
                type=NotificationType.INVITATION_REJECTED,
                title="Invitation rejected",
                message=(
                    f"{event.responder.username} declined your invitation "
                    f'to "{event.board.title}"'
                ),
                data=InvitationRejectedData(
                    invitation_id=event.invitation.id,
                    board_id=event.board.id,
                    board_title=event.board.title,
                    rejecter_id=event.responder.id,
                    rejecter_username=event.responder.username,
                ),
                created_at=now,
            )
        msg = f"Unsupported notification event: {type(event).__name__}"
        raise TypeError(msg)

    def _send_email(self, event: NotificationEvent, warnings: list[str]) -> None:
        """Queue the email for invitation events. Task assignment sends none."""
        hook_name: str
        payload: dict[str, Any]
        if isinstance(event, InvitationAccepted):
            hook_name = "send_invitation_accepted"
            payload = {
                "to_email": event.inviter.email,
                "accepter_name": event.responder.username,
                "board_title": event.board.title,
            }
        elif isinstance(event, InvitationRejected):
            hook_name = "send_invitation_rejected"
            payload = {
                "to_email": event.inviter.email,
                "rejecter_name": event.responder.username,
                "board_title": event.board.title,
            }
        else:
            return

        bus = self._workspace.mail_bus
        if bus is None:
            logger.debug("No mail bus; skipping %s", hook_name)
            return
        try:
            bus.submit(hook_name, payload)
        except Exception as exc:
            log.warning("mail_submit_failed", hook=hook_name, error=str(exc))
            warnings.append(f"Email could not be sent ({hook_name})")


class NotificationService(BaseService):
    """Recipient-facing reads and the mark-as-read mutation."""

    @service_op("list_notifications")
    def list_for_user(
        self,
        user_id: str,
        *,
        unread_only: bool = False,
        limit: int | None = None,
    ) -> ServiceResult:
        """Newest-first notifications addressed to *user_id*.

        ``unread`` in the result counts every unread notification, not just
        the ones inside the *limit* window.
        """
        op = "list_notifications"
        if limit is None:
            limit = self._workspace.settings.notifications.default_limit
        elif limit < 1:
            msg = f"Limit must be at least 1, got {limit}"
            raise InvalidInputError(msg, limit=limit)
        items = self._store.notifications_for_user(
            user_id,
            unread_only=unread_only,
            limit=limit,
        )
        unread = self._store.count_unread_notifications(user_id)
        return ServiceResult(
            ok=True,
            op=op,
            data={"items": dump_all(items), "count": len(items), "unread": unread},
        )

    @service_op("unread_count")
    def unread_count(self, user_id: str) -> ServiceResult:
        count = self._store.count_unread_notifications(user_id)
        return ServiceResult(ok=True, op="unread_count", data={"count": count})

    @service_op("mark_notification_read")
    def mark_as_read(self, notification_id: str, user_id: str) -> ServiceResult:
        """Mark one notification read. Only its recipient may do so.

        Marking an already-read notification succeeds and keeps the
        original ``read_at``.
        """
        op = "mark_notification_read"
        notification = self._store.get(EntityKind.NOTIFICATION, notification_id)
        if notification is None:
            msg = f"No notification found with ID: {notification_id}"
            raise NotFoundError(msg, id=notification_id)
        assert isinstance(notification, Notification)
        if notification.recipient_id != user_id:
            msg = f"Notification {notification_id} belongs to another user"
            raise UnauthorizedError(msg, id=notification_id)

        if not notification.is_read:
            notification = notification.model_copy(
                update={"is_read": True, "read_at": self._now()}
            )
            self._store.update(notification)
        return ServiceResult(ok=True, op=op, data=dump(notification))
