"""Tests for status enums and the invitation state machine."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from taskboard.domain.errors import ConflictError
from taskboard.domain.lifecycle import (
    INVITATION_TRANSITIONS,
    InvitationStatus,
    TaskPriority,
    TaskStatus,
    is_expired,
    is_terminal,
    is_valid_transition,
    transition,
)
from taskboard.domain.models import BoardInvitation

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _invitation(**kwargs: object) -> BoardInvitation:
    fields: dict[str, object] = {
        "board_id": "brd_0000000001",
        "inviter_id": "usr_0000000001",
        "invitee_id": "usr_0000000002",
        "created_at": NOW,
    }
    fields.update(kwargs)
    return BoardInvitation(**fields)


class TestEnums:
    def test_task_status_values(self) -> None:
        assert {s.value for s in TaskStatus} == {
            "todo",
            "in_progress",
            "in_review",
            "done",
            "blocked",
        }

    def test_task_priority_values(self) -> None:
        assert {p.value for p in TaskPriority} == {"low", "medium", "high", "critical"}

    def test_transition_map_covers_all_statuses(self) -> None:
        assert set(INVITATION_TRANSITIONS) == {s.value for s in InvitationStatus}


class TestInvitationTransitions:
    @pytest.mark.parametrize("target", ["accepted", "rejected", "expired"])
    def test_pending_moves_anywhere(self, target: str) -> None:
        assert is_valid_transition("pending", target)

    @pytest.mark.parametrize("current", ["accepted", "rejected", "expired"])
    def test_outcomes_are_terminal(self, current: str) -> None:
        assert is_terminal(current)
        for target in InvitationStatus:
            assert not is_valid_transition(current, target.value)

    def test_pending_not_terminal(self) -> None:
        assert not is_terminal("pending")

    def test_accept_stamps_responded_at(self) -> None:
        answered = transition(_invitation(), InvitationStatus.ACCEPTED, now=NOW)
        assert answered.status == InvitationStatus.ACCEPTED
        assert answered.responded_at == NOW

    def test_expire_leaves_responded_at_empty(self) -> None:
        expired = transition(_invitation(), InvitationStatus.EXPIRED, now=NOW)
        assert expired.status == InvitationStatus.EXPIRED
        assert expired.responded_at is None

    def test_transition_returns_new_snapshot(self) -> None:
        original = _invitation()
        transition(original, InvitationStatus.REJECTED, now=NOW)
        assert original.status == InvitationStatus.PENDING

    def test_second_answer_conflicts(self) -> None:
        accepted = transition(_invitation(), InvitationStatus.ACCEPTED, now=NOW)
        with pytest.raises(ConflictError):
            transition(accepted, InvitationStatus.REJECTED, now=NOW)


class TestExpiry:
    def test_default_ttl_is_seven_days(self) -> None:
        assert _invitation().expires_at == NOW + timedelta(days=7)

    def test_not_expired_at_deadline(self) -> None:
        inv = _invitation(expires_at=NOW)
        assert not is_expired(inv, NOW)

    def test_expired_after_deadline(self) -> None:
        inv = _invitation(expires_at=NOW)
        assert is_expired(inv, NOW + timedelta(microseconds=1))
