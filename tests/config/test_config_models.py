"""Tests for config models — defaults and sparse overrides."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from taskboard.config.models import (
    AccessConfig,
    InvitationsConfig,
    NotificationsConfig,
    StoreConfig,
    TaskboardConfig,
)


class TestTaskboardConfig:
    def test_defaults(self) -> None:
        config = TaskboardConfig()
        assert config.store == StoreConfig()
        assert config.invitations.ttl_days == 7
        assert config.access.public_write is True
        assert config.notifications.max_workers == 2

    def test_sparse_override(self) -> None:
        config = TaskboardConfig.model_validate({"invitations": {"ttl_days": 2}})
        assert config.invitations.ttl_days == 2
        assert config.invitations.default_role == "Member"

    def test_frozen(self) -> None:
        with pytest.raises(ValidationError):
            AccessConfig().public_write = False  # type: ignore[misc]


class TestValidation:
    def test_unknown_backend(self) -> None:
        with pytest.raises(ValidationError):
            StoreConfig(backend="postgres")  # type: ignore[arg-type]

    def test_ttl_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            InvitationsConfig(ttl_days=0)

    def test_limit_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            NotificationsConfig(default_limit=0)
