"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, taskboard.toml only contains
overrides. A fresh workspace needs no config file at all.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from taskboard.domain.lifecycle import DEFAULT_INVITATION_TTL_DAYS
from taskboard.domain.models import DEFAULT_ROLE

# --- taskboard.toml sections ---


class StoreConfig(BaseModel):
    """[store] section."""

    model_config = {"frozen": True}

    backend: Literal["sqlite", "memory"] = "sqlite"
    path: str = ".taskboard/taskboard.db"


class InvitationsConfig(BaseModel):
    """[invitations] section."""

    model_config = {"frozen": True}

    ttl_days: int = Field(default=DEFAULT_INVITATION_TTL_DAYS, ge=1)
    default_role: str = DEFAULT_ROLE


class AccessConfig(BaseModel):
    """[access] section."""

    model_config = {"frozen": True}

    # With public_write off, public boards are read-only to non-members.
    public_write: bool = True


class NotificationsConfig(BaseModel):
    """[notifications] section."""

    model_config = {"frozen": True}

    email_enabled: bool = True
    max_workers: int = Field(default=2, ge=1)
    default_limit: int = Field(default=50, ge=1)


class TaskboardConfig(BaseModel):
    """Root config model — all taskboard.toml sections."""

    model_config = {"frozen": True}

    store: StoreConfig = Field(default_factory=StoreConfig)
    invitations: InvitationsConfig = Field(default_factory=InvitationsConfig)
    access: AccessConfig = Field(default_factory=AccessConfig)
    notifications: NotificationsConfig = Field(default_factory=NotificationsConfig)
