"""Workspace — the single dependency injected into every service.

Owns the :class:`MembershipStore`, the plugin manager, the mail bus, the
clock, and the resolved settings. Built once per CLI invocation (or per
test) and closed when the caller is done.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING

from taskboard.domain.models import utcnow

if TYPE_CHECKING:
    from taskboard.config.settings import TaskboardSettings
    from taskboard.infrastructure.store import MembershipStore
    from taskboard.plugins.mail_bus import MailBus
    from taskboard.plugins.manager import PluginManager

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def open_store(settings: TaskboardSettings) -> MembershipStore:
    """Build the store named by ``[store] backend``."""
    if settings.store.backend == "memory":
        from taskboard.infrastructure.memory import InMemoryMembershipStore

        return InMemoryMembershipStore()

    from taskboard.infrastructure.sql_store import SqlMembershipStore

    return SqlMembershipStore.open(settings.db_path)


class Workspace:
    """Store, plugins, mail bus, and clock behind one handle.

    Services receive the Workspace via their :class:`BaseService`
    constructor and never build infrastructure themselves.
    """

    def __init__(
        self,
        settings: TaskboardSettings,
        *,
        store: MembershipStore | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._settings = settings
        self._store = store if store is not None else open_store(settings)
        self._clock: Clock = clock or utcnow
        self._plugin_manager: PluginManager | None = None
        self._mail_bus: MailBus | None = None

    @property
    def settings(self) -> TaskboardSettings:
        return self._settings

    @property
    def store(self) -> MembershipStore:
        return self._store

    @property
    def plugin_manager(self) -> PluginManager | None:
        return self._plugin_manager

    @property
    def mail_bus(self) -> MailBus | None:
        """The mail bus (None until :meth:`init_mail_bus` or when email is off)."""
        return self._mail_bus

    def now(self) -> datetime:
        """Current time from the injected clock."""
        return self._clock()

    def init_mail_bus(
        self,
        *,
        sync: bool = False,
        plugins: list[object] | None = None,
        discover: bool = True,
    ) -> None:
        """Create the PluginManager and wire up the MailBus.

        Loads entry-point mailers when *discover* is set, registers any
        *plugins* passed in, and falls back to the built-in
        :class:`LogMailerPlugin` when nothing implements the mail hooks.
        Does nothing when ``[notifications] email_enabled`` is off.
        """
        if not self._settings.notifications.email_enabled:
            logger.debug("Email disabled; mail bus not started")
            return

        from taskboard.plugins.builtins.log_mailer import LogMailerPlugin
        from taskboard.plugins.mail_bus import MailBus
        from taskboard.plugins.manager import PluginManager

        pm = PluginManager()
        if discover:
            pm.discover()
        for plugin in plugins or []:
            pm.register(plugin)
        if not pm.has_mailer:
            pm.register(LogMailerPlugin(), name="log-mailer-builtin")

        self._plugin_manager = pm
        self._mail_bus = MailBus(
            pm,
            sync=sync,
            max_workers=self._settings.notifications.max_workers,
        )

    def close(self) -> None:
        """Drain the mail bus and release the store."""
        if self._mail_bus is not None:
            self._mail_bus.shutdown()
            self._mail_bus = None
        self._store.close()
