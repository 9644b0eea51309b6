"""Mailer plugin registry on top of pluggy.

Mailers come from two places: ``taskboard.plugins`` entry points of
installed distributions, and instances handed in directly (the built-in
log mailer, test doubles). Both end up as registered instances; hook
dispatch against a bare class would leave ``self`` unbound.
"""

from __future__ import annotations

import inspect
import logging

import pluggy

from taskboard.plugins.hookspecs import TaskboardHookSpec

PROJECT_NAME = "taskboard"
ENTRY_POINT_GROUP = "taskboard.plugins"
MAIL_HOOKS: tuple[str, ...] = ("send_invitation_accepted", "send_invitation_rejected")

logger = logging.getLogger(__name__)


class PluginManager:
    """Registers mailers and exposes their hooks to the mail bus."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(TaskboardHookSpec)
        self._discovered = False

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    @property
    def discovered(self) -> bool:
        """Whether entry points have been loaded."""
        return self._discovered

    @property
    def has_mailer(self) -> bool:
        """True when at least one registered plugin implements a mail hook."""
        return any(getattr(self._pm.hook, name).get_hookimpls() for name in MAIL_HOOKS)

    def discover(self) -> list[str]:
        """Load entry-point mailers and return the names now registered."""
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._instantiate_classes()
        self._discovered = True
        return self.names()

    def register(self, plugin: object, name: str | None = None) -> None:
        name = name or type(plugin).__name__
        self._pm.register(plugin, name=name)
        logger.debug("Registered plugin: %s", name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    def plugins(self) -> list[object]:
        return list(self._pm.get_plugins())

    def names(self) -> list[str]:
        return [self._name_of(p) for p in self._pm.get_plugins()]

    def mailer_names(self) -> list[str]:
        """Names of the plugins that implement at least one mail hook."""
        return [self._name_of(p) for p in self._pm.get_plugins() if implements_mail_hooks(p)]

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _name_of(self, plugin: object) -> str:
        return self._pm.get_name(plugin) or type(plugin).__name__

    def _instantiate_classes(self) -> None:
        """Swap mailer classes registered by entry points for instances.

        A class whose constructor fails is dropped with a warning; the
        remaining mailers keep working.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin) or not implements_mail_hooks(plugin):
                continue
            name = self._name_of(plugin)
            self._pm.unregister(plugin)
            try:
                instance = plugin()
            except Exception:
                logger.warning("Could not instantiate mailer %s", name, exc_info=True)
                continue
            self._pm.register(instance, name=name)
            logger.debug("Instantiated mailer: %s", name)


def implements_mail_hooks(plugin: object) -> bool:
    """Whether *plugin* (class or instance) carries a ``@hookimpl`` mail method.

    ``HookimplMarker("taskboard")`` tags decorated methods with a
    ``taskboard_impl`` attribute.
    """
    return any(
        getattr(getattr(plugin, name, None), f"{PROJECT_NAME}_impl", None) for name in MAIL_HOOKS
    )
