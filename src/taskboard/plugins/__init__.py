"""Extension layer — outbound email via pluggy hooks.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints.
INVARIANT: Mail failures are logged, never raised to the caller.
"""

from taskboard.plugins.mail_bus import MailBus
from taskboard.plugins.manager import PluginManager

__all__ = ["MailBus", "PluginManager"]
