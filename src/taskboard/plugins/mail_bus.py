"""Best-effort email dispatch via pluggy + ThreadPoolExecutor.

The notification record is already durable when a mail is submitted, so
the bus keeps nothing: a failed hook is logged and dropped.

INVARIANT: Mail failures are logged, never raised to the caller.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from taskboard.plugins.manager import PluginManager

logger = logging.getLogger(__name__)
log = structlog.get_logger(__name__)


class MailBus:
    """Fire-and-forget hook dispatch.

    Parameters:
        plugin_manager: Loaded PluginManager for hook dispatch.
        sync: Run hooks on the calling thread (useful for testing / ``--sync``).
        max_workers: ThreadPoolExecutor worker count.
    """

    def __init__(
        self,
        plugin_manager: PluginManager,
        *,
        sync: bool = False,
        max_workers: int = 2,
    ) -> None:
        self._pm = plugin_manager
        self._sync = sync
        self._executor: ThreadPoolExecutor | None = (
            None if sync else ThreadPoolExecutor(max_workers=max_workers)
        )
        self._futures: list[Future[bool]] = []
        self._lock = threading.Lock()

    @property
    def is_sync(self) -> bool:
        return self._sync

    @property
    def in_flight(self) -> int:
        """Submitted hooks not yet seen finished."""
        with self._lock:
            return len(self._futures)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def submit(self, hook_name: str, payload: dict[str, Any]) -> None:
        """Run *hook_name* with *payload* now (sync) or on the pool (async).

        Raises RuntimeError after :meth:`shutdown`; callers absorb it like
        any other mail failure.
        """
        if self._sync:
            self._execute_hook(hook_name, payload)
            return
        if self._executor is None:
            msg = "MailBus has been shut down"
            raise RuntimeError(msg)
        future = self._executor.submit(self._execute_hook, hook_name, payload)
        with self._lock:
            self._futures = [f for f in self._futures if not f.done()]
            self._futures.append(future)

    def flush(self, timeout: float = 30) -> None:
        """Wait for in-flight hooks to finish."""
        with self._lock:
            pending, self._futures = self._futures, []
        for future in pending:
            try:
                future.result(timeout=timeout)
            except Exception:
                logger.debug("Mail hook did not finish cleanly", exc_info=True)

    def shutdown(self) -> None:
        """Shutdown the ThreadPoolExecutor, waiting for pending hooks."""
        self.flush()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _execute_hook(self, hook_name: str, payload: dict[str, Any]) -> bool:
        """Call every implementation of *hook_name*. Returns True on success."""
        hook_fn = getattr(self._pm.hook, hook_name, None)
        if hook_fn is None:
            logger.debug("No hook named %s", hook_name)
            return False
        try:
            hook_fn(**payload)
        except Exception as exc:
            log.warning("mail_failed", hook=hook_name, error=str(exc))
            return False
        return True
