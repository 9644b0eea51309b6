"""structlog setup for taskboard.

Service modules emit named events (``invitation_created``,
``access_denied``, ``mail_failed``) through ``structlog.get_logger``;
plain ``logging`` calls from the same modules and from libraries are routed
through the same formatter. Everything goes to stderr so command output on
stdout stays pipeable.

Renderers:
- console (default), colored when stderr is a terminal
- JSON lines (``--log-json``)
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

# Libraries that are only worth hearing from at WARNING, even with -v.
NOISY_LOGGERS: tuple[str, ...] = ("sqlalchemy", "pluggy")

_PRE_CHAIN: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def _renderer(log_json: bool) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Route structlog and stdlib logging to one stderr handler.

    ``taskboard.*`` loggers log at DEBUG with *verbose*, WARNING otherwise.
    Calling this again replaces the handler instead of adding a second one.
    """
    structlog.configure(
        processors=[*_PRE_CHAIN, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_PRE_CHAIN,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_json),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(logging.WARNING)

    logging.getLogger("taskboard").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_principal(principal_id: str, **extra: Any) -> None:
    """Attach the acting user to every event logged for the rest of the command."""
    structlog.contextvars.bind_contextvars(principal=principal_id, **extra)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
