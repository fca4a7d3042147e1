"""structlog configuration for the workforce CLI.

Two producers share one stderr handler:

- services, repositories and the event bus log through stdlib
  ``logging`` (``workforce.services.*``, ``workforce.plugins.*``);
- the audit listener logs each domain event through structlog under
  ``workforce.audit`` with the event fields bound as keys.

``--log-json`` renders both as JSON lines, so an audit trail can be
collected by piping stderr. Without ``-v`` only warnings get through,
which keeps scheduled jobs such as ``workforce leave accrue`` quiet.
"""

from __future__ import annotations

import logging
import sys

import structlog


def _shared_processors() -> list[structlog.types.Processor]:
    return [
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


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
) -> None:
    """Route structlog and stdlib records through one formatter on stderr.

    Args:
        verbose: Let ``workforce.*`` loggers emit DEBUG and INFO, which
            includes the audit line for every dispatched event.
        log_json: One JSON object per line instead of console output.
    """
    shared = _shared_processors()

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _renderer(log_json),
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger("workforce").setLevel(logging.DEBUG if verbose else logging.WARNING)
    # SQL echo stays off even under -v; it would drown the audit lines.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
