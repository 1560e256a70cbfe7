"""Logging setup for the ``text-bayes`` command line.

Library modules log through stdlib loggers wrapped by structlog and never
configure anything themselves; until :func:`configure_logging` runs their
events follow the stdlib defaults (debug and info are dropped).
"""

from __future__ import annotations

import logging
import sys

import structlog


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Render structlog events on stderr at the level the CLI flags ask for.

    Args:
        verbose: ``--verbose``; show debug events such as per-document
            ``trained`` / ``untrained``.
        quiet: ``--quiet``; only warnings and errors. Wins over ``verbose``.
    """
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
