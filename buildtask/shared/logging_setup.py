"""
buildtask/shared/logging_setup.py
---------------------------------

Central logging configuration for the compile task.

Goals:
- Provide a single place to configure logging format and level.
- Make it easy to get a logger in any module:
      import structlog
      logger = structlog.get_logger()
- Let a task carry its human-readable prefix on every line:
      log = get_task_logger("[csc] ")

Implementation notes
====================

- structlog renders on top of Python's built-in `logging` module, so
  library users that only configure stdlib logging still see our lines.
- `init_logging` is idempotent; calling it multiple times is safe.
- Level and renderer come from `Settings.LOG_LEVEL` / `Settings.LOG_FORMAT`
  unless passed explicitly.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import structlog

from buildtask.shared.config import LogFormat, settings

# Internal flag to avoid re-configuring logging multiple times
_INITIALIZED = False

DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _level_from_name(level_name: str) -> int:
    return getattr(logging, (level_name or "INFO").upper(), logging.INFO)


def init_logging(
    level: Optional[int] = None,
    log_format: Optional[LogFormat] = None,
    *,
    force: bool = False,
) -> None:
    """
    Initialize structlog + root logging configuration.

    Args:
        level:
            Logging level (e.g. logging.DEBUG). If None, it is read from
            settings.LOG_LEVEL.
        log_format:
            CONSOLE for human-readable lines, JSON for machine-readable ones.
        force:
            If True, reconfigure logging even if it was already initialized.
    """
    global _INITIALIZED

    if _INITIALIZED and not force:
        return

    if level is None:
        level = _level_from_name(settings.LOG_LEVEL)
    if log_format is None:
        log_format = settings.LOG_FORMAT

    logging.basicConfig(
        level=level,
        format="%(message)s",
        stream=sys.stdout,
        force=True,
    )

    if log_format == LogFormat.JSON:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt=DEFAULT_DATE_FORMAT),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    _INITIALIZED = True


def get_task_logger(prefix: Optional[str] = None, **context):
    """Return a structlog logger bound to the task's log prefix."""
    log = structlog.get_logger()
    if prefix:
        context["task"] = prefix.strip()
    return log.bind(**context) if context else log


__all__ = ["init_logging", "get_task_logger"]
