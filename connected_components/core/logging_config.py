"""Logging setup for connected component applications.

Every record is stamped with the asyncio task that emitted it. Coordinator
and actor tasks are named after what they run, so a mixed log reads:

    12:00:01 | DEBUG    | coordinator demo | connected_components.Connected | ...
    12:00:01 | DEBUG    | actor demo:3     | connected_components.Actor | [Actor demo:3] Stopped
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterable, List, Optional, Union

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(task)-16s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
MAX_LOG_BYTES = 500 * 1024
LOG_BACKUP_COUNT = 2

# Loggers held at ERROR regardless of the configured level.
DEFAULT_SUPPRESSED_LOGGERS = ("asyncio",)

NO_TASK = "-"

_configured = False


class TaskContextFilter(logging.Filter):
    """Sets ``record.task`` to the running asyncio task's name."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            task = asyncio.current_task()
        except RuntimeError:
            task = None
        record.task = task.get_name() if task is not None else NO_TASK
        return True


def _coerce_level(level: Union[int, str]) -> int:
    if isinstance(level, str):
        name = level.upper()
        if not hasattr(logging, name):
            raise ValueError(f"Unknown log level '{level}'")
        return getattr(logging, name)
    return int(level)


def _prepare(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT))
    handler.addFilter(TaskContextFilter())
    return handler


def _build_handlers(level: int, console: bool, log_file: Optional[Path]) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []
    if console:
        handlers.append(_prepare(logging.StreamHandler(sys.stdout), level))
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(_prepare(
            RotatingFileHandler(
                log_file,
                maxBytes=MAX_LOG_BYTES,
                backupCount=LOG_BACKUP_COUNT,
                encoding="utf-8",
            ),
            level,
        ))
    if not handlers:
        # Neither console nor file requested; warnings still go to stderr.
        handlers.append(_prepare(logging.StreamHandler(sys.stderr), logging.WARNING))
    return handlers


def configure_logging(
    level: Union[int, str] = logging.INFO,
    *,
    force: bool = False,
    console: bool = True,
    log_file: Optional[Union[str, Path]] = None,
    suppressed_loggers: Iterable[str] = DEFAULT_SUPPRESSED_LOGGERS,
) -> None:
    """Install the root handlers used by the demo and by embedding applications.

    Args:
        level: Desired logging level (int or name such as "info").
        force: Rebuild handlers even if logging was already configured;
            otherwise a second call only changes the level.
        console: Whether to emit logs to stdout.
        log_file: Optional path for a rotating file handler.
        suppressed_loggers: Logger names held at ERROR.
    """

    global _configured
    numeric_level = _coerce_level(level)
    root = logging.getLogger()

    if not _configured or force:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            with contextlib.suppress(Exception):
                handler.close()
        for handler in _build_handlers(numeric_level, console, Path(log_file) if log_file else None):
            root.addHandler(handler)
        _configured = True

    root.setLevel(numeric_level)
    for name in suppressed_loggers:
        logging.getLogger(name).setLevel(logging.ERROR)


__all__ = [
    "configure_logging",
    "TaskContextFilter",
    "LOG_FORMAT",
    "LOG_DATEFMT",
    "DEFAULT_SUPPRESSED_LOGGERS",
]
