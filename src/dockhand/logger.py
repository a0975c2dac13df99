"""Structured logging for dockhand.

Everything is logged through the ``dockhand`` stdlib logger, which gets its
own stderr handler so that embedding applications keep control of the root
logger. The initial level is read straight from the environment because
this module is imported before settings are loaded.
"""

from __future__ import annotations

import logging
import os
import sys

import structlog

LOGGER_NAME = "dockhand"
_LEVEL_VARS = ("DOCKHAND_LOGGING__LEVEL", "LOG_LEVEL")


def _level_from_env() -> str:
    for var in _LEVEL_VARS:
        if value := os.environ.get(var):
            return value
    return "INFO"


def _resolve_level(level_name: str) -> int:
    level = logging.getLevelName(level_name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def _stdlib_logger() -> logging.Logger:
    stdlib_logger = logging.getLogger(LOGGER_NAME)
    if not stdlib_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(message)s"))
        stdlib_logger.addHandler(handler)
        stdlib_logger.propagate = False
    return stdlib_logger


def _processors() -> list[structlog.types.Processor]:
    return [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=False),
        structlog.dev.set_exc_info,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
    ]


def set_level(level_name: str) -> None:
    """Apply *level_name* to dockhand's logger. Unknown names mean INFO."""
    _stdlib_logger().setLevel(_resolve_level(level_name))


def _configure() -> structlog.stdlib.BoundLogger:
    set_level(_level_from_env())
    structlog.configure(
        processors=_processors(),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    return structlog.get_logger(LOGGER_NAME)


logger = _configure()


def _log_uncaught(
    exc_type: type[BaseException],
    exc_value: BaseException,
    exc_tb: object,
) -> None:
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_tb)  # type: ignore[arg-type]
        return
    logger.critical("Unhandled error, exiting", exc_info=(exc_type, exc_value, exc_tb))
    sys.exit(1)


def install_excepthook() -> None:
    """Route uncaught exceptions through the logger. Only the CLI installs this."""
    sys.excepthook = _log_uncaught
