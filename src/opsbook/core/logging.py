"""Operational logging for opsbook.

Execution logs live on each ``RunbookExecution``; this module configures the
process-wide sink those entries are mirrored to, plus the loggers the rest of
the package uses for startup and registry messages.
"""

import logging
import sys
from enum import Enum
from typing import Any

from rich.console import Console
from rich.logging import RichHandler


class LogLevel(str, Enum):
    """Log level enumeration."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def levelno(self) -> int:
        return getattr(logging, self.name)

    @classmethod
    def from_flags(cls, verbose: int, quiet: bool, default: "LogLevel") -> "LogLevel":
        """Pick a level from ``-v`` / ``-q`` flags, falling back to config.

        ``-v`` takes precedence over ``-q``.
        """
        if verbose >= 2:
            return cls.DEBUG
        if verbose == 1:
            return cls.INFO
        if quiet:
            return cls.ERROR
        return default


def setup_logging(
    level: LogLevel = LogLevel.WARNING,
    rich_output: bool = True,
) -> logging.Logger:
    """Route opsbook logs to stderr.

    Args:
        level: Threshold for the ``opsbook`` logger tree
        rich_output: Use a Rich handler instead of plain text lines

    Returns:
        The ``opsbook`` root logger
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if rich_output:
        # markup off: mirrored lines start with a literal [RUNBOOK:<id>] tag
        handler: logging.Handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            markup=False,
            log_time_format="%H:%M:%S",
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)-7s %(name)s: %(message)s",
                datefmt="%H:%M:%S",
            )
        )

    root_logger.addHandler(handler)
    root_logger.setLevel(level.levelno)

    logger = logging.getLogger("opsbook")
    logger.setLevel(level.levelno)

    logging.getLogger("asyncio").setLevel(logging.WARNING)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the ``opsbook`` namespace."""
    if name == "opsbook" or name.startswith("opsbook."):
        return logging.getLogger(name)
    return logging.getLogger(f"opsbook.{name}")


class StructuredLogger:
    """Logger that appends bound ``key=value`` context to each message."""

    def __init__(self, name: str, context: dict[str, Any] | None = None):
        self._logger = get_logger(name)
        self._context: dict[str, Any] = dict(context or {})

    @property
    def name(self) -> str:
        return self._logger.name

    @property
    def context(self) -> dict[str, Any]:
        return dict(self._context)

    def bind(self, **kwargs: Any) -> "StructuredLogger":
        """Return a logger carrying this logger's context plus ``kwargs``."""
        return StructuredLogger(self._logger.name, {**self._context, **kwargs})

    def _format_message(self, message: str, **kwargs: Any) -> str:
        context = {**self._context, **kwargs}
        if not context:
            return message
        pairs = " ".join(f"{k}={v}" for k, v in context.items())
        return f"{message} [{pairs}]"

    def log(self, level: int, message: str, **kwargs: Any) -> None:
        if self._logger.isEnabledFor(level):
            self._logger.log(level, self._format_message(message, **kwargs))

    def debug(self, message: str, **kwargs: Any) -> None:
        self.log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self.log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self.log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self.log(logging.ERROR, message, **kwargs)
