"""
Logging for idlekit.

Every engine component logs through ``idlekit.*`` loggers, so a host
application can silence or redirect a simulation in one place. Records
logged with ``log_operation(..., sim_time=...)`` carry the simulation clock
and are stamped with it, which keeps a headless run that covers hours of game
time readable.
"""

from __future__ import annotations

import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Literal

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]

ROOT_LOGGER_NAME = "idlekit"

_loggers: dict[str, logging.Logger] = {}


# ============================================================================
# Formatter
# ============================================================================


class IdlekitFormatter(logging.Formatter):
    """``[wall time] LEVEL [component] [t=sim time] message``.

    The component drops the ``idlekit.`` prefix; the simulation time only
    appears on records that carry a ``sim_time`` attribute.
    """

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = False):
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created, UTC).strftime("%H:%M:%S")

        level = f"{record.levelname:8}"
        if self.use_colors and record.levelname in self.LEVEL_COLORS:
            level = f"{self.LEVEL_COLORS[record.levelname]}{level}{self.RESET}"

        component = record.name.removeprefix(f"{ROOT_LOGGER_NAME}.")
        parts = [f"[{stamp}]", level, f"[{component:20}]"]

        sim_time = getattr(record, "sim_time", None)
        if sim_time is not None:
            parts.append(f"[t={sim_time:.1f}s]")

        parts.append(record.getMessage())
        if record.exc_info:
            parts.append(self.formatException(record.exc_info))
        return " ".join(parts)


# ============================================================================
# Setup
# ============================================================================


def setup_logging(
    level: LogLevel = "INFO",
    log_file: str | Path | None = None,
    console_output: bool = True,
) -> None:
    """Configure the ``idlekit`` logger tree, replacing earlier handlers.

    Args:
        level: Minimum level captured
        log_file: Optional file that receives the same records, uncolored
        console_output: Whether to log to stderr (colored on a terminal)
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    root_logger.handlers = []

    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(IdlekitFormatter(use_colors=sys.stderr.isatty()))
        root_logger.addHandler(console_handler)

    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(IdlekitFormatter())
        root_logger.addHandler(file_handler)

    root_logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Cached logger under the ``idlekit`` namespace.

    Usage:
        logger = get_logger("engine.resources")
        logger.warning("Unknown resource: gold")
    """
    full_name = name if name.startswith(f"{ROOT_LOGGER_NAME}.") else f"{ROOT_LOGGER_NAME}.{name}"
    if full_name not in _loggers:
        _loggers[full_name] = logging.getLogger(full_name)
    return _loggers[full_name]


# ============================================================================
# Helpers
# ============================================================================


def log_operation(
    logger: logging.Logger,
    operation: str,
    details: dict | None = None,
    level: int = logging.INFO,
    sim_time: float | None = None,
) -> None:
    """Log ``operation: k=v, ...``, stamped with ``sim_time`` when given."""
    message = operation
    if details:
        message = f"{operation}: " + ", ".join(f"{k}={v}" for k, v in details.items())
    extra = {"sim_time": sim_time} if sim_time is not None else None
    logger.log(level, message, extra=extra)


def log_error(
    logger: logging.Logger,
    operation: str,
    error: Exception,
    context: dict | None = None,
) -> None:
    """Log a failed operation with its exception, context and traceback."""
    message = f"FAILED {operation}: {type(error).__name__}: {error}"
    if context:
        message += " | Context: " + ", ".join(f"{k}={v}" for k, v in context.items())
    logger.error(message, exc_info=True)


# Warnings and up on stderr until a host configures logging itself
setup_logging(level="WARNING")
