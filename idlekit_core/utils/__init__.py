"""
Idlekit Utils - Helper functions and utilities.

Logging and number formatting.
"""

from idlekit_core.utils.logging import setup_logging, get_logger, log_operation, log_error
from idlekit_core.utils.formatting import format_number, format_time

__all__ = [
    "setup_logging",
    "get_logger",
    "log_operation",
    "log_error",
    "format_number",
    "format_time",
]
