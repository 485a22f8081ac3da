"""Utility modules for voxsync."""

from .common import format_duration, format_size, format_timestamp, truncate
from .logging import configure_logging, get_logger, setup_logging

__all__ = [
    "setup_logging",
    "configure_logging",
    "get_logger",
    "format_duration",
    "format_size",
    "format_timestamp",
    "truncate",
]
