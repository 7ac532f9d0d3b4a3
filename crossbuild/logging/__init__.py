"""Logging utilities."""

from .utils import (
    DEFAULT_FORMAT,
    detach_file_logger,
    resolve_level,
    setup_file_logger,
)

__all__ = [
    "DEFAULT_FORMAT",
    "detach_file_logger",
    "resolve_level",
    "setup_file_logger",
]
