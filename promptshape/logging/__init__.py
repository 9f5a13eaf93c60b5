"""Logging utilities."""

from .utils import LOG_FORMAT, setup_file_logger

__all__ = ["LOG_FORMAT", "setup_file_logger"]
