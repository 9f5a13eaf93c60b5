# Copyright (c) Meta Platforms, Inc. and affiliates.
# Modifications copyright (c) 2025 Logan Martel.
# Adapted from https://github.com/meta-pytorch/KernelAgent (Apache-2.0).

"""Logging helpers."""

from __future__ import annotations

import logging
import os

from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DEFAULT_MAX_BYTES = 2_000_000
DEFAULT_BACKUP_COUNT = 3


def _find_file_handler(
    logger: logging.Logger, log_file: Path
) -> Optional[RotatingFileHandler]:
    target = os.path.abspath(log_file)
    for handler in logger.handlers:
        if (
            isinstance(handler, RotatingFileHandler)
            and handler.baseFilename == target
        ):
            return handler
    return None


def setup_file_logger(
    log_file: Path,
    name: str = "promptshape",
    level: int = logging.INFO,
    *,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
) -> logging.Logger:
    """Attach a rotating file handler for ``log_file`` to logger ``name``.

    Calling this again for the same file only updates the level, so repeated
    CLI invocations in one process do not duplicate log lines.
    """

    logger = logging.getLogger(name)
    logger.setLevel(level)
    handler = _find_file_handler(logger, log_file)
    if handler is None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    handler.setLevel(level)
    return logger
