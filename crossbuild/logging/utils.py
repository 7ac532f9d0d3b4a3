# Copyright (c) Meta Platforms, Inc. and affiliates.
# Modifications copyright (c) 2025 Logan Martel.
# Adapted from https://github.com/meta-pytorch/KernelAgent (Apache-2.0).

"""Logging helpers (rotating run logs, level resolution)."""

from __future__ import annotations

import logging

from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

DEFAULT_FORMAT = "%(levelname)s %(name)s: %(message)s"


def resolve_level(value: Optional[str], default: int = logging.INFO) -> int:
    """Map a level name such as ``debug`` to its numeric value."""

    if not value:
        return default
    level = logging.getLevelName(value.strip().upper())
    return level if isinstance(level, int) else default


def setup_file_logger(
    log_file: Path, name: str = "crossbuild"
) -> logging.Logger:
    """Attach a rotating file handler (idempotent per file).

    Only the handler gets a level; the logger keeps whatever level the
    console configuration gave it.
    """

    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger = logging.getLogger(name)
    marker = str(log_file)
    if not any(
        isinstance(handler, RotatingFileHandler)
        and getattr(handler, "_crossbuild_tag", None) == marker
        for handler in logger.handlers
    ):
        handler = RotatingFileHandler(
            log_file, maxBytes=2_000_000, backupCount=3
        )
        handler.setLevel(logging.INFO)
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(message)s")
        )
        handler._crossbuild_tag = marker  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger


def detach_file_logger(log_file: Path, name: str = "crossbuild") -> None:
    logger = logging.getLogger(name)
    marker = str(log_file)
    for handler in list(logger.handlers):
        if getattr(handler, "_crossbuild_tag", None) == marker:
            logger.removeHandler(handler)
            handler.close()
