"""Logging utilities for the pocket_fx package."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_CONFIGURED = False


def get_logger(name: str = "pocket_fx", *, level: int = logging.INFO) -> logging.Logger:
    """Return a named logger, installing a plain root formatter on first use."""
    global _CONFIGURED
    if not _CONFIGURED:
        logging.basicConfig(level=level, format=LOG_FORMAT)
        _CONFIGURED = True
    return logging.getLogger(name)
