"""Application logging helpers.

One stream handler per named logger, level taken from ``LOG_LEVEL``.
``configure`` lets the app factory push the level of the active settings module.
"""
from __future__ import annotations

import logging
import os
import threading
from typing import Dict, Optional

_LOCK = threading.Lock()
_LOGGERS: Dict[str, logging.Logger] = {}
_LEVEL_NAME: Optional[str] = None
_FORMAT = "[job-conciergerie] %(asctime)s %(levelname)s %(name)s %(message)s"


def _level() -> int:
    name = (_LEVEL_NAME or os.getenv("LOG_LEVEL") or "INFO").upper()
    return getattr(logging, name, logging.INFO)


def get_logger(name: str = "job_conciergerie") -> logging.Logger:
    existing = _LOGGERS.get(name)
    if existing is not None:
        return existing
    with _LOCK:
        if name in _LOGGERS:
            return _LOGGERS[name]
        logger = logging.getLogger(name)
        logger.setLevel(_level())
        if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(_FORMAT))
            logger.addHandler(handler)
        logger.propagate = False
        _LOGGERS[name] = logger
        return logger


def configure(level_name: Optional[str]) -> None:
    """Apply a new level to every logger handed out so far."""
    global _LEVEL_NAME
    with _LOCK:
        _LEVEL_NAME = level_name
        level = _level()
        for logger in _LOGGERS.values():
            logger.setLevel(level)


__all__ = ["configure", "get_logger"]
