# flairc/logger.py
"""
flairc.logger
=============
Writes to <project>/.flair/logs/flair.log (or $FLAIR_LOGS_DIR/flair.log).
Rotates at 1 MB × 5 backups.
"""

from __future__ import annotations

import logging
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict

from flairc import env

# ─────────────────────────── internals
_LOCK = threading.RLock()
_LOGGERS: Dict[str, logging.Logger] = {}
_LOG_PATH: Path | None = None

_MAX_BYTES = 1_000_000
_BACKUP_COUNT = 5

# ─────────────────────────── helpers


def _log_path() -> Path:
    """Resolved once per process so every logger shares a single file."""
    global _LOG_PATH
    if _LOG_PATH is None:
        _LOG_PATH = env.get_logs_root() / "flair.log"
    return _LOG_PATH


def _make_handler() -> RotatingFileHandler:
    h = RotatingFileHandler(
        _log_path(),
        maxBytes=_MAX_BYTES,
        backupCount=_BACKUP_COUNT,
        encoding="utf-8",
        delay=True,  # open on first emit
    )
    h.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    return h


# ─────────────────────────── public API
def get_logger(name: str = "flairc") -> logging.Logger:
    """Thread-safe, idempotent logger getter."""
    with _LOCK:
        if name in _LOGGERS:
            return _LOGGERS[name]

        lg = logging.getLogger(name)
        lg.setLevel(logging.DEBUG)
        lg.propagate = False
        if not lg.handlers:
            lg.addHandler(_make_handler())

        _LOGGERS[name] = lg
        return lg


def get_current_log_file() -> Path:
    return _log_path()
