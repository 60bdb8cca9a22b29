"""Recitation session logger configuration.

Configures a **single** file-backed logger for the whole ``verseflow``
package so a recitation session can be replayed from the log (every
state transition, match result and port failure is logged by the
engine and the ports).

Goals
-----
- Write to ``recitation_debug.log`` in the **repo root** unless a path
  is given.
- Be idempotent (safe to call multiple times).
- Work even if other parts of the app already configured logging.
- Emit a visible *startup* entry so users can confirm the log is active.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from threading import Lock
from typing import Optional

_LOCK = Lock()
_CONFIGURED = False

LOGGER_NAME = "verseflow"
DEFAULT_LOG_NAME = "recitation_debug.log"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_repo_root() -> Path:
    """Return the repository root directory."""
    return Path(__file__).resolve().parents[2]


def get_session_log_path(filename: str = DEFAULT_LOG_NAME) -> Path:
    """Return the absolute log path; relative names resolve against repo root."""
    path = Path(filename).expanduser()
    if path.is_absolute():
        return path
    return get_repo_root() / path


def configure_session_logger(
    log_path: Optional[str | os.PathLike] = None,
    level: int | str = logging.DEBUG,
    force: bool = False,
) -> logging.Logger:
    """Attach a FileHandler to the ``verseflow`` logger and return it.

    :param log_path: File to write; defaults to ``recitation_debug.log``
        in the repository root.
    :param level: Level for the package logger and the file handler.
    :param force: Add a fresh handler and write a startup line even if
        the logger seems configured already.
    """
    global _CONFIGURED

    with _LOCK:
        logger = logging.getLogger(LOGGER_NAME)
        if isinstance(level, str):
            level = logging.getLevelName(level.upper())
            if not isinstance(level, int):
                level = logging.DEBUG
        logger.setLevel(level)

        path = get_session_log_path(str(log_path) if log_path else DEFAULT_LOG_NAME)
        path.parent.mkdir(parents=True, exist_ok=True)

        has_matching_file_handler = any(
            isinstance(h, logging.FileHandler)
            and os.path.abspath(getattr(h, "baseFilename", "")) == os.path.abspath(path)
            for h in logger.handlers
        )

        if force or not has_matching_file_handler:
            fh = logging.FileHandler(path, mode="a", encoding="utf-8")
            fh.setLevel(level)
            fh.setFormatter(logging.Formatter(LOG_FORMAT))
            logger.addHandler(fh)

        if force or not _CONFIGURED:
            logger.info("=== Recitation session logging started (pid=%s) ===", os.getpid())
            for h in logger.handlers:
                h.flush()
            _CONFIGURED = True

        return logger


__all__ = ["configure_session_logger", "get_repo_root", "get_session_log_path"]
