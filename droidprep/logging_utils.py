"""Logging setup shared by the droidprep CLI.

One rotating log file plus a console handler. Per-file sync traces
(``copy``/``mkdir``/``delete``/``write``) are filtered out of both unless the
verbose preset is active or ``DROIDPREP_TRACE_FILES`` is set.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
from enum import Enum
from pathlib import Path
from typing import Optional


DEFAULT_LOG_PATH = Path.home() / ".droidprep" / "droidprep.log"

PLAIN_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
KEY_VALUE_FORMAT = "time=%(asctime)s level=%(levelname)s logger=%(name)s msg=%(message)s"


class LogMode(str, Enum):
    """Logging presets selected with ``--log-mode``."""

    QUIET = "quiet"
    NORMAL = "normal"
    VERBOSE = "verbose"


_LOG_MODE: LogMode = LogMode.NORMAL
_FILE_TRACE_FLAG = "DROIDPREP_TRACE_FILES"
_FILE_OP_PREFIXES = ("  copy ", "  mkdir ", "  delete ", "  write ")


def get_default_log_path() -> Path:
    return DEFAULT_LOG_PATH


def set_log_mode(mode: LogMode | str | None) -> LogMode:
    """Store the active preset; unknown names fall back to NORMAL."""
    global _LOG_MODE
    if isinstance(mode, LogMode):
        _LOG_MODE = mode
    else:
        try:
            _LOG_MODE = LogMode((mode or "").lower())
        except ValueError:
            _LOG_MODE = LogMode.NORMAL
    return _LOG_MODE


def get_log_mode() -> LogMode:
    return _LOG_MODE


def _file_trace_allowed() -> bool:
    if os.environ.get(_FILE_TRACE_FLAG, "").strip().lower() in {"1", "true", "yes", "on"}:
        return True
    return _LOG_MODE is LogMode.VERBOSE


class _FileOpFilter(logging.Filter):
    """Drops per-file sync records unless tracing is enabled."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        return not (record.getMessage().startswith(_FILE_OP_PREFIXES) and not _file_trace_allowed())


_FILE_OP_FILTER = _FileOpFilter()


def _levels(level: str | int, mode: LogMode) -> tuple[int, int]:
    """Return (file level, console level) for *level* under *mode*."""
    resolved = getattr(logging, level.upper(), logging.INFO) if isinstance(level, str) else int(level)
    if mode is LogMode.VERBOSE:
        resolved = min(resolved, logging.DEBUG)
    console = max(logging.WARNING, resolved) if mode is LogMode.QUIET else resolved
    return resolved, console


def _is_console(handler: logging.Handler) -> bool:
    return type(handler) is logging.StreamHandler


def setup_logging(
    *,
    level: str | int = "INFO",
    log_file: Optional[str | Path] = None,
    json_format: bool = False,
    logger_name: Optional[str] = None,
    log_mode: LogMode | str | None = None,
) -> logging.Logger:
    """Configure the root logger (or *logger_name*) once.

    Calling again only updates the levels of the handlers already installed.
    A log file that cannot be opened leaves the console handler alone.
    """
    mode = set_log_mode(log_mode) if log_mode is not None else _LOG_MODE
    file_level, console_level = _levels(level, mode)
    logger = logging.getLogger(logger_name)
    logger.setLevel(file_level)

    if not logger.handlers:
        formatter = logging.Formatter(KEY_VALUE_FORMAT if json_format else PLAIN_FORMAT, datefmt="%H:%M:%S")
        log_path = Path(log_file) if log_file else get_default_log_path()
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            logger.addHandler(logging.handlers.RotatingFileHandler(
                log_path, maxBytes=1_000_000, backupCount=3, encoding="utf-8"
            ))
        except OSError as exc:
            logging.getLogger(__name__).debug("Log file %s unavailable: %s", log_path, exc)
        logger.addHandler(logging.StreamHandler())
        for handler in logger.handlers:
            handler.setFormatter(formatter)
            handler.addFilter(_FILE_OP_FILTER)

    for handler in logger.handlers:
        handler.setLevel(console_level if _is_console(handler) else file_level)
    return logger
