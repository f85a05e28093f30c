"""Logging setup for AdmitFlow.

Everything under the ``admitflow`` logger goes to one rotating file (and the
console unless disabled). Handlers carry a redaction filter, so passwords and
Supabase keys that end up in exception messages never reach the log file.
"""

from __future__ import annotations

import logging
import os
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

ROOT_LOGGER = "admitflow"

DEFAULT_LOG_DIR = "logs"
DEFAULT_LOG_FILE = "admitflow.log"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10MB
DEFAULT_BACKUP_COUNT = 5
DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_SENSITIVE_PATTERNS = [
    (re.compile(r"eyJ[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+"), "[JWT]"),
    (re.compile(r"Bearer [a-zA-Z0-9._-]+", re.IGNORECASE), "Bearer [REDACTED]"),
    (
        re.compile(r"apikey[\"']?\s*[:=]\s*[\"']?[a-zA-Z0-9._-]+", re.IGNORECASE),
        "apikey=[REDACTED]",
    ),
    (
        re.compile(r"(\"?password\"?\s*[:=]\s*)(\"[^\"]*\"|'[^']*'|\S+)", re.IGNORECASE),
        r"\1[REDACTED]",
    ),
]


def sanitize_for_log(text: str) -> str:
    """Redact passwords, bearer tokens and JWT-style service keys."""
    for pattern, replacement in _SENSITIVE_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def truncate_output(output: str, max_length: int = 2000) -> str:
    """Truncate long output (e.g. HTTP response bodies) for logging."""
    if len(output) <= max_length:
        return output
    return output[:max_length] + f"\n... [truncated, {len(output) - max_length} more chars]"


class RedactingFilter(logging.Filter):
    """Rewrites each record's message through sanitize_for_log."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = sanitize_for_log(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def _build_handlers(
    log_path: Path, max_bytes: int, backup_count: int, console: bool
) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [
        RotatingFileHandler(
            log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    ]
    if console:
        handlers.append(logging.StreamHandler())

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    redactor = RedactingFilter()
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(redactor)
    return handlers


def setup_logging(
    log_dir: str | Path | None = None,
    log_file: str = DEFAULT_LOG_FILE,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    level: str | None = None,
    console: bool = True,
) -> logging.Logger:
    """Install the AdmitFlow handlers, replacing any from an earlier call.

    Args:
        log_dir: Directory for log files; ADMITFLOW_LOG_DIR or 'logs' when None.
        log_file: Log file name.
        max_bytes: Size at which the file rotates.
        backup_count: Rotated files to keep.
        level: Level name; ADMITFLOW_LOG_LEVEL or INFO when None.
        console: Also log to stderr.

    Returns:
        The ``admitflow`` logger.
    """
    log_dir = Path(log_dir or os.environ.get("ADMITFLOW_LOG_DIR", DEFAULT_LOG_DIR))
    log_dir.mkdir(parents=True, exist_ok=True)
    level = (level or os.environ.get("ADMITFLOW_LOG_LEVEL", DEFAULT_LOG_LEVEL)).upper()
    log_level = logging.getLevelName(level)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    log_path = log_dir / log_file
    for handler in _build_handlers(log_path, max_bytes, backup_count, console):
        handler.setLevel(log_level)
        logger.addHandler(handler)
    logger.setLevel(log_level)

    logger.info("AdmitFlow logging initialized (level=%s, file=%s)", level, log_path)
    return logger
