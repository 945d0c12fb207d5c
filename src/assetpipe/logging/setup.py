"""Logging setup for the `assetpipe` logger tree."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOGGER_NAME = "assetpipe"
LOG_FILENAME = f"{LOGGER_NAME}.log"
LOG_FORMAT = "%(asctime)s %(process)08x %(thread)08x %(levelname).1s %(module)s %(message)s"
MAX_BYTES = 2 * 1024 * 1024
BACKUP_COUNT = 5

_LEVEL_ALIASES = {"WARN": "WARNING"}


def configure_logging(
    log_path: Path | None = None,
    level: str = "INFO",
    mirror_to_console: bool = True,
) -> logging.Logger:
    """Point the package logger at a rotating log file, optionally echoing to stderr.

    Module loggers (`assetpipe.core.orchestrator`, `assetpipe.capabilities.registry`,
    ...) carry no handlers of their own and propagate here. Calling this again
    replaces the previous handlers.
    """

    numeric_level = _normalize_level(level)
    logger = logging.getLogger(LOGGER_NAME)
    _detach_handlers(logger)
    logger.propagate = False
    logger.setLevel(numeric_level)

    handlers: list[logging.Handler] = [_rotating_file_handler(_resolve_log_path(log_path))]
    if mirror_to_console:
        handlers.append(logging.StreamHandler())

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug(
        "Logging to %s at level %s.", log_file_of(logger), logging.getLevelName(numeric_level)
    )
    return logger


def log_file_of(logger: logging.Logger) -> Path | None:
    """Return the file a configured logger writes to, if any."""

    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler):
            return Path(handler.baseFilename)
    return None


def _rotating_file_handler(file_path: Path) -> RotatingFileHandler:
    file_path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        file_path,
        maxBytes=MAX_BYTES,
        backupCount=BACKUP_COUNT,
        encoding="utf-8",
    )


def _detach_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def _normalize_level(level: str) -> int:
    candidate = level.strip().upper()
    candidate = _LEVEL_ALIASES.get(candidate, candidate)
    numeric = logging.getLevelName(candidate)
    if not isinstance(numeric, int):
        raise ValueError(f"Unsupported log level: {level!r}")
    return numeric


def _resolve_log_path(log_path: Path | None) -> Path:
    """Resolve the log file; a directory, or a path without a suffix, gets `assetpipe.log`."""

    if log_path is None:
        return Path.cwd() / LOG_FILENAME

    candidate = log_path if log_path.is_absolute() else Path.cwd() / log_path
    if candidate.is_dir() or candidate.suffix == "":
        return candidate / LOG_FILENAME
    return candidate
