"""Logging helpers for assetpipe."""

from .setup import LOGGER_NAME, configure_logging, log_file_of

__all__ = ["LOGGER_NAME", "configure_logging", "log_file_of"]
