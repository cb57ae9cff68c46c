"""Logging configuration for envsync."""

from envsync.logging.config import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
