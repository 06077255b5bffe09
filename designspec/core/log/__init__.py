"""Logging micro API for designspec."""

from .lib import RequestLogger, get_logger, resolve_level, setup_logging

__all__ = ["RequestLogger", "get_logger", "resolve_level", "setup_logging"]
