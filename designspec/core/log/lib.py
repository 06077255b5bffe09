"""Core logging implementation for designspec."""

import logging
import sys
from collections.abc import MutableMapping
from typing import Any, Optional

__all__ = ["RequestLogger", "get_logger", "resolve_level", "setup_logging"]


def resolve_level(level: int | str) -> int:
    """Resolve a level name such as "debug" to its numeric value.

    Unknown names resolve to INFO.
    """
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: int | str = logging.INFO, stream=sys.stderr) -> None:
    """Configure basic logging.

    Args:
        level: Logging level, numeric or by name.
        stream: Output stream.
    """
    logging.basicConfig(
        level=resolve_level(level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=stream,
    )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Name of the logger.

    Returns:
        Logger instance.
    """
    return logging.getLogger(name or "designspec")


class RequestLogger(logging.LoggerAdapter):
    """Logger adapter that tags every message with a request id."""

    def __init__(self, logger: logging.Logger, request_id: str):
        super().__init__(logger, {"request_id": request_id})
        self.request_id = request_id

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        return f"[{self.request_id}] {msg}", kwargs
