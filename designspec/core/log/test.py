"""Tests for core logging module."""

import logging
from io import StringIO

import pytest

from .lib import RequestLogger, get_logger, resolve_level, setup_logging


class TestLogging:
    """Test core logging API."""

    @pytest.mark.unit
    def test_get_logger(self) -> None:
        """Verify logger instance creation."""
        logger = get_logger("test")
        assert logger.name == "test"
        assert isinstance(logger, logging.Logger)

    @pytest.mark.unit
    def test_get_logger_default_name(self) -> None:
        """Verify default logger name."""
        logger = get_logger()
        assert logger.name == "designspec"

    @pytest.mark.unit
    def test_setup_logging(self) -> None:
        """Verify logging setup accepts level names."""
        stream = StringIO()
        setup_logging(level="debug", stream=stream)
        logger = get_logger("test_setup")
        logger.debug("test message")

        # basicConfig is a no-op once logging is configured
        assert logger.level == logging.NOTSET

    @pytest.mark.unit
    def test_resolve_level(self) -> None:
        """Level names resolve case-insensitively with INFO fallback."""
        assert resolve_level("warning") == logging.WARNING
        assert resolve_level(logging.ERROR) == logging.ERROR
        assert resolve_level("chatty") == logging.INFO


class TestRequestLogger:
    """Test the request-scoped adapter."""

    @pytest.mark.unit
    def test_prefixes_request_id(self, caplog) -> None:
        """Messages carry the request id prefix."""
        logger = RequestLogger(get_logger("designspec.test_request"), "abc123")
        with caplog.at_level(logging.INFO, logger="designspec.test_request"):
            logger.info("generation.started")

        assert "[abc123] generation.started" in caplog.text
        assert logger.request_id == "abc123"
