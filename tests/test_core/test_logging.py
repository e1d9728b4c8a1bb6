"""Tests for logging configuration."""

import pytest
import structlog
from structlog.stdlib import BoundLogger
from structlog.testing import LogCapture
from structlog.types import BindableLogger

from content_core.core.logging import configure_logging, get_logger, get_request_logger


@pytest.fixture
def log_output() -> LogCapture:
    """Fixture to capture log output."""
    return LogCapture()


@pytest.fixture(autouse=True)
def setup_logging(log_output: LogCapture):
    """Capture log entries, restoring test logging afterwards."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            log_output,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
    yield
    configure_logging(testing=True)


def test_configure_logging_uses_json_renderer() -> None:
    """Production logging renders JSON."""
    configure_logging()
    processors = structlog.get_config()["processors"]
    assert any(
        p.__class__.__name__ == "JSONRenderer" for p in processors
    ), "JSONRenderer not configured"


def test_configure_logging_for_tests_uses_key_value_renderer() -> None:
    """Test logging renders key-value pairs."""
    configure_logging(testing=True)
    processors = structlog.get_config()["processors"]
    assert any(p.__class__.__name__ == "KeyValueRenderer" for p in processors)


def test_get_logger() -> None:
    """get_logger returns a configured logger."""
    logger = get_logger(__name__)
    assert isinstance(logger, BoundLogger | BindableLogger)


def test_request_logger_binds_request_id(log_output: LogCapture) -> None:
    """Request loggers carry the request ID on every entry."""
    logger = get_request_logger("req-1")
    logger.info("page_rendered")

    assert log_output.entries[-1]["request_id"] == "req-1"
    assert log_output.entries[-1]["event"] == "page_rendered"


def test_contextvars_are_merged(log_output: LogCapture) -> None:
    """Correlation IDs bound to the context appear in entries."""
    structlog.contextvars.bind_contextvars(correlation_id="abc")
    try:
        get_logger().info("fetch_cycle_started")
    finally:
        structlog.contextvars.clear_contextvars()

    assert log_output.entries[-1]["correlation_id"] == "abc"
