"""
Unit tests for logging utilities.
"""

import logging

import pytest

from classboard.utils.logger import QueueContextFilter, queue_logger, setup_logger


@pytest.fixture
def logger_name(request):
    """Unique logger name, cleaned up after the test."""
    name = f"classboard_test.{request.node.name}"
    yield name
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


class TestSetupLogger:
    """Logger configuration."""

    def test_file_output_carries_queue_key(self, tmp_path, logger_name):
        """Test records show the teacher-day key, or "-" without one."""
        log_file = tmp_path / "logs" / "classboard.log"
        logger = setup_logger(logger_name, logging.DEBUG, str(log_file))

        logger.info("plain message")
        queue_logger(logger, "t1", "2025-06-01").info("queue message")
        for handler in logger.handlers:
            handler.flush()

        lines = log_file.read_text(encoding="utf-8").splitlines()
        assert "[-] plain message" in lines[0]
        assert "[t1@2025-06-01] queue message" in lines[1]

    def test_no_duplicate_handlers(self, logger_name):
        """Test calling setup twice keeps one set of handlers."""
        first = setup_logger(logger_name)
        second = setup_logger(logger_name)

        assert first is second
        assert len(second.handlers) == 1


class TestQueueContext:
    """Queue context helpers."""

    def test_filter_fills_missing_key(self):
        """Test the filter sets a placeholder key."""
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)

        assert QueueContextFilter().filter(record)
        assert record.queue_key == "-"

    def test_adapter_keeps_explicit_key(self):
        """Test an explicit queue_key in extra wins."""
        adapter = queue_logger(logging.getLogger("classboard_test"), "t1", "2025-06-01")

        _, kwargs = adapter.process("msg", {"extra": {"queue_key": "t2@2025-06-01"}})
        _, default_kwargs = adapter.process("msg", {})

        assert kwargs["extra"]["queue_key"] == "t2@2025-06-01"
        assert default_kwargs["extra"]["queue_key"] == "t1@2025-06-01"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
