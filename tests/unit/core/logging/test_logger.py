"""
Tests for MiddlewareLogger, get_logger and configure_logging.
"""

import json
import logging

import pytest

from http_middleware.core.logging import (
    LOGGER_NAME,
    LoggingConfig,
    MiddlewareLogger,
    configure_logging,
    correlation_id_scope,
    get_logger,
)


@pytest.fixture
def json_file_config(tmp_path):
    return LoggingConfig.create(
        level="DEBUG",
        format="json",
        enable_console=False,
        enable_file=True,
        file_path=str(tmp_path / "logs" / "app.log"),
        extra_fields={"service": "tests"},
    )


def read_lines(path):
    with open(path, encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]


class TestMiddlewareLogger:

    def test_configures_package_logger(self, logging_config):
        with MiddlewareLogger(logging_config) as logger:
            assert logger.logger is logging.getLogger(LOGGER_NAME)
            assert logger.logger.level == logging.DEBUG
            assert logger.logger.propagate is False

    def test_close_restores_propagation(self, logging_config):
        logger = MiddlewareLogger(logging_config)
        logger.close()
        logger.close()  # idempotent

        package_logger = logging.getLogger(LOGGER_NAME)
        assert logger.closed
        assert package_logger.propagate is True
        assert all(isinstance(h, logging.NullHandler) for h in package_logger.handlers)

    def test_writes_json_file_with_masked_extra(self, json_file_config):
        with MiddlewareLogger(json_file_config) as logger:
            with correlation_id_scope("req-7"):
                logger.info("Request completed", status_code=200, authorization="Bearer secret")

        [entry] = read_lines(json_file_config.file_path)
        assert entry["message"] == "Request completed"
        assert entry["status_code"] == 200
        assert entry["authorization"] == "***REDACTED***"
        assert entry["correlation_id"] == "req-7"
        assert entry["service"] == "tests"

    def test_module_loggers_use_package_handlers(self, json_file_config):
        with MiddlewareLogger(json_file_config):
            logging.getLogger("http_middleware.middlewares.swr_middleware").debug("Cache MISS")

        [entry] = read_lines(json_file_config.file_path)
        assert entry["logger"] == "http_middleware.middlewares.swr_middleware"
        assert entry["message"] == "Cache MISS"

    def test_level_filters_records(self, tmp_path):
        config = LoggingConfig.create(
            level="WARNING", format="json", enable_console=False,
            enable_file=True, file_path=str(tmp_path / "app.log"),
        )
        with MiddlewareLogger(config) as logger:
            logger.info("dropped")
            logger.warning("kept")

        assert [e["message"] for e in read_lines(config.file_path)] == ["kept"]

    def test_exception_includes_traceback(self, json_file_config):
        with MiddlewareLogger(json_file_config) as logger:
            try:
                raise RuntimeError("boom")
            except RuntimeError:
                logger.exception("failed")

        [entry] = read_lines(json_file_config.file_path)
        assert entry["level"] == "ERROR"
        assert "RuntimeError: boom" in entry["exception"]


class TestGlobalLogger:

    def test_configure_logging_replaces_global(self, logging_config):
        first = configure_logging(logging_config)
        second = configure_logging(logging_config)
        try:
            assert first.closed
            assert get_logger() is second
        finally:
            second.close()

    def test_get_logger_recreates_after_close(self, logging_config):
        logger = configure_logging(logging_config)
        logger.close()

        new_logger = get_logger(logging_config)
        try:
            assert new_logger is not logger
        finally:
            new_logger.close()
