"""Unit tests for the logging utilities."""

import logging

import pytest

from cert_preflight.utils.logging import (
    ROOT_LOGGER,
    LoggerAdapter,
    StructuredFormatter,
    configure_logging,
    get_logger,
    get_logger_with_context,
)


def _record(msg: str, fields: dict | None = None) -> logging.LogRecord:
    record = logging.LogRecord(ROOT_LOGGER, logging.INFO, __file__, 1, msg, None, None)
    if fields is not None:
        record.extra_fields = fields
    return record


class TestStructuredFormatter:
    """Tests for StructuredFormatter."""

    def test_appends_fields(self):
        formatter = StructuredFormatter("%(levelname)s: %(message)s")
        line = formatter.format(_record("check completed: HasLicense", {"result": True, "err": None}))
        assert line == "INFO: check completed: HasLicense result=True err=None"

    def test_without_fields(self):
        formatter = StructuredFormatter("%(message)s")
        assert formatter.format(_record("plain")) == "plain"
        assert formatter.format(_record("empty", {})) == "empty"


class TestGetLogger:
    def test_prefixes_module_names(self):
        assert get_logger("core.engine").name == "cert_preflight.core.engine"

    def test_keeps_package_names(self):
        assert get_logger("cert_preflight.core.poll").name == "cert_preflight.core.poll"


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_sets_level_and_handler(self):
        configure_logging(level="debug")
        logger = logging.getLogger(ROOT_LOGGER)

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, StructuredFormatter)
        assert logger.propagate is False

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "logs" / "preflight.log"
        configure_logging(level="INFO", log_file=log_file)

        get_logger("test").info("written", extra={"extra_fields": {"image": "app:1.0"}})
        for handler in logging.getLogger(ROOT_LOGGER).handlers:
            handler.flush()

        assert "written image=app:1.0" in log_file.read_text()

    def test_unknown_level(self):
        with pytest.raises(AttributeError):
            configure_logging(level="chatty")


class TestLoggerWithContext:
    """Tests for get_logger_with_context."""

    def test_context_fields_merged(self, preflight_logs):
        log = get_logger_with_context("core.olm", namespace="etcd")
        assert isinstance(log, LoggerAdapter)

        log.info("created", extra={"extra_fields": {"kind": "Subscription"}})

        record = preflight_logs.records[-1]
        assert record.extra_fields == {"namespace": "etcd", "kind": "Subscription"}
