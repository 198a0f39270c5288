"""Tests for the log formatters and configure_logging()."""

import json
import logging

import pytest
from flask import Flask

from portal.middleware.logging_config import ConsoleFormatter, JSONLineFormatter, configure_logging


def _record(msg="Contact created", **extra):
    record = logging.LogRecord("portal.services.contact_service", logging.INFO, __file__, 1, msg, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture()
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestFormatters:
    def test_json_line_carries_context_fields(self):
        line = JSONLineFormatter().format(_record(resource="Contact", record_id="c-1", request_id="r-1"))
        entry = json.loads(line)
        assert entry["msg"] == "Contact created"
        assert entry["level"] == "INFO"
        assert entry["resource"] == "Contact"
        assert entry["record_id"] == "c-1"
        assert entry["request_id"] == "r-1"
        assert "operation" not in entry

    def test_console_line_appends_short_request_id_and_context(self):
        line = ConsoleFormatter().format(_record(request_id="0123456789abcdef", resource="Server"))
        assert "Contact created [01234567]" in line
        assert line.endswith("resource=Server")


class TestConfigureLogging:
    def _app(self, **config):
        app = Flask("logging-test")
        app.config.update(config)
        return app

    def test_production_uses_json_and_configured_level(self, restore_root_logger):
        configure_logging(self._app(DEBUG=False, TESTING=False, LOG_LEVEL="warning"))
        assert restore_root_logger.level == logging.WARNING
        assert len(restore_root_logger.handlers) == 1
        assert isinstance(restore_root_logger.handlers[0].formatter, JSONLineFormatter)

    def test_development_defaults_to_debug_console(self, restore_root_logger):
        configure_logging(self._app(DEBUG=True, TESTING=False))
        assert restore_root_logger.level == logging.DEBUG
        assert isinstance(restore_root_logger.handlers[0].formatter, ConsoleFormatter)

    def test_unknown_level_falls_back_to_info(self, restore_root_logger):
        configure_logging(self._app(DEBUG=False, TESTING=True, LOG_LEVEL="chatty"))
        assert restore_root_logger.level == logging.INFO

    def test_repeated_setup_does_not_stack_handlers(self, restore_root_logger):
        app = self._app(TESTING=True)
        configure_logging(app)
        configure_logging(app)
        assert len(restore_root_logger.handlers) == 1
