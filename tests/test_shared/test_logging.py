"""Tests for structured JSON logging."""
from __future__ import annotations

import json
import logging
import sys

from scs_template.shared.logging import JSONFormatter, end_run, run_id_var, setup_logging, start_run


def _record(msg: str = "hello %s", args: tuple = ("world",)) -> logging.LogRecord:
    return logging.LogRecord(
        name="scs_template.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=args,
        exc_info=None,
    )


class TestJSONFormatter:
    def test_fields(self):
        entry = json.loads(JSONFormatter(service_name="scs-template").format(_record()))
        assert entry["level"] == "INFO"
        assert entry["service_name"] == "scs-template"
        assert entry["logger"] == "scs_template.test"
        assert entry["message"] == "hello world"
        assert "timestamp" in entry
        assert "exception" not in entry

    def test_exception_included(self):
        record = _record()
        try:
            raise ValueError("boom")
        except ValueError:
            record.exc_info = sys.exc_info()
        entry = json.loads(JSONFormatter().format(record))
        assert entry["exception"] == "boom"

    def test_run_id_from_context(self):
        token = start_run()
        try:
            entry = json.loads(JSONFormatter().format(_record()))
            assert entry["run_id"] == run_id_var.get()
            assert entry["run_id"] != ""
        finally:
            end_run(token)
        assert run_id_var.get() == ""


class TestSetupLogging:
    def test_handlers_replaced_not_duplicated(self):
        logger = setup_logging("scs-template-test", level="debug")
        logger = setup_logging("scs-template-test", level="debug")
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)
        assert logger.level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self):
        logger = setup_logging("scs-template-test-2", level="chatty")
        assert logger.level == logging.INFO
