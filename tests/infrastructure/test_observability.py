"""Structured logging — JSON shape and idempotent setup."""

import json
import logging
import sys

from projects_api.infrastructure.observability import JSONFormatter, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "projects_api.test", logging.ERROR, __file__, 1, "something %s", ("failed",), None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_known_extra_fields():
    line = JSONFormatter().format(
        _record(board_id="abc123", path="/api/test", method="GET", unrelated="x"),
    )
    log = json.loads(line)
    assert log["level"] == "ERROR"
    assert log["logger"] == "projects_api.test"
    assert log["message"] == "something failed"
    assert log["board_id"] == "abc123"
    assert log["path"] == "/api/test"
    assert log["method"] == "GET"
    assert "unrelated" not in log


def test_json_formatter_includes_exception_text():
    try:
        raise ValueError("boom")
    except ValueError:
        record = _record()
        record.exc_info = sys.exc_info()
    log = json.loads(JSONFormatter().format(record))
    assert "ValueError: boom" in log["exception"]


def test_setup_logging_does_not_stack_handlers():
    before = len(logging.root.handlers)
    level = logging.root.level
    setup_logging("DEBUG", "json")
    setup_logging("INFO", "text")
    try:
        assert len(logging.root.handlers) == before + 1
        assert logging.root.level == logging.INFO
    finally:
        for handler in logging.root.handlers[before:]:
            logging.root.removeHandler(handler)
        logging.root.setLevel(level)
