import io
import json
import logging
import sys

from registration_console.observability.logging import (
    NOISY_LOGGERS,
    ContextLogger,
    JsonFormatter,
    get_logger,
    setup_logging,
)


def test_json_formatter():
    formatter = JsonFormatter()
    log_record = logging.LogRecord(
        name="test_logger",
        level=logging.INFO,
        pathname="test.py",
        lineno=10,
        msg="test message",
        args=(),
        exc_info=None,
    )
    log_record.extra_fields = {"event": "user_created", "user_id": "u1"}
    log_record.query_key = "users"

    data = json.loads(formatter.format(log_record))

    assert data["message"] == "test message"
    assert data["level"] == "INFO"
    assert data["component"] == "test_logger"
    assert data["event"] == "user_created"
    assert data["user_id"] == "u1"
    assert data["query_key"] == "users"
    assert "timestamp" in data


def test_json_formatter_includes_exception():
    formatter = JsonFormatter()
    try:
        raise ValueError("boom")
    except ValueError:
        record = logging.LogRecord(
            "test", logging.ERROR, "test.py", 1, "failed", (), sys.exc_info()
        )

    data = json.loads(formatter.format(record))
    assert "ValueError: boom" in data["exception"]


def test_extra_fields_round_trip_through_handler():
    log_output = io.StringIO()
    handler = logging.StreamHandler(log_output)
    handler.setFormatter(JsonFormatter())

    logger = logging.getLogger("test_setup")
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    try:
        logger.info("setup test", extra={"extra_fields": {"test": "ok"}})
    finally:
        logger.removeHandler(handler)

    data = json.loads(log_output.getvalue())
    assert data["message"] == "setup test"
    assert data["test"] == "ok"


def test_setup_logging_installs_json_handler():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging("warning")
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


def test_get_logger():
    logger = get_logger("my_name")
    assert logger.name == "my_name"
    assert isinstance(logger, logging.Logger)


def capture(logger_name):
    log_output = io.StringIO()
    handler = logging.StreamHandler(log_output)
    handler.setFormatter(JsonFormatter())
    base = logging.getLogger(logger_name)
    base.addHandler(handler)
    base.setLevel(logging.INFO)
    return base, handler, log_output


def test_context_logger_adds_bound_fields():
    base, handler, log_output = capture("test_context")
    try:
        logger = get_logger("test_context", session_id="abc123")
        assert isinstance(logger, ContextLogger)
        logger.info(
            "search committed",
            extra={"extra_fields": {"query_key": ["users", "search", "jane"]}},
        )
        logger.bind(session_id="override").info("rebound")
    finally:
        base.removeHandler(handler)

    first, second = [json.loads(line) for line in log_output.getvalue().splitlines()]
    assert first["session_id"] == "abc123"
    assert first["query_key"] == ["users", "search", "jane"]
    assert first["component"] == "test_context"
    assert second["session_id"] == "override"


def test_call_site_fields_win_over_bound_context():
    base, handler, log_output = capture("test_context_override")
    try:
        logger = get_logger("test_context_override", session_id="s1", event="x")
        logger.info("done", extra={"extra_fields": {"event": "y"}})
    finally:
        base.removeHandler(handler)

    data = json.loads(log_output.getvalue())
    assert data["event"] == "y"
    assert data["session_id"] == "s1"
