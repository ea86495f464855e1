"""Tests for structured logging helpers."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from notification_service.infra.logging import (
    ContextInjectingFilter,
    JSONFormatter,
    clear_log_context,
    get_lazy_logger,
    get_log_context,
    remove_from_log_context,
    set_log_context,
)


def _record(msg: str = "Dispatch completed", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="notification_service.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture(autouse=True)
def _clean_context():
    clear_log_context()
    yield
    clear_log_context()


def test_json_formatter_emits_one_line_with_extras() -> None:
    formatter = JSONFormatter(static={"service": "notification-service"})

    line = formatter.format(_record(operation="dispatcher.dispatch", total=2))
    data = json.loads(line)

    assert "\n" not in line
    assert data["level"] == "INFO"
    assert data["message"] == "Dispatch completed"
    assert data["service"] == "notification-service"
    assert data["operation"] == "dispatcher.dispatch"
    assert data["total"] == 2
    assert data["timestamp"].endswith("Z")


def test_context_filter_injects_without_overriding_extra() -> None:
    set_log_context(event_type="signup", job_id="job-1")
    record = _record(job_id="explicit")

    assert ContextInjectingFilter().filter(record) is True
    assert record.event_type == "signup"
    assert record.job_id == "explicit"


def test_remove_from_log_context() -> None:
    set_log_context(event_type="signup", job_id="job-1")

    remove_from_log_context("event_type")

    assert get_log_context() == {"job_id": "job-1"}


def test_lazy_logger_skips_message_when_disabled(caplog) -> None:
    calls = []

    def _expensive() -> str:
        calls.append(1)
        return "expensive"

    lazy = get_lazy_logger("notification_service.test.lazy")
    with caplog.at_level(logging.INFO, logger="notification_service.test.lazy"):
        lazy.debug(_expensive)
        lazy.info(lambda: "built on demand")

    assert calls == []
    assert "built on demand" in caplog.text


def test_json_formatter_keeps_traceback_on_one_line() -> None:
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = _record()
        record.exc_info = sys.exc_info()

    line = JSONFormatter().format(record)

    assert "\n" not in line
    assert "RuntimeError: boom" in json.loads(line)["exception"]
