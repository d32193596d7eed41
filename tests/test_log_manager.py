from __future__ import annotations

import json
import logging

from autoshutdown.observability.log_manager import get_component_logger


def _event(record: logging.LogRecord) -> dict:
    message = record.getMessage()
    assert message.startswith("event ")
    return json.loads(message[len("event "):])


def test_component_logger_extracts_key_value_fields(caplog) -> None:
    logger = get_component_logger("tests.component")

    with caplog.at_level(logging.INFO):
        logger.info("Armed event=auto_shutdown.armed count=3")

    payload = _event(caplog.records[-1])
    assert payload["event"] == "auto_shutdown.armed"
    assert payload["component"] == "tests.component"
    assert payload["fields"] == {"count": "3"}


def test_component_logger_defaults_event_name_and_uses_extra(caplog) -> None:
    logger = get_component_logger("tests.component")

    with caplog.at_level(logging.WARNING):
        logger.warning("Clamped to %s", 3600, extra={"status": "clamped", "configured": 90000})

    record = caplog.records[-1]
    payload = _event(record)
    assert record.levelno == logging.WARNING
    assert payload["event"] == "tests.component.log"
    assert payload["message"] == "Clamped to 3600"
    assert payload["status"] == "clamped"
    assert payload["fields"] == {"configured": 90000}


def test_exception_records_type_and_stack(caplog) -> None:
    logger = get_component_logger("tests.component")

    try:
        raise ValueError("bad value")
    except ValueError as exc:
        with caplog.at_level(logging.ERROR):
            logger.exception("Task failed event=tests.failed", exc_info=exc)

    payload = _event(caplog.records[-1])
    assert payload["level"] == "error"
    assert payload["error_code"] == "ValueError"
    assert payload["exception_message"] == "bad value"
    assert "ValueError" in payload["stack_excerpt"]
