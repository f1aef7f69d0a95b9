"""Tests for the JSON log output and logger configuration."""

import json
import logging
import sys

import pytest

from tessel.core.component import Update
from tessel.core.context import Context, ContextConfig
from tessel.core.logging import (
    COMPONENT_LOGGER,
    PACKAGE_LOGGER,
    JSONFormatter,
    configure_component_logger,
    configure_logging,
    record_extras,
)
from tessel.streams.local import EventStream


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="tessel.stream",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="Dropped %s",
        args=("message",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_basic_shape():
    record = make_record()

    data = json.loads(JSONFormatter().format(record))

    assert data["level"] == "WARNING"
    assert data["message"] == "Dropped message"
    assert data["logger"] == "tessel.stream"
    assert data["timestamp"].endswith("+00:00")
    assert "tessel" not in data


def test_json_formatter_uses_record_creation_time():
    record = make_record()
    record.created = 0.0

    data = json.loads(JSONFormatter().format(record))

    assert data["timestamp"] == "1970-01-01T00:00:00+00:00"


def test_json_formatter_groups_routing_fields():
    record = make_record(stream="inbox", message_type="Toggle", elapsed_ms=3.5, attempt=2)

    data = json.loads(JSONFormatter().format(record))

    assert data["tessel"] == {"stream": "inbox", "message_type": "Toggle", "elapsed_ms": 3.5}
    assert data["attempt"] == 2
    assert "stream" not in data


def test_record_extras_ignores_formatter_attributes():
    record = make_record(component="Counter")
    logging.Formatter("%(asctime)s %(message)s").format(record)

    assert record_extras(record) == {"component": "Counter"}


def test_json_formatter_serializes_unknown_types_as_strings():
    record = make_record(payload=object())

    data = json.loads(JSONFormatter().format(record))

    assert data["payload"].startswith("<object object")


def test_json_formatter_includes_exception():
    try:
        raise ValueError("boom")
    except ValueError:
        record = make_record()
        record.exc_info = sys.exc_info()

    data = json.loads(JSONFormatter().format(record))

    assert "ValueError: boom" in data["exception"]


@pytest.fixture
def package_logger():
    logger = logging.getLogger(PACKAGE_LOGGER)
    saved = (list(logger.handlers), logger.level, logger.propagate)
    component_level = logging.getLogger(COMPONENT_LOGGER).level

    yield logger

    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]
    logging.getLogger(COMPONENT_LOGGER).setLevel(component_level)


def json_handlers(logger: logging.Logger) -> list[logging.Handler]:
    return [h for h in logger.handlers if isinstance(h.formatter, JSONFormatter)]


def test_configure_logging_attaches_one_handler(package_logger):
    configure_logging(logging.DEBUG)
    configure_logging()

    assert len(json_handlers(package_logger)) == 1
    assert package_logger.level == logging.DEBUG
    assert not package_logger.propagate


def test_component_logger_writes_through_package_handler(package_logger):
    logger = configure_component_logger(logging.DEBUG)
    again = configure_component_logger(logging.WARNING)

    assert again is logger
    assert logger.name == COMPONENT_LOGGER
    assert logger.level == logging.WARNING
    assert logger.propagate
    assert len(json_handlers(package_logger)) == 1


class Idle(Update):
    def update(self, message) -> None:
        pass


@pytest.mark.asyncio
async def test_context_log_level_drives_component_logger(package_logger):
    context = Context(ContextConfig(log_level=logging.ERROR))

    context.create_component(Idle)

    assert logging.getLogger(COMPONENT_LOGGER).level == logging.ERROR
    await context.shutdown()


@pytest.fixture
def stream_records():
    records: list[logging.LogRecord] = []

    class Capture(logging.Handler):
        def emit(self, record):
            records.append(record)

    logger = logging.getLogger("tessel.stream")
    handler = Capture(level=logging.DEBUG)
    original_level = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)

    yield records

    logger.removeHandler(handler)
    logger.setLevel(original_level)


def test_locked_drop_is_logged_at_debug(stream_records):
    stream = EventStream(name="inbox")

    with stream.locked():
        stream.emit(42)

    drops = [r for r in stream_records if "Dropped" in r.getMessage()]
    assert len(drops) == 1
    assert drops[0].levelno == logging.DEBUG
    assert drops[0].stream == "inbox"
    assert drops[0].message_type == "int"
