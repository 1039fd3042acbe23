"""Tests for structured logging pipeline utilities."""

from __future__ import annotations

import io
import json
import logging
import sys
from logging.handlers import QueueListener
from queue import Queue

import pytest

from ewaste_impact import logging_pipeline


def test_configure_structured_logging_emits_json() -> None:
    """Records are rendered as JSON with extra fields under ``context``."""

    logger = logging.getLogger("ewaste-impact-test")
    buffer = io.StringIO()
    listener = logging_pipeline.configure_structured_logging(
        logger, run_id="run-123", level=logging.INFO, stream=buffer
    )

    logger.info("Device impact calculated", extra={"device_type": "laptop"})
    logging_pipeline.shutdown_listeners([listener])

    payload = json.loads(buffer.getvalue().strip())
    assert payload["message"] == "Device impact calculated"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "ewaste-impact-test"
    assert payload["run_id"] == "run-123"
    assert payload["context"] == {"device_type": "laptop"}


def test_configure_structured_logging_generates_run_id() -> None:
    logger = logging.getLogger("ewaste-impact-auto-run")
    buffer = io.StringIO()
    listener = logging_pipeline.configure_structured_logging(logger, stream=buffer)

    logger.warning("auto-run")
    logging_pipeline.shutdown_listeners([listener])

    payload = json.loads(buffer.getvalue())
    assert isinstance(payload["run_id"], str) and payload["run_id"]


def test_json_formatter_includes_exception() -> None:
    formatter = logging_pipeline.JsonFormatter(run_id="r")
    try:
        raise ValueError("bad catalog")
    except ValueError:
        record = logging.LogRecord(
            "ewaste_impact", logging.ERROR, __file__, 1, "failed", None, sys.exc_info()
        )
    payload = json.loads(formatter.format(record))
    assert "ValueError: bad catalog" in payload["exception"]
    assert payload["context"] == {}


def test_bounded_queue_drops_when_full() -> None:
    record_queue: Queue[logging.LogRecord] = Queue(maxsize=1)
    handler = logging_pipeline.BoundedQueueHandler(record_queue)
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)

    handler.enqueue(record)
    handler.enqueue(record)

    assert record_queue.qsize() == 1


def test_shutdown_listeners_logs_failures(caplog: pytest.LogCaptureFixture) -> None:
    """Listener shutdown failures should emit warnings."""

    class _FailingListener(QueueListener):
        def __init__(self) -> None:
            super().__init__(Queue(), logging.StreamHandler())

        def stop(self) -> None:
            raise RuntimeError("stop failure")

    with caplog.at_level(logging.WARNING):
        logging_pipeline.shutdown_listeners([_FailingListener()])

    assert "Failed to stop logging listener" in caplog.text
