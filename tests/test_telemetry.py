"""Tests for palette spans and trace-stamped file logging (telemetry.py)."""

from __future__ import annotations

import logging
import re

from opentelemetry.trace import StatusCode

from tunepalette.models import ResultType, SearchResult
from tunepalette.telemetry import (
    LOGGER_NAME,
    Telemetry,
    configure_file_logging,
    get_telemetry,
    set_telemetry,
)


def test_search_resolved_span(telemetry):
    tel, exporter = telemetry
    tel.search_resolved(3, "arctic", 5)

    (span,) = exporter.get_finished_spans()
    assert span.name == "palette.search"
    assert span.attributes["search.generation"] == 3
    assert span.attributes["search.query_length"] == 6
    assert span.attributes["search.result_count"] == 5
    assert span.attributes["search.error"] is False
    assert span.status.status_code is not StatusCode.ERROR


def test_search_failure_marks_span_as_error(telemetry):
    tel, exporter = telemetry
    tel.search_resolved(4, "arc", error=RuntimeError("HTTP 500"))

    (span,) = exporter.get_finished_spans()
    assert span.attributes["search.error"] is True
    assert span.attributes["search.result_count"] == 0
    assert span.status.status_code is StatusCode.ERROR
    assert [event.name for event in span.events] == ["exception"]


def test_activation_span_carries_result(telemetry):
    tel, exporter = telemetry
    result = SearchResult(id="al1", type=ResultType.ALBUM, title="Tundra")

    with tel.activation(result) as span:
        span.set_attribute("activate.routed", True)

    (finished,) = exporter.get_finished_spans()
    assert finished.name == "palette.activate"
    assert finished.attributes["activate.type"] == "album"
    assert finished.attributes["activate.id"] == "al1"
    assert finished.attributes["activate.routed"] is True


def test_default_telemetry_discards_spans():
    Telemetry().search_resolved(1, "arc", 0)


def test_set_and_get_singleton():
    previous = get_telemetry()
    tel = Telemetry()
    try:
        set_telemetry(tel)
        assert get_telemetry() is tel
    finally:
        set_telemetry(previous)


def test_file_logging_stamps_trace_ids(tmp_path, telemetry):
    tel, _ = telemetry
    logger = logging.getLogger(LOGGER_NAME)
    before = list(logger.handlers)
    try:
        path = configure_file_logging(tmp_path / "logs")
        assert configure_file_logging(tmp_path / "logs") == path
        added = [h for h in logger.handlers if h not in before]
        assert len(added) == 1
        assert path.name.startswith("palette-")

        tel.search_resolved(1, "arc", 2)
        logging.getLogger(f"{LOGGER_NAME}.core").warning("outside span")
        added[0].flush()

        lines = path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        assert re.search(r"\[trace=[0-9a-f]{32}\] Search generation=1 resolved with 2 results$", lines[0])
        assert lines[1].endswith("tunepalette.core [trace=-] outside span")
    finally:
        for handler in logger.handlers[:]:
            if handler not in before:
                logger.removeHandler(handler)
                handler.close()
