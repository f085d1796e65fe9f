"""Tracing for the two palette events worth a span, plus file logging.

``palette.search`` is recorded once per generation that resolves (results
applied or a gateway failure). ``palette.activate`` wraps routing one
result to its collaborator. Log lines written while either span is
current carry its trace id in the log file.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import Span, Status, StatusCode

from tunepalette.models import SearchResult

LOGGER_NAME = "tunepalette"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s [trace=%(trace_id)s] %(message)s"

logger = logging.getLogger(__name__)


class Telemetry:
    """Palette span recorder.

    Without a provider, spans go to a private ``TracerProvider`` with no
    processors and are discarded.
    """

    def __init__(self, provider: TracerProvider | None = None) -> None:
        self._tracer = (provider or TracerProvider()).get_tracer(LOGGER_NAME)

    def search_resolved(
        self,
        generation: int,
        query: str,
        result_count: int = 0,
        error: BaseException | None = None,
    ) -> None:
        """Record how the search for *generation* ended."""
        with self._tracer.start_as_current_span("palette.search") as span:
            span.set_attributes(
                {
                    "search.generation": generation,
                    "search.query_length": len(query),
                    "search.result_count": result_count,
                    "search.error": error is not None,
                }
            )
            if error is not None:
                span.record_exception(error)
                span.set_status(Status(StatusCode.ERROR, str(error)))
                logger.info("Search generation=%d failed: %s", generation, error)
            else:
                logger.info(
                    "Search generation=%d resolved with %d results",
                    generation,
                    result_count,
                )

    @contextmanager
    def activation(self, result: SearchResult) -> Iterator[Span]:
        """Span around dispatching *result*; the caller sets ``activate.routed``."""
        attributes = {"activate.type": result.type.value, "activate.id": result.id}
        with self._tracer.start_as_current_span(
            "palette.activate", attributes=attributes
        ) as span:
            yield span

    @classmethod
    def in_memory(cls) -> tuple["Telemetry", InMemorySpanExporter]:
        """Telemetry whose finished spans can be read back from the exporter."""
        exporter = InMemorySpanExporter()
        provider = TracerProvider()
        provider.add_span_processor(SimpleSpanProcessor(exporter))
        return cls(provider), exporter


_active: Telemetry | None = None


def get_telemetry() -> Telemetry:
    global _active
    if _active is None:
        _active = Telemetry()
    return _active


def set_telemetry(tel: Telemetry) -> None:
    global _active
    _active = tel


class _TraceIdFilter(logging.Filter):
    """Stamp the current span's trace id, or ``-`` outside a span."""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = trace.get_current_span().get_span_context()
        record.trace_id = format(ctx.trace_id, "032x") if ctx.is_valid else "-"
        return True


def configure_file_logging(log_dir: str | Path = "logs") -> Path:
    """Write ``tunepalette.*`` logs to ``{log_dir}/palette-YYYYMMDD.log``.

    The terminal belongs to the TUI, so logs go to a file. Repeat calls
    return the same path without adding a second handler.
    """
    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    log_path = directory / f"palette-{datetime.now():%Y%m%d}.log"

    palette_logger = logging.getLogger(LOGGER_NAME)
    for handler in palette_logger.handlers:
        if isinstance(handler, logging.FileHandler):
            return Path(handler.baseFilename)

    handler = logging.FileHandler(log_path, encoding="utf-8")
    handler.addFilter(_TraceIdFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    palette_logger.addHandler(handler)
    palette_logger.setLevel(logging.DEBUG)
    return log_path
