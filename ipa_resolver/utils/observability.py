"""Logging, metric and tracing helpers shared by the resolver modules.

Loggers render bound context as a JSON suffix so a single log line carries
the word, URL or path it concerns. Metrics are Prometheus collectors and
spans come from the OpenTelemetry API; without a configured SDK the tracer
hands out non-recording spans, so instrumented code behaves the same either
way.
"""

from __future__ import annotations

import json
import logging
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, Optional

from opentelemetry import trace
from prometheus_client import REGISTRY, Counter, Histogram

_TRACER_NAME = "ipa_resolver"


class StructuredLoggerAdapter(logging.LoggerAdapter):
    """Adapter that renders structured context inline with messages."""

    def bind(self, **context: Any) -> "StructuredLoggerAdapter":
        merged = dict(self.extra)
        merged.update(context)
        return StructuredLoggerAdapter(self.logger, merged)

    def process(self, msg: str, kwargs: Dict[str, Any]):
        event_context: Dict[str, Any] = dict(self.extra)
        provided = kwargs.pop("context", None)
        if isinstance(provided, dict):
            event_context.update(provided)
        if event_context:
            try:
                payload = json.dumps(
                    event_context, sort_keys=True, default=str, ensure_ascii=False
                )
            except TypeError:
                payload = json.dumps({k: str(v) for k, v in event_context.items()})
            msg = f"{msg} | {payload}"
        return msg, kwargs


def get_logger(name: str, **context: Any) -> StructuredLoggerAdapter:
    """Return a project logger with optional bound context."""

    return StructuredLoggerAdapter(logging.getLogger(name), context)


def _registered_collector(name: str) -> Any:
    # prometheus_client refuses duplicate names; reuse the first collector so
    # several service instances in one process share their counters.
    collectors = getattr(REGISTRY, "_names_to_collectors", {})
    return collectors.get(name) or collectors.get(f"{name}_total")


class CounterHandle:
    """Counter wrapper whose failures never reach the caller."""

    def __init__(self, impl: Any = None) -> None:
        self._impl = impl

    def labels(self, **labels: Any) -> "CounterHandle":
        if self._impl is None:
            return CounterHandle()
        try:
            return CounterHandle(self._impl.labels(**labels))
        except ValueError:
            return CounterHandle()

    def inc(self, amount: float = 1.0) -> None:
        if self._impl is None:
            return
        try:
            self._impl.inc(amount)
        except ValueError:
            return


class HistogramHandle:
    """Histogram wrapper mirroring :class:`CounterHandle`."""

    def __init__(self, impl: Any = None) -> None:
        self._impl = impl

    def observe(self, value: float) -> None:
        if self._impl is None:
            return
        try:
            self._impl.observe(value)
        except ValueError:
            return

    @contextmanager
    def time(self) -> Iterator[None]:
        start = time.perf_counter()
        try:
            yield
        finally:
            self.observe(time.perf_counter() - start)


def create_counter(
    name: str,
    documentation: str,
    label_names: Optional[Iterable[str]] = None,
) -> CounterHandle:
    try:
        impl = Counter(name, documentation, labelnames=tuple(label_names or ()))
    except ValueError:
        impl = _registered_collector(name)
    return CounterHandle(impl)


def create_histogram(
    name: str,
    documentation: str,
    label_names: Optional[Iterable[str]] = None,
) -> HistogramHandle:
    try:
        impl = Histogram(name, documentation, labelnames=tuple(label_names or ()))
    except ValueError:
        impl = _registered_collector(name)
    return HistogramHandle(impl)


@contextmanager
def start_span(name: str, attributes: Optional[Dict[str, Any]] = None):
    """Start an OpenTelemetry span on the project tracer."""

    tracer = trace.get_tracer(_TRACER_NAME)
    with tracer.start_as_current_span(name) as span:
        if attributes:
            add_span_attributes(span, attributes)
        yield span


def add_span_attributes(span: Any, attributes: Dict[str, Any]) -> None:
    if span is None:
        return
    for key, value in attributes.items():
        if not isinstance(key, str) or value is None:
            continue
        span.set_attribute(key, value)


def record_exception(span: Any, error: BaseException) -> None:
    if span is None:
        return
    span.record_exception(error)
    span.set_attribute("error", True)


__all__ = [
    "StructuredLoggerAdapter",
    "get_logger",
    "CounterHandle",
    "HistogramHandle",
    "create_counter",
    "create_histogram",
    "start_span",
    "add_span_attributes",
    "record_exception",
]
