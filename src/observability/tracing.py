"""
OpenTelemetry tracing for feed builds and upstream platform calls.

Span layout:
    GET /api/feed                  (request middleware)
      feed.build                   (one per cache miss, user_id attribute)
        youtube.fetch_channel      (one per uncached channel, handle attribute)
        twitch.fetch_channel

Tracing is off unless TRACING_ENABLED is set; without a configured provider
``get_tracer`` hands out OpenTelemetry's no-op tracer, so instrumented code
runs unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    SimpleSpanProcessor,
    SpanExporter,
    SpanProcessor,
)
from opentelemetry.trace import Span, StatusCode, Tracer
from opentelemetry.trace.propagation import get_current_span

logger = logging.getLogger(__name__)

DEFAULT_OTLP_ENDPOINT = "http://localhost:4317"

_provider: TracerProvider | None = None


def _span_processor(exporter: SpanExporter | None, otlp_endpoint: str | None) -> SpanProcessor:
    if exporter is not None:
        # Caller-supplied exporters (tests) see spans as soon as they end.
        return SimpleSpanProcessor(exporter)

    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

    return BatchSpanProcessor(
        OTLPSpanExporter(endpoint=otlp_endpoint or DEFAULT_OTLP_ENDPOINT, insecure=True)
    )


def setup_tracing(
    service_name: str,
    otlp_endpoint: str | None = None,
    *,
    exporter: SpanExporter | None = None,
) -> TracerProvider:
    """
    Install a global TracerProvider exporting over OTLP gRPC.

    Args:
        service_name: Value of the ``service.name`` resource attribute.
        otlp_endpoint: Collector endpoint, defaults to localhost:4317.
        exporter: Replaces the OTLP exporter (e.g. InMemorySpanExporter).
    """
    global _provider

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    provider.add_span_processor(_span_processor(exporter, otlp_endpoint))
    trace.set_tracer_provider(provider)
    _provider = provider

    logger.info(
        "Tracing enabled: service=%s endpoint=%s",
        service_name,
        otlp_endpoint or ("(custom exporter)" if exporter else DEFAULT_OTLP_ENDPOINT),
    )
    return provider


def shutdown_tracing() -> None:
    """Flush pending spans and stop exporting."""
    global _provider

    if _provider is not None:
        _provider.shutdown()
        _provider = None


def is_tracing_enabled() -> bool:
    return _provider is not None


def get_tracer(name: str) -> Tracer:
    return trace.get_tracer(name)


@contextmanager
def traced(
    tracer: Tracer,
    name: str,
    attributes: dict[str, Any] | None = None,
) -> Iterator[Span]:
    """
    Run the block inside a span, marking it failed if the block raises.

    The exception is recorded on the span and re-raised unchanged.
    """
    with tracer.start_as_current_span(
        name, attributes=attributes, record_exception=False, set_status_on_exception=False
    ) as span:
        try:
            yield span
        except Exception as exc:
            span.set_attribute("error.type", type(exc).__name__)
            span.set_status(StatusCode.ERROR, str(exc))
            span.record_exception(exc)
            raise


def add_trace_context(
    logger_: Any, method: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor adding trace_id and span_id of the active span."""
    ctx = get_current_span().get_span_context()

    if ctx.is_valid:
        event_dict["trace_id"] = format(ctx.trace_id, "032x")
        event_dict["span_id"] = format(ctx.span_id, "016x")

    return event_dict
