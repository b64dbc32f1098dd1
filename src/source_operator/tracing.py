"""OpenTelemetry spans around reconciliation cycles.

Tracing is off unless ``OTEL_TRACES_ENABLED=true``; spans are then exported
over OTLP/gRPC to ``OTEL_EXPORTER_OTLP_ENDPOINT``.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Any, Iterator

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import Span, Tracer

from . import __version__

logger = logging.getLogger(__name__)

_tracer: Tracer | None = None


def tracing_enabled() -> bool:
    return os.getenv("OTEL_TRACES_ENABLED", "false").lower() == "true"


def initialize_tracing(service_name: str = "source-operator") -> None:
    """Install an OTLP exporting tracer provider when tracing is enabled.

    Exporter setup failures are logged and leave tracing disabled.
    """
    global _tracer

    if not tracing_enabled():
        return

    service_name = os.getenv("OTEL_SERVICE_NAME", service_name)
    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4317")
    try:
        provider = TracerProvider(
            resource=Resource.create({"service.name": service_name, "service.version": __version__})
        )
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint)))
        trace.set_tracer_provider(provider)
    except Exception as e:
        logger.warning("Tracing disabled, exporter setup failed: %s", e)
        return

    _tracer = trace.get_tracer(service_name)
    logger.info("Tracing enabled, exporting to %s", endpoint)


def get_tracer() -> Tracer | None:
    return _tracer


@contextmanager
def trace_span(
    name: str,
    kind: str | None = None,
    attributes: dict[str, Any] | None = None,
) -> Iterator[Span | None]:
    """Run the block inside a span named ``name``.

    Yields None when tracing is disabled. Exceptions leaving the block are
    recorded on the span and marked as errors before propagating.

    Args:
        name: Span name, e.g. "sync_volume"
        kind: Object kind, recorded as ``resource.kind``
        attributes: Extra span attributes
    """
    tracer = get_tracer()
    if tracer is None:
        yield None
        return

    span_attributes = dict(attributes or {})
    if kind:
        span_attributes["resource.kind"] = kind

    with tracer.start_as_current_span(name, attributes=span_attributes) as span:
        try:
            yield span
        except Exception as e:
            span.record_exception(e)
            span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
            raise


def add_span_attribute(key: str, value: Any) -> None:
    """Set an attribute on the active span, if one is recording."""
    span = trace.get_current_span()
    if span.is_recording():
        span.set_attribute(key, value)
