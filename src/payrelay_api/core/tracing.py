from __future__ import annotations

import logging

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter as OTLPGrpcExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter as OTLPHttpExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter
from opentelemetry.sdk.trace.sampling import ALWAYS_ON, Sampler, TraceIdRatioBased

from .config import Settings

logger = logging.getLogger(__name__)

HTTP_PROTOCOLS = {"http", "http/protobuf", "http_protobuf"}

_tracing_configured = False
_instrumented_app_ids: set[int] = set()


def init_tracing(settings: Settings) -> None:
    """Install an OTLP tracer provider once per process.

    Tracing stays off unless ``OTEL_ENABLED`` is set and an endpoint is
    configured. Outbound vendor calls are traced through the httpx
    instrumentor.
    """
    global _tracing_configured

    if _tracing_configured:
        return
    if not settings.OTEL_ENABLED:
        logger.info("Tracing disabled via OTEL_ENABLED")
        return
    endpoint = settings.OTEL_EXPORTER_OTLP_ENDPOINT
    if not endpoint:
        logger.info("Tracing disabled; no OTLP endpoint configured")
        return

    protocol = (settings.OTEL_EXPORTER_OTLP_PROTOCOL or "grpc").lower()
    exporter = _create_exporter(protocol, endpoint, settings.otel_headers_dict)
    if exporter is None:
        return

    resource = Resource.create(
        {
            "service.name": settings.OTEL_SERVICE_NAME or settings.PROJECT_NAME,
            "service.version": "1.0.0",
            "deployment.environment": settings.ENV,
        }
    )
    provider = TracerProvider(resource=resource, sampler=_create_sampler(settings.OTEL_SAMPLE_RATIO))
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    HTTPXClientInstrumentor().instrument()

    _tracing_configured = True
    logger.info("Tracing initialized endpoint=%s protocol=%s", endpoint, protocol)


def instrument_fastapi(app: FastAPI) -> None:
    if not _tracing_configured or id(app) in _instrumented_app_ids:
        return
    FastAPIInstrumentor.instrument_app(app, tracer_provider=trace.get_tracer_provider())
    _instrumented_app_ids.add(id(app))


def _create_exporter(protocol: str, endpoint: str, headers: dict[str, str]) -> SpanExporter | None:
    if protocol == "grpc":
        return OTLPGrpcExporter(endpoint=endpoint, headers=headers)
    if protocol in HTTP_PROTOCOLS:
        return OTLPHttpExporter(endpoint=endpoint, headers=headers)
    logger.warning("Unsupported OTLP protocol %r; tracing disabled", protocol)
    return None


def _create_sampler(ratio: float | None) -> Sampler:
    if ratio is None or ratio >= 1.0:
        return ALWAYS_ON
    return TraceIdRatioBased(max(0.0, ratio))
