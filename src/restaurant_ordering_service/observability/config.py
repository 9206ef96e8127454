"""OpenTelemetry configuration and structured logging setup.

Everything here is driven by ``Settings``; nothing reads the environment
directly.
"""

import logging
from typing import Any

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.botocore import BotocoreInstrumentor
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from pythonjsonlogger import jsonlogger

from restaurant_ordering_service.config import Settings

logger = logging.getLogger(__name__)


def get_service_resource(settings: Settings) -> Resource:
    """Describe this process to the collector.

    Args:
        settings: Process settings

    Returns:
        Resource with service name and deployment environment
    """
    return Resource.create(
        {
            "service.name": settings.otel_service_name,
            "deployment.environment": settings.environment,
        }
    )


def setup_tracing(resource: Resource, endpoint: str) -> None:
    """Export spans in batches to the OTLP HTTP endpoint."""
    exporter = OTLPSpanExporter(endpoint=f"{endpoint}/v1/traces")

    provider = TracerProvider(resource=resource)
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    logger.info(f"OpenTelemetry tracing configured with endpoint: {endpoint}")


def setup_metrics(resource: Resource, endpoint: str) -> None:
    """Export metrics every minute to the OTLP HTTP endpoint."""
    exporter = OTLPMetricExporter(endpoint=f"{endpoint}/v1/metrics")

    reader = PeriodicExportingMetricReader(exporter, export_interval_millis=60000)
    metrics.set_meter_provider(MeterProvider(resource=resource, metric_readers=[reader]))

    logger.info(f"OpenTelemetry metrics configured with endpoint: {endpoint}")


def setup_observability(settings: Settings, app: Any = None) -> None:
    """Set up tracing, metrics and auto-instrumentation.

    Exporters stay off in the "test" environment; spans and metrics are then
    recorded by in-process SDK providers only.

    Args:
        settings: Process settings
        app: Optional FastAPI application to instrument
    """
    resource = get_service_resource(settings)

    if settings.environment != "test":
        setup_tracing(resource, settings.otel_exporter_endpoint)
        setup_metrics(resource, settings.otel_exporter_endpoint)
    else:
        trace.set_tracer_provider(TracerProvider(resource=resource))
        metrics.set_meter_provider(MeterProvider(resource=resource))

    # DynamoDB calls go through botocore
    BotocoreInstrumentor().instrument()

    if app is not None:
        FastAPIInstrumentor.instrument_app(app)
        logger.info("FastAPI application instrumented")

    logger.info("OpenTelemetry observability fully configured")


def configure_logging(log_level: str = "INFO") -> None:
    """Configure structured JSON logging on the root logger.

    Args:
        log_level: Logging level name; unknown names fall back to INFO
    """
    level_str = log_level.upper()
    level = getattr(logging, level_str, logging.INFO)

    formatter = jsonlogger.JsonFormatter(
        "%(asctime)s %(name)s %(levelname)s %(message)s",
        timestamp=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    logger.info(f"Structured JSON logging configured at {level_str} level")
