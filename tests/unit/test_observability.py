"""Unit tests for logging, observability setup and tracing decorators."""

import logging
import os
from collections.abc import Iterator
from unittest.mock import Mock, patch

import pytest
from fastapi import FastAPI
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from pythonjsonlogger import jsonlogger

from restaurant_ordering_service.config import Settings
from restaurant_ordering_service.observability import (
    configure_logging,
    setup_observability,
    traced,
)


@pytest.fixture
def span_exporter() -> Iterator[InMemorySpanExporter]:
    """Route spans created by @traced into an in-memory exporter."""
    exporter = InMemorySpanExporter()
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))

    with patch(
        "restaurant_ordering_service.observability.decorators.trace.get_tracer",
        side_effect=lambda name: provider.get_tracer(name),
    ):
        yield exporter


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    """Put the root logger back the way the test found it."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield
    root_logger.handlers = handlers
    root_logger.setLevel(level)


@pytest.mark.unit
class TestTraced:
    """Tests for the traced decorator."""

    def test_sync_function_span(self, span_exporter: InMemorySpanExporter) -> None:
        """Test that a sync function produces a successful span."""

        @traced("price_lookup")
        def lookup(value: int) -> int:
            return value * 2

        assert lookup(21) == 42

        [span] = span_exporter.get_finished_spans()
        assert span.name == "price_lookup"
        assert span.attributes["success"] is True
        assert span.attributes["function.name"] == "lookup"

    @pytest.mark.asyncio
    async def test_async_function_span(self, span_exporter: InMemorySpanExporter) -> None:
        """Test that async functions are awaited inside the span."""

        @traced()
        async def create() -> str:
            return "created"

        assert await create() == "created"

        [span] = span_exporter.get_finished_spans()
        assert span.name == "create"
        assert span.attributes["service.name"] == "ordering-svc"

    @pytest.mark.asyncio
    async def test_exception_recorded_and_reraised(
        self, span_exporter: InMemorySpanExporter
    ) -> None:
        """Test that failures are recorded on the span and propagate."""

        @traced("failing")
        async def fail() -> None:
            raise ValueError("bad input")

        with pytest.raises(ValueError):
            await fail()

        [span] = span_exporter.get_finished_spans()
        assert span.attributes["success"] is False
        assert span.attributes["error.type"] == "ValueError"
        assert span.attributes["error.message"] == "bad input"


@pytest.mark.unit
@pytest.mark.usefixtures("restore_root_logger")
class TestConfigureLogging:
    """Tests for configure_logging."""

    @patch.dict(os.environ, {}, clear=True)
    def test_installs_json_handler(self) -> None:
        """Test that the root logger gets a single JSON handler."""
        configure_logging("DEBUG")

        root_logger = logging.getLogger()
        assert root_logger.level == logging.DEBUG
        assert len(root_logger.handlers) == 1
        assert isinstance(root_logger.handlers[0].formatter, jsonlogger.JsonFormatter)

    @patch.dict(os.environ, {"LOG_LEVEL": "DEBUG"}, clear=True)
    def test_uses_argument_not_environment(self) -> None:
        """Test that the level comes from the argument, lower case allowed."""
        configure_logging("warning")

        assert logging.getLogger().level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self) -> None:
        """Test that an unrecognized level name means INFO."""
        configure_logging("chatty")

        assert logging.getLogger().level == logging.INFO


@pytest.mark.unit
class TestSetupObservability:
    """Tests for setup_observability."""

    @pytest.fixture(autouse=True)
    def no_global_providers(self) -> Iterator[None]:
        """Keep providers and instrumentation from leaking into other tests."""
        with (
            patch("restaurant_ordering_service.observability.config.trace.set_tracer_provider"),
            patch("restaurant_ordering_service.observability.config.metrics.set_meter_provider"),
            patch("restaurant_ordering_service.observability.config.BotocoreInstrumentor"),
            patch("restaurant_ordering_service.observability.config.FastAPIInstrumentor"),
        ):
            yield

    @patch("restaurant_ordering_service.observability.config.setup_metrics")
    @patch("restaurant_ordering_service.observability.config.setup_tracing")
    def test_exports_to_configured_endpoint(
        self, mock_setup_tracing: Mock, mock_setup_metrics: Mock
    ) -> None:
        """Test that exporters use the endpoint and service name from settings."""
        settings = Settings(
            environment="production",
            otel_service_name="ordering-svc-prod",
            otel_exporter_endpoint="http://collector:4318",
        )

        setup_observability(settings)

        resource, endpoint = mock_setup_tracing.call_args.args
        assert endpoint == "http://collector:4318"
        assert resource.attributes["service.name"] == "ordering-svc-prod"
        assert resource.attributes["deployment.environment"] == "production"
        mock_setup_metrics.assert_called_once_with(resource, "http://collector:4318")

    @patch.dict(os.environ, {"ENVIRONMENT": "production"}, clear=True)
    @patch("restaurant_ordering_service.observability.config.setup_metrics")
    @patch("restaurant_ordering_service.observability.config.setup_tracing")
    def test_test_environment_skips_exporters(
        self, mock_setup_tracing: Mock, mock_setup_metrics: Mock
    ) -> None:
        """Test that the settings, not the process environment, decide on exporters."""
        setup_observability(Settings(environment="test"))

        mock_setup_tracing.assert_not_called()
        mock_setup_metrics.assert_not_called()

    @patch("restaurant_ordering_service.observability.config.FastAPIInstrumentor")
    def test_instruments_app(self, mock_instrumentor: Mock) -> None:
        """Test that a given FastAPI app is instrumented."""
        app = FastAPI()

        setup_observability(Settings(environment="test"), app)

        mock_instrumentor.instrument_app.assert_called_once_with(app)
