"""
OpenTelemetry tracing setup

Use cases and controllers create spans through `trace.get_tracer(__name__)`; this module
installs the SDK provider those tracers report to. Spans go to an OTLP collector when
OTEL_EXPORTER_OTLP_ENDPOINT is set and to stdout when OTEL_CONSOLE_EXPORT is true.
"""

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import SpanProcessor, TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.trace.sampling import ALWAYS_ON

from src.platform.config.core_setting import settings


class TracingConfig:
    """
    Usage:
        tracing = TracingConfig(service_name='seat-ticketing-core')
        tracing.setup()
        ...
        tracing.shutdown()
    """

    def __init__(
        self,
        *,
        service_name: str,
        otlp_endpoint: str | None = None,
        enable_console: bool | None = None,
    ) -> None:
        self.service_name = service_name
        self.otlp_endpoint = otlp_endpoint or settings.OTEL_EXPORTER_OTLP_ENDPOINT
        self.enable_console = (
            settings.OTEL_CONSOLE_EXPORT if enable_console is None else enable_console
        )
        self._provider: TracerProvider | None = None

    def _span_processors(self) -> list[SpanProcessor]:
        processors: list[SpanProcessor] = []
        if self.otlp_endpoint:
            processors.append(BatchSpanProcessor(OTLPSpanExporter(endpoint=self.otlp_endpoint)))
        if self.enable_console:
            processors.append(BatchSpanProcessor(ConsoleSpanExporter()))
        return processors

    def setup(self) -> TracerProvider:
        """
        Install the global tracer provider, once per process.

        The global provider cannot be replaced after it is set, so a second call
        returns the provider already installed.
        """
        current = trace.get_tracer_provider()
        if isinstance(current, TracerProvider):
            self._provider = current
            return current

        resource = Resource(
            attributes={SERVICE_NAME: self.service_name, SERVICE_VERSION: settings.VERSION}
        )
        # Sampling is left to the collector
        provider = TracerProvider(resource=resource, sampler=ALWAYS_ON)
        for processor in self._span_processors():
            provider.add_span_processor(processor)

        trace.set_tracer_provider(provider)
        self._provider = provider
        return provider

    def shutdown(self) -> None:
        """Flush pending spans."""
        if self._provider:
            self._provider.shutdown()
