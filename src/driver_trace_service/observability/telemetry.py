"""
telemetry.py

PURPOSE: OpenTelemetry initialization and tracer management.
DEPENDENCIES: opentelemetry-api, opentelemetry-sdk, opentelemetry-exporter-otlp

ARCHITECTURE NOTES:
Uses a module-level tracer provider that is initialized at startup.
OpenTelemetry accepts a global provider only once per process, so tracers
are taken from the current module-level provider rather than the global
one; a provider created after shutdown_telemetry() still receives spans.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

if TYPE_CHECKING:
    from driver_trace_service.config import OpenTelemetrySettings

logger = logging.getLogger(__name__)

# Global state for the tracer provider
_initialized = False
_tracer_provider: TracerProvider | None = None
_global_provider_set = False


def init_telemetry(settings: OpenTelemetrySettings) -> None:
    """
    Initialize OpenTelemetry tracing.

    Should be called once at application startup. Later calls are ignored
    until shutdown_telemetry() resets the module state.

    Args:
        settings: OpenTelemetry configuration settings.
    """
    global _initialized, _tracer_provider, _global_provider_set

    if _initialized:
        logger.debug("Telemetry already initialized")
        return

    if not settings.enabled:
        logger.debug("Telemetry disabled")
        _initialized = True
        return

    resource = Resource.create({"service.name": settings.service_name})
    provider = TracerProvider(resource=resource)

    provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    if settings.endpoint:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.endpoint)))
        logger.info(f"OTLP exporter configured: {settings.endpoint}")

    if not _global_provider_set:
        trace.set_tracer_provider(provider)
        _global_provider_set = True
    _tracer_provider = provider
    _initialized = True

    logger.info(f"Telemetry initialized: service={settings.service_name}")


def is_enabled() -> bool:
    """Return True when a tracer provider has been installed."""
    return _tracer_provider is not None


def get_tracer(name: str) -> trace.Tracer:
    """
    Get a tracer for the given module name.

    Args:
        name: Module name (typically __name__).

    Returns:
        A tracer from the current provider, or the global (no-op) tracer
        when telemetry is not initialized.
    """
    if _tracer_provider is not None:
        return _tracer_provider.get_tracer(name)
    return trace.get_tracer(name)


def shutdown_telemetry() -> None:
    """
    Shutdown the tracer provider, flushing any pending spans.

    Safe to call even if telemetry was never initialized.
    """
    global _initialized, _tracer_provider

    if _tracer_provider is not None:
        _tracer_provider.shutdown()
        logger.debug("Telemetry shutdown complete")

    _tracer_provider = None
    _initialized = False
