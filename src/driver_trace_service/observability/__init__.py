"""
observability/__init__.py

PURPOSE: OpenTelemetry setup for local call spans.
DEPENDENCIES: opentelemetry-api, opentelemetry-sdk, opentelemetry-exporter-otlp

ARCHITECTURE NOTES:
Spans are opt-in:
- Disabled by default (the OpenTelemetry API hands out no-op tracers)
- Console output when enabled
- OTLP export when an endpoint is configured
"""

from driver_trace_service.observability.telemetry import (
    get_tracer,
    init_telemetry,
    shutdown_telemetry,
)

__all__ = ["init_telemetry", "get_tracer", "shutdown_telemetry"]
