"""Outbound call tracing."""

from driver_trace_service.tracing.context import TraceContext
from driver_trace_service.tracing.interceptor import (
    HttpCallInterceptor,
    HttpCallTraceContext,
    TracedClient,
    traced_client,
)
from driver_trace_service.tracing.tracer import LogTracer

__all__ = [
    "HttpCallInterceptor",
    "HttpCallTraceContext",
    "LogTracer",
    "TraceContext",
    "TracedClient",
    "traced_client",
]
