"""
tracer.py

PURPOSE: Start / error / end lifecycle for traced calls and trace line output.
DEPENDENCIES: opentelemetry-api (local spans when enabled)

ARCHITECTURE NOTES:
Each finished call produces one line on the trace logger:

    applicationName|hostIP|kind|name|detailParam|detailResult|elapsedMillis

The tracer keeps no per-call state; everything it records lives on the
TraceContext, so one tracer can serve any number of concurrent calls.
"""

import logging
import re
import socket
import time
from datetime import datetime, timezone

from opentelemetry.trace import Status, StatusCode

from driver_trace_service.logging_config import get_trace_logger
from driver_trace_service.observability import telemetry
from driver_trace_service.tracing.context import TraceContext

logger = logging.getLogger(__name__)

SEPARATOR = "|"

# Characters that would break the one-line, seven-field layout
_UNSAFE = re.compile(r"[|\r\n]")


def resolve_host_ip() -> str:
    """
    Best-effort lookup of this host's outward-facing IP address.

    Connecting a UDP socket sends no packets; it only asks the kernel which
    local address would be used.
    """
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(("10.255.255.255", 1))
            return sock.getsockname()[0]
    except OSError:
        pass

    try:
        return socket.gethostbyname(socket.gethostname())
    except OSError:
        return "127.0.0.1"


def _clean(value: object) -> str:
    return _UNSAFE.sub(" ", str(value))


class LogTracer:
    """Writes one pipe-delimited line per traced call."""

    def __init__(
        self,
        application_name: str,
        host_ip: str | None = None,
        trace_logger: logging.Logger | None = None,
    ):
        """
        Initialize the tracer.

        Args:
            application_name: Service identity written into every line.
            host_ip: Address written into every line; resolved when None.
            trace_logger: Logger for trace lines; the dedicated trace logger when None.
        """
        self.application_name = application_name
        self.host_ip = host_ip if host_ip is not None else resolve_host_ip()
        self._trace_logger = trace_logger or get_trace_logger()

    def trace_start(self, context: TraceContext) -> None:
        """Record the start of a call."""
        context.start_time = datetime.now(timezone.utc)
        context.started_at = time.perf_counter()

        if telemetry.is_enabled():
            span = telemetry.get_tracer(__name__).start_span(f"{context.kind} {context.name}")
            span.set_attribute("trace.kind", context.kind)
            span.set_attribute("trace.name", context.name)
            span.set_attribute("trace.detail_param", context.detail_param)
            context.span = span

        logger.debug(f"Call started: {context.kind} {context.name}")

    def trace_error(self, error: BaseException, context: TraceContext) -> None:
        """Record that a call failed."""
        context.error = str(error)

        if context.span is not None:
            context.span.record_exception(error)
            context.span.set_status(Status(StatusCode.ERROR, context.error))

        logger.warning(f"Call failed: {context.kind} {context.name}: {type(error).__name__}: {error}")

    def trace_end(self, context: TraceContext) -> None:
        """Compute the elapsed time and emit the trace line."""
        if context.started_at is not None:
            context.elapsed_millis = int((time.perf_counter() - context.started_at) * 1000)
        else:
            context.elapsed_millis = 0

        line = self.format_line(context)
        level = logging.WARNING if context.error is not None else logging.INFO
        self._trace_logger.log(level, line)

        if context.span is not None:
            context.span.set_attribute("trace.detail_result", context.detail_result)
            context.span.set_attribute("trace.elapsed_millis", context.elapsed_millis)
            context.span.end()
            context.span = None

    def format_line(self, context: TraceContext) -> str:
        """Render the trace line for a context."""
        fields = [
            self.application_name,
            self.host_ip,
            context.kind,
            context.name,
            context.detail_param,
            context.detail_result,
            context.elapsed_millis if context.elapsed_millis is not None else 0,
        ]
        return SEPARATOR.join(_clean(value) for value in fields)
