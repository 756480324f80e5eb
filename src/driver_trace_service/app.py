"""
app.py

PURPOSE: Service bootstrap and dependency wiring.
DEPENDENCIES: httpx (through the client), opentelemetry (through telemetry)

ARCHITECTURE NOTES:
bootstrap() refuses to start without a service identity, then wires:
    Settings -> logging -> telemetry -> LogTracer -> RestClient -> TracedClient

Every outbound call made through Application.client is traced.
"""

import logging
from dataclasses import dataclass

import httpx

from driver_trace_service.config import Settings
from driver_trace_service.errors import StartupConfigError
from driver_trace_service.http.client import create_rest_client
from driver_trace_service.logging_config import setup_logging
from driver_trace_service.observability import init_telemetry, shutdown_telemetry
from driver_trace_service.tracing.interceptor import TracedClient, traced_client
from driver_trace_service.tracing.tracer import LogTracer

logger = logging.getLogger(__name__)

IDENTITY_ENV_VAR = "DRIVER_TRACE_APPLICATION_NAME"


@dataclass
class Application:
    """A started service: its settings, tracer and traced HTTP client."""

    settings: Settings
    tracer: LogTracer
    client: TracedClient

    def close(self) -> None:
        """Release the HTTP connection pool and flush telemetry."""
        self.client.close()
        shutdown_telemetry()
        logger.info(f"{self.settings.application_name} stopped")

    def __enter__(self) -> "Application":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def check_identity(settings: Settings) -> str:
    """
    Return the service identity, or fail if it is missing.

    Raises:
        StartupConfigError: If the application name is missing or blank.
    """
    name = settings.application_name.strip()
    if not name:
        raise StartupConfigError(
            f"Start application, must set environment variable: {IDENTITY_ENV_VAR}"
        )
    return name


def bootstrap(
    settings: Settings,
    transport: httpx.BaseTransport | None = None,
    configure_logging: bool = True,
) -> Application:
    """
    Start the service.

    The identity check runs before anything else is touched.

    Args:
        settings: Application settings.
        transport: Optional httpx transport for the shared client (used by tests).
        configure_logging: Install the logging handlers; tests turn this off.

    Returns:
        The wired Application

    Raises:
        StartupConfigError: If the application name is missing or blank.
    """
    name = check_identity(settings)

    if configure_logging:
        setup_logging(settings.log_level, settings.debug)

    init_telemetry(settings.otel)

    tracer = LogTracer(name)
    client = traced_client(create_rest_client(settings.http, transport=transport), tracer)

    logger.info(f"{name} started on {tracer.host_ip}")
    return Application(settings=settings, tracer=tracer, client=client)
