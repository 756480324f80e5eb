"""
config.py

PURPOSE: Configuration loading and settings management.
DEPENDENCIES: pydantic, pydantic-settings

ARCHITECTURE NOTES:
Configuration comes from (in priority order):
1. CLI flags (highest priority)
2. Environment variables
3. Defaults (lowest priority)

The application name is the service identity. It is required at startup
(see app.bootstrap) and is written into every trace line.
"""

import os

from pydantic import Field
from pydantic_settings import BaseSettings


class HttpClientSettings(BaseSettings):
    """Settings for the shared outbound HTTP client."""

    base_url: str = Field(
        default="",
        description="Base URL prepended to relative request URLs",
    )
    timeout: float = Field(
        default=10.0,
        gt=0.0,
        description="Request timeout in seconds",
    )
    user_agent: str = Field(
        default="driver-trace-service",
        description="User-Agent header sent with every request",
    )

    model_config = {"env_prefix": "DRIVER_TRACE_HTTP_"}


class OpenTelemetrySettings(BaseSettings):
    """Settings for OpenTelemetry span export."""

    enabled: bool = Field(
        default=False,
        description="Record a local span for every traced call",
    )
    service_name: str = Field(
        default="driver-trace-service",
        description="service.name resource attribute",
    )
    endpoint: str = Field(
        default="",
        description="OTLP gRPC endpoint (console only when empty)",
    )

    model_config = {"env_prefix": "DRIVER_TRACE_OTEL_"}


class Settings(BaseSettings):
    """Main application settings."""

    application_name: str = Field(
        default="",
        description="Service identity, required at startup",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug output",
    )
    http: HttpClientSettings = Field(
        default_factory=HttpClientSettings,
        description="Outbound HTTP client settings",
    )
    otel: OpenTelemetrySettings = Field(
        default_factory=OpenTelemetrySettings,
        description="OpenTelemetry settings",
    )

    model_config = {"env_prefix": "DRIVER_TRACE_"}


def get_settings() -> Settings:
    """Get application settings, loading from environment."""
    settings = Settings()

    # Fall back to the unprefixed variable most deployments already set
    if not settings.application_name:
        settings.application_name = os.environ.get("APPLICATION_NAME", "")

    return settings
