"""
TEST DOC: Bootstrap

WHAT: Tests for the startup identity check and wiring
WHY: The service must not start without an identity
HOW: Call bootstrap() with explicit settings and a mocked transport

CASES:
- Missing identity aborts before wiring
- Successful wiring returns a traced client

EDGE CASES:
- Whitespace-only identity
- Identity is stripped
"""

import logging

import httpx
import pytest

from driver_trace_service import app as app_module
from driver_trace_service.app import Application, bootstrap, check_identity
from driver_trace_service.config import Settings
from driver_trace_service.errors import StartupConfigError
from driver_trace_service.logging_config import TRACE_LOGGER_NAME
from driver_trace_service.tracing.interceptor import TracedClient


def drivers_transport() -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"id": 7})

    return httpx.MockTransport(handler)


class TestCheckIdentity:
    """Tests for the fail-fast identity check."""

    def test_missing(self):
        with pytest.raises(StartupConfigError, match="DRIVER_TRACE_APPLICATION_NAME"):
            check_identity(Settings())

    def test_blank(self):
        with pytest.raises(StartupConfigError):
            check_identity(Settings(application_name="   "))

    def test_present(self):
        assert check_identity(Settings(application_name=" drivers ")) == "drivers"


class TestBootstrap:
    """Tests for bootstrap()."""

    def test_aborts_before_wiring(self, monkeypatch):
        """Nothing is initialized when the identity is missing."""
        calls = []
        monkeypatch.setattr(app_module, "init_telemetry", lambda settings: calls.append("telemetry"))
        monkeypatch.setattr(app_module, "setup_logging", lambda *args: calls.append("logging"))
        monkeypatch.setattr(app_module, "create_rest_client", lambda *a, **kw: calls.append("client"))

        with pytest.raises(StartupConfigError):
            bootstrap(Settings())

        assert calls == []

    def test_wires_traced_client(self):
        settings = Settings(application_name="driver-trace-service")

        with bootstrap(settings, transport=drivers_transport(), configure_logging=False) as application:
            assert isinstance(application, Application)
            assert isinstance(application.client, TracedClient)
            assert application.tracer.application_name == "driver-trace-service"

    def test_calls_are_traced(self, caplog):
        """A call through the wired client produces one trace line."""
        caplog.set_level(logging.INFO, logger=TRACE_LOGGER_NAME)
        settings = Settings(application_name="driver-trace-service")

        with bootstrap(settings, transport=drivers_transport(), configure_logging=False) as application:
            body = application.client.get_for_object("https://api.example.com/drivers/{id}", None, {"id": 7})
            host_ip = application.tracer.host_ip

        assert body == {"id": 7}
        lines = [r.getMessage() for r in caplog.records if r.name == TRACE_LOGGER_NAME]
        assert len(lines) == 1
        prefix, _elapsed = lines[0].rsplit("|", 1)
        assert prefix == (
            f"driver-trace-service|{host_ip}|httpCall|https://api.example.com/drivers/{{id}}|id=7|{{'id': 7}}"
        )
