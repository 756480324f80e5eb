"""
conftest.py

Shared pytest fixtures for driver_trace_service tests.
"""

import os
from typing import Any

import pytest

from driver_trace_service.tracing.context import TraceContext


class RecordingTracer:
    """Tracer double that records every event in order."""

    def __init__(self) -> None:
        self.events: list[tuple[Any, ...]] = []
        self.contexts: list[TraceContext] = []

    def trace_start(self, context: TraceContext) -> None:
        self.events.append(("start", context))
        self.contexts.append(context)

    def trace_error(self, error: BaseException, context: TraceContext) -> None:
        self.events.append(("error", error, context))

    def trace_end(self, context: TraceContext) -> None:
        # Snapshot what a real tracer would format at this point
        self.events.append(("end", context, context.detail_result))

    @property
    def kinds(self) -> list[str]:
        return [event[0] for event in self.events]


@pytest.fixture
def recording_tracer() -> RecordingTracer:
    """A tracer that records start/error/end events."""
    return RecordingTracer()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the host environment from leaking into settings."""
    for key in list(os.environ):
        if key.startswith("DRIVER_TRACE_"):
            monkeypatch.delenv(key)
    monkeypatch.delenv("APPLICATION_NAME", raising=False)


@pytest.fixture
def app_name(monkeypatch: pytest.MonkeyPatch) -> str:
    """Set the service identity in the environment."""
    monkeypatch.setenv("DRIVER_TRACE_APPLICATION_NAME", "driver-trace-service")
    return "driver-trace-service"
