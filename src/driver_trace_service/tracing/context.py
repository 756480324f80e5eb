"""
context.py

PURPOSE: Per-call trace context consumed by the LogTracer.
DEPENDENCIES: None (pure Python)

ARCHITECTURE NOTES:
A TraceContext describes exactly one traced call. Subclasses supply the
rendered fields through the fetch_* hooks; the tracer reads them only when
it formats the final line. Timing and error state are written by the
tracer, never by the code that owns the call.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any


class TraceContext(ABC):
    """Base class for a single traced call."""

    def __init__(self) -> None:
        self.start_time: datetime | None = None
        self.elapsed_millis: int | None = None
        self.error: str | None = None
        # Monotonic clock reading, used only for the elapsed time
        self.started_at: float | None = None
        # Open OpenTelemetry span, if any
        self.span: Any = None

    @property
    def kind(self) -> str:
        return self.fetch_kind()

    @property
    def name(self) -> str:
        return self.fetch_name()

    @property
    def detail_param(self) -> str:
        return self.fetch_detail_param()

    @property
    def detail_result(self) -> str:
        return self.fetch_detail_result()

    @abstractmethod
    def fetch_kind(self) -> str:
        """Return the fixed call category, e.g. "httpCall"."""
        ...

    @abstractmethod
    def fetch_name(self) -> str:
        """Return the call target."""
        ...

    def fetch_detail_param(self) -> str:
        return ""

    def fetch_detail_result(self) -> str:
        return ""
