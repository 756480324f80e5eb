"""Shared outbound HTTP client."""

from driver_trace_service.http.client import (
    AsyncRestClient,
    ResponseEntity,
    RestClient,
    create_rest_client,
)

__all__ = [
    "AsyncRestClient",
    "ResponseEntity",
    "RestClient",
    "create_rest_client",
]
