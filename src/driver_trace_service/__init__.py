"""
Driver Trace Service - microservice bootstrap with outbound HTTP call tracing.

This package provides:
- A fail-fast bootstrap that checks the service identity before wiring
- A RestTemplate-style HTTP client built on httpx
- A transparent interceptor that traces every call made through that client
"""

__version__ = "0.1.0"
