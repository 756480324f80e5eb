"""
errors.py

PURPOSE: Exception types shared across the service.
DEPENDENCIES: None

ARCHITECTURE NOTES:
Three failure kinds matter to callers:
- StartupConfigError: fatal, the process must not start
- CallerArgumentError: malformed input, raised before any network I/O
- HttpCallError: anything else that went wrong contacting a remote service
"""


class StartupConfigError(Exception):
    """Required configuration is missing at boot."""

    pass


class CallerArgumentError(ValueError):
    """
    The HTTP client rejected a caller-supplied argument.

    Raised before any request is sent, e.g. for a relative URL with no
    base URL, an unsupported scheme, or a URI template variable that was
    not provided.
    """

    pass


class HttpCallError(Exception):
    """
    An outbound HTTP call failed.

    Wraps network errors, timeouts, non-2xx responses and response decoding
    failures. The original exception is always available as ``__cause__``.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
