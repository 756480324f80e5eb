"""
client.py

PURPOSE: Shared outbound HTTP client used by the service.
DEPENDENCIES: httpx, pydantic

ARCHITECTURE NOTES:
A RestTemplate-style facade over httpx. Every operation takes the target URL
first and the URI template variables last, so the tracing interceptor can
find both without knowing each signature.

Caller mistakes (bad URL, missing template variable, unknown method, a
response_type pydantic cannot build a validator for) are
raised as CallerArgumentError before any I/O. Everything else comes from
httpx or pydantic unchanged: transport errors, HTTPStatusError for non-2xx
responses, ValidationError for bodies that do not match response_type.
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import PydanticUserError, TypeAdapter

from driver_trace_service.config import HttpClientSettings
from driver_trace_service.errors import CallerArgumentError

logger = logging.getLogger(__name__)

HTTP_METHODS = frozenset({"GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"})

_TEMPLATE_VAR = re.compile(r"\{([^{}]*)\}")
_ANY_ADAPTER: TypeAdapter[Any] = TypeAdapter(Any)


@dataclass
class ResponseEntity:
    """Status, headers and decoded body of a response."""

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None


def expand_uri_template(url: str, uri_variables: Any = None) -> str:
    """
    Fill ``{name}`` placeholders in a URL.

    A mapping fills placeholders by name. A list or tuple fills them in order
    of appearance. Values are percent-encoded.

    Raises:
        CallerArgumentError: If a placeholder has no value.
    """
    if "{" not in url:
        return url

    if isinstance(uri_variables, Mapping):

        def lookup(match: re.Match[str]) -> str:
            name = match.group(1)
            if name not in uri_variables:
                raise CallerArgumentError(f"Map has no value for '{name}'")
            return quote(str(uri_variables[name]), safe="")

        return _TEMPLATE_VAR.sub(lookup, url)

    values = list(uri_variables) if isinstance(uri_variables, (list, tuple)) else []
    remaining = iter(values)

    def next_value(match: re.Match[str]) -> str:
        try:
            return quote(str(next(remaining)), safe="")
        except StopIteration:
            raise CallerArgumentError(
                f"Not enough variable values available to expand '{match.group(1)}'"
            ) from None

    return _TEMPLATE_VAR.sub(next_value, url)


@lru_cache(maxsize=128)
def _adapter_for(response_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(response_type)


def encode_body(request: Any) -> dict[str, Any]:
    """Build httpx request keyword arguments for a request body."""
    if request is None:
        return {}
    if isinstance(request, (str, bytes)):
        return {"content": request}
    return {"json": _ANY_ADAPTER.dump_python(request, mode="json")}


def decode_body(response: httpx.Response, response_type: Any = None) -> Any:
    """
    Decode a response body.

    An empty body decodes to None. With a response_type the JSON body is
    validated against it; without one, JSON content types are parsed and
    anything else is returned as text.
    """
    if not response.content:
        return None
    if response_type is str:
        return response.text
    if response_type is bytes:
        return response.content
    if response_type is not None:
        return _adapter_for(response_type).validate_json(response.content)
    if "json" in response.headers.get("content-type", ""):
        return response.json()
    return response.text


def parse_allow(response: httpx.Response) -> set[str]:
    """Return the methods listed in an Allow header."""
    allow = response.headers.get("allow", "")
    return {method.strip().upper() for method in allow.split(",") if method.strip()}


class _RestOperations:
    """Request preparation shared by the sync and async clients."""

    def __init__(self, base_url: str = ""):
        self._base_url = base_url

    def _prepare(
        self, method: str, url: str, uri_variables: Any, response_type: Any = None
    ) -> tuple[str, str]:
        """Validate the method, URL and response type, returning (METHOD, expanded_url)."""
        if not isinstance(method, str) or method.upper() not in HTTP_METHODS:
            raise CallerArgumentError(f"Unsupported HTTP method: {method!r}")
        if not isinstance(url, str) or not url:
            raise CallerArgumentError("URL must be a non-empty string")

        expanded = expand_uri_template(url, uri_variables)

        try:
            parsed = httpx.URL(expanded)
        except httpx.InvalidURL as e:
            raise CallerArgumentError(f"Invalid URL {expanded!r}: {e}") from e

        if parsed.is_relative_url:
            if not self._base_url:
                raise CallerArgumentError(f"URI is not absolute: {expanded}")
        elif parsed.scheme not in ("http", "https") or not parsed.host:
            raise CallerArgumentError(f"Unsupported URL: {expanded}")

        if response_type not in (None, str, bytes):
            try:
                _adapter_for(response_type)
            except (TypeError, PydanticUserError) as e:
                raise CallerArgumentError(f"Unsupported response type {response_type!r}: {e}") from e

        return method.upper(), expanded


class RestClient(_RestOperations):
    """
    Synchronous HTTP client with RestTemplate-style operations.

    Safe to share between threads; httpx.Client pools connections.
    """

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 10.0,
        headers: Mapping[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Prefix for relative URLs. Relative URLs are rejected when empty.
            timeout: Timeout in seconds applied to every request.
            headers: Default headers sent with every request.
            transport: Optional httpx transport (used by tests).
        """
        super().__init__(base_url)
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            headers=dict(headers or {}),
            transport=transport,
        )

    def _send(
        self,
        method: str,
        url: str,
        request: Any = None,
        uri_variables: Any = None,
        response_type: Any = None,
    ) -> httpx.Response:
        verb, target = self._prepare(method, url, uri_variables, response_type)
        logger.debug(f"{verb} {target}")
        response = self._client.request(verb, target, **encode_body(request))
        response.raise_for_status()
        return response

    def get_for_object(self, url: str, response_type: Any = None, uri_variables: Any = None) -> Any:
        """GET a resource and return the decoded body."""
        response = self._send("GET", url, uri_variables=uri_variables, response_type=response_type)
        return decode_body(response, response_type)

    def get_for_entity(
        self, url: str, response_type: Any = None, uri_variables: Any = None
    ) -> ResponseEntity:
        """GET a resource and return status, headers and body."""
        return self.exchange(url, "GET", response_type=response_type, uri_variables=uri_variables)

    def head_for_headers(self, url: str, uri_variables: Any = None) -> dict[str, str]:
        """HEAD a resource and return its headers."""
        return dict(self._send("HEAD", url, uri_variables=uri_variables).headers)

    def post_for_object(
        self,
        url: str,
        request: Any = None,
        response_type: Any = None,
        uri_variables: Any = None,
    ) -> Any:
        """POST a body and return the decoded response body."""
        response = self._send("POST", url, request, uri_variables, response_type)
        return decode_body(response, response_type)

    def post_for_entity(
        self,
        url: str,
        request: Any = None,
        response_type: Any = None,
        uri_variables: Any = None,
    ) -> ResponseEntity:
        """POST a body and return status, headers and body."""
        return self.exchange(url, "POST", request, response_type, uri_variables)

    def post_for_location(self, url: str, request: Any = None, uri_variables: Any = None) -> str | None:
        """POST a body and return the Location header of the new resource."""
        return self._send("POST", url, request, uri_variables).headers.get("location")

    def put(self, url: str, request: Any = None, uri_variables: Any = None) -> None:
        """PUT a body."""
        self._send("PUT", url, request, uri_variables)

    def patch_for_object(
        self,
        url: str,
        request: Any = None,
        response_type: Any = None,
        uri_variables: Any = None,
    ) -> Any:
        """PATCH a resource and return the decoded response body."""
        response = self._send("PATCH", url, request, uri_variables, response_type)
        return decode_body(response, response_type)

    def delete(self, url: str, uri_variables: Any = None) -> None:
        """DELETE a resource."""
        self._send("DELETE", url, uri_variables=uri_variables)

    def options_for_allow(self, url: str, uri_variables: Any = None) -> set[str]:
        """Return the methods a resource allows."""
        return parse_allow(self._send("OPTIONS", url, uri_variables=uri_variables))

    def exchange(
        self,
        url: str,
        method: str,
        request: Any = None,
        response_type: Any = None,
        uri_variables: Any = None,
    ) -> ResponseEntity:
        """Send any request and return status, headers and body."""
        response = self._send(method, url, request, uri_variables, response_type)
        return ResponseEntity(
            status_code=response.status_code,
            headers=dict(response.headers),
            body=decode_body(response, response_type),
        )

    def close(self) -> None:
        """Close the underlying connection pool."""
        self._client.close()

    def __enter__(self) -> "RestClient":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class AsyncRestClient(_RestOperations):
    """Asynchronous counterpart of RestClient with the same operations."""

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 10.0,
        headers: Mapping[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(base_url)
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers=dict(headers or {}),
            transport=transport,
        )

    async def _send(
        self,
        method: str,
        url: str,
        request: Any = None,
        uri_variables: Any = None,
        response_type: Any = None,
    ) -> httpx.Response:
        verb, target = self._prepare(method, url, uri_variables, response_type)
        logger.debug(f"{verb} {target}")
        response = await self._client.request(verb, target, **encode_body(request))
        response.raise_for_status()
        return response

    async def get_for_object(
        self, url: str, response_type: Any = None, uri_variables: Any = None
    ) -> Any:
        response = await self._send("GET", url, uri_variables=uri_variables, response_type=response_type)
        return decode_body(response, response_type)

    async def get_for_entity(
        self, url: str, response_type: Any = None, uri_variables: Any = None
    ) -> ResponseEntity:
        return await self.exchange(
            url, "GET", response_type=response_type, uri_variables=uri_variables
        )

    async def head_for_headers(self, url: str, uri_variables: Any = None) -> dict[str, str]:
        response = await self._send("HEAD", url, uri_variables=uri_variables)
        return dict(response.headers)

    async def post_for_object(
        self,
        url: str,
        request: Any = None,
        response_type: Any = None,
        uri_variables: Any = None,
    ) -> Any:
        response = await self._send("POST", url, request, uri_variables, response_type)
        return decode_body(response, response_type)

    async def post_for_entity(
        self,
        url: str,
        request: Any = None,
        response_type: Any = None,
        uri_variables: Any = None,
    ) -> ResponseEntity:
        return await self.exchange(url, "POST", request, response_type, uri_variables)

    async def post_for_location(
        self, url: str, request: Any = None, uri_variables: Any = None
    ) -> str | None:
        response = await self._send("POST", url, request, uri_variables)
        return response.headers.get("location")

    async def put(self, url: str, request: Any = None, uri_variables: Any = None) -> None:
        await self._send("PUT", url, request, uri_variables)

    async def patch_for_object(
        self,
        url: str,
        request: Any = None,
        response_type: Any = None,
        uri_variables: Any = None,
    ) -> Any:
        response = await self._send("PATCH", url, request, uri_variables, response_type)
        return decode_body(response, response_type)

    async def delete(self, url: str, uri_variables: Any = None) -> None:
        await self._send("DELETE", url, uri_variables=uri_variables)

    async def options_for_allow(self, url: str, uri_variables: Any = None) -> set[str]:
        return parse_allow(await self._send("OPTIONS", url, uri_variables=uri_variables))

    async def exchange(
        self,
        url: str,
        method: str,
        request: Any = None,
        response_type: Any = None,
        uri_variables: Any = None,
    ) -> ResponseEntity:
        response = await self._send(method, url, request, uri_variables, response_type)
        return ResponseEntity(
            status_code=response.status_code,
            headers=dict(response.headers),
            body=decode_body(response, response_type),
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncRestClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()


def create_rest_client(
    settings: HttpClientSettings,
    transport: httpx.BaseTransport | None = None,
) -> RestClient:
    """
    Factory function to create the shared client from settings.

    Args:
        settings: HTTP client settings.
        transport: Optional httpx transport (used by tests).

    Returns:
        Configured RestClient
    """
    return RestClient(
        base_url=settings.base_url,
        timeout=settings.timeout,
        headers={"User-Agent": settings.user_agent},
        transport=transport,
    )
