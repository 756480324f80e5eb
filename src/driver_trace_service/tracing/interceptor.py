"""
interceptor.py

PURPOSE: Trace every public call made through the shared HTTP client.
DEPENDENCIES: None (pure Python; uses the errors and tracing.context modules)

ARCHITECTURE NOTES:
TracedClient wraps a client and exposes the same methods. Each public call
goes through HttpCallInterceptor, which:
1. builds an HttpCallTraceContext and calls tracer.trace_start()
2. invokes the real method (a call that does not match the method
   signature is rejected as CallerArgumentError without invoking it)
3. on CallerArgumentError: trace_error() and re-raise unchanged
   on any other Exception: trace_error() and raise HttpCallError from it
4. always: set the result and call tracer.trace_end()

Trace lines look like:
    appName|10.0.0.5|httpCall|http://host/path|a=1,b=2|{'ok': True}|12
"""

import functools
import inspect
import logging
from collections.abc import Callable, Mapping
from typing import Any, Protocol

from driver_trace_service.errors import CallerArgumentError, HttpCallError
from driver_trace_service.tracing.context import TraceContext

logger = logging.getLogger(__name__)

HTTP_CALL_KIND = "httpCall"

# Client methods whose last argument holds the loggable parameters
LOG_METHODS = frozenset({"get_for_object", "post_for_object", "put", "delete"})


class Tracer(Protocol):
    """The tracer operations the interceptor relies on."""

    def trace_start(self, context: TraceContext) -> None: ...
    def trace_error(self, error: BaseException, context: TraceContext) -> None: ...
    def trace_end(self, context: TraceContext) -> None: ...


def derive_name(url: object) -> str:
    """
    Return the trace name for a request URL.

    The query string is cut one character before the "?", so
    "http://x/y?a=1" becomes "http://x/". Existing log consumers depend on
    this exact output.
    """
    name = str(url)
    n = name.find("?")
    if n != -1:
        name = name[: max(n - 1, 0)]
    return name


def render_params(method_name: str, args: list[Any]) -> str:
    """Render the last argument of an allow-listed method."""
    if method_name not in LOG_METHODS or not args:
        return ""

    param = args[-1]
    if isinstance(param, Mapping):
        return ",".join(f"{key}={value}" for key, value in param.items())
    if isinstance(param, (list, tuple)):
        return ",".join(str(value) for value in param)
    return ""


def bind_arguments(
    func: Callable[..., Any], args: tuple[Any, ...], kwargs: dict[str, Any]
) -> tuple[list[Any], TypeError | None]:
    """
    Return the call's arguments in declared parameter order, defaults included.

    The second item is the TypeError raised when the call does not match the
    signature; the arguments are then positional values followed by keyword
    values. Callables without an inspectable signature are never rejected.
    """
    raw = [*args, *kwargs.values()]
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return raw, None
    try:
        bound = signature.bind(*args, **kwargs)
    except TypeError as e:
        return raw, e
    bound.apply_defaults()
    return list(bound.arguments.values()), None


class HttpCallTraceContext(TraceContext):
    """Trace context for one call on the HTTP client."""

    def __init__(self, method_name: str, args: list[Any], binding_error: TypeError | None = None):
        super().__init__()
        self.method_name = method_name
        self.args = args
        self.binding_error = binding_error
        self.result: Any = None

    def set_result(self, result: Any) -> None:
        self.result = result

    def fetch_kind(self) -> str:
        return HTTP_CALL_KIND

    def fetch_name(self) -> str:
        if not self.args:
            return ""
        return derive_name(self.args[0])

    def fetch_detail_param(self) -> str:
        return render_params(self.method_name, self.args)

    def fetch_detail_result(self) -> str:
        if self.result is None:
            return ""
        return str(self.result)


class HttpCallInterceptor:
    """
    Wraps single client calls with tracing and error normalization.

    Holds no per-call state, so one interceptor can serve concurrent callers.
    """

    def __init__(self, tracer: Tracer):
        """
        Initialize the interceptor.

        Args:
            tracer: Receives start, error and end events for each call.
        """
        self._tracer = tracer

    def new_context(
        self, method_name: str, func: Callable[..., Any], args: tuple[Any, ...], kwargs: dict[str, Any]
    ) -> HttpCallTraceContext:
        bound, binding_error = bind_arguments(func, args, kwargs)
        return HttpCallTraceContext(method_name, bound, binding_error)

    def around(self, method_name: str, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Invoke a synchronous client method with tracing."""
        context = self.new_context(method_name, func, args, kwargs)
        self._tracer.trace_start(context)

        result = None
        try:
            if context.binding_error is not None:
                raise CallerArgumentError(str(context.binding_error)) from context.binding_error
            result = func(*args, **kwargs)
        except CallerArgumentError as ex:
            self._tracer.trace_error(ex, context)
            raise
        except Exception as ex:
            self._tracer.trace_error(ex, context)
            raise HttpCallError(str(ex)) from ex
        finally:
            context.set_result(result)
            self._tracer.trace_end(context)
        return result

    async def around_async(
        self, method_name: str, func: Callable[..., Any], *args: Any, **kwargs: Any
    ) -> Any:
        """Await an asynchronous client method with tracing."""
        context = self.new_context(method_name, func, args, kwargs)
        self._tracer.trace_start(context)

        result = None
        try:
            if context.binding_error is not None:
                raise CallerArgumentError(str(context.binding_error)) from context.binding_error
            result = await func(*args, **kwargs)
        except CallerArgumentError as ex:
            self._tracer.trace_error(ex, context)
            raise
        except Exception as ex:
            self._tracer.trace_error(ex, context)
            raise HttpCallError(str(ex)) from ex
        finally:
            context.set_result(result)
            self._tracer.trace_end(context)
        return result

    def wrap(self, method_name: str, func: Callable[..., Any]) -> Callable[..., Any]:
        """Return func wrapped so every invocation is traced."""
        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                return await self.around_async(method_name, func, *args, **kwargs)

            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            return self.around(method_name, func, *args, **kwargs)

        return wrapper


class TracedClient:
    """
    Drop-in wrapper that traces every public method of a client.

    Callers keep using the same method names and arguments; only the
    failure type of non-argument errors changes to HttpCallError.
    """

    def __init__(self, inner: Any, interceptor: HttpCallInterceptor):
        self._inner = inner
        self._interceptor = interceptor

    @property
    def inner(self) -> Any:
        """The wrapped client."""
        return self._inner

    def __getattr__(self, name: str) -> Any:
        attr = getattr(self._inner, name)
        if name.startswith("_") or not callable(attr):
            return attr
        # Lifecycle methods are not remote calls
        if name in ("close", "aclose"):
            return attr
        return self._interceptor.wrap(name, attr)

    def __enter__(self) -> "TracedClient":
        self._inner.__enter__()
        return self

    def __exit__(self, *args: object) -> None:
        self._inner.__exit__(*args)

    async def __aenter__(self) -> "TracedClient":
        await self._inner.__aenter__()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self._inner.__aexit__(*args)

    def __repr__(self) -> str:
        return f"TracedClient({self._inner!r})"


def traced_client(inner: Any, tracer: Tracer) -> TracedClient:
    """
    Factory function to wrap a client with call tracing.

    Args:
        inner: The client to wrap (RestClient, AsyncRestClient, ...).
        tracer: The tracer that receives call events.

    Returns:
        TracedClient around inner
    """
    return TracedClient(inner, HttpCallInterceptor(tracer))
