from functools import wraps
from typing import Any, Callable, Optional

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

_tracer_instance: Optional[trace.Tracer] = None

SpanAttributes = Callable[..., dict[str, Any]]


def get_tracer() -> trace.Tracer:
    """Lazily initializes and returns the tracer instance."""
    global _tracer_instance
    if _tracer_instance is None:
        _tracer_instance = trace.get_tracer("xconnect")
    return _tracer_instance


def traced(
    name: Optional[str] = None,
    run_type: Optional[str] = None,
    attributes: Optional[SpanAttributes] = None,
):
    """Wrap a coroutine function in an OpenTelemetry span.

    Args:
        name: Span name, defaults to the function name.
        run_type: Recorded as the ``run_type`` span attribute.
        attributes: Called with the function's arguments; the returned
            mapping is recorded on the span. Request bodies never are.
    """

    def decorator(func):
        trace_name = name if name is not None else func.__name__

        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            with get_tracer().start_as_current_span(trace_name) as span:
                span.set_attribute("span_type", "function_call_async")
                if run_type is not None:
                    span.set_attribute("run_type", run_type)
                if attributes is not None:
                    for key, value in attributes(*args, **kwargs).items():
                        if value is not None:
                            span.set_attribute(key, value)
                try:
                    result = await func(*args, **kwargs)
                    status_code = getattr(result, "status_code", None)
                    if status_code is not None:
                        span.set_attribute("http.response.status_code", status_code)
                    return result
                except Exception as e:
                    span.record_exception(e)
                    span.set_status(Status(StatusCode.ERROR, str(e)))
                    raise

        return async_wrapper

    return decorator
