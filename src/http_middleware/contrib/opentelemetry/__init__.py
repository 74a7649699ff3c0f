"""
OpenTelemetry tracing for http-middleware.

Installation:
    pip install http-middleware-core[otel]

Example:
    >>> from opentelemetry import trace
    >>> from opentelemetry.sdk.trace import TracerProvider
    >>> from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor
    >>>
    >>> provider = TracerProvider()
    >>> provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
    >>> trace.set_tracer_provider(provider)
    >>>
    >>> client = MiddlewareClient([OpenTelemetryMiddleware(), SwrMiddleware(cache)])
    >>> response = await client.get("https://api.example.com/users")  # traced
"""

try:
    import opentelemetry  # noqa: F401
except ImportError as e:
    raise ImportError(
        "OpenTelemetryMiddleware needs the opentelemetry-api, -sdk and -semantic-conventions packages. "
        "Install with: pip install http-middleware-core[otel]"
    ) from e

from .middleware import BACKGROUND_ATTRIBUTE, FROM_CACHE_ATTRIBUTE, OpenTelemetryMiddleware

__all__ = [
    "OpenTelemetryMiddleware",
    "BACKGROUND_ATTRIBUTE",
    "FROM_CACHE_ATTRIBUTE",
]
