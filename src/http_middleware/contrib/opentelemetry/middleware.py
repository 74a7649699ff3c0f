"""
OpenTelemetry middleware.

One CLIENT span per pipeline run, following the OpenTelemetry Semantic
Conventions for HTTP. Background runs get their own span, flagged with
``http_middleware.background``.
"""

import logging
from typing import Dict, List, Optional

import httpx
from opentelemetry import trace
from opentelemetry.semconv.trace import SpanAttributes
from opentelemetry.trace import SpanKind, Status, StatusCode
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from ...core.context import MiddlewareContext
from ...core.response import MiddlewareResult
from ...middlewares.base import HttpMiddleware, MiddlewareNext
from ...utils.sanitizer import is_sensitive_key

logger = logging.getLogger(__name__)

BACKGROUND_ATTRIBUTE = "http_middleware.background"
FROM_CACHE_ATTRIBUTE = "http_middleware.from_cache"


class OpenTelemetryMiddleware(HttpMiddleware):
    """
    Middleware for OpenTelemetry distributed tracing.

    Put it first in the chain so that the span covers every other middleware
    and the injected trace context reaches the network.

    Span attributes:
        - http.method, http.url, http.scheme, http.target, net.peer.name/port
        - http.status_code
        - http_middleware.background: run is a background continuation
        - http_middleware.from_cache: response was served from cache
        - http.request.header.* / http.response.header.* (sensitive headers skipped)

    Example:
        >>> client = MiddlewareClient([
        ...     OpenTelemetryMiddleware(excluded_urls=["/health"]),
        ...     SwrMiddleware(cache=cache),
        ... ])
    """

    def __init__(
        self,
        tracer_name: str = "http_middleware",
        tracer_provider: Optional[trace.TracerProvider] = None,
        excluded_urls: Optional[List[str]] = None,
        capture_headers: bool = False,
        max_header_length: int = 256,
    ):
        """
        Args:
            tracer_name: Name of the tracer
            tracer_provider: Provider to get the tracer from (global one by default)
            excluded_urls: URL substrings that are not traced
            capture_headers: Record request/response headers as attributes
            max_header_length: Maximum length of a header value in attributes
        """
        self.tracer = trace.get_tracer(tracer_name, tracer_provider=tracer_provider)
        self.propagator = TraceContextTextMapPropagator()
        self.excluded_urls = set(excluded_urls) if excluded_urls else set()
        self.capture_headers = capture_headers
        self.max_header_length = max_header_length

    def _should_trace(self, url: str) -> bool:
        return not any(excluded in url for excluded in self.excluded_urls)

    def _header_attributes(self, prefix: str, headers: httpx.Headers) -> Dict[str, str]:
        attributes = {}
        for key, value in headers.items():
            if is_sensitive_key(key):
                continue
            if len(value) > self.max_header_length:
                value = value[: self.max_header_length] + "..."
            attributes[f"{prefix}.{key.lower()}"] = value
        return attributes

    def _request_attributes(self, context: MiddlewareContext) -> Dict[str, object]:
        request = context.request
        url = request.url

        attributes: Dict[str, object] = {
            SpanAttributes.HTTP_METHOD: request.method,
            SpanAttributes.HTTP_URL: str(url),
            SpanAttributes.HTTP_TARGET: url.raw_path.decode("ascii", errors="replace") or "/",
            BACKGROUND_ATTRIBUTE: context.is_background,
        }
        if url.scheme:
            attributes[SpanAttributes.HTTP_SCHEME] = url.scheme
        if url.host:
            attributes[SpanAttributes.NET_PEER_NAME] = url.host
        if url.port:
            attributes[SpanAttributes.NET_PEER_PORT] = url.port

        if self.capture_headers:
            attributes.update(self._header_attributes("http.request.header", request.headers))

        return attributes

    async def process(
        self,
        context: MiddlewareContext,
        next: MiddlewareNext,
    ) -> MiddlewareResult:
        request = context.request

        if not self._should_trace(str(request.url)):
            return await next(context)

        with self.tracer.start_as_current_span(
            f"HTTP {request.method}",
            kind=SpanKind.CLIENT,
            attributes=self._request_attributes(context),
            record_exception=False,
            set_status_on_exception=False,
        ) as span:
            # W3C Trace Context
            self.propagator.inject(request.headers)

            try:
                result = await next(context)
            except Exception as error:
                span.record_exception(error)
                span.set_status(Status(StatusCode.ERROR, str(error)))
                span.set_attribute("error.type", type(error).__name__)
                raise

            response = result.response
            span.set_attribute(SpanAttributes.HTTP_STATUS_CODE, response.status_code)
            span.set_attribute(FROM_CACHE_ATTRIBUTE, context.is_from_cache)

            if self.capture_headers:
                span.set_attributes(self._header_attributes("http.response.header", response.headers))

            # 4xx is not a client span error
            if response.status_code >= 500:
                span.set_status(
                    Status(StatusCode.ERROR, f"HTTP {response.status_code}: {response.reason_phrase}")
                )
            else:
                span.set_status(Status(StatusCode.OK))

            return result

    def on_background_error(self, error: Exception) -> None:
        # The span of the failed run is already closed; record on a short one
        with self.tracer.start_as_current_span(
            "HTTP background error",
            kind=SpanKind.INTERNAL,
            attributes={BACKGROUND_ATTRIBUTE: True},
            record_exception=False,
            set_status_on_exception=False,
        ) as span:
            span.add_event(
                "background_error",
                {"error.type": type(error).__name__, "error.message": str(error)},
            )
            span.set_status(Status(StatusCode.ERROR, str(error)))

    def __repr__(self) -> str:
        return f"OpenTelemetryMiddleware(excluded_urls={sorted(self.excluded_urls)})"
