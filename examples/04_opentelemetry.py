"""
Distributed tracing with OpenTelemetry.

Requires: pip install http-middleware-core[otel]
"""

import asyncio

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor

from http_middleware import InMemorySwrCache, MiddlewareClient, SwrMiddleware
from http_middleware.contrib.opentelemetry import OpenTelemetryMiddleware


async def main():
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
    trace.set_tracer_provider(provider)

    async with MiddlewareClient(
        [OpenTelemetryMiddleware(excluded_urls=["/health"]), SwrMiddleware(cache=InMemorySwrCache())],
        base_url="https://jsonplaceholder.typicode.com",
    ) as client:
        await client.get("/posts/1")
        # Cache hit span plus a background revalidation span
        await client.get("/posts/1")
        await client.wait_for_background()


if __name__ == "__main__":
    asyncio.run(main())
