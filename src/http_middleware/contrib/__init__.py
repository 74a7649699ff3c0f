"""
Optional integrations with third-party libraries.

Each contrib module needs its extra installed:
- opentelemetry: tracing middleware (``pip install http-middleware-core[otel]``)
"""
