"""
Test doubles shared by unit and integration tests.
"""

import asyncio
from typing import Callable, List, Optional, Union

import httpx

from http_middleware.core.context import MiddlewareContext
from http_middleware.middlewares.base import HttpMiddleware

BASE_URL = "https://api.example.com"

Handler = Callable[[httpx.Request], Union[httpx.Response, Exception]]


class FakeTransport:
    """
    Terminal transport for MiddlewarePipeline tests.

    Records every request and answers with ``handler(request)``. If the
    handler returns an exception, it is raised.
    """

    def __init__(self, handler: Optional[Handler] = None, delay: float = 0.0):
        self.calls: List[httpx.Request] = []
        self.handler = handler or (lambda request: httpx.Response(200, content=b"ok"))
        self.delay = delay

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)

        result = self.handler(request)
        if isinstance(result, Exception):
            raise result

        result.request = request
        return result

    @property
    def call_count(self) -> int:
        return len(self.calls)


class CountingBodies:
    """Handler answering ``v1``, ``v2``, ... on consecutive calls."""

    def __init__(self, status_code: int = 200):
        self.status_code = status_code
        self.count = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.count += 1
        return httpx.Response(self.status_code, content=f"v{self.count}".encode())


class RecordingMiddleware(HttpMiddleware):
    """Appends ``<label>:before`` / ``<label>:after`` to a shared log."""

    def __init__(self, label: str, log: Optional[List[str]] = None):
        self.label = label
        self.log = log if log is not None else []
        self.contexts: List[MiddlewareContext] = []
        self.errors: List[Exception] = []

    @property
    def name(self) -> str:
        return self.label

    async def process(self, context, next):
        self.contexts.append(context)
        self.log.append(f"{self.label}:before")
        result = await next(context)
        self.log.append(f"{self.label}:after")
        return result

    def on_background_error(self, error: Exception) -> None:
        self.errors.append(error)


def make_request(method: str = "GET", path: str = "/data", **kwargs) -> httpx.Request:
    return httpx.Request(method, f"{BASE_URL}{path}", **kwargs)


def make_context(method: str = "GET", path: str = "/data", **kwargs) -> MiddlewareContext:
    return MiddlewareContext(make_request(method, path, **kwargs))
