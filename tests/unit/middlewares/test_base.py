"""
Tests for HttpMiddleware, FunctionMiddleware and the @middleware decorator.
"""

import pytest

from http_middleware.core.pipeline import MiddlewarePipeline
from http_middleware.middlewares.base import FunctionMiddleware, HttpMiddleware, middleware

from helpers import make_context


class PassThrough(HttpMiddleware):
    async def process(self, context, next):
        return await next(context)


class TestHttpMiddleware:

    def test_is_abstract(self):
        with pytest.raises(TypeError):
            HttpMiddleware()

    def test_name_and_repr(self):
        assert PassThrough().name == "PassThrough"
        assert repr(PassThrough()) == "PassThrough()"

    def test_default_background_hook_is_noop(self):
        assert PassThrough().on_background_error(RuntimeError("x")) is None


class TestFunctionMiddleware:

    @pytest.mark.asyncio
    async def test_decorator(self, transport):
        @middleware
        async def add_header(context, next):
            context.request.headers["X-Client"] = "tests"
            return await next(context)

        assert isinstance(add_header, FunctionMiddleware)
        assert add_header.name == "add_header"
        assert repr(add_header) == "FunctionMiddleware(add_header)"

        await MiddlewarePipeline([add_header], transport).execute(make_context())
        assert transport.calls[0].headers["X-Client"] == "tests"

    def test_background_hook_callback(self):
        errors = []

        async def noop(context, next):
            return await next(context)

        mw = FunctionMiddleware(noop, on_background_error=errors.append)
        error = RuntimeError("x")
        mw.on_background_error(error)

        assert errors == [error]
