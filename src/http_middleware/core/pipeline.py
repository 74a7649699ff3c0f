"""Middleware chain composition and execution."""

import logging
from typing import TYPE_CHECKING, Awaitable, Callable, Iterable, Tuple

import httpx

from .context import MiddlewareContext
from .exceptions import MiddlewareChainError
from .response import MiddlewareResult

if TYPE_CHECKING:
    from ..middlewares.base import HttpMiddleware, MiddlewareNext

logger = logging.getLogger(__name__)

# Terminal call: sends the request over the network
Transport = Callable[[httpx.Request], Awaitable[httpx.Response]]


class MiddlewarePipeline:
    """
    Composes middlewares around a terminal transport call.

    Middlewares run in the order given; the first one wraps all the others::

        Request:  caller -> M1 -> M2 -> M3 -> transport
        Response: caller <- M1 <- M2 <- M3 <- transport

    The chain is assembled on every :meth:`execute` call, so the pipeline can
    be re-entered with a fresh context (background continuations) without any
    per-call state leaking between runs.

    Example:
        >>> pipeline = MiddlewarePipeline([DedupMiddleware(), SwrMiddleware(cache)], transport)
        >>> result = await pipeline.execute(MiddlewareContext(request))
    """

    def __init__(self, middlewares: Iterable["HttpMiddleware"], transport: Transport):
        self._middlewares: Tuple["HttpMiddleware", ...] = tuple(middlewares)
        self._transport = transport

    @property
    def middlewares(self) -> Tuple["HttpMiddleware", ...]:
        """Middlewares in execution order."""
        return self._middlewares

    async def execute(self, context: MiddlewareContext) -> MiddlewareResult:
        """Run ``context`` through every middleware and the transport."""
        handler: "MiddlewareNext" = self._terminal

        # m1(m2(m3(terminal)))
        for middleware in reversed(self._middlewares):
            handler = self._wrap(middleware, handler)

        logger.debug(
            "Executing pipeline for %s %s (background=%s)",
            context.request.method,
            context.request.url,
            context.is_background,
        )
        return await handler(context)

    async def _terminal(self, context: MiddlewareContext) -> MiddlewareResult:
        response = await self._transport(context.request)
        return MiddlewareResult.immediate(response)

    @staticmethod
    def _wrap(middleware: "HttpMiddleware", next_handler: "MiddlewareNext") -> "MiddlewareNext":
        async def handler(context: MiddlewareContext) -> MiddlewareResult:
            called = False

            async def call_next(ctx: MiddlewareContext) -> MiddlewareResult:
                nonlocal called
                if called:
                    raise MiddlewareChainError("next() called more than once", middleware.name)
                called = True
                return await next_handler(ctx)

            return await middleware.process(context, call_next)

        return handler
