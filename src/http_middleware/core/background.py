"""Supervised execution of background continuations."""

import asyncio
import logging
from typing import Optional, Set

from .context import MiddlewareContext
from .pipeline import MiddlewarePipeline

logger = logging.getLogger(__name__)


class BackgroundRunner:
    """
    Runs background continuations as detached asyncio tasks.

    Each continuation re-runs the full pipeline with a background-flagged
    context. The runner owns the failure path: an error raised anywhere in a
    background run is caught here once and delivered to
    ``on_background_error`` of every middleware in the pipeline.

    Guarantees:
        - ``schedule`` never blocks the caller
        - a background run finishes or fails exactly once (no retries,
          no timeout, no cancellation)
        - the response of a successful run is drained and closed
        - one failing error hook never prevents delivery to the others

    Example:
        >>> runner = BackgroundRunner(pipeline)
        >>> result = await pipeline.execute(context)
        >>> if result.has_background_continuation:
        ...     runner.schedule(result.background_context)
        >>> await runner.wait_idle()  # e.g. on shutdown
    """

    def __init__(self, pipeline: MiddlewarePipeline):
        self._pipeline = pipeline
        # Strong references: the event loop only keeps weak ones
        self._tasks: Set[asyncio.Task] = set()
        self._closed = False

    @property
    def pending(self) -> int:
        """Number of continuations still running."""
        return len(self._tasks)

    @property
    def closed(self) -> bool:
        return self._closed

    def schedule(self, context: MiddlewareContext) -> Optional[asyncio.Task]:
        """Start a continuation for ``context`` and return immediately.

        Must be called from a running event loop. Returns ``None`` (and drops
        the continuation) once the runner is closed.
        """
        if self._closed:
            logger.warning(
                "Background runner is closed, dropping continuation for %s %s",
                context.request.method,
                context.request.url,
            )
            return None

        context.mark_as_background()

        loop = asyncio.get_running_loop()
        task = loop.create_task(
            self._run(context),
            name=f"http-middleware-background-{context.request_id}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        logger.debug(
            "Scheduled background continuation for %s %s",
            context.request.method,
            context.request.url,
        )
        return task

    async def _run(self, context: MiddlewareContext) -> None:
        try:
            result = await self._pipeline.execute(context)

            if result.has_background_continuation:
                logger.debug("Ignoring nested continuation returned by a background run")

            # Nobody reads this body; drain it to release the connection
            response = result.response
            try:
                await response.aread()
            finally:
                await response.aclose()
        except Exception as error:
            logger.warning(
                "Background continuation failed for %s %s: %s",
                context.request.method,
                context.request.url,
                error,
            )
            self._notify(error)

    def _notify(self, error: Exception) -> None:
        """Deliver ``error`` to every middleware, guarding each hook."""
        for middleware in self._pipeline.middlewares:
            try:
                middleware.on_background_error(error)
            except Exception:
                logger.exception("on_background_error of %s raised", middleware.name)

    async def wait_idle(self) -> None:
        """Wait until all running continuations (and ones they start) finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        """Stop accepting continuations and wait for the running ones."""
        self._closed = True
        await self.wait_idle()
