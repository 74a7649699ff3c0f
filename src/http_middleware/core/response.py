"""Result envelope returned by every middleware."""

from typing import Optional

import httpx

from .context import MiddlewareContext


class MiddlewareResult:
    """
    Response wrapper that can carry a background continuation.

    The response is returned to the caller right away. If
    ``background_context`` is set, the client re-runs the whole middleware
    chain with that context after returning (the SWR mechanism).

    Example:
        >>> # pass-through middleware
        >>> result = await next(context)
        >>> return result
        >>>
        >>> # serve from cache and revalidate later
        >>> return MiddlewareResult.with_continuation(
        ...     cached.to_response(),
        ...     context.copy_for_background(),
        ... )
    """

    __slots__ = ("response", "background_context")

    def __init__(
        self,
        response: httpx.Response,
        background_context: Optional[MiddlewareContext] = None,
    ):
        self.response = response
        self.background_context = background_context

    @classmethod
    def immediate(cls, response: httpx.Response) -> "MiddlewareResult":
        """Result without background continuation."""
        return cls(response)

    @classmethod
    def with_continuation(
        cls,
        response: httpx.Response,
        background_context: MiddlewareContext,
    ) -> "MiddlewareResult":
        """Result whose ``background_context`` is re-run after returning ``response``."""
        return cls(response, background_context)

    @property
    def has_background_continuation(self) -> bool:
        return self.background_context is not None

    def __repr__(self) -> str:
        return (
            f"MiddlewareResult(status={self.response.status_code}, "
            f"has_background_continuation={self.has_background_continuation})"
        )
